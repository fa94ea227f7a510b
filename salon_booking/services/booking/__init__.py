"""Draft lifecycle and reservation."""

from .drafts import Draft, DraftRegistry
from .flow import BookingFlowService, IssuedCode
from .reservation import PromotionResult, ReservationTransactor

__all__ = [
    "BookingFlowService",
    "Draft",
    "DraftRegistry",
    "IssuedCode",
    "PromotionResult",
    "ReservationTransactor",
]
