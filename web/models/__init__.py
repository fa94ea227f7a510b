"""Request and response models for the booking web API."""

from .availability import AvailabilityResponse, MonthAvailabilityResponse, SlotResponse
from .booking import (
    CodeConfirmRequest,
    CodeIssuedResponse,
    CodeIssueRequest,
    CodeStatusResponse,
    CodeVerifyRequest,
    ContactUpdateRequest,
    DraftCreateRequest,
    DraftResponse,
    PromotionResponse,
)

__all__ = [
    "AvailabilityResponse",
    "CodeConfirmRequest",
    "CodeIssueRequest",
    "CodeIssuedResponse",
    "CodeStatusResponse",
    "CodeVerifyRequest",
    "ContactUpdateRequest",
    "DraftCreateRequest",
    "DraftResponse",
    "MonthAvailabilityResponse",
    "PromotionResponse",
    "SlotResponse",
]
