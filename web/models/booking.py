"""Booking flow models for the booking web API."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from salon_booking.core.enums import (
    ConfirmationStatus,
    DraftSource,
    DraftState,
    VerificationMethod,
)


class DraftCreateRequest(BaseModel):
    """Draft creation request. Instants must carry a UTC offset."""

    service_id: str = Field(..., min_length=1)
    master_id: str = Field(..., min_length=1)
    start_at: datetime
    end_at: datetime
    source: DraftSource = DraftSource.DIRECT
    customer_name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=254)
    notes: Optional[str] = Field(default=None, max_length=2000)
    channel_meta: Dict[str, Any] = Field(default_factory=dict)


class ContactUpdateRequest(BaseModel):
    """Partial contact update; omitted fields stay unchanged."""

    customer_name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=254)
    notes: Optional[str] = Field(default=None, max_length=2000)
    channel_meta: Optional[Dict[str, Any]] = None


class DraftResponse(BaseModel):
    """Draft as seen by the client."""

    id: str
    source: DraftSource
    state: DraftState
    service_id: str
    master_id: str
    start_at: datetime
    end_at: datetime
    expires_at: datetime
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    verified: bool
    appointment_id: Optional[str] = None


class CodeIssueRequest(BaseModel):
    """Issue a one-time code. ``contact`` defaults to the draft's own contact for the method."""

    method: VerificationMethod
    contact: Optional[str] = None


class CodeIssuedResponse(BaseModel):
    draft_id: str
    method: VerificationMethod
    expires_at: datetime


class CodeVerifyRequest(BaseModel):
    method: VerificationMethod
    code: str = Field(..., min_length=1, max_length=16)
    contact: Optional[str] = None


class CodeConfirmRequest(BaseModel):
    """Out-of-band confirmation, e.g. forwarded from a messenger bot callback."""

    method: VerificationMethod
    actor: str = Field(..., min_length=1)
    contact: Optional[str] = None


class CodeStatusResponse(BaseModel):
    draft_id: str
    status: ConfirmationStatus


class PromotionResponse(BaseModel):
    draft_id: str
    appointment_id: str
    already_promoted: bool
