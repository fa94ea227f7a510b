"""Availability models for the booking web API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class SlotResponse(BaseModel):
    """One free slot, UTC instants."""

    start: datetime
    end: datetime


class AvailabilityResponse(BaseModel):
    """Free slots for one local day."""

    date: str
    timezone: str
    master_id: Optional[str] = None
    slots: List[SlotResponse]


class MonthAvailabilityResponse(BaseModel):
    """Free slot count per local day of a month."""

    month: str
    timezone: str
    master_id: Optional[str] = None
    days: Dict[str, int]
