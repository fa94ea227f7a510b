"""Availability routes for the booking web API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from salon_booking.services.scheduling.availability import AvailabilityService
from web.dependencies import get_availability_service
from web.models.availability import AvailabilityResponse, MonthAvailabilityResponse, SlotResponse

router = APIRouter(prefix="/availability", tags=["availability"])


def parse_duration(raw: Optional[str]) -> Optional[int]:
    """Minutes from ``durationMin``; unparsable values count as absent."""
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


@router.get("", response_model=AvailabilityResponse)
async def get_free_slots(
    date: str = Query(..., description="Local date, YYYY-MM-DD"),
    service_ids: Optional[List[str]] = Query(default=None, alias="serviceId"),
    duration_min: Optional[str] = Query(default=None, alias="durationMin"),
    master_id: Optional[str] = Query(default=None, alias="masterId"),
    tz: Optional[str] = Query(default=None, description="IANA timezone"),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """
    Free slots for one day.

    Malformed dates or durations, unknown timezones, inactive services and
    closed days all produce an empty list rather than an error.
    """
    timezone_name = tz or availability.timezone_name
    slots = await availability.get_free_slots(
        date,
        service_ids=service_ids,
        duration_min=parse_duration(duration_min),
        master_id=master_id,
        timezone_name=timezone_name,
    )
    return AvailabilityResponse(
        date=date,
        timezone=timezone_name,
        master_id=master_id,
        slots=[SlotResponse(start=slot.start, end=slot.end) for slot in slots],
    )


@router.get("/month", response_model=MonthAvailabilityResponse)
async def get_month_availability(
    month: str = Query(..., description="YYYY-MM"),
    service_ids: Optional[List[str]] = Query(default=None, alias="serviceId"),
    duration_min: Optional[str] = Query(default=None, alias="durationMin"),
    master_id: Optional[str] = Query(default=None, alias="masterId"),
    tz: Optional[str] = Query(default=None, description="IANA timezone"),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Free slot count for every day of a month."""
    timezone_name = tz or availability.timezone_name
    days = await availability.get_month_availability(
        month,
        service_ids=service_ids,
        duration_min=parse_duration(duration_min),
        master_id=master_id,
        timezone_name=timezone_name,
    )
    return MonthAvailabilityResponse(
        month=month, timezone=timezone_name, master_id=master_id, days=days
    )
