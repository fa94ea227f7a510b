"""Dependency injection functions for the booking web API."""

from fastapi import HTTPException, Request

from salon_booking.engine import BookingEngine
from salon_booking.services.booking.flow import BookingFlowService
from salon_booking.services.scheduling.availability import AvailabilityService


def get_engine(request: Request) -> BookingEngine:
    """
    Engine attached to the application by the lifespan.

    Raises:
        HTTPException: 503 while the application is not started
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Booking engine not initialized")
    return engine


def get_availability_service(request: Request) -> AvailabilityService:
    return get_engine(request).availability


def get_booking_flow(request: Request) -> BookingFlowService:
    return get_engine(request).flow
