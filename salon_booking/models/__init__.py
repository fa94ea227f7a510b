"""Data models for the booking engine."""

from .database import Database
from .entities import (
    Appointment,
    Client,
    MasterWorkingHours,
    Service,
    TimeOff,
    WorkingHours,
    generate_id,
)

__all__ = [
    "Appointment",
    "Client",
    "Database",
    "MasterWorkingHours",
    "Service",
    "TimeOff",
    "WorkingHours",
    "generate_id",
]
