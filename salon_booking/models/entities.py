"""Durable scheduling records.

Working hours and time-off windows are expressed in minutes from local
midnight of the salon's calendar day. Appointment instants are timezone-aware
UTC datetimes.
"""

import secrets
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from salon_booking.core.enums import AppointmentStatus


def generate_id(prefix: str) -> str:
    """Generate an opaque record identifier such as ``apt_3f9c...``."""
    return f"{prefix}_{secrets.token_hex(12)}"


@dataclass(frozen=True)
class WorkingHours:
    """
    Salon-wide opening hours for one weekday.

    Attributes:
        weekday: 0=Sunday .. 6=Saturday
        is_closed: Whole day closed
        start_minutes: Opening, minutes from local midnight
        end_minutes: Closing, minutes from local midnight
    """

    weekday: int
    is_closed: bool = False
    start_minutes: int = 0
    end_minutes: int = 0


@dataclass(frozen=True)
class MasterWorkingHours:
    """Working hours of one master for one weekday. Replaces salon hours for that master."""

    master_id: str
    weekday: int
    is_closed: bool = False
    start_minutes: int = 0
    end_minutes: int = 0


@dataclass(frozen=True)
class TimeOff:
    """
    Dated exception window blocking part of an otherwise open day.

    ``master_id`` is None for salon-wide closures.
    """

    date: date
    start_minutes: int
    end_minutes: int
    master_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Service:
    """Bookable service. Its duration drives slot width."""

    id: str
    name: str
    duration_min: int
    is_active: bool = True


@dataclass
class Client:
    """Salon client, resolved by phone or e-mail at promotion time."""

    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Appointment:
    """
    Durable booking record.

    For a fixed ``master_id`` no two appointments in PENDING/CONFIRMED may
    overlap on ``[start_at, end_at)``. Records are never deleted, only
    status-transitioned.
    """

    id: str
    master_id: str
    service_id: str
    start_at: datetime
    end_at: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    client_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    draft_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def overlaps(self, start_at: datetime, end_at: datetime) -> bool:
        """Half-open interval intersection with ``[start_at, end_at)``."""
        return self.start_at < end_at and start_at < self.end_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert appointment to dictionary."""
        return {
            "id": self.id,
            "master_id": self.master_id,
            "service_id": self.service_id,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "status": self.status.value,
            "client_id": self.client_id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
            "draft_id": self.draft_id,
            "created_at": self.created_at.isoformat(),
        }
