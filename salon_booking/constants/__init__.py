"""Constants for the booking engine.

All classes can be imported directly from this package:
    from salon_booking.constants import Calendar, SlotDefaults
"""

from .database import Database
from .scheduling import Calendar, KeyPrefixes, SlotDefaults

__all__ = [
    "Database",
    "Calendar",
    "KeyPrefixes",
    "SlotDefaults",
]
