"""Test doubles and calendar helpers shared by the test suite."""

from datetime import date, datetime, timedelta, timezone
from typing import List, Tuple

from salon_booking.services.notification.base import NotificationChannel

# Monday; Europe/Berlin is on CET (UTC+1) that day
MONDAY = date(2026, 11, 2)
MONDAY_WEEKDAY = 1


def berlin(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    """UTC instant of a Europe/Berlin wall-clock time on a CET day."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc) - timedelta(
        hours=1
    )


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingChannel(NotificationChannel):
    """Channel that keeps every message instead of delivering it."""

    def __init__(self, name: str, enabled: bool = True):
        self._name = name
        self._enabled = enabled
        self.sent: List[Tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def send(self, recipient: str, message: str) -> bool:
        self.sent.append((recipient, message))
        return True
