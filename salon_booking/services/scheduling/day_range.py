"""Local calendar day to UTC instant range conversion."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salon_booking.constants import Calendar


@dataclass(frozen=True)
class DayRange:
    """
    One local calendar day as a half-open UTC range ``[start, end)``.

    Attributes:
        local_date: Calendar date in the salon's timezone
        start: UTC instant of local midnight
        end: UTC instant of the following local midnight
        zone: Timezone the date was resolved in
    """

    local_date: date
    start: datetime
    end: datetime
    zone: tzinfo

    @property
    def weekday(self) -> int:
        """Weekday index with 0=Sunday .. 6=Saturday."""
        return self.local_date.isoweekday() % Calendar.DAYS_PER_WEEK

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def to_instant(self, minutes: int) -> datetime:
        """Minute offset from local midnight back to a UTC instant (day's base offset)."""
        return self.start + timedelta(minutes=minutes)

    def minutes_since_start(self, instant: datetime) -> float:
        return (instant - self.start).total_seconds() / 60

    def floor_minutes(self, instant: datetime) -> int:
        return math.floor(self.minutes_since_start(instant))

    def ceil_minutes(self, instant: datetime) -> int:
        return math.ceil(self.minutes_since_start(instant))


def _local_midnight_utc(day: date, zone: tzinfo) -> datetime:
    # Offset taken at the UTC-midnight candidate and applied once
    candidate = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    offset = candidate.astimezone(zone).utcoffset() or timedelta(0)
    return candidate - offset


def parse_local_date(value: Union[str, date]) -> Optional[date]:
    """Parse ``YYYY-MM-DD``; returns None for anything malformed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), Calendar.DATE_FORMAT).date()
    except (AttributeError, ValueError):
        return None


def load_zone(name: Optional[str]) -> Optional[ZoneInfo]:
    """Load an IANA timezone; returns None for unknown or malformed identifiers."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def resolve_day_range(value: Union[str, date], timezone_name: str) -> Optional[DayRange]:
    """
    Convert a local date in an IANA timezone into its UTC range.

    Args:
        value: Local date, as ``YYYY-MM-DD`` or a ``date``
        timezone_name: IANA timezone identifier (e.g. ``Europe/Berlin``)

    Returns:
        DayRange, or None for a malformed date or unknown timezone
    """
    local_date = parse_local_date(value)
    zone = load_zone(timezone_name)
    if local_date is None or zone is None:
        return None
    try:
        next_date = local_date + timedelta(days=1)
    except OverflowError:
        return None
    return DayRange(
        local_date=local_date,
        start=_local_midnight_utc(local_date, zone),
        end=_local_midnight_utc(next_date, zone),
        zone=zone,
    )
