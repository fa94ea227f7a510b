"""Base working window lookup for a weekday."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from salon_booking.constants import Calendar
from salon_booking.repositories.base import BookingStore


@dataclass(frozen=True)
class WorkingWindow:
    """Open interval ``[start_minutes, end_minutes)`` measured from local midnight."""

    start_minutes: int
    end_minutes: int

    @classmethod
    def clamped(cls, start_minutes: int, end_minutes: int) -> "WorkingWindow":
        start = min(max(start_minutes, 0), Calendar.MINUTES_PER_DAY)
        end = min(max(end_minutes, start), Calendar.MINUTES_PER_DAY)
        return cls(start, end)

    @property
    def length(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def is_empty(self) -> bool:
        return self.length <= 0


class ScheduleResolver:
    """
    Resolves the working window for a weekday.

    With a master id only that master's hours count; a missing or closed row
    means the master does not work that day, and salon hours are never used
    as a fallback. Without a master id the salon-wide hours apply.
    """

    def __init__(self, store: BookingStore):
        self.store = store

    async def resolve(self, weekday: int, master_id: Optional[str] = None) -> Optional[WorkingWindow]:
        """
        Resolve the base window.

        Args:
            weekday: 0=Sunday .. 6=Saturday
            master_id: Optional master

        Returns:
            Clamped window, or None when closed
        """
        if master_id:
            hours = await self.store.get_master_working_hours(master_id, weekday)
        else:
            hours = await self.store.get_working_hours(weekday)

        if hours is None or hours.is_closed:
            logger.debug(
                f"Closed on weekday {weekday} (master={master_id or 'salon'}, "
                f"{'no hours' if hours is None else 'marked closed'})"
            )
            return None

        window = WorkingWindow.clamped(hours.start_minutes, hours.end_minutes)
        if window.is_empty:
            return None
        return window
