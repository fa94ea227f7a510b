"""Busy interval construction from appointments and time-off."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from salon_booking.models.entities import Appointment, TimeOff
from salon_booking.repositories.base import BookingStore
from salon_booking.services.scheduling.day_range import DayRange
from salon_booking.services.scheduling.schedule_resolver import WorkingWindow


@dataclass(frozen=True, order=True)
class BusyInterval:
    """Half-open ``[start, end)`` in minutes from local midnight."""

    start: int
    end: int

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end


def merge_intervals(intervals: Iterable[BusyInterval]) -> List[BusyInterval]:
    """Sort and merge overlapping or touching intervals."""
    merged: List[BusyInterval] = []
    for interval in sorted(intervals):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = BusyInterval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def build_busy_intervals(
    day: DayRange,
    window: WorkingWindow,
    appointments: Iterable[Appointment],
    time_off: Iterable[TimeOff],
    buffer_after: int = 0,
) -> List[BusyInterval]:
    """
    Convert appointments and time-off into clipped, merged minute intervals.

    Appointment starts are floored and ends ceiled to whole minutes, and each
    end is extended by ``buffer_after``. Everything is clipped to the window
    and empty intervals are dropped. The result covers at least every minute
    that is actually unavailable.

    Args:
        day: Day the minute offsets are relative to
        window: Working window to clip against
        appointments: Blocking appointments intersecting the day
        time_off: Time-off windows for the day
        buffer_after: Minutes kept free after each appointment

    Returns:
        Sorted, non-overlapping busy intervals
    """
    raw: List[BusyInterval] = []
    for appointment in appointments:
        raw.append(
            BusyInterval(
                day.floor_minutes(appointment.start_at),
                day.ceil_minutes(appointment.end_at) + buffer_after,
            )
        )
    for window_off in time_off:
        raw.append(BusyInterval(window_off.start_minutes, window_off.end_minutes))

    clipped = []
    for interval in raw:
        start = max(interval.start, window.start_minutes)
        end = min(interval.end, window.end_minutes)
        if start < end:
            clipped.append(BusyInterval(start, end))
    return merge_intervals(clipped)


class BusyIntervalBuilder:
    """Loads the day's blocking records from the store and builds busy intervals."""

    def __init__(self, store: BookingStore):
        self.store = store

    async def build(
        self,
        day: DayRange,
        window: WorkingWindow,
        master_id: Optional[str] = None,
        buffer_after: int = 0,
    ) -> List[BusyInterval]:
        appointments = await self.store.list_blocking_appointments(day.start, day.end, master_id)
        time_off = await self.store.list_time_off(day.local_date, master_id)
        return build_busy_intervals(day, window, appointments, time_off, buffer_after)
