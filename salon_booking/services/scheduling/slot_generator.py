"""Candidate slot generation over a working window."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from salon_booking.services.scheduling.busy_intervals import BusyInterval
from salon_booking.services.scheduling.day_range import DayRange
from salon_booking.services.scheduling.schedule_resolver import WorkingWindow


@dataclass(frozen=True)
class Slot:
    """Bookable ``[start, end)`` in UTC."""

    start: datetime
    end: datetime

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def generate_slot_offsets(
    window: WorkingWindow,
    duration: int,
    step: int,
    busy: Sequence[BusyInterval],
    not_before: Optional[int] = None,
) -> List[Tuple[int, int]]:
    """
    Walk the window in ``step`` increments and keep slots clear of busy time.

    ``busy`` must be sorted and merged (as produced by ``build_busy_intervals``),
    which lets a single pointer scan replace a full overlap check per slot.

    Args:
        window: Working window
        duration: Slot length in minutes
        step: Distance between candidate starts in minutes
        busy: Sorted, merged busy intervals
        not_before: Earliest acceptable start offset (past-slot cut-off)

    Returns:
        Ascending ``(start, end)`` minute offsets
    """
    if duration <= 0 or step <= 0:
        return []

    offsets: List[Tuple[int, int]] = []
    pointer = 0
    t = window.start_minutes
    while t + duration <= window.end_minutes:
        end = t + duration
        while pointer < len(busy) and busy[pointer].end <= t:
            pointer += 1
        free = pointer >= len(busy) or not busy[pointer].overlaps(t, end)
        if free and (not_before is None or t >= not_before):
            offsets.append((t, end))
        t += step
    return offsets


def generate_slots(
    day: DayRange,
    window: WorkingWindow,
    duration: int,
    step: int,
    busy: Sequence[BusyInterval],
    not_before: Optional[int] = None,
) -> List[Slot]:
    """Same as ``generate_slot_offsets`` with offsets converted to UTC instants."""
    return [
        Slot(start=day.to_instant(start), end=day.to_instant(end))
        for start, end in generate_slot_offsets(window, duration, step, busy, not_before)
    ]
