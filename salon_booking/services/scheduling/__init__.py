"""Availability computation: day ranges, working windows, busy time and slots."""

from .availability import AvailabilityService
from .busy_intervals import BusyInterval, BusyIntervalBuilder, build_busy_intervals
from .day_range import DayRange, resolve_day_range
from .schedule_resolver import ScheduleResolver, WorkingWindow
from .slot_generator import Slot, generate_slot_offsets, generate_slots

__all__ = [
    "AvailabilityService",
    "BusyInterval",
    "BusyIntervalBuilder",
    "DayRange",
    "ScheduleResolver",
    "Slot",
    "WorkingWindow",
    "build_busy_intervals",
    "generate_slot_offsets",
    "generate_slots",
    "resolve_day_range",
]
