"""Tests for candidate slot generation."""

from datetime import datetime, timezone

import pytest

from salon_booking.services.scheduling.busy_intervals import BusyInterval, merge_intervals
from salon_booking.services.scheduling.day_range import resolve_day_range
from salon_booking.services.scheduling.schedule_resolver import WorkingWindow
from salon_booking.services.scheduling.slot_generator import (
    Slot,
    generate_slot_offsets,
    generate_slots,
)
from tests.support import MONDAY

WINDOW = WorkingWindow(540, 1080)


def test_open_day_yields_every_step():
    offsets = generate_slot_offsets(WINDOW, duration=30, step=10, busy=[])
    assert len(offsets) == 52
    assert offsets[0] == (540, 570)
    assert offsets[-1] == (1050, 1080)


def test_booked_half_hour_excludes_intersecting_candidates():
    offsets = generate_slot_offsets(WINDOW, duration=30, step=10, busy=[BusyInterval(600, 630)])
    assert (590, 620) not in offsets
    assert (600, 630) not in offsets
    assert (570, 600) in offsets
    assert (630, 660) in offsets
    assert len(offsets) == 47


def test_slot_longer_than_window():
    assert generate_slot_offsets(WorkingWindow(540, 560), duration=30, step=10, busy=[]) == []


@pytest.mark.parametrize("duration,step", [(0, 10), (-5, 10), (30, 0), (30, -1)])
def test_non_positive_duration_or_step(duration, step):
    assert generate_slot_offsets(WINDOW, duration=duration, step=step, busy=[]) == []


def test_not_before_cuts_off_earlier_starts():
    offsets = generate_slot_offsets(WINDOW, duration=30, step=10, busy=[], not_before=665)
    assert offsets[0] == (670, 700)
    assert all(start >= 665 for start, _ in offsets)


def test_step_larger_than_duration():
    offsets = generate_slot_offsets(WorkingWindow(540, 720), duration=30, step=60, busy=[])
    assert offsets == [(540, 570), (600, 630), (660, 690)]


@pytest.mark.parametrize(
    "busy",
    [
        [BusyInterval(540, 560)],
        [BusyInterval(600, 630), BusyInterval(635, 700), BusyInterval(1070, 1080)],
        [BusyInterval(545, 547), BusyInterval(700, 701), BusyInterval(900, 1000)],
        [BusyInterval(540, 1080)],
    ],
)
@pytest.mark.parametrize("duration,step", [(30, 10), (45, 5), (90, 15)])
def test_slots_stay_inside_window_and_clear_of_busy_time(busy, duration, step):
    busy = merge_intervals(busy)
    offsets = generate_slot_offsets(WINDOW, duration=duration, step=step, busy=busy)

    for start, end in offsets:
        assert WINDOW.start_minutes <= start and end <= WINDOW.end_minutes
        assert end - start == duration
        assert not any(interval.overlaps(start, end) for interval in busy)

    # Every free candidate on the grid is offered
    expected = [
        (t, t + duration)
        for t in range(WINDOW.start_minutes, WINDOW.end_minutes - duration + 1, step)
        if not any(interval.overlaps(t, t + duration) for interval in busy)
    ]
    assert offsets == expected


def test_generate_slots_converts_to_utc():
    day = resolve_day_range(MONDAY, "Europe/Berlin")
    slots = generate_slots(day, WINDOW, duration=30, step=10, busy=[])
    assert slots[0] == Slot(
        start=datetime(2026, 11, 2, 8, 0, tzinfo=timezone.utc),
        end=datetime(2026, 11, 2, 8, 30, tzinfo=timezone.utc),
    )
    assert slots[-1].end == datetime(2026, 11, 2, 17, 0, tzinfo=timezone.utc)


def test_slot_to_dict():
    slot = Slot(
        start=datetime(2026, 11, 2, 8, 0, tzinfo=timezone.utc),
        end=datetime(2026, 11, 2, 8, 30, tzinfo=timezone.utc),
    )
    assert slot.to_dict() == {"start": "2026-11-02T08:00:00+00:00", "end": "2026-11-02T08:30:00+00:00"}
