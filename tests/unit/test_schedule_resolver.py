"""Tests for the weekday working window lookup."""

import pytest

from salon_booking.models.entities import MasterWorkingHours, WorkingHours
from salon_booking.services.scheduling.schedule_resolver import ScheduleResolver, WorkingWindow
from tests.support import MONDAY_WEEKDAY


@pytest.mark.asyncio
async def test_salon_hours_without_master(store):
    window = await ScheduleResolver(store).resolve(MONDAY_WEEKDAY)
    assert window == WorkingWindow(540, 1080)


@pytest.mark.asyncio
async def test_master_hours_override_salon_hours(store):
    store.set_master_working_hours(
        MasterWorkingHours(master_id="m1", weekday=MONDAY_WEEKDAY, start_minutes=720, end_minutes=900)
    )
    window = await ScheduleResolver(store).resolve(MONDAY_WEEKDAY, "m1")
    assert window == WorkingWindow(720, 900)


@pytest.mark.asyncio
async def test_master_without_row_does_not_fall_back_to_salon(store):
    store.add_master("m3")
    assert await ScheduleResolver(store).resolve(MONDAY_WEEKDAY, "m3") is None
    assert await ScheduleResolver(store).resolve(MONDAY_WEEKDAY) is not None


@pytest.mark.asyncio
async def test_master_closed_day(store):
    store.set_master_working_hours(
        MasterWorkingHours(master_id="m1", weekday=MONDAY_WEEKDAY, is_closed=True)
    )
    assert await ScheduleResolver(store).resolve(MONDAY_WEEKDAY, "m1") is None


@pytest.mark.asyncio
async def test_salon_closed_or_missing(store):
    store.set_working_hours(WorkingHours(weekday=2, is_closed=True, start_minutes=540, end_minutes=1080))
    resolver = ScheduleResolver(store)
    assert await resolver.resolve(2) is None
    assert await resolver.resolve(3) is None


@pytest.mark.asyncio
async def test_window_is_clamped_to_the_day(store):
    store.set_working_hours(WorkingHours(weekday=4, start_minutes=-30, end_minutes=1500))
    assert await ScheduleResolver(store).resolve(4) == WorkingWindow(0, 1440)


@pytest.mark.asyncio
async def test_empty_window_counts_as_closed(store):
    store.set_working_hours(WorkingHours(weekday=5, start_minutes=600, end_minutes=600))
    assert await ScheduleResolver(store).resolve(5) is None


def test_clamped_never_inverts():
    window = WorkingWindow.clamped(900, 600)
    assert window.is_empty
    assert window.length == 0
