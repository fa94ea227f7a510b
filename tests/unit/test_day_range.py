"""Tests for salon_booking/services/scheduling/day_range.py."""

from datetime import date, datetime, timedelta, timezone

import pytest

from salon_booking.services.scheduling.day_range import (
    load_zone,
    parse_local_date,
    resolve_day_range,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestResolveDayRange:
    def test_winter_day_in_berlin(self):
        day = resolve_day_range("2026-11-02", "Europe/Berlin")
        assert day.start == utc(2026, 11, 1, 23, 0)
        assert day.end == utc(2026, 11, 2, 23, 0)

    def test_summer_day_in_berlin(self):
        day = resolve_day_range("2026-07-06", "Europe/Berlin")
        assert day.start == utc(2026, 7, 5, 22, 0)
        assert day.end == utc(2026, 7, 6, 22, 0)

    def test_spring_forward_day_is_23_hours(self):
        day = resolve_day_range("2026-03-29", "Europe/Berlin")
        assert day.start == utc(2026, 3, 28, 23, 0)
        assert day.end == utc(2026, 3, 29, 22, 0)
        assert day.end - day.start == timedelta(hours=23)

    def test_utc_day(self):
        day = resolve_day_range("2026-11-02", "UTC")
        assert day.start == utc(2026, 11, 2)
        assert day.end == utc(2026, 11, 3)

    def test_accepts_date_object(self):
        assert resolve_day_range(date(2026, 11, 2), "UTC").local_date == date(2026, 11, 2)

    @pytest.mark.parametrize("value", ["2026-13-01", "2026-02-30", "tomorrow", "", "02.11.2026"])
    def test_malformed_date_returns_none(self, value):
        assert resolve_day_range(value, "Europe/Berlin") is None

    @pytest.mark.parametrize("tz", ["Mars/Olympus", "", "Europe/../etc"])
    def test_unknown_timezone_returns_none(self, tz):
        assert resolve_day_range("2026-11-02", tz) is None


class TestDayRange:
    @pytest.mark.parametrize(
        "value,weekday",
        [("2026-11-01", 0), ("2026-11-02", 1), ("2026-11-06", 5), ("2026-11-07", 6)],
    )
    def test_weekday_starts_on_sunday(self, value, weekday):
        assert resolve_day_range(value, "Europe/Berlin").weekday == weekday

    def test_minute_offsets_map_back_to_utc(self):
        day = resolve_day_range("2026-11-02", "Europe/Berlin")
        assert day.to_instant(540) == utc(2026, 11, 2, 8, 0)
        assert day.to_instant(1080) == utc(2026, 11, 2, 17, 0)

    def test_contains_is_half_open(self):
        day = resolve_day_range("2026-11-02", "UTC")
        assert day.contains(day.start)
        assert not day.contains(day.end)

    def test_floor_and_ceil_minutes(self):
        day = resolve_day_range("2026-11-02", "UTC")
        instant = utc(2026, 11, 2, 10, 0, 30)
        assert day.floor_minutes(instant) == 600
        assert day.ceil_minutes(instant) == 601
        assert day.ceil_minutes(utc(2026, 11, 2, 10, 0)) == 600


def test_parse_local_date_strips_whitespace():
    assert parse_local_date(" 2026-11-02 ") == date(2026, 11, 2)


def test_load_zone_rejects_empty():
    assert load_zone(None) is None
    assert load_zone("Europe/Berlin") is not None
