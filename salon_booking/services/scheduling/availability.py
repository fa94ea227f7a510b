"""Free slot queries for a day or a month."""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from salon_booking.constants import Calendar, SlotDefaults
from salon_booking.repositories.base import BookingStore
from salon_booking.services.scheduling.busy_intervals import BusyIntervalBuilder
from salon_booking.services.scheduling.day_range import DayRange, resolve_day_range
from salon_booking.services.scheduling.schedule_resolver import ScheduleResolver
from salon_booking.services.scheduling.slot_generator import Slot, generate_slots
from salon_booking.utils.ttl_store import Clock, utc_now


class AvailabilityService:
    """
    Read-only availability computation.

    Every call recomputes from the current store state; nothing is cached and
    nothing is locked. Bad input (malformed date, unknown timezone, unknown or
    inactive service, non-positive duration) yields an empty result.
    """

    def __init__(
        self,
        store: BookingStore,
        timezone_name: str = "Europe/Berlin",
        step_minutes: int = SlotDefaults.STEP_MINUTES,
        buffer_after_minutes: int = SlotDefaults.BUFFER_AFTER_MINUTES,
        min_lead_minutes: int = 0,
        clock: Clock = utc_now,
    ):
        """
        Initialize availability service.

        Args:
            store: Booking store to read schedules and appointments from
            timezone_name: Default IANA timezone of the salon
            step_minutes: Default distance between candidate starts
            buffer_after_minutes: Default pause after each appointment
            min_lead_minutes: Starts closer than this to "now" are not offered
            clock: Returns the current UTC time
        """
        self.store = store
        self.timezone_name = timezone_name
        self.step_minutes = step_minutes
        self.buffer_after_minutes = buffer_after_minutes
        self.min_lead_minutes = min_lead_minutes
        self._clock = clock
        self.schedule = ScheduleResolver(store)
        self.busy = BusyIntervalBuilder(store)

    async def resolve_duration(
        self,
        service_ids: Optional[Iterable[str]] = None,
        duration_min: Optional[int] = None,
    ) -> Optional[int]:
        """
        Total duration of the requested services, or the explicit duration.

        Returns:
            Minutes, or None if any service is unknown/inactive or nothing usable was given
        """
        ids = [sid for sid in (service_ids or []) if sid]
        if ids:
            total = 0
            for service_id, service in zip(ids, await self.store.get_services(ids)):
                if service is None or not service.is_active:
                    logger.debug(f"Service {service_id} unknown or inactive; no slots")
                    return None
                total += service.duration_min
            return total if total > 0 else None
        if duration_min is not None and duration_min > 0:
            return duration_min
        return None

    def _not_before(self, day: DayRange) -> Optional[int]:
        now = self._clock()
        if not day.contains(now):
            return None
        return math.ceil(day.minutes_since_start(now + timedelta(minutes=self.min_lead_minutes)))

    async def get_free_slots(
        self,
        day: Union[str, date],
        service_ids: Optional[Iterable[str]] = None,
        duration_min: Optional[int] = None,
        master_id: Optional[str] = None,
        timezone_name: Optional[str] = None,
        step_minutes: Optional[int] = None,
        buffer_after_minutes: Optional[int] = None,
    ) -> List[Slot]:
        """
        Free slots for one local day.

        Args:
            day: Local date (``YYYY-MM-DD`` or ``date``)
            service_ids: Services booked together; durations are summed
            duration_min: Explicit duration, used when no services are given
            master_id: Restrict to one master's hours, time-off and appointments
            timezone_name: IANA timezone (defaults to the salon's)
            step_minutes: Override the configured step
            buffer_after_minutes: Override the configured buffer

        Returns:
            Ascending list of UTC slots
        """
        duration = await self.resolve_duration(service_ids, duration_min)
        if duration is None:
            return []

        day_range = resolve_day_range(day, timezone_name or self.timezone_name)
        if day_range is None:
            logger.debug(f"Unresolvable day '{day}' in '{timezone_name or self.timezone_name}'")
            return []
        return await self._slots_for_day(
            day_range, duration, master_id, step_minutes, buffer_after_minutes
        )

    async def _slots_for_day(
        self,
        day_range: DayRange,
        duration: int,
        master_id: Optional[str],
        step_minutes: Optional[int],
        buffer_after_minutes: Optional[int],
    ) -> List[Slot]:
        window = await self.schedule.resolve(day_range.weekday, master_id)
        if window is None:
            return []

        buffer_after = (
            self.buffer_after_minutes if buffer_after_minutes is None else buffer_after_minutes
        )
        step = self.step_minutes if step_minutes is None else step_minutes
        busy = await self.busy.build(day_range, window, master_id, max(buffer_after, 0))
        return generate_slots(
            day_range, window, duration, step, busy, not_before=self._not_before(day_range)
        )

    async def get_month_availability(
        self,
        month: str,
        service_ids: Optional[Iterable[str]] = None,
        duration_min: Optional[int] = None,
        master_id: Optional[str] = None,
        timezone_name: Optional[str] = None,
    ) -> Dict[str, int]:
        """
        Number of free slots for every day of a month.

        Args:
            month: ``YYYY-MM``
            service_ids: Services booked together
            duration_min: Explicit duration, used when no services are given
            master_id: Optional master
            timezone_name: IANA timezone (defaults to the salon's)

        Returns:
            ``{"YYYY-MM-DD": count}``; empty for malformed input
        """
        try:
            first = datetime.strptime(month.strip(), Calendar.MONTH_FORMAT).date()
        except (AttributeError, ValueError):
            return {}

        duration = await self.resolve_duration(service_ids, duration_min)
        tz_name = timezone_name or self.timezone_name
        _, days_in_month = calendar.monthrange(first.year, first.month)

        result: Dict[str, int] = {}
        for offset in range(days_in_month):
            current = first + timedelta(days=offset)
            key = current.strftime(Calendar.DATE_FORMAT)
            day_range = resolve_day_range(current, tz_name)
            if duration is None or day_range is None:
                result[key] = 0
                continue
            slots = await self._slots_for_day(day_range, duration, master_id, None, None)
            result[key] = len(slots)
        return result

    async def is_slot_free(self, master_id: str, start_at: datetime, end_at: datetime) -> bool:
        """Advisory check: no blocking appointment of the master overlaps ``[start_at, end_at)``."""
        conflicts = await self.store.list_blocking_appointments(start_at, end_at, master_id)
        return not conflicts
