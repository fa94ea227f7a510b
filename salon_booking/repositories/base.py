"""Storage interfaces for durable scheduling records."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import Iterable, List, Optional

from salon_booking.models.entities import (
    Appointment,
    Client,
    MasterWorkingHours,
    Service,
    TimeOff,
    WorkingHours,
)


class ReservationUnitOfWork(ABC):
    """
    Operations available while the exclusive lock on one master is held.

    Every call runs against the same lock (and, for SQL backends, the same
    transaction); nothing is visible to other writers for this master until
    the enclosing scope exits cleanly.
    """

    master_id: str

    @abstractmethod
    async def find_conflict(self, start_at: datetime, end_at: datetime) -> Optional[Appointment]:
        """
        Find a PENDING/CONFIRMED appointment of the locked master overlapping ``[start_at, end_at)``.

        Returns:
            First conflicting appointment or None
        """

    @abstractmethod
    async def find_or_create_client(
        self, name: str, phone: Optional[str], email: Optional[str]
    ) -> Client:
        """
        Resolve a client by phone first, then by e-mail; create one when nothing matches.

        Args:
            name: Display name used when a new client is created
            phone: Phone number (optional)
            email: E-mail address (optional)

        Returns:
            Existing or newly created client
        """

    @abstractmethod
    async def create_appointment(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment for the locked master."""


class BookingStore(ABC):
    """Read access to schedules, services and appointments plus the master-scoped write lock."""

    async def connect(self) -> None:
        """Open underlying resources. No-op by default."""

    async def close(self) -> None:
        """Release underlying resources. No-op by default."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def get_working_hours(self, weekday: int) -> Optional[WorkingHours]:
        """Salon-wide hours for a weekday (0=Sunday), or None when no row exists."""

    @abstractmethod
    async def get_master_working_hours(
        self, master_id: str, weekday: int
    ) -> Optional[MasterWorkingHours]:
        """Master-specific hours for a weekday, or None when no row exists."""

    @abstractmethod
    async def list_time_off(self, day: date, master_id: Optional[str] = None) -> List[TimeOff]:
        """
        Time-off windows for a local date.

        Args:
            day: Local calendar date
            master_id: When given, the master's own windows are returned
                together with salon-wide ones; otherwise only salon-wide windows

        Returns:
            Matching time-off windows
        """

    @abstractmethod
    async def get_service(self, service_id: str) -> Optional[Service]:
        """Service by id, active or not."""

    async def get_services(self, service_ids: Iterable[str]) -> List[Optional[Service]]:
        """Services in the order requested; unknown ids map to None."""
        return [await self.get_service(service_id) for service_id in service_ids]

    @abstractmethod
    async def list_blocking_appointments(
        self, range_start: datetime, range_end: datetime, master_id: Optional[str] = None
    ) -> List[Appointment]:
        """
        PENDING/CONFIRMED appointments intersecting ``[range_start, range_end)``.

        Args:
            range_start: UTC range start
            range_end: UTC range end (exclusive)
            master_id: Restrict to one master; all masters when None

        Returns:
            Appointments ordered by start
        """

    @abstractmethod
    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """Appointment by id."""

    @abstractmethod
    def reservation_scope(self, master_id: str) -> AbstractAsyncContextManager:
        """
        Acquire the exclusive lock scoped to ``master_id``.

        Usage::

            async with store.reservation_scope(master_id) as uow:
                if await uow.find_conflict(start, end) is None:
                    await uow.create_appointment(...)

        Different masters are locked independently; the lock is released when
        the block exits. SQL backends commit on clean exit and roll back on
        exception.

        Raises:
            InvalidInputError: If the master does not exist
        """
