"""In-process booking store for single-instance deployments and tests."""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncIterator, Dict, List, Optional, Set, Tuple

from loguru import logger

from salon_booking.core.enums import AppointmentStatus
from salon_booking.core.exceptions import InvalidInputError
from salon_booking.models.entities import (
    Appointment,
    Client,
    MasterWorkingHours,
    Service,
    TimeOff,
    WorkingHours,
    generate_id,
)
from salon_booking.repositories.base import BookingStore, ReservationUnitOfWork


class _MemoryUnitOfWork(ReservationUnitOfWork):
    def __init__(self, store: "InMemoryBookingStore", master_id: str):
        self._store = store
        self.master_id = master_id

    async def find_conflict(self, start_at: datetime, end_at: datetime) -> Optional[Appointment]:
        return self._store._first_conflict(self.master_id, start_at, end_at)

    async def find_or_create_client(
        self, name: str, phone: Optional[str], email: Optional[str]
    ) -> Client:
        clients = self._store.clients.values()
        if phone:
            for client in clients:
                if client.phone == phone:
                    return client
        if email:
            for client in clients:
                if client.email == email:
                    return client
        client = Client(id=generate_id("cli"), name=name, phone=phone, email=email)
        self._store.clients[client.id] = client
        return client

    async def create_appointment(self, appointment: Appointment) -> Appointment:
        if appointment.master_id != self.master_id:
            raise InvalidInputError(
                "Appointment master does not match the locked master", field="master_id"
            )
        self._store.appointments[appointment.id] = appointment
        return appointment


class InMemoryBookingStore(BookingStore):
    """
    Booking store backed by plain dictionaries.

    The master lock is an ``asyncio.Lock`` per master id, so exclusion holds
    only within one event loop of one process.
    """

    def __init__(self) -> None:
        self.masters: Set[str] = set()
        self.working_hours: Dict[int, WorkingHours] = {}
        self.master_working_hours: Dict[Tuple[str, int], MasterWorkingHours] = {}
        self.time_off: List[TimeOff] = []
        self.services: Dict[str, Service] = {}
        self.clients: Dict[str, Client] = {}
        self.appointments: Dict[str, Appointment] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # Seeding (admin CRUD lives outside the engine)
    def add_master(self, master_id: str) -> None:
        self.masters.add(master_id)

    def set_working_hours(self, hours: WorkingHours) -> None:
        self.working_hours[hours.weekday] = hours

    def set_master_working_hours(self, hours: MasterWorkingHours) -> None:
        self.masters.add(hours.master_id)
        self.master_working_hours[(hours.master_id, hours.weekday)] = hours

    def add_time_off(self, window: TimeOff) -> None:
        self.time_off.append(window)

    def add_service(self, service: Service) -> None:
        self.services[service.id] = service

    def add_appointment(self, appointment: Appointment) -> None:
        self.masters.add(appointment.master_id)
        self.appointments[appointment.id] = appointment

    # Reads
    async def get_working_hours(self, weekday: int) -> Optional[WorkingHours]:
        return self.working_hours.get(weekday)

    async def get_master_working_hours(
        self, master_id: str, weekday: int
    ) -> Optional[MasterWorkingHours]:
        return self.master_working_hours.get((master_id, weekday))

    async def list_time_off(self, day: date, master_id: Optional[str] = None) -> List[TimeOff]:
        return [
            window
            for window in self.time_off
            if window.date == day and (window.master_id is None or window.master_id == master_id)
        ]

    async def get_service(self, service_id: str) -> Optional[Service]:
        return self.services.get(service_id)

    async def list_blocking_appointments(
        self, range_start: datetime, range_end: datetime, master_id: Optional[str] = None
    ) -> List[Appointment]:
        blocking = AppointmentStatus.blocking()
        found = [
            appointment
            for appointment in self.appointments.values()
            if appointment.status in blocking
            and (master_id is None or appointment.master_id == master_id)
            and appointment.overlaps(range_start, range_end)
        ]
        return sorted(found, key=lambda a: a.start_at)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    def _first_conflict(
        self, master_id: str, start_at: datetime, end_at: datetime
    ) -> Optional[Appointment]:
        blocking = AppointmentStatus.blocking()
        for appointment in self.appointments.values():
            if (
                appointment.master_id == master_id
                and appointment.status in blocking
                and appointment.overlaps(start_at, end_at)
            ):
                return appointment
        return None

    @asynccontextmanager
    async def reservation_scope(self, master_id: str) -> AsyncIterator[ReservationUnitOfWork]:
        if master_id not in self.masters:
            raise InvalidInputError(f"Unknown master '{master_id}'", field="master_id")
        lock = self._locks.setdefault(master_id, asyncio.Lock())
        async with lock:
            logger.debug(f"Reservation lock acquired for master {master_id}")
            yield _MemoryUnitOfWork(self, master_id)
        logger.debug(f"Reservation lock released for master {master_id}")
