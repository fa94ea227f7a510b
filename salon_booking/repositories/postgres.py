"""PostgreSQL booking store on top of the asyncpg pool."""

from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, AsyncIterator, List, Optional

import asyncpg
from loguru import logger

from salon_booking.core.enums import AppointmentStatus
from salon_booking.core.exceptions import InvalidInputError
from salon_booking.models.database import Database
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

_APPOINTMENT_COLUMNS = """
    id, master_id, service_id, client_id, start_at, end_at, status,
    customer_name, phone, email, notes, draft_id, created_at
"""

_BLOCKING_STATUSES = [status.value for status in AppointmentStatus.blocking()]


def _row_to_appointment(row: Any) -> Appointment:
    return Appointment(
        id=row["id"],
        master_id=row["master_id"],
        service_id=row["service_id"],
        client_id=row["client_id"],
        start_at=row["start_at"],
        end_at=row["end_at"],
        status=AppointmentStatus(row["status"]),
        customer_name=row["customer_name"],
        phone=row["phone"],
        email=row["email"],
        notes=row["notes"],
        draft_id=row["draft_id"],
        created_at=row["created_at"],
    )


def _row_to_client(row: Any) -> Client:
    return Client(
        id=row["id"],
        name=row["name"],
        phone=row["phone"],
        email=row["email"],
        created_at=row["created_at"],
    )


class _PostgresUnitOfWork(ReservationUnitOfWork):
    """Runs on the connection holding the ``FOR UPDATE`` lock on the master row."""

    def __init__(self, conn: asyncpg.Connection, master_id: str):
        self._conn = conn
        self.master_id = master_id

    async def find_conflict(self, start_at: datetime, end_at: datetime) -> Optional[Appointment]:
        row = await self._conn.fetchrow(
            f"""
            SELECT {_APPOINTMENT_COLUMNS}
            FROM appointments
            WHERE master_id = $1
              AND status = ANY($2::text[])
              AND start_at < $4
              AND $3 < end_at
            ORDER BY start_at
            LIMIT 1
            """,
            self.master_id,
            _BLOCKING_STATUSES,
            start_at,
            end_at,
        )
        return _row_to_appointment(row) if row else None

    async def find_or_create_client(
        self, name: str, phone: Optional[str], email: Optional[str]
    ) -> Client:
        row = None
        if phone:
            row = await self._conn.fetchrow(
                "SELECT id, name, phone, email, created_at FROM clients "
                "WHERE phone = $1 ORDER BY created_at LIMIT 1",
                phone,
            )
        if row is None and email:
            row = await self._conn.fetchrow(
                "SELECT id, name, phone, email, created_at FROM clients "
                "WHERE email = $1 ORDER BY created_at LIMIT 1",
                email,
            )
        if row is not None:
            return _row_to_client(row)

        row = await self._conn.fetchrow(
            """
            INSERT INTO clients (id, name, phone, email)
            VALUES ($1, $2, $3, $4)
            RETURNING id, name, phone, email, created_at
            """,
            generate_id("cli"),
            name,
            phone,
            email,
        )
        return _row_to_client(row)

    async def create_appointment(self, appointment: Appointment) -> Appointment:
        if appointment.master_id != self.master_id:
            raise InvalidInputError(
                "Appointment master does not match the locked master", field="master_id"
            )
        row = await self._conn.fetchrow(
            f"""
            INSERT INTO appointments (
                id, master_id, service_id, client_id, start_at, end_at, status,
                customer_name, phone, email, notes, draft_id
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
            RETURNING {_APPOINTMENT_COLUMNS}
            """,
            appointment.id,
            appointment.master_id,
            appointment.service_id,
            appointment.client_id,
            appointment.start_at,
            appointment.end_at,
            appointment.status.value,
            appointment.customer_name,
            appointment.phone,
            appointment.email,
            appointment.notes,
            appointment.draft_id,
        )
        return _row_to_appointment(row)


class PostgresBookingStore(BookingStore):
    """Booking store reading and writing the PostgreSQL schema from the Alembic baseline."""

    def __init__(self, database: Database):
        """
        Initialize store with a database manager.

        Args:
            database: Database instance (connected in ``connect()``)
        """
        self.db = database

    async def connect(self) -> None:
        await self.db.connect()

    async def close(self) -> None:
        await self.db.close()

    async def health_check(self) -> bool:
        return await self.db.health_check()

    async def get_working_hours(self, weekday: int) -> Optional[WorkingHours]:
        async with self.db.get_connection() as conn:
            row = await conn.fetchrow(
                "SELECT weekday, is_closed, start_minutes, end_minutes "
                "FROM working_hours WHERE weekday = $1",
                weekday,
            )
        if row is None:
            return None
        return WorkingHours(
            weekday=row["weekday"],
            is_closed=row["is_closed"],
            start_minutes=row["start_minutes"],
            end_minutes=row["end_minutes"],
        )

    async def get_master_working_hours(
        self, master_id: str, weekday: int
    ) -> Optional[MasterWorkingHours]:
        async with self.db.get_connection() as conn:
            row = await conn.fetchrow(
                "SELECT master_id, weekday, is_closed, start_minutes, end_minutes "
                "FROM master_working_hours WHERE master_id = $1 AND weekday = $2",
                master_id,
                weekday,
            )
        if row is None:
            return None
        return MasterWorkingHours(
            master_id=row["master_id"],
            weekday=row["weekday"],
            is_closed=row["is_closed"],
            start_minutes=row["start_minutes"],
            end_minutes=row["end_minutes"],
        )

    async def list_time_off(self, day: date, master_id: Optional[str] = None) -> List[TimeOff]:
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(
                """
                SELECT day, start_minutes, end_minutes, master_id, reason
                FROM time_off
                WHERE day = $1 AND (master_id IS NULL OR master_id = $2)
                ORDER BY start_minutes
                """,
                day,
                master_id,
            )
        return [
            TimeOff(
                date=row["day"],
                start_minutes=row["start_minutes"],
                end_minutes=row["end_minutes"],
                master_id=row["master_id"],
                reason=row["reason"],
            )
            for row in rows
        ]

    async def get_service(self, service_id: str) -> Optional[Service]:
        async with self.db.get_connection() as conn:
            row = await conn.fetchrow(
                "SELECT id, name, duration_min, is_active FROM services WHERE id = $1",
                service_id,
            )
        if row is None:
            return None
        return Service(
            id=row["id"],
            name=row["name"],
            duration_min=row["duration_min"],
            is_active=row["is_active"],
        )

    async def list_blocking_appointments(
        self, range_start: datetime, range_end: datetime, master_id: Optional[str] = None
    ) -> List[Appointment]:
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_APPOINTMENT_COLUMNS}
                FROM appointments
                WHERE status = ANY($1::text[])
                  AND start_at < $3
                  AND $2 < end_at
                  AND ($4::text IS NULL OR master_id = $4)
                ORDER BY start_at
                """,
                _BLOCKING_STATUSES,
                range_start,
                range_end,
                master_id,
            )
        return [_row_to_appointment(row) for row in rows]

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        async with self.db.get_connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_APPOINTMENT_COLUMNS} FROM appointments WHERE id = $1",
                appointment_id,
            )
        return _row_to_appointment(row) if row else None

    @asynccontextmanager
    async def reservation_scope(self, master_id: str) -> AsyncIterator[ReservationUnitOfWork]:
        async with self.db.get_connection() as conn:
            async with conn.transaction():
                # Row lock on the master serializes all writers for this master
                locked = await conn.fetchval(
                    "SELECT id FROM masters WHERE id = $1 FOR UPDATE", master_id
                )
                if locked is None:
                    raise InvalidInputError(f"Unknown master '{master_id}'", field="master_id")
                logger.debug(f"Reservation lock acquired for master {master_id}")
                yield _PostgresUnitOfWork(conn, master_id)
        logger.debug(f"Reservation lock released for master {master_id}")
