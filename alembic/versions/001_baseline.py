"""Baseline migration - salon schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:00:00.000000

Creates masters, opening hours, time off, services, clients and appointments.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the booking schema with its indexes."""

    # Masters are also the row lock target when a booking is written
    op.execute("""
        CREATE TABLE IF NOT EXISTS masters (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS services (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            duration_min INTEGER NOT NULL CHECK (duration_min > 0),
            is_active BOOLEAN NOT NULL DEFAULT TRUE
        )
    """)

    # Weekday 0 = Sunday; minutes since local midnight
    op.execute("""
        CREATE TABLE IF NOT EXISTS working_hours (
            weekday SMALLINT PRIMARY KEY CHECK (weekday BETWEEN 0 AND 6),
            is_closed BOOLEAN NOT NULL DEFAULT FALSE,
            start_minutes INTEGER NOT NULL DEFAULT 0,
            end_minutes INTEGER NOT NULL DEFAULT 0
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS master_working_hours (
            master_id TEXT NOT NULL REFERENCES masters(id) ON DELETE CASCADE,
            weekday SMALLINT NOT NULL CHECK (weekday BETWEEN 0 AND 6),
            is_closed BOOLEAN NOT NULL DEFAULT FALSE,
            start_minutes INTEGER NOT NULL DEFAULT 0,
            end_minutes INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (master_id, weekday)
        )
    """)

    # NULL master_id means the whole salon is off
    op.execute("""
        CREATE TABLE IF NOT EXISTS time_off (
            id BIGSERIAL PRIMARY KEY,
            day DATE NOT NULL,
            start_minutes INTEGER NOT NULL,
            end_minutes INTEGER NOT NULL,
            master_id TEXT REFERENCES masters(id) ON DELETE CASCADE,
            reason TEXT
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS clients (
            id TEXT PRIMARY KEY,
            name TEXT,
            phone TEXT,
            email TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS appointments (
            id TEXT PRIMARY KEY,
            master_id TEXT NOT NULL REFERENCES masters(id),
            service_id TEXT NOT NULL REFERENCES services(id),
            client_id TEXT REFERENCES clients(id),
            start_at TIMESTAMPTZ NOT NULL,
            end_at TIMESTAMPTZ NOT NULL,
            status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'CONFIRMED', 'DONE', 'CANCELED')),
            customer_name TEXT,
            phone TEXT,
            email TEXT,
            notes TEXT,
            draft_id TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CHECK (end_at > start_at)
        )
    """)

    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_appointments_master_start "
        "ON appointments (master_id, start_at)"
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_appointments_draft ON appointments (draft_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_time_off_day ON time_off (day)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_clients_phone ON clients (phone)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_clients_email ON clients (email)")


def downgrade() -> None:
    """Drop all tables in reverse order (respecting foreign key dependencies)."""
    op.execute("DROP TABLE IF EXISTS appointments CASCADE")
    op.execute("DROP TABLE IF EXISTS clients CASCADE")
    op.execute("DROP TABLE IF EXISTS time_off CASCADE")
    op.execute("DROP TABLE IF EXISTS master_working_hours CASCADE")
    op.execute("DROP TABLE IF EXISTS working_hours CASCADE")
    op.execute("DROP TABLE IF EXISTS services CASCADE")
    op.execute("DROP TABLE IF EXISTS masters CASCADE")
