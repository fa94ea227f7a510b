"""Shared fixtures for integration tests requiring a real PostgreSQL."""

import asyncio
import importlib.util
import os
from pathlib import Path
from types import SimpleNamespace
from typing import AsyncGenerator, List

import asyncpg
import pytest
import pytest_asyncio
from loguru import logger

from salon_booking.constants import Database as DatabaseConfig
from salon_booking.models.database import Database
from salon_booking.repositories.postgres import PostgresBookingStore

BASELINE_MIGRATION = (
    Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_baseline.py"
)


def _database_url() -> str:
    return os.getenv("TEST_DATABASE_URL") or DatabaseConfig.TEST_URL


def _skip_all(items, reason: str) -> None:
    skip_integration = pytest.mark.skip(reason=reason)
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_collection_modifyitems(config, items):
    """
    Automatically skip integration tests if the database is unavailable.

    This prevents test failures in environments without PostgreSQL.
    """
    if not os.getenv("TEST_DATABASE_URL"):
        _skip_all(items, "TEST_DATABASE_URL not set - skipping integration tests")
        return

    async def check_db() -> bool:
        try:
            conn = await asyncio.wait_for(asyncpg.connect(_database_url()), timeout=5.0)
            await conn.close()
            return True
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
            logger.warning(f"Database connection failed: {e}")
            return False

    if not asyncio.run(check_db()):
        _skip_all(items, "PostgreSQL database is not available - skipping integration tests")


def _migration_statements(step: str) -> List[str]:
    """SQL emitted by the baseline migration's ``upgrade`` or ``downgrade``."""
    spec = importlib.util.spec_from_file_location("baseline_migration", BASELINE_MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    statements: List[str] = []
    module.op = SimpleNamespace(execute=statements.append)
    getattr(module, step)()
    return statements


async def _run_migration(step: str) -> None:
    conn = await asyncpg.connect(_database_url())
    try:
        for statement in _migration_statements(step):
            await conn.execute(statement)
    finally:
        await conn.close()


@pytest_asyncio.fixture
async def pg_store() -> AsyncGenerator[PostgresBookingStore, None]:
    """
    Booking store on a freshly migrated schema.

    The schema is dropped again after each test.
    """
    await _run_migration("downgrade")
    await _run_migration("upgrade")

    store = PostgresBookingStore(Database(database_url=_database_url(), pool_size=5))
    await store.connect()
    try:
        yield store
    finally:
        await store.close()
        await _run_migration("downgrade")


@pytest_asyncio.fixture
async def seeded_store(pg_store: PostgresBookingStore) -> PostgresBookingStore:
    """Salon and master m1 open Monday 09:00-18:00; m2 has no hours; 'cut' takes 30 minutes."""
    async with pg_store.db.get_connection() as conn:
        await conn.execute("INSERT INTO masters (id, name) VALUES ('m1', 'Mia'), ('m2', 'Max')")
        await conn.execute(
            "INSERT INTO services (id, name, duration_min, is_active) VALUES "
            "('cut', 'Haircut', 30, TRUE), ('perm', 'Perm', 120, FALSE)"
        )
        await conn.execute(
            "INSERT INTO working_hours (weekday, start_minutes, end_minutes) VALUES (1, 540, 1080)"
        )
        await conn.execute(
            "INSERT INTO master_working_hours (master_id, weekday, start_minutes, end_minutes) "
            "VALUES ('m1', 1, 540, 1080)"
        )
    return pg_store
