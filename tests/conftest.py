"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Set before any salon_booking import so settings pick up the testing profile
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from salon_booking.core.config.settings import BookingSettings, reset_settings
from salon_booking.core.infra.redis_manager import RedisManager
from salon_booking.engine import BookingEngine
from salon_booking.models.entities import MasterWorkingHours, Service, WorkingHours
from salon_booking.repositories.memory import InMemoryBookingStore
from salon_booking.services.notification.service import NotificationService
from salon_booking.utils.ttl_store import InMemoryKeyValueBackend
from tests.support import MONDAY_WEEKDAY, FakeClock, RecordingChannel


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)

    # Reset singletons so each test gets fresh settings and no Redis client
    reset_settings()
    RedisManager.reset()
    yield
    reset_settings()
    RedisManager.reset()


@pytest.fixture
def clock():
    """Clock parked two weeks before MONDAY, so lead times never interfere."""
    return FakeClock(datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    """Salon and two masters open Monday 09:00-18:00; three services."""
    store = InMemoryBookingStore()
    store.set_working_hours(
        WorkingHours(weekday=MONDAY_WEEKDAY, start_minutes=540, end_minutes=1080)
    )
    for master_id in ("m1", "m2"):
        store.set_master_working_hours(
            MasterWorkingHours(
                master_id=master_id, weekday=MONDAY_WEEKDAY, start_minutes=540, end_minutes=1080
            )
        )
    store.add_service(Service(id="cut", name="Haircut", duration_min=30))
    store.add_service(Service(id="color", name="Coloring", duration_min=60))
    store.add_service(Service(id="perm", name="Perm", duration_min=120, is_active=False))
    return store


@pytest.fixture
def backend(clock):
    return InMemoryKeyValueBackend(clock=clock)


@pytest.fixture
def channels():
    return {name: RecordingChannel(name) for name in ("sms", "email", "telegram")}


@pytest.fixture
def notifications(channels):
    return NotificationService(channels.values())


@pytest.fixture
def settings():
    return BookingSettings(
        _env_file=None,
        org_timezone="Europe/Berlin",
        slot_step_minutes=10,
        buffer_after_minutes=0,
        min_lead_minutes=60,
    )


@pytest.fixture
def engine(settings, store, backend, notifications, clock):
    """Fully wired engine over the in-memory store and backend."""
    return BookingEngine.from_settings(
        settings=settings,
        store=store,
        backend=backend,
        notifications=notifications,
        clock=clock,
    )
