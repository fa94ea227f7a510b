"""Tests for application settings with Pydantic validation."""

import pytest
from pydantic import ValidationError

from salon_booking.core.config.settings import BookingSettings, get_settings, reset_settings
from salon_booking.core.enums import DraftSource, EvictionStrategy, StorageBackend


def make_settings(**kwargs) -> BookingSettings:
    return BookingSettings(_env_file=None, **kwargs)


def test_defaults():
    settings = make_settings()
    assert settings.env == "testing"
    assert settings.org_timezone == "Europe/Berlin"
    assert settings.slot_step_minutes == 10
    assert settings.otp_ttl_minutes == 10
    assert settings.storage_backend == StorageBackend.MEMORY
    assert settings.eviction_strategy == EvictionStrategy.LAZY
    assert settings.redis_url is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ORG_TIMEZONE", "America/New_York")
    monkeypatch.setenv("SLOT_STEP_MINUTES", "15")
    monkeypatch.setenv("EVICTION_STRATEGY", "sweep")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")

    settings = make_settings()

    assert settings.org_timezone == "America/New_York"
    assert settings.slot_step_minutes == 15
    assert settings.eviction_strategy == EvictionStrategy.SWEEP
    assert settings.telegram_bot_token.get_secret_value() == "123:abc"
    assert "123:abc" not in repr(settings)


@pytest.mark.parametrize(
    "field,value",
    [
        ("org_timezone", "Mars/Olympus"),
        ("log_level", "LOUD"),
        ("env", "moon"),
        ("slot_step_minutes", 0),
        ("otp_code_length", 3),
    ],
)
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        make_settings(**{field: value})


def test_log_level_and_env_are_normalized():
    settings = make_settings(log_level="debug", env="Development")
    assert settings.log_level == "DEBUG"
    assert settings.is_development()
    assert not settings.is_production()


def test_production_postgres_requires_credentials():
    with pytest.raises(ValidationError) as exc_info:
        make_settings(
            env="production",
            storage_backend="postgres",
            database_url="postgresql://localhost:5432/salon",
        )
    assert "credentials" in str(exc_info.value)

    settings = make_settings(
        env="production",
        storage_backend="postgres",
        database_url="postgresql://salon:secret@db:5432/salon",
    )
    assert settings.is_production()


def test_production_memory_store_needs_no_database_credentials():
    assert make_settings(env="production").storage_backend == StorageBackend.MEMORY


def test_draft_lifetime_per_source():
    settings = make_settings(draft_ttl_sms_minutes=20)
    assert settings.draft_ttl_minutes(DraftSource.DIRECT) == 30
    assert settings.draft_ttl_minutes(DraftSource.SMS_OTP) == 20
    assert settings.draft_ttl_minutes(DraftSource.TELEGRAM_OTP) == 30
    assert settings.draft_ttl_minutes(DraftSource.FEDERATED_QUICK_AUTH) == 15


def test_singleton_and_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("SLOT_STEP_MINUTES", "5")
    assert get_settings().slot_step_minutes == first.slot_step_minutes
    reset_settings()
    assert get_settings().slot_step_minutes == 5
