"""Centralized enum definitions for the booking engine."""

from enum import Enum


class AppointmentStatus(str, Enum):
    """Status values for appointments."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DONE = "DONE"
    CANCELED = "CANCELED"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]

    @classmethod
    def blocking(cls) -> tuple:
        """Statuses that occupy the master's time."""
        return (cls.PENDING, cls.CONFIRMED)


class DraftSource(str, Enum):
    """Entry channel a booking draft was created through."""
    DIRECT = "direct"
    SMS_OTP = "sms_otp"
    TELEGRAM_OTP = "telegram_otp"
    FEDERATED_QUICK_AUTH = "federated_quick_auth"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class DraftState(str, Enum):
    """Lifecycle states of a booking draft."""
    CREATED = "created"
    CODE_ISSUED = "code_issued"
    VERIFIED = "verified"
    PROMOTED = "promoted"
    EXPIRED = "expired"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]

    @property
    def is_terminal(self) -> bool:
        return self in (DraftState.PROMOTED, DraftState.EXPIRED)


class VerificationMethod(str, Enum):
    """Channel a one-time code is delivered through."""
    EMAIL = "email"
    SMS = "sms"
    TELEGRAM = "telegram"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class VerificationOutcome(str, Enum):
    """Result of comparing a submitted one-time code."""
    OK = "ok"
    MISMATCH = "mismatch"
    EXPIRED = "expired"


class ConfirmationStatus(str, Enum):
    """Result of polling an out-of-band confirmation."""
    CONFIRMED = "confirmed"
    PENDING = "pending"
    EXPIRED = "expired"


class StorageBackend(str, Enum):
    """Durable storage implementations."""
    MEMORY = "memory"
    POSTGRES = "postgres"


class EvictionStrategy(str, Enum):
    """How expired ephemeral entries are removed from the in-memory store."""
    LAZY = "lazy"
    SWEEP = "sweep"
