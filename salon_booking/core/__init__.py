"""Core infrastructure module."""

from .exceptions import (
    BookingEngineError,
    CodeMismatchError,
    ConfigurationError,
    DatabaseError,
    DatabaseNotConnectedError,
    DatabasePoolTimeoutError,
    DraftNotFoundError,
    InvalidInputError,
    NotVerifiedError,
    RegistrationExpiredError,
    ResourceClosedError,
    ServiceUnavailableError,
    SlotTakenError,
)

__all__ = [
    "BookingEngineError",
    "CodeMismatchError",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseNotConnectedError",
    "DatabasePoolTimeoutError",
    "DraftNotFoundError",
    "InvalidInputError",
    "NotVerifiedError",
    "RegistrationExpiredError",
    "ResourceClosedError",
    "ServiceUnavailableError",
    "SlotTakenError",
]
