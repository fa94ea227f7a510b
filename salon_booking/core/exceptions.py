"""Custom exception classes for the booking engine."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class BookingEngineError(Exception):
    """Base exception for the booking engine."""

    code: str = "INTERNAL_ERROR"

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize booking engine error.

        Args:
            message: Error message
            recoverable: Whether the caller can recover by retrying (possibly with other input)
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class InvalidInputError(BookingEngineError):
    """Malformed date, duration, interval or contact data."""

    code = "INVALID_INPUT"

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, recoverable=True, details=details)


class ResourceClosedError(BookingEngineError):
    """No working hours for the requested day and master."""

    code = "RESOURCE_CLOSED"

    def __init__(self, message: str = "Resource is closed on the requested day"):
        super().__init__(message, recoverable=True)


class ServiceUnavailableError(BookingEngineError):
    """Service is unknown or inactive."""

    code = "SERVICE_UNAVAILABLE"

    def __init__(self, service_id: str):
        super().__init__(
            f"Service '{service_id}' not found or inactive",
            recoverable=False,
            details={"service_id": service_id},
        )


# Booking flow errors
class DraftNotFoundError(BookingEngineError):
    """Draft does not exist (never created, or already evicted)."""

    code = "DRAFT_NOT_FOUND"

    def __init__(self, draft_id: str):
        super().__init__(
            f"Draft '{draft_id}' not found", recoverable=False, details={"draft_id": draft_id}
        )


class RegistrationExpiredError(BookingEngineError):
    """Draft or one-time code is past its expiry; the flow must restart."""

    code = "EXPIRED"

    def __init__(self, message: str = "Registration expired", draft_id: Optional[str] = None):
        details = {"draft_id": draft_id} if draft_id else {}
        super().__init__(message, recoverable=False, details=details)


class CodeMismatchError(BookingEngineError):
    """Wrong one-time code. Retryable until the code expires."""

    code = "CODE_MISMATCH"

    def __init__(self, message: str = "Verification code does not match"):
        super().__init__(message, recoverable=True)


class NotVerifiedError(BookingEngineError):
    """Promotion attempted on a draft that has not been verified."""

    code = "NOT_VERIFIED"

    def __init__(self, draft_id: str):
        super().__init__(
            f"Draft '{draft_id}' is not verified",
            recoverable=True,
            details={"draft_id": draft_id},
        )


class SlotTakenError(BookingEngineError):
    """Overlapping appointment exists for the master. Re-query availability and pick another slot."""

    code = "SLOT_TAKEN"

    def __init__(
        self,
        master_id: str,
        conflicting_appointment_id: Optional[str] = None,
        message: str = "Time slot is no longer available",
    ):
        details: Dict[str, Any] = {"master_id": master_id}
        if conflicting_appointment_id:
            details["conflicting_appointment_id"] = conflicting_appointment_id
        super().__init__(message, recoverable=True, details=details)


# Configuration Errors
class ConfigurationError(BookingEngineError):
    """Configuration error occurred."""

    code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


# Database Errors
class DatabaseError(BookingEngineError):
    """Base class for persistence failures. Never retried by the engine."""

    code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "Database error occurred",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class DatabaseNotConnectedError(DatabaseError):
    """Raised when database operations are attempted before connecting."""

    def __init__(self):
        super().__init__(
            "Database connection is not established. Call connect() first.",
            recoverable=False,
        )


class DatabasePoolTimeoutError(DatabaseError):
    """Database connection pool exhausted."""

    def __init__(self, timeout: float, pool_size: Optional[int] = None):
        details: Dict[str, Any] = {"timeout": timeout}
        if pool_size is not None:
            details["pool_size"] = pool_size
        super().__init__(
            f"Database connection pool exhausted (timeout: {timeout}s)",
            recoverable=True,
            details=details,
        )
