"""Database and connection pool constants."""

from typing import Final


class Database:
    """Database configuration defaults.

    NOTE: These are compile-time defaults only. Runtime configuration
    should be obtained via BookingSettings (salon_booking/core/config/settings.py).
    """

    DEFAULT_URL: Final[str] = "postgresql://localhost:5432/salon_booking"
    TEST_URL: Final[str] = "postgresql://localhost:5432/salon_booking_test"
    POOL_SIZE: Final[int] = 10
    CONNECTION_TIMEOUT: Final[float] = 30.0
    QUERY_TIMEOUT: Final[float] = 30.0
