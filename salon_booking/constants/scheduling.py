"""Scheduling grid constants."""

from typing import Final


class Calendar:
    """Calendar arithmetic."""

    MINUTES_PER_DAY: Final[int] = 24 * 60
    DAYS_PER_WEEK: Final[int] = 7
    DATE_FORMAT: Final[str] = "%Y-%m-%d"
    MONTH_FORMAT: Final[str] = "%Y-%m"


class SlotDefaults:
    """Fallbacks used when no configuration is supplied."""

    STEP_MINUTES: Final[int] = 10
    BUFFER_AFTER_MINUTES: Final[int] = 0


class KeyPrefixes:
    """Key namespaces in the ephemeral key-value store."""

    DRAFT: Final[str] = "draft"
    OTP: Final[str] = "otp"
