"""One-time code storage."""

from .models import OTPEntry, normalize_contact, otp_key
from .store import OTPStore, generate_code

__all__ = ["OTPEntry", "OTPStore", "generate_code", "normalize_contact", "otp_key"]
