"""Data models for one-time codes."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from salon_booking.constants import KeyPrefixes
from salon_booking.core.enums import VerificationMethod


def normalize_contact(method: VerificationMethod, contact: str) -> str:
    """Canonical form of a contact so the same person always maps to the same key."""
    contact = contact.strip()
    if method == VerificationMethod.EMAIL:
        return contact.lower()
    if method == VerificationMethod.SMS:
        return "".join(ch for ch in contact if ch.isdigit() or ch == "+")
    return contact


def otp_key(method: VerificationMethod, contact: str, draft_id: str) -> str:
    """Store key for the ``(method, contact, draft_id)`` triple."""
    return f"{KeyPrefixes.OTP}:{method.value}:{normalize_contact(method, contact)}:{draft_id}"


@dataclass
class OTPEntry:
    """
    Issued one-time code.

    Attributes:
        code: Digits sent to the contact
        expires_at: UTC instant after which the entry is gone
        confirmed: Set by an out-of-band confirmation (e.g. a bot button)
        confirmed_at: When the confirmation arrived
        actor: External identity that confirmed (e.g. messenger user id)
    """

    code: str
    expires_at: datetime
    confirmed: bool = False
    confirmed_at: Optional[datetime] = None
    actor: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "expires_at": self.expires_at.isoformat(),
            "confirmed": self.confirmed,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "actor": self.actor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OTPEntry":
        confirmed_at = data.get("confirmed_at")
        return cls(
            code=data["code"],
            expires_at=datetime.fromisoformat(data["expires_at"]),
            confirmed=bool(data.get("confirmed", False)),
            confirmed_at=datetime.fromisoformat(confirmed_at) if confirmed_at else None,
            actor=data.get("actor"),
        )
