"""Keyed one-time code storage with expiry."""

import math
import secrets
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from salon_booking.core.enums import ConfirmationStatus, VerificationMethod, VerificationOutcome
from salon_booking.services.otp.models import OTPEntry, otp_key
from salon_booking.utils.masking import mask_contact
from salon_booking.utils.ttl_store import Clock, KeyValueBackend, utc_now


def generate_code(length: int = 6) -> str:
    """Cryptographically random numeric code, zero-padded to ``length`` digits."""
    return f"{secrets.randbelow(10**length):0{length}d}"


class OTPStore:
    """
    One-time codes keyed by ``(method, contact, draft_id)``.

    Reads never return an expired entry; an expired entry found on read is
    deleted. Storage is delegated to a ``KeyValueBackend`` so the same code
    works in process memory and in Redis.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        ttl_minutes: int = 10,
        code_length: int = 6,
        clock: Clock = utc_now,
    ):
        """
        Initialize OTP store.

        Args:
            backend: TTL key-value backend
            ttl_minutes: Default code lifetime
            code_length: Digits per generated code
            clock: Returns the current UTC time
        """
        self._backend = backend
        self.ttl_minutes = ttl_minutes
        self.code_length = code_length
        self._clock = clock

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def _ttl_seconds(self, expires_at: datetime) -> int:
        return max(1, math.ceil((expires_at - self._clock()).total_seconds()))

    async def save(
        self,
        method: VerificationMethod,
        contact: str,
        draft_id: str,
        code: Optional[str] = None,
        ttl_minutes: Optional[int] = None,
    ) -> OTPEntry:
        """
        Store a code, overwriting any earlier entry for the key and restarting its TTL.

        Args:
            method: Delivery channel
            contact: Phone, e-mail or messenger id
            draft_id: Draft the code gates
            code: Code to store (generated when omitted)
            ttl_minutes: Lifetime override

        Returns:
            The stored entry
        """
        ttl = ttl_minutes if ttl_minutes is not None else self.ttl_minutes
        entry = OTPEntry(
            code=code or generate_code(self.code_length),
            expires_at=self._clock() + timedelta(minutes=ttl),
        )
        await self._backend.save(otp_key(method, contact, draft_id), entry.to_dict(), ttl * 60)
        logger.debug(
            f"Code stored for {method.value}:{mask_contact(contact)} draft {draft_id} "
            f"(ttl {ttl} min)"
        )
        return entry

    async def get(
        self, method: VerificationMethod, contact: str, draft_id: str
    ) -> Optional[OTPEntry]:
        """
        Get the live entry for the key.

        Returns:
            Entry, or None if absent or expired (expired entries are deleted)
        """
        key = otp_key(method, contact, draft_id)
        data = await self._backend.get(key)
        if data is None:
            return None
        entry = OTPEntry.from_dict(data)
        if entry.is_expired(self._clock()):
            await self._backend.delete(key)
            return None
        return entry

    async def verify(
        self, method: VerificationMethod, contact: str, draft_id: str, code: str
    ) -> VerificationOutcome:
        """
        Compare a submitted code. Does not mutate the entry.

        Returns:
            OK, MISMATCH, or EXPIRED when no live entry exists
        """
        entry = await self.get(method, contact, draft_id)
        if entry is None:
            return VerificationOutcome.EXPIRED
        if secrets.compare_digest(entry.code, (code or "").strip()):
            return VerificationOutcome.OK
        return VerificationOutcome.MISMATCH

    async def confirm(
        self,
        method: VerificationMethod,
        contact: str,
        draft_id: str,
        actor: Optional[str] = None,
    ) -> bool:
        """
        Mark the entry confirmed by an out-of-band channel, keeping its expiry.

        Args:
            method: Delivery channel
            contact: Contact the code was issued for
            draft_id: Draft the code gates
            actor: External identity that pressed the button

        Returns:
            True if a live entry was confirmed, False if none exists
        """
        entry = await self.get(method, contact, draft_id)
        if entry is None:
            return False
        entry.confirmed = True
        entry.confirmed_at = self._clock()
        entry.actor = actor
        await self._backend.save(
            otp_key(method, contact, draft_id), entry.to_dict(), self._ttl_seconds(entry.expires_at)
        )
        logger.info(f"Code confirmed out of band for draft {draft_id} via {method.value}")
        return True

    async def is_confirmed(
        self, method: VerificationMethod, contact: str, draft_id: str
    ) -> ConfirmationStatus:
        """Poll out-of-band confirmation state."""
        entry = await self.get(method, contact, draft_id)
        if entry is None:
            return ConfirmationStatus.EXPIRED
        return ConfirmationStatus.CONFIRMED if entry.confirmed else ConfirmationStatus.PENDING

    async def delete(self, method: VerificationMethod, contact: str, draft_id: str) -> bool:
        return await self._backend.delete(otp_key(method, contact, draft_id))

    async def delete_key(self, key: str) -> bool:
        """Delete by raw store key (as recorded on a draft)."""
        return await self._backend.delete(key)

    async def cleanup_expired(self) -> int:
        return await self._backend.cleanup_expired()
