"""Ephemeral booking drafts and their lifecycle."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from salon_booking.constants import KeyPrefixes
from salon_booking.core.enums import DraftSource, DraftState
from salon_booking.core.exceptions import (
    DraftNotFoundError,
    InvalidInputError,
    RegistrationExpiredError,
)
from salon_booking.models.entities import generate_id
from salon_booking.utils.ttl_store import Clock, KeyValueBackend, utc_now

DEFAULT_TTL_MINUTES: Dict[DraftSource, int] = {
    DraftSource.DIRECT: 30,
    DraftSource.SMS_OTP: 30,
    DraftSource.TELEGRAM_OTP: 30,
    DraftSource.FEDERATED_QUICK_AUTH: 15,
}

_CONTACT_FIELDS = ("customer_name", "phone", "email", "notes")


@dataclass
class Draft:
    """
    Booking in progress.

    ``service_id``, ``master_id``, ``start_at`` and ``end_at`` are fixed at
    creation. Contact fields and ``channel_meta`` (e.g. a messenger chat id or
    a federated identity subject) may be completed until the draft is verified.

    Attributes:
        id: Draft identifier
        source: Entry channel
        expires_at: UTC instant after which the draft is expired
        state: Lifecycle state as last stored
        otp_keys: Store keys of codes issued for this draft
        verified_via: Verification method that succeeded
        appointment_id: Set once promoted
    """

    id: str
    source: DraftSource
    service_id: str
    master_id: str
    start_at: datetime
    end_at: datetime
    expires_at: datetime
    state: DraftState = DraftState.CREATED
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    channel_meta: Dict[str, Any] = field(default_factory=dict)
    otp_keys: List[str] = field(default_factory=list)
    verified_via: Optional[str] = None
    appointment_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def verified(self) -> bool:
        return self.state in (DraftState.VERIFIED, DraftState.PROMOTED)

    def is_expired(self, now: datetime) -> bool:
        """Promoted drafts never expire; any other state does once ``now`` passes ``expires_at``."""
        return self.state != DraftState.PROMOTED and now > self.expires_at

    def effective_state(self, now: datetime) -> DraftState:
        return DraftState.EXPIRED if self.is_expired(now) else self.state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "service_id": self.service_id,
            "master_id": self.master_id,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "state": self.state.value,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
            "channel_meta": dict(self.channel_meta),
            "otp_keys": list(self.otp_keys),
            "verified_via": self.verified_via,
            "appointment_id": self.appointment_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Draft":
        created_at = data.get("created_at")
        return cls(
            id=data["id"],
            source=DraftSource(data["source"]),
            service_id=data["service_id"],
            master_id=data["master_id"],
            start_at=datetime.fromisoformat(data["start_at"]),
            end_at=datetime.fromisoformat(data["end_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            state=DraftState(data.get("state", DraftState.CREATED.value)),
            customer_name=data.get("customer_name"),
            phone=data.get("phone"),
            email=data.get("email"),
            notes=data.get("notes"),
            channel_meta=dict(data.get("channel_meta") or {}),
            otp_keys=list(data.get("otp_keys") or []),
            verified_via=data.get("verified_via"),
            appointment_id=data.get("appointment_id"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


def draft_key(draft_id: str) -> str:
    return f"{KeyPrefixes.DRAFT}:{draft_id}"


class DraftRegistry:
    """
    Stores drafts in a TTL backend and enforces their state machine.

    ``Created -> CodeIssued -> Verified -> Promoted``; any non-terminal state
    becomes ``Expired`` once ``expires_at`` passes. Expired drafts are deleted
    the first time they are read, or by the backend after a short grace period.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        ttl_minutes: Optional[Mapping[DraftSource, int]] = None,
        promoted_retention_minutes: int = 60,
        expired_grace_minutes: int = 10,
        clock: Clock = utc_now,
    ):
        self._backend = backend
        self._ttl_minutes = dict(DEFAULT_TTL_MINUTES)
        if ttl_minutes:
            self._ttl_minutes.update(ttl_minutes)
        self._promoted_retention = timedelta(minutes=promoted_retention_minutes)
        # Expired drafts stay readable for a while so callers see "expired", not "unknown"
        self._expired_grace = timedelta(minutes=expired_grace_minutes)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def ttl_for(self, source: DraftSource) -> int:
        return self._ttl_minutes[source]

    async def _store(self, draft: Draft, keep_until: datetime) -> None:
        ttl_seconds = max(1, math.ceil((keep_until - self._clock()).total_seconds()))
        await self._backend.save(draft_key(draft.id), draft.to_dict(), ttl_seconds)

    async def create(
        self,
        source: DraftSource,
        service_id: str,
        master_id: str,
        start_at: datetime,
        end_at: datetime,
        customer_name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        notes: Optional[str] = None,
        channel_meta: Optional[Dict[str, Any]] = None,
    ) -> Draft:
        """
        Create a draft with the lifetime configured for its source.

        Raises:
            InvalidInputError: If the interval is empty or not timezone-aware
        """
        if start_at.tzinfo is None or end_at.tzinfo is None:
            raise InvalidInputError("Draft instants must be timezone-aware", field="start_at")
        if end_at <= start_at:
            raise InvalidInputError("Draft end must be after its start", field="end_at")

        now = self._clock()
        draft = Draft(
            id=generate_id("drf"),
            source=source,
            service_id=service_id,
            master_id=master_id,
            start_at=start_at,
            end_at=end_at,
            expires_at=now + timedelta(minutes=self.ttl_for(source)),
            customer_name=customer_name,
            phone=phone,
            email=email,
            notes=notes,
            channel_meta=dict(channel_meta or {}),
            created_at=now,
        )
        await self._store(draft, draft.expires_at + self._expired_grace)
        logger.info(
            f"Draft {draft.id} created via {source.value} for master {master_id} "
            f"at {start_at.isoformat()}"
        )
        return draft

    async def find(self, draft_id: str) -> Optional[Draft]:
        """Raw lookup without expiry enforcement."""
        data = await self._backend.get(draft_key(draft_id))
        return Draft.from_dict(data) if data else None

    async def get(self, draft_id: str) -> Draft:
        """
        Get a live or promoted draft.

        Raises:
            DraftNotFoundError: If no such draft exists
            RegistrationExpiredError: If the draft has expired (it is deleted)
        """
        draft = await self.find(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        if draft.is_expired(self._clock()):
            await self.discard(draft_id)
            logger.info(f"Draft {draft_id} expired")
            raise RegistrationExpiredError("Booking draft expired", draft_id=draft_id)
        return draft

    async def update_contact(self, draft_id: str, **fields: Any) -> Draft:
        """
        Fill in contact fields of an unverified draft.

        Args:
            draft_id: Draft identifier
            **fields: Any of ``customer_name``, ``phone``, ``email``, ``notes``
                and ``channel_meta`` (merged). None values are ignored.

        Raises:
            InvalidInputError: On unknown fields or if the draft is already verified
        """
        unknown = set(fields) - set(_CONTACT_FIELDS) - {"channel_meta"}
        if unknown:
            raise InvalidInputError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        draft = await self.get(draft_id)
        if draft.verified:
            raise InvalidInputError("Contact cannot change after verification", field="contact")

        for name in _CONTACT_FIELDS:
            value = fields.get(name)
            if value is not None:
                setattr(draft, name, value)
        if fields.get("channel_meta"):
            draft.channel_meta.update(fields["channel_meta"])

        await self._store(draft, draft.expires_at + self._expired_grace)
        return draft

    async def mark_code_issued(self, draft_id: str, otp_key: str) -> Draft:
        draft = await self.get(draft_id)
        if draft.verified:
            raise InvalidInputError("Draft is already verified", field="draft_id")
        if otp_key not in draft.otp_keys:
            draft.otp_keys.append(otp_key)
        draft.state = DraftState.CODE_ISSUED
        await self._store(draft, draft.expires_at + self._expired_grace)
        return draft

    async def mark_verified(self, draft_id: str, via: str) -> Draft:
        draft = await self.get(draft_id)
        if draft.verified:
            return draft
        draft.state = DraftState.VERIFIED
        draft.verified_via = via
        await self._store(draft, draft.expires_at + self._expired_grace)
        logger.info(f"Draft {draft_id} verified via {via}")
        return draft

    async def mark_promoted(self, draft_id: str, appointment_id: str) -> Draft:
        """
        Retire a draft as promoted.

        The record is kept for the promoted-draft retention period so duplicate
        submissions can be answered with the same appointment id.
        """
        draft = await self.find(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        draft.state = DraftState.PROMOTED
        draft.appointment_id = appointment_id
        await self._store(draft, self._clock() + self._promoted_retention)
        return draft

    async def discard(self, draft_id: str) -> bool:
        return await self._backend.delete(draft_key(draft_id))

    async def cleanup_expired(self) -> int:
        return await self._backend.cleanup_expired()
