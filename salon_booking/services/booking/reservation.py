"""Promotion of verified drafts into appointments under the master lock."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from salon_booking.core.enums import AppointmentStatus
from salon_booking.core.exceptions import (
    DraftNotFoundError,
    NotVerifiedError,
    RegistrationExpiredError,
    SlotTakenError,
)
from salon_booking.models.entities import Appointment, generate_id
from salon_booking.repositories.base import BookingStore
from salon_booking.services.booking.drafts import Draft, DraftRegistry
from salon_booking.services.otp.store import OTPStore


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of a successful promotion; ``already_promoted`` marks an idempotent replay."""

    appointment_id: str
    already_promoted: bool = False
    appointment: Optional[Appointment] = None

    def to_dict(self) -> dict:
        return {
            "appointment_id": self.appointment_id,
            "already_promoted": self.already_promoted,
            "appointment": self.appointment.to_dict() if self.appointment else None,
        }


class ReservationTransactor:
    """
    Turns a verified draft into a PENDING appointment.

    The conflict check, the insert and the draft bookkeeping run inside
    ``store.reservation_scope(master_id)``, so promotions for one master are
    serialized while different masters proceed in parallel.
    """

    def __init__(self, store: BookingStore, drafts: DraftRegistry, otp_store: OTPStore):
        self.store = store
        self.drafts = drafts
        self.otp_store = otp_store

    async def promote(self, draft_id: str) -> PromotionResult:
        """
        Promote a draft.

        Args:
            draft_id: Draft identifier

        Returns:
            PromotionResult with the new (or previously created) appointment id

        Raises:
            DraftNotFoundError: If the draft does not exist
            RegistrationExpiredError: If the draft expired before promotion
            NotVerifiedError: If the draft was never verified
            SlotTakenError: If another appointment of the master overlaps
        """
        draft = await self.drafts.find(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        if draft.appointment_id:
            return PromotionResult(draft.appointment_id, already_promoted=True)

        # Expiry is decided before touching the lock
        if draft.is_expired(self.drafts.now()):
            await self._retire(draft)
            raise RegistrationExpiredError("Booking draft expired", draft_id=draft_id)
        if not draft.verified:
            raise NotVerifiedError(draft_id)

        async with self.store.reservation_scope(draft.master_id) as uow:
            current = await self.drafts.find(draft_id)
            if current is None:
                raise DraftNotFoundError(draft_id)
            if current.appointment_id:
                return PromotionResult(current.appointment_id, already_promoted=True)
            if current.is_expired(self.drafts.now()):
                raise RegistrationExpiredError("Booking draft expired", draft_id=draft_id)

            conflict = await uow.find_conflict(current.start_at, current.end_at)
            if conflict is not None:
                if conflict.draft_id != draft_id:
                    logger.warning(
                        f"Slot taken for draft {draft_id}: master {current.master_id} "
                        f"already has appointment {conflict.id}"
                    )
                    raise SlotTakenError(current.master_id, conflicting_appointment_id=conflict.id)
                # Same draft committed by a concurrent request
                await self.drafts.mark_promoted(draft_id, conflict.id)
                return PromotionResult(conflict.id, already_promoted=True, appointment=conflict)

            client = await uow.find_or_create_client(
                current.customer_name or "Client", current.phone, current.email
            )
            appointment = await uow.create_appointment(
                Appointment(
                    id=generate_id("apt"),
                    master_id=current.master_id,
                    service_id=current.service_id,
                    start_at=current.start_at,
                    end_at=current.end_at,
                    status=AppointmentStatus.PENDING,
                    client_id=client.id,
                    customer_name=current.customer_name,
                    phone=current.phone,
                    email=current.email,
                    notes=current.notes,
                    draft_id=current.id,
                )
            )
            # Marked under the lock: a queued promotion of this draft must
            # find it already promoted
            await self.drafts.mark_promoted(draft_id, appointment.id)
            await self._consume_codes(current)

        logger.info(
            f"Draft {draft_id} promoted to appointment {appointment.id} "
            f"(master {appointment.master_id}, {appointment.start_at.isoformat()})"
        )
        return PromotionResult(appointment.id, appointment=appointment)

    async def _consume_codes(self, draft: Draft) -> None:
        for key in draft.otp_keys:
            await self.otp_store.delete_key(key)

    async def _retire(self, draft: Draft) -> None:
        await self._consume_codes(draft)
        await self.drafts.discard(draft.id)
