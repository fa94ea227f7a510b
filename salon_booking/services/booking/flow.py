"""Booking flow: draft creation, code verification and promotion."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from loguru import logger

from salon_booking.core.enums import (
    ConfirmationStatus,
    DraftSource,
    VerificationMethod,
    VerificationOutcome,
)
from salon_booking.core.exceptions import (
    CodeMismatchError,
    InvalidInputError,
    RegistrationExpiredError,
    ServiceUnavailableError,
    SlotTakenError,
)
from salon_booking.repositories.base import BookingStore
from salon_booking.services.booking.drafts import Draft, DraftRegistry
from salon_booking.services.booking.reservation import PromotionResult, ReservationTransactor
from salon_booking.services.notification.service import NotificationService
from salon_booking.services.otp.models import otp_key
from salon_booking.services.otp.store import OTPStore
from salon_booking.utils.masking import mask_contact


@dataclass(frozen=True)
class IssuedCode:
    """Confirmation that a code was stored and handed to the notifier."""

    draft_id: str
    method: VerificationMethod
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draft_id": self.draft_id,
            "method": self.method.value,
            "expires_at": self.expires_at.isoformat(),
        }


class BookingFlowService:
    """
    Facade over drafts, one-time codes and the reservation transactor.

    A code is single use: the first successful verification (or polled
    out-of-band confirmation) marks the draft verified and deletes the entry.
    """

    def __init__(
        self,
        store: BookingStore,
        drafts: DraftRegistry,
        otp_store: OTPStore,
        notifications: Optional[NotificationService] = None,
        min_lead_minutes: int = 60,
    ):
        self.store = store
        self.drafts = drafts
        self.otp_store = otp_store
        self.notifications = notifications
        self.min_lead_minutes = min_lead_minutes
        self.transactor = ReservationTransactor(store, drafts, otp_store)

    # Drafts
    async def create_draft(
        self,
        service_id: str,
        master_id: str,
        start_at: datetime,
        end_at: datetime,
        source: DraftSource = DraftSource.DIRECT,
        customer_name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        notes: Optional[str] = None,
        channel_meta: Optional[Dict[str, Any]] = None,
    ) -> Draft:
        """
        Start a booking for a chosen slot.

        Raises:
            InvalidInputError: Empty/naive interval or start earlier than the minimum lead time
            ServiceUnavailableError: Unknown or inactive service
            SlotTakenError: The slot already overlaps a booked appointment
        """
        if start_at.tzinfo is None or end_at.tzinfo is None:
            raise InvalidInputError("Start and end must carry a timezone", field="start_at")
        if end_at <= start_at:
            raise InvalidInputError("End must be after start", field="end_at")

        earliest = self.drafts.now() + timedelta(minutes=self.min_lead_minutes)
        if start_at < earliest:
            raise InvalidInputError(
                f"Bookings must start at least {self.min_lead_minutes} minutes from now",
                field="start_at",
            )

        service = await self.store.get_service(service_id)
        if service is None or not service.is_active:
            raise ServiceUnavailableError(service_id)

        # Advisory only; the authoritative check runs under the lock at promotion
        existing = await self.store.list_blocking_appointments(start_at, end_at, master_id)
        if existing:
            raise SlotTakenError(master_id, conflicting_appointment_id=existing[0].id)

        return await self.drafts.create(
            source=source,
            service_id=service_id,
            master_id=master_id,
            start_at=start_at,
            end_at=end_at,
            customer_name=customer_name,
            phone=phone,
            email=email,
            notes=notes,
            channel_meta=channel_meta,
        )

    async def get_draft(self, draft_id: str) -> Draft:
        return await self.drafts.get(draft_id)

    async def update_contact(self, draft_id: str, **fields: Any) -> Draft:
        return await self.drafts.update_contact(draft_id, **fields)

    # Codes
    @staticmethod
    def _contact_for(draft: Draft, method: VerificationMethod, contact: Optional[str]) -> str:
        if contact:
            return contact
        if method == VerificationMethod.EMAIL:
            value = draft.email
        elif method == VerificationMethod.SMS:
            value = draft.phone
        else:
            value = draft.channel_meta.get("telegram_chat_id")
        if not value:
            raise InvalidInputError(
                f"Draft has no contact for {method.value} verification", field="contact"
            )
        return str(value)

    async def issue_code(
        self,
        draft_id: str,
        method: VerificationMethod,
        contact: Optional[str] = None,
    ) -> IssuedCode:
        """
        Issue (or re-issue) a code and hand it to the notifier.

        Re-issuing for the same key replaces the previous code and restarts its lifetime.
        """
        draft = await self.drafts.get(draft_id)
        if draft.verified:
            raise InvalidInputError("Draft is already verified", field="draft_id")
        target = self._contact_for(draft, method, contact)

        entry = await self.otp_store.save(method, target, draft_id)
        await self.drafts.mark_code_issued(draft_id, otp_key(method, target, draft_id))

        if self.notifications is not None:
            self.notifications.dispatch(
                method,
                target,
                f"Your booking code: {entry.code}. "
                f"It expires in {self.otp_store.ttl_minutes} minutes.",
            )
        logger.info(f"Code issued for draft {draft_id} via {method.value} to {mask_contact(target)}")
        return IssuedCode(draft_id=draft_id, method=method, expires_at=entry.expires_at)

    async def verify_code(
        self,
        draft_id: str,
        method: VerificationMethod,
        code: str,
        contact: Optional[str] = None,
    ) -> Draft:
        """
        Check a submitted code; on success the draft becomes verified and the code is consumed.

        Raises:
            CodeMismatchError: Wrong code (retry allowed until expiry)
            RegistrationExpiredError: No live code for this draft and contact
        """
        draft = await self.drafts.get(draft_id)
        if draft.verified:
            return draft
        target = self._contact_for(draft, method, contact)

        outcome = await self.otp_store.verify(method, target, draft_id, code)
        if outcome == VerificationOutcome.MISMATCH:
            logger.info(f"Code mismatch for draft {draft_id}")
            raise CodeMismatchError()
        if outcome == VerificationOutcome.EXPIRED:
            raise RegistrationExpiredError("Verification code expired", draft_id=draft_id)

        await self.otp_store.delete(method, target, draft_id)
        return await self.drafts.mark_verified(draft_id, via=method.value)

    async def confirm_out_of_band(
        self,
        draft_id: str,
        method: VerificationMethod,
        actor: str,
        contact: Optional[str] = None,
    ) -> bool:
        """
        Record a push-button confirmation (e.g. a messenger bot callback).

        Raises:
            RegistrationExpiredError: No live code to confirm
        """
        draft = await self.drafts.get(draft_id)
        if draft.verified:
            return True
        target = self._contact_for(draft, method, contact)
        if not await self.otp_store.confirm(method, target, draft_id, actor=actor):
            raise RegistrationExpiredError("Verification code expired", draft_id=draft_id)
        return True

    async def poll_confirmed(
        self,
        draft_id: str,
        method: VerificationMethod,
        contact: Optional[str] = None,
    ) -> ConfirmationStatus:
        """Client-side polling of an out-of-band confirmation."""
        draft = await self.drafts.get(draft_id)
        if draft.verified:
            return ConfirmationStatus.CONFIRMED
        target = self._contact_for(draft, method, contact)

        status = await self.otp_store.is_confirmed(method, target, draft_id)
        if status == ConfirmationStatus.CONFIRMED:
            await self.otp_store.delete(method, target, draft_id)
            await self.drafts.mark_verified(draft_id, via=method.value)
        return status

    async def verify_federated(self, draft_id: str, subject: str) -> Draft:
        """
        Accept an identity already proven by an external provider.

        Only drafts created through federated quick auth may skip codes.
        """
        draft = await self.drafts.get(draft_id)
        if draft.source != DraftSource.FEDERATED_QUICK_AUTH:
            raise InvalidInputError(
                "Draft was not created through federated quick auth", field="draft_id"
            )
        if draft.verified:
            return draft
        await self.drafts.update_contact(draft_id, channel_meta={"federated_subject": subject})
        return await self.drafts.mark_verified(draft_id, via=DraftSource.FEDERATED_QUICK_AUTH.value)

    # Promotion
    async def promote_draft(self, draft_id: str) -> PromotionResult:
        result = await self.transactor.promote(draft_id)
        if not result.already_promoted and self.notifications is not None:
            appointment = result.appointment
            if appointment is not None and appointment.email:
                self.notifications.dispatch(
                    VerificationMethod.EMAIL,
                    appointment.email,
                    f"Your appointment on {appointment.start_at.isoformat()} is booked "
                    f"(reference {appointment.id}).",
                )
        return result

    async def cleanup_expired(self) -> int:
        """Evict expired drafts and codes from the ephemeral store."""
        return await self.drafts.cleanup_expired() + await self.otp_store.cleanup_expired()
