"""Wiring of stores and services into one booking engine."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from salon_booking.core.config.settings import BookingSettings, get_settings
from salon_booking.core.enums import DraftSource, StorageBackend
from salon_booking.models.database import Database
from salon_booking.repositories.base import BookingStore
from salon_booking.repositories.memory import InMemoryBookingStore
from salon_booking.repositories.postgres import PostgresBookingStore
from salon_booking.services.booking.drafts import DraftRegistry
from salon_booking.services.booking.flow import BookingFlowService
from salon_booking.services.notification.service import NotificationService
from salon_booking.services.otp.store import OTPStore
from salon_booking.services.scheduling.availability import AvailabilityService
from salon_booking.utils.ttl_store import Clock, KeyValueBackend, create_backend, utc_now


def create_store(settings: BookingSettings) -> BookingStore:
    """Durable store selected by ``settings.storage_backend``."""
    if settings.storage_backend == StorageBackend.POSTGRES:
        return PostgresBookingStore(
            Database(database_url=settings.database_url, pool_size=settings.db_pool_size)
        )
    return InMemoryBookingStore()


@dataclass
class BookingEngine:
    """Everything a transport needs: availability queries and the booking flow."""

    settings: BookingSettings
    store: BookingStore
    backend: KeyValueBackend
    otp_store: OTPStore
    drafts: DraftRegistry
    availability: AvailabilityService
    flow: BookingFlowService
    notifications: NotificationService

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BookingSettings] = None,
        store: Optional[BookingStore] = None,
        backend: Optional[KeyValueBackend] = None,
        notifications: Optional[NotificationService] = None,
        clock: Clock = utc_now,
    ) -> "BookingEngine":
        """
        Build an engine, creating whatever collaborators were not supplied.

        Args:
            settings: Settings (defaults to the global singleton)
            store: Durable store (defaults to ``settings.storage_backend``)
            backend: Ephemeral TTL store (defaults to Redis if configured, else memory)
            notifications: Notification service (defaults to configured channels)
            clock: Returns the current UTC time

        Returns:
            BookingEngine instance
        """
        settings = settings or get_settings()
        store = store or create_store(settings)
        backend = backend or create_backend(
            settings.redis_url,
            eviction=settings.eviction_strategy,
            sweep_interval=settings.sweep_interval_seconds,
        )
        notifications = notifications or NotificationService.from_settings(settings)

        otp_store = OTPStore(
            backend,
            ttl_minutes=settings.otp_ttl_minutes,
            code_length=settings.otp_code_length,
            clock=clock,
        )
        drafts = DraftRegistry(
            backend,
            ttl_minutes={source: settings.draft_ttl_minutes(source) for source in DraftSource},
            promoted_retention_minutes=settings.promoted_draft_retention_minutes,
            clock=clock,
        )
        availability = AvailabilityService(
            store,
            timezone_name=settings.org_timezone,
            step_minutes=settings.slot_step_minutes,
            buffer_after_minutes=settings.buffer_after_minutes,
            min_lead_minutes=settings.min_lead_minutes,
            clock=clock,
        )
        flow = BookingFlowService(
            store,
            drafts,
            otp_store,
            notifications=notifications,
            min_lead_minutes=settings.min_lead_minutes,
        )
        return cls(
            settings=settings,
            store=store,
            backend=backend,
            otp_store=otp_store,
            drafts=drafts,
            availability=availability,
            flow=flow,
            notifications=notifications,
        )

    async def start(self) -> None:
        await self.store.connect()
        await self.backend.start()
        logger.info(
            f"Booking engine started (store: {type(self.store).__name__}, "
            f"ephemeral: {'redis' if self.backend.is_distributed else 'memory'}, "
            f"timezone: {self.settings.org_timezone})"
        )

    async def stop(self) -> None:
        await self.notifications.aclose()
        await self.backend.stop()
        await self.store.close()
        logger.info("Booking engine stopped")
