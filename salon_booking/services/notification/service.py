"""NotificationService: fire-and-forget dispatch over the configured channels."""

import asyncio
from typing import Dict, Iterable, Optional, Set

from loguru import logger

from salon_booking.core.config.settings import BookingSettings
from salon_booking.core.enums import VerificationMethod
from salon_booking.utils.masking import mask_contact

from .base import EmailConfig, NotificationChannel, SmsConfig, TelegramConfig
from .channels.email import EmailChannel
from .channels.sms import SmsChannel
from .channels.telegram import TelegramChannel


class NotificationService:
    """
    Routes messages to the channel matching a verification method.

    Delivery never blocks or fails the caller: each message is sent in its own
    task, and failures (exceptions or a False result) are logged, never retried.
    """

    def __init__(self, channels: Optional[Iterable[NotificationChannel]] = None):
        self._channels: Dict[str, NotificationChannel] = {}
        for channel in channels or []:
            self.register(channel)
        self._pending: Set["asyncio.Task[bool]"] = set()
        logger.info(
            f"NotificationService initialized (channels: {', '.join(self.enabled_channels) or 'none'})"
        )

    @classmethod
    def from_settings(cls, settings: BookingSettings) -> "NotificationService":
        """Build the service with every channel that has credentials configured."""
        channels: list = []
        if settings.telegram_bot_token:
            channels.append(
                TelegramChannel(
                    TelegramConfig(
                        enabled=True,
                        bot_token=settings.telegram_bot_token.get_secret_value(),
                    )
                )
            )
        if settings.smtp_host and settings.smtp_sender:
            channels.append(
                EmailChannel(
                    EmailConfig(
                        enabled=True,
                        sender=settings.smtp_sender,
                        username=settings.smtp_username,
                        password=(
                            settings.smtp_password.get_secret_value()
                            if settings.smtp_password
                            else None
                        ),
                        smtp_server=settings.smtp_host,
                        smtp_port=settings.smtp_port,
                    )
                )
            )
        if settings.sms_gateway_url:
            channels.append(
                SmsChannel(
                    SmsConfig(
                        enabled=True,
                        gateway_url=settings.sms_gateway_url,
                        token=(
                            settings.sms_gateway_token.get_secret_value()
                            if settings.sms_gateway_token
                            else None
                        ),
                    )
                )
            )
        return cls(channels)

    def register(self, channel: NotificationChannel) -> None:
        self._channels[channel.name] = channel

    @property
    def enabled_channels(self) -> list:
        return [name for name, channel in self._channels.items() if channel.enabled]

    def dispatch(
        self, method: VerificationMethod, recipient: str, message: str
    ) -> Optional["asyncio.Task[bool]"]:
        """
        Schedule delivery and return immediately.

        Args:
            method: Channel to use
            recipient: Channel-specific address
            message: Plain-text message

        Returns:
            The delivery task, or None when no enabled channel matches
        """
        channel = self._channels.get(method.value)
        if channel is None or not channel.enabled:
            logger.warning(
                f"No enabled {method.value} channel; message to {mask_contact(recipient)} dropped"
            )
            return None

        task = asyncio.create_task(self._deliver(channel, recipient, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, channel: NotificationChannel, recipient: str, message: str) -> bool:
        try:
            delivered = await channel.send(recipient, message)
        except Exception as e:
            logger.error(f"{channel.name} delivery to {mask_contact(recipient)} raised: {e}")
            return False
        if not delivered:
            logger.warning(f"{channel.name} delivery to {mask_contact(recipient)} failed")
        return delivered

    async def aclose(self, timeout: float = 5.0) -> None:
        """Wait briefly for in-flight deliveries, then cancel the rest."""
        if not self._pending:
            return
        pending = list(self._pending)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} undelivered notification(s)")
