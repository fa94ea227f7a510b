"""SMS notification channel over an HTTP gateway."""

import asyncio

import aiohttp
from loguru import logger

from salon_booking.utils.masking import mask_phone

from ..base import NotificationChannel, SmsConfig


class SmsChannel(NotificationChannel):
    """Posts ``{"to", "text"}`` JSON to the configured gateway with a bearer token."""

    def __init__(self, config: SmsConfig, timeout_seconds: float = 10.0):
        self._config = config
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def name(self) -> str:
        return "sms"

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    async def send(self, recipient: str, message: str) -> bool:
        if not self._config.gateway_url:
            logger.error("SMS gateway_url missing")
            return False

        headers = {}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        payload = {"to": recipient, "text": message}

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(
                    self._config.gateway_url, json=payload, headers=headers
                ) as response:
                    if response.status in (200, 201, 202, 204):
                        logger.info(f"SMS sent to {mask_phone(recipient)}")
                        return True
                    logger.error(f"SMS gateway error: {response.status}")
                    return False
        except aiohttp.ClientError as e:
            logger.error(f"HTTP client error sending SMS: {e}")
            return False
        except asyncio.TimeoutError:
            logger.error("Timeout sending SMS")
            return False
