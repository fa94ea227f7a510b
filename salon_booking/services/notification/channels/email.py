"""Email notification channel."""

from email.message import EmailMessage

import aiosmtplib
from loguru import logger

from salon_booking.utils.masking import mask_email

from ..base import EmailConfig, NotificationChannel


class EmailChannel(NotificationChannel):
    """Email notification channel."""

    def __init__(self, config: EmailConfig, subject: str = "Your booking code"):
        """
        Initialize Email channel.

        Args:
            config: Email configuration
            subject: Subject line for every message
        """
        self._config = config
        self._subject = subject

    @property
    def name(self) -> str:
        return "email"

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    async def send(self, recipient: str, message: str) -> bool:
        if not self._config.sender:
            logger.error("Email sender missing")
            return False

        email = EmailMessage()
        email["From"] = self._config.sender
        email["To"] = recipient
        email["Subject"] = self._subject
        email.set_content(message)

        try:
            await aiosmtplib.send(
                email,
                hostname=self._config.smtp_server,
                port=self._config.smtp_port,
                username=self._config.username,
                password=self._config.password,
                start_tls=True,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {mask_email(recipient)}: {e}")
            return False

        logger.info(f"Email sent to {mask_email(recipient)}")
        return True
