"""Base notification types: channel ABC and config dataclasses."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class TelegramConfig:
    """Telegram Bot API configuration."""

    enabled: bool = False
    bot_token: Optional[str] = None

    def __repr__(self) -> str:
        masked_token = "'***'" if self.bot_token else "None"
        return f"TelegramConfig(enabled={self.enabled}, bot_token={masked_token})"


@dataclass
class EmailConfig:
    """SMTP configuration."""

    enabled: bool = False
    sender: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    smtp_server: str = "localhost"
    smtp_port: int = 587

    def __repr__(self) -> str:
        masked_password = "'***'" if self.password else "None"
        return (
            f"EmailConfig(enabled={self.enabled}, sender={self.sender!r}, "
            f"username={self.username!r}, password={masked_password}, "
            f"smtp_server={self.smtp_server!r}, smtp_port={self.smtp_port})"
        )


@dataclass
class SmsConfig:
    """HTTP SMS gateway configuration."""

    enabled: bool = False
    gateway_url: Optional[str] = None
    token: Optional[str] = None

    def __repr__(self) -> str:
        masked_token = "'***'" if self.token else "None"
        return (
            f"SmsConfig(enabled={self.enabled}, gateway_url={self.gateway_url!r}, "
            f"token={masked_token})"
        )


class NotificationChannel(ABC):
    """Abstract base class for notification channels."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Channel name, matching a ``VerificationMethod`` value."""
        pass

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Check if channel is enabled."""
        pass

    @abstractmethod
    async def send(self, recipient: str, message: str) -> bool:
        """
        Deliver a message.

        Args:
            recipient: Phone number, e-mail address or messenger chat id
            message: Plain-text message

        Returns:
            True if the provider accepted the message
        """
        pass
