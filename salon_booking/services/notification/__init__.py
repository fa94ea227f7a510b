"""Notification dispatch for verification codes and booking confirmations."""

from .base import EmailConfig, NotificationChannel, SmsConfig, TelegramConfig
from .service import NotificationService

__all__ = [
    "EmailConfig",
    "NotificationChannel",
    "NotificationService",
    "SmsConfig",
    "TelegramConfig",
]
