"""Notification channels."""

from .email import EmailChannel
from .sms import SmsChannel
from .telegram import TelegramChannel

__all__ = ["EmailChannel", "SmsChannel", "TelegramChannel"]
