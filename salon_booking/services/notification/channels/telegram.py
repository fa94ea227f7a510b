"""Telegram notification channel."""

from typing import Optional

from loguru import logger
from telegram import Bot
from telegram.error import TelegramError

from ..base import NotificationChannel, TelegramConfig


class TelegramChannel(NotificationChannel):
    """Sends messages to a chat id through the Telegram Bot API."""

    def __init__(self, config: TelegramConfig):
        """
        Initialize Telegram channel.

        Args:
            config: Telegram configuration
        """
        self._config = config
        self._bot: Optional[Bot] = None

    @property
    def name(self) -> str:
        return "telegram"

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def _get_or_create_bot(self) -> Optional[Bot]:
        if self._bot is not None:
            return self._bot
        if not self._config.bot_token:
            logger.error("Telegram bot_token missing")
            return None
        self._bot = Bot(token=self._config.bot_token)
        return self._bot

    async def send(self, recipient: str, message: str) -> bool:
        bot = self._get_or_create_bot()
        if bot is None:
            return False
        try:
            await bot.send_message(chat_id=recipient, text=message)
        except TelegramError as e:
            logger.error(f"Telegram send failed: {e}")
            return False
        logger.info("Telegram message sent")
        return True
