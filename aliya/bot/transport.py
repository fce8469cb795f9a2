from __future__ import annotations

import logging

from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger("aliya-bot")


class ReminderDeliveryError(RuntimeError):
    pass


class TelegramTransport:
    """Outbound messages that are not replies to an inbound update (reminders)."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(self, user_id: str, text: str) -> None:
        try:
            await self._bot.send_message(chat_id=user_id, text=text)
        except TelegramError as e:
            raise ReminderDeliveryError(f"send to {user_id} failed: {e}") from e
