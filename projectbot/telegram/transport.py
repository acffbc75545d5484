"""BotTransport implementation on the Telegram Bot API."""

import logging
from typing import Any

from projectbot.bot.events import InlineKeyboard
from projectbot.telegram.client import TelegramApiError, TelegramClient

logger = logging.getLogger(__name__)


def keyboard_markup(keyboard: InlineKeyboard) -> dict[str, Any]:
    """Render button rows as an InlineKeyboardMarkup object."""
    return {
        "inline_keyboard": [
            [{"text": b.text, "callback_data": b.callback_data} for b in row]
            for row in keyboard
        ]
    }


class TelegramTransport:
    """Sends replies through a TelegramClient.

    Delivery failures are logged and swallowed so one bad chat never
    stops the update consumer.
    """

    def __init__(self, client: TelegramClient) -> None:
        self.client = client

    def send_text(self, chat_id: int, text: str) -> None:
        try:
            self.client.send_message(chat_id, text)
        except TelegramApiError as e:
            logger.error("Failed to send message: chat_id=%s, error=%s", chat_id, e)

    def send_text_with_keyboard(
        self, chat_id: int, text: str, keyboard: InlineKeyboard
    ) -> None:
        try:
            self.client.send_message(chat_id, text, reply_markup=keyboard_markup(keyboard))
        except TelegramApiError as e:
            logger.error(
                "Failed to send message with keyboard: chat_id=%s, error=%s", chat_id, e
            )

    def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        try:
            self.client.answer_callback_query(callback_id, text)
        except TelegramApiError as e:
            logger.error("Failed to answer callback: id=%s, error=%s", callback_id, e)
