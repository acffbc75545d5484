"""Telegram transport: Bot API client, update parsing, polling, webhook."""

from projectbot.telegram.client import DEFAULT_API_BASE_URL, TelegramApiError, TelegramClient
from projectbot.telegram.polling import run_polling
from projectbot.telegram.transport import TelegramTransport, keyboard_markup
from projectbot.telegram.updates import caller_from, parse_update
from projectbot.telegram.webhook import create_webhook_app

__all__ = [
    "DEFAULT_API_BASE_URL",
    "TelegramApiError",
    "TelegramClient",
    "TelegramTransport",
    "keyboard_markup",
    "caller_from",
    "parse_update",
    "run_polling",
    "create_webhook_app",
]
