"""Conversion of raw Telegram updates into transport-neutral events."""

import logging
from typing import Any

from projectbot.bot.events import CallbackEvent, TextMessageEvent
from projectbot.services.user_service import CallerProfile

logger = logging.getLogger(__name__)


def caller_from(sender: dict[str, Any]) -> CallerProfile:
    """Build a CallerProfile from a Telegram ``User`` object."""
    return CallerProfile(
        external_id=int(sender["id"]),
        username=sender.get("username"),
        first_name=sender.get("first_name"),
        last_name=sender.get("last_name"),
        language_code=sender.get("language_code"),
    )


def parse_update(update: dict[str, Any]) -> TextMessageEvent | CallbackEvent | None:
    """Extract the event carried by an update.

    Only text messages and callback queries with data are of interest;
    every other update type (edits, channel posts, stickers, ...) maps
    to None.

    Args:
        update: Decoded Telegram ``Update`` object.

    Returns:
        The event, or None when the update carries nothing to handle.
    """
    message = update.get("message")
    if isinstance(message, dict):
        sender = message.get("from")
        chat = message.get("chat") or {}
        text = message.get("text")
        if not sender or "id" not in chat or not isinstance(text, str):
            return None
        return TextMessageEvent(
            caller=caller_from(sender),
            chat_id=int(chat["id"]),
            text=text,
        )

    query = update.get("callback_query")
    if isinstance(query, dict):
        sender = query.get("from")
        data = query.get("data")
        chat = (query.get("message") or {}).get("chat") or {}
        if not sender or data is None or "id" not in chat:
            return None
        return CallbackEvent(
            caller=caller_from(sender),
            chat_id=int(chat["id"]),
            callback_id=str(query["id"]),
            data=data,
        )

    logger.debug("Ignoring update without message or callback: id=%s", update.get("update_id"))
    return None
