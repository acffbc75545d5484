"""Outbound transport protocol used by the dispatcher."""

from typing import Protocol

from projectbot.bot.events import BotReply, InlineKeyboard


class BotTransport(Protocol):
    """Operations the core needs from a chat transport.

    Implementations log and swallow delivery failures so a broken send
    never stops the event consumer.
    """

    def send_text(self, chat_id: int, text: str) -> None: ...

    def send_text_with_keyboard(
        self, chat_id: int, text: str, keyboard: InlineKeyboard
    ) -> None: ...

    def answer_callback(self, callback_id: str, text: str | None = None) -> None: ...


def send_reply(transport: BotTransport, chat_id: int, reply: BotReply) -> None:
    """Deliver a BotReply, choosing the keyboard variant when needed."""
    if reply.keyboard:
        transport.send_text_with_keyboard(chat_id, reply.text, reply.keyboard)
    else:
        transport.send_text(chat_id, reply.text)
