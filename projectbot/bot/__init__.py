"""Transport-neutral bot core.

Contains:
- Event and reply types exchanged with transports
- Callback token protocol and keyboard builders
- Command handlers and the frozen command registry
- Callback resolution and the outer dispatcher
"""

from projectbot.bot.callback_router import CallbackRouter
from projectbot.bot.callbacks import (
    CANCEL_DELETE,
    CONFIRM_DELETE_PREFIX,
    SELECT_PROJECT_PREFIX,
    CallbackAction,
    CallbackToken,
    parse_callback_token,
)
from projectbot.bot.context import BotServices
from projectbot.bot.dispatcher import UpdateDispatcher
from projectbot.bot.events import (
    BotReply,
    CallbackEvent,
    InlineButton,
    InlineKeyboard,
    TextMessageEvent,
)
from projectbot.bot.router import (
    CommandRouter,
    DuplicateCommandNameError,
    ParsedCommand,
    build_default_router,
    parse_command,
)
from projectbot.bot.transport import BotTransport

__all__ = [
    "BotReply",
    "CallbackEvent",
    "InlineButton",
    "InlineKeyboard",
    "TextMessageEvent",
    "BotTransport",
    "BotServices",
    "CallbackAction",
    "CallbackToken",
    "parse_callback_token",
    "SELECT_PROJECT_PREFIX",
    "CONFIRM_DELETE_PREFIX",
    "CANCEL_DELETE",
    "CommandRouter",
    "DuplicateCommandNameError",
    "ParsedCommand",
    "build_default_router",
    "parse_command",
    "CallbackRouter",
    "UpdateDispatcher",
]
