"""Outer dispatch boundary for inbound chat events.

Order of work for every event:

1. Access gate on the raw caller id. Denial sends the rejection notice
   and stops; nothing is read or written.
2. For text, anything that is not a command is ignored, and an unknown
   command name is answered without touching the database.
3. The caller is resolved to a User and that write is committed on its
   own, so a failing command never discards a first-contact User row.
4. The handler runs in a second unit of work. It commits on success and
   rolls back on any exception, which keeps multi-step mutations such
   as clear-pointer-then-soft-delete atomic.

DomainError becomes its formatted message. Any other exception is logged
with a traceback and becomes the generic notice, and the consumer keeps
going. Callback presses are always acknowledged.
"""

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from projectbot.bot.callback_router import CallbackRouter
from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply, CallbackEvent, TextMessageEvent
from projectbot.bot.router import CommandRouter, build_default_router, is_command, parse_command
from projectbot.bot.transport import BotTransport, send_reply
from projectbot.db.connection import get_db_context
from projectbot.db.models import User
from projectbot.errors.domain import DomainError, UnauthorizedError
from projectbot.errors.formatter import describe_error, format_error
from projectbot.errors.registry import GENERIC_ERROR_MESSAGE
from projectbot.services.access_control import AccessGate
from projectbot.services.user_service import CallerProfile, UserService

logger = logging.getLogger(__name__)

Handler = Callable[[BotServices, User], BotReply]


class UpdateDispatcher:
    """Single sequential consumer of text and callback events.

    Attributes:
        transport: Outbound message sink.
        gate: Allow-list check.
        session_factory: Creates one database session per unit of work.
        command_router: Frozen command registry.
        callback_router: Callback token resolver.
    """

    def __init__(
        self,
        transport: BotTransport,
        gate: AccessGate,
        session_factory: Callable[[], Session],
        command_router: CommandRouter | None = None,
        callback_router: CallbackRouter | None = None,
    ) -> None:
        self.transport = transport
        self.gate = gate
        self.session_factory = session_factory
        self.command_router = command_router or build_default_router()
        self.callback_router = callback_router or CallbackRouter()

    def dispatch(self, event: TextMessageEvent | CallbackEvent) -> None:
        if isinstance(event, CallbackEvent):
            self.handle_callback(event)
        else:
            self.handle_message(event)

    def handle_message(self, event: TextMessageEvent) -> None:
        """Route a text message and send the reply, if any."""
        try:
            self.gate.require_allowed(event.caller.external_id)

            if not is_command(event.text):
                logger.debug("Ignoring non-command text: chat_id=%s", event.chat_id)
                return

            command = parse_command(event.text)
            self.command_router.match(command.name)

            reply = self._run_for_caller(
                event.caller,
                lambda services, user: self.command_router.route(services, user, command),
            )
        except DomainError as e:
            logger.info("Command rejected: %s", describe_error(e))
            reply = BotReply(format_error(e))
        except Exception:
            logger.exception("Error handling message: chat_id=%s", event.chat_id)
            reply = BotReply(GENERIC_ERROR_MESSAGE)

        send_reply(self.transport, event.chat_id, reply)

    def handle_callback(self, event: CallbackEvent) -> None:
        """Resolve a button press, reply in chat, and acknowledge it."""
        try:
            self.gate.require_allowed(event.caller.external_id)
        except UnauthorizedError as e:
            self.transport.answer_callback(event.callback_id, e.message)
            return

        try:
            reply = self._run_for_caller(
                event.caller,
                lambda services, user: self.callback_router.route(services, user, event.data),
            )
        except DomainError as e:
            logger.info("Callback rejected: %s", describe_error(e))
            reply = BotReply(format_error(e))
        except Exception:
            logger.exception("Error handling callback: chat_id=%s", event.chat_id)
            reply = BotReply(GENERIC_ERROR_MESSAGE)

        try:
            send_reply(self.transport, event.chat_id, reply)
        finally:
            self.transport.answer_callback(event.callback_id)

    def resolve_caller(self, caller: CallerProfile) -> int:
        """Resolve and commit the caller's User, returning its id.

        Raises:
            UnauthorizedError: If the user has been deactivated.
        """
        with get_db_context(self.session_factory) as db:
            user = UserService(db).resolve(caller)
            user_id, is_active = user.id, user.is_active

        if not is_active:
            logger.warning("Deactivated user refused: external_id=%s", caller.external_id)
            raise UnauthorizedError()
        return user_id

    def _run_for_caller(self, caller: CallerProfile, handler: Handler) -> BotReply:
        user_id = self.resolve_caller(caller)

        with get_db_context(self.session_factory) as db:
            services = BotServices.from_session(db)
            user = services.users.find_by_id(user_id)
            if user is None:
                raise UnauthorizedError()
            return handler(services, user)
