"""Command parsing and the command handler registry.

The registry is built once at startup and frozen; nothing registers
commands while events are being handled. A duplicate command name is a
configuration error raised during construction, never at dispatch time.

Example:
    router = build_default_router()
    parsed = parse_command("/select@my_bot api")
    handler = router.match(parsed.name)
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from projectbot.bot.commands import (
    ArchiveCommand,
    CommandHandler,
    CurrentCommand,
    DeleteCommand,
    DescribeCommand,
    HelpCommand,
    NewProjectCommand,
    ProjectsCommand,
    RenameCommand,
    SelectCommand,
    SetDirCommand,
    StartCommand,
    UnarchiveCommand,
)
from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply
from projectbot.db.models import User
from projectbot.errors.domain import UnknownCommandError

logger = logging.getLogger(__name__)

COMMAND_MARKER = "/"

_WHITESPACE = re.compile(r"\s+")


class DuplicateCommandNameError(Exception):
    """Two handlers claim the same command name."""


class RegistryFrozenError(Exception):
    """Attempted to register a handler after startup."""


@dataclass(frozen=True)
class ParsedCommand:
    """Command text split into a lookup name and its argument string.

    Attributes:
        name: Lower-cased command name without marker or @suffix.
        args: Everything after the first whitespace run, may be empty.
    """

    name: str
    args: str


def is_command(text: str | None) -> bool:
    return bool(text) and text.strip().startswith(COMMAND_MARKER)


def parse_command(text: str) -> ParsedCommand:
    """Split '/name[@suffix] args' into name and args.

    Args:
        text: Raw message text beginning with the command marker.

    Returns:
        ParsedCommand with a normalized name.

    Raises:
        ValueError: If the text does not begin with the command marker.
    """
    clean = text.strip()
    if not clean.startswith(COMMAND_MARKER):
        raise ValueError(f"Not a command: {text!r}")

    parts = _WHITESPACE.split(clean, maxsplit=1)
    token = parts[0][len(COMMAND_MARKER):].lower()
    args = parts[1] if len(parts) > 1 else ""

    at_index = token.find("@")
    if at_index > 0:
        token = token[:at_index]

    return ParsedCommand(name=token, args=args)


class CommandRouter:
    """Registry mapping lower-case command names to handlers."""

    def __init__(self, handlers: Iterable[CommandHandler] = ()) -> None:
        self._registry: dict[str, CommandHandler] = {}
        self._handlers: Mapping[str, CommandHandler] = MappingProxyType(self._registry)
        self._frozen = False
        for handler in handlers:
            self.register(handler)

    def register(self, handler: CommandHandler) -> None:
        """Add a handler.

        Raises:
            RegistryFrozenError: If freeze() was already called.
            DuplicateCommandNameError: If the name is taken.
            ValueError: If the handler has no command name.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register /{handler.command_name}: registry is frozen"
            )

        name = handler.command_name.lower()
        if not name:
            raise ValueError(f"{type(handler).__name__} has no command_name")
        if name in self._handlers:
            existing = type(self._handlers[name]).__name__
            raise DuplicateCommandNameError(
                f"Command /{name} registered by both {existing} and "
                f"{type(handler).__name__}"
            )

        self._registry[name] = handler
        logger.debug("Registered command handler: /%s", name)

    def freeze(self) -> None:
        """Make the registry read-only."""
        if self._frozen:
            return
        self._frozen = True
        logger.info("Registered %d command handlers", len(self._handlers))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def handlers(self) -> list[CommandHandler]:
        """Handlers in registration order."""
        return list(self._handlers.values())

    def names(self) -> list[str]:
        return list(self._handlers)

    def match(self, name: str) -> CommandHandler:
        """Look up a handler by normalized name.

        Raises:
            UnknownCommandError: If no handler is registered under name.
        """
        handler = self._handlers.get(name.lower())
        if handler is None:
            logger.debug("Unknown command: %s", name)
            raise UnknownCommandError(name)
        return handler

    def route(self, services: BotServices, user: User, command: ParsedCommand) -> BotReply:
        handler = self.match(command.name)
        logger.debug("Routing command /%s for user_id=%s", command.name, user.id)
        return handler.execute(services, user, command.args)


def build_default_router() -> CommandRouter:
    """Register every built-in command and freeze the registry."""
    router = CommandRouter()
    for handler in (
        StartCommand(),
        HelpCommand(router),
        NewProjectCommand(),
        ProjectsCommand(),
        SelectCommand(),
        CurrentCommand(),
        ArchiveCommand(),
        UnarchiveCommand(),
        DeleteCommand(),
        RenameCommand(),
        DescribeCommand(),
        SetDirCommand(),
    ):
        router.register(handler)
    router.freeze()
    return router
