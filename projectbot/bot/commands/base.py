"""Command handler capability interface."""

from abc import ABC, abstractmethod

from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply
from projectbot.db.models import User
from projectbot.errors.domain import InvalidArgumentError


class CommandHandler(ABC):
    """A chat command.

    Subclasses set command_name (lower-case, no leading slash), help_text,
    and optionally usage, then implement execute(). Handlers keep no
    mutable state; everything they touch goes through BotServices.

    Attributes:
        command_name: Registry key.
        help_text: One-line description for /help.
        usage: Argument synopsis appended to the command in /help.
        group: Heading the command is listed under in /help.
    """

    command_name: str = ""
    help_text: str = ""
    usage: str = ""
    group: str = "Other"

    @abstractmethod
    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        """Run the command.

        Args:
            services: Services bound to the current event's transaction.
            user: Resolved, authorized caller.
            args: Raw argument string following the command token.

        Returns:
            Reply to render.

        Raises:
            DomainError: For any expected failure; the dispatcher renders it.
        """

    @property
    def synopsis(self) -> str:
        """'/name <usage>' as shown in help and usage messages."""
        if self.usage:
            return f"/{self.command_name} {self.usage}"
        return f"/{self.command_name}"

    def require_args(self, args: str, hint: str | None = None) -> str:
        """Return stripped args or raise a usage error if blank."""
        clean = args.strip()
        if not clean:
            raise InvalidArgumentError(f"Usage: {self.synopsis}", hint=hint)
        return clean
