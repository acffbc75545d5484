"""Greeting and help commands."""

import logging
from typing import TYPE_CHECKING

from projectbot.bot.commands.base import CommandHandler
from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply
from projectbot.db.models import User

if TYPE_CHECKING:
    from projectbot.bot.router import CommandRouter

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = """Welcome to Project Bot, {name}!

This bot keeps track of your projects and which one you are working on.

Getting Started:
1. Create a project with /newproject <name>
2. Select it with /select <name>
3. Check it with /current

Use /help to see all available commands."""


class StartCommand(CommandHandler):
    command_name = "start"
    help_text = "Start the bot"
    group = "Basic"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        services.sessions.get_or_create_session(user.id)
        logger.info("User started bot: external_id=%s", user.external_id)
        return BotReply(WELCOME_TEMPLATE.format(name=user.first_name or "there"))


class HelpCommand(CommandHandler):
    """Lists every registered command, grouped, in registration order."""

    command_name = "help"
    help_text = "Show this help message"
    group = "Basic"

    def __init__(self, router: "CommandRouter") -> None:
        self.router = router

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        groups: dict[str, list[str]] = {}
        for handler in self.router.handlers():
            groups.setdefault(handler.group, []).append(
                f"{handler.synopsis} - {handler.help_text}"
            )

        sections = [f"{name}:\n" + "\n".join(lines) for name, lines in groups.items()]
        return BotReply("Available Commands:\n\n" + "\n\n".join(sections))
