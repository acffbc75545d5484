"""Tests for command parsing and the handler registry."""

from unittest.mock import MagicMock

import pytest

from projectbot.bot.commands import CommandHandler
from projectbot.bot.events import BotReply
from projectbot.bot.router import (
    CommandRouter,
    DuplicateCommandNameError,
    ParsedCommand,
    RegistryFrozenError,
    build_default_router,
    is_command,
    parse_command,
)
from projectbot.errors import UnknownCommandError


class EchoCommand(CommandHandler):
    command_name = "echo"
    help_text = "Echo arguments"
    usage = "<text>"

    def execute(self, services, user, args):
        return BotReply(args)


class OtherEchoCommand(EchoCommand):
    pass


class TestParseCommand:
    def test_name_and_args(self):
        assert parse_command("/select api") == ParsedCommand("select", "api")

    def test_no_args(self):
        assert parse_command("/projects") == ParsedCommand("projects", "")

    def test_case_insensitive_name(self):
        assert parse_command("/NewProject Api").name == "newproject"

    def test_args_case_preserved(self):
        assert parse_command("/NewProject Api").args == "Api"

    def test_bot_suffix_stripped(self):
        assert parse_command("/select@project_bot api") == ParsedCommand("select", "api")

    def test_leading_at_kept(self):
        assert parse_command("/@foo").name == "@foo"

    def test_splits_on_first_whitespace_run(self):
        parsed = parse_command("/rename  old\tnew  ")
        assert parsed.name == "rename"
        assert parsed.args == "old\tnew"

    def test_not_a_command(self):
        with pytest.raises(ValueError):
            parse_command("hello")

    @pytest.mark.parametrize(
        "text,expected",
        [("/start", True), ("  /start", True), ("start", False), ("", False), (None, False)],
    )
    def test_is_command(self, text, expected):
        assert is_command(text) is expected


class TestCommandRouter:
    def test_register_and_match(self):
        router = CommandRouter([EchoCommand()])
        assert isinstance(router.match("echo"), EchoCommand)
        assert isinstance(router.match("ECHO"), EchoCommand)

    def test_unknown_command(self):
        with pytest.raises(UnknownCommandError) as exc_info:
            CommandRouter().match("nope")
        assert exc_info.value.command == "nope"

    def test_duplicate_name_rejected(self):
        router = CommandRouter([EchoCommand()])
        with pytest.raises(DuplicateCommandNameError, match="EchoCommand and OtherEchoCommand"):
            router.register(OtherEchoCommand())

    def test_empty_name_rejected(self):
        handler = EchoCommand()
        handler.command_name = ""
        with pytest.raises(ValueError):
            CommandRouter([handler])

    def test_frozen_registry(self):
        router = CommandRouter()
        router.freeze()
        assert router.frozen
        with pytest.raises(RegistryFrozenError):
            router.register(EchoCommand())

    def test_handlers_view_is_read_only(self):
        router = CommandRouter([EchoCommand()])
        with pytest.raises(TypeError):
            router._handlers["x"] = EchoCommand()

    def test_route_passes_args(self):
        router = CommandRouter([EchoCommand()])
        reply = router.route(MagicMock(), MagicMock(id=1), ParsedCommand("echo", "hi there"))
        assert reply.text == "hi there"


class TestDefaultRouter:
    def test_registration_order(self):
        assert build_default_router().names() == [
            "start",
            "help",
            "newproject",
            "projects",
            "select",
            "current",
            "archive",
            "unarchive",
            "delete",
            "rename",
            "describe",
            "setdir",
        ]

    def test_is_frozen(self):
        assert build_default_router().frozen

    def test_help_lists_every_command(self):
        router = build_default_router()
        text = router.match("help").execute(MagicMock(), MagicMock(), "").text

        assert text.startswith("Available Commands:\n\nBasic:\n/start - Start the bot")
        assert "\n\nProject Management:\n/newproject <project-name> - Create a new project" in text
        for name in router.names():
            assert f"/{name}" in text
