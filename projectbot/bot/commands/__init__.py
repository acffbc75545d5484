"""Chat command handlers."""

from projectbot.bot.commands.base import CommandHandler
from projectbot.bot.commands.general import HelpCommand, StartCommand
from projectbot.bot.commands.projects import (
    ArchiveCommand,
    CurrentCommand,
    DeleteCommand,
    DescribeCommand,
    NewProjectCommand,
    ProjectsCommand,
    RenameCommand,
    SelectCommand,
    SetDirCommand,
    UnarchiveCommand,
)

__all__ = [
    "CommandHandler",
    "StartCommand",
    "HelpCommand",
    "NewProjectCommand",
    "ProjectsCommand",
    "SelectCommand",
    "CurrentCommand",
    "ArchiveCommand",
    "UnarchiveCommand",
    "DeleteCommand",
    "RenameCommand",
    "DescribeCommand",
    "SetDirCommand",
]
