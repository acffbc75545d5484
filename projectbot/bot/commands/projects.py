"""Project management commands.

Every handler that targets a project by name resolves it within the
caller's own projects and still runs ensure_owner() before mutating or
selecting it. Deletion is only ever prompted here; the actual status flip
happens through the confirm_delete callback.
"""

import logging
from datetime import datetime

from projectbot.bot.commands.base import CommandHandler
from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply
from projectbot.bot.keyboards import confirm_delete_keyboard, project_selection_keyboard
from projectbot.db.models import Project, ProjectStatus, User
from projectbot.errors.domain import InvalidArgumentError, InvalidStateError, NotFoundError
from projectbot.services.project_service import ensure_owner

logger = logging.getLogger(__name__)

PROJECTS_HINT = "Use /projects to see your projects."
TIMESTAMP_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


def format_timestamp(value: str | None) -> str:
    """Render a stored ISO timestamp as 'YYYY-MM-DD HH:MM'."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime(TIMESTAMP_DISPLAY_FORMAT)
    except ValueError:
        return value


def find_project_or_raise(services: BotServices, user: User, name: str) -> Project:
    """Resolve one of the caller's non-deleted projects by name."""
    project = services.projects.find_by_name(user.id, name)
    if project is None:
        raise NotFoundError(f"Project '{name}' not found.")
    return project


class NewProjectCommand(CommandHandler):
    command_name = "newproject"
    help_text = "Create a new project"
    usage = "<project-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        name = self.require_args(args, hint="Example: /newproject my-api")

        project = services.projects.create_project(user.id, name)
        services.sessions.select_project(user.id, project.id)

        logger.info("Project created: user_id=%s, name=%s", user.id, project.name)
        return BotReply(
            f"Project '{project.name}' created successfully!\n\n"
            "The project has been automatically selected as your current project.\n\n"
            "Use /current to see project details."
        )


class ProjectsCommand(CommandHandler):
    """Lists ACTIVE and ARCHIVED projects; only ACTIVE ones get a button."""

    command_name = "projects"
    help_text = "List all projects"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        active = services.projects.list_active(user.id)
        archived = services.projects.list_archived(user.id)

        if not active and not archived:
            return BotReply(
                "You don't have any projects yet.\n\nCreate one with /newproject <name>"
            )

        current = services.sessions.get_current_project(user.id)
        current_id = current.id if current else None

        lines = ["Your Projects:", ""]
        if active:
            lines.append("Active Projects:")
            for project in active:
                marker = " [SELECTED]" if project.id == current_id else ""
                lines.append(f"  - {project.name}{marker}")
            lines.append("")

        if archived:
            lines.append("Archived Projects:")
            lines.extend(f"  - {project.name}" for project in archived)
            lines.append("")

        if not active:
            return BotReply("\n".join(lines).rstrip())

        lines.append("Select a project to work with:")
        return BotReply("\n".join(lines), keyboard=project_selection_keyboard(active))


class SelectCommand(CommandHandler):
    command_name = "select"
    help_text = "Select a project"
    usage = "<project-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        name = self.require_args(args, hint=PROJECTS_HINT)
        project = find_project_or_raise(services, user, name)
        ensure_owner(project, user, "select")

        if project.status == ProjectStatus.ARCHIVED.value:
            raise InvalidStateError(
                f"Project '{project.name}' is archived. Unarchive it first to select it.",
                hint=f"Use /unarchive {project.name}",
            )

        services.sessions.select_project(user.id, project.id)
        logger.info(
            "Project selected: user_id=%s, project_id=%s, name=%s",
            user.id,
            project.id,
            project.name,
        )
        return BotReply(
            f"Project '{project.name}' selected!\n\nUse /current to see project details."
        )


class CurrentCommand(CommandHandler):
    command_name = "current"
    help_text = "Show current project"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        project = services.sessions.get_current_project(user.id)
        if project is None:
            return BotReply(
                "No project selected.\n\n"
                "Use /projects to see your projects or /newproject to create one."
            )

        lines = [
            "Current Project:",
            "",
            f"Name: {project.name}",
            f"Status: {project.status}",
        ]
        if project.description and project.description.strip():
            lines.append(f"Description: {project.description}")
        if project.working_directory and project.working_directory.strip():
            lines.append(f"Working Directory: {project.working_directory}")
        if project.created_at:
            lines.append(f"Created: {format_timestamp(project.created_at)}")
        if project.updated_at:
            lines.append(f"Last Updated: {format_timestamp(project.updated_at)}")
        return BotReply("\n".join(lines))


class ArchiveCommand(CommandHandler):
    command_name = "archive"
    help_text = "Archive a project"
    usage = "<project-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        name = self.require_args(args, hint=PROJECTS_HINT)
        project = find_project_or_raise(services, user, name)
        ensure_owner(project, user, "archive")

        if project.status == ProjectStatus.ARCHIVED.value:
            return BotReply(f"Project '{project.name}' is already archived.")

        services.projects.archive_project(project.id)
        services.sessions.clear_if_current(user.id, project.id)

        logger.info("Project archived: user_id=%s, project_id=%s", user.id, project.id)
        return BotReply(
            f"Project '{project.name}' has been archived.\n\n"
            "Archived projects are not deleted and can be viewed with /projects."
        )


class UnarchiveCommand(CommandHandler):
    """Restores an archived project. The selection is left untouched."""

    command_name = "unarchive"
    help_text = "Restore an archived project"
    usage = "<project-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        name = self.require_args(args, hint=PROJECTS_HINT)
        project = find_project_or_raise(services, user, name)
        ensure_owner(project, user, "unarchive")

        if project.status == ProjectStatus.ACTIVE.value:
            return BotReply(f"Project '{project.name}' is already active.")

        services.projects.unarchive_project(project.id)

        logger.info("Project unarchived: user_id=%s, project_id=%s", user.id, project.id)
        return BotReply(
            f"Project '{project.name}' has been unarchived.\n\n"
            f"Use /select {project.name} to work with it."
        )


class DeleteCommand(CommandHandler):
    command_name = "delete"
    help_text = "Delete a project"
    usage = "<project-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        name = self.require_args(args, hint=PROJECTS_HINT)
        project = find_project_or_raise(services, user, name)
        ensure_owner(project, user, "delete")

        return BotReply(
            f"Are you sure you want to delete project '{project.name}'?\n\n"
            "This action cannot be undone.",
            keyboard=confirm_delete_keyboard(project.id),
        )


class RenameCommand(CommandHandler):
    command_name = "rename"
    help_text = "Rename a project"
    usage = "<old-name> <new-name>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        parts = self.require_args(args, hint=PROJECTS_HINT).split()
        if len(parts) != 2:
            raise InvalidArgumentError(f"Usage: {self.synopsis}", hint=PROJECTS_HINT)
        old_name, new_name = parts

        project = find_project_or_raise(services, user, old_name)
        ensure_owner(project, user, "rename")
        services.projects.update_project(project.id, name=new_name)

        return BotReply(f"Project '{old_name}' renamed to '{project.name}'.")


class DescribeCommand(CommandHandler):
    command_name = "describe"
    help_text = "Set the current project's description"
    usage = "<text>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        description = self.require_args(args)
        project = services.require_current_project(user)
        services.projects.update_project(project.id, description=description)

        return BotReply(f"Description updated for project '{project.name}'.")


class SetDirCommand(CommandHandler):
    command_name = "setdir"
    help_text = "Set the current project's working directory"
    usage = "<path>"
    group = "Project Management"

    def execute(self, services: BotServices, user: User, args: str) -> BotReply:
        path = self.require_args(args)
        project = services.require_current_project(user)
        services.projects.set_working_directory(project.id, path)

        return BotReply(f"Working directory for project '{project.name}' set to:\n{path}")
