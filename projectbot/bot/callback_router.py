"""Resolution of interactive-button callback tokens.

Each press is resolved from the token alone. The referenced project is
looked up again on every press, and both ownership and status are
re-checked, since either can have changed since the button was shown.
"""

import logging

from projectbot.bot.callbacks import CallbackAction, CallbackToken, parse_callback_token
from projectbot.bot.context import BotServices
from projectbot.bot.events import BotReply
from projectbot.db.models import ProjectStatus, User
from projectbot.errors.domain import InvalidStateError, NotFoundError
from projectbot.services.project_service import ensure_owner

logger = logging.getLogger(__name__)


class CallbackRouter:
    """Maps decoded callback tokens to lifecycle and session operations."""

    def route(self, services: BotServices, user: User, data: str) -> BotReply:
        """Resolve one callback token for a user.

        Args:
            services: Services bound to the current event's transaction.
            user: Resolved, authorized caller.
            data: Raw callback data.

        Returns:
            Reply to send into the originating chat.

        Raises:
            InvalidArgumentError: If the token's project id is malformed.
            UnknownActionError: If the token matches no action.
            NotFoundError: If the project no longer exists.
            ForbiddenError: If the caller does not own the project.
            InvalidStateError: If the project is not ACTIVE when selecting.
        """
        token = parse_callback_token(data)
        logger.debug("Handling callback: action=%s, user_id=%s", token.action.value, user.id)

        if token.action == CallbackAction.select_project:
            return self.select_project(services, user, token)
        if token.action == CallbackAction.confirm_delete:
            return self.confirm_delete(services, user, token)
        return self.cancel_delete()

    def select_project(
        self, services: BotServices, user: User, token: CallbackToken
    ) -> BotReply:
        project = services.projects.find_by_id(token.project_id)
        if project is None or project.status == ProjectStatus.DELETED.value:
            raise NotFoundError("Project not found.")

        ensure_owner(project, user, "select")

        if project.status != ProjectStatus.ACTIVE.value:
            raise InvalidStateError("This project is not active.")

        services.sessions.select_project(user.id, project.id)
        logger.info(
            "Project selected via callback: user_id=%s, project_id=%s", user.id, project.id
        )
        return BotReply(
            f"Project '{project.name}' selected!\n\nUse /current to see project details."
        )

    def confirm_delete(
        self, services: BotServices, user: User, token: CallbackToken
    ) -> BotReply:
        """Clear the session pointer and soft delete, in one transaction."""
        project = services.projects.find_by_id(token.project_id)
        if project is None or project.status == ProjectStatus.DELETED.value:
            raise NotFoundError("Project not found or already deleted.", hint="")

        ensure_owner(project, user, "delete")

        # Pointer before the status flip; both commit together.
        services.sessions.clear_if_current(user.id, project.id)
        services.projects.soft_delete_project(project.id)

        logger.info(
            "Project deleted: user_id=%s, project_id=%s, name=%s",
            user.id,
            project.id,
            project.name,
        )
        return BotReply(f"Project '{project.name}' has been deleted.")

    def cancel_delete(self) -> BotReply:
        return BotReply("Delete cancelled.")
