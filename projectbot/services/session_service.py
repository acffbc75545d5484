"""Service for per-user sessions and the current project pointer.

Each user has exactly one session, created on first use. The session's
current_project_id is a non-owning pointer that is validated lazily: a
pointer to a project that is no longer ACTIVE reads as "no selection"
without being rewritten.

Example:
    sessions = SessionService(db)
    sessions.select_project(user.id, project.id)
    current = sessions.get_current_project(user.id)
"""

import logging

from sqlalchemy.orm import Session

from projectbot.db.mappers import ProjectMapper, SessionMapper
from projectbot.db.models import Project, ProjectStatus, UserSession

logger = logging.getLogger(__name__)


class SessionService:
    """Session lookups and current-project selection.

    select_project() does not verify that the project is ACTIVE or owned
    by the user; the command and callback layers check both first.
    Methods do NOT call db.commit(); the caller is responsible for committing.
    """

    def __init__(self, db: Session) -> None:
        """Initialize with a SQLAlchemy session.

        Args:
            db: Active database session.
        """
        self.db = db
        self.sessions = SessionMapper(db)
        self.projects = ProjectMapper(db)

    def find_by_user_id(self, user_id: int) -> UserSession | None:
        return self.sessions.find_by_owner(user_id)

    def get_or_create_session(self, user_id: int) -> UserSession:
        """Return the user's session, inserting a blank one if missing."""
        session = self.sessions.find_by_owner(user_id)
        if session is not None:
            return session

        session = self.sessions.insert(UserSession(user_id=user_id))
        logger.info("Created session for user: user_id=%s", user_id)
        return session

    # =========================================================================
    # Current project
    # =========================================================================

    def select_project(self, user_id: int, project_id: int) -> None:
        """Point the user's session at a project."""
        self.get_or_create_session(user_id)
        self.sessions.update_current_project(user_id, project_id)
        logger.info("Selected project: user_id=%s, project_id=%s", user_id, project_id)

    def clear_current_project(self, user_id: int) -> None:
        self.sessions.update_current_project(user_id, None)
        logger.info("Cleared current project: user_id=%s", user_id)

    def current_project_id(self, user_id: int) -> int | None:
        """Return the raw stored pointer, without status validation."""
        session = self.sessions.find_by_owner(user_id)
        return session.current_project_id if session else None

    def get_current_project(self, user_id: int) -> Project | None:
        """Return the selected project only while it is ACTIVE.

        An archived or deleted referent reads as no selection. The stored
        pointer is left untouched.
        """
        project_id = self.current_project_id(user_id)
        if project_id is None:
            return None

        project = self.projects.find_by_id(project_id)
        if project is None or project.status != ProjectStatus.ACTIVE.value:
            return None
        return project

    def clear_if_current(self, user_id: int, project_id: int) -> bool:
        """Clear the pointer when it references project_id.

        Compares the raw pointer, so a stale pointer to an archived
        project is cleared as well.

        Returns:
            True if the pointer was cleared.
        """
        if self.current_project_id(user_id) != project_id:
            return False
        self.clear_current_project(user_id)
        return True

    # =========================================================================
    # Free-form state for multi-step flows
    # =========================================================================

    def set_state(self, user_id: int, state: str, state_data: str | None = None) -> None:
        self.get_or_create_session(user_id)
        self.sessions.update_state(user_id, state, state_data)
        logger.debug("Updated state: user_id=%s, state=%s", user_id, state)

    def clear_state(self, user_id: int) -> None:
        self.sessions.update_state(user_id, None, None)
        logger.debug("Cleared state: user_id=%s", user_id)

    def get_state(self, user_id: int) -> str | None:
        session = self.sessions.find_by_owner(user_id)
        return session.state if session else None

    def get_state_data(self, user_id: int) -> str | None:
        session = self.sessions.find_by_owner(user_id)
        return session.state_data if session else None
