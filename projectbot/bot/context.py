"""Per-event service bundle handed to command and callback handlers."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from projectbot.db.models import Project, User
from projectbot.errors.domain import InvalidStateError
from projectbot.services.project_service import ProjectService
from projectbot.services.session_service import SessionService
from projectbot.services.user_service import UserService


@dataclass
class BotServices:
    """Services bound to the database session of one inbound event.

    Attributes:
        db: Session owning the event's transaction.
        users: Identity resolution.
        projects: Project lifecycle.
        sessions: Current-project selection.
    """

    db: Session
    users: UserService
    projects: ProjectService
    sessions: SessionService

    @classmethod
    def from_session(cls, db: Session) -> "BotServices":
        return cls(
            db=db,
            users=UserService(db),
            projects=ProjectService(db),
            sessions=SessionService(db),
        )

    def require_current_project(self, user: User) -> Project:
        """Return the user's ACTIVE current project.

        Raises:
            InvalidStateError: If nothing valid is selected.
        """
        project = self.sessions.get_current_project(user.id)
        if project is None:
            raise InvalidStateError(
                "No project selected.",
                hint="Use /select <project-name> to choose one.",
            )
        return project
