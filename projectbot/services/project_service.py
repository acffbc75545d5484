"""Project service implementing the project lifecycle state machine.

Projects are created ACTIVE, move between ACTIVE and ARCHIVED through
explicit transitions, and can be soft-deleted from either state. DELETED
is terminal: the row is retained but excluded from every listing and
lookup by name, and nothing moves it back out.

Ownership is NOT checked here. Callers (command and callback handlers)
must compare project.user_id with the acting user before any mutating or
selecting call; see ensure_owner().

Example:
    svc = ProjectService(db)
    project = svc.create_project(user.id, "api")
    svc.archive_project(project.id)
"""

import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from projectbot.db.mappers import ProjectMapper
from projectbot.db.models import Project, ProjectStatus, User
from projectbot.errors.domain import (
    DuplicateProjectNameError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,100}$")

# Valid state transitions for the project lifecycle. Re-applying the
# current status is allowed for every state except out of DELETED.
VALID_TRANSITIONS: dict[ProjectStatus, list[ProjectStatus]] = {
    ProjectStatus.ACTIVE: [ProjectStatus.ARCHIVED, ProjectStatus.DELETED],
    ProjectStatus.ARCHIVED: [ProjectStatus.ACTIVE, ProjectStatus.DELETED],
    ProjectStatus.DELETED: [],  # terminal
}


def validate_project_name(name: str) -> str:
    """Validate a project name.

    Args:
        name: Candidate name (surrounding whitespace is stripped).

    Returns:
        The stripped name.

    Raises:
        InvalidArgumentError: If the name is empty, longer than 100
            characters, or contains anything other than letters, digits,
            hyphens, and underscores.
    """
    clean = name.strip()
    if not PROJECT_NAME_PATTERN.match(clean):
        raise InvalidArgumentError(
            "Invalid project name. Use only letters, numbers, hyphens, and "
            "underscores (up to 100 characters)."
        )
    return clean


def ensure_owner(project: Project, user: User, action: str = "access") -> None:
    """Raise ForbiddenError unless the user owns the project.

    Args:
        project: Project being acted on.
        user: Acting user.
        action: Verb used in the message ("select", "delete", ...).
    """
    if project.user_id != user.id:
        logger.warning(
            "Ownership check failed: user_id=%s, project_id=%s, action=%s",
            user.id,
            project.id,
            action,
        )
        raise ForbiddenError(f"You don't have permission to {action} this project.")


class ProjectService:
    """Service for project CRUD and status transitions.

    Methods do NOT call db.commit(); the caller is responsible for committing.

    Attributes:
        db: SQLAlchemy session for database operations.
        projects: Row mapper over the same session.
    """

    def __init__(self, db: Session) -> None:
        """Initialize the project service with a database session.

        Args:
            db: SQLAlchemy session for database operations.
        """
        self.db = db
        self.projects = ProjectMapper(db)

    # =========================================================================
    # Queries
    # =========================================================================

    def find_by_id(self, project_id: int) -> Project | None:
        """Get a project by id in any status, including DELETED.

        Callback resolution uses this and re-validates status itself.
        """
        return self.projects.find_by_id(project_id)

    def find_by_name(self, user_id: int, name: str) -> Project | None:
        """Find a user's project by name, never returning DELETED rows.

        Args:
            user_id: Owning user.
            name: Exact project name.

        Returns:
            The ACTIVE or ARCHIVED project, or None.
        """
        project = self.projects.find_by_owner_and_name(user_id, name.strip())
        if project is None or project.status == ProjectStatus.DELETED.value:
            return None
        return project

    def list_active(self, user_id: int) -> list[Project]:
        return self.projects.list_by_owner_and_status(user_id, ProjectStatus.ACTIVE)

    def list_archived(self, user_id: int) -> list[Project]:
        return self.projects.list_by_owner_and_status(user_id, ProjectStatus.ARCHIVED)

    def list_projects(self, user_id: int) -> list[Project]:
        """All of a user's projects except DELETED ones."""
        return [
            p
            for p in self.projects.list_by_owner(user_id)
            if p.status != ProjectStatus.DELETED.value
        ]

    def list_all_projects(self, user_id: int) -> list[Project]:
        """All of a user's projects including DELETED ones (admin view)."""
        return self.projects.list_by_owner(user_id)

    # =========================================================================
    # Creation and edits
    # =========================================================================

    def create_project(
        self,
        user_id: int,
        name: str,
        description: str | None = None,
    ) -> Project:
        """Create a new ACTIVE project.

        The name must be unused by this user in every status: archived and
        soft-deleted projects still reserve their names.

        Args:
            user_id: Owning user.
            name: Project name.
            description: Optional description.

        Returns:
            The created Project.

        Raises:
            InvalidArgumentError: If the name is malformed.
            DuplicateProjectNameError: If the name is already taken.
        """
        clean_name = validate_project_name(name)

        if self.projects.find_by_owner_and_name(user_id, clean_name) is not None:
            raise DuplicateProjectNameError(clean_name)

        project = Project(
            user_id=user_id,
            name=clean_name,
            description=description,
            status=ProjectStatus.ACTIVE.value,
        )
        try:
            self.projects.insert(project)
        except IntegrityError:
            # Lost a race with a concurrent insert; the unique constraint
            # is the final arbiter. The failed flush poisons the session.
            self.db.rollback()
            raise DuplicateProjectNameError(clean_name) from None

        logger.info("Created project: user_id=%s, name=%s", user_id, clean_name)
        return project

    def update_project(
        self,
        project_id: int,
        name: str | None = None,
        description: str | None = None,
    ) -> Project:
        """Rename a project and/or change its description.

        Args:
            project_id: Project to update.
            name: New name, or None to keep.
            description: New description, or None to keep.

        Returns:
            The updated Project.

        Raises:
            NotFoundError: If the project does not exist.
            InvalidStateError: If the project is DELETED.
            InvalidArgumentError: If the new name is malformed.
            DuplicateProjectNameError: If the new name is already taken.
        """
        project = self._get_or_raise(project_id)
        if project.status == ProjectStatus.DELETED.value:
            raise InvalidStateError(f"Project '{project.name}' has been deleted.")

        if name is not None:
            new_name = validate_project_name(name)
            if new_name != project.name:
                if self.projects.find_by_owner_and_name(project.user_id, new_name):
                    raise DuplicateProjectNameError(new_name)
                old_name = project.name
                project.name = new_name
                logger.info(
                    "Renamed project: id=%s, %s -> %s", project_id, old_name, new_name
                )

        if description is not None:
            project.description = description

        self.projects.update(project)
        logger.info("Updated project: id=%s", project_id)
        return project

    def set_working_directory(self, project_id: int, working_directory: str) -> Project:
        """Set the project's working-directory path.

        Raises:
            NotFoundError: If the project does not exist.
            InvalidStateError: If the project is DELETED.
        """
        project = self._get_or_raise(project_id)
        if project.status == ProjectStatus.DELETED.value:
            raise InvalidStateError(f"Project '{project.name}' has been deleted.")

        project.working_directory = working_directory
        self.projects.update(project)
        logger.info(
            "Set working directory for project: id=%s, dir=%s",
            project_id,
            working_directory,
        )
        return project

    # =========================================================================
    # State Machine Operations
    # =========================================================================

    def can_transition(self, current: ProjectStatus, target: ProjectStatus) -> bool:
        """Check if a status change is allowed.

        Re-applying the current status counts as allowed, except for DELETED
        which only accepts DELETED.

        Args:
            current: The current project status.
            target: The target project status.

        Returns:
            True if the transition is valid, False otherwise.
        """
        if current == target:
            return True
        return target in VALID_TRANSITIONS.get(current, [])

    def archive_project(self, project_id: int) -> Project:
        """Set status to ARCHIVED (unconditionally unless DELETED).

        Callers decide whether archiving an already ARCHIVED project is
        worth reporting; this method simply re-applies the status.
        """
        return self._transition(project_id, ProjectStatus.ARCHIVED)

    def unarchive_project(self, project_id: int) -> Project:
        """Set status to ACTIVE (unconditionally unless DELETED)."""
        return self._transition(project_id, ProjectStatus.ACTIVE)

    def soft_delete_project(self, project_id: int) -> Project:
        """Set status to DELETED. Terminal and idempotent."""
        return self._transition(project_id, ProjectStatus.DELETED)

    def hard_delete_project(self, project_id: int) -> bool:
        """Remove the project row entirely (administrative use only).

        Session pointers to it are nulled by the foreign key.

        Returns:
            True if a row was removed, False if not found.
        """
        removed = self.projects.delete_by_id(project_id) > 0
        if removed:
            logger.info("Hard deleted project: id=%s", project_id)
        return removed

    def _get_or_raise(self, project_id: int) -> Project:
        project = self.projects.find_by_id(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found.")
        return project

    def _transition(self, project_id: int, target: ProjectStatus) -> Project:
        """Apply a status change with state machine validation.

        Raises:
            NotFoundError: If the project does not exist.
            InvalidStateError: If the transition is not allowed.
        """
        project = self._get_or_raise(project_id)
        current = project.project_status

        if not self.can_transition(current, target):
            raise InvalidStateError(
                f"Project '{project.name}' is {current.value.lower()} and cannot "
                f"become {target.value.lower()}."
            )

        self.projects.update_status(project_id, target)
        logger.info(
            "Project status changed: id=%s, name=%s, %s -> %s",
            project_id,
            project.name,
            current.value,
            target.value,
        )
        return project
