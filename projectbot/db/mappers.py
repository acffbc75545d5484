"""Row mappers for users, projects, and sessions.

Thin CRUD layer over a SQLAlchemy session. Lookups return None or an
empty list for "not found" and never raise. Mutators flush but do NOT
commit; the caller owns the transaction.

Example:
    projects = ProjectMapper(db)
    project = projects.find_by_owner_and_name(user.id, "api")
"""

from sqlalchemy.orm import Session

from projectbot.db.models import (
    Project,
    ProjectStatus,
    User,
    UserSession,
    utc_now_iso,
)


class UserMapper:
    """Persistence operations for User rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_external_id(self, external_id: int) -> User | None:
        return self.db.query(User).filter(User.external_id == external_id).first()

    def list_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def insert(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user: User) -> User:
        user.updated_at = utc_now_iso()
        self.db.flush()
        return user

    def update_active_status(self, user_id: int, is_active: bool) -> int:
        count = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update(
                {User.is_active: is_active, User.updated_at: utc_now_iso()},
                synchronize_session="fetch",
            )
        )
        self.db.flush()
        return count


class ProjectMapper:
    """Persistence operations for Project rows.

    Status filtering is the caller's job: find_by_id and
    find_by_owner_and_name return rows in any status, including DELETED.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, project_id: int) -> Project | None:
        return self.db.query(Project).filter(Project.id == project_id).first()

    def find_by_owner_and_name(self, user_id: int, name: str) -> Project | None:
        return (
            self.db.query(Project)
            .filter(Project.user_id == user_id, Project.name == name)
            .first()
        )

    def list_by_owner(self, user_id: int) -> list[Project]:
        return (
            self.db.query(Project)
            .filter(Project.user_id == user_id)
            .order_by(Project.created_at, Project.id)
            .all()
        )

    def list_by_owner_and_status(
        self, user_id: int, status: ProjectStatus
    ) -> list[Project]:
        return (
            self.db.query(Project)
            .filter(Project.user_id == user_id, Project.status == status.value)
            .order_by(Project.created_at, Project.id)
            .all()
        )

    def insert(self, project: Project) -> Project:
        """Add and flush a new project.

        Raises:
            sqlalchemy.exc.IntegrityError: If (user_id, name) already exists.
        """
        self.db.add(project)
        self.db.flush()
        return project

    def update(self, project: Project) -> Project:
        project.updated_at = utc_now_iso()
        self.db.flush()
        return project

    def update_status(self, project_id: int, status: ProjectStatus) -> int:
        """Set a project's status.

        Returns:
            Number of rows updated (0 if the id does not exist).
        """
        count = (
            self.db.query(Project)
            .filter(Project.id == project_id)
            .update(
                {Project.status: status.value, Project.updated_at: utc_now_iso()},
                synchronize_session="fetch",
            )
        )
        self.db.flush()
        return count

    def delete_by_id(self, project_id: int) -> int:
        project = self.find_by_id(project_id)
        if project is None:
            return 0
        self.db.delete(project)
        self.db.flush()
        return 1


class SessionMapper:
    """Persistence operations for UserSession rows (one per user)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_owner(self, user_id: int) -> UserSession | None:
        return (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .first()
        )

    def insert(self, session: UserSession) -> UserSession:
        self.db.add(session)
        self.db.flush()
        return session

    def update_current_project(self, user_id: int, project_id: int | None) -> int:
        now = utc_now_iso()
        count = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .update(
                {
                    UserSession.current_project_id: project_id,
                    UserSession.last_activity_at: now,
                    UserSession.updated_at: now,
                },
                synchronize_session="fetch",
            )
        )
        self.db.flush()
        return count

    def update_state(
        self, user_id: int, state: str | None, state_data: str | None
    ) -> int:
        now = utc_now_iso()
        count = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .update(
                {
                    UserSession.state: state,
                    UserSession.state_data: state_data,
                    UserSession.last_activity_at: now,
                    UserSession.updated_at: now,
                },
                synchronize_session="fetch",
            )
        )
        self.db.flush()
        return count
