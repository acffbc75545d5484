"""SQLAlchemy ORM models for the project bot state database.

This module defines the three persisted entities: chat users, their
projects, and the one-per-user session that carries the current project
pointer. Uses SQLAlchemy 2.0 style with Mapped and mapped_column.
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    BigInteger,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format."""
    return datetime.now(UTC).isoformat()


class ProjectStatus(str, Enum):
    """Status values for projects.

    Lifecycle: ACTIVE <-> ARCHIVED
               ACTIVE/ARCHIVED -> DELETED (terminal, soft delete)
    """

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """Chat account known to the bot.

    Created on first contact and refreshed in place when the transport
    reports different display fields. Never deleted, only deactivated.

    Attributes:
        id: Integer primary key.
        external_id: Caller identity supplied by the transport (unique).
        username: Account handle, if any.
        first_name: Given name, if any.
        last_name: Family name, if any.
        language_code: IETF language tag reported by the client.
        is_active: False once an operator deactivates the account.
        created_at: ISO8601 timestamp of first contact.
        updated_at: ISO8601 timestamp of last profile change.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[int] = mapped_column(
        BigInteger, nullable=False, unique=True, index=True
    )
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    language_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    projects: Mapped[list["Project"]] = relationship(
        "Project", back_populates="owner", order_by="Project.id"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, external_id={self.external_id!r})>"


class Project(Base):
    """Lightweight workspace record owned by a single user.

    The (user_id, name) pair is unique across every status: an archived or
    soft-deleted project keeps blocking reuse of its name.

    Attributes:
        id: Integer primary key (also embedded in callback tokens).
        user_id: Owning user.
        name: Project name, unique per owner.
        description: Optional free text.
        working_directory: Optional filesystem path for the project.
        status: ACTIVE, ARCHIVED, or DELETED.
        created_at: ISO8601 timestamp of creation.
        updated_at: ISO8601 timestamp of last change.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    working_directory: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.ACTIVE.value
    )
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    owner: Mapped["User"] = relationship("User", back_populates="projects")

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_projects_user_name"),
        Index("idx_projects_user_status", "user_id", "status"),
    )

    @property
    def project_status(self) -> ProjectStatus:
        """Return the status column as a ProjectStatus member."""
        return ProjectStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Project(id={self.id!r}, name={self.name!r}, "
            f"status={self.status!r})>"
        )


class UserSession(Base):
    """Per-user session holding the current project pointer.

    current_project_id is a non-owning reference: readers must re-check the
    referenced project's status on every access. state/state_data are a
    free-form slot for multi-step flows.

    Attributes:
        id: Integer primary key.
        user_id: Owning user (one session per user).
        current_project_id: Selected project, or None.
        state: Short state tag for multi-step flows.
        state_data: Payload associated with state.
        last_activity_at: ISO8601 timestamp of last selection/state write.
        created_at: ISO8601 timestamp of creation.
        updated_at: ISO8601 timestamp of last change.
    """

    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    current_project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    state_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_activity_at: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )

    def __repr__(self) -> str:
        return (
            f"<UserSession(user_id={self.user_id!r}, "
            f"current_project_id={self.current_project_id!r})>"
        )
