"""Database module for project bot state management and persistence."""

from projectbot.db.connection import (
    create_db_engine,
    get_database_url,
    get_db_context,
    init_db,
    make_session_factory,
)
from projectbot.db.mappers import ProjectMapper, SessionMapper, UserMapper
from projectbot.db.models import (
    Base,
    Project,
    ProjectStatus,
    User,
    UserSession,
)

__all__ = [
    # Models
    "Base",
    "User",
    "Project",
    "UserSession",
    # Enums
    "ProjectStatus",
    # Mappers
    "UserMapper",
    "ProjectMapper",
    "SessionMapper",
    # Connection
    "create_db_engine",
    "get_database_url",
    "get_db_context",
    "init_db",
    "make_session_factory",
]
