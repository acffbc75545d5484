"""Service layer for the project bot.

Provides identity resolution, allow-list access control, the project
lifecycle state machine, and per-user session selection.
"""

from projectbot.services.access_control import AccessGate, parse_allowed_users
from projectbot.services.project_service import (
    PROJECT_NAME_PATTERN,
    VALID_TRANSITIONS,
    ProjectService,
    ensure_owner,
    validate_project_name,
)
from projectbot.services.session_service import SessionService
from projectbot.services.user_service import CallerProfile, UserService

__all__ = [
    "AccessGate",
    "parse_allowed_users",
    "CallerProfile",
    "UserService",
    "ProjectService",
    "PROJECT_NAME_PATTERN",
    "VALID_TRANSITIONS",
    "ensure_owner",
    "validate_project_name",
    "SessionService",
]
