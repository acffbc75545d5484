"""Error code registry with E-XXXX format codes.

This module defines the error code system for the project bot, organizing
errors into categories:
- E-1xxx: Access errors
- E-2xxx: Command and callback validation errors
- E-3xxx: Project and session errors
- E-4xxx: System/internal errors

Each error includes a code, title, and a default remediation hint shown
under the message in chat.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    ACCESS = "access"  # E-1xxx: Access errors
    VALIDATION = "validation"  # E-2xxx: Validation errors
    PROJECT = "project"  # E-3xxx: Project and session errors
    SYSTEM = "system"  # E-4xxx: System/internal errors


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for logs and admin output.
        remediation: Default hint shown to the user, may be empty.
    """

    code: str
    category: ErrorCategory
    title: str
    remediation: str = ""


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Access errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.ACCESS,
        title="Unauthorized",
    ),
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Invalid Argument",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Unknown Command",
        remediation="Use /help to see available commands.",
    ),
    "E-2003": ErrorCode(
        code="E-2003",
        category=ErrorCategory.VALIDATION,
        title="Unknown Action",
    ),
    # Project errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.PROJECT,
        title="Not Found",
        remediation="Use /projects to see your projects.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.PROJECT,
        title="Duplicate Name",
        remediation="Please choose a different name.",
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.PROJECT,
        title="Forbidden",
    ),
    "E-3004": ErrorCode(
        code="E-3004",
        category=ErrorCategory.PROJECT,
        title="Invalid State",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Internal Error",
    ),
}

GENERIC_ERROR_CODE = "E-4001"
GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."


def get_error(code: str) -> ErrorCode | None:
    """Look up error code definition.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all error codes in a category.

    Args:
        category: The category to filter by.

    Returns:
        List of ErrorCode objects in the category.
    """
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
