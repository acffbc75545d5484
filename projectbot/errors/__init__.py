"""Error handling framework for the project bot.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions raised by services and routers
- Formatting of domain errors into chat messages

Error categories:
- E-1xxx: Access errors
- E-2xxx: Validation errors
- E-3xxx: Project and session errors
- E-4xxx: System/internal errors
"""

from projectbot.errors.domain import (
    DomainError,
    DuplicateProjectNameError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    UnknownActionError,
    UnknownCommandError,
)
from projectbot.errors.formatter import describe_error, format_error
from projectbot.errors.registry import (
    ERROR_REGISTRY,
    GENERIC_ERROR_CODE,
    GENERIC_ERROR_MESSAGE,
    ErrorCategory,
    ErrorCode,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "GENERIC_ERROR_CODE",
    "GENERIC_ERROR_MESSAGE",
    "get_error",
    "get_errors_by_category",
    # Domain
    "DomainError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "UnknownCommandError",
    "UnknownActionError",
    "NotFoundError",
    "DuplicateProjectNameError",
    "ForbiddenError",
    "InvalidStateError",
    # Formatter
    "format_error",
    "describe_error",
]
