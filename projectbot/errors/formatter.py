"""Error formatting for chat display."""

from projectbot.errors.domain import DomainError
from projectbot.errors.registry import get_error


def format_error(error: DomainError, include_hint: bool = True) -> str:
    """Format a domain error for display to the user.

    Args:
        error: The DomainError to format.
        include_hint: Whether to append the hint/remediation line.

    Returns:
        Message, optionally followed by a blank line and a hint.
    """
    hint = error.hint
    if hint is None:
        error_def = get_error(error.code)
        hint = error_def.remediation if error_def else ""

    if include_hint and hint:
        return f"{error.message}\n\n{hint}"
    return error.message


def describe_error(error: DomainError) -> str:
    """One-line description for logs: code, title, and message."""
    error_def = get_error(error.code)
    title = error_def.title if error_def else "Unknown"
    return f"{error.code} {title}: {error.message}"
