"""Typed domain exceptions for chat error mapping.

Every expected, recoverable failure is one of these. The dispatcher
catches DomainError at the outer boundary and renders it as a chat
message; anything else is treated as an internal fault.

Usage:
    # In service layer
    raise NotFoundError(f"Project '{name}' not found.")

    # In dispatcher
    try:
        reply = router.route(...)
    except DomainError as e:
        reply = BotReply(format_error(e))
"""


class DomainError(Exception):
    """Base exception for all domain errors.

    Attributes:
        code: Registry code in E-XXXX format.
        message: User-facing message.
        hint: Optional follow-up line overriding the registry remediation.
    """

    code = "E-4001"

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class UnauthorizedError(DomainError):
    """Caller is not on the allow-list or has been deactivated."""

    code = "E-1001"

    def __init__(
        self,
        message: str = "You are not authorized to use this bot.",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint)


class InvalidArgumentError(DomainError):
    """Malformed command argument or callback token payload."""

    code = "E-2001"


class UnknownCommandError(DomainError):
    """Command name has no registered handler."""

    code = "E-2002"

    def __init__(self, command: str) -> None:
        super().__init__("Unknown command.")
        self.command = command


class UnknownActionError(DomainError):
    """Callback token does not match any known action."""

    code = "E-2003"

    def __init__(self, data: str) -> None:
        super().__init__("Unknown action.")
        self.data = data


class NotFoundError(DomainError):
    """Project id or name does not resolve."""

    code = "E-3001"


class DuplicateProjectNameError(DomainError):
    """A project with this name already exists for the user, in any status."""

    code = "E-3002"

    def __init__(self, name: str) -> None:
        super().__init__(f"A project named '{name}' already exists.")
        self.name = name


class ForbiddenError(DomainError):
    """Resource exists but the caller does not own it."""

    code = "E-3003"


class InvalidStateError(DomainError):
    """Operation is not valid for the resource's current status."""

    code = "E-3004"
