"""Callback token protocol for interactive buttons.

A token carries the whole decision payload: the action and its target
project id. Nothing about what was last shown to a user is kept on the
server, so every button in a message stays independently resolvable no
matter how session state changed after it was rendered. Only the
referent can go stale, and handlers re-validate it on every press.

Grammar (case-sensitive):
    select_project:<project-id>
    confirm_delete:<project-id>
    cancel_delete
"""

import re
from dataclasses import dataclass
from enum import Enum

from projectbot.errors.domain import InvalidArgumentError, UnknownActionError

SELECT_PROJECT_PREFIX = "select_project:"
CONFIRM_DELETE_PREFIX = "confirm_delete:"
CANCEL_DELETE = "cancel_delete"

# Telegram rejects callback_data longer than 64 bytes.
MAX_CALLBACK_DATA_BYTES = 64

_PROJECT_ID_PATTERN = re.compile(r"-?[0-9]{1,19}")

# SQLite INTEGER is a signed 64-bit value.
MIN_PROJECT_ID = -(2**63)
MAX_PROJECT_ID = 2**63 - 1


class CallbackAction(str, Enum):
    """Actions encodable in a callback token."""

    select_project = "select_project"
    confirm_delete = "confirm_delete"
    cancel_delete = "cancel_delete"


@dataclass(frozen=True)
class CallbackToken:
    """Decoded callback token.

    Attributes:
        action: The requested action.
        project_id: Target project for select/confirm, None for cancel.
    """

    action: CallbackAction
    project_id: int | None = None

    def encode(self) -> str:
        if self.action == CallbackAction.cancel_delete:
            data = CANCEL_DELETE
        elif self.project_id is None:
            raise ValueError(f"Action {self.action.value} requires a project id")
        else:
            data = f"{self.action.value}:{self.project_id}"

        if len(data.encode("utf-8")) > MAX_CALLBACK_DATA_BYTES:
            raise ValueError(f"Callback data exceeds {MAX_CALLBACK_DATA_BYTES} bytes: {data!r}")
        return data


def select_project_token(project_id: int) -> str:
    return CallbackToken(CallbackAction.select_project, project_id).encode()


def confirm_delete_token(project_id: int) -> str:
    return CallbackToken(CallbackAction.confirm_delete, project_id).encode()


def cancel_delete_token() -> str:
    return CallbackToken(CallbackAction.cancel_delete).encode()


def _parse_project_id(raw: str, invalid_message: str) -> int:
    if not _PROJECT_ID_PATTERN.fullmatch(raw):
        raise InvalidArgumentError(invalid_message)
    project_id = int(raw)
    if not MIN_PROJECT_ID <= project_id <= MAX_PROJECT_ID:
        raise InvalidArgumentError(invalid_message)
    return project_id


def parse_callback_token(data: str) -> CallbackToken:
    """Decode a callback token string.

    Args:
        data: Raw callback data from the transport.

    Returns:
        The decoded CallbackToken.

    Raises:
        InvalidArgumentError: If a known prefix carries a non-integer id
            or one outside the 64-bit range.
        UnknownActionError: If the token matches no known action.
    """
    if data.startswith(SELECT_PROJECT_PREFIX):
        project_id = _parse_project_id(
            data[len(SELECT_PROJECT_PREFIX):], "Invalid project selection."
        )
        return CallbackToken(CallbackAction.select_project, project_id)

    if data.startswith(CONFIRM_DELETE_PREFIX):
        project_id = _parse_project_id(
            data[len(CONFIRM_DELETE_PREFIX):], "Invalid project."
        )
        return CallbackToken(CallbackAction.confirm_delete, project_id)

    if data == CANCEL_DELETE:
        return CallbackToken(CallbackAction.cancel_delete)

    raise UnknownActionError(data)
