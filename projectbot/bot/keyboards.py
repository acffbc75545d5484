"""Inline keyboard builders for project selection and delete confirmation."""

from collections.abc import Iterable

from projectbot.bot.callbacks import (
    cancel_delete_token,
    confirm_delete_token,
    select_project_token,
)
from projectbot.bot.events import InlineButton, InlineKeyboard
from projectbot.db.models import Project


def project_selection_keyboard(projects: Iterable[Project]) -> InlineKeyboard:
    """One button per project, one project per row."""
    return [
        [InlineButton(text=project.name, callback_data=select_project_token(project.id))]
        for project in projects
    ]


def confirm_delete_keyboard(project_id: int) -> InlineKeyboard:
    """Confirm/cancel pair rendered side by side."""
    return [
        [
            InlineButton(text="Yes, Delete", callback_data=confirm_delete_token(project_id)),
            InlineButton(text="Cancel", callback_data=cancel_delete_token()),
        ]
    ]
