"""CLI output formatters for Rich tables and JSON.

Provides human-readable Rich table output (default) and machine-parseable
JSON output (--json flag) for the admin commands.
"""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from projectbot.db.models import Project, User

console = Console()

STATUS_COLORS = {
    "ACTIVE": "green",
    "ARCHIVED": "yellow",
    "DELETED": "dim",
}


def _render(table: Table) -> str:
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "external_id": user.external_id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "language_code": user.language_code,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def project_to_dict(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "user_id": project.user_id,
        "name": project.name,
        "description": project.description,
        "working_directory": project.working_directory,
        "status": project.status,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


def format_user_table(users: list[User], as_json: bool = False) -> str:
    """Format users as a Rich table or JSON.

    Args:
        users: Users to display.
        as_json: If True, return JSON string instead of Rich table.

    Returns:
        Formatted string output.
    """
    if as_json:
        return json.dumps([user_to_dict(u) for u in users], indent=2)

    if not users:
        return "No users found."

    table = Table(title="Users")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("External ID", justify="right")
    table.add_column("Username")
    table.add_column("Name")
    table.add_column("Active")
    table.add_column("Created")

    for user in users:
        name = " ".join(p for p in (user.first_name, user.last_name) if p)
        table.add_row(
            str(user.id),
            str(user.external_id),
            user.username or "—",
            name or "—",
            "[green]yes[/green]" if user.is_active else "[red]no[/red]",
            user.created_at[:19] if user.created_at else "—",
        )
    return _render(table)


def format_project_table(projects: list[Project], as_json: bool = False) -> str:
    """Format projects as a Rich table or JSON.

    Args:
        projects: Projects to display.
        as_json: If True, return JSON string instead of Rich table.

    Returns:
        Formatted string output.
    """
    if as_json:
        return json.dumps([project_to_dict(p) for p in projects], indent=2)

    if not projects:
        return "No projects found."

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Status")
    table.add_column("Working Directory")
    table.add_column("Created")

    for project in projects:
        color = STATUS_COLORS.get(project.status, "white")
        table.add_row(
            str(project.id),
            project.name,
            f"[{color}]{project.status}[/{color}]",
            project.working_directory or "—",
            project.created_at[:19] if project.created_at else "—",
        )
    return _render(table)
