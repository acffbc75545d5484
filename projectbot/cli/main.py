"""Project Bot CLI.

Entry point for running the bot and for small administrative tasks
against its database.

Usage:
    projectbot run                   Start the bot (long polling)
    projectbot run --webhook         Start the webhook server
    projectbot db init               Create database tables
    projectbot users list            List known users
    projectbot projects list 12345   List a user's projects
"""

import logging
import signal
import threading
from typing import Optional

import typer
from rich.console import Console
from sqlalchemy.orm import Session, sessionmaker

from projectbot.bot.dispatcher import UpdateDispatcher
from projectbot.cli.config import ProjectBotConfig, find_config_path, load_config
from projectbot.cli.output import format_project_table, format_user_table
from projectbot.db.connection import (
    create_db_engine,
    get_database_url,
    get_db_context,
    init_db,
    make_session_factory,
)
from projectbot.services.access_control import AccessGate
from projectbot.services.project_service import ProjectService
from projectbot.services.user_service import UserService
from projectbot.telegram.client import TelegramApiError, TelegramClient
from projectbot.telegram.polling import run_polling
from projectbot.telegram.transport import TelegramTransport
from projectbot.telegram.webhook import create_webhook_app
from projectbot.utils.logging_setup import configure_logging
from projectbot.utils.paths import ensure_dirs_exist, get_default_db_path

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="projectbot",
    help="Telegram bot for managing projects",
    no_args_is_help=True,
)
db_app = typer.Typer(help="Database management")
config_app = typer.Typer(help="Configuration management")
users_app = typer.Typer(help="Manage bot users")
projects_app = typer.Typer(help="Inspect and purge projects")

app.add_typer(db_app, name="db")
app.add_typer(config_app, name="config")
app.add_typer(users_app, name="users")
app.add_typer(projects_app, name="projects")

console = Console()

# --- Global state ---
_config_path: str | None = None


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to projectbot.yaml config file"
    ),
):
    """Project Bot CLI."""
    global _config_path
    _config_path = config


def _load_config_or_exit() -> ProjectBotConfig:
    try:
        return load_config(config_path=_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)


def _open_database(cfg: ProjectBotConfig) -> sessionmaker[Session]:
    """Create the engine, ensure tables exist, and return a session factory."""
    url = get_database_url(cfg.database.url)
    if url == f"sqlite:///{get_default_db_path()}":
        ensure_dirs_exist()
    engine = create_db_engine(url, echo=cfg.database.echo)
    init_db(engine)
    return make_session_factory(engine)


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    return "***" + secret[-4:] if len(secret) > 8 else "***"


# --- Version ---


@app.command()
def version():
    """Show Project Bot version."""
    from importlib.metadata import version as pkg_version
    try:
        v = pkg_version("projectbot")
    except Exception:
        v = "unknown"
    console.print(f"[bold]Project Bot[/bold] v{v}")


# --- Run ---


@app.command()
def run(
    webhook: bool = typer.Option(
        False, "--webhook", help="Serve a webhook instead of long polling"
    ),
):
    """Start the bot."""
    cfg = _load_config_or_exit()
    configure_logging(cfg.logging.level, cfg.logging.format, cfg.logging.file)

    if not cfg.telegram.token:
        console.print("[red]Telegram token is not configured.[/red]")
        console.print("Set telegram.token or PROJECTBOT_TELEGRAM_TOKEN.")
        raise typer.Exit(1)

    session_factory = _open_database(cfg)
    client = TelegramClient(cfg.telegram.token, api_base_url=cfg.telegram.api_base_url)
    dispatcher = UpdateDispatcher(
        transport=TelegramTransport(client),
        gate=AccessGate(cfg.telegram.allowed_users),
        session_factory=session_factory,
    )

    try:
        me = client.get_me()
        _log.info("Connected as @%s", me.get("username", cfg.telegram.username))

        if webhook or cfg.webhook.enabled:
            _serve_webhook(cfg, client, dispatcher)
        else:
            _serve_polling(cfg, client, dispatcher)
    except TelegramApiError as e:
        console.print(f"[red]Telegram API error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        client.close()


def _serve_polling(
    cfg: ProjectBotConfig, client: TelegramClient, dispatcher: UpdateDispatcher
) -> None:
    # getUpdates is refused while a webhook is registered.
    client.delete_webhook()

    stop = threading.Event()

    def _request_stop(signum, frame) -> None:
        _log.info("Received signal %s, stopping", signum)
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    console.print("[green]Bot is running (long polling).[/green] Press Ctrl+C to stop.")
    run_polling(client, dispatcher.dispatch, stop, poll_timeout=cfg.telegram.poll_timeout)


def _serve_webhook(
    cfg: ProjectBotConfig, client: TelegramClient, dispatcher: UpdateDispatcher
) -> None:
    import uvicorn

    if not cfg.webhook.url:
        console.print("[red]webhook.url is required for webhook mode.[/red]")
        raise typer.Exit(1)

    public_url = cfg.webhook.url.rstrip("/") + cfg.webhook.path
    client.set_webhook(public_url, secret_token=cfg.webhook.secret_token or None)

    webhook_app = create_webhook_app(
        dispatcher.dispatch,
        path=cfg.webhook.path,
        secret_token=cfg.webhook.secret_token or None,
    )
    console.print(
        f"[green]Serving webhook on {cfg.webhook.host}:{cfg.webhook.port}"
        f"{cfg.webhook.path}[/green]"
    )
    uvicorn.run(webhook_app, host=cfg.webhook.host, port=cfg.webhook.port, log_config=None)


# --- Database commands ---


@db_app.command("init")
def db_init():
    """Create database tables if they do not exist."""
    cfg = _load_config_or_exit()
    _open_database(cfg)
    url = get_database_url(cfg.database.url)
    console.print(f"[green]Database initialized:[/green] {url}")


# --- Config commands ---


@config_app.command("show")
def config_show():
    """Display resolved configuration (secrets masked)."""
    cfg = _load_config_or_exit()
    path = find_config_path(_config_path)
    console.print(f"[bold]Config file:[/bold] {path or '(none, defaults + environment)'}")

    console.print("\n[bold]Telegram:[/bold]")
    console.print(f"  token: {_mask(cfg.telegram.token)}")
    console.print(f"  username: {cfg.telegram.username or '(not set)'}")
    if cfg.telegram.allowed_users:
        console.print(f"  allowed_users: {', '.join(map(str, cfg.telegram.allowed_users))}")
    else:
        console.print("  allowed_users: [yellow](open access)[/yellow]")
    console.print(f"  poll_timeout: {cfg.telegram.poll_timeout}")

    console.print("\n[bold]Webhook:[/bold]")
    console.print(f"  enabled: {cfg.webhook.enabled}")
    if cfg.webhook.enabled:
        console.print(f"  url: {cfg.webhook.url}{cfg.webhook.path}")
        console.print(f"  listen: {cfg.webhook.host}:{cfg.webhook.port}")
        console.print(f"  secret_token: {_mask(cfg.webhook.secret_token)}")

    console.print("\n[bold]Database:[/bold]")
    console.print(f"  url: {get_database_url(cfg.database.url)}")

    console.print("\n[bold]Logging:[/bold]")
    console.print(f"  level: {cfg.logging.level}")
    console.print(f"  format: {cfg.logging.format}")
    if cfg.logging.file:
        console.print(f"  file: {cfg.logging.file}")


@config_app.command("validate")
def config_validate(
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
):
    """Validate configuration without starting the bot."""
    path = config or _config_path
    try:
        cfg = load_config(config_path=path)
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)

    console.print("[green]Config is valid.[/green]")
    console.print(f"  Token: {'set' if cfg.telegram.token else '[yellow]missing[/yellow]'}")
    console.print(f"  Allowed users: {len(cfg.telegram.allowed_users) or 'open access'}")
    console.print(f"  Mode: {'webhook' if cfg.webhook.enabled else 'long polling'}")


# --- User commands ---


@users_app.command("list")
def users_list(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List every user that has contacted the bot."""
    session_factory = _open_database(_load_config_or_exit())
    with get_db_context(session_factory) as db:
        output = format_user_table(UserService(db).list_users(), as_json=json_output)
    console.print(output)


def _set_user_active(external_id: int, active: bool) -> None:
    session_factory = _open_database(_load_config_or_exit())
    with get_db_context(session_factory) as db:
        svc = UserService(db)
        user = svc.find_by_external_id(external_id)
        if user is None:
            console.print(f"[red]No user with external id {external_id}.[/red]")
            raise typer.Exit(1)
        if active:
            svc.activate_user(user.id)
        else:
            svc.deactivate_user(user.id)

    state = "activated" if active else "deactivated"
    console.print(f"[green]User {external_id} {state}.[/green]")


@users_app.command("deactivate")
def users_deactivate(
    external_id: int = typer.Argument(..., help="Telegram user id"),
):
    """Block a user from using the bot."""
    _set_user_active(external_id, False)


@users_app.command("activate")
def users_activate(
    external_id: int = typer.Argument(..., help="Telegram user id"),
):
    """Re-enable a deactivated user."""
    _set_user_active(external_id, True)


# --- Project commands ---


@projects_app.command("list")
def projects_list(
    external_id: int = typer.Argument(..., help="Telegram user id"),
    include_deleted: bool = typer.Option(
        False, "--all", help="Include soft-deleted projects"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List a user's projects."""
    session_factory = _open_database(_load_config_or_exit())
    with get_db_context(session_factory) as db:
        user = UserService(db).find_by_external_id(external_id)
        if user is None:
            console.print(f"[red]No user with external id {external_id}.[/red]")
            raise typer.Exit(1)

        svc = ProjectService(db)
        projects = (
            svc.list_all_projects(user.id) if include_deleted else svc.list_projects(user.id)
        )
        output = format_project_table(projects, as_json=json_output)
    console.print(output)


@projects_app.command("purge")
def projects_purge(
    project_id: int = typer.Argument(..., help="Project id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Permanently remove a project row."""
    if not yes:
        typer.confirm(f"Permanently delete project {project_id}?", abort=True)

    session_factory = _open_database(_load_config_or_exit())
    with get_db_context(session_factory) as db:
        removed = ProjectService(db).hard_delete_project(project_id)

    if not removed:
        console.print(f"[red]Project {project_id} not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Project {project_id} purged.[/green]")


if __name__ == "__main__":
    app()
