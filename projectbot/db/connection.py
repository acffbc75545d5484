"""Database connection management for the project bot.

Engines are built explicitly from a URL so the CLI can honour the loaded
configuration, and tests can pass their own in-memory engine.

Usage:
    from projectbot.db.connection import create_db_engine, init_db, make_session_factory

    engine = create_db_engine()
    init_db(engine)
    SessionLocal = make_session_factory(engine)

    with get_db_context(SessionLocal) as db:
        ...
"""

import logging
import os
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from projectbot.db.models import Base

logger = logging.getLogger(__name__)


def get_database_url(configured_url: str | None = None) -> str:
    """Get database URL from environment, config, or the default SQLite file.

    Precedence:
    1. DATABASE_URL (canonical)
    2. PROJECTBOT_DB_PATH (compat fallback, converted to sqlite URL)
    3. configured_url (database.url from the config file)
    4. sqlite:///<user data dir>/projectbot.db

    Args:
        configured_url: URL from the loaded configuration, if any.

    Returns:
        SQLAlchemy database URL.
    """
    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url:
        return database_url

    db_path = os.environ.get("PROJECTBOT_DB_PATH", "").strip()
    if db_path:
        if db_path.startswith("sqlite:"):
            return db_path
        return f"sqlite:///{db_path}"

    if configured_url:
        return configured_url

    from projectbot.utils.paths import get_default_db_path
    return f"sqlite:///{get_default_db_path()}"


def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    """Configure SQLite pragmas for correctness.

    Enables:
    - foreign_keys=ON: Referential integrity (disabled by default in SQLite),
      needed for ON DELETE SET NULL on the session pointer.
    - journal_mode=WAL: Concurrent readers alongside the single bot writer
      (admin CLI commands can run while the bot is polling).
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.close()


def create_db_engine(url: str | None = None, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine.

    Args:
        url: Database URL. Resolved via get_database_url() when None.
        echo: Log emitted SQL.

    Returns:
        Configured Engine.
    """
    url = url or get_database_url()
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=echo or os.environ.get("SQL_ECHO", "").lower() == "true",
    )
    if is_sqlite:
        event.listen(engine, "connect", _set_sqlite_pragma)
    logger.debug("Created database engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build a session factory bound to the engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_context(
    session_factory: Callable[[], Session],
) -> Generator[Session, None, None]:
    """Context manager for a unit of work.

    Commits on clean exit, rolls back on any exception, always closes.

    Usage:
        with get_db_context(SessionLocal) as db:
            UserService(db).deactivate_user(user_id)
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Create all database tables.

    Safe to call multiple times - will not recreate existing tables.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))
