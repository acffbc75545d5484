"""File path resolution using platformdirs.

Paths use platform-appropriate directories:
  macOS: ~/Library/Application Support/projectbot/
  Linux: ~/.local/share/projectbot/
  Windows: %LOCALAPPDATA%/projectbot/
"""

from pathlib import Path

import platformdirs

APP_NAME = "projectbot"


def get_data_dir() -> Path:
    """Return the directory for persistent data (the SQLite database)."""
    return Path(platformdirs.user_data_dir(APP_NAME, appauthor=False))


def get_config_dir() -> Path:
    """Return the per-user configuration directory."""
    return Path(platformdirs.user_config_dir(APP_NAME, appauthor=False))


def get_log_dir() -> Path:
    """Return the directory for application logs."""
    return Path(platformdirs.user_log_dir(APP_NAME, appauthor=False))


def get_default_db_path() -> Path:
    """Return the default SQLite database file path."""
    return get_data_dir() / "projectbot.db"


def ensure_dirs_exist() -> None:
    """Create all required directories if they don't exist."""
    for d in [get_data_dir(), get_log_dir()]:
        d.mkdir(parents=True, exist_ok=True)
