"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag
2. ./projectbot.yaml (working directory)
3. ~/.projectbot/config.yaml (user home)
4. <platform config dir>/config.yaml

Environment variables override YAML: PROJECTBOT_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.
With no config file at all, defaults plus env overrides are used, so a
bot can be run from environment variables alone.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from projectbot.services.access_control import parse_allowed_users
from projectbot.telegram.client import DEFAULT_API_BASE_URL
from projectbot.utils.paths import get_config_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "PROJECTBOT_"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class _Section(BaseModel):
    # Env overrides coerce digits to int; let string fields take them back.
    model_config = ConfigDict(coerce_numbers_to_str=True)


class TelegramConfig(_Section):
    """Bot identity, access list, and polling settings."""

    token: str = ""
    username: str = ""
    allowed_users: list[int] = []
    poll_timeout: int = 30
    api_base_url: str = DEFAULT_API_BASE_URL

    @field_validator("allowed_users", mode="before")
    @classmethod
    def parse_allow_list(cls, value: Any) -> list[int]:
        """Accept a list, a single id, or a comma-separated string."""
        if value is None:
            return []
        if isinstance(value, int):
            return [value]
        return sorted(parse_allowed_users(value))


class WebhookConfig(_Section):
    """Webhook mode settings. Polling is used unless enabled."""

    enabled: bool = False
    url: str = ""
    host: str = "0.0.0.0"
    port: int = 8443
    path: str = "/telegram/webhook"
    secret_token: str = ""

    @model_validator(mode="after")
    def url_required_when_enabled(self) -> "WebhookConfig":
        if self.enabled and not self.url:
            raise ValueError("webhook.url is required when webhook.enabled is true")
        if not self.path.startswith("/"):
            raise ValueError("webhook.path must start with '/'")
        return self


class DatabaseConfig(_Section):
    """Database location; url overrides the default data-dir SQLite file."""

    url: str | None = None
    echo: bool = False


class LoggingConfig(_Section):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file: str | None = None


class ProjectBotConfig(BaseModel):
    """Top-level configuration for the project bot."""

    telegram: TelegramConfig = TelegramConfig()
    webhook: WebhookConfig = WebhookConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    candidates = [
        Path.cwd() / "projectbot.yaml",
        Path.cwd() / "projectbot.yml",
        Path.home() / ".projectbot" / "config.yaml",
        Path.home() / ".projectbot" / "config.yml",
        get_config_dir() / "config.yaml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _coerce_env_value(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        return value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply PROJECTBOT_<SECTION>_<KEY> env var overrides to config data.

    Matches section names by longest prefix, so ``PROJECTBOT_TELEGRAM_ALLOWED_USERS``
    maps to section ``telegram``, field ``allowed_users``. Variables that
    match no section (such as PROJECTBOT_DB_PATH) are left alone.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    known_sections = sorted(
        ProjectBotConfig.model_fields.keys(), key=len, reverse=True
    )
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        suffix = key[len(ENV_PREFIX):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        if not isinstance(data.get(matched_section), dict):
            data[matched_section] = {}
        data[matched_section][matched_field] = _coerce_env_value(value)
    return data


def find_config_path(config_path: str | None = None) -> Path | None:
    """Return the config file that load_config() would read.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    return _find_config_file()


def load_config(config_path: str | None = None) -> ProjectBotConfig:
    """Load configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, searches
            standard locations (cwd, then ~/.projectbot/).

    Returns:
        Parsed and validated ProjectBotConfig.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        pydantic.ValidationError: If the merged config is invalid.
    """
    path = find_config_path(config_path)

    raw_data: dict[str, Any] = {}
    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found; using defaults and environment")

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return ProjectBotConfig(**data)
