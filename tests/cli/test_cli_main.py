"""Tests for the typer CLI against a temporary SQLite database."""

import json
import os
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from projectbot.cli.main import app
from projectbot.db.connection import create_db_engine, get_db_context, init_db, make_session_factory
from projectbot.db.models import ProjectStatus
from projectbot.services.project_service import ProjectService
from projectbot.services.session_service import SessionService
from projectbot.services.user_service import CallerProfile, UserService

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("PROJECTBOT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr("projectbot.cli.config.get_config_dir", lambda: tmp_path / "platform")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'bot.db'}")


@pytest.fixture
def seeded(tmp_path):
    """Database with Ada (one active, one archived, one deleted project) and Bob."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'bot.db'}")
    init_db(engine)
    factory = make_session_factory(engine)

    with get_db_context(factory) as db:
        users = UserService(db)
        ada = users.resolve(CallerProfile(external_id=1001, username="ada", first_name="Ada"))
        users.resolve(CallerProfile(external_id=2002, username="bob", first_name="Bob"))

        projects = ProjectService(db)
        api = projects.create_project(ada.id, "api")
        old = projects.create_project(ada.id, "old")
        gone = projects.create_project(ada.id, "gone")
        projects.archive_project(old.id)
        projects.soft_delete_project(gone.id)
        SessionService(db).select_project(ada.id, api.id)
        ids = {"ada": ada.id, "api": api.id, "gone": gone.id}

    yield factory, ids
    engine.dispose()


class TestVersionAndConfig:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Project Bot" in result.output

    def test_config_validate_defaults(self):
        result = runner.invoke(app, ["config", "validate"])
        assert result.exit_code == 0
        assert "Config is valid." in result.output
        assert "open access" in result.output

    def test_config_validate_missing_file(self, tmp_path):
        result = runner.invoke(app, ["config", "validate", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_validate_invalid(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("webhook:\n  enabled: true\n")
        result = runner.invoke(app, ["--config", str(path), "config", "validate"])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output

    def test_config_show_masks_token(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOT_TELEGRAM_TOKEN", "123456:SECRETVALUE")
        monkeypatch.setenv("PROJECTBOT_TELEGRAM_ALLOWED_USERS", "1001")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "SECRETVALUE" not in result.output
        assert "***ALUE" in result.output
        assert "allowed_users: 1001" in result.output


class TestDbInit:
    def test_creates_tables(self, tmp_path):
        result = runner.invoke(app, ["db", "init"])
        assert result.exit_code == 0
        assert "Database initialized" in result.output
        assert (tmp_path / "bot.db").exists()


class TestUsers:
    def test_list_json(self, seeded):
        result = runner.invoke(app, ["users", "list", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [u["external_id"] for u in data] == [1001, 2002]

    def test_list_empty(self):
        result = runner.invoke(app, ["users", "list"])
        assert result.exit_code == 0
        assert "No users found." in result.output

    def test_deactivate_and_activate(self, seeded):
        factory, ids = seeded

        result = runner.invoke(app, ["users", "deactivate", "1001"])
        assert result.exit_code == 0
        assert "User 1001 deactivated." in result.output
        with get_db_context(factory) as db:
            assert UserService(db).find_by_id(ids["ada"]).is_active is False

        result = runner.invoke(app, ["users", "activate", "1001"])
        assert result.exit_code == 0
        with get_db_context(factory) as db:
            assert UserService(db).find_by_id(ids["ada"]).is_active is True

    def test_unknown_user(self, seeded):
        result = runner.invoke(app, ["users", "deactivate", "999"])
        assert result.exit_code == 1
        assert "No user with external id 999." in result.output


class TestProjects:
    def test_list_hides_deleted(self, seeded):
        result = runner.invoke(app, ["projects", "list", "1001", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert {p["name"]: p["status"] for p in data} == {"api": "ACTIVE", "old": "ARCHIVED"}

    def test_list_all_includes_deleted(self, seeded):
        result = runner.invoke(app, ["projects", "list", "1001", "--all", "--json"])
        names = {p["name"] for p in json.loads(result.output)}
        assert names == {"api", "old", "gone"}

    def test_list_unknown_user(self, seeded):
        result = runner.invoke(app, ["projects", "list", "999"])
        assert result.exit_code == 1

    def test_purge_with_yes(self, seeded):
        factory, ids = seeded
        result = runner.invoke(app, ["projects", "purge", str(ids["api"]), "--yes"])
        assert result.exit_code == 0
        assert f"Project {ids['api']} purged." in result.output

        with get_db_context(factory) as db:
            assert ProjectService(db).find_by_id(ids["api"]) is None
            assert SessionService(db).current_project_id(ids["ada"]) is None

    def test_purge_frees_name(self, seeded):
        factory, ids = seeded
        runner.invoke(app, ["projects", "purge", str(ids["gone"]), "-y"])
        with get_db_context(factory) as db:
            project = ProjectService(db).create_project(ids["ada"], "gone")
            assert project.status == ProjectStatus.ACTIVE.value

    def test_purge_declined(self, seeded):
        factory, ids = seeded
        result = runner.invoke(app, ["projects", "purge", str(ids["api"])], input="n\n")
        assert result.exit_code == 1
        with get_db_context(factory) as db:
            assert ProjectService(db).find_by_id(ids["api"]) is not None

    def test_purge_missing(self, seeded):
        result = runner.invoke(app, ["projects", "purge", "9999", "--yes"])
        assert result.exit_code == 1
        assert "Project 9999 not found." in result.output


class TestRun:
    def test_missing_token(self, monkeypatch):
        monkeypatch.setattr("projectbot.cli.main.configure_logging", MagicMock())
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 1
        assert "Telegram token is not configured." in result.output

    def test_starts_polling(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOT_TELEGRAM_TOKEN", "123:ABC")
        monkeypatch.setattr("projectbot.cli.main.configure_logging", MagicMock())
        client = MagicMock()
        client.get_me.return_value = {"username": "project_bot"}
        monkeypatch.setattr("projectbot.cli.main.TelegramClient", MagicMock(return_value=client))
        serve_polling = MagicMock()
        monkeypatch.setattr("projectbot.cli.main._serve_polling", serve_polling)

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0, result.output
        serve_polling.assert_called_once()
        client.close.assert_called_once()

    def test_webhook_flag(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOT_TELEGRAM_TOKEN", "123:ABC")
        monkeypatch.setattr("projectbot.cli.main.configure_logging", MagicMock())
        monkeypatch.setattr("projectbot.cli.main.TelegramClient", MagicMock())
        serve_webhook = MagicMock()
        monkeypatch.setattr("projectbot.cli.main._serve_webhook", serve_webhook)

        result = runner.invoke(app, ["run", "--webhook"])

        assert result.exit_code == 0, result.output
        serve_webhook.assert_called_once()
