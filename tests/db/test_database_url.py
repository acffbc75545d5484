"""Tests for database URL resolution and engine setup."""

import pytest
from sqlalchemy import text

from projectbot.db.connection import (
    create_db_engine,
    get_database_url,
    get_db_context,
    init_db,
    make_session_factory,
)
from projectbot.db.models import User


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("PROJECTBOT_DB_PATH", raising=False)


class TestGetDatabaseUrl:
    """Precedence: DATABASE_URL, PROJECTBOT_DB_PATH, config, default file."""

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/bot")
        monkeypatch.setenv("PROJECTBOT_DB_PATH", "/tmp/bot.db")
        assert get_database_url("sqlite:///configured.db") == "postgresql://db/bot"

    def test_db_path_converted_to_sqlite_url(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOT_DB_PATH", "/tmp/bot.db")
        assert get_database_url("sqlite:///configured.db") == "sqlite:////tmp/bot.db"

    def test_db_path_already_a_url(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOT_DB_PATH", "sqlite:///x.db")
        assert get_database_url() == "sqlite:///x.db"

    def test_configured_url(self):
        assert get_database_url("sqlite:///configured.db") == "sqlite:///configured.db"

    def test_default_is_data_dir_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(
            "projectbot.utils.paths.get_default_db_path", lambda: tmp_path / "projectbot.db"
        )
        assert get_database_url() == f"sqlite:///{tmp_path / 'projectbot.db'}"


class TestEngine:
    def test_sqlite_foreign_keys_enabled(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'bot.db'}")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()

    def test_init_db_is_idempotent(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'bot.db'}")
        init_db(engine)
        init_db(engine)
        engine.dispose()


class TestGetDbContext:
    def test_commits_on_success(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'bot.db'}")
        init_db(engine)
        factory = make_session_factory(engine)

        with get_db_context(factory) as db:
            db.add(User(external_id=7))

        with get_db_context(factory) as db:
            assert db.query(User).count() == 1
        engine.dispose()

    def test_rolls_back_on_error(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'bot.db'}")
        init_db(engine)
        factory = make_session_factory(engine)

        with pytest.raises(RuntimeError):
            with get_db_context(factory) as db:
                db.add(User(external_id=7))
                db.flush()
                raise RuntimeError("boom")

        with get_db_context(factory) as db:
            assert db.query(User).count() == 0
        engine.dispose()
