"""Root-level pytest fixtures for all tests.

Provides shared fixtures including:
- In-memory SQLite engine, session factory, and session
- A recording fake transport for dispatcher tests
- Common test data helpers
"""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from projectbot.bot.events import InlineKeyboard
from projectbot.db.connection import make_session_factory
from projectbot.db.models import Base, Project, User
from projectbot.services.user_service import CallerProfile


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared by every session in a test.

    StaticPool keeps a single connection so separate sessions (the
    dispatcher opens one per unit of work) see the same database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Database session for direct service and mapper tests."""
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# Test Data Helpers
# ============================================================================


@pytest.fixture
def make_user(db: Session):
    """Factory inserting a User row."""

    def _make(external_id: int = 1001, first_name: str = "Ada") -> User:
        user = User(external_id=external_id, first_name=first_name, is_active=True)
        db.add(user)
        db.flush()
        return user

    return _make


@pytest.fixture
def make_project(db: Session):
    """Factory inserting a Project row directly, bypassing the service."""

    def _make(user: User, name: str = "api", status: str = "ACTIVE") -> Project:
        project = Project(user_id=user.id, name=name, status=status)
        db.add(project)
        db.flush()
        return project

    return _make


@pytest.fixture
def user(make_user) -> User:
    return make_user()


@pytest.fixture
def other_user(make_user) -> User:
    return make_user(external_id=2002, first_name="Bob")


# ============================================================================
# Transport Fixtures
# ============================================================================


class FakeTransport:
    """BotTransport that records every outbound call."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str, InlineKeyboard]] = []
        self.answers: list[tuple[str, str | None]] = []

    def send_text(self, chat_id: int, text: str) -> None:
        self.messages.append((chat_id, text, []))

    def send_text_with_keyboard(self, chat_id: int, text: str, keyboard: InlineKeyboard) -> None:
        self.messages.append((chat_id, text, keyboard))

    def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        self.answers.append((callback_id, text))

    @property
    def last_text(self) -> str:
        return self.messages[-1][1]

    @property
    def last_keyboard(self) -> InlineKeyboard:
        return self.messages[-1][2]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def caller_a() -> CallerProfile:
    return CallerProfile(external_id=1001, username="ada", first_name="Ada")


@pytest.fixture
def caller_b() -> CallerProfile:
    return CallerProfile(external_id=2002, username="bob", first_name="Bob")
