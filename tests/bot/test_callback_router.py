"""Tests for callback token resolution against live state."""

import pytest
from sqlalchemy.orm import Session

from projectbot.bot.callback_router import CallbackRouter
from projectbot.bot.context import BotServices
from projectbot.db.models import ProjectStatus, User
from projectbot.errors import (
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    UnknownActionError,
)


@pytest.fixture
def services(db: Session) -> BotServices:
    return BotServices.from_session(db)


@pytest.fixture
def router() -> CallbackRouter:
    return CallbackRouter()


class TestSelectProject:
    def test_selects_owned_active_project(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, "api")
        reply = router.route(services, user, f"select_project:{project.id}")
        assert reply.text == "Project 'api' selected!\n\nUse /current to see project details."
        assert services.sessions.current_project_id(user.id) == project.id

    def test_unknown_id(self, router: CallbackRouter, services: BotServices, user: User):
        with pytest.raises(NotFoundError, match="Project not found."):
            router.route(services, user, "select_project:9999")

    def test_deleted_project_treated_as_missing(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, status=ProjectStatus.DELETED.value)
        with pytest.raises(NotFoundError):
            router.route(services, user, f"select_project:{project.id}")

    def test_archived_since_render(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        """A button shown while ACTIVE is re-validated on press."""
        project = make_project(user, "api")
        services.projects.archive_project(project.id)
        with pytest.raises(InvalidStateError, match="This project is not active."):
            router.route(services, user, f"select_project:{project.id}")
        assert services.sessions.current_project_id(user.id) is None

    def test_other_users_project_forbidden(
        self, router: CallbackRouter, services: BotServices, user: User, other_user: User,
        make_project,
    ):
        project = make_project(user, "api")
        with pytest.raises(ForbiddenError) as exc_info:
            router.route(services, other_user, f"select_project:{project.id}")
        assert exc_info.value.message == "You don't have permission to select this project."
        assert services.sessions.current_project_id(other_user.id) is None

    def test_malformed_id(self, router: CallbackRouter, services: BotServices, user: User):
        with pytest.raises(InvalidArgumentError, match="Invalid project selection."):
            router.route(services, user, "select_project:abc")


class TestConfirmDelete:
    def test_soft_deletes_and_clears_selection(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, "api")
        services.sessions.select_project(user.id, project.id)

        reply = router.route(services, user, f"confirm_delete:{project.id}")

        assert reply.text == "Project 'api' has been deleted."
        assert project.status == ProjectStatus.DELETED.value
        assert services.sessions.current_project_id(user.id) is None
        assert services.projects.find_by_name(user.id, "api") is None

    def test_keeps_unrelated_selection(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        api = make_project(user, "api")
        web = make_project(user, "web")
        services.sessions.select_project(user.id, web.id)
        router.route(services, user, f"confirm_delete:{api.id}")
        assert services.sessions.current_project_id(user.id) == web.id

    def test_archived_project_deleted(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, "old", status=ProjectStatus.ARCHIVED.value)
        router.route(services, user, f"confirm_delete:{project.id}")
        assert project.status == ProjectStatus.DELETED.value

    def test_second_confirm_reports_missing(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, "api")
        router.route(services, user, f"confirm_delete:{project.id}")
        with pytest.raises(NotFoundError) as exc_info:
            router.route(services, user, f"confirm_delete:{project.id}")
        assert exc_info.value.message == "Project not found or already deleted."
        assert exc_info.value.hint == ""

    def test_other_users_project_forbidden(
        self, router: CallbackRouter, services: BotServices, user: User, other_user: User,
        make_project,
    ):
        project = make_project(user, "api")
        with pytest.raises(ForbiddenError, match="permission to delete"):
            router.route(services, other_user, f"confirm_delete:{project.id}")
        assert project.status == ProjectStatus.ACTIVE.value

    def test_malformed_id(self, router: CallbackRouter, services: BotServices, user: User):
        with pytest.raises(InvalidArgumentError, match="Invalid project."):
            router.route(services, user, "confirm_delete:")


class TestCancelAndUnknown:
    def test_cancel_changes_nothing(
        self, router: CallbackRouter, services: BotServices, user: User, make_project
    ):
        project = make_project(user, "api")
        reply = router.route(services, user, "cancel_delete")
        assert reply.text == "Delete cancelled."
        assert project.status == ProjectStatus.ACTIVE.value

    def test_unknown_token(self, router: CallbackRouter, services: BotServices, user: User):
        with pytest.raises(UnknownActionError):
            router.route(services, user, "launch_rockets:1")
