"""Tests for the row mappers."""

from sqlalchemy.orm import Session

from projectbot.db.mappers import ProjectMapper, SessionMapper, UserMapper
from projectbot.db.models import Project, ProjectStatus, User, UserSession


class TestUserMapper:
    """Lookups return None rather than raising."""

    def test_find_by_external_id(self, db: Session, user: User):
        mapper = UserMapper(db)
        assert mapper.find_by_external_id(1001) is user
        assert mapper.find_by_external_id(9999) is None

    def test_find_by_id_missing(self, db: Session):
        assert UserMapper(db).find_by_id(12345) is None

    def test_list_all_ordered_by_id(self, db: Session, user: User, other_user: User):
        assert [u.id for u in UserMapper(db).list_all()] == [user.id, other_user.id]

    def test_update_refreshes_timestamp(self, db: Session, user: User):
        user.updated_at = "2000-01-01T00:00:00+00:00"
        UserMapper(db).update(user)
        assert user.updated_at != "2000-01-01T00:00:00+00:00"

    def test_update_active_status_counts_rows(self, db: Session, user: User):
        mapper = UserMapper(db)
        assert mapper.update_active_status(user.id, False) == 1
        assert user.is_active is False
        assert mapper.update_active_status(99999, False) == 0


class TestProjectMapper:
    """Project lookups see every status; filtering is the caller's job."""

    def test_find_by_owner_and_name_includes_deleted(self, db: Session, user: User, make_project):
        project = make_project(user, "old", status=ProjectStatus.DELETED.value)
        assert ProjectMapper(db).find_by_owner_and_name(user.id, "old") is project

    def test_find_by_owner_and_name_scoped_to_owner(
        self, db: Session, user: User, other_user: User, make_project
    ):
        make_project(other_user, "api")
        assert ProjectMapper(db).find_by_owner_and_name(user.id, "api") is None

    def test_list_by_owner_and_status(self, db: Session, user: User, make_project):
        active = make_project(user, "a")
        archived = make_project(user, "b", status=ProjectStatus.ARCHIVED.value)
        make_project(user, "c", status=ProjectStatus.DELETED.value)

        mapper = ProjectMapper(db)
        assert mapper.list_by_owner_and_status(user.id, ProjectStatus.ACTIVE) == [active]
        assert mapper.list_by_owner_and_status(user.id, ProjectStatus.ARCHIVED) == [archived]
        assert len(mapper.list_by_owner(user.id)) == 3

    def test_update_status(self, db: Session, user: User, make_project):
        project = make_project(user)
        mapper = ProjectMapper(db)
        assert mapper.update_status(project.id, ProjectStatus.ARCHIVED) == 1
        assert project.status == ProjectStatus.ARCHIVED.value
        assert mapper.update_status(99999, ProjectStatus.ARCHIVED) == 0

    def test_delete_by_id(self, db: Session, user: User, make_project):
        project = make_project(user)
        mapper = ProjectMapper(db)
        assert mapper.delete_by_id(project.id) == 1
        assert mapper.find_by_id(project.id) is None
        assert mapper.delete_by_id(project.id) == 0

    def test_insert_assigns_id(self, db: Session, user: User):
        project = ProjectMapper(db).insert(Project(user_id=user.id, name="fresh"))
        assert project.id is not None


class TestSessionMapper:
    def test_find_by_owner_missing(self, db: Session, user: User):
        assert SessionMapper(db).find_by_owner(user.id) is None

    def test_update_current_project(self, db: Session, user: User, make_project):
        project = make_project(user)
        mapper = SessionMapper(db)
        session = mapper.insert(UserSession(user_id=user.id))

        assert mapper.update_current_project(user.id, project.id) == 1
        db.refresh(session)
        assert session.current_project_id == project.id
        assert session.last_activity_at is not None

        assert mapper.update_current_project(user.id, None) == 1
        db.refresh(session)
        assert session.current_project_id is None

    def test_update_without_session_touches_nothing(self, db: Session, user: User):
        assert SessionMapper(db).update_current_project(user.id, None) == 0

    def test_update_state(self, db: Session, user: User):
        mapper = SessionMapper(db)
        session = mapper.insert(UserSession(user_id=user.id))
        assert mapper.update_state(user.id, "awaiting_name", '{"step": 1}') == 1
        db.refresh(session)
        assert session.state == "awaiting_name"
        assert session.state_data == '{"step": 1}'
