"""Service for resolving transport callers to durable User records.

The transport supplies a verified caller identity plus display fields on
every event. UserService maps that to a User row, creating it on first
contact and refreshing display fields only when they actually changed.

Example:
    svc = UserService(db)
    user = svc.resolve(CallerProfile(external_id=42, first_name="Ada"))
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from projectbot.db.mappers import UserMapper
from projectbot.db.models import User

logger = logging.getLogger(__name__)

# Display fields copied from the caller profile onto the User row.
PROFILE_FIELDS = ("username", "first_name", "last_name", "language_code")


@dataclass(frozen=True)
class CallerProfile:
    """Caller identity and display fields as reported by the transport.

    Attributes:
        external_id: Verified account identifier.
        username: Account handle, if any.
        first_name: Given name, if any.
        last_name: Family name, if any.
        language_code: Client language tag, if any.
    """

    external_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    language_code: str | None = None


class UserService:
    """Identity resolution and activation management for users.

    Methods do NOT call db.commit(); the caller is responsible for committing.
    """

    def __init__(self, db: Session) -> None:
        """Initialize with a SQLAlchemy session.

        Args:
            db: Active database session.
        """
        self.db = db
        self.users = UserMapper(db)

    def find_by_id(self, user_id: int) -> User | None:
        return self.users.find_by_id(user_id)

    def find_by_external_id(self, external_id: int) -> User | None:
        return self.users.find_by_external_id(external_id)

    def list_users(self) -> list[User]:
        return self.users.list_all()

    def resolve(self, profile: CallerProfile) -> User:
        """Return the User for a caller, creating or refreshing it.

        Has no notion of authorization; the access gate runs first.

        Args:
            profile: Caller identity and display fields.

        Returns:
            The existing or newly created User.
        """
        user = self.users.find_by_external_id(profile.external_id)
        if user is None:
            return self._create_user(profile)
        return self._update_if_needed(user, profile)

    def _create_user(self, profile: CallerProfile) -> User:
        user = User(
            external_id=profile.external_id,
            username=profile.username,
            first_name=profile.first_name,
            last_name=profile.last_name,
            language_code=profile.language_code,
            is_active=True,
        )
        self.users.insert(user)
        logger.info(
            "Created new user: external_id=%s, username=%s",
            user.external_id,
            user.username,
        )
        return user

    def _update_if_needed(self, user: User, profile: CallerProfile) -> User:
        changed = False
        for field_name in PROFILE_FIELDS:
            new_value = getattr(profile, field_name)
            if getattr(user, field_name) != new_value:
                setattr(user, field_name, new_value)
                changed = True

        if changed:
            self.users.update(user)
            logger.debug("Updated user info: external_id=%s", user.external_id)
        return user

    def deactivate_user(self, user_id: int) -> bool:
        """Mark a user inactive. Returns False if the id does not exist."""
        updated = self.users.update_active_status(user_id, False) > 0
        if updated:
            logger.info("Deactivated user: id=%s", user_id)
        return updated

    def activate_user(self, user_id: int) -> bool:
        """Mark a user active. Returns False if the id does not exist."""
        updated = self.users.update_active_status(user_id, True) > 0
        if updated:
            logger.info("Activated user: id=%s", user_id)
        return updated
