"""Allow-list access gate for inbound chat events.

The gate decides, from configuration alone, whether a caller identity may
use the bot at all. An empty allow-list means open access. Denial has no
side effect beyond the rejection notice the dispatcher sends; no User
record needs to exist for the check.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from projectbot.errors.domain import UnauthorizedError

logger = logging.getLogger(__name__)


def parse_allowed_users(raw: str | Iterable[int | str] | None) -> frozenset[int]:
    """Parse an allow-list from config.

    Accepts a comma-separated string ("123, 456") or an iterable of ints
    or numeric strings. Blank entries are skipped.

    Args:
        raw: Raw allow-list value.

    Returns:
        Set of permitted caller ids.

    Raises:
        ValueError: If an entry is not an integer.
    """
    if raw is None:
        return frozenset()
    items: Iterable[int | str] = raw.split(",") if isinstance(raw, str) else raw

    allowed: set[int] = set()
    for item in items:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        try:
            allowed.add(int(item))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid user id in allow-list: {item!r}") from None
    return frozenset(allowed)


class AccessGate:
    """Allow-list check evaluated before any user-scoped work.

    Attributes:
        allowed_ids: Permitted caller ids; empty means open mode.
    """

    def __init__(self, allowed_ids: Iterable[int] = ()) -> None:
        self.allowed_ids = frozenset(allowed_ids)
        if self.open_mode:
            logger.warning("No allowed users configured; bot is open to everyone.")
        else:
            logger.info("Access restricted to %d user(s)", len(self.allowed_ids))

    @property
    def open_mode(self) -> bool:
        return not self.allowed_ids

    def is_allowed(self, external_id: int) -> bool:
        """Return True when the caller may use the bot."""
        return self.open_mode or external_id in self.allowed_ids

    def require_allowed(self, external_id: int) -> None:
        """Raise UnauthorizedError when the caller is not allowed."""
        if not self.is_allowed(external_id):
            logger.warning("Unauthorized access attempt: external_id=%s", external_id)
            raise UnauthorizedError()
