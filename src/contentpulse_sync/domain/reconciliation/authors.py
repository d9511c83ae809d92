"""Byline resolution so that no record is written without an author."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from contentpulse_sync.domain.model import UserRole

if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.store import UserDirectory

DEFAULT_AUTHOR_ID: Final[int] = 1


def resolve_author_id(users: UserDirectory, requested: int | None) -> int:
    """Requested user if it exists, else the first administrator, else the default id."""

    if requested is not None and requested > 0 and users.get_user(requested) is not None:
        return requested

    admin = users.first_user_with_role(UserRole.ADMINISTRATOR)
    if admin is not None and admin.id is not None:
        return admin.id

    return DEFAULT_AUTHOR_ID
