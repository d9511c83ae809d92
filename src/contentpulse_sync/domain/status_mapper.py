"""Translate upstream lifecycle labels into local store statuses."""

from __future__ import annotations

from typing import Final

from contentpulse_sync.domain.model import ExternalStatus, LifecycleStatus

_STATUS_MAP: Final[dict[str, LifecycleStatus]] = {
    ExternalStatus.PUBLISHED: LifecycleStatus.PUBLISH,
    ExternalStatus.SCHEDULED: LifecycleStatus.FUTURE,
    ExternalStatus.DRAFT: LifecycleStatus.DRAFT,
    ExternalStatus.REVIEW: LifecycleStatus.PENDING,
    ExternalStatus.ARCHIVED: LifecycleStatus.PRIVATE,
}


def map_status(label: str) -> LifecycleStatus:
    """Return the local status for ``label``; unknown or empty labels become drafts."""

    return _STATUS_MAP.get(label, LifecycleStatus.DRAFT)
