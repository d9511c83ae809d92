"""Public domain model surface."""

from __future__ import annotations

from contentpulse_sync.domain.model.enums import (
    ExternalStatus,
    LifecycleStatus,
    SeoExtension,
    SyncAction,
    Taxonomy,
    UserRole,
)
from contentpulse_sync.domain.model.payload import ContentPayload, SeoValue, TermRef
from contentpulse_sync.domain.model.records import (
    LocalRecord,
    MediaHandle,
    RecordAttributes,
    RecordMeta,
    SyncCounters,
    SyncEvent,
    Term,
    UpsertOutcome,
    UserAccount,
)

__all__ = [  # noqa: RUF022
    # payload
    "ContentPayload",
    "SeoValue",
    "TermRef",
    # store entities
    "LocalRecord",
    "MediaHandle",
    "RecordMeta",
    "Term",
    "UserAccount",
    # value objects
    "RecordAttributes",
    "SyncCounters",
    "SyncEvent",
    "UpsertOutcome",
    # enums
    "ExternalStatus",
    "LifecycleStatus",
    "SeoExtension",
    "SyncAction",
    "Taxonomy",
    "UserRole",
]
