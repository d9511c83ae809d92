"""Local store entities and engine value objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contentpulse_sync.domain.model.enums import LifecycleStatus, SyncAction, Taxonomy, UserRole

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class LocalRecord:
    """A content record owned by the local store."""

    id: int | None = None
    title: str = ""
    body: str = ""
    excerpt: str = ""
    slug: str = ""
    status: LifecycleStatus = LifecycleStatus.DRAFT
    author_id: int | None = None
    published_local: datetime | None = None
    published_utc: datetime | None = None
    modified_at: datetime | None = None
    featured_media_id: int | None = None


@dataclass(eq=False, kw_only=True)
class RecordMeta:
    record_id: int
    key: str
    value: str
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class MediaHandle:
    """A locally stored media asset, tagged with the URL it was imported from."""

    id: int | None = None
    file_name: str = ""
    file_path: str = ""
    mime_type: str | None = None
    description: str = ""
    source_url: str | None = None
    created_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Term:
    taxonomy: Taxonomy
    name: str
    slug: str = ""
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class UserAccount:
    login: str
    display_name: str = ""
    role: UserRole = UserRole.AUTHOR
    id: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordAttributes:
    """Sanitized attributes the engine writes on create or update."""

    title: str
    body: str
    excerpt: str
    slug: str
    status: LifecycleStatus
    author_id: int | None = None
    published_local: datetime | None = None
    published_utc: datetime | None = None


@dataclass(frozen=True, slots=True)
class UpsertOutcome:
    action: SyncAction
    local_record_id: int
    url: str

    def as_response(self) -> dict[str, object]:
        return {"action": str(self.action), "post_id": self.local_record_id, "url": self.url}


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncEvent:
    """One successful upsert, as kept in the bounded history log."""

    action: SyncAction
    local_record_id: int
    url: str
    title: str
    status_label: str
    external_id: str | None
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        return {
            "action": str(self.action),
            "post_id": self.local_record_id,
            "url": self.url,
            "title": self.title,
            "status": self.status_label,
            "contentpulse_id": self.external_id,
            "synced_at": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> SyncEvent:
        external_id = data.get("contentpulse_id")
        raw_record_id = data.get("post_id", 0)
        return cls(
            action=SyncAction(str(data.get("action", SyncAction.UPDATED))),
            local_record_id=raw_record_id if isinstance(raw_record_id, int) else 0,
            url=str(data.get("url", "")),
            title=str(data.get("title", "")),
            status_label=str(data.get("status", "")),
            external_id=None if external_id is None else str(external_id),
            timestamp=str(data.get("synced_at", "")),
        )


@dataclass(frozen=True, slots=True)
class SyncCounters:
    last_sync_at: str | None
    total_synced: int
