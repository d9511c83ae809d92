"""Idempotent upsert of upstream content into the local store.

The external content ID is the idempotency key: a record already linked to it
is updated, otherwise a new one is created and linked. The lookup, write and
link steps are not atomic; two concurrent upserts of an unseen ID can both
create a record, and the last link written wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from logging import getLogger
from typing import TYPE_CHECKING, Final

from contentpulse_sync.domain.model import (
    RecordAttributes,
    SyncAction,
    SyncEvent,
    UpsertOutcome,
)
from contentpulse_sync.domain.reconciliation.authors import resolve_author_id
from contentpulse_sync.domain.reconciliation.dates import publish_dates
from contentpulse_sync.domain.reconciliation.seo import apply_seo_meta
from contentpulse_sync.domain.reconciliation.taxonomy import apply_taxonomies
from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sanitize import (
    sanitize_html,
    sanitize_slug,
    sanitize_text,
    sanitize_textarea,
)
from contentpulse_sync.domain.status_mapper import map_status

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentpulse_sync.domain.errors import StoreWriteError
    from contentpulse_sync.domain.model import ContentPayload, MediaHandle, SeoExtension
    from contentpulse_sync.domain.ports.history import SyncTracker
    from contentpulse_sync.domain.ports.store import ContentStore
    from contentpulse_sync.domain.result import Result

log = getLogger(__name__)

EXTERNAL_ID_META_KEY: Final[str] = "_contentpulse_id"
SYNC_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class ReconciliationEngine:
    """Create-or-update one payload against a content store.

    ``resolve_authors`` toggles byline fallback; when disabled the payload's
    author id is written as given. ``seo_extensions`` lists the third-party SEO
    extensions the caller detected as active.
    """

    store: ContentStore
    tracker: SyncTracker
    site_tz: tzinfo = UTC
    resolve_authors: bool = True
    seo_extensions: frozenset[SeoExtension] = frozenset()
    clock: Callable[[], datetime] = field(default=_utcnow)

    def find_existing(self, external_id: int | None) -> int | None:
        if external_id is None:
            return None
        matches = self.store.find_by_external_id(external_id)
        if len(matches) > 1:
            log.warning(
                "External id %s is linked to %d records (%s); using %s",
                external_id,
                len(matches),
                matches,
                matches[0],
            )
        return matches[0] if matches else None

    def build_attributes(self, payload: ContentPayload) -> RecordAttributes:
        status = map_status(payload.status_label)
        published_local, published_utc = publish_dates(
            status,
            scheduled_at=payload.scheduled_at,
            published_at=payload.published_at,
            site_tz=self.site_tz,
        )
        if self.resolve_authors:
            author_id: int | None = resolve_author_id(self.store, payload.author_id)
        else:
            author_id = payload.author_id
        return RecordAttributes(
            title=sanitize_text(payload.title),
            body=sanitize_html(payload.body_html),
            excerpt=sanitize_textarea(payload.excerpt),
            slug=sanitize_slug(payload.slug),
            status=status,
            author_id=author_id,
            published_local=published_local,
            published_utc=published_utc,
        )

    def upsert(
        self,
        payload: ContentPayload,
        media: MediaHandle | None = None,
    ) -> Result[UpsertOutcome, StoreWriteError]:
        existing_id = self.find_existing(payload.external_id)
        attributes = self.build_attributes(payload)

        if existing_id is not None:
            result = self.store.update_record(existing_id, attributes)
            action = SyncAction.UPDATED
        else:
            result = self.store.create_record(attributes)
            action = SyncAction.CREATED

        match result:
            case Err(error):
                log.error("Store rejected %s of %r: %s", action, payload.title, error.message)
                return Err(error)
            case Ok(record_id):
                pass

        if payload.external_id is not None:
            self.store.set_meta(record_id, EXTERNAL_ID_META_KEY, str(payload.external_id))
        if media is not None and media.id is not None:
            self.store.set_featured_media(record_id, media.id)

        apply_seo_meta(self.store, record_id, payload.seo, extensions=self.seo_extensions)
        apply_taxonomies(self.store, record_id, payload.categories, payload.tags)

        url = self.store.permalink(record_id)
        self._track(action, record_id, url, payload)
        log.info(
            "%s record %s for external id %s", action.capitalize(), record_id, payload.external_id
        )
        return Ok(UpsertOutcome(action=action, local_record_id=record_id, url=url))

    def _track(self, action: SyncAction, record_id: int, url: str, payload: ContentPayload) -> None:
        synced_at = self.clock().astimezone(self.site_tz).strftime(SYNC_TIMESTAMP_FORMAT)
        self.tracker.increment_counters(synced_at)
        self.tracker.record(
            SyncEvent(
                action=action,
                local_record_id=record_id,
                url=url,
                title=payload.title,
                status_label=payload.status_label,
                external_id=None if payload.external_id is None else str(payload.external_id),
                timestamp=synced_at,
            )
        )
