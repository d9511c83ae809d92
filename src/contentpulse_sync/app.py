"""Application object wiring configuration, adapters and the reconciliation engine."""

from __future__ import annotations

import platform
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy.exc import SQLAlchemyError

from contentpulse_sync import __version__
from contentpulse_sync.adapters.http import HttpFileFetcher
from contentpulse_sync.adapters.sqlalchemy import unit_of_work as sqlalchemy_uow
from contentpulse_sync.boundary.auth import check_api_key, provided_api_key
from contentpulse_sync.config import (
    ContentPulseConfig,
    SiteConfig,
    StorageConfig,
    SyncConfig,
    get_contentpulse_config,
    get_database_config,
    get_site_config,
    get_storage_config,
    get_sync_config,
)
from contentpulse_sync.domain.errors import NotFoundError, StoreWriteError
from contentpulse_sync.domain.media_resolver import MediaResolver
from contentpulse_sync.domain.model import SeoExtension
from contentpulse_sync.domain.ports.unit_of_work import ContentUnitOfWork
from contentpulse_sync.domain.reconciliation import (
    ACTIVE_SEO_EXTENSIONS_OPTION,
    EXTERNAL_ID_META_KEY,
    ReconciliationEngine,
)
from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sync_history import SyncHistoryLog

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Engine

    from contentpulse_sync.domain.model import (
        ContentPayload,
        LocalRecord,
        MediaHandle,
        UpsertOutcome,
    )
    from contentpulse_sync.domain.ports.media import RemoteFileFetcher
    from contentpulse_sync.domain.ports.store import SiteCapabilities
    from contentpulse_sync.domain.result import Result

type UnitOfWorkFactory = Callable[[], ContentUnitOfWork]

log = getLogger(__name__)

STATUS_HISTORY_LIMIT: Final[int] = 5
REST_API_VERSION: Final[str] = "v1"
BLOCKS_MIN_PLATFORM_VERSION: Final[tuple[int, ...]] = (5, 0)
DISPLAY_DATETIME_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


class AppNotBootedError(RuntimeError):
    """Raised when the application is used before ``boot()``."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _version_tuple(version: str) -> tuple[int, ...]:
    parts: list[int] = []
    for part in version.split("."):
        digits = "".join(char for char in part if char.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


@dataclass(slots=True)
class ContentPulseApp:
    """Process-wide application state with an explicit lifecycle.

    Without an injected ``unit_of_work_factory``, ``boot()`` starts the SQLAlchemy
    adapter and requests run against it; ``shutdown()`` disposes the engine again.
    """

    contentpulse: ContentPulseConfig = field(default_factory=get_contentpulse_config)
    sync: SyncConfig = field(default_factory=get_sync_config)
    site: SiteConfig = field(default_factory=get_site_config)
    storage: StorageConfig = field(default_factory=get_storage_config)
    unit_of_work_factory: UnitOfWorkFactory | None = None
    media_fetcher: RemoteFileFetcher | None = None
    engine: Engine | None = None
    database_uri: str | None = None
    clock: Callable[[], datetime] = field(default=_utcnow)
    _uow_factory: UnitOfWorkFactory | None = field(default=None, init=False, repr=False)
    _owns_database: bool = field(default=False, init=False, repr=False)

    # Lifecycle --------------------------------------------------------------------

    def boot(self) -> ContentPulseApp:
        if self._uow_factory is not None:
            return self
        if self.unit_of_work_factory is not None:
            self._uow_factory = self.unit_of_work_factory
        else:
            sqlalchemy_uow.startup(
                engine=self.engine,
                database_uri=self.database_uri or get_database_config(storage=self.storage).uri,
                force=True,
            )
            self._owns_database = True
            self._uow_factory = self._sqlalchemy_unit_of_work
        log.info("ContentPulse sync %s booted for %s", __version__, self.site.site_url)
        return self

    def shutdown(self) -> None:
        if self._owns_database:
            sqlalchemy_uow.shutdown()
            self._owns_database = False
        self._uow_factory = None

    @property
    def is_booted(self) -> bool:
        return self._uow_factory is not None

    def _sqlalchemy_unit_of_work(self) -> ContentUnitOfWork:
        return sqlalchemy_uow.SqlAlchemyContentUnitOfWork(
            site_url=self.site.site_url,
            media_dir=self.storage.media_dir(),
            site_tz=self.site.timezone,
        )

    def _unit_of_work(self) -> ContentUnitOfWork:
        if self._uow_factory is None:
            raise AppNotBootedError("Call ContentPulseApp.boot() before handling requests.")
        return self._uow_factory()

    # Collaborators ------------------------------------------------------------------

    @property
    def fallback_fetcher(self) -> RemoteFileFetcher | None:
        if not self.sync.media_fallback:
            return None
        return self.media_fetcher or HttpFileFetcher()

    def seo_extensions(self, capabilities: SiteCapabilities) -> frozenset[SeoExtension]:
        match self.sync.seo_integration:
            case "auto":
                return capabilities.active_seo_extensions()
            case "yoast":
                return frozenset({SeoExtension.YOAST})
            case "rankmath":
                return frozenset({SeoExtension.RANK_MATH})
            case "none":
                return frozenset()

    def authenticate(self, headers: Mapping[str, str], query: Mapping[str, str]) -> bool:
        return check_api_key(self.contentpulse.api_key, provided_api_key(headers, query))

    # Operations ---------------------------------------------------------------------

    def sideload(self, url: str, description: str = "") -> MediaHandle | None:
        """Import a featured image in its own transaction; ``None`` when it cannot be had."""

        with self._unit_of_work() as uow:
            resolver = MediaResolver(
                library=uow.repositories.media,
                fetcher=self.fallback_fetcher,
                clock=self.clock,
            )
            media = resolver.sideload(url, description)
            uow.commit()
        return media

    def upsert(self, payload: ContentPayload) -> Result[UpsertOutcome, StoreWriteError]:
        media = None
        if self.sync.sideload_images and payload.featured_image_url:
            media = self.sideload(payload.featured_image_url, payload.title)
        if not self.sync.sync_categories:
            payload = replace(payload, categories=())
        if not self.sync.sync_tags:
            payload = replace(payload, tags=())

        with self._unit_of_work() as uow:
            repositories = uow.repositories
            engine = ReconciliationEngine(
                store=repositories.store,
                tracker=SyncHistoryLog(repositories.options, max_items=self.sync.history_limit),
                site_tz=self.site.timezone,
                resolve_authors=self.sync.resolve_authors,
                seo_extensions=self.seo_extensions(repositories.store),
                clock=self.clock,
            )
            try:
                result = engine.upsert(payload, media)
            except SQLAlchemyError:
                log.exception("Saving %r failed", payload.title)
                result = Err(StoreWriteError("Failed to save post."))
            match result:
                case Ok(_):
                    uow.commit()
                case Err(_):
                    uow.rollback()
        return result

    def show(self, record_id: int) -> dict[str, object]:
        with self._unit_of_work() as uow:
            store = uow.repositories.store
            record = store.get_record(record_id)
            if record is None:
                raise NotFoundError("Post not found.")
            return {
                "id": record.id,
                "title": record.title,
                "slug": record.slug,
                "status": str(record.status),
                "content": record.body,
                "excerpt": record.excerpt,
                "featured_image": store.featured_media_url(record_id),
                "contentpulse_id": store.get_meta(record_id, EXTERNAL_ID_META_KEY) or None,
                "published_at": self._local_timestamp(record, "published"),
                "modified_at": self._local_timestamp(record, "modified"),
            }

    def _local_timestamp(self, record: LocalRecord, which: str) -> str | None:
        if which == "published":
            if record.published_local is not None:
                return record.published_local.strftime(DISPLAY_DATETIME_FORMAT)
            value = record.published_utc
        else:
            value = record.modified_at
        if value is None:
            return None
        return value.astimezone(self.site.timezone).strftime(DISPLAY_DATETIME_FORMAT)

    def destroy(self, record_id: int) -> dict[str, object]:
        with self._unit_of_work() as uow:
            store = uow.repositories.store
            if store.get_record(record_id) is None:
                raise NotFoundError("Post not found.")
            match store.delete_record(record_id):
                case Err(error):
                    uow.rollback()
                    log.error("Deleting record %s failed: %s", record_id, error.message)
                    raise StoreWriteError("Failed to delete post.", code="delete_failed")
                case Ok(_):
                    uow.commit()
        log.info("Deleted record %s", record_id)
        return {"deleted": True, "id": record_id}

    def recent_syncs(self, limit: int = STATUS_HISTORY_LIMIT) -> list[dict[str, object]]:
        with self._unit_of_work() as uow:
            history = SyncHistoryLog(uow.repositories.options, max_items=self.sync.history_limit)
            return [event.to_dict() for event in history.latest(limit)]

    def ingestion_status(self) -> dict[str, object]:
        with self._unit_of_work() as uow:
            history = SyncHistoryLog(uow.repositories.options, max_items=self.sync.history_limit)
            counters = history.counters()
            recent = [event.to_dict() for event in history.latest(STATUS_HISTORY_LIMIT)]
        return {
            "status": "ready",
            "last_sync_at": counters.last_sync_at,
            "total_synced": counters.total_synced,
            "recent_syncs": recent,
            "plugin_version": __version__,
        }

    def plugin_info(self) -> dict[str, object]:
        platform_version = self.site.platform_version
        return {
            "plugin_version": __version__,
            "platform_version": platform_version,
            "runtime_version": platform.python_version(),
            "supports_blocks": _version_tuple(platform_version) >= BLOCKS_MIN_PLATFORM_VERSION,
            "rest_api_version": REST_API_VERSION,
        }

    def set_active_seo_extensions(self, extensions: frozenset[SeoExtension]) -> None:
        """Record which SEO extensions are active, as read by the ``auto`` mode."""

        with self._unit_of_work() as uow:
            uow.repositories.options.set_option(
                ACTIVE_SEO_EXTENSIONS_OPTION, sorted(str(extension) for extension in extensions)
            )
            uow.commit()
