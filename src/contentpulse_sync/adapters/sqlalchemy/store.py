"""SQLAlchemy implementation of the content store ports."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from contentpulse_sync.adapters.sqlalchemy.mappings import (
    content_record_table,
    option_table,
    record_meta_table,
    record_term_table,
    term_table,
    user_account_table,
)
from contentpulse_sync.domain.errors import StoreWriteError
from contentpulse_sync.domain.model import (
    LifecycleStatus,
    LocalRecord,
    MediaHandle,
    RecordMeta,
    SeoExtension,
    Taxonomy,
    Term,
    UserAccount,
    UserRole,
)
from contentpulse_sync.domain.reconciliation.engine import EXTERNAL_ID_META_KEY
from contentpulse_sync.domain.reconciliation.seo import ACTIVE_SEO_EXTENSIONS_OPTION
from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sanitize import sanitize_slug

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from contentpulse_sync.domain.model import RecordAttributes
    from contentpulse_sync.domain.result import Result

log = getLogger(__name__)

MEDIA_URL_PATH: Final[str] = "media"
_FALLBACK_SLUG: Final[str] = "record"


class SqlAlchemyContentStore:
    """Records, metadata, terms and users backed by one session.

    Write methods flush but never commit; the unit of work owns the transaction.
    """

    def __init__(self, session: Session, *, site_url: str, site_tz: tzinfo = UTC) -> None:
        self.session = session
        self.site_url = site_url.rstrip("/")
        self.site_tz = site_tz

    # Records --------------------------------------------------------------------

    def find_by_external_id(self, external_id: int) -> list[int]:
        stmt = (
            select(record_meta_table.c.record_id)
            .where(record_meta_table.c.meta_key == EXTERNAL_ID_META_KEY)
            .where(record_meta_table.c.meta_value == str(external_id))
            .order_by(record_meta_table.c.record_id)
        )
        return list(self.session.execute(stmt).scalars())

    def get_record(self, record_id: int) -> LocalRecord | None:
        return self.session.get(LocalRecord, record_id)

    def create_record(self, attributes: RecordAttributes) -> Result[int, StoreWriteError]:
        now = datetime.now(UTC)
        published_local = attributes.published_local
        published_utc = attributes.published_utc
        if published_utc is None:
            published_utc = now
            published_local = now.astimezone(self.site_tz).replace(tzinfo=None)

        record = LocalRecord(
            title=attributes.title,
            body=attributes.body,
            excerpt=attributes.excerpt,
            status=attributes.status,
            author_id=attributes.author_id,
            published_local=published_local,
            published_utc=published_utc,
            modified_at=now,
        )
        try:
            record.slug = self._unique_slug(attributes.slug or attributes.title, exclude_id=None)
            self.session.add(record)
            self.session.flush()
        except SQLAlchemyError as exc:
            return self._write_failed("Could not create record", exc)
        if record.id is None:
            return Err(StoreWriteError("Record was not assigned an id."))
        return Ok(record.id)

    def update_record(
        self, record_id: int, attributes: RecordAttributes
    ) -> Result[int, StoreWriteError]:
        record = self.get_record(record_id)
        if record is None:
            return Err(StoreWriteError("Invalid record ID.", code="invalid_post"))

        try:
            record.title = attributes.title
            record.body = attributes.body
            record.excerpt = attributes.excerpt
            record.status = attributes.status
            if attributes.author_id is not None:
                record.author_id = attributes.author_id
            if attributes.published_utc is not None:
                record.published_local = attributes.published_local
                record.published_utc = attributes.published_utc
            if attributes.slug:
                record.slug = self._unique_slug(attributes.slug, exclude_id=record_id)
            record.modified_at = datetime.now(UTC)
            self.session.flush()
        except SQLAlchemyError as exc:
            return self._write_failed(f"Could not update record {record_id}", exc)
        return Ok(record_id)

    def delete_record(self, record_id: int) -> Result[int, StoreWriteError]:
        record = self.get_record(record_id)
        if record is None:
            return Err(StoreWriteError("Invalid record ID.", code="invalid_post"))
        try:
            self.session.execute(
                delete(record_meta_table).where(record_meta_table.c.record_id == record_id)
            )
            self.session.execute(
                delete(record_term_table).where(record_term_table.c.record_id == record_id)
            )
            self.session.delete(record)
            self.session.flush()
        except SQLAlchemyError as exc:
            return self._write_failed(f"Could not delete record {record_id}", exc)
        return Ok(record_id)

    def permalink(self, record_id: int) -> str:
        record = self.get_record(record_id)
        if record is not None and record.status is LifecycleStatus.PUBLISH and record.slug:
            return f"{self.site_url}/{record.slug}/"
        return f"{self.site_url}/?p={record_id}"

    def _unique_slug(self, candidate: str, *, exclude_id: int | None) -> str:
        base = sanitize_slug(candidate) or _FALLBACK_SLUG
        slug = base
        suffix = 2
        while self._slug_taken(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def _slug_taken(self, slug: str, *, exclude_id: int | None) -> bool:
        stmt = select(content_record_table.c.id).where(content_record_table.c.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(content_record_table.c.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def _write_failed[T](self, message: str, exc: SQLAlchemyError) -> Result[T, StoreWriteError]:
        log.error("%s: %s", message, exc)
        return Err(StoreWriteError(f"{message}."))

    # Metadata -------------------------------------------------------------------

    def _meta_row(self, record_id: int, key: str) -> RecordMeta | None:
        stmt = (
            select(RecordMeta)
            .where(record_meta_table.c.record_id == record_id)
            .where(record_meta_table.c.meta_key == key)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_meta(self, record_id: int, key: str) -> str | None:
        row = self._meta_row(record_id, key)
        return None if row is None else row.value

    def set_meta(self, record_id: int, key: str, value: str) -> None:
        row = self._meta_row(record_id, key)
        if row is None:
            self.session.add(RecordMeta(record_id=record_id, key=key, value=value))
        else:
            row.value = value
        self.session.flush()

    def set_featured_media(self, record_id: int, media_id: int) -> None:
        record = self.get_record(record_id)
        if record is None:
            log.warning("Cannot attach media %s to missing record %s", media_id, record_id)
            return
        record.featured_media_id = media_id
        self.session.flush()

    def featured_media_url(self, record_id: int) -> str | None:
        record = self.get_record(record_id)
        if record is None or record.featured_media_id is None:
            return None
        media = self.session.get(MediaHandle, record.featured_media_id)
        if media is None:
            return None
        return f"{self.site_url}/{MEDIA_URL_PATH}/{media.file_name}"

    # Taxonomies -----------------------------------------------------------------

    def find_term(self, taxonomy: Taxonomy, name: str) -> Term | None:
        return self._select_term(taxonomy, name)

    def _select_term(self, taxonomy: Taxonomy, name: str) -> Term | None:
        stmt = (
            select(Term)
            .where(term_table.c.taxonomy == taxonomy)
            .where(term_table.c.name == name)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def create_term(self, taxonomy: Taxonomy, name: str) -> Result[Term, StoreWriteError]:
        """Insert a term inside a savepoint; a term inserted meanwhile is returned instead."""

        term = Term(taxonomy=taxonomy, name=name, slug=sanitize_slug(name))
        try:
            with self.session.begin_nested():
                self.session.add(term)
        except SQLAlchemyError as exc:
            existing = self._select_term(taxonomy, name)
            if existing is not None:
                log.info("Reusing %s %r created concurrently", taxonomy, name)
                return Ok(existing)
            return self._write_failed(f"Could not create {taxonomy} {name!r}", exc)
        return Ok(term)

    def set_record_terms(self, record_id: int, taxonomy: Taxonomy, term_ids: Sequence[int]) -> None:
        taxonomy_term_ids = select(term_table.c.id).where(term_table.c.taxonomy == taxonomy)
        self.session.execute(
            delete(record_term_table)
            .where(record_term_table.c.record_id == record_id)
            .where(record_term_table.c.term_id.in_(taxonomy_term_ids))
        )
        unique_ids = list(dict.fromkeys(term_ids))
        if unique_ids:
            self.session.execute(
                insert(record_term_table),
                [{"record_id": record_id, "term_id": term_id} for term_id in unique_ids],
            )
        self.session.flush()

    def record_terms(self, record_id: int, taxonomy: Taxonomy) -> list[Term]:
        stmt = (
            select(Term)
            .join(record_term_table, record_term_table.c.term_id == term_table.c.id)
            .where(record_term_table.c.record_id == record_id)
            .where(term_table.c.taxonomy == taxonomy)
            .order_by(term_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    # Users ----------------------------------------------------------------------

    def get_user(self, user_id: int) -> UserAccount | None:
        return self.session.get(UserAccount, user_id)

    def first_user_with_role(self, role: UserRole) -> UserAccount | None:
        stmt = (
            select(UserAccount)
            .where(user_account_table.c.role == role)
            .order_by(user_account_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    # Capabilities ---------------------------------------------------------------

    def active_seo_extensions(self) -> frozenset[SeoExtension]:
        stmt = select(option_table.c.value).where(
            option_table.c.name == ACTIVE_SEO_EXTENSIONS_OPTION
        )
        stored = self.session.execute(stmt).scalar_one_or_none()
        if not isinstance(stored, list):
            return frozenset()
        known = {extension.value for extension in SeoExtension}
        return frozenset(
            SeoExtension(value)
            for value in cast(list[object], stored)
            if isinstance(value, str) and value in known
        )


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.store import ContentStore

    _store_check: ContentStore = SqlAlchemyContentStore(cast("Session", object()), site_url="")
