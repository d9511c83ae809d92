"""Ports for the local content store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from contentpulse_sync.domain.errors import StoreWriteError
    from contentpulse_sync.domain.model import (
        LocalRecord,
        RecordAttributes,
        SeoExtension,
        Taxonomy,
        Term,
        UserAccount,
        UserRole,
    )
    from contentpulse_sync.domain.result import Result


@runtime_checkable
class RecordStore(Protocol):
    """Create, update, look up and delete content records and their metadata."""

    def find_by_external_id(self, external_id: int) -> list[int]:
        """Return ids of records linked to ``external_id``, lowest id first."""
        ...

    def get_record(self, record_id: int) -> LocalRecord | None: ...

    def create_record(self, attributes: RecordAttributes) -> Result[int, StoreWriteError]: ...

    def update_record(
        self, record_id: int, attributes: RecordAttributes
    ) -> Result[int, StoreWriteError]: ...

    def delete_record(self, record_id: int) -> Result[int, StoreWriteError]: ...

    def permalink(self, record_id: int) -> str: ...

    def get_meta(self, record_id: int, key: str) -> str | None: ...

    def set_meta(self, record_id: int, key: str, value: str) -> None: ...

    def set_featured_media(self, record_id: int, media_id: int) -> None: ...

    def featured_media_url(self, record_id: int) -> str | None: ...


@runtime_checkable
class TaxonomyStore(Protocol):
    """Find-or-create taxonomy terms and replace a record's assignments."""

    def find_term(self, taxonomy: Taxonomy, name: str) -> Term | None: ...

    def create_term(self, taxonomy: Taxonomy, name: str) -> Result[Term, StoreWriteError]: ...

    def set_record_terms(
        self, record_id: int, taxonomy: Taxonomy, term_ids: Sequence[int]
    ) -> None: ...

    def record_terms(self, record_id: int, taxonomy: Taxonomy) -> list[Term]: ...


@runtime_checkable
class UserDirectory(Protocol):
    def get_user(self, user_id: int) -> UserAccount | None: ...

    def first_user_with_role(self, role: UserRole) -> UserAccount | None: ...


@runtime_checkable
class SiteCapabilities(Protocol):
    def active_seo_extensions(self) -> frozenset[SeoExtension]: ...


@runtime_checkable
class ContentStore(RecordStore, TaxonomyStore, UserDirectory, SiteCapabilities, Protocol):
    """Full capability interface the reconciliation engine runs against."""
