"""Unit-of-work port: one transaction per ingestion request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from contentpulse_sync.domain.ports.history import OptionStore
    from contentpulse_sync.domain.ports.media import MediaLibrary
    from contentpulse_sync.domain.ports.store import ContentStore


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Transaction boundary around a repository collection; nothing persists before ``commit``."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ContentRepositories(RepositoryCollection):
    """Everything a single sync request reads and writes."""

    store: ContentStore
    media: MediaLibrary
    options: OptionStore


type ContentUnitOfWork = UnitOfWork[ContentRepositories]
