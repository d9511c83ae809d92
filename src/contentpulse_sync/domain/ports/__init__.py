"""Domain port definitions for adapters."""

from __future__ import annotations

from .history import OptionStore, SyncTracker
from .media import FetchedFile, MediaLibrary, RemoteFileFetcher
from .store import (
    ContentStore,
    RecordStore,
    SiteCapabilities,
    TaxonomyStore,
    UserDirectory,
)
from .unit_of_work import (
    ContentRepositories,
    ContentUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ContentRepositories",
    "ContentStore",
    "ContentUnitOfWork",
    "FetchedFile",
    "MediaLibrary",
    "OptionStore",
    "RecordStore",
    "RemoteFileFetcher",
    "RepositoryCollection",
    "SiteCapabilities",
    "SyncTracker",
    "TaxonomyStore",
    "UnitOfWork",
    "UserDirectory",
]
