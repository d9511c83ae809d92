"""Ports for the media library and raw remote fetches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from contentpulse_sync.domain.errors import MediaFetchFailure
    from contentpulse_sync.domain.model import MediaHandle
    from contentpulse_sync.domain.result import Result


@dataclass(frozen=True, slots=True)
class FetchedFile:
    """Raw response of a direct download."""

    status_code: int
    content: bytes
    content_type: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300  # noqa: PLR2004


@runtime_checkable
class MediaLibrary(Protocol):
    """Local media storage with the host's own remote import facility."""

    def find_by_source_url(self, url: str) -> MediaHandle | None: ...

    def import_remote(self, url: str, description: str) -> Result[MediaHandle, MediaFetchFailure]:
        """Import ``url`` using the library's standard (strictly validated) download."""
        ...

    def import_file(
        self, path: Path, file_name: str, description: str
    ) -> Result[MediaHandle, MediaFetchFailure]:
        """Take ownership of a local file and register it as a media asset."""
        ...

    def tag_source_url(self, media: MediaHandle, url: str) -> None: ...


@runtime_checkable
class RemoteFileFetcher(Protocol):
    """Single direct GET with bounded timeout and redirects, no retries."""

    def __call__(self, url: str) -> Result[FetchedFile, MediaFetchFailure]: ...
