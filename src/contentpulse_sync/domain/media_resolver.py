"""Resolve remote image URLs to local media handles.

Lookup order: an asset already tagged with the source URL, then the library's
own remote import, then (optionally) a direct download handed to the library's
local-file import. Failures never raise; callers continue without an image.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit

from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sanitize import sanitize_file_name

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentpulse_sync.domain.model import MediaHandle
    from contentpulse_sync.domain.ports.media import MediaLibrary, RemoteFileFetcher

log = getLogger(__name__)

FALLBACK_FILE_PREFIX = "contentpulse-image-"
FALLBACK_FILE_EXTENSION = ".jpg"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def derive_file_name(url: str, *, now: datetime) -> str:
    """File name from the URL path, or a timestamped name when the path has none."""

    try:
        path = unquote(urlsplit(url).path)
    except ValueError:
        path = ""
    candidate = PurePosixPath(path).name if path else ""
    if not candidate or candidate == "/" or "?" in candidate:
        candidate = f"{FALLBACK_FILE_PREFIX}{now:%Y%m%d%H%M%S}{FALLBACK_FILE_EXTENSION}"
    sanitized = sanitize_file_name(candidate)
    return sanitized or f"{FALLBACK_FILE_PREFIX}{now:%Y%m%d%H%M%S}{FALLBACK_FILE_EXTENSION}"


@dataclass(slots=True)
class MediaResolver:
    library: MediaLibrary
    fetcher: RemoteFileFetcher | None = None
    clock: Callable[[], datetime] = field(default=_utcnow)

    def sideload(self, url: str, description: str = "") -> MediaHandle | None:
        if not url:
            return None

        existing = self.library.find_by_source_url(url)
        if existing is not None:
            log.info("Reusing media %s for %s", existing.id, url)
            return existing

        match self.library.import_remote(url, description):
            case Ok(handle):
                media = handle
            case Err(error):
                log.warning("Remote import of %s failed: %s", url, error.message)
                fallback = self._manual_import(url, description)
                if fallback is None:
                    return None
                media = fallback

        self.library.tag_source_url(media, url)
        return media

    def _manual_import(self, url: str, description: str) -> MediaHandle | None:
        if self.fetcher is None:
            return None

        match self.fetcher(url):
            case Err(error):
                log.warning("Direct download of %s failed: %s", url, error.message)
                return None
            case Ok(fetched):
                response = fetched

        if not response.is_success or not response.content:
            log.warning(
                "Direct download of %s returned status %s with %s bytes",
                url,
                response.status_code,
                len(response.content),
            )
            return None

        file_name = derive_file_name(url, now=self.clock())
        suffix = PurePosixPath(file_name).suffix
        handle, raw_path = tempfile.mkstemp(prefix="contentpulse-", suffix=suffix)
        tmp_path = Path(raw_path)
        try:
            with os.fdopen(handle, "wb") as tmp_file:
                tmp_file.write(response.content)
        except OSError:
            log.exception("Could not write temporary file for %s", url)
            tmp_path.unlink(missing_ok=True)
            return None

        match self.library.import_file(tmp_path, file_name, description):
            case Ok(media):
                return media
            case Err(error):
                log.warning("Local import of %s failed: %s", file_name, error.message)
                tmp_path.unlink(missing_ok=True)
                return None
