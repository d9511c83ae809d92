"""Filesystem media library indexed in the content database."""

from __future__ import annotations

import mimetypes
import shutil
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, cast

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from contentpulse_sync.adapters.http import build_client, is_public_url, resolve_host_addresses
from contentpulse_sync.adapters.sqlalchemy.mappings import media_asset_table
from contentpulse_sync.config.http import media_fetch_config
from contentpulse_sync.domain.errors import MediaFetchFailure
from contentpulse_sync.domain.media_resolver import derive_file_name
from contentpulse_sync.domain.model import MediaHandle
from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sanitize import sanitize_file_name

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from contentpulse_sync.adapters.http import ClientFactory, HostResolver
    from contentpulse_sync.config.http import HttpConfig
    from contentpulse_sync.domain.result import Result

log = getLogger(__name__)


class SqlAlchemyMediaLibrary:
    """Media assets stored under ``media_dir``.

    ``import_remote`` only downloads from public http(s) hosts. Files handed to
    ``import_file`` are moved, not copied.
    """

    def __init__(
        self,
        session: Session,
        *,
        media_dir: Path,
        http_config: HttpConfig | None = None,
        client_factory: ClientFactory | None = None,
        resolve_host: HostResolver | None = None,
    ) -> None:
        self.session = session
        self.media_dir = media_dir
        self.http_config = http_config or media_fetch_config()
        self.client_factory = client_factory or build_client
        self.resolve_host = resolve_host or resolve_host_addresses

    def find_by_source_url(self, url: str) -> MediaHandle | None:
        stmt = (
            select(MediaHandle)
            .where(media_asset_table.c.source_url == url)
            .order_by(media_asset_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def import_remote(self, url: str, description: str) -> Result[MediaHandle, MediaFetchFailure]:
        if not is_public_url(url, resolve_host=self.resolve_host):
            return Err(MediaFetchFailure(f"A valid URL was not provided: {url}"))

        try:
            with self.client_factory(self.http_config) as client:
                response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return Err(MediaFetchFailure(f"Download of {url} failed: {exc}"))

        if not response.is_success:
            return Err(MediaFetchFailure(f"Download of {url} returned {response.status_code}"))
        if not response.content:
            return Err(MediaFetchFailure(f"Download of {url} returned an empty body"))

        file_name = derive_file_name(url, now=datetime.now(UTC))
        target = self._target_path(file_name)
        try:
            target.write_bytes(response.content)
        except OSError as exc:
            return Err(MediaFetchFailure(f"Could not store {file_name}: {exc}"))

        content_type = response.headers.get("content-type")
        return self._register(target, description, mime_type=content_type)

    def import_file(
        self, path: Path, file_name: str, description: str
    ) -> Result[MediaHandle, MediaFetchFailure]:
        if not path.is_file():
            return Err(MediaFetchFailure(f"File {path} does not exist"))
        target = self._target_path(file_name)
        try:
            shutil.move(path, target)
        except OSError as exc:
            return Err(MediaFetchFailure(f"Could not move {path} into the media library: {exc}"))
        return self._register(target, description)

    def tag_source_url(self, media: MediaHandle, url: str) -> None:
        media.source_url = url
        self.session.flush()

    def _target_path(self, file_name: str) -> Path:
        self.media_dir.mkdir(parents=True, exist_ok=True)
        name = sanitize_file_name(file_name) or "media"
        stem = PurePosixPath(name).stem
        suffix = PurePosixPath(name).suffix
        target = self.media_dir / name
        counter = 1
        while target.exists():
            target = self.media_dir / f"{stem}-{counter}{suffix}"
            counter += 1
        return target

    def _register(
        self, target: Path, description: str, *, mime_type: str | None = None
    ) -> Result[MediaHandle, MediaFetchFailure]:
        guessed, _ = mimetypes.guess_type(target.name)
        media = MediaHandle(
            file_name=target.name,
            file_path=str(target),
            mime_type=(mime_type or guessed),
            description=description,
            created_at=datetime.now(UTC),
        )
        try:
            with self.session.begin_nested():
                self.session.add(media)
        except SQLAlchemyError as exc:
            log.error("Could not register media %s: %s", target.name, exc)
            target.unlink(missing_ok=True)
            return Err(MediaFetchFailure(f"Could not register {target.name}"))
        log.info("Stored media %s as %s", media.id, target.name)
        return Ok(media)


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.media import MediaLibrary

    _media_check: MediaLibrary = SqlAlchemyMediaLibrary(
        cast("Session", object()), media_dir=Path()
    )
