"""HTTP client for the upstream ContentPulse API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError as PydanticValidationError

from contentpulse_sync.adapters.http import build_client
from contentpulse_sync.config.contentpulse import ContentPulseConfig, get_contentpulse_config
from contentpulse_sync.config.http import HttpConfig, RemoteConfig
from contentpulse_sync.domain.errors import AuthenticationError, RemoteCallFailure

from .schema import ContentFeed, ErrorResponse, PublishResponse

if TYPE_CHECKING:
    from collections.abc import Iterator

    from contentpulse_sync.adapters.contentpulse.schema import ContentItem
    from contentpulse_sync.adapters.http import ClientFactory

log = getLogger(__name__)

API_PREFIX: Final[str] = "/api/v1"
API_KEY_HEADER: Final[str] = "X-API-Key"
_AUTH_FAILURE_STATUSES: Final[frozenset[int]] = frozenset({401, 403})


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return ErrorResponse.model_validate(payload).message


@dataclass(slots=True)
class ContentPulseClient:
    """Best-effort calls to ContentPulse. Every failure raises; nothing is retried."""

    config: ContentPulseConfig = field(default_factory=get_contentpulse_config)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    client_factory: ClientFactory = field(default=build_client)

    def _http_config(self) -> HttpConfig:
        base = self.remote.http
        return HttpConfig(
            name=base.name,
            base_url=self.config.api_url,
            timeout_seconds=base.timeout_seconds,
            max_redirects=base.max_redirects,
            default_headers={
                API_KEY_HEADER: self.config.api_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    def _request(
        self, method: str, path: str, *, params: dict[str, int] | None = None
    ) -> httpx.Response:
        try:
            with self.client_factory(self._http_config()) as client:
                return client.request(method, path, params=params)
        except httpx.HTTPError as exc:
            raise RemoteCallFailure(f"Request to {path} failed: {exc}") from exc

    def get_content_feed(self, *, page: int = 1, per_page: int | None = None) -> ContentFeed:
        params = {"page": page, "per_page": per_page or self.remote.feed_page_size}
        response = self._request("GET", f"{API_PREFIX}/content", params=params)

        if response.status_code in _AUTH_FAILURE_STATUSES:
            raise AuthenticationError(
                "ContentPulse rejected the API key.", status=response.status_code
            )
        if not response.is_success:
            message = _error_message(response)
            detail = f": {message}" if message else ""
            raise RemoteCallFailure(f"Content feed returned HTTP {response.status_code}{detail}")

        try:
            return ContentFeed.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise RemoteCallFailure(f"Unexpected content feed payload: {exc}") from exc

    def iter_content(self, *, max_pages: int | None = None) -> Iterator[ContentItem]:
        """Walk the feed page by page until the last page or ``max_pages``."""

        limit = max_pages or self.remote.feed_max_pages
        page = 1
        while True:
            feed = self.get_content_feed(page=page)
            yield from feed.items
            page += 1
            if not feed.has_more_pages() or page > limit:
                break

    def publish_to_site(self, content_id: int) -> PublishResponse:
        path = f"{API_PREFIX}/content/{content_id}/publish-wordpress"
        try:
            response = self._request("POST", path)
        except RemoteCallFailure as exc:
            raise RemoteCallFailure(f"Ready content publish failed: {exc.message}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success or not isinstance(payload, dict):
            message = _error_message(response)
            detail = f": {message}" if message else ""
            raise RemoteCallFailure(
                f"Ready content publish failed with HTTP {response.status_code}{detail}",
                status=response.status_code or None,
            )

        log.info("ContentPulse accepted publish of content %s", content_id)
        return PublishResponse.model_validate(payload)
