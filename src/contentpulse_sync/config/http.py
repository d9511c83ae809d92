"""Configuration types for outbound HTTP calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

MEDIA_FETCH_TIMEOUT_SECONDS = 20.0
REMOTE_TIMEOUT_SECONDS = 25.0
DEFAULT_MAX_REDIRECTS = 3
FEED_PAGE_SIZE = 50
FEED_MAX_PAGES = 100


@dataclass(slots=True, frozen=True)
class HttpConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    default_headers: Mapping[str, str] | None = None


@dataclass(slots=True, frozen=True)
class RemoteConfig:
    http: HttpConfig = field(
        default_factory=lambda: HttpConfig(
            name="contentpulse",
            timeout_seconds=REMOTE_TIMEOUT_SECONDS,
        )
    )
    feed_page_size: int = FEED_PAGE_SIZE
    feed_max_pages: int = FEED_MAX_PAGES


def media_fetch_config() -> HttpConfig:
    return HttpConfig(name="media-fallback", timeout_seconds=MEDIA_FETCH_TIMEOUT_SECONDS)
