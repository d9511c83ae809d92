"""ContentPulse API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CONTENTPULSE_API_URL = "http://host.docker.internal:8080"
_API_PREFIX = "/api/v1"


def normalize_api_url(url: str) -> str:
    """Strip whitespace, trailing slashes and a trailing ``/api/v1`` segment."""

    normalized = url.strip().rstrip("/")
    if normalized.endswith(_API_PREFIX):
        return normalized[: -len(_API_PREFIX)]
    return normalized


@dataclass(frozen=True, slots=True)
class ContentPulseConfig:
    """Shared secret and upstream location for the ContentPulse API."""

    api_key: str = ""
    api_url: str = DEFAULT_CONTENTPULSE_API_URL

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())


def get_contentpulse_config() -> ContentPulseConfig:
    configured = os.getenv("CONTENTPULSE_API_URL", "")
    if not configured.strip():
        configured = DEFAULT_CONTENTPULSE_API_URL
    return ContentPulseConfig(
        api_key=os.getenv("CONTENTPULSE_API_KEY", "").strip(),
        api_url=normalize_api_url(configured),
    )
