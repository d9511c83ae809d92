"""Synchronisation defaults for the reconciliation engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Literal, cast

from .env import env_flag
from .errors import ConfigurationError

SeoIntegrationMode = Literal["auto", "yoast", "rankmath", "none"]

DEFAULT_STATUS_LABEL: Final[str] = "draft"
DEFAULT_HISTORY_LIMIT: Final[int] = 10
_SEO_MODES: Final[frozenset[str]] = frozenset({"auto", "yoast", "rankmath", "none"})


@dataclass(frozen=True, slots=True)
class SyncConfig:
    default_status_label: str = DEFAULT_STATUS_LABEL
    sideload_images: bool = True
    sync_categories: bool = True
    sync_tags: bool = True
    seo_integration: SeoIntegrationMode = "auto"
    resolve_authors: bool = True
    media_fallback: bool = True
    history_limit: int = DEFAULT_HISTORY_LIMIT


def get_sync_config() -> SyncConfig:
    seo_mode = os.getenv("CONTENTPULSE_SEO_INTEGRATION", "auto").strip().lower() or "auto"
    if seo_mode not in _SEO_MODES:
        raise ConfigurationError(f"Unsupported SEO integration mode: {seo_mode}")
    return SyncConfig(
        sideload_images=env_flag("CONTENTPULSE_SIDELOAD_IMAGES", default=True),
        sync_categories=env_flag("CONTENTPULSE_SYNC_CATEGORIES", default=True),
        sync_tags=env_flag("CONTENTPULSE_SYNC_TAGS", default=True),
        seo_integration=cast("SeoIntegrationMode", seo_mode),
        resolve_authors=env_flag("CONTENTPULSE_RESOLVE_AUTHORS", default=True),
        media_fallback=env_flag("CONTENTPULSE_MEDIA_FALLBACK", default=True),
    )
