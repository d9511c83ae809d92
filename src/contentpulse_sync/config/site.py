"""Local site configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError

DEFAULT_SITE_URL = "http://localhost"
DEFAULT_PLATFORM_VERSION = "6.5"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    site_url: str = DEFAULT_SITE_URL
    timezone: ZoneInfo = ZoneInfo("UTC")
    platform_version: str = DEFAULT_PLATFORM_VERSION


def get_site_config() -> SiteConfig:
    site_url = os.getenv("CONTENTPULSE_SITE_URL", "").strip().rstrip("/") or DEFAULT_SITE_URL
    tz_name = os.getenv("CONTENTPULSE_SITE_TIMEZONE", "").strip() or "UTC"
    try:
        timezone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown site timezone: {tz_name}") from exc
    return SiteConfig(
        site_url=site_url,
        timezone=timezone,
        platform_version=os.getenv("CONTENTPULSE_PLATFORM_VERSION", DEFAULT_PLATFORM_VERSION),
    )
