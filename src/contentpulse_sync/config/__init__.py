"""Application configuration helpers."""

from __future__ import annotations

from .contentpulse import (
    DEFAULT_CONTENTPULSE_API_URL,
    ContentPulseConfig,
    get_contentpulse_config,
    normalize_api_url,
)
from .env import env_flag
from .errors import ConfigurationError
from .http import HttpConfig, RemoteConfig, media_fetch_config
from .logging import configure_logging, log_level_from_env
from .site import SiteConfig, get_site_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SeoIntegrationMode, SyncConfig, get_sync_config

__all__ = [
    "DEFAULT_CONTENTPULSE_API_URL",
    "ConfigurationError",
    "ContentPulseConfig",
    "DatabaseConfig",
    "HttpConfig",
    "RemoteConfig",
    "SeoIntegrationMode",
    "SiteConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "env_flag",
    "get_contentpulse_config",
    "get_database_config",
    "get_site_config",
    "get_storage_config",
    "get_sync_config",
    "log_level_from_env",
    "media_fetch_config",
    "normalize_api_url",
]
