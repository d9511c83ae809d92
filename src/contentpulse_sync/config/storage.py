"""Where the sync database and imported media live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "contentpulse-sync"
DEFAULT_DB_FILENAME: Final[str] = "contentpulse.db"
MEDIA_DIR_NAME: Final[str] = "media"
DATA_DIR_ENV: Final[str] = "CONTENTPULSE_DATA_DIR"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding the SQLite database and the ``media`` folder.

    Both accessors create the directories they return.
    """

    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _ensured(self, *parts: str) -> Path:
        path = self.resolve_data_dir().joinpath(*parts)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def media_dir(self) -> Path:
        return self._ensured(MEDIA_DIR_NAME)

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self._ensured() / DEFAULT_DB_FILENAME}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` when set, else a SQLite file in the data directory."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
