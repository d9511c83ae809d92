"""SQLAlchemy adapter package for ContentPulse Sync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .media import SqlAlchemyMediaLibrary
from .options import SqlAlchemyOptionStore
from .store import SqlAlchemyContentStore
from .unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyContentStore",
    "SqlAlchemyContentUnitOfWork",
    "SqlAlchemyMediaLibrary",
    "SqlAlchemyOptionStore",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
