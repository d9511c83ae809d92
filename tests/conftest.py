from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from contentpulse_sync.adapters.sqlalchemy import create_all_tables, start_mappers
from contentpulse_sync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    seed_default_admin,
    shutdown,
    startup,
)
from tests.helpers.fakes import SITE_URL, public_resolver

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    seed_default_admin(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    return tmp_path / "media"


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    media_dir: Path,
) -> Iterator[Callable[[], SqlAlchemyContentUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyContentUnitOfWork:
        return SqlAlchemyContentUnitOfWork(
            site_url=SITE_URL,
            media_dir=media_dir,
            resolve_host=public_resolver,
        )

    try:
        yield factory
    finally:
        shutdown()
