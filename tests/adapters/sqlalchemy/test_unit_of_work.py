from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, func, select

from contentpulse_sync.adapters.sqlalchemy.mappings import user_account_table
from contentpulse_sync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    StartupError,
    is_started,
    seed_default_admin,
    shutdown,
    startup,
)
from contentpulse_sync.domain.model import LifecycleStatus, RecordAttributes
from contentpulse_sync.domain.result import Ok
from tests.helpers.fakes import SITE_URL

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine

ATTRIBUTES = RecordAttributes(
    title="Persisted",
    body="",
    excerpt="",
    slug="",
    status=LifecycleStatus.DRAFT,
    author_id=1,
)


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup(media_dir: Path) -> None:
    with pytest.raises(StartupError):
        SqlAlchemyContentUnitOfWork(site_url=SITE_URL, media_dir=media_dir)


def test_startup_requires_force_for_reconfiguration(media_dir: Path) -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert is_started()
    with SqlAlchemyContentUnitOfWork(site_url=SITE_URL, media_dir=media_dir) as uow:
        assert uow.session.get_bind() is engine_b

    shutdown()
    assert not is_started()


def test_startup_seeds_a_single_administrator(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    seed_default_admin(sqlite_engine)

    with sqlite_engine.connect() as connection:
        count = connection.execute(select(func.count()).select_from(user_account_table))
        assert count.scalar_one() == 1


def test_commit_persists_changes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        result = uow.repositories.store.create_record(ATTRIBUTES)
        assert isinstance(result, Ok)
        uow.repositories.options.set_option("contentpulse_sync_count", 1)
        uow.commit()
        record_id = result.value

    with sqlite_unit_of_work() as uow:
        record = uow.repositories.store.get_record(record_id)
        assert record is not None
        assert record.title == "Persisted"
        assert uow.repositories.options.get_option("contentpulse_sync_count") == 1


def test_uncommitted_changes_are_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.store.create_record(replace(ATTRIBUTES, title="Lost"))
        uow.rollback()

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.store.create_record(replace(ATTRIBUTES, title="Also lost"))
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.store.get_record(1) is None


def test_repositories_require_an_open_session(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories
