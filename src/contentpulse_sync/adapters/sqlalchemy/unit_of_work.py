"""SQLAlchemy-backed unit of work for content synchronisation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from contentpulse_sync.adapters.sqlalchemy.mappings import (
    create_all_tables,
    start_mappers,
    user_account_table,
)
from contentpulse_sync.adapters.sqlalchemy.media import SqlAlchemyMediaLibrary
from contentpulse_sync.adapters.sqlalchemy.options import SqlAlchemyOptionStore
from contentpulse_sync.adapters.sqlalchemy.store import SqlAlchemyContentStore
from contentpulse_sync.config.storage import get_database_config
from contentpulse_sync.domain.model import UserAccount, UserRole
from contentpulse_sync.domain.ports.unit_of_work import (
    ContentRepositories,
    RepositoryCollection,
)

if TYPE_CHECKING:
    from datetime import tzinfo
    from pathlib import Path
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from contentpulse_sync.adapters.http import ClientFactory, HostResolver

DEFAULT_ADMIN_LOGIN = "admin"


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call contentpulse_sync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    create_all_tables(resolved_engine)
    seed_default_admin(resolved_engine)

    _STATE.engine = resolved_engine


def seed_default_admin(engine: Engine) -> None:
    """Insert the administrator account (id 1) when no user exists yet."""

    with Session(engine) as session:
        count = session.execute(select(func.count()).select_from(user_account_table)).scalar_one()
        if count:
            return
        session.add(
            UserAccount(
                id=1,
                login=DEFAULT_ADMIN_LOGIN,
                display_name="Administrator",
                role=UserRole.ADMINISTRATOR,
            )
        )
        session.commit()


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyContentUnitOfWork(BaseSqlAlchemyUnitOfWork[ContentRepositories]):
    """Unit of work exposing the content store, media library and options."""

    def __init__(
        self,
        *,
        site_url: str,
        media_dir: Path,
        site_tz: tzinfo = UTC,
        client_factory: ClientFactory | None = None,
        resolve_host: HostResolver | None = None,
    ) -> None:
        super().__init__()
        self.site_url = site_url
        self.site_tz = site_tz
        self.media_dir = media_dir
        self.client_factory = client_factory
        self.resolve_host = resolve_host

    def _build_repositories(self, session: Session) -> ContentRepositories:
        return ContentRepositories(
            store=SqlAlchemyContentStore(session, site_url=self.site_url, site_tz=self.site_tz),
            media=SqlAlchemyMediaLibrary(
                session,
                media_dir=self.media_dir,
                client_factory=self.client_factory,
                resolve_host=self.resolve_host,
            ),
            options=SqlAlchemyOptionStore(session),
        )


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.unit_of_work import ContentUnitOfWork

    _uow_check: ContentUnitOfWork = SqlAlchemyContentUnitOfWork(
        site_url="", media_dir=Path()
    )
