"""SQLAlchemy-backed async unit of work for fixture reconciliation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fixturesync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from fixturesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditRepository,
    SqlAlchemyFixtureRepository,
    SqlAlchemyLeagueRepository,
    SqlAlchemySeasonRepository,
    SqlAlchemyTeamRepository,
)
from fixturesync.config.storage import DatabaseConfig, get_database_config
from fixturesync.domain.ports.unit_of_work import FixtureRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call fixturesync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self._engine,
                expire_on_commit=False,
                class_=AsyncSession,
            )
        return self._session_factory


_STATE = _AdapterState()


def _install_sqlite_pragmas(engine: AsyncEngine, pragmas: tuple[str, ...]) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            for pragma in pragmas:
                cursor.execute(pragma)
        finally:
            cursor.close()


def create_engine_for(
    database_uri: str, *, config: DatabaseConfig | None = None
) -> AsyncEngine:
    settings = config or DatabaseConfig(uri=database_uri)
    engine = create_async_engine(database_uri, echo=settings.echo)
    if engine.dialect.name == "sqlite":
        _install_sqlite_pragmas(engine, settings.sqlite_pragmas())
    return engine


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the async engine, metadata, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_engine_for(database_uri or database.uri, config=database)
    start_mappers()
    await create_all_tables(engine)

    _STATE.engine = engine


def configured_session_factory() -> async_sessionmaker[AsyncSession]:
    return _STATE.session_factory


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic async SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = (
            session_factory or _STATE.session_factory
        )
        self._session: AsyncSession | None = None

    @abstractmethod
    def _build_repositories(self, session: AsyncSession) -> TRepositories: ...

    async def __aenter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            await self.rollback()
        await self.session.close()
        self.session = None
        return False

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: AsyncSession | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[FixtureRepositories]):
    """Unit of work managing async SQLAlchemy sessions for fixture reconciliation."""

    def _build_repositories(self, session: AsyncSession) -> FixtureRepositories:
        return FixtureRepositories(
            fixtures=SqlAlchemyFixtureRepository(session),
            leagues=SqlAlchemyLeagueRepository(session),
            seasons=SqlAlchemySeasonRepository(session),
            teams=SqlAlchemyTeamRepository(session),
            audit=SqlAlchemyAuditRepository(session),
        )


if TYPE_CHECKING:
    from fixturesync.domain.ports.unit_of_work import FixtureUnitOfWork

    _uow_check: FixtureUnitOfWork = SqlAlchemyUnitOfWork()
