"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from fixturesync.domain.ports.persistence import (
        AuditRepository,
        FixtureRepository,
        LeagueRepository,
        SeasonRepository,
        TeamRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic async unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    async def __aenter__(self) -> UnitOfWork[TRepositories]: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@dataclass(slots=True)
class FixtureRepositories(RepositoryCollection):
    """Repositories required to reconcile fixtures."""

    fixtures: FixtureRepository
    leagues: LeagueRepository
    seasons: SeasonRepository
    teams: TeamRepository
    audit: AuditRepository


type FixtureUnitOfWork = UnitOfWork[FixtureRepositories]
