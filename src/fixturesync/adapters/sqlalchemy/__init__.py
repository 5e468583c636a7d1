"""SQLAlchemy adapter package for fixturesync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAuditRepository,
    SqlAlchemyFixtureRepository,
    SqlAlchemyLeagueRepository,
    SqlAlchemySeasonRepository,
    SqlAlchemyTeamRepository,
)
from .tracker import SqlAlchemyRunTracker
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyAuditRepository",
    "SqlAlchemyFixtureRepository",
    "SqlAlchemyLeagueRepository",
    "SqlAlchemyRunTracker",
    "SqlAlchemySeasonRepository",
    "SqlAlchemyTeamRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
