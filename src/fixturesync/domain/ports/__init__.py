"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FixtureFetcher
from .persistence import (
    AuditRepository,
    BatchRunTracker,
    FixtureRepository,
    LeagueRepository,
    ReferenceRepository,
    RunTracker,
    SeasonRepository,
    TeamRepository,
)
from .unit_of_work import (
    FixtureRepositories,
    FixtureUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AuditRepository",
    "BatchRunTracker",
    "FixtureFetcher",
    "FixtureRepositories",
    "FixtureRepository",
    "FixtureUnitOfWork",
    "LeagueRepository",
    "ReferenceRepository",
    "RepositoryCollection",
    "RunTracker",
    "SeasonRepository",
    "TeamRepository",
    "UnitOfWork",
]
