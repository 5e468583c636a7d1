"""Batch foreign-key resolution from provider ids to internal ids."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from fixturesync.domain.errors import ReferenceNotFoundError
from fixturesync.domain.model import FixtureValues

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fixturesync.domain.ports.unit_of_work import FixtureRepositories

    from .contracts import FixtureCandidate, FixtureDTO

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReferenceIds:
    """Distinct external ids referenced by a batch."""

    leagues: frozenset[int] = frozenset()
    seasons: frozenset[int] = frozenset()
    teams: frozenset[int] = frozenset()


@dataclass(frozen=True, slots=True)
class ReferenceLookup:
    """Read-only external id -> internal id maps; unknown ids are absent."""

    leagues: dict[int, int] = field(default_factory=dict[int, int])
    seasons: dict[int, int] = field(default_factory=dict[int, int])
    teams: dict[int, int] = field(default_factory=dict[int, int])


def collect_reference_ids(fixtures: Iterable[FixtureDTO]) -> ReferenceIds:
    leagues: set[int] = set()
    seasons: set[int] = set()
    teams: set[int] = set()
    for dto in fixtures:
        if dto.league_external_id is not None:
            leagues.add(dto.league_external_id)
        if dto.season_external_id is not None:
            seasons.add(dto.season_external_id)
        if dto.home_team_external_id is not None:
            teams.add(dto.home_team_external_id)
        if dto.away_team_external_id is not None:
            teams.add(dto.away_team_external_id)
    return ReferenceIds(
        leagues=frozenset(leagues),
        seasons=frozenset(seasons),
        teams=frozenset(teams),
    )


async def resolve_references(
    ids: ReferenceIds,
    repositories: FixtureRepositories,
) -> ReferenceLookup:
    """Resolve all referenced ids with at most one query per entity type.

    Store errors propagate: nothing downstream can proceed without the maps.
    """

    leagues = await repositories.leagues.ids_by_external_ids(ids.leagues) if ids.leagues else {}
    seasons = await repositories.seasons.ids_by_external_ids(ids.seasons) if ids.seasons else {}
    teams = await repositories.teams.ids_by_external_ids(ids.teams) if ids.teams else {}

    log.info(
        "Resolved references: leagues=%s/%s, seasons=%s/%s, teams=%s/%s",
        len(leagues),
        len(ids.leagues),
        len(seasons),
        len(ids.seasons),
        len(teams),
        len(ids.teams),
    )
    return ReferenceLookup(leagues=leagues, seasons=seasons, teams=teams)


def _lookup(mapping: dict[int, int], external_id: int | None) -> int | None:
    if external_id is None:
        return None
    return mapping.get(external_id)


def resolve_candidate(candidate: FixtureCandidate, lookup: ReferenceLookup) -> FixtureValues:
    """Swap external references for internal ids.

    Teams are mandatory and raise ``ReferenceNotFoundError``; league and season
    degrade to ``None``.
    """

    home_team_id = _lookup(lookup.teams, candidate.home_team_external_id)
    if home_team_id is None:
        raise ReferenceNotFoundError("Home team", candidate.home_team_external_id)
    away_team_id = _lookup(lookup.teams, candidate.away_team_external_id)
    if away_team_id is None:
        raise ReferenceNotFoundError("Away team", candidate.away_team_external_id)

    return FixtureValues(
        external_id=candidate.external_id,
        name=candidate.name,
        start_iso=candidate.start_iso,
        start_ts=candidate.start_ts,
        state=candidate.state,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        league_id=_lookup(lookup.leagues, candidate.league_external_id),
        season_id=_lookup(lookup.seasons, candidate.season_external_id),
        live_minute=candidate.live_minute,
        result=candidate.result,
        home_score_90=candidate.home_score_90,
        away_score_90=candidate.away_score_90,
        home_score_et=candidate.home_score_et,
        away_score_et=candidate.away_score_et,
        pen_home=candidate.pen_home,
        pen_away=candidate.pen_away,
        stage=candidate.stage,
        round=candidate.round,
        leg=candidate.leg,
        aggregate_id=candidate.aggregate_id,
    )
