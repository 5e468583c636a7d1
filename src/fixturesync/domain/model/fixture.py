"""Fixture rows as read from and written to the system of record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import FixtureState


@dataclass(frozen=True, slots=True, kw_only=True)
class FixtureValues:
    """Writable column values of one fixture, with references already resolved."""

    external_id: int
    name: str
    start_iso: str
    start_ts: int
    state: FixtureState
    home_team_id: int
    away_team_id: int
    league_id: int | None = None
    season_id: int | None = None
    live_minute: int | None = None
    result: str | None = None
    home_score_90: int | None = None
    away_score_90: int | None = None
    home_score_et: int | None = None
    away_score_et: int | None = None
    pen_home: int | None = None
    pen_away: int | None = None
    stage: str | None = None
    round: str | None = None
    leg: str | None = None
    aggregate_id: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Fixture(FixtureValues):
    """Persisted fixture row, including store-owned bookkeeping columns."""

    id: int
    created_at: datetime
    updated_at: datetime
