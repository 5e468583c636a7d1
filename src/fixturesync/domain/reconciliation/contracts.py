"""Shared reconciliation contract components.

This module holds the shapes that flow through a sync run:
- ``FixtureDTO`` as delivered by a provider adapter
- ``FixtureCandidate`` after the pure transform step
- run options and the aggregated result
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fixturesync.domain.model import AuditSource, ItemAction

if TYPE_CHECKING:
    from fixturesync.domain.model import ChangeSet, FixtureState, SkipReason


@dataclass(slots=True, kw_only=True)
class FixtureDTO:
    """Provider representation of one fixture, addressed by external ids."""

    external_id: int
    name: str | None
    home_team_external_id: int | None
    away_team_external_id: int | None
    start_ts: int | None
    start_iso: str | None = None
    league_external_id: int | None = None
    season_external_id: int | None = None
    state: str | None = None
    live_minute: int | None = None
    result: str | None = None
    home_score: int | None = None
    away_score: int | None = None
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

    # presentation extras, carried but never persisted
    league_name: str | None = None
    country_name: str | None = None
    has_odds: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FixtureCandidate:
    """Normalised fixture values, still addressed by external reference ids."""

    external_id: int
    name: str
    start_iso: str
    start_ts: int
    state: FixtureState
    home_team_external_id: int | None
    away_team_external_id: int | None
    league_external_id: int | None = None
    season_external_id: int | None = None
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


@runtime_checkable
class CancellationSignal(Protocol):
    """Anything exposing ``is_set()``, e.g. ``asyncio.Event`` or ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass(slots=True, kw_only=True)
class SyncOptions:
    dry_run: bool = False
    bypass_state_validation: bool = False
    batch_id: int | None = None
    run_id: int | None = None
    requested_by: str | None = None
    source: AuditSource = AuditSource.JOB
    cancel: CancellationSignal | None = None


@dataclass(slots=True, kw_only=True)
class ItemResult:
    """Outcome of one input item."""

    external_id: int
    action: ItemAction
    name: str | None = None
    fixture_id: int | None = None
    reason: SkipReason | None = None
    changes: ChangeSet = field(default_factory=dict)
    error: str | None = None
    state_transition: tuple[FixtureState, FixtureState] | None = None


@dataclass(slots=True)
class SyncFixturesResult:
    """Aggregated counters of a sync run.

    ``total`` covers unique input items only; duplicates are counted separately.
    """

    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    duplicates: int = 0
    cancelled: bool = False
    items: list[ItemResult] = field(default_factory=list[ItemResult])

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.skipped + self.failed

    def record(self, item: ItemResult) -> None:
        self.items.append(item)
        match item.action:
            case ItemAction.INSERTED:
                self.inserted += 1
            case ItemAction.UPDATED:
                self.updated += 1
            case ItemAction.SKIPPED:
                self.skipped += 1
            case ItemAction.FAILED:
                self.failed += 1

    def record_duplicate(self, item: ItemResult) -> None:
        self.items.append(item)
        self.duplicates += 1

    def as_dict(self) -> dict[str, int]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "total": self.total,
        }
