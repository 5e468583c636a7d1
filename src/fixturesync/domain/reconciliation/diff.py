"""Field-level diffing of fixture rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from fixturesync.domain.model import FieldChange

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fixturesync.domain.model import ChangeSet, FixtureValues

NULL_SENTINEL: Final = "null"

AUDIT_FIELDS: Final = (
    "name",
    "state",
    "live_minute",
    "result",
    "home_score_90",
    "away_score_90",
    "home_score_et",
    "away_score_et",
    "pen_home",
    "pen_away",
    "stage",
    "round",
    "leg",
    "aggregate_id",
)
KICKOFF_FIELDS: Final = ("start_iso", "start_ts")
RELATIONAL_FIELDS: Final = ("league_id", "season_id", "home_team_id", "away_team_id")

# Relational and kickoff fields are audited too, so every write has an entry.
TRACKED_FIELDS: Final = AUDIT_FIELDS + KICKOFF_FIELDS + RELATIONAL_FIELDS


def stringify(value: object) -> str:
    if value is None:
        return NULL_SENTINEL
    return str(value)


def diff_fixture(
    existing: FixtureValues,
    candidate: FixtureValues,
    fields: Iterable[str] = TRACKED_FIELDS,
) -> ChangeSet:
    """Return ``{field: FieldChange}`` for every field whose textual value differs."""

    changes: ChangeSet = {}
    for name in fields:
        old = stringify(getattr(existing, name))
        new = stringify(getattr(candidate, name))
        if old != new:
            changes[name] = FieldChange(old=old, new=new)
    return changes


def insert_changes(candidate: FixtureValues, fields: Iterable[str] = TRACKED_FIELDS) -> ChangeSet:
    """Initial values of a new row; null fields are left out."""

    changes: ChangeSet = {}
    for name in fields:
        value = getattr(candidate, name)
        if value is None:
            continue
        changes[name] = FieldChange(old=NULL_SENTINEL, new=stringify(value))
    return changes


def changed_values(changes: ChangeSet, candidate: FixtureValues) -> dict[str, object]:
    """Column values to write for ``changes``, taken from ``candidate``."""

    return {name: getattr(candidate, name) for name in changes if not name.startswith("_")}
