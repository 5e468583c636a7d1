"""Public domain model surface."""

from __future__ import annotations

from fixturesync.domain.model.audit import ChangeSet, FieldChange, FixtureAuditEntry
from fixturesync.domain.model.enums import (
    AuditSource,
    FixtureState,
    ItemAction,
    ItemStatus,
    RunStatus,
    RunTrigger,
    SkipReason,
)
from fixturesync.domain.model.fixture import Fixture, FixtureValues
from fixturesync.domain.model.references import League, Season, Team
from fixturesync.domain.model.run import SyncBatch, SyncItem

__all__ = [
    "AuditSource",
    "ChangeSet",
    "FieldChange",
    "Fixture",
    "FixtureAuditEntry",
    "FixtureState",
    "FixtureValues",
    "ItemAction",
    "ItemStatus",
    "League",
    "RunStatus",
    "RunTrigger",
    "Season",
    "SkipReason",
    "SyncBatch",
    "SyncItem",
    "Team",
]
