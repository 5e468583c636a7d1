"""Fixture reconciliation: transform, resolve, validate, diff, write, audit."""

from __future__ import annotations

from .audit import BYPASS_MARKER, AuditRecorder
from .contracts import (
    CancellationSignal,
    FixtureCandidate,
    FixtureDTO,
    ItemResult,
    SyncFixturesResult,
    SyncOptions,
)
from .diff import (
    AUDIT_FIELDS,
    NULL_SENTINEL,
    TRACKED_FIELDS,
    diff_fixture,
    insert_changes,
    stringify,
)
from .engine import FixtureSyncEngine, FixtureUnitOfWorkFactory, deduplicate_fixtures
from .plan import FixturePlan, plan_fixture
from .resolve import (
    ReferenceIds,
    ReferenceLookup,
    collect_reference_ids,
    resolve_candidate,
    resolve_references,
)
from .state import (
    FINISHED_STATES,
    LIVE_STATES,
    PRE_MATCH_STATES,
    coerce_fixture_state,
    is_terminal,
    is_valid_transition,
)
from .transform import normalize_result, parse_scores, transform_fixture_dto

__all__ = [
    "AUDIT_FIELDS",
    "BYPASS_MARKER",
    "FINISHED_STATES",
    "LIVE_STATES",
    "NULL_SENTINEL",
    "PRE_MATCH_STATES",
    "TRACKED_FIELDS",
    "AuditRecorder",
    "CancellationSignal",
    "FixtureCandidate",
    "FixtureDTO",
    "FixturePlan",
    "FixtureSyncEngine",
    "FixtureUnitOfWorkFactory",
    "ItemResult",
    "ReferenceIds",
    "ReferenceLookup",
    "SyncFixturesResult",
    "SyncOptions",
    "coerce_fixture_state",
    "collect_reference_ids",
    "deduplicate_fixtures",
    "diff_fixture",
    "insert_changes",
    "is_terminal",
    "is_valid_transition",
    "normalize_result",
    "parse_scores",
    "plan_fixture",
    "resolve_candidate",
    "resolve_references",
    "stringify",
    "transform_fixture_dto",
]
