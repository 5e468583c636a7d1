"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class FixtureState(StrEnum):
    """Lifecycle state of a fixture as stored in the system of record."""

    # pre-match
    NOT_STARTED = "NS"
    TBA = "TBA"
    DELAYED = "DELAYED"
    POSTPONED = "POSTPONED"

    # live
    FIRST_HALF = "INPLAY_1ST_HALF"
    HALF_TIME = "HT"
    SECOND_HALF = "INPLAY_2ND_HALF"
    BREAK = "BREAK"
    EXTRA_TIME = "INPLAY_ET"
    EXTRA_TIME_BREAK = "EXTRA_TIME_BREAK"
    PEN_BREAK = "PEN_BREAK"
    PENALTIES = "INPLAY_PENALTIES"

    # finished
    FINISHED = "FT"
    FINISHED_AET = "AET"
    FINISHED_PEN = "FT_PEN"
    AWARDED = "AWARDED"
    WALKOVER = "WO"

    # aborted / halted
    CANCELLED = "CANCELLED"
    ABANDONED = "ABANDONED"
    INTERRUPTED = "INTERRUPTED"
    SUSPENDED = "SUSPENDED"


class AuditSource(StrEnum):
    """Who produced an audit entry."""

    JOB = "job"
    ADMIN = "admin"


class ItemAction(StrEnum):
    """Classification of one fixture within a sync run."""

    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(StrEnum):
    DUPLICATE = "duplicate"
    INVALID_STATE_TRANSITION = "invalid-state-transition"
    NO_CHANGE = "no-change"
    CANCELLED = "cancelled"


class ItemStatus(StrEnum):
    """Per-item outcome as reported to the run tracker."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class RunStatus(StrEnum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


class RunTrigger(StrEnum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"
    API = "api"
