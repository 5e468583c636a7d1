"""Append-only audit recording for fixture writes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from fixturesync.domain.model import AuditSource, FieldChange, FixtureAuditEntry

from .diff import insert_changes

if TYPE_CHECKING:
    from fixturesync.domain.model import ChangeSet, FixtureValues
    from fixturesync.domain.ports.persistence import AuditRepository

BYPASS_MARKER: Final = "_bypassed_validation"
_BYPASS_CHANGE: Final = FieldChange(old="false", new="true")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class AuditRecorder:
    """Write one audit entry per fixture write, never an empty one."""

    repository: AuditRepository
    source: AuditSource = AuditSource.JOB
    created_by: str | None = None
    clock: Callable[[], datetime] = field(default=_utcnow)

    def record_insert(
        self,
        fixture_id: int,
        run_id: int | None,
        values: FixtureValues,
        *,
        bypassed: bool = False,
    ) -> FixtureAuditEntry | None:
        return self._record(fixture_id, run_id, insert_changes(values), bypassed=bypassed)

    def record_update(
        self,
        fixture_id: int,
        run_id: int | None,
        changes: ChangeSet,
        *,
        bypassed: bool = False,
    ) -> FixtureAuditEntry | None:
        return self._record(fixture_id, run_id, changes, bypassed=bypassed)

    def _record(
        self,
        fixture_id: int,
        run_id: int | None,
        changes: ChangeSet,
        *,
        bypassed: bool,
    ) -> FixtureAuditEntry | None:
        if not changes:
            return None
        payload = dict(changes)
        if bypassed:
            payload[BYPASS_MARKER] = _BYPASS_CHANGE
        entry = FixtureAuditEntry(
            fixture_id=fixture_id,
            run_id=run_id,
            source=self.source,
            changes=payload,
            created_at=self.clock(),
            created_by=self.created_by,
        )
        self.repository.add(entry)
        return entry
