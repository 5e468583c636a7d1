"""Audit records for fixture writes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .enums import AuditSource


@dataclass(frozen=True, slots=True)
class FieldChange:
    old: str
    new: str

    def as_dict(self) -> dict[str, str]:
        return {"old": self.old, "new": self.new}


type ChangeSet = dict[str, FieldChange]


@dataclass(eq=False, kw_only=True)
class FixtureAuditEntry:
    """Append-only record of exactly what one write changed on a fixture."""

    fixture_id: int
    changes: ChangeSet
    run_id: int | None = None
    source: AuditSource = AuditSource.JOB
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    created_by: str | None = None
    id: int | None = None
