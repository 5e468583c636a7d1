"""Administrative overrides of fixture scores and state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from datetime import UTC, datetime
from enum import Enum
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from fixturesync.domain.errors import FixtureNotFoundError
from fixturesync.domain.model import AuditSource
from fixturesync.domain.reconciliation.audit import AuditRecorder
from fixturesync.domain.reconciliation.diff import changed_values, diff_fixture
from fixturesync.domain.reconciliation.transform import normalize_result

if TYPE_CHECKING:
    from fixturesync.domain.model import FixtureAuditEntry, FixtureState
    from fixturesync.domain.ports.unit_of_work import FixtureUnitOfWork

log = getLogger(__name__)

OVERRIDE_FIELDS: Final = (
    "name",
    "state",
    "home_score_90",
    "away_score_90",
    "home_score_et",
    "away_score_et",
    "pen_home",
    "pen_away",
    "result",
    "leg",
)


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.UNSET

type Settable[T] = T | _Unset
type Clearable[T] = T | None | _Unset

CLEARABLE_FIELDS: Final = frozenset(OVERRIDE_FIELDS) - {"name", "state"}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True, kw_only=True)
class FixtureOverride:
    """Operator edits.

    Fields left at ``UNSET`` are not touched; ``None`` clears a nullable column.
    ``name`` and ``state`` cannot be cleared.
    """

    name: Settable[str] = UNSET
    state: Settable[FixtureState] = UNSET
    home_score_90: Clearable[int] = UNSET
    away_score_90: Clearable[int] = UNSET
    home_score_et: Clearable[int] = UNSET
    away_score_et: Clearable[int] = UNSET
    pen_home: Clearable[int] = UNSET
    pen_away: Clearable[int] = UNSET
    result: Clearable[str] = UNSET
    leg: Clearable[str] = UNSET

    def __post_init__(self) -> None:
        for name in ("name", "state"):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")

    def provided(self) -> dict[str, Any]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        if isinstance(values["result"], str):
            values["result"] = normalize_result(values["result"])
        return {name: value for name, value in values.items() if value is not UNSET}


async def override_fixture(
    unit_of_work_factory: Callable[[], FixtureUnitOfWork],
    fixture_id: int,
    override: FixtureOverride,
    *,
    overridden_by: str | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> FixtureAuditEntry | None:
    """Apply ``override`` and audit it with ``source=admin``.

    Returns the audit entry, or ``None`` when nothing actually changed.
    """

    async with unit_of_work_factory() as uow:
        existing = await uow.repositories.fixtures.get(fixture_id)
        if existing is None:
            raise FixtureNotFoundError(fixture_id)

        updated = replace(existing, **override.provided())
        changes = diff_fixture(existing, updated, fields=OVERRIDE_FIELDS)
        if not changes:
            log.info("Override of fixture %s changed nothing", fixture_id)
            return None

        now = clock()
        await uow.repositories.fixtures.update(
            fixture_id,
            changed_values(changes, updated),
            now=now,
        )
        recorder = AuditRecorder(
            uow.repositories.audit,
            source=AuditSource.ADMIN,
            created_by=overridden_by,
            clock=clock,
        )
        entry = recorder.record_update(fixture_id, None, changes)
        await uow.commit()

    log.info(
        "Fixture %s overridden by %s: %s",
        fixture_id,
        overridden_by or "unknown",
        ", ".join(sorted(changes)),
    )
    return entry
