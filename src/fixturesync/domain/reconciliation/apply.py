"""Apply a fixture plan to the store and the audit log."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fixturesync.domain.model import ItemAction

from .diff import changed_values

if TYPE_CHECKING:
    from datetime import datetime

    from fixturesync.domain.ports.unit_of_work import FixtureRepositories

    from .audit import AuditRecorder
    from .plan import FixturePlan


async def apply_plan(
    plan: FixturePlan,
    repositories: FixtureRepositories,
    recorder: AuditRecorder,
    *,
    run_id: int | None,
    now: datetime,
) -> int | None:
    """Write the row and its audit entry; returns the fixture id, or ``None`` on skip.

    The caller owns the transaction: both writes commit or roll back together.
    """

    match plan.action:
        case ItemAction.INSERTED:
            fixture_id = await repositories.fixtures.insert(plan.values, now=now)
            recorder.record_insert(fixture_id, run_id, plan.values, bypassed=plan.bypassed)
            return fixture_id
        case ItemAction.UPDATED:
            if plan.existing is None:
                raise ValueError(f"Update planned for unknown fixture {plan.external_id}")
            fixture_id = plan.existing.id
            await repositories.fixtures.update(
                fixture_id,
                changed_values(plan.changes, plan.values),
                now=now,
            )
            recorder.record_update(fixture_id, run_id, plan.changes, bypassed=plan.bypassed)
            return fixture_id
        case _:
            return None
