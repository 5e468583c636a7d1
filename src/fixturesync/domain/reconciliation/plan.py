"""Pure per-fixture decision: insert, update or skip."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from fixturesync.domain.model import ItemAction, SkipReason

from .diff import diff_fixture, insert_changes
from .resolve import resolve_candidate
from .state import is_valid_transition
from .transform import transform_fixture_dto

if TYPE_CHECKING:
    from fixturesync.domain.model import ChangeSet, Fixture, FixtureValues

    from .contracts import FixtureDTO
    from .resolve import ReferenceLookup

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class FixturePlan:
    """What should happen to one fixture, computed without side effects."""

    external_id: int
    name: str
    action: ItemAction
    values: FixtureValues
    existing: Fixture | None = None
    changes: ChangeSet = field(default_factory=dict)
    reason: SkipReason | None = None
    bypassed: bool = False

    @property
    def writes(self) -> bool:
        return self.action in (ItemAction.INSERTED, ItemAction.UPDATED)


def plan_fixture(
    dto: FixtureDTO,
    existing: Fixture | None,
    lookup: ReferenceLookup,
    *,
    bypass_state_validation: bool = False,
) -> FixturePlan:
    """Run transform, resolution, state check and diff for ``dto``.

    Raises ``MissingFieldError`` or ``ReferenceNotFoundError`` for items that
    cannot be processed at all.
    """

    candidate = transform_fixture_dto(dto)
    values = resolve_candidate(candidate, lookup)

    if existing is None:
        return FixturePlan(
            external_id=values.external_id,
            name=values.name,
            action=ItemAction.INSERTED,
            values=values,
            changes=insert_changes(values),
            bypassed=bypass_state_validation,
        )

    if not bypass_state_validation and not is_valid_transition(existing.state, values.state):
        log.warning(
            "Invalid state transition for fixture %s: %s -> %s",
            values.external_id,
            existing.state,
            values.state,
        )
        return FixturePlan(
            external_id=values.external_id,
            name=values.name,
            action=ItemAction.SKIPPED,
            values=values,
            existing=existing,
            reason=SkipReason.INVALID_STATE_TRANSITION,
        )

    changes = diff_fixture(existing, values)
    if not changes:
        return FixturePlan(
            external_id=values.external_id,
            name=values.name,
            action=ItemAction.SKIPPED,
            values=values,
            existing=existing,
            reason=SkipReason.NO_CHANGE,
        )

    return FixturePlan(
        external_id=values.external_id,
        name=values.name,
        action=ItemAction.UPDATED,
        values=values,
        existing=existing,
        changes=changes,
        bypassed=bypass_state_validation,
    )
