"""Batch orchestrator for fixture synchronisation.

Input is de-duplicated, references are resolved once for the whole batch, and
unique fixtures are processed chunk by chunk. Items inside a chunk run
concurrently, each in its own unit of work, so a failing item only rolls back
itself.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from fixturesync.config.sync import SyncConfig
from fixturesync.domain.errors import FixtureSyncError
from fixturesync.domain.model import ItemAction, ItemStatus, SkipReason

from .apply import apply_plan
from .audit import AuditRecorder
from .contracts import ItemResult, SyncFixturesResult, SyncOptions
from .plan import plan_fixture
from .resolve import ReferenceLookup, collect_reference_ids, resolve_references

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fixturesync.domain.model import Fixture
    from fixturesync.domain.ports.persistence import RunTracker
    from fixturesync.domain.ports.unit_of_work import FixtureUnitOfWork

    from .contracts import FixtureDTO

type FixtureUnitOfWorkFactory = Callable[[], FixtureUnitOfWork]

log = getLogger(__name__)

_STATUS_BY_ACTION = {
    ItemAction.INSERTED: ItemStatus.SUCCESS,
    ItemAction.UPDATED: ItemStatus.SUCCESS,
    ItemAction.SKIPPED: ItemStatus.SKIPPED,
    ItemAction.FAILED: ItemStatus.FAILED,
}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def deduplicate_fixtures(
    fixtures: Sequence[FixtureDTO],
) -> tuple[list[FixtureDTO], list[FixtureDTO]]:
    """Split ``fixtures`` into first occurrences and later duplicates by external id."""

    seen: set[int] = set()
    unique: list[FixtureDTO] = []
    duplicates: list[FixtureDTO] = []
    for dto in fixtures:
        if dto.external_id in seen:
            duplicates.append(dto)
            continue
        seen.add(dto.external_id)
        unique.append(dto)
    return unique, duplicates


def truncate_message(message: str | None, limit: int) -> str | None:
    if message is None:
        return None
    return message[:limit]


@dataclass(slots=True)
class FixtureSyncEngine:
    """Reconcile provider fixtures into the store, one chunk at a time."""

    unit_of_work_factory: FixtureUnitOfWorkFactory
    tracker: RunTracker | None = None
    config: SyncConfig = field(default_factory=SyncConfig)
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def sync(
        self,
        fixtures: Sequence[FixtureDTO],
        options: SyncOptions | None = None,
    ) -> SyncFixturesResult:
        options = options or SyncOptions()
        result = SyncFixturesResult()
        if not fixtures:
            return result

        unique, duplicates = deduplicate_fixtures(fixtures)
        if duplicates:
            log.warning(
                "Input contained %s duplicate fixtures; processing %s unique items",
                len(duplicates),
                len(unique),
            )
            for dto in duplicates:
                item = ItemResult(
                    external_id=dto.external_id,
                    action=ItemAction.SKIPPED,
                    name=dto.name,
                    reason=SkipReason.DUPLICATE,
                )
                result.record_duplicate(item)
                await self._report(options, item)

        lookup = await self._resolve_references(unique)

        log.info(
            "Starting fixture sync: unique=%s, chunk_size=%s, dry_run=%s, bypass=%s, batch=%s",
            len(unique),
            self.config.chunk_size,
            options.dry_run,
            options.bypass_state_validation,
            options.batch_id,
        )

        chunk_size = self.config.chunk_size
        for start in range(0, len(unique), chunk_size):
            if options.cancel is not None and options.cancel.is_set():
                remaining = unique[start:]
                log.warning("Fixture sync cancelled; %s items left unprocessed", len(remaining))
                for dto in remaining:
                    item = ItemResult(
                        external_id=dto.external_id,
                        action=ItemAction.SKIPPED,
                        name=dto.name,
                        reason=SkipReason.CANCELLED,
                    )
                    result.record(item)
                    await self._report(options, item)
                result.cancelled = True
                break

            chunk = unique[start : start + chunk_size]
            await self._sync_chunk(chunk, lookup, options, result)

        log.info(
            "Finished fixture sync: inserted=%s, updated=%s, skipped=%s, failed=%s, "
            "duplicates=%s, cancelled=%s",
            result.inserted,
            result.updated,
            result.skipped,
            result.failed,
            result.duplicates,
            result.cancelled,
        )
        return result

    async def _resolve_references(self, fixtures: Sequence[FixtureDTO]) -> ReferenceLookup:
        async with self.unit_of_work_factory() as uow:
            return await resolve_references(collect_reference_ids(fixtures), uow.repositories)

    async def _prefetch(self, chunk: Sequence[FixtureDTO]) -> dict[int, Fixture]:
        async with self.unit_of_work_factory() as uow:
            return await uow.repositories.fixtures.get_many_by_external_ids(
                [dto.external_id for dto in chunk]
            )

    async def _sync_chunk(
        self,
        chunk: Sequence[FixtureDTO],
        lookup: ReferenceLookup,
        options: SyncOptions,
        result: SyncFixturesResult,
    ) -> None:
        existing = await self._prefetch(chunk)
        outcomes = await asyncio.gather(
            *(
                self._sync_item(dto, existing.get(dto.external_id), lookup, options)
                for dto in chunk
            ),
            return_exceptions=True,
        )
        for dto, outcome in zip(chunk, outcomes, strict=True):
            item = self._settle(dto, outcome)
            result.record(item)
            await self._report(options, item)

    async def _sync_item(
        self,
        dto: FixtureDTO,
        existing: Fixture | None,
        lookup: ReferenceLookup,
        options: SyncOptions,
    ) -> ItemResult:
        plan = plan_fixture(
            dto,
            existing,
            lookup,
            bypass_state_validation=options.bypass_state_validation,
        )
        fixture_id = existing.id if existing is not None else None

        if plan.writes and not options.dry_run:
            async with self.unit_of_work_factory() as uow:
                recorder = AuditRecorder(
                    uow.repositories.audit,
                    source=options.source,
                    created_by=options.requested_by,
                    clock=self.clock,
                )
                fixture_id = await apply_plan(
                    plan,
                    uow.repositories,
                    recorder,
                    run_id=options.run_id,
                    now=self.clock(),
                )
                await uow.commit()

        transition = None
        if plan.reason is SkipReason.INVALID_STATE_TRANSITION and plan.existing is not None:
            transition = (plan.existing.state, plan.values.state)

        return ItemResult(
            external_id=plan.external_id,
            action=plan.action,
            name=plan.name,
            fixture_id=fixture_id,
            reason=plan.reason,
            changes=plan.changes,
            state_transition=transition,
        )

    def _settle(self, dto: FixtureDTO, outcome: ItemResult | BaseException) -> ItemResult:
        if isinstance(outcome, ItemResult):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FixtureSyncError):
            log.warning("Failed to sync fixture %s: %s", dto.external_id, outcome)
        else:
            log.error("Failed to sync fixture %s", dto.external_id, exc_info=outcome)
        return ItemResult(
            external_id=dto.external_id,
            action=ItemAction.FAILED,
            name=dto.name,
            error=str(outcome) or type(outcome).__name__,
        )

    async def _report(self, options: SyncOptions, item: ItemResult) -> None:
        batch_id = options.batch_id
        if self.tracker is None or batch_id is None or options.dry_run:
            return

        meta: dict[str, Any] = {
            "entity_type": "fixture",
            "name": item.name,
            "external_id": item.external_id,
            "action": item.action.value,
        }
        if item.reason is not None:
            meta["reason"] = item.reason.value
        if item.changes:
            meta["changes"] = {name: change.as_dict() for name, change in item.changes.items()}
        if item.state_transition is not None:
            previous, proposed = item.state_transition
            meta["from_state"] = previous.value
            meta["to_state"] = proposed.value

        try:
            await self.tracker.record_item(
                batch_id,
                str(item.external_id),
                _STATUS_BY_ACTION[item.action],
                error_message=truncate_message(item.error, self.config.error_message_limit),
                meta=meta,
            )
        except Exception:
            log.exception(
                "Failed to record outcome of fixture %s for batch %s",
                item.external_id,
                batch_id,
            )
