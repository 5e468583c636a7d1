"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from fixturesync.adapters.sportmonks import SportMonksFetcher
from fixturesync.adapters.sqlalchemy import SqlAlchemyRunTracker, SqlAlchemyUnitOfWork
from fixturesync.adapters.sqlalchemy.unit_of_work import is_started, startup
from fixturesync.config import get_sync_config
from fixturesync.domain.model import FixtureState, RunStatus, RunTrigger, SkipReason
from fixturesync.domain.overrides import FixtureOverride, override_fixture
from fixturesync.domain.ports import BatchRunTracker
from fixturesync.domain.reconciliation import (
    FINISHED_STATES,
    LIVE_STATES,
    FixtureSyncEngine,
    FixtureUnitOfWorkFactory,
    SyncFixturesResult,
    SyncOptions,
    coerce_fixture_state,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Sequence
    from datetime import date

    from fixturesync.config import SyncConfig
    from fixturesync.domain.model import Fixture, FixtureAuditEntry
    from fixturesync.domain.ports import FixtureFetcher, RunTracker
    from fixturesync.domain.reconciliation import FixtureDTO

DEFAULT_BATCH_NAME = "fixtures-sync"

DEFAULT_MAX_LIVE_AGE_HOURS = 2
LIVE_AGE_HOURS_RANGE = (1, 168)
DEFAULT_GRACE_MINUTES = 30
GRACE_MINUTES_RANGE = (1, 120)
DEFAULT_MAX_OVERDUE_HOURS = 48
OVERDUE_HOURS_RANGE = (1, 168)
OVERDUE_STATES = frozenset(
    {FixtureState.NOT_STARTED, FixtureState.TBA, FixtureState.DELAYED}
)

log = getLogger(__name__)


async def _default_adapters() -> tuple[FixtureUnitOfWorkFactory, SqlAlchemyRunTracker]:
    if not is_started():
        await startup()
    return SqlAlchemyUnitOfWork, SqlAlchemyRunTracker()


def _batch_status(result: SyncFixturesResult) -> RunStatus:
    if result.cancelled:
        return RunStatus.CANCELLED
    if result.total == 0:
        return RunStatus.SKIPPED
    if result.failed == result.total:
        return RunStatus.FAILED
    return RunStatus.SUCCESS


def _cancellation_message(result: SyncFixturesResult) -> str | None:
    if not result.cancelled:
        return None
    pending = sum(1 for item in result.items if item.reason is SkipReason.CANCELLED)
    return f"Cancelled with {pending} of {result.total} items not processed"


async def sync_fixtures(
    fixtures: Sequence[FixtureDTO],
    *,
    options: SyncOptions | None = None,
    unit_of_work_factory: FixtureUnitOfWorkFactory | None = None,
    tracker: RunTracker | BatchRunTracker | None = None,
    config: SyncConfig | None = None,
    batch_name: str = DEFAULT_BATCH_NAME,
    trigger: RunTrigger = RunTrigger.MANUAL,
) -> SyncFixturesResult:
    """Reconcile ``fixtures`` into the store, tracking the run as a batch.

    A batch is opened on the tracker when the caller did not supply one and the
    run is not a dry run; its id doubles as the audit run id.
    """

    options = options or SyncOptions()
    if unit_of_work_factory is None:
        unit_of_work_factory, default_tracker = await _default_adapters()
        tracker = tracker or default_tracker
    effective_config = config or get_sync_config()

    batch_tracker: BatchRunTracker | None = None
    if options.batch_id is None and not options.dry_run and isinstance(tracker, BatchRunTracker):
        batch_tracker = tracker
        batch_id = await batch_tracker.start_batch(
            batch_name,
            trigger=trigger,
            triggered_by=options.requested_by,
            items_total=len(fixtures),
            meta={"bypass_state_validation": options.bypass_state_validation},
        )
        options = replace(
            options,
            batch_id=batch_id,
            run_id=options.run_id if options.run_id is not None else batch_id,
        )

    log.info(
        "Starting fixture sync: fixtures=%s, dry_run=%s, bypass=%s, batch=%s",
        len(fixtures),
        options.dry_run,
        options.bypass_state_validation,
        options.batch_id,
    )

    engine = FixtureSyncEngine(unit_of_work_factory, tracker=tracker, config=effective_config)
    try:
        result = await engine.sync(fixtures, options)
    except Exception as exc:
        if batch_tracker is not None and options.batch_id is not None:
            await batch_tracker.finish_batch(
                options.batch_id,
                RunStatus.FAILED,
                items_total=len(fixtures),
                items_success=0,
                items_failed=0,
                error_message=str(exc)[: effective_config.error_message_limit],
            )
        raise

    if batch_tracker is not None and options.batch_id is not None:
        await batch_tracker.finish_batch(
            options.batch_id,
            _batch_status(result),
            items_total=result.total,
            items_success=result.inserted + result.updated,
            items_failed=result.failed,
            error_message=_cancellation_message(result),
            meta={
                **result.as_dict(),
                "duplicates": result.duplicates,
                "cancelled": result.cancelled,
            },
        )

    log.info(
        "Finished fixture sync: inserted=%s, updated=%s, skipped=%s, failed=%s, total=%s",
        result.inserted,
        result.updated,
        result.skipped,
        result.failed,
        result.total,
    )
    return result


async def sync_provider_fixtures(
    *,
    start: date | None = None,
    end: date | None = None,
    live: bool = False,
    external_ids: Collection[int] | None = None,
    fetcher: FixtureFetcher | None = None,
    options: SyncOptions | None = None,
    unit_of_work_factory: FixtureUnitOfWorkFactory | None = None,
    tracker: RunTracker | BatchRunTracker | None = None,
    trigger: RunTrigger = RunTrigger.MANUAL,
) -> SyncFixturesResult:
    """Fetch fixtures from the provider and reconcile them."""

    effective_fetcher = fetcher or SportMonksFetcher()
    if external_ids:
        fixtures = await effective_fetcher.fetch_by_ids(external_ids)
        batch_name = "fixtures-by-id"
    elif live:
        fixtures = await effective_fetcher.fetch_live()
        batch_name = "fixtures-live"
    elif start is not None and end is not None:
        fixtures = await effective_fetcher.fetch_between(start, end)
        batch_name = "fixtures-window"
    else:
        raise ValueError("Provide a date window, live=True, or external ids")

    return await sync_fixtures(
        fixtures,
        options=options,
        unit_of_work_factory=unit_of_work_factory,
        tracker=tracker,
        batch_name=batch_name,
        trigger=trigger,
    )


async def override_fixture_values(
    fixture_id: int,
    override: FixtureOverride,
    *,
    overridden_by: str | None = None,
    unit_of_work_factory: FixtureUnitOfWorkFactory | None = None,
) -> FixtureAuditEntry | None:
    """Apply an operator override to one fixture."""

    if unit_of_work_factory is None:
        unit_of_work_factory, _ = await _default_adapters()
    return await override_fixture(
        unit_of_work_factory,
        fixture_id,
        override,
        overridden_by=overridden_by,
    )


@dataclass(slots=True)
class RecoveryResult:
    """What a stuck-fixture recovery found, fetched and reconciled."""

    candidates: int = 0
    fetched: int = 0
    sync: SyncFixturesResult = field(default_factory=SyncFixturesResult)


def clamp_int(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


async def _find_stale(
    unit_of_work_factory: FixtureUnitOfWorkFactory,
    states: Collection[FixtureState],
    *,
    start_ts_min: int | None = None,
    start_ts_max: int | None = None,
) -> list[Fixture]:
    async with unit_of_work_factory() as uow:
        return await uow.repositories.fixtures.find_stale(
            states, start_ts_min=start_ts_min, start_ts_max=start_ts_max
        )


async def _resync_candidates(
    candidates: Sequence[Fixture],
    *,
    fetcher: FixtureFetcher | None,
    keep: Callable[[FixtureDTO], bool],
    batch_name: str,
    options: SyncOptions | None,
    unit_of_work_factory: FixtureUnitOfWorkFactory,
    tracker: RunTracker | BatchRunTracker | None,
    config: SyncConfig | None,
    trigger: RunTrigger,
) -> RecoveryResult:
    if not candidates:
        log.info("No candidates for %s", batch_name)
        return RecoveryResult()

    effective_fetcher = fetcher or SportMonksFetcher()
    fetched = [
        dto
        for dto in await effective_fetcher.fetch_by_ids([row.external_id for row in candidates])
        if keep(dto)
    ]
    log.info(
        "%s: candidates=%s, fetched=%s",
        batch_name,
        len(candidates),
        len(fetched),
    )
    if not fetched:
        return RecoveryResult(candidates=len(candidates))

    result = await sync_fixtures(
        fetched,
        options=options,
        unit_of_work_factory=unit_of_work_factory,
        tracker=tracker,
        config=config,
        batch_name=batch_name,
        trigger=trigger,
    )
    return RecoveryResult(candidates=len(candidates), fetched=len(fetched), sync=result)


async def sync_stale_live_fixtures(
    *,
    max_live_age_hours: int = DEFAULT_MAX_LIVE_AGE_HOURS,
    fetcher: FixtureFetcher | None = None,
    options: SyncOptions | None = None,
    unit_of_work_factory: FixtureUnitOfWorkFactory | None = None,
    tracker: RunTracker | BatchRunTracker | None = None,
    config: SyncConfig | None = None,
    clock: Callable[[], datetime] = _utcnow,
    trigger: RunTrigger = RunTrigger.SCHEDULED,
) -> RecoveryResult:
    """Close out fixtures still marked live long after kickoff.

    Fixtures in a live state whose kickoff is at least ``max_live_age_hours``
    (clamped to 1..168) in the past are re-fetched by id; only those the
    provider now reports as finished are reconciled.
    """

    hours = clamp_int(max_live_age_hours, *LIVE_AGE_HOURS_RANGE)
    if unit_of_work_factory is None:
        unit_of_work_factory, default_tracker = await _default_adapters()
        tracker = tracker or default_tracker

    cutoff = int(clock().timestamp()) - hours * 3600
    candidates = await _find_stale(unit_of_work_factory, LIVE_STATES, start_ts_max=cutoff)
    return await _resync_candidates(
        candidates,
        fetcher=fetcher,
        keep=lambda dto: coerce_fixture_state(dto.state) in FINISHED_STATES,
        batch_name="fixtures-stale-live",
        options=options,
        unit_of_work_factory=unit_of_work_factory,
        tracker=tracker,
        config=config,
        trigger=trigger,
    )


async def recover_overdue_fixtures(
    *,
    grace_minutes: int = DEFAULT_GRACE_MINUTES,
    max_overdue_hours: int = DEFAULT_MAX_OVERDUE_HOURS,
    fetcher: FixtureFetcher | None = None,
    options: SyncOptions | None = None,
    unit_of_work_factory: FixtureUnitOfWorkFactory | None = None,
    tracker: RunTracker | BatchRunTracker | None = None,
    config: SyncConfig | None = None,
    clock: Callable[[], datetime] = _utcnow,
    trigger: RunTrigger = RunTrigger.SCHEDULED,
) -> RecoveryResult:
    """Re-sync fixtures that never left pre-match although kickoff has passed.

    Candidates kicked off more than ``grace_minutes`` (1..120) ago but less than
    ``max_overdue_hours`` (1..168) ago. Whatever the provider returns for them
    is reconciled.
    """

    grace = clamp_int(grace_minutes, *GRACE_MINUTES_RANGE)
    hours = clamp_int(max_overdue_hours, *OVERDUE_HOURS_RANGE)
    if unit_of_work_factory is None:
        unit_of_work_factory, default_tracker = await _default_adapters()
        tracker = tracker or default_tracker

    now_ts = int(clock().timestamp())
    candidates = await _find_stale(
        unit_of_work_factory,
        OVERDUE_STATES,
        start_ts_min=now_ts - hours * 3600 + 1,
        start_ts_max=now_ts - grace * 60 - 1,
    )
    return await _resync_candidates(
        candidates,
        fetcher=fetcher,
        keep=lambda _: True,
        batch_name="fixtures-overdue",
        options=options,
        unit_of_work_factory=unit_of_work_factory,
        tracker=tracker,
        config=config,
        trigger=trigger,
    )
