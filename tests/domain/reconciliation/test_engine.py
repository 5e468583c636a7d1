from __future__ import annotations

import pytest

from fixturesync.config import SyncConfig
from fixturesync.domain.model import (
    AuditSource,
    FieldChange,
    FixtureState,
    ItemAction,
    ItemStatus,
    SkipReason,
)
from fixturesync.domain.reconciliation import BYPASS_MARKER, FixtureSyncEngine, SyncOptions
from tests.helpers.fixtures import (
    FakeRunTracker,
    FakeStore,
    ManualCancel,
    fixed_clock,
    make_dto,
    make_existing,
)


def _engine(
    store: FakeStore,
    *,
    tracker: FakeRunTracker | None = None,
    config: SyncConfig | None = None,
) -> FixtureSyncEngine:
    return FixtureSyncEngine(
        store.unit_of_work,
        tracker=tracker,
        config=config or SyncConfig(),
        clock=fixed_clock,
    )


async def test_empty_input_returns_zero_counters(fake_store: FakeStore) -> None:
    result = await _engine(fake_store).sync([])

    assert result.as_dict() == {"inserted": 0, "updated": 0, "skipped": 0, "failed": 0, "total": 0}
    assert fake_store.teams.queries == []


async def test_inserts_new_fixtures_with_audit(fake_store: FakeStore) -> None:
    result = await _engine(fake_store).sync(
        [make_dto(1), make_dto(2, state="INPLAY_1ST_HALF", live_minute=12)],
        SyncOptions(run_id=5, requested_by="scheduler"),
    )

    assert (result.inserted, result.total) == (2, 2)
    assert await fake_store.fixtures.count() == 2
    assert len(fake_store.audit.entries) == 2
    entry = fake_store.audit.entries[1]
    assert entry.run_id == 5
    assert entry.created_by == "scheduler"
    assert entry.source is AuditSource.JOB
    assert entry.changes["live_minute"] == FieldChange(old="null", new="12")
    assert [item.fixture_id for item in result.items] == [1, 2]


async def test_second_identical_run_is_idempotent(fake_store: FakeStore) -> None:
    fixtures = [make_dto(1), make_dto(2), make_dto(3)]
    engine = _engine(fake_store)

    await engine.sync(fixtures)
    second = await engine.sync(fixtures)

    assert second.inserted == second.updated == 0
    assert second.skipped == 3
    assert {item.reason for item in second.items} == {SkipReason.NO_CHANGE}
    assert len(fake_store.audit.entries) == 3


async def test_update_writes_only_changed_fields(fake_store: FakeStore) -> None:
    fake_store.fixtures.rows[1] = make_existing(1, state=FixtureState.SECOND_HALF, live_minute=80)
    dto = make_dto(1, state="INPLAY_2ND_HALF", live_minute=85)

    result = await _engine(fake_store).sync([dto])

    assert result.updated == 1
    assert fake_store.fixtures.updates == [(1, {"live_minute": 85})]
    assert fake_store.audit.entries[0].changes == {
        "live_minute": FieldChange(old="80", new="85")
    }


async def test_duplicates_are_skipped_and_counted(fake_store: FakeStore) -> None:
    fixtures = [make_dto(1), make_dto(2), make_dto(1, name="Later copy")]

    result = await _engine(fake_store).sync(fixtures)

    assert result.inserted == 2
    assert result.duplicates == 1
    assert result.total == 2
    assert await fake_store.fixtures.count() == 2
    assert fake_store.fixtures.by_external_id(1).name == "Home FC vs Away United"
    duplicates = [item for item in result.items if item.reason is SkipReason.DUPLICATE]
    assert [item.name for item in duplicates] == ["Later copy"]


async def test_invalid_transition_is_skipped_without_write(fake_store: FakeStore) -> None:
    fake_store.fixtures.rows[1] = make_existing(1, state=FixtureState.FINISHED, result="2-1")
    tracker = FakeRunTracker()

    result = await _engine(fake_store, tracker=tracker).sync(
        [make_dto(1, state="NS")],
        SyncOptions(batch_id=9),
    )

    assert result.skipped == 1
    assert result.items[0].reason is SkipReason.INVALID_STATE_TRANSITION
    assert fake_store.fixtures.rows[1].state is FixtureState.FINISHED
    assert fake_store.audit.entries == []
    assert tracker.items[0].meta["from_state"] == "FT"
    assert tracker.items[0].meta["to_state"] == "NS"
    assert tracker.items[0].status is ItemStatus.SKIPPED


async def test_bypass_writes_regression_with_marker(fake_store: FakeStore) -> None:
    fake_store.fixtures.rows[1] = make_existing(1, state=FixtureState.FINISHED)

    result = await _engine(fake_store).sync(
        [make_dto(1, state="NS")],
        SyncOptions(bypass_state_validation=True),
    )

    assert result.updated == 1
    assert fake_store.fixtures.rows[1].state is FixtureState.NOT_STARTED
    changes = fake_store.audit.entries[0].changes
    assert changes[BYPASS_MARKER] == FieldChange(old="false", new="true")
    assert changes["state"] == FieldChange(old="FT", new="NS")


async def test_partial_failure_does_not_abort_batch(fake_store: FakeStore) -> None:
    fixtures = [
        make_dto(1),
        make_dto(2, home_team_external_id=424242),
        make_dto(3),
    ]

    result = await _engine(fake_store, config=SyncConfig(chunk_size=2)).sync(fixtures)

    assert (result.inserted, result.failed, result.total) == (2, 1, 3)
    failed = next(item for item in result.items if item.action is ItemAction.FAILED)
    assert failed.external_id == 2
    assert failed.error == "Home team not found (externalId: 424242)"
    assert fake_store.fixtures.by_external_id(2) is None


async def test_failed_write_rolls_back_its_own_item_only(fake_store: FakeStore) -> None:
    fake_store.fixtures.fail_for.add(2)

    result = await _engine(fake_store).sync([make_dto(1), make_dto(2), make_dto(3)])

    assert (result.inserted, result.failed) == (2, 1)
    assert fake_store.rollbacks == 1
    assert {entry.fixture_id for entry in fake_store.audit.entries} == {1, 2}


async def test_dry_run_writes_nothing(fake_store: FakeStore) -> None:
    fake_store.fixtures.rows[1] = make_existing(1, state=FixtureState.FIRST_HALF)
    tracker = FakeRunTracker()

    result = await _engine(fake_store, tracker=tracker).sync(
        [make_dto(1, state="HT"), make_dto(2)],
        SyncOptions(dry_run=True, batch_id=4),
    )

    assert (result.inserted, result.updated) == (1, 1)
    assert fake_store.fixtures.inserts == []
    assert fake_store.fixtures.updates == []
    assert fake_store.audit.entries == []
    assert fake_store.commits == 0
    assert tracker.items == []


async def test_reports_each_item_to_tracker(fake_store: FakeStore) -> None:
    tracker = FakeRunTracker()
    fake_store.fixtures.rows[1] = make_existing(1)

    await _engine(fake_store, tracker=tracker).sync(
        [make_dto(1), make_dto(2), make_dto(3, name=None), make_dto(2)],
        SyncOptions(batch_id=11),
    )

    statuses = {item.item_key: item.status for item in tracker.items}
    assert statuses == {
        "1": ItemStatus.SKIPPED,
        "2": ItemStatus.SUCCESS,
        "3": ItemStatus.FAILED,
    }
    assert len(tracker.items) == 4
    assert all(item.batch_id == 11 for item in tracker.items)
    duplicate = tracker.items[0]
    assert duplicate.meta["reason"] == "duplicate"
    inserted = next(item for item in tracker.items if item.meta["action"] == "inserted")
    assert inserted.meta["entity_type"] == "fixture"
    assert "state" in inserted.meta["changes"]


async def test_tracker_error_messages_are_truncated(fake_store: FakeStore) -> None:
    tracker = FakeRunTracker()
    fake_store.fixtures.fail_for.add(1)

    await _engine(fake_store, tracker=tracker, config=SyncConfig(error_message_limit=10)).sync(
        [make_dto(1)],
        SyncOptions(batch_id=1),
    )

    assert tracker.items[0].error_message == "insert rej"


async def test_tracker_failure_does_not_fail_items(
    fake_store: FakeStore, caplog: pytest.LogCaptureFixture
) -> None:
    tracker = FakeRunTracker(fail_on_record=True)

    result = await _engine(fake_store, tracker=tracker).sync(
        [make_dto(1), make_dto(2)],
        SyncOptions(batch_id=1),
    )

    assert result.inserted == 2
    assert "Failed to record outcome" in caplog.text


async def test_cancellation_stops_between_chunks(fake_store: FakeStore) -> None:
    fixtures = [make_dto(external_id) for external_id in range(1, 6)]

    result = await _engine(fake_store, config=SyncConfig(chunk_size=2)).sync(
        fixtures,
        SyncOptions(cancel=ManualCancel(after=1)),
    )

    assert result.cancelled
    assert result.inserted == 2
    assert result.skipped == 3
    assert result.total == 5
    cancelled = [item.external_id for item in result.items if item.reason is SkipReason.CANCELLED]
    assert cancelled == [3, 4, 5]


async def test_reference_lookup_failure_propagates(fake_store: FakeStore) -> None:
    async def broken(_: object) -> dict[int, int]:
        raise RuntimeError("database unavailable")

    fake_store.teams.ids_by_external_ids = broken  # type: ignore[method-assign]

    with pytest.raises(RuntimeError, match="database unavailable"):
        await _engine(fake_store).sync([make_dto(1)])


async def test_chunks_share_one_reference_lookup(fake_store: FakeStore) -> None:
    fixtures = [make_dto(external_id) for external_id in range(1, 10)]

    await _engine(fake_store, config=SyncConfig(chunk_size=3)).sync(fixtures)

    assert len(fake_store.teams.queries) == 1
