"""Reusable fakes and builders for fixture reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from fixturesync.domain.model import Fixture, FixtureState, ItemStatus, RunStatus, RunTrigger
from fixturesync.domain.ports.unit_of_work import FixtureRepositories
from fixturesync.domain.reconciliation import FixtureDTO, ReferenceLookup

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from types import TracebackType

    from fixturesync.domain.model import FixtureAuditEntry, FixtureValues

KICKOFF_TS = 1_735_732_800  # 2025-01-01T12:00:00Z
FIXED_NOW = datetime(2025, 1, 1, 18, 0, tzinfo=UTC)

HOME_TEAM_EXTERNAL_ID = 1001
AWAY_TEAM_EXTERNAL_ID = 1002
LEAGUE_EXTERNAL_ID = 8
SEASON_EXTERNAL_ID = 23614


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_dto(
    external_id: int = 19_000_001,
    *,
    name: str | None = "Home FC vs Away United",
    state: str | None = "NS",
    start_ts: int | None = KICKOFF_TS,
    home_team_external_id: int | None = HOME_TEAM_EXTERNAL_ID,
    away_team_external_id: int | None = AWAY_TEAM_EXTERNAL_ID,
    **overrides: Any,
) -> FixtureDTO:
    """Create a provider DTO that resolves against ``default_lookup()``."""

    return FixtureDTO(
        external_id=external_id,
        name=name,
        home_team_external_id=home_team_external_id,
        away_team_external_id=away_team_external_id,
        start_ts=start_ts,
        league_external_id=overrides.pop("league_external_id", LEAGUE_EXTERNAL_ID),
        season_external_id=overrides.pop("season_external_id", SEASON_EXTERNAL_ID),
        state=state,
        **overrides,
    )


def default_lookup() -> ReferenceLookup:
    return ReferenceLookup(
        leagues={LEAGUE_EXTERNAL_ID: 1},
        seasons={SEASON_EXTERNAL_ID: 1},
        teams={HOME_TEAM_EXTERNAL_ID: 1, AWAY_TEAM_EXTERNAL_ID: 2},
    )


class FakeFixtureRepository:
    def __init__(self, rows: dict[int, Fixture] | None = None) -> None:
        self.rows: dict[int, Fixture] = rows or {}
        self.fail_for: set[int] = set()
        self.inserts: list[FixtureValues] = []
        self.updates: list[tuple[int, dict[str, Any]]] = []

    async def get(self, fixture_id: int) -> Fixture | None:
        return self.rows.get(fixture_id)

    async def get_many_by_external_ids(self, external_ids: Collection[int]) -> dict[int, Fixture]:
        wanted = set(external_ids)
        return {row.external_id: row for row in self.rows.values() if row.external_id in wanted}

    async def find_stale(
        self,
        states: Collection[FixtureState],
        *,
        start_ts_min: int | None = None,
        start_ts_max: int | None = None,
    ) -> list[Fixture]:
        wanted = set(states)
        rows = [
            row
            for row in self.rows.values()
            if row.state in wanted
            and (start_ts_min is None or row.start_ts >= start_ts_min)
            and (start_ts_max is None or row.start_ts <= start_ts_max)
        ]
        return sorted(rows, key=lambda row: (row.start_ts, row.id))

    async def insert(self, values: FixtureValues, *, now: datetime) -> int:
        if values.external_id in self.fail_for:
            raise RuntimeError(f"insert rejected for {values.external_id}")
        fixture_id = max(self.rows, default=0) + 1
        self.rows[fixture_id] = Fixture(
            **{f.name: getattr(values, f.name) for f in fields(values)},
            id=fixture_id,
            created_at=now,
            updated_at=now,
        )
        self.inserts.append(values)
        return fixture_id

    async def update(self, fixture_id: int, values: Mapping[str, Any], *, now: datetime) -> None:
        current = self.rows[fixture_id]
        if current.external_id in self.fail_for:
            raise RuntimeError(f"update rejected for {current.external_id}")
        self.rows[fixture_id] = replace(current, **values, updated_at=now)
        self.updates.append((fixture_id, dict(values)))

    async def count(self) -> int:
        return len(self.rows)

    def by_external_id(self, external_id: int) -> Fixture | None:
        for row in self.rows.values():
            if row.external_id == external_id:
                return row
        return None


class FakeReferenceRepository:
    def __init__(self, ids: dict[int, int] | None = None) -> None:
        self.ids = ids or {}
        self.queries: list[set[int]] = []

    async def ids_by_external_ids(self, external_ids: Collection[int]) -> dict[int, int]:
        wanted = set(external_ids)
        self.queries.append(wanted)
        return {key: value for key, value in self.ids.items() if key in wanted}


class FakeAuditRepository:
    def __init__(self) -> None:
        self.entries: list[FixtureAuditEntry] = []

    def add(self, entry: FixtureAuditEntry) -> None:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)

    async def list_for_fixture(self, fixture_id: int) -> list[FixtureAuditEntry]:
        return [entry for entry in self.entries if entry.fixture_id == fixture_id]

    async def count(self) -> int:
        return len(self.entries)


@dataclass
class FakeStore:
    """Shared in-memory state behind every ``FakeUnitOfWork`` of one test."""

    fixtures: FakeFixtureRepository = field(default_factory=FakeFixtureRepository)
    leagues: FakeReferenceRepository = field(
        default_factory=lambda: FakeReferenceRepository({LEAGUE_EXTERNAL_ID: 1})
    )
    seasons: FakeReferenceRepository = field(
        default_factory=lambda: FakeReferenceRepository({SEASON_EXTERNAL_ID: 1})
    )
    teams: FakeReferenceRepository = field(
        default_factory=lambda: FakeReferenceRepository(
            {HOME_TEAM_EXTERNAL_ID: 1, AWAY_TEAM_EXTERNAL_ID: 2}
        )
    )
    audit: FakeAuditRepository = field(default_factory=FakeAuditRepository)
    commits: int = 0
    rollbacks: int = 0

    def repositories(self) -> FixtureRepositories:
        return FixtureRepositories(
            fixtures=self.fixtures,
            leagues=self.leagues,
            seasons=self.seasons,
            teams=self.teams,
            audit=self.audit,
        )

    def unit_of_work(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)


class FakeUnitOfWork:
    """Unit of work over ``FakeStore``; audit entries only land on commit."""

    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self._pending = FakeAuditRepository()
        self._repositories = replace(store.repositories(), audit=self._pending)

    @property
    def repositories(self) -> FixtureRepositories:
        return self._repositories

    async def __aenter__(self) -> FakeUnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            await self.rollback()
        return False

    async def commit(self) -> None:
        for entry in self._pending.entries:
            self.store.audit.add(entry)
        self._pending.entries.clear()
        self.store.commits += 1

    async def rollback(self) -> None:
        self._pending.entries.clear()
        self.store.rollbacks += 1


@dataclass
class RecordedItem:
    batch_id: int
    item_key: str
    status: ItemStatus
    error_message: str | None
    meta: dict[str, Any]


class FakeRunTracker:
    """In-memory batch tracker recording every call."""

    def __init__(self, *, fail_on_record: bool = False) -> None:
        self.fail_on_record = fail_on_record
        self.items: list[RecordedItem] = []
        self.batches: dict[int, dict[str, Any]] = {}

    async def start_batch(
        self,
        name: str,
        *,
        trigger: RunTrigger = RunTrigger.MANUAL,
        triggered_by: str | None = None,
        version: str | None = None,
        items_total: int = 0,
        meta: Mapping[str, Any] | None = None,
    ) -> int:
        batch_id = len(self.batches) + 1
        self.batches[batch_id] = {
            "name": name,
            "trigger": trigger,
            "triggered_by": triggered_by,
            "version": version,
            "items_total": items_total,
            "meta": dict(meta or {}),
            "status": RunStatus.RUNNING,
        }
        return batch_id

    async def record_item(
        self,
        batch_id: int,
        item_key: str,
        status: ItemStatus,
        *,
        error_message: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        if self.fail_on_record:
            raise RuntimeError("tracker unavailable")
        self.items.append(
            RecordedItem(
                batch_id=batch_id,
                item_key=item_key,
                status=status,
                error_message=error_message,
                meta=dict(meta or {}),
            )
        )

    async def finish_batch(
        self,
        batch_id: int,
        status: RunStatus,
        *,
        items_total: int,
        items_success: int,
        items_failed: int,
        error_message: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        self.batches[batch_id].update(
            status=status,
            items_total=items_total,
            items_success=items_success,
            items_failed=items_failed,
            error_message=error_message,
            finished_meta=dict(meta or {}),
        )


class ManualCancel:
    """Cancellation signal that trips after ``is_set`` has been polled ``after`` times."""

    def __init__(self, after: int) -> None:
        self.after = after
        self.polls = 0

    def is_set(self) -> bool:
        self.polls += 1
        return self.polls > self.after


def make_existing(
    external_id: int = 19_000_001,
    *,
    fixture_id: int = 1,
    state: FixtureState = FixtureState.NOT_STARTED,
    **overrides: Any,
) -> Fixture:
    """Create a stored row consistent with ``make_dto(external_id)``."""

    values: dict[str, Any] = {
        "external_id": external_id,
        "name": "Home FC vs Away United",
        "start_iso": "2025-01-01T12:00:00.000Z",
        "start_ts": KICKOFF_TS,
        "state": state,
        "home_team_id": 1,
        "away_team_id": 2,
        "league_id": 1,
        "season_id": 1,
        "id": fixture_id,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    values.update(overrides)
    return Fixture(**values)
