"""Ports for reading and writing fixture data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from datetime import datetime

    from fixturesync.domain.model import (
        Fixture,
        FixtureAuditEntry,
        FixtureState,
        FixtureValues,
        ItemStatus,
        RunStatus,
        RunTrigger,
    )


@runtime_checkable
class FixtureRepository(Protocol):
    """Persistence contract for fixture rows, keyed by external id."""

    async def get(self, fixture_id: int) -> Fixture | None: ...

    async def get_many_by_external_ids(self, external_ids: Collection[int]) -> dict[int, Fixture]:
        """Return existing rows for ``external_ids`` in a single round-trip."""
        ...

    async def find_stale(
        self,
        states: Collection[FixtureState],
        *,
        start_ts_min: int | None = None,
        start_ts_max: int | None = None,
    ) -> list[Fixture]:
        """Rows in ``states`` whose kickoff lies within the inclusive bounds."""
        ...

    async def insert(self, values: FixtureValues, *, now: datetime) -> int: ...

    async def update(self, fixture_id: int, values: Mapping[str, Any], *, now: datetime) -> None: ...

    async def count(self) -> int: ...


@runtime_checkable
class ReferenceRepository(Protocol):
    """Read-side contract for league/season/team lookups."""

    async def ids_by_external_ids(self, external_ids: Collection[int]) -> dict[int, int]:
        """Map external ids to internal ids; ids that do not exist are absent."""
        ...


@runtime_checkable
class LeagueRepository(ReferenceRepository, Protocol):
    """Repository contract for leagues."""


@runtime_checkable
class SeasonRepository(ReferenceRepository, Protocol):
    """Repository contract for seasons."""


@runtime_checkable
class TeamRepository(ReferenceRepository, Protocol):
    """Repository contract for teams."""


@runtime_checkable
class AuditRepository(Protocol):
    """Append-only store of fixture audit entries."""

    def add(self, entry: FixtureAuditEntry) -> None: ...

    async def list_for_fixture(self, fixture_id: int) -> list[FixtureAuditEntry]: ...

    async def count(self) -> int: ...


@runtime_checkable
class RunTracker(Protocol):
    """Narrow contract the engine needs from the run/batch tracker."""

    async def record_item(
        self,
        batch_id: int,
        item_key: str,
        status: ItemStatus,
        *,
        error_message: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None: ...


@runtime_checkable
class BatchRunTracker(RunTracker, Protocol):
    """Run tracker that also owns the batch lifecycle."""

    async def start_batch(
        self,
        name: str,
        *,
        trigger: RunTrigger = ...,
        triggered_by: str | None = None,
        version: str | None = None,
        items_total: int = 0,
        meta: Mapping[str, Any] | None = None,
    ) -> int: ...

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
    ) -> object: ...
