"""Ports for fetching fixtures from an external provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import date

    from fixturesync.domain.reconciliation.contracts import FixtureDTO


@runtime_checkable
class FixtureFetcher(Protocol):
    """Async port producing provider fixture DTOs."""

    async def fetch_between(self, start: date, end: date) -> list[FixtureDTO]: ...

    async def fetch_live(self) -> list[FixtureDTO]: ...

    async def fetch_by_ids(self, external_ids: Collection[int]) -> list[FixtureDTO]: ...


__all__ = ["FixtureFetcher"]
