"""Repository implementations backed by async SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import func, insert, select, update

from fixturesync.adapters.sqlalchemy.mappings import (
    fixture_audit_table,
    fixture_table,
    league_table,
    season_table,
    team_table,
)
from fixturesync.domain.model import (
    Fixture,
    FixtureAuditEntry,
    FixtureState,
    FixtureValues,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from datetime import datetime

    from sqlalchemy import Row, Table
    from sqlalchemy.ext.asyncio import AsyncSession

_FIXTURE_COLUMNS = tuple(column.name for column in fixture_table.columns)
_WRITABLE_COLUMNS = frozenset(_FIXTURE_COLUMNS) - {"id", "external_id", "created_at"}


def _row_to_fixture(row: Row[Any]) -> Fixture:
    data = dict(row._mapping)  # noqa: SLF001
    data["state"] = FixtureState(data["state"])
    return Fixture(**data)


def _values_to_row(values: FixtureValues) -> dict[str, Any]:
    return {
        name: getattr(values, name)
        for name in _FIXTURE_COLUMNS
        if name not in {"id", "created_at", "updated_at"}
    }


class SqlAlchemyFixtureRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, fixture_id: int) -> Fixture | None:
        stmt = select(fixture_table).where(fixture_table.c.id == fixture_id)
        row = (await self.session.execute(stmt)).one_or_none()
        return _row_to_fixture(row) if row is not None else None

    async def get_many_by_external_ids(self, external_ids: Collection[int]) -> dict[int, Fixture]:
        if not external_ids:
            return {}
        stmt = select(fixture_table).where(fixture_table.c.external_id.in_(list(external_ids)))
        rows = (await self.session.execute(stmt)).all()
        fixtures = (_row_to_fixture(row) for row in rows)
        return {fixture.external_id: fixture for fixture in fixtures}

    async def find_stale(
        self,
        states: Collection[FixtureState],
        *,
        start_ts_min: int | None = None,
        start_ts_max: int | None = None,
    ) -> list[Fixture]:
        if not states:
            return []
        stmt = select(fixture_table).where(
            fixture_table.c.state.in_([FixtureState(state) for state in states])
        )
        if start_ts_min is not None:
            stmt = stmt.where(fixture_table.c.start_ts >= start_ts_min)
        if start_ts_max is not None:
            stmt = stmt.where(fixture_table.c.start_ts <= start_ts_max)
        stmt = stmt.order_by(fixture_table.c.start_ts, fixture_table.c.id)
        rows = (await self.session.execute(stmt)).all()
        return [_row_to_fixture(row) for row in rows]

    async def insert(self, values: FixtureValues, *, now: datetime) -> int:
        stmt = (
            insert(fixture_table)
            .values(**_values_to_row(values), created_at=now, updated_at=now)
            .returning(fixture_table.c.id)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def update(self, fixture_id: int, values: Mapping[str, Any], *, now: datetime) -> None:
        unknown = set(values) - _WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update fixture columns: {', '.join(sorted(unknown))}")
        stmt = (
            update(fixture_table)
            .where(fixture_table.c.id == fixture_id)
            .values(**values, updated_at=now)
        )
        await self.session.execute(stmt)

    async def count(self) -> int:
        stmt = select(func.count()).select_from(fixture_table)
        return (await self.session.execute(stmt)).scalar_one()


class SqlAlchemyReferenceRepository:
    """Shared lookups for reference entities keyed by provider id."""

    def __init__(self, session: AsyncSession, table: Table) -> None:
        self.session = session
        self._table = table

    async def ids_by_external_ids(self, external_ids: Collection[int]) -> dict[int, int]:
        if not external_ids:
            return {}
        stmt = select(self._table.c.external_id, self._table.c.id).where(
            self._table.c.external_id.in_(list(external_ids))
        )
        rows = (await self.session.execute(stmt)).all()
        return {cast(int, external_id): cast(int, internal_id) for external_id, internal_id in rows}


class SqlAlchemyLeagueRepository(SqlAlchemyReferenceRepository):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, league_table)


class SqlAlchemySeasonRepository(SqlAlchemyReferenceRepository):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, season_table)


class SqlAlchemyTeamRepository(SqlAlchemyReferenceRepository):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, team_table)


class SqlAlchemyAuditRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entry: FixtureAuditEntry) -> None:
        self.session.add(entry)

    async def list_for_fixture(self, fixture_id: int) -> list[FixtureAuditEntry]:
        stmt = (
            select(FixtureAuditEntry)
            .where(fixture_audit_table.c.fixture_id == fixture_id)
            .order_by(fixture_audit_table.c.id)
        )
        return list((await self.session.execute(stmt)).scalars())

    async def count(self) -> int:
        stmt = select(func.count()).select_from(fixture_audit_table)
        return (await self.session.execute(stmt)).scalar_one()
