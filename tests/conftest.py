from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from sqlalchemy import insert

from fixturesync.adapters.sqlalchemy.mappings import league_table, season_table, team_table
from fixturesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    create_engine_for,
    shutdown,
    startup,
)
from tests.helpers.fixtures import (
    AWAY_TEAM_EXTERNAL_ID,
    HOME_TEAM_EXTERNAL_ID,
    LEAGUE_EXTERNAL_ID,
    SEASON_EXTERNAL_ID,
    FakeStore,
)

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'fixtures.db'}")
    await startup(engine=engine, force=True)
    try:
        yield engine
    finally:
        await shutdown()


@pytest_asyncio.fixture
async def seeded_engine(sqlite_engine: AsyncEngine) -> AsyncEngine:
    """Engine with one league, one season and the two default teams (ids 1 and 2)."""

    async with sqlite_engine.begin() as conn:
        await conn.execute(
            insert(league_table).values(
                id=1, external_id=LEAGUE_EXTERNAL_ID, name="Scottish Premiership"
            )
        )
        await conn.execute(
            insert(season_table).values(
                id=1, external_id=SEASON_EXTERNAL_ID, name="2024/2025", league_id=1
            )
        )
        await conn.execute(
            insert(team_table),
            [
                {"id": 1, "external_id": HOME_TEAM_EXTERNAL_ID, "name": "Home FC"},
                {"id": 2, "external_id": AWAY_TEAM_EXTERNAL_ID, "name": "Away United"},
            ],
        )
    return sqlite_engine


@pytest.fixture
def sqlite_unit_of_work(seeded_engine: AsyncEngine) -> Callable[[], SqlAlchemyUnitOfWork]:
    _ = seeded_engine

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    return factory
