"""Run/batch tracker persisted with SQLAlchemy.

Each call uses its own short-lived session so tracking never shares a
transaction with fixture writes.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from fixturesync.adapters.sqlalchemy.mappings import sync_item_table
from fixturesync.adapters.sqlalchemy.unit_of_work import configured_session_factory
from fixturesync.domain.model import ItemStatus, RunStatus, RunTrigger, SyncBatch, SyncItem

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class BatchNotFoundError(LookupError):
    """Raised when finishing a batch id that was never started."""


class SqlAlchemyRunTracker:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_factory = session_factory or configured_session_factory()
        self.clock = clock

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
        batch = SyncBatch(
            name=name,
            version=version,
            status=RunStatus.RUNNING,
            trigger=trigger,
            triggered_by=triggered_by,
            started_at=self.clock(),
            items_total=items_total,
            meta=dict(meta or {}),
        )
        async with self.session_factory() as session:
            session.add(batch)
            await session.commit()
        if batch.id is None:
            raise RuntimeError("Batch id not assigned after commit")
        log.info("Started batch %s (%s) trigger=%s", batch.id, name, trigger)
        return batch.id

    async def record_item(
        self,
        batch_id: int,
        item_key: str,
        status: ItemStatus,
        *,
        error_message: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        item = SyncItem(
            batch_id=batch_id,
            item_key=item_key,
            status=status,
            error_message=error_message,
            meta=dict(meta or {}),
            created_at=self.clock(),
        )
        async with self.session_factory() as session:
            session.add(item)
            await session.commit()

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
    ) -> SyncBatch:
        async with self.session_factory() as session:
            batch = await session.get(SyncBatch, batch_id)
            if batch is None:
                raise BatchNotFoundError(f"Batch {batch_id} not found")
            finished_at = self.clock()
            batch.status = status
            batch.finished_at = finished_at
            batch.duration_ms = int((finished_at - batch.started_at).total_seconds() * 1000)
            batch.items_total = items_total
            batch.items_success = items_success
            batch.items_failed = items_failed
            batch.error_message = error_message
            if meta:
                batch.meta = {**batch.meta, **meta}
            await session.commit()
        log.info(
            "Finished batch %s: status=%s, total=%s, success=%s, failed=%s, duration_ms=%s",
            batch_id,
            status,
            items_total,
            items_success,
            items_failed,
            batch.duration_ms,
        )
        return batch

    async def get_batch(self, batch_id: int) -> SyncBatch | None:
        async with self.session_factory() as session:
            return await session.get(SyncBatch, batch_id)

    async def list_items(self, batch_id: int) -> list[SyncItem]:
        async with self.session_factory() as session:
            stmt = (
                select(SyncItem)
                .where(sync_item_table.c.batch_id == batch_id)
                .order_by(sync_item_table.c.id)
            )
            return list((await session.execute(stmt)).scalars())


if TYPE_CHECKING:
    from fixturesync.domain.ports.persistence import BatchRunTracker

    _tracker_check: BatchRunTracker = SqlAlchemyRunTracker()
