"""Run/batch tracking records for operational visibility."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .enums import ItemStatus, RunStatus, RunTrigger


@dataclass(eq=False, kw_only=True)
class SyncBatch:
    name: str
    version: str | None = None
    status: RunStatus = RunStatus.RUNNING
    trigger: RunTrigger = RunTrigger.MANUAL
    triggered_by: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    finished_at: datetime | None = None
    duration_ms: int | None = None
    items_total: int = 0
    items_success: int = 0
    items_failed: int = 0
    error_message: str | None = None
    meta: dict[str, Any] = field(default_factory=dict[str, Any])
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class SyncItem:
    batch_id: int
    item_key: str
    status: ItemStatus
    error_message: str | None = None
    meta: dict[str, Any] = field(default_factory=dict[str, Any])
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    id: int | None = None
