"""SQLAlchemy mapping metadata for the fixturesync domain model.

Fixture rows are read and written with Core statements against ``fixture_table``
and surface as frozen ``Fixture`` structs. Reference, audit and run-tracking
entities are mapped imperatively.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from fixturesync.domain.model import (
    AuditSource,
    ChangeSet,
    FieldChange,
    FixtureAuditEntry,
    FixtureState,
    ItemStatus,
    League,
    RunStatus,
    RunTrigger,
    Season,
    SyncBatch,
    SyncItem,
    Team,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ChangeSetType(TypeDecorator[ChangeSet]):
    """Stores ``{field: FieldChange}`` as a JSON object of ``{old, new}`` pairs."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: ChangeSet | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = {name: change.as_dict() for name, change in value.items()}
        return json.dumps(payload, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> ChangeSet:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        items = cast(dict[str, dict[str, str]], loaded)
        return {
            name: FieldChange(old=str(pair.get("old")), new=str(pair.get("new")))
            for name, pair in items.items()
        }


class JSONDict(TypeDecorator[dict[str, Any]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, Any] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, sort_keys=True, default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, Any]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        return cast(dict[str, Any], loaded) if isinstance(loaded, dict) else {}


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values, length=32)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Reference tables ------------------------------------------------------------

league_table = Table(
    "league",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", BigInteger, nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("country_name", String(255), nullable=True),
)

season_table = Table(
    "season",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", BigInteger, nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("league_id", ForeignKey("league.id", ondelete="SET NULL"), nullable=True),
)

team_table = Table(
    "team",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", BigInteger, nullable=False, unique=True),
    Column("name", String(255), nullable=False),
)

# Fixtures ---------------------------------------------------------------------

fixture_table = Table(
    "fixture",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", BigInteger, nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("league_id", ForeignKey("league.id", ondelete="SET NULL"), nullable=True),
    Column("season_id", ForeignKey("season.id", ondelete="SET NULL"), nullable=True),
    Column("home_team_id", ForeignKey("team.id", ondelete="RESTRICT"), nullable=False),
    Column("away_team_id", ForeignKey("team.id", ondelete="RESTRICT"), nullable=False),
    Column("start_iso", String(40), nullable=False),
    Column("start_ts", BigInteger, nullable=False),
    Column("state", _str_enum(FixtureState), nullable=False),
    Column("live_minute", Integer, nullable=True),
    Column("result", String(32), nullable=True),
    Column("home_score_90", Integer, nullable=True),
    Column("away_score_90", Integer, nullable=True),
    Column("home_score_et", Integer, nullable=True),
    Column("away_score_et", Integer, nullable=True),
    Column("pen_home", Integer, nullable=True),
    Column("pen_away", Integer, nullable=True),
    Column("stage", String(255), nullable=True),
    Column("round", String(255), nullable=True),
    Column("leg", String(16), nullable=True),
    Column("aggregate_id", BigInteger, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_fixture_state", "state"),
    Index("ix_fixture_start_ts", "start_ts"),
)

fixture_audit_table = Table(
    "fixture_audit_log",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fixture_id", ForeignKey("fixture.id", ondelete="CASCADE"), nullable=False),
    Column("run_id", Integer, nullable=True),
    Column("source", _str_enum(AuditSource), nullable=False),
    Column("changes", ChangeSetType(), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_by", String(255), nullable=True),
    Index("ix_fixture_audit_log_fixture_id", "fixture_id"),
    Index("ix_fixture_audit_log_run_id", "run_id"),
)

# Run tracking -----------------------------------------------------------------

sync_batch_table = Table(
    "sync_batch",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("version", String(64), nullable=True),
    Column("status", _str_enum(RunStatus), nullable=False),
    Column("trigger", _str_enum(RunTrigger), nullable=False),
    Column("triggered_by", String(255), nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("finished_at", UTCDateTime(), nullable=True),
    Column("duration_ms", Integer, nullable=True),
    Column("items_total", Integer, nullable=False, default=0),
    Column("items_success", Integer, nullable=False, default=0),
    Column("items_failed", Integer, nullable=False, default=0),
    Column("error_message", Text, nullable=True),
    Column("meta", JSONDict(), nullable=False),
)

sync_item_table = Table(
    "sync_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("batch_id", ForeignKey("sync_batch.id", ondelete="CASCADE"), nullable=False),
    Column("item_key", String(255), nullable=False),
    Column("status", _str_enum(ItemStatus), nullable=False),
    Column("error_message", Text, nullable=True),
    Column("meta", JSONDict(), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_sync_item_batch_id", "batch_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(League, league_table)
    mapper_registry.map_imperatively(Season, season_table)
    mapper_registry.map_imperatively(Team, team_table)
    mapper_registry.map_imperatively(FixtureAuditEntry, fixture_audit_table)
    mapper_registry.map_imperatively(SyncBatch, sync_batch_table)
    mapper_registry.map_imperatively(SyncItem, sync_item_table)

    configure_mappers()
    return mapper_registry


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    async with engine.begin() as conn:
        await conn.run_sync(mapper_registry.metadata.create_all)
