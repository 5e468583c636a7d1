from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from fixturesync.app import (
    DEFAULT_GRACE_MINUTES,
    DEFAULT_MAX_LIVE_AGE_HOURS,
    DEFAULT_MAX_OVERDUE_HOURS,
    override_fixture_values,
    recover_overdue_fixtures,
    sync_provider_fixtures,
    sync_stale_live_fixtures,
)
from fixturesync.config import ConfigurationError, configure_logging
from fixturesync.domain.model import FixtureState, RunTrigger
from fixturesync.domain.overrides import CLEARABLE_FIELDS, FixtureOverride
from fixturesync.domain.reconciliation import SyncOptions, coerce_fixture_state

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from fixturesync.domain.reconciliation import SyncFixturesResult

log = logging.getLogger(__name__)

cancel_requested = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise football fixtures")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch fixtures from SportMonks and reconcile them")
    sync.add_argument(
        "--from",
        dest="start",
        type=str,
        help="ISO date (YYYY-MM-DD) marking the inclusive start of the window",
    )
    sync.add_argument(
        "--to",
        dest="end",
        type=str,
        help="ISO date (YYYY-MM-DD) marking the inclusive end of the window",
    )
    sync.add_argument("--live", action="store_true", help="Sync fixtures currently in play")
    sync.add_argument(
        "--ids",
        type=str,
        help="Comma-separated SportMonks fixture ids to sync",
    )
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Classify fixtures without writing anything",
    )
    sync.add_argument(
        "--bypass-state-validation",
        action="store_true",
        help="Apply updates even when the state transition is not allowed",
    )
    sync.add_argument(
        "--requested-by",
        type=str,
        help="Operator name recorded on the batch and audit entries",
    )

    recover_live = subparsers.add_parser(
        "recover-live", help="Re-sync fixtures still marked live long after kickoff"
    )
    recover_live.add_argument(
        "--max-age-hours",
        type=int,
        default=DEFAULT_MAX_LIVE_AGE_HOURS,
        help="Hours since kickoff before a live fixture counts as stuck (1-168)",
    )

    recover_overdue = subparsers.add_parser(
        "recover-overdue", help="Re-sync fixtures that never kicked off in the database"
    )
    recover_overdue.add_argument(
        "--grace-minutes",
        type=int,
        default=DEFAULT_GRACE_MINUTES,
        help="Minutes after kickoff before a fixture counts as overdue (1-120)",
    )
    recover_overdue.add_argument(
        "--max-overdue-hours",
        type=int,
        default=DEFAULT_MAX_OVERDUE_HOURS,
        help="Ignore fixtures that kicked off longer ago than this (1-168)",
    )

    for recovery in (recover_live, recover_overdue):
        recovery.add_argument(
            "--dry-run",
            action="store_true",
            help="Classify fixtures without writing anything",
        )
        recovery.add_argument(
            "--requested-by",
            type=str,
            help="Operator name recorded on the batch and audit entries",
        )

    override = subparsers.add_parser("override", help="Manually correct one fixture")
    override.add_argument("fixture_id", type=int, help="Internal fixture id")
    override.add_argument("--name", type=str, help="Replacement fixture name")
    override.add_argument("--state", type=str, help="Fixture state code, e.g. FT or AET")
    override.add_argument("--result", type=str, help="Result string, e.g. 2-1")
    override.add_argument("--home-score", type=int, help="Home goals after 90 minutes")
    override.add_argument("--away-score", type=int, help="Away goals after 90 minutes")
    override.add_argument("--home-score-et", type=int, help="Home goals after extra time")
    override.add_argument("--away-score-et", type=int, help="Away goals after extra time")
    override.add_argument("--pen-home", type=int, help="Home penalty shoot-out goals")
    override.add_argument("--pen-away", type=int, help="Away penalty shoot-out goals")
    override.add_argument("--leg", type=str, help="Leg descriptor, e.g. 1/2")
    override.add_argument(
        "--clear",
        action="append",
        choices=sorted(CLEARABLE_FIELDS),
        metavar="FIELD",
        help="Reset a field to empty; may be repeated",
    )
    override.add_argument("--by", type=str, help="Operator name recorded on the audit entry")

    return parser.parse_args(list(argv))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _parse_ids(value: str) -> list[int]:
    try:
        ids = [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise ValueError(f"Invalid fixture id list: {value}") from exc
    if not ids:
        raise ValueError("No fixture ids given")
    return ids


def _parse_state(value: str) -> FixtureState:
    try:
        return FixtureState(value.strip().upper())
    except ValueError:
        state = coerce_fixture_state(value)
        if state is FixtureState.NOT_STARTED and value.strip().upper() not in {"NS", "NOT_STARTED"}:
            raise ValueError(f"Unknown fixture state: {value}") from None
        return state


def _validate_sync_args(args: argparse.Namespace) -> tuple[date | None, date | None, list[int]]:
    start = _parse_date(args.start) if args.start else None
    end = _parse_date(args.end) if args.end else None
    ids = _parse_ids(args.ids) if args.ids else []

    modes = sum((bool(ids), args.live, start is not None or end is not None))
    if modes != 1:
        raise ValueError("Choose exactly one of --from/--to, --live or --ids")
    if (start is None) != (end is None):
        raise ValueError("--from and --to must be given together")
    if start and end and start > end:
        raise ValueError("Window start must not be after end")
    return start, end, ids


_OVERRIDE_OPTIONS = {
    "name": "name",
    "result": "result",
    "home_score": "home_score_90",
    "away_score": "away_score_90",
    "home_score_et": "home_score_et",
    "away_score_et": "away_score_et",
    "pen_home": "pen_home",
    "pen_away": "pen_away",
    "leg": "leg",
}


def _build_override(args: argparse.Namespace) -> FixtureOverride:
    values: dict[str, Any] = {
        field_name: getattr(args, option)
        for option, field_name in _OVERRIDE_OPTIONS.items()
        if getattr(args, option) is not None
    }
    if args.state:
        values["state"] = _parse_state(args.state)
    for field_name in args.clear or ():
        if field_name in values:
            raise ValueError(f"Cannot both set and clear {field_name}")
        values[field_name] = None
    if not values:
        raise ValueError("Nothing to override; pass at least one field")
    return FixtureOverride(**values)


def _recovery_options(args: argparse.Namespace) -> SyncOptions:
    return SyncOptions(
        dry_run=args.dry_run,
        requested_by=args.requested_by,
        cancel=cancel_requested,
    )


def _finish_sync(label: str, result: SyncFixturesResult) -> None:
    log.info(
        "%s finished: inserted=%s, updated=%s, skipped=%s, failed=%s, duplicates=%s, cancelled=%s",
        label,
        result.inserted,
        result.updated,
        result.skipped,
        result.failed,
        result.duplicates,
        result.cancelled,
    )
    if result.total and result.failed == result.total:
        sys.exit(1)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    start: date | None = None
    end: date | None = None
    ids: list[int] = []
    override: FixtureOverride | None = None
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else None)
        if parsed_args.command == "sync":
            start, end, ids = _validate_sync_args(parsed_args)
        elif parsed_args.command == "override":
            override = _build_override(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            result = asyncio.run(
                sync_provider_fixtures(
                    start=start,
                    end=end,
                    live=parsed_args.live,
                    external_ids=ids,
                    options=SyncOptions(
                        dry_run=parsed_args.dry_run,
                        bypass_state_validation=parsed_args.bypass_state_validation,
                        requested_by=parsed_args.requested_by,
                        cancel=cancel_requested,
                    ),
                    trigger=RunTrigger.MANUAL,
                )
            )
            _finish_sync("Fixture sync", result)
        elif parsed_args.command == "recover-live":
            recovery = asyncio.run(
                sync_stale_live_fixtures(
                    max_live_age_hours=parsed_args.max_age_hours,
                    options=_recovery_options(parsed_args),
                    trigger=RunTrigger.MANUAL,
                )
            )
            log.info("Stale live fixtures: candidates=%s, finished=%s", recovery.candidates, recovery.fetched)
            _finish_sync("Stale live recovery", recovery.sync)
        elif parsed_args.command == "recover-overdue":
            recovery = asyncio.run(
                recover_overdue_fixtures(
                    grace_minutes=parsed_args.grace_minutes,
                    max_overdue_hours=parsed_args.max_overdue_hours,
                    options=_recovery_options(parsed_args),
                    trigger=RunTrigger.MANUAL,
                )
            )
            log.info("Overdue fixtures: candidates=%s, fetched=%s", recovery.candidates, recovery.fetched)
            _finish_sync("Overdue recovery", recovery.sync)
        elif parsed_args.command == "override" and override is not None:
            entry = asyncio.run(
                override_fixture_values(
                    parsed_args.fixture_id,
                    override,
                    overridden_by=parsed_args.by,
                )
            )
            if entry is None:
                log.info("Fixture %s already had these values", parsed_args.fixture_id)
            else:
                log.info(
                    "Overrode fixture %s: %s",
                    parsed_args.fixture_id,
                    ", ".join(sorted(entry.changes)),
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """First Ctrl+C stops after the current chunk; a second one exits immediately."""
    if cancel_requested.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(130)
    log.info("Cancellation requested; finishing the current chunk (Ctrl+C again to abort)")
    cancel_requested.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
