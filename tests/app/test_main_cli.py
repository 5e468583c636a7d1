from __future__ import annotations

from datetime import date

import pytest

from fixturesync.app import RecoveryResult
from fixturesync.domain.model import FieldChange, FixtureAuditEntry, FixtureState, RunTrigger
from fixturesync.domain.overrides import FixtureOverride
from fixturesync.domain.reconciliation import SyncFixturesResult
from fixturesync.ui import cli as cli_module


@pytest.fixture
def captured_sync(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    async def fake_sync(**kwargs: object) -> SyncFixturesResult:
        captured.update(kwargs)
        return SyncFixturesResult(inserted=1)

    monkeypatch.setattr(cli_module, "sync_provider_fixtures", fake_sync)
    return captured


def test_cli_sync_window(captured_sync: dict[str, object]) -> None:
    cli_module.main(
        [
            "sync",
            "--from",
            "2025-01-01",
            "--to",
            "2025-01-03",
            "--dry-run",
            "--requested-by",
            "ops",
        ]
    )

    assert captured_sync["start"] == date(2025, 1, 1)
    assert captured_sync["end"] == date(2025, 1, 3)
    assert captured_sync["live"] is False
    assert captured_sync["external_ids"] == []
    options = captured_sync["options"]
    assert options.dry_run  # type: ignore[attr-defined]
    assert not options.bypass_state_validation  # type: ignore[attr-defined]
    assert options.requested_by == "ops"  # type: ignore[attr-defined]
    assert options.cancel is cli_module.cancel_requested  # type: ignore[attr-defined]


def test_cli_sync_ids_and_bypass(captured_sync: dict[str, object]) -> None:
    cli_module.main(["sync", "--ids", "10, 11,12", "--bypass-state-validation"])

    assert captured_sync["external_ids"] == [10, 11, 12]
    assert captured_sync["start"] is None
    assert captured_sync["options"].bypass_state_validation  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    "argv",
    [
        ["sync"],
        ["sync", "--live", "--ids", "1"],
        ["sync", "--from", "2025-01-01"],
        ["sync", "--from", "2025-01-05", "--to", "2025-01-01"],
        ["sync", "--from", "yesterday", "--to", "2025-01-01"],
        ["sync", "--ids", "1,x"],
        ["override", "5"],
        ["override", "5", "--state", "LIVE-ISH"],
    ],
)
def test_cli_validation_errors_exit_2(
    captured_sync: dict[str, object], argv: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2
    assert captured_sync == {}


def test_cli_all_failed_sync_exits_1(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sync(**_: object) -> SyncFixturesResult:
        return SyncFixturesResult(failed=2)

    monkeypatch.setattr(cli_module, "sync_provider_fixtures", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "--live"])

    assert excinfo.value.code == 1


def test_cli_runtime_error_exits_1(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sync(**_: object) -> SyncFixturesResult:
        raise RuntimeError("provider down")

    monkeypatch.setattr(cli_module, "sync_provider_fixtures", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "--live"])

    assert excinfo.value.code == 1


def test_cli_override(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_override(
        fixture_id: int, override: FixtureOverride, *, overridden_by: str | None = None
    ) -> FixtureAuditEntry:
        captured.update(fixture_id=fixture_id, override=override, overridden_by=overridden_by)
        return FixtureAuditEntry(
            fixture_id=fixture_id, changes={"state": FieldChange(old="HT", new="FT")}
        )

    monkeypatch.setattr(cli_module, "override_fixture_values", fake_override)

    cli_module.main(
        ["override", "5", "--state", "ft", "--home-score", "2", "--away-score", "0", "--by", "ops"]
    )

    assert captured["fixture_id"] == 5
    assert captured["overridden_by"] == "ops"
    assert captured["override"] == FixtureOverride(
        state=FixtureState.FINISHED, home_score_90=2, away_score_90=0
    )


def test_sigint_handler_requests_cancellation_then_exits() -> None:
    cli_module.cancel_requested.clear()
    try:
        cli_module.sigint_handler(2, None)
        assert cli_module.cancel_requested.is_set()

        with pytest.raises(SystemExit) as excinfo:
            cli_module.sigint_handler(2, None)
        assert excinfo.value.code == 130
    finally:
        cli_module.cancel_requested.clear()


def test_cli_override_clear(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_override(
        fixture_id: int, override: FixtureOverride, *, overridden_by: str | None = None
    ) -> None:
        captured.update(fixture_id=fixture_id, override=override)

    monkeypatch.setattr(cli_module, "override_fixture_values", fake_override)

    cli_module.main(["override", "7", "--clear", "result", "--clear", "pen_home"])

    assert captured["override"] == FixtureOverride(result=None, pen_home=None)


def test_cli_override_rejects_set_and_clear(captured_sync: dict[str, object]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["override", "7", "--result", "1-0", "--clear", "result"])

    assert excinfo.value.code == 2


def test_cli_recover_live_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_recover(**kwargs: object) -> RecoveryResult:
        captured.update(kwargs)
        return RecoveryResult(candidates=2, fetched=1, sync=SyncFixturesResult(updated=1))

    monkeypatch.setattr(cli_module, "sync_stale_live_fixtures", fake_recover)

    cli_module.main(["recover-live", "--requested-by", "ops"])

    assert captured["max_live_age_hours"] == 2
    assert captured["trigger"] is RunTrigger.MANUAL
    options = captured["options"]
    assert not options.dry_run  # type: ignore[attr-defined]
    assert options.requested_by == "ops"  # type: ignore[attr-defined]
    assert options.cancel is cli_module.cancel_requested  # type: ignore[attr-defined]


def test_cli_recover_overdue_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_recover(**kwargs: object) -> RecoveryResult:
        captured.update(kwargs)
        return RecoveryResult()

    monkeypatch.setattr(cli_module, "recover_overdue_fixtures", fake_recover)

    cli_module.main(
        ["recover-overdue", "--grace-minutes", "45", "--max-overdue-hours", "12", "--dry-run"]
    )

    assert captured["grace_minutes"] == 45
    assert captured["max_overdue_hours"] == 12
    assert captured["options"].dry_run  # type: ignore[attr-defined]


def test_cli_recover_exits_1_when_every_item_failed(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_recover(**_: object) -> RecoveryResult:
        return RecoveryResult(candidates=3, fetched=3, sync=SyncFixturesResult(failed=3))

    monkeypatch.setattr(cli_module, "recover_overdue_fixtures", fake_recover)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["recover-overdue"])

    assert excinfo.value.code == 1
