"""Translate SportMonks fixture payloads into provider-neutral fixture DTOs."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from fixturesync.domain.reconciliation.contracts import FixtureDTO

from .schema import FixturePayload

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .schema import ScorePayload

log = getLogger(__name__)

CURRENT_SCORE_TYPE_ID: Final = 1525
_REGULAR_TIME: Final = frozenset({"2ND_HALF", "REGULAR_TIME"})
_EXTRA_TIME: Final = frozenset({"EXTRA_TIME", "ET"})
_PENALTIES: Final = frozenset({"PENALTIES", "PENALTY_SHOOTOUT"})

type ScorePair = tuple[int | None, int | None]


def _ensure_payload(payload: FixturePayload | Mapping[str, Any]) -> FixturePayload:
    if isinstance(payload, FixturePayload):
        return payload
    return FixturePayload.model_validate(payload)


def coerce_epoch_seconds(timestamp: int | None, starting_at: str | None) -> int | None:
    """Prefer the numeric timestamp; fall back to parsing ``starting_at`` as UTC."""

    if timestamp is not None:
        return int(timestamp)
    if not starting_at:
        return None
    try:
        parsed = datetime.fromisoformat(starting_at.strip().replace(" ", "T"))
    except ValueError:
        log.warning("Unparseable starting_at %r", starting_at)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


def _score_pair(scores: Iterable[ScorePayload]) -> ScorePair:
    home: int | None = None
    away: int | None = None
    for score in scores:
        side = (score.score.participant or "").lower()
        if side == "home":
            home = score.score.goals
        elif side == "away":
            away = score.score.goals
    return home, away


def _scores_matching(
    scores: Iterable[ScorePayload],
    *,
    descriptions: frozenset[str] = frozenset(),
    type_id: int | None = None,
) -> list[ScorePayload]:
    matched: list[ScorePayload] = []
    for score in scores:
        description = (score.description or "").upper()
        if description in descriptions or (type_id is not None and score.type_id == type_id):
            matched.append(score)
    return matched


def pick_result(scores: Iterable[ScorePayload]) -> str | None:
    """Return the current score as ``"home-away"`` or ``None`` when incomplete."""

    home, away = _score_pair(_scores_matching(scores, type_id=CURRENT_SCORE_TYPE_ID))
    if home is None or away is None:
        return None
    return f"{home}-{away}"


def _live_minute(payload: FixturePayload) -> int | None:
    for period in payload.periods:
        if period.ticking:
            return period.minutes
    return None


def parse_fixture(payload: FixturePayload | Mapping[str, Any]) -> FixtureDTO | None:
    """Build a ``FixtureDTO``; fixtures without both participants are dropped."""

    fixture = _ensure_payload(payload)
    home_id: int | None = None
    away_id: int | None = None
    for participant in fixture.participants:
        if participant.location == "home":
            home_id = participant.id
        elif participant.location == "away":
            away_id = participant.id
    if home_id is None or away_id is None:
        log.debug("Dropping fixture %s without home/away participants", fixture.id)
        return None

    state = None
    if fixture.state is not None:
        state = fixture.state.developer_name or fixture.state.short_name

    home_90, away_90 = _score_pair(_scores_matching(fixture.scores, descriptions=_REGULAR_TIME))
    home_et, away_et = _score_pair(_scores_matching(fixture.scores, descriptions=_EXTRA_TIME))
    pen_home, pen_away = _score_pair(_scores_matching(fixture.scores, descriptions=_PENALTIES))

    return FixtureDTO(
        external_id=fixture.id,
        name=fixture.name,
        league_external_id=fixture.league_id,
        season_external_id=fixture.season_id,
        home_team_external_id=home_id,
        away_team_external_id=away_id,
        start_iso=fixture.starting_at,
        start_ts=coerce_epoch_seconds(fixture.starting_at_timestamp, fixture.starting_at),
        state=state,
        live_minute=_live_minute(fixture),
        result=pick_result(fixture.scores),
        home_score_90=home_90,
        away_score_90=away_90,
        home_score_et=home_et,
        away_score_et=away_et,
        pen_home=pen_home,
        pen_away=pen_away,
        stage=fixture.stage.name if fixture.stage else None,
        round=fixture.round.name if fixture.round else None,
        leg=fixture.leg,
        aggregate_id=fixture.aggregate_id,
        league_name=fixture.league.name if fixture.league else None,
        country_name=(
            fixture.league.country.name if fixture.league and fixture.league.country else None
        ),
        has_odds=fixture.has_odds,
    )
