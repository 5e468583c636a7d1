"""Pure transform from provider DTOs to normalised fixture candidates."""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Final

from fixturesync.domain.errors import MissingFieldError

from .contracts import FixtureCandidate, FixtureDTO
from .state import coerce_fixture_state

_SCORE_PATTERN: Final = re.compile(r"^(\d+)[-:](\d+)$")


def normalize_result(text: str | None) -> str | None:
    """Trim a score string and use ``-`` as separator; blank becomes ``None``."""

    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return None
    return stripped.replace(":", "-")


def parse_scores(text: str | None) -> tuple[int | None, int | None]:
    if not text:
        return None, None
    match = _SCORE_PATTERN.match(text.strip())
    if match is None:
        return None, None
    return int(match.group(1)), int(match.group(2))


def iso_from_epoch(seconds: float) -> str:
    if not math.isfinite(seconds):
        raise ValueError(f"Invalid start timestamp: {seconds!r}")
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validate_required_fields(dto: FixtureDTO) -> tuple[str, int]:
    """Return the stripped name and kickoff epoch, or raise ``MissingFieldError``."""

    if not dto.name or not dto.name.strip():
        raise MissingFieldError("name", dto.external_id)
    if not dto.start_ts:
        raise MissingFieldError("start timestamp", dto.external_id)
    return dto.name.strip(), int(dto.start_ts)


def _first_not_none(*values: int | None) -> int | None:
    for value in values:
        if value is not None:
            return value
    return None


def transform_fixture_dto(dto: FixtureDTO) -> FixtureCandidate:
    """Normalise ``dto`` into the values the diff and write steps work with.

    The 90-minute score falls back to the live score and then to the parsed
    result string. ``start_iso`` is always derived from ``start_ts`` so both
    kickoff columns agree.
    """

    name, start_ts = validate_required_fields(dto)

    result = normalize_result(dto.result)
    parsed_home, parsed_away = parse_scores(result)

    return FixtureCandidate(
        external_id=dto.external_id,
        name=name,
        start_iso=iso_from_epoch(start_ts),
        start_ts=start_ts,
        state=coerce_fixture_state(dto.state),
        home_team_external_id=dto.home_team_external_id,
        away_team_external_id=dto.away_team_external_id,
        league_external_id=dto.league_external_id,
        season_external_id=dto.season_external_id,
        live_minute=dto.live_minute,
        result=result,
        home_score_90=_first_not_none(dto.home_score_90, dto.home_score, parsed_home),
        away_score_90=_first_not_none(dto.away_score_90, dto.away_score, parsed_away),
        home_score_et=dto.home_score_et,
        away_score_et=dto.away_score_et,
        pen_home=dto.pen_home,
        pen_away=dto.pen_away,
        stage=dto.stage,
        round=dto.round,
        leg=dto.leg,
        aggregate_id=dto.aggregate_id,
    )
