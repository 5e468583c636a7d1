"""Fixture lifecycle state machine.

States are ordered by lifecycle rank. A transition is legal when it keeps the
fixture in place or moves it forward; terminal states only accept themselves.
Cancellation and interruption can happen from any non-terminal state, and an
interrupted fixture may resume into play but never return to pre-match.
"""

from __future__ import annotations

from typing import Final

from fixturesync.domain.model import FixtureState

PRE_MATCH_STATES: Final = frozenset(
    {
        FixtureState.NOT_STARTED,
        FixtureState.TBA,
        FixtureState.DELAYED,
        FixtureState.POSTPONED,
    }
)
LIVE_STATES: Final = frozenset(
    {
        FixtureState.FIRST_HALF,
        FixtureState.HALF_TIME,
        FixtureState.SECOND_HALF,
        FixtureState.BREAK,
        FixtureState.EXTRA_TIME,
        FixtureState.EXTRA_TIME_BREAK,
        FixtureState.PEN_BREAK,
        FixtureState.PENALTIES,
    }
)
FINISHED_STATES: Final = frozenset(
    {
        FixtureState.FINISHED,
        FixtureState.FINISHED_AET,
        FixtureState.FINISHED_PEN,
        FixtureState.AWARDED,
        FixtureState.WALKOVER,
    }
)
ABORTED_STATES: Final = frozenset({FixtureState.CANCELLED, FixtureState.ABANDONED})
HALTED_STATES: Final = frozenset({FixtureState.INTERRUPTED, FixtureState.SUSPENDED})
TERMINAL_STATES: Final = FINISHED_STATES | ABORTED_STATES

_FINISHED_RANK: Final = 8
_RANK: Final[dict[FixtureState, int]] = {
    **dict.fromkeys(PRE_MATCH_STATES, 0),
    FixtureState.FIRST_HALF: 1,
    FixtureState.HALF_TIME: 2,
    FixtureState.SECOND_HALF: 3,
    FixtureState.BREAK: 4,
    FixtureState.EXTRA_TIME: 5,
    FixtureState.EXTRA_TIME_BREAK: 5,
    FixtureState.PEN_BREAK: 6,
    FixtureState.PENALTIES: 7,
    **dict.fromkeys(FINISHED_STATES, _FINISHED_RANK),
}

_ALIASES: Final[dict[str, FixtureState]] = {
    "NS": FixtureState.NOT_STARTED,
    "NOT_STARTED": FixtureState.NOT_STARTED,
    "TBA": FixtureState.TBA,
    "TBD": FixtureState.TBA,
    "DELAYED": FixtureState.DELAYED,
    "POSTP": FixtureState.POSTPONED,
    "POSTPONED": FixtureState.POSTPONED,
    "LIVE": FixtureState.FIRST_HALF,
    "1ST": FixtureState.FIRST_HALF,
    "1ST_HALF": FixtureState.FIRST_HALF,
    "INPLAY_1ST_HALF": FixtureState.FIRST_HALF,
    "HT": FixtureState.HALF_TIME,
    "HALF_TIME": FixtureState.HALF_TIME,
    "2ND": FixtureState.SECOND_HALF,
    "2ND_HALF": FixtureState.SECOND_HALF,
    "INPLAY_2ND_HALF": FixtureState.SECOND_HALF,
    "BREAK": FixtureState.BREAK,
    "ET": FixtureState.EXTRA_TIME,
    "EXTRA_TIME": FixtureState.EXTRA_TIME,
    "INPLAY_ET": FixtureState.EXTRA_TIME,
    "ETB": FixtureState.EXTRA_TIME_BREAK,
    "EXTRA_TIME_BREAK": FixtureState.EXTRA_TIME_BREAK,
    "PEN_BREAK": FixtureState.PEN_BREAK,
    "PEN_LIVE": FixtureState.PENALTIES,
    "PENALTIES": FixtureState.PENALTIES,
    "INPLAY_PENALTIES": FixtureState.PENALTIES,
    "FT": FixtureState.FINISHED,
    "FINISHED": FixtureState.FINISHED,
    "AET": FixtureState.FINISHED_AET,
    "FT_PEN": FixtureState.FINISHED_PEN,
    "AWARDED": FixtureState.AWARDED,
    "WO": FixtureState.WALKOVER,
    "CAN": FixtureState.CANCELLED,
    "CANC": FixtureState.CANCELLED,
    "CANCELLED": FixtureState.CANCELLED,
    "DELETED": FixtureState.CANCELLED,
    "ABAN": FixtureState.ABANDONED,
    "ABANDONED": FixtureState.ABANDONED,
    "INT": FixtureState.INTERRUPTED,
    "INTERRUPTED": FixtureState.INTERRUPTED,
    "SUSP": FixtureState.SUSPENDED,
    "SUSPENDED": FixtureState.SUSPENDED,
}


def coerce_fixture_state(raw: str | None) -> FixtureState:
    """Map a provider state code onto ``FixtureState``; unknown codes become not-started."""

    if raw is None:
        return FixtureState.NOT_STARTED
    key = raw.strip().upper().replace(" ", "_").replace("-", "_")
    return _ALIASES.get(key, FixtureState.NOT_STARTED)


def is_terminal(state: FixtureState) -> bool:
    return state in TERMINAL_STATES


def is_valid_transition(current: FixtureState | None, proposed: FixtureState) -> bool:
    """Return whether a fixture may move from ``current`` to ``proposed``.

    ``current`` is ``None`` when no row exists yet, in which case anything goes.
    """

    if current is None or current == proposed:
        return True
    if current in TERMINAL_STATES:
        return False
    if proposed in ABORTED_STATES or proposed in HALTED_STATES:
        return True
    if current in HALTED_STATES:
        return proposed not in PRE_MATCH_STATES
    return _RANK[proposed] >= _RANK[current]
