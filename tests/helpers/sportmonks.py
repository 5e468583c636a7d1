"""SportMonks payload builders shared by adapter and app tests."""

from __future__ import annotations

from typing import Any


def make_fixture_payload(fixture_id: int = 19_134_454, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": fixture_id,
        "name": "Celtic vs Rangers",
        "league_id": 501,
        "season_id": 23614,
        "starting_at": "2025-01-02 12:30:00",
        "starting_at_timestamp": 1_735_821_000,
        "leg": "1/1",
        "has_odds": True,
        "participants": [
            {"id": 53, "name": "Celtic", "meta": {"location": "home"}},
            {"id": 62, "name": "Rangers", "meta": {"location": "away"}},
        ],
        "state": {"id": 5, "state": "FT", "short_name": "FT", "developer_name": "FT"},
        "scores": [
            {
                "type_id": 1525,
                "description": "CURRENT",
                "score": {"goals": 3, "participant": "home"},
            },
            {
                "type_id": 1525,
                "description": "CURRENT",
                "score": {"goals": 0, "participant": "away"},
            },
            {
                "type_id": 2,
                "description": "2ND_HALF",
                "score": {"goals": 3, "participant": "home"},
            },
            {
                "type_id": 2,
                "description": "2ND_HALF",
                "score": {"goals": 0, "participant": "away"},
            },
        ],
        "periods": [
            {"ticking": False, "minutes": 45},
            {"ticking": False, "minutes": 90},
        ],
        "stage": {"id": 77, "name": "Regular Season"},
        "round": {"id": 88, "name": "21"},
        "league": {"id": 501, "name": "Premiership", "country": {"id": 1161, "name": "Scotland"}},
    }
    payload.update(overrides)
    return payload
