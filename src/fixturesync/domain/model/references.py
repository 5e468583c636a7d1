"""Reference entities the engine looks up but never writes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class League:
    external_id: int
    name: str
    country_name: str | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class Season:
    external_id: int
    name: str
    league_id: int | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class Team:
    external_id: int
    name: str
    id: int | None = None
