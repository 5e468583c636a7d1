"""Pydantic models describing SportMonks v3 football payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SportMonksBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ParticipantMeta(SportMonksBaseModel):
    location: str | None = None


class ParticipantPayload(SportMonksBaseModel):
    id: int
    name: str | None = None
    meta: ParticipantMeta | None = None

    @property
    def location(self) -> str | None:
        if self.meta is None or self.meta.location is None:
            return None
        return self.meta.location.strip().lower()


class ScoreValue(SportMonksBaseModel):
    goals: int | None = None
    participant: str | None = None


class ScorePayload(SportMonksBaseModel):
    type_id: int | None = None
    description: str | None = None
    score: ScoreValue


class StatePayload(SportMonksBaseModel):
    id: int | None = None
    state: str | None = None
    short_name: str | None = None
    developer_name: str | None = None


class NamedPayload(SportMonksBaseModel):
    id: int | None = None
    name: str | None = None

    _normalize_name = field_validator("name", mode="before")(_blank_to_none)


class LeaguePayload(NamedPayload):
    country: NamedPayload | None = None


class PeriodPayload(SportMonksBaseModel):
    ticking: bool = False
    minutes: int | None = None


class FixturePayload(SportMonksBaseModel):
    id: int
    name: str | None = None
    league_id: int | None = None
    season_id: int | None = None
    starting_at: str | None = None
    starting_at_timestamp: int | None = None
    leg: str | None = None
    aggregate_id: int | None = None
    has_odds: bool | None = None
    participants: list[ParticipantPayload] = Field(default_factory=list[ParticipantPayload])
    scores: list[ScorePayload] = Field(default_factory=list[ScorePayload])
    periods: list[PeriodPayload] = Field(default_factory=list[PeriodPayload])
    state: StatePayload | None = None
    stage: NamedPayload | None = None
    round: NamedPayload | None = None
    league: LeaguePayload | None = None

    _normalize_leg = field_validator("leg", mode="before")(_blank_to_none)


class Pagination(SportMonksBaseModel):
    count: int | None = None
    per_page: int | None = None
    current_page: int = 1
    has_more: bool = False


class FixtureListResponse(SportMonksBaseModel):
    data: list[FixturePayload] = Field(default_factory=list[FixturePayload])
    pagination: Pagination | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _wrap_single(cls, value: object) -> object:
        if isinstance(value, dict):
            return [value]
        return value


class ErrorResponse(SportMonksBaseModel):
    message: str
