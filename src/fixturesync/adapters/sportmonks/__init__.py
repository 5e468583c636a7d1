"""SportMonks football API adapter."""

from __future__ import annotations

from .client import SportMonksAPIError, SportMonksFetcher
from .schema import FixtureListResponse, FixturePayload
from .translator import coerce_epoch_seconds, parse_fixture, pick_result

__all__ = [
    "FixtureListResponse",
    "FixturePayload",
    "SportMonksAPIError",
    "SportMonksFetcher",
    "coerce_epoch_seconds",
    "parse_fixture",
    "pick_result",
]
