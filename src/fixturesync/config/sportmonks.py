"""SportMonks football API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from .env import require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

SPORTMONKS_BASE_URL = "https://api.sportmonks.com/v3/football"
SPORTMONKS_TIMEOUT_SECONDS = 15.0
SPORTMONKS_MAX_PER_PAGE = 50

type AuthMode = Literal["query", "header"]


@dataclass(frozen=True)
class SportMonksConfig:
    """Holds SportMonks API configuration values."""

    api_token: str
    resilience: ResilienceConfig
    auth_mode: AuthMode = "query"
    per_page: int = SPORTMONKS_MAX_PER_PAGE


def _auth_mode_from_env() -> AuthMode:
    raw = (os.getenv("SPORTMONKS_AUTH_MODE") or "query").strip().lower()
    if raw == "query":
        return "query"
    if raw == "header":
        return "header"
    raise ConfigurationError(
        "SPORTMONKS_AUTH_MODE", f"must be 'query' or 'header', got {raw!r}"
    )


def get_sportmonks_config(*, resilience: ResilienceConfig | None = None) -> SportMonksConfig:
    values = require_env_vars(("SPORTMONKS_API_TOKEN",))
    base_url = os.getenv("SPORTMONKS_BASE_URL") or SPORTMONKS_BASE_URL
    return SportMonksConfig(
        api_token=values["SPORTMONKS_API_TOKEN"],
        auth_mode=_auth_mode_from_env(),
        resilience=resilience
        or ResilienceConfig(
            name="sportmonks",
            base_url=base_url.rstrip("/"),
            timeout_seconds=SPORTMONKS_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        ),
    )
