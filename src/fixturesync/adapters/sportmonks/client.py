"""Async fetcher for SportMonks v3 football fixtures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from fixturesync.adapters.http_resilience import ResilientClient
from fixturesync.config.sportmonks import SportMonksConfig, get_sportmonks_config

from .schema import ErrorResponse, FixtureListResponse
from .translator import parse_fixture

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import date

    from fixturesync.config.http_resilience import ResilienceConfig
    from fixturesync.domain.reconciliation.contracts import FixtureDTO

log = getLogger(__name__)

FIXTURE_INCLUDES: Final = (
    "participants",
    "league.country",
    "stage",
    "round",
    "state",
    "scores",
    "periods",
)
MAX_IDS_PER_REQUEST: Final = 50


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class SportMonksAPIError(RuntimeError):
    """Raised when SportMonks returns an application-level error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class SportMonksFetcher:
    config: SportMonksConfig = field(default_factory=get_sportmonks_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def fetch_between(self, start: date, end: date) -> list[FixtureDTO]:
        if start > end:
            raise ValueError("Fixture window start must not be after end")
        path = f"fixtures/between/{start.isoformat()}/{end.isoformat()}"
        fixtures = await self._fetch_paginated(path)
        log.info("Fetched %s fixtures between %s and %s", len(fixtures), start, end)
        return fixtures

    async def fetch_live(self) -> list[FixtureDTO]:
        fixtures = await self._fetch_paginated("livescores/inplay")
        log.info("Fetched %s live fixtures", len(fixtures))
        return fixtures

    async def fetch_by_ids(self, external_ids: Collection[int]) -> list[FixtureDTO]:
        ids = sorted(set(external_ids))
        if not ids:
            return []
        fixtures: list[FixtureDTO] = []
        for start in range(0, len(ids), MAX_IDS_PER_REQUEST):
            chunk = ids[start : start + MAX_IDS_PER_REQUEST]
            path = "fixtures/multi/" + ",".join(str(fixture_id) for fixture_id in chunk)
            fixtures.extend(await self._fetch_paginated(path))
        log.info("Fetched %s of %s requested fixtures", len(fixtures), len(ids))
        return fixtures

    def _resilience(self) -> ResilienceConfig:
        resilience = self.config.resilience
        if self.config.auth_mode != "header":
            return resilience
        headers = dict(resilience.default_headers or {})
        headers["Authorization"] = self.config.api_token
        return replace(resilience, default_headers=headers)

    def _base_params(self) -> dict[str, str | int]:
        params: dict[str, str | int] = {
            "include": ";".join(FIXTURE_INCLUDES),
            "per_page": self.config.per_page,
        }
        if self.config.auth_mode == "query":
            params["api_token"] = self.config.api_token
        return params

    async def _fetch_paginated(self, path: str) -> list[FixtureDTO]:
        fixtures: list[FixtureDTO] = []
        page = 1
        async with self.client_factory(self._resilience()) as client:
            while True:
                params = httpx.QueryParams({**self._base_params(), "page": page})
                response = await self._perform_request(client=client, path=path, params=params)
                for payload in response.data:
                    dto = parse_fixture(payload)
                    if dto is not None:
                        fixtures.append(dto)
                if response.pagination is None or not response.pagination.has_more:
                    break
                page += 1
        return fixtures

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        params: httpx.QueryParams,
    ) -> FixtureListResponse:
        response = await client.get(path, params=params)
        if response.is_error:
            message = response.reason_phrase
            try:
                message = ErrorResponse.model_validate(response.json()).message
            except ValueError:
                pass
            log.error(f"SportMonks API error {response.status_code}: {message}")
            raise SportMonksAPIError(message, status_code=response.status_code)

        payload = response.json()
        if not isinstance(payload, dict):
            raise SportMonksAPIError("Unexpected SportMonks response payload")
        return FixtureListResponse.model_validate(payload)


if TYPE_CHECKING:
    from fixturesync.domain.ports.fetching import FixtureFetcher

    _fetcher_check: FixtureFetcher = SportMonksFetcher()
