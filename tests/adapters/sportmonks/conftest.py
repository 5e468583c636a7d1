from __future__ import annotations

import pytest

from fixturesync.config import ResilienceConfig, SportMonksConfig


@pytest.fixture
def sportmonks_config() -> SportMonksConfig:
    return SportMonksConfig(
        api_token="test-token",
        resilience=ResilienceConfig(
            name="sportmonks-test",
            base_url="https://sportmonks.test/v3/football",
        ),
        per_page=2,
    )
