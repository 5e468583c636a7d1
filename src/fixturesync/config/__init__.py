"""Application configuration helpers."""

from __future__ import annotations

from .env import env_positive_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sportmonks import SportMonksConfig, get_sportmonks_config
from .storage import DatabaseConfig, default_data_dir, get_database_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SportMonksConfig",
    "SyncConfig",
    "configure_logging",
    "default_data_dir",
    "env_positive_int",
    "get_database_config",
    "get_sportmonks_config",
    "get_sync_config",
    "require_env_vars",
]
