"""Synchronisation defaults for the fixture reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_positive_int

DEFAULT_CHUNK_SIZE = 8
DEFAULT_ERROR_MESSAGE_LIMIT = 500


@dataclass(frozen=True, slots=True)
class SyncConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    error_message_limit: int = DEFAULT_ERROR_MESSAGE_LIMIT

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.error_message_limit <= 0:
            raise ValueError("error_message_limit must be positive")


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        chunk_size=env_positive_int("FIXTURESYNC_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        error_message_limit=env_positive_int(
            "FIXTURESYNC_ERROR_MESSAGE_LIMIT", DEFAULT_ERROR_MESSAGE_LIMIT
        ),
    )
