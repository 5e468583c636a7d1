"""Database location and SQLite connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal

from .env import env_positive_int
from .errors import ConfigurationError

DEFAULT_DB_FILENAME: Final[str] = "fixturesync.db"
DEFAULT_BUSY_TIMEOUT_MS: Final[int] = 30_000

type JournalMode = Literal["WAL", "DELETE", "TRUNCATE", "MEMORY"]
_JOURNAL_MODES: Final[frozenset[str]] = frozenset({"WAL", "DELETE", "TRUNCATE", "MEMORY"})


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Where fixtures are stored and how SQLite connections are prepared.

    The pragma settings only apply to SQLite URIs; other dialects ignore them.
    """

    uri: str
    echo: bool = False
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    journal_mode: JournalMode = "WAL"

    def sqlite_pragmas(self) -> tuple[str, ...]:
        return (
            "PRAGMA foreign_keys=ON",
            f"PRAGMA busy_timeout={self.busy_timeout_ms}",
            f"PRAGMA journal_mode={self.journal_mode}",
        )


def default_data_dir() -> Path:
    """``FIXTURESYNC_DATA_DIR`` or the XDG data directory, created on demand."""

    env_dir = os.getenv("FIXTURESYNC_DATA_DIR")
    if env_dir:
        data_dir = Path(env_dir)
    else:
        xdg = os.getenv("XDG_DATA_HOME")
        data_dir = (Path(xdg) if xdg else Path.home() / ".local" / "share") / "fixturesync"
    data_dir = data_dir.expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def get_database_config() -> DatabaseConfig:
    uri = os.getenv("DATABASE_URI") or f"sqlite+aiosqlite:///{default_data_dir() / DEFAULT_DB_FILENAME}"
    journal_mode = os.getenv("SQLITE_JOURNAL_MODE", "WAL").strip().upper()
    if journal_mode not in _JOURNAL_MODES:
        raise ConfigurationError(
            "SQLITE_JOURNAL_MODE", f"must be one of {sorted(_JOURNAL_MODES)}, got {journal_mode!r}"
        )
    return DatabaseConfig(
        uri=uri,
        echo=_env_flag("DATABASE_ECHO"),
        busy_timeout_ms=env_positive_int("SQLITE_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS),
        journal_mode=journal_mode,  # type: ignore[arg-type]
    )
