"""Root logger setup for the fixturesync CLI and jobs."""

from __future__ import annotations

import logging
import os
from typing import Final

from .errors import ConfigurationError

LOG_FORMAT: Final = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
# per-request lines from the HTTP stack drown out the sync summary at INFO
QUIET_LOGGERS: Final = ("httpx", "httpcore", "aiosqlite")


def resolve_log_level(level: int | None = None) -> int:
    """Explicit ``level`` wins, then ``FIXTURESYNC_LOG_LEVEL``, then INFO."""

    if level is not None:
        return level
    raw = os.getenv("FIXTURESYNC_LOG_LEVEL", "").strip().upper()
    if not raw:
        return logging.INFO
    resolved = logging.getLevelNamesMapping().get(raw)
    if resolved is None:
        raise ConfigurationError("FIXTURESYNC_LOG_LEVEL", f"is not a log level: {raw!r}")
    return resolved


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    root_level = resolve_log_level(level)
    logging.basicConfig(level=root_level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))
