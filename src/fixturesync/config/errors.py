"""Errors raised while loading fixturesync settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A setting is present but cannot be used; ``setting`` names it."""

    def __init__(self, setting: str, problem: str) -> None:
        super().__init__(f"{setting} {problem}")
        self.setting = setting


class MissingConfigurationError(ConfigurationError):
    def __init__(self, settings: Iterable[str]) -> None:
        self.settings = tuple(sorted(settings))
        super().__init__(", ".join(self.settings), "must be set")
