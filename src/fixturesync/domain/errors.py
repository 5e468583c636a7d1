"""Errors raised by the fixture reconciliation domain."""

from __future__ import annotations


class FixtureSyncError(RuntimeError):
    """Base class for per-fixture processing errors."""


class MissingFieldError(FixtureSyncError, ValueError):
    """Raised when an incoming fixture lacks a required field."""

    def __init__(self, field_name: str, external_id: int) -> None:
        super().__init__(f"No {field_name} specified for fixture (externalId: {external_id})")
        self.field_name = field_name
        self.external_id = external_id


class ReferenceNotFoundError(FixtureSyncError, LookupError):
    """Raised when a mandatory reference (home/away team) cannot be resolved."""

    def __init__(self, role: str, external_id: int | None) -> None:
        super().__init__(f"{role} not found (externalId: {external_id})")
        self.role = role
        self.external_id = external_id


class FixtureNotFoundError(FixtureSyncError, LookupError):
    """Raised when an operation targets a fixture id that does not exist."""

    def __init__(self, fixture_id: int) -> None:
        super().__init__(f"Fixture {fixture_id} not found")
        self.fixture_id = fixture_id
