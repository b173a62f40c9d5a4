"""Custom exception hierarchy for pytoggle."""

from __future__ import annotations

from pathlib import Path


class ToggleError(Exception):
    """Base exception for all pytoggle errors."""


class ToggleConfigError(ToggleError):
    """Invalid or missing configuration."""


class ArgumentError(ToggleError, ValueError):
    """Malformed request (wrong argument shape, type or keyword)."""


class UnknownModuleError(ToggleError):
    """A requested module identifier or name is not installed."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Toolbox '{identifier}' does not seem to be installed.")


class InvalidSnapshotError(ToggleError):
    """Restore input does not look like a snapshot produced by pytoggle.

    Raised when the baseline path or the flag of a known module is missing.
    The underlying validation error, if any, is chained as ``__cause__``.
    """


class PersistenceError(ToggleError):
    """Reading or writing persisted state failed.

    The in-memory and on-disk state would diverge if this were ignored,
    so it is always propagated to the caller.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)
