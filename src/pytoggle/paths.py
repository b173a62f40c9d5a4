"""Live search path accessors.

The controller never touches a search path directly; it goes through a
:class:`PathProvider` so the reconciliation stays a pure function of lists.
"""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pytoggle._atomic import atomic_write_text
from pytoggle.exceptions import PersistenceError, ToggleConfigError

_logger = logging.getLogger(__name__)


class PathProvider(Protocol):
    """Structural live-path interface used by the controller."""

    def get_path(self) -> list[str]:
        ...

    def set_path(self, entries: Iterable[str]) -> None:
        ...

    def save_path(self) -> None:
        """Make the current path the host's startup path."""
        ...

    def check_save_path(self) -> None:
        """Raise if :meth:`save_path` cannot succeed."""
        ...


class ListPathProvider:
    """In-memory path, e.g. for embedding hosts or tests.

    ``saved`` holds the last path passed through :meth:`save_path`.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries = list(entries)
        self.saved: list[str] | None = None

    def get_path(self) -> list[str]:
        return list(self._entries)

    def set_path(self, entries: Iterable[str]) -> None:
        self._entries = list(entries)

    def save_path(self) -> None:
        self.saved = list(self._entries)

    def check_save_path(self) -> None:
        return None


class SysPathProvider:
    """The running interpreter's ``sys.path``.

    Replacing the path also invalidates the import system's finder caches,
    so modules in re-enabled directories become importable right away.
    """

    def __init__(self, startup_file: Path | str | None = None) -> None:
        self._startup_file = Path(startup_file) if startup_file is not None else None

    def get_path(self) -> list[str]:
        return list(sys.path)

    def set_path(self, entries: Iterable[str]) -> None:
        sys.path[:] = list(entries)
        importlib.invalidate_caches()

    def _require_startup_file(self) -> Path:
        if self._startup_file is None:
            raise ToggleConfigError("Permanent changes need a startup path file (set PYTOGGLE_STARTUP_PATH_FILE)")
        return self._startup_file

    def check_save_path(self) -> None:
        self._require_startup_file()

    def save_path(self) -> None:
        startup = self._require_startup_file()
        body = "".join(f"{entry}\n" for entry in sys.path)
        try:
            atomic_write_text(startup, body)
        except OSError as exc:
            raise PersistenceError(
                f"Cannot write startup path file {startup}: {exc}",
                path=startup,
            ) from exc
        _logger.info("Saved %d path entries to %s", len(sys.path), startup)
