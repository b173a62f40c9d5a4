"""Persistence for :class:`~pytoggle.models.state.ToggleState`.

Stores hold exactly one record, namespaced to this library. The contract is
get-or-default (``load`` returns ``None`` before first use) and set.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from pytoggle._atomic import atomic_write_text
from pytoggle._constants import DEFAULT_NAMESPACE, STATE_KEY
from pytoggle.exceptions import PersistenceError
from pytoggle.models.state import ToggleState

_logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Structural store interface used by the controller."""

    def load(self) -> ToggleState | None:
        ...

    def save(self, state: ToggleState) -> None:
        ...


class MemoryStateStore:
    """Process-local store. State lasts as long as the instance."""

    def __init__(self, state: ToggleState | None = None) -> None:
        self._state = state
        self.saves = 0

    def load(self) -> ToggleState | None:
        return self._state

    def save(self, state: ToggleState) -> None:
        self._state = state
        self.saves += 1


class JsonFileStateStore:
    """JSON document store: ``{namespace: {"toolbox_states": <state>}}``.

    Other namespaces in the same file are preserved on write.
    """

    def __init__(self, path: Path | str, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._path = Path(path)
        self._namespace = namespace

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceError(f"Cannot read state file {self._path}: {exc}", path=self._path) from exc
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise PersistenceError(f"State file {self._path} is not valid JSON: {exc}", path=self._path) from exc
        if not isinstance(document, dict):
            raise PersistenceError(f"State file {self._path} does not hold a JSON object", path=self._path)
        return document

    def load(self) -> ToggleState | None:
        group = self._read_document().get(self._namespace)
        if not isinstance(group, dict) or STATE_KEY not in group:
            return None
        try:
            return ToggleState.model_validate(group[STATE_KEY])
        except ValidationError as exc:
            raise PersistenceError(
                f"State file {self._path} holds a malformed toggle state record",
                path=self._path,
            ) from exc

    def save(self, state: ToggleState) -> None:
        document = self._read_document()
        group = document.get(self._namespace)
        if not isinstance(group, dict):
            group = {}
        group[STATE_KEY] = state.model_dump(mode="json")
        document[self._namespace] = group
        try:
            atomic_write_text(self._path, json.dumps(document, indent=2, ensure_ascii=False) + "\n")
        except OSError as exc:
            raise PersistenceError(f"Cannot write state file {self._path}: {exc}", path=self._path) from exc
        _logger.debug("Saved toggle state to %s", self._path)
