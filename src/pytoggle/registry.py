"""Module registries: which toolboxes are installed and where.

A registry maps module ids (installation directory names) to display names
and installation directories. Discovery can be expensive, so
:class:`DirectoryRegistry` scans lazily on first use and caches the result
for the lifetime of the instance; :func:`cached_registry` shares one instance
per root directory across the process.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pytoggle._constants import ALL_KEYWORD, MANIFEST_FILENAME
from pytoggle.exceptions import ArgumentError, UnknownModuleError
from pytoggle.models.state import ModuleInfo

_logger = logging.getLogger(__name__)


class ModuleRegistry(Protocol):
    """Structural registry interface used by the controller."""

    def list_modules(self) -> Sequence[ModuleInfo]:
        ...

    def resolve(self, name: str) -> str | None:
        ...


class StaticRegistry:
    """Registry over an explicit, already-known list of modules."""

    def __init__(self, modules: Iterable[ModuleInfo]) -> None:
        self._modules: list[ModuleInfo] = []
        self._by_id: dict[str, ModuleInfo] = {}
        self._by_name: dict[str, ModuleInfo] = {}
        for module in modules:
            key = module.module_id.lower()
            if key in self._by_id:
                raise ValueError(f"duplicate module id: {module.module_id!r}")
            self._modules.append(module)
            self._by_id[key] = module
            # First module wins when two share a display name.
            self._by_name.setdefault(module.name.lower(), module)

    def list_modules(self) -> Sequence[ModuleInfo]:
        return list(self._modules)

    def get(self, module_id: str) -> ModuleInfo | None:
        return self._by_id.get(module_id.lower())

    def resolve(self, name: str) -> str | None:
        """Map a directory id or display name (case-insensitive) to a module id."""
        key = name.strip().lower()
        module = self._by_id.get(key) or self._by_name.get(key)
        return module.module_id if module is not None else None


def _optional_text(value: object) -> str | None:
    # Numeric metadata such as a version of 4.5 is kept as text.
    return None if value is None else str(value)


def _read_manifest(directory: Path) -> ModuleInfo | None:
    manifest = directory / MANIFEST_FILENAME
    try:
        raw = json.loads(manifest.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        _logger.debug("Skipping %s: unreadable manifest (%s)", directory, exc)
        return None
    if not isinstance(raw, dict):
        return None
    try:
        return ModuleInfo(
            module_id=directory.name,
            directory=str(directory),
            name=raw.get("name", ""),
            version=_optional_text(raw.get("version")),
            release=_optional_text(raw.get("release")),
            date=_optional_text(raw.get("date")),
        )
    except ValidationError as exc:
        _logger.debug("Skipping %s: invalid manifest (%s)", directory, exc.errors())
        return None


class DirectoryRegistry:
    """Registry discovered from ``<root>/<module_id>/info.json`` manifests.

    Sub-directories without a readable manifest carrying a ``name`` are not
    modules and are left out.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._scanned: StaticRegistry | None = None

    def _registry(self) -> StaticRegistry:
        if self._scanned is None:
            self._scanned = StaticRegistry(self._scan())
        return self._scanned

    def _scan(self) -> list[ModuleInfo]:
        _logger.info("First call; collecting toolbox information from %s", self._root)
        try:
            candidates = sorted(p for p in self._root.iterdir() if p.is_dir())
        except OSError as exc:
            _logger.warning("Toolbox root %s cannot be listed: %s", self._root, exc)
            return []
        modules = [info for info in map(_read_manifest, candidates) if info is not None]
        _logger.debug("Found %d toolboxes under %s", len(modules), self._root)
        return modules

    def list_modules(self) -> Sequence[ModuleInfo]:
        return self._registry().list_modules()

    def get(self, module_id: str) -> ModuleInfo | None:
        return self._registry().get(module_id)

    def resolve(self, name: str) -> str | None:
        return self._registry().resolve(name)


@functools.cache
def _cached_registry(root: Path) -> DirectoryRegistry:
    return DirectoryRegistry(root)


def cached_registry(root: Path | str) -> DirectoryRegistry:
    """Process-wide registry for *root*; the directory scan runs at most once."""
    return _cached_registry(Path(root).resolve())


def clear_registry_cache() -> None:
    """Forget all cached registries (the next lookup rescans)."""
    _cached_registry.cache_clear()


def resolve_names(registry: ModuleRegistry, identifiers: str | Sequence[str] | None) -> list[str]:
    """Map identifiers to canonical module ids.

    ``None``, an empty value, or any identifier equal to ``"all"`` selects
    every registered module. Duplicates are collapsed, keeping first
    occurrence order.

    Raises
    ------
    ArgumentError
        If *identifiers* is not a string or a sequence of strings.
    UnknownModuleError
        For the first identifier that resolves to nothing.
    """
    if identifiers is None:
        names: list[str] = []
    elif isinstance(identifiers, str):
        names = [identifiers]
    elif isinstance(identifiers, Sequence) and all(isinstance(item, str) for item in identifiers):
        names = list(identifiers)
    else:
        raise ArgumentError(
            "Toolboxes must be given as a string (single toolbox) or a sequence of "
            "strings (multiple toolboxes)."
        )

    names = [name for name in names if name.strip()]
    if not names or any(name.strip().lower() == ALL_KEYWORD for name in names):
        return [module.module_id for module in registry.list_modules()]

    resolved: list[str] = []
    for name in names:
        module_id = registry.resolve(name)
        if module_id is None:
            raise UnknownModuleError(name)
        if module_id not in resolved:
            resolved.append(module_id)
    return resolved
