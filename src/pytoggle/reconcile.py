"""Deterministic path reconciliation.

Everything here is a pure function of (live path, toggle state, module
directories); nothing reads or writes the live path or the store.

Disabling removes a module's directories from the live path and keeps the
order of everything else. Enabling never re-inserts directories into the
live path: the whole baseline is restored and the directories of modules
that are still disabled are removed from it again. Repeated on/off cycles in
any order therefore cannot drift the path away from the baseline order.

If the live path holds entries the baseline does not know about, enabling
still restores strictly from the baseline and those entries are dropped.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Iterable, Mapping, Sequence

from pytoggle.models.state import ToggleState

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class Reconciliation:
    """Outcome of a toggle computation.

    ``path`` is ``None`` when the live path must be left untouched.
    ``skipped`` lists requested modules that needed no change.
    ``foreign`` lists live entries dropped because the baseline lacks them.
    """

    state: ToggleState
    path: list[str] | None
    skipped: tuple[str, ...] = ()
    foreign: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.path is not None


def _normalize(entry: str) -> str:
    return os.path.normcase(os.path.normpath(entry))


def is_under(entry: str, directory: str) -> bool:
    """Whether *entry* is *directory* itself or lies beneath it.

    Matching is per path component: ``/tb/aero`` does not own ``/tb/aeroblks``.
    """
    if not entry or not directory:
        return False
    entry_n = _normalize(entry)
    dir_n = _normalize(directory)
    if entry_n == dir_n:
        return True
    prefix = dir_n if dir_n.endswith(os.sep) else dir_n + os.sep
    return entry_n.startswith(prefix)


def disable(current_path: Sequence[str], module_dirs: Iterable[str]) -> list[str]:
    """Drop every entry located under any of *module_dirs*; order is kept."""
    dirs = [d for d in module_dirs if d]
    if not dirs:
        return list(current_path)
    return [entry for entry in current_path if not any(is_under(entry, d) for d in dirs)]


def foreign_entries(current_path: Sequence[str], baseline: Sequence[str]) -> list[str]:
    """Entries of the live path that are absent from *baseline*, in live order."""
    known = set(baseline)
    seen: set[str] = set()
    foreign: list[str] = []
    for entry in current_path:
        if entry not in known and entry not in seen:
            seen.add(entry)
            foreign.append(entry)
    return foreign


def query(state: ToggleState, module_ids: Iterable[str]) -> dict[str, bool]:
    """On/off flag per requested module."""
    return {module_id: state.is_enabled(module_id) for module_id in module_ids}


def _dirs_of(module_ids: Iterable[str], module_dirs: Mapping[str, str]) -> list[str]:
    return [module_dirs[module_id] for module_id in module_ids if module_id in module_dirs]


def rebuild(
    state: ToggleState,
    current_path: Sequence[str],
    module_dirs: Mapping[str, str],
) -> Reconciliation:
    """Restore the baseline, then remove all modules *state* marks as disabled."""
    foreign = foreign_entries(current_path, state.path)
    if foreign:
        _logger.warning(
            "New directories have been added to the path between consecutive on/off calls: %s. "
            "The path is restored to the baseline captured before the first 'off' call, "
            "which removes these directories from the path.",
            ", ".join(foreign),
        )
    path = disable(state.path, _dirs_of(state.disabled, module_dirs))
    _logger.debug("Rebuilt path from baseline: %s", path)
    return Reconciliation(state=state, path=path, foreign=tuple(foreign))


def disable_modules(
    state: ToggleState,
    current_path: Sequence[str],
    module_ids: Sequence[str],
    module_dirs: Mapping[str, str],
    *,
    host_module: str | None = None,
) -> Reconciliation:
    """Switch *module_ids* off.

    The host module is never disabled; if it was the only target the
    request is a no-op. Modules that are already off are skipped.
    """
    targets = list(module_ids)
    if host_module is not None:
        host = host_module.lower()
        kept = [module_id for module_id in targets if module_id.lower() != host]
        if len(kept) != len(targets):
            _logger.warning("The '%s' toolbox can not be disabled.", host_module)
        targets = kept
    if not targets:
        return Reconciliation(state=state, path=None)

    flags: dict[str, bool] = {}
    skipped: list[str] = []
    for module_id in targets:
        if not state.is_enabled(module_id):
            _logger.warning("Toolbox '%s' already switched off; ignoring.", module_id)
            skipped.append(module_id)
        else:
            flags[module_id] = False

    if not flags:
        return Reconciliation(state=state, path=None, skipped=tuple(skipped))

    path = disable(current_path, _dirs_of(flags, module_dirs))
    _logger.debug("Disabled %s; new path: %s", ", ".join(flags), path)
    return Reconciliation(state=state.with_flags(flags), path=path, skipped=tuple(skipped))


def enable_modules(
    state: ToggleState,
    current_path: Sequence[str],
    module_ids: Sequence[str],
    module_dirs: Mapping[str, str],
) -> Reconciliation:
    """Switch *module_ids* on, preserving the baseline order.

    Modules that are not switched off are skipped. When nothing was switched
    off the live path is left alone.
    """
    flags: dict[str, bool] = {}
    skipped: list[str] = []
    for module_id in module_ids:
        if state.is_enabled(module_id):
            _logger.warning("Toolbox '%s' was not switched off; ignoring.", module_id)
            skipped.append(module_id)
        else:
            flags[module_id] = True

    if not flags:
        return Reconciliation(state=state, path=None, skipped=tuple(skipped))

    result = rebuild(state.with_flags(flags), current_path, module_dirs)
    return dataclasses.replace(result, skipped=tuple(skipped))
