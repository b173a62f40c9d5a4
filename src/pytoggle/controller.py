"""High-level toggle controller.

Usage::

    controller = ToggleController.from_config(ToggleConfig.from_env())
    before = controller.set_state(["Aerospace Toolbox", "wavelet"], "off")
    ...
    controller.restore(before)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pytoggle import reconcile
from pytoggle._constants import ALL_KEYWORD, DEFAULT_HOST_MODULE, NAMES_KEYWORD, QUERY_KEYWORD
from pytoggle.config import ToggleConfig
from pytoggle.exceptions import ArgumentError, InvalidSnapshotError, ToggleConfigError
from pytoggle.models.requests import (
    ListNamesRequest,
    Permanence,
    QueryRequest,
    RestoreRequest,
    SetStateRequest,
    TargetState,
    ToggleRequest,
)
from pytoggle.models.state import ToggleState
from pytoggle.paths import PathProvider, SysPathProvider
from pytoggle.reconcile import Reconciliation
from pytoggle.registry import ModuleRegistry, cached_registry, resolve_names
from pytoggle.state.store import JsonFileStateStore, StateStore

_logger = logging.getLogger(__name__)

ModuleIds = str | Sequence[str] | None


def _is_all(module_ids: ModuleIds) -> bool:
    """Whether *module_ids* selects every module (see :func:`resolve_names`)."""
    if module_ids is None:
        return True
    if isinstance(module_ids, str):
        names = [module_ids]
    elif isinstance(module_ids, Sequence) and all(isinstance(item, str) for item in module_ids):
        names = list(module_ids)
    else:
        return False
    names = [name.strip().lower() for name in names if name.strip()]
    return not names or ALL_KEYWORD in names


def _parse_target(value: TargetState | str) -> TargetState:
    try:
        return TargetState(value)
    except ValueError:
        raise ArgumentError(
            f"State must be 'on'/'enable' or 'off'/'disable', got {value!r}"
        ) from None


def _parse_permanence(value: Permanence | str) -> Permanence:
    try:
        return Permanence(value)
    except ValueError:
        raise ArgumentError(
            f"Permanence must be 'permanent' or 'temporary', got {value!r}"
        ) from None


def build_request(
    toolbox: Any = None,
    state: Any = None,
    permanence: Any = None,
) -> ToggleRequest:
    """Turn a loosely-typed call into a tagged request.

    Accepted shapes:

    * ``build_request()``, ``build_request("all")`` or an empty value query
      every module.
    * ``build_request("names")`` lists display names.
    * ``build_request(snapshot)`` restores a snapshot (``ToggleState`` or mapping).
    * ``build_request(toolbox, "query")`` queries the given modules.
    * ``build_request(toolbox, "on" | "enable" | "off" | "disable", permanence)``
      sets their state.

    Raises
    ------
    ArgumentError
        For any other shape or an unknown keyword.
    InvalidSnapshotError
        If a mapping passed for restore is not a snapshot.
    """
    if isinstance(toolbox, (ToggleState, Mapping)):
        if state is not None or permanence is not None:
            raise ArgumentError("A snapshot restore takes no state or permanence argument.")
        try:
            return RestoreRequest(snapshot=toolbox)
        except ValidationError as exc:
            raise InvalidSnapshotError("Input does not appear to be a snapshot generated by pytoggle.") from exc

    if state is None:
        if permanence is not None:
            raise ArgumentError("Permanence requires a state argument.")
        if isinstance(toolbox, str) and toolbox.strip().lower() == NAMES_KEYWORD:
            return ListNamesRequest()
        return _module_request(QueryRequest, toolbox)

    if not isinstance(state, str):
        raise ArgumentError(f"State must be given as a string, got {type(state).__name__}")

    if state.strip().lower() == QUERY_KEYWORD:
        if permanence is not None:
            _logger.warning("Permanency flag ignored for 'query' mode.")
        return _module_request(QueryRequest, toolbox)

    target = _parse_target(state)
    perm = Permanence.TEMPORARY if permanence is None else _parse_permanence(permanence)
    return _module_request(SetStateRequest, toolbox, target=target, permanence=perm)


def _module_request(cls: type[QueryRequest] | type[SetStateRequest], toolbox: Any, **fields: Any) -> Any:
    module_ids = None if _is_all(toolbox) else toolbox
    try:
        return cls(module_ids=module_ids, **fields)
    except ValidationError as exc:
        raise ArgumentError(
            "Toolboxes must be given as a string (single toolbox) or a sequence of "
            "strings (multiple toolboxes)."
        ) from exc


class ToggleController:
    """Enable and disable toolboxes on a live search path.

    Each state-changing call persists the new state before it applies the
    computed path.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        store: StateStore,
        path_provider: PathProvider,
        *,
        host_module: str = DEFAULT_HOST_MODULE,
    ) -> None:
        self._registry = registry
        self._store = store
        self._paths = path_provider
        self._host_module = host_module

    @classmethod
    def from_config(cls, config: ToggleConfig) -> ToggleController:
        """Wire a directory registry, a JSON state file and ``sys.path``."""
        if config.toolbox_root is None:
            raise ToggleConfigError("toolbox_root is required (set PYTOGGLE_TOOLBOX_ROOT)")
        return cls(
            cached_registry(config.toolbox_root),
            JsonFileStateStore(config.state_file, namespace=config.namespace),
            SysPathProvider(config.startup_path_file),
            host_module=config.host_module,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _module_ids(self) -> list[str]:
        return [module.module_id for module in self._registry.list_modules()]

    def _module_dirs(self) -> dict[str, str]:
        return {module.module_id: module.directory for module in self._registry.list_modules()}

    def _load_state(self) -> ToggleState:
        """Load the persisted state, capturing the baseline on first use."""
        state = self._store.load()
        if state is None:
            state = ToggleState.initial(self._paths.get_path(), self._module_ids())
            _logger.info("Captured baseline path with %d entries", len(state.path))
            self._store.save(state)
            return state

        missing = state.missing_modules(self._module_ids())
        if missing:
            _logger.info("Tracking newly installed toolboxes: %s", ", ".join(missing))
            state = state.with_flags(dict.fromkeys(missing, True))
            self._store.save(state)
        return state

    def _commit(self, result: Reconciliation, permanence: Permanence) -> None:
        self._store.save(result.state)
        if result.path is None:
            return
        self._paths.set_path(result.path)
        if permanence == Permanence.PERMANENT:
            self._paths.save_path()

    def _validate_snapshot(self, snapshot: ToggleState | Mapping[str, Any]) -> ToggleState:
        if isinstance(snapshot, ToggleState):
            state = snapshot
        else:
            try:
                state = ToggleState.model_validate(snapshot)
            except ValidationError as exc:
                raise InvalidSnapshotError("Input does not appear to be a snapshot generated by pytoggle.") from exc
        missing = state.missing_modules(self._module_ids())
        if missing:
            raise InvalidSnapshotError(
                f"Input does not appear to be a snapshot generated by pytoggle (no state for: {', '.join(missing)})."
            )
        host = [module_id for module_id in state.disabled if module_id.lower() == self._host_module.lower()]
        if host:
            _logger.warning("The '%s' toolbox can not be disabled.", self._host_module)
            state = state.with_flags(dict.fromkeys(host, True))
        return state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_names(self, identifiers: ModuleIds) -> list[str]:
        """Map directory ids or display names (case-insensitive) to module ids."""
        return resolve_names(self._registry, identifiers)

    def list_names(self) -> dict[str, str]:
        """Module id to display name, in registry order."""
        return {module.module_id: module.name for module in self._registry.list_modules()}

    def query(self, module_ids: ModuleIds = None) -> ToggleState | dict[str, bool]:
        """Current on/off flags.

        When every module is selected (no argument, an empty value or any
        ``"all"`` entry) the full state snapshot is returned, which can
        later be passed to :meth:`restore`. Otherwise a mapping of
        the requested module ids to their flags is returned. The live path is
        not touched.
        """
        if _is_all(module_ids):
            return self._load_state().model_copy(deep=True)
        ids = self.resolve_names(module_ids)
        return reconcile.query(self._load_state(), ids)

    def set_state(
        self,
        module_ids: ModuleIds,
        target: TargetState | str,
        permanence: Permanence | str = Permanence.TEMPORARY,
    ) -> ToggleState:
        """Switch modules on or off and return the full state as it was before.

        Raises
        ------
        ArgumentError
            For an unknown state or permanence keyword.
        ToggleConfigError
            If the change is permanent and the path provider cannot save it.
        UnknownModuleError
            If any requested module is not installed. Nothing is changed.
        """
        target = _parse_target(target)
        permanence = _parse_permanence(permanence)
        if permanence == Permanence.PERMANENT:
            self._paths.check_save_path()
        ids = self.resolve_names(module_ids)

        before = self._load_state()
        current = self._paths.get_path()
        dirs = self._module_dirs()
        if target == TargetState.DISABLED:
            result = reconcile.disable_modules(before, current, ids, dirs, host_module=self._host_module)
        else:
            result = reconcile.enable_modules(before, current, ids, dirs)

        if result.changed:
            self._commit(result, permanence)
        return before.model_copy(deep=True)

    def restore(self, snapshot: ToggleState | Mapping[str, Any]) -> None:
        """Adopt *snapshot* as the current state and rebuild the path from it.

        Raises
        ------
        InvalidSnapshotError
            If *snapshot* lacks the baseline path or a known module's flag.
        """
        state = self._validate_snapshot(snapshot)
        result = reconcile.rebuild(state, self._paths.get_path(), self._module_dirs())
        self._commit(result, Permanence.TEMPORARY)

    def handle(self, request: ToggleRequest) -> ToggleState | dict[str, bool] | dict[str, str] | None:
        """Execute a tagged request built by :func:`build_request`."""
        if isinstance(request, ListNamesRequest):
            return self.list_names()
        if isinstance(request, QueryRequest):
            return self.query(request.module_ids)
        if isinstance(request, SetStateRequest):
            return self.set_state(request.module_ids, request.target, request.permanence)
        if isinstance(request, RestoreRequest):
            self.restore(request.snapshot)
            return None
        raise ArgumentError(f"Unsupported request: {request!r}")
