from __future__ import annotations

import logging

import pytest

from pytoggle.config import ToggleConfig
from pytoggle.controller import ToggleController, build_request
from pytoggle.exceptions import ArgumentError, InvalidSnapshotError, ToggleConfigError, UnknownModuleError
from pytoggle.models.requests import Permanence, TargetState
from pytoggle.models.state import ModuleInfo, ToggleState
from pytoggle.paths import ListPathProvider
from pytoggle.registry import StaticRegistry
from pytoggle.state.store import MemoryStateStore

_BASELINE = ["/x", "/toolbox/aero", "/y", "/toolbox/wavelet", "/z"]


def _registry() -> StaticRegistry:
    return StaticRegistry(
        [
            ModuleInfo(module_id="aero", name="Aerospace Toolbox", directory="/toolbox/aero"),
            ModuleInfo(module_id="matlab", name="MATLAB", directory="/toolbox/matlab"),
            ModuleInfo(module_id="wavelet", name="Wavelet Toolbox", directory="/toolbox/wavelet"),
        ]
    )


def _make_controller(
    path: list[str] | None = None,
    store: MemoryStateStore | None = None,
) -> tuple[ToggleController, MemoryStateStore, ListPathProvider]:
    store = store if store is not None else MemoryStateStore()
    provider = ListPathProvider(_BASELINE if path is None else path)
    return ToggleController(_registry(), store, provider), store, provider


# ------------------------------------------------------------------
# Baseline capture and queries
# ------------------------------------------------------------------


def test_first_query_captures_and_persists_baseline() -> None:
    controller, store, _ = _make_controller()

    snapshot = controller.query()

    assert isinstance(snapshot, ToggleState)
    assert snapshot.path == _BASELINE
    assert snapshot.enabled == {"aero": True, "matlab": True, "wavelet": True}
    assert store.load() == snapshot
    assert store.saves == 1


def test_baseline_is_not_recaptured_later() -> None:
    controller, store, provider = _make_controller()
    controller.query()

    provider.set_path(["/elsewhere"])
    snapshot = controller.query("all")

    assert isinstance(snapshot, ToggleState)
    assert snapshot.path == _BASELINE
    assert store.saves == 1


@pytest.mark.parametrize("selection", [None, "all", "", [], ["all"], ["aero", "All"]])
def test_query_of_every_module_returns_snapshot(selection: object) -> None:
    controller, _, _ = _make_controller()

    snapshot = controller.query(selection)  # type: ignore[arg-type]

    assert isinstance(snapshot, ToggleState)
    assert snapshot.enabled == {"aero": True, "matlab": True, "wavelet": True}


def test_query_subset_by_display_name_and_id() -> None:
    controller, _, provider = _make_controller()
    controller.set_state("wavelet", "off")

    result = controller.query(["Aerospace Toolbox", "WAVELET"])

    assert result == {"aero": True, "wavelet": False}
    assert provider.get_path() == ["/x", "/toolbox/aero", "/y", "/z"]


def test_resolve_by_display_name_and_directory_id_agree() -> None:
    controller, _, _ = _make_controller()

    assert controller.resolve_names("Wavelet Toolbox") == controller.resolve_names("wavelet") == ["wavelet"]


def test_list_names_in_registry_order() -> None:
    controller, _, _ = _make_controller()

    assert controller.list_names() == {
        "aero": "Aerospace Toolbox",
        "matlab": "MATLAB",
        "wavelet": "Wavelet Toolbox",
    }


def test_newly_installed_module_is_tracked_as_enabled() -> None:
    store = MemoryStateStore(ToggleState(path=list(_BASELINE), enabled={"aero": False, "matlab": True}))
    controller, _, _ = _make_controller(store=store)

    assert controller.query(["wavelet", "aero"]) == {"wavelet": True, "aero": False}
    stored = store.load()
    assert stored is not None
    assert stored.enabled["wavelet"] is True


# ------------------------------------------------------------------
# Toggling
# ------------------------------------------------------------------


def test_aero_wavelet_scenario_restores_baseline_order() -> None:
    controller, _, provider = _make_controller()

    controller.set_state("aero", TargetState.DISABLED)
    assert provider.get_path() == ["/x", "/y", "/toolbox/wavelet", "/z"]

    controller.set_state("wavelet", "disable")
    assert provider.get_path() == ["/x", "/y", "/z"]

    controller.set_state("all", "on")
    assert provider.get_path() == _BASELINE


def test_set_state_returns_prior_snapshot() -> None:
    controller, _, _ = _make_controller()

    before = controller.set_state(["Aerospace Toolbox", "Wavelet Toolbox"], "off")

    assert before.enabled == {"aero": True, "matlab": True, "wavelet": True}
    assert controller.query(["aero", "wavelet"]) == {"aero": False, "wavelet": False}


def test_disable_twice_leaves_state_and_path_unchanged(caplog: pytest.LogCaptureFixture) -> None:
    controller, store, provider = _make_controller()
    controller.set_state("aero", "off")
    saves = store.saves
    path = provider.get_path()

    with caplog.at_level(logging.WARNING, logger="pytoggle"):
        controller.set_state("aero", "off")

    assert provider.get_path() == path
    assert store.saves == saves
    assert "already switched off" in caplog.text


def test_host_module_never_ends_up_disabled() -> None:
    controller, _, provider = _make_controller(path=["/toolbox/matlab", *_BASELINE])

    controller.set_state("matlab", "off")
    controller.set_state("all", "off")

    snapshot = controller.query()
    assert isinstance(snapshot, ToggleState)
    assert "matlab" not in snapshot.disabled
    assert provider.get_path() == ["/toolbox/matlab", "/x", "/y", "/z"]


def test_foreign_entry_is_dropped_when_enabling(caplog: pytest.LogCaptureFixture) -> None:
    controller, _, provider = _make_controller()
    controller.set_state("aero", "off")
    provider.set_path([*provider.get_path(), "/d"])

    with caplog.at_level(logging.WARNING, logger="pytoggle.reconcile"):
        controller.set_state("aero", "on")

    assert provider.get_path() == _BASELINE
    assert "/d" in caplog.text


def test_permanent_change_saves_startup_path() -> None:
    controller, _, provider = _make_controller()

    controller.set_state("aero", "off", Permanence.PERMANENT)

    assert provider.saved == ["/x", "/y", "/toolbox/wavelet", "/z"]


def test_temporary_change_does_not_save_startup_path() -> None:
    controller, _, provider = _make_controller()

    controller.set_state("aero", "off", "Temporary")

    assert provider.saved is None


def test_unknown_module_fails_before_any_mutation() -> None:
    controller, store, provider = _make_controller()

    with pytest.raises(UnknownModuleError) as exc_info:
        controller.set_state(["aero", "Signal Toolbox"], "off")

    assert exc_info.value.identifier == "Signal Toolbox"
    assert store.load() is None
    assert provider.get_path() == _BASELINE


@pytest.mark.parametrize(
    ("target", "permanence"),
    [("sideways", "temporary"), ("off", "forever"), (3, "temporary")],
)
def test_invalid_keywords_raise_argument_error(target: object, permanence: str) -> None:
    controller, store, _ = _make_controller()

    with pytest.raises(ArgumentError):
        controller.set_state("aero", target, permanence)  # type: ignore[arg-type]

    assert store.load() is None


# ------------------------------------------------------------------
# Restore
# ------------------------------------------------------------------


def test_restore_prior_snapshot() -> None:
    controller, _, provider = _make_controller()
    before = controller.set_state(["aero", "wavelet"], "off")

    assert controller.restore(before) is None

    assert provider.get_path() == _BASELINE
    assert controller.query(["aero", "wavelet"]) == {"aero": True, "wavelet": True}


def test_restore_keeps_disabled_modules_of_snapshot() -> None:
    controller, _, provider = _make_controller()
    controller.set_state("aero", "off")
    partially_off = controller.query()
    controller.set_state("aero", "on")

    controller.restore(partially_off)

    assert provider.get_path() == ["/x", "/y", "/toolbox/wavelet", "/z"]
    assert controller.query("aero") == {"aero": False}


def test_restore_of_fresh_query_is_a_round_trip() -> None:
    controller, store, provider = _make_controller()
    controller.set_state("wavelet", "off")
    snapshot = controller.query()
    path = provider.get_path()

    controller.restore(snapshot)

    assert store.load() == snapshot
    assert provider.get_path() == path


def test_restore_accepts_plain_mapping() -> None:
    controller, _, provider = _make_controller()
    controller.set_state("aero", "off")

    controller.restore({"path": _BASELINE, "enabled": {"aero": True, "matlab": True, "wavelet": True}})

    assert provider.get_path() == _BASELINE


@pytest.mark.parametrize(
    "snapshot",
    [
        {"enabled": {"aero": True, "matlab": True, "wavelet": True}},
        {"path": _BASELINE, "enabled": {"aero": True}},
        {"path": "not-a-list", "enabled": {}},
    ],
)
def test_restore_rejects_malformed_snapshot(snapshot: dict[str, object]) -> None:
    controller, store, provider = _make_controller()
    controller.set_state("aero", "off")
    saves = store.saves

    with pytest.raises(InvalidSnapshotError):
        controller.restore(snapshot)

    assert store.saves == saves
    assert provider.get_path() == ["/x", "/y", "/toolbox/wavelet", "/z"]


def test_restore_never_disables_host_module() -> None:
    controller, _, _ = _make_controller()

    controller.restore(ToggleState(path=_BASELINE, enabled={"aero": True, "matlab": False, "wavelet": True}))

    assert controller.query("matlab") == {"matlab": True}


# ------------------------------------------------------------------
# Tagged requests
# ------------------------------------------------------------------


def test_handle_dispatches_every_request_kind() -> None:
    controller, _, provider = _make_controller()

    assert controller.handle(build_request("names")) == controller.list_names()

    before = controller.handle(build_request(["aero"], "off"))
    assert isinstance(before, ToggleState)
    assert controller.handle(build_request("aero", "query")) == {"aero": False}

    assert controller.handle(build_request(before)) is None
    assert provider.get_path() == _BASELINE

    assert isinstance(controller.handle(build_request()), ToggleState)


def test_from_config_requires_toolbox_root() -> None:
    with pytest.raises(ToggleConfigError):
        ToggleController.from_config(ToggleConfig(toolbox_root=None))
