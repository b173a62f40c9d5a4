from __future__ import annotations

from pathlib import Path

import pytest

from pytoggle.config import ToggleConfig


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    config = ToggleConfig()

    assert config.toolbox_root is None
    assert config.state_file == tmp_path / "pytoggle" / "toolbox_states.json"
    assert config.namespace == "toggleToolbox"
    assert config.host_module == "matlab"
    assert config.startup_path_file is None


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PYTOGGLE_TOOLBOX_ROOT", str(tmp_path / "toolbox"))
    monkeypatch.setenv("PYTOGGLE_STATE_FILE", str(tmp_path / "state.json"))
    monkeypatch.setenv("PYTOGGLE_STARTUP_PATH_FILE", str(tmp_path / "pathdef.txt"))
    monkeypatch.setenv("PYTOGGLE_NAMESPACE", " myTool ")
    monkeypatch.setenv("PYTOGGLE_HOST_MODULE", "octave")

    config = ToggleConfig.from_env()

    assert config.toolbox_root == tmp_path / "toolbox"
    assert config.state_file == tmp_path / "state.json"
    assert config.startup_path_file == tmp_path / "pathdef.txt"
    assert config.namespace == "myTool"
    assert config.host_module == "octave"


def test_blank_variables_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYTOGGLE_TOOLBOX_ROOT", "  ")
    monkeypatch.setenv("PYTOGGLE_NAMESPACE", "")

    config = ToggleConfig.from_env()

    assert config.toolbox_root is None
    assert config.namespace == "toggleToolbox"


def test_overrides_win(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PYTOGGLE_HOST_MODULE", "octave")

    config = ToggleConfig.from_env(host_module="matlab", toolbox_root=tmp_path)

    assert config.host_module == "matlab"
    assert config.toolbox_root == tmp_path
