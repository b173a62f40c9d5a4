"""Library configuration for pytoggle."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pytoggle._constants import DEFAULT_HOST_MODULE, DEFAULT_NAMESPACE, STATE_FILENAME


def _default_state_file() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / "pytoggle" / STATE_FILENAME


def _env_path(value: str | None) -> Path | None:
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None
    return Path(stripped).expanduser()


@dataclasses.dataclass(frozen=True)
class ToggleConfig:
    """Toggle configuration.

    Parameters
    ----------
    toolbox_root : Path or None
        Directory holding one sub-directory per installed toolbox.
        Required to build a directory-scanning registry.
    state_file : Path
        JSON file holding the persisted toggle state.
    namespace : str
        Preference group the state record is stored under.
    host_module : str
        Module id of the host application itself. It can never be disabled.
    startup_path_file : Path or None
        Host startup path file written for ``permanent`` changes.
        ``None`` means permanent changes are not available.
    """

    toolbox_root: Path | None = None
    state_file: Path = dataclasses.field(default_factory=_default_state_file)
    namespace: str = DEFAULT_NAMESPACE
    host_module: str = DEFAULT_HOST_MODULE
    startup_path_file: Path | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> ToggleConfig:
        """Create configuration from environment variables.

        Reads the optional ``PYTOGGLE_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ToggleConfig
            Populated configuration.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        _ENV_PATH_MAP = {
            "PYTOGGLE_TOOLBOX_ROOT": "toolbox_root",
            "PYTOGGLE_STATE_FILE": "state_file",
            "PYTOGGLE_STARTUP_PATH_FILE": "startup_path_file",
        }
        for env_key, field_name in _ENV_PATH_MAP.items():
            val = _env_path(env.get(env_key))
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_STR_MAP = {
            "PYTOGGLE_NAMESPACE": "namespace",
            "PYTOGGLE_HOST_MODULE": "host_module",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
