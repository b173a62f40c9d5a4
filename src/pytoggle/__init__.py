"""pytoggle - Enable and disable optional toolboxes on a search path."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytoggle")
except PackageNotFoundError:
    __version__ = "0+local"
from pytoggle.config import ToggleConfig
from pytoggle.controller import ToggleController, build_request
from pytoggle.exceptions import (
    ArgumentError,
    InvalidSnapshotError,
    PersistenceError,
    ToggleConfigError,
    ToggleError,
    UnknownModuleError,
)
from pytoggle.models import (
    ListNamesRequest,
    ModuleInfo,
    Permanence,
    QueryRequest,
    RestoreRequest,
    SetStateRequest,
    TargetState,
    ToggleState,
)
from pytoggle.paths import ListPathProvider, PathProvider, SysPathProvider
from pytoggle.registry import DirectoryRegistry, ModuleRegistry, StaticRegistry, cached_registry
from pytoggle.state import JsonFileStateStore, MemoryStateStore, StateStore

__all__ = [
    "__version__",
    "ArgumentError",
    "DirectoryRegistry",
    "InvalidSnapshotError",
    "JsonFileStateStore",
    "ListNamesRequest",
    "ListPathProvider",
    "MemoryStateStore",
    "ModuleInfo",
    "ModuleRegistry",
    "PathProvider",
    "Permanence",
    "PersistenceError",
    "QueryRequest",
    "RestoreRequest",
    "SetStateRequest",
    "StateStore",
    "StaticRegistry",
    "SysPathProvider",
    "TargetState",
    "ToggleConfig",
    "ToggleConfigError",
    "ToggleController",
    "ToggleError",
    "ToggleState",
    "UnknownModuleError",
    "build_request",
    "cached_registry",
]
