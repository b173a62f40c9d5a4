"""Data models for toggle state and requests."""

from pytoggle.models.requests import (
    ListNamesRequest,
    Permanence,
    QueryRequest,
    RestoreRequest,
    SetStateRequest,
    TargetState,
    ToggleRequest,
)
from pytoggle.models.state import ModuleInfo, ToggleState

__all__ = [
    "ListNamesRequest",
    "ModuleInfo",
    "Permanence",
    "QueryRequest",
    "RestoreRequest",
    "SetStateRequest",
    "TargetState",
    "ToggleRequest",
    "ToggleState",
]
