"""Pydantic request models for controller entrypoints.

Each request kind is a tagged variant; :func:`pytoggle.controller.build_request`
turns the loosely-typed keyword call shape into one of these and
:meth:`pytoggle.controller.ToggleController.handle` executes it.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pytoggle._constants import DISABLE_KEYWORDS, ENABLE_KEYWORDS
from pytoggle.models.state import ToggleState


class TargetState(enum.StrEnum):
    """Requested on/off state of a module."""

    ENABLED = "on"
    DISABLED = "off"

    @classmethod
    def _missing_(cls, value: object) -> TargetState | None:
        if not isinstance(value, str):
            return None
        keyword = value.strip().lower()
        if keyword in ENABLE_KEYWORDS:
            return cls.ENABLED
        if keyword in DISABLE_KEYWORDS:
            return cls.DISABLED
        return None


class Permanence(enum.StrEnum):
    """How long a state change lasts."""

    TEMPORARY = "temporary"
    PERMANENT = "permanent"

    @classmethod
    def _missing_(cls, value: object) -> Permanence | None:
        if isinstance(value, str):
            keyword = value.strip().lower()
            for member in cls:
                if member.value == keyword:
                    return member
        return None


def _normalize_ids(value: Any) -> Any:
    if value is None or isinstance(value, tuple):
        return value
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, set, frozenset)):
        return tuple(value)
    return value


class _Request(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class _ModuleRequest(_Request):
    """Request addressing a set of modules. ``None`` means all modules."""

    module_ids: tuple[str, ...] | None = None

    @field_validator("module_ids", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _normalize_ids(value)


class QueryRequest(_ModuleRequest):
    kind: Literal["query"] = "query"


class ListNamesRequest(_Request):
    kind: Literal["names"] = "names"


class SetStateRequest(_ModuleRequest):
    kind: Literal["set_state"] = "set_state"
    target: TargetState
    permanence: Permanence = Permanence.TEMPORARY


class RestoreRequest(_Request):
    kind: Literal["restore"] = "restore"
    # Validated against the registry by the controller, not here.
    snapshot: ToggleState | dict[str, Any]


ToggleRequest = Annotated[
    QueryRequest | ListNamesRequest | SetStateRequest | RestoreRequest,
    Field(discriminator="kind"),
]
