"""Toggle state and module records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModuleInfo(BaseModel):
    """A single installed module as reported by a registry."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    module_id: str
    name: str
    directory: str
    version: str | None = None
    release: str | None = None
    date: str | None = None

    @field_validator("module_id", "name", "directory")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value


class ToggleState(BaseModel):
    """Persisted toggle state.

    ``path`` is the baseline search path captured the very first time the
    library was used. It is the restoration target and is never modified
    afterwards. ``enabled`` maps every known module id to its on/off flag.

    Instances are immutable; flag updates return a new state so a computed
    state can be persisted before the matching path is applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: list[str]
    enabled: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def initial(cls, path: Iterable[str], module_ids: Iterable[str]) -> ToggleState:
        """Baseline state: current path snapshot, every module enabled."""
        return cls(path=list(path), enabled={module_id: True for module_id in module_ids})

    def is_enabled(self, module_id: str) -> bool:
        # Unknown modules were never switched off.
        return self.enabled.get(module_id, True)

    @property
    def disabled(self) -> list[str]:
        """Ids of all modules currently switched off, in insertion order."""
        return [module_id for module_id, on in self.enabled.items() if not on]

    def with_flags(self, flags: Mapping[str, bool]) -> ToggleState:
        """Return a copy with the given module flags overwritten."""
        if not flags:
            return self
        enabled = dict(self.enabled)
        enabled.update(flags)
        return self.model_copy(update={"enabled": enabled})

    def missing_modules(self, module_ids: Iterable[str]) -> list[str]:
        """Ids from *module_ids* that have no flag in this state."""
        return [module_id for module_id in module_ids if module_id not in self.enabled]
