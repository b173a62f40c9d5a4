"""State/store layer.

Holds the single persisted toggle record: the baseline search path captured
on first use and the on/off flag of every known module.
"""

from pytoggle.state.store import JsonFileStateStore, MemoryStateStore, StateStore

__all__ = ["JsonFileStateStore", "MemoryStateStore", "StateStore"]
