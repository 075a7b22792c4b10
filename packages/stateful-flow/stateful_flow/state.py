"""State - the per-flow unit of persistence."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from stateful_flow.types import StateId


@dataclass
class State:
    """Current state id plus arbitrary integrator data.

    ``current`` is None until the flow loads it for the first time, after
    which it always names a state. ``data`` is never inspected by the engine.
    Subclass to add typed fields; subclasses are accepted wherever a State is.

    Every request takes a :meth:`copy` before hooks run and restores it if
    the request aborts. Override ``copy`` when ``data`` holds values that
    need their own rollback treatment.
    """

    current: StateId | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def copy(self) -> State:
        """Rollback copy, including subclass fields.

        Deep when possible. If a value cannot be deep-copied (a lock, an open
        handle) the copy is shallow: ``data`` is a new dict sharing values.
        """
        try:
            return copy.deepcopy(self)
        except (TypeError, copy.Error):
            clone = copy.copy(self)
            clone.data = dict(self.data)
            return clone

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible dict of ``current`` and ``data``.

        Subclass fields are not included; ``restore`` builds the base fields only.
        """
        return {"current": self.current, "data": copy.deepcopy(self.data)}

    @classmethod
    def restore(cls, data: dict[str, Any]) -> State:
        return cls(current=data.get("current"), data=copy.deepcopy(data.get("data", {})))
