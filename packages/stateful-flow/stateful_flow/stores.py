"""MemoryStore - dict-backed load/save pair for tests, demos, and single-process apps."""
from __future__ import annotations

import copy
from typing import Callable

from stateful_flow.state import State


class MemoryStore:
    """Keeps deep copies of saved states, keyed by session id.

    Copies go in on save and come out on load, so a request can only change
    what is stored by calling save. ``saves`` counts every save call,
    including discards.
    """

    def __init__(self, factory: Callable[[], State] = State) -> None:
        self._factory = factory
        self._states: dict[str, State] = {}
        self.saves: int = 0

    def load(self, key: str = "default") -> State:
        """Stored state for ``key``, or a fresh one from the factory."""
        stored = self._states.get(key)
        if stored is None:
            return self._factory()
        return copy.deepcopy(stored)

    def save(self, state: State | None, key: str = "default") -> None:
        """Store a copy of ``state``; None discards whatever ``key`` holds."""
        self.saves += 1
        if state is None:
            self._states.pop(key, None)
        else:
            self._states[key] = copy.deepcopy(state)

    def peek(self, key: str = "default") -> State | None:
        """The stored state itself, without copying. For assertions."""
        return self._states.get(key)

    def bind(self, key: str) -> tuple[Callable[[], State], Callable[[State | None], None]]:
        """``(load, save)`` closures for one session, ready for FlowController."""
        return (lambda: self.load(key)), (lambda state: self.save(state, key))
