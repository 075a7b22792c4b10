"""FlowGuards registry and rule conditions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:
    from stateful_flow.context import ExecutionContext

Guard = Callable[["ExecutionContext"], bool]


@dataclass(frozen=True, slots=True)
class If:
    """Passes when the named guard is truthy."""

    guard: str


@dataclass(frozen=True, slots=True)
class Unless:
    """Passes when the named guard is falsy."""

    guard: str


Condition = Union[If, Unless]


class FlowGuards:
    """Maps guard name strings to callable predicates."""

    def __init__(self) -> None:
        self._guards: dict[str, Guard] = {}

    def register(self, name: str, fn: Guard) -> None:
        """Register a named guard. Overwrites if already registered."""
        self._guards[name] = fn

    def check(self, name: str, ctx: ExecutionContext) -> bool:
        """Evaluate a guard. Raises KeyError if not registered."""
        return bool(self._guards[name](ctx))

    def has(self, name: str) -> bool:
        """Check if guard name is registered."""
        return name in self._guards

    def names(self) -> list[str]:
        """List all registered guard names."""
        return list(self._guards)

    def copy(self) -> FlowGuards:
        other = FlowGuards()
        other._guards = dict(self._guards)
        return other


def state_field(field_name: str) -> Guard:
    """Guard that reads a state data field as a boolean.

    A trailing ``?`` is dropped, so ``state_field("valid?")`` reads ``valid``.
    """
    key = field_name.rstrip("?")

    def _check(ctx: ExecutionContext) -> bool:
        return bool(ctx.state.get(key))

    return _check


def conditions(
    if_: str | list[str] | tuple[str, ...] | None = None,
    unless: str | list[str] | tuple[str, ...] | None = None,
) -> tuple[Condition, ...]:
    """Normalize ``if_``/``unless`` keyword arguments into conditions."""
    result: list[Condition] = []
    for name in _names(if_):
        result.append(If(name))
    for name in _names(unless):
        result.append(Unless(name))
    return tuple(result)


def _names(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def evaluate(condition: Condition, guards: FlowGuards, ctx: ExecutionContext) -> bool:
    passed = guards.check(condition.guard, ctx)
    return passed if isinstance(condition, If) else not passed


def evaluate_all(
    conds: tuple[Condition, ...], guards: FlowGuards, ctx: ExecutionContext,
) -> bool:
    """True when every condition passes. Short-circuits in declaration order."""
    for cond in conds:
        if not evaluate(cond, guards, ctx):
            return False
    return True
