"""Transition table: rules, events, states, and the FlowBuilder that validates them."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from stateful_flow.guards import Condition, FlowGuards, Guard, conditions, evaluate_all, state_field
from stateful_flow.types import (
    RESERVED_ACTIONS,
    ConfigurationError,
    EventId,
    StateId,
    UnknownEventError,
)

if TYPE_CHECKING:
    from stateful_flow.context import ExecutionContext

logger = logging.getLogger(__name__)

Hook = Callable[["ExecutionContext"], None]
Action = Callable[["ExecutionContext"], None]


@dataclass(frozen=True)
class TransitionRule:
    """One guarded edge. Empty ``sources`` matches any current state."""

    event: EventId
    sources: frozenset[StateId]
    target: StateId
    conditions: tuple[Condition, ...] = ()

    def matches(self, current: StateId | None) -> bool:
        return not self.sources or current in self.sources


@dataclass(frozen=True)
class EventDef:
    """Ordered rules for one event plus event-level conditions."""

    name: EventId
    rules: tuple[TransitionRule, ...]
    conditions: tuple[Condition, ...] = ()
    action: Action | None = None


@dataclass(frozen=True)
class StateDef:
    name: StateId
    initial: bool = False
    view: str | None = None
    hook: Hook | None = None


class FlowDefinition:
    """Immutable flow: states, ordered events, and the guards they reference.

    Build with :class:`FlowBuilder`; instances are safe to share across
    requests because nothing here changes after ``build()``.
    """

    def __init__(
        self,
        states: tuple[StateDef, ...],
        events: tuple[EventDef, ...],
        guards: FlowGuards,
    ) -> None:
        self._states = {s.name: s for s in states}
        self._events = {e.name: e for e in events}
        self._guards = guards
        self._initial = next(s.name for s in states if s.initial)

    @property
    def initial(self) -> StateId:
        return self._initial

    @property
    def guards(self) -> FlowGuards:
        """A copy of the guard registry. Registering on it changes nothing here."""
        return self._guards.copy()

    def passes(self, conds: tuple[Condition, ...], ctx: ExecutionContext) -> bool:
        """Evaluate conditions against this definition's own guards."""
        return evaluate_all(conds, self._guards, ctx)

    def states(self) -> list[StateId]:
        """Declared state ids, in declaration order."""
        return list(self._states)

    def events(self) -> list[EventId]:
        """Declared event ids, in declaration order."""
        return list(self._events)

    def has_state(self, state_id: StateId | None) -> bool:
        return state_id in self._states

    def has_event(self, event: EventId) -> bool:
        return event in self._events

    def event(self, event: EventId) -> EventDef:
        """Look up an event. Raises UnknownEventError if not declared."""
        defn = self._events.get(event)
        if defn is None:
            raise UnknownEventError(event, f"Event {event!r} is not declared by this flow")
        return defn

    def view_for(self, state_id: StateId) -> str:
        """View name for a state; defaults to the state id itself."""
        defn = self._states.get(state_id)
        if defn is None or defn.view is None:
            return state_id
        return defn.view

    def hook_for(self, state_id: StateId | None) -> Hook | None:
        defn = self._states.get(state_id) if state_id is not None else None
        return defn.hook if defn is not None else None

    def permitted_events(self, state_id: StateId, ctx: ExecutionContext) -> list[EventId]:
        """Events that would fire from ``state_id`` given current guard results."""
        permitted: list[EventId] = []
        for defn in self._events.values():
            if not self.passes(defn.conditions, ctx):
                continue
            for rule in defn.rules:
                if rule.matches(state_id) and self.passes(rule.conditions, ctx):
                    permitted.append(defn.name)
                    break
        return permitted


class EventBuilder:
    """Collects the ordered rules of one event. Returned by FlowBuilder.event()."""

    def __init__(self, name: EventId) -> None:
        self.name = name
        self._rules: list[TransitionRule] = []

    def transition(
        self,
        to: StateId,
        from_: StateId | list[StateId] | tuple[StateId, ...] | None = None,
        if_: str | list[str] | None = None,
        unless: str | list[str] | None = None,
    ) -> EventBuilder:
        """Append a rule. Rules are tried in the order they are added."""
        if from_ is None:
            sources: frozenset[StateId] = frozenset()
        elif isinstance(from_, str):
            sources = frozenset((from_,))
        else:
            sources = frozenset(from_)
        self._rules.append(TransitionRule(
            event=self.name,
            sources=sources,
            target=to,
            conditions=conditions(if_, unless),
        ))
        return self

    transitions = transition

    def rules(self) -> tuple[TransitionRule, ...]:
        return tuple(self._rules)


class FlowBuilder:
    """Declares a flow and validates it into an immutable FlowDefinition.

    ``view`` and ``action`` are synonyms for ``state`` and ``event``: a flow's
    states are the views a user sees and its events are the actions they take.
    """

    def __init__(self) -> None:
        self._states: list[StateDef] = []
        self._hooks: dict[StateId, Hook] = {}
        self._events: list[tuple[EventBuilder, tuple[Condition, ...], Action | None]] = []
        self._guards = FlowGuards()
        self._errors: list[str] = []

    # --- Declaration ---

    def state(
        self,
        name: StateId,
        initial: bool = False,
        view: str | None = None,
        hook: Hook | None = None,
    ) -> FlowBuilder:
        if any(s.name == name for s in self._states):
            self._errors.append(f"State {name!r} declared twice")
        self._states.append(StateDef(name=name, initial=initial, view=view))
        if hook is not None:
            self.before_view(name, hook)
        return self

    view = state

    def event(
        self,
        name: EventId,
        if_: str | list[str] | None = None,
        unless: str | list[str] | None = None,
        action: Action | None = None,
    ) -> EventBuilder:
        """Declare an event and return its builder for adding rules."""
        builder = EventBuilder(name)
        self._events.append((builder, conditions(if_, unless), action))
        return builder

    action = event

    def guard(self, name: str, fn: Guard) -> FlowBuilder:
        self._guards.register(name, fn)
        return self

    def state_guard(self, name: str, field_name: str | None = None) -> FlowBuilder:
        """Register a guard that passes through a state data field."""
        self._guards.register(name, state_field(field_name or name))
        return self

    def before_view(self, state_id: StateId, fn: Hook) -> FlowBuilder:
        """Register the hook run before ``state_id`` is displayed."""
        if state_id in self._hooks:
            self._errors.append(f"State {state_id!r} already has a before_view hook")
        self._hooks[state_id] = fn
        return self

    # --- Validation ---

    def build(self) -> FlowDefinition:
        """Validate and freeze. Raises ConfigurationError listing every problem."""
        errors = list(self._errors)
        declared = {s.name for s in self._states}

        initials = [s.name for s in self._states if s.initial]
        if not initials:
            errors.append("No initial state declared")
        elif len(initials) > 1:
            errors.append(f"Multiple initial states declared: {initials}")

        for state_id in self._hooks:
            if state_id not in declared:
                errors.append(f"before_view hook for undeclared state {state_id!r}")

        seen_events: set[EventId] = set()
        events: list[EventDef] = []
        for builder, event_conds, action in self._events:
            name = builder.name
            if name in RESERVED_ACTIONS:
                errors.append(f"Event name {name!r} is reserved")
            if name in seen_events:
                errors.append(f"Event {name!r} declared twice")
            seen_events.add(name)

            rules = builder.rules()
            if not rules:
                errors.append(f"Event {name!r} has no transitions")
            for cond in event_conds:
                if not self._guards.has(cond.guard):
                    errors.append(f"Event {name!r} references unknown guard {cond.guard!r}")
            for rule in rules:
                for ref in sorted(rule.sources) + [rule.target]:
                    if ref not in declared:
                        errors.append(f"Event {name!r} references undeclared state {ref!r}")
                for cond in rule.conditions:
                    if not self._guards.has(cond.guard):
                        errors.append(
                            f"Event {name!r} transition to {rule.target!r} "
                            f"references unknown guard {cond.guard!r}"
                        )
            events.append(EventDef(name=name, rules=rules, conditions=event_conds, action=action))

        if errors:
            raise ConfigurationError("; ".join(errors))

        states = tuple(
            StateDef(name=s.name, initial=s.initial, view=s.view, hook=self._hooks.get(s.name))
            for s in self._states
        )
        logger.debug(
            "built flow with %d states and %d events (initial=%r)",
            len(states), len(events), initials[0],
        )
        return FlowDefinition(states, tuple(events), self._guards.copy())
