"""FSM engine: rule selection, event attempts, and next-event choice."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stateful_flow.context import ExecutionContext
    from stateful_flow.definition import FlowDefinition, TransitionRule
    from stateful_flow.state import State
    from stateful_flow.types import EventId

logger = logging.getLogger(__name__)


def select_rule(
    definition: FlowDefinition, state: State, event: EventId, ctx: ExecutionContext,
) -> TransitionRule | None:
    """First rule of ``event`` that matches the current state and passes its guards.

    Event-level conditions are checked before any rule. Raises
    UnknownEventError if ``event`` is not declared.
    """
    defn = definition.event(event)
    if not definition.passes(defn.conditions, ctx):
        logger.debug("event %r blocked by event guards in %r", event, state.current)
        return None
    for rule in defn.rules:
        if rule.matches(state.current) and definition.passes(rule.conditions, ctx):
            return rule
    return None


def attempt(
    definition: FlowDefinition, state: State, event: EventId, ctx: ExecutionContext,
) -> bool:
    """Fire ``event`` if a rule allows it. Returns whether the state changed.

    A blocked event is not an error: the state is left untouched and False
    is returned.
    """
    rule = select_rule(definition, state, event, ctx)
    if rule is None:
        logger.debug("event %r did not fire from %r", event, state.current)
        return False
    logger.debug("event %r: %r -> %r", event, state.current, rule.target)
    state.current = rule.target
    return True


def next_event(
    definition: FlowDefinition, state: State, ctx: ExecutionContext,
) -> EventId | None:
    """First permitted event in declaration order, or None.

    When several events are permitted the earliest declared wins; there is
    no priority between them.
    """
    permitted = definition.permitted_events(state.current, ctx)
    logger.debug("permitted events from %r: %r", state.current, permitted)
    return permitted[0] if permitted else None
