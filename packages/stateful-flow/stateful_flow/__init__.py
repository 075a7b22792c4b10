"""stateful-flow - Request-driven finite state machines for multi-step flows."""
from __future__ import annotations

from stateful_flow.config import FlowConfig
from stateful_flow.context import ExecutionContext, Phase
from stateful_flow.controller import FlowController, FlowResult
from stateful_flow.definition import (
    EventBuilder,
    EventDef,
    FlowBuilder,
    FlowDefinition,
    StateDef,
    TransitionRule,
)
from stateful_flow.guards import FlowGuards, If, Unless
from stateful_flow.hooks import run_hook
from stateful_flow.machine import attempt, next_event, select_rule
from stateful_flow.state import State
from stateful_flow.stores import MemoryStore
from stateful_flow.types import (
    ConfigurationError,
    EventId,
    StateId,
    UnknownEventError,
    UnknownStateError,
)

__all__ = [
    "ConfigurationError",
    "EventBuilder",
    "EventDef",
    "EventId",
    "ExecutionContext",
    "FlowBuilder",
    "FlowConfig",
    "FlowController",
    "FlowDefinition",
    "FlowGuards",
    "FlowResult",
    "If",
    "MemoryStore",
    "Phase",
    "State",
    "StateDef",
    "StateId",
    "TransitionRule",
    "UnknownEventError",
    "UnknownStateError",
    "Unless",
    "attempt",
    "next_event",
    "run_hook",
    "select_rule",
]
