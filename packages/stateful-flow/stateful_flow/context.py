"""Per-request execution context handed to guards, hooks, and actions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stateful_flow.definition import FlowDefinition
    from stateful_flow.state import State
    from stateful_flow.types import EventId, StateId

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Request lifecycle. Strictly linear."""

    IDLE = "idle"
    LOADED = "loaded"
    PROCESSED = "processed"
    FINISHED = "finished"


@dataclass
class ExecutionContext:
    """Everything one request knows. Created per request, then discarded.

    ``state`` is owned by the request until finish; ``definition`` is shared
    and must not be mutated. ``params`` is the untyped request parameter bag.
    ``status`` may be set by hooks and actions to override the render status.
    """

    definition: FlowDefinition
    state: State
    params: dict[str, Any] = field(default_factory=dict)
    event: EventId | None = None
    previous: StateId | None = None
    fired: bool = False
    aborted: bool = False
    status: int | None = None
    phase: Phase = Phase.IDLE
    snapshot: State | None = None  # copy taken before hooks run; restored on abort

    def abort(self, status: int | None = None) -> None:
        """Suppress the current transition and its persistence."""
        logger.debug("abort requested in state %r (status=%r)", self.state.current, status)
        self.aborted = True
        if status is not None:
            self.status = status
