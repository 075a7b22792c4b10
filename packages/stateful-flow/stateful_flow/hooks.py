"""Before-view hook dispatch."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stateful_flow.context import ExecutionContext
    from stateful_flow.definition import FlowDefinition
    from stateful_flow.types import StateId

logger = logging.getLogger(__name__)


def run_hook(definition: FlowDefinition, state_id: StateId | None, ctx: ExecutionContext) -> bool:
    """Run the hook registered for ``state_id``. Returns whether one ran."""
    hook = definition.hook_for(state_id)
    if hook is None:
        return False
    logger.debug("running before_view hook for %r", state_id)
    hook(ctx)
    return True
