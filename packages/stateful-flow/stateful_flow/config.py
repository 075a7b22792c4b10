"""Flow controller configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FlowConfig:
    """Immutable configuration for a FlowController.

    Attributes:
        status: Status passed to render on a normal request.
        abort_status: Status passed to render when a hook or action aborts.
        strict_load: Reject loaded states the flow no longer declares.
    """

    status: int = 200
    abort_status: int = 200
    strict_load: bool = True
