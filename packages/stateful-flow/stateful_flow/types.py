"""Shared type aliases and errors for stateful-flow."""

from __future__ import annotations

StateId = str
EventId = str

RESERVED_ACTIONS: tuple[str, ...] = ("start", "next")


class ConfigurationError(Exception):
    """Raised when a flow definition is invalid (bad states, guards, or events)."""


class UnknownEventError(KeyError):
    """Raised when an action does not name a declared event."""

    def __init__(self, event: str, message: str) -> None:
        self.event = event
        super().__init__(message)


class UnknownStateError(KeyError):
    """Raised when a loaded or requested state is not declared by the flow."""

    def __init__(self, state: str, message: str) -> None:
        self.state = state
        super().__init__(message)
