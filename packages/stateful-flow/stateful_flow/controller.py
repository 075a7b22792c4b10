"""FlowController - the per-request load, process, finish, render lifecycle."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from stateful_flow.config import FlowConfig
from stateful_flow.context import ExecutionContext, Phase
from stateful_flow.definition import FlowDefinition
from stateful_flow.hooks import run_hook
from stateful_flow.machine import attempt, next_event
from stateful_flow.state import State
from stateful_flow.types import EventId, UnknownStateError

logger = logging.getLogger(__name__)

LoadFn = Callable[[], State]
SaveFn = Callable[[State | None], None]
RenderFn = Callable[[str, int], None]


@dataclass(frozen=True)
class FlowResult:
    """Outcome of one request.

    ``fired`` is the engine's answer for the attempted event. When
    ``aborted`` is set the transition (if any) was rolled back and nothing
    was saved, so check ``aborted`` first.
    """

    view: str
    status: int
    event: EventId | None
    fired: bool
    aborted: bool
    state: State


class FlowController:
    """Drives one flow definition through a stream of independent requests.

    The controller holds only the shared definition and the integrator's
    ``load``/``save``/``render`` callables; every call to :meth:`handle`
    builds a fresh :class:`ExecutionContext`, so one controller can serve
    any number of requests.

    Actions ``start`` and ``next`` are reserved:

    - ``start`` discards saved state, reloads, optionally forces the state
      named by ``params["initial"]``, and runs only that state's hook.
    - ``next`` fires the first permitted event in declaration order. The
      event is chosen before the pre-view hook runs, so state the hook sets
      does not influence which event ``next`` picks.

    Any other action must name a declared event. A truthy ``params["clear"]``
    discards saved state before loading.
    """

    def __init__(
        self,
        definition: FlowDefinition,
        load: LoadFn,
        save: SaveFn,
        render: RenderFn | None = None,
        config: FlowConfig | None = None,
    ) -> None:
        self._definition = definition
        self._load_fn = load
        self._save_fn = save
        self._render_fn = render
        self._config = config if config is not None else FlowConfig()

    @property
    def definition(self) -> FlowDefinition:
        return self._definition

    @property
    def config(self) -> FlowConfig:
        return self._config

    def handle(self, action: str, params: Mapping[str, Any] | None = None) -> FlowResult:
        """Run one request for ``action`` and return what to render."""
        request_params = dict(params) if params else {}
        if action == "start":
            return self._start(request_params)

        if request_params.get("clear"):
            logger.debug("clear requested, discarding saved state")
            self._save(None)
        ctx = self._load(request_params)

        if action == "next":
            ctx.event = next_event(self._definition, ctx.state, ctx)
            logger.debug("next resolved to event %r", ctx.event)
        else:
            ctx.event = self._definition.event(action).name

        self._process(ctx)
        self._finish(ctx)
        return self._render(ctx)

    # --- Lifecycle ---

    def _load(self, params: dict[str, Any]) -> ExecutionContext:
        state = self._load_fn()
        logger.debug("load returned %r", state)
        if not isinstance(state, State):
            raise TypeError(
                f"load() must return a State or subclass, got {type(state).__name__}"
            )
        if state.current is None:
            state.current = self._definition.initial
        elif self._config.strict_load and not self._definition.has_state(state.current):
            raise UnknownStateError(
                state.current,
                f"Loaded state {state.current!r} is not declared by this flow",
            )
        return ExecutionContext(
            definition=self._definition,
            state=state,
            params=params,
            previous=state.current,
            phase=Phase.LOADED,
        )

    def _process(self, ctx: ExecutionContext) -> None:
        state = ctx.state
        ctx.previous = state.current
        ctx.snapshot = state.copy()
        ctx.aborted = False

        run_hook(self._definition, state.current, ctx)
        if ctx.aborted:
            ctx.fired = False
        elif ctx.event is not None:
            ctx.fired = attempt(self._definition, state, ctx.event, ctx)

        if state.current != ctx.previous:
            run_hook(self._definition, state.current, ctx)

        if ctx.event is not None:
            action = self._definition.event(ctx.event).action
            if action is not None:
                action(ctx)
        ctx.phase = Phase.PROCESSED

    def _finish(self, ctx: ExecutionContext) -> None:
        if ctx.aborted:
            logger.debug("request aborted in %r, discarding changes", ctx.state.current)
            if ctx.snapshot is not None:
                ctx.state = ctx.snapshot
        elif ctx.state.current != ctx.previous:
            self._save(ctx.state)
        ctx.phase = Phase.FINISHED

    def _start(self, params: dict[str, Any]) -> FlowResult:
        self._save(None)
        ctx = self._load(params)
        override = params.get("initial")
        if override is not None:
            if not self._definition.has_state(override):
                raise UnknownStateError(override, f"Cannot start in undeclared state {override!r}")
            logger.debug("start forcing state %r", override)
            ctx.state.current = override
        ctx.previous = ctx.state.current
        ctx.snapshot = ctx.state.copy()
        ctx.phase = Phase.PROCESSED

        run_hook(self._definition, ctx.state.current, ctx)
        if ctx.aborted:
            ctx.state = ctx.snapshot
        ctx.phase = Phase.FINISHED
        return self._render(ctx)

    def _render(self, ctx: ExecutionContext) -> FlowResult:
        if ctx.aborted:
            target = ctx.previous
            default_status = self._config.abort_status
        else:
            target = ctx.state.current
            default_status = self._config.status
        status = ctx.status if ctx.status is not None else default_status
        view = self._definition.view_for(target)
        if self._render_fn is not None:
            self._render_fn(view, status)
        return FlowResult(
            view=view,
            status=status,
            event=ctx.event,
            fired=ctx.fired,
            aborted=ctx.aborted,
            state=ctx.state,
        )

    def _save(self, state: State | None) -> None:
        logger.debug("calling save with %r", state)
        self._save_fn(state)
