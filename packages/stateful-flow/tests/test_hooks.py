"""Tests for before-view hook dispatch."""
import pytest

from stateful_flow import ExecutionContext, FlowBuilder, State, run_hook


def _ctx(definition, current="a"):
    return ExecutionContext(definition=definition, state=State(current=current))


def test_runs_registered_hook():
    calls = []
    definition = (
        FlowBuilder()
        .state("a", initial=True, hook=lambda c: calls.append(c.state.current))
        .build()
    )
    ctx = _ctx(definition)

    assert run_hook(definition, "a", ctx) is True
    assert calls == ["a"]


def test_no_hook_is_noop():
    definition = FlowBuilder().state("a", initial=True).state("b").build()
    assert run_hook(definition, "b", _ctx(definition)) is False


def test_unknown_or_missing_state_is_noop():
    definition = FlowBuilder().state("a", initial=True).build()
    ctx = _ctx(definition)
    assert run_hook(definition, "ghost", ctx) is False
    assert run_hook(definition, None, ctx) is False


def test_hook_can_mutate_state_and_abort():
    def hook(ctx):
        ctx.state["seen"] = True
        ctx.abort(status=422)

    definition = FlowBuilder().state("a", initial=True).before_view("a", hook).build()
    ctx = _ctx(definition)

    run_hook(definition, "a", ctx)

    assert ctx.state["seen"] is True
    assert ctx.aborted is True
    assert ctx.status == 422


def test_abort_without_status_keeps_status():
    definition = FlowBuilder().state("a", initial=True).build()
    ctx = _ctx(definition)
    ctx.abort()
    assert ctx.aborted is True
    assert ctx.status is None


def test_hook_exception_propagates():
    def hook(ctx):
        raise ValueError("bad form")

    definition = FlowBuilder().state("a", initial=True, hook=hook).build()
    with pytest.raises(ValueError, match="bad form"):
        run_hook(definition, "a", _ctx(definition))
