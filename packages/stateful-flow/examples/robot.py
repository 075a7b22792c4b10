"""A robot's day: guarded actions, state guards, and per-action updates.

Demonstrates:
- view/action declarations with if_/unless event guards
- state_guard pass-throughs and a computed guard
- action callables that update state after the event is attempted
- the reserved 'next' and 'start' actions

Run: python -m examples.robot
"""

import logging

from stateful_flow import FlowBuilder, FlowController, FlowResult, MemoryStore
from stateful_flow.context import ExecutionContext


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def run(ctx: ExecutionContext) -> None:
    ctx.state["clean"] = False
    ctx.state["tired"] = True


def clean(ctx: ExecutionContext) -> None:
    ctx.state["clean"] = True


def sleep(ctx: ExecutionContext) -> None:
    ctx.state["tired"] = False
    ctx.state["nights"] += 1


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------

def build_flow():
    flow = FlowBuilder()
    flow.view("sleeping", initial=True)
    flow.view("running")
    flow.view("cleaning")
    flow.view("finishing")

    flow.action("run", action=run).transitions("running", from_="sleeping")
    flow.action("clean", unless="clean?", action=clean).transitions("cleaning", from_="running")
    flow.action("sleep", unless="finished?", action=sleep).transitions(
        "sleeping", from_=["running", "cleaning"],
    )
    flow.action("finish", if_="finished?").transitions("finishing")

    flow.state_guard("clean?")
    flow.state_guard("tired?")
    flow.guard("finished?", lambda ctx: ctx.state["nights"] >= 2)
    return flow.build()


def show(action: str, result: FlowResult) -> None:
    marker = "fired" if result.fired else "stayed"
    print(f"  {action:<7} -> {result.view:<10} ({marker}) nights={result.state['nights']}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    store = MemoryStore()

    def load():
        state = store.load()
        state.data.setdefault("nights", 1)
        return state

    controller = FlowController(build_flow(), load=load, save=store.save)

    print("=== Robot ===")
    for action in ["start", "run", "clean", "clean", "sleep", "next", "sleep", "finish"]:
        show(action, controller.handle(action))
    print(f"  saves: {store.saves}")


if __name__ == "__main__":
    main()
