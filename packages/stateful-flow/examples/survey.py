"""A favorite-day survey: before_view hooks, form validation, and abort.

Demonstrates:
- a before_view hook that validates posted form data into state
- a guarded event with two ordered rules (first passing rule wins)
- aborting a request so nothing is persisted and the previous view shows
- rendering through an integrator-supplied render callable

Run: python -m examples.survey
"""

import datetime
import logging

from stateful_flow import FlowBuilder, FlowConfig, FlowController, MemoryStore
from stateful_flow.context import ExecutionContext

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def today() -> int:
    return datetime.date.today().weekday()


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

def show_form(ctx: ExecutionContext) -> None:
    """Validate posted information; the submit guard reads state['valid']."""
    info = ctx.params.get("information")
    if info is None:
        return
    if info.get("name", "").lower() == "robot":
        ctx.abort(status=403)
        return
    if info.get("name") and info.get("favorite_day") is not None:
        ctx.state["name"] = info["name"]
        ctx.state["favorite_day"] = int(info["favorite_day"])
        ctx.state["valid"] = True


def say_goodbye(ctx: ExecutionContext) -> None:
    ctx.state["day"] = DAYS[today()]


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------

def build_flow():
    flow = FlowBuilder()
    flow.view("welcome", initial=True)
    flow.view("what_is_your_favorite_day", view="survey/form", hook=show_form)
    flow.view("favorite_day")
    flow.view("goodbye", hook=say_goodbye)

    flow.action("ask").transitions("what_is_your_favorite_day", from_="welcome")
    (flow.action("submit", if_="valid?")
        .transitions("favorite_day", from_="what_is_your_favorite_day", if_="favorite?")
        .transitions("goodbye", from_="what_is_your_favorite_day"))
    flow.action("finish").transitions("goodbye")

    flow.state_guard("valid?")
    flow.guard("favorite?", lambda ctx: today() == ctx.state.get("favorite_day"))
    return flow.build()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    store = MemoryStore()

    def render(view: str, status: int) -> None:
        print(f"  render {view!r} [{status}]")

    controller = FlowController(
        build_flow(), load=store.load, save=store.save, render=render,
        config=FlowConfig(abort_status=409),
    )

    print("=== Survey ===")
    requests = [
        ("start", {}),
        ("ask", {}),
        ("submit", {"information": {"name": ""}}),
        ("submit", {"information": {"name": "robot", "favorite_day": "1"}}),
        ("submit", {"information": {"name": "Ada", "favorite_day": str(today())}}),
        ("finish", {}),
    ]
    for action, params in requests:
        print(f"{action} {params}")
        controller.handle(action, params)
    print(f"  stored: {store.peek()}")


if __name__ == "__main__":
    main()
