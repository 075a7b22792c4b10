"""Multi-request flows exercising guards, hooks, actions, and persistence together."""
from stateful_flow import FlowBuilder, FlowController, MemoryStore, State

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


# ---------------------------------------------------------------------------
# Robot: sleeping -> running -> cleaning -> sleeping ... -> finishing
# ---------------------------------------------------------------------------

def _robot_flow():
    def run(ctx):
        ctx.state["clean"] = False
        ctx.state["tired"] = True

    def clean(ctx):
        ctx.state["clean"] = True

    def sleep(ctx):
        ctx.state["tired"] = False
        ctx.state["nights"] += 1

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


def _robot_controller(store):
    def load():
        state = store.load()
        state.data.setdefault("nights", 1)
        return state

    return FlowController(_robot_flow(), load=load, save=store.save)


class TestRobotFlow:
    """A full day-night cycle across independent requests."""

    def test_cycle_until_finished(self):
        # Arrange
        store = MemoryStore()
        controller = _robot_controller(store)

        # Act & Assert
        assert controller.handle("start").view == "sleeping"
        assert controller.handle("run").view == "running"
        assert store.peek()["clean"] is False

        assert controller.handle("clean").view == "cleaning"
        assert store.peek()["clean"] is True

        result = controller.handle("sleep")
        assert result.view == "sleeping"
        assert store.peek()["nights"] == 2

        assert controller.handle("run").view == "running"

        blocked = controller.handle("sleep")
        assert blocked.fired is False
        assert blocked.view == "running"

        assert controller.handle("finish").view == "finishing"
        assert store.peek().current == "finishing"

    def test_clean_blocked_while_clean(self):
        """'clean' has an unless guard on the clean flag."""
        # Arrange
        store = MemoryStore()
        store.save(State(current="running", data={"clean": True, "nights": 1}))
        controller = _robot_controller(store)
        saves_before = store.saves

        # Act
        result = controller.handle("clean")

        # Assert
        assert result.fired is False
        assert result.view == "running"
        assert store.saves == saves_before

    def test_next_walks_the_flow(self):
        """Repeated 'next' takes the first permitted action each time."""
        # Arrange
        store = MemoryStore()
        controller = _robot_controller(store)

        # Act
        views = [controller.handle("next").view for _ in range(4)]

        # Assert
        assert views == ["running", "cleaning", "sleeping", "running"]

    def test_sessions_are_isolated(self):
        """Two sessions bound to one store do not see each other."""
        # Arrange
        store = MemoryStore()
        definition = _robot_flow()
        controllers = {}
        for key in ("tab1", "tab2"):
            load, save = store.bind(key)

            def seeded(load=load):
                state = load()
                state.data.setdefault("nights", 1)
                return state

            controllers[key] = FlowController(definition, load=seeded, save=save)

        # Act
        controllers["tab1"].handle("run")

        # Assert
        assert store.peek("tab1").current == "running"
        assert store.peek("tab2") is None
        assert controllers["tab2"].handle("clean").fired is False


# ---------------------------------------------------------------------------
# Survey: welcome -> favorite day form -> favorite_day | goodbye
# ---------------------------------------------------------------------------

def _survey_flow(today):
    def show_form(ctx):
        ctx.state["days"] = list(DAYS)
        info = ctx.params.get("information")
        if info and info.get("name") and info.get("favorite_day") is not None:
            ctx.state["name"] = info["name"]
            ctx.state["favorite_day"] = int(info["favorite_day"])
            ctx.state["valid"] = True

    def say_goodbye(ctx):
        ctx.state["day"] = DAYS[today()]

    flow = FlowBuilder()
    flow.view("welcome", initial=True)
    flow.view("what_is_your_favorite_day", hook=show_form)
    flow.view("favorite_day")
    flow.view("goodbye")

    flow.action("ask").transitions("what_is_your_favorite_day", from_="welcome")
    (flow.action("submit", if_="valid?")
        .transitions("favorite_day", from_="what_is_your_favorite_day", if_="favorite?")
        .transitions("goodbye", from_="what_is_your_favorite_day"))
    flow.action("finish").transitions("goodbye")

    flow.before_view("goodbye", say_goodbye)
    flow.state_guard("valid?")
    flow.guard("favorite?", lambda ctx: today() == ctx.state.get("favorite_day"))
    return flow.build()


class TestSurveyFlow:
    """Form-style flow where a hook validates and guards branch."""

    def _controller(self, store, today=2):
        return FlowController(_survey_flow(lambda: today), load=store.load, save=store.save)

    def test_invalid_submission_stays_on_form(self):
        # Arrange
        store = MemoryStore()
        controller = self._controller(store)
        controller.handle("ask")

        # Act
        result = controller.handle("submit", {"information": {"name": ""}})

        # Assert
        assert result.fired is False
        assert result.view == "what_is_your_favorite_day"
        assert "valid" not in store.peek()

    def test_favorite_day_branch(self):
        # Arrange
        store = MemoryStore()
        controller = self._controller(store, today=2)
        controller.handle("ask")

        # Act
        result = controller.handle(
            "submit", {"information": {"name": "Ada", "favorite_day": "2"}},
        )

        # Assert
        assert result.view == "favorite_day"
        assert store.peek()["name"] == "Ada"
        assert store.peek()["valid"] is True

    def test_other_day_branch_runs_goodbye_hook(self):
        # Arrange
        store = MemoryStore()
        controller = self._controller(store, today=4)
        controller.handle("ask")

        # Act
        result = controller.handle(
            "submit", {"information": {"name": "Ada", "favorite_day": "0"}},
        )

        # Assert
        assert result.view == "goodbye"
        assert store.peek()["day"] == "Friday"

    def test_finish_from_anywhere(self):
        store = MemoryStore()
        controller = self._controller(store)
        assert controller.handle("finish").view == "goodbye"

    def test_start_at_form_runs_its_hook(self):
        store = MemoryStore()
        controller = self._controller(store)
        result = controller.handle("start", {"initial": "what_is_your_favorite_day"})
        assert result.view == "what_is_your_favorite_day"
        assert result.state["days"] == DAYS
        assert store.peek() is None

    def test_next_chooses_event_before_form_hook_validates(self):
        """'next' picks its event before the hook sets 'valid', so submit is skipped."""
        # Arrange
        store = MemoryStore()
        controller = self._controller(store, today=2)
        controller.handle("ask")

        # Act
        result = controller.handle(
            "next", {"information": {"name": "Ada", "favorite_day": "2"}},
        )

        # Assert
        assert result.event == "finish"
        assert result.view == "goodbye"
