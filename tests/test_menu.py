"""Tests for the menu state machine and its screens."""

from unittest.mock import MagicMock

import pytest
from langgraph.errors import GraphRecursionError

from easy_patcher.cli.menu import (
    TASK_OPTIONS,
    TRANSITIONS,
    MenuApp,
    MenuEvent,
    MenuState,
    next_state,
)
from easy_patcher.models import ActionCommand
from easy_patcher.orchestrator.exceptions import GraphBuildError
from easy_patcher.patch.exceptions import OutputAssemblyError
from easy_patcher.store.task_store import TaskStore


@pytest.fixture
def store(tmp_path):
    return TaskStore(tmp_path / "config.json")


@pytest.fixture
def prompter():
    return MagicMock()


@pytest.fixture
def runner():
    runner = MagicMock()
    runner.run.return_value = {"notices": [], "errors": [], "outputs": []}
    return runner


def make_app(store, prompter, runner, selects, texts=()):
    prompter.select.side_effect = list(selects)
    prompter.ask_text.side_effect = list(texts)
    return MenuApp(store, prompter, runner)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

class TestNextState:
    @pytest.mark.parametrize("state", list(MenuState))
    def test_exit_reachable_from_every_state(self, state):
        assert next_state(state, MenuEvent.EXIT) == MenuState.EXIT

    def test_back_chain_leads_to_main_menu(self):
        state = MenuState.TASK_MENU
        state = next_state(state, MenuEvent.BACK)
        assert state == MenuState.SETTINGS
        assert next_state(state, MenuEvent.BACK) == MenuState.MAIN_MENU

    def test_patch_selection_returns_to_main(self):
        assert next_state(MenuState.PATCH_SELECTION, MenuEvent.DONE) == MenuState.MAIN_MENU

    def test_invalid_transition(self):
        with pytest.raises(ValueError):
            next_state(MenuState.MAIN_MENU, MenuEvent.BACK)

    def test_exit_has_no_outgoing_edges(self):
        assert all(source != MenuState.EXIT for source, _ in TRANSITIONS)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class TestMenuApp:
    def test_create_task_from_settings(self, store, prompter, runner):
        app = make_app(store, prompter, runner, selects=[2, 0, None, 3], texts=["release"])
        assert app.run() == MenuState.EXIT
        assert store.task_names() == ["release"]

    def test_back_has_no_side_effects(self, store, prompter, runner):
        app = make_app(store, prompter, runner, selects=[2, None, 3])
        app.run()
        assert not store.config_path.exists()
        runner.run.assert_not_called()

    def test_duplicate_task_reported_not_raised(self, store, prompter, runner):
        store.add_task("release")
        app = make_app(store, prompter, runner, selects=[2, 0, None, 3], texts=["release"])
        app.run()
        assert any("already" in str(c.args[0]) for c in prompter.notice.call_args_list)

    def test_build_patch_from_main_menu(self, store, prompter, runner):
        store.add_task("release")
        runner.run.return_value = {"notices": ["all good"], "errors": ["oops"], "outputs": []}
        app = make_app(store, prompter, runner, selects=[0, 0, 3])
        app.run()
        runner.run.assert_called_once_with("release")
        prompter.notice.assert_any_call("all good")
        prompter.notice.assert_any_call("oops", style="red")

    def test_build_patch_without_tasks(self, store, prompter, runner):
        app = make_app(store, prompter, runner, selects=[0, 3])
        app.run()
        runner.run.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            GraphBuildError("broken"),
            OutputAssemblyError("broken"),
            GraphRecursionError("broken"),
        ],
    )
    def test_patch_run_failure_returns_to_main(self, store, prompter, runner, error):
        store.add_task("release")
        runner.run.side_effect = error
        app = make_app(store, prompter, runner, selects=[0, 0, 3])
        assert app.run() == MenuState.EXIT
        prompter.notice.assert_any_call("Patch run failed: broken", style="red")

    def test_add_project_in_task_menu(self, store, prompter, runner, project_dir):
        store.add_task("release")
        app = make_app(
            store, prompter, runner,
            selects=[2, 1, 0, 0, None, None, 3],
            texts=[str(project_dir), ""],
        )
        app.run()
        projects = store.get_task("release").projects
        assert [p.path for p in projects] == [str(project_dir.resolve())]
        assert projects[0].artifact_path is None

    def test_new_action(self, store, prompter, runner):
        store.add_task("release")
        store.add_target_file("release", "/build/app.war")
        app = make_app(
            store, prompter, runner,
            selects=[TASK_OPTIONS.index("New action"), 1, 0, None, None, 3],
            texts=["/deploy"],
        )
        app.task_name = "release"
        app.run(MenuState.TASK_MENU)
        action = store.get_task("release").actions[0]
        assert action.command == ActionCommand.COPY
        assert action.destination == "/deploy"

    def test_new_action_needs_target_file(self, store, prompter, runner):
        store.add_task("release")
        app = make_app(
            store, prompter, runner,
            selects=[TASK_OPTIONS.index("New action"), None, None, 3],
        )
        app.task_name = "release"
        app.run(MenuState.TASK_MENU)
        assert store.get_task("release").actions == []
        prompter.notice.assert_any_call("Add a target file first.")

    def test_delete_task(self, store, prompter, runner):
        store.add_task("release")
        prompter.confirm.return_value = True
        app = make_app(store, prompter, runner, selects=[TASK_OPTIONS.index("Delete task"), None, 3])
        app.task_name = "release"
        app.run(MenuState.TASK_MENU)
        assert store.task_names() == []

    def test_build_patch_from_task_menu(self, store, prompter, runner):
        store.add_task("release")
        app = make_app(store, prompter, runner, selects=[TASK_OPTIONS.index("Build patch"), 3])
        app.task_name = "release"
        app.run(MenuState.TASK_MENU)
        runner.run.assert_called_once_with("release")

    def test_run_task_without_actions(self, store, prompter, runner):
        store.add_task("release")
        app = make_app(store, prompter, runner, selects=[1, 0, 3])
        app.run()
        prompter.notice.assert_any_call("Task 'release' has no actions.")
        prompter.show_action_results.assert_not_called()
