"""Interactive menu state machine.

One loop drives every screen: each handler returns a MenuEvent and the pure
``next_state`` table decides where to go. Handlers never call each other.
"""

from enum import Enum
from typing import Callable

from langgraph.errors import GraphRecursionError
from loguru import logger

from easy_patcher.actions.runner import run_actions
from easy_patcher.models import Action, ActionCommand, Task
from easy_patcher.orchestrator.exceptions import OrchestratorError
from easy_patcher.orchestrator.runner import PatchRunner
from easy_patcher.orchestrator.state import PatchRunState
from easy_patcher.patch.exceptions import PatchError
from easy_patcher.prompter import ConsolePrompter
from easy_patcher.store.exceptions import StoreError
from easy_patcher.store.task_store import TaskStore


class MenuState(str, Enum):
    MAIN_MENU = "main_menu"
    SETTINGS = "settings"
    TASK_MENU = "task_menu"
    PATCH_SELECTION = "patch_selection"
    EXIT = "exit"


class MenuEvent(str, Enum):
    STAY = "stay"
    BACK = "back"
    OPEN_SETTINGS = "open_settings"
    OPEN_TASK = "open_task"
    BUILD_PATCH = "build_patch"
    DONE = "done"
    EXIT = "exit"


TRANSITIONS: dict[tuple[MenuState, MenuEvent], MenuState] = {
    (MenuState.MAIN_MENU, MenuEvent.STAY): MenuState.MAIN_MENU,
    (MenuState.MAIN_MENU, MenuEvent.OPEN_SETTINGS): MenuState.SETTINGS,
    (MenuState.MAIN_MENU, MenuEvent.BUILD_PATCH): MenuState.PATCH_SELECTION,
    (MenuState.SETTINGS, MenuEvent.STAY): MenuState.SETTINGS,
    (MenuState.SETTINGS, MenuEvent.OPEN_TASK): MenuState.TASK_MENU,
    (MenuState.SETTINGS, MenuEvent.BACK): MenuState.MAIN_MENU,
    (MenuState.TASK_MENU, MenuEvent.STAY): MenuState.TASK_MENU,
    (MenuState.TASK_MENU, MenuEvent.BUILD_PATCH): MenuState.PATCH_SELECTION,
    (MenuState.TASK_MENU, MenuEvent.BACK): MenuState.SETTINGS,
    (MenuState.PATCH_SELECTION, MenuEvent.DONE): MenuState.MAIN_MENU,
    (MenuState.PATCH_SELECTION, MenuEvent.BACK): MenuState.MAIN_MENU,
}


def next_state(state: MenuState, event: MenuEvent) -> MenuState:
    """Pure transition function. EXIT is reachable from every state.

    Raises:
        ValueError: If the event is not valid in the given state.
    """
    if event == MenuEvent.EXIT:
        return MenuState.EXIT
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise ValueError(f"No transition from {state.value} on {event.value}") from None


MAIN_OPTIONS = ["Build patch", "Run task actions", "Settings", "Exit"]
SETTINGS_OPTIONS = ["New task", "Task list"]
TASK_OPTIONS = [
    "Add project",
    "Set project artifact",
    "Add target file",
    "New action",
    "List projects",
    "List actions",
    "Build patch",
    "Delete task",
]


def report_patch_run(prompter: ConsolePrompter, result: PatchRunState) -> None:
    """Show notices, errors and produced bundles of a finished patch run."""
    for notice in result.get("notices", []):
        prompter.notice(notice)
    for error in result.get("errors", []):
        prompter.notice(error, style="red")
    outputs = result.get("outputs", [])
    if outputs:
        prompter.show_outputs(outputs)


class MenuApp:
    """Menu loop over the task store, actions and patch runs."""

    def __init__(
        self,
        store: TaskStore,
        prompter: ConsolePrompter,
        patch_runner: PatchRunner,
    ) -> None:
        self.store = store
        self.prompter = prompter
        self.patch_runner = patch_runner
        self.task_name: str | None = None
        self._handlers: dict[MenuState, Callable[[], MenuEvent]] = {
            MenuState.MAIN_MENU: self.main_menu,
            MenuState.SETTINGS: self.settings_menu,
            MenuState.TASK_MENU: self.task_menu,
            MenuState.PATCH_SELECTION: self.patch_selection,
        }

    def run(self, state: MenuState = MenuState.MAIN_MENU) -> MenuState:
        while state != MenuState.EXIT:
            event = self._handlers[state]()
            logger.debug(f"Menu {state.value} -> {event.value}")
            state = next_state(state, event)
        return state

    # -- screens -------------------------------------------------------------

    def main_menu(self) -> MenuEvent:
        choice = self.prompter.select("Easy Patcher", MAIN_OPTIONS, back=False)
        if choice == 0:
            task_name = self._choose_task("Task to patch")
            if task_name is None:
                return MenuEvent.STAY
            self.task_name = task_name
            return MenuEvent.BUILD_PATCH
        if choice == 1:
            task_name = self._choose_task("Task to run")
            if task_name is not None:
                self._run_task_actions(task_name)
            return MenuEvent.STAY
        if choice == 2:
            return MenuEvent.OPEN_SETTINGS
        return MenuEvent.EXIT

    def settings_menu(self) -> MenuEvent:
        choice = self.prompter.select("Settings", SETTINGS_OPTIONS)
        if choice is None:
            return MenuEvent.BACK
        if choice == 0:
            name = self.prompter.ask_text("New task name")
            if name.strip():
                self._guarded(self.store.add_task, name)
            return MenuEvent.STAY
        task_name = self._choose_task("Tasks")
        if task_name is None:
            return MenuEvent.STAY
        self.task_name = task_name
        return MenuEvent.OPEN_TASK

    def task_menu(self) -> MenuEvent:
        task = self._guarded(self.store.get_task, self.task_name)
        if not task:
            return MenuEvent.BACK

        choice = self.prompter.select(f"Task: {task.name}", TASK_OPTIONS)
        if choice is None:
            return MenuEvent.BACK
        option = TASK_OPTIONS[choice]
        if option == "Build patch":
            return MenuEvent.BUILD_PATCH
        if option == "Delete task":
            if self.prompter.confirm(f"Delete task '{task.name}'?", default=False):
                if self._guarded(self.store.delete_task, task.name) is not False:
                    self.task_name = None
                    return MenuEvent.BACK
            return MenuEvent.STAY

        if option == "Add project":
            self._add_project(task)
        elif option == "Set project artifact":
            self._set_artifact(task)
        elif option == "Add target file":
            self._add_target_file(task)
        elif option == "New action":
            self._new_action(task)
        elif option == "List projects":
            self._list_projects(task)
        else:
            self._list_actions(task)
        return MenuEvent.STAY

    def patch_selection(self) -> MenuEvent:
        if self.task_name is None:
            return MenuEvent.BACK
        try:
            result = self.patch_runner.run(self.task_name)
        except (StoreError, OrchestratorError, PatchError, GraphRecursionError) as exc:
            logger.error(f"Patch run for {self.task_name} failed: {exc}")
            self.prompter.notice(f"Patch run failed: {exc}", style="red")
            return MenuEvent.BACK
        report_patch_run(self.prompter, result)
        return MenuEvent.DONE

    # -- task editing --------------------------------------------------------

    def _add_project(self, task: Task) -> None:
        path = self.prompter.ask_text("Project directory").strip()
        if not path:
            return
        artifact = self.prompter.ask_text("Artifact path (empty for none)").strip()
        project = self._guarded(self.store.add_project, task.name, path, artifact or None)
        if project:
            self.prompter.notice(
                f"Registered {project.path} ({project.vcs_kind.value})", style="green"
            )

    def _set_artifact(self, task: Task) -> None:
        if not task.projects:
            self.prompter.notice("No projects registered.")
            return
        choice = self.prompter.select("Project", [project.path for project in task.projects])
        if choice is None:
            return
        project = task.projects[choice]
        artifact = self.prompter.ask_text(
            "Artifact path (empty to clear)", default=project.artifact_path or ""
        ).strip()
        self._guarded(self.store.set_artifact, task.name, project.path, artifact or None)

    def _add_target_file(self, task: Task) -> None:
        path = self.prompter.ask_text("File path").strip()
        if path:
            self._guarded(self.store.add_target_file, task.name, path)

    def _new_action(self, task: Task) -> None:
        if not task.target_files:
            self.prompter.notice("Add a target file first.")
            return
        commands = list(ActionCommand)
        command_choice = self.prompter.select("Command", [command.value for command in commands])
        if command_choice is None:
            return
        file_choice = self.prompter.select(
            "Target file", [f"{item.name} ({item.path})" for item in task.target_files]
        )
        if file_choice is None:
            return
        command = commands[command_choice]
        destination = None
        if command != ActionCommand.DELETE:
            destination = self.prompter.ask_text("Destination").strip()
        try:
            action = Action(
                target_file=task.target_files[file_choice],
                destination=destination or None,
                command=command,
            )
        except ValueError as exc:
            self.prompter.notice(str(exc), style="red")
            return
        self._guarded(self.store.add_action, task.name, action)

    def _list_projects(self, task: Task) -> None:
        if not task.projects:
            self.prompter.notice("No projects registered.")
        for project in task.projects:
            artifact = project.artifact_path or "-"
            self.prompter.notice(
                f"{project.path} [{project.vcs_kind.value}] artifact: {artifact}", style="cyan"
            )

    def _list_actions(self, task: Task) -> None:
        if not task.actions:
            self.prompter.notice("No actions defined.")
        for number, action in enumerate(task.actions, start=1):
            destination = f" -> {action.destination}" if action.destination else ""
            self.prompter.notice(
                f"{number}. {action.command.value} {action.target_file.path}{destination}",
                style="cyan",
            )

    # -- helpers -------------------------------------------------------------

    def _choose_task(self, title: str) -> str | None:
        names = self._guarded(self.store.task_names)
        if not names:
            self.prompter.notice("No tasks defined. Create one under Settings.")
            return None
        choice = self.prompter.select(title, names)
        return None if choice is None else names[choice]

    def _run_task_actions(self, task_name: str) -> None:
        task = self._guarded(self.store.get_task, task_name)
        if not task:
            return
        if not task.actions:
            self.prompter.notice(f"Task '{task_name}' has no actions.")
            return
        self.prompter.show_action_results(run_actions(task))

    def _guarded(self, func, *args):
        """Call a store operation, reporting StoreError as a notice.

        Returns the call's result, or False when the store refused it.
        """
        try:
            result = func(*args)
        except StoreError as exc:
            self.prompter.notice(str(exc), style="red")
            return False
        return True if result is None else result
