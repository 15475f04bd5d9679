"""Runs the patch graph for one stored task."""

from datetime import datetime
from pathlib import Path
from typing import Mapping

from loguru import logger

from easy_patcher.deploy.generator import ScriptGenerator
from easy_patcher.models import VcsKind
from easy_patcher.orchestrator.graph import build_graph, run_patch_graph
from easy_patcher.orchestrator.state import PatchRunState, make_initial_state
from easy_patcher.patch.output import OutputAssembler, make_run_label
from easy_patcher.patch.stager import ArtifactStager
from easy_patcher.prompter import ConsolePrompter
from easy_patcher.store.task_store import TaskStore
from easy_patcher.vcs.base import DEFAULT_HISTORY_LIMIT, VcsProvider


class PatchRunner:
    """Loads a task from the store and drives one patch run over its projects."""

    def __init__(
        self,
        store: TaskStore,
        prompter: ConsolePrompter,
        output_root: str | Path,
        history_limit: int | None = DEFAULT_HISTORY_LIMIT,
        providers: Mapping[VcsKind, VcsProvider] | None = None,
    ) -> None:
        self.store = store
        self.prompter = prompter
        self.output_root = Path(output_root)
        self.history_limit = history_limit
        self.providers = providers

    def run(self, task_name: str, now: datetime | None = None) -> PatchRunState:
        """Run the patch graph for a task.

        Raises:
            TaskNotFoundError: If the task does not exist.
            GraphBuildError: If the graph cannot be built.
        """
        task = self.store.get_task(task_name)
        graph = build_graph(
            prompter=self.prompter,
            stager=ArtifactStager(),
            assembler=OutputAssembler(self.output_root),
            generator=ScriptGenerator(),
            providers=self.providers,
        )
        state = make_initial_state(
            task_name=task.name,
            projects=task.projects,
            run_label=make_run_label(now),
            history_limit=self.history_limit,
        )
        logger.info(f"Starting patch run {state['run_label']} for task {task.name}")
        return run_patch_graph(graph, state)
