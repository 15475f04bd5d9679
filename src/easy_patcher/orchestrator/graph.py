"""LangGraph orchestrator graph for a patch run.

Wires the VCS providers, the operator prompter, the artifact stager, the
output assembler and the script generator into a StateGraph that loops over
the projects of a task, then gates packaging on one confirmation.
"""

from typing import Callable, Mapping

from langgraph.graph import END, START, StateGraph
from loguru import logger

from easy_patcher.deploy.generator import ScriptGenerator
from easy_patcher.models import ChangeEntry, PatchOutput, RevisionRecord, VcsKind
from easy_patcher.orchestrator.exceptions import GraphBuildError
from easy_patcher.orchestrator.routing import (
    current_project,
    next_project_or_confirm,
    recursion_limit_for,
    route_confirmation,
    route_start,
)
from easy_patcher.orchestrator.state import PatchRunState
from easy_patcher.patch.change_set import fold_changes, order_for_fold
from easy_patcher.patch.exceptions import ArtifactStagingError, PatchError
from easy_patcher.patch.output import OutputAssembler
from easy_patcher.patch.stager import ArtifactStager
from easy_patcher.prompter import ConsolePrompter
from easy_patcher.vcs.base import VcsProvider
from easy_patcher.vcs.exceptions import HistoryQueryError, RevisionNotFoundError
from easy_patcher.vcs.factory import get_provider

# Abort detection prefix, checked by the CLI
ABORT_PREFIX = "ABORT:"


def default_providers(timeout: float | None = None) -> dict[VcsKind, VcsProvider]:
    return {kind: get_provider(kind, timeout=timeout) for kind in VcsKind}


def make_history_node(
    providers: Mapping[VcsKind, VcsProvider],
) -> Callable[[PatchRunState], dict]:
    """Factory: returns a node closure that fetches the current project's history.

    On HistoryQueryError the project gets no candidates, which excludes it
    from the rest of the run. Empty history is reported as a notice.
    """

    def history_node(state: PatchRunState) -> dict:
        project = current_project(state)
        if project is None:
            return {"candidates": []}

        provider = providers[project.vcs_kind]
        try:
            history = provider.fetch_history(project.path, state["history_limit"])
        except HistoryQueryError as exc:
            logger.warning(f"History query failed for {project.path}: {exc}")
            return {
                "candidates": [],
                "errors": [f"history_node [{project.path}] project excluded: {exc}"],
            }

        if not history:
            return {
                "candidates": [],
                "notices": [f"{project.path}: {provider.empty_history_notice}"],
            }
        return {"candidates": history}

    return history_node


def make_select_node(prompter: ConsolePrompter) -> Callable[[PatchRunState], dict]:
    """Factory: returns a node closure that asks which revisions to include.

    Selecting nothing drops the project from the run.
    """

    def select_node(state: PatchRunState) -> dict:
        project = current_project(state)
        candidates = state["candidates"]
        if project is None or not candidates:
            return {"candidates": candidates}

        indices = prompter.multi_select(
            f"Revisions of {project.path} ({project.vcs_kind.value}), newest first",
            [revision.label for revision in candidates],
        )
        selected = [candidates[i] for i in indices]
        if not selected:
            return {"notices": [f"{project.path}: no revisions selected; project skipped"]}

        selections = dict(state["selections"])
        selections[project.path] = order_for_fold(selected, candidates)
        return {"selections": selections}

    return select_node


def make_extract_node(
    providers: Mapping[VcsKind, VcsProvider],
) -> Callable[[PatchRunState], dict]:
    """Factory: returns a node closure that folds the selected revisions.

    The closure:
    1. Queries the changed files of each selected revision, oldest first
    2. Skips a revision raising RevisionNotFoundError
    3. Excludes the whole project on any other HistoryQueryError
    4. Folds the surviving revisions into the project's change set
    5. Advances current_project_index
    """

    def extract_node(state: PatchRunState) -> dict:
        update: dict = {
            "current_project_index": state["current_project_index"] + 1,
            "candidates": [],
        }
        project = current_project(state)
        if project is None or project.path not in state["selections"]:
            return update

        provider = providers[project.vcs_kind]
        kept: list[RevisionRecord] = []
        per_revision: list[list[ChangeEntry]] = []
        errors: list[str] = []
        excluded = False

        for revision in state["selections"][project.path]:
            try:
                entries = provider.changed_files(project.path, revision.id)
            except RevisionNotFoundError as exc:
                errors.append(
                    f"extract_node [{project.path}] revision {revision.id} skipped: {exc}"
                )
                continue
            except HistoryQueryError as exc:
                errors.append(f"extract_node [{project.path}] project excluded: {exc}")
                excluded = True
                break
            kept.append(revision)
            per_revision.append(entries)

        selections = dict(state["selections"])
        change_sets = dict(state["change_sets"])
        change_set = {} if excluded else fold_changes(per_revision)

        if change_set:
            selections[project.path] = kept
            change_sets[project.path] = change_set
        else:
            selections.pop(project.path, None)
            change_sets.pop(project.path, None)
            if not excluded:
                update["notices"] = [f"{project.path}: selected revisions changed no files; project skipped"]

        update["selections"] = selections
        update["change_sets"] = change_sets
        update["errors"] = errors
        return update

    return extract_node


def make_confirm_node(prompter: ConsolePrompter) -> Callable[[PatchRunState], dict]:
    """Factory: returns the confirmation gate shown before anything is written."""

    def confirm_node(state: PatchRunState) -> dict:
        if not state["change_sets"]:
            return {
                "confirmed": False,
                "notices": ["Nothing to package: no project has selected changes."],
            }

        entries = [
            (project, state["selections"][project.path], state["change_sets"][project.path])
            for project in state["projects"]
            if project.path in state["change_sets"]
        ]
        prompter.show_change_sets(entries)
        confirmed = prompter.confirm(
            f"Build patch packages for {len(entries)} project(s)?", default=False
        )
        return {"confirmed": bool(confirmed)}

    return confirm_node


def make_package_node(
    stager: ArtifactStager,
    assembler: OutputAssembler,
    generator: ScriptGenerator,
) -> Callable[[PatchRunState], dict]:
    """Factory: returns a node closure that writes one bundle per project.

    A staging failure skips only that project's artifact and flags the output.
    An assembly or generation failure skips only that project.
    """

    def package_node(state: PatchRunState) -> dict:
        outputs: list[PatchOutput] = []
        notices: list[str] = []
        errors: list[str] = []

        for project in state["projects"]:
            change_set = state["change_sets"].get(project.path)
            if change_set is None:
                continue

            staged = None
            warning = None
            if project.artifact_path:
                try:
                    staged = stager.stage(project.artifact_path)
                except ArtifactStagingError as exc:
                    warning = str(exc)
                    notices.append(f"{project.path}: artifact skipped: {exc}")

            try:
                output = assembler.assemble(
                    project,
                    state["selections"][project.path],
                    change_set,
                    state["run_label"],
                    staged_artifact=staged,
                    artifact_warning=warning,
                )
                output.script_path = str(generator.generate(output.output_dir))
            except PatchError as exc:
                errors.append(f"package_node [{project.path}]: {exc}")
                continue
            outputs.append(output)

        return {"outputs": outputs, "notices": notices, "errors": errors}

    return package_node


def abort_node(state: PatchRunState) -> dict:
    """Record that the operator declined; nothing has been written."""
    return {
        "aborted": True,
        "notices": [f"{ABORT_PREFIX} confirmation declined; no files were written."],
    }


def build_graph(
    prompter: ConsolePrompter,
    stager: ArtifactStager,
    assembler: OutputAssembler,
    generator: ScriptGenerator,
    providers: Mapping[VcsKind, VcsProvider] | None = None,
):
    """Build and compile the patch-run StateGraph.

    Edge topology:
      START -> conditional(route_start) -> {history_node, confirm_node}
      history_node -> select_node -> extract_node
      extract_node -> conditional(next_project_or_confirm) -> {history_node, confirm_node}
      confirm_node -> conditional(route_confirmation) -> {package_node, abort_node, END}
      package_node -> END
      abort_node -> END

    Args:
        prompter: Operator prompts for selection and confirmation.
        stager: Artifact stager.
        assembler: Output assembler bound to the output root.
        generator: Apply script generator.
        providers: VCS providers by kind; defaults to one of each.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        providers = providers if providers is not None else default_providers()
        graph = StateGraph(PatchRunState)

        graph.add_node("history_node", make_history_node(providers))
        graph.add_node("select_node", make_select_node(prompter))
        graph.add_node("extract_node", make_extract_node(providers))
        graph.add_node("confirm_node", make_confirm_node(prompter))
        graph.add_node("package_node", make_package_node(stager, assembler, generator))
        graph.add_node("abort_node", abort_node)

        graph.add_conditional_edges(
            START,
            route_start,
            {
                "history": "history_node",
                "confirm": "confirm_node",
            },
        )
        graph.add_edge("history_node", "select_node")
        graph.add_edge("select_node", "extract_node")

        graph.add_conditional_edges(
            "extract_node",
            next_project_or_confirm,
            {
                "continue": "history_node",
                "confirm": "confirm_node",
            },
        )
        graph.add_conditional_edges(
            "confirm_node",
            route_confirmation,
            {
                "package": "package_node",
                "abort": "abort_node",
                "done": END,
            },
        )

        graph.add_edge("package_node", END)
        graph.add_edge("abort_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build patch graph: {exc}") from exc


def run_patch_graph(graph, state: PatchRunState) -> PatchRunState:
    """Invoke a compiled graph with a recursion limit sized to the project count."""
    limit = recursion_limit_for(len(state["projects"]))
    return graph.invoke(state, {"recursion_limit": limit})
