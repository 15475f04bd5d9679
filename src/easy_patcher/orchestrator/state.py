"""State definition for the LangGraph patch-run pipeline."""

import operator
from typing import Annotated, TypedDict

from easy_patcher.models import PatchOutput, Project, ProjectChangeSet, RevisionRecord
from easy_patcher.vcs.base import DEFAULT_HISTORY_LIMIT


class PatchRunState(TypedDict):
    """State for one patch run over the projects of a task.

    Fields with Annotated[list, operator.add] reducers accumulate across nodes.
    All other fields use default overwrite semantics.
    """

    # Input
    task_name: str
    projects: list[Project]
    run_label: str
    history_limit: int | None

    # Per-project loop
    current_project_index: int
    candidates: list[RevisionRecord]  # History of the current project, newest first

    # Keyed by project path; projects dropped from the run have no key
    selections: dict[str, list[RevisionRecord]]  # Fold order, oldest first
    change_sets: dict[str, ProjectChangeSet]

    # Confirmation gate
    confirmed: bool
    aborted: bool

    # Accumulating results
    outputs: Annotated[list[PatchOutput], operator.add]
    notices: Annotated[list[str], operator.add]
    errors: Annotated[list[str], operator.add]


def make_initial_state(
    task_name: str,
    projects: list[Project],
    run_label: str,
    history_limit: int | None = DEFAULT_HISTORY_LIMIT,
) -> PatchRunState:
    """Create the initial state for a patch run.

    Args:
        task_name: Name of the task whose projects are patched.
        projects: Projects in registration order.
        run_label: Timestamp label shared by every output of the run.
        history_limit: Maximum revisions listed per project (None for all).

    Returns:
        PatchRunState dict with all fields initialised to defaults.
    """
    return {
        "task_name": task_name,
        "projects": list(projects),
        "run_label": run_label,
        "history_limit": history_limit,
        "current_project_index": 0,
        "candidates": [],
        "selections": {},
        "change_sets": {},
        "confirmed": False,
        "aborted": False,
        "outputs": [],
        "notices": [],
        "errors": [],
    }
