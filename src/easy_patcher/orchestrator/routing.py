"""Pure helper functions for patch-run routing.

All functions are stateless and have no external dependencies.
"""

from easy_patcher.models import Project
from easy_patcher.orchestrator.state import PatchRunState

# Nodes visited per project (history, select, extract) plus fixed overhead
NODES_PER_PROJECT = 3
RECURSION_OVERHEAD = 10


def current_project(state: PatchRunState) -> Project | None:
    """Return the project at current_project_index, or None if out of bounds."""
    projects = state["projects"]
    idx = state["current_project_index"]
    if 0 <= idx < len(projects):
        return projects[idx]
    return None


def route_start(state: PatchRunState) -> str:
    """Router for START: "history" when there is a project to process, else "confirm"."""
    if state["projects"]:
        return "history"
    return "confirm"


def next_project_or_confirm(state: PatchRunState) -> str:
    """Router after extract_node: "continue" while projects remain, "confirm" after the last."""
    if current_project(state) is not None:
        return "continue"
    return "confirm"


def route_confirmation(state: PatchRunState) -> str:
    """Router after confirm_node.

    Returns:
        "done" if nothing was selected, "package" if the operator confirmed,
        "abort" otherwise.
    """
    if not state["change_sets"]:
        return "done"
    if state["confirmed"]:
        return "package"
    return "abort"


def recursion_limit_for(project_count: int) -> int:
    return NODES_PER_PROJECT * project_count + RECURSION_OVERHEAD
