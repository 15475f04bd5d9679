"""LangGraph orchestrator package for patch runs."""

from easy_patcher.orchestrator.exceptions import GraphBuildError, OrchestratorError
from easy_patcher.orchestrator.graph import ABORT_PREFIX, build_graph, run_patch_graph
from easy_patcher.orchestrator.runner import PatchRunner
from easy_patcher.orchestrator.state import PatchRunState, make_initial_state

__all__ = [
    "ABORT_PREFIX",
    "GraphBuildError",
    "OrchestratorError",
    "PatchRunState",
    "PatchRunner",
    "build_graph",
    "make_initial_state",
    "run_patch_graph",
]
