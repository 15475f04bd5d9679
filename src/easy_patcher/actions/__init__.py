"""File actions attached to tasks (move, copy, delete, unzip)."""

from easy_patcher.actions.runner import run_action, run_actions

__all__ = [
    "run_action",
    "run_actions",
]
