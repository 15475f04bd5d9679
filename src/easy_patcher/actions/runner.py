"""Runs a task's simple file actions in order."""

import shutil
from pathlib import Path

from loguru import logger

from easy_patcher.models import Action, ActionCommand, ActionResult, Task
from easy_patcher.patch.exceptions import ArtifactStagingError
from easy_patcher.patch.stager import extract_archive


def move_file(source: str, destination: str) -> str:
    dest = Path(destination)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(source, dest)
    return f"moved to {dest}"


def copy_file(source: str, destination: str) -> str:
    dest = Path(destination)
    if dest.is_dir():
        dest = dest / Path(source).name
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest)
    return f"copied to {dest}"


def delete_file(source: str) -> str:
    Path(source).unlink()
    return "deleted"


def unzip_file(source: str, destination: str) -> str:
    extracted = extract_archive(source, destination)
    return f"extracted {len(extracted)} files to {destination}"


def run_action(action: Action) -> ActionResult:
    """Run one action; failures are reported in the result, not raised."""
    source = action.target_file.path
    try:
        if action.command == ActionCommand.MOVE:
            message = move_file(source, action.destination)
        elif action.command == ActionCommand.COPY:
            message = copy_file(source, action.destination)
        elif action.command == ActionCommand.DELETE:
            message = delete_file(source)
        else:
            message = unzip_file(source, action.destination)
    except (OSError, ArtifactStagingError) as exc:
        logger.warning(f"{action.command.value} {source} failed: {exc}")
        return ActionResult(
            command=action.command,
            source=source,
            destination=action.destination,
            success=False,
            message=str(exc),
        )
    return ActionResult(
        command=action.command,
        source=source,
        destination=action.destination,
        success=True,
        message=message,
    )


def run_actions(task: Task) -> list[ActionResult]:
    """Run every action of a task in order, continuing past failures."""
    results = [run_action(action) for action in task.actions]
    failed = sum(1 for result in results if not result.success)
    logger.info(f"Task {task.name}: {len(results) - failed} actions succeeded, {failed} failed")
    return results
