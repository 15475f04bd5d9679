"""JSON-file persistence for tasks, projects, target files and actions."""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger
from pydantic import ValidationError

from easy_patcher.models import Action, AppConfig, Project, TargetFile, Task
from easy_patcher.store.exceptions import (
    ConfigStoreError,
    DuplicateTaskError,
    TaskNotFoundError,
)
from easy_patcher.vcs.factory import detect_vcs_kind

DEFAULT_CONFIG_PATH = "config.json"


class TaskStore:
    """Whole-file read-modify-write store for the task configuration.

    Every mutation loads the file, changes the in-memory document and writes
    it back through a temporary file, so a failed write never leaves a
    truncated store behind. Concurrent writers are not guarded against.
    """

    def __init__(self, config_path: str | Path = DEFAULT_CONFIG_PATH) -> None:
        self.config_path = Path(config_path)

    def load(self) -> AppConfig:
        """Load the store. A missing file yields an empty configuration.

        Raises:
            ConfigStoreError: If the file exists but cannot be read or parsed.
        """
        if not self.config_path.exists():
            return AppConfig()
        try:
            raw = self.config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigStoreError(f"Cannot read {self.config_path}: {exc}") from exc
        if not raw.strip():
            return AppConfig()
        try:
            return AppConfig.model_validate_json(raw)
        except ValidationError as exc:
            raise ConfigStoreError(f"Invalid task store {self.config_path}: {exc}") from exc

    def save(self, config: AppConfig) -> None:
        tmp_path = self.config_path.with_name(self.config_path.name + ".tmp")
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, self.config_path)
        except OSError as exc:
            raise ConfigStoreError(f"Cannot write {self.config_path}: {exc}") from exc

    def load_tasks(self) -> list[Task]:
        return self.load().tasks

    def save_tasks(self, tasks: list[Task]) -> None:
        self.save(AppConfig(tasks=list(tasks)))

    @contextmanager
    def edit(self) -> Iterator[AppConfig]:
        """Load the store, yield it for mutation, save it if no error was raised."""
        config = self.load()
        yield config
        self.save(config)

    # -- tasks ---------------------------------------------------------------

    def task_names(self) -> list[str]:
        return [task.name for task in self.load_tasks()]

    def get_task(self, name: str) -> Task:
        task = self.load().find_task(name)
        if task is None:
            raise TaskNotFoundError(f"Task '{name}' not found")
        return task

    def add_task(self, name: str) -> Task:
        name = name.strip()
        if not name:
            raise ConfigStoreError("Task name must not be empty")
        with self.edit() as config:
            if config.find_task(name) is not None:
                raise DuplicateTaskError(f"There is already a task named '{name}'")
            task = Task(name=name)
            config.tasks.append(task)
        logger.info(f"Added task {name}")
        return task

    def delete_task(self, name: str) -> None:
        with self.edit() as config:
            if config.find_task(name) is None:
                raise TaskNotFoundError(f"Task '{name}' not found")
            config.tasks = [task for task in config.tasks if task.name != name]
        logger.info(f"Deleted task {name}")

    # -- task members --------------------------------------------------------

    def add_project(
        self, task_name: str, project_path: str, artifact_path: str | None = None
    ) -> Project:
        """Register a project directory, detecting its VCS kind once."""
        root = Path(project_path).expanduser()
        if not root.is_dir():
            raise ConfigStoreError(f"Project directory not found: {project_path}")
        project = Project(
            path=str(root.resolve()),
            vcs_kind=detect_vcs_kind(str(root)),
            artifact_path=artifact_path or None,
        )
        with self.edit() as config:
            task = self._require(config, task_name)
            if any(existing.path == project.path for existing in task.projects):
                raise ConfigStoreError(f"Project {project.path} is already registered")
            task.projects.append(project)
        logger.info(f"Added {project.vcs_kind.value} project {project.path} to {task_name}")
        return project

    def set_artifact(
        self, task_name: str, project_path: str, artifact_path: str | None
    ) -> Project:
        with self.edit() as config:
            task = self._require(config, task_name)
            for project in task.projects:
                if project.path == project_path:
                    project.artifact_path = artifact_path or None
                    return project
            raise ConfigStoreError(f"Project {project_path} is not part of task '{task_name}'")

    def add_target_file(self, task_name: str, file_path: str, name: str | None = None) -> TargetFile:
        file_path = file_path.strip()
        if not file_path:
            raise ConfigStoreError("Target file path must not be empty")
        target_file = TargetFile(name=name or Path(file_path).name or file_path, path=file_path)
        with self.edit() as config:
            self._require(config, task_name).target_files.append(target_file)
        return target_file

    def add_action(self, task_name: str, action: Action) -> Action:
        with self.edit() as config:
            self._require(config, task_name).actions.append(action)
        return action

    @staticmethod
    def _require(config: AppConfig, task_name: str) -> Task:
        task = config.find_task(task_name)
        if task is None:
            raise TaskNotFoundError(f"Task '{task_name}' not found")
        return task
