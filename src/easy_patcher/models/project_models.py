"""Task, project and action models persisted in the task store."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VcsKind(str, Enum):
    """Version-control system detected for a project directory."""

    GIT = "git"
    SVN = "svn"
    UNKNOWN = "unknown"


class ActionCommand(str, Enum):
    MOVE = "move"
    COPY = "copy"
    DELETE = "delete"
    UNZIP = "unzip"


class Project(BaseModel):
    model_config = ConfigDict(frozen=False)

    path: str  # Working-copy root
    vcs_kind: VcsKind = VcsKind.UNKNOWN  # Detected once at registration
    artifact_path: str | None = None  # Build artifact (e.g. a .war) to ship

    @property
    def name(self) -> str:
        return Path(self.path).name or self.path


class TargetFile(BaseModel):
    model_config = ConfigDict(frozen=False)

    name: str
    path: str


class Action(BaseModel):
    """A single file operation run as part of a task, outside the patch flow."""

    model_config = ConfigDict(frozen=False)

    target_file: TargetFile
    destination: str | None = None
    command: ActionCommand

    @model_validator(mode="after")
    def _check_destination(self) -> "Action":
        if self.command != ActionCommand.DELETE and not self.destination:
            raise ValueError(f"{self.command.value} action requires a destination")
        return self


class Task(BaseModel):
    model_config = ConfigDict(frozen=False)

    name: str
    target_files: list[TargetFile] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Whole persisted task store document."""

    model_config = ConfigDict(frozen=False)

    tasks: list[Task] = Field(default_factory=list)

    def find_task(self, name: str) -> Task | None:
        for task in self.tasks:
            if task.name == name:
                return task
        return None
