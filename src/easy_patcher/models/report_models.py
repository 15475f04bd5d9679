"""Result models for patch runs and task actions."""

from pydantic import BaseModel, ConfigDict, Field

from easy_patcher.models.project_models import ActionCommand


class PatchOutput(BaseModel):
    model_config = ConfigDict(frozen=False)

    project_path: str
    output_dir: str
    manifest_path: str
    script_path: str | None = None
    artifact_warning: str | None = None  # Set when staging failed
    missing_files: list[str] = Field(default_factory=list)


class ActionResult(BaseModel):
    model_config = ConfigDict(frozen=False)

    command: ActionCommand
    source: str
    destination: str | None = None
    success: bool
    message: str = ""
