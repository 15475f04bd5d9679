"""Model for the per-project patch manifest."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from easy_patcher.models.project_models import Project
from easy_patcher.models.revision_models import ChangeEntry, ProjectChangeSet, RevisionRecord

MANIFEST_SCHEMA_VERSION = "1.0"
MANIFEST_FILENAME = "manifest.json"


class PatchManifest(BaseModel):
    """Serialized result of merging the selected revisions of one project.

    Written once into the project's output directory and read only by the
    generated apply script.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: str = MANIFEST_SCHEMA_VERSION
    project: Project
    run_label: str  # Shared %Y%m%d_%H%M%S label of the run
    generated_at: datetime = Field(default_factory=datetime.now)
    selected_revisions: list[RevisionRecord]  # Fold order, oldest first
    changes: list[ChangeEntry]  # Sorted by path
    artifact: str | None = None  # Name of the artifact inside the output dir
    artifact_staged: bool = False
    missing_files: list[str] = Field(default_factory=list)

    @classmethod
    def from_change_set(
        cls,
        project: Project,
        run_label: str,
        selected_revisions: list[RevisionRecord],
        change_set: ProjectChangeSet,
        **extra,
    ) -> "PatchManifest":
        changes = [change_set[path] for path in sorted(change_set)]
        return cls(
            project=project,
            run_label=run_label,
            selected_revisions=list(selected_revisions),
            changes=changes,
            **extra,
        )

