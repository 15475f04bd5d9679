"""Data models for easy patcher."""

from easy_patcher.models.manifest_models import (
    MANIFEST_FILENAME,
    MANIFEST_SCHEMA_VERSION,
    PatchManifest,
)
from easy_patcher.models.project_models import (
    Action,
    ActionCommand,
    AppConfig,
    Project,
    TargetFile,
    Task,
    VcsKind,
)
from easy_patcher.models.report_models import ActionResult, PatchOutput
from easy_patcher.models.revision_models import (
    ChangeEntry,
    ChangeKind,
    ProjectChangeSet,
    RevisionRecord,
)

__all__ = [
    "MANIFEST_FILENAME",
    "MANIFEST_SCHEMA_VERSION",
    "Action",
    "ActionCommand",
    "ActionResult",
    "AppConfig",
    "ChangeEntry",
    "ChangeKind",
    "PatchManifest",
    "PatchOutput",
    "Project",
    "ProjectChangeSet",
    "RevisionRecord",
    "TargetFile",
    "Task",
    "VcsKind",
]
