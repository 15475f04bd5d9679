"""Models for revision history and per-revision file changes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from easy_patcher.models.project_models import VcsKind


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class RevisionRecord(BaseModel):
    """One entry of a project's log, normalized across VCS kinds."""

    model_config = ConfigDict(frozen=True)

    id: str  # Commit hash (git) or revision number without the "r" (svn)
    summary: str
    vcs_kind: VcsKind

    @property
    def label(self) -> str:
        prefix = "r" if self.vcs_kind == VcsKind.SVN else ""
        return f"{prefix}{self.id} {self.summary}".strip()


class ChangeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    change_kind: ChangeKind
    path: str  # Working-copy relative, POSIX separators
    old_path: str | None = None  # Only set for RENAMED

    @model_validator(mode="after")
    def _check_old_path(self) -> "ChangeEntry":
        if self.change_kind == ChangeKind.RENAMED and not self.old_path:
            raise ValueError("renamed entries require old_path")
        if self.change_kind != ChangeKind.RENAMED and self.old_path is not None:
            raise ValueError("old_path is only valid for renamed entries")
        return self


# Path -> most recent entry for that path, see patch.change_set.fold_changes
ProjectChangeSet = dict[str, ChangeEntry]
