"""Patch set assembly: change-set fold, artifact staging, output assembly."""

from easy_patcher.patch.change_set import (
    fold_changes,
    fold_entry,
    order_for_fold,
    summarize_change_set,
)
from easy_patcher.patch.exceptions import (
    ArtifactStagingError,
    OutputAssemblyError,
    OutputCollisionError,
    PatchError,
    ScriptGenerationError,
)
from easy_patcher.patch.output import OutputAssembler, make_run_label, output_dir_name
from easy_patcher.patch.stager import ArtifactStager, extract_archive, is_archive, staging_dir_for

__all__ = [
    "ArtifactStager",
    "ArtifactStagingError",
    "OutputAssembler",
    "OutputAssemblyError",
    "OutputCollisionError",
    "PatchError",
    "ScriptGenerationError",
    "extract_archive",
    "fold_changes",
    "fold_entry",
    "is_archive",
    "make_run_label",
    "order_for_fold",
    "output_dir_name",
    "staging_dir_for",
    "summarize_change_set",
]
