"""Tests for the exception hierarchies."""

import pytest

from easy_patcher.orchestrator.exceptions import GraphBuildError, OrchestratorError
from easy_patcher.patch.exceptions import (
    ArtifactStagingError,
    OutputAssemblyError,
    OutputCollisionError,
    PatchError,
    ScriptGenerationError,
)
from easy_patcher.store.exceptions import (
    ConfigStoreError,
    DuplicateTaskError,
    StoreError,
    TaskNotFoundError,
)
from easy_patcher.vcs.exceptions import HistoryQueryError, RevisionNotFoundError, VcsError


@pytest.mark.parametrize(
    "exc_class, base",
    [
        (HistoryQueryError, VcsError),
        (RevisionNotFoundError, HistoryQueryError),
        (ArtifactStagingError, PatchError),
        (OutputCollisionError, PatchError),
        (OutputAssemblyError, PatchError),
        (ScriptGenerationError, PatchError),
        (ConfigStoreError, StoreError),
        (DuplicateTaskError, StoreError),
        (TaskNotFoundError, StoreError),
        (GraphBuildError, OrchestratorError),
    ],
)
def test_exception_hierarchy(exc_class, base):
    assert issubclass(exc_class, base)
    assert issubclass(exc_class, Exception)


def test_revision_not_found_caught_as_history_error():
    with pytest.raises(HistoryQueryError, match="gone"):
        raise RevisionNotFoundError("gone")
