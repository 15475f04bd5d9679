"""Provider selection and VCS detection."""

from pathlib import Path

from easy_patcher.models import VcsKind
from easy_patcher.vcs.base import VcsProvider
from easy_patcher.vcs.git import GitProvider
from easy_patcher.vcs.svn import SvnProvider
from easy_patcher.vcs.unknown import UnknownProvider

_PROVIDERS: dict[VcsKind, type[VcsProvider]] = {
    VcsKind.GIT: GitProvider,
    VcsKind.SVN: SvnProvider,
    VcsKind.UNKNOWN: UnknownProvider,
}


def detect_vcs_kind(project_path: str) -> VcsKind:
    """Detect the VCS of a directory by its metadata directory.

    `.git` wins over `.svn` when both are present.
    """
    root = Path(project_path)
    if (root / ".git").exists():
        return VcsKind.GIT
    if (root / ".svn").exists():
        return VcsKind.SVN
    return VcsKind.UNKNOWN


def get_provider(kind: VcsKind | str, timeout: float | None = None) -> VcsProvider:
    """Return a fresh provider instance for the given VCS kind."""
    return _PROVIDERS[VcsKind(kind)](timeout=timeout)
