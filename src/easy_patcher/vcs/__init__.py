"""Version-control history providers."""

from easy_patcher.vcs.base import (
    DEFAULT_HISTORY_LIMIT,
    CommandOutput,
    VcsProvider,
    run_vcs_command,
)
from easy_patcher.vcs.exceptions import HistoryQueryError, RevisionNotFoundError, VcsError
from easy_patcher.vcs.factory import detect_vcs_kind, get_provider
from easy_patcher.vcs.git import GitProvider, parse_git_log, parse_git_name_status
from easy_patcher.vcs.svn import SvnProvider, parse_svn_changed_paths, parse_svn_log
from easy_patcher.vcs.unknown import UnknownProvider

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "CommandOutput",
    "GitProvider",
    "HistoryQueryError",
    "RevisionNotFoundError",
    "SvnProvider",
    "UnknownProvider",
    "VcsError",
    "VcsProvider",
    "detect_vcs_kind",
    "get_provider",
    "parse_git_log",
    "parse_git_name_status",
    "parse_svn_changed_paths",
    "parse_svn_log",
    "run_vcs_command",
]
