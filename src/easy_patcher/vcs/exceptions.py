"""Exceptions for version-control queries."""


class VcsError(Exception):
    """Base exception for all version-control operations."""


class HistoryQueryError(VcsError):
    """Raised when a VCS subprocess fails or its output cannot be used.

    The affected project is excluded from the rest of the run.
    """


class RevisionNotFoundError(HistoryQueryError):
    """Raised when a single revision no longer exists (e.g. rewritten history).

    Only that revision is excluded; the rest of the selection is processed.
    """
