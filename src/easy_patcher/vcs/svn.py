"""Subversion history provider."""

import re

from loguru import logger

from easy_patcher.models import ChangeEntry, ChangeKind, RevisionRecord, VcsKind
from easy_patcher.vcs.base import DEFAULT_HISTORY_LIMIT, VcsProvider
from easy_patcher.vcs.exceptions import HistoryQueryError, RevisionNotFoundError

SVN_HEADER_RE = re.compile(r"^r(\d+)\s+\|\s*(.*)$")
SVN_CHANGED_PATH_RE = re.compile(r"^\s+([AMDR])\s+(/.*?)(?:\s+\(from\s+.+:\d+\))?\s*$")
SVN_MISSING_REVISION_MARKERS = ("no such revision", "e160006")

SVN_ACTIONS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "R": ChangeKind.MODIFIED,  # Replaced in place
    "D": ChangeKind.DELETED,
}


def parse_svn_log(output: str) -> list[RevisionRecord]:
    """Parse `svn log -q` output: `rN | author | timestamp` header lines."""
    records: list[RevisionRecord] = []
    for line in output.splitlines():
        match = SVN_HEADER_RE.match(line.strip())
        if match is None or "|" not in match.group(2):
            continue
        records.append(
            RevisionRecord(
                id=match.group(1),
                summary=match.group(2).strip(),
                vcs_kind=VcsKind.SVN,
            )
        )
    return records


def relativize_svn_path(repo_path: str, url_prefix: str | None) -> str | None:
    """Map a repository path like /trunk/a.txt onto the working copy.

    Args:
        repo_path: Path as printed by `svn log -v`.
        url_prefix: Repository path of the working-copy root (e.g. "/trunk"),
            or None when unknown.

    Returns:
        Working-copy relative path, or None if it lies outside the working copy.
    """
    if not url_prefix or url_prefix == "/":
        return repo_path.lstrip("/") or None
    prefix = url_prefix.rstrip("/")
    if repo_path.startswith(prefix + "/"):
        return repo_path[len(prefix) + 1:] or None
    return None


def parse_svn_changed_paths(output: str, url_prefix: str | None = None) -> list[ChangeEntry]:
    """Parse the `Changed paths:` block of `svn log -v -r N` output.

    A move is reported by svn as an add-with-history plus a delete, and is
    kept as those two entries.
    """
    entries: list[ChangeEntry] = []
    in_paths = False
    for line in output.splitlines():
        if line.startswith("Changed paths:"):
            in_paths = True
            continue
        if not in_paths:
            continue
        if not line.strip():
            in_paths = False
            continue
        match = SVN_CHANGED_PATH_RE.match(line)
        if match is None:
            logger.warning(f"Skipping unrecognized svn path line: {line!r}")
            continue
        path = relativize_svn_path(match.group(2), url_prefix)
        if path is None:
            continue
        entries.append(ChangeEntry(change_kind=SVN_ACTIONS[match.group(1)], path=path))
    return entries


class SvnProvider(VcsProvider):
    kind = VcsKind.SVN
    empty_history_notice = "no svn revisions found"

    def __init__(self, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout)
        self._url_prefixes: dict[str, str | None] = {}

    def fetch_history(
        self, project_path: str, limit: int | None = DEFAULT_HISTORY_LIMIT
    ) -> list[RevisionRecord]:
        args = ["log", "-q"]
        if limit:
            args.extend(["-l", str(limit)])
        result = self._run(project_path, "svn", args)
        if result.returncode != 0:
            raise HistoryQueryError(
                f"svn log failed in {project_path} (exit {result.returncode}): "
                f"{result.stderr.strip()}"
            )
        return parse_svn_log(result.stdout)

    def changed_files(self, project_path: str, revision_id: str) -> list[ChangeEntry]:
        revision = revision_id.lstrip("r")
        result = self._run(project_path, "svn", ["log", "-v", "-r", revision])
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(marker in stderr.lower() for marker in SVN_MISSING_REVISION_MARKERS):
                raise RevisionNotFoundError(
                    f"Revision r{revision} not found in {project_path}: {stderr}"
                )
            raise HistoryQueryError(
                f"svn log -v -r {revision} failed in {project_path} "
                f"(exit {result.returncode}): {stderr}"
            )
        return parse_svn_changed_paths(result.stdout, self._url_prefix(project_path))

    def _url_prefix(self, project_path: str) -> str | None:
        """Repository path of the working-copy root, cached per project."""
        if project_path in self._url_prefixes:
            return self._url_prefixes[project_path]

        prefix: str | None = None
        result = self._run(project_path, "svn", ["info", "--show-item", "relative-url"])
        relative_url = result.stdout.strip()
        if result.returncode == 0 and relative_url.startswith("^"):
            prefix = relative_url[1:] or "/"
        else:
            logger.warning(
                f"Could not resolve svn relative URL for {project_path}; "
                "using repository-root paths"
            )
        self._url_prefixes[project_path] = prefix
        return prefix
