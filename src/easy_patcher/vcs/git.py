"""Git history provider."""

import re

from loguru import logger

from easy_patcher.models import ChangeEntry, ChangeKind, RevisionRecord, VcsKind
from easy_patcher.vcs.base import DEFAULT_HISTORY_LIMIT, VcsProvider
from easy_patcher.vcs.exceptions import HistoryQueryError, RevisionNotFoundError

GIT_ONELINE_RE = re.compile(r"^([0-9a-fA-F]{4,64})(?:\s+(.*))?$")
GIT_MISSING_REVISION_MARKERS = (
    "unknown revision",
    "bad object",
    "bad revision",
    "invalid object name",
    "ambiguous argument",
)
GIT_EMPTY_HISTORY_MARKERS = ("does not have any commits yet",)
# Keep non-ASCII paths unescaped in name-status output
GIT_BASE_ARGS = ["-c", "core.quotePath=false"]


def parse_git_log(output: str) -> list[RevisionRecord]:
    """Parse `git log --oneline` output into revision records.

    Lines that do not start with a hash are skipped.
    """
    records: list[RevisionRecord] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        match = GIT_ONELINE_RE.match(line)
        if match is None:
            continue
        records.append(
            RevisionRecord(
                id=match.group(1),
                summary=(match.group(2) or "").strip(),
                vcs_kind=VcsKind.GIT,
            )
        )
    return records


def parse_git_name_status(output: str) -> list[ChangeEntry]:
    """Parse `git show --name-status` output into change entries.

    A rename is reported by git as one R line and becomes a single
    RENAMED entry. A copy only adds its destination.
    """
    entries: list[ChangeEntry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        status = parts[0].strip()
        if not status:
            continue
        letter = status[0]
        if letter == "R" and len(parts) >= 3:
            entries.append(
                ChangeEntry(change_kind=ChangeKind.RENAMED, old_path=parts[1], path=parts[2])
            )
        elif letter == "C" and len(parts) >= 3:
            entries.append(ChangeEntry(change_kind=ChangeKind.ADDED, path=parts[2]))
        elif letter == "A" and len(parts) >= 2:
            entries.append(ChangeEntry(change_kind=ChangeKind.ADDED, path=parts[1]))
        elif letter in ("M", "T") and len(parts) >= 2:
            entries.append(ChangeEntry(change_kind=ChangeKind.MODIFIED, path=parts[1]))
        elif letter == "D" and len(parts) >= 2:
            entries.append(ChangeEntry(change_kind=ChangeKind.DELETED, path=parts[1]))
        else:
            logger.warning(f"Skipping unrecognized git status line: {line!r}")
    return entries


class GitProvider(VcsProvider):
    kind = VcsKind.GIT
    empty_history_notice = "no git commits found"

    def fetch_history(
        self, project_path: str, limit: int | None = DEFAULT_HISTORY_LIMIT
    ) -> list[RevisionRecord]:
        args = [*GIT_BASE_ARGS, "log", "--oneline", "--no-decorate", "--no-color"]
        if limit:
            args.extend(["-n", str(limit)])
        result = self._run(project_path, "git", args)
        if result.returncode != 0:
            if any(marker in result.stderr for marker in GIT_EMPTY_HISTORY_MARKERS):
                return []
            raise HistoryQueryError(
                f"git log failed in {project_path} (exit {result.returncode}): "
                f"{result.stderr.strip()}"
            )
        return parse_git_log(result.stdout)

    def changed_files(self, project_path: str, revision_id: str) -> list[ChangeEntry]:
        args = [*GIT_BASE_ARGS, "show", "--name-status", "--format=", "--no-color", revision_id]
        result = self._run(project_path, "git", args)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(marker in stderr.lower() for marker in GIT_MISSING_REVISION_MARKERS):
                raise RevisionNotFoundError(
                    f"Commit {revision_id} not found in {project_path}: {stderr}"
                )
            raise HistoryQueryError(
                f"git show {revision_id} failed in {project_path} "
                f"(exit {result.returncode}): {stderr}"
            )
        return parse_git_name_status(result.stdout)
