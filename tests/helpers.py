"""Shared builders for test data."""

import subprocess
import zipfile
from pathlib import Path

from easy_patcher.models import ChangeEntry, ChangeKind, RevisionRecord, VcsKind


def make_revision(rev_id: str, summary: str = "", kind: VcsKind = VcsKind.GIT) -> RevisionRecord:
    return RevisionRecord(id=rev_id, summary=summary or f"commit {rev_id}", vcs_kind=kind)


def added(path: str) -> ChangeEntry:
    return ChangeEntry(change_kind=ChangeKind.ADDED, path=path)


def modified(path: str) -> ChangeEntry:
    return ChangeEntry(change_kind=ChangeKind.MODIFIED, path=path)


def deleted(path: str) -> ChangeEntry:
    return ChangeEntry(change_kind=ChangeKind.DELETED, path=path)


def renamed(old_path: str, path: str) -> ChangeEntry:
    return ChangeEntry(change_kind=ChangeKind.RENAMED, old_path=old_path, path=path)


def write_zip(path: Path, members: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def commit_all(repo: Path, message: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "--short", "HEAD").strip()
