"""Common provider interface and subprocess helper for VCS queries."""

import subprocess
from abc import ABC, abstractmethod
from typing import NamedTuple

from loguru import logger

from easy_patcher.models import ChangeEntry, RevisionRecord, VcsKind
from easy_patcher.vcs.exceptions import HistoryQueryError

DEFAULT_HISTORY_LIMIT = 50


class CommandOutput(NamedTuple):
    returncode: int
    stdout: str
    stderr: str


def run_vcs_command(
    project_path: str,
    command: str,
    args: list[str],
    timeout: float | None = None,
) -> CommandOutput:
    """Run a VCS executable with the project as working directory.

    Output is decoded as UTF-8, replacing invalid sequences.

    Args:
        project_path: Working directory for the subprocess.
        command: Executable name ("git" or "svn").
        args: Arguments passed after the executable.
        timeout: Optional timeout in seconds. None blocks until completion.

    Returns:
        CommandOutput with the exit code and decoded streams.

    Raises:
        HistoryQueryError: If the executable cannot be started or times out.
    """
    logger.debug(f"Running {command} {' '.join(args)} in {project_path}")
    try:
        result = subprocess.run(
            [command, *args],
            cwd=project_path,
            capture_output=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise HistoryQueryError(f"'{command}' executable not found: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise HistoryQueryError(
            f"'{command} {' '.join(args)}' timed out after {timeout}s"
        ) from exc
    except OSError as exc:
        raise HistoryQueryError(f"Failed to run '{command}' in {project_path}: {exc}") from exc

    return CommandOutput(
        returncode=result.returncode,
        stdout=result.stdout.decode("utf-8", errors="replace"),
        stderr=result.stderr.decode("utf-8", errors="replace"),
    )


class VcsProvider(ABC):
    """History and changed-file queries for one kind of version control."""

    kind: VcsKind = VcsKind.UNKNOWN
    empty_history_notice: str = "no history found"

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    @abstractmethod
    def fetch_history(
        self, project_path: str, limit: int | None = DEFAULT_HISTORY_LIMIT
    ) -> list[RevisionRecord]:
        """Return the project's revisions, newest first."""

    @abstractmethod
    def changed_files(self, project_path: str, revision_id: str) -> list[ChangeEntry]:
        """Return the entries touched by one revision, in reported order."""

    def _run(self, project_path: str, command: str, args: list[str]) -> CommandOutput:
        return run_vcs_command(project_path, command, args, timeout=self.timeout)
