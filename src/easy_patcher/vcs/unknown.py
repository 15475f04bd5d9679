"""Provider for directories without recognized version control."""

from easy_patcher.models import ChangeEntry, RevisionRecord, VcsKind
from easy_patcher.vcs.base import DEFAULT_HISTORY_LIMIT, VcsProvider


class UnknownProvider(VcsProvider):
    kind = VcsKind.UNKNOWN
    empty_history_notice = "not a recognized VCS project"

    def fetch_history(
        self, project_path: str, limit: int | None = DEFAULT_HISTORY_LIMIT
    ) -> list[RevisionRecord]:
        return []

    def changed_files(self, project_path: str, revision_id: str) -> list[ChangeEntry]:
        return []
