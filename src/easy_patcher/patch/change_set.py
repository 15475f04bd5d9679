"""Ordered fold of per-revision changes into one change set per project."""

from collections import Counter
from typing import Iterable, Sequence

from easy_patcher.models import ChangeEntry, ChangeKind, ProjectChangeSet, RevisionRecord


def order_for_fold(
    selected: Iterable[RevisionRecord],
    history: Sequence[RevisionRecord],
) -> list[RevisionRecord]:
    """Order selected revisions oldest to newest.

    History is newest first, so fold order is the reverse of history
    position. The order in which the operator picked revisions is ignored.
    Revisions absent from history keep their relative order after the rest.
    """
    position = {record.id: index for index, record in enumerate(history)}
    unique: dict[str, RevisionRecord] = {}
    for record in selected:
        unique.setdefault(record.id, record)
    known = [r for r in unique.values() if r.id in position]
    unknown = [r for r in unique.values() if r.id not in position]
    known.sort(key=lambda r: position[r.id], reverse=True)
    return known + unknown


def _replace(
    change_set: ProjectChangeSet,
    entry: ChangeEntry,
    implied: set[str],
    is_implied: bool = False,
) -> None:
    existing = change_set.get(entry.path)
    if (
        existing is not None
        and existing.change_kind == ChangeKind.DELETED
        and entry.path not in implied
    ):
        return
    change_set[entry.path] = entry
    if is_implied:
        implied.add(entry.path)
    else:
        implied.discard(entry.path)


def fold_entry(
    change_set: ProjectChangeSet,
    entry: ChangeEntry,
    implied: set[str] | None = None,
) -> None:
    """Fold one entry into the change set in place.

    A later entry replaces an earlier one for the same path, except that a
    DELETED entry is never replaced once recorded.

    A RENAMED entry also records the removal of its old path as a DELETED
    entry. That removal is implied rather than selected: a later write to
    the old path replaces it. `implied` tracks such paths across calls.
    """
    if implied is None:
        implied = set()
    if entry.change_kind == ChangeKind.RENAMED and entry.old_path:
        removal = ChangeEntry(change_kind=ChangeKind.DELETED, path=entry.old_path)
        _replace(change_set, removal, implied, is_implied=True)
    _replace(change_set, entry, implied)


def fold_changes(revision_changes: Iterable[Sequence[ChangeEntry]]) -> ProjectChangeSet:
    """Merge the entries of several revisions, given in fold order.

    Args:
        revision_changes: One sequence of ChangeEntry per revision,
            oldest revision first.

    Returns:
        Mapping of path to the surviving ChangeEntry for that path.
    """
    change_set: ProjectChangeSet = {}
    implied: set[str] = set()
    for entries in revision_changes:
        for entry in entries:
            fold_entry(change_set, entry, implied)
    return change_set


def summarize_change_set(change_set: ProjectChangeSet) -> dict[str, int]:
    counts = Counter(entry.change_kind.value for entry in change_set.values())
    return {kind.value: counts.get(kind.value, 0) for kind in ChangeKind}
