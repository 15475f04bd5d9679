"""Tests for ordering and folding revision changes into a change set."""

from easy_patcher.models import ChangeKind
from easy_patcher.patch.change_set import (
    fold_changes,
    fold_entry,
    order_for_fold,
    summarize_change_set,
)
from helpers import added, deleted, make_revision, modified, renamed


def kinds(change_set):
    return {path: entry.change_kind for path, entry in change_set.items()}


# ---------------------------------------------------------------------------
# order_for_fold
# ---------------------------------------------------------------------------

class TestOrderForFold:
    def test_reverses_history_position(self):
        history = [make_revision("r3"), make_revision("r2"), make_revision("r1")]
        ordered = order_for_fold([history[0], history[2]], history)
        assert [r.id for r in ordered] == ["r1", "r3"]

    def test_pick_order_is_ignored(self):
        history = [make_revision("c"), make_revision("b"), make_revision("a")]
        forward = order_for_fold([history[2], history[1]], history)
        backward = order_for_fold([history[1], history[2]], history)
        assert forward == backward

    def test_duplicates_removed(self):
        history = [make_revision("b"), make_revision("a")]
        ordered = order_for_fold([history[1], history[1], history[0]], history)
        assert [r.id for r in ordered] == ["a", "b"]

    def test_unknown_revisions_go_last(self):
        history = [make_revision("b"), make_revision("a")]
        stray = make_revision("zzz")
        ordered = order_for_fold([stray, history[0]], history)
        assert [r.id for r in ordered] == ["b", "zzz"]


# ---------------------------------------------------------------------------
# fold_changes
# ---------------------------------------------------------------------------

class TestFoldChanges:
    def test_history_scenario_selecting_oldest_two(self):
        # History newest first: r3 M config.xml, r2 A readme.md, r1 A config.xml
        history = [make_revision("r3"), make_revision("r2"), make_revision("r1")]
        changes = {
            "r3": [modified("config.xml")],
            "r2": [added("readme.md")],
            "r1": [added("config.xml")],
        }
        ordered = order_for_fold([history[1], history[2]], history)
        result = fold_changes(changes[r.id] for r in ordered)
        assert kinds(result) == {
            "config.xml": ChangeKind.ADDED,
            "readme.md": ChangeKind.ADDED,
        }

    def test_add_then_delete_is_delete(self):
        result = fold_changes([[added("a")], [deleted("a")]])
        assert kinds(result) == {"a": ChangeKind.DELETED}

    def test_delete_dominates_regardless_of_order(self):
        result = fold_changes([[deleted("a")], [added("a")]])
        assert kinds(result) == {"a": ChangeKind.DELETED}

    def test_delete_dominates_across_any_permutation(self):
        revisions = [[added("a")], [modified("a")], [deleted("a")]]
        for order in ([0, 1, 2], [2, 0, 1], [1, 2, 0], [2, 1, 0]):
            result = fold_changes(revisions[i] for i in order)
            assert kinds(result) == {"a": ChangeKind.DELETED}

    def test_later_modification_replaces_earlier(self):
        result = fold_changes([[modified("a")], [added("a")]])
        assert result["a"].change_kind == ChangeKind.ADDED

    def test_rename_keyed_by_new_path(self):
        result = fold_changes([[renamed("old.txt", "new.txt")]])
        assert result["new.txt"].old_path == "old.txt"
        assert kinds(result) == {"old.txt": ChangeKind.DELETED, "new.txt": ChangeKind.RENAMED}

    def test_rename_then_readd_old_path_keeps_the_write(self):
        result = fold_changes([[renamed("a.txt", "b.txt")], [added("a.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.ADDED, "b.txt": ChangeKind.RENAMED}

    def test_rename_then_delete_new_path_still_removes_old(self):
        result = fold_changes([[renamed("a.txt", "b.txt")], [deleted("b.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.DELETED, "b.txt": ChangeKind.DELETED}

    def test_rename_then_modify_new_path_still_removes_old(self):
        result = fold_changes([[renamed("a.txt", "b.txt")], [modified("b.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.DELETED, "b.txt": ChangeKind.MODIFIED}

    def test_rename_removal_replaces_earlier_write_of_old_path(self):
        result = fold_changes([[modified("a.txt")], [renamed("a.txt", "b.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.DELETED, "b.txt": ChangeKind.RENAMED}

    def test_selected_delete_of_old_path_still_dominates(self):
        result = fold_changes([[deleted("a.txt")], [renamed("a.txt", "b.txt")], [added("a.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.DELETED, "b.txt": ChangeKind.RENAMED}

    def test_rename_back_to_original_path(self):
        result = fold_changes([[renamed("a.txt", "b.txt")], [renamed("b.txt", "a.txt")]])
        assert kinds(result) == {"a.txt": ChangeKind.RENAMED, "b.txt": ChangeKind.DELETED}
        assert result["a.txt"].old_path == "b.txt"

    def test_empty_selection(self):
        assert fold_changes([]) == {}
        assert fold_changes([[], []]) == {}

    def test_deterministic(self):
        revisions = [[added("a"), modified("b")], [deleted("b"), added("c")]]
        assert fold_changes(revisions) == fold_changes(revisions)


class TestFoldEntry:
    def test_in_place_update(self):
        change_set = {}
        fold_entry(change_set, added("x"))
        fold_entry(change_set, deleted("x"))
        fold_entry(change_set, modified("x"))
        assert change_set["x"].change_kind == ChangeKind.DELETED

    def test_shared_implied_set_lets_later_write_replace_rename_removal(self):
        change_set, implied = {}, set()
        fold_entry(change_set, renamed("a", "b"), implied)
        fold_entry(change_set, modified("a"), implied)
        assert change_set["a"].change_kind == ChangeKind.MODIFIED
        assert implied == set()


def test_summarize_counts_every_kind():
    summary = summarize_change_set({"a": added("a"), "b": deleted("b"), "c": added("c")})
    assert summary == {"added": 2, "modified": 0, "deleted": 1, "renamed": 0}
