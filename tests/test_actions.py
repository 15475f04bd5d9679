"""Tests for task file actions."""

from easy_patcher.actions.runner import run_action, run_actions
from easy_patcher.models import Action, ActionCommand, TargetFile, Task
from helpers import write_zip


def make_action(source, command, destination=None):
    return Action(
        target_file=TargetFile(name=source.name, path=str(source)),
        destination=str(destination) if destination else None,
        command=command,
    )


class TestRunAction:
    def test_copy_into_directory(self, tmp_path):
        source = tmp_path / "app.war"
        source.write_text("war")
        dest = tmp_path / "deploy"
        dest.mkdir()
        result = run_action(make_action(source, ActionCommand.COPY, dest))
        assert result.success
        assert (dest / "app.war").read_text() == "war"
        assert source.exists()

    def test_move_creates_parent(self, tmp_path):
        source = tmp_path / "app.war"
        source.write_text("war")
        dest = tmp_path / "a" / "b" / "renamed.war"
        result = run_action(make_action(source, ActionCommand.MOVE, dest))
        assert result.success
        assert dest.read_text() == "war"
        assert not source.exists()

    def test_delete(self, tmp_path):
        source = tmp_path / "old.log"
        source.write_text("x")
        assert run_action(make_action(source, ActionCommand.DELETE)).success
        assert not source.exists()

    def test_unzip(self, tmp_path):
        archive = write_zip(tmp_path / "app.zip", {"index.html": "hi"})
        dest = tmp_path / "out"
        result = run_action(make_action(archive, ActionCommand.UNZIP, dest))
        assert result.success
        assert (dest / "index.html").read_text() == "hi"

    def test_failure_is_reported_not_raised(self, tmp_path):
        result = run_action(make_action(tmp_path / "missing.txt", ActionCommand.DELETE))
        assert not result.success
        assert result.message


def test_run_actions_continues_after_failure(tmp_path):
    present = tmp_path / "present.txt"
    present.write_text("x")
    task = Task(
        name="cleanup",
        actions=[
            make_action(tmp_path / "missing.txt", ActionCommand.DELETE),
            make_action(present, ActionCommand.DELETE),
        ],
    )
    results = run_actions(task)
    assert [r.success for r in results] == [False, True]
    assert not present.exists()
