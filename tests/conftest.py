import shutil

import pytest

from easy_patcher.models import Project, VcsKind
from helpers import git


def pytest_collection_modifyitems(config, items):
    if shutil.which("git") is not None:
        return
    skip_git = pytest.mark.skip(reason="git not installed")
    for item in items:
        if "git_repo" in getattr(item, "fixturenames", ()):
            item.add_marker(skip_git)


@pytest.fixture
def project_dir(tmp_path):
    root = tmp_path / "webapp"
    root.mkdir()
    return root


@pytest.fixture
def project(project_dir):
    return Project(path=str(project_dir), vcs_kind=VcsKind.GIT)


@pytest.fixture
def git_repo(tmp_path):
    """Empty git repository with a local identity configured."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "dev@example.com")
    git(repo, "config", "user.name", "Dev")
    git(repo, "config", "commit.gpgsign", "false")
    return repo
