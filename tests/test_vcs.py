import pytest

from conftest import init_repo, needs_git
from winbundle.errors import ToolFailedError
from winbundle.tools import ExecutableLocator, ToolInvoker
from winbundle.vcs import GitIgnored, git_revision

pytestmark = needs_git


@pytest.fixture
def repo(tmp_path):
    root = tmp_path / "repo"
    (root / "src" / "main" / "config").mkdir(parents=True)
    (root / ".gitignore").write_text("*.log\n")
    (root / "src" / "main" / "config" / "app.yml").write_text("a: 1\n")
    (root / "src" / "main" / "config" / "debug.log").write_text("noise\n")
    return init_repo(root)


@pytest.fixture
def invoker():
    return ToolInvoker(ExecutableLocator())


def test_git_revision(repo, invoker):
    rev = git_revision(repo, invoker)
    assert rev
    assert "\n" not in rev
    assert not rev.endswith("-dirty")

    (repo / "src" / "main" / "config" / "app.yml").write_text("a: 2\n")
    assert git_revision(repo, invoker).endswith("-dirty")


def test_git_ignored_predicate(repo, invoker):
    ignored = GitIgnored(repo, invoker)
    config = repo / "src" / "main" / "config"
    assert ignored(config / "debug.log")
    assert not ignored(config / "app.yml")
    assert not ignored(repo / ".gitignore")


def test_not_a_repository(tmp_path, invoker):
    with pytest.raises(ToolFailedError):
        git_revision(tmp_path, invoker)
