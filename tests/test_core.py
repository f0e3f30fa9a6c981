from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gitdir import git_ops
from gitdir.models import DETACHED_HEAD, DiffCommitCount, ModifiedCount
from gitdir.services import discover_working_trees, get_status, get_status_for_root

GIT_AVAILABLE = subprocess.run(["git", "--version"], capture_output=True).returncode == 0

pytestmark = [
    pytest.mark.skipif(not GIT_AVAILABLE, reason="git missing"),
    pytest.mark.asyncio,
]


def _run(cmd: list[str], cwd: Path | None = None) -> None:
    subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=True, capture_output=True)


def _git(path: Path, *args: str) -> None:
    _run(["git", "-C", str(path), *args])


def _commit(path: Path, filename: str, content: str, message: str = "change") -> None:
    (path / filename).write_text(content)
    _git(path, "add", ".")
    _git(path, "commit", "-m", message)


def _init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    _git(path, "init")
    _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(path, "config", "user.email", "test@example.com")
    _git(path, "config", "user.name", "Test")
    _commit(path, "README.md", "hello\n", "init")
    return path


def _init_tracked_repo(root: Path) -> tuple[Path, Path]:
    """Create a bare remote and a clone of it whose main tracks origin/main."""
    remote = root / "remote.git"
    _run(["git", "init", "--bare", str(remote)])
    _git(remote, "symbolic-ref", "HEAD", "refs/heads/main")
    work = _init_repo(root / "work")
    _git(work, "remote", "add", "origin", str(remote))
    _git(work, "push", "-u", "origin", "main")
    return remote, work


async def test_clean_repo_status(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "clean")
    status = await get_status(repo)
    assert status.name == "clean"
    assert status.path == repo
    assert status.branch == "main"
    assert status.status == ""
    assert status.modified_count == ModifiedCount()
    assert status.diff_commit_count == DiffCommitCount(ahead=None, behind=None)
    assert not status.is_dirty
    assert not status.has_unsaved_changes
    assert not status.has_unmerged_commits
    assert not status.has_unsynced_commits
    assert not status.too_many_changes


async def test_dirty_repo_status(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "dirty")
    (repo / "README.md").write_text("hello\nworld\n")
    (repo / "untracked.txt").write_text("new")
    status = await get_status(repo)
    assert status.modified_count == ModifiedCount(files=1, insertions=1, deletions=0)
    assert status.is_dirty
    assert status.has_unsaved_changes
    assert " M README.md" in status.status.splitlines()
    assert "?? untracked.txt" in status.status.splitlines()


async def test_many_untracked_files_are_too_many_changes(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "noisy")
    for i in range(60):
        (repo / f"untracked_generated_file_{i:04}.txt").write_text("x")
    status = await get_status(repo)
    assert len(status.status) > 1000
    assert status.too_many_changes
    assert not status.is_dirty


async def test_detached_head(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "detached")
    _git(repo, "checkout", "--detach")
    assert await git_ops.get_current_branch(repo) == DETACHED_HEAD


async def test_ahead_and_behind_upstream(tmp_path: Path) -> None:
    remote, work = _init_tracked_repo(tmp_path)
    status = await get_status(work)
    assert status.diff_commit_count == DiffCommitCount(ahead=0, behind=0)
    assert not status.has_unsynced_commits

    _commit(work, "local.txt", "local")
    status = await get_status(work)
    assert status.diff_commit_count == DiffCommitCount(ahead=1, behind=0)
    assert status.has_unmerged_commits
    assert status.has_unsaved_changes

    other = tmp_path / "other"
    _run(["git", "clone", str(remote), str(other)])
    _git(other, "config", "user.email", "test@example.com")
    _git(other, "config", "user.name", "Test")
    _commit(other, "remote.txt", "remote")
    _git(other, "push", "origin", "main")
    _git(work, "fetch", "origin")

    counts = await git_ops.get_ahead_behind_count(work, "main")
    assert counts == DiffCommitCount(ahead=1, behind=1)


async def test_get_status_is_idempotent(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "repo")
    (repo / "README.md").write_text("changed\n")
    assert await get_status(repo) == await get_status(repo)


async def test_discover_root_that_is_a_repo(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path / "repo")
    _init_repo(repo / "nested")
    assert await discover_working_trees(repo) == [repo]


async def test_discover_children(tmp_path: Path) -> None:
    root = tmp_path / "projects"
    first = _init_repo(root / "a-repo")
    (root / "b-plain").mkdir(parents=True)
    second = _init_repo(root / "c-repo")
    assert await discover_working_trees(root) == [first, second]

    statuses = await get_status_for_root(root)
    assert [s.name for s in statuses] == ["a-repo", "c-repo"]


async def test_is_working_tree_missing_path(tmp_path: Path) -> None:
    assert not await git_ops.is_working_tree(tmp_path / "does-not-exist")


async def test_default_branch_names(tmp_path: Path) -> None:
    remote, work = _init_tracked_repo(tmp_path)
    _git(work, "remote", "set-head", "origin", "main")
    assert await git_ops.get_remote_default_branch(work) == "main"

    _git(work, "config", "init.defaultBranch", "trunk")
    assert await git_ops.get_local_default_branch(work) == "trunk"
