"""Git subprocess operations."""

import asyncio
import os
import shutil
from pathlib import Path
from typing import Sequence

from loguru import logger

from gitdir import parsers
from gitdir.models import (
    UNAVAILABLE,
    DiffCommitCount,
    ModifiedCount,
    Ok,
    Outcome,
    ShortStatusInfo,
)


class CommandError(Exception):
    """Git command failed, or git could not be started at all."""

    def __init__(self, cmd: Sequence[str], stderr: str, returncode: int | None = None) -> None:
        self.cmd = cmd
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"git {' '.join(cmd)}: {stderr}")

    @property
    def spawn_failed(self) -> bool:
        """True when the process never ran (git missing, bad cwd)."""
        return self.returncode is None


def git_executable() -> str:
    return os.environ.get("GITDIR_GIT", "git")


def ensure_git() -> None:
    """Raise CommandError if the git executable cannot be found."""
    if shutil.which(git_executable()) is None:
        raise CommandError(["--version"], f"{git_executable()}: command not found")


async def run(args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a git command and return stdout."""
    logger.debug("{} {}", git_executable(), " ".join(args))
    try:
        process = await asyncio.create_subprocess_exec(
            git_executable(),
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise CommandError(args, str(exc)) from exc

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        logger.debug(
            "{} {} exited {}: {}", git_executable(), " ".join(args), process.returncode, message
        )
        raise CommandError(args, message, process.returncode)
    return stdout.decode("utf-8", errors="replace")


async def try_run(args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a git command, returning an empty string when it exits non-zero."""
    try:
        return await run(args, cwd=cwd)
    except CommandError as exc:
        if exc.spawn_failed:
            raise
        return ""


async def run_outcome(args: Sequence[str], cwd: Path | None = None) -> Outcome[str]:
    """Run a git command, reporting any failure as UNAVAILABLE."""
    try:
        return Ok(await run(args, cwd=cwd))
    except CommandError:
        return UNAVAILABLE


def _git_args(path: Path, *args: str) -> list[str]:
    return ["-C", str(path), *args]


async def get_current_branch(path: Path) -> str:
    """Get the checked-out branch name, or the detached-head label."""
    # https://git-scm.com/docs/git-branch#Documentation/git-branch.txt---show-current
    return parsers.parse_branch(await run(_git_args(path, "branch", "--show-current")))


async def get_short_status(path: Path) -> ShortStatusInfo:
    """Get the short-form change listing."""
    # https://git-scm.com/docs/git-status
    result = await run_outcome(_git_args(path, "status", "-s"))
    if isinstance(result, Ok):
        return parsers.parse_short_status(result.value)
    return ShortStatusInfo(status="", too_many_changes=True)


async def get_ahead_behind_count(path: Path, branch: str | None = None) -> DiffCommitCount:
    """Count commits ahead and behind the upstream of `branch` (default HEAD)."""
    # https://git-scm.com/docs/git-rev-list#Documentation/git-rev-list.txt---count
    result = await run_outcome(
        _git_args(path, "rev-list", "--count", "--left-right", f"{branch or 'HEAD'}...@{{upstream}}")
    )
    if isinstance(result, Ok):
        return parsers.parse_ahead_behind(result.value)
    # fatal: no upstream configured for branch 'feature'
    return DiffCommitCount()


async def get_modified_counts(path: Path) -> ModifiedCount:
    """Get file/insertion/deletion counts for uncommitted changes."""
    # https://git-scm.com/docs/git-diff#Documentation/git-diff.txt---shortstat
    return parsers.parse_shortstat(await try_run(_git_args(path, "diff", "--shortstat")))


async def get_remote_default_branch(path: Path) -> str:
    """Get the default branch of origin (empty if unknown)."""
    result = await run_outcome(_git_args(path, "rev-parse", "--abbrev-ref", "origin/HEAD"))
    if isinstance(result, Ok):
        return parsers.parse_remote_default_branch(result.value)
    return ""


async def get_local_default_branch(path: Path) -> str:
    """Get init.defaultBranch from git config (empty if unset)."""
    result = await run_outcome(_git_args(path, "config", "--get", "init.defaultBranch"))
    if isinstance(result, Ok):
        return result.value.strip()
    return ""


async def is_working_tree(path: Path) -> bool:
    """Check if a path is inside a git working tree."""
    # https://git-scm.com/docs/git-rev-parse#Documentation/git-rev-parse.txt---is-inside-work-tree
    result = await run_outcome(_git_args(path, "rev-parse", "--is-inside-work-tree"))
    return isinstance(result, Ok) and parsers.parse_is_inside_work_tree(result.value)


def list_subdirectories(root: Path) -> list[Path]:
    """List the immediate subdirectories of a path, sorted by name."""
    if not root.is_dir():
        return []
    return sorted((entry for entry in root.iterdir() if entry.is_dir()), key=lambda p: p.name)
