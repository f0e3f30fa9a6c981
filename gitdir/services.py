"""Discovery and status aggregation for working trees."""

import asyncio
from pathlib import Path

from loguru import logger

from gitdir import git_ops
from gitdir.models import GitStatus


async def discover_working_trees(root: Path) -> list[Path]:
    """Resolve a root into itself, or into its immediate subdirectories that are working trees."""
    if await git_ops.is_working_tree(root):
        return [root]

    dirs = git_ops.list_subdirectories(root)
    checks = await asyncio.gather(*(git_ops.is_working_tree(d) for d in dirs))
    found = [d for d, ok in zip(dirs, checks) if ok]
    logger.debug("found {} working trees under {}", len(found), root)
    return found


async def get_status(path: Path) -> GitStatus:
    """Collect branch, status, upstream and diff information for one working tree."""
    branch, status_info, diff_commit_count, modified_count = await asyncio.gather(
        git_ops.get_current_branch(path),
        git_ops.get_short_status(path),
        git_ops.get_ahead_behind_count(path),
        git_ops.get_modified_counts(path),
    )
    return GitStatus.build(
        path=path,
        branch=branch,
        status_info=status_info,
        diff_commit_count=diff_commit_count,
        modified_count=modified_count,
    )


async def get_status_for_root(root: Path) -> list[GitStatus]:
    """Get the status of every working tree discovered under a root, in discovery order."""
    paths = await discover_working_trees(root)
    return list(await asyncio.gather(*(get_status(path) for path in paths)))


async def get_default_branch(path: Path) -> str:
    """Get origin's default branch, falling back to init.defaultBranch (empty if neither)."""
    remote = await git_ops.get_remote_default_branch(path)
    if remote:
        return remote
    return await git_ops.get_local_default_branch(path)
