"""Git operations used by the release pipelines."""

from __future__ import annotations

from pathlib import Path

from fastpublish.errors import GitError
from fastpublish.git.lock import DEFAULT_LOCK_FILE, clear_stale_lock
from fastpublish.git.strategy import GitStrategy, get_git_strategy


async def run_git_command(
    args: list[str],
    cwd: Path,
    *,
    git: GitStrategy | None = None,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> str:
    """Clear a stale lock, then run a git command.

    Args:
        args: Git command arguments (without 'git').
        cwd: Working directory.
        git: Backend to use; defaults to the cached process-wide strategy.
        lock_file: Lock path relative to ``cwd``.

    Returns:
        Stdout of the command, untrimmed.

    Raises:
        GitError: If the command fails.
    """
    clear_stale_lock(cwd, lock_file)
    return await (git or get_git_strategy()).exec(cwd, args)


async def get_latest_tag(
    cwd: Path,
    *,
    git: GitStrategy | None = None,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> str | None:
    """Get the most recent tag reachable from HEAD.

    Returns:
        Tag name, or None if the repository has no tags (or git fails).
    """
    try:
        output = await run_git_command(
            ["describe", "--tags", "--abbrev=0"], cwd, git=git, lock_file=lock_file
        )
    except GitError:
        return None
    return output.strip() or None


async def push(
    cwd: Path,
    remote: str = "origin",
    *,
    tags: bool = False,
    git: GitStrategy | None = None,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> str:
    """Push to a remote.

    Args:
        cwd: Working directory.
        remote: Remote name.
        tags: Push tags instead of the current branch.

    Raises:
        GitError: If the push fails.
    """
    args = ["push", remote]
    if tags:
        args.append("--tags")
    return await run_git_command(args, cwd, git=git, lock_file=lock_file)


async def push_with_tags_best_effort(
    cwd: Path,
    remote: str = "origin",
    *,
    git: GitStrategy | None = None,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> bool:
    """Push tags, ignoring any failure.

    Used after a registry publish fails so a tag created locally does not
    stay unpushed.

    Returns:
        True if the push succeeded.
    """
    try:
        await push(cwd, remote, tags=True, git=git, lock_file=lock_file)
    except GitError:
        return False
    return True
