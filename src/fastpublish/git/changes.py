"""Change detection since the last release tag."""

from __future__ import annotations

from pathlib import Path

from fastpublish.errors import GitError
from fastpublish.git.lock import DEFAULT_LOCK_FILE
from fastpublish.git.repo import run_git_command
from fastpublish.git.strategy import GitStrategy


async def has_changes_since_last_tag(
    cwd: Path,
    *,
    git: GitStrategy | None = None,
    lock_file: str = DEFAULT_LOCK_FILE,
) -> bool:
    """Check whether anything changed between the last tag and HEAD.

    "Changed" means ``git diff <tag>..HEAD --stat`` prints anything, so
    whitespace or line-ending only edits count.

    Fails open: with no tag yet, or if any git command fails, the answer
    is True so a conditional release never silently does nothing.

    Args:
        cwd: Working directory.
        git: Backend to use.
        lock_file: Lock path relative to ``cwd``.

    Returns:
        True if there are changes (or they cannot be ruled out).
    """
    try:
        last_tag = (
            await run_git_command(
                ["describe", "--tags", "--abbrev=0"], cwd, git=git, lock_file=lock_file
            )
        ).strip()
        if not last_tag:
            return True
        diff = await run_git_command(
            ["diff", f"{last_tag}..HEAD", "--stat"], cwd, git=git, lock_file=lock_file
        )
    except (GitError, OSError):
        return True
    return len(diff.strip()) > 0
