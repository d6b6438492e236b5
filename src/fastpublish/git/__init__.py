"""Git integration."""

from fastpublish.git.changes import has_changes_since_last_tag
from fastpublish.git.lock import DEFAULT_LOCK_FILE, clear_stale_lock
from fastpublish.git.repo import (
    get_latest_tag,
    push,
    push_with_tags_best_effort,
    run_git_command,
)
from fastpublish.git.strategy import (
    GitPythonStrategy,
    GitStrategy,
    SubprocessGitStrategy,
    get_git_strategy,
    gitpython_available,
    reset_git_strategy,
)

__all__ = [
    "DEFAULT_LOCK_FILE",
    "GitPythonStrategy",
    "GitStrategy",
    "SubprocessGitStrategy",
    "clear_stale_lock",
    "get_git_strategy",
    "get_latest_tag",
    "gitpython_available",
    "has_changes_since_last_tag",
    "push",
    "push_with_tags_best_effort",
    "reset_git_strategy",
    "run_git_command",
]
