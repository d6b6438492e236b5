"""Interchangeable git backends.

Two strategies share one contract: run ``git <args>`` in a directory and
return stdout, or raise :class:`GitError`. The GitPython backend is used when
the library is installed; otherwise commands go through a plain subprocess.
The choice is probed once and cached for the life of the process.
"""

from __future__ import annotations

import asyncio
import importlib.util
from collections.abc import Sequence
from pathlib import Path
from typing import Literal, Protocol

from fastpublish.errors import ConfigurationError, GitError

StrategyName = Literal["auto", "subprocess", "gitpython"]


class GitStrategy(Protocol):
    """Runs git subcommands in a working directory."""

    name: str

    async def exec(self, cwd: Path, args: Sequence[str]) -> str:
        """Run ``git <args>`` and return its stdout.

        Raises:
            GitError: If git exits non-zero or cannot be started.
        """
        ...


def _format_command(args: Sequence[str]) -> str:
    return " ".join(["git", *args])


class SubprocessGitStrategy:
    """Runs git as a child process via asyncio."""

    name = "subprocess"

    async def exec(self, cwd: Path, args: Sequence[str]) -> str:
        cmd = ["git", *args]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitError(f"Cannot run git: {e}", command=_format_command(args)) from e

        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise GitError(
                stderr.strip() or f"Command failed with exit code {process.returncode}",
                command=_format_command(args),
                exit_code=process.returncode,
                stderr=stderr,
            )
        return stdout


class GitPythonStrategy:
    """Runs git through GitPython's command wrapper.

    GitPython calls are blocking, so each one is moved to a worker thread.
    """

    name = "gitpython"

    async def exec(self, cwd: Path, args: Sequence[str]) -> str:
        try:
            import git
            from git.exc import GitCommandNotFound
        except ImportError as e:
            raise GitError(f"GitPython is unavailable: {e}", command=_format_command(args)) from e

        def run() -> tuple[int, str, str]:
            return git.Git(str(cwd)).execute(
                ["git", *args],
                with_extended_output=True,
                with_exceptions=False,
                strip_newline_in_stdout=False,
            )

        try:
            status, stdout, stderr = await asyncio.to_thread(run)
        except GitCommandNotFound as e:
            raise GitError(f"Cannot run git: {e}", command=_format_command(args)) from e

        if status != 0:
            raise GitError(
                stderr.strip() or f"Command failed with exit code {status}",
                command=_format_command(args),
                exit_code=status,
                stderr=stderr,
            )
        return stdout


# Probed on first use of the "auto" strategy, never re-probed.
_cached_strategy: GitStrategy | None = None


def gitpython_available() -> bool:
    """Check whether GitPython is installed and importable.

    GitPython refuses to import when it cannot find a git executable, so the
    module is imported rather than just located.
    """
    if importlib.util.find_spec("git") is None:
        return False
    try:
        import git  # noqa: F401
    except ImportError:
        return False
    return True


def get_git_strategy(preference: StrategyName = "auto") -> GitStrategy:
    """Return the git backend to use.

    Args:
        preference: "auto" picks GitPython when installed, falling back to
            subprocess; the other values force a backend.

    Raises:
        ConfigurationError: If GitPython is requested but not installed.
    """
    global _cached_strategy

    if preference == "subprocess":
        return SubprocessGitStrategy()
    if preference == "gitpython":
        if not gitpython_available():
            raise ConfigurationError("git.strategy is 'gitpython' but GitPython is not installed")
        return GitPythonStrategy()

    if _cached_strategy is None:
        _cached_strategy = GitPythonStrategy() if gitpython_available() else SubprocessGitStrategy()
    return _cached_strategy


def reset_git_strategy() -> None:
    """Forget the cached backend choice. Intended for tests."""
    global _cached_strategy
    _cached_strategy = None
