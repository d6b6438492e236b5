"""Exception hierarchy for fastpublish."""

from __future__ import annotations

from pathlib import Path


class FastPublishError(Exception):
    """Base class for all fastpublish errors.

    Attributes:
        message: Human readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(FastPublishError):
    """Raised when fastpublish.yaml is invalid."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


class ManifestError(FastPublishError):
    """Raised when the package manifest is missing or unparsable."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class WriteError(FastPublishError):
    """Raised when the updated manifest cannot be written back."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class GitError(FastPublishError):
    """Raised when a git command fails.

    Attributes:
        command: The command line that failed.
        exit_code: Process exit code, if the process ran.
        stderr: Raw stderr of the failed command.
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class VcsError(GitError):
    """A release sub-step (add, commit, tag, push) failed."""

    def __init__(self, stage: str, error: GitError) -> None:
        super().__init__(
            error.message,
            command=error.command,
            exit_code=error.exit_code,
            stderr=error.stderr,
        )
        self.stage = stage


class RegistryPublishError(FastPublishError):
    """Raised when the registry publish command fails."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class NoTagError(FastPublishError):
    """Raised when an operation needs a git tag and none exists."""
