"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

from fastpublish.commands.results import PublishOutcome, ReleaseStage
from fastpublish.config import FastPublishConfig, load_config
from fastpublish.errors import ConfigurationError, RegistryPublishError
from fastpublish.execution import run_command, strip_ansi
from fastpublish.git import (
    GitStrategy,
    clear_stale_lock,
    get_git_strategy,
    get_latest_tag,
    has_changes_since_last_tag,
    push_with_tags_best_effort,
)
from fastpublish.notify import ConsoleNotifier, Notification, NotificationLevel, Notifier

TResult = TypeVar("TResult")

NO_CHANGES_REASON = "no changes since last tag"


@dataclass
class CommandContext:
    """Dependencies passed to every command.

    Attributes:
        path: Package directory the command runs in.
        config: Loaded configuration.
        notifier: Where user-facing messages go.
        git: Git backend; None selects the process-wide default on first use.
    """

    path: Path
    config: FastPublishConfig = field(default_factory=FastPublishConfig)
    notifier: Notifier = field(default_factory=ConsoleNotifier)
    git: GitStrategy | None = None

    @classmethod
    def for_path(
        cls,
        path: Path,
        *,
        config: FastPublishConfig | None = None,
        notifier: Notifier | None = None,
        git: GitStrategy | None = None,
    ) -> CommandContext:
        """Build a context, loading fastpublish.yaml for ``path`` unless a config is given.

        Raises:
            ConfigurationError: If the config file is invalid.
        """
        return cls(
            path=path,
            config=config or load_config(path),
            notifier=notifier or ConsoleNotifier(),
            git=git,
        )

    @property
    def package_name(self) -> str:
        return self.path.name

    @property
    def git_strategy(self) -> GitStrategy:
        if self.git is None:
            self.git = get_git_strategy(self.config.git.strategy)
        return self.git


async def run_registry_command(command: str, cwd: Path) -> str:
    """Run a registry publish command.

    Returns:
        Stdout of the command.

    Raises:
        RegistryPublishError: If the command exits non-zero.
    """
    exit_code, stdout, stderr = await run_command(command, cwd)
    if exit_code != 0:
        raise RegistryPublishError(
            strip_ansi(stderr).strip() or f"Command failed with exit code {exit_code}",
            command=command,
            exit_code=exit_code,
            stderr=stderr,
        )
    return stdout


class Command(ABC, Generic[TResult]):
    """Base class for fastpublish commands.

    Commands receive a context and return a result. Helpers for the steps
    shared by the pipelines (change gate, notifications, registry recovery)
    live here.
    """

    # Prefix for notification titles
    title = "Fast Publish"

    def __init__(self, context: CommandContext) -> None:
        """Initialize command.

        Args:
            context: Command context.
        """
        self.context = context
        self.path = context.path
        self.config = context.config

    @abstractmethod
    async def execute(self) -> TResult:
        """Execute the command.

        Returns:
            Command-specific result.
        """
        ...

    @property
    def package_name(self) -> str:
        return self.context.package_name

    def notify(self, level: NotificationLevel, message: str, detail: str | None = None) -> None:
        """Send a notification prefixed with the command title."""
        self.context.notifier.notify(Notification(level, f"{self.title}: {message}", detail))

    def clear_lock(self) -> bool:
        return clear_stale_lock(self.path, self.config.git.lock_file)

    async def has_changes(self) -> bool:
        return await has_changes_since_last_tag(
            self.path,
            git=self.context.git_strategy,
            lock_file=self.config.git.lock_file,
        )

    async def latest_tag(self) -> str | None:
        return await get_latest_tag(
            self.path,
            git=self.context.git_strategy,
            lock_file=self.config.git.lock_file,
        )

    def skip_unchanged(self) -> PublishOutcome:
        self.notify(NotificationLevel.INFO, f"{self.package_name} has {NO_CHANGES_REASON}")
        return PublishOutcome.skipped_result(self.package_name, NO_CHANGES_REASON)

    def fail(
        self,
        stage: ReleaseStage,
        detail: str,
        message: str | None = None,
        *,
        old_version: str | None = None,
        new_version: str | None = None,
        tag: str | None = None,
    ) -> PublishOutcome:
        """Report a failure and build the matching outcome."""
        detail = strip_ansi(detail)
        self.notify(
            NotificationLevel.ERROR,
            message or f"{self.package_name} failed at {stage.value}",
            detail,
        )
        return PublishOutcome.failure_result(
            self.package_name,
            stage,
            detail,
            old_version=old_version,
            new_version=new_version,
            tag=tag,
        )

    async def recover_registry_failure(
        self,
        error: RegistryPublishError,
        *,
        old_version: str | None = None,
        new_version: str | None = None,
    ) -> PublishOutcome:
        """Handle a failed registry publish.

        Nothing is rolled back. The registry tool may already have committed
        and tagged locally, so tags are pushed (errors ignored) and the user
        is pointed at the publish-tag operation for a retry.
        """
        detail = strip_ansi(error.stderr or error.message)
        self.notify(NotificationLevel.ERROR, f"failed to publish {self.package_name}", detail)

        pushed = await push_with_tags_best_effort(
            self.path,
            self.config.git.remote,
            git=self.context.git_strategy,
            lock_file=self.config.git.lock_file,
        )

        tag = await self.latest_tag()
        hint = None
        if tag:
            hint = f'use "fastpublish ppm-tag" to retry publishing {tag}'
            self.notify(NotificationLevel.INFO, hint)

        return PublishOutcome.failure_result(
            self.package_name,
            ReleaseStage.REGISTRY,
            detail,
            old_version=old_version,
            new_version=new_version,
            tag=tag,
            recovery_hint=hint,
            recovery_pushed=pushed,
        )


def config_failure(
    path: Path, error: ConfigurationError, notifier: Notifier | None = None
) -> PublishOutcome:
    """Report an invalid configuration for a package directory."""
    (notifier or ConsoleNotifier()).notify(
        Notification(
            NotificationLevel.ERROR,
            f"{Command.title}: {path.name} has an invalid configuration",
            str(error),
        )
    )
    return PublishOutcome.failure_result(path.name, ReleaseStage.CONFIG, str(error))
