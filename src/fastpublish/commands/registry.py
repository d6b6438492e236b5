"""Package registry publishing (ppm publish)."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from fastpublish.commands.base import (
    Command,
    CommandContext,
    config_failure,
    run_registry_command,
)
from fastpublish.commands.results import PublishOutcome, ReleaseStage
from fastpublish.errors import (
    ConfigurationError,
    FastPublishError,
    GitError,
    NoTagError,
    RegistryPublishError,
)
from fastpublish.execution import strip_ansi
from fastpublish.git import push
from fastpublish.notify import ConsoleNotifier, NotificationLevel, Notifier
from fastpublish.versioning import BumpMode, get_manifest_version, load_manifest

if TYPE_CHECKING:
    from rich.console import Console

    from fastpublish.config import FastPublishConfig
    from fastpublish.git import GitStrategy


@dataclass
class RegistryPublishOptions:
    """Options for the registry publish command."""

    mode: BumpMode


class RegistryPublishCommand(Command[PublishOutcome]):
    """Let the registry tool bump, tag and publish, then push to the remote.

    If the registry tool fails it may already have committed and tagged
    locally; tags are then pushed anyway and a retry hint is reported.
    """

    title = "PPM Publish"

    def __init__(self, context: CommandContext, options: RegistryPublishOptions) -> None:
        super().__init__(context)
        self.options = options

    def read_version(self) -> str | None:
        """Version currently in the manifest, or None if it cannot be read."""
        path = self.path / self.config.manifest
        try:
            return get_manifest_version(load_manifest(path), path)
        except FastPublishError:
            return None

    async def execute(self) -> PublishOutcome:
        mode = self.options.mode
        bump = mode.bump.value

        try:
            git = self.context.git_strategy
            command = self.config.registry.publish_command_for(bump)
        except ConfigurationError as e:
            return self.fail(ReleaseStage.CONFIG, e.message)

        if mode.only_if_changed and not await self.has_changes():
            return self.skip_unchanged()

        # ppm runs git itself
        self.clear_lock()
        old_version = self.read_version()
        self.notify(NotificationLevel.INFO, f"publishing {self.package_name} as {bump}...")

        try:
            stdout = await run_registry_command(command, self.path)
        except RegistryPublishError as e:
            return await self.recover_registry_failure(e, old_version=old_version)

        self.notify(
            NotificationLevel.SUCCESS,
            f"{self.package_name} published",
            strip_ansi(stdout) or None,
        )
        new_version = self.read_version()
        tag = self.config.tag_for(new_version) if new_version else None

        try:
            await push(
                self.path,
                self.config.git.remote,
                git=git,
                lock_file=self.config.git.lock_file,
            )
        except GitError as e:
            return self.fail(
                ReleaseStage.PUSH,
                e.stderr or e.message,
                f"failed to push {self.package_name}",
                old_version=old_version,
                new_version=new_version,
                tag=tag,
            )

        self.notify(
            NotificationLevel.SUCCESS,
            f"{self.package_name} pushed to {self.config.git.remote}",
        )
        return PublishOutcome.success_result(
            self.package_name, new_version, old_version=old_version, tag=tag
        )


class PublishTagCommand(Command[PublishOutcome]):
    """Publish the most recent existing tag without bumping again."""

    title = "PPM Publish Tag"

    async def require_latest_tag(self) -> str:
        """Latest tag of the repository.

        Raises:
            NoTagError: If the repository has no tags.
        """
        tag = await self.latest_tag()
        if tag is None:
            raise NoTagError(f"{self.package_name} has no git tags")
        return tag

    async def execute(self) -> PublishOutcome:
        try:
            self.context.git_strategy
        except ConfigurationError as e:
            return self.fail(ReleaseStage.CONFIG, e.message)

        try:
            tag = await self.require_latest_tag()
        except NoTagError as e:
            return self.fail(ReleaseStage.TAG, e.message, e.message)

        try:
            command = self.config.registry.publish_tag_command_for(tag)
        except ConfigurationError as e:
            return self.fail(ReleaseStage.CONFIG, e.message, tag=tag)

        self.clear_lock()
        self.notify(NotificationLevel.INFO, f"publishing {self.package_name} tag {tag}...")

        try:
            stdout = await run_registry_command(command, self.path)
        except RegistryPublishError as e:
            return self.fail(
                ReleaseStage.REGISTRY,
                e.stderr or e.message,
                f"failed to publish {self.package_name}",
                tag=tag,
            )

        self.notify(
            NotificationLevel.SUCCESS,
            f"{self.package_name} {tag} published",
            strip_ansi(stdout) or None,
        )
        version = tag.removeprefix(self.config.tag_prefix)
        return PublishOutcome.success_result(self.package_name, version, tag=tag)


async def registry_publish(
    path: Path,
    mode: BumpMode | str,
    *,
    config: FastPublishConfig | None = None,
    notifier: Notifier | None = None,
    git: GitStrategy | None = None,
) -> PublishOutcome:
    """Convenience function to publish one directory through the registry tool."""
    if isinstance(mode, str):
        mode = BumpMode.parse(mode)

    try:
        context = CommandContext.for_path(path, config=config, notifier=notifier, git=git)
    except ConfigurationError as e:
        return config_failure(path, e, notifier)

    return await RegistryPublishCommand(context, RegistryPublishOptions(mode)).execute()


async def publish_latest_tag(
    path: Path,
    *,
    config: FastPublishConfig | None = None,
    notifier: Notifier | None = None,
    git: GitStrategy | None = None,
) -> PublishOutcome:
    """Convenience function to retry a registry publish for the latest tag."""
    try:
        context = CommandContext.for_path(path, config=config, notifier=notifier, git=git)
    except ConfigurationError as e:
        return config_failure(path, e, notifier)

    return await PublishTagCommand(context).execute()


async def handle_registry_command(
    paths: Sequence[Path],
    mode: str | None,
    *,
    console: Console,
    error_console: Console,
) -> None:
    """CLI handler for ``ppm`` (with a mode) and ``ppm-tag`` (mode None)."""
    import typer

    from fastpublish.cli.output.table import print_outcomes

    notifier = ConsoleNotifier(console, error_console)

    if mode is None:
        outcomes = await asyncio.gather(
            *(publish_latest_tag(p, notifier=notifier) for p in paths)
        )
    else:
        try:
            bump_mode = BumpMode.parse(mode)
        except ValueError as e:
            error_console.print(f"[red]Invalid bump mode:[/red] {mode}")
            raise typer.Exit(1) from e
        outcomes = await asyncio.gather(
            *(registry_publish(p, bump_mode, notifier=notifier) for p in paths)
        )

    print_outcomes(list(outcomes), console)
    if any(o.failed for o in outcomes):
        raise typer.Exit(1)
