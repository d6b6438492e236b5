"""Bump, commit, tag and push a package release."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fastpublish.commands.base import (
    Command,
    CommandContext,
    config_failure,
    run_registry_command,
)
from fastpublish.commands.results import PublishOutcome, ReleaseStage
from fastpublish.errors import (
    ConfigurationError,
    GitError,
    ManifestError,
    RegistryPublishError,
    VcsError,
    WriteError,
)
from fastpublish.execution import strip_ansi
from fastpublish.notify import ConsoleNotifier, NotificationLevel, Notifier
from fastpublish.versioning import (
    BumpMode,
    BumpType,
    get_manifest_version,
    increase_version,
    load_manifest,
    save_manifest,
)

if TYPE_CHECKING:
    from rich.console import Console

    from fastpublish.config import FastPublishConfig
    from fastpublish.git import GitStrategy


@dataclass
class PublishOptions:
    """Options for the publish command.

    Attributes:
        mode: Bump type and change gate.
        registry: Also publish the new tag to the package registry.
    """

    mode: BumpMode
    registry: bool = False


@dataclass(frozen=True)
class ReleasePlan:
    """Names and commands for one release, rendered before anything is written.

    Attributes:
        old_version: Version read from the manifest.
        new_version: Version the manifest is bumped to.
        tag: Annotated tag to create.
        message: Commit and tag message.
        registry_command: Registry publish command, if publishing to the registry.
    """

    old_version: str
    new_version: str
    tag: str
    message: str
    registry_command: str | None = None


class PublishCommand(Command[PublishOutcome]):
    """Release a package directory.

    Runs gate, bump, manifest write, then add/commit/tag/push. Each step
    must succeed before the next starts; the first failure ends the run.
    Configuration problems are caught before the manifest is touched.
    """

    def __init__(self, context: CommandContext, options: PublishOptions) -> None:
        super().__init__(context)
        self.options = options

    @property
    def manifest_path(self) -> Path:
        return self.path / self.config.manifest

    def read_manifest(self) -> tuple[dict[str, Any], str]:
        """Load the manifest.

        Returns:
            Tuple of (manifest data, current version).

        Raises:
            ManifestError: If the manifest is missing or unparsable.
        """
        data = load_manifest(self.manifest_path)
        return data, get_manifest_version(data, self.manifest_path)

    def write_manifest(self, data: dict[str, Any], version: str) -> None:
        """Save the manifest with a new version, keeping every other field.

        Raises:
            WriteError: If the manifest cannot be saved.
        """
        data["version"] = version
        save_manifest(self.manifest_path, data)

    def plan_release(self, old_version: str, bump: BumpType) -> ReleasePlan:
        """Compute the new version and render every configured template for it.

        Raises:
            ConfigurationError: If a template cannot be rendered.
        """
        new_version = increase_version(old_version, bump)
        tag = self.config.tag_for(new_version)
        registry_command = None
        if self.options.registry:
            registry_command = self.config.registry.publish_tag_command_for(tag)
        return ReleasePlan(
            old_version=old_version,
            new_version=new_version,
            tag=tag,
            message=self.config.commit_message_for(new_version),
            registry_command=registry_command,
        )

    async def git_release(self, plan: ReleasePlan, git: GitStrategy) -> None:
        """Stage, commit, tag and push a release.

        Raises:
            VcsError: If any step fails; later steps are not attempted.
        """
        steps = [
            (ReleaseStage.ADD, ["add", "--all"]),
            (ReleaseStage.COMMIT, ["commit", "--all", "-m", plan.message]),
            (ReleaseStage.TAG, ["tag", "-a", plan.tag, "-m", plan.message]),
            (ReleaseStage.PUSH, ["push", self.config.git.remote, "--tags"]),
        ]

        self.clear_lock()
        for stage, args in steps:
            try:
                await git.exec(self.path, args)
            except GitError as e:
                raise VcsError(stage.value, e) from e

    async def execute(self) -> PublishOutcome:
        """Execute the release pipeline."""
        mode = self.options.mode

        try:
            git = self.context.git_strategy
        except ConfigurationError as e:
            return self.fail(ReleaseStage.CONFIG, e.message)

        if mode.only_if_changed and not await self.has_changes():
            return self.skip_unchanged()

        try:
            data, old_version = self.read_manifest()
        except ManifestError as e:
            return self.fail(ReleaseStage.MANIFEST, e.message)

        try:
            plan = self.plan_release(old_version, mode.bump)
        except ConfigurationError as e:
            return self.fail(ReleaseStage.CONFIG, e.message, old_version=old_version)

        try:
            self.write_manifest(data, plan.new_version)
        except WriteError as e:
            return self.fail(ReleaseStage.WRITE, e.message, old_version=old_version)

        self.notify(
            NotificationLevel.INFO,
            f"version updated from v{plan.old_version} to v{plan.new_version}",
        )

        try:
            await self.git_release(plan, git)
        except VcsError as e:
            return self.fail(
                ReleaseStage(e.stage),
                e.stderr or e.message,
                old_version=plan.old_version,
                new_version=plan.new_version,
            )

        self.notify(
            NotificationLevel.SUCCESS, f"{self.package_name} v{plan.new_version} published"
        )

        if plan.registry_command is not None:
            return await self.publish_to_registry(plan, plan.registry_command)

        return PublishOutcome.success_result(
            self.package_name, plan.new_version, old_version=plan.old_version, tag=plan.tag
        )

    async def publish_to_registry(self, plan: ReleasePlan, command: str) -> PublishOutcome:
        """Publish the freshly pushed tag; recover if the registry rejects it."""
        try:
            stdout = await run_registry_command(command, self.path)
        except RegistryPublishError as e:
            return await self.recover_registry_failure(
                e, old_version=plan.old_version, new_version=plan.new_version
            )

        self.notify(
            NotificationLevel.SUCCESS,
            f"{self.package_name} {plan.tag} published to registry",
            strip_ansi(stdout) or None,
        )
        return PublishOutcome.success_result(
            self.package_name, plan.new_version, old_version=plan.old_version, tag=plan.tag
        )


async def publish(
    path: Path,
    mode: BumpMode | str,
    *,
    registry: bool = False,
    config: FastPublishConfig | None = None,
    notifier: Notifier | None = None,
    git: GitStrategy | None = None,
) -> PublishOutcome:
    """Convenience function to release one package directory.

    Configuration errors are reported like any other failure rather than
    raised.
    """
    if isinstance(mode, str):
        mode = BumpMode.parse(mode)

    try:
        context = CommandContext.for_path(path, config=config, notifier=notifier, git=git)
    except ConfigurationError as e:
        return config_failure(path, e, notifier)

    cmd = PublishCommand(context, PublishOptions(mode=mode, registry=registry))
    return await cmd.execute()


async def publish_all(
    paths: Sequence[Path],
    mode: BumpMode | str,
    *,
    registry: bool = False,
    notifier: Notifier | None = None,
    git: GitStrategy | None = None,
) -> list[PublishOutcome]:
    """Release several directories concurrently, one pipeline each.

    Invocations are independent; nothing serializes two runs that target
    the same repository.
    """
    return list(
        await asyncio.gather(
            *(publish(p, mode, registry=registry, notifier=notifier, git=git) for p in paths)
        )
    )


async def handle_publish_command(
    paths: Sequence[Path],
    mode: str,
    *,
    console: Console,
    error_console: Console,
    registry: bool = False,
) -> None:
    """CLI handler for the git publish command."""
    import typer

    from fastpublish.cli.output.table import print_outcomes

    try:
        bump_mode = BumpMode.parse(mode)
    except ValueError as e:
        error_console.print(f"[red]Invalid bump mode:[/red] {mode}")
        raise typer.Exit(1) from e

    notifier = ConsoleNotifier(console, error_console)
    outcomes = await publish_all(paths, bump_mode, registry=registry, notifier=notifier)

    print_outcomes(outcomes, console)
    if any(o.failed for o in outcomes):
        raise typer.Exit(1)
