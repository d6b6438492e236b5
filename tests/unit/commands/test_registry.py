"""Tests for registry publishing and publish-existing-tag."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from fastpublish.commands.base import CommandContext
from fastpublish.commands.registry import (
    PublishTagCommand,
    RegistryPublishCommand,
    RegistryPublishOptions,
    publish_latest_tag,
    registry_publish,
)
from fastpublish.commands.results import OutcomeStatus, ReleaseStage
from fastpublish.config import FastPublishConfig, RegistryConfig
from fastpublish.errors import GitError, NoTagError
from fastpublish.notify import NotificationLevel, RecordingNotifier
from fastpublish.versioning import BumpMode


def registry_command(package_dir: Path, git, notifier, mode: str) -> RegistryPublishCommand:
    context = CommandContext(path=package_dir, notifier=notifier, git=git)
    return RegistryPublishCommand(context, RegistryPublishOptions(BumpMode.parse(mode)))


def tag_command(package_dir: Path, git, notifier) -> PublishTagCommand:
    return PublishTagCommand(CommandContext(path=package_dir, notifier=notifier, git=git))


def fake_ppm(package_dir: Path, new_version: str):
    """A registry command double that bumps the manifest like ppm does."""

    async def run(command: str, cwd: Path) -> tuple[int, str, str]:
        path = package_dir / "package.json"
        data = json.loads(path.read_text())
        data["version"] = new_version
        path.write_text(json.dumps(data, indent=2))
        return 0, "\x1b[32mPublishing my-pkg@v1.1.0 done\x1b[0m\n", ""

    return AsyncMock(side_effect=run)


class TestRegistryPublishCommand:
    """ppm publish <mode> followed by a push."""

    @pytest.mark.asyncio
    async def test_success_pushes_commits(self, package_dir: Path, fake_git, notifier) -> None:
        mock_run = fake_ppm(package_dir, "1.1.0")
        with patch("fastpublish.commands.base.run_command", mock_run):
            outcome = await registry_command(package_dir, fake_git, notifier, "minor").execute()

        assert outcome.status == OutcomeStatus.SUCCEEDED
        assert outcome.old_version == "1.0.0"
        assert outcome.new_version == "1.1.0"
        assert outcome.tag == "v1.1.0"
        assert mock_run.call_args[0][0] == "ppm publish minor"
        assert fake_git.calls == [["push", "origin"]]
        assert notifier.titles() == [
            "PPM Publish: publishing my-pkg as minor...",
            "PPM Publish: my-pkg published",
            "PPM Publish: my-pkg pushed to origin",
        ]
        assert notifier.notifications[1].detail == "Publishing my-pkg@v1.1.0 done"

    @pytest.mark.asyncio
    async def test_conditional_mode_passes_plain_mode(
        self, package_dir: Path, make_git, notifier
    ) -> None:
        git = make_git({"describe": "v1.0.0", "diff": " a | 1 +\n"})
        mock_run = fake_ppm(package_dir, "1.0.1")
        with patch("fastpublish.commands.base.run_command", mock_run):
            outcome = await registry_command(package_dir, git, notifier, "patch-if").execute()

        assert outcome.success
        assert mock_run.call_args[0][0] == "ppm publish patch"

    @pytest.mark.asyncio
    async def test_skips_when_unchanged(self, package_dir: Path, make_git, notifier) -> None:
        git = make_git({"describe": "v1.0.0", "diff": ""})
        with patch("fastpublish.commands.base.run_command", new_callable=AsyncMock) as mock_run:
            outcome = await registry_command(package_dir, git, notifier, "patch-if").execute()

        assert outcome.skipped
        mock_run.assert_not_called()
        assert notifier.titles() == ["PPM Publish: my-pkg has no changes since last tag"]

    @pytest.mark.asyncio
    async def test_clears_lock_before_publishing(
        self, package_dir: Path, fake_git, notifier
    ) -> None:
        lock = package_dir / ".git" / "index.lock"
        lock.write_text("")
        seen: list[bool] = []

        async def run(command: str, cwd: Path) -> tuple[int, str, str]:
            seen.append(lock.exists())
            return 0, "", ""

        with patch("fastpublish.commands.base.run_command", AsyncMock(side_effect=run)):
            await registry_command(package_dir, fake_git, notifier, "patch").execute()

        assert seen == [False]

    @pytest.mark.asyncio
    async def test_failure_recovers(self, package_dir: Path, make_git, notifier) -> None:
        git = make_git({"describe": "v1.0.1\n"})
        with patch(
            "fastpublish.commands.base.run_command",
            new_callable=AsyncMock,
            return_value=(1, "", "\x1b[31mError: 401 Unauthorized\x1b[0m\n"),
        ):
            outcome = await registry_command(package_dir, git, notifier, "patch").execute()

        assert outcome.failed
        assert outcome.stage == ReleaseStage.REGISTRY
        assert outcome.detail == "Error: 401 Unauthorized"
        assert outcome.tag == "v1.0.1"
        assert outcome.recovery_pushed is True
        assert git.calls == [["push", "origin", "--tags"], ["describe", "--tags", "--abbrev=0"]]
        assert notifier.titles(NotificationLevel.ERROR) == [
            "PPM Publish: failed to publish my-pkg"
        ]
        assert notifier.titles()[-1] == (
            'PPM Publish: use "fastpublish ppm-tag" to retry publishing v1.0.1'
        )

    @pytest.mark.asyncio
    async def test_failure_recovery_ignores_push_errors(
        self, package_dir: Path, make_git, notifier
    ) -> None:
        git = make_git({"push": GitError("Could not read from remote"), "describe": "v1.0.1"})
        with patch(
            "fastpublish.commands.base.run_command",
            new_callable=AsyncMock,
            return_value=(1, "", "boom"),
        ):
            outcome = await registry_command(package_dir, git, notifier, "patch").execute()

        assert outcome.stage == ReleaseStage.REGISTRY
        assert outcome.detail == "boom"
        assert outcome.recovery_pushed is False

    @pytest.mark.asyncio
    async def test_failure_without_tag_has_no_hint(
        self, package_dir: Path, make_git, notifier
    ) -> None:
        git = make_git({"describe": GitError("fatal: No names found")})
        with patch(
            "fastpublish.commands.base.run_command",
            new_callable=AsyncMock,
            return_value=(1, "", "boom"),
        ):
            outcome = await registry_command(package_dir, git, notifier, "patch").execute()

        assert outcome.recovery_hint is None
        assert outcome.tag is None

    @pytest.mark.asyncio
    async def test_push_failure_after_publish(
        self, package_dir: Path, make_git, notifier
    ) -> None:
        git = make_git({"push": GitError("rejected", stderr="! [rejected] main -> main\n")})
        with patch("fastpublish.commands.base.run_command", fake_ppm(package_dir, "1.0.1")):
            outcome = await registry_command(package_dir, git, notifier, "patch").execute()

        assert outcome.stage == ReleaseStage.PUSH
        assert outcome.new_version == "1.0.1"
        assert "[rejected]" in (outcome.detail or "")
        assert notifier.titles(NotificationLevel.ERROR) == ["PPM Publish: failed to push my-pkg"]


class TestPublishTagCommand:
    """Retrying the registry publish for the latest tag."""

    @pytest.mark.asyncio
    async def test_publishes_latest_tag(self, package_dir: Path, make_git, notifier) -> None:
        git = make_git({"describe": "v1.2.0\n"})
        with patch(
            "fastpublish.commands.base.run_command",
            new_callable=AsyncMock,
            return_value=(0, "ok", ""),
        ) as mock_run:
            outcome = await tag_command(package_dir, git, notifier).execute()

        assert outcome.success
        assert outcome.tag == "v1.2.0"
        assert outcome.new_version == "1.2.0"
        assert mock_run.call_args[0][0] == "ppm publish --tag v1.2.0"
        assert notifier.titles(NotificationLevel.SUCCESS) == [
            "PPM Publish Tag: my-pkg v1.2.0 published"
        ]

    @pytest.mark.asyncio
    async def test_no_tag(self, package_dir: Path, make_git, notifier) -> None:
        git = make_git({"describe": GitError("fatal: No names found")})
        with patch("fastpublish.commands.base.run_command", new_callable=AsyncMock) as mock_run:
            outcome = await tag_command(package_dir, git, notifier).execute()

        assert outcome.failed
        assert outcome.stage == ReleaseStage.TAG
        mock_run.assert_not_called()
        assert notifier.titles() == ["PPM Publish Tag: my-pkg has no git tags"]

    @pytest.mark.asyncio
    async def test_require_latest_tag_raises(self, package_dir: Path, make_git, notifier) -> None:
        git = make_git({"describe": GitError("fatal: No names found")})

        with pytest.raises(NoTagError):
            await tag_command(package_dir, git, notifier).require_latest_tag()

    @pytest.mark.asyncio
    async def test_registry_failure_does_not_push(
        self, package_dir: Path, make_git, notifier
    ) -> None:
        git = make_git({"describe": "v1.2.0"})
        with patch(
            "fastpublish.commands.base.run_command",
            new_callable=AsyncMock,
            return_value=(1, "", "Version already published"),
        ):
            outcome = await tag_command(package_dir, git, notifier).execute()

        assert outcome.stage == ReleaseStage.REGISTRY
        assert outcome.detail == "Version already published"
        assert git.subcommands() == ["describe"]


@pytest.mark.asyncio
async def test_registry_publish_function(package_dir: Path, fake_git) -> None:
    with patch("fastpublish.commands.base.run_command", fake_ppm(package_dir, "2.0.0")):
        outcome = await registry_publish(
            package_dir, "major", notifier=RecordingNotifier(), git=fake_git
        )

    assert outcome.new_version == "2.0.0"


@pytest.mark.asyncio
async def test_publish_latest_tag_custom_command(package_dir: Path, make_git) -> None:
    (package_dir / "fastpublish.yaml").write_text(
        "registry:\n  publish_tag_command: apm publish --tag {tag}\n"
    )
    git = make_git({"describe": "v3.0.0"})
    with patch(
        "fastpublish.commands.base.run_command",
        new_callable=AsyncMock,
        return_value=(0, "", ""),
    ) as mock_run:
        await publish_latest_tag(package_dir, notifier=RecordingNotifier(), git=git)

    assert mock_run.call_args[0][0] == "apm publish --tag v3.0.0"


class TestRegistryConfigErrors:
    """Bad settings fail before the registry tool or git runs."""

    @pytest.mark.asyncio
    async def test_unavailable_git_backend(self, package_dir: Path, notifier) -> None:
        config = FastPublishConfig.model_validate({"git": {"strategy": "gitpython"}})
        context = CommandContext(path=package_dir, config=config, notifier=notifier)

        with (
            patch("fastpublish.git.strategy.gitpython_available", return_value=False),
            patch("fastpublish.commands.base.run_command", new_callable=AsyncMock) as mock_run,
        ):
            outcome = await RegistryPublishCommand(
                context, RegistryPublishOptions(BumpMode.parse("minor"))
            ).execute()

        assert outcome.stage == ReleaseStage.CONFIG
        mock_run.assert_not_called()
        assert notifier.titles(NotificationLevel.ERROR) == [
            "PPM Publish: my-pkg failed at config"
        ]

    @pytest.mark.asyncio
    async def test_unrenderable_publish_command(
        self, package_dir: Path, fake_git, notifier
    ) -> None:
        registry = RegistryConfig.model_construct(publish_command="ppm publish {mode} {otp}")
        config = FastPublishConfig.model_construct(registry=registry)
        context = CommandContext(path=package_dir, config=config, notifier=notifier, git=fake_git)

        with patch("fastpublish.commands.base.run_command", new_callable=AsyncMock) as mock_run:
            outcome = await RegistryPublishCommand(
                context, RegistryPublishOptions(BumpMode.parse("patch"))
            ).execute()

        assert outcome.stage == ReleaseStage.CONFIG
        assert "otp" in (outcome.detail or "")
        mock_run.assert_not_called()
        assert fake_git.calls == []

    @pytest.mark.asyncio
    async def test_unrenderable_tag_command(self, package_dir: Path, make_git, notifier) -> None:
        registry = RegistryConfig.model_construct(publish_tag_command="ppm publish {tag} {otp}")
        config = FastPublishConfig.model_construct(registry=registry)
        git = make_git({"describe": "v1.0.0\n"})
        context = CommandContext(path=package_dir, config=config, notifier=notifier, git=git)

        with patch("fastpublish.commands.base.run_command", new_callable=AsyncMock) as mock_run:
            outcome = await PublishTagCommand(context).execute()

        assert outcome.stage == ReleaseStage.CONFIG
        assert outcome.tag == "v1.0.0"
        mock_run.assert_not_called()
