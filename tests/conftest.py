"""Shared test fixtures for fastpublish tests."""

from __future__ import annotations

import json
import subprocess
from collections.abc import Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from fastpublish.git.strategy import reset_git_strategy
from fastpublish.notify import RecordingNotifier

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


class FakeGit:
    """Git strategy double keyed by subcommand.

    ``responses`` maps a subcommand ("describe", "push", ...) to stdout, an
    exception to raise, or a list of those consumed one call at a time.
    """

    name = "fake"

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        lock_file: str = ".git/index.lock",
    ) -> None:
        self.responses = responses or {}
        self.lock_file = lock_file
        self.calls: list[list[str]] = []
        self.lock_seen: list[bool] = []

    async def exec(self, cwd: Path, args: Sequence[str]) -> str:
        self.calls.append(list(args))
        self.lock_seen.append((cwd / self.lock_file).exists())

        response = self.responses.get(args[0], "")
        if isinstance(response, list):
            response = response.pop(0) if response else ""
        if isinstance(response, Exception):
            raise response
        return response

    def subcommands(self) -> list[str]:
        return [call[0] for call in self.calls]


def run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run a git command."""
    return subprocess.run(
        ["git"] + args,
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )


@pytest.fixture(autouse=True)
def _reset_strategy() -> Generator[None, None, None]:
    """Forget the cached git backend between tests."""
    reset_git_strategy()
    yield
    reset_git_strategy()


@pytest.fixture
def sample_manifest() -> dict[str, Any]:
    """Sample package.json content."""
    return {
        "name": "my-pkg",
        "main": "./lib/main",
        "version": "1.0.0",
        "description": "A sample package",
        "dependencies": {"etch": "^0.14.0"},
        "engines": {"atom": ">=1.0.0 <2.0.0"},
    }


@pytest.fixture
def package_dir(tmp_path: Path, sample_manifest: dict[str, Any]) -> Path:
    """Create a package directory with a package.json and an empty .git dir."""
    pkg = tmp_path / "my-pkg"
    pkg.mkdir()
    (pkg / ".git").mkdir()
    (pkg / "package.json").write_text(json.dumps(sample_manifest, indent=2))
    return pkg


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def git_remote(tmp_path: Path) -> Path:
    """Create a bare repository to push to."""
    remote = tmp_path / "remote.git"
    run_git(["init", "--bare", "-q", str(remote)], tmp_path)
    return remote


@pytest.fixture
def git_package(tmp_path: Path, git_remote: Path, sample_manifest: dict[str, Any]) -> Path:
    """Create a git package repository with one commit and an origin remote."""
    pkg = tmp_path / "my-pkg"
    pkg.mkdir()
    run_git(["init", "-q"], pkg)
    run_git(["config", "user.email", "test@example.com"], pkg)
    run_git(["config", "user.name", "Test User"], pkg)
    run_git(["config", "commit.gpgsign", "false"], pkg)
    run_git(["config", "tag.gpgsign", "false"], pkg)
    (pkg / "package.json").write_text(json.dumps(sample_manifest, indent=2))
    run_git(["add", "package.json"], pkg)
    run_git(["commit", "-q", "-m", "Initial commit"], pkg)
    run_git(["remote", "add", "origin", str(git_remote)], pkg)
    return pkg


@pytest.fixture
def make_git() -> type[FakeGit]:
    """Factory for git doubles with canned responses."""
    return FakeGit
