"""Outcome of a release pipeline run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeStatus(Enum):
    """Terminal state of a pipeline run."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ReleaseStage(Enum):
    """Pipeline step that produced a failure."""

    CONFIG = "config"
    MANIFEST = "manifest"
    WRITE = "write"
    ADD = "add"
    COMMIT = "commit"
    TAG = "tag"
    PUSH = "push"
    REGISTRY = "registry"


@dataclass
class PublishOutcome:
    """Result of publishing one package directory.

    Attributes:
        package_name: Base name of the package directory.
        status: Skipped, succeeded or failed.
        old_version: Version before the bump, when known.
        new_version: Version after the bump, when known.
        tag: Release tag created or published.
        stage: Failing step (failures only).
        reason: Why the run was skipped (skips only).
        detail: Diagnostic text with color codes stripped (failures only).
        recovery_hint: How to retry after a registry failure.
        recovery_pushed: Whether the recovery push succeeded, if one ran.
    """

    package_name: str
    status: OutcomeStatus
    old_version: str | None = None
    new_version: str | None = None
    tag: str | None = None
    stage: ReleaseStage | None = None
    reason: str | None = None
    detail: str | None = None
    recovery_hint: str | None = None
    recovery_pushed: bool | None = None

    @property
    def success(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED

    @property
    def skipped(self) -> bool:
        return self.status == OutcomeStatus.SKIPPED

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    @classmethod
    def skipped_result(cls, package_name: str, reason: str) -> PublishOutcome:
        return cls(package_name=package_name, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def success_result(
        cls,
        package_name: str,
        new_version: str | None,
        *,
        old_version: str | None = None,
        tag: str | None = None,
    ) -> PublishOutcome:
        return cls(
            package_name=package_name,
            status=OutcomeStatus.SUCCEEDED,
            old_version=old_version,
            new_version=new_version,
            tag=tag,
        )

    @classmethod
    def failure_result(
        cls,
        package_name: str,
        stage: ReleaseStage,
        detail: str,
        *,
        old_version: str | None = None,
        new_version: str | None = None,
        tag: str | None = None,
        recovery_hint: str | None = None,
        recovery_pushed: bool | None = None,
    ) -> PublishOutcome:
        return cls(
            package_name=package_name,
            status=OutcomeStatus.FAILED,
            stage=stage,
            detail=detail,
            old_version=old_version,
            new_version=new_version,
            tag=tag,
            recovery_hint=recovery_hint,
            recovery_pushed=recovery_pushed,
        )
