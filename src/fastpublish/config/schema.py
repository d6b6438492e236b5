"""Pydantic models for fastpublish.yaml."""

from __future__ import annotations

import re
from string import Formatter
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fastpublish.errors import ConfigurationError


def template_fields(template: str) -> set[str]:
    """Placeholder names used by a ``str.format`` template.

    ``{tag[0]}`` and ``{tag.upper}`` count as ``tag``; a bare ``{}`` shows up
    as the empty string.

    Raises:
        ValueError: If the template is malformed (e.g. an unmatched brace).
    """
    fields = set()
    for _, name, _, _ in Formatter().parse(template):
        if name is not None:
            fields.add(re.split(r"[.\[]", name, maxsplit=1)[0])
    return fields


def check_template(template: str, setting: str, allowed: set[str], required: set[str]) -> str:
    """Validate a template's placeholders.

    Raises:
        ValueError: If a placeholder is unknown or none of ``required`` is used.
    """
    fields = template_fields(template)
    unknown = sorted(fields - allowed)
    if unknown:
        names = ", ".join("{" + name + "}" for name in unknown)
        raise ValueError(f"{setting} has unknown placeholders: {names}")
    if not fields & required:
        names = " or ".join("{" + name + "}" for name in sorted(required))
        raise ValueError(f"{setting} must contain {names}")
    return template


def render_template(template: str, setting: str, **values: str) -> str:
    """Fill in a template.

    Raises:
        ConfigurationError: If the template cannot be rendered with ``values``.
    """
    try:
        return template.format(**values)
    except (KeyError, IndexError, AttributeError, ValueError) as e:
        raise ConfigurationError(f"Cannot render {setting} {template!r}: {e!r}") from e


class GitConfig(BaseModel):
    """Git settings.

    Attributes:
        remote: Remote that release commits and tags are pushed to.
        strategy: Which git backend to use ("auto" probes for GitPython).
        lock_file: Stale lock artifact, relative to the package directory.
    """

    model_config = ConfigDict(extra="forbid")

    remote: str = "origin"
    strategy: Literal["auto", "subprocess", "gitpython"] = "auto"
    lock_file: str = ".git/index.lock"


class RegistryConfig(BaseModel):
    """Registry publish commands.

    Attributes:
        publish_command: Command that bumps, tags and publishes. ``{mode}`` is
            replaced with major, minor or patch.
        publish_tag_command: Command that publishes an existing tag. ``{tag}``
            is replaced with the tag name.
    """

    model_config = ConfigDict(extra="forbid")

    publish_command: str = "ppm publish {mode}"
    publish_tag_command: str = "ppm publish --tag {tag}"

    @field_validator("publish_command")
    @classmethod
    def _needs_mode(cls, value: str) -> str:
        return check_template(value, "publish_command", {"mode"}, {"mode"})

    @field_validator("publish_tag_command")
    @classmethod
    def _needs_tag(cls, value: str) -> str:
        return check_template(value, "publish_tag_command", {"tag"}, {"tag"})

    def publish_command_for(self, mode: str) -> str:
        return render_template(self.publish_command, "publish_command", mode=mode)

    def publish_tag_command_for(self, tag: str) -> str:
        return render_template(self.publish_tag_command, "publish_tag_command", tag=tag)


class FastPublishConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    manifest: str = "package.json"
    tag_prefix: str = "v"
    commit_message: str = "Prepare {tag} release"
    git: GitConfig = Field(default_factory=GitConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)

    @field_validator("commit_message")
    @classmethod
    def _needs_placeholder(cls, value: str) -> str:
        return check_template(value, "commit_message", {"tag", "version"}, {"tag", "version"})

    def tag_for(self, version: str) -> str:
        """Tag name for a version."""
        return f"{self.tag_prefix}{version}"

    def commit_message_for(self, version: str) -> str:
        """Commit and tag message for a version.

        Raises:
            ConfigurationError: If the message template cannot be rendered.
        """
        return render_template(
            self.commit_message, "commit_message", tag=self.tag_for(version), version=version
        )
