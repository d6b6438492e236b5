"""fastpublish commands."""

from fastpublish.commands.base import Command, CommandContext
from fastpublish.commands.publish import (
    PublishCommand,
    PublishOptions,
    handle_publish_command,
    publish,
    publish_all,
)
from fastpublish.commands.registry import (
    PublishTagCommand,
    RegistryPublishCommand,
    RegistryPublishOptions,
    handle_registry_command,
    publish_latest_tag,
    registry_publish,
)
from fastpublish.commands.results import OutcomeStatus, PublishOutcome, ReleaseStage

__all__ = [
    # Base
    "Command",
    "CommandContext",
    # Results
    "OutcomeStatus",
    "PublishOutcome",
    "ReleaseStage",
    # Git publish
    "PublishCommand",
    "PublishOptions",
    "publish",
    "publish_all",
    "handle_publish_command",
    # Registry publish
    "RegistryPublishCommand",
    "RegistryPublishOptions",
    "PublishTagCommand",
    "registry_publish",
    "publish_latest_tag",
    "handle_registry_command",
]
