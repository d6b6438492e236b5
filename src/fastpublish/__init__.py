"""fastpublish - release bookkeeping for package directories.

Bumps the version in a package.json manifest, then commits, tags and pushes
the release with git, optionally publishing it to the package registry:
- Conditional releases that skip packages unchanged since the last tag
- GitPython or subprocess git backends
- Recovery push when the registry publish fails
"""

from fastpublish.commands import (
    OutcomeStatus,
    PublishOutcome,
    ReleaseStage,
    publish,
    publish_all,
    publish_latest_tag,
    registry_publish,
)
from fastpublish.config import FastPublishConfig, load_config
from fastpublish.errors import (
    ConfigurationError,
    FastPublishError,
    GitError,
    ManifestError,
    NoTagError,
    RegistryPublishError,
    VcsError,
    WriteError,
)
from fastpublish.versioning import BumpMode, BumpType, Version, increase_version

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Operations
    "publish",
    "publish_all",
    "registry_publish",
    "publish_latest_tag",
    "PublishOutcome",
    "OutcomeStatus",
    "ReleaseStage",
    # Versioning
    "BumpMode",
    "BumpType",
    "Version",
    "increase_version",
    # Config
    "FastPublishConfig",
    "load_config",
    # Errors
    "FastPublishError",
    "ConfigurationError",
    "ManifestError",
    "WriteError",
    "GitError",
    "VcsError",
    "RegistryPublishError",
    "NoTagError",
]
