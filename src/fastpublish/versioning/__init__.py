"""Version arithmetic and manifest handling."""

from fastpublish.versioning.manifest import (
    get_manifest_version,
    load_manifest,
    save_manifest,
)
from fastpublish.versioning.semver import (
    CONDITIONAL_SUFFIX,
    BumpMode,
    BumpType,
    Version,
    increase_version,
)

__all__ = [
    "CONDITIONAL_SUFFIX",
    "BumpMode",
    "BumpType",
    "Version",
    "increase_version",
    "load_manifest",
    "get_manifest_version",
    "save_manifest",
]
