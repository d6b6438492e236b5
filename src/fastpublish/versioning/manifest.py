"""Reading and writing the package.json manifest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from fastpublish.errors import ManifestError, WriteError

MANIFEST_INDENT = 2


def load_manifest(path: Path) -> dict[str, Any]:
    """Load a JSON manifest.

    Args:
        path: Path to package.json.

    Returns:
        Parsed manifest, key order preserved.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {path}", path=path) from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest: {e}", path=path) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path.name}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} must contain a JSON object", path=path)
    return data


def get_manifest_version(data: dict[str, Any], path: Path | None = None) -> str:
    """Return the version field of a manifest.

    Raises:
        ManifestError: If the version field is absent.
    """
    version = data.get("version")
    if version is None:
        raise ManifestError("Manifest has no version field", path=path)
    return str(version)


def save_manifest(path: Path, data: dict[str, Any]) -> None:
    """Write a manifest back with stable two-space indentation.

    Raises:
        WriteError: If the file cannot be written.
    """
    try:
        path.write_text(json.dumps(data, indent=MANIFEST_INDENT), encoding="utf-8")
    except OSError as e:
        raise WriteError(f"Cannot write {path.name}: {e}", path=path) from e
