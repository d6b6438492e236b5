"""Locate and load fastpublish.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from fastpublish.config.schema import FastPublishConfig
from fastpublish.errors import ConfigurationError

CONFIG_FILENAME = "fastpublish.yaml"


def find_config(path: Path | None = None) -> Path | None:
    """Find a config file in the package directory or the current directory.

    Args:
        path: Package directory to look in first.

    Returns:
        Path to the config file, or None if there is none.
    """
    candidates = []
    if path is not None:
        candidates.append(path / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> FastPublishConfig:
    """Load configuration for a package directory.

    Falls back to defaults when no config file exists.

    Args:
        path: Package directory.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    config_path = find_config(path)
    if config_path is None:
        return FastPublishConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", path=config_path) from e

    if data is None:
        return FastPublishConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Config must be a mapping", path=config_path)

    try:
        return FastPublishConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", path=config_path) from e
