"""Configuration loading."""

from fastpublish.config.loader import CONFIG_FILENAME, find_config, load_config
from fastpublish.config.schema import FastPublishConfig, GitConfig, RegistryConfig

__all__ = [
    "CONFIG_FILENAME",
    "FastPublishConfig",
    "GitConfig",
    "RegistryConfig",
    "find_config",
    "load_config",
]
