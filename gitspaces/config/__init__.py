"""Configuration loading and validation."""

from gitspaces.config.loader import load_config
from gitspaces.config.schema import (
    Config,
    GitConfig,
    LoggingConfig,
    SpacesConfig,
    StorageConfig,
)

__all__ = [
    "Config",
    "GitConfig",
    "LoggingConfig",
    "SpacesConfig",
    "StorageConfig",
    "load_config",
]
