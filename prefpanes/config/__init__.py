"""Configuration module for prefpanes."""

from prefpanes.config.loader import get_config_path, load_config, load_manifest, save_config
from prefpanes.config.schema import AppConfig, PaneDescriptor, PaneManifest

__all__ = [
    "AppConfig",
    "PaneDescriptor",
    "PaneManifest",
    "get_config_path",
    "load_config",
    "load_manifest",
    "save_config",
]
