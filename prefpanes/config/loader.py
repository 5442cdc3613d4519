"""Load and save prefpanes configuration and pane manifests."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from prefpanes.config.schema import AppConfig, PaneDescriptor, PaneManifest


def get_config_path() -> Path:
    """Return default path of the JSON config file."""
    return Path.home() / ".prefpanes" / "config.json"


def load_config(path: Path | None = None) -> AppConfig:
    """Load config from disk; environment variables still override it."""
    target = path or get_config_path()
    if not target.exists():
        return AppConfig()
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
        return AppConfig(**payload)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning(f"[config] failed to load {target}: {exc}; using defaults")
        return AppConfig()


def save_config(config: AppConfig, path: Path | None = None) -> None:
    target = path or get_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(by_alias=True)
    target.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_manifest(path: Path) -> PaneManifest:
    """Read a pane manifest.

    The file is either an object with ``builtin``/``plugins`` lists or a bare
    list of built-in descriptors. Invalid entries raise ``ValidationError``.
    """
    if not path.exists():
        logger.warning(f"[config] pane manifest not found: {path}")
        return PaneManifest()
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        payload = {"builtin": payload}
    return PaneManifest.model_validate(payload)


def parse_descriptor(data: dict | PaneDescriptor) -> PaneDescriptor:
    if isinstance(data, PaneDescriptor):
        return data
    return PaneDescriptor.model_validate(data)
