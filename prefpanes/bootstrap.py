"""Build a ready-to-use preferences window from configuration."""

from __future__ import annotations

from loguru import logger

from prefpanes.config.loader import load_manifest
from prefpanes.config.schema import AppConfig, PaneManifest
from prefpanes.prefs.highlight import Highlighter
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.source import FragmentSource
from prefpanes.prefs.store import PreferenceStore
from prefpanes.prefs.strings import Localizer
from prefpanes.prefs.window import OpenRequest, PreferencesWindow


def open_preferences(
    config: AppConfig,
    *,
    host: HostWindow | None = None,
    highlighter: Highlighter | None = None,
    request: OpenRequest | None = None,
    manifest: PaneManifest | None = None,
) -> PreferencesWindow:
    """Load the store, strings and pane manifest, then initialize a window."""
    store = PreferenceStore(config.store_path)
    localizer = Localizer.from_files(config.string_paths)
    source = FragmentSource(config.fragments_dir)
    manifest = manifest or load_manifest(config.manifest_path)
    logger.debug(
        f"[bootstrap] {len(manifest.builtin)} built-in, {len(manifest.plugins)} plugin panes "
        f"from {config.manifest_path}"
    )

    window = PreferencesWindow(
        store,
        localizer,
        source,
        host=host,
        highlighter=highlighter,
        config=config.window,
    )
    window.init(manifest.builtin, manifest.plugins, request)
    return window
