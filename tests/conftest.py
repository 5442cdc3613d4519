"""Shared fixtures: in-memory store, strings, fragment source and window."""

from __future__ import annotations

import pytest

from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.source import FragmentSource
from prefpanes.prefs.store import PreferenceStore
from prefpanes.prefs.strings import Localizer
from prefpanes.prefs.window import PreferencesWindow


@pytest.fixture
def store():
    return PreferenceStore(
        defaults={
            "sync.enabled": True,
            "sync.mode": "manual",
            "app.userName": "anna",
            "network.proxyPort": 8080,
        }
    )


@pytest.fixture
def localizer():
    return Localizer(
        {
            "pane.general": "General",
            "pane.sync": "Sync",
            "pane.privacy": "Privacy",
            "brand.name": "Prefpanes",
        }
    )


@pytest.fixture
def source():
    return FragmentSource()


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def host(opened_urls):
    return HostWindow(launch_url=opened_urls.append)


@pytest.fixture
def window(store, localizer, source, host):
    win = PreferencesWindow(store, localizer, source, host=host)
    yield win
    win.on_unload()
