"""Preferences window controller: panes, bindings and search."""

from prefpanes.prefs.bindings import BindingSynchronizer
from prefpanes.prefs.errors import (
    DuplicatePaneError,
    FragmentIOError,
    FragmentNotFoundError,
    LegacyIndirectionWarning,
    MalformedFragmentError,
    MissingStringError,
    PaneNotFoundError,
    PreferencesError,
)
from prefpanes.prefs.events import EventHub
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.loader import FragmentLoader
from prefpanes.prefs.registry import Pane, PaneRegistry
from prefpanes.prefs.search import SearchEngine, SearchMatch, SearchResult
from prefpanes.prefs.source import FragmentSource
from prefpanes.prefs.store import PreferenceStore
from prefpanes.prefs.strings import Localizer
from prefpanes.prefs.window import OpenRequest, PreferencesWindow

__all__ = [
    "BindingSynchronizer",
    "DuplicatePaneError",
    "EventHub",
    "FragmentIOError",
    "FragmentLoader",
    "FragmentNotFoundError",
    "FragmentSource",
    "HostWindow",
    "LegacyIndirectionWarning",
    "Localizer",
    "MalformedFragmentError",
    "MissingStringError",
    "OpenRequest",
    "Pane",
    "PaneNotFoundError",
    "PaneRegistry",
    "PreferenceStore",
    "PreferencesError",
    "PreferencesWindow",
    "SearchEngine",
    "SearchMatch",
    "SearchResult",
]
