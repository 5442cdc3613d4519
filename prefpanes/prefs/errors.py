"""Exceptions raised by the preferences controller."""

from __future__ import annotations


class PreferencesError(Exception):
    """Base class for preferences controller errors."""


class DuplicatePaneError(PreferencesError):
    """A pane with the same id is already registered."""

    def __init__(self, pane_id: str) -> None:
        super().__init__(f"Pane already registered: {pane_id}")
        self.pane_id = pane_id


class PaneNotFoundError(PreferencesError, KeyError):
    """No pane is registered under the requested id."""

    def __init__(self, pane_id: str) -> None:
        super().__init__(f"Unknown pane: {pane_id}")
        self.pane_id = pane_id

    def __str__(self) -> str:
        return str(self.args[0])


class MalformedFragmentError(PreferencesError):
    """Pane markup could not be parsed. The pane stays unloaded."""

    def __init__(self, pane_id: str, src: str, reason: str) -> None:
        super().__init__(f"Pane {pane_id}: malformed markup in {src}: {reason}")
        self.pane_id = pane_id
        self.src = src


class MissingStringError(PreferencesError, KeyError):
    """A localization key has no string."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Missing string: {key}")
        self.key = key

    def __str__(self) -> str:
        return str(self.args[0])


class FragmentIOError(PreferencesError, OSError):
    """A fragment or script could not be read."""


class FragmentNotFoundError(FragmentIOError):
    """A fragment or script URI does not resolve to anything."""


class LegacyIndirectionWarning(UserWarning):
    """A ``preference`` attribute named a ``<preference>`` element instead of a key."""
