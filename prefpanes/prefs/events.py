"""Controller event contracts and lightweight signal bus."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

EventHandler = Callable[[object], None]

PANE_SELECTED = "pane-selected"
PANE_LOADED = "pane-loaded"
SEARCH_COMPLETED = "search-completed"


@dataclass(frozen=True)
class PaneSelected:
    """Navigation selection changed. ``pane_id`` is None when cleared."""

    pane_id: str | None


@dataclass(frozen=True)
class PaneLoaded:
    """A pane's markup was inserted for the first time."""

    pane_id: str


@dataclass(frozen=True)
class SearchCompleted:
    """A search pass finished. Empty ``term`` means the search was reset."""

    term: str
    match_count: int
    visible_panes: tuple[str, ...] = ()


class EventHub:
    """Simple in-process pub/sub between the controller and its views."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_name: str, payload: object) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            handler(payload)
