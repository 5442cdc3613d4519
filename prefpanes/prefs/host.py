"""The window the preference panes live in: document, script scope, stylesheets."""

from __future__ import annotations

import webbrowser
from typing import Any, Callable

from loguru import logger

from prefpanes.dom.nodes import Document, Element, Event
from prefpanes.prefs.scheduler import TurnScheduler

# Rough average glyph width for the default UI font, used for tooltip centering
_AVERAGE_CHAR_WIDTH_PX = 7.0


class HostWindow:
    """Shared environment for pane scripts and markup.

    Pane scripts run with :func:`exec` in one namespace (``scope``), so a
    script can define objects that inline ``oncommand`` handlers of any pane
    reference later.
    """

    def __init__(
        self,
        document: Document | None = None,
        scheduler: TurnScheduler | None = None,
        measure_text: Callable[[str], float] | None = None,
        launch_url: Callable[[str], Any] | None = None,
    ) -> None:
        self.document = document or Document()
        self.scheduler = scheduler or TurnScheduler()
        self.scope: dict[str, Any] = {"__name__": "prefpanes_host", "window": self}
        self.loaded_scripts: list[str] = []
        self.loaded_stylesheets: list[str] = []
        self._measure_text = measure_text
        self._launch_url = launch_url or webbrowser.open

    # ------------------------------------------------------------------ #
    # Scripts                                                              #
    # ------------------------------------------------------------------ #

    def has_script(self, uri: str) -> bool:
        return uri in self.loaded_scripts

    def run_script(self, uri: str, source: str) -> None:
        """Execute a pane script in the shared scope. Each URI runs at most once."""
        if uri in self.loaded_scripts:
            return
        self.loaded_scripts.append(uri)
        code = compile(source, uri, "exec")
        logger.debug(f"[host] running script {uri}")
        exec(code, self.scope)

    def compile_handler(self, source: str, element: Element) -> Callable[[Event], None]:
        """Turn an inline ``on<event>`` attribute into a callable listener."""
        code = compile(source, f"<{element.tag} on-handler>", "exec")

        def _handler(event: Event) -> None:
            exec(code, self.scope, {"event": event, "this": element})

        return _handler

    # ------------------------------------------------------------------ #
    # Stylesheets                                                          #
    # ------------------------------------------------------------------ #

    def add_stylesheet(self, href: str) -> bool:
        """Insert an ``xml-stylesheet`` instruction before all document children."""
        if href in self.loaded_stylesheets:
            return False
        self.loaded_stylesheets.append(href)
        self.add_processing_instruction("xml-stylesheet", f'href="{href}"')
        return True

    def add_processing_instruction(self, target: str, data: str) -> None:
        pi = self.document.create_processing_instruction(target, data)
        self.document.insert_before(pi, self.document.first_child)

    # ------------------------------------------------------------------ #
    # Misc host services                                                   #
    # ------------------------------------------------------------------ #

    def measure_text(self, text: str) -> float:
        if self._measure_text is not None:
            return self._measure_text(text)
        return len(text) * _AVERAGE_CHAR_WIDTH_PX

    def launch_url(self, url: str) -> None:
        logger.info(f"[host] opening {url}")
        self._launch_url(url)
