"""The preferences window controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from loguru import logger

from prefpanes.config.schema import PaneDescriptor, WindowConfig
from prefpanes.dom.nodes import XUL_NS, Document, Element
from prefpanes.dom.widgets import RichListBox, TabBox, tab_control
from prefpanes.prefs.bindings import BindingSynchronizer
from prefpanes.prefs.errors import MalformedFragmentError
from prefpanes.prefs.events import (
    PANE_LOADED,
    PANE_SELECTED,
    SEARCH_COMPLETED,
    EventHub,
    PaneLoaded,
    PaneSelected,
    SearchCompleted,
)
from prefpanes.prefs.highlight import FindSelection, Highlighter, HighlightColors
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.loader import FragmentLoader
from prefpanes.prefs.registry import Pane, PaneRegistry
from prefpanes.prefs.search import HIDDEN_BY_SEARCH, SearchEngine, SearchResult
from prefpanes.prefs.source import FragmentSource
from prefpanes.prefs.store import PreferenceStore
from prefpanes.prefs.strings import Localizer


@dataclass(frozen=True)
class OpenRequest:
    """What the caller asked the window to show when it opens."""

    pane: str | None = None
    tab: str | None = None
    tab_index: int | None = None
    anchor: str | None = None


@dataclass(frozen=True)
class WindowShell:
    """Window chrome the controller drives."""

    navigation: RichListBox
    search_field: Element
    back_button: Element
    content: Element
    help_container: Element


def build_shell(document: Document) -> WindowShell:
    root = document.create_element("div", id="prefs-window")
    document.append(root)

    navigation = RichListBox("richlistbox", XUL_NS, {"id": "prefs-navigation"})
    search_field = document.create_element("input", id="prefs-search", type="search")
    back_button = document.create_xul_element("button", id="prefs-subpane-back-button")
    back_button.hidden = True
    content = document.create_element("div", id="prefs-content")
    help_container = document.create_element("div", id="prefs-help-container")
    help_container.hidden = True
    content.append(help_container)

    root.append(search_field, navigation, back_button, content)
    return WindowShell(navigation, search_field, back_button, content, help_container)


class PreferencesWindow:
    """Navigation, lazy pane display, preference binding and search.

    Views drive it through :meth:`navigate_to_pane`, :meth:`search` and the
    DOM events they dispatch on pane elements; they follow it through
    :attr:`events`.
    """

    def __init__(
        self,
        store: PreferenceStore,
        localizer: Localizer | None = None,
        source: FragmentSource | None = None,
        *,
        host: HostWindow | None = None,
        highlighter: Highlighter | None = None,
        config: WindowConfig | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.store = store
        self.localizer = localizer or Localizer()
        self.source = source or FragmentSource()
        self.host = host or HostWindow()
        self.events = EventHub()

        shell = build_shell(self.host.document)
        self.navigation = shell.navigation
        self.search_field = shell.search_field
        self.back_button = shell.back_button
        self.content = shell.content
        self.help_container = shell.help_container

        colors = HighlightColors(
            background=self.config.highlight_background,
            alt_background=self.config.highlight_background_dark,
        )
        self.bindings = BindingSynchronizer(store, self.host.scheduler)
        self.registry = PaneRegistry(self.host.document, self.navigation, self.help_container, self.localizer)
        self.loader = FragmentLoader(self.host, self.registry, self.source, self.localizer, self.bindings)
        self.search_engine = SearchEngine(
            self.host,
            self.registry,
            self.loader,
            self.localizer,
            highlighter or FindSelection(colors),
        )

        self.navigation.add_event_listener("select", lambda _event: self._on_navigation_select())
        self.back_button.add_event_listener("command", lambda _event: self.go_back())
        self.search_field.add_event_listener("command", lambda event: self.search(str(event.current_target.value)))

    # ------------------------------------------------------------------ #
    # Setup / teardown                                                     #
    # ------------------------------------------------------------------ #

    def init(
        self,
        builtin: Iterable[PaneDescriptor] = (),
        plugins: Iterable[PaneDescriptor] = (),
        request: OpenRequest | None = None,
    ) -> None:
        for descriptor in builtin:
            self.register_pane(descriptor)
        plugin_panes = sorted(plugins, key=lambda d: (d.raw_label or d.label or d.id).casefold())
        if plugin_panes:
            self.registry.add_separator()
            for descriptor in plugin_panes:
                self.register_pane(descriptor)

        request = request or OpenRequest()
        if request.pane:
            self.navigation.value = request.pane
            self._select_requested_tab(request)
        elif request.anchor == "cite":
            self.navigation.value = self.config.cite_pane

        if not self.navigation.value:
            self.navigation.value = self.store.get(self.config.last_selected_key)
        if not self.navigation.value:
            self.navigation.value = self.config.default_pane
        if not self.navigation.value:
            top_level = self.registry.list_top_level()
            if top_level:
                self.navigation.value = top_level[0].id

    def _select_requested_tab(self, request: OpenRequest) -> None:
        pane = self.registry.find(request.pane)
        if pane is None:
            logger.warning(f"[window] requested pane {request.pane!r} is not registered")
            return
        if request.tab is not None:
            tab = self.host.document.get_element_by_id(request.tab)
            control = tab_control(tab) if tab is not None else None
            if tab is not None and control is not None:
                control.selected_item = tab
        elif request.tab_index is not None:
            for elem in pane.container.iter_elements():
                if isinstance(elem, TabBox):
                    elem.selected_index = request.tab_index
                    break

    def on_unload(self) -> None:
        self.bindings.close()

    def register_pane(self, descriptor: PaneDescriptor | dict) -> Pane:
        if isinstance(descriptor, dict):
            descriptor = PaneDescriptor.model_validate(descriptor)
        return self.registry.register(descriptor)

    # ------------------------------------------------------------------ #
    # Navigation                                                           #
    # ------------------------------------------------------------------ #

    @property
    def selected_pane_id(self) -> str | None:
        return self.navigation.value

    def navigate_to_pane(self, pane_id: str) -> None:
        """Select a pane, clearing the search and hiding other panes."""
        self.navigation.value = pane_id

    def go_back(self) -> None:
        pane = self.registry.find(self.navigation.value)
        if pane is not None and pane.parent:
            self.navigation.value = pane.parent

    def open_help_link(self) -> None:
        pane = self.registry.find(self.navigation.value)
        if pane is not None and pane.help_url:
            self.host.launch_url(pane.help_url)

    def wait_for_first_pane_load(self, timeout: float | None = None) -> bool:
        return self.loader.first_pane_loaded.wait(timeout)

    async def wait_for_first_pane_load_async(self) -> None:
        await self.loader.first_pane_loaded.wait_async()

    def _on_navigation_select(self) -> None:
        for child in self.content.children:
            if child is not self.help_container:
                child.hidden = True
        pane_id = self.navigation.value
        if pane_id:
            self.search_field.value = ""
            self.search("")
            self._load_and_display_pane(pane_id)
            self.store.set(self.config.last_selected_key, pane_id)
        self.events.publish(PANE_SELECTED, PaneSelected(pane_id))

    def _load_and_display_pane(self, pane_id: str) -> None:
        pane = self.registry.get(pane_id)
        was_imported = pane.imported
        try:
            self.loader.ensure_loaded(pane_id)
        except MalformedFragmentError as exc:
            logger.error(f"[window] {exc}")
        else:
            if not was_imported:
                self.events.publish(PANE_LOADED, PaneLoaded(pane_id))
        pane.container.hidden = False
        self.back_button.hidden = not pane.parent

    # ------------------------------------------------------------------ #
    # Search                                                               #
    # ------------------------------------------------------------------ #

    def search(self, term: str | None) -> SearchResult:
        loaded_before = {pane.id for pane in self.registry if pane.imported}
        result = self.search_engine.search(term)
        for pane in self.registry:
            if pane.imported and pane.id not in loaded_before:
                self.events.publish(PANE_LOADED, PaneLoaded(pane.id))
        self.events.publish(
            SEARCH_COMPLETED,
            SearchCompleted(result.term, len(result.matches), tuple(result.panes_with_matches)),
        )
        return result

    def visible_sections(self) -> list[Element]:
        """Top-level sections of the shown panes, minus those hidden by search."""
        sections: list[Element] = []
        for pane in self.registry:
            if pane.container.hidden:
                continue
            root = pane.container.first_element_child
            if root is None:
                continue
            sections.extend(
                s for s in root.children
                if HIDDEN_BY_SEARCH not in s.class_list and not s.hidden
            )
        return sections

    def nav_labels(self) -> list[tuple[str, str]]:
        """(pane id, label) for visible navigation entries."""
        labels = []
        for item in self.navigation.items:
            if item.hidden:
                continue
            label = next((c for c in item.children if c.tag == "label" and c.namespace == XUL_NS), None)
            labels.append((item.get_attribute("value") or "", label.get_attribute("value") if label else ""))
        return labels
