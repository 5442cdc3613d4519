"""In-page search over loaded panes.

A search force-loads every top-level pane, scans each pane's top-level
sections for the normalized term (text nodes and declared search strings),
highlights what it finds, switches tab boxes so matches are visible and hides
sections without matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from prefpanes.dom.nodes import XUL_NS, Element, Node, Text
from prefpanes.dom.widgets import TabPanels, tab_control
from prefpanes.prefs.errors import MalformedFragmentError
from prefpanes.prefs.highlight import Highlighter, TextRange
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.loader import FragmentLoader
from prefpanes.prefs.normalize import display_term, find_span, normalize_search, strip_placeholders
from prefpanes.prefs.registry import PaneRegistry
from prefpanes.prefs.strings import Localizer

HIDDEN_BY_SEARCH = "hidden-by-search"
TOOLTIP_PARENT = "search-tooltip-parent"
TOOLTIP = "search-tooltip"
RAW_STRINGS_ATTR = "data-search-strings-raw"
STRING_KEYS_ATTR = "data-search-strings"

# Controls whose text cannot be highlighted in place; the control is the match.
CLOSED_CONTROLS = frozenset({"menulist"})

# Controls that draw their `label` attribute as an inner label.
LABELLED_CONTROLS = frozenset({"checkbox", "radio", "button", "menuitem"})


def _is_excluded(elem: Element) -> bool:
    return elem.tag == "input" or elem.get_attribute("hidden") == "true" or elem.has_attribute("no-highlight")


def _is_tab_panel(elem: Element) -> bool:
    return elem.tag == "tabpanel" and isinstance(elem.parent, TabPanels)


@dataclass(frozen=True)
class SearchMatch:
    """A text match (``start``/``end`` set) or an element match."""

    node: Node
    start: int | None = None
    end: int | None = None

    @property
    def is_text(self) -> bool:
        return isinstance(self.node, Text)


@dataclass
class SearchResult:
    term: str
    display: str
    matches: list[SearchMatch] = field(default_factory=list)
    hidden_sections: list[Element] = field(default_factory=list)
    activated_tabs: list[Element] = field(default_factory=list)
    panes_with_matches: list[str] = field(default_factory=list)


class SearchEngine:
    def __init__(
        self,
        host: HostWindow,
        registry: PaneRegistry,
        loader: FragmentLoader,
        localizer: Localizer,
        highlighter: Highlighter,
    ) -> None:
        self._host = host
        self._registry = registry
        self._loader = loader
        self._localizer = localizer
        self.highlighter = highlighter
        self._expanded_labels: list[tuple[Element, str]] = []
        self._control_labels: list[Element] = []
        self.last_result: SearchResult | None = None

    # ------------------------------------------------------------------ #
    # Entry point                                                          #
    # ------------------------------------------------------------------ #

    def search(self, term: str | None) -> SearchResult:
        """Run a search; an empty term resets all search state."""
        self.clear()
        navigation = self._registry.navigation
        help_container = self._registry.help_container

        normalized = normalize_search(term or "")
        if not normalized:
            if navigation.selected_index == -1:
                navigation.selected_index = 0
            selected = self._registry.find(navigation.value)
            help_container.hidden = not (selected and selected.help_url)
            self.last_result = SearchResult(term="", display="")
            return self.last_result

        navigation.clear_selection()
        help_container.hidden = True

        for pane in self._registry:
            if pane.parent:
                pane.container.hidden = True
                continue
            try:
                self._loader.ensure_loaded(pane.id)
            except MalformedFragmentError as exc:
                logger.warning(f"[search] skipping pane {pane.id}: {exc}")
                continue
            pane.container.hidden = False

        self._expand_labels()

        result = SearchResult(term=normalized, display=display_term(term or ""))
        for pane in self._registry.list_top_level():
            if not pane.imported:
                continue
            root = pane.container.first_element_child
            if root is None:
                continue
            touched_tab_panels: set[int] = set()
            pane_matched = False
            for section in list(root.children):
                matches = self.find_matches(section, normalized)
                if not matches:
                    section.class_list.add(HIDDEN_BY_SEARCH)
                    section.aria_hidden = True
                    result.hidden_sections.append(section)
                    continue
                pane_matched = True
                for match in matches:
                    tab = self._reveal_tab(match.node, touched_tab_panels)
                    if tab is not None:
                        result.activated_tabs.append(tab)
                    self._highlight(match, result.display)
                    result.matches.append(match)
            if pane_matched:
                result.panes_with_matches.append(pane.id)

        logger.debug(
            f"[search] {normalized!r}: {len(result.matches)} matches, "
            f"{len(result.hidden_sections)} sections hidden"
        )
        self.last_result = result
        return result

    # ------------------------------------------------------------------ #
    # Reset                                                                #
    # ------------------------------------------------------------------ #

    def clear(self) -> None:
        """Remove highlights, tooltips and search-hidden flags."""
        self.highlighter.clear()
        content = self._registry.content
        for wrapper in content.get_elements_by_class_name(TOOLTIP_PARENT):
            original = wrapper.first_element_child
            if original is not None:
                wrapper.replace_with(original)
            else:
                wrapper.remove()
        for hidden in content.get_elements_by_class_name(HIDDEN_BY_SEARCH):
            hidden.class_list.remove(HIDDEN_BY_SEARCH)
            hidden.aria_hidden = False
        for label, value in self._expanded_labels:
            if label.text_content == value and not label.has_attribute("value"):
                label.text_content = ""
                label.set_attribute("value", value)
        self._expanded_labels.clear()
        for inner in self._control_labels:
            inner.remove()
        self._control_labels.clear()
        self.last_result = None

    def _expand_labels(self) -> None:
        # <label value="abc"/> renders like <label>abc</label>; only the latter
        # has a text node a range can cover.
        content = self._registry.content
        for label in content.get_elements_by_tag_name("label", XUL_NS):
            value = label.get_attribute("value")
            if value and not label.text_content:
                label.remove_attribute("value")
                label.text_content = value
                self._expanded_labels.append((label, value))

        # <checkbox label="abc"/> shows its label through an inner label
        controls = [
            elem for elem in content.iter_elements()
            if elem.tag in LABELLED_CONTROLS
            and elem.get_attribute("label")
            and not elem.text_content.strip()
        ]
        document = self._host.document
        for control in controls:
            inner = document.create_xul_element("label")
            inner.append(control.get_attribute("label") or "")
            control.append(inner)
            self._control_labels.append(inner)

    # ------------------------------------------------------------------ #
    # Matching                                                             #
    # ------------------------------------------------------------------ #

    def find_matches(self, root: Element, term: str) -> list[SearchMatch]:
        """Matches for an already-normalized ``term`` under ``root``.

        Text matches come first in document order, then elements matched by
        their declared search strings. Several text matches inside one closed
        control collapse into a single match on the control.
        """
        matched: dict[int, SearchMatch] = {}

        for text in root.iter_text_nodes():
            if not text.data or text.length < len(term):
                continue
            if text.closest(_is_excluded) is not None:
                continue
            if term not in normalize_search(text.data):
                continue
            control = text.closest(lambda e: e.tag in CLOSED_CONTROLS)
            if control is not None:
                matched.setdefault(id(control), SearchMatch(control))
                continue
            span = find_span(text.data, term)
            if span is None:
                continue
            matched.setdefault(id(text), SearchMatch(text, span[0], span[1]))

        for elem in root.iter_elements():
            if not (elem.has_attribute(RAW_STRINGS_ATTR) or elem.has_attribute(STRING_KEYS_ATTR)):
                continue
            if elem.closest(_is_excluded) is not None:
                continue
            if self._metadata_matches(elem, term):
                matched.setdefault(id(elem), SearchMatch(elem))

        return list(matched.values())

    def _metadata_matches(self, elem: Element, term: str) -> bool:
        raw = elem.get_attribute(RAW_STRINGS_ATTR)
        if raw:
            candidates = [normalize_search(s) for s in raw.split(",")]
            if any(term in s for s in candidates if s):
                return True

        keys = elem.get_attribute(STRING_KEYS_ATTR)
        if keys:
            for key in (k.strip() for k in keys.split(",")):
                if not key:
                    continue
                text = self._localizer.get(key)
                if text is None:
                    # Same fallback as labels: an unresolved key is shown as itself
                    logger.debug(f"[search] no string for search key {key!r}, matching the key")
                    text = key
                if term in normalize_search(strip_placeholders(text)):
                    return True
        return False

    # ------------------------------------------------------------------ #
    # Presentation                                                         #
    # ------------------------------------------------------------------ #

    def _highlight(self, match: SearchMatch, display: str) -> None:
        if isinstance(match.node, Text):
            if match.start is None or match.end is None:
                return
            self.highlighter.add_range(TextRange(match.node, match.start, match.end))
        elif isinstance(match.node, Element):
            self._wrap_with_tooltip(match.node, display)

    def _wrap_with_tooltip(self, elem: Element, display: str) -> None:
        # hbox.search-tooltip-parent > [elem, span.search-tooltip > span > display]
        document = self._host.document
        wrapper = document.create_xul_element("hbox", **{"class": TOOLTIP_PARENT})
        elem.replace_with(wrapper)
        tooltip = document.create_element("span", **{"class": TOOLTIP})
        text = document.create_element("span")
        text.append(display)
        tooltip.append(text)
        wrapper.append(elem, tooltip)
        width = self._host.measure_text(display)
        tooltip.set_style_property("left", f"calc(50% - {width / 2:g}px)")

    def _reveal_tab(self, node: Node, touched: set[int]) -> Element | None:
        panel = node.closest(_is_tab_panel)
        if panel is None:
            return None
        panels = panel.parent
        if not isinstance(panels, TabPanels) or id(panels) in touched:
            return None
        tab = panels.get_related_element(panel)
        control = tab_control(tab) if tab is not None else None
        if tab is None or control is None:
            return None
        control.selected_item = tab
        touched.add(id(panels))
        return tab
