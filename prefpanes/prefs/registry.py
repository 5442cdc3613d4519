"""Pane registry: descriptors, navigation entries and content containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from loguru import logger

from prefpanes.config.schema import PaneDescriptor
from prefpanes.dom.nodes import Document, Element
from prefpanes.dom.widgets import RichListBox
from prefpanes.prefs.errors import DuplicatePaneError, PaneNotFoundError, PreferencesError
from prefpanes.prefs.strings import Localizer


@dataclass
class Pane:
    """A registered pane and its runtime state."""

    descriptor: PaneDescriptor
    container: Element
    list_item: Element
    imported: bool = False

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def parent(self) -> str | None:
        return self.descriptor.parent

    @property
    def help_url(self) -> str | None:
        return self.descriptor.help_url


class PaneRegistry:
    """Ordered map of pane id → :class:`Pane`.

    Registering creates the pane's navigation entry and an empty, hidden
    content container placed before the help container.
    """

    def __init__(
        self,
        document: Document,
        navigation: RichListBox,
        help_container: Element,
        localizer: Localizer,
    ) -> None:
        self._document = document
        self.navigation = navigation
        self.help_container = help_container
        self._localizer = localizer
        self._panes: dict[str, Pane] = {}

    @property
    def content(self) -> Element:
        parent = self.help_container.parent
        if not isinstance(parent, Element):
            raise PreferencesError("help container is not inside a content element")
        return parent

    def register(self, descriptor: PaneDescriptor) -> Pane:
        if descriptor.id in self._panes:
            raise DuplicatePaneError(descriptor.id)

        list_item = self._document.create_xul_element("richlistitem", value=descriptor.id)
        if descriptor.image:
            list_item.append(self._document.create_xul_element("image", src=descriptor.image))

        # Sub-panes still get an (invisible) entry so they can be selected
        # without the list falling back to its first visible item.
        if descriptor.parent:
            list_item.hidden = True
        else:
            label = self._document.create_xul_element("label", value=self.label_for(descriptor))
            list_item.append(label)
        self.navigation.append(list_item)

        container = self._document.create_element("div")
        container.hidden = True
        self.help_container.before(container)

        pane = Pane(descriptor=descriptor, container=container, list_item=list_item)
        self._panes[descriptor.id] = pane
        logger.debug(f"[registry] registered pane {descriptor.id}")
        return pane

    def add_separator(self) -> Element:
        separator = self._document.create_element("hr")
        self.navigation.append(separator)
        return separator

    def label_for(self, descriptor: PaneDescriptor) -> str:
        if descriptor.raw_label:
            return descriptor.raw_label
        if descriptor.label:
            return self._localizer.resolve_or_key(descriptor.label)
        return descriptor.id

    def get(self, pane_id: str) -> Pane:
        try:
            return self._panes[pane_id]
        except KeyError:
            raise PaneNotFoundError(pane_id) from None

    def find(self, pane_id: str | None) -> Pane | None:
        if not pane_id:
            return None
        return self._panes.get(pane_id)

    def list_top_level(self) -> list[Pane]:
        return [pane for pane in self._panes.values() if not pane.parent]

    def children_of(self, pane_id: str) -> list[Pane]:
        return [pane for pane in self._panes.values() if pane.parent == pane_id]

    def __iter__(self) -> Iterator[Pane]:
        return iter(list(self._panes.values()))

    def __len__(self) -> int:
        return len(self._panes)

    def __contains__(self, pane_id: object) -> bool:
        return pane_id in self._panes
