"""Behaviour for the control elements the preference panes rely on."""

from __future__ import annotations

from prefpanes.dom.nodes import Element, Event, register_element_class


class RichListBox(Element):
    """Navigation list. Selection changes dispatch a ``select`` event."""

    @property
    def items(self) -> list[Element]:
        return [c for c in self.children if c.tag == "richlistitem"]

    @property
    def selected_item(self) -> Element | None:
        for item in self.items:
            if item.get_attribute("selected") == "true":
                return item
        return None

    @property
    def selected_index(self) -> int:
        item = self.selected_item
        return self.items.index(item) if item is not None else -1

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        items = self.items
        self._select(items[index] if 0 <= index < len(items) else None)

    @property
    def value(self) -> str | None:
        item = self.selected_item
        return item.get_attribute("value") if item is not None else None

    @value.setter
    def value(self, value: object) -> None:
        target = None
        if value:
            for item in self.items:
                if item.get_attribute("value") == value:
                    target = item
                    break
        self._select(target)

    def clear_selection(self) -> None:
        self._select(None)

    def _select(self, item: Element | None) -> None:
        current = self.selected_item
        if current is item:
            return
        if current is not None:
            current.remove_attribute("selected")
        if item is not None:
            item.set_attribute("selected", "true")
        self.dispatch_event(Event("select"))


class MenuList(Element):
    """Closed drop-down. Its value only shows once a matching item exists."""

    def _menu_items(self) -> list[Element]:
        return [e for e in self.iter_elements() if e.tag == "menuitem"]

    @property
    def selected_item(self) -> Element | None:
        for item in self._menu_items():
            if item.get_attribute("selected") == "true":
                return item
        return None

    @property
    def value(self) -> object:
        if self._value is not None:
            return self._value
        item = self.selected_item
        return item.get_attribute("value") if item is not None else ""

    @value.setter
    def value(self, value: object) -> None:
        self._value = "" if value is None else value
        text = str(self._value)
        match = None
        for item in self._menu_items():
            if item.get_attribute("value") == text:
                match = item
                break
        if match is None:
            return
        for item in self._menu_items():
            if item is not match and item.get_attribute("selected") == "true":
                item.remove_attribute("selected")
        match.set_attribute("selected", "true")
        self.set_attribute("label", match.get_attribute("label") or match.text_content)

    @property
    def label(self) -> str:
        return self.get_attribute("label") or ""


class Tabs(Element):
    """Tab strip. ``control`` of each child tab."""

    @property
    def tabs(self) -> list[Element]:
        return [c for c in self.children if c.tag == "tab"]

    @property
    def tabbox(self) -> TabBox | None:
        parent = self.parent
        return parent if isinstance(parent, TabBox) else None

    @property
    def selected_index(self) -> int:
        for idx, tab in enumerate(self.tabs):
            if tab.get_attribute("selected") == "true":
                return idx
        return 0 if self.tabs else -1

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        tabs = self.tabs
        if not 0 <= index < len(tabs):
            return
        for idx, tab in enumerate(tabs):
            if idx == index:
                tab.set_attribute("selected", "true")
            elif tab.get_attribute("selected") == "true":
                tab.remove_attribute("selected")
        tabbox = self.tabbox
        panels = tabbox.tabpanels if tabbox is not None else None
        if panels is not None:
            panels.selected_index = index
        self.dispatch_event(Event("select"))

    @property
    def selected_item(self) -> Element | None:
        idx = self.selected_index
        tabs = self.tabs
        return tabs[idx] if 0 <= idx < len(tabs) else None

    @selected_item.setter
    def selected_item(self, tab: Element) -> None:
        if tab in self.tabs:
            self.selected_index = self.tabs.index(tab)


class TabPanels(Element):
    @property
    def panels(self) -> list[Element]:
        return [c for c in self.children if c.tag == "tabpanel"]

    @property
    def selected_index(self) -> int:
        raw = self.get_attribute("selectedIndex")
        return int(raw) if raw and raw.lstrip("-").isdigit() else 0

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        self.set_attribute("selectedIndex", str(index))

    def get_related_element(self, panel: Element) -> Element | None:
        """The tab that shows ``panel``, matched by position."""
        parent = self.parent
        if not isinstance(parent, TabBox) or panel not in self.panels:
            return None
        strip = parent.tabs
        if strip is None:
            return None
        idx = self.panels.index(panel)
        tabs = strip.tabs
        return tabs[idx] if idx < len(tabs) else None


class TabBox(Element):
    @property
    def tabs(self) -> Tabs | None:
        for child in self.children:
            if isinstance(child, Tabs):
                return child
        return None

    @property
    def tabpanels(self) -> TabPanels | None:
        for child in self.children:
            if isinstance(child, TabPanels):
                return child
        return None

    @property
    def selected_index(self) -> int:
        strip = self.tabs
        return strip.selected_index if strip is not None else -1

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        strip = self.tabs
        if strip is not None:
            strip.selected_index = index


def tab_control(tab: Element) -> Tabs | None:
    parent = tab.parent
    return parent if isinstance(parent, Tabs) else None


def uses_checked(elem: Element) -> bool:
    """Checkbox-like controls bind through ``checked`` rather than ``value``."""
    return (elem.tag == "input" and elem.get_attribute("type") == "checkbox") or elem.tag == "checkbox"


register_element_class("richlistbox", RichListBox)
register_element_class("menulist", MenuList)
register_element_class("tabbox", TabBox)
register_element_class("tabs", Tabs)
register_element_class("tabpanels", TabPanels)
