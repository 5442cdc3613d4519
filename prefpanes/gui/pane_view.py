"""Render pane documents as customtkinter widgets.

The document stays the source of truth: widgets are rebuilt from it after
navigation and search, and user edits are written back to the elements
followed by the DOM event a native control would fire.
"""

from __future__ import annotations

import tkinter as tk

import customtkinter as ctk

from prefpanes.dom.nodes import Element, Event, Text
from prefpanes.dom.widgets import MenuList, TabBox, uses_checked
from prefpanes.gui import theme
from prefpanes.prefs.highlight import MARKER_CLASS, FindSelection, Highlighter
from prefpanes.prefs.search import HIDDEN_BY_SEARCH, TOOLTIP, TOOLTIP_PARENT

_SKIPPED_TAGS = {"script", "preferences", "preference", "keyset", "image", "tabs"}
_HORIZONTAL_TAGS = {"hbox", "radiogroup"}
_HEADING_TAGS = {"h1", "h2", "caption", "legend"}


def _is_visible(elem: Element) -> bool:
    return not elem.hidden and HIDDEN_BY_SEARCH not in elem.class_list


class PaneView(ctk.CTkScrollableFrame):
    """Scrollable area showing the visible sections of the visible panes."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        highlighter: Highlighter,
        highlight_colors: tuple[str, str],
    ) -> None:
        super().__init__(
            master,
            fg_color=theme.COLOR_BG_PANEL,
            scrollbar_button_color=theme.COLOR_BORDER,
            corner_radius=10,
        )
        self._highlighter = highlighter
        self._highlight_fg, self._highlight_bg = highlight_colors
        self.grid_columnconfigure(0, weight=1)

    def show(self, sections: list[Element]) -> None:
        for child in self.winfo_children():
            child.destroy()
        if not sections:
            ctk.CTkLabel(
                self,
                text="Nothing to show.",
                text_color=theme.COLOR_TEXT_MUTED,
            ).pack(anchor="w", padx=16, pady=16)
            return
        for section in sections:
            frame = ctk.CTkFrame(
                self,
                fg_color=theme.COLOR_BG_INPUT,
                border_width=1,
                border_color=theme.COLOR_BORDER,
                corner_radius=8,
            )
            frame.pack(fill="x", padx=12, pady=(10, 0))
            self._render_children(frame, section, horizontal=False)

    # ------------------------------------------------------------------ #
    # Rendering                                                            #
    # ------------------------------------------------------------------ #

    def _render_children(self, parent: ctk.CTkBaseClass, elem: Element, horizontal: bool) -> None:
        for child in elem.children:
            if not _is_visible(child) or child.tag in _SKIPPED_TAGS:
                continue
            widget = self._render(parent, child)
            if widget is None:
                continue
            if horizontal:
                widget.pack(side="left", padx=(8, 0), pady=4)
            else:
                widget.pack(fill="x", anchor="w", padx=12, pady=3)

    def _render(self, parent: ctk.CTkBaseClass, elem: Element) -> ctk.CTkBaseClass | None:
        if uses_checked(elem):
            return self._checkbox(parent, elem)
        if isinstance(elem, MenuList):
            return self._menulist(parent, elem)
        if isinstance(elem, TabBox):
            return self._tabbox(parent, elem)
        if elem.tag == "input":
            return self._entry(parent, elem)
        if elem.tag == "button":
            return ctk.CTkButton(
                parent,
                text=elem.get_attribute("label") or elem.text_content.strip() or "...",
                width=120,
                command=lambda: elem.dispatch_event(Event("command")),
            )
        if TOOLTIP in elem.class_list:
            return ctk.CTkLabel(
                parent,
                text=elem.text_content,
                fg_color=theme.COLOR_TOOLTIP_BG,
                text_color=theme.COLOR_TOOLTIP_TEXT,
                corner_radius=6,
            )
        if not elem.children or any(MARKER_CLASS in c.class_list for c in elem.children):
            return self._text(parent, elem)

        frame = ctk.CTkFrame(parent, fg_color="transparent")
        horizontal = elem.tag in _HORIZONTAL_TAGS or TOOLTIP_PARENT in elem.class_list
        self._render_children(frame, elem, horizontal=horizontal)
        return frame

    def _text(self, parent: ctk.CTkBaseClass, elem: Element) -> ctk.CTkLabel | None:
        text = elem.text_content.strip() or elem.get_attribute("label") or elem.get_attribute("value") or ""
        if not text:
            return None
        size = theme.FONT_SIZE + 3 if elem.tag in _HEADING_TAGS else theme.FONT_SIZE
        weight = "bold" if elem.tag in _HEADING_TAGS else "normal"
        label = ctk.CTkLabel(
            parent,
            text=text,
            anchor="w",
            justify="left",
            wraplength=560,
            font=ctk.CTkFont(family=theme.FONT_FAMILY, size=size, weight=weight),
            text_color=theme.COLOR_TEXT,
        )
        if self._is_highlighted(elem):
            label.configure(fg_color=self._highlight_bg, text_color=self._highlight_fg, corner_radius=4)
        return label

    def _is_highlighted(self, elem: Element) -> bool:
        if elem.get_elements_by_class_name(MARKER_CLASS):
            return True
        if isinstance(self._highlighter, FindSelection):
            return any(self._highlighter.ranges_for(t) for t in elem.iter_nodes() if isinstance(t, Text))
        return False

    def _checkbox(self, parent: ctk.CTkBaseClass, elem: Element) -> ctk.CTkCheckBox:
        var = tk.BooleanVar(value=elem.checked)

        def _toggle() -> None:
            elem.checked = var.get()
            elem.dispatch_event(Event("command"))

        checkbox = ctk.CTkCheckBox(
            parent,
            text=elem.get_attribute("label") or elem.text_content.strip(),
            variable=var,
            command=_toggle,
            text_color=theme.COLOR_TEXT,
        )
        if self._is_highlighted(elem):
            checkbox.configure(text_color=self._highlight_bg)
        return checkbox

    def _entry(self, parent: ctk.CTkBaseClass, elem: Element) -> ctk.CTkEntry:
        entry = ctk.CTkEntry(parent, width=260)
        entry.insert(0, str(elem.value))

        def _commit(_event: object) -> None:
            if entry.get() == str(elem.value):
                return
            elem.value = entry.get()
            elem.dispatch_event(Event("change"))

        entry.bind("<Return>", _commit)
        entry.bind("<FocusOut>", _commit)
        return entry

    def _menulist(self, parent: ctk.CTkBaseClass, elem: MenuList) -> ctk.CTkOptionMenu:
        items = [item for item in elem.iter_elements() if item.tag == "menuitem"]
        labels = [item.get_attribute("label") or item.text_content for item in items]

        def _choose(choice: str) -> None:
            for item, label in zip(items, labels):
                if label == choice:
                    elem.value = item.get_attribute("value") or label
                    elem.dispatch_event(Event("command"))
                    return

        menu = ctk.CTkOptionMenu(parent, values=labels or [""], command=_choose, width=220)
        menu.set(elem.label or (labels[0] if labels else ""))
        return menu

    def _tabbox(self, parent: ctk.CTkBaseClass, elem: TabBox) -> ctk.CTkTabview | None:
        strip, panels = elem.tabs, elem.tabpanels
        if strip is None or panels is None:
            return None
        names = [tab.get_attribute("label") or tab.text_content.strip() or f"Tab {i + 1}" for i, tab in enumerate(strip.tabs)]

        def _switch() -> None:
            current = view.get()
            if current in names:
                elem.selected_index = names.index(current)

        view = ctk.CTkTabview(parent, height=220, command=_switch)
        for name, panel in zip(names, panels.panels):
            tab_frame = view.add(name)
            if _is_visible(panel):
                self._render_children(tab_frame, panel, horizontal=False)
        if 0 <= elem.selected_index < len(names):
            view.set(names[elem.selected_index])
        return view
