"""Sidebar: search entry and pane navigation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import customtkinter as ctk

from prefpanes.gui import theme


@dataclass(frozen=True)
class NavItem:
    """Navigation row metadata."""

    pane_id: str
    label: str


class Sidebar(ctk.CTkFrame):
    """Left panel with the search entry and one button per top-level pane."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        on_select_pane: Callable[[str], None],
        on_search: Callable[[str], None],
    ) -> None:
        super().__init__(
            master,
            width=theme.SIDEBAR_WIDTH,
            fg_color=theme.COLOR_BG_SIDEBAR,
            border_width=1,
            border_color=theme.COLOR_BORDER,
            corner_radius=10,
        )
        self._on_select_pane = on_select_pane
        self._on_search = on_search
        self._buttons: dict[str, ctk.CTkButton] = {}

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._search_entry = ctk.CTkEntry(
            self,
            placeholder_text="Find in Settings",
            height=32,
        )
        self._search_entry.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 4))
        self._search_entry.bind("<Return>", self._on_search_event)
        self._search_entry.bind("<KeyRelease>", self._on_search_event)

        self._list = ctk.CTkScrollableFrame(
            self,
            fg_color="transparent",
            scrollbar_button_color=theme.COLOR_BORDER,
        )
        self._list.grid(row=1, column=0, sticky="nsew", padx=4, pady=(4, 8))
        self._list.grid_columnconfigure(0, weight=1)
        self._last_query = ""

    def set_items(self, items: list[NavItem], active_pane_id: str | None) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        self._buttons.clear()
        for row, item in enumerate(items):
            button = ctk.CTkButton(
                self._list,
                text=item.label,
                anchor="w",
                height=32,
                fg_color="transparent",
                hover_color=theme.COLOR_NAV_HOVER_BG,
                text_color=theme.COLOR_TEXT,
                command=lambda pane_id=item.pane_id: self._on_select_pane(pane_id),
            )
            button.grid(row=row, column=0, sticky="ew", pady=1)
            self._buttons[item.pane_id] = button
        self.set_active(active_pane_id)

    def set_active(self, pane_id: str | None) -> None:
        for key, button in self._buttons.items():
            button.configure(fg_color=theme.COLOR_NAV_ACTIVE_BG if key == pane_id else "transparent")

    def clear_search(self) -> None:
        self._last_query = ""
        self._search_entry.delete(0, "end")

    def _on_search_event(self, _event: object) -> None:
        query = self._search_entry.get()
        if query == self._last_query:
            return
        self._last_query = query
        self._on_search(query)
