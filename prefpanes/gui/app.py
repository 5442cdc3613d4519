"""Main customtkinter preferences application."""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk
from loguru import logger

from prefpanes.bootstrap import open_preferences
from prefpanes.config.schema import AppConfig
from prefpanes.gui import theme
from prefpanes.gui.pane_view import PaneView
from prefpanes.gui.sidebar import NavItem, Sidebar
from prefpanes.prefs.events import PANE_SELECTED, SEARCH_COMPLETED, SearchCompleted
from prefpanes.prefs.highlight import FindSelection, HighlightColors
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.scheduler import TurnScheduler
from prefpanes.prefs.window import OpenRequest, PreferencesWindow


class TkTurnScheduler(TurnScheduler):
    """Runs queued turns from the Tk event loop via ``after(0, ...)``."""

    def __init__(self, root: ctk.CTk, on_turn: Callable[[], None] | None = None) -> None:
        super().__init__()
        self._root = root
        self._scheduled = False
        self.on_turn = on_turn

    def _wake(self) -> None:
        if self._scheduled:
            return
        self._scheduled = True
        self._root.after(0, self._run_turn)

    def _run_turn(self) -> None:
        self._scheduled = False
        ran = self.run_pending()
        if self.pending:
            self._wake()
        if ran and self.on_turn is not None:
            self.on_turn()


class PreferencesApp:
    """Desktop window: sidebar navigation plus the rendered panes."""

    def __init__(self, config: AppConfig, request: OpenRequest | None = None) -> None:
        self._config = config
        self._request = request
        self._root: ctk.CTk | None = None
        self._window: PreferencesWindow | None = None
        self._sidebar: Sidebar | None = None
        self._pane_view: PaneView | None = None
        self._status: ctk.CTkLabel | None = None
        self._back_button: ctk.CTkButton | None = None
        self._help_button: ctk.CTkButton | None = None

    def run(self) -> None:
        """Build and run tkinter mainloop."""
        theme.setup_theme()
        root = ctk.CTk()
        self._root = root
        root.title("Settings")
        root.geometry(f"{self._config.window.width}x{self._config.window.height}")
        root.configure(fg_color=theme.COLOR_BG_APP)

        font = ctk.CTkFont(family=theme.FONT_FAMILY, size=theme.FONT_SIZE)
        scheduler = TkTurnScheduler(root, on_turn=self._refresh)
        host = HostWindow(scheduler=scheduler, measure_text=font.measure)
        colors = HighlightColors(
            background=self._config.window.highlight_background,
            alt_background=self._config.window.highlight_background_dark,
        )
        highlighter = FindSelection(colors)
        self._window = open_preferences(
            self._config,
            host=host,
            highlighter=highlighter,
            request=self._request,
        )

        root.protocol("WM_DELETE_WINDOW", self._handle_close)
        root.grid_columnconfigure(1, weight=1)
        root.grid_rowconfigure(1, weight=1)

        self._sidebar = Sidebar(root, on_select_pane=self._window.navigate_to_pane, on_search=self._on_search)
        self._sidebar.grid(row=0, column=0, rowspan=3, sticky="nsw", padx=(10, 5), pady=10)

        top_bar = ctk.CTkFrame(root, fg_color="transparent")
        top_bar.grid(row=0, column=1, sticky="ew", padx=(5, 10), pady=(10, 0))
        top_bar.grid_columnconfigure(1, weight=1)
        self._back_button = ctk.CTkButton(top_bar, text="< Back", width=80, command=self._window.go_back)
        self._back_button.grid(row=0, column=0, sticky="w")
        self._help_button = ctk.CTkButton(top_bar, text="Help", width=80, command=self._window.open_help_link)
        self._help_button.grid(row=0, column=2, sticky="e")

        self._pane_view = PaneView(
            root,
            highlighter,
            theme.highlight_colors(colors.background, colors.alt_background),
        )
        self._pane_view.grid(row=1, column=1, sticky="nsew", padx=(5, 10), pady=10)

        self._status = ctk.CTkLabel(root, text="", anchor="w", text_color=theme.COLOR_TEXT_MUTED)
        self._status.grid(row=2, column=1, sticky="ew", padx=(5, 10), pady=(0, 8))

        self._window.events.subscribe(PANE_SELECTED, lambda _payload: self._refresh())
        self._window.events.subscribe(SEARCH_COMPLETED, self._on_search_completed)

        self._sidebar.set_items(
            [NavItem(pane_id, label) for pane_id, label in self._window.nav_labels()],
            self._window.selected_pane_id,
        )
        self._refresh()
        root.mainloop()

    def _on_search(self, query: str) -> None:
        if self._window is None:
            return
        self._window.search(query)

    def _on_search_completed(self, payload: object) -> None:
        if not isinstance(payload, SearchCompleted):
            return
        if self._status is not None:
            if payload.term:
                self._status.configure(text=f"{payload.match_count} results in {len(payload.visible_panes)} panes")
            else:
                self._status.configure(text="")
        self._refresh()

    def _refresh(self) -> None:
        window = self._window
        if window is None or self._pane_view is None or self._sidebar is None:
            return
        selected = window.selected_pane_id
        if selected is not None:
            self._sidebar.clear_search()
        self._sidebar.set_active(selected)

        pane = window.registry.find(selected)
        if self._back_button is not None:
            if pane is not None and pane.parent:
                self._back_button.grid()
            else:
                self._back_button.grid_remove()
        if self._help_button is not None:
            if pane is not None and pane.help_url:
                self._help_button.grid()
            else:
                self._help_button.grid_remove()
        self._pane_view.show(window.visible_sections())

    def _handle_close(self) -> None:
        if self._window is not None:
            self._window.on_unload()
            self._window.store.save()
        if self._root is not None:
            self._root.destroy()
            self._root = None
        logger.debug("[gui] preferences window closed")


def run_app(config: AppConfig, request: OpenRequest | None = None) -> None:
    PreferencesApp(config, request).run()
