"""Shared GUI theme defaults."""

from __future__ import annotations

import customtkinter as ctk

WINDOW_WIDTH = 980
WINDOW_HEIGHT = 680
SIDEBAR_WIDTH = 220
FONT_SIZE = 13
FONT_FAMILY = "Segoe UI"

COLOR_BG_APP = "#0E1116"
COLOR_BG_PANEL = "#131A22"
COLOR_BG_INPUT = "#101722"
COLOR_BG_SIDEBAR = "#10161F"
COLOR_BORDER = "#223247"
COLOR_TEXT = "#D9E2EF"
COLOR_TEXT_MUTED = "#93A3B8"
COLOR_ACCENT = "#2E9BFF"
COLOR_NAV_ACTIVE_BG = "#192B3E"
COLOR_NAV_HOVER_BG = "#141E2C"

# Search tooltip bubble shown next to controls matched by their search strings
COLOR_TOOLTIP_BG = "#FFE900"
COLOR_TOOLTIP_TEXT = "#0C0C0D"


def highlight_colors(background: str, dark_background: str) -> tuple[str, str]:
    """Return (fg, bg) for find highlights in the current appearance mode."""
    if ctk.get_appearance_mode().lower() == "dark":
        return COLOR_TEXT, dark_background
    return "#0C0C0D", background


def setup_theme() -> None:
    """Apply global appearance settings."""
    ctk.set_appearance_mode("dark")
    ctk.set_default_color_theme("blue")
