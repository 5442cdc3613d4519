"""Search highlight channels.

``FindSelection`` records ranges for the view to paint, the way a native
find selection works. ``MarkerHighlighter`` rewrites the document instead,
wrapping each range in a marker span, for hosts without such a channel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from prefpanes.dom.nodes import XHTML_NS, Element, Text

MARKER_CLASS = "search-highlight"


@dataclass(frozen=True)
class HighlightColors:
    """Foreground/background for the find highlight, light and dark variants."""

    foreground: str = "currentColor"
    background: str = "#ffe900"
    alt_foreground: str = "currentColor"
    alt_background: str = "#003eaa"


@dataclass(frozen=True)
class TextRange:
    node: Text
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.node.data[self.start:self.end]


class Highlighter(Protocol):
    colors: HighlightColors

    def add_range(self, text_range: TextRange) -> None: ...

    def clear(self) -> None: ...

    @property
    def ranges(self) -> list[TextRange]: ...


class FindSelection:
    def __init__(self, colors: HighlightColors | None = None) -> None:
        self.colors = colors or HighlightColors()
        self._ranges: list[TextRange] = []

    def add_range(self, text_range: TextRange) -> None:
        self._ranges.append(text_range)

    def clear(self) -> None:
        self._ranges.clear()

    @property
    def ranges(self) -> list[TextRange]:
        return list(self._ranges)

    def ranges_for(self, node: Text) -> list[TextRange]:
        return [r for r in self._ranges if r.node is node]


class MarkerHighlighter:
    def __init__(self, colors: HighlightColors | None = None) -> None:
        self.colors = colors or HighlightColors()
        self._markers: list[Element] = []
        self._ranges: list[TextRange] = []

    def add_range(self, text_range: TextRange) -> None:
        node = text_range.node
        parent = node.parent
        if parent is None:
            return
        data = node.data
        before, matched, after = data[:text_range.start], data[text_range.start:text_range.end], data[text_range.end:]
        marker = Element("span", XHTML_NS, {"class": MARKER_CLASS})
        inner = Text(matched)
        marker.append(inner)
        replacement: list = []
        if before:
            replacement.append(Text(before))
        replacement.append(marker)
        if after:
            replacement.append(Text(after))
        node.replace_with(*replacement)
        self._markers.append(marker)
        self._ranges.append(TextRange(inner, 0, len(matched)))

    def clear(self) -> None:
        parents = []
        for marker in self._markers:
            parent = marker.parent
            if parent is None:
                continue
            marker.replace_with(Text(marker.text_content))
            if parent not in parents:
                parents.append(parent)
        for parent in parents:
            parent.normalize()
        self._markers.clear()
        self._ranges.clear()

    @property
    def ranges(self) -> list[TextRange]:
        return list(self._ranges)
