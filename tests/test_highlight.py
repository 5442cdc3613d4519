"""Tests for the highlight channels."""

from helpers import shape

from prefpanes.dom.nodes import Element, Text
from prefpanes.prefs.highlight import MARKER_CLASS, FindSelection, MarkerHighlighter, TextRange


def _label(text):
    label = Element("label")
    label.append(text)
    return label


def test_find_selection_only_records_ranges():
    label = _label("Enable sync")
    text = label.first_child
    selection = FindSelection()

    selection.add_range(TextRange(text, 7, 11))
    assert [r.text for r in selection.ranges] == ["sync"]
    assert selection.ranges_for(text)
    assert label.text_content == "Enable sync"

    selection.clear()
    assert selection.ranges == []


def test_marker_wraps_match_and_clear_restores():
    label = _label("Enable sync now")
    before = shape(label)
    marker = MarkerHighlighter()

    marker.add_range(TextRange(label.first_child, 7, 11))
    assert [c.class_name for c in label.children] == [MARKER_CLASS]
    assert label.children[0].text_content == "sync"
    assert label.text_content == "Enable sync now"
    assert [r.text for r in marker.ranges] == ["sync"]

    marker.clear()
    assert shape(label) == before
    assert len(label.child_nodes) == 1
    assert isinstance(label.first_child, Text)


def test_marker_whole_text_node():
    label = _label("sync")
    marker = MarkerHighlighter()
    marker.add_range(TextRange(label.first_child, 0, 4))
    assert len(label.child_nodes) == 1

    marker.clear()
    assert label.first_child.data == "sync"
