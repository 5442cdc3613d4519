"""Tests for in-page search."""

import pytest

from prefpanes.prefs.highlight import MARKER_CLASS, MarkerHighlighter
from prefpanes.prefs.search import HIDDEN_BY_SEARCH, TOOLTIP, TOOLTIP_PARENT
from prefpanes.prefs.window import PreferencesWindow

from helpers import add_pane, shape

GENERAL = """
<div id="general-root">
  <section id="sync-section"><h2>Enable sync</h2></section>
  <section id="library-section"><h2>Library lookup</h2></section>
  <section id="detect-section"><div id="list" data-search-strings="Auto-detect,Manual"></div></section>
</div>
"""

NETWORK = """
<vbox id="network-root">
  <groupbox id="proxy-group">
    <tabbox id="box">
      <tabs id="strip"><tab id="tab-basic" label="Basic"/><tab id="tab-proxy" label="Proxy"/></tabs>
      <tabpanels id="panels">
        <tabpanel><label>Nothing here</label></tabpanel>
        <tabpanel><label>Proxy host</label><label>Proxy port</label></tabpanel>
      </tabpanels>
    </tabbox>
  </groupbox>
  <groupbox id="mode-group">
    <menulist id="mode">
      <menupopup><menuitem value="fast">Fast mode</menuitem><menuitem value="slow">Slow mode</menuitem></menupopup>
    </menulist>
  </groupbox>
  <groupbox id="value-label-group"><label id="server" value="Server address"/></groupbox>
</vbox>
"""


@pytest.fixture
def panes(window, source):
    add_pane(window, source, "general", GENERAL)
    add_pane(window, source, "network", NETWORK, strict_markup=False)
    window.init()
    return window


@pytest.fixture
def marker_window(store, localizer, source, host):
    win = PreferencesWindow(store, localizer, source, host=host, highlighter=MarkerHighlighter())
    add_pane(win, source, "general", GENERAL)
    add_pane(win, source, "network", NETWORK, strict_markup=False)
    win.init()
    yield win
    win.on_unload()


def _el(window, element_id):
    return window.content.get_element_by_id(element_id)


def test_search_hides_sections_without_matches(panes):
    result = panes.search("sync")

    library = _el(panes, "library-section")
    assert HIDDEN_BY_SEARCH in library.class_list
    assert library.aria_hidden
    sync_section = _el(panes, "sync-section")
    assert HIDDEN_BY_SEARCH not in sync_section.class_list

    ranges = panes.search_engine.highlighter.ranges
    assert [r.text for r in ranges] == ["sync"]
    assert ranges[0].node.data == "Enable sync"
    assert result.panes_with_matches == ["general"]


def test_search_loads_every_top_level_pane(panes):
    assert not panes.registry.get("network").imported
    panes.search("proxy")
    assert panes.registry.get("network").imported
    assert not panes.registry.get("network").container.hidden


def test_search_clears_navigation_and_help(panes):
    assert panes.selected_pane_id == "general"
    panes.search("sync")
    assert panes.selected_pane_id is None
    assert panes.help_container.hidden


def test_metadata_match_wraps_element_with_tooltip(panes):
    result = panes.search("manual")

    target = _el(panes, "list")
    wrapper = target.parent
    assert TOOLTIP_PARENT in wrapper.class_list
    tooltip = wrapper.children[1]
    assert TOOLTIP in tooltip.class_list
    assert tooltip.text_content == "manual"
    # 6 characters at 7px, centered
    assert tooltip.style["left"] == "calc(50% - 21px)"
    assert [m.node for m in result.matches] == [target]


def test_metadata_match_ignores_case_and_diacritics(panes):
    result = panes.search("ÀUTO-Detect")
    target = _el(panes, "list")
    assert [m.node for m in result.matches] == [target]
    # The tooltip shows the term as typed, lowercased
    tooltip = target.parent.children[1]
    assert tooltip.text_content == "àuto-detect"


def test_metadata_keys_resolve_through_localizer(window, source, localizer):
    localizer.update({"sync.description": "Keep %S in step with %1$S"})
    add_pane(window, source, "general", '<div><section id="s"><p id="p" data-search-strings="sync.description"/></section></div>')
    window.init()
    result = window.search("in step")
    assert [m.node.id for m in result.matches] == ["p"]


def test_raw_search_strings_attribute(window, source):
    add_pane(window, source, "general", '<div><section><p id="p" data-search-strings-raw="Telemetry, Crash reports"/></section></div>')
    window.init()
    result = window.search("crash")
    assert [m.node.id for m in result.matches] == ["p"]


def test_tab_is_activated_once_per_search(panes):
    panes.loader.ensure_loaded("network")
    strip = _el(panes, "strip")
    selections = []
    strip.add_event_listener("select", lambda event: selections.append(strip.selected_index))

    result = panes.search("proxy")

    assert len([m for m in result.matches if m.is_text]) == 2
    assert selections == [1]
    assert [t.id for t in result.activated_tabs] == ["tab-proxy"]
    assert _el(panes, "panels").selected_index == 1


def test_matches_inside_closed_control_collapse_to_the_control(panes):
    result = panes.search("mode")
    menulist = _el(panes, "mode")
    assert [m.node for m in result.matches] == [menulist]
    assert TOOLTIP_PARENT in menulist.parent.class_list


def test_value_labels_become_searchable(panes):
    panes.search("server")
    server = _el(panes, "server")
    assert [r.text for r in panes.search_engine.highlighter.ranges] == ["Server"]
    assert server.text_content == "Server address"

    panes.search("")
    assert server.get_attribute("value") == "Server address"
    assert server.text_content == ""


def test_excluded_subtrees_do_not_match(window, source):
    markup = """
    <div>
      <section id="a"><p hidden="true">Secret sync</p></section>
      <section id="b"><p no-highlight="">Skip sync</p></section>
      <section id="c"><p>Visible sync</p></section>
    </div>
    """
    add_pane(window, source, "general", markup)
    window.init()
    result = window.search("sync")
    assert [m.node.data for m in result.matches] == ["Visible sync"]
    assert HIDDEN_BY_SEARCH in _el(window, "a").class_list
    assert HIDDEN_BY_SEARCH in _el(window, "b").class_list


def test_empty_search_restores_the_document(marker_window):
    marker_window.loader.ensure_loaded("network")
    marker_window.navigate_to_pane("general")
    before = shape(marker_window.content)

    marker_window.search("sync")
    assert marker_window.content.get_elements_by_class_name(MARKER_CLASS)
    marker_window.search("manual")
    assert marker_window.content.get_elements_by_class_name(TOOLTIP_PARENT)

    marker_window.search("")

    assert not marker_window.content.get_elements_by_class_name(MARKER_CLASS)
    assert not marker_window.content.get_elements_by_class_name(TOOLTIP_PARENT)
    assert not marker_window.content.get_elements_by_class_name(HIDDEN_BY_SEARCH)
    assert shape(marker_window.content) == before
    assert marker_window.selected_pane_id == "general"


def test_whitespace_only_term_resets(panes):
    panes.search("sync")
    result = panes.search("   ")
    assert result.term == ""
    assert not panes.content.get_elements_by_class_name(HIDDEN_BY_SEARCH)
    assert panes.search_engine.highlighter.ranges == []


def test_search_is_deterministic(panes):
    first = panes.search("proxy")
    first_ranges = [(r.node, r.start, r.end) for r in panes.search_engine.highlighter.ranges]
    second = panes.search("proxy")
    second_ranges = [(r.node, r.start, r.end) for r in panes.search_engine.highlighter.ranges]

    assert first_ranges == second_ranges
    assert [t.id for t in first.activated_tabs] == [t.id for t in second.activated_tabs]
    assert [s.id for s in first.hidden_sections] == [s.id for s in second.hidden_sections]


def test_input_controls_are_not_matched(window, source):
    markup = '<div><section><input id="i" value="Sync now" data-search-strings-raw="Sync now"/></section></div>'
    add_pane(window, source, "general", markup)
    window.init()
    result = window.search("sync now")
    assert result.matches == []


def test_bindings_follow_wrapped_controls(window, store, source):
    markup = '<div><section><xul:checkbox id="c" preference="sync.enabled" data-search-strings-raw="Sync now"/></section></div>'
    add_pane(window, source, "general", markup)
    window.init()
    window.host.scheduler.run_until_idle()
    checkbox = _el(window, "c")

    result = window.search("sync now")
    assert [m.node for m in result.matches] == [checkbox]
    assert window.bindings.is_bound(checkbox)
    store.set("sync.enabled", False)
    assert not checkbox.checked

    window.search("")
    assert window.bindings.is_bound(checkbox)
    store.set("sync.enabled", True)
    assert checkbox.checked


LABELLED = """
<vbox id="labelled-root">
  <groupbox id="checkbox-group"><checkbox id="sync-box" label="Enable sync" preference="sync.enabled"/></groupbox>
  <groupbox id="radio-group">
    <radiogroup><radio id="radio-auto" label="Detect proxy automatically"/></radiogroup>
  </groupbox>
  <groupbox id="button-group"><button id="reset" label="Reset cache"/></groupbox>
  <groupbox id="menu-group">
    <menulist id="sync-mode" preference="sync.mode">
      <menupopup><menuitem value="manual" label="Manual"/><menuitem value="auto" label="Automatic"/></menupopup>
    </menulist>
  </groupbox>
</vbox>
"""


@pytest.fixture
def labelled(window, source):
    add_pane(window, source, "general", LABELLED, strict_markup=False)
    window.init()
    window.host.scheduler.run_until_idle()
    return window


@pytest.mark.parametrize(
    "term, group_id, control_id",
    [
        ("sync", "checkbox-group", "sync-box"),
        ("proxy", "radio-group", "radio-auto"),
        ("cache", "button-group", "reset"),
    ],
)
def test_label_attribute_is_searchable(labelled, term, group_id, control_id):
    result = labelled.search(term)
    control = _el(labelled, control_id)

    assert HIDDEN_BY_SEARCH not in _el(labelled, group_id).class_list
    text_matches = [m for m in result.matches if m.is_text and control.contains(m.node)]
    assert len(text_matches) == 1
    assert text_matches[0].node.data == control.get_attribute("label")


def test_menuitem_label_match_resolves_to_menulist(labelled):
    result = labelled.search("automatic")
    menulist = _el(labelled, "sync-mode")

    assert HIDDEN_BY_SEARCH not in _el(labelled, "menu-group").class_list
    assert [m.node for m in result.matches if menulist.contains(m.node)] == [menulist]
    assert TOOLTIP_PARENT in menulist.parent.class_list


def test_reset_removes_expanded_control_labels(labelled):
    before = shape(labelled.content)
    labelled.search("sync")
    assert _el(labelled, "sync-box").child_nodes
    labelled.search("automatic")

    labelled.search("")
    assert _el(labelled, "sync-box").child_nodes == []
    assert shape(labelled.content) == before
