"""Tests for two-way preference bindings."""

import pytest

from prefpanes.dom.nodes import Event
from prefpanes.prefs.bindings import SYNC_FROM_PREFERENCE, SYNC_TO_PREFERENCE
from prefpanes.prefs.errors import LegacyIndirectionWarning

from helpers import add_pane

SYNC = """
<div id="sync-root">
  <section id="basics">
    <input type="checkbox" id="enabled" preference="sync.enabled"/>
    <input id="name" preference="app.userName"/>
    <input id="port" preference="network.proxyPort"/>
  </section>
</div>
"""


@pytest.fixture
def sync_pane(window, source):
    pane = add_pane(window, source, "sync", SYNC)
    window.loader.ensure_loaded("sync")
    return pane


def _el(pane, element_id):
    return pane.container.get_element_by_id(element_id)


def test_initial_push_waits_for_next_turn(window, sync_pane):
    enabled = _el(sync_pane, "enabled")
    name = _el(sync_pane, "name")
    assert window.bindings.is_bound(enabled)
    assert not enabled.checked
    assert name.value == ""

    window.host.scheduler.run_pending()

    assert enabled.checked
    assert name.value == "anna"


def test_store_write_updates_element(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    enabled = _el(sync_pane, "enabled")
    seen = []
    enabled.add_event_listener(SYNC_FROM_PREFERENCE, lambda event: seen.append(event.type))

    store.set("sync.enabled", False)

    assert not enabled.checked
    assert seen == [SYNC_FROM_PREFERENCE]


def test_user_edit_updates_store(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    name = _el(sync_pane, "name")
    notified = []
    name.add_event_listener(SYNC_TO_PREFERENCE, lambda event: notified.append(event.type))

    name.value = "bob"
    name.dispatch_event(Event("change"))

    assert store.get("app.userName") == "bob"
    assert notified == [SYNC_TO_PREFERENCE]


def test_user_edit_keeps_the_stored_type(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    port = _el(sync_pane, "port")
    port.value = "3128"
    port.dispatch_event(Event("input"))
    assert store.get("network.proxyPort") == 3128

    enabled = _el(sync_pane, "enabled")
    enabled.checked = False
    enabled.dispatch_event(Event("command"))
    assert store.get("sync.enabled") is False


def test_push_is_not_treated_as_user_edit(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    name = _el(sync_pane, "name")
    writes = []
    store.register_observer("app.userName", writes.append)

    # A push that dispatches "change" from a sync-from-preference listener
    name.add_event_listener(SYNC_FROM_PREFERENCE, lambda event: name.dispatch_event(Event("change")))
    store.set("app.userName", "carl")

    assert writes == ["carl"]
    assert name.value == "carl"


def test_removed_element_is_detached_and_readded_element_resyncs(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    name = _el(sync_pane, "name")
    section = name.parent

    name.remove()
    assert not window.bindings.is_bound(name)
    assert store.observer_count("app.userName") == 0

    store.set("app.userName", "dora")
    assert name.value == "anna"

    fresh = window.host.document.create_element("input", id="name", preference="app.userName")
    section.append(fresh)
    assert window.bindings.is_bound(fresh)
    window.host.scheduler.run_pending()
    assert fresh.value == "dora"


def test_removing_a_subtree_detaches_descendants(window, store, sync_pane):
    window.host.scheduler.run_until_idle()
    _el(sync_pane, "basics").remove()
    assert window.bindings.bound_elements() == []
    assert store.observer_count() == 0


def test_preference_attribute_change_rebinds(window, store, sync_pane):
    name = _el(sync_pane, "name")
    name.set_attribute("preference", "app.displayName")

    registration = window.bindings.registration(name)
    assert registration.key == "app.displayName"
    assert store.observer_count("app.userName") == 0
    assert store.observer_count("app.displayName") == 1

    name.remove_attribute("preference")
    assert not window.bindings.is_bound(name)
    assert store.observer_count("app.displayName") == 0


def test_detach_is_idempotent(window, sync_pane):
    name = _el(sync_pane, "name")
    window.bindings.detach(name)
    window.bindings.detach(name)
    assert not window.bindings.is_bound(name)


def test_menulist_resyncs_after_items_are_added(window, store, source):
    markup = """
    <vbox>
      <groupbox>
        <menulist id="mode" preference="sync.mode"><menupopup id="popup"/></menulist>
      </groupbox>
    </vbox>
    """
    pane = add_pane(window, source, "sync", markup, strict_markup=False)
    window.loader.ensure_loaded("sync")
    window.host.scheduler.run_until_idle()

    menulist = _el(pane, "mode")
    assert menulist.value == "manual"
    assert menulist.label == ""

    popup = _el(pane, "popup")
    for value, label in (("auto", "Automatic"), ("manual", "Manual")):
        popup.append(window.host.document.create_xul_element("menuitem", value=value, label=label))

    assert menulist.label == "Manual"


def test_legacy_preference_id_is_resolved(window, store, source):
    markup = """
    <div>
      <preferences><preference id="pref-sync" name="sync.enabled" type="bool"/></preferences>
      <section><input type="checkbox" id="legacy" preference="pref-sync"/></section>
    </div>
    """
    pane = add_pane(window, source, "sync", markup)
    with pytest.warns(LegacyIndirectionWarning):
        window.loader.ensure_loaded("sync")

    legacy = _el(pane, "legacy")
    assert legacy.get_attribute("preference") == "sync.enabled"
    assert window.bindings.registration(legacy).key == "sync.enabled"
    window.host.scheduler.run_until_idle()
    assert legacy.checked


def test_undotted_key_without_legacy_element_warns(window, source):
    pane = add_pane(window, source, "sync", '<div><input id="odd" preference="oddkey"/></div>')
    with pytest.warns(LegacyIndirectionWarning):
        window.loader.ensure_loaded("sync")
    assert window.bindings.registration(_el(pane, "odd")).key == "oddkey"


def test_close_unregisters_everything(window, store, sync_pane):
    assert store.observer_count() == 3
    window.on_unload()
    assert store.observer_count() == 0
    assert window.bindings.bound_elements() == []
