"""Tests for the preference store and string tables."""

import json

import pytest

from prefpanes.prefs.errors import MissingStringError
from prefpanes.prefs.store import PreferenceStore, coerce_like
from prefpanes.prefs.strings import Localizer


def test_defaults_and_overrides():
    store = PreferenceStore(defaults={"a.b": 1})
    assert store.get("a.b") == 1
    assert store.get("missing", "fallback") == "fallback"
    store.set("a.b", 2)
    assert store.get("a.b") == 2
    store.clear("a.b")
    assert store.get("a.b") == 1
    assert store.keys() == ["a.b"]


def test_observers_fire_only_on_change():
    store = PreferenceStore()
    seen = []
    handle = store.register_observer("ui.theme", seen.append)

    store.set("ui.theme", "dark")
    store.set("ui.theme", "dark")
    store.set("ui.other", "x")
    assert seen == ["dark"]

    store.unregister_observer(handle)
    store.set("ui.theme", "light")
    assert seen == ["dark"]
    assert store.observer_count() == 0


def test_bool_and_int_are_different_values():
    store = PreferenceStore(defaults={"flag": 1})
    seen = []
    store.register_observer("flag", seen.append)
    store.set("flag", True)
    assert seen == [True]


def test_only_scalars_are_accepted():
    store = PreferenceStore()
    with pytest.raises(TypeError):
        store.set("bad", ["list"])


def test_persistence_round_trip(tmp_path):
    path = tmp_path / "prefs" / "prefs.json"
    store = PreferenceStore(path)
    store.set("sync.enabled", False)
    store.set("app.userName", "anna")

    assert json.loads(path.read_text(encoding="utf-8")) == {"app.userName": "anna", "sync.enabled": False}
    assert PreferenceStore(path).get("sync.enabled") is False


def test_unreadable_store_starts_empty(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    assert PreferenceStore(path).keys() == []


@pytest.mark.parametrize(
    "current, value, expected",
    [
        (True, "false", False),
        (False, "on", True),
        (8080, "3128", 3128),
        (1.5, "2.25", 2.25),
        ("text", 42, "42"),
        (None, "raw", "raw"),
        (10, "not a number", "not a number"),
    ],
)
def test_coerce_like(current, value, expected):
    assert coerce_like(current, value) == expected


def test_localizer_lookup():
    strings = Localizer({"pane.general": "General"})
    assert strings.resolve("pane.general") == "General"
    assert strings.get("nope") is None
    assert strings.resolve_or_key("nope") == "nope"
    with pytest.raises(MissingStringError):
        strings.resolve("nope")


def test_localizer_reads_properties_and_json(tmp_path):
    props = tmp_path / "prefs.properties"
    props.write_text("# comment\npane.general = General\npane.sync=Sync\n", encoding="utf-8")
    table = tmp_path / "extra.json"
    table.write_text(json.dumps({"pane.sync": "Synchronization"}), encoding="utf-8")

    strings = Localizer.from_files([props, table, tmp_path / "missing.json"])
    assert strings.resolve("pane.general") == "General"
    assert strings.resolve("pane.sync") == "Synchronization"
