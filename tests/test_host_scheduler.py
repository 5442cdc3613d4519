"""Tests for turn scheduling and the host window services."""

import asyncio
import threading

from prefpanes.dom.nodes import Element, Event, ProcessingInstruction
from prefpanes.prefs.host import HostWindow
from prefpanes.prefs.scheduler import OneShotSignal, TurnScheduler


def test_callbacks_queued_during_a_turn_run_next_turn():
    scheduler = TurnScheduler()
    order = []

    def first():
        order.append("first")
        scheduler.call_soon(order.append, "nested")

    scheduler.call_soon(first)
    scheduler.call_soon(order.append, "second")

    assert scheduler.run_pending() == 2
    assert order == ["first", "second"]
    assert scheduler.pending == 1

    assert scheduler.run_until_idle() == 1
    assert order == ["first", "second", "nested"]


def test_failing_callback_does_not_stop_the_turn():
    scheduler = TurnScheduler()
    seen = []

    def boom():
        raise RuntimeError("boom")

    scheduler.call_soon(boom)
    scheduler.call_soon(seen.append, "after")
    scheduler.run_pending()
    assert seen == ["after"]


def test_signal_fires_once():
    signal = OneShotSignal()
    calls = []
    signal.add_callback(lambda: calls.append("early"))

    assert signal.set() is True
    assert signal.set() is False
    assert signal.is_set
    assert signal.wait(0)

    signal.add_callback(lambda: calls.append("late"))
    assert calls == ["early", "late"]


def test_signal_wait_async_from_another_thread():
    signal = OneShotSignal()

    async def waiter():
        threading.Timer(0.01, signal.set).start()
        await asyncio.wait_for(signal.wait_async(), timeout=2)

    asyncio.run(waiter())
    assert signal.is_set


def test_scripts_run_once_in_shared_scope():
    host = HostWindow()
    host.run_script("a.py", "counter = globals().get('counter', 0) + 1")
    host.run_script("a.py", "counter = 99")
    host.run_script("b.py", "doubled = counter * 2")

    assert host.scope["counter"] == 1
    assert host.scope["doubled"] == 2
    assert host.loaded_scripts == ["a.py", "b.py"]
    assert host.has_script("a.py")


def test_inline_handler_sees_event_and_element():
    host = HostWindow()
    host.scope["seen"] = []
    button = Element("button")
    handler = host.compile_handler("seen.append((event.type, this.tag))", button)

    handler(Event("command"))
    assert host.scope["seen"] == [("command", "button")]


def test_stylesheets_go_before_document_children_once():
    host = HostWindow()
    host.document.append(Element("div"))

    assert host.add_stylesheet("chrome://prefs/a.css") is True
    assert host.add_stylesheet("chrome://prefs/b.css") is True
    assert host.add_stylesheet("chrome://prefs/a.css") is False

    first, second, root = host.document.child_nodes
    assert isinstance(first, ProcessingInstruction)
    assert first.data == 'href="chrome://prefs/b.css"'
    assert second.data == 'href="chrome://prefs/a.css"'
    assert root.tag == "div"


def test_measure_text_and_launch_url():
    opened = []
    host = HostWindow(measure_text=lambda text: 10.0 * len(text), launch_url=opened.append)
    assert host.measure_text("abc") == 30.0
    host.launch_url("https://example.org/help")
    assert opened == ["https://example.org/help"]
    assert HostWindow().measure_text("") == 0
