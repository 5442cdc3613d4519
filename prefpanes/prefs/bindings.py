"""Two-way links between ``preference``-bearing elements and the store.

Each bound element has exactly one :class:`BindingRegistration`:

* store → element: a store observer pushes the value into ``checked``
  (checkbox-like controls) or ``value`` and dispatches
  ``sync-from-preference``;
* element → store: ``command``/``input``/``change`` listeners write the
  current value back and dispatch ``sync-to-preference``.

Containers are tracked with a mutation observer so elements that appear,
disappear or change their ``preference`` attribute are re-bound.
"""

from __future__ import annotations

import warnings
import weakref
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from prefpanes.dom.nodes import Element, Event, MutationObserver, MutationRecord, Node
from prefpanes.dom.widgets import MenuList, uses_checked
from prefpanes.prefs.errors import LegacyIndirectionWarning
from prefpanes.prefs.scheduler import TurnScheduler
from prefpanes.prefs.store import PreferenceStore, coerce_like

PREFERENCE_ATTR = "preference"
SYNC_FROM_PREFERENCE = "sync-from-preference"
SYNC_TO_PREFERENCE = "sync-to-preference"
USER_EVENTS = ("command", "input", "change")


@dataclass
class BindingRegistration:
    element_ref: weakref.ReferenceType[Element]
    key: str
    observer_handle: int
    listeners: list[tuple[str, Callable[[Event], None]]] = field(default_factory=list)
    child_observer: MutationObserver | None = None

    @property
    def element(self) -> Element | None:
        return self.element_ref()


class BindingSynchronizer:
    def __init__(self, store: PreferenceStore, scheduler: TurnScheduler) -> None:
        self._store = store
        self._scheduler = scheduler
        self._bindings: weakref.WeakKeyDictionary[Element, BindingRegistration] = weakref.WeakKeyDictionary()
        self._containers: list[tuple[Element, MutationObserver]] = []
        self._pushing: set[int] = set()
        self._rewriting: set[int] = set()

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def is_bound(self, element: Element) -> bool:
        return element in self._bindings

    def registration(self, element: Element) -> BindingRegistration | None:
        return self._bindings.get(element)

    def bound_elements(self) -> list[Element]:
        return list(self._bindings.keys())

    # ------------------------------------------------------------------ #
    # Attach / detach                                                      #
    # ------------------------------------------------------------------ #

    def attach(self, element: Element, scope: Element | None = None) -> BindingRegistration | None:
        """Bind ``element`` to the key named by its ``preference`` attribute.

        ``scope`` is searched for legacy ``<preferences><preference>``
        elements; it defaults to the tracked container holding ``element``.
        """
        self.detach(element)
        key = element.get_attribute(PREFERENCE_ATTR)
        if not key:
            return None
        key = self._resolve_legacy_key(element, key, scope or self._container_of(element))

        logger.debug(f"[bindings] attaching <{element.tag}> element to {key}")
        ref = weakref.ref(element)
        handle = self._store.register_observer(key, lambda _value, k=key: self._push_ref(ref, k))
        registration = BindingRegistration(element_ref=ref, key=key, observer_handle=handle)

        for event_type in USER_EVENTS:
            listener = self._on_user_edit
            element.add_event_listener(event_type, listener)
            registration.listeners.append((event_type, listener))

        if isinstance(element, MenuList):
            # Selecting a value only updates the label once the matching item
            # exists, so resync whenever the list's items change.
            observer = MutationObserver(lambda _records, _obs, k=key: self._push_ref(ref, k))
            observer.observe(element, child_list=True, subtree=True)
            registration.child_observer = observer

        self._bindings[element] = registration
        # Deferred so pane code gets a chance to add its own listeners first
        self._scheduler.call_soon(self._initial_push, ref)
        return registration

    def detach(self, element: Element) -> None:
        registration = self._bindings.pop(element, None)
        if registration is None:
            return
        logger.debug(f"[bindings] detaching <{element.tag}> element from {registration.key}")
        self._store.unregister_observer(registration.observer_handle)
        for event_type, listener in registration.listeners:
            element.remove_event_listener(event_type, listener)
        if registration.child_observer is not None:
            registration.child_observer.disconnect()

    def _resolve_legacy_key(self, element: Element, key: str, scope: Element | None) -> str:
        try:
            legacy = self._find_legacy_preference(scope, key)
        except Exception as exc:
            logger.debug(f"[bindings] legacy lookup for {key!r} failed: {exc}")
            return key

        if legacy is not None:
            resolved = legacy.get_attribute("name") or key
            self._warn_legacy(
                "<preference> is deprecated -- `preference` attribute values "
                "should be full preference keys, not <preference> IDs"
            )
            self._rewriting.add(id(element))
            try:
                element.set_attribute(PREFERENCE_ATTR, resolved)
            finally:
                self._rewriting.discard(id(element))
            return resolved
        if "." not in key:
            self._warn_legacy(
                f"`preference` attribute value `{key}` looks like a <preference> ID, "
                "although no element with that ID exists. Its value should be a preference key."
            )
        return key

    @staticmethod
    def _warn_legacy(message: str) -> None:
        logger.warning(f"[bindings] {message}")
        warnings.warn(message, LegacyIndirectionWarning, stacklevel=3)

    @staticmethod
    def _find_legacy_preference(scope: Element | None, key: str) -> Element | None:
        if scope is None:
            return None
        for elem in scope.iter_elements():
            if (
                elem.tag == "preference"
                and elem.get_attribute("id") == key
                and isinstance(elem.parent, Element)
                and elem.parent.tag == "preferences"
            ):
                return elem
        return None

    # ------------------------------------------------------------------ #
    # Synchronization                                                      #
    # ------------------------------------------------------------------ #

    def sync_from_pref(self, element: Element, key: str) -> None:
        """Push the stored value for ``key`` into ``element``."""
        value = self._store.get(key)
        self._pushing.add(id(element))
        try:
            if uses_checked(element):
                element.checked = bool(value)
            else:
                element.value = value
            element.dispatch_event(Event(SYNC_FROM_PREFERENCE))
        finally:
            self._pushing.discard(id(element))

    def _push_ref(self, ref: weakref.ReferenceType[Element], key: str) -> None:
        element = ref()
        if element is not None:
            self.sync_from_pref(element, key)

    def _initial_push(self, ref: weakref.ReferenceType[Element]) -> None:
        element = ref()
        if element is None or element not in self._bindings:
            return
        key = element.get_attribute(PREFERENCE_ATTR)
        if key:
            self.sync_from_pref(element, key)

    def _on_user_edit(self, event: Event) -> None:
        element = event.current_target
        if element is None or id(element) in self._pushing:
            return
        key = element.get_attribute(PREFERENCE_ATTR)
        if not key:
            return
        raw = element.checked if uses_checked(element) else element.value
        self._store.set(key, coerce_like(self._store.get(key), raw))
        element.dispatch_event(Event(SYNC_TO_PREFERENCE))

    # ------------------------------------------------------------------ #
    # Container tracking                                                   #
    # ------------------------------------------------------------------ #

    def track(self, container: Element) -> MutationObserver:
        """Bind every ``preference`` element under ``container`` and follow changes."""
        for elem in container.elements_with_attribute(PREFERENCE_ATTR):
            self.attach(elem, container)

        observer = MutationObserver(lambda records, _obs: self._on_mutations(container, records))
        observer.observe(container, child_list=True, subtree=True, attribute_filter=[PREFERENCE_ATTR])
        self._containers.append((container, observer))
        return observer

    def _container_of(self, element: Element) -> Element | None:
        for container, _ in self._containers:
            if container.contains(element):
                return container
        return None

    def _on_mutations(self, container: Element, records: list[MutationRecord]) -> None:
        for record in records:
            if record.type == "attributes":
                target = record.target
                if not isinstance(target, Element) or id(target) in self._rewriting:
                    continue
                self.detach(target)
                if target.has_attribute(PREFERENCE_ATTR):
                    self.attach(target, container)
            elif record.type == "childList":
                for node in record.removed_nodes:
                    self._detach_subtree(node)
                for node in record.added_nodes:
                    self._attach_subtree(node, container)

    def _detach_subtree(self, node: Node) -> None:
        if isinstance(node, Element):
            self.detach(node)
            for elem in node.iter_elements():
                self.detach(elem)

    def _attach_subtree(self, node: Node, container: Element) -> None:
        if not isinstance(node, Element) or not container.contains(node):
            return
        if node.has_attribute(PREFERENCE_ATTR):
            self.attach(node, container)
        for elem in node.elements_with_attribute(PREFERENCE_ATTR):
            self.attach(elem, container)

    def close(self) -> None:
        """Unregister every store observer and stop following containers."""
        for element in list(self._bindings.keys()):
            self.detach(element)
        for _, observer in self._containers:
            observer.disconnect()
        self._containers.clear()
