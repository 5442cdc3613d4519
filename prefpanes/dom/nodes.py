"""Minimal document model for preference pane markup.

Only what the pane controller needs: element/text/processing-instruction
nodes, fragments, DOM-style events and an explicit mutation-observer
subscription that the observed node owns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

ELEMENT_NODE = 1
TEXT_NODE = 3
PROCESSING_INSTRUCTION_NODE = 7
COMMENT_NODE = 8
DOCUMENT_NODE = 9
DOCUMENT_FRAGMENT_NODE = 11

XHTML_NS = "http://www.w3.org/1999/xhtml"
XUL_NS = "http://www.mozilla.org/keymaster/gatekeeper/there.is.only.xul"

EventListener = Callable[["Event"], None]


class Event:
    """A dispatched notification. ``target``/``current_target`` are set on dispatch."""

    def __init__(self, type: str, detail: object = None) -> None:
        self.type = type
        self.detail = detail
        self.target: Element | None = None
        self.current_target: Element | None = None

    def __repr__(self) -> str:
        return f"Event({self.type!r})"


@dataclass
class MutationRecord:
    """One observed change. ``type`` is ``"childList"`` or ``"attributes"``."""

    type: str
    target: "Node"
    added_nodes: list["Node"] = field(default_factory=list)
    removed_nodes: list["Node"] = field(default_factory=list)
    attribute_name: str | None = None
    old_value: str | None = None


class MutationObserver:
    """Subscription to structural and attribute changes under a node.

    Records are delivered synchronously, once the mutating call has finished
    updating the tree.
    """

    def __init__(self, callback: Callable[[list[MutationRecord], "MutationObserver"], None]) -> None:
        self._callback = callback
        self._targets: list[tuple[Node, dict]] = []

    def observe(
        self,
        target: "Node",
        *,
        child_list: bool = False,
        subtree: bool = False,
        attributes: bool = False,
        attribute_filter: list[str] | None = None,
    ) -> None:
        options = {
            "child_list": child_list,
            "subtree": subtree,
            "attributes": attributes or attribute_filter is not None,
            "attribute_filter": set(attribute_filter) if attribute_filter is not None else None,
        }
        self._targets = [(t, o) for t, o in self._targets if t is not target]
        self._targets.append((target, options))
        if self not in target._observers:
            target._observers.append(self)

    def disconnect(self) -> None:
        for target, _ in self._targets:
            if self in target._observers:
                target._observers.remove(self)
        self._targets.clear()

    def _options_for(self, target: "Node") -> dict | None:
        for observed, options in self._targets:
            if observed is target:
                return options
        return None

    def _wants(self, observed: "Node", record: MutationRecord) -> bool:
        options = self._options_for(observed)
        if options is None:
            return False
        if record.target is not observed and not options["subtree"]:
            return False
        if record.type == "childList":
            return options["child_list"]
        if not options["attributes"]:
            return False
        attr_filter = options["attribute_filter"]
        return attr_filter is None or record.attribute_name in attr_filter

    def _deliver(self, record: MutationRecord) -> None:
        self._callback([record], self)


class Node:
    node_type = 0

    def __init__(self) -> None:
        self.parent: Node | None = None
        self.child_nodes: list[Node] = []
        self._observers: list[MutationObserver] = []

    # -- navigation -------------------------------------------------------

    @property
    def parent_element(self) -> Element | None:
        return self.parent if isinstance(self.parent, Element) else None

    @property
    def first_child(self) -> Node | None:
        return self.child_nodes[0] if self.child_nodes else None

    @property
    def last_child(self) -> Node | None:
        return self.child_nodes[-1] if self.child_nodes else None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.child_nodes
        idx = siblings.index(self)
        return siblings[idx + 1] if idx + 1 < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.child_nodes
        idx = siblings.index(self)
        return siblings[idx - 1] if idx > 0 else None

    @property
    def children(self) -> list[Element]:
        return [n for n in self.child_nodes if isinstance(n, Element)]

    @property
    def first_element_child(self) -> Element | None:
        for node in self.child_nodes:
            if isinstance(node, Element):
                return node
        return None

    def ancestors(self) -> Iterator[Node]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def contains(self, other: Node | None) -> bool:
        while other is not None:
            if other is self:
                return True
            other = other.parent
        return False

    def iter_nodes(self) -> Iterator[Node]:
        """Descendants in document order, excluding ``self``."""
        stack = list(reversed(self.child_nodes))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes))

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter_nodes():
            if isinstance(node, Element):
                yield node

    def iter_text_nodes(self) -> Iterator[Text]:
        for node in self.iter_nodes():
            if isinstance(node, Text):
                yield node

    def elements_with_attribute(self, name: str) -> list[Element]:
        return [e for e in self.iter_elements() if e.has_attribute(name)]

    def get_elements_by_tag_name(self, tag: str, namespace: str | None = None) -> list[Element]:
        return [
            e for e in self.iter_elements()
            if e.tag == tag and (namespace is None or e.namespace == namespace)
        ]

    def get_elements_by_class_name(self, name: str) -> list[Element]:
        return [e for e in self.iter_elements() if name in e.class_list]

    def get_element_by_id(self, element_id: str) -> Element | None:
        for elem in self.iter_elements():
            if elem.get_attribute("id") == element_id:
                return elem
        return None

    def closest_element(self) -> Element | None:
        node: Node | None = self
        while node is not None and not isinstance(node, Element):
            node = node.parent
        return node

    def closest(self, predicate: Callable[[Element], bool]) -> Element | None:
        """Nearest inclusive ancestor element matching ``predicate``.

        Non-element nodes start from their parent element.
        """
        node = self.closest_element()
        while node is not None:
            if isinstance(node, Element) and predicate(node):
                return node
            node = node.parent
        return None

    # -- text -------------------------------------------------------------

    @property
    def text_content(self) -> str:
        return "".join(t.data for t in self.iter_text_nodes())

    @text_content.setter
    def text_content(self, value: str) -> None:
        for child in list(self.child_nodes):
            self.remove_child(child)
        if value:
            self.append(Text(value))

    # -- mutation ---------------------------------------------------------

    def append(self, *nodes: Node | str) -> None:
        for node in nodes:
            self.insert_before(node, None)

    def insert_before(self, node: Node | str, reference: Node | None) -> Node:
        if isinstance(node, str):
            node = Text(node)
        if node.contains(self):
            raise ValueError("cannot insert a node into its own subtree")
        if isinstance(node, DocumentFragment):
            moved = list(node.child_nodes)
            for child in moved:
                node._detach_silently(child)
            self._insert_nodes(moved, reference)
            return node
        if node.parent is not None:
            node.parent.remove_child(node)
        self._insert_nodes([node], reference)
        return node

    def _insert_nodes(self, nodes: list[Node], reference: Node | None) -> None:
        if not nodes:
            return
        if reference is None:
            idx = len(self.child_nodes)
        else:
            if reference.parent is not self:
                raise ValueError("reference node is not a child of this node")
            idx = self.child_nodes.index(reference)
        for offset, node in enumerate(nodes):
            self.child_nodes.insert(idx + offset, node)
            node.parent = self
        self._notify(MutationRecord("childList", self, added_nodes=list(nodes)))

    def _detach_silently(self, child: Node) -> None:
        self.child_nodes.remove(child)
        child.parent = None

    def remove_child(self, child: Node) -> Node:
        if child.parent is not self:
            raise ValueError("node is not a child of this node")
        self._detach_silently(child)
        self._notify(MutationRecord("childList", self, removed_nodes=[child]))
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def before(self, *nodes: Node | str) -> None:
        if self.parent is None:
            return
        parent = self.parent
        for node in nodes:
            parent.insert_before(node, self)

    def replace_with(self, *nodes: Node | str) -> None:
        parent = self.parent
        if parent is None:
            return
        anchor = self.next_sibling
        parent.remove_child(self)
        for node in nodes:
            if anchor is not None and anchor.parent is parent:
                parent.insert_before(node, anchor)
            else:
                parent.append(node)

    def normalize(self) -> None:
        """Merge adjacent text nodes and drop empty ones, recursively."""
        previous: Text | None = None
        for child in list(self.child_nodes):
            if isinstance(child, Text):
                if not child.data:
                    self.remove_child(child)
                    continue
                if previous is not None:
                    previous.data += child.data
                    self.remove_child(child)
                    continue
                previous = child
            else:
                previous = None
                child.normalize()

    def _notify(self, record: MutationRecord) -> None:
        node: Node | None = self
        while node is not None:
            for observer in list(node._observers):
                if observer._wants(node, record):
                    observer._deliver(record)
            node = node.parent


class Text(Node):
    node_type = TEXT_NODE

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def text_content(self) -> str:
        return self.data

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = value

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class ProcessingInstruction(Node):
    node_type = PROCESSING_INSTRUCTION_NODE

    def __init__(self, target: str, data: str = "") -> None:
        super().__init__()
        self.target = target
        self.data = data

    @property
    def text_content(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"<?{self.target} {self.data}?>"


class Comment(Node):
    node_type = COMMENT_NODE

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    @property
    def text_content(self) -> str:
        return ""


class DocumentFragment(Node):
    node_type = DOCUMENT_FRAGMENT_NODE


class ClassList:
    """Live view over an element's ``class`` attribute."""

    def __init__(self, element: Element) -> None:
        self._element = element

    def _tokens(self) -> list[str]:
        return (self._element.get_attribute("class") or "").split()

    def __contains__(self, name: str) -> bool:
        return name in self._tokens()

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens())

    def add(self, *names: str) -> None:
        tokens = self._tokens()
        for name in names:
            if name not in tokens:
                tokens.append(name)
        self._element.set_attribute("class", " ".join(tokens))

    def remove(self, *names: str) -> None:
        tokens = [t for t in self._tokens() if t not in names]
        if tokens:
            self._element.set_attribute("class", " ".join(tokens))
        else:
            self._element.remove_attribute("class")


class Element(Node):
    node_type = ELEMENT_NODE

    def __init__(self, tag: str, namespace: str | None = XHTML_NS, attributes: dict[str, str] | None = None) -> None:
        super().__init__()
        self.tag = tag
        self.namespace = namespace
        self.attributes: dict[str, str] = dict(attributes or {})
        self._listeners: dict[str, list[EventListener]] = {}
        self._handlers: dict[str, EventListener] = {}
        self._value: object = None
        self._checked: bool | None = None

    def __repr__(self) -> str:
        ident = self.attributes.get("id")
        return f"<{self.tag}{' #' + ident if ident else ''}>"

    # -- attributes -------------------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_attribute(self, name: str, value: object) -> None:
        old = self.attributes.get(name)
        text = "true" if value is True else "false" if value is False else str(value)
        self.attributes[name] = text
        if old != text:
            self._notify(MutationRecord("attributes", self, attribute_name=name, old_value=old))

    def remove_attribute(self, name: str) -> None:
        if name not in self.attributes:
            return
        old = self.attributes.pop(name)
        self._notify(MutationRecord("attributes", self, attribute_name=name, old_value=old))

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")

    @property
    def class_list(self) -> ClassList:
        return ClassList(self)

    @property
    def class_name(self) -> str:
        return self.attributes.get("class", "")

    @class_name.setter
    def class_name(self, value: str) -> None:
        self.set_attribute("class", value)

    @property
    def hidden(self) -> bool:
        return self.attributes.get("hidden") == "true"

    @hidden.setter
    def hidden(self, value: bool) -> None:
        if value:
            self.set_attribute("hidden", "true")
        else:
            self.remove_attribute("hidden")

    @property
    def aria_hidden(self) -> bool:
        return self.attributes.get("aria-hidden") == "true"

    @aria_hidden.setter
    def aria_hidden(self, value: bool) -> None:
        if value:
            self.set_attribute("aria-hidden", "true")
        else:
            self.remove_attribute("aria-hidden")

    def set_style_property(self, name: str, value: str) -> None:
        props = self.style
        props[name] = value
        self.set_attribute("style", "; ".join(f"{k}: {v}" for k, v in props.items()))

    @property
    def style(self) -> dict[str, str]:
        props: dict[str, str] = {}
        for decl in (self.attributes.get("style") or "").split(";"):
            if ":" in decl:
                key, _, val = decl.partition(":")
                props[key.strip()] = val.strip()
        return props

    # -- form state -------------------------------------------------------

    @property
    def value(self) -> object:
        if self._value is None:
            return self.attributes.get("value", "")
        return self._value

    @value.setter
    def value(self, value: object) -> None:
        self._value = "" if value is None else value

    @property
    def checked(self) -> bool:
        if self._checked is None:
            return self.attributes.get("checked") in ("true", "checked")
        return self._checked

    @checked.setter
    def checked(self, value: bool) -> None:
        self._checked = bool(value)

    # -- events -----------------------------------------------------------

    def add_event_listener(self, type: str, listener: EventListener) -> None:
        listeners = self._listeners.setdefault(type, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, type: str, listener: EventListener) -> None:
        listeners = self._listeners.get(type, [])
        if listener in listeners:
            listeners.remove(listener)

    def set_handler(self, type: str, handler: EventListener | None) -> None:
        """Equivalent of assigning an ``on<type>`` property."""
        if handler is None:
            self._handlers.pop(type, None)
        else:
            self._handlers[type] = handler

    def get_handler(self, type: str) -> EventListener | None:
        return self._handlers.get(type)

    def dispatch_event(self, event: Event) -> None:
        event.target = self
        event.current_target = self
        for listener in list(self._listeners.get(event.type, [])):
            listener(event)
        handler = self._handlers.get(event.type)
        if handler is not None:
            handler(event)


class Document(Node):
    node_type = DOCUMENT_NODE

    @property
    def document_element(self) -> Element | None:
        return self.first_element_child

    def create_element(self, tag: str, namespace: str | None = XHTML_NS, **attributes: str) -> Element:
        return create_element(tag, namespace, attributes)

    def create_xul_element(self, tag: str, **attributes: str) -> Element:
        return create_element(tag, XUL_NS, attributes)

    def create_text_node(self, data: str) -> Text:
        return Text(data)

    def create_processing_instruction(self, target: str, data: str) -> ProcessingInstruction:
        return ProcessingInstruction(target, data)

    def processing_instructions(self) -> list[ProcessingInstruction]:
        return [n for n in self.child_nodes if isinstance(n, ProcessingInstruction)]


_ELEMENT_CLASSES: dict[str, type[Element]] = {}


def register_element_class(tag: str, cls: type[Element]) -> None:
    _ELEMENT_CLASSES[tag] = cls


def create_element(tag: str, namespace: str | None = XHTML_NS, attributes: dict[str, str] | None = None) -> Element:
    """Build an element, using the specialised class registered for ``tag`` if any."""
    cls = _ELEMENT_CLASSES.get(tag, Element)
    return cls(tag, namespace, attributes)
