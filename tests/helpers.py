"""Helpers for building panes and comparing document shapes."""

from __future__ import annotations

from prefpanes.dom.nodes import Element, Node, Text


def add_pane(window, source, pane_id, markup, **fields):
    """Serve ``markup`` for a new pane and register it."""
    src = f"{pane_id}.xhtml"
    source.register(src, markup)
    descriptor = {"id": pane_id, "src": src}
    if not fields.get("parent"):
        descriptor["rawLabel"] = pane_id.title()
    descriptor.update(fields)
    return window.register_pane(descriptor)


def shape(node: Node):
    """Comparable snapshot of a subtree (tags, attributes, text)."""
    if isinstance(node, Text):
        return node.data
    if isinstance(node, Element):
        return (node.tag, dict(node.attributes), [shape(c) for c in node.child_nodes])
    return (type(node).__name__, [shape(c) for c in node.child_nodes])
