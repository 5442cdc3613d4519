"""Parse pane markup into a detached :class:`DocumentFragment`."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Mapping

from loguru import logger

from prefpanes.dom.nodes import (
    XHTML_NS,
    XUL_NS,
    DocumentFragment,
    Node,
    ProcessingInstruction,
    Text,
    create_element,
)

_XML_DECL_RE = re.compile(r"^\s*<\?xml\s[^?]*\?>")
_WRAPPER_TAG = "div"
_ENTITY_NAME_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")
_ENTITY_REF_RE = re.compile(r"&([A-Za-z_][\w.\-]*);")
_XML_BUILTIN_ENTITIES = frozenset({"lt", "gt", "amp", "quot", "apos"})


class FragmentParseError(ValueError):
    """Markup is not well-formed."""


def _referenced_entities(markup: str, entities: Mapping[str, str]) -> dict[str, str]:
    """Values for every ``&name;`` in ``markup``; unknown names stand for themselves."""
    values: dict[str, str] = {}
    for name in _ENTITY_REF_RE.findall(markup):
        if name in _XML_BUILTIN_ENTITIES or name in values:
            continue
        if name in entities:
            values[name] = entities[name]
        else:
            logger.warning(f"[parser] missing string for &{name}; showing the key")
            values[name] = name
    return values


def _entity_subset(entities: Mapping[str, str]) -> str:
    if not entities:
        return ""
    decls = []
    for name, value in entities.items():
        if not _ENTITY_NAME_RE.match(name):
            continue
        # Character references in an entity value are expanded once at
        # declaration; & and < must survive that to stay literal text.
        escaped = (
            str(value)
            .replace("&", "&#38;#38;")
            .replace("<", "&#38;#60;")
            .replace('"', "&#34;")
            .replace("%", "&#37;")
        )
        decls.append(f'<!ENTITY {name} "{escaped}">')
    return f"<!DOCTYPE {_WRAPPER_TAG} [ {' '.join(decls)} ]>\n"


def _split_tag(tag: str) -> tuple[str | None, str]:
    if tag.startswith("{"):
        ns, _, local = tag[1:].partition("}")
        return ns, local
    return None, tag


def _convert(source: ET.Element, keep_whitespace: bool) -> Node:
    if source.tag is ET.ProcessingInstruction:
        target, _, data = (source.text or "").partition(" ")
        return ProcessingInstruction(target, data.strip())
    namespace, local = _split_tag(source.tag)
    attributes = {}
    for key, value in source.attrib.items():
        _, attr_local = _split_tag(key)
        attributes[attr_local] = value
    elem = create_element(local, namespace, attributes)
    _append_text(elem, source.text, keep_whitespace)
    for child in source:
        elem.child_nodes.append(_convert(child, keep_whitespace))
        elem.child_nodes[-1].parent = elem
        _append_text(elem, child.tail, keep_whitespace)
    return elem


def _append_text(parent: Node, text: str | None, keep_whitespace: bool) -> None:
    if not text:
        return
    if not keep_whitespace and not text.strip():
        return
    node = Text(text)
    node.parent = parent
    parent.child_nodes.append(node)


def parse_fragment(
    markup: str,
    entities: Mapping[str, str] | None = None,
    *,
    strict_markup: bool = True,
) -> DocumentFragment:
    """Parse ``markup`` as the children of a neutral wrapper element.

    Strict markup uses XHTML as the default namespace (``xul:`` prefix bound)
    and keeps whitespace-only text. Permissive markup uses XUL as the default
    namespace (``html:`` prefix bound) and drops whitespace-only text.
    Both modes substitute ``&name;`` references from ``entities``; a name
    missing from ``entities`` is replaced by the name itself.

    Raises :class:`FragmentParseError` when the markup is not well-formed.
    """
    markup = _XML_DECL_RE.sub("", markup or "", count=1)
    if strict_markup:
        ns_decl = f'xmlns="{XHTML_NS}" xmlns:xul="{XUL_NS}"'
    else:
        ns_decl = f'xmlns="{XUL_NS}" xmlns:html="{XHTML_NS}"'
    document = (
        f"{_entity_subset(_referenced_entities(markup, entities or {}))}"
        f"<{_WRAPPER_TAG} {ns_decl}>\n{markup}\n</{_WRAPPER_TAG}>"
    )

    parser = ET.XMLParser(target=ET.TreeBuilder(insert_pis=True))
    try:
        parser.feed(document)
        root = parser.close()
    except ET.ParseError as exc:
        raise FragmentParseError(f"not well-formed markup: {exc}") from exc

    wrapper = _convert(root, keep_whitespace=strict_markup)
    fragment = DocumentFragment()
    for child in list(wrapper.child_nodes):
        child.parent = fragment
        fragment.child_nodes.append(child)
    wrapper.child_nodes.clear()
    return fragment
