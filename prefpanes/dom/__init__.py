"""Document model used to host preference pane markup."""

from prefpanes.dom.nodes import (
    XHTML_NS,
    XUL_NS,
    Document,
    DocumentFragment,
    Element,
    Event,
    MutationObserver,
    MutationRecord,
    Node,
    ProcessingInstruction,
    Text,
    create_element,
)
from prefpanes.dom.parser import FragmentParseError, parse_fragment
from prefpanes.dom.widgets import MenuList, RichListBox, TabBox, TabPanels, Tabs

__all__ = [
    "XHTML_NS",
    "XUL_NS",
    "Document",
    "DocumentFragment",
    "Element",
    "Event",
    "FragmentParseError",
    "MenuList",
    "MutationObserver",
    "MutationRecord",
    "Node",
    "ProcessingInstruction",
    "RichListBox",
    "TabBox",
    "TabPanels",
    "Tabs",
    "Text",
    "create_element",
    "parse_fragment",
]
