"""Tests for pane markup parsing."""

import pytest

from prefpanes.dom.nodes import XHTML_NS, XUL_NS, ProcessingInstruction, Text
from prefpanes.dom.parser import FragmentParseError, parse_fragment
from prefpanes.dom.widgets import MenuList, TabBox


def test_strict_markup_keeps_whitespace_text():
    fragment = parse_fragment("<div>\n  <p>Hi</p>\n</div>")
    root = fragment.first_element_child
    assert root.tag == "div"
    assert root.namespace == XHTML_NS
    assert any(isinstance(n, Text) and not n.data.strip() for n in root.child_nodes)


def test_strict_markup_binds_xul_prefix():
    fragment = parse_fragment('<div><xul:menulist id="m"/></div>')
    menulist = fragment.get_element_by_id("m")
    assert isinstance(menulist, MenuList)
    assert menulist.namespace == XUL_NS


def test_permissive_markup_drops_whitespace_text():
    fragment = parse_fragment(
        "<vbox>\n  <tabbox id='box'/>\n  <html:p>Text</html:p>\n</vbox>",
        strict_markup=False,
    )
    root = fragment.first_element_child
    assert root.namespace == XUL_NS
    assert all(not isinstance(n, Text) for n in root.child_nodes)
    assert isinstance(fragment.get_element_by_id("box"), TabBox)
    paragraph = root.children[1]
    assert paragraph.namespace == XHTML_NS
    assert paragraph.text_content == "Text"


def test_entities_are_substituted():
    fragment = parse_fragment(
        "<p>&brand.name; &amp; friends</p>",
        {"brand.name": 'Prefpanes "<Beta>" 100%'},
    )
    assert fragment.first_element_child.text_content == 'Prefpanes "<Beta>" 100% & friends'


def test_processing_instructions_are_kept():
    fragment = parse_fragment('<?xml-stylesheet href="pane.css"?><div/>')
    pis = [n for n in fragment.iter_nodes() if isinstance(n, ProcessingInstruction)]
    assert len(pis) == 1
    assert pis[0].target == "xml-stylesheet"
    assert pis[0].data == 'href="pane.css"'


def test_xml_declaration_is_ignored():
    fragment = parse_fragment('<?xml version="1.0" encoding="UTF-8"?>\n<div id="x"/>')
    assert fragment.get_element_by_id("x") is not None


@pytest.mark.parametrize("strict", [True, False])
def test_malformed_markup_raises(strict):
    with pytest.raises(FragmentParseError):
        parse_fragment("<div><p>unclosed</div>", strict_markup=strict)


def test_undefined_entity_shows_its_name():
    fragment = parse_fragment("<p>&brand.name; &missing.key;</p>", {"brand.name": "Prefpanes"})
    assert fragment.first_element_child.text_content == "Prefpanes missing.key"


def test_fragment_children_are_detached_from_wrapper():
    fragment = parse_fragment("<a/><b/>")
    assert [c.tag for c in fragment.children] == ["a", "b"]
    assert all(c.parent is fragment for c in fragment.children)
