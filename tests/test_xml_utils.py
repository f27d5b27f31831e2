"""
XML Helper Tests

Run with: pytest tests/test_xml_utils.py -v
"""

import pytest
from lxml import etree

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import dvbi_core.xml as xml_helpers
from dvbi_core.xml.utils import (
    XML_LANG,
    attr,
    attribute_names,
    children,
    first_child,
    local_name,
    namespace_of,
    safe_get_text,
    xml_lang,
)

NAMESPACE = "urn:dvb:metadata:servicediscovery:2024"


@pytest.fixture
def service():
    """A namespaced <Service> with a comment among its children."""
    return etree.fromstring(
        f'<Service xmlns="{NAMESPACE}" xmlns:x="urn:example" version="1" x:dynamic="true" xml:lang="en">'
        "<ServiceName>One</ServiceName><!-- note --><ServiceName>Two</ServiceName>"
        "<ProviderName>Provider <b>Ltd</b></ProviderName>"
        "</Service>"
    )


class TestXmlHelpers:
    """Tests for the namespace-agnostic helpers."""

    def test_exports_resolve(self):
        """Every name the package exports is defined."""
        for name in xml_helpers.__all__:
            assert hasattr(xml_helpers, name), name

    def test_names(self, service):
        """Local names and namespaces are split from the tag."""
        assert local_name(service) == "Service"
        assert namespace_of(service) == NAMESPACE

    def test_children_skip_comments(self, service):
        """Children are found by local name and comments are skipped."""
        names = children(service, "ServiceName")
        assert [safe_get_text(name) for name in names] == ["One", "Two"]
        assert first_child(service, "Missing") is None

    def test_attributes_in_any_namespace(self, service):
        """Attributes are found by local name."""
        assert attr(service, "dynamic") == "true"
        assert attr(service, "missing", "default") == "default"
        assert attribute_names(service) == ["version", "dynamic", "lang"]

    def test_language_and_text(self, service):
        """xml:lang is read from the element and text is concatenated."""
        assert xml_lang(service) == "en"
        assert service.get(XML_LANG) == "en"
        assert safe_get_text(first_child(service, "ProviderName")) == "Provider Ltd"
        assert safe_get_text(None, "none") == "none"
