"""
XML Utility Functions
=====================

Namespace-agnostic navigation helpers for lxml trees.

DVB-I documents mix the service discovery, TV-Anytime and MPEG-7
namespaces, and the checks address elements and attributes by local name
regardless of prefix. These helpers give consistent handling of that.
"""

from typing import Any, Iterator, List, Optional
import logging

from lxml import etree

from dvbi_core.definitions import XML_NAMESPACE

logger = logging.getLogger(__name__)

XML_LANG = f"{{{XML_NAMESPACE}}}lang"


def local_name(element: Any) -> str:
    """
    Extract local name from element tag, stripping any namespace prefix.

    Args:
        element: XML element

    Returns:
        Local tag name without namespace, or "" for comments and PIs

    Example:
        >>> elem = etree.Element("{urn:dvb:metadata:servicediscovery:2024}Service")
        >>> local_name(elem)
        'Service'
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def namespace_of(element: Any) -> Optional[str]:
    """Namespace URI of an element, or None when it has none."""
    if element is None or not isinstance(element.tag, str):
        return None
    return etree.QName(element).namespace


def child_elements(element: Any) -> Iterator[Any]:
    """Iterate element children, skipping comments and processing instructions."""
    if element is None:
        return
    for child in element:
        if isinstance(child.tag, str):
            yield child


def children(element: Any, name: str) -> List[Any]:
    """All direct children with the given local name, in any namespace."""
    return [child for child in child_elements(element) if local_name(child) == name]


def first_child(element: Any, name: str) -> Optional[Any]:
    """First direct child with the given local name, or None."""
    for child in child_elements(element):
        if local_name(child) == name:
            return child
    return None


def has_child(element: Any, name: str) -> bool:
    return first_child(element, name) is not None


def attr(element: Any, name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Look up an attribute by local name in any namespace.

    An unqualified attribute is preferred over a namespaced one with the
    same local name.
    """
    if element is None:
        return default
    value = element.get(name)
    if value is not None:
        return value
    for key, value in element.attrib.items():
        if key.startswith("{") and key.split("}", 1)[1] == name:
            return value
    return default


def has_attr(element: Any, name: str) -> bool:
    return attr(element, name) is not None


def attribute_names(element: Any) -> List[str]:
    """Local names of all attributes on an element."""
    names = []
    for key in element.attrib.keys():
        names.append(key.split("}", 1)[1] if key.startswith("{") else key)
    return names


def xml_lang(element: Any) -> Optional[str]:
    """Value of an explicit xml:lang on this element only."""
    if element is None:
        return None
    return element.get(XML_LANG)


def safe_get_text(element: Any, default: str = "") -> str:
    """
    Get all text content from an element.

    Args:
        element: XML element
        default: Default value if there is no element or no text

    Returns:
        Concatenated text content, not stripped
    """
    if element is None:
        return default
    text = "".join(element.itertext())
    return text if text else default


def elementize(name: str) -> str:
    """Format an element name for messages: '<Name>'."""
    return f"<{name}>"


def attribute(name: str, element_name: str = "") -> str:
    """Format an attribute name for messages: 'Element@name'."""
    return f"{element_name}@{name}"


def quote(value: Any) -> str:
    return f'"{value}"'
