"""
XML Processing Utilities
========================

Namespace-agnostic lxml navigation and message formatting helpers used by
the validation checks and the registry filter.
"""

from dvbi_core.xml.utils import (
    local_name,
    namespace_of,
    child_elements,
    children,
    first_child,
    has_child,
    attr,
    has_attr,
    attribute_names,
    xml_lang,
    safe_get_text,
    elementize,
    attribute,
    quote,
    XML_LANG,
)

__all__ = [
    # Navigation
    "local_name",
    "namespace_of",
    "child_elements",
    "children",
    "first_child",
    "has_child",
    # Attributes and text
    "attr",
    "has_attr",
    "attribute_names",
    "xml_lang",
    "safe_get_text",
    "XML_LANG",
    # Message formatting
    "elementize",
    "attribute",
    "quote",
]
