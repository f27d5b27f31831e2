"""
Finding Categories and Templates
================================

Shared category keys and message templates for findings that several
checks report in the same way.

Templates return keyword arguments for ``ErrorList.add_error``:

    errs.add_error(**invalid_url(value, element, "MediaUri", "SA004"))
"""

from typing import Any, Dict, Optional

from dvbi_core.validation.base import Severity
from dvbi_core.xml.utils import attribute, elementize, local_name, quote

# category keys
K_INVALID_HREF = "invalid href"
K_INVALID_VALUE = "invalid value"
K_INVALID_TAG = "invalid tag"
K_INVALID_IDENTIFIER = "invalid identifier"
K_LENGTH_ERROR = "length error"
K_DUPLICATED_SYNOPSIS_LENGTH = "duplicated synopsis length"
K_DUPLICATE_VALUE = "duplicated value"
K_MISSING_SYNOPSIS_LENGTH = "missing synopsis length"
K_INVALID_KEYWORD_TYPE = "invalid keyword type"
K_PARENTAL_GUIDANCE = "parental guidance"
K_INVALID_ELEMENT = "invalid element"
K_MISSING_ELEMENT = "missing element"
K_INVALID_URL = "invalid URL"
K_UNSPECIFIED_LANGUAGE = "unspecified language"
K_INVALID_LANGUAGE = "invalid language"
K_INVALID_REGION = "invalid region"
K_INVALID_COUNTRY_CODE = "invalid country code"
K_XSD_VALIDATION = "XSD validation"
K_MALFORMED_XML = "malformed XML"
K_DEPRECATED_ELEMENT = "deprecated element"
K_DEPRECATED_ATTRIBUTE = "deprecated attribute"


def _parent_name(element: Any) -> str:
    parent = element.getparent() if element is not None else None
    return local_name(parent) if parent is not None else ""


def no_child_element(missing: str, parent: Any, location: Optional[str], code: str) -> Dict[str, Any]:
    """A required child element is not present."""
    where = f" in {location}" if location else ""
    return {
        "code": code,
        "message": f"{missing} element not specified for {elementize(local_name(parent))}{where}",
        "line": parent.sourceline,
        "key": K_MISSING_ELEMENT,
    }


def cg_invalid_href_value(value: str, element: Any, location: str, code: str) -> Dict[str, Any]:
    return {
        "code": code,
        "message": f"invalid {attribute('href')}={quote(value)} specified for "
                   f"{elementize(local_name(element))} in {location}",
        "fragment": element,
        "key": K_INVALID_HREF,
    }


def sl_invalid_href_value(value: str, element: Any, source: str, location: str, code: str) -> Dict[str, Any]:
    return {
        "code": code,
        "message": f"invalid {attribute('href')}={quote(value)} specified for {source} in {location}",
        "fragment": element,
        "key": K_INVALID_HREF,
    }


def invalid_url(value: str, element: Any, source: str, code: str) -> Dict[str, Any]:
    return {
        "code": code,
        "message": f'invalid URL "{value}" specified for {elementize(source)}',
        "fragment": element,
        "key": K_INVALID_URL,
    }


def invalid_country_code(value: str, source: Optional[str], location: str) -> str:
    """Message text for an unrecognised ISO 3166 code."""
    src = f" for {source} parameters" if source else ""
    return f"invalid country code {quote(value)}{src} in {location}"


def deprecated_element(element: Any, since: str, code: str) -> Dict[str, Any]:
    return {
        "type": Severity.WARNING,
        "code": code,
        "message": f"{elementize(local_name(element))} in {elementize(_parent_name(element))} "
                   f"is deprecated in {since}",
        "fragment": element,
        "key": K_DEPRECATED_ELEMENT,
    }


def deprecated_attribute(element: Any, attribute_name: str, since: str, code: str) -> Dict[str, Any]:
    return {
        "type": Severity.WARNING,
        "code": code,
        "message": f"{attribute(attribute_name, local_name(element))} is deprecated in {since}",
        "fragment": element,
        "key": K_DEPRECATED_ATTRIBUTE,
    }


def application_error(code: str, function_name: str, argument: str) -> Dict[str, Any]:
    """A check was called without a required argument."""
    return {
        "type": Severity.APPLICATION,
        "code": code,
        "message": f"{function_name}() called with {argument}==None",
        "key": "invalid args",
    }
