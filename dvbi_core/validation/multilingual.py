"""
Multilingual Elements
=====================

Checks for elements that may be repeated once per language, such as
``<ServiceName>`` or ``<Title>``, and for ``xml:lang`` values in general.

The effective language of an element is its own ``xml:lang`` or the nearest
one declared on an ancestor. When no ancestor declares a language the
NO_DOCUMENT_LANGUAGE sentinel stands in, and it takes part in duplicate
detection like any other language.
"""

from typing import Any, Optional

from dvbi_core.patterns import is_valid_bcp47
from dvbi_core.reference.languages import IANALanguages, LanguageState
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.errors import K_INVALID_LANGUAGE, K_UNSPECIFIED_LANGUAGE
from dvbi_core.validation.vocabulary import K_REFERENCE_UNAVAILABLE
from dvbi_core.xml.utils import children, elementize, local_name, quote, safe_get_text, xml_lang

NO_DOCUMENT_LANGUAGE = "**"

MULTILINGUAL_CLAUSE = "A177 clause 5.2.10"


def ml_language(node: Any) -> str:
    """The effective xml:lang of an element, or NO_DOCUMENT_LANGUAGE."""
    while node is not None:
        if isinstance(node.tag, str):
            lang = xml_lang(node)
            if lang is not None:
                return lang
        node = node.getparent()
    return NO_DOCUMENT_LANGUAGE


def validate_language(lang: Optional[str],
                      errs: ErrorList,
                      location: str,
                      code: str,
                      languages: Optional[IANALanguages],
                      line: Optional[int] = None,
                      fragment: Any = None) -> bool:
    """
    Check a language tag against the language store.

    Unknown, invalid and unspecified languages are errors and a deprecated
    language is a warning. With no store, or an empty one, no language can be
    confirmed: every value gets a reference-data-unavailable warning.

    Args:
        lang: Language tag to check
        errs: Finding collector
        location: Description of where the language was found
        code: Code prefix for findings
        languages: Language store
        line: Source line when no fragment is given
        fragment: Element the language was found on

    Returns:
        True if the language is known
    """
    if languages is None or languages.is_empty():
        errs.add_error(
            type=Severity.WARNING,
            code=f"{code}-0",
            message=f"{location} xml:lang value {quote(lang)} cannot be checked, no language registry is loaded",
            key=K_REFERENCE_UNAVAILABLE,
            line=line,
            fragment=fragment,
        )
        return False

    lookup = languages.is_known(lang)
    if lookup.state == LanguageState.KNOWN:
        return True

    if lookup.state == LanguageState.DEPRECATED:
        message = f"{location} xml:lang value {quote(lang)} is deprecated"
        if lookup.preferred:
            message += f" (use {quote(lookup.preferred)} instead)"
        errs.add_error(
            type=Severity.WARNING, code=f"{code}-1", message=message,
            key="deprecated language", line=line, fragment=fragment,
        )
    elif lookup.state == LanguageState.NOT_SPECIFIED:
        errs.add_error(
            code=f"{code}-2", message=f"{location} xml:lang value is not provided",
            key=K_UNSPECIFIED_LANGUAGE, line=line, fragment=fragment,
        )
    elif lookup.state == LanguageState.UNKNOWN:
        errs.add_error(
            code=f"{code}-3", message=f"{location} xml:lang value {quote(lang)} is invalid",
            key=K_INVALID_LANGUAGE, line=line, fragment=fragment,
        )
    else:
        errs.add_error(
            code=f"{code}-4", message=f"{location} xml:lang value {quote(lang)} is not a language tag",
            key=K_INVALID_LANGUAGE, line=line, fragment=fragment,
        )
    return False


def check_language(lang: str,
                   element: Any,
                   errs: ErrorList,
                   code: str,
                   languages: Optional[IANALanguages] = None) -> bool:
    """
    Check the format, and when a store is given the value, of an xml:lang.

    Returns:
        True if the language passes
    """
    if not is_valid_bcp47(lang):
        errs.add_error(
            code=f"{code}-100",
            message=f"xml:lang value {quote(lang)} does not match format for Language-Tag in BCP47",
            fragment=element,
            key="invalid format",
        )
        return False
    if languages is None:
        return True
    return validate_language(lang, errs, elementize(local_name(element)), code, languages, fragment=element)


def get_node_language(node: Any,
                      is_required: bool,
                      errs: ErrorList,
                      code: str,
                      languages: Optional[IANALanguages] = None) -> str:
    """
    Resolve the effective language of an element.

    Args:
        node: Element to resolve
        is_required: Report a finding if the element has no explicit xml:lang
        errs: Finding collector
        code: Code prefix for findings
        languages: Language store used to check an explicit value

    Returns:
        The effective language, or NO_DOCUMENT_LANGUAGE
    """
    if node is None:
        return NO_DOCUMENT_LANGUAGE
    explicit = xml_lang(node)
    if is_required and explicit is None:
        errs.add_error(
            code=f"{code}-1",
            message=f"@xml:lang is required for {quote(local_name(node))}",
            key=K_UNSPECIFIED_LANGUAGE,
            line=node.sourceline,
        )
    local_lang = ml_language(node)
    if explicit is not None and local_lang != NO_DOCUMENT_LANGUAGE:
        check_language(local_lang, node, errs, f"{code}-2", languages)
    return local_lang


def check_xml_langs(element_name: str,
                    element_location: str,
                    node: Any,
                    errs: ErrorList,
                    code: str,
                    languages: Optional[IANALanguages] = None) -> None:
    """
    Check a group of sibling elements that may be repeated per language.

    - With two or more siblings, each must declare xml:lang.
    - Effective languages must be distinct.
    - Each element must have text.
    - Each explicit xml:lang must be a known language.

    Args:
        element_name: Local name of the repeated element
        element_location: Description of the parent for messages
        node: Parent element
        errs: Finding collector
        code: Code prefix for findings
        languages: Language store
    """
    if node is None:
        errs.add_error(type=Severity.APPLICATION, code="XL000", message="check_xml_langs() called with node==None")
        return

    siblings = children(node, element_name)
    if len(siblings) > 1:
        for child in siblings:
            if xml_lang(child) is None:
                errs.add_error(
                    code=f"{code}-1",
                    message=f"xml:lang must be declared for each multilingual element for "
                            f"{elementize(element_name)} in {element_location}",
                    fragment=child,
                    key="required @xml:lang",
                    clause=MULTILINGUAL_CLAUSE,
                    description="If more than one language is provided for an element, "
                                "each such element shall include the @xml:lang attribute.",
                )

    seen = set()
    for child in siblings:
        lang = ml_language(child)
        if lang in seen:
            which = "default language" if lang == NO_DOCUMENT_LANGUAGE else f"xml:lang={quote(lang)}"
            errs.add_error(
                code=f"{code}-2",
                message=f"{which} already specified for {elementize(element_name)} in {element_location}",
                fragment=child,
                key="duplicate @xml:lang",
                clause=MULTILINGUAL_CLAUSE,
                description="Each such element shall only be repeated once per language code.",
            )
        else:
            seen.add(lang)

        if not safe_get_text(child):
            errs.add_error(
                code=f"{code}-3",
                message=f"value must be specified for {elementize(local_name(node))}{elementize(element_name)}",
                fragment=child,
                key="empty value",
            )

        if xml_lang(child) is not None and lang != NO_DOCUMENT_LANGUAGE:
            check_language(lang, child, errs, f"{code}-4", languages)
