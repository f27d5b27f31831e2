"""
Vocabulary Lookups
==================

Membership checks of document values against the reference data stores.

A store that was never loaded, or whose load failed, cannot confirm any
value. Such values are not accepted silently: each one gets a WARNING with
the category key ``reference data unavailable``, under the code of the
check that asked, and is not reported as unknown.
"""

from typing import Any, Dict, Optional

from dvbi_core.reference.countries import ISOCountries
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.xml.utils import quote

K_REFERENCE_UNAVAILABLE = "reference data unavailable"


def unverified_value(value: str, vocabulary: str, code: str, fragment: Any = None,
                     line: Optional[int] = None) -> Dict[str, Any]:
    """A value could not be checked because its vocabulary is not loaded."""
    return {
        "type": Severity.WARNING,
        "code": code,
        "message": f"{quote(value)} cannot be checked, no {vocabulary} reference data is loaded",
        "key": K_REFERENCE_UNAVAILABLE,
        "fragment": fragment,
        "line": line,
    }


def not_in_store(store: Any, value: Optional[str], errs: ErrorList, code: str, vocabulary: str,
                 fragment: Any = None, line: Optional[int] = None) -> bool:
    """
    Look up a value in a reference store.

    Args:
        store: Any store with ``is_empty`` and ``is_in``
        value: Value from the document, skipped when empty
        errs: Finding collector for the unavailable-data warning
        code: Code of the calling check
        vocabulary: Name of the vocabulary used in the warning
        fragment: Element the value was read from
        line: Source line when no element is given

    Returns:
        True only when the store is loaded and does not hold the value
    """
    if not value:
        return False
    if store.is_empty():
        errs.add_error(**unverified_value(value, vocabulary, code, fragment, line))
        return False
    return not store.is_in(value)


def unknown_country(countries: ISOCountries, value: Optional[str], errs: ErrorList, code: str,
                    fragment: Any = None, line: Optional[int] = None, case_sensitive: bool = False) -> bool:
    """True only when the country list is loaded and does not hold the code."""
    if countries.is_empty():
        errs.add_error(**unverified_value(value, "country", code, fragment, line))
        return False
    return not countries.is_iso3166_code(value, case_sensitive=case_sensitive)
