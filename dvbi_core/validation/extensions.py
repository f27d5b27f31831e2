"""
Extension Elements
==================

Checks that a known ``Extension@extensionName`` is only used where it is
permitted.
"""

from enum import Enum
from typing import Any

from dvbi_core.definitions import EXTENSION_DVB_HB, EXTENSION_HBBTV_TRIPLET, EXTENSION_HLS
from dvbi_core.patterns import is_extension_name
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.xml.utils import attr, quote

K_EXTENSIBILITY = "extensibility"


class ExtensionLocation(str, Enum):
    """Places where an extension element may appear."""

    SERVICE_LIST_REGISTRY = "service list registry"
    SERVICE_ELEMENT = "service"
    DASH_INSTANCE = "dash instance"
    OTHER_DELIVERY = "other delivery"

    @property
    def label(self) -> str:
        return self.value.title()


# extension name -> (permitted location, description used in messages, code suffix)
KNOWN_EXTENSIONS = {
    EXTENSION_DVB_HB: (ExtensionLocation.SERVICE_LIST_REGISTRY, "DVB-HB", "Service List Registry", 1),
    EXTENSION_HBBTV_TRIPLET: (ExtensionLocation.SERVICE_ELEMENT, "HbbTV", "Service List", 2),
    EXTENSION_HLS: (ExtensionLocation.OTHER_DELIVERY, "HLS", "Service List", 3),
}


def check_extension(extension: Any, location: ExtensionLocation, errs: ErrorList, code: str) -> None:
    """
    Check an extension element against where it was found.

    Args:
        extension: An element carrying @extensionName
        location: Where the element was found
        errs: Finding collector
        code: Code prefix for findings
    """
    if extension is None:
        errs.add_error(type=Severity.APPLICATION, code="CE000", message="check_extension() called with extension==None")
        return

    name = attr(extension, "extensionName")
    if name is None:
        return
    if not is_extension_name(name):
        errs.add_error(
            code=f"{code}-10",
            message=f"@extensionName {quote(name)} is not a valid extension name",
            fragment=extension,
            key=K_EXTENSIBILITY,
        )
        return

    known = KNOWN_EXTENSIONS.get(name)
    if known is None:
        errs.add_error(
            type=Severity.WARNING,
            code=f"{code}-100",
            message=f"extension {quote(name)} is not known to this tool",
            fragment=extension,
            key="unknown extension",
        )
        return

    permitted, what, where, number = known
    if location != permitted:
        errs.add_error(
            code=f"{code}-{number}",
            message=f"{what} extension only permitted in {where}",
            fragment=extension,
            key=K_EXTENSIBILITY,
        )
