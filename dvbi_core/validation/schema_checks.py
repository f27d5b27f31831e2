"""
Schema-Shaped Checks
====================

Document loading, XSD validation and the generic attribute and child
element checks used throughout the Service List and Content Guide walkers.

Child element expectations are described with ElementSpec records. A spec
can carry a version range so that one list covers every schema revision:

    specs = [
        ElementSpec("UniqueIdentifier"),
        ElementSpec("ServiceInstance", min_occurs=0, max_occurs=UNBOUNDED),
        ElementSpec("AltServiceName", 0, UNBOUNDED, min_version=SCHEMA_R3),
    ]
    check_top_elements_and_cardinality(service, for_version(specs, 5), [], False, errs, "SL105")
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Union
import logging

from lxml import etree

from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.errors import K_MALFORMED_XML, K_MISSING_ELEMENT, K_XSD_VALIDATION
from dvbi_core.versions import SchemaStatus
from dvbi_core.xml.utils import attribute, attribute_names, child_elements, children, elementize, local_name

logger = logging.getLogger(__name__)

UNBOUNDED = math.inf


@dataclass(frozen=True)
class ElementSpec:
    """Expected occurrence of a child element."""
    name: str
    min_occurs: int = 1
    max_occurs: float = 1
    min_version: Optional[int] = None
    max_version: Optional[int] = None

    def applies_to(self, version: int) -> bool:
        if self.min_version is not None and version < self.min_version:
            return False
        if self.max_version is not None and version > self.max_version:
            return False
        return True


def for_version(specs: Iterable[ElementSpec], version: int) -> List[ElementSpec]:
    """The specs that apply to a schema version."""
    return [spec for spec in specs if spec.applies_to(version)]


def _qualified_name(element: Any) -> str:
    parent = element.getparent()
    return f"{local_name(parent)}.{local_name(element)}" if parent is not None else local_name(element)


def check_attributes(element: Any,
                     required: Sequence[str],
                     optional: Sequence[str],
                     defined: Sequence[str],
                     errs: ErrorList,
                     code: str) -> None:
    """
    Check the attributes of an element.

    Args:
        element: Element to check
        required: Attributes that must be present
        optional: Attributes that may be present
        defined: All attributes defined by the schema, including those profiled out
        errs: Finding collector
        code: Code prefix for findings
    """
    if element is None or required is None:
        errs.add_error(
            type=Severity.APPLICATION, code="AT000",
            message="check_attributes() called with element==None or required==None",
        )
        return
    qualified = _qualified_name(element)
    present = attribute_names(element)

    for name in required:
        if name not in present:
            errs.add_error(
                code=f"{code}-1",
                message=f"{attribute(name, qualified)} is a required attribute",
                key="missing attribute",
                line=element.sourceline,
            )

    for name in present:
        if name not in required and name not in optional and name not in defined:
            errs.add_error(
                code=f"{code}-2",
                message=f"{attribute(name)} is not permitted in {qualified}",
                key="unexpected attribute",
                line=element.sourceline,
            )

    for name in defined:
        if name not in required and name not in optional and name in present:
            errs.add_error(
                type=Severity.INFORMATION,
                code=f"{code}-3",
                message=f"{attribute(name)} is profiled out of {elementize(local_name(element))}",
                key="profiled out",
                line=element.sourceline,
            )


def check_top_elements_and_cardinality(parent: Any,
                                       specs: Sequence[ElementSpec],
                                       defined: Sequence[str],
                                       allow_other: bool,
                                       errs: ErrorList,
                                       code: str) -> bool:
    """
    Check which child elements are present and how often.

    Args:
        parent: Element whose children are checked
        specs: Expected children with their cardinality
        defined: All child elements the schema defines, including those profiled out
        allow_other: True if children not in specs are acceptable
        errs: Finding collector
        code: Code prefix for findings

    Returns:
        True if no mandatory element is missing and no cardinality is violated
    """
    if parent is None:
        errs.add_error(
            type=Severity.APPLICATION, code="TE000",
            message="check_top_elements_and_cardinality() called with a None element to check",
        )
        return False

    ok = True
    this_element = elementize(_qualified_name(parent))
    expected = {spec.name for spec in specs}

    for spec in specs:
        found = children(parent, spec.name)
        count = len(found)
        if count == 0 and spec.min_occurs != 0:
            errs.add_error(
                code=f"{code}-1",
                message=f"Mandatory element {elementize(spec.name)} not specified in {this_element}",
                key=K_MISSING_ELEMENT,
                line=parent.sourceline,
            )
            ok = False
        elif count < spec.min_occurs or count > spec.max_occurs:
            upper = "unbounded" if spec.max_occurs == UNBOUNDED else int(spec.max_occurs)
            for child in found:
                errs.add_error(
                    code=f"{code}-2",
                    message=f"Cardinality of {elementize(spec.name)} in {this_element} "
                            f"is not in the range {spec.min_occurs}..{upper}",
                    key="wrong element count",
                    line=child.sourceline,
                )
            ok = False

    excluded = [name for name in defined if name not in expected]
    for child in child_elements(parent):
        name = local_name(child)
        if name in expected:
            continue
        if name in excluded:
            errs.add_error(
                type=Severity.INFORMATION,
                code=f"{code}-10",
                message=f"Element {elementize(name)} in {this_element} is not included in DVB-I",
                key="profiled out",
                line=child.sourceline,
            )
        elif not allow_other:
            errs.add_error(
                code=f"{code}-11",
                message=f"Element {elementize(name)} is not permitted in {this_element}",
                key="element not allowed",
                line=child.sourceline,
            )
            ok = False
    return ok


def schema_load(text: Union[str, bytes, None], errs: ErrorList, code: str) -> Optional[Any]:
    """
    Parse document text.

    The text is loaded into the ErrorList for line annotation. A document
    that cannot be parsed yields exactly one FATAL finding.

    Returns:
        The root element, or None if the document is empty or malformed
    """
    if isinstance(text, str):
        data = text.encode("utf-8")
    else:
        data = text or b""
    errs.load_document(data)

    if not data.strip():
        errs.add_error(
            type=Severity.FATAL, code=f"{code}-12", message="XML document is empty", key=K_MALFORMED_XML,
        )
        return None

    parser = etree.XMLParser(remove_comments=False, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        errs.add_error(
            type=Severity.FATAL,
            code=f"{code}-1",
            message=f"Raw XML parsing failed: {e.msg}",
            line=e.lineno,
            key=K_MALFORMED_XML,
        )
        return None

    if root is None:
        errs.add_error(
            type=Severity.FATAL, code=f"{code}-12", message="XML document is empty", key=K_MALFORMED_XML,
        )
        return None
    return root


def schema_check(root: Any, schema: Optional[etree.XMLSchema], filename: Optional[str],
                 errs: ErrorList, code: str) -> bool:
    """
    Validate a document against a compiled XSD.

    Structural diagnostics from the schema error log are added as findings
    with the 'XSD validation' key.

    Returns:
        True if the document is schema valid or no schema is available
    """
    if schema is None:
        errs.add_error(
            type=Severity.DEBUG, code="LS001", message=f'validator not loaded. XSD filename="{filename}"',
        )
        return True

    if schema.validate(root.getroottree()):
        return True

    for entry in schema.error_log:
        errs.add_error(
            code=code,
            message=entry.message,
            line=entry.line,
            key=K_XSD_VALIDATION,
        )
    logger.debug(f"Schema validation against {filename} reported {len(schema.error_log)} error(s)")
    return False


def schema_version_check(root: Any, status: SchemaStatus, errs: ErrorList, code: str) -> None:
    """Report a schema that is out of date or still in draft."""
    line = root.sourceline if root is not None else None
    if status in (SchemaStatus.OLD, SchemaStatus.DEPRECATED):
        errs.add_error(code=f"{code}a", message="schema version is out of date", key="schema version", line=line)
    if status == SchemaStatus.DRAFT:
        errs.add_error(
            type=Severity.WARNING, code=f"{code}b", message="schema is in draft state",
            key="schema version", line=line,
        )
