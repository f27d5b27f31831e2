"""
Validation Framework
====================

Business rule validation of DVB-I documents, on top of XSD validation.

Components:
- ErrorList: Collector for findings, with counts and JSON summaries
- ServiceListCheck: Service List validation (ETSI TS 103 770 clause 5)
- ContentGuideCheck: Content Guide response validation (clause 6)
- schema_checks: Attribute and child element cardinality checks
"""

from dvbi_core.validation.base import (
    ErrorList,
    Finding,
    MarkupLine,
    Severity,
    ValidationContext,
    APPLICATION_ERROR_KEY,
)

from dvbi_core.validation.schema_checks import (
    ElementSpec,
    UNBOUNDED,
    check_attributes,
    check_top_elements_and_cardinality,
    schema_load,
    schema_check,
    schema_version_check,
)

from dvbi_core.validation.sl_check import (
    ServiceListCheck,
    ServiceListState,
)

from dvbi_core.validation.cg_check import (
    CGRequestType,
    ContentGuideCheck,
    ContentGuideState,
    SUPPORTED_REQUESTS,
)

__all__ = [
    # Findings
    "ErrorList",
    "Finding",
    "MarkupLine",
    "Severity",
    "ValidationContext",
    "APPLICATION_ERROR_KEY",
    # Structural checks
    "ElementSpec",
    "UNBOUNDED",
    "check_attributes",
    "check_top_elements_and_cardinality",
    "schema_load",
    "schema_check",
    "schema_version_check",
    # Service lists
    "ServiceListCheck",
    "ServiceListState",
    # Content guide
    "CGRequestType",
    "ContentGuideCheck",
    "ContentGuideState",
    "SUPPORTED_REQUESTS",
]
