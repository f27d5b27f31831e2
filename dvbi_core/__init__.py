"""
DVB-I Validator Core Library
============================

A reusable library for checking DVB-I metadata documents that provides:

- Service List validation (ETSI TS 103 770 clause 5)
- Content Guide response validation (ETSI TS 103 770 clause 6)
- Service List Registry query filtering
- Reference data loading (classification schemes, languages, countries)
- XML Schema validation across the published schema versions

Architecture
------------

The library is organized into independent, composable modules:

    dvbi_core/
    ├── config/        - Configuration management
    ├── reference/     - Controlled vocabularies and their loaders
    ├── validation/    - Findings, structural checks, SL and CG validators
    ├── xml/           - Namespace-agnostic XML utilities
    ├── definitions.py - Namespaces, URNs and term identifiers
    ├── patterns.py    - Value syntax checks (URIs, CRIDs, languages)
    ├── versions.py    - Schema versions and the XSD registry
    └── registry.py    - Service List Registry queries

Usage
-----

Load the reference data once, then validate as many documents as needed:

    from dvbi_core import load_config, load_reference_stores
    from dvbi_core.validation import ServiceListCheck, ContentGuideCheck
    from dvbi_core.versions import SchemaRegistry

    config = load_config("validator.yaml")
    stores = load_reference_stores(config.reference)
    schemas = SchemaRegistry.load(config.schemas)

    sl_checker = ServiceListCheck(stores, schemas)
    errs = sl_checker.validate_service_list(xml_text)
    print(errs.summary())

    cg_checker = ContentGuideCheck(stores, schemas)
    errs = cg_checker.validate_content_guide(xml_text, "NowNext")

Extensibility
-------------

The validators share one findings collector and one set of structural
helpers, allowing you to:

- Add vocabularies through the configuration file
- Register new schema versions in ``versions.py``
- Check vendor extensions with ``validation.extensions``
- Reuse ``ErrorList.to_dict()`` for custom reports

"""

__version__ = "1.0.0"
__author__ = "DVB-I Validator Team"

# Import key classes for convenience
from dvbi_core.config.settings import (
    ValidatorConfig,
    load_config,
    get_default_config,
    configure_logging,
)

from dvbi_core.reference.loaders import (
    ReferenceStores,
    load_reference_stores,
)

from dvbi_core.validation.base import (
    ErrorList,
    Finding,
    Severity,
)

from dvbi_core.validation.sl_check import ServiceListCheck

from dvbi_core.validation.cg_check import (
    CGRequestType,
    ContentGuideCheck,
)

from dvbi_core.registry import (
    RegistryQuery,
    ServiceListRegistry,
    parse_user_agent,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "ValidatorConfig",
    "load_config",
    "get_default_config",
    "configure_logging",
    # Reference data
    "ReferenceStores",
    "load_reference_stores",
    # Findings
    "ErrorList",
    "Finding",
    "Severity",
    # Validators
    "ServiceListCheck",
    "CGRequestType",
    "ContentGuideCheck",
    # Registry
    "RegistryQuery",
    "ServiceListRegistry",
    "parse_user_agent",
]
