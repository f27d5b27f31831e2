"""
Reference Data
==============

Controlled vocabularies, language, country and content protection
registries used by the validators, and their loaders.
"""

from dvbi_core.reference.classification_scheme import (
    ClassificationScheme,
    parse_classification_scheme,
    CS_URI_DELIMITER,
)
from dvbi_core.reference.languages import (
    IANALanguages,
    LanguageLookup,
    LanguageState,
)
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.reference.roles import RoleList
from dvbi_core.reference.identifiers import (
    ContentProtectionRegistry,
    CASystemRange,
    parse_ca_system_id,
    CA_SYSTEM_ID_REGISTRY,
    DRM_SYSTEM_ID_REGISTRY,
)
from dvbi_core.reference.loaders import (
    ReferenceStores,
    load_reference_stores,
    load_reference_stores_async,
)

__all__ = [
    # Stores
    "ClassificationScheme",
    "IANALanguages",
    "ISOCountries",
    "RoleList",
    "ContentProtectionRegistry",
    # Lookup results and helpers
    "LanguageLookup",
    "LanguageState",
    "CASystemRange",
    "parse_classification_scheme",
    "parse_ca_system_id",
    "CS_URI_DELIMITER",
    "CA_SYSTEM_ID_REGISTRY",
    "DRM_SYSTEM_ID_REGISTRY",
    # Loading
    "ReferenceStores",
    "load_reference_stores",
    "load_reference_stores_async",
]
