"""
Schema Version Resolution
=========================

Maps the namespace of a Service List or Content Guide document onto an
ordinal schema version and carries the version-gated vocabulary tables
used by the rule checks.

Version gating is table driven: each permitted value is recorded against
the schema versions where it is valid, and ``match`` looks a value up for
a specific version or across all versions.

Example:
    >>> from dvbi_core.versions import schema_version, valid_service_logo
    >>> schema_version("urn:dvb:metadata:servicediscovery:2024")
    6
    >>> valid_service_logo("urn:dvb:metadata:cs:HowRelatedCS:2021:1001.2")
    True
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

from lxml import etree

from dvbi_core import definitions as dvbi

logger = logging.getLogger(__name__)


class SchemaStatus(str, Enum):
    """Publication state of a schema revision."""

    CURRENT = "current"
    OLD = "old"
    DRAFT = "draft"
    ETSI = "etsi"
    DEPRECATED = "deprecated"

    @property
    def label(self) -> str:
        """Human-readable description for reports."""
        labels = {
            SchemaStatus.CURRENT: "Current",
            SchemaStatus.OLD: "Out of date",
            SchemaStatus.DRAFT: "Draft",
            SchemaStatus.ETSI: "Published by ETSI",
            SchemaStatus.DEPRECATED: "Deprecated",
        }
        return labels.get(self, self.value)


SCHEMA_R0 = 0
SCHEMA_R1 = 1
SCHEMA_R2 = 2
SCHEMA_R3 = 3
SCHEMA_R4 = 4
SCHEMA_R5 = 5
SCHEMA_R6 = 6
SCHEMA_R7 = 7
SCHEMA_UNKNOWN = -1

ANY_VERSION = -99


@dataclass(frozen=True)
class SchemaVersionDescriptor:
    """Immutable description of one schema revision."""

    namespace: str
    version: int
    status: SchemaStatus
    spec_version: str
    filename: str
    urn: Optional[str] = None


@dataclass(frozen=True)
class VersionedValue:
    """A vocabulary value permitted for one schema version."""

    version: int
    value: str


SL_SCHEMA_VERSIONS: Tuple[SchemaVersionDescriptor, ...] = (
    SchemaVersionDescriptor(
        dvbi.A177R7_NAMESPACE, SCHEMA_R7, SchemaStatus.DRAFT, "A177r7",
        "dvbi_v7.0-with-hls-hbbtv.xsd", f"{dvbi.STANDARD_VERSION_PREFIX}:7",
    ),
    SchemaVersionDescriptor(
        dvbi.A177R6_NAMESPACE, SCHEMA_R6, SchemaStatus.CURRENT, "A177r6",
        "dvbi_v6.0-with-hls-hbbtv.xsd", f"{dvbi.STANDARD_VERSION_PREFIX}:6",
    ),
    SchemaVersionDescriptor(
        dvbi.A177R5_NAMESPACE, SCHEMA_R5, SchemaStatus.OLD, "A177r5", "dvbi_v5.0-with-hls-hbbtv.xsd",
    ),
    SchemaVersionDescriptor(
        dvbi.A177R4_NAMESPACE, SCHEMA_R4, SchemaStatus.OLD, "A177r4", "dvbi_v4.0-with-hls-hbbtv.xsd",
    ),
    SchemaVersionDescriptor(dvbi.A177R3_NAMESPACE, SCHEMA_R3, SchemaStatus.OLD, "A177r3", "dvbi_v3.1.xsd"),
    SchemaVersionDescriptor(dvbi.A177R2_NAMESPACE, SCHEMA_R2, SchemaStatus.OLD, "A177r2", "dvbi_v3.0.xsd"),
    SchemaVersionDescriptor(dvbi.A177R1_NAMESPACE, SCHEMA_R1, SchemaStatus.ETSI, "A177r1", "dvbi_v2.0.xsd"),
    SchemaVersionDescriptor(dvbi.A177_NAMESPACE, SCHEMA_R0, SchemaStatus.OLD, "A177", "dvbi_v1.0.xsd"),
)

CG_SCHEMA_VERSIONS: Tuple[SchemaVersionDescriptor, ...] = (
    SchemaVersionDescriptor(
        dvbi.TVA_2024_NAMESPACE, SCHEMA_R2, SchemaStatus.CURRENT, "A177r6", "tva_metadata_3-1_2024.xsd",
    ),
    SchemaVersionDescriptor(
        dvbi.TVA_2023_NAMESPACE, SCHEMA_R1, SchemaStatus.OLD, "A177r5", "tva_metadata_3-1_2023.xsd",
    ),
    SchemaVersionDescriptor(
        dvbi.TVA_2019_NAMESPACE, SCHEMA_R0, SchemaStatus.OLD, "A177", "tva_metadata_3-1.xsd",
    ),
)


def get_descriptor(
    namespace: Optional[str],
    table: Sequence[SchemaVersionDescriptor] = SL_SCHEMA_VERSIONS,
) -> Optional[SchemaVersionDescriptor]:
    """Find the descriptor whose namespace matches exactly."""
    if not namespace:
        return None
    for descriptor in table:
        if descriptor.namespace == namespace:
            return descriptor
    return None


def schema_version(
    namespace: Optional[str],
    table: Sequence[SchemaVersionDescriptor] = SL_SCHEMA_VERSIONS,
) -> int:
    """
    Determine the ordinal schema version for a namespace.

    Args:
        namespace: Namespace URI of the document root
        table: Version table to search

    Returns:
        The version ordinal, or SCHEMA_UNKNOWN
    """
    descriptor = get_descriptor(namespace, table)
    return descriptor.version if descriptor else SCHEMA_UNKNOWN


def spec_version(version, table: Sequence[SchemaVersionDescriptor] = SL_SCHEMA_VERSIONS) -> str:
    """
    Name of the A177 revision for a schema, e.g. 'A177r5'.

    Args:
        version: A namespace URI or a version ordinal
        table: Version table to search
    """
    for descriptor in table:
        if descriptor.namespace == version or descriptor.version == version:
            return descriptor.spec_version
    return "r?"


def is_a177_specification_urn(urn: Optional[str]) -> bool:
    """True when the URN identifies a published A177 specification version."""
    if not urn:
        return False
    return any(descriptor.urn == urn for descriptor in SL_SCHEMA_VERSIONS if descriptor.urn)


def _spread(value: str, versions: Iterable[int]) -> Tuple[VersionedValue, ...]:
    return tuple(VersionedValue(version, value) for version in versions)


_R0 = (SCHEMA_R0,)
_R1_R2 = (SCHEMA_R1, SCHEMA_R2)
_R2_R7 = (SCHEMA_R2, SCHEMA_R3, SCHEMA_R4, SCHEMA_R5, SCHEMA_R6, SCHEMA_R7)
_R3_R7 = (SCHEMA_R3, SCHEMA_R4, SCHEMA_R5, SCHEMA_R6, SCHEMA_R7)

OUT_OF_SCHEDULE_HOURS_BANNERS = (
    _spread(dvbi.BANNER_OUTSIDE_AVAILABILITY_V3, _R3_R7)
    + _spread(dvbi.BANNER_OUTSIDE_AVAILABILITY_V2, _R1_R2)
    + _spread(dvbi.BANNER_OUTSIDE_AVAILABILITY_V1, _R0)
)
CONTENT_FINISHED_BANNERS = (
    _spread(dvbi.BANNER_CONTENT_FINISHED_V3, _R3_R7)
    + _spread(dvbi.BANNER_CONTENT_FINISHED_V2, _R1_R2)
)
SERVICE_LIST_LOGOS = (
    _spread(dvbi.LOGO_SERVICE_LIST_V3, _R3_R7)
    + _spread(dvbi.LOGO_SERVICE_LIST_V2, _R1_R2)
    + _spread(dvbi.LOGO_SERVICE_LIST_V1, _R0)
)
SERVICE_LOGOS = (
    _spread(dvbi.LOGO_SERVICE_V3, _R3_R7)
    + _spread(dvbi.LOGO_SERVICE_V2, _R1_R2)
    + _spread(dvbi.LOGO_SERVICE_V1, _R0)
)
SERVICE_BANNERS = _spread(dvbi.SERVICE_BANNER_V4, _R2_R7)
CONTENT_GUIDE_SOURCE_LOGOS = (
    _spread(dvbi.LOGO_CG_PROVIDER_V3, _R3_R7)
    + _spread(dvbi.LOGO_CG_PROVIDER_V2, _R1_R2)
    + _spread(dvbi.LOGO_CG_PROVIDER_V1, _R0)
)

# applications: value -> minimum schema version where it is signalled
SERVICE_CONTROL_APPLICATIONS: Dict[str, int] = {
    dvbi.APP_IN_PARALLEL: SCHEMA_R0,
    dvbi.APP_IN_CONTROL: SCHEMA_R0,
    dvbi.APP_SERVICE_PROVIDER: SCHEMA_R6,
    dvbi.APP_IN_SERIES: SCHEMA_R7,
}
SERVICE_INSTANCE_CONTROL_APPLICATIONS: Dict[str, int] = {
    dvbi.APP_IN_PARALLEL: SCHEMA_R0,
    dvbi.APP_IN_CONTROL: SCHEMA_R0,
    dvbi.APP_IN_SERIES: SCHEMA_R7,
}
AGREEMENT_APPLICATIONS: Dict[str, int] = {
    dvbi.APP_LIST_INSTALLATION: SCHEMA_R7,
    dvbi.APP_WITHDRAW_AGREEMENT: SCHEMA_R7,
    dvbi.APP_RENEW_AGREEMENT: SCHEMA_R7,
}


def match(permitted: Sequence[VersionedValue], value: Optional[str], version: int = ANY_VERSION) -> bool:
    """
    Look a value up in a version-gated table.

    With ANY_VERSION the value matches if any entry carries it; otherwise
    the entry recorded for the given version must carry it.
    """
    if not permitted or not value:
        return False
    if version == ANY_VERSION:
        return any(entry.value == value for entry in permitted)
    return any(entry.version == version and entry.value == value for entry in permitted)


def _gated(table: Dict[str, int], value: Optional[str], version: int) -> bool:
    if not value or value not in table:
        return False
    return version >= table[value]


def valid_out_schedule_hours(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(OUT_OF_SCHEDULE_HOURS_BANNERS, href, version)


def valid_content_finished_banner(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(CONTENT_FINISHED_BANNERS, href, version)


def valid_service_list_logo(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(SERVICE_LIST_LOGOS, href, version)


def valid_service_logo(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(SERVICE_LOGOS, href, version)


def valid_service_banner(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(SERVICE_BANNERS, href, version)


def valid_content_guide_source_logo(href: Optional[str], version: int = ANY_VERSION) -> bool:
    return match(CONTENT_GUIDE_SOURCE_LOGOS, href, version)


def is_content_finished_banner(href: Optional[str]) -> bool:
    """True for any content-finished banner value regardless of version."""
    return match(CONTENT_FINISHED_BANNERS, href)


def is_out_schedule_hours(href: Optional[str]) -> bool:
    return match(OUT_OF_SCHEDULE_HOURS_BANNERS, href)


def valid_service_control_application(href: Optional[str], version: int) -> bool:
    """Applications that may be signalled at the Service level."""
    return _gated(SERVICE_CONTROL_APPLICATIONS, href, version)


def valid_service_instance_control_application(href: Optional[str], version: int) -> bool:
    """Applications that may be signalled at the ServiceInstance level."""
    return _gated(SERVICE_INSTANCE_CONTROL_APPLICATIONS, href, version)


def valid_service_unavailable_application(href: Optional[str]) -> bool:
    return href == dvbi.APP_OUTSIDE_AVAILABILITY


def valid_service_agreement_app(href: Optional[str], version: int) -> bool:
    """Consent applications, signalled in the ServiceList from A177r7."""
    return _gated(AGREEMENT_APPLICATIONS, href, version)


def valid_dash_content_type(content_type: Optional[str]) -> bool:
    """A single MPD or a DVB MPD playlist."""
    return content_type in (dvbi.CONTENT_TYPE_DASH_MPD, dvbi.CONTENT_TYPE_DVB_PLAYLIST)


class SchemaRegistry:
    """
    Compiled XML schemas keyed by namespace.

    Built once at startup from a SchemaConfig. A namespace whose XSD is
    not available still resolves to its descriptor; schema validation is
    then skipped for documents in that namespace.

    Example:
        >>> registry = SchemaRegistry.load(config.schemas)
        >>> registry.schema_for("urn:dvb:metadata:servicediscovery:2024")
    """

    def __init__(self):
        self._schemas: Dict[str, etree.XMLSchema] = {}
        self._filenames: Dict[str, str] = {}

    @classmethod
    def load(cls, schema_config) -> "SchemaRegistry":
        """
        Compile every configured schema.

        Args:
            schema_config: SchemaConfig with a directory and per-version file names

        Raises:
            FileNotFoundError: A configured XSD is missing and strict is set
        """
        registry = cls()
        if schema_config is None or not schema_config.directory:
            logger.info("No schema directory configured, XSD validation disabled")
            return registry

        directory = Path(schema_config.directory)
        for descriptor in SL_SCHEMA_VERSIONS + CG_SCHEMA_VERSIONS:
            filename = schema_config.files.get(descriptor.namespace, descriptor.filename)
            path = directory / filename
            if not path.exists():
                if schema_config.strict:
                    raise FileNotFoundError(f"Schema file not found: {path}")
                logger.warning(f"Schema not found for {descriptor.namespace}: {path}")
                continue
            registry.add(descriptor.namespace, path)
        return registry

    def add(self, namespace: str, path: Path) -> bool:
        """Compile one XSD and register it for a namespace."""
        try:
            parser = etree.XMLParser(resolve_entities=False)
            schema_doc = etree.parse(str(path), parser)
            self._schemas[namespace] = etree.XMLSchema(schema_doc)
            self._filenames[namespace] = str(path)
            logger.info(f"Loaded schema {path.name} for {namespace}")
            return True
        except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
            logger.error(f"Failed to load schema {path}: {e}")
            return False

    def schema_for(self, namespace: Optional[str]) -> Optional[etree.XMLSchema]:
        return self._schemas.get(namespace) if namespace else None

    def filename_for(self, namespace: Optional[str]) -> Optional[str]:
        return self._filenames.get(namespace) if namespace else None

    def __len__(self) -> int:
        return len(self._schemas)
