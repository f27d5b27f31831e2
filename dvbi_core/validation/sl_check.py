"""
Service List Validation
=======================

Business rule checks for DVB-I Service List documents (ETSI TS 103 770).

A document moves through these stages:

    Parse -> ResolveSchemaVersion -> SchemaValidate -> RuleCheck -> Finalize

Parsing failures, a wrong root element and an unknown namespace each stop
the pass with a single finding. Every other check reports into the
ErrorList and carries on with the rest of the document.

Usage:
    from dvbi_core.reference import load_reference_stores
    from dvbi_core.validation import ServiceListCheck

    checker = ServiceListCheck(load_reference_stores(config.reference), schemas)
    errs = checker.validate_service_list(text)
    print(errs.summary())
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set
import logging

from dvbi_core import definitions as dvbi
from dvbi_core.patterns import (
    has_non_printable_chars,
    is_ascii,
    is_domain_name,
    is_http_path_url,
    is_http_url,
    is_postcode,
    is_rtsp_url,
    is_tag_uri,
)
from dvbi_core.reference.identifiers import CA_SYSTEM_ID_REGISTRY, DRM_SYSTEM_ID_REGISTRY, parse_ca_system_id
from dvbi_core.reference.loaders import ReferenceStores
from dvbi_core.utils import duplicated_value, parse_datetime, un_entity
from dvbi_core.validation.accessibility import check_accessibility_attributes
from dvbi_core.validation.base import APPLICATION_ERROR_KEY, ErrorList, Severity, ValidationContext
from dvbi_core.validation.cmcd import validate_cmcd_in_dash
from dvbi_core.validation.errors import (
    K_DUPLICATE_VALUE,
    K_INVALID_COUNTRY_CODE,
    K_INVALID_IDENTIFIER,
    K_INVALID_REGION,
    K_INVALID_TAG,
    K_INVALID_VALUE,
    K_XSD_VALIDATION,
    application_error,
    deprecated_element,
    invalid_country_code,
    invalid_url,
    sl_invalid_href_value,
)
from dvbi_core.validation.extensions import ExtensionLocation, check_extension
from dvbi_core.validation.multilingual import (
    check_language,
    check_xml_langs,
    get_node_language,
    ml_language,
    validate_language,
)
from dvbi_core.validation.related_material import check_valid_logos
from dvbi_core.validation.schema_checks import (
    UNBOUNDED,
    ElementSpec,
    check_attributes,
    check_top_elements_and_cardinality,
    for_version,
    schema_check,
    schema_load,
    schema_version_check,
)
from dvbi_core.validation.vocabulary import not_in_store, unknown_country, unverified_value
from dvbi_core.versions import (
    SCHEMA_R0,
    SCHEMA_R1,
    SCHEMA_R3,
    SCHEMA_R4,
    SCHEMA_R5,
    SCHEMA_R6,
    SCHEMA_R7,
    SL_SCHEMA_VERSIONS,
    SchemaRegistry,
    get_descriptor,
    is_a177_specification_urn,
    is_content_finished_banner,
    is_out_schedule_hours,
    spec_version,
    valid_content_finished_banner,
    valid_content_guide_source_logo,
    valid_dash_content_type,
    valid_out_schedule_hours,
    valid_service_agreement_app,
    valid_service_banner,
    valid_service_control_application,
    valid_service_instance_control_application,
    valid_service_list_logo,
    valid_service_logo,
    valid_service_unavailable_application,
)
from dvbi_core.xml.utils import (
    attr,
    child_elements,
    children,
    elementize,
    first_child,
    has_attr,
    has_child,
    local_name,
    namespace_of,
    quote,
    safe_get_text,
    xml_lang,
)

logger = logging.getLogger(__name__)

LCN_TABLE_NO_TARGET_REGION = "unspecifiedRegion"
LCN_TABLE_NO_SUBSCRIPTION = "unspecifiedPackage"

SERVICE_LIST_ATTRIBUTES = ["version", "responseStatus", "lang", "id", "schemaLocation"]
SERVICE_ATTRIBUTES = ["dynamic", "version", "replayAvailable", "lang"]
SERVICE_INSTANCE_ATTRIBUTES = ["priority", "id", "lang"]
NVOD_ATTRIBUTES = ["mode", "reference", "offset"]
GENRE_ATTRIBUTES = ["href", "type"]
HOW_RELATED_ATTRIBUTES = ["href", "metadataOrigin"]
AUDIO_LANGUAGE_ATTRIBUTES = ["purpose", "supplemental"]

RELATED_MATERIAL_SPECS = [
    ElementSpec("HowRelated"),
    ElementSpec("MediaLocator", max_occurs=UNBOUNDED),
    ElementSpec("AccessibilityAttributes", min_occurs=0),
]
RELATED_MATERIAL_ELEMENTS = [
    "HowRelated", "Format", "MediaLocator", "SegmentReference", "PromotionalText",
    "PromotionalMedia", "SourceMediaLocator", "AccessibilityAttributes",
]

SERVICE_SPECS = [
    ElementSpec("UniqueIdentifier"),
    ElementSpec("ServiceInstance", 0, UNBOUNDED),
    ElementSpec("TargetRegion", 0, UNBOUNDED),
    ElementSpec("ServiceName", 1, UNBOUNDED),
    ElementSpec("ProviderName", 1, UNBOUNDED),
    ElementSpec("RelatedMaterial", 0, UNBOUNDED),
    ElementSpec("ServiceGenre", 0, UNBOUNDED),
    ElementSpec("ServiceType", 0),
    ElementSpec("ServiceDescription", 0, UNBOUNDED),
    ElementSpec("RecordingInfo", 0),
    ElementSpec("ContentGuideSource", 0),
    ElementSpec("ContentGuideSourceRef", 0),
    ElementSpec("ContentGuideServiceRef", 0),
    ElementSpec("AdditionalServiceParameters", 0, UNBOUNDED),
    ElementSpec("NVOD", 0),
    ElementSpec("ProminenceList", 0),
    ElementSpec("ParentalRating", 0),
]

SERVICE_INSTANCE_SPECS = [
    ElementSpec("DisplayName", 0, UNBOUNDED),
    ElementSpec("RelatedMaterial", 0, UNBOUNDED),
    ElementSpec("ContentProtection", 0, UNBOUNDED),
    ElementSpec("ContentAttributes", 0),
    ElementSpec("Availability", 0),
    ElementSpec("SubscriptionPackage", 0, UNBOUNDED),
    ElementSpec("FTAContentManagement", 0),
    ElementSpec("SourceType", 0),
    ElementSpec("AltServiceName", 0, UNBOUNDED, min_version=SCHEMA_R3),
    ElementSpec("DVBTDeliveryParameters", 0),
    ElementSpec("DVBSDeliveryParameters", 0),
    ElementSpec("DVBCDeliveryParameters", 0),
    ElementSpec("RTSPDeliveryParameters", 0),
    ElementSpec("MulticastTSDeliveryParameters", 0),
    ElementSpec("DASHDeliveryParameters", 0),
    ElementSpec("OtherDeliveryParameters", 0),
    ElementSpec("IdentifierBasedDeliveryParameters", 0, min_version=SCHEMA_R6),
    ElementSpec("SATIPDeliveryParameters", 0, UNBOUNDED),
]

CONTENT_PROTECTION_SPECS = [
    ElementSpec("CASystemId", 0, UNBOUNDED),
    ElementSpec("DRMSystemId", 0, UNBOUNDED),
]

# delivery parameters that carry a service; OtherDeliveryParameters does not
TUNING_PARAMETER_ELEMENTS = [
    "DVBTDeliveryParameters",
    "DVBSDeliveryParameters",
    "DVBCDeliveryParameters",
    "DASHDeliveryParameters",
    "SATIPDeliveryParameters",
    "MulticastTSDeliveryParameters",
    "RTSPDeliveryParameters",
]

# SourceType -> (description, delivery parameter elements, code)
SOURCE_TYPE_DELIVERY = {
    dvbi.DVBT_SOURCE_TYPE: ("DVB-T", ["DVBTDeliveryParameters"], "SI151"),
    dvbi.DVBS_SOURCE_TYPE: ("DVB-S", ["DVBSDeliveryParameters"], "SI152"),
    dvbi.DVBC_SOURCE_TYPE: ("DVB-C", ["DVBCDeliveryParameters"], "SI153"),
    dvbi.DVBDASH_SOURCE_TYPE: ("DVB-DASH", ["DASHDeliveryParameters"], "SI154"),
    dvbi.DVBIPTV_SOURCE_TYPE: (
        "Multicast or RTSP", ["MulticastTSDeliveryParameters", "RTSPDeliveryParameters"], "SI155",
    ),
}

# modulation system -> code suffix letter for SI201..SI203
SATELLITE_CODE_SUFFIX = {
    dvbi.MODULATION_S: "a",
    dvbi.MODULATION_S2: "b",
    dvbi.MODULATION_S2X: "c",
}
SATELLITE_FORBIDDEN_SUFFIX = {
    dvbi.MODULATION_S: ("a", "b", "c"),
    dvbi.MODULATION_S2: ("k", "l", "m"),
}

# synopsis length label -> (too long/short code, duplicate code, missing code)
SYNOPSIS_CODES = {
    dvbi.SYNOPSIS_BRIEF: (10, 21, 31),
    dvbi.SYNOPSIS_SHORT: (11, 22, 32),
    dvbi.SYNOPSIS_MEDIUM: (12, 23, 33),
    dvbi.SYNOPSIS_LONG: (13, 24, 34),
    dvbi.SYNOPSIS_EXTENDED: (14, 25, 35),
}
K_SYNOPSIS = "synopsis"
K_SATELLITE = "satellite tuning"


class RelatedMaterialLocation(str, Enum):
    """Where a <RelatedMaterial> element appears in a service list."""

    SERVICE_LIST = "service list"
    SERVICE = "service"
    SERVICE_INSTANCE = "service instance"
    CONTENT_GUIDE = "content guide"

    @property
    def label(self) -> str:
        return self.value.title()


@dataclass
class KnownRegion:
    """A regionID declared in the RegionList."""
    region: str
    countries: List[str] = field(default_factory=list)
    selectable: bool = True
    used: bool = False
    line: Optional[int] = None


@dataclass
class AnnouncedLanguage:
    """A language from the LanguageList and whether any AudioLanguage used it."""
    language: str
    element: Any = None
    used: bool = False


@dataclass
class ServiceListState:
    """
    Declarations collected while walking one service list.

    Attributes:
        context: Namespace and schema version of the document
        regions: Declared regions by regionID, in document order
        packages: Localized names of declared subscription packages
        languages: Announced audio languages by lower-cased tag
        services: Unique identifiers of the services checked so far
        cg_source_ids: ContentGuideSource@CGSID values of the list
    """
    context: ValidationContext
    regions: Dict[str, KnownRegion] = field(default_factory=dict)
    packages: List[str] = field(default_factory=list)
    languages: Dict[str, AnnouncedLanguage] = field(default_factory=dict)
    services: List[str] = field(default_factory=list)
    cg_source_ids: List[str] = field(default_factory=list)

    @property
    def version(self) -> int:
        return self.context.version


def valid_service_identifier(identifier: Optional[str]) -> bool:
    """Service identifiers are IETF RFC 4151 tag: URIs."""
    return is_tag_uri(identifier)


def valid_service_list_identifier(identifier: Optional[str]) -> bool:
    return is_tag_uri(identifier)


def localized_subscription_package(package: Any, lang: Optional[str] = None) -> str:
    """Label for a subscription package qualified by its language."""
    return f"{safe_get_text(package)}/lang={lang if lang else ml_language(package)}"


def unspecified_target_region(region: str, location: str, code: str, element: Any) -> Dict[str, Any]:
    return {
        "code": code,
        "message": f"{location} has an unspecified {elementize('TargetRegion')} {quote(region)}",
        "key": "target region",
        "fragment": element,
    }


def no_delivery_params(source: str, service_id: str, element: Any, code: str) -> Dict[str, Any]:
    return {
        "code": code,
        "message": f"{source} delivery parameters not specified for service instance in service {quote(service_id)}",
        "fragment": element,
        "key": "no delivery params",
    }


class ServiceListCheck:
    """
    Validates DVB-I Service List documents.

    The checker holds read-only references to the reference stores and the
    compiled schemas, so one instance can serve concurrent validations.

    Args:
        stores: Reference data used for vocabulary checks
        schemas: Compiled XSDs by namespace

    Example:
        >>> checker = ServiceListCheck(stores, schemas)
        >>> errs = checker.validate_service_list(open("sl.xml").read())
        >>> errs.num_errors()
        0
    """

    def __init__(self, stores: Optional[ReferenceStores] = None, schemas: Optional[SchemaRegistry] = None):
        self.stores = stores if stores is not None else ReferenceStores()
        self.schemas = schemas if schemas is not None else SchemaRegistry()
        self._num_requests = 0

    def stats(self) -> Dict[str, Any]:
        """Request count and the sizes of the loaded reference data."""
        result = {"numRequests": self._num_requests}
        result.update(self.stores.stats())
        result["numSchemas"] = len(self.schemas)
        return result

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def _add_region(self, region: Any, depth: int, state: ServiceListState,
                    countries: Optional[List[str]], errs: ErrorList) -> None:
        """
        Check a <Region> and record it, then recurse into its sub-regions.

        Args:
            region: The <Region> element
            depth: Nesting depth, 0 for a top level region
            state: Declarations for this document
            countries: Country codes inherited from the parent region
            errs: Finding collector
        """
        if region is None:
            errs.add_error(**application_error("AR000", "add_region", "region"))
            return

        region_id = attr(region, "regionID")
        display_id = quote(region_id) if region_id else '"noID"'
        country_codes = attr(region, "countryCodes")

        if depth != 0 and country_codes is not None:
            errs.add_error(
                code="AR032",
                message=f"Region@countryCodes not permitted for sub-region {display_id}",
                key="ccode in subRegion",
                line=region.sourceline,
            )

        if country_codes is not None:
            specified = country_codes.split(",")
            for country in specified:
                if unknown_country(self.stores.countries, country, errs, "AR033", line=region.sourceline):
                    errs.add_error(
                        code="AR033",
                        message=f"invalid country code ({country}) for region {display_id}",
                        key=K_INVALID_COUNTRY_CODE,
                        line=region.sourceline,
                    )
        else:
            specified = list(countries or [])

        selectable = True
        if state.version >= SCHEMA_R4:
            selectable = attr(region, "selectable", "true") == "true"
            if not selectable and depth == dvbi.MAX_SUBREGION_LEVELS:
                errs.add_error(
                    code="AR010",
                    message="Tertiary (leaf) subregion must be selectable",
                    key="not selectable",
                    line=region.sourceline,
                    clause="A177 Table 38",
                    description="As a tertiary region in which no sub-regions exist, this value shall always be true",
                )
            if not selectable and not has_child(region, "Region"):
                errs.add_error(
                    code="AR011", message="leaf subregion must be selectable",
                    key="not selectable", line=region.sourceline,
                )
            duplicate_code, missing_code = "AR012", "AR013"
        else:
            duplicate_code, missing_code = "AR021", "AR020"

        if region_id:
            if region_id in state.regions:
                errs.add_error(
                    code=duplicate_code,
                    message=f"Duplicate @regionID {display_id}",
                    key="duplicate @regionID",
                    line=region.sourceline,
                )
            else:
                state.regions[region_id] = KnownRegion(
                    region=region_id, countries=specified, selectable=selectable, line=region.sourceline,
                )
        else:
            errs.add_error(
                code=missing_code, message="@regionID is required", key="no @regionID", line=region.sourceline,
            )

        if depth > dvbi.MAX_SUBREGION_LEVELS:
            errs.add_error(
                code="AR031",
                message=f"<Region> depth exceeded (>{dvbi.MAX_SUBREGION_LEVELS}) for sub-region {display_id}",
                key="region depth exceeded",
                line=region.sourceline,
            )

        check_xml_langs("RegionName", f"Region@regionID={display_id}", region, errs, "AR041", self.stores.languages)

        for postcode in children(region, "Postcode"):
            value = safe_get_text(postcode).strip()
            if not is_postcode(value):
                errs.add_error(
                    code="AR051", message=f"{quote(value)} is not a valid postcode",
                    key="invalid postcode", fragment=postcode,
                )

        for sub_region in children(region, "Region"):
            self._add_region(sub_region, depth + 1, state, specified, errs)

    # ------------------------------------------------------------------
    # Related material and applications
    # ------------------------------------------------------------------

    def _check_signalled_application(self, media_locator: Any, location: str, app_type: str,
                                     errs: ErrorList) -> None:
        """Check the MediaUri of an application signalled through RelatedMaterial."""
        if media_locator is None:
            errs.add_error(
                code="SA001",
                message=f"<MediaLocator> not specified for application <RelatedMaterial> in {location}",
                key="no MediaUri",
            )
            return

        media_uris = children(media_locator, "MediaUri")
        for media_uri in media_uris:
            content_type = attr(media_uri, "contentType")
            uri = safe_get_text(media_uri).strip()
            if content_type and content_type not in dvbi.VALID_APPLICATION_TYPES:
                errs.add_error(
                    code="SA003",
                    message=f"@contentType {quote(content_type)} is not supported application type for "
                            f"<RelatedMaterial><MediaLocator> in {location}",
                    fragment=media_uri,
                    key="invalid MediaUri@contentType",
                )
            if not is_ascii(uri):
                errs.add_error(
                    code="SA014",
                    message=f"URL {quote(uri)} contains non-ASCII characters in <MediaUri>",
                    fragment=media_uri,
                    key="invalid resource URL",
                )
            if not is_http_url(uri):
                errs.add_error(
                    code="SA004",
                    message=f"invalid URL {quote(uri)} specified for <MediaUri>",
                    fragment=media_uri,
                    key="invalid resource URL",
                )
            if (app_type == dvbi.APP_SERVICE_PROVIDER and content_type
                    and content_type != dvbi.XML_AIT_CONTENT_TYPE):
                errs.add_error(
                    code="SA006",
                    message=f"invalid application type {quote(content_type)} for Service Provider Application "
                            "(only XMLAIT allowed)",
                    fragment=media_uri,
                    key="invalid app type",
                )
        if not media_uris:
            errs.add_error(
                code="SA005",
                message=f"<MediaUri> not specified for application <MediaLocator> in {location}",
                fragment=media_locator,
                key="no MediaUri",
            )

    @staticmethod
    def _valid_service_application(href: Optional[str], version: int) -> bool:
        return valid_service_control_application(href, version) or valid_service_unavailable_application(href)

    @staticmethod
    def _related_material_description(errs: ErrorList, code: str, parent: str, table: int) -> None:
        errs.error_description(
            code,
            description=f"The application type indicated by the specified @href value is not permitted in a "
                        f"{elementize(parent)}. Refer to the semantic definition of <RelatedMaterial> in "
                        f"table {table} of A177.",
        )

    def _validate_related_material(self, related_material: Any, location: str,
                                   location_type: RelatedMaterialLocation, state: ServiceListState,
                                   errs: ErrorList, code: str) -> str:
        """
        Check a <RelatedMaterial> against the rules for where it appears.

        HowRelated@href selects the kind of material. Logos and banners get
        the image checks, applications get the signalled application checks
        and anything not permitted at this location is an 'invalid href'.

        Returns:
            The HowRelated@href when it is permitted here, else ""
        """
        if related_material is None:
            errs.add_error(**application_error("RM000", "validate_related_material", "related_material"))
            return ""

        version = state.version
        languages = self.stores.languages
        check_top_elements_and_cardinality(
            related_material, RELATED_MATERIAL_SPECS, RELATED_MATERIAL_ELEMENTS, False, errs, f"{code}-1",
        )

        how_related = first_child(related_material, "HowRelated")
        media_locators = children(related_material, "MediaLocator")

        if how_related is None:
            errs.add_error(
                code=f"{code}-2",
                message=f"<HowRelated> not specified for <RelatedMaterial> in {location}",
                line=related_material.sourceline,
                key="no HowRelated",
            )
            return ""

        check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, f"{code}-5")

        found = ""
        href = attr(how_related, "href")
        if href:
            def signalled_applications() -> None:
                for locator in media_locators:
                    self._check_signalled_application(locator, location, href, errs)

            def invalid_href(number: int, parent: str, table: int) -> None:
                errs.add_error(**sl_invalid_href_value(
                    href, how_related, "<RelatedMaterial>", location, f"{code}-{number}",
                ))
                self._related_material_description(errs, f"{code}-{number}", parent, table)

            if location_type == RelatedMaterialLocation.SERVICE_LIST:
                if valid_service_list_logo(href):
                    found = href
                    check_valid_logos(related_material, location, errs, f"{code}-10", languages)
                elif valid_service_agreement_app(href, version):
                    found = href
                    signalled_applications()
                else:
                    invalid_href(11, "ServiceList", 14)

            elif location_type == RelatedMaterialLocation.SERVICE:
                if is_content_finished_banner(href) and version == SCHEMA_R0:
                    errs.add_error(
                        code=f"{code}-21",
                        message=f"{quote(href)} not permitted for {quote(state.context.namespace)} in {location}",
                        key="invalid CS value",
                        fragment=how_related,
                    )
                if (valid_out_schedule_hours(href) or valid_content_finished_banner(href)
                        or valid_service_logo(href) or valid_service_banner(href)):
                    found = href
                    check_valid_logos(related_material, location, errs, f"{code}-22", languages)
                elif self._valid_service_application(href, version):
                    found = href
                    signalled_applications()
                else:
                    invalid_href(24, "Service", 15)

            elif location_type == RelatedMaterialLocation.SERVICE_INSTANCE:
                if is_content_finished_banner(href) and version == SCHEMA_R0:
                    errs.add_error(
                        code=f"{code}-31",
                        message=f"{quote(href)} not permitted for {quote(state.context.namespace)} in {location}",
                        key="invalid CS value",
                        fragment=how_related,
                    )
                elif valid_content_finished_banner(href) or valid_service_logo(href):
                    found = href
                    check_valid_logos(related_material, location, errs, f"{code}-32", languages)
                elif is_out_schedule_hours(href) and version >= SCHEMA_R6:
                    errs.add_error(
                        code=f"{code}-35",
                        message="Out of Service Banner is not permitted in a Service Instance from A177r6",
                        key="misplaced image type",
                        fragment=how_related,
                        clause="A177 table 16",
                        description="Out of Service banner is not permitted in the <RelatedMaterial> element "
                                    "of a <ServiceInstance>",
                    )
                elif valid_service_banner(href):
                    errs.add_error(
                        code=f"{code}-33",
                        message="Service Banner is not permitted in a Service Instance",
                        key="misplaced image type",
                        fragment=how_related,
                        clause="A177 table 16",
                        description="Service banner is not permitted in the <RelatedMaterial> element "
                                    "of a <ServiceInstance>",
                    )
                elif valid_service_control_application(href, version):
                    found = href
                    signalled_applications()
                else:
                    invalid_href(34, "ServiceInstance", 16)

            elif location_type == RelatedMaterialLocation.CONTENT_GUIDE:
                if valid_content_guide_source_logo(href):
                    found = href
                    check_valid_logos(related_material, location, errs, f"{code}-41", languages)
                else:
                    invalid_href(42, "ContentGuideSource", 20)

        for accessibility in children(related_material, "AccessibilityAttributes"):
            check_accessibility_attributes(accessibility, self.stores, errs, f"{code}-51")
        return found

    def _has_signalled_application(self, node: Any, version: int) -> bool:
        """True if a <RelatedMaterial> of the node signals a service related application."""
        if node is None:
            return False
        for related_material in children(node, "RelatedMaterial"):
            how_related = first_child(related_material, "HowRelated")
            if how_related is not None and self._valid_service_application(attr(how_related, "href"), version):
                return True
        return False

    @staticmethod
    def _has_service_application(node: Any, href: str, content_type: str) -> bool:
        """True if the node signals an application of this type and format."""
        for related_material in children(node, "RelatedMaterial"):
            how_related = first_child(related_material, "HowRelated")
            if how_related is None or attr(how_related, "href") != href:
                continue
            for media_locator in children(related_material, "MediaLocator"):
                media_uri = first_child(media_locator, "MediaUri")
                if media_uri is not None and attr(media_uri, "contentType") == content_type:
                    return True
        return False

    # ------------------------------------------------------------------
    # Content guide sources
    # ------------------------------------------------------------------

    def _validate_content_guide_source(self, source: Any, location: Optional[str], state: ServiceListState,
                                       errs: ErrorList, code: str) -> None:
        """Check a <ContentGuideSource>: names, logos and the endpoint URLs."""
        if source is None:
            errs.add_error(**application_error("GS000", "validate_content_guide_source", "source"))
            return

        def check_endpoint(element_name: str, number: int, must_end_with_slash: bool = False) -> None:
            endpoint = first_child(source, element_name)
            if endpoint is None:
                return
            uri = first_child(endpoint, "URI")
            if uri is not None:
                value = safe_get_text(uri).strip()
                if not must_end_with_slash and not is_http_url(value):
                    errs.add_error(**invalid_url(value, endpoint, element_name, f"{code}-{number}a"))
                if must_end_with_slash and not is_http_path_url(value):
                    errs.add_error(
                        type=Severity.WARNING,
                        code=f"{code}-{number}b",
                        message=f"{quote(value)} should end with a slash '/' for {elementize(element_name)}",
                        fragment=endpoint,
                        key="not URL path",
                    )
            content_type = attr(endpoint, "contentType")
            if content_type is not None and content_type != dvbi.CONTENT_TYPE_XML:
                errs.add_error(
                    type=Severity.WARNING,
                    code=f"{code}-{number + 1}",
                    message=f"<{element_name}@contentType> should contain {dvbi.CONTENT_TYPE_XML}",
                    fragment=endpoint,
                    key="invalid @contentType",
                )

        if not location:
            parent = source.getparent()
            location = elementize(local_name(parent)) if parent is not None else elementize(local_name(source))

        languages = self.stores.languages
        check_xml_langs("Name", location, source, errs, f"{code}-1", languages)
        check_xml_langs("ProviderName", location, source, errs, f"{code}-2", languages)

        for related_material in children(source, "RelatedMaterial"):
            self._validate_related_material(
                related_material, location, RelatedMaterialLocation.CONTENT_GUIDE, state, errs, f"{code}-3",
            )

        check_endpoint("ScheduleInfoEndpoint", 14)
        check_endpoint("ProgramInfoEndpoint", 16)
        check_endpoint("GroupInfoEndpoint", 18, state.version >= SCHEMA_R5)
        check_endpoint("MoreEpisodesEndpoint", 20)

    # ------------------------------------------------------------------
    # Synopsis
    # ------------------------------------------------------------------

    def validate_synopsis_type(self, element: Any, element_name: str, required_lengths: List[str],
                               optional_lengths: List[str], errs: ErrorList, code: str) -> None:
        """
        Check the lengths of a group of synopsis elements.

        Each @length must be one of the required or optional labels and the
        text, with entity references counted as one character, must fit the
        length. Only one element is allowed per length and language, and
        every required length must be present.

        Args:
            element: Parent of the synopsis elements
            element_name: Local name of the synopsis elements
            required_lengths: @length values that must be present
            optional_lengths: @length values that may be present
            errs: Finding collector
            code: Code prefix for findings
        """
        if element is None:
            errs.add_error(**application_error("SY000", "validate_synopsis_type", "element"))
            return

        found: Set[str] = set()
        seen: Dict[str, Set[str]] = {label: set() for label in dvbi.SYNOPSIS_LABELS}
        for synopsis in children(element, element_name):
            explicit = xml_lang(synopsis)
            if explicit is not None:
                check_language(explicit, synopsis, errs, f"{code}-2", self.stores.languages)
            synopsis_lang = ml_language(synopsis)
            length_label = attr(synopsis, "length")
            if not length_label:
                continue

            if length_label in required_lengths or length_label in optional_lengths:
                too_long_code = SYNOPSIS_CODES[length_label][0]
                text_length = len(un_entity(safe_get_text(synopsis)))
                maximum = dvbi.SYNOPSIS_MAX_LENGTHS.get(length_label)
                minimum = dvbi.SYNOPSIS_MIN_LENGTHS.get(length_label)
                if maximum is not None and text_length > maximum:
                    errs.add_error(
                        code=f"{code}-{too_long_code}",
                        message=f"length of <{element_name}@length={quote(length_label)}> exceeds "
                                f"{maximum} characters",
                        fragment=synopsis,
                        key=K_SYNOPSIS,
                    )
                if minimum is not None and text_length < minimum:
                    errs.add_error(
                        code=f"{code}-{too_long_code}",
                        message=f"length of <{element_name}@length={quote(length_label)}> is less than "
                                f"{minimum} characters",
                        fragment=synopsis,
                        key=K_SYNOPSIS,
                    )
                found.add(length_label)
            else:
                errs.add_error(
                    code=f"{code}-15",
                    message=f"@length={quote(length_label)} is not permitted in {elementize(element_name)}",
                    fragment=synopsis,
                    key=K_SYNOPSIS,
                )

            if length_label in seen:
                if duplicated_value(seen[length_label], synopsis_lang):
                    errs.add_error(
                        code=f"{code}-{SYNOPSIS_CODES[length_label][1]}",
                        message=f"only a single {elementize(element_name)} is permitted per length "
                                f"({length_label}) and language ({synopsis_lang})",
                        fragment=synopsis,
                        key=K_SYNOPSIS,
                    )

        for label in required_lengths:
            if label in SYNOPSIS_CODES and label not in found:
                errs.add_error(
                    code=f"{code}-{SYNOPSIS_CODES[label][2]}",
                    message=f"a {elementize(element_name)} element with @length={quote(label)} is required",
                    fragment=element,
                    key=K_SYNOPSIS,
                )

    # ------------------------------------------------------------------
    # Service instances
    # ------------------------------------------------------------------

    def _check_content_protection(self, instance: Any, state: ServiceListState, errs: ErrorList) -> None:
        registry = self.stores.content_protection
        for content_protection in children(instance, "ContentProtection"):
            check_top_elements_and_cardinality(
                content_protection, CONTENT_PROTECTION_SPECS, ["CASystemId", "DRMSystemId"], False, errs, "SI031",
            )
            for ca_system in children(content_protection, "CASystemId"):
                check_attributes(ca_system, [], ["cpsIndex"], ["cpsIndex"], errs, "SI031")
                source = first_child(ca_system, "CASystemId") if state.version <= SCHEMA_R1 else ca_system
                value = safe_get_text(source).strip() if source is not None else ""
                if not value:
                    continue
                system_id = parse_ca_system_id(value)
                if system_id is None:
                    errs.add_error(
                        code="SI032",
                        message=f"<CASystemId> value ({value}) must be expressed in decimal or hexadecimal",
                        fragment=ca_system,
                        key=K_INVALID_IDENTIFIER,
                    )
                elif not registry.has_ca_systems:
                    errs.add_error(**unverified_value(value, "CA system", "SI033", ca_system))
                elif not registry.is_known_ca_system(system_id):
                    errs.add_error(
                        code="SI033",
                        message=f"<CASystemId> value ({value}) is not found in {CA_SYSTEM_ID_REGISTRY}",
                        fragment=ca_system,
                        key=K_INVALID_IDENTIFIER,
                        clause="A177 Table 35",
                        description="The value shall consist of CA System ID as defined in clause 5.2 "
                                    "of ETSI TS 101 162",
                    )

            for drm_system in children(content_protection, "DRMSystemId"):
                check_attributes(
                    drm_system, [], ["encryptionScheme", "cpsIndex"], ["encryptionScheme", "cpsIndex"], errs, "SI041",
                )
                source = first_child(drm_system, "DRMSystemId") if state.version <= SCHEMA_R1 else drm_system
                value = safe_get_text(source).strip().lower() if source is not None else ""
                if value and not registry.has_drm_systems:
                    errs.add_error(**unverified_value(value, "DRM system", "SI042", drm_system))
                elif value and not registry.is_known_drm_system(value):
                    errs.add_error(
                        code="SI042",
                        message=f"<DRMSystemId> value ({value}) is not found in {DRM_SYSTEM_ID_REGISTRY}",
                        fragment=drm_system,
                        key=K_INVALID_IDENTIFIER,
                        clause="A177 Table 35",
                        description="The value shall consist of DRM SystemID values as described in clause 8.2 "
                                    "of ETSI TS 103 285",
                    )

    def _check_content_attributes(self, content_attributes: Any, state: ServiceListState,
                                  errs: ErrorList) -> None:
        stores = self.stores

        for audio in children(content_attributes, "AudioAttributes"):
            for child in child_elements(audio):
                name = local_name(child)
                href = attr(child, "href")
                if name == "Coding" and not_in_store(stores.audio_codecs, href, errs, "SI052", "audio codec", child):
                    errs.add_error(
                        code="SI052",
                        message=f"invalid Coding@href value for ({href}) {stores.audio_codecs.values_range()}",
                        fragment=child,
                        key="audio codec",
                        clause="A177 Table 56",
                        description="The value specified for Coding@href is constrained in DVB-I.",
                    )
                elif name == "MixType" and not_in_store(stores.audio_presentation, href, errs, "SI055",
                                                        "audio presentation", child):
                    errs.add_error(
                        code="SI055",
                        message=f"invalid MixType@href value for ({href}) "
                                f"{stores.audio_presentation.values_range()}",
                        fragment=child,
                        key="audio codec",
                    )
                elif name == "AudioLanguage":
                    self._check_audio_language(child, state, errs)

        for conformance in children(content_attributes, "AudioConformancePoint"):
            if state.version > SCHEMA_R4:
                errs.add_error(**deprecated_element(conformance, spec_version(SCHEMA_R4), "SI062"))
            href = attr(conformance, "href")
            if not_in_store(stores.audio_conformance, href, errs, "SI061", "audio conformance point", conformance):
                errs.add_error(
                    code="SI061",
                    message=f"invalid AudioConformancePoint@href ({href}) {stores.audio_conformance.values_range()}",
                    fragment=conformance,
                    key="audio conf point",
                )

        video_checks = {
            "Coding": (stores.video_codecs, "SI072", "video codec"),
            "PictureFormat": (stores.picture_formats, "SI082", "PictureFormat"),
            "Colorimetry": (stores.colorimetry, "SI084", "Colorimetry"),
        }
        for video in children(content_attributes, "VideoAttributes"):
            for child in child_elements(video):
                name = local_name(child)
                if name not in video_checks:
                    continue
                store, code, key = video_checks[name]
                href = attr(child, "href")
                if not_in_store(store, href, errs, code, key, child):
                    errs.add_error(
                        code=code,
                        message=f"invalid {name}@href value ({href}) {store.values_range()}",
                        fragment=child,
                        key=key,
                    )

        codec_count = 0
        conformance_points: Set[str] = set()
        for conformance in children(content_attributes, "VideoConformancePoint"):
            value = attr(conformance, "href")
            if not value:
                continue
            if not_in_store(stores.video_conformance, value, errs, "SI091", "video conformance point", conformance):
                errs.add_error(
                    code="SI091",
                    message=f"invalid VideoConformancePoint@href value ({value}) "
                            f"{stores.video_conformance.values_range()}",
                    fragment=conformance,
                    key="video conf point",
                )
            elif not value[value.rfind(":") + 1:].startswith(dvbi.HDR_DMI_TERM_PREFIX):
                codec_count += 1
                if codec_count > 1:
                    errs.add_error(
                        code="SI092",
                        message="only a single conformance point for the codec can be specified",
                        fragment=conformance,
                        key="video conf point",
                    )
            if duplicated_value(conformance_points, value):
                errs.add_error(
                    code="SI093",
                    message="duplicated value for <VideoConformancePoint>",
                    fragment=conformance,
                    key="duplicate conformance point",
                )

        for caption_language in children(content_attributes, "CaptionLanguage"):
            check_language(safe_get_text(caption_language).strip(), caption_language, errs, "SI101",
                           stores.languages)
        for sign_language in children(content_attributes, "SignLanguage"):
            check_language(safe_get_text(sign_language).strip(), sign_language, errs, "SI111", stores.languages)

        accessibility = first_child(content_attributes, "AccessibilityAttributes")
        if accessibility is not None:
            check_accessibility_attributes(accessibility, stores, errs, "SI112")

    def _check_audio_language(self, audio_language: Any, state: ServiceListState, errs: ErrorList) -> None:
        if state.languages:
            language = safe_get_text(audio_language).strip().lower()
            announced = state.languages.get(language)
            if announced is None:
                errs.add_error(
                    type=Severity.WARNING,
                    code="SI053",
                    message=f"audio language {quote(safe_get_text(audio_language))} is not defined in <LanguageList>",
                    fragment=audio_language,
                    key="audio language",
                )
            else:
                announced.used = True

        purpose = attr(audio_language, "purpose")
        if purpose:
            permitted = [dvbi.AUDIO_PURPOSE_MAIN] if state.version >= SCHEMA_R6 else list(dvbi.AUDIO_PURPOSES_PRE_R6)
            if purpose not in permitted:
                errs.add_error(
                    code="SI054",
                    message=f"the value {quote(purpose)} is not permitted for AudioLanguage@purpose.",
                    fragment=audio_language,
                    key="audio purpose",
                    clause="A177 Table 67 (clause 6.11.3)",
                    description="The allowed set of values for AudioLanguage@purpose was reduced with the "
                                f"introduction of <AccessibilityAttributes> in A177r{SCHEMA_R6}",
                )

    def _check_source_type(self, instance: Any, service_id: str, state: ServiceListState,
                           errs: ErrorList) -> None:
        source_type = first_child(instance, "SourceType")
        if source_type is None:
            if state.version == SCHEMA_R0:
                errs.add_error(
                    code="SI161",
                    message=f"<SourceType> not specified in <ServiceInstance> of service {quote(service_id)}",
                    key="no SourceType",
                    line=instance.sourceline,
                )
            return

        value = safe_get_text(source_type).strip()
        v1_params = False
        if value in SOURCE_TYPE_DELIVERY:
            description, parameters, code = SOURCE_TYPE_DELIVERY[value]
            if not any(has_child(instance, name) for name in parameters):
                errs.add_error(**no_delivery_params(description, service_id, source_type, code))
            v1_params = True
        elif value == dvbi.DVBAPPLICATION_SOURCE_TYPE:
            delivery = self._delivery_parameters(instance)
            if delivery is not None:
                errs.add_error(
                    code="SI156",
                    message=f"Delivery parameters are not permitted for Application service instance in "
                            f"Service {quote(service_id)}",
                    fragments=[source_type, delivery],
                    key="invalid application",
                )
                v1_params = True
            else:
                service = instance.getparent()
                if (not self._has_signalled_application(service, state.version)
                        and not self._has_signalled_application(instance, state.version)):
                    errs.add_error(
                        code="SI157a",
                        message=f"No Application is signalled for SourceType={quote(value)} in Service "
                                f"{quote(service_id)}",
                        line=service.sourceline if service is not None else None,
                        key="no application",
                    )
                    errs.add_error(
                        code="SI157b",
                        message=f"No Application is signalled for SourceType={quote(value)} in ServiceInstance "
                                f"{quote(service_id)}",
                        line=instance.sourceline,
                        key="no application",
                    )
        elif state.version == SCHEMA_R0:
            errs.add_error(
                code="SI158",
                message=f"<SourceType> {quote(value)} is not valid in Service {quote(service_id)}",
                fragment=source_type,
                key="invalid SourceType",
            )
        elif state.version <= SCHEMA_R5 and not has_child(instance, "OtherDeliveryParameters"):
            errs.add_error(
                code="SI159",
                message=f"<OtherDeliveryParameters> must be specified with user-defined SourceType {quote(value)}",
                line=instance.sourceline,
                key="no OtherDeliveryParameters",
            )

        if v1_params and state.version >= SCHEMA_R1:
            errs.add_error(**deprecated_element(source_type, spec_version(SCHEMA_R1), "SI160"))

    @staticmethod
    def _delivery_parameters(instance: Any) -> Optional[Any]:
        for name in TUNING_PARAMETER_ELEMENTS:
            found = first_child(instance, name)
            if found is not None:
                return found
        return None

    def _check_satellite(self, parameters: Any, errs: ErrorList) -> None:
        modulation_system = first_child(parameters, "ModulationSystem")
        if modulation_system is None:
            return
        modulation = safe_get_text(modulation_system).strip()
        if modulation not in SATELLITE_CODE_SUFFIX:
            return
        suffix = SATELLITE_CODE_SUFFIX[modulation]

        checks = [
            ("RollOff", dvbi.SATELLITE_ROLLOFF, "SI201"),
            ("ModulationType", dvbi.SATELLITE_MODULATION, "SI202"),
            ("FEC", dvbi.SATELLITE_FEC, "SI203"),
        ]
        for name, table, code in checks:
            element = first_child(parameters, name)
            if element is None:
                continue
            value = safe_get_text(element).strip()
            if value not in table[modulation]:
                errs.add_error(
                    code=f"{code}{suffix}",
                    key=K_SATELLITE,
                    message=f"{name}={quote(value)} is not permitted for {modulation} modulation system",
                    fragment=element,
                )

        forbidden = dvbi.SATELLITE_FORBIDDEN.get(modulation, ())
        for name, letter in zip(forbidden, SATELLITE_FORBIDDEN_SUFFIX.get(modulation, ())):
            element = first_child(parameters, name)
            if element is not None:
                errs.add_error(
                    code=f"SI204{letter}",
                    key=K_SATELLITE,
                    message=f"{elementize(name)} is not permitted for ModulationSystem={quote(modulation)}",
                    fragment=element,
                )

        if modulation == dvbi.MODULATION_S2X:
            channel_bonding = first_child(parameters, "ChannelBonding")
            if channel_bonding is None:
                return
            frequencies: Set[str] = set()
            primary_specified = False
            for frequency in children(channel_bonding, "Frequency"):
                value = safe_get_text(frequency).strip()
                if duplicated_value(frequencies, value):
                    errs.add_error(
                        code="SI205", key=K_SATELLITE, fragment=frequency,
                        message=f"<Frequency> value {quote(value)} already specified",
                    )
                if attr(frequency, "primary", "").lower() == "true":
                    if primary_specified:
                        errs.add_error(
                            code="SI206", key=K_SATELLITE, fragment=frequency,
                            message="<Frequency> already specified with @primary=true",
                        )
                    primary_specified = True

    def _check_delivery_parameters(self, instance: Any, service_id: str, state: ServiceListState,
                                   errs: ErrorList) -> None:
        dash = first_child(instance, "DASHDeliveryParameters")
        if dash is not None:
            location = first_child(dash, "UriBasedLocation")
            if location is not None:
                content_type = attr(location, "contentType")
                if content_type is not None and not valid_dash_content_type(content_type):
                    errs.add_error(
                        code="SI173",
                        fragment=location,
                        message=f"@contentType={quote(content_type)} in service {quote(service_id)} is not valid",
                        key="no @contentType for DASH",
                    )
                uri = first_child(location, "URI")
                if uri is not None and not is_http_url(safe_get_text(uri).strip()):
                    errs.add_error(
                        code="SI174",
                        message=f"invalid URL {quote(safe_get_text(uri).strip())} specified for <URI> of "
                                f"service {quote(service_id)}",
                        fragment=uri,
                        key="invalid resource URL",
                    )
            validate_cmcd_in_dash(dash, errs, "SI175")
            for extension in children(dash, "Extension"):
                check_extension(extension, ExtensionLocation.DASH_INSTANCE, errs, "SI179")

        for name, source, country_code, deprecated_code in (
                ("DVBTDeliveryParameters", "DVB-T", "SI182", "SI183"),
                ("DVBCDeliveryParameters", "DVB-C", "SI191", "SI192")):
            parameters = first_child(instance, name)
            target_country = first_child(parameters, "TargetCountry") if parameters is not None else None
            if target_country is None:
                continue
            country = safe_get_text(target_country).strip()
            if unknown_country(self.stores.countries, country, errs, country_code, target_country):
                errs.add_error(
                    code=country_code,
                    message=invalid_country_code(country, source, f"service {quote(service_id)}"),
                    fragment=target_country,
                    key=K_INVALID_COUNTRY_CODE,
                )
            if state.version >= SCHEMA_R6:
                errs.add_error(**deprecated_element(target_country, spec_version(SCHEMA_R6), deprecated_code))

        cable = first_child(instance, "DVBCDeliveryParameters")
        if cable is not None and state.version >= SCHEMA_R7:
            network_ids: Set[str] = set()
            for network_id in children(cable, "NetworkID"):
                if duplicated_value(network_ids, safe_get_text(network_id).strip()):
                    errs.add_error(
                        code="SI193",
                        type=Severity.WARNING,
                        key=K_DUPLICATE_VALUE,
                        fragment=network_id,
                        message="duplicated Network ID value",
                    )

        satellite = first_child(instance, "DVBSDeliveryParameters")
        if satellite is not None:
            self._check_satellite(satellite, errs)

        rtsp = first_child(instance, "RTSPDeliveryParameters")
        rtsp_url = first_child(rtsp, "RTSPURL") if rtsp is not None else None
        if rtsp_url is not None and not is_rtsp_url(safe_get_text(rtsp_url).strip()):
            errs.add_error(**invalid_url(safe_get_text(rtsp_url).strip(), rtsp_url, "RTSPURL", "SI223"))

        multicast = first_child(instance, "MulticastTSDeliveryParameters")
        if multicast is not None:
            address = first_child(multicast, "IPMulticastAddress")
            cname = first_child(address, "CNAME") if address is not None else None
            if cname is not None and not is_domain_name(safe_get_text(cname).strip()):
                errs.add_error(
                    code="SI235-1",
                    message="<IPMulticastAddress><CNAME> is not a valid domain name for use as a CNAME",
                    fragment=cname,
                    key="invalid CNAME",
                )

        other = first_child(instance, "OtherDeliveryParameters")
        if other is not None:
            check_extension(other, ExtensionLocation.OTHER_DELIVERY, errs, "SI237")

    def _validate_service_instance(self, instance: Any, service_id: str, state: ServiceListState,
                                   errs: ErrorList) -> None:
        """Check a <ServiceInstance> of a service."""
        if instance is None:
            errs.add_error(**application_error("SI000", "validate_service_instance", "instance"))
            return

        version = state.version
        specs = for_version(SERVICE_INSTANCE_SPECS, version)
        check_attributes(instance, [], SERVICE_INSTANCE_ATTRIBUTES, SERVICE_INSTANCE_ATTRIBUTES, errs, "SI005")
        check_top_elements_and_cardinality(instance, specs, [s.name for s in specs], False, errs, "SI006")

        priority = attr(instance, "priority")
        if version <= SCHEMA_R4 and priority is not None:
            try:
                negative = int(priority) < 0
            except ValueError:
                negative = False
            if negative:
                errs.add_error(
                    code="SI011",
                    message="ServiceInstance@priority should not be negative",
                    line=instance.sourceline,
                    key="negative @priority",
                )

        instance_id = attr(instance, "id")
        if instance_id is not None and len(instance_id) == 0:
            errs.add_error(
                code="SI012", message="@id should not be empty is specified",
                line=instance.sourceline, key="empty ID",
            )

        check_xml_langs("DisplayName", f"service instance in service={quote(service_id)}", instance, errs,
                        "SI010", self.stores.languages)

        control_apps = []
        for related_material in children(instance, "RelatedMaterial"):
            href = self._validate_related_material(
                related_material, f"service instance of {quote(service_id)}",
                RelatedMaterialLocation.SERVICE_INSTANCE, state, errs, "SI020",
            )
            if href and valid_service_instance_control_application(href, version):
                control_apps.append(related_material)
            if href == dvbi.APP_IN_CONTROL:
                delivery = self._delivery_parameters(instance)
                if version >= SCHEMA_R5 and delivery is not None:
                    errs.add_error(
                        type=Severity.WARNING,
                        code="SI022",
                        message="Delivery parameters are ignored when application controls media playback",
                        fragments=[related_material, delivery],
                        key="unnecessary delivery",
                    )
            elif href == dvbi.APP_SERVICE_PROVIDER:
                errs.add_error(
                    code="SI023",
                    message="Service Provider app not permitted for Service Instance",
                    fragment=related_material,
                    key="disallowed app",
                )
            if href in (dvbi.APP_IN_PARALLEL, dvbi.APP_IN_CONTROL, dvbi.APP_IN_SERIES):
                for media_locator in children(related_material, "MediaLocator"):
                    media_uri = first_child(media_locator, "MediaUri")
                    content_type = attr(media_uri, "contentType") if media_uri is not None else None
                    if content_type and self._has_service_application(instance.getparent(), href, content_type):
                        errs.add_error(
                            code="SI024",
                            message="same application type can only be signalled at the service or service "
                                    "instance level, not both",
                            fragment=related_material,
                            key="app signalling",
                            clause="A177 table 7a note 3",
                            description="Applications that are allowed to be signalled at either the service or "
                                        "service instance level shall be signalled at either one or the other "
                                        "but not both unless MediaUri@contentType is different",
                        )
        if len(control_apps) > 1:
            for app in control_apps:
                errs.add_error(
                    code="SI021",
                    message="only a single service control application can be signalled in a service instance",
                    fragment=app,
                    key="multi apps",
                )

        self._check_content_protection(instance, state, errs)

        content_attributes = first_child(instance, "ContentAttributes")
        if content_attributes is not None:
            self._check_content_attributes(content_attributes, state, errs)

        availability = first_child(instance, "Availability")
        if availability is not None:
            for period in children(availability, "Period"):
                valid_from = parse_datetime(attr(period, "validFrom"))
                valid_to = parse_datetime(attr(period, "validTo"))
                if valid_from and valid_to and valid_to < valid_from:
                    errs.add_error(
                        code="SI124",
                        message=f"invalid availability period for service {quote(service_id)}. "
                                f"{valid_from.isoformat()}>{valid_to.isoformat()}",
                        fragment=period,
                        key="period start>end",
                    )

        packages_found: Set[str] = set()
        for package in children(instance, "SubscriptionPackage"):
            package_lang = ml_language(package)
            label = localized_subscription_package(package, package_lang)
            if version >= SCHEMA_R3 and label not in state.packages:
                errs.add_error(
                    code="SI130",
                    message=f"<SubscriptionPackage> {quote(safe_get_text(package))} with language "
                            f"{quote(package_lang)} is not declared in <SubscriptionPackageList>",
                    fragment=package,
                    key="undeclared SubscriptionPackage",
                )
            if duplicated_value(packages_found, label):
                errs.add_error(
                    type=Severity.WARNING,
                    code="SI131",
                    message=f"<SubscriptionPackage> {quote(safe_get_text(package))} with language "
                            f"{quote(package_lang)} is already defined in this service instance",
                    fragment=package,
                    key="duplicate SubscriptionPackage",
                )

        self._check_source_type(instance, service_id, state, errs)

        alternate_names: Set[str] = set()
        for alt_name in children(instance, "AltServiceName"):
            if duplicated_value(alternate_names, safe_get_text(alt_name)):
                errs.add_error(
                    type=Severity.WARNING,
                    code="SI165",
                    fragment=alt_name,
                    message=f"AltServiceName={quote(safe_get_text(alt_name))} already specified in "
                            f"<ServiceInstance> of service {quote(service_id)}",
                    key="duplicate name",
                )

        self._check_delivery_parameters(instance, service_id, state, errs)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def _check_nvod(self, service: Any, nvod: Any, errs: ErrorList) -> None:
        mode = attr(nvod, "mode")
        if mode == dvbi.NVOD_MODE_REFERENCE:
            for name, code in (("reference", "SL221"), ("offset", "SL222")):
                if has_attr(nvod, name):
                    errs.add_error(
                        code=code,
                        message=f"@{name} is not permitted for NVOD@mode={quote(dvbi.NVOD_MODE_REFERENCE)}",
                        fragment=nvod,
                        key="unallowed attribute",
                    )

        if mode == dvbi.NVOD_MODE_TIMESHIFTED:
            check_attributes(nvod, ["mode", "reference"], ["offset"], NVOD_ATTRIBUTES, errs, "SL223")
            reference = attr(nvod, "reference")
            if reference:
                if not is_tag_uri(reference):
                    errs.add_error(
                        code="SL224a", message=f"{quote(reference)} is not a TAG URI",
                        fragment=nvod, key="NVOD timeshift",
                    )
                if has_non_printable_chars(reference):
                    errs.add_error(
                        code="SL224b", message="NVOD@reference contains non-ASCII characters",
                        fragment=nvod, key="NVOD timeshift",
                    )

                referred = None
                service_list = service.getparent()
                for other in children(service_list, "Service") if service_list is not None else []:
                    identifier = first_child(other, "UniqueIdentifier")
                    if identifier is not None and safe_get_text(identifier) == reference:
                        referred = other
                        break
                if referred is None:
                    errs.add_error(
                        code="SL225a",
                        message=f"no service found with <UniqueIdentifier>={quote(reference)}",
                        fragment=nvod,
                        key="NVOD timeshift",
                    )
                else:
                    referred_nvod = first_child(referred, "NVOD")
                    if referred_nvod is None:
                        errs.add_error(
                            code="SL225b", message=f"service {reference} has no <NVOD> information",
                            fragment=nvod, key="not NVOD",
                        )
                    elif attr(referred_nvod, "mode") not in (None, dvbi.NVOD_MODE_REFERENCE):
                        errs.add_error(
                            code="SL225c", message=f"service {reference} is not defined as an NVOD reference",
                            fragment=nvod, key="not NVOD",
                        )

        service_type = first_child(service, "ServiceType")
        type_href = attr(service_type, "href") if service_type is not None else None
        if type_href and not type_href.endswith(dvbi.LINEAR_SERVICE_TYPE_SUFFIX):
            errs.add_error(
                code="SL227",
                message="ServiceType@href must be linear for NVOD reference or timeshifted services",
                fragments=[nvod, service_type],
                key="invalid ServiceType",
            )

    def _check_prominence(self, prominence_list: Any, service_id: str, state: ServiceListState,
                          errs: ErrorList) -> None:
        known: Set[str] = set()
        for prominence in children(prominence_list, "Prominence"):
            region_id = attr(prominence, "region")
            country = attr(prominence, "country")
            ranking = attr(prominence, "ranking")

            region = state.regions.get(region_id) if region_id else None
            if region_id:
                if region is None:
                    errs.add_error(
                        code="SL229",
                        message=f"regionID {quote(region_id)} not specified in <RegionList>",
                        fragment=prominence,
                        key=K_INVALID_REGION,
                    )
                else:
                    region.used = True

            if country and region is not None and region.countries:
                if country not in region.countries:
                    errs.add_error(
                        code="SL230",
                        message=f"regionID {quote(region_id)} not specified for country {quote(country)} "
                                "in <RegionList>",
                        fragment=prominence,
                        key=K_INVALID_REGION,
                    )

            if country and unknown_country(self.stores.countries, country, errs, "SL232", prominence):
                errs.add_error(
                    code="SL232",
                    message=invalid_country_code(country, None, f"service {quote(service_id)}"),
                    fragment=prominence,
                    key=K_INVALID_COUNTRY_CODE,
                )

            qualifiers = " ".join(
                f"{label}:{value}" for label, value in (("country", country), ("region", region_id),
                                                        ("ranking", ranking)) if value
            )
            if duplicated_value(known, f"c:{country or '**'} re:{region_id or '**'} ra:{ranking or '**'}"):
                errs.add_error(
                    code="SL233",
                    message=f"duplicate <Prominence>{' for ' + qualifiers if qualifiers else ''}",
                    fragment=prominence,
                    key="duplicate Prominence",
                )
            if ranking and duplicated_value(known, f"c:{country or '**'} re:{region_id or '**'}"):
                pair = " ".join(
                    f"{label}:{value}" for label, value in (("country", country), ("region", region_id)) if value
                )
                errs.add_error(
                    code="SL234",
                    message=f"multiple @ranking{' for ' + pair if pair else ''}",
                    fragment=prominence,
                    key="duplicate Prominence",
                )

    def _check_parental_rating(self, parental_rating: Any, errs: ErrorList) -> None:
        found_countries: Set[str] = set()
        default_specified = False
        for minimum_age in children(parental_rating, "MinimumAge"):
            country_codes = attr(minimum_age, "countryCodes")
            if country_codes:
                for country in country_codes.upper().split(","):
                    if unknown_country(self.stores.countries, country, errs, "SL254", minimum_age):
                        errs.add_error(
                            code="SL254",
                            message=f"invalid country code ({country}) specified",
                            key=K_INVALID_COUNTRY_CODE,
                            fragment=minimum_age,
                        )
                    if duplicated_value(found_countries, country):
                        errs.add_error(
                            code="SL252",
                            message=f"duplicate country code ({country}) specified",
                            key="duplicate country",
                            fragment=minimum_age,
                            clause="A177 Table 37f",
                            description="A maximum of one MinimumAge shall be defined per country",
                        )
            elif default_specified:
                errs.add_error(
                    code="SL253",
                    key="duplicated country",
                    fragment=minimum_age,
                    message="a default minimum age is already specified for this service",
                )
            else:
                default_specified = True

    def _validate_service(self, service: Any, service_id: str, state: ServiceListState,
                          errs: ErrorList) -> None:
        """
        Check a <Service> or <TestService>.

        Args:
            service: The service element
            service_id: Fallback identifier used in messages until UniqueIdentifier is read
            state: Declarations for this document
            errs: Finding collector
        """
        if service is None:
            errs.add_error(**application_error("SV000", "validate_service", "service"))
            return

        stores = self.stores
        check_attributes(service, [], SERVICE_ATTRIBUTES, SERVICE_ATTRIBUTES, errs, "SL104")
        check_top_elements_and_cardinality(
            service, SERVICE_SPECS, [s.name for s in SERVICE_SPECS], False, errs, "SL105",
        )

        unique_id = first_child(service, "UniqueIdentifier")
        if unique_id is not None:
            service_id = safe_get_text(unique_id)
            if not valid_service_identifier(service_id):
                errs.add_error(
                    code="SL110",
                    message=f"{quote(service_id)} is not a valid service identifier",
                    fragment=unique_id,
                    key=K_INVALID_TAG,
                    description="service identifier should be a tag: URI according to IETF RFC 4151",
                )
            if service_id in state.services:
                errs.add_error(
                    code="SL111", message=f"{quote(service_id)} is not unique",
                    key="non unique id", fragment=unique_id,
                )
            state.services.append(service_id)

        for instance in children(service, "ServiceInstance"):
            self._validate_service_instance(instance, service_id, state, errs)

        target_regions: Set[str] = set()
        for target_region in children(service, "TargetRegion"):
            region_id = safe_get_text(target_region)
            region = state.regions.get(region_id)
            if region is None:
                errs.add_error(**unspecified_target_region(
                    region_id, f"service {quote(service_id)}", "SL130", target_region,
                ))
            else:
                region.used = True
            if duplicated_value(target_regions, region_id):
                errs.add_error(
                    type=Severity.WARNING,
                    code="SL131",
                    key="duplicate value",
                    message=f"duplicate value ({region_id}) specified for <TargetRegion>",
                    fragment=target_region,
                )

        check_xml_langs("ServiceName", f"service {quote(service_id)}", service, errs, "SL140", stores.languages)
        check_xml_langs("ProviderName", f"service {quote(service_id)}", service, errs, "SL141", stores.languages)

        for related_material in children(service, "RelatedMaterial"):
            self._validate_related_material(
                related_material, f"service {quote(service_id)}", RelatedMaterialLocation.SERVICE,
                state, errs, "SL150",
            )

        for genre in children(service, "ServiceGenre"):
            check_attributes(genre, ["href"], ["type"], GENRE_ATTRIBUTES, errs, "SL160")
            genre_type = attr(genre, "type")
            if genre_type and genre_type not in dvbi.ALL_GENRE_TYPES:
                errs.add_error(
                    code="SL161",
                    message=f"service {quote(service_id)} has an invalid ServiceGenre@type type {quote(genre_type)}",
                    fragment=genre,
                    key="invalid ServiceGenre@type",
                )
            genre_href = attr(genre, "href")
            if not_in_store(stores.genres, genre_href, errs, "SL162", "genre", genre):
                errs.add_error(
                    code="SL162",
                    message=f"service {quote(service_id)} has an invalid ServiceGenre@href value "
                            f"{quote(genre_href)} (must be content genre)",
                    fragment=genre,
                    key="invalid ServiceGenre@href",
                )

        service_type = first_child(service, "ServiceType")
        if service_type is not None:
            type_href = attr(service_type, "href")
            if not_in_store(stores.service_types, type_href, errs, "SL164", "service type", service_type):
                errs.add_error(
                    code="SL164",
                    message=f"service {quote(service_id)} has an invalid <ServiceType> ({type_href})",
                    fragment=service_type,
                    key="invalid ServiceType@href",
                )

        self.validate_synopsis_type(service, "ServiceDescription", [], list(dvbi.SYNOPSIS_LABELS), errs, "SL170")

        recording_info = first_child(service, "RecordingInfo")
        if recording_info is not None:
            recording_href = attr(recording_info, "href")
            if not_in_store(stores.recording_info, recording_href, errs, "SL180", "recording information",
                            recording_info):
                errs.add_error(
                    code="SL180",
                    message=f"invalid <RecordingInfo> value {quote(recording_href)} for service {service_id} "
                            f"{stores.recording_info.values_range()}",
                    fragment=recording_info,
                    key="invalid RecordingInfo@href",
                )

        source = first_child(service, "ContentGuideSource")
        if source is not None:
            self._validate_content_guide_source(
                source, f"<ContentGuideSource> in service {service_id}", state, errs, "SL190",
            )

        source_ref = first_child(service, "ContentGuideSourceRef")
        if source_ref is not None and safe_get_text(source_ref) not in state.cg_source_ids:
            errs.add_error(
                code="SL200",
                message=f"content guide reference {quote(safe_get_text(source_ref))} for service "
                        f"{quote(service_id)} not specified",
                fragment=source_ref,
                key="unspecified content guide source",
            )

        for parameters in children(service, "AdditionalServiceParameters"):
            check_extension(parameters, ExtensionLocation.SERVICE_ELEMENT, errs, "SL211")

        nvod = first_child(service, "NVOD")
        if nvod is not None:
            self._check_nvod(service, nvod, errs)

        prominence_list = first_child(service, "ProminenceList")
        if prominence_list is not None:
            self._check_prominence(prominence_list, service_id, state, errs)

        parental_rating = first_child(service, "ParentalRating")
        if parental_rating is not None:
            self._check_parental_rating(parental_rating, errs)

    # ------------------------------------------------------------------
    # Service list
    # ------------------------------------------------------------------

    def _check_language_list(self, service_list: Any, state: ServiceListState, errs: ErrorList) -> None:
        language_list = first_child(service_list, "LanguageList")
        if language_list is None:
            return
        for language in children(language_list, "Language"):
            value = safe_get_text(language).strip()
            check_language(value, language, errs, "SL030", self.stores.languages)
            check_attributes(language, [], [], AUDIO_LANGUAGE_ATTRIBUTES, errs, "SL031")
            lowered = value.lower()
            if lowered in state.languages:
                errs.add_error(
                    code="SL032",
                    message=f"language {value} is already included in <LanguageList>",
                    fragment=language,
                    key="duplicate language",
                )
            else:
                state.languages[lowered] = AnnouncedLanguage(language=lowered, element=language)

    def _check_list_target_regions(self, service_list: Any, state: ServiceListState, errs: ErrorList) -> None:
        seen: Set[str] = set()
        for target_region in children(service_list, "TargetRegion"):
            region_id = safe_get_text(target_region)
            region = state.regions.get(region_id)
            if region is None:
                errs.add_error(**unspecified_target_region(region_id, "service list", "SL051", target_region))
            elif not region.selectable:
                errs.add_error(
                    code="SL052",
                    message=f"<TargetRegion> {quote(region_id)} in <ServiceList> is not selectable",
                    fragment=target_region,
                    key="unselectable region",
                )
            else:
                region.used = True
            if duplicated_value(seen, region_id):
                errs.add_error(
                    type=Severity.WARNING,
                    code="SL053",
                    key="duplicate value",
                    message=f"duplicate value ({region_id}) specified for <TargetRegion>",
                    fragment=target_region,
                )

    def _check_lcn_tables(self, service_list: Any, state: ServiceListState, errs: ErrorList) -> None:
        """Check every <LCNTable> against the declared regions, packages and services."""
        table_list = first_child(service_list, "LCNTableList")
        if table_list is None:
            return

        version = state.version
        table_qualifiers: Set[str] = set()
        for table in children(table_list, "LCNTable"):
            target_regions: List[str] = []
            for target_region in children(table, "TargetRegion"):
                region_id = safe_get_text(target_region)
                region = state.regions.get(region_id)
                if region is None:
                    errs.add_error(
                        code="SL241",
                        message=f"<TargetRegion> {quote(region_id)} in <LCNTable> is not defined",
                        fragment=target_region,
                        key="undefined region",
                    )
                else:
                    if not region.selectable:
                        errs.add_error(
                            code="SL242",
                            message=f"<TargetRegion> {quote(region_id)} in <LCNTable> is not selectable",
                            fragment=target_region,
                            key="unselectable region",
                            description="the region ID specified in the <TargetRegion> is defined with "
                                        "@selectable=false in the <RegionList>",
                        )
                    region.used = True
                if region_id in target_regions:
                    errs.add_error(
                        code="SL243",
                        message=f"respecification of <TargetRegion>={region_id}",
                        fragment=target_region,
                        key="duplicate region",
                    )
                else:
                    target_regions.append(region_id)

            packages: List[str] = []
            for package in children(table, "SubscriptionPackage"):
                if version >= SCHEMA_R5:
                    errs.add_error(**deprecated_element(package, spec_version(SCHEMA_R5), "SL244"))
                package_language = xml_lang(package)
                if package_language is not None:
                    check_language(package_language, package, errs, "SL245", self.stores.languages)
                elif version >= SCHEMA_R3:
                    package_language = get_node_language(package, False, errs, "SL246", self.stores.languages)
                label = localized_subscription_package(package, package_language)
                if label in packages:
                    errs.add_error(
                        code="SL247",
                        message="duplicated <SubscriptionPackage>",
                        fragment=package,
                        key="duplicate package name",
                    )
                else:
                    packages.append(label)
                if version >= SCHEMA_R3 and label not in state.packages:
                    errs.add_error(
                        code="SL248",
                        message=f"<SubscriptionPackage>={quote(label)} is not declared in <SubscriptionPackageList>",
                        fragment=package,
                        key="undeclared SubscriptionPackage",
                    )

            for region_id in target_regions or [LCN_TABLE_NO_TARGET_REGION]:
                display_region = ("unspecified <TargetRegion>" if region_id == LCN_TABLE_NO_TARGET_REGION
                                  else f"<TargetRegion>={quote(region_id)}")
                for package in packages or [LCN_TABLE_NO_SUBSCRIPTION]:
                    display_package = ("unspecified <SubscriptionPackage>" if package == LCN_TABLE_NO_SUBSCRIPTION
                                       else f"<SubscriptionPackage>={quote(package)}")
                    if duplicated_value(table_qualifiers, f"{region_id}::{package}"):
                        errs.add_error(
                            code="SL251",
                            message=f"combination of {display_region} and {display_package} already used",
                            key="reused region/package",
                            line=table.sourceline,
                        )

            channel_numbers: Set[str] = set()
            for lcn in children(table, "LCN"):
                channel_number = attr(lcn, "channelNumber")
                if channel_number is not None:
                    if duplicated_value(channel_numbers, channel_number):
                        errs.add_error(
                            code="SL262",
                            message=f"duplicated channel number {channel_number} for <LCNTable>",
                            key="duplicate channel number",
                            fragment=lcn,
                        )
                    try:
                        number = int(channel_number)
                    except ValueError:
                        number = None
                    if number is not None and not dvbi.MIN_LCN <= number <= dvbi.MAX_LCN:
                        errs.add_error(
                            code="SL264",
                            message=f"Channel number must be in the range {dvbi.MIN_LCN}..{dvbi.MAX_LCN}, "
                                    f"found {number}",
                            key=K_INVALID_VALUE,
                            fragment=lcn,
                            clause="A177 table 23",
                            description="@channelNumber has the same semantics as logical_channel_number in "
                                        "ciplus_service_descriptor",
                        )

                service_ref = attr(lcn, "serviceRef")
                if service_ref is not None and service_ref not in state.services:
                    errs.add_error(
                        code="SL263",
                        message=f"LCN reference to unknown service {service_ref}",
                        key="LCN unknown services",
                        fragment=lcn,
                        clause="A177 table 23",
                        description="The value of LCN@serviceRef needs to refer to the <UniqueIdentifier> "
                                    "of a <Service>",
                    )

            for lcn_range in children(table, "LCNRange"):
                service_type = attr(lcn_range, "serviceType")
                if not_in_store(self.stores.service_types, service_type, errs, "SL265", "service type", lcn_range):
                    errs.add_error(
                        code="SL265",
                        message=f"Invalid value for LCNRange@serviceType ({service_type})",
                        fragment=lcn_range,
                        key=K_INVALID_VALUE,
                    )
                service_genre = attr(lcn_range, "serviceGenre")
                if not_in_store(self.stores.genres, service_genre, errs, "SL267", "genre", lcn_range):
                    errs.add_error(
                        code="SL267",
                        message=f"Invalid value for LCNRange@serviceGenre ({service_genre})",
                        fragment=lcn_range,
                        key=K_INVALID_VALUE,
                    )

    def _check_self_references(self, service_list: Any, element_name: str, code: str, errs: ErrorList) -> None:
        for service in children(service_list, element_name):
            guide_ref = first_child(service, "ContentGuideServiceRef")
            unique_id = first_child(service, "UniqueIdentifier")
            if guide_ref is not None and unique_id is not None and safe_get_text(guide_ref) == safe_get_text(unique_id):
                errs.add_error(
                    type=Severity.WARNING,
                    code=code,
                    message="<ContentGuideServiceRef> is self",
                    fragments=[unique_id, guide_ref],
                    key="self <ContentGuideServiceRef>",
                )

    def _report_unused(self, state: ServiceListState, errs: ErrorList) -> None:
        if state.version >= SCHEMA_R4:
            for region in state.regions.values():
                if not region.used and region.selectable:
                    errs.add_error(
                        code="SL281",
                        type=Severity.WARNING,
                        message=f"Region@regionID={quote(region.region)} is defined but not used",
                        key="unused @regionID",
                        line=region.line,
                    )

        for language in state.languages.values():
            if not language.used:
                errs.add_error(
                    code="SL282",
                    type=Severity.WARNING,
                    message=f"audio language {quote(language.language)} is defined in <LanguageList> but not used",
                    key="unused Language",
                    fragment=language.element,
                    clause="see A177 table 14",
                    description="only languages used in <AudioAttributes><AudioLanguage> should be announced "
                                "in <LanguageList>",
                )

    def _schema_verification(self, root: Any, state: ServiceListState, errs: ErrorList,
                             report_schema_version: bool) -> None:
        namespace = state.context.namespace
        schema_check(
            root, self.schemas.schema_for(namespace), self.schemas.filename_for(namespace) or
            state.context.descriptor.filename, errs, f"SL005:{state.version}",
        )
        if report_schema_version:
            schema_version_check(root, state.context.descriptor.status, errs, "SL005:")

    def _check_service_list(self, text: Any, errs: ErrorList, report_schema_version: bool) -> None:
        root = schema_load(text, errs, "SL001")
        if root is None:
            return

        if local_name(root) != "ServiceList":
            errs.add_error(
                code="SL004",
                message="Root element is not <ServiceList>",
                line=root.sourceline,
                key=K_XSD_VALIDATION,
                clause="A177 clause 5.5.1",
                description="the root element of the service list XML instance document must be <ServiceList>",
            )
            return

        namespace = namespace_of(root)
        if not namespace:
            errs.add_error(
                code="SL003",
                message="namespace is not provided for <ServiceList>",
                line=root.sourceline,
                key=K_XSD_VALIDATION,
                clause="A177 clause 5.4.1",
                description="the namespace for <ServiceList> is required to ensure appropriate syntax and "
                            "semantic checking",
            )
            return

        descriptor = get_descriptor(namespace, SL_SCHEMA_VERSIONS)
        if descriptor is None:
            errs.add_error(code="SL010", message=f"Unsupported namespace {quote(namespace)}", key=K_XSD_VALIDATION)
            return

        context = ValidationContext(namespace=namespace, prefix=root.prefix, version=descriptor.version,
                                    descriptor=descriptor)
        state = ServiceListState(context=context)
        version = state.version
        stores = self.stores
        logger.debug(f"Validating service list {descriptor.spec_version} ({namespace})")

        self._schema_verification(root, state, errs, report_schema_version)

        required = ["version"]
        if version >= SCHEMA_R3:
            required.append("lang")
        if version >= SCHEMA_R6:
            required.append("id")
        check_attributes(root, required, ["responseStatus", "schemaLocation"], SERVICE_LIST_ATTRIBUTES, errs,
                         "SL011")

        list_lang = xml_lang(root)
        if list_lang is not None:
            validate_language(list_lang, errs, "<ServiceList>", "SL012", stores.languages, line=root.sourceline)

        list_id = attr(root, "id")
        if list_id is not None and not valid_service_list_identifier(list_id):
            errs.add_error(
                code="SL016",
                message=f"{quote(list_id)} is not a valid service list identifier",
                key=K_INVALID_TAG,
                line=root.sourceline,
                clause="A177 clause 5.2.2",
                description="Service identifiers should use a registered URI scheme, such as the 'tag' URI "
                            "scheme defined in IETF RFC 4151",
            )

        for standard_version in children(root, "StandardVersion"):
            urn = safe_get_text(standard_version).strip()
            if not is_a177_specification_urn(urn):
                errs.add_error(
                    code="SL017",
                    message=f"{quote(urn)} is not a recognised URN for an A177 specification version",
                    key=K_INVALID_IDENTIFIER,
                    fragment=standard_version,
                    clause="A177 clause 4.6.1.1",
                    description="Specification URN that is used to indicate a compatible specification version "
                                "for this service list",
                )

        check_xml_langs("Name", "ServiceList", root, errs, "SL020", stores.languages)
        check_xml_langs("ProviderName", "ServiceList", root, errs, "SL021", stores.languages)

        self._check_language_list(root, state, errs)

        control_apps = 0
        for related_material in children(root, "RelatedMaterial"):
            href = self._validate_related_material(
                related_material, "service list", RelatedMaterialLocation.SERVICE_LIST, state, errs, "SL040",
            )
            if href and valid_service_control_application(href, version):
                control_apps += 1
        if control_apps > 1:
            errs.add_error(
                code="SL042",
                message="only a single service control application can be signalled in a service",
                key="multi apps",
            )

        region_list = first_child(root, "RegionList")
        if region_list is not None:
            for region in children(region_list, "Region"):
                self._add_region(region, 0, state, None, errs)

        self._check_list_target_regions(root, state, errs)

        package_list = first_child(root, "SubscriptionPackageList")
        if package_list is not None:
            for package in children(package_list, "SubscriptionPackage"):
                label = localized_subscription_package(package)
                if label in state.packages:
                    errs.add_error(
                        code="SL063",
                        message=f"duplicate subscription package definition for {quote(label)}",
                        key="duplicate subscription package",
                        fragment=package,
                    )
                else:
                    state.packages.append(label)

        source_list = first_child(root, "ContentGuideSourceList")
        if source_list is not None:
            for index, source in enumerate(children(source_list, "ContentGuideSource"), start=1):
                self._validate_content_guide_source(
                    source, f"ServiceList.ContentGuideSourceList.ContentGuideSource[{index}]", state, errs, "SL070",
                )
                cgsid = attr(source, "CGSID")
                if cgsid is not None:
                    if cgsid in state.cg_source_ids:
                        errs.add_error(
                            code="SL071",
                            message=f"duplicate ContentGuideSource@CGSID ({cgsid}) in service list",
                            key="duplicate @CGSID",
                            fragment=source,
                        )
                    else:
                        state.cg_source_ids.append(cgsid)

        list_source = first_child(root, "ContentGuideSource")
        if list_source is not None:
            self._validate_content_guide_source(list_source, "ServiceList.ContentGuideSource", state, errs, "SL080")

        for index, service in enumerate(children(root, "Service"), start=1):
            self._validate_service(service, f"service-{index}", state, errs)
        if version >= SCHEMA_R5:
            for index, test_service in enumerate(children(root, "TestService"), start=1):
                self._validate_service(test_service, f"testservice-{index}", state, errs)

        self._check_self_references(root, "Service", "SL270", errs)
        if version >= SCHEMA_R5:
            self._check_self_references(root, "TestService", "SL231", errs)

        self._check_lcn_tables(root, state, errs)
        self._report_unused(state, errs)

    def do_validate_service_list(self, text: Any, errs: ErrorList, report_schema_version: bool = True) -> None:
        """
        Validate a service list, recording findings in an existing ErrorList.

        Never raises for document content: an unexpected failure inside the
        walk is logged and recorded as an APPLICATION finding.

        Args:
            text: Service list XML as str or bytes
            errs: Finding collector
            report_schema_version: Report out of date or draft schemas
        """
        self._num_requests += 1
        if text is None:
            errs.add_error(**application_error("SL000", "do_validate_service_list", "text"))
            return
        try:
            self._check_service_list(text, errs, report_schema_version)
        except Exception as e:
            logger.exception(f"Unexpected failure while validating service list: {e}")
            errs.add_error(
                type=Severity.APPLICATION,
                code="SL999",
                message=f"validation stopped by an internal error: {e}",
                key=APPLICATION_ERROR_KEY,
            )
        logger.info(
            f"Service list validated: {errs.num_errors()} errors, {errs.num_warnings()} warnings, "
            f"{errs.num_informationals()} informationals"
        )

    def validate_service_list(self, text: Any, report_schema_version: bool = True) -> ErrorList:
        """
        Validate a service list.

        Args:
            text: Service list XML as str or bytes

        Returns:
            ErrorList with the findings
        """
        errs = ErrorList()
        self.do_validate_service_list(text, errs, report_schema_version)
        return errs
