"""
Content Guide Validation
========================

Business rule checks for DVB-I Content Guide responses: TV-Anytime
documents returned by a content guide server (ETSI TS 103 770 clause 6).

The permitted content of a response depends on the query that produced it,
so every validation names a request type:

    =============  ================================
    Request type   Response
    =============  ================================
    Time           Schedule Info (time stamp)
    NowNext        Schedule Info (now/next)
    Window         Schedule Info (window)
    ProgInfo       Program Info
    MoreEpisodes   More Episodes
    bsCategories   Box Set Categories
    bsLists        Box Set Lists
    bsContents     Box Set Contents
    =============  ================================

A document moves through the same stages as a service list:

    Parse -> ResolveSchemaVersion -> SchemaValidate -> RuleCheck -> Finalize

The rule checks walk ``<ProgramDescription>``: GroupInformationTable first,
as it declares the groups that programmes belong to, then
ProgramInformationTable, then ProgramLocationTable, which must only refer
to programmes that were described.

Usage:
    from dvbi_core.validation import CGRequestType, ContentGuideCheck

    checker = ContentGuideCheck(stores, schemas)
    errs = checker.validate_content_guide(text, CGRequestType.SCHEDULE_NOWNEXT)
    print(errs.summary())
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set
import logging

from dvbi_core import definitions as dvbi
from dvbi_core.patterns import is_crid_uri, is_dvb_locator, is_http_url, is_tag_uri, is_utc_date_time
from dvbi_core.reference.loaders import ReferenceStores
from dvbi_core.utils import is_in, parse_datetime, parse_iso_duration, un_entity
from dvbi_core.validation.accessibility import check_accessibility_attributes
from dvbi_core.validation.base import APPLICATION_ERROR_KEY, ErrorList, Severity, ValidationContext
from dvbi_core.validation.errors import (
    K_DUPLICATE_VALUE,
    K_DUPLICATED_SYNOPSIS_LENGTH,
    K_INVALID_ELEMENT,
    K_INVALID_HREF,
    K_INVALID_IDENTIFIER,
    K_INVALID_KEYWORD_TYPE,
    K_INVALID_LANGUAGE,
    K_INVALID_TAG,
    K_INVALID_URL,
    K_INVALID_VALUE,
    K_LENGTH_ERROR,
    K_MISSING_ELEMENT,
    K_MISSING_SYNOPSIS_LENGTH,
    K_PARENTAL_GUIDANCE,
    K_XSD_VALIDATION,
    application_error,
    cg_invalid_href_value,
    no_child_element,
)
from dvbi_core.validation.multilingual import NO_DOCUMENT_LANGUAGE, check_language, check_xml_langs, get_node_language
from dvbi_core.validation.related_material import validate_promotional_still_image
from dvbi_core.validation.schema_checks import (
    UNBOUNDED,
    ElementSpec,
    check_attributes,
    check_top_elements_and_cardinality,
    schema_check,
    schema_load,
    schema_version_check,
)
from dvbi_core.validation.vocabulary import not_in_store, unknown_country, unverified_value
from dvbi_core.versions import CG_SCHEMA_VERSIONS, SCHEMA_R2, SchemaRegistry, get_descriptor
from dvbi_core.xml.utils import (
    attr,
    attribute,
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
)

logger = logging.getLogger(__name__)


class CGRequestType(str, Enum):
    """Content guide queries whose responses can be validated."""

    SCHEDULE_TIME = "Time"
    SCHEDULE_NOWNEXT = "NowNext"
    SCHEDULE_WINDOW = "Window"
    PROGRAM_INFO = "ProgInfo"
    MORE_EPISODES = "MoreEpisodes"
    BOX_SET_CATEGORIES = "bsCategories"
    BOX_SET_LISTS = "bsLists"
    BOX_SET_CONTENTS = "bsContents"

    @property
    def label(self) -> str:
        labels = {
            self.SCHEDULE_TIME: "Schedule Info (time stamp)",
            self.SCHEDULE_NOWNEXT: "Schedule Info (now/next)",
            self.SCHEDULE_WINDOW: "Schedule Info (window)",
            self.PROGRAM_INFO: "Program Info",
            self.MORE_EPISODES: "More Episodes",
            self.BOX_SET_CATEGORIES: "Box Set Categories",
            self.BOX_SET_LISTS: "Box Set Lists",
            self.BOX_SET_CONTENTS: "Box Set Contents",
        }
        return labels.get(self, self.value)

    @classmethod
    def from_value(cls, value: Any) -> Optional["CGRequestType"]:
        """The request type for a query value such as 'NowNext', or None."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


SUPPORTED_REQUESTS = [{"value": request.value, "label": request.label} for request in CGRequestType]

# responses carrying a <Schedule> in ProgramLocationTable
SCHEDULE_REQUESTS = (
    CGRequestType.SCHEDULE_TIME,
    CGRequestType.SCHEDULE_NOWNEXT,
    CGRequestType.SCHEDULE_WINDOW,
    CGRequestType.PROGRAM_INFO,
)
NOW_NEXT_REQUESTS = (CGRequestType.SCHEDULE_NOWNEXT, CGRequestType.SCHEDULE_WINDOW)

# permitted numbers of programmes in each now/next group
NOW_NEXT_LIMITS = {
    CGRequestType.SCHEDULE_NOWNEXT: {dvbi.CRID_EARLIER: 0, dvbi.CRID_NOW: 1, dvbi.CRID_LATER: 1},
    CGRequestType.SCHEDULE_WINDOW: {dvbi.CRID_EARLIER: 10, dvbi.CRID_NOW: 1, dvbi.CRID_LATER: 10},
}

CATEGORY_GROUP_NAME = '"category group"'
UNSPECIFIED_COUNTRY = "*!*"
DEFAULT_SERVICE_INSTANCE = "dflt"
DEFAULT_KEYWORD_TYPE = "main"

CRID_DESCRIPTION = "format of a CRID is defined in clause 8 of ETSI TS 102 822"

# attributes the TV-Anytime schema defines for each element
SYNOPSIS_ATTRIBUTES = ["length", "lang"]
KEYWORD_ATTRIBUTES = ["type", "lang"]
MINIMUM_AGE_ATTRIBUTES: List[str] = []
PARENTAL_RATING_ATTRIBUTES = ["href"]
EXPLANATORY_TEXT_ATTRIBUTES = ["length", "lang"]
CREDITS_ITEM_ATTRIBUTES = ["role"]
HOW_RELATED_ATTRIBUTES = ["href", "metadataOrigin"]
AUXILIARY_URI_ATTRIBUTES = ["contentType"]
TITLE_ATTRIBUTES = ["type", "lang"]
PROGRAM_INFORMATION_ATTRIBUTES = ["programId", "lang", "metadataOrigin"]
MEMBER_OF_ATTRIBUTES = ["type", "index", "crid"]
EPISODE_OF_ATTRIBUTES = ["type", "index", "crid"]
GROUP_INFORMATION_ATTRIBUTES = ["groupId", "ordered", "numOfItems", "serviceIDRef", "lang"]
GROUP_TYPE_ATTRIBUTES = ["type", "value"]
ON_DEMAND_PROGRAM_ATTRIBUTES = ["serviceIDRef", "lang"]
EVENT_ATTRIBUTES = ["serviceIDRef", "lang"]
SCHEDULE_ATTRIBUTES = ["serviceIDRef", "start", "end", "lang"]
PROGRAM_ATTRIBUTES = ["crid"]
TABLE_ATTRIBUTES = ["lang"]
OTHER_IDENTIFIER_ATTRIBUTES = ["type", "organization", "authority"]

# child elements the TV-Anytime schema defines
BASIC_DESCRIPTION_ELEMENTS = [
    "Title", "MediaTitle", "ShortTitle", "Synopsis", "PromotionalInformation", "Keyword", "Genre",
    "ParentalGuidance", "Language", "CaptionLanguage", "SignLanguage", "CreditsList", "AwardsList",
    "RelatedMaterial", "ProductionDate", "ProductionLocation", "CreationCoordinates", "DepictedCoordinates",
    "ReleaseInformation", "Duration", "PurchaseList", "ContentProperties",
]
PROGRAM_INFORMATION_ELEMENTS = ["BasicDescription", "OtherIdentifier", "AVAttributes", "MemberOf", "EpisodeOf",
                                "DerivedFrom", "PartOfAggregatedProgram"]
GROUP_INFORMATION_ELEMENTS = ["GroupType", "BasicDescription", "OtherIdentifier", "MemberOf", "EpisodeOf",
                              "DerivedFrom", "SeriesOf"]

PAGINATION_URIS = (
    dvbi.PAGINATION_FIRST_URI,
    dvbi.PAGINATION_PREV_URI,
    dvbi.PAGINATION_NEXT_URI,
    dvbi.PAGINATION_LAST_URI,
)
DEFAULT_RELEASE_LOCATION = "##default##"

AV_ATTRIBUTES_ELEMENTS = ["FileFormat", "FileSize", "System", "Bitrate", "AudioAttributes", "VideoAttributes",
                          "CaptioningAttributes", "AccessibilityAttributes"]
AUDIO_ATTRIBUTES_ELEMENTS = ["Coding", "NumOfChannels", "MixType", "AudioLanguage", "SampleFrequency",
                             "BitsPerSample", "BitRate"]
VIDEO_ATTRIBUTES_ELEMENTS = ["Coding", "Scan", "HorizontalSize", "VerticalSize", "AspectRatio", "Color",
                             "FrameRate", "BitRate", "PictureFormat"]
CAPTIONING_ATTRIBUTES_ELEMENTS = ["Coding", "BitRate"]
RELATED_MATERIAL_ELEMENTS = ["HowRelated", "Format", "MediaLocator", "SegmentReference", "PromotionalText",
                             "PromotionalMedia", "SourceMediaLocator"]
MEDIA_LOCATOR_ELEMENTS = ["MediaUri", "AuxiliaryURI", "MediaData64", "MediaData16", "StreamLocator"]
INSTANCE_DESCRIPTION_ELEMENTS = ["Title", "Synopsis", "Genre", "PurchaseList", "CaptionLanguage", "SignLanguage",
                                 "AVAttributes", "MemberOf", "OtherIdentifier", "RelatedMaterial"]
ON_DEMAND_PROGRAM_ELEMENTS = ["Program", "ProgramURL", "AuxiliaryURL", "InstanceDescription", "PublishedDuration",
                              "StartOfAvailability", "EndOfAvailability", "FirstAvailability", "LastAvailability",
                              "DeliveryMode", "Free"]
EVENT_ELEMENTS = ["Program", "ProgramURL", "InstanceMetadataId", "InstanceDescription", "PublishedStartTime",
                  "PublishedEndTime", "PublishedDuration", "ActualStartTime", "ActualEndTime", "ActualDuration",
                  "Live", "Repeat", "FirstShowing", "LastShowing", "Free", "PayPerView"]
SCHEDULE_ELEMENTS = ["ScheduleEvent"]
PROGRAM_LOCATION_TABLE_ELEMENTS = ["Schedule", "BroadcastEvent", "OnDemandProgram", "OnDemandService"]
PROGRAM_DESCRIPTION_ELEMENTS = ["ProgramInformationTable", "GroupInformationTable", "ProgramLocationTable",
                                "ServiceInformationTable", "CreditsInformationTable", "ProgramReviewTable",
                                "SegmentInformationTable", "PurchaseInformationTable"]

AUDIO_LANGUAGE_ATTRIBUTES = ["purpose", "supplemental", "type"]
CODING_ATTRIBUTES = ["href"]

AUDIO_MIX_TYPES = (dvbi.AUDIO_PRESENTATION_MONO, dvbi.AUDIO_PRESENTATION_STEREO, dvbi.AUDIO_PRESENTATION_51)
CAPTION_CODINGS = (dvbi.DVB_BITMAP_SUBTITLES, dvbi.DVB_CHARACTER_SUBTITLES, dvbi.EBU_TT_D)
MEDIA_AVAILABILITY = (dvbi.MEDIA_AVAILABLE, dvbi.MEDIA_UNAVAILABLE)
EPG_AVAILABILITY = (dvbi.FORWARD_EPG_AVAILABLE, dvbi.FORWARD_EPG_UNAVAILABLE)
SCHEDULE_EVENT_IDENTIFIER_TYPES = (dvbi.CPS_INDEX_TYPE, dvbi.EIT_PROGRAMME_CRID_TYPE, dvbi.EIT_SERIES_CRID_TYPE)

K_SYNOPSIS_LENGTH = "unexpected length"
K_BAD_TIMING = "bad timing"
K_DUPLICATE_INSTANCE = "duplicate instance"
K_INVALID_CRID = "invalid CRID"

_UNSIGNED_INT_REGEX = re.compile(r"^[0-9]+$")
_AGE_REGEX = re.compile(r"^\s*(-?[0-9]+)")


@dataclass
class ContentGuideState:
    """
    Identifiers collected while walking one content guide response.

    Attributes:
        context: Namespace and schema version of the document
        request_type: The query the response answers
        program_crids: ProgramInformation@programId values, in document order
        location_crids: Program@crid values referenced from ProgramLocationTable
        group_ids: GroupInformation@groupId values, or None when groups are not checked
        child_count: numOfItems declared by the category group
        current_program_crid: The programme in the 'now' group of a now/next response
    """
    context: ValidationContext
    request_type: CGRequestType
    program_crids: List[str] = field(default_factory=list)
    location_crids: List[str] = field(default_factory=list)
    group_ids: Optional[List[str]] = None
    child_count: int = 0
    current_program_crid: Optional[str] = None

    @property
    def version(self) -> int:
        return self.context.version


def val_unsigned_int(value: Optional[str]) -> int:
    """The integer value of a string of decimal digits, or 0."""
    if value and _UNSIGNED_INT_REGEX.match(value):
        return int(value)
    return 0


def allowed_value(element: Any, attribute_name: str, allowed: Sequence[str], errs: ErrorList, code: str,
                  is_required: bool = True) -> None:
    """
    Check that an attribute holds one of a set of values.

    Args:
        element: Element carrying the attribute
        attribute_name: Local name of the attribute
        allowed: Permitted values
        errs: Finding collector
        code: Code prefix for findings
        is_required: Report a missing attribute
    """
    if element is None:
        errs.add_error(type=Severity.APPLICATION, code=f"{code}-0", message="allowed_value() called with element==None")
        return

    parent = element.getparent()
    location = f"{local_name(parent)}.{local_name(element)}" if parent is not None else local_name(element)
    value = attr(element, attribute_name)
    if value is not None:
        if value not in allowed:
            errs.add_error(
                code=f"{code}-1",
                message=f"{attribute(attribute_name, location)} must be {' or '.join(quote(v) for v in allowed)}",
                fragment=element,
            )
    elif is_required:
        errs.add_error(
            code=f"{code}-2",
            message=f"{attribute(attribute_name)} must be specified for {location}",
            fragment=element,
        )


def boolean_value(element: Any, attribute_name: str, errs: ErrorList, code: str, is_required: bool = True) -> None:
    allowed_value(element, attribute_name, ["true", "false"], errs, code, is_required)


def true_value(element: Any, attribute_name: str, errs: ErrorList, code: str, is_required: bool = True) -> None:
    allowed_value(element, attribute_name, ["true"], errs, code, is_required)


def false_value(element: Any, attribute_name: str, errs: ErrorList, code: str, is_required: bool = True) -> None:
    allowed_value(element, attribute_name, ["false"], errs, code, is_required)


def is_restart_availability(genre: Optional[str]) -> bool:
    return genre in (dvbi.RESTART_AVAILABLE, dvbi.RESTART_CHECK, dvbi.RESTART_PENDING)


def _check_name_part(element: Any, errs: ErrorList, code: str) -> None:
    if len(un_entity(safe_get_text(element))) > dvbi.MAX_NAME_PART_LENGTH:
        parent = element.getparent()
        errs.add_error(
            code=code,
            message=f"{elementize(local_name(element))} in {elementize(local_name(parent))} is longer than "
                    f"{dvbi.MAX_NAME_PART_LENGTH} characters",
            fragment=element,
            key=K_LENGTH_ERROR,
        )


def validate_name(element: Any, errs: ErrorList, code: str) -> None:
    """Check a PersonName or Character: one GivenName and at most one FamilyName."""
    if element is None:
        errs.add_error(**application_error("VN000", "validate_name", "element"))
        return

    given_names = 0
    family_names = []
    for child in child_elements(element):
        name = local_name(child)
        if name == "GivenName":
            given_names += 1
            _check_name_part(child, errs, f"{code}-2")
        elif name == "FamilyName":
            family_names.append(child)
            _check_name_part(child, errs, f"{code}-3")

    if given_names == 0:
        errs.add_error(
            code=f"{code}-4",
            message=f"{elementize('GivenName')} is mandatory in {elementize(local_name(element))}",
            line=element.sourceline,
            key=K_MISSING_ELEMENT,
        )
    if len(family_names) > 1:
        errs.add_error(
            code=f"{code}-5",
            message=f"only a single {elementize('FamilyName')} is permitted in {elementize(local_name(element))}",
            multi_element_error=family_names,
            key="multiple element",
        )


def not_crid_format(errs: ErrorList, **finding: Any) -> None:
    """Report a value that should be a CRID."""
    errs.add_error(key=K_INVALID_CRID, description=CRID_DESCRIPTION, clause="ETSI TS 102 822-4", **finding)


class ContentGuideCheck:
    """
    Validates DVB-I Content Guide responses.

    Like ServiceListCheck, the checker only holds read-only references to
    the reference stores and compiled schemas, so one instance can serve
    concurrent validations.

    Args:
        stores: Reference data used for vocabulary checks
        schemas: Compiled XSDs by namespace

    Example:
        >>> checker = ContentGuideCheck(stores, schemas)
        >>> errs = checker.validate_content_guide(text, CGRequestType.PROGRAM_INFO)
        >>> errs.is_valid
        True
    """

    supported_requests = SUPPORTED_REQUESTS

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

    @property
    def _languages(self):
        return self.stores.languages

    # ------------------------------------------------------------------
    # Shared attribute checks
    # ------------------------------------------------------------------

    @staticmethod
    def _check_tag_uri(element: Any, errs: ErrorList, code: str) -> str:
        """
        Warn when @serviceIDRef is not a TAG URI.

        Returns:
            The @serviceIDRef value, or "" when absent
        """
        service_id = attr(element, "serviceIDRef")
        if service_id is None:
            return ""
        if not is_tag_uri(service_id):
            errs.add_error(
                type=Severity.WARNING,
                code=code,
                message=f"{attribute('serviceIDRef', local_name(element))} {quote(service_id)} is not a TAG URI",
                key=K_INVALID_TAG,
                line=element.sourceline,
            )
        return service_id

    # ------------------------------------------------------------------
    # BasicDescription children
    # ------------------------------------------------------------------

    def _validate_synopsis(self, basic_description: Any, required_lengths: Sequence[str],
                           optional_lengths: Sequence[str], errs: ErrorList, code: str) -> None:
        """
        Check the <Synopsis> elements of a BasicDescription.

        Content guide responses use the short, medium and long lengths only.
        Text is measured with entity references counted as one character.
        """
        if basic_description is None:
            errs.add_error(**application_error("SY000", "_validate_synopsis", "basic_description"))
            return

        # length label -> (too long, duplicate, missing) code suffixes
        codes = {
            dvbi.SYNOPSIS_SHORT: (11, 16, 19),
            dvbi.SYNOPSIS_MEDIUM: (12, 17, 20),
            dvbi.SYNOPSIS_LONG: (13, 18, 21),
        }
        found: Set[str] = set()
        languages_seen: Dict[str, Set[str]] = {label: set() for label in codes}

        for synopsis in children(basic_description, "Synopsis"):
            check_attributes(synopsis, ["length"], ["lang"], SYNOPSIS_ATTRIBUTES, errs, f"{code}-1")
            synopsis_lang = get_node_language(synopsis, False, errs, f"{code}-2", self._languages)
            length_label = attr(synopsis, "length")
            if not length_label:
                continue

            if length_label in required_lengths or length_label in optional_lengths:
                if length_label in codes:
                    text_length = len(un_entity(safe_get_text(synopsis)))
                    maximum = dvbi.SYNOPSIS_MAX_LENGTHS[length_label]
                    if text_length > maximum:
                        errs.add_error(
                            code=f"{code}-{codes[length_label][0]}",
                            message=f"length of {attribute('length', 'Synopsis')}={quote(length_label)} exceeds "
                                    f"{maximum} characters, measured({text_length})",
                            fragment=synopsis,
                            key=K_LENGTH_ERROR,
                        )
                    found.add(length_label)
            else:
                errs.add_error(
                    code=f"{code}-14",
                    message=f"{attribute('length')}={quote(length_label)} is not permitted for this request type",
                    fragment=synopsis,
                    key=K_SYNOPSIS_LENGTH,
                )

            if synopsis_lang and length_label in codes:
                if synopsis_lang in languages_seen[length_label]:
                    errs.add_error(
                        code=f"{code}-{codes[length_label][1]}",
                        message=f"only a single {elementize('Synopsis')} is permitted per length ({length_label}) "
                                f"and language ({synopsis_lang})",
                        fragment=synopsis,
                        key=K_DUPLICATED_SYNOPSIS_LENGTH,
                    )
                else:
                    languages_seen[length_label].add(synopsis_lang)

        for label, (_, _, missing_code) in codes.items():
            if label in required_lengths and label not in found:
                errs.add_error(
                    code=f"{code}-{missing_code}",
                    message=f"a {elementize('Synopsis')} with {attribute('length')}={quote(label)} is required",
                    line=basic_description.sourceline,
                    key=K_MISSING_SYNOPSIS_LENGTH,
                )

    def _validate_keyword(self, basic_description: Any, min_keywords: int, max_keywords: int,
                          errs: ErrorList, code: str) -> None:
        if basic_description is None:
            errs.add_error(**application_error("KW000", "_validate_keyword", "basic_description"))
            return

        by_language: Dict[str, List[Any]] = {}
        for keyword in children(basic_description, "Keyword"):
            check_attributes(keyword, [], ["lang", "type"], KEYWORD_ATTRIBUTES, errs, f"{code}-1")
            keyword_type = attr(keyword, "type", DEFAULT_KEYWORD_TYPE)
            keyword_lang = get_node_language(keyword, False, errs, f"{code}-2", self._languages)
            by_language.setdefault(keyword_lang, []).append(keyword)

            if keyword_type not in dvbi.KEYWORD_TYPES:
                errs.add_error(
                    code=f"{code}-11",
                    message=f"{attribute('type')}={quote(keyword_type)} not permitted for {elementize('Keyword')}",
                    fragment=keyword,
                    key=K_INVALID_KEYWORD_TYPE,
                )
            if len(un_entity(safe_get_text(keyword))) > dvbi.MAX_KEYWORD_LENGTH:
                errs.add_error(
                    code=f"{code}-12",
                    message=f"length of {elementize('Keyword')} is greater than {dvbi.MAX_KEYWORD_LENGTH}",
                    fragment=keyword,
                    key=K_INVALID_KEYWORD_TYPE,
                )

        for language, keywords in by_language.items():
            if len(keywords) > max_keywords:
                plural = "s" if max_keywords > 1 else ""
                which = "" if language == NO_DOCUMENT_LANGUAGE else f" for language {quote(language)}"
                errs.add_error(
                    code=f"{code}-13",
                    message=f"More than {max_keywords} {elementize('Keyword')} element{plural} specified{which}",
                    multi_element_error=keywords,
                    key="excess keywords",
                )

    def _validate_genre(self, basic_description: Any, errs: ErrorList, code: str) -> None:
        if basic_description is None:
            errs.add_error(**application_error("GE000", "_validate_genre", "basic_description"))
            return

        genres = self.stores.genres
        for genre in children(basic_description, "Genre"):
            genre_type = attr(genre, "type", dvbi.GENRE_TYPE_MAIN)
            if genre_type != dvbi.GENRE_TYPE_MAIN:
                errs.add_error(
                    code=f"{code}-1",
                    message=f"{attribute('type', 'Genre')}={quote(genre_type)} not permitted for "
                            f"{elementize('Genre')}",
                    fragment=genre,
                    key="disallowed genre type",
                    clause="A177 clause 6.10.5",
                    description=f"{attribute('type', 'Genre')} must be {quote(dvbi.GENRE_TYPE_MAIN)}, semantic "
                                f"definitions of {elementize('Genre')}",
                )

            value = attr(genre, "href", "")
            if not_in_store(genres, value, errs, f"{code}-2", "genre", genre):
                errs.add_error(
                    code=f"{code}-2",
                    message=f"invalid {attribute('href')} value {quote(value)} for {elementize('Genre')}",
                    fragment=genre,
                    key="invalid genre",
                    clause="A177 clause 6.10.5",
                    description=f"The value of {attribute('href', 'Genre')} must be as specified in the semantic "
                                f"definitions of {elementize('Genre')}",
                )

    def _validate_parental_guidance(self, basic_description: Any, errs: ErrorList, code: str) -> None:
        """
        Check the <ParentalGuidance> elements of a BasicDescription.

        Each country, or the unspecified country when <CountryCodes> is
        absent, can have one MinimumAge and one ParentalRating, and a
        ParentalRating needs a MinimumAge for the same country.
        """
        if basic_description is None:
            errs.add_error(**application_error("PG000", "_validate_parental_guidance", "basic_description"))
            return

        countries = self.stores.countries
        ratings = self.stores.ratings
        # country -> {"MinimumAge": element, "ParentalRating": element}
        found_countries: Dict[str, Dict[str, Any]] = {}

        for guidance in children(basic_description, "ParentalGuidance"):
            country_codes = first_child(guidance, "CountryCodes")
            listed = safe_get_text(country_codes) if country_codes is not None else UNSPECIFIED_COUNTRY

            for country in listed.split(","):
                this_country = found_countries.setdefault(country, {"MinimumAge": None, "ParentalRating": None})
                which = "" if country == UNSPECIFIED_COUNTRY else f"({country})"

                if country != UNSPECIFIED_COUNTRY \
                        and unknown_country(countries, country, errs, f"{code}-5", country_codes,
                                           case_sensitive=True):
                    errs.add_error(
                        code=f"{code}-5",
                        message=f"invalid country code ({country}) specified",
                        fragment=country_codes,
                        key=K_PARENTAL_GUIDANCE,
                    )

                for child in child_elements(guidance):
                    name = local_name(child)
                    if name == "MinimumAge":
                        check_attributes(child, [], [], MINIMUM_AGE_ATTRIBUTES, errs, f"{code}-10")
                        if this_country["MinimumAge"] is not None:
                            errs.add_error(
                                code=f"{code}-11",
                                message=f"only a single {elementize('ParentalGuidance')} containing "
                                        f"{elementize('MinimumAge')} can be specified per country {which}",
                                fragment=child,
                                key=K_PARENTAL_GUIDANCE,
                            )
                        this_country["MinimumAge"] = child
                        match = _AGE_REGEX.match(safe_get_text(child))
                        if match:
                            age = int(match.group(1))
                            if (age < dvbi.MIN_PARENTAL_AGE or age > dvbi.MAX_PARENTAL_AGE) \
                                    and age != dvbi.NO_PARENTAL_RATING:
                                errs.add_error(
                                    code=f"{code}-12",
                                    message=f"value of {elementize('MinimumAge')} must be between "
                                            f"{dvbi.MIN_PARENTAL_AGE} and {dvbi.MAX_PARENTAL_AGE} (to align with "
                                            f"parental_rating_descriptor) or be {dvbi.NO_PARENTAL_RATING}",
                                    fragment=child,
                                    key=K_PARENTAL_GUIDANCE,
                                )
                    elif name == "ParentalRating":
                        check_attributes(child, ["href"], [], PARENTAL_RATING_ATTRIBUTES, errs, f"{code}-20")
                        if this_country["ParentalRating"] is not None:
                            errs.add_error(
                                code=f"{code}-21",
                                message=f"only a single {elementize('ParentalGuidance')} containing "
                                        f"{elementize('ParentalRating')} can be specified per country {which}",
                                fragment=child,
                                key=K_PARENTAL_GUIDANCE,
                            )
                        rating = attr(child, "href")
                        if rating:
                            if ratings.is_empty():
                                errs.add_error(**unverified_value(rating, "parental rating", f"{code}-22", child))
                            elif ratings.has_scheme(rating):
                                if not ratings.is_in(rating):
                                    errs.add_error(
                                        code=f"{code}-22",
                                        message=f"invalid rating term {quote(rating)}",
                                        fragment=child,
                                        key=K_PARENTAL_GUIDANCE,
                                    )
                            else:
                                errs.add_error(
                                    type=Severity.WARNING,
                                    code=f"{code}-23",
                                    message="foreign (non DVB or TVA) parental rating scheme used",
                                    fragment=child,
                                    key=K_PARENTAL_GUIDANCE,
                                )
                            if rating.startswith(dvbi.DTG_CONTENT_WARNING_CS) \
                                    and not has_child(guidance, "ExplanatoryText"):
                                errs.add_error(
                                    code=f"{code}-24",
                                    message=f"{elementize('ExplanatoryText')} is required for DTGContentWarningCS",
                                    fragment=guidance,
                                    key=K_PARENTAL_GUIDANCE,
                                )
                        this_country["ParentalRating"] = child
                    elif name == "ExplanatoryText":
                        check_attributes(child, ["length"], ["lang"], EXPLANATORY_TEXT_ATTRIBUTES, errs,
                                         f"{code}-30")
                        length = attr(child, "length")
                        if length is not None and length != dvbi.EXPLANATORY_TEXT_LENGTH:
                            errs.add_error(
                                code=f"{code}-31",
                                message=f"{attribute('length')}={quote(length)} is not allowed for "
                                        f"{elementize('ExplanatoryText')}",
                                fragment=child,
                                key=K_LENGTH_ERROR,
                            )
                        if len(un_entity(safe_get_text(child))) > dvbi.MAX_EXPLANATORY_TEXT_LENGTH:
                            errs.add_error(
                                code=f"{code}-32",
                                message=f"length of {elementize('ExplanatoryText')} cannot exceed "
                                        f"{dvbi.MAX_EXPLANATORY_TEXT_LENGTH} characters",
                                fragment=child,
                                key=K_LENGTH_ERROR,
                            )
                check_xml_langs("ExplanatoryText", f"{local_name(basic_description)}.ParentalGuidance", guidance,
                                errs, f"{code}-50", self._languages)

        for country, found in found_countries.items():
            if found["ParentalRating"] is not None and found["MinimumAge"] is None:
                which = "default country" if country == UNSPECIFIED_COUNTRY else country
                errs.add_error(
                    code=f"{code}-60",
                    message=f"a {elementize('ParentalGuidance')} element containing {elementize('MinimumAge')} is "
                            f"not specified for {which}",
                    fragment=found["ParentalRating"],
                    key=K_PARENTAL_GUIDANCE,
                    clause="A177 table 61",
                    description="Mandatory for the first ParentalGuidance element defined",
                )

    def _validate_credits_list(self, basic_description: Any, errs: ErrorList, code: str) -> None:
        if basic_description is None:
            errs.add_error(**application_error("CL000", "_validate_credits_list", "basic_description"))
            return

        credits_list = first_child(basic_description, "CreditsList")
        if credits_list is None:
            return

        roles = self.stores.credits_roles
        credits_items = children(credits_list, "CreditsItem")
        for item in credits_items:
            check_attributes(item, ["role"], [], CREDITS_ITEM_ATTRIBUTES, errs, f"{code}-1")
            role = attr(item, "role")
            if not_in_store(roles, role, errs, f"{code}-2", "credits role", item):
                errs.add_error(
                    code=f"{code}-2",
                    message=f"{quote(role)} is not valid for {attribute('role', 'CreditsItem')}",
                    fragment=item,
                    key=K_INVALID_VALUE,
                )

            person_names, characters, organizations = [], [], []
            for child in child_elements(item):
                name = local_name(child)
                if name == "PersonName":
                    person_names.append(child)
                    validate_name(child, errs, f"{code}-11")
                    check_xml_langs("GivenName", "PersonName", child, errs, f"{code}-12", self._languages)
                    check_xml_langs("FamilyName", "PersonName", child, errs, f"{code}-13", self._languages)
                elif name == "Character":
                    characters.append(child)
                    validate_name(child, errs, f"{code}-21")
                    check_xml_langs("GivenName", "Character", child, errs, f"{code}-22", self._languages)
                    check_xml_langs("FamilyName", "Character", child, errs, f"{code}-23", self._languages)
                elif name == "OrganizationName":
                    organizations.append(child)
                    if len(un_entity(safe_get_text(child))) > dvbi.MAX_ORGANIZATION_NAME_LENGTH:
                        errs.add_error(
                            code=f"{code}-31",
                            message=f"length of {elementize('OrganizationName')} in {elementize('CreditsItem')} "
                                    f"exceeds {dvbi.MAX_ORGANIZATION_NAME_LENGTH} characters",
                            fragment=child,
                            key=K_LENGTH_ERROR,
                        )
                else:
                    errs.add_error(
                        code=f"{code}-91",
                        message=f"extra element {elementize(name)} found in {elementize('CreditsItem')}",
                        fragment=child,
                        key="unexpected element",
                    )

            check_xml_langs("OrganizationName", "CreditsItem", item, errs, f"{code}-14", self._languages)
            for found, element_name, number in ((person_names, "PersonName", 51), (characters, "Character", 52),
                                                (organizations, "OrganizationName", 53)):
                if len(found) > 1:
                    errs.add_error(
                        code=f"{code}-{number}",
                        message=f"only a single {elementize(element_name)} is permitted in "
                                f"{elementize('CreditsItem')}",
                        multi_element_error=found,
                        key=K_INVALID_ELEMENT,
                    )
            if characters and not person_names:
                errs.add_error(
                    code=f"{code}-54",
                    message=f"{elementize('Character')} in {elementize('CreditsItem')} requires "
                            f"{elementize('PersonName')}",
                    line=item.sourceline,
                    key=K_INVALID_ELEMENT,
                )
            if organizations and (person_names or characters):
                errs.add_error(
                    code=f"{code}-55",
                    message=f"{elementize('OrganizationName')} can only be present when {elementize('PersonName')} "
                            f"and {elementize('Character')} are absent in {elementize('CreditsItem')}",
                    line=item.sourceline,
                    key=K_INVALID_ELEMENT,
                )

        if len(credits_items) > dvbi.MAX_CREDITS_ITEMS:
            errs.add_error(
                code=f"{code}-16",
                message=f"a maximum of {dvbi.MAX_CREDITS_ITEMS} {elementize('CreditsItem')} elements are permitted "
                        f"in {elementize('CreditsList')}",
                line=credits_list.sourceline,
                key=f"excess {elementize('CreditsItem')}",
            )

    def _validate_title(self, containing_node: Any, allow_secondary: bool, type_is_required: bool,
                        errs: ErrorList, code: str) -> None:
        """
        Check the <Title> elements of a description.

        Only main and secondary titles are used, one of each per language,
        and a secondary title needs a main title in the same language.
        """
        if containing_node is None:
            errs.add_error(**application_error("VT000", "_validate_title", "containing_node"))
            return

        required = ["type"] if type_is_required else []
        optional = ["lang"] if type_is_required else ["lang", "type"]
        main_titles: Dict[str, Any] = {}
        secondary_titles: Dict[str, Any] = {}

        for title in children(containing_node, "Title"):
            check_attributes(title, required, optional, TITLE_ATTRIBUTES, errs, f"{code}-1")
            title_type = attr(title, "type", dvbi.TITLE_TYPE_MAIN)
            title_lang = get_node_language(title, False, errs, f"{code}-2", self._languages)

            if len(un_entity(safe_get_text(title))) > dvbi.MAX_TITLE_LENGTH:
                errs.add_error(
                    code=f"{code}-11",
                    message=f"{elementize('Title')} length exceeds {dvbi.MAX_TITLE_LENGTH} characters",
                    fragment=title,
                    key=K_LENGTH_ERROR,
                    description="refer clause 6.10.5 in A177",
                )

            if title_type == dvbi.TITLE_TYPE_MAIN:
                if title_lang in main_titles:
                    errs.add_error(
                        code=f"{code}-12",
                        message=f"only a single language ({title_lang}) is permitted for "
                                f"{attribute('type', 'Title')}={quote(dvbi.TITLE_TYPE_MAIN)}",
                        fragment=title,
                    )
                else:
                    main_titles[title_lang] = title
            elif title_type == dvbi.TITLE_TYPE_SECONDARY:
                if not allow_secondary:
                    errs.add_error(
                        code=f"{code}-14",
                        message=f"{attribute('type', 'Title')}={quote(dvbi.TITLE_TYPE_SECONDARY)} is not permitted "
                                f"for this {elementize(local_name(containing_node))}",
                        fragment=title,
                    )
                elif title_lang in secondary_titles:
                    errs.add_error(
                        code=f"{code}-13",
                        message=f"only a single language ({title_lang}) is permitted for "
                                f"{attribute('type', 'Title')}={quote(dvbi.TITLE_TYPE_SECONDARY)}",
                        fragment=title,
                    )
                else:
                    secondary_titles[title_lang] = title
            else:
                errs.add_error(
                    code=f"{code}-15",
                    message=f"{attribute('type')} must be {quote(dvbi.TITLE_TYPE_MAIN)} or "
                            f"{quote(dvbi.TITLE_TYPE_SECONDARY)} for {elementize('Title')}",
                    fragment=title,
                    description="refer to the relevant subsection of clause 6.10.5 in A177",
                )

        for title_lang, title in secondary_titles.items():
            if title_lang not in main_titles:
                where = "" if title_lang == NO_DOCUMENT_LANGUAGE else f" for @xml:lang={quote(title_lang)}"
                errs.add_error(
                    code=f"{code}-16",
                    message=f"{attribute('type')}={quote(dvbi.TITLE_TYPE_SECONDARY)} specified without "
                            f"{attribute('type')}={quote(dvbi.TITLE_TYPE_MAIN)}{where}",
                    fragment=title,
                )

    @staticmethod
    def _validate_release_information(basic_description: Any, errs: ErrorList, code: str) -> None:
        if basic_description is None:
            errs.add_error(**application_error("RI000", "_validate_release_information", "basic_description"))
            return

        locations: Set[str] = set()
        for release in children(basic_description, "ReleaseInformation"):
            location = first_child(release, "ReleaseLocation")
            if location is None and not has_child(release, "ReleaseDate"):
                errs.add_error(
                    type=Severity.WARNING,
                    code=f"{code}-11",
                    message=f"{elementize('ReleaseDate')} and/or {elementize('ReleaseLocation')} should be specified",
                    fragment=release,
                    key="empty element",
                )
                continue

            release_location = safe_get_text(location) if location is not None else DEFAULT_RELEASE_LOCATION
            if release_location in locations:
                if release_location == DEFAULT_RELEASE_LOCATION:
                    message = "ReleaseInformation for all regions already specified."
                else:
                    message = f"ReleaseInformation for region {quote(release_location)} already specified."
                errs.add_error(
                    type=Severity.WARNING,
                    code=f"{code}-21",
                    message=message,
                    fragment=location if location is not None else release,
                    key="duplicate release location",
                )
            else:
                locations.add(release_location)

    # ------------------------------------------------------------------
    # RelatedMaterial
    # ------------------------------------------------------------------

    def _validate_promotional_still_images(self, basic_description: Any, errs: ErrorList, code: str = "RMPSI001",
                                           skip_pagination: bool = False) -> None:
        if basic_description is None:
            errs.add_error(**application_error("RMPSI000", "_validate_promotional_still_images", "basic_description"))
            return
        for related_material in children(basic_description, "RelatedMaterial"):
            if skip_pagination and attr(first_child(related_material, "HowRelated"), "href") in PAGINATION_URIS:
                continue
            validate_promotional_still_image(related_material, elementize(local_name(basic_description)), errs,
                                             code, self._languages)

    @staticmethod
    def _validate_pagination(basic_description: Any, location: str, errs: ErrorList) -> None:
        """
        Check the pagination links of a description.

        At most one of each of first, previous, next and last may be given,
        and either none, two or all four must be present. A pair may not be
        previous and last, or first and next.
        """
        if basic_description is None:
            errs.add_error(**application_error("VP000", "_validate_pagination", "basic_description"))
            return

        links: Dict[str, List[Any]] = {uri: [] for uri in PAGINATION_URIS}
        for related_material in children(basic_description, "RelatedMaterial"):
            how_related = first_child(related_material, "HowRelated")
            if how_related is None:
                errs.add_error(**no_child_element(elementize("HowRelated"), related_material, location, "VP001"))
                continue

            check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, "VP002")
            href = attr(how_related, "href")
            if href not in links:
                continue
            links[href].append(how_related)

            media_uri = first_child(first_child(related_material, "MediaLocator"), "MediaUri")
            if media_uri is None:
                errs.add_error(
                    code="VP010",
                    message=f"{elementize('MediaLocator')}{elementize('MediaUri')} not specified for pagination link",
                    fragment=related_material,
                    key=K_MISSING_ELEMENT,
                )
            elif not is_http_url(safe_get_text(media_uri).strip()):
                errs.add_error(
                    code="VP015",
                    message=f"{elementize('MediaUri')}={quote(safe_get_text(media_uri))} is not a valid Pagination URL",
                    fragment=media_uri,
                    key=K_INVALID_URL,
                )

        first = links[dvbi.PAGINATION_FIRST_URI]
        prev = links[dvbi.PAGINATION_PREV_URI]
        next_ = links[dvbi.PAGINATION_NEXT_URI]
        last = links[dvbi.PAGINATION_LAST_URI]

        count_errors = False
        for found, label, number in ((first, "first", 11), (prev, "previous", 12), (next_, "next", 13),
                                     (last, "last", 14)):
            if len(found) > 1:
                errs.add_error(
                    code=f"VP0{number}",
                    message=f"more than 1 {quote(label + ' pagination')} link is specified",
                    multi_element_error=found,
                    key="pagination",
                )
                count_errors = True
        if count_errors:
            return

        total = len(first) + len(prev) + len(next_) + len(last)
        if total not in (0, 2, 4):
            errs.add_error(
                code="VP020",
                message=f"only 0, 2 or 4 paginations links may be signalled in {elementize('RelatedMaterial')} "
                        f"elements for {location}",
                multi_element_error=first + prev + next_ + last,
                key="pagination",
            )
        elif total == 2:
            if len(prev) == 1 and len(last) == 1:
                errs.add_error(
                    code="VP021",
                    message='"previous" and "last" links cannot be specified alone',
                    multi_element_error=prev + last,
                    key="pagination",
                )
            if len(first) == 1 and len(next_) == 1:
                errs.add_error(
                    code="VP022",
                    message='"first" and "next" links cannot be specified alone',
                    multi_element_error=first + next_,
                    key="pagination",
                )

    def _validate_more_episodes_related_material(self, basic_description: Any, errs: ErrorList) -> None:
        if basic_description is None:
            errs.add_error(**application_error("RMME000", "_validate_more_episodes_related_material",
                                               "basic_description"))
            return
        parent_name = local_name(basic_description.getparent())
        if parent_name == "ProgramInformation":
            for related_material in children(basic_description, "RelatedMaterial"):
                validate_promotional_still_image(related_material, local_name(basic_description), errs, "RMME001",
                                                 self._languages)
        elif parent_name == "GroupInformation":
            self._validate_pagination(basic_description, "More Episodes", errs)

    @staticmethod
    def _validate_template_ait(related_material: Any, location: str, errs: ErrorList) -> None:
        """Check a RelatedMaterial signalling the template XML AIT of a box set."""
        if related_material is None:
            errs.add_error(**application_error("TA000", "_validate_template_ait", "related_material"))
            return

        how_related = first_child(related_material, "HowRelated")
        if how_related is None:
            errs.add_error(**no_child_element(elementize("HowRelated"), related_material, location, "TA001"))
            return

        check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, "TA002")
        href = attr(how_related, "href")
        if href is None:
            return
        if href != dvbi.TEMPLATE_AIT_URI:
            errs.add_error(
                code="TA003",
                message=f"{attribute('href', 'HowRelated')}={quote(href)} does not designate a Template AIT",
                fragment=how_related,
                key="not template AIT",
            )
            return

        media_locators = children(related_material, "MediaLocator")
        if not media_locators:
            errs.add_error(**no_child_element(elementize("MediaLocator"), related_material, location, "TA013"))
            return
        for media_locator in media_locators:
            auxiliary_uris = children(media_locator, "AuxiliaryURI")
            for auxiliary_uri in auxiliary_uris:
                check_attributes(auxiliary_uri, ["contentType"], [], AUXILIARY_URI_ATTRIBUTES, errs, "TA010")
                content_type = attr(auxiliary_uri, "contentType")
                if content_type and content_type != dvbi.XML_AIT_CONTENT_TYPE:
                    errs.add_error(
                        code="TA011",
                        message=f"invalid {attribute('contentType')}={quote(content_type)} specified for "
                                f"{elementize(local_name(related_material))}{elementize('MediaLocator')} in {location}",
                        fragment=auxiliary_uri,
                        key=K_INVALID_VALUE,
                    )
            if not auxiliary_uris:
                errs.add_error(**no_child_element(elementize("AuxiliaryURI"), media_locator, location, "TA012"))

    def _validate_box_set_list_related_material(self, basic_description: Any, errs: ErrorList) -> None:
        """RelatedMaterial of a box set in a Box Set Lists response: one template AIT, at most one image."""
        if basic_description is None:
            errs.add_error(**application_error("MB000", "_validate_box_set_list_related_material",
                                               "basic_description"))
            return

        images, template_aits = [], []
        has_pagination = False
        location = elementize(local_name(basic_description))
        for related_material in children(basic_description, "RelatedMaterial"):
            how_related = first_child(related_material, "HowRelated")
            if how_related is None:
                errs.add_error(**no_child_element(elementize("HowRelated"), related_material, None, "MB009"))
                continue
            check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, "MB010")
            href = attr(how_related, "href")
            if href is None:
                continue
            if href == dvbi.TEMPLATE_AIT_URI:
                template_aits.append(how_related)
                self._validate_template_ait(related_material, location, errs)
            elif href in PAGINATION_URIS:
                has_pagination = True
            elif href == dvbi.PROMOTIONAL_STILL_IMAGE_URI:
                images.append(how_related)
                validate_promotional_still_image(related_material, location, errs, "MB012", self._languages)
            else:
                errs.add_error(**cg_invalid_href_value(
                    href, how_related, f"{elementize('RelatedMaterial')} in Box Set List", "MB011",
                ))

        if not template_aits:
            errs.add_error(
                code="MB021",
                message=f"a {elementize('RelatedMaterial')} element signalling the Template XML AIT must be "
                        f"specified for a Box Set List",
                line=basic_description.sourceline,
                key=K_MISSING_ELEMENT,
            )
        if len(template_aits) > 1:
            errs.add_error(
                code="MB022",
                message=f"only one {elementize('RelatedMaterial')} element signalling the Template XML AIT can be "
                        f"specified for a Box Set List",
                multi_element_error=template_aits,
                key=K_INVALID_ELEMENT,
            )
        if len(images) > 1:
            errs.add_error(
                code="MB023",
                message=f"only one {elementize('RelatedMaterial')} element signalling the promotional still image "
                        f"can be specified for a Box Set List",
                multi_element_error=images,
                key=K_INVALID_ELEMENT,
            )
        if has_pagination:
            self._validate_pagination(basic_description, "Box Set List", errs)

    def _validate_box_set_contents_related_material(self, basic_description: Any, errs: ErrorList) -> None:
        """RelatedMaterial of the box set in a Box Set Contents response: no template AIT, at most one image."""
        if basic_description is None:
            errs.add_error(**application_error("MC000", "_validate_box_set_contents_related_material",
                                               "basic_description"))
            return

        images = []
        has_pagination = False
        location = elementize(local_name(basic_description))
        for related_material in children(basic_description, "RelatedMaterial"):
            how_related = first_child(related_material, "HowRelated")
            if how_related is None:
                errs.add_error(**no_child_element(elementize("HowRelated"), related_material, None, "MC009"))
                continue
            check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, "MC010")
            href = attr(how_related, "href")
            if href is None:
                continue
            if href == dvbi.TEMPLATE_AIT_URI:
                errs.add_error(
                    code="MC013",
                    message=f"{elementize('RelatedMaterial')} for TemplateAIT is not allowed in Box Set Contents "
                            f"responses",
                    fragment=related_material,
                    key=K_INVALID_HREF,
                    clause="A177r8 Table 47a",
                )
            elif href in PAGINATION_URIS:
                has_pagination = True
            elif href == dvbi.PROMOTIONAL_STILL_IMAGE_URI:
                images.append(how_related)
                validate_promotional_still_image(related_material, location, errs, "MC012", self._languages)
            else:
                errs.add_error(**cg_invalid_href_value(
                    href, how_related, f"{elementize('RelatedMaterial')} in Box Set Contents", "MC011",
                ))

        if len(images) > 1:
            errs.add_error(
                code="MC023",
                message=f"only one {elementize('RelatedMaterial')} element signalling the promotional still image "
                        f"can be specified for Box Set Contents",
                multi_element_error=images,
                key=K_INVALID_ELEMENT,
            )
        if has_pagination:
            self._validate_pagination(basic_description, "Box Set Contents", errs)

    # ------------------------------------------------------------------
    # BasicDescription
    # ------------------------------------------------------------------

    def _validate_basic_description(self, parent: Any, state: ContentGuideState, category_group: Any,
                                    errs: ErrorList) -> None:
        """
        Check the <BasicDescription> of a ProgramInformation or GroupInformation.

        The permitted children, and the rules applied to them, depend on the
        request type and on whether the parent is the category group.
        """
        if parent is None:
            errs.add_error(**application_error("BD000", "_validate_basic_description", "parent"))
            return

        is_parent_group = category_group is not None and parent is category_group
        basic_description = first_child(parent, "BasicDescription")
        if basic_description is None:
            errs.add_error(**no_child_element(elementize("BasicDescription"), parent, None, "BD001"))
            return

        request_type = state.request_type
        parent_name = local_name(parent)

        def cardinality(specs: List[ElementSpec], code: str) -> None:
            check_top_elements_and_cardinality(basic_description, specs, BASIC_DESCRIPTION_ELEMENTS, False, errs,
                                               code)

        if parent_name == "ProgramInformation":
            if request_type in (CGRequestType.SCHEDULE_NOWNEXT, CGRequestType.SCHEDULE_WINDOW,
                                CGRequestType.SCHEDULE_TIME):
                cardinality([
                    ElementSpec("Title", max_occurs=UNBOUNDED),
                    ElementSpec("Synopsis", max_occurs=UNBOUNDED),
                    ElementSpec("Genre", min_occurs=0),
                    ElementSpec("ParentalGuidance", 0, UNBOUNDED),
                    ElementSpec("RelatedMaterial", min_occurs=0),
                ], "BD010")
                self._validate_title(basic_description, True, True, errs, "BD011")
                self._validate_synopsis(basic_description, [dvbi.SYNOPSIS_MEDIUM], [dvbi.SYNOPSIS_SHORT], errs,
                                        "BD012")
                self._validate_genre(basic_description, errs, "BD013")
                self._validate_parental_guidance(basic_description, errs, "BD014")
                self._validate_promotional_still_images(basic_description, errs)
            elif request_type == CGRequestType.PROGRAM_INFO:
                cardinality([
                    ElementSpec("Title", max_occurs=UNBOUNDED),
                    ElementSpec("Synopsis", max_occurs=UNBOUNDED),
                    ElementSpec("Keyword", 0, UNBOUNDED),
                    ElementSpec("Genre", min_occurs=0),
                    ElementSpec("ParentalGuidance", 0, UNBOUNDED),
                    ElementSpec("CreditsList", min_occurs=0),
                    ElementSpec("RelatedMaterial", min_occurs=0),
                    ElementSpec("ReleaseInformation", 0, UNBOUNDED),
                ], "BD020")
                self._validate_title(basic_description, True, True, errs, "BD021")
                self._validate_synopsis(basic_description, [dvbi.SYNOPSIS_MEDIUM],
                                        [dvbi.SYNOPSIS_SHORT, dvbi.SYNOPSIS_LONG], errs, "BD022")
                self._validate_keyword(basic_description, 0, dvbi.MAX_KEYWORDS_PER_LANGUAGE, errs, "BD023")
                self._validate_genre(basic_description, errs, "BD024")
                self._validate_parental_guidance(basic_description, errs, "BD025")
                self._validate_credits_list(basic_description, errs, "BD026")
                self._validate_promotional_still_images(basic_description, errs)
                self._validate_release_information(basic_description, errs, "BD027")
            elif request_type == CGRequestType.BOX_SET_CONTENTS:
                cardinality([
                    ElementSpec("Title", max_occurs=UNBOUNDED),
                    ElementSpec("Synopsis", 0, UNBOUNDED),
                    ElementSpec("ParentalGuidance", 0, UNBOUNDED),
                    ElementSpec("RelatedMaterial", min_occurs=0),
                    ElementSpec("ReleaseInformation", 0, UNBOUNDED),
                ], "BD030")
                self._validate_title(basic_description, True, True, errs, "BD031")
                self._validate_synopsis(basic_description, [], [dvbi.SYNOPSIS_MEDIUM], errs, "BD032")
                self._validate_parental_guidance(basic_description, errs, "BD033")
                self._validate_promotional_still_images(basic_description, errs, skip_pagination=True)
                self._validate_pagination(basic_description, "Box Set Contents", errs)
                self._validate_release_information(basic_description, errs, "BD034")
            elif request_type == CGRequestType.MORE_EPISODES:
                cardinality([
                    ElementSpec("Title", max_occurs=UNBOUNDED),
                    ElementSpec("RelatedMaterial", min_occurs=0),
                ], "BD040")
                self._validate_title(basic_description, True, True, errs, "BD041")
                self._validate_more_episodes_related_material(basic_description, errs)
            else:
                errs.add_error(
                    type=Severity.APPLICATION,
                    code="BD050",
                    message=f"_validate_basic_description() called with invalid requestType/element "
                            f"({request_type.value}/{parent_name})",
                )

        elif parent_name == "GroupInformation":
            if request_type in (CGRequestType.SCHEDULE_NOWNEXT, CGRequestType.SCHEDULE_WINDOW,
                                CGRequestType.SCHEDULE_TIME):
                cardinality([], "BD050")
            elif request_type == CGRequestType.BOX_SET_CONTENTS:
                cardinality([
                    ElementSpec("Title", 0, UNBOUNDED),
                    ElementSpec("Synopsis", 0, UNBOUNDED),
                    ElementSpec("Keyword", 0, UNBOUNDED),
                    ElementSpec("RelatedMaterial", 0, UNBOUNDED),
                ], "BD090")
                self._validate_title(basic_description, False, False, errs, "BD091")
                self._validate_synopsis(basic_description, [dvbi.SYNOPSIS_MEDIUM], [], errs, "BD092")
                self._validate_keyword(basic_description, 0, dvbi.MAX_KEYWORDS_PER_LANGUAGE, errs, "BD093")
                self._validate_box_set_contents_related_material(basic_description, errs)
            elif request_type == CGRequestType.BOX_SET_LISTS:
                if is_parent_group:
                    cardinality([ElementSpec("Title", max_occurs=UNBOUNDED)], "BD061")
                else:
                    cardinality([
                        ElementSpec("Title", max_occurs=UNBOUNDED),
                        ElementSpec("Synopsis", max_occurs=UNBOUNDED),
                        ElementSpec("Keyword", 0, UNBOUNDED),
                        ElementSpec("RelatedMaterial", 0, UNBOUNDED),
                    ], "BD062")
                self._validate_title(basic_description, False, False, errs, "BD063")
                if not is_parent_group:
                    self._validate_synopsis(basic_description, [dvbi.SYNOPSIS_MEDIUM], [], errs, "BD064")
                    self._validate_keyword(basic_description, 0, dvbi.MAX_KEYWORDS_PER_LANGUAGE, errs, "BD065")
                    self._validate_box_set_list_related_material(basic_description, errs)
            elif request_type == CGRequestType.MORE_EPISODES:
                cardinality([ElementSpec("RelatedMaterial", max_occurs=4)], "BD070")
                self._validate_more_episodes_related_material(basic_description, errs)
            elif request_type == CGRequestType.BOX_SET_CATEGORIES:
                if is_parent_group:
                    cardinality([ElementSpec("Title", max_occurs=UNBOUNDED)], "BD080")
                else:
                    cardinality([
                        ElementSpec("Title", max_occurs=UNBOUNDED),
                        ElementSpec("Synopsis", max_occurs=UNBOUNDED),
                        ElementSpec("Genre", min_occurs=0),
                        ElementSpec("RelatedMaterial", min_occurs=0),
                    ], "BD081")
                self._validate_title(basic_description, False, False, errs, "BD082")
                if not is_parent_group:
                    self._validate_synopsis(basic_description, [dvbi.SYNOPSIS_SHORT], [], errs, "BD083")
                self._validate_genre(basic_description, errs, "BD084")
                self._validate_promotional_still_images(basic_description, errs, skip_pagination=True)
                self._validate_pagination(basic_description, "Box Set Categories", errs)
            else:
                errs.add_error(
                    type=Severity.APPLICATION,
                    code="BD100",
                    message=f"_validate_basic_description() called with invalid requestType/element "
                            f"({request_type.value}/{parent_name})",
                )
        else:
            errs.add_error(
                type=Severity.APPLICATION,
                code="BD003",
                message=f"_validate_basic_description() called with invalid element ({parent_name})",
            )

    # ------------------------------------------------------------------
    # ProgramInformationTable
    # ------------------------------------------------------------------

    def _validate_program_information(self, program_information: Any, state: ContentGuideState,
                                      indexes: Set[str], errs: ErrorList) -> Optional[str]:
        """
        Check one <ProgramInformation>.

        Returns:
            The programme CRID when it is a member of the 'now' group
        """
        if program_information is None:
            errs.add_error(**application_error("PIV000", "_validate_program_information", "program_information"))
            return None

        request_type = state.request_type
        check_top_elements_and_cardinality(
            program_information,
            [
                ElementSpec("BasicDescription"),
                ElementSpec("OtherIdentifier", 0, UNBOUNDED),
                ElementSpec("MemberOf", 0, UNBOUNDED),
                ElementSpec("EpisodeOf", 0, UNBOUNDED),
            ],
            PROGRAM_INFORMATION_ELEMENTS, False, errs, "PI001",
        )
        check_attributes(program_information, ["programId"], ["lang"], PROGRAM_INFORMATION_ATTRIBUTES, errs, "PI002")
        get_node_language(program_information, False, errs, "PI010", self._languages)

        is_current_program = False
        program_crid = attr(program_information, "programId")
        if program_crid is not None:
            if not is_crid_uri(program_crid):
                not_crid_format(
                    errs, code="PI011",
                    message=f"{attribute('programId', 'ProgramInformation')} is not a valid CRID ({program_crid})",
                    line=program_information.sourceline,
                )
            if is_in(state.program_crids, program_crid, case_sensitive=False):
                errs.add_error(
                    code="PI012",
                    message=f"{attribute('programId', 'ProgramInformation')}={quote(program_crid)} is already used",
                    line=program_information.sourceline,
                    key=K_INVALID_IDENTIFIER,
                )
            else:
                state.program_crids.append(program_crid)

        self._validate_basic_description(program_information, state, None, errs)

        group_ids = state.group_ids
        for child in child_elements(program_information):
            name = local_name(child)
            if name == "OtherIdentifier":
                check_attributes(child, [], [], OTHER_IDENTIFIER_ATTRIBUTES, errs, "PI021")
                if request_type == CGRequestType.MORE_EPISODES:
                    errs.add_error(
                        code="PI022",
                        message=f"{elementize('OtherIdentifier')} is not permitted in this request type",
                        fragment=child,
                        key=K_INVALID_ELEMENT,
                        clause="A177 table 41",
                        description=f"The {elementize('OtherIdentifier')} element shall not be present in More "
                                    f"Episodes responses.",
                    )
            elif name == "EpisodeOf":
                check_attributes(child, ["crid"], ["index"], EPISODE_OF_ATTRIBUTES, errs, "PI031")
                found_crid = attr(child, "crid")
                if found_crid:
                    if group_ids is not None and not is_in(group_ids, found_crid, case_sensitive=False):
                        errs.add_error(
                            code="PI032",
                            message=f"{attribute('crid', 'ProgramInformation.EpisodeOf')}={quote(found_crid)} is "
                                    f"not a defined Group CRID for {elementize('EpisodeOf')}",
                            fragment=child,
                            key=K_INVALID_CRID,
                        )
                    elif not is_crid_uri(found_crid):
                        not_crid_format(
                            errs, code="PI033",
                            message=f"{attribute('crid', 'ProgramInformation.EpisodeOf')}={quote(found_crid)} is "
                                    f"not a valid CRID",
                            fragment=child,
                        )
            elif name == "MemberOf":
                if request_type in NOW_NEXT_REQUESTS:
                    # xsi:type is optional for now/next
                    check_attributes(child, ["index", "crid"], ["type"], MEMBER_OF_ATTRIBUTES, errs, "PI041")
                    if attr(child, "crid") == dvbi.CRID_NOW:
                        is_current_program = True
                else:
                    check_attributes(child, ["type", "index", "crid"], [], MEMBER_OF_ATTRIBUTES, errs, "PI042")

                member_type = attr(child, "type")
                if member_type is not None and member_type != dvbi.MEMBER_OF_TYPE:
                    errs.add_error(
                        code="PI043",
                        message=f"{attribute('xsi:type')} must be {quote(dvbi.MEMBER_OF_TYPE)} for "
                                f"ProgramInformation.MemberOf",
                        fragment=child,
                        key=K_INVALID_VALUE,
                        clause="A177 table 41",
                        description="The @xsi:type attribute shall always be set to MemberOfType.",
                    )

                found_crid = attr(child, "crid")
                if found_crid:
                    if group_ids is not None and not is_in(group_ids, found_crid, case_sensitive=False):
                        errs.add_error(
                            code="PI044",
                            message=f"{attribute('crid', 'ProgramInformation.MemberOf')}={quote(found_crid)} is "
                                    f"not a defined Group CRID for {elementize('MemberOf')}",
                            fragment=child,
                            key=K_INVALID_CRID,
                        )
                    elif not is_crid_uri(found_crid):
                        not_crid_format(
                            errs, code="PI045",
                            message=f"{attribute('crid', 'ProgramInformation.MemberOf')}={quote(found_crid)} is "
                                    f"not a valid CRID",
                            fragment=child,
                        )

                member_index = attr(child, "index")
                if member_index:
                    index = val_unsigned_int(member_index)
                    index_in_crid = f"{found_crid if found_crid else 'noCRID'}({index})"
                    if index_in_crid.lower() in indexes:
                        errs.add_error(
                            code="PI046",
                            message=f"{attribute('index', 'MemberOf')}={index} is in use by another "
                                    f"ProgramInformation element",
                            fragment=child,
                            key=K_DUPLICATE_VALUE,
                        )
                    else:
                        indexes.add(index_in_crid.lower())

        return program_crid if is_current_program else None

    def _check_program_information(self, program_description: Any, state: ContentGuideState,
                                   errs: ErrorList) -> Optional[str]:
        """
        Check every <ProgramInformation> in the <ProgramInformationTable>.

        Returns:
            The CRID of the programme in the 'now' group, if any
        """
        if program_description is None:
            errs.add_error(**application_error("CPI000", "_check_program_information", "program_description"))
            return None

        table = first_child(program_description, "ProgramInformationTable")
        if table is None:
            errs.add_error(
                code="PI101",
                message=f"{elementize('ProgramInformationTable')} not specified in "
                        f"{elementize(local_name(program_description))}",
                line=program_description.sourceline,
                key=K_MISSING_ELEMENT,
            )
            return None
        check_attributes(table, [], ["lang"], TABLE_ATTRIBUTES, errs, "PI102")
        get_node_language(table, False, errs, "PI103", self._languages)

        indexes: Set[str] = set()
        current_program_crid = None
        programs = children(table, "ProgramInformation")
        for program_information in programs:
            crid = self._validate_program_information(program_information, state, indexes, errs)
            if crid:
                current_program_crid = crid

        if state.child_count != 0 and state.child_count != len(programs):
            errs.add_error(
                code="PI110",
                message=f"number of items ({len(programs)}) in the {elementize('ProgramInformationTable')} does not "
                        f"match {attribute('numOfItems', 'GroupInformation')} specified in {CATEGORY_GROUP_NAME} "
                        f"({state.child_count})",
                line=table.sourceline,
                key="numOfItems",
            )
        return current_program_crid

    # ------------------------------------------------------------------
    # GroupInformationTable
    # ------------------------------------------------------------------

    def _validate_group_information_box_sets(self, group_information: Any, state: ContentGuideState,
                                             category_group: Any, indexes: Set[str], errs: ErrorList) -> None:
        if group_information is None:
            errs.add_error(**application_error("GIB000", "_validate_group_information_box_sets",
                                               "group_information"))
            return

        request_type = state.request_type
        is_parent_group = category_group is not None and group_information is category_group
        group_type = ElementSpec("GroupType")
        basic_description = ElementSpec("BasicDescription", min_occurs=0)

        if request_type == CGRequestType.BOX_SET_CATEGORIES:
            if is_parent_group:
                check_attributes(group_information, ["groupId"], ["lang", "ordered", "numOfItems"],
                                 GROUP_INFORMATION_ATTRIBUTES, errs, "GIB001")
                check_top_elements_and_cardinality(group_information, [group_type, basic_description],
                                                   GROUP_INFORMATION_ELEMENTS, False, errs, "GIB002")
            else:
                check_attributes(group_information, ["groupId"], ["lang"], GROUP_INFORMATION_ATTRIBUTES, errs,
                                 "GIB003")
                check_top_elements_and_cardinality(group_information,
                                                   [group_type, basic_description, ElementSpec("MemberOf")],
                                                   GROUP_INFORMATION_ELEMENTS, False, errs, "GIB004")
        elif request_type == CGRequestType.BOX_SET_LISTS:
            if is_parent_group:
                check_attributes(group_information, ["groupId"], ["lang", "ordered", "numOfItems"],
                                 GROUP_INFORMATION_ATTRIBUTES, errs, "GIB005")
                check_top_elements_and_cardinality(group_information, [group_type, basic_description],
                                                   GROUP_INFORMATION_ELEMENTS, False, errs, "GIB006")
            else:
                check_attributes(group_information, ["groupId"], ["lang", "serviceIDRef"],
                                 GROUP_INFORMATION_ATTRIBUTES, errs, "GIB007")
                check_top_elements_and_cardinality(group_information,
                                                   [group_type, basic_description, ElementSpec("MemberOf")],
                                                   GROUP_INFORMATION_ELEMENTS, False, errs, "GIB008")
        elif request_type == CGRequestType.BOX_SET_CONTENTS:
            check_attributes(group_information, ["groupId"], ["lang", "ordered", "numOfItems", "serviceIDRef"],
                             GROUP_INFORMATION_ATTRIBUTES, errs, "GIB009")
            check_top_elements_and_cardinality(group_information,
                                               [group_type, basic_description, ElementSpec("MemberOf", min_occurs=0)],
                                               GROUP_INFORMATION_ELEMENTS, False, errs, "GIB010")

        group_id = attr(group_information, "groupId")
        if group_id and is_crid_uri(group_id) and state.group_ids is not None:
            state.group_ids.append(group_id)

        category_crid = attr(category_group, "groupId", "") if category_group is not None else ""
        if not is_parent_group:
            member_of = first_child(group_information, "MemberOf")
            if member_of is not None:
                check_attributes(member_of, ["type", "index", "crid"], [], MEMBER_OF_ATTRIBUTES, errs, "GIB041")
                member_type = attr(member_of, "type")
                if member_type and member_type != dvbi.MEMBER_OF_TYPE:
                    errs.add_error(
                        code="GIB042",
                        message=f"GroupInformation.MemberOf@xsi:type is invalid ({quote(member_type)})",
                        fragment=member_of,
                    )
                if has_attr(member_of, "index"):
                    index = val_unsigned_int(attr(member_of, "index"))
                    if index >= 1:
                        if str(index) in indexes:
                            errs.add_error(
                                code="GI043",
                                message=f"duplicated {attribute('index', 'GroupInformation.MemberOf')} values "
                                        f"({index})",
                                fragment=member_of,
                                key=K_DUPLICATE_VALUE,
                            )
                        else:
                            indexes.add(str(index))
                    else:
                        errs.add_error(
                            code="GIB044",
                            message=f"{attribute('index', 'GroupInformation.MemberOf')} must be an integer >= 1 "
                                    f"(parsed {index})",
                            fragment=member_of,
                        )
                crid = attr(member_of, "crid")
                if crid and crid != category_crid:
                    errs.add_error(
                        code="GIB045",
                        message=f"{attribute('crid', 'GroupInformation.MemberOf')} ({crid}) does not match the "
                                f"{CATEGORY_GROUP_NAME} crid ({category_crid})",
                        fragment=member_of,
                    )
            else:
                errs.add_error(
                    code="GIB046",
                    message=f"GroupInformation requires a {elementize('MemberOf')} element referring to the "
                            f"{CATEGORY_GROUP_NAME} ({category_crid})",
                    line=group_information.sourceline,
                    key=K_MISSING_ELEMENT,
                )

        self._check_tag_uri(group_information, errs, "GIB051")
        self._validate_basic_description(group_information, state, category_group, errs)

    def _validate_group_information_schedules(self, group_information: Any, state: ContentGuideState,
                                              category_group: Any, errs: ErrorList) -> None:
        if group_information is None:
            errs.add_error(**application_error("GIS000", "_validate_group_information_schedules",
                                               "group_information"))
            return

        check_attributes(group_information, ["groupId", "ordered", "numOfItems"], ["lang"],
                         GROUP_INFORMATION_ATTRIBUTES, errs, "GIS001")

        if state.request_type in NOW_NEXT_REQUESTS:
            group_id = attr(group_information, "groupId")
            if group_id and group_id not in (dvbi.CRID_NOW, dvbi.CRID_LATER, dvbi.CRID_EARLIER):
                errs.add_error(
                    code="GIS011",
                    message=f"{attribute('groupId', 'GroupInformation')} value {quote(group_id)} is not valid for "
                            f"this request type",
                    line=group_information.sourceline,
                )
            true_value(group_information, "ordered", errs, "GIS013")
            if not has_attr(group_information, "numOfItems"):
                errs.add_error(
                    code="GIS015",
                    message=f"{attribute('numOfItems', 'GroupInformation')} is required for this request type",
                    line=group_information.sourceline,
                )

        self._validate_basic_description(group_information, state, category_group, errs)

    def _validate_group_information_more_episodes(self, group_information: Any, state: ContentGuideState,
                                                  category_group: Any, errs: ErrorList) -> None:
        if group_information is None:
            errs.add_error(**application_error("GIM000", "_validate_group_information_more_episodes",
                                               "group_information"))
            return

        if category_group is not None:
            errs.add_error(
                code="GIM001",
                message=f"{CATEGORY_GROUP_NAME} should not be specified for this request type",
                line=group_information.sourceline,
            )

        check_attributes(group_information, ["groupId", "ordered", "numOfItems"], ["lang"],
                         GROUP_INFORMATION_ATTRIBUTES, errs, "GIM002")

        group_id = attr(group_information, "groupId")
        if group_id is not None:
            if not is_crid_uri(group_id):
                not_crid_format(
                    errs, code="GIM003",
                    message=f"{attribute('groupId', 'GroupInformation')} value {quote(group_id)} is not a valid CRID",
                    line=group_information.sourceline,
                )
            elif state.group_ids is not None:
                state.group_ids.append(group_id)

        true_value(group_information, "ordered", errs, "GIM004", False)

        group_type = first_child(group_information, "GroupType")
        if group_type is not None:
            check_attributes(group_type, ["type", "value"], [], GROUP_TYPE_ATTRIBUTES, errs, "GIM011")
            type_value = attr(group_type, "type")
            if type_value and type_value != dvbi.PROGRAM_GROUP_TYPE:
                errs.add_error(
                    code="GIM012",
                    message=f"GroupType@xsi:type must be {quote(dvbi.PROGRAM_GROUP_TYPE)}",
                    fragment=group_type,
                )
            value = attr(group_type, "value")
            if value and value != dvbi.GROUP_TYPE_OTHER_COLLECTION:
                errs.add_error(
                    code="GIM013",
                    message=f"{attribute('value', 'GroupType')} must be {quote(dvbi.GROUP_TYPE_OTHER_COLLECTION)}",
                    fragment=group_type,
                )
        else:
            errs.add_error(
                code="GIM014",
                message=f"{elementize('GroupType')} is required in {elementize('GroupInformation')}",
                line=group_information.sourceline,
                key=K_MISSING_ELEMENT,
            )

        self._validate_basic_description(group_information, state, category_group, errs)

    def _validate_group_information(self, group_information: Any, state: ContentGuideState, category_group: Any,
                                    indexes: Optional[Set[str]], errs: ErrorList) -> None:
        """Check one <GroupInformation> against the profile of the request type."""
        if group_information is None:
            errs.add_error(**application_error("GI000", "_validate_group_information", "group_information"))
            return

        get_node_language(group_information, False, errs, "GI001", self._languages)

        request_type = state.request_type
        if request_type in NOW_NEXT_REQUESTS:
            self._validate_group_information_schedules(group_information, state, category_group, errs)
        elif request_type in (CGRequestType.BOX_SET_CATEGORIES, CGRequestType.BOX_SET_LISTS,
                              CGRequestType.BOX_SET_CONTENTS):
            self._validate_group_information_box_sets(group_information, state, category_group,
                                                      indexes if indexes is not None else set(), errs)
        elif request_type == CGRequestType.MORE_EPISODES:
            self._validate_group_information_more_episodes(group_information, state, category_group, errs)

        group_type = first_child(group_information, "GroupType")
        if group_type is not None:
            if attr(group_type, "type") != dvbi.PROGRAM_GROUP_TYPE:
                errs.add_error(
                    code="GI011",
                    message=f"GroupType@xsi:type={quote(dvbi.PROGRAM_GROUP_TYPE)} is required",
                    fragment=group_type,
                )
            if attr(group_type, "value") != dvbi.GROUP_TYPE_OTHER_COLLECTION:
                errs.add_error(
                    code="GI022",
                    message=f"{attribute('value', 'GroupType')}={quote(dvbi.GROUP_TYPE_OTHER_COLLECTION)} is required",
                    fragment=group_type,
                )
        else:
            errs.add_error(
                code="GI014",
                message=f"{elementize('GroupType')} is required in {elementize('GroupInformation')}",
                line=group_information.sourceline,
                key=K_MISSING_ELEMENT,
            )

    def _check_group_information(self, program_description: Any, state: ContentGuideState,
                                 errs: ErrorList) -> None:
        """
        Check the <GroupInformationTable> of box set and more episodes responses.

        For Box Set Categories and Box Set Lists, the one GroupInformation
        without a MemberOf child is the category group; its @numOfItems must
        equal the number of other groups.
        """
        if state.request_type == CGRequestType.BOX_SET_CONTENTS:
            self._check_group_information_box_set_contents(program_description, state, errs)
            return
        if program_description is None:
            errs.add_error(**application_error("GI000", "_check_group_information", "program_description"))
            return

        table = first_child(program_description, "GroupInformationTable")
        if table is None:
            return
        get_node_language(table, False, errs, "GI102", self._languages)

        request_type = state.request_type
        groups = children(table, "GroupInformation")
        category_group = None
        if request_type in (CGRequestType.BOX_SET_LISTS, CGRequestType.BOX_SET_CATEGORIES):
            for group_information in groups:
                if has_child(group_information, "MemberOf"):
                    continue
                if category_group is not None:
                    errs.add_error(
                        code="GI111",
                        message=f"only a single {CATEGORY_GROUP_NAME} can be present in "
                                f"{elementize('GroupInformationTable')}",
                        line=group_information.sourceline,
                    )
                else:
                    category_group = group_information
            if category_group is None:
                errs.add_error(
                    code="GI112",
                    message=f"a {CATEGORY_GROUP_NAME} must be specified in {elementize('GroupInformationTable')} "
                            f"for this request type",
                    line=table.sourceline,
                    key=K_MISSING_ELEMENT,
                )

        indexes: Set[str] = set()
        group_count = 0
        for group_information in groups:
            self._validate_group_information(group_information, state, category_group, indexes, errs)
            if category_group is not None and group_information is not category_group:
                group_count += 1

        if category_group is not None:
            num_of_items = val_unsigned_int(attr(category_group, "numOfItems"))
            if num_of_items != group_count:
                errs.add_error(
                    code="GI113",
                    message=f"{attribute('numOfItems', 'GroupInformation')} specified in {CATEGORY_GROUP_NAME} "
                            f"({num_of_items}) does match the number of items ({group_count})",
                    line=category_group.sourceline,
                    key="mismatch count",
                )
            state.child_count = num_of_items

        if request_type == CGRequestType.MORE_EPISODES and len(groups) > 1:
            errs.add_error(
                code="GI114",
                message=f"only one {elementize('GroupInformation')} element is permitted for this request type",
                line=table.sourceline,
            )

    def _check_group_information_box_set_contents(self, program_description: Any, state: ContentGuideState,
                                                  errs: ErrorList) -> None:
        """
        Check the <GroupInformationTable> of a Box Set Contents response.

        The contents group has no MemberOf; every series group must be a
        member of it.
        """
        if program_description is None:
            errs.add_error(**application_error("GIC000", "_check_group_information_box_set_contents",
                                               "program_description"))
            return
        if state.request_type != CGRequestType.BOX_SET_CONTENTS:
            errs.add_error(
                type=Severity.APPLICATION,
                code="GIC001",
                message=f"_check_group_information_box_set_contents() called with invalid requestType "
                        f"({state.request_type.value})",
            )
            return

        table = first_child(program_description, "GroupInformationTable")
        if table is None:
            return
        error_key = "boxset contents"
        get_node_language(table, False, errs, "GIC102", self._languages)

        groups = children(table, "GroupInformation")
        contents_group = None
        for group_information in groups:
            if not has_child(group_information, "MemberOf"):
                check_top_elements_and_cardinality(
                    group_information, [ElementSpec("GroupType"), ElementSpec("BasicDescription")],
                    GROUP_INFORMATION_ELEMENTS, False, errs, "GIC111",
                )
                if contents_group is not None:
                    errs.add_error(
                        code="GIC112",
                        message=f"only a single Contents group (a GroupInformation without a MemberOf child "
                                f"element) can be present in {elementize('GroupInformationTable')}",
                        line=group_information.sourceline,
                        key=error_key,
                    )
                else:
                    contents_group = group_information
            else:
                check_top_elements_and_cardinality(
                    group_information,
                    [ElementSpec("GroupType"), ElementSpec("BasicDescription"), ElementSpec("MemberOf")],
                    GROUP_INFORMATION_ELEMENTS, False, errs, "GIC113",
                )
            group_id = attr(group_information, "groupId")
            if group_id is not None and state.group_ids is not None:
                state.group_ids.append(group_id)

        if contents_group is None:
            errs.add_error(
                code="GIC115",
                message=f"a Contents group (a GroupInformation element without a MemberOf child element) must be "
                        f"specified in {elementize('GroupInformationTable')} for this request type",
                line=table.sourceline,
                key=error_key,
            )
            return

        contents_crid = attr(contents_group, "groupId", "none")
        for group_information in groups:
            if group_information is contents_group:
                continue
            member_of = first_child(group_information, "MemberOf")
            if member_of is None:
                continue
            crid = attr(member_of, "crid")
            if crid and crid != contents_crid:
                errs.add_error(
                    code="GIC120",
                    message=f"series group must have {attribute('crid', 'MemberOf')} referring to the category group",
                    fragment=member_of,
                    key=error_key,
                )
            member_type = attr(member_of, "type")
            if member_type and member_type != dvbi.MEMBER_OF_TYPE:
                errs.add_error(
                    code="GIC121",
                    message=f"{attribute('xsi:type')} must be {quote(dvbi.MEMBER_OF_TYPE)} for "
                            f"GroupInformation.MemberOf",
                    fragment=member_of,
                )

    def _validate_group_information_now_next(self, group_information: Any, state: ContentGuideState,
                                             group_crids: List[str], errs: ErrorList) -> None:
        """
        Check a now, later or earlier structural group.

        Each structural CRID appears once and its @numOfItems stays within
        the limits for the request type.
        """
        if group_information is None:
            errs.add_error(**application_error("VNN000", "_validate_group_information_now_next",
                                               "group_information"))
            return

        self._validate_group_information(group_information, state, None, None, errs)

        group_id = attr(group_information, "groupId")
        if not group_id:
            return
        limits = NOW_NEXT_LIMITS[state.request_type]
        num_allowed = limits.get(group_id, 0)
        if num_allowed <= 0:
            errs.add_error(
                code="VNN002",
                message=f"{elementize('GroupInformation')} for {quote(group_id)} is not permitted for this request "
                        f"type",
                line=group_information.sourceline,
            )
            return

        num_of_items = val_unsigned_int(attr(group_information, "numOfItems")) \
            if has_attr(group_information, "numOfItems") else -1
        if num_of_items <= 0:
            errs.add_error(
                code="VNN101",
                message=f"{attribute('numOfItems', 'GroupInformation')} must be > 0 for {quote(group_id)}",
                line=group_information.sourceline,
            )
        if num_of_items > num_allowed:
            errs.add_error(
                code="VNN102",
                message=f"{attribute('numOfItems', 'GroupInformation')} must be <= {num_allowed} for "
                        f"{quote(group_id)}",
                line=group_information.sourceline,
            )

        if is_in(group_crids, group_id, case_sensitive=False):
            errs.add_error(
                code="VNN001",
                message=f"only a single {quote(group_id)} structural CRID is permitted in this request",
                line=group_information.sourceline,
            )
        else:
            group_crids.append(group_id)

    def _check_group_information_now_next(self, program_description: Any, state: ContentGuideState,
                                          errs: ErrorList) -> None:
        if program_description is None:
            errs.add_error(**application_error("NN000", "_check_group_information_now_next", "program_description"))
            return

        table = first_child(program_description, "GroupInformationTable")
        if table is None:
            errs.add_error(
                code="NN001",
                message=f"{elementize('GroupInformationTable')} not specified in "
                        f"{elementize(local_name(program_description))}",
                line=program_description.sourceline,
                key=K_MISSING_ELEMENT,
            )
            return
        get_node_language(table, False, errs, "NM002", self._languages)

        if state.group_ids is None:
            state.group_ids = []
        for group_information in children(table, "GroupInformation"):
            if state.request_type in NOW_NEXT_REQUESTS:
                self._validate_group_information_now_next(group_information, state, state.group_ids, errs)
            else:
                errs.add_error(
                    code="NN003",
                    message=f"{elementize('GroupInformation')} not processed for this request type",
                    line=group_information.sourceline,
                )

    # ------------------------------------------------------------------
    # InstanceDescription
    # ------------------------------------------------------------------

    def _validate_av_attributes(self, av_attributes: Any, state: ContentGuideState, errs: ErrorList) -> None:
        """
        Check <AVAttributes> of an instance.

        Only the main audio purpose is allowed from the 2024 schema onwards;
        the same schema drops CaptioningAttributes in favour of
        AccessibilityAttributes.
        """
        if av_attributes is None:
            errs.add_error(**application_error("AV000", "_validate_av_attributes", "av_attributes"))
            return

        is_r2 = state.version >= SCHEMA_R2
        audio_purposes = [dvbi.AUDIO_PURPOSE_MAIN]
        if not is_r2:
            audio_purposes += [dvbi.AUDIO_PURPOSE_VISUAL_IMPAIRED, dvbi.AUDIO_PURPOSE_HEARING_IMPAIRED,
                               dvbi.AUDIO_PURPOSE_DIALOGUE_ENHANCEMENT]

        specs = [
            ElementSpec("AudioAttributes", 0, UNBOUNDED),
            ElementSpec("VideoAttributes", 0, UNBOUNDED),
        ]
        specs.append(ElementSpec("AccessibilityAttributes", min_occurs=0) if is_r2
                     else ElementSpec("CaptioningAttributes", 0, UNBOUNDED))
        check_top_elements_and_cardinality(av_attributes, specs, AV_ATTRIBUTES_ELEMENTS, False, errs, "AV001")

        audio_codecs = self.stores.audio_codecs
        found_combinations: Set[str] = set()
        audio_counts: Dict[str, List[Any]] = {}
        for audio_attributes in children(av_attributes, "AudioAttributes"):
            check_top_elements_and_cardinality(
                audio_attributes,
                [ElementSpec("Coding", min_occurs=0), ElementSpec("MixType", min_occurs=0),
                 ElementSpec("AudioLanguage", min_occurs=0)],
                AUDIO_ATTRIBUTES_ELEMENTS, False, errs, "AV010",
            )

            coding = first_child(audio_attributes, "Coding")
            coding_value = None
            if coding is not None:
                check_attributes(coding, ["href"], [], CODING_ATTRIBUTES, errs, "AV006")
                coding_value = attr(coding, "href")
                if not_in_store(audio_codecs, coding_value, errs, "AV007", "audio codec", coding):
                    errs.add_error(
                        code="AV007",
                        message="AudioAttributes.Coding is not valid",
                        fragment=coding,
                        key=K_INVALID_HREF,
                    )

            mix_type = first_child(audio_attributes, "MixType")
            mix_type_value = None
            if mix_type is not None:
                check_attributes(mix_type, ["href"], [], CODING_ATTRIBUTES, errs, "AV011")
                mix_type_value = attr(mix_type, "href")
                if mix_type_value and mix_type_value not in AUDIO_MIX_TYPES:
                    errs.add_error(
                        code="AV012",
                        message="AudioAttributes.MixType is not valid",
                        fragment=mix_type,
                        key=K_INVALID_HREF,
                    )

            audio_language = first_child(audio_attributes, "AudioLanguage")
            if audio_language is None:
                continue
            check_attributes(audio_language, ["purpose"], [], AUDIO_LANGUAGE_ATTRIBUTES, errs, "AV013")
            purpose = attr(audio_language, "purpose")
            valid_purpose = False
            if purpose is not None:
                valid_purpose = purpose in audio_purposes
                if not valid_purpose:
                    errs.add_error(
                        code="AV014",
                        message=f"{attribute('purpose', 'AudioLanguage')} is not valid",
                        fragment=audio_language,
                        key=K_INVALID_VALUE,
                    )
            language = safe_get_text(audio_language).strip()
            valid_language = check_language(language, audio_language, errs, "AV015", self._languages)

            if valid_language and valid_purpose:
                audio_counts.setdefault(language, []).append(audio_language)
                combination = f"{coding_value or 'dflt'}!--!{mix_type_value or 'dflt'}!--!{language}!--!{purpose}"
                if combination in found_combinations:
                    errs.add_error(
                        code="AV016",
                        message=f"audio {attribute('purpose')} {quote(purpose)} already specified for language "
                                f"{quote(language)}",
                        fragment=audio_language,
                        key=K_DUPLICATE_VALUE,
                    )
                else:
                    found_combinations.add(combination)

        for language, elements in audio_counts.items():
            if len(elements) > 2:
                errs.add_error(
                    code="AV020",
                    message=f"more than 2 {elementize('AudioAttributes')} elements for language {quote(language)}",
                    multi_element_error=elements,
                )

        for video_attributes in children(av_attributes, "VideoAttributes"):
            check_top_elements_and_cardinality(
                video_attributes,
                [ElementSpec("HorizontalSize", min_occurs=0), ElementSpec("VerticalSize", min_occurs=0),
                 ElementSpec("AspectRatio", min_occurs=0)],
                VIDEO_ATTRIBUTES_ELEMENTS, False, errs, "AV030",
            )

        captioning = first_child(av_attributes, "CaptioningAttributes")
        if captioning is not None:
            check_top_elements_and_cardinality(captioning, [ElementSpec("Coding", min_occurs=0)],
                                               CAPTIONING_ATTRIBUTES_ELEMENTS, False, errs, "AV040")
            coding = first_child(captioning, "Coding")
            if coding is not None:
                check_attributes(coding, ["href"], [], CODING_ATTRIBUTES, errs, "AV041")
                coding_href = attr(coding, "href")
                if coding_href and coding_href not in CAPTION_CODINGS:
                    errs.add_error(
                        code="AV042",
                        message=f"{attribute('href', 'CaptioningAttributes.Coding')} is not valid - should be DVB "
                                f"(bitmap or character) or EBU TT-D",
                        fragment=coding,
                        key=K_INVALID_HREF,
                    )

        accessibility = first_child(av_attributes, "AccessibilityAttributes")
        if accessibility is not None:
            check_accessibility_attributes(accessibility, self.stores, errs, "AV051")

    @staticmethod
    def _validate_restart_related_material(related_material: Any, errs: ErrorList) -> bool:
        """
        Check a RelatedMaterial providing a restart application link.

        Returns:
            True if the element is a complete restart link
        """
        if related_material is None:
            errs.add_error(**application_error("RR000", "_validate_restart_related_material", "related_material"))
            return False

        is_restart = check_top_elements_and_cardinality(
            related_material, [ElementSpec("HowRelated"), ElementSpec("MediaLocator")], RELATED_MATERIAL_ELEMENTS,
            False, errs, "RR001",
        )

        how_related = first_child(related_material, "HowRelated")
        if how_related is not None:
            check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, "RR002")
            href = attr(how_related, "href")
            if href and href != dvbi.RESTART_LINK_URI:
                errs.add_error(
                    code="RR003",
                    message=f"invalid {attribute('href', 'HowRelated')} ({href}) for Restart Application Link",
                    fragment=how_related,
                    key=K_INVALID_HREF,
                )
                is_restart = False

        media_locator = first_child(related_material, "MediaLocator")
        if media_locator is not None:
            if not check_top_elements_and_cardinality(
                    media_locator, [ElementSpec("MediaUri"), ElementSpec("AuxiliaryURI")], MEDIA_LOCATOR_ELEMENTS,
                    True, errs, "RR004"):
                is_restart = False
        return is_restart

    @staticmethod
    def _check_instance_genre(genre: Any, errs: ErrorList, code: str) -> Optional[str]:
        if genre is None:
            return None
        check_attributes(genre, ["href"], ["type"], ["href", "type"], errs, f"{code}-1")
        if attr(genre, "type", dvbi.GENRE_TYPE_MAIN) != dvbi.GENRE_TYPE_OTHER:
            errs.add_error(
                code=f"{code}-2",
                message=f"{attribute('type', f'{local_name(genre.getparent())}.Genre')} must contain "
                        f"{quote(dvbi.GENRE_TYPE_OTHER)}",
                fragment=genre,
            )
        return attr(genre, "href")

    def _validate_instance_description(self, verify_type: str, instance_description: Any, is_current_program: bool,
                                       state: ContentGuideState, errs: ErrorList) -> None:
        """
        Check an <InstanceDescription> of an OnDemandProgram or ScheduleEvent.

        On demand instances carry two genres giving media and forward EPG
        availability. Scheduled instances may carry a restart genre and a
        restart link, together and only for the current programme.
        """
        if instance_description is None:
            errs.add_error(**application_error("ID000", "_validate_instance_description", "instance_description"))
            return

        is_r2 = state.version >= SCHEMA_R2
        legacy_languages = [] if is_r2 else [ElementSpec("CaptionLanguage", min_occurs=0),
                                             ElementSpec("SignLanguage", min_occurs=0)]
        if verify_type == "OnDemandProgram":
            specs = [ElementSpec("Genre", 2, 2)] + legacy_languages + [
                ElementSpec("AVAttributes", min_occurs=0),
                ElementSpec("OtherIdentifier", 0, UNBOUNDED),
            ]
            check_top_elements_and_cardinality(instance_description, specs, INSTANCE_DESCRIPTION_ELEMENTS, False,
                                               errs, "ID001")
        elif verify_type == "ScheduleEvent":
            specs = [ElementSpec("Genre", min_occurs=0)] + legacy_languages + [
                ElementSpec("AVAttributes", min_occurs=0),
                ElementSpec("OtherIdentifier", 0, UNBOUNDED),
                ElementSpec("RelatedMaterial", min_occurs=0),
            ]
            check_top_elements_and_cardinality(instance_description, specs, INSTANCE_DESCRIPTION_ELEMENTS, False,
                                               errs, "ID002")
        else:
            errs.add_error(
                type=Severity.APPLICATION,
                code="ID003",
                message=f"_validate_instance_description() called with verify_type={verify_type}",
            )

        if attr(instance_description, "serviceInstanceID") == "":
            errs.add_error(
                code="ID009",
                message=f"{attribute('serviceInstanceID')} should not be empty if specified",
                line=instance_description.sourceline,
                key="empty ID",
            )

        restart_genre = None
        restart_related_material = None
        genres = children(instance_description, "Genre")
        if verify_type == "OnDemandProgram":
            genre1 = genres[0] if len(genres) > 0 else None
            genre2 = genres[1] if len(genres) > 1 else None
            href1 = self._check_instance_genre(genre1, errs, "ID011")
            if href1 and href1 not in MEDIA_AVAILABILITY + EPG_AVAILABILITY:
                errs.add_error(
                    code="ID012",
                    message="first <InstanceDescription.+Genre> must contain a media or fepg availability indicator",
                    fragment=genre1,
                    key=K_INVALID_HREF,
                )
            href2 = self._check_instance_genre(genre2, errs, "ID013")
            if href2 and href2 not in MEDIA_AVAILABILITY + EPG_AVAILABILITY:
                errs.add_error(
                    code="ID014",
                    message="second <InstanceDescription.+Genre> must contain a media or fepg availability indicator",
                    fragment=genre2,
                    key=K_INVALID_HREF,
                )
            if genre1 is not None and genre2 is not None:
                if (href1 in MEDIA_AVAILABILITY and href2 in MEDIA_AVAILABILITY) or \
                        (href1 in EPG_AVAILABILITY and href2 in EPG_AVAILABILITY):
                    errs.add_error(
                        code="ID015-1",
                        message="<InstanceDescription.+Genre> elements must indicate different availabilities",
                        fragments=[genre1, genre2],
                    )
        elif verify_type == "ScheduleEvent" and genres:
            genre = genres[0]
            check_attributes(genre, ["href"], ["type"], ["href", "type"], errs, "ID016")
            href = attr(genre, "href")
            if href:
                if is_restart_availability(href):
                    restart_genre = genre
                    genre_type = attr(genre, "type")
                    if genre_type is not None and genre_type != dvbi.GENRE_TYPE_OTHER:
                        errs.add_error(
                            code="ID018",
                            message=f"{attribute('type', 'Genre')} must be {quote(dvbi.GENRE_TYPE_OTHER)}",
                            fragment=genre,
                        )
                else:
                    errs.add_error(
                        code="ID017",
                        message=f"{elementize('InstanceDescription.Genre')} must contain a restart link indicator",
                        line=instance_description.sourceline,
                        key=K_INVALID_HREF,
                    )

        caption_language = first_child(instance_description, "CaptionLanguage")
        if caption_language is not None:
            check_language(safe_get_text(caption_language).strip(), caption_language, errs, "ID021",
                           self._languages)
            boolean_value(caption_language, "closed", errs, "ID022")

        sign_language = first_child(instance_description, "SignLanguage")
        if sign_language is not None:
            value = safe_get_text(sign_language).strip()
            check_language(value, sign_language, errs, "ID031", self._languages)
            false_value(sign_language, "closed", errs, "ID032")
            if value != dvbi.SIGN_LANGUAGE_CODE and not self._languages.is_empty() \
                    and not self._languages.is_known_sign_language(value):
                errs.add_error(
                    code="ID033",
                    message=f"invalid {elementize('SignLanguage')} {quote(value)} in "
                            f"{elementize('InstanceDescription')}",
                    fragment=sign_language,
                    key=K_INVALID_LANGUAGE,
                )

        av_attributes = first_child(instance_description, "AVAttributes")
        if av_attributes is not None:
            self._validate_av_attributes(av_attributes, state, errs)

        for other_identifier in children(instance_description, "OtherIdentifier"):
            check_attributes(other_identifier, ["type"], [], OTHER_IDENTIFIER_ATTRIBUTES, errs, "VID052")
            identifier_type = attr(other_identifier, "type")
            if identifier_type is None:
                continue
            permitted = SCHEDULE_EVENT_IDENTIFIER_TYPES if verify_type == "ScheduleEvent" \
                else (dvbi.CPS_INDEX_TYPE,)
            if identifier_type not in permitted and not has_attr(other_identifier, "organization"):
                errs.add_error(
                    code="ID050",
                    message=f"{attribute('type', 'OtherIdentifier')}={quote(identifier_type)} is not valid for "
                            f"{verify_type}.InstanceDescription",
                    fragment=other_identifier,
                    key=K_INVALID_VALUE,
                )
            if identifier_type in (dvbi.EIT_PROGRAMME_CRID_TYPE, dvbi.EIT_SERIES_CRID_TYPE) \
                    and not is_crid_uri(safe_get_text(other_identifier).strip()):
                not_crid_format(
                    errs, code="ID051",
                    message=f"OtherIdentifier must be a CRID for {attribute('type')}={quote(identifier_type)}",
                    fragment=other_identifier,
                )

        related_material = first_child(instance_description, "RelatedMaterial")
        if related_material is not None and self._validate_restart_related_material(related_material, errs):
            restart_related_material = related_material

        if not is_current_program and restart_genre is not None:
            errs.add_error(
                code="ID061",
                message=f"restart {elementize('Genre')} is only permitted for the current (\"now\") program",
                fragment=restart_genre,
            )
        if not is_current_program and restart_related_material is not None:
            errs.add_error(
                code="ID062",
                message=f"restart {elementize('RelatedMaterial')} is only permitted for the current (\"now\") program",
                fragment=restart_related_material,
            )
        if (restart_genre is None) != (restart_related_material is None):
            errs.add_error(
                code="ID063",
                message=f"both {elementize('Genre')} and {elementize('RelatedMaterial')} are required together "
                        f"for {verify_type}",
                multi_element_error=[restart_genre, restart_related_material],
            )

    # ------------------------------------------------------------------
    # ProgramLocationTable
    # ------------------------------------------------------------------

    @staticmethod
    def _check_player_application(node: Any, allowed_content_types: Sequence[str], errs: ErrorList,
                                  code: str) -> None:
        """Check a <ProgramURL> or <AuxiliaryURL> that signals a player application."""
        if node is None:
            errs.add_error(**application_error("PA000", "_check_player_application", "node"))
            return

        content_type = attr(node, "contentType")
        if content_type is None:
            errs.add_error(
                code=f"{code}-1",
                message=f"{attribute('contentType')} attribute is required when signalling a player in "
                        f"{elementize(local_name(node))}",
                fragment=node,
                key=f"missing {attribute('contentType')}",
            )
            return
        if content_type not in allowed_content_types:
            errs.add_error(
                code=f"{code}-4",
                message=f"{attribute('contentType', local_name(node))}={quote(content_type)} is not valid for a "
                        f"player",
                fragment=node,
                key="invalid contentType",
            )
            return
        if content_type == dvbi.XML_AIT_CONTENT_TYPE and not is_http_url(safe_get_text(node).strip()):
            errs.add_error(
                code=f"{code}-2",
                message=f"{elementize(local_name(node))}={quote(safe_get_text(node))} is not a valid HTTP or "
                        f"HTTPS URL",
                fragment=node,
                key=K_INVALID_URL,
            )

    def _validate_on_demand_program(self, on_demand_program: Any, state: ContentGuideState,
                                    errs: ErrorList) -> None:
        """Check an <OnDemandProgram> against the profile of the request type."""
        if on_demand_program is None:
            errs.add_error(**application_error("OD000", "_validate_on_demand_program", "on_demand_program"))
            return

        request_type = state.request_type
        program = ElementSpec("Program")
        program_url = ElementSpec("ProgramURL")
        auxiliary_url = ElementSpec("AuxiliaryURL", min_occurs=0)
        availability = [ElementSpec("PublishedDuration"), ElementSpec("StartOfAvailability"),
                        ElementSpec("EndOfAvailability")]
        valid_request = True
        if request_type == CGRequestType.BOX_SET_CONTENTS:
            specs = [program, program_url, auxiliary_url, ElementSpec("InstanceDescription", min_occurs=0)] + \
                availability + [ElementSpec("Free")]
            check_top_elements_and_cardinality(on_demand_program, specs, ON_DEMAND_PROGRAM_ELEMENTS, False, errs,
                                               "OD001")
        elif request_type == CGRequestType.MORE_EPISODES:
            specs = [program, program_url, auxiliary_url] + availability + [ElementSpec("Free")]
            check_top_elements_and_cardinality(on_demand_program, specs, ON_DEMAND_PROGRAM_ELEMENTS, False, errs,
                                               "OD002")
        elif request_type in SCHEDULE_REQUESTS:
            specs = [program, program_url, auxiliary_url, ElementSpec("InstanceDescription")] + availability + \
                [ElementSpec("DeliveryMode"), ElementSpec("Free")]
            check_top_elements_and_cardinality(on_demand_program, specs, ON_DEMAND_PROGRAM_ELEMENTS, False, errs,
                                               "OD003")
        else:
            errs.add_error(
                code="OD004",
                message=f"requestType={request_type.value} is not valid for OnDemandProgram",
                fragment=on_demand_program,
            )
            valid_request = False

        check_attributes(on_demand_program, ["serviceIDRef"], ["lang"], ON_DEMAND_PROGRAM_ATTRIBUTES, errs, "OD005")
        get_node_language(on_demand_program, False, errs, "OD006", self._languages)
        self._check_tag_uri(on_demand_program, errs, "OD007")

        program_element = first_child(on_demand_program, "Program")
        if program_element is not None:
            check_attributes(program_element, ["crid"], [], PROGRAM_ATTRIBUTES, errs, "OD012")
            program_crid = attr(program_element, "crid")
            if program_crid:
                if not is_crid_uri(program_crid):
                    not_crid_format(
                        errs, code="OD010",
                        message=f"{attribute('crid', 'OnDemandProgram.Program')} is not a CRID URI",
                        line=program_element.sourceline,
                    )
                elif not is_in(state.program_crids, program_crid, case_sensitive=False):
                    errs.add_error(
                        code="OD011",
                        message=f"{attribute('crid', 'OnDemandProgram.Program')}={quote(program_crid)} does not "
                                f"refer to a program in the {elementize('ProgramInformationTable')}",
                        line=program_element.sourceline,
                        key=K_INVALID_CRID,
                    )
                state.location_crids.append(program_crid)

        program_url_element = first_child(on_demand_program, "ProgramURL")
        if program_url_element is not None:
            self._check_player_application(program_url_element, [dvbi.XML_AIT_CONTENT_TYPE], errs, "OD020")

        auxiliary_url_element = first_child(on_demand_program, "AuxiliaryURL")
        if auxiliary_url_element is not None:
            self._check_player_application(auxiliary_url_element, [dvbi.XML_AIT_CONTENT_TYPE], errs, "OD030")

        if valid_request and request_type != CGRequestType.MORE_EPISODES:
            instance_description = first_child(on_demand_program, "InstanceDescription")
            if instance_description is not None:
                self._validate_instance_description("OnDemandProgram", instance_description, False, state, errs)

        start = first_child(on_demand_program, "StartOfAvailability")
        end = first_child(on_demand_program, "EndOfAvailability")
        if start is not None and end is not None:
            available_from = parse_datetime(safe_get_text(start).strip())
            available_to = parse_datetime(safe_get_text(end).strip())
            if available_from and available_to and available_to < available_from:
                errs.add_error(
                    code="OD062",
                    message=f"{elementize('StartOfAvailability')} must be earlier than "
                            f"{elementize('EndOfAvailability')}",
                    multi_element_error=[start, end],
                    key=K_BAD_TIMING,
                )

        if request_type in SCHEDULE_REQUESTS:
            delivery_mode = first_child(on_demand_program, "DeliveryMode")
            if delivery_mode is not None and safe_get_text(delivery_mode).strip() != dvbi.DELIVERY_MODE_STREAMING:
                errs.add_error(
                    code="OD070",
                    message=f"OnDemandProgram.DeliveryMode must be {quote(dvbi.DELIVERY_MODE_STREAMING)}",
                    fragment=delivery_mode,
                    key=K_INVALID_VALUE,
                )

        free = first_child(on_demand_program, "Free")
        if free is not None:
            true_value(free, "value", errs, "OD080")

    def _validate_event(self, event: Any, state: ContentGuideState, schedule: Any, errs: ErrorList) -> None:
        """
        Check a <BroadcastEvent> or a <ScheduleEvent>.

        A scheduled event must start within its Schedule and end before the
        end of the Schedule.
        """
        name = local_name(event)
        if name == "BroadcastEvent":
            prefix = "BE"
        elif name == "ScheduleEvent":
            prefix = "SE"
        else:
            errs.add_error(
                type=Severity.APPLICATION,
                code="VE000",
                message="_validate_event() called with something other than a BroadcastEvent or ScheduleEvent",
            )
            return

        schedule_start = parse_datetime(attr(schedule, "start")) if schedule is not None else None
        schedule_end = parse_datetime(attr(schedule, "end")) if schedule is not None else None

        get_node_language(event, False, errs, f"{prefix}001", self._languages)
        check_attributes(event, ["serviceIDRef"] if prefix == "BE" else [], [], EVENT_ATTRIBUTES, errs,
                         f"{prefix}002")
        published_timing = [ElementSpec("PublishedStartTime", min_occurs=0),
                            ElementSpec("PublishedDuration", min_occurs=0)] if prefix == "BE" \
            else [ElementSpec("PublishedStartTime"), ElementSpec("PublishedDuration")]
        check_top_elements_and_cardinality(
            event,
            [ElementSpec("Program"), ElementSpec("ProgramURL", min_occurs=0),
             ElementSpec("InstanceDescription", 0, UNBOUNDED)] + published_timing +
            [ElementSpec("ActualStartTime", min_occurs=0), ElementSpec("ActualDuration", min_occurs=0),
             ElementSpec("FirstShowing", min_occurs=0), ElementSpec("Free", min_occurs=0)],
            EVENT_ELEMENTS, False, errs, f"{prefix}003",
        )

        is_current_program = False
        program = first_child(event, "Program")
        if program is not None:
            check_attributes(program, ["crid"], [], PROGRAM_ATTRIBUTES, errs, f"{prefix}010")
            program_crid = attr(program, "crid")
            if program_crid:
                if not is_crid_uri(program_crid):
                    not_crid_format(
                        errs, code=f"{prefix}011",
                        message=f"{attribute('crid', 'Program')} is not a valid CRID ({program_crid})",
                        fragment=program,
                    )
                if not is_in(state.program_crids, program_crid, case_sensitive=False):
                    errs.add_error(
                        code=f"{prefix}012",
                        message=f"{attribute('crid', 'Program')}={quote(program_crid)} does not refer to a program "
                                f"in the {elementize('ProgramInformationTable')}",
                        fragment=program,
                        key=K_INVALID_CRID,
                    )
                state.location_crids.append(program_crid)
                is_current_program = program_crid == state.current_program_crid

        program_url = first_child(event, "ProgramURL")
        if program_url is not None and not is_dvb_locator(safe_get_text(program_url).strip()):
            errs.add_error(
                code=f"{prefix}021",
                message=f"{name}.ProgramURL ({safe_get_text(program_url)}) is not a valid DVB locator",
                fragment=program_url,
                key=K_INVALID_URL,
            )

        service_instances: Set[str] = set()
        for instance_description in children(event, "InstanceDescription"):
            self._validate_instance_description(name, instance_description, is_current_program, state, errs)
            service_instance = attr(instance_description, "serviceInstanceID", DEFAULT_SERVICE_INSTANCE)
            if service_instance in service_instances:
                is_default = service_instance == DEFAULT_SERVICE_INSTANCE
                errs.add_error(
                    code=f"{prefix}031" if is_default else f"{prefix}032",
                    message="Default instance description is already specified" if is_default
                    else f"Instance description for {service_instance} is already specified",
                    line=instance_description.sourceline,
                    key=K_DUPLICATE_INSTANCE,
                )
            else:
                service_instances.add(service_instance)

        published_start = first_child(event, "PublishedStartTime")
        if published_start is not None:
            start_text = safe_get_text(published_start).strip()
            if is_utc_date_time(start_text):
                start_time = parse_datetime(start_text)
                if start_time is not None:
                    self._check_event_timing(event, prefix, start_time, schedule, schedule_start, schedule_end,
                                             published_start, errs)
            else:
                errs.add_error(
                    code=f"{prefix}049",
                    message=f"{elementize('PublishedStartTime')} is not expressed in UTC format ({start_text})",
                    fragment=published_start,
                    key=K_BAD_TIMING,
                )

        actual_start = first_child(event, "ActualStartTime")
        if actual_start is not None and not is_utc_date_time(safe_get_text(actual_start).strip()):
            errs.add_error(
                code=f"{prefix}051",
                message=f"{elementize('ActualStartTime')} is not expressed in UTC format "
                        f"({safe_get_text(actual_start)})",
                fragment=actual_start,
                key=K_BAD_TIMING,
            )

        first_showing = first_child(event, "FirstShowing")
        if first_showing is not None:
            boolean_value(first_showing, "value", errs, f"{prefix}061")

        free = first_child(event, "Free")
        if free is not None:
            boolean_value(free, "value", errs, f"{prefix}071")

    @staticmethod
    def _check_event_timing(event: Any, prefix: str, start_time: Any, schedule: Any, schedule_start: Any,
                            schedule_end: Any, published_start: Any, errs: ErrorList) -> None:
        if schedule_start is not None and start_time < schedule_start:
            errs.add_error(
                code=f"{prefix}041",
                message=f"{elementize('PublishedStartTime')} ({start_time.isoformat()}) is earlier than "
                        f"{attribute('start', 'Schedule')}",
                multi_element_error=[schedule, published_start],
                key=K_BAD_TIMING,
            )
        if schedule_end is not None and start_time > schedule_end:
            errs.add_error(
                code=f"{prefix}042",
                message=f"{elementize('PublishedStartTime')} ({start_time.isoformat()}) is after "
                        f"{attribute('end', 'Schedule')}",
                multi_element_error=[schedule, published_start],
                key=K_BAD_TIMING,
            )

        published_duration = first_child(event, "PublishedDuration")
        if schedule_end is None or published_duration is None:
            return
        try:
            duration = parse_iso_duration(safe_get_text(published_duration).strip())
        except ValueError as e:
            # malformed durations are reported by schema validation
            logger.debug(f"Skipping duration check: {e}")
            return
        if duration.add_to(start_time) > schedule_end:
            errs.add_error(
                code=f"{prefix}043",
                message=f"PublishedStartTime+PublishedDuration of event is after {attribute('end', 'Schedule')}",
                multi_element_error=[schedule, published_duration],
                key=K_BAD_TIMING,
            )

    def _validate_broadcast_event(self, broadcast_event: Any, state: ContentGuideState, errs: ErrorList) -> None:
        if broadcast_event is None:
            errs.add_error(**application_error("BE000", "_validate_broadcast_event", "broadcast_event"))
            return
        self._check_tag_uri(broadcast_event, errs, "BE999")
        self._validate_event(broadcast_event, state, None, errs)

    def _validate_schedule(self, schedule: Any, state: ContentGuideState, errs: ErrorList) -> str:
        """
        Check a <Schedule> and its events.

        Returns:
            The @serviceIDRef of the schedule, or "" when absent
        """
        if schedule is None:
            errs.add_error(**application_error("VS000", "_validate_schedule", "schedule"))
            return ""

        check_top_elements_and_cardinality(schedule, [ElementSpec("ScheduleEvent", 0, UNBOUNDED)],
                                           SCHEDULE_ELEMENTS, False, errs, "VS001")
        check_attributes(schedule, ["serviceIDRef", "start", "end"], [], SCHEDULE_ATTRIBUTES, errs, "VS002")
        get_node_language(schedule, False, errs, "VS003", self._languages)
        service_id = self._check_tag_uri(schedule, errs, "VS004")

        schedule_start = parse_datetime(attr(schedule, "start"))
        schedule_end = parse_datetime(attr(schedule, "end"))
        if schedule_start is not None and schedule_end is not None and schedule_end <= schedule_start:
            errs.add_error(
                code="VS012",
                message=f"{attribute('start', 'Schedule')} must be earlier than {attribute('end')}",
                fragment=schedule,
                key=K_BAD_TIMING,
            )

        for schedule_event in children(schedule, "ScheduleEvent"):
            self._validate_event(schedule_event, state, schedule, errs)
        return service_id

    def _check_program_location(self, program_description: Any, state: ContentGuideState,
                                errs: ErrorList) -> None:
        """
        Check the <ProgramLocationTable>.

        Every programme described in the ProgramInformationTable must be
        located here, and every location must refer to a described programme.
        """
        if program_description is None:
            errs.add_error(**application_error("PL000", "_check_program_location", "program_description"))
            return

        table = first_child(program_description, "ProgramLocationTable")
        if table is None:
            return

        request_type = state.request_type
        allowed = [ElementSpec("OnDemandProgram", 0, UNBOUNDED)]
        if request_type in SCHEDULE_REQUESTS:
            allowed.append(ElementSpec("Schedule", 0, UNBOUNDED))
        elif request_type == CGRequestType.BOX_SET_CONTENTS:
            allowed.append(ElementSpec("BroadcastEvent", 0, UNBOUNDED))
        check_top_elements_and_cardinality(table, allowed, PROGRAM_LOCATION_TABLE_ELEMENTS, False, errs, "PL010")
        check_attributes(table, [], ["lang"], TABLE_ATTRIBUTES, errs, "PL011")
        get_node_language(table, False, errs, "PL012", self._languages)

        on_demand_count = broadcast_count = schedule_count = 0
        service_ids: List[str] = []
        for child in child_elements(table):
            name = local_name(child)
            if name == "OnDemandProgram":
                self._validate_on_demand_program(child, state, errs)
                on_demand_count += 1
            elif name == "BroadcastEvent":
                self._validate_broadcast_event(child, state, errs)
                broadcast_count += 1
            elif name == "Schedule":
                service_id = self._validate_schedule(child, state, errs)
                if service_id:
                    if is_in(service_ids, service_id, case_sensitive=False):
                        errs.add_error(
                            code="PL020",
                            message=f"A {elementize('Schedule')} element with {attribute('serviceIDRef')}="
                                    f"{quote(service_id)} is already specified",
                            fragment=child,
                            key=K_DUPLICATE_VALUE,
                        )
                    else:
                        service_ids.append(service_id)
                schedule_count += 1

        total = on_demand_count + broadcast_count + schedule_count
        if state.child_count != 0 and state.child_count != total:
            errs.add_error(
                code="PL021",
                message=f"number of items ({total}) in the {elementize('ProgramLocationTable')} does not match "
                        f"{attribute('numOfItems', 'GroupInformation')} specified in {CATEGORY_GROUP_NAME} "
                        f"({state.child_count})",
                line=table.sourceline,
                key="numOfItems",
            )

        if request_type == CGRequestType.PROGRAM_INFO and (on_demand_count > 1 or schedule_count != 0):
            errs.add_error(
                code="PL023",
                message=f"The {elementize('ProgramLocationTable')} may only contain a single OnDemandProgram element "
                        f"representing the current On Demand availability of this programme",
                line=table.sourceline,
            )

        if request_type != CGRequestType.PROGRAM_INFO or on_demand_count != 0:
            for program_crid in state.program_crids:
                if not is_in(state.location_crids, program_crid, case_sensitive=False):
                    errs.add_error(
                        code="PL022",
                        message=f"CRID {quote(program_crid)} specified in {elementize('ProgramInformationTable')} is "
                                f"not specified in {elementize('ProgramLocationTable')}",
                        line=table.sourceline,
                        key=K_INVALID_CRID,
                    )

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def _schema_verification(self, root: Any, state: ContentGuideState, errs: ErrorList,
                             report_schema_version: bool) -> None:
        namespace = state.context.namespace
        schema_check(
            root, self.schemas.schema_for(namespace), self.schemas.filename_for(namespace) or
            state.context.descriptor.filename, errs, f"CG003:{state.version}",
        )
        if report_schema_version:
            schema_version_check(root, state.context.descriptor.status, errs, "CG003")

    def _check_program_description_children(self, program_description: Any, names: List[str], errs: ErrorList,
                                            code: str) -> bool:
        return check_top_elements_and_cardinality(program_description, [ElementSpec(name) for name in names],
                                                  PROGRAM_DESCRIPTION_ELEMENTS, False, errs, code)

    def _check_content_guide(self, text: Any, request_type: CGRequestType, errs: ErrorList,
                             report_schema_version: bool) -> None:
        root = schema_load(text, errs, "CG001")
        if root is None:
            return

        if local_name(root) != "TVAMain":
            errs.add_error(
                code="CG002",
                message=f"Root element is not {elementize('TVAMain')}",
                line=root.sourceline,
                key=K_XSD_VALIDATION,
            )
            return

        namespace = namespace_of(root)
        descriptor = get_descriptor(namespace, CG_SCHEMA_VERSIONS)
        if descriptor is None:
            errs.add_error(
                code="CG004",
                message=f"Unsupported namespace {quote(namespace)}" if namespace
                else f"namespace is not provided for {elementize('TVAMain')}",
                line=root.sourceline,
                key=K_XSD_VALIDATION,
            )
            return

        context = ValidationContext(namespace=namespace, prefix=root.prefix, version=descriptor.version,
                                    descriptor=descriptor)
        state = ContentGuideState(context=context, request_type=request_type)
        logger.debug(f"Validating {request_type.label} response ({namespace})")

        self._schema_verification(root, state, errs, report_schema_version)
        get_node_language(root, True, errs, "CG005", self._languages)

        program_description = first_child(root, "ProgramDescription")
        if program_description is None:
            errs.add_error(
                code="CG006",
                message=f"No {elementize('ProgramDescription')} element specified.",
                line=root.sourceline,
                key=K_MISSING_ELEMENT,
            )
            return

        tables = ["ProgramLocationTable", "ProgramInformationTable"]
        all_tables = tables + ["GroupInformationTable"]
        if request_type == CGRequestType.SCHEDULE_TIME:
            self._check_program_description_children(program_description, tables, errs, "CG011")
            self._check_program_information(program_description, state, errs)
            self._check_program_location(program_description, state, errs)
        elif request_type in NOW_NEXT_REQUESTS:
            code = "CG021" if request_type == CGRequestType.SCHEDULE_NOWNEXT else "CG031"
            self._check_program_description_children(program_description, all_tables, errs, code)
            state.group_ids = []
            if has_child(program_description, "GroupInformationTable"):
                self._check_group_information_now_next(program_description, state, errs)
            state.current_program_crid = self._check_program_information(program_description, state, errs)
            self._check_program_location(program_description, state, errs)
        elif request_type == CGRequestType.PROGRAM_INFO:
            self._check_program_description_children(program_description, tables, errs, "CG041")
            self._check_program_information(program_description, state, errs)
            self._check_program_location(program_description, state, errs)
        elif request_type == CGRequestType.MORE_EPISODES:
            self._check_program_description_children(program_description, all_tables, errs, "CG051")
            state.group_ids = []
            self._check_group_information(program_description, state, errs)
            self._check_program_information(program_description, state, errs)
            self._check_program_location(program_description, state, errs)
        elif request_type in (CGRequestType.BOX_SET_CATEGORIES, CGRequestType.BOX_SET_LISTS):
            code = "CG061" if request_type == CGRequestType.BOX_SET_CATEGORIES else "CG071"
            self._check_program_description_children(program_description, ["GroupInformationTable"], errs, code)
            self._check_group_information(program_description, state, errs)
        elif request_type == CGRequestType.BOX_SET_CONTENTS:
            if not self._check_program_description_children(program_description, all_tables, errs, "CG081"):
                errs.error_description(
                    "CG081",
                    clause="A177 clause 6.8.4.3",
                    description=f"the required child elements of {elementize('ProgramDescription')} for Box Set "
                                f"Contents need to be provided",
                )
            state.group_ids = []
            self._check_group_information(program_description, state, errs)
            self._check_program_information(program_description, state, errs)
            self._check_program_location(program_description, state, errs)

    def do_validate_content_guide(self, text: Any, request_type: Any, errs: ErrorList,
                                  report_schema_version: bool = True) -> None:
        """
        Validate a content guide response, recording findings in an existing ErrorList.

        Never raises for document content: an unexpected failure inside the
        walk is logged and recorded as an APPLICATION finding.

        Args:
            text: TV-Anytime XML as str or bytes
            request_type: CGRequestType or its query value, e.g. "NowNext"
            errs: Finding collector
            report_schema_version: Report out of date or draft schemas
        """
        self._num_requests += 1
        if text is None:
            errs.add_error(**application_error("CG000", "do_validate_content_guide", "text"))
            return

        resolved = CGRequestType.from_value(request_type)
        if resolved is None:
            errs.add_error(
                type=Severity.APPLICATION,
                code="CG008",
                message=f"request type {quote(request_type)} is not supported",
                key=APPLICATION_ERROR_KEY,
            )
            return

        try:
            self._check_content_guide(text, resolved, errs, report_schema_version)
        except Exception as e:
            logger.exception(f"Unexpected failure while validating content guide: {e}")
            errs.add_error(
                type=Severity.APPLICATION,
                code="CG999",
                message=f"validation stopped by an internal error: {e}",
                key=APPLICATION_ERROR_KEY,
            )
        logger.info(
            f"Content guide ({resolved.value}) validated: {errs.num_errors()} errors, "
            f"{errs.num_warnings()} warnings, {errs.num_informationals()} informationals"
        )

    def validate_content_guide(self, text: Any, request_type: Any, report_schema_version: bool = True) -> ErrorList:
        """
        Validate a content guide response.

        Args:
            text: TV-Anytime XML as str or bytes
            request_type: The query the response answers

        Returns:
            ErrorList with the findings
        """
        errs = ErrorList()
        self.do_validate_content_guide(text, request_type, errs, report_schema_version)
        return errs
