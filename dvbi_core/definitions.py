"""
DVB-I Vocabulary Definitions
============================

Namespaces, classification scheme term URIs and value tables used by the
Service List and Content Guide checks.

Element and attribute names are written inline by the checks; only values
that are shared between modules or that come from a published
classification scheme live here.
"""

from typing import Dict, FrozenSet, List, Tuple

# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

A177_NAMESPACE = "urn:dvb:metadata:servicediscovery:2019"
A177R1_NAMESPACE = "urn:dvb:metadata:servicediscovery:2020"
A177R2_NAMESPACE = "urn:dvb:metadata:servicediscovery:2021"
A177R3_NAMESPACE = "urn:dvb:metadata:servicediscovery:2022"
A177R4_NAMESPACE = "urn:dvb:metadata:servicediscovery:2022b"
A177R5_NAMESPACE = "urn:dvb:metadata:servicediscovery:2023"
A177R6_NAMESPACE = "urn:dvb:metadata:servicediscovery:2024"
A177R7_NAMESPACE = "urn:dvb:metadata:servicediscovery:2025"

TVA_NAMESPACE_PREFIX = "urn:tva:metadata"
TVA_2019_NAMESPACE = f"{TVA_NAMESPACE_PREFIX}:2019"
TVA_2023_NAMESPACE = f"{TVA_NAMESPACE_PREFIX}:2023"
TVA_2024_NAMESPACE = f"{TVA_NAMESPACE_PREFIX}:2024"

SLEPR_NAMESPACE = "urn:dvb:metadata:servicelistdiscovery:2024"

STANDARD_VERSION_PREFIX = "urn:dvb:metadata:dvbi:standardversion"

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

MAX_SUBREGION_LEVELS = 3
MAX_TITLE_LENGTH = 80
MAX_KEYWORD_LENGTH = 32
MAX_KEYWORDS_PER_LANGUAGE = 20
MAX_EXPLANATORY_TEXT_LENGTH = 160
MAX_ORGANIZATION_NAME_LENGTH = 32
MAX_NAME_PART_LENGTH = 32
MAX_CREDITS_ITEMS = 40

# lowest and highest logical channel number
MIN_LCN = 1
MAX_LCN = 9999

# ---------------------------------------------------------------------------
# Synopsis lengths (TV-Anytime SynopsisLengthType)
# ---------------------------------------------------------------------------

SYNOPSIS_BRIEF = "brief"
SYNOPSIS_SHORT = "short"
SYNOPSIS_MEDIUM = "medium"
SYNOPSIS_LONG = "long"
SYNOPSIS_EXTENDED = "extended"

SYNOPSIS_BRIEF_LENGTH = 50
SYNOPSIS_SHORT_LENGTH = 90
SYNOPSIS_MEDIUM_LENGTH = 250
SYNOPSIS_LONG_LENGTH = 1200
SYNOPSIS_EXTENDED_MIN_LENGTH = SYNOPSIS_LONG_LENGTH

# maximum lengths by label; "extended" carries a minimum instead
SYNOPSIS_MAX_LENGTHS: Dict[str, int] = {
    SYNOPSIS_BRIEF: SYNOPSIS_BRIEF_LENGTH,
    SYNOPSIS_SHORT: SYNOPSIS_SHORT_LENGTH,
    SYNOPSIS_MEDIUM: SYNOPSIS_MEDIUM_LENGTH,
    SYNOPSIS_LONG: SYNOPSIS_LONG_LENGTH,
}
SYNOPSIS_MIN_LENGTHS: Dict[str, int] = {
    SYNOPSIS_EXTENDED: SYNOPSIS_EXTENDED_MIN_LENGTH,
}
SYNOPSIS_LABELS: Tuple[str, ...] = (
    SYNOPSIS_BRIEF, SYNOPSIS_SHORT, SYNOPSIS_MEDIUM, SYNOPSIS_LONG, SYNOPSIS_EXTENDED,
)

# ---------------------------------------------------------------------------
# HowRelated classification scheme values
# ---------------------------------------------------------------------------

_DVB_RELATED_CS_V1 = "urn:dvb:metadata:cs:HowRelatedCS:2019"
_DVB_RELATED_CS_V2 = "urn:dvb:metadata:cs:HowRelatedCS:2020"
_DVB_RELATED_CS_V3 = "urn:dvb:metadata:cs:HowRelatedCS:2021"

BANNER_OUTSIDE_AVAILABILITY_V1 = f"{_DVB_RELATED_CS_V1}:1000.1"
LOGO_SERVICE_LIST_V1 = f"{_DVB_RELATED_CS_V1}:1001.1"
LOGO_SERVICE_V1 = f"{_DVB_RELATED_CS_V1}:1001.2"
LOGO_CG_PROVIDER_V1 = f"{_DVB_RELATED_CS_V1}:1002.1"

BANNER_OUTSIDE_AVAILABILITY_V2 = f"{_DVB_RELATED_CS_V2}:1000.1"
BANNER_CONTENT_FINISHED_V2 = f"{_DVB_RELATED_CS_V2}:1000.2"
LOGO_SERVICE_LIST_V2 = f"{_DVB_RELATED_CS_V2}:1001.1"
LOGO_SERVICE_V2 = f"{_DVB_RELATED_CS_V2}:1001.2"
LOGO_CG_PROVIDER_V2 = f"{_DVB_RELATED_CS_V2}:1002.1"

BANNER_OUTSIDE_AVAILABILITY_V3 = f"{_DVB_RELATED_CS_V3}:1000.1"
BANNER_CONTENT_FINISHED_V3 = f"{_DVB_RELATED_CS_V3}:1000.2"
LOGO_SERVICE_LIST_V3 = f"{_DVB_RELATED_CS_V3}:1001.1"
LOGO_SERVICE_V3 = f"{_DVB_RELATED_CS_V3}:1001.2"
SERVICE_BANNER_V4 = f"{_DVB_RELATED_CS_V3}:1001.3"
LOGO_CG_PROVIDER_V3 = f"{_DVB_RELATED_CS_V3}:1002.1"

PROMOTIONAL_STILL_IMAGE_URI = "urn:tva:metadata:cs:HowRelatedCS:2012:19"
TEMPLATE_AIT_URI = "urn:fvc:metadata:cs:HowRelatedCS:2018:templateAIT"
RESTART_LINK_URI = "urn:fvc:metadata:cs:HowRelatedCS:2018:restart"

_PAGINATION_PREFIX = "urn:fvc:metadata:cs:HowRelatedCS:2015-12:pagination:"
PAGINATION_FIRST_URI = f"{_PAGINATION_PREFIX}first"
PAGINATION_PREV_URI = f"{_PAGINATION_PREFIX}prev"
PAGINATION_NEXT_URI = f"{_PAGINATION_PREFIX}next"
PAGINATION_LAST_URI = f"{_PAGINATION_PREFIX}last"

# ---------------------------------------------------------------------------
# Linked applications
# ---------------------------------------------------------------------------

_LINKED_APPLICATION_CS = "urn:dvb:metadata:cs:LinkedApplicationCS:2019"
_LINKED_APPLICATION_CS_2024 = "urn:dvb:metadata:cs:LinkedApplicationCS:2024"
_LINKED_APPLICATION_CS_2025 = "urn:dvb:metadata:cs:LinkedApplicationCS:2025"

APP_IN_PARALLEL = f"{_LINKED_APPLICATION_CS}:1.1"
APP_IN_CONTROL = f"{_LINKED_APPLICATION_CS}:1.2"
APP_OUTSIDE_AVAILABILITY = f"{_LINKED_APPLICATION_CS}:2"
APP_SERVICE_PROVIDER = f"{_LINKED_APPLICATION_CS_2024}:3"
APP_IN_SERIES = f"{_LINKED_APPLICATION_CS_2025}:1.3"
APP_LIST_INSTALLATION = f"{_LINKED_APPLICATION_CS_2025}:4.1"
APP_WITHDRAW_AGREEMENT = f"{_LINKED_APPLICATION_CS_2025}:4.2"
APP_RENEW_AGREEMENT = f"{_LINKED_APPLICATION_CS_2025}:4.3"

XML_AIT_CONTENT_TYPE = "application/vnd.dvb.ait+xml"
HTML5_APP = "text/html"
XHTML_APP = "application/xhtml+xml"

VALID_APPLICATION_TYPES: Tuple[str, ...] = (XML_AIT_CONTENT_TYPE, HTML5_APP, XHTML_APP)

# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------

_DVB_SOURCE_PREFIX = "urn:dvb:metadata:source"
DVBT_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:dvb-t"
DVBS_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:dvb-s"
DVBC_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:dvb-c"
DVBIPTV_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:dvb-iptv"
DVBDASH_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:dvb-dash"
DVBAPPLICATION_SOURCE_TYPE = f"{_DVB_SOURCE_PREFIX}:application"

CONTENT_TYPE_DASH_MPD = "application/dash+xml"
CONTENT_TYPE_DVB_PLAYLIST = "application/xml"
CONTENT_TYPE_XML = "application/xml"

DVBS_POLARIZATION_VALUES: Tuple[str, ...] = ("horizontal", "vertical", "left circular", "right circular")
ENCRYPTION_VALID_TYPES: Tuple[str, ...] = ("cenc", "cbcs", "cbcs-10")
ALLOWED_TRANSPORT_PROTOCOLS: Tuple[str, ...] = ("RTP-AVP", "UDP-FEC")

# Common Media Client Data reporting in DASH delivery
CMCD_MODE_REQUEST = "urn:dvb:metadata:cmcd:delivery:request"
CMCD_SUPPORTED_VERSION = 1

NVOD_MODE_REFERENCE = "reference"
NVOD_MODE_TIMESHIFTED = "timeshifted"

# ServiceType terms for linear services end with this
LINEAR_SERVICE_TYPE_SUFFIX = "linear"

ALL_GENRE_TYPES: Tuple[str, ...] = ("main", "secondary", "other")

# delivery parameter elements that can appear in a ServiceInstance
DELIVERY_PARAMETER_ELEMENTS: Tuple[str, ...] = (
    "DVBTDeliveryParameters",
    "DVBSDeliveryParameters",
    "DVBCDeliveryParameters",
    "SATIPDeliveryParameters",
    "RTSPDeliveryParameters",
    "MulticastTSDeliveryParameters",
    "DASHDeliveryParameters",
    "OtherDeliveryParameters",
    "IdentifierBasedDeliveryParameters",
)

# ---------------------------------------------------------------------------
# Satellite tuning
# ---------------------------------------------------------------------------

MODULATION_S = "DVB-S"
MODULATION_S2 = "DVB-S2"
MODULATION_S2X = "DVB-S2X"

_S_FEC = ("1/2", "2/3", "3/4", "5/6", "7/8")
_S2_ROLLOFF = ("0.25", "0.20", "0.35")
_S2_MODULATION = ("8PSK", "QPSK")

SATELLITE_ROLLOFF: Dict[str, Tuple[str, ...]] = {
    MODULATION_S: ("0.35",),
    MODULATION_S2: _S2_ROLLOFF,
    MODULATION_S2X: ("0.15", "0.10", "0.05") + _S2_ROLLOFF,
}
SATELLITE_FEC: Dict[str, Tuple[str, ...]] = {
    MODULATION_S: _S_FEC,
    MODULATION_S2: _S_FEC,
    MODULATION_S2X: (
        "1/3", "1/4", "2/5", "3/5", "4/5", "5/9", "7/9", "8/9", "8/15", "9/10", "9/20",
        "11/15", "11/20", "13/18", "13/45", "23/36", "25/36", "26/45", "28/45", "32/45", "77/90",
    ) + _S_FEC,
}
SATELLITE_MODULATION: Dict[str, Tuple[str, ...]] = {
    MODULATION_S: ("QPSK",),
    MODULATION_S2: _S2_MODULATION,
    MODULATION_S2X: (
        "8PSK-L", "16APSK", "16APSK-L", "32APSK", "32APSK-L", "64APSK", "64APSK-L",
    ) + _S2_MODULATION,
}
# sub-elements of DVBSDeliveryParameters that only exist for a modulation system
SATELLITE_FORBIDDEN: Dict[str, Tuple[str, ...]] = {
    MODULATION_S: ("ModcodMode", "InputStreamIdentifier", "ChannelBonding"),
    MODULATION_S2: ("ModcodMode", "InputStreamIdentifier", "ChannelBonding"),
    MODULATION_S2X: (),
}

# ---------------------------------------------------------------------------
# Audio, video and captions
# ---------------------------------------------------------------------------

COLORIMETRY_BT709 = "urn:dvb:metadata:cs:ColorimetryCS:2020:1"
COLORIMETRY_BT2020_NCL = "urn:dvb:metadata:cs:ColorimetryCS:2020:2.1"
COLORIMETRY_BT2100_NCL = "urn:dvb:metadata:cs:ColorimetryCS:2020:3.1"

AUDIO_PURPOSE_MAIN = "urn:tva:metadata:cs:AudioPurposeCS:2007:1"
AUDIO_PURPOSE_VISUAL_IMPAIRED = "urn:tva:metadata:cs:AudioPurposeCS:2007:6"
AUDIO_PURPOSE_HEARING_IMPAIRED = "urn:tva:metadata:cs:AudioPurposeCS:2007:7"
AUDIO_PURPOSE_DIALOGUE_ENHANCEMENT = "urn:tva:metadata:cs:AudioPurposeCS:2007:8"

# prior to A177r6 the accessibility purposes were signalled in AudioAttributes
AUDIO_PURPOSES_PRE_R6: Tuple[str, ...] = (
    AUDIO_PURPOSE_MAIN,
    AUDIO_PURPOSE_VISUAL_IMPAIRED,
    AUDIO_PURPOSE_HEARING_IMPAIRED,
    AUDIO_PURPOSE_DIALOGUE_ENHANCEMENT,
)

DVB_BITMAP_SUBTITLES = "urn:tva:metadata:cs:CaptionCodingFormatCS:2015:2.1"
DVB_CHARACTER_SUBTITLES = "urn:tva:metadata:cs:CaptionCodingFormatCS:2015:2.2"
EBU_TT_D = "urn:tva:metadata:cs:CaptionCodingFormatCS:2015:3.2"

APPLICATION_SUBTITLE_CARRIAGE = "urn:tva:metadata:cs:SubtitleCarriageCS:2023:3"
APPLICATION_SUBTITLE_CODING = "urn:tva:metadata:cs:SubtitleCodingFormatCS:2023:4"

# HDR dynamic mapping information video conformance points start with this term
HDR_DMI_TERM_PREFIX = "2.3."

# ---------------------------------------------------------------------------
# MPEG-7
# ---------------------------------------------------------------------------

_FILE_FORMAT_CS = "urn:mpeg:mpeg7:cs:FileFormatCS:2001"
JPEG_IMAGE_CS_VALUE = f"{_FILE_FORMAT_CS}:1"
PNG_IMAGE_CS_VALUE = f"{_FILE_FORMAT_CS}:15"

_AUDIO_PRESENTATION_CS = "urn:mpeg:mpeg7:cs:AudioPresentationCS:2001"
AUDIO_PRESENTATION_MONO = f"{_AUDIO_PRESENTATION_CS}:2"
AUDIO_PRESENTATION_STEREO = f"{_AUDIO_PRESENTATION_CS}:3"
AUDIO_PRESENTATION_51 = f"{_AUDIO_PRESENTATION_CS}:5"

TITLE_TYPE_MAIN = "main"
TITLE_TYPE_SECONDARY = "secondary"
MPEG7_TITLE_TYPES: Tuple[str, ...] = (
    "main", "secondary", "alternative", "original", "popular", "opusNumber",
    "songTitle", "albumTitle", "seriesTitle", "episodeTitle",
)

# ---------------------------------------------------------------------------
# Content guide
# ---------------------------------------------------------------------------

_CRID_NOW_NEXT_PREFIX = "crid://dvb.org/metadata/schedules/now-next/"
CRID_NOW = f"{_CRID_NOW_NEXT_PREFIX}now"
CRID_LATER = f"{_CRID_NOW_NEXT_PREFIX}later"
CRID_EARLIER = f"{_CRID_NOW_NEXT_PREFIX}earlier"

EIT_PROGRAMME_CRID_TYPE = "eit-programme-crid"
EIT_SERIES_CRID_TYPE = "eit-series-crid"

MEDIA_AVAILABLE = "urn:fvc:metadata:cs:MediaAvailabilityCS:2014-07:media_available"
MEDIA_UNAVAILABLE = "urn:fvc:metadata:cs:MediaAvailabilityCS:2014-07:media_unavailable"
FORWARD_EPG_AVAILABLE = "urn:fvc:metadata:cs:FEPGAvailabilityCS:2014-10:fepg_available"
FORWARD_EPG_UNAVAILABLE = "urn:fvc:metadata:cs:FEPGAvailabilityCS:2014-10:fepg_unavailable"
RESTART_AVAILABLE = "urn:fvc:metadata:cs:RestartAvailabilityCS:2018:restart_available"
RESTART_CHECK = "urn:fvc:metadata:cs:RestartAvailabilityCS:2018:restart_check"
RESTART_PENDING = "urn:fvc:metadata:cs:RestartAvailabilityCS:2018:restart_pending"

KEYWORD_TYPES: Tuple[str, ...] = ("main", "other")
GENRE_TYPE_MAIN = "main"
GENRE_TYPE_OTHER = "other"
CPS_INDEX_TYPE = "CPSIndex"
SIGN_LANGUAGE_CODE = "sgn"
EXPLANATORY_TEXT_LENGTH = "long"
MEMBER_OF_TYPE = "MemberOfType"
PROGRAM_GROUP_TYPE = "ProgramGroupTypeType"
GROUP_TYPE_OTHER_COLLECTION = "otherCollection"
DELIVERY_MODE_STREAMING = "streaming"

# minimum ages outside this range must be the "no rating" value
MIN_PARENTAL_AGE = 4
MAX_PARENTAL_AGE = 18
NO_PARENTAL_RATING = 255

DTG_CONTENT_WARNING_CS = "urn:dtg:metadata:cs:DTGContentWarningCS:2011"
DVB_PARENTAL_GUIDANCE_CS = "urn:dvb:metadata:cs:ParentalGuidanceCS:2007"

# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------

EXTENSION_DVB_HB = "DVB-HB"
EXTENSION_HBBTV_TRIPLET = "urn:hbbtv:dvbi:service:serviceIdentifierTriplet"
EXTENSION_HLS = "vnd.apple.mpegurl"

# ---------------------------------------------------------------------------
# Registry queries
# ---------------------------------------------------------------------------

DELIVERY_DASH = "dvb-dash"
DELIVERY_DVBT = "dvb-t"
DELIVERY_DVBS = "dvb-s"
DELIVERY_DVBC = "dvb-c"
DELIVERY_IPTV = "dvb-iptv"
DELIVERY_APPLICATION = "application"

# delivery argument to the <ServiceListOffering><Delivery> children that satisfy it
DELIVERY_ELEMENTS: Dict[str, Tuple[str, ...]] = {
    DELIVERY_DASH: ("DASHDelivery",),
    DELIVERY_DVBT: ("DVBTDelivery",),
    DELIVERY_DVBS: ("DVBSDelivery",),
    DELIVERY_DVBC: ("DVBCDelivery",),
    DELIVERY_IPTV: ("RTSPDelivery", "MulticastTSDelivery"),
    DELIVERY_APPLICATION: ("ApplicationDelivery",),
}

BOOLEAN_VALUES: FrozenSet[str] = frozenset({"true", "false"})


def delivery_names() -> List[str]:
    """Return the permitted Delivery query values."""
    return list(DELIVERY_ELEMENTS.keys())
