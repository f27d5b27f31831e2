"""
Pattern and Format Checks
=========================

Stateless predicates for the lexical formats used in DVB-I documents.

Every predicate accepts any input and returns False rather than raising
when the value is missing, not a string, or malformed.

Example:
    >>> from dvbi_core.patterns import is_tag_uri, is_iso_duration
    >>> is_tag_uri("tag:example.com,2024:service1")
    True
    >>> is_iso_duration("PT1H30M")
    True
"""

import re
from typing import Iterable, Optional
from urllib.parse import urlparse

# ---------------------------------------------------------------------------
# URI building blocks (MPEG-DASH schema syntax)
# ---------------------------------------------------------------------------

_ALPHA = "a-zA-Z"
_DIGIT = "0-9"
_HEX = "0-9a-fA-F"
_UNRESERVED = rf"{_ALPHA}{_DIGIT}$\-_.+!*(),\""
_CHRS = rf"{_UNRESERVED}%&~;=:@"

_SCHEME = rf"[{_ALPHA}][{_ALPHA}{_DIGIT}+\-.]*"
_USER = rf"([{_UNRESERVED}%&~;=]+)"
_NAMED_HOST = rf"[{_ALPHA}{_DIGIT}%._~\-]+"
_IPV6_HOST = rf"\[[{_HEX}:.]+\]"
_PORT = r"(:\d{1,5})"
_PATH = rf"(/[{_CHRS}]+)"
_AUTHORITY_AND_PATH = rf"({_USER}(:{_USER})?@)?({_NAMED_HOST}|{_IPV6_HOST}){_PORT}?{_PATH}*/?"
_PATH_NO_AUTHORITY = rf"(/?[{_CHRS}]+{_PATH}*/?)"
_RELATIVE_PATH = rf"[{_CHRS}]+{_PATH}*"
_ABSOLUTE_PATH = rf"{_PATH}+"
_QUERY = rf"(\?[{_CHRS}/?]*)"
_FRAGMENT = rf"(#[{_CHRS}/?]*)"
_URL = (
    rf"({_SCHEME}:(//{_AUTHORITY_AND_PATH}|{_PATH_NO_AUTHORITY})"
    rf"|({_RELATIVE_PATH}/?|{_ABSOLUTE_PATH}/?)){_QUERY}?{_FRAGMENT}?"
)

_NAMESPACE_ID = rf"[{_ALPHA}{_DIGIT}][{_ALPHA}{_DIGIT}\-]{{1,31}}"
_NAMESPACE_SPECIFIC = rf"[{_ALPHA}{_DIGIT}()+,\-.:=@;$_!*'%/?#]+"
_URN = rf"urn:{_NAMESPACE_ID}:{_NAMESPACE_SPECIFIC}"

URL_REGEX = re.compile(rf"^{_URL}$", re.IGNORECASE)
URN_REGEX = re.compile(rf"^{_URN}$", re.IGNORECASE)
DATA_URI_REGEX = re.compile(r"^data:((?:\w+/(?:(?!;).)+)?)((?:;[\w\W]*?[^;])*),(.+)$", re.IGNORECASE)

# ---------------------------------------------------------------------------
# BCP 47 language tags
# ---------------------------------------------------------------------------

_REGULAR = r"(art-lojban|cel-gaulish|no-bok|no-nyn|zh-guoyu|zh-hakka|zh-min|zh-min-nan|zh-xiang)"
_IRREGULAR = (
    r"(en-GB-oed|i-ami|i-bnn|i-default|i-enochian|i-hak|i-klingon|i-lux|i-mingo|i-navajo"
    r"|i-pwn|i-tao|i-tay|i-tsu|sgn-BE-FR|sgn-BE-NL|sgn-CH-DE)"
)
_ALPHANUM = f"{_ALPHA}{_DIGIT}"
_PRIVATE_USE = rf"x(-[{_ALPHANUM}]{{1,8}})+"
_SINGLETON = rf"[{_DIGIT}A-WY-Za-wy-z]"
_EXTENSION = rf"{_SINGLETON}(-[{_ALPHANUM}]{{2,8}})+"
_VARIANT = rf"([{_ALPHANUM}]{{5,8}}|[{_DIGIT}][{_ALPHANUM}]{{3}})"
_REGION = rf"([{_ALPHA}]{{2}}|[{_DIGIT}]{{3}})"
_SCRIPT = rf"[{_ALPHA}]{{4}}"
_EXTLANG = rf"[{_ALPHA}]{{3}}(-[{_ALPHA}]{{3}}){{0,2}}"
_LANGUAGE = rf"(([{_ALPHA}]{{2,3}}(-{_EXTLANG})?)|[{_ALPHA}]{{4}}|[{_ALPHA}]{{5,8}})"
_LANGTAG = (
    rf"({_LANGUAGE}(-{_SCRIPT})?(-{_REGION})?(-{_VARIANT})*(-{_EXTENSION})*(-{_PRIVATE_USE})?)"
)
BCP47_REGEX = re.compile(rf"^({_IRREGULAR}|{_REGULAR}|{_LANGTAG}|{_PRIVATE_USE})$")

# ---------------------------------------------------------------------------
# Simple formats
# ---------------------------------------------------------------------------

RATIO_REGEX = re.compile(r"^\d+:\d+$")
UTC_DATETIME_REGEX = re.compile(
    r"^(-?(?:[1-9][0-9]*)?[0-9]{4})-(1[0-2]|0[1-9])-(3[01]|0[1-9]|[12][0-9])"
    r"T(2[0-3]|[01][0-9]):([0-5][0-9]):([0-5][0-9])(\.[0-9]{1,3})?Z?$"
)
ISO_DURATION_REGEX = re.compile(
    r"^[-+]?P(?!$)(([-+]?\d+Y)|([-+]?\d+\.\d+Y$))?(([-+]?\d+M)|([-+]?\d+\.\d+M$))?"
    r"(([-+]?\d+W)|([-+]?\d+\.\d+W$))?(([-+]?\d+D)|([-+]?\d+\.\d+D$))?"
    r"(T(?=[\d+-])(([-+]?\d+H)|([-+]?\d+\.\d+H$))?(([-+]?\d+M)|([-+]?\d+\.\d+M$))?"
    r"([-+]?\d+(\.\d+)?S)?)?$"
)
DVB_LOCATOR_REGEX = re.compile(rf"^dvb://[{_HEX}]+\.[{_HEX}]*\.[{_HEX}]+;[{_HEX}]+$")
POSTCODE_REGEX = re.compile(r"^[0-9a-z]+([- ][0-9a-z]+)?$", re.IGNORECASE)
WILDCARD_FIRST_REGEX = re.compile(r"^(\*[0-9a-z]*[\- ]?[0-9a-z]+)$", re.IGNORECASE)
WILDCARD_MIDDLE_REGEX = re.compile(
    r"^(([0-9a-z]+\*[\- ]?[0-9a-z]+)|([0-9a-z]+[\- ]?\*[0-9a-z]+))$", re.IGNORECASE
)
WILDCARD_END_REGEX = re.compile(r"^([0-9a-z]+[\- ]?[0-9a-z]*\*)$", re.IGNORECASE)
EXTENSION_NAME_REGEX = re.compile(r"^[0-9a-z][0-9a-z:\-/.]*[0-9a-z]$", re.IGNORECASE)
FRAME_RATE_REGEX = re.compile(r"^\d{1,3}(\.\d{1,3})?$")
FRAME_RATE_NTSC_REGEX = re.compile(r"^\d{1,3}/1\.001$")
DOMAIN_NAME_REGEX = re.compile(r"^[a-z\d]+([\-.][a-z\d]+)*\.[a-z]{2,5}(:\d{1,5})?(/.*)?$", re.IGNORECASE)
RTSP_REGEX = re.compile(r"^rtsp://.*$", re.IGNORECASE)
DAYS_LIST_REGEX = re.compile(r"^([1-7]\s+)*[1-7]$")
ZULU_TIME_REGEX = re.compile(r"^(([01]\d|2[0-3]):[0-5]\d:[0-5]\d(\.\d+)?)Z$")
TVA_LANGUAGE_REGEX = re.compile(r"^[a-z]{1,8}(-[a-z0-9]{1,8})*$")
TVA_LANGUAGE_REGEX_I = re.compile(r"^[a-z]{1,8}(-[a-z0-9]{1,8})*$", re.IGNORECASE)
ASCII_REGEX = re.compile(r"^[\x21-\x7e]*$")
TAG_URI_REGEX = re.compile(
    r"^tag:(([\da-z\-._]+@)?[\da-z][\da-z-]*[\da-z]*(\.[\da-z][\da-z-]*[\da-z]*)*),"
    r"\d{4}(-\d{2}(-\d{2})?)?:(['\da-z\-._~!$&()*+,;=:@?/]|%[0-9a-f]{2})*"
    r"(#(['a-z0-9\-._~!$&()*+,;=:@\\?/]|%[0-9a-f]{2})*)?$",
    re.IGNORECASE,
)
CRID_REGEX = re.compile(r"crid://(.*)/(.*)", re.IGNORECASE)

# ---------------------------------------------------------------------------
# MIME types
# ---------------------------------------------------------------------------

JPEG_MIME = "image/jpeg"
PNG_MIME = "image/png"
WEBP_MIME = "image/webp"

REQUIRED_IMAGE_MIMES = frozenset({JPEG_MIME, PNG_MIME})
ALLOWED_IMAGE_MIMES = frozenset({JPEG_MIME, PNG_MIME, WEBP_MIME})


def _text(value) -> Optional[str]:
    return value.strip() if isinstance(value, str) else None


def _mime(value) -> Optional[str]:
    return value.strip().lower() if isinstance(value, str) else None


# URLs and identifiers


def is_http_url(url) -> bool:
    """True for an absolute http or https URL with a host."""
    value = _text(url)
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def is_http_path_url(url) -> bool:
    """An HTTP(S) URL whose path ends with '/'."""
    if not is_http_url(url):
        return False
    return urlparse(url.strip()).path.endswith("/")


def is_url(url) -> bool:
    return isinstance(url, str) and bool(URL_REGEX.match(url))


def is_urn(urn) -> bool:
    return isinstance(urn, str) and bool(URN_REGEX.match(urn))


def is_uri(uri) -> bool:
    """A URL or URN, using the syntax of the MPEG-DASH schema."""
    return is_url(uri) or is_urn(uri)


def is_data_uri(uri) -> bool:
    return isinstance(uri, str) and bool(DATA_URI_REGEX.match(uri))


def is_rtsp_url(url) -> bool:
    value = _text(url)
    return bool(value) and is_url(value) and bool(RTSP_REGEX.match(value))


def is_domain_name(domain) -> bool:
    value = _text(domain)
    return bool(value) and bool(DOMAIN_NAME_REGEX.match(value))


def is_tag_uri(identifier) -> bool:
    """True when the identifier is an IETF RFC 4151 TAG URI."""
    value = _text(identifier)
    return bool(value) and bool(TAG_URI_REGEX.match(value))


def is_crid_uri(value) -> bool:
    text = _text(value)
    return bool(text) and bool(CRID_REGEX.match(text))


# Dates and times


def is_utc_date_time(value) -> bool:
    text = _text(value)
    return bool(text) and bool(UTC_DATETIME_REGEX.match(text))


def is_zulu_time(value) -> bool:
    text = _text(value)
    return bool(text) and bool(ZULU_TIME_REGEX.match(text))


def is_iso_duration(value) -> bool:
    text = _text(value)
    return bool(text) and bool(ISO_DURATION_REGEX.match(text))


def is_service_days_list(value) -> bool:
    """Space separated list of day numbers 1 to 7."""
    text = _text(value)
    return bool(text) and bool(DAYS_LIST_REGEX.match(text))


# DVB specific


def is_dvb_locator(value) -> bool:
    """dvb://onid.tsid.sid;eventid with hexadecimal components."""
    text = _text(value)
    return bool(text) and bool(DVB_LOCATOR_REGEX.match(text))


def is_postcode(value) -> bool:
    text = _text(value)
    return bool(text) and bool(POSTCODE_REGEX.match(text))


def is_wildcard_postcode(value) -> bool:
    """A postcode with a single '*' at the start, middle or end."""
    text = _text(value)
    if not text:
        return False
    return bool(
        WILDCARD_END_REGEX.match(text)
        or WILDCARD_MIDDLE_REGEX.match(text)
        or WILDCARD_FIRST_REGEX.match(text)
    )


def is_extension_name(value) -> bool:
    text = _text(value)
    return bool(text) and bool(EXTENSION_NAME_REGEX.match(text))


def is_ratio(value) -> bool:
    text = _text(value)
    return bool(text) and bool(RATIO_REGEX.match(text))


def is_frame_rate(value) -> bool:
    """Decimal frame rate ('25', '59.94') or an NTSC style 'N/1.001'."""
    text = _text(value)
    if not text:
        return False
    return bool(FRAME_RATE_REGEX.match(text) or FRAME_RATE_NTSC_REGEX.match(text))


# Languages and characters


def is_valid_bcp47(tag) -> bool:
    """Lexical check of a BCP 47 language tag. Registry membership is not checked."""
    return isinstance(tag, str) and bool(BCP47_REGEX.match(tag))


def is_tva_audio_language_type(code, case_sensitive: bool = True) -> bool:
    if not isinstance(code, str):
        return False
    regex = TVA_LANGUAGE_REGEX if case_sensitive else TVA_LANGUAGE_REGEX_I
    return bool(regex.match(code))


def is_ascii(value) -> bool:
    """Only printable ASCII characters, no whitespace."""
    return isinstance(value, str) and bool(ASCII_REGEX.match(value))


def has_non_printable_chars(value) -> bool:
    """True if any character is outside the printable ASCII range."""
    if not isinstance(value, str):
        return False
    return any(ord(ch) < 0x20 or ord(ch) > 0x7E for ch in value)


# Images


def is_jpeg_mime(mime) -> bool:
    return _mime(mime) == JPEG_MIME


def is_png_mime(mime) -> bool:
    return _mime(mime) == PNG_MIME


def is_webp_mime(mime) -> bool:
    return _mime(mime) == WEBP_MIME


def valid_image_mime(mime) -> bool:
    return _mime(mime) in ALLOWED_IMAGE_MIMES


def valid_image_set(mimes: Iterable[str]) -> bool:
    """
    Check the MIME types declared for a set of images.

    Every type must be an allowed image type and at least one must be a
    required type (JPEG or PNG). An empty set is not valid.

    Example:
        >>> valid_image_set(["image/png", "image/webp"])
        True
        >>> valid_image_set(["image/webp"])
        False
    """
    unique = {_mime(m) for m in mimes or [] if _mime(m)}
    if not unique:
        return False
    if not unique <= ALLOWED_IMAGE_MIMES:
        return False
    return bool(unique & REQUIRED_IMAGE_MIMES)
