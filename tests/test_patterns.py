"""
Value Syntax Tests for the DVB-I Validators

Run with: pytest tests/test_patterns.py -v
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core import patterns
from dvbi_core.utils import duplicated_value, is_in, parse_datetime, parse_iso_duration, un_entity


class TestURLPatterns:
    """Tests for URL and URI syntax checks."""

    @pytest.mark.parametrize("url", [
        "http://example.com/list.xml",
        "https://example.com:8443/dvbi/sl?country=DEU",
    ])
    def test_http_url_accepted(self, url):
        """Absolute http and https URLs are accepted."""
        assert patterns.is_http_url(url)

    @pytest.mark.parametrize("url", [
        "ftp://example.com/list.xml",
        "example.com/list.xml",
        "http:///nohost",
        "http://exa mple.com/",
        "",
        None,
    ])
    def test_http_url_rejected(self, url):
        """Other schemes, relative references and whitespace are rejected."""
        assert not patterns.is_http_url(url)

    def test_http_path_url_needs_trailing_slash(self):
        """A path URL must end with '/'."""
        assert patterns.is_http_path_url("https://example.com/cg/")
        assert not patterns.is_http_path_url("https://example.com/cg")

    def test_urn(self):
        """URNs need a namespace identifier and a specific string."""
        assert patterns.is_urn("urn:dvb:metadata:cs:HowRelatedCS:2021:1001.2")
        assert not patterns.is_urn("urn:dvb")

    def test_data_uri(self):
        """RFC 2397 data URLs are recognised."""
        assert patterns.is_data_uri("data:image/png;base64,iVBORw0KGgo=")
        assert not patterns.is_data_uri("https://example.com/logo.png")


class TestIdentifierPatterns:
    """Tests for TAG URI, CRID and DVB locator checks."""

    def test_tag_uri(self):
        """RFC 4151 TAG URIs are accepted."""
        assert patterns.is_tag_uri("tag:example.com,2024:sl1")
        assert patterns.is_tag_uri("tag:example.com,2024-01-31:services/one")

    def test_tag_uri_rejects_other_schemes(self):
        """A URL is not a TAG URI."""
        assert not patterns.is_tag_uri("https://example.com/sl1")
        assert not patterns.is_tag_uri("tag:example.com:sl1")

    def test_crid(self):
        """CRIDs need an authority and a data part."""
        assert patterns.is_crid_uri("crid://example.com/programme/1")
        assert not patterns.is_crid_uri("programme/1")

    def test_dvb_locator(self):
        """DVB locators use hexadecimal triplets and an event id."""
        assert patterns.is_dvb_locator("dvb://233a.1004.1044;2f")
        assert not patterns.is_dvb_locator("dvb://233a.1004.1044")


class TestTimePatterns:
    """Tests for date, time and duration syntax."""

    def test_zulu_time(self):
        """Times of day must be in UTC."""
        assert patterns.is_zulu_time("23:59:59Z")
        assert not patterns.is_zulu_time("24:00:00Z")
        assert not patterns.is_zulu_time("10:00:00")

    def test_iso_duration(self):
        """ISO 8601 durations."""
        assert patterns.is_iso_duration("PT1H30M")
        assert not patterns.is_iso_duration("1H30M")

    def test_service_days_list(self):
        """Days are numbered 1 to 7."""
        assert patterns.is_service_days_list("1 2 3")
        assert not patterns.is_service_days_list("0 8")


class TestLanguagePatterns:
    """Tests for language code syntax."""

    def test_tva_language_case_sensitive(self):
        """Upper case codes only pass a case-insensitive check."""
        assert patterns.is_tva_audio_language_type("en")
        assert not patterns.is_tva_audio_language_type("EN")
        assert patterns.is_tva_audio_language_type("EN", case_sensitive=False)

    def test_bcp47(self):
        """BCP 47 tags with script and region subtags."""
        assert patterns.is_valid_bcp47("en")
        assert patterns.is_valid_bcp47("zh-Hant-TW")
        assert not patterns.is_valid_bcp47("english!")


class TestPostcodePatterns:
    """Tests for postcode and wildcard postcode syntax."""

    def test_postcode(self):
        """Postcodes with an optional space or hyphen."""
        assert patterns.is_postcode("SW1A 1AA")
        assert not patterns.is_postcode("SW1A  1AA")

    @pytest.mark.parametrize("value", ["SW1*", "*1AA", "SW*1AA"])
    def test_wildcard_postcode(self, value):
        """A single '*' may appear at the start, middle or end."""
        assert patterns.is_wildcard_postcode(value)

    def test_wildcard_postcode_rejects_plain(self):
        """A postcode without a wildcard is not a wildcard postcode."""
        assert not patterns.is_wildcard_postcode("SW1A1AA")


class TestImageMimes:
    """Tests for image MIME type checks."""

    def test_allowed_mime(self):
        """JPEG, PNG and WebP are allowed."""
        assert patterns.valid_image_mime("image/webp")
        assert not patterns.valid_image_mime("image/gif")

    def test_image_set_needs_required_type(self):
        """A set of only WebP images lacks a fallback."""
        assert patterns.valid_image_set(["image/webp", "image/png"])
        assert not patterns.valid_image_set(["image/webp"])
        assert not patterns.valid_image_set([])


class TestUtils:
    """Tests for general value helpers."""

    def test_is_in_case_insensitive(self):
        """Case-insensitive membership."""
        assert is_in(["Sport", "News"], "sport", case_sensitive=False)
        assert not is_in(["Sport", "News"], "sport")

    def test_duplicated_value(self):
        """The second occurrence is reported."""
        found = set()
        assert not duplicated_value(found, "a")
        assert duplicated_value(found, "a")

    def test_un_entity(self):
        """Each entity counts as one character."""
        assert un_entity("Tom &amp; Jerry") == "Tom * Jerry"

    def test_parse_iso_duration_adds_to_datetime(self):
        """Durations are added component by component."""
        start = parse_datetime("2024-01-31T10:00:00Z")
        end = parse_iso_duration("P1MT1H30M").add_to(start)
        assert end.month == 2
        assert end.day == 29
        assert end.hour == 11
        assert end.minute == 30

    def test_parse_iso_duration_rejects_garbage(self):
        """Unsupported durations raise ValueError."""
        with pytest.raises(ValueError):
            parse_iso_duration("one hour")

    def test_parse_datetime_unparseable(self):
        """An invalid dateTime gives None."""
        assert parse_datetime("yesterday") is None
