"""
Service List Registry Tests

Run with: pytest tests/test_registry.py -v
"""

import json

import pytest
from lxml import etree

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.registry import (
    DeliverySystem,
    ProcessingMode,
    RegistryQuery,
    ServiceListRegistry,
    parse_user_agent,
)


NS = "urn:dvb:metadata:servicelistdiscovery:2024"
VERSION = "urn:dvb:metadata:dvbi:standardversion"

REGISTRY = f"""<?xml version="1.0" encoding="UTF-8"?>
<ServiceListEntryPoints xmlns="{NS}">
  <ServiceListRegistryEntity><Name>Test Registry</Name></ServiceListRegistryEntity>
  <ProviderOffering>
    <Provider><Name>Alpha TV</Name></Provider>
    <ServiceListOffering regulatorListFlag="true">
      <ServiceListName>Alpha Germany</ServiceListName>
      <ServiceListURI contentType="application/xml"><URI>https://alpha.example/de.xml</URI></ServiceListURI>
      <Delivery><DASHDelivery/></Delivery>
      <Language>deu</Language>
      <TargetCountry>DEU,AUT</TargetCountry>
      <Genre>urn:dvb:metadata:cs:ServiceTypeCS:2019:linear</Genre>
      <RelatedMaterial>
        <HowRelated href="urn:dvb:metadata:cs:HowRelatedCS:2020:1001.1"/>
        <MediaLocator>
          <MediaUri contentType="image/png">data:image/png;base64,iVBORw0KGgo=</MediaUri>
        </MediaLocator>
        <MediaLocator>
          <MediaUri contentType="image/png">https://alpha.example/logo.png</MediaUri>
        </MediaLocator>
      </RelatedMaterial>
    </ServiceListOffering>
  </ProviderOffering>
  <ProviderOffering>
    <Provider><Name>Beta Media</Name></Provider>
    <ServiceListOffering>
      <ServiceListName>Beta UK</ServiceListName>
      <ServiceListURI contentType="application/xml" standardVersion="{VERSION}:6"><URI>https://beta.example/r6.xml</URI></ServiceListURI>
      <ServiceListURI contentType="application/xml" standardVersion="{VERSION}:7"><URI>https://beta.example/r7.xml</URI></ServiceListURI>
      <Delivery><DVBTDelivery/><RTSPDelivery/></Delivery>
      <Language>eng</Language>
      <TargetCountry>GBR</TargetCountry>
    </ServiceListOffering>
    <ServiceListOffering>
      <ServiceListName>Beta Anywhere</ServiceListName>
      <ServiceListURI contentType="application/xml"><URI>https://beta.example/all.xml</URI></ServiceListURI>
      <Delivery><DVBSDelivery/></Delivery>
    </ServiceListOffering>
  </ProviderOffering>
</ServiceListEntryPoints>"""


def list_names(document: bytes):
    """ServiceListName values of a filtered document."""
    root = etree.fromstring(document)
    return [el.text for el in root.iter(f"{{{NS}}}ServiceListName")]


@pytest.fixture
def countries():
    """Countries known to the registry."""
    store = ISOCountries(use2=False, use3=True)
    store.load_text(json.dumps([{"alpha2": c[:2], "alpha3": c} for c in ("DEU", "AUT", "GBR")]))
    return store


@pytest.fixture
def registry(countries):
    """Create a registry loaded with the test document."""
    slr = ServiceListRegistry(countries=countries, genres=ClassificationScheme())
    assert slr.load_text(REGISTRY, "test.xml")
    return slr


class TestQueryParsing:
    """Tests for RegistryQuery.from_params."""

    def test_empty_query(self):
        """No arguments gives an unfiltered query."""
        query, errors = RegistryQuery.from_params({})
        assert errors == []
        assert not query.filters_offerings(-1)

    def test_unknown_argument(self):
        """Arguments outside the allowed set are reported."""
        _, errors = RegistryQuery.from_params({"Colour": "blue"})
        assert errors == ["invalid argument - Colour"]

    def test_single_regulator_flag(self):
        """regulatorListFlag may only be given once."""
        _, errors = RegistryQuery.from_params({"regulatorListFlag": ["true", "false"]})
        assert "only a single &regulatorListFlag can be specified" in errors

    def test_invalid_boolean(self):
        """Boolean arguments must be 'true' or 'false'."""
        _, errors = RegistryQuery.from_params({"inlineImages": "yes"})
        assert errors == ["invalid inlineImages [yes]"]

    def test_unknown_country(self, countries):
        """TargetCountry is checked against the known countries."""
        _, errors = RegistryQuery.from_params({"TargetCountry": ["DEU", "XYZ"]}, countries)
        assert errors == ["invalid TargetCountry [XYZ]"]

    def test_country_unchecked_without_store(self, caplog):
        """TargetCountry is not rejected when no countries are loaded, but the gap is logged."""
        with caplog.at_level("WARNING", logger="dvbi_core.registry"):
            _, errors = RegistryQuery.from_params({"TargetCountry": "XYZ"}, ISOCountries())
        assert errors == []
        assert "TargetCountry ['XYZ'] not checked, no reference data is loaded" in caplog.text

    def test_genre_unchecked_without_store(self, caplog):
        """Genre is not rejected when no genres are loaded, but the gap is logged."""
        with caplog.at_level("WARNING", logger="dvbi_core.registry"):
            _, errors = RegistryQuery.from_params({"Genre": "urn:bogus:genre:zzz"}, genres=ClassificationScheme())
        assert errors == []
        assert "Genre" in caplog.text and "no reference data is loaded" in caplog.text

    def test_delivery(self):
        """Delivery values become DeliverySystem members."""
        query, errors = RegistryQuery.from_params({"Delivery": ["dvb-t", "dvb-dash"]})
        assert errors == []
        assert query.delivery == [DeliverySystem.TERRESTRIAL, DeliverySystem.DASH]
        _, errors = RegistryQuery.from_params({"Delivery": "dvb-x"})
        assert errors == ["invalid Delivery [dvb-x]"]

    def test_inline_images(self):
        """inlineImages=true keeps data URLs."""
        query, _ = RegistryQuery.from_params({"inlineImages": "true"})
        assert query.inline_images


class TestUserAgent:
    """Tests for DVB-I user agent parsing."""

    def test_full_user_agent(self):
        """Device fields follow the product token."""
        ua = parse_user_agent("Mozilla/5.0 DVB-I/A177r7 (caps;Vendor;Model;1.0;2.0;Family;)")
        assert ua.ok
        assert ua.version == 7
        assert ua.vendor_name == "Vendor"
        assert ua.requested_version == 7

    def test_old_revision_not_versioned(self):
        """Revisions before r6 do not select versioned lists."""
        ua = parse_user_agent("DVB-I/A177r5")
        assert ua.ok
        assert ua.requested_version == -1

    def test_not_dvbi(self):
        """Other user agents give no version."""
        assert not parse_user_agent("curl/8.0").ok
        assert parse_user_agent(None).requested_version == -1


class TestFiltering:
    """Tests for ServiceListRegistry.filter."""

    def test_unfiltered(self, registry):
        """Every offering is returned for an empty query."""
        query, _ = RegistryQuery.from_params({})
        assert list_names(registry.filter(query)) == ["Alpha Germany", "Beta UK", "Beta Anywhere"]

    def test_provider_name(self, registry):
        """Only the named providers are kept."""
        query, _ = RegistryQuery.from_params({"ProviderName": "Beta Media"})
        assert list_names(registry.filter(query)) == ["Beta UK", "Beta Anywhere"]

    def test_regulator_flag_defaults_false(self, registry):
        """Offerings without the flag count as false."""
        query, _ = RegistryQuery.from_params({"regulatorListFlag": "false"})
        assert list_names(registry.filter(query)) == ["Beta UK", "Beta Anywhere"]

    def test_target_country_list(self, registry):
        """TargetCountry matches any country of a comma separated list."""
        query, _ = RegistryQuery.from_params({"TargetCountry": "AUT"})
        assert list_names(registry.filter(query)) == ["Alpha Germany", "Beta Anywhere"]

    def test_language(self, registry):
        """Offerings without a Language are kept."""
        query, _ = RegistryQuery.from_params({"Language": "eng"})
        assert list_names(registry.filter(query)) == ["Beta UK", "Beta Anywhere"]

    def test_delivery(self, registry):
        """IPTV matches RTSP delivery."""
        query, _ = RegistryQuery.from_params({"Delivery": "dvb-iptv"})
        assert list_names(registry.filter(query)) == ["Beta UK"]

    def test_empty_providers_removed(self, registry):
        """A provider with no remaining offerings is dropped."""
        query, _ = RegistryQuery.from_params({"Delivery": "dvb-dash"})
        root = etree.fromstring(registry.filter(query))
        assert len(root.findall(f"{{{NS}}}ProviderOffering")) == 1

    def test_inline_images_removed(self, registry):
        """data: URLs are removed unless requested."""
        query, _ = RegistryQuery.from_params({})
        document = registry.filter(query)
        assert b"data:image/png" not in document
        assert b"https://alpha.example/logo.png" in document

    def test_inline_images_kept(self, registry):
        """inlineImages=true keeps data: URLs."""
        query, _ = RegistryQuery.from_params({"inlineImages": "true"})
        assert b"data:image/png" in registry.filter(query)

    def test_master_unchanged(self, registry):
        """Filtering never changes the master document."""
        narrow, _ = RegistryQuery.from_params({"Delivery": "dvb-s"})
        registry.filter(narrow)
        everything, _ = RegistryQuery.from_params({})
        assert len(list_names(registry.filter(everything))) == 3
        assert registry.stats()["numRequests"] == 2

    def test_requested_version_default_mode(self, registry):
        """A versioned request keeps offerings with that version or an unversioned URI."""
        query, _ = RegistryQuery.from_params({})
        result = registry.filter_with_details(query, requested_version=8)
        assert list_names(result.document) == ["Alpha Germany", "Beta Anywhere"]
        assert result.vary_on_user_agent


class TestItalianMode:
    """Tests for the version selection of ProcessingMode.ITALY."""

    @pytest.fixture
    def italian(self):
        """Create a registry in ITALY mode."""
        slr = ServiceListRegistry(mode=ProcessingMode.ITALY)
        slr.load_text(REGISTRY)
        return slr

    def test_unversioned_request(self, italian):
        """Without a version only unversioned URIs remain."""
        query, _ = RegistryQuery.from_params({})
        assert list_names(italian.filter(query)) == ["Alpha Germany", "Beta Anywhere"]

    def test_versioned_request(self, italian):
        """A version keeps only the matching URI."""
        query, _ = RegistryQuery.from_params({})
        document = italian.filter(query, requested_version=7)
        assert b"https://beta.example/r7.xml" in document
        assert b"https://beta.example/r6.xml" not in document


class TestLoading:
    """Tests for loading the master document."""

    def test_malformed_registry(self):
        """A malformed document empties the registry."""
        slr = ServiceListRegistry()
        assert not slr.load_text("<ServiceListEntryPoints>", "broken.xml")
        assert "broken.xml" in slr.stats()["SLRreadError"]
        query, _ = RegistryQuery.from_params({})
        assert b"EMPTY" in slr.filter(query)

    def test_load_file(self, tmp_path):
        """The master document is read from a file."""
        path = tmp_path / "slr.xml"
        path.write_text(REGISTRY, encoding="utf-8")
        slr = ServiceListRegistry()
        assert slr.load(path)
        assert slr.stats()["SLRfile"] == str(path)

    def test_missing_file(self, tmp_path):
        """A missing file is reported in stats."""
        slr = ServiceListRegistry()
        assert not slr.load(tmp_path / "absent.xml")
        assert slr.stats()["SLRreadError"].startswith("unable to read")
