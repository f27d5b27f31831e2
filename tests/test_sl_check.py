"""
Service List Validation Tests

Run with: pytest tests/test_sl_check.py -v
"""

import json

import pytest
from lxml import etree

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core import definitions as dvbi
from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.reference.languages import IANALanguages
from dvbi_core.reference.loaders import ReferenceStores
from dvbi_core.validation.base import ErrorList, Severity, ValidationContext
from dvbi_core.validation.errors import K_INVALID_HREF
from dvbi_core.validation.multilingual import check_xml_langs
from dvbi_core.validation.related_material import check_valid_logos, validate_image_related_material
from dvbi_core.validation.sl_check import ServiceListCheck, ServiceListState
from dvbi_core.validation.vocabulary import K_REFERENCE_UNAVAILABLE


LANGUAGES = """%%
Type: language
Subtag: en
Description: English
%%
Type: language
Subtag: de
Description: German
%%
Type: region
Subtag: GB
Description: United Kingdom
"""

SERVICE = """
  <Service version="1">
    <UniqueIdentifier>{service_id}</UniqueIdentifier>
    <ServiceInstance priority="1">
      <DASHDeliveryParameters>
        <UriBasedLocation contentType="application/dash+xml">
          <URI>https://example.com/{name}.mpd</URI>
        </UriBasedLocation>
      </DASHDeliveryParameters>
    </ServiceInstance>
    <ServiceName>{name}</ServiceName>
    <ProviderName>Example Provider</ProviderName>
  </Service>"""


def service(service_id="tag:example.com,2024:svc1", name="One"):
    """A minimal <Service>."""
    return SERVICE.format(service_id=service_id, name=name)


def service_list(body="", namespace=dvbi.A177R6_NAMESPACE, attributes=None, services=None):
    """A service list with the given elements before and after the services."""
    attrs = attributes if attributes is not None else 'version="1" xml:lang="en" id="tag:example.com,2024:sl1"'
    before, _, after = body.partition("<!-- services -->")
    content = services if services is not None else service()
    return (f'<ServiceList xmlns="{namespace}" {attrs}>\n'
            f"  <Name>Example</Name>\n"
            f"  <ProviderName>Example Provider</ProviderName>\n"
            f"{before}{content}{after}\n"
            f"</ServiceList>")


@pytest.fixture
def stores():
    """Reference stores with a few languages and countries."""
    languages = IANALanguages()
    languages.load_text(LANGUAGES)
    countries = ISOCountries(use2=False, use3=True)
    countries.load_text(json.dumps([{"alpha2": "DE", "alpha3": "DEU"}, {"alpha2": "GB", "alpha3": "GBR"}]))
    return ReferenceStores(languages=languages, countries=countries)


@pytest.fixture
def checker(stores):
    """Create a service list checker without schemas."""
    return ServiceListCheck(stores)


class TestDocumentLevel:
    """Tests for findings that stop the validation pass."""

    def test_minimal_list_is_valid(self, checker):
        """A minimal current service list has no errors."""
        errs = checker.validate_service_list(service_list())
        assert errs.num_errors() == 0, errs.summary()
        assert errs.num_fatals() == 0

    def test_malformed(self, checker):
        """Unparseable XML gives exactly one fatal finding."""
        errs = checker.validate_service_list("<ServiceList><Name>")
        assert errs.codes() == ["SL001-1"]
        assert errs.fatals[0].severity == Severity.FATAL

    def test_empty(self, checker):
        """An empty document gives exactly one fatal finding."""
        errs = checker.validate_service_list("   ")
        assert errs.codes() == ["SL001-12"]

    def test_wrong_root(self, checker):
        """The root element must be <ServiceList>."""
        errs = checker.validate_service_list(f'<ServiceListX xmlns="{dvbi.A177R6_NAMESPACE}"/>')
        assert errs.codes() == ["SL004"]

    def test_no_namespace(self, checker):
        """The root element must be namespaced."""
        errs = checker.validate_service_list('<ServiceList version="1"/>')
        assert errs.codes() == ["SL003"]

    def test_unsupported_namespace(self, checker):
        """An unknown namespace stops the pass."""
        errs = checker.validate_service_list('<ServiceList xmlns="urn:example:sl" version="1"/>')
        assert errs.codes() == ["SL010"]

    def test_no_text(self, checker):
        """A missing document is an application error."""
        errs = checker.validate_service_list(None)
        assert errs.codes() == ["SL000"]

    def test_bytes_accepted(self, checker):
        """The document may be given as bytes."""
        errs = checker.validate_service_list(service_list().encode("utf-8"))
        assert errs.num_errors() == 0

    def test_document_loaded_for_markup(self, checker):
        """Findings are marked on the lines of the document."""
        errs = checker.validate_service_list(service_list(services=service(service_id="svc1")))
        assert errs.has_code("SL110")
        assert errs.annotated_lines()

    def test_stats_count_requests(self, checker):
        """Each call is counted."""
        checker.validate_service_list(service_list())
        checker.validate_service_list(None)
        assert checker.stats()["numRequests"] == 2


class TestSchemaVersion:
    """Tests for schema version reporting."""

    def test_old_schema(self, checker):
        """An out of date namespace is reported."""
        errs = checker.validate_service_list(service_list(
            namespace=dvbi.A177R5_NAMESPACE, attributes='version="1" xml:lang="en"'))
        assert errs.has_code("SL005:a")

    def test_draft_schema(self, checker):
        """A draft namespace is a warning."""
        errs = checker.validate_service_list(service_list(namespace=dvbi.A177R7_NAMESPACE))
        assert "SL005:b" in [f.code for f in errs.warnings]

    def test_version_report_disabled(self, checker):
        """Schema version reporting can be turned off."""
        errs = checker.validate_service_list(service_list(namespace=dvbi.A177R7_NAMESPACE),
                                             report_schema_version=False)
        assert not errs.has_code("SL005:b")


class TestServiceListAttributes:
    """Tests for ServiceList attributes and languages."""

    def test_missing_id_from_r6(self, checker):
        """@id is required from A177r6."""
        errs = checker.validate_service_list(service_list(attributes='version="1" xml:lang="en"'))
        assert errs.has_code("SL011-1")

    def test_unknown_language(self, checker):
        """An unknown xml:lang is reported."""
        errs = checker.validate_service_list(
            service_list(attributes='version="1" xml:lang="xx" id="tag:example.com,2024:sl1"'))
        assert errs.has_code("SL012-3")

    def test_invalid_identifier(self, checker):
        """ServiceList@id must be a tag: URI."""
        errs = checker.validate_service_list(
            service_list(attributes='version="1" xml:lang="en" id="sl1"'))
        assert errs.has_code("SL016")

    def test_multilingual_names_need_lang(self, checker):
        """Repeated <Name> elements each need xml:lang."""
        body = '  <Name xml:lang="de">Beispiel</Name>\n<!-- services -->'
        errs = checker.validate_service_list(service_list(body))
        assert errs.has_code("SL020-1")

    def test_language_list(self, checker):
        """Duplicates in <LanguageList> are errors and unused languages are warnings."""
        body = ("  <LanguageList><Language>en</Language><Language>EN</Language></LanguageList>\n"
                "<!-- services -->")
        errs = checker.validate_service_list(service_list(body))
        assert errs.has_code("SL032")
        assert "SL282" in [f.code for f in errs.warnings]


class TestRelatedMaterial:
    """Tests for <RelatedMaterial> in the service list."""

    def test_invalid_href(self, checker):
        """An href not permitted for a service list is one invalid href error."""
        body = ("  <RelatedMaterial>\n"
                '    <HowRelated href="urn:example:not-a-logo"/>\n'
                '    <MediaLocator><MediaUri contentType="image/png">https://example.com/a.png</MediaUri></MediaLocator>\n'
                "  </RelatedMaterial>\n<!-- services -->")
        errs = checker.validate_service_list(service_list(body))
        assert errs.num_errors() == 1
        assert errs.errors[0].code == "SL040-11"
        assert errs.counts[Severity.ERROR][K_INVALID_HREF] == 1

    def test_missing_how_related(self, checker):
        """<HowRelated> is mandatory."""
        body = ("  <RelatedMaterial>\n"
                '    <MediaLocator><MediaUri contentType="image/png">https://example.com/a.png</MediaUri></MediaLocator>\n'
                "  </RelatedMaterial>\n<!-- services -->")
        errs = checker.validate_service_list(service_list(body))
        assert errs.has_code("SL040-2")


class TestRegions:
    """Tests for the <RegionList>."""

    def test_duplicate_region_id(self, checker):
        """A repeated regionID is reported once."""
        body = ("  <RegionList>\n"
                '    <Region regionID="R1" countryCodes="DEU"><RegionName>One</RegionName></Region>\n'
                '    <Region regionID="R1" countryCodes="DEU"><RegionName>Two</RegionName></Region>\n'
                "  </RegionList>\n  <TargetRegion>R1</TargetRegion>\n<!-- services -->")
        errs = checker.validate_service_list(service_list(body))
        assert errs.codes().count("AR012") == 1
        assert errs.num_errors() == 1

    def test_duplicate_region_id_before_r4(self, checker):
        """Earlier schemas use a different code."""
        body = ("  <RegionList>\n"
                '    <Region regionID="R1" countryCodes="DEU"/>\n'
                '    <Region regionID="R1" countryCodes="DEU"/>\n'
                "  </RegionList>\n<!-- services -->")
        errs = checker.validate_service_list(service_list(
            body, namespace=dvbi.A177R3_NAMESPACE, attributes='version="1" xml:lang="en"'))
        assert errs.codes().count("AR021") == 1

    def test_unknown_country(self, checker):
        """Region@countryCodes must be known countries."""
        body = ('  <RegionList><Region regionID="R1" countryCodes="DEU,XYZ"/></RegionList>\n'
                "  <TargetRegion>R1</TargetRegion>\n<!-- services -->")
        errs = checker.validate_service_list(service_list(body))
        assert errs.codes() == ["AR033"]

    def test_country_codes_in_subregion(self, checker):
        """Sub-regions inherit their countries."""
        body = ('  <RegionList><Region regionID="R1" countryCodes="DEU">'
                '<Region regionID="R1a" countryCodes="DEU"/></Region></RegionList>\n<!-- services -->')
        errs = checker.validate_service_list(service_list(body))
        assert errs.has_code("AR032")

    def test_unused_region(self, checker):
        """A selectable region nothing refers to is a warning."""
        body = '  <RegionList><Region regionID="R1" countryCodes="DEU"/></RegionList>\n<!-- services -->'
        errs = checker.validate_service_list(service_list(body))
        assert [f.code for f in errs.warnings] == ["SL281"]

    def test_undefined_target_region(self, checker):
        """A <TargetRegion> must be declared in the <RegionList>."""
        errs = checker.validate_service_list(service_list("  <TargetRegion>R9</TargetRegion>\n<!-- services -->"))
        assert errs.has_code("SL051")


class TestServices:
    """Tests for <Service> checks."""

    def test_identifier_format(self, checker):
        """Service identifiers must be tag: URIs."""
        errs = checker.validate_service_list(service_list(services=service(service_id="svc1")))
        assert errs.codes() == ["SL110"]

    def test_identifier_unique(self, checker):
        """Service identifiers must be unique."""
        errs = checker.validate_service_list(service_list(services=service(name="One") + service(name="Two")))
        assert errs.codes() == ["SL111"]

    def test_invalid_dash_url(self, checker):
        """The DASH <URI> must be an HTTP URL."""
        body = service().replace("https://example.com/One.mpd", "ftp://example.com/One.mpd")
        errs = checker.validate_service_list(service_list(services=body))
        assert errs.codes() == ["SI174"]

    def test_cmcd_keys_checked(self, checker):
        """CMCD reports in DASH delivery have their keys checked."""
        query = "urn:dvb:metadata:cmcd:delivery:queryArguments"
        cmcd = (f'<CMCD CMCDversion="1"><Report reportingMode="{dvbi.CMCD_MODE_REQUEST}" '
                f'transmissionMode="{query}" reportingMethod="{query}" enabledKeys="br zz"/></CMCD>')
        body = service().replace("</UriBasedLocation>", "</UriBasedLocation>" + cmcd)
        errs = checker.validate_service_list(service_list(services=body))
        assert errs.codes() == ["SI175-13c"]

    def test_source_type_without_delivery(self, checker):
        """A DVB-T SourceType needs DVB-T delivery parameters."""
        body = service().replace(
            "<DASHDeliveryParameters>", f"<SourceType>{dvbi.DVBT_SOURCE_TYPE}</SourceType><DASHDeliveryParameters>")
        errs = checker.validate_service_list(service_list(services=body))
        assert errs.has_code("SI151")


class TestLCNTables:
    """Tests for <LCNTableList>."""

    @staticmethod
    def lcn_list(*lcns):
        return ("<!-- services -->\n  <LCNTableList><LCNTable>"
                + "".join(f'<LCN channelNumber="{number}" serviceRef="{ref}"/>' for number, ref in lcns)
                + "</LCNTable></LCNTableList>")

    def test_unknown_service(self, checker):
        """An LCN must refer to a declared service."""
        body = self.lcn_list((1, "tag:example.com,2024:svc1"), (2, "tag:example.com,2024:missing"))
        errs = checker.validate_service_list(service_list(body))
        assert errs.codes() == ["SL263"]

    def test_duplicate_channel_number(self, checker):
        """Channel numbers are unique within a table."""
        body = self.lcn_list((1, "tag:example.com,2024:svc1"), (1, "tag:example.com,2024:svc1"))
        errs = checker.validate_service_list(service_list(body))
        assert errs.codes() == ["SL262"]

    def test_channel_number_range(self, checker):
        """Channel numbers run from 1 to 9999."""
        body = self.lcn_list((10000, "tag:example.com,2024:svc1"))
        errs = checker.validate_service_list(service_list(body))
        assert errs.codes() == ["SL264"]


class TestSynopsis:
    """Tests for ServiceListCheck.validate_synopsis_type."""

    @staticmethod
    def parent(*synopses):
        xml = "<Service>" + "".join(
            f'<ServiceDescription length="{length}"{lang}>{text}</ServiceDescription>'
            for length, text, lang in synopses
        ) + "</Service>"
        return etree.fromstring(xml)

    def check(self, checker, element, required=()):
        errs = ErrorList()
        checker.validate_synopsis_type(element, "ServiceDescription", list(required),
                                       list(dvbi.SYNOPSIS_LABELS), errs, "SL170")
        return errs

    def test_brief_at_limit(self, checker):
        """A brief synopsis of exactly 50 characters is allowed."""
        errs = self.check(checker, self.parent(("brief", "x" * 50, "")))
        assert errs.codes() == []

    def test_brief_too_long(self, checker):
        """A brief synopsis of 51 characters is too long."""
        errs = self.check(checker, self.parent(("brief", "x" * 51, "")))
        assert errs.codes() == ["SL170-10"]

    def test_short_boundary(self, checker):
        """A short synopsis may be 90 characters but not 91."""
        assert self.check(checker, self.parent(("short", "y" * 90, ""))).codes() == []
        assert self.check(checker, self.parent(("short", "y" * 91, ""))).codes() == ["SL170-11"]

    def test_extended_too_short(self, checker):
        """An extended synopsis must be longer than a long one."""
        errs = self.check(checker, self.parent(("extended", "x" * 1199, "")))
        assert errs.codes() == ["SL170-14"]

    def test_duplicate_length_and_language(self, checker):
        """One synopsis per length and language."""
        errs = self.check(checker, self.parent(
            ("short", "one", ' xml:lang="en"'), ("short", "two", ' xml:lang="en"'), ("short", "drei", ' xml:lang="de"'),
        ))
        assert errs.codes() == ["SL170-22"]

    def test_unknown_length(self, checker):
        """Only the defined lengths are permitted."""
        errs = self.check(checker, self.parent(("tiny", "x", "")))
        assert errs.codes() == ["SL170-15"]

    def test_required_length_missing(self, checker):
        """A required length must be present."""
        errs = self.check(checker, self.parent(("short", "x", "")), required=["medium"])
        assert errs.codes() == ["SL170-33"]

    def test_no_element(self, checker):
        """A missing parent is an application error."""
        errs = self.check(checker, None)
        assert errs.codes() == ["SY000"]


class TestReferenceDataUnavailable:
    """Tests for values that cannot be checked because a store is empty."""

    @staticmethod
    def document():
        body = ('  <RegionList><Region regionID="R1" countryCodes="XYZ"/></RegionList>\n'
                "  <TargetRegion>R1</TargetRegion>\n<!-- services -->")
        services = service().replace("</Service>", '<ServiceGenre href="urn:bogus:genre:zzz"/></Service>')
        return service_list(body, services=services)

    def test_empty_stores_warn(self):
        """With no reference data, unverifiable values are warnings rather than silently accepted."""
        errs = ServiceListCheck(ReferenceStores()).validate_service_list(self.document())
        unavailable = {f.code for f in errs.warnings if f.key == K_REFERENCE_UNAVAILABLE}
        assert {"AR033", "SL162", "SL012-0"} <= unavailable
        assert not [f for f in errs.errors if f.code in ("AR033", "SL162")]
        assert errs.counts[Severity.WARNING][K_REFERENCE_UNAVAILABLE] >= 3

    def test_loaded_stores_report_unknown_values(self, stores):
        """Once the stores are loaded, the same values are errors."""
        genres = ClassificationScheme()
        genres.load_text('<ClassificationScheme uri="urn:tva:metadata:cs:ContentCS:2019"><Term termID="3"/>'
                         "</ClassificationScheme>")
        errs = ServiceListCheck(stores.replace(genres=genres)).validate_service_list(self.document())
        assert {"AR033", "SL162"} <= {f.code for f in errs.errors}
        assert not errs.counts[Severity.WARNING][K_REFERENCE_UNAVAILABLE]

    def test_empty_country_store_for_prominence(self):
        """Prominence@country is not accepted unchecked."""
        checker = ServiceListCheck(ReferenceStores())
        prominence = etree.fromstring('<ProminenceList><Prominence country="XYZ"/></ProminenceList>')
        errs = ErrorList()
        checker._check_prominence(prominence, "tag:example.com,2024:svc1", TestProminence.state(), errs)
        assert [(f.code, f.key) for f in errs.warnings] == [("SL232", K_REFERENCE_UNAVAILABLE)]
        assert errs.num_errors() == 0


class TestMultilingual:
    """Tests for repeated elements that differ by language."""

    def test_duplicate_language(self, stores):
        """Two elements with the same xml:lang are one duplicate error."""
        parent = etree.fromstring('<Service><ServiceName xml:lang="en">One</ServiceName>'
                                  '<ServiceName xml:lang="en">Eins</ServiceName></Service>')
        errs = ErrorList()
        check_xml_langs("ServiceName", "service", parent, errs, "SL130", stores.languages)
        assert errs.codes() == ["SL130-2"]
        assert errs.counts[Severity.ERROR]["duplicate @xml:lang"] == 1

    def test_duplicate_default_language(self, stores):
        """Elements without any xml:lang share the default language and are duplicates too."""
        parent = etree.fromstring("<Service><ServiceName>One</ServiceName><ServiceName>Eins</ServiceName></Service>")
        errs = ErrorList()
        check_xml_langs("ServiceName", "service", parent, errs, "SL130", stores.languages)
        assert errs.codes().count("SL130-1") == 2
        duplicates = [f for f in errs.errors if f.code == "SL130-2"]
        assert len(duplicates) == 1
        assert duplicates[0].message.startswith("default language already specified")

    def test_inherited_language(self, stores):
        """A language declared on the parent counts for children without their own."""
        parent = etree.fromstring('<Service xml:lang="en"><ServiceName xml:lang="de">Eins</ServiceName>'
                                  "<ServiceName>One</ServiceName></Service>")
        errs = ErrorList()
        check_xml_langs("ServiceName", "service", parent, errs, "SL130", stores.languages)
        assert not errs.has_code("SL130-2")
        assert errs.codes() == ["SL130-1"]


class TestImageRelatedMaterial:
    """Tests for single image RelatedMaterial blocks."""

    @staticmethod
    def related_material(coding=dvbi.JPEG_IMAGE_CS_VALUE, content_type="image/png",
                         how_related=dvbi.PROMOTIONAL_STILL_IMAGE_URI, uri="https://example.com/a.png"):
        return etree.fromstring(
            f'<RelatedMaterial><HowRelated href="{how_related}"/>'
            f'<Format><StillPictureFormat horizontalSize="100" verticalSize="100" href="{coding}"/></Format>'
            f'<MediaLocator><MediaUri contentType="{content_type}">{uri}</MediaUri></MediaLocator>'
            "</RelatedMaterial>"
        )

    def check(self, element):
        errs = ErrorList()
        validate_image_related_material(element, "programme", [dvbi.PROMOTIONAL_STILL_IMAGE_URI], errs, "PS001")
        return errs

    def test_matching_formats(self):
        """A JPEG coding with a JPEG MediaUri is accepted."""
        errs = self.check(self.related_material(content_type="image/jpeg"))
        assert errs.codes() == []

    def test_jpeg_coding_with_png_uri(self):
        """A JPEG StillPictureFormat cannot describe a PNG MediaUri."""
        errs = self.check(self.related_material())
        assert errs.codes() == ["PS001-24"]

    def test_png_coding_with_jpeg_uri(self):
        """A PNG StillPictureFormat cannot describe a JPEG MediaUri."""
        errs = self.check(self.related_material(coding=dvbi.PNG_IMAGE_CS_VALUE, content_type="image/jpeg"))
        assert errs.codes() == ["PS001-24"]

    def test_disallowed_how_related_stops_checks(self):
        """An href not allowed for this use is reported and nothing further is checked."""
        errs = self.check(self.related_material(how_related="urn:example:other", uri="ftp://example.com/a.png"))
        assert errs.codes() == ["PS001-10"]


class TestLogos:
    """Tests for the image set of logo RelatedMaterial."""

    @staticmethod
    def logos(*content_types):
        return etree.fromstring(
            "<RelatedMaterial>"
            + "".join(f'<MediaLocator><MediaUri contentType="{content_type}">https://example.com/logo</MediaUri>'
                      "</MediaLocator>" for content_type in content_types)
            + "</RelatedMaterial>"
        )

    def check(self, element):
        errs = ErrorList()
        check_valid_logos(element, "service", errs, "SL150")
        return errs

    def test_png_with_webp(self):
        """WebP is allowed alongside a PNG."""
        assert self.check(self.logos("image/png", "image/webp")).codes() == []

    def test_webp_alone(self):
        """WebP on its own is not a valid image set."""
        assert self.check(self.logos("image/webp")).codes() == ["SL150-7"]

    def test_disallowed_type_with_png(self):
        """A disallowed type next to a PNG is only the non-standard type warning."""
        errs = self.check(self.logos("image/png", "image/gif"))
        assert errs.codes() == ["SL150-5"]
        assert errs.warnings[0].severity == Severity.WARNING

    def test_disallowed_type_alone(self):
        """A disallowed type with no PNG or JPEG is a warning and an image set error."""
        errs = self.check(self.logos("image/gif"))
        assert [f.code for f in errs.errors] == ["SL150-7"]
        assert [f.code for f in errs.warnings] == ["SL150-5"]


class TestSatellite:
    """Tests for DVBSDeliveryParameters modulation tables."""

    @staticmethod
    def check(checker, content):
        errs = ErrorList()
        checker._check_satellite(etree.fromstring(f"<DVBSDeliveryParameters>{content}</DVBSDeliveryParameters>"), errs)
        return errs

    def test_dvbs_tables(self):
        """DVB-S only permits its own roll off, modulation and FEC values."""
        errs = self.check(ServiceListCheck(), "<ModulationSystem>DVB-S</ModulationSystem><RollOff>0.25</RollOff>"
                                              "<ModulationType>8PSK</ModulationType><FEC>2/5</FEC>")
        assert errs.codes() == ["SI201a", "SI202a", "SI203a"]

    def test_dvbs2x_values(self):
        """Values only defined for DVB-S2X are accepted for it."""
        errs = self.check(ServiceListCheck(), "<ModulationSystem>DVB-S2X</ModulationSystem><RollOff>0.05</RollOff>"
                                              "<ModulationType>32APSK</ModulationType><FEC>13/45</FEC>")
        assert errs.codes() == []

    def test_dvbs2_values_for_dvbs2(self):
        """A DVB-S2X roll off is not permitted for DVB-S2."""
        errs = self.check(ServiceListCheck(), "<ModulationSystem>DVB-S2</ModulationSystem><RollOff>0.05</RollOff>")
        assert errs.codes() == ["SI201b"]

    def test_s2x_elements_forbidden(self):
        """S2X only elements are reported for DVB-S and DVB-S2."""
        extras = "<ModcodMode>VCM</ModcodMode><InputStreamIdentifier>1</InputStreamIdentifier><ChannelBonding/>"
        errs = self.check(ServiceListCheck(), f"<ModulationSystem>DVB-S2</ModulationSystem>{extras}")
        assert errs.codes() == ["SI204k", "SI204l", "SI204m"]
        errs = self.check(ServiceListCheck(), f"<ModulationSystem>DVB-S</ModulationSystem>{extras}")
        assert errs.codes() == ["SI204a", "SI204b", "SI204c"]

    def test_channel_bonding(self):
        """Bonded frequencies are unique and only one is primary."""
        errs = self.check(ServiceListCheck(), "<ModulationSystem>DVB-S2X</ModulationSystem><ChannelBonding>"
                                              '<Frequency primary="true">11000</Frequency>'
                                              '<Frequency primary="true">11000</Frequency>'
                                              "<Frequency>12000</Frequency></ChannelBonding>")
        assert errs.codes() == ["SI205", "SI206"]

    def test_unknown_modulation_system(self):
        """Tables are only applied to a known modulation system."""
        errs = self.check(ServiceListCheck(), "<ModulationSystem>DVB-X</ModulationSystem><RollOff>9</RollOff>")
        assert errs.codes() == []


class TestNVOD:
    """Tests for NVOD reference and timeshifted services."""

    SERVICES = """<ServiceList>
  <Service><UniqueIdentifier>tag:example.com,2024:ref</UniqueIdentifier><NVOD mode="reference"/></Service>
  <Service><UniqueIdentifier>tag:example.com,2024:plain</UniqueIdentifier></Service>
  <Service><UniqueIdentifier>tag:example.com,2024:shifted</UniqueIdentifier><NVOD mode="timeshifted" reference="tag:example.com,2024:ref"/></Service>
  <Service><UniqueIdentifier>tag:example.com,2024:new</UniqueIdentifier>{nvod}</Service>
</ServiceList>"""

    def check(self, checker, nvod):
        service_list = etree.fromstring(self.SERVICES.format(nvod=nvod))
        service = service_list[3]
        errs = ErrorList()
        checker._check_nvod(service, service.find("NVOD"), errs)
        return errs

    def test_reference_attributes_not_permitted(self, checker):
        """A reference service carries neither @reference nor @offset."""
        errs = self.check(checker, '<NVOD mode="reference" reference="tag:example.com,2024:ref" offset="PT1H"/>')
        assert errs.codes() == ["SL221", "SL222"]

    def test_timeshifted_needs_reference(self, checker):
        """A timeshifted service names its reference service."""
        errs = self.check(checker, '<NVOD mode="timeshifted"/>')
        assert errs.codes() == ["SL223-1"]

    def test_reference_not_tag_uri(self, checker):
        """The reference is a tag: URI of a declared service."""
        errs = self.check(checker, '<NVOD mode="timeshifted" reference="svc9"/>')
        assert errs.codes() == ["SL224a", "SL225a"]

    def test_reference_without_nvod(self, checker):
        """The referenced service must carry NVOD information."""
        errs = self.check(checker, '<NVOD mode="timeshifted" reference="tag:example.com,2024:plain"/>')
        assert errs.codes() == ["SL225b"]

    def test_reference_is_timeshifted(self, checker):
        """The referenced service must be an NVOD reference service."""
        errs = self.check(checker, '<NVOD mode="timeshifted" reference="tag:example.com,2024:shifted"/>')
        assert errs.codes() == ["SL225c"]

    def test_valid_timeshift(self, checker):
        """A timeshift of a reference service is accepted."""
        errs = self.check(checker, '<NVOD mode="timeshifted" reference="tag:example.com,2024:ref" offset="PT1H"/>')
        assert errs.codes() == []


class TestProminence:
    """Tests for <ProminenceList> and parental ratings."""

    @staticmethod
    def state():
        return ServiceListState(context=ValidationContext(namespace=dvbi.A177R6_NAMESPACE))

    def check(self, checker, *prominences):
        element = etree.fromstring(
            "<ProminenceList>"
            + "".join(f"<Prominence {attributes}/>" for attributes in prominences)
            + "</ProminenceList>"
        )
        errs = ErrorList()
        checker._check_prominence(element, "tag:example.com,2024:svc1", self.state(), errs)
        return errs

    def test_duplicate_prominence(self, checker):
        """The same country, region and ranking is given once."""
        errs = self.check(checker, 'country="DEU"', 'country="DEU"')
        assert errs.codes() == ["SL233"]

    def test_multiple_rankings(self, checker):
        """A country has a single ranking."""
        errs = self.check(checker, 'country="DEU" ranking="1"', 'country="DEU" ranking="2"')
        assert errs.codes() == ["SL234"]

    def test_unknown_country(self, checker):
        """Prominence@country must be a known country."""
        errs = self.check(checker, 'country="XYZ"')
        assert errs.codes() == ["SL232"]
        assert errs.errors[0].key == "invalid country code"

    def test_distinct_prominences(self, checker):
        """Different countries do not clash."""
        errs = self.check(checker, 'country="DEU" ranking="1"', 'country="GBR" ranking="1"')
        assert errs.codes() == []

    def test_parental_rating_country(self, checker):
        """MinimumAge@countryCodes must be known and given once per country."""
        rating = etree.fromstring('<ParentalRating><MinimumAge countryCodes="DEU,XYZ">12</MinimumAge>'
                                  '<MinimumAge countryCodes="DEU">16</MinimumAge></ParentalRating>')
        errs = ErrorList()
        checker._check_parental_rating(rating, errs)
        assert errs.codes() == ["SL254", "SL252"]
