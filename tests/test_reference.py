"""
Reference Data Tests

Run with: pytest tests/test_reference.py -v
"""

import asyncio
import json

import pytest
import requests

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core.config import settings as cfg
from dvbi_core.config.settings import ReferenceDataConfig, VocabularySource
from dvbi_core.reference import sources
from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.reference.identifiers import ContentProtectionRegistry, parse_ca_system_id
from dvbi_core.reference.languages import IANALanguages, LanguageState
from dvbi_core.reference.loaders import load_reference_stores, load_reference_stores_async
from dvbi_core.reference.roles import RoleList


GENRE_CS = """<ClassificationScheme uri="urn:tva:metadata:cs:ContentCS:2019">
  <Term termID="3">
    <Name>CONTENT</Name>
    <Term termID="3.1">
      <Name>NON-FICTION/INFORMATION</Name>
      <Term termID="3.1.1"><Name>News</Name></Term>
    </Term>
  </Term>
</ClassificationScheme>"""

LANGUAGE_REGISTRY = """File-Date: 2024-06-14
%%
Type: language
Subtag: en
Description: English
Added: 2005-10-16
%%
Type: language
Subtag: de
Description: German
Added: 2005-10-16
%%
Type: language
Subtag: iw
Description: Hebrew
Added: 2005-10-16
Deprecated: 1989-01-01
Preferred-Value: he
%%
Type: language
Subtag: qaa..qtz
Description: Private use
Added: 2005-10-16
%%
Type: extlang
Subtag: bfi
Description: British Sign Language
Added: 2009-07-29
Prefix: sgn
%%
Type: region
Subtag: GB
Description: United Kingdom
Added: 2005-10-16
%%
Type: redundant
Tag: sgn-GB
Description: British Sign Language
Added: 2001-03-02
Deprecated: 2009-07-29
Preferred-Value: bfi
"""

COUNTRIES = [
    {"alpha2": "GB", "alpha3": "GBR", "numeric": "826"},
    {"alpha2": "DE", "alpha3": "DEU", "numeric": "276"},
]


class TestClassificationScheme:
    """Tests for classification scheme loading and lookups."""

    def test_all_nodes(self):
        """Every term is qualified with the scheme URI."""
        cs = ClassificationScheme()
        assert cs.load_text(GENRE_CS) == 3
        assert cs.is_in("urn:tva:metadata:cs:ContentCS:2019:3.1")
        assert cs.is_in("urn:tva:metadata:cs:ContentCS:2019:3.1.1")

    def test_leaf_nodes_only(self):
        """Only terms without children are kept when requested."""
        cs = ClassificationScheme(leaf_nodes_only=True)
        assert cs.load_text(GENRE_CS) == 1
        assert not cs.is_in("urn:tva:metadata:cs:ContentCS:2019:3.1")
        assert cs.is_in("urn:tva:metadata:cs:ContentCS:2019:3.1.1")

    def test_case_insensitive_lookup(self):
        """Lookups may ignore case."""
        cs = ClassificationScheme()
        cs.load_text(GENRE_CS)
        assert cs.is_in("URN:TVA:METADATA:CS:CONTENTCS:2019:3", case_sensitive=False)
        assert not cs.is_in("URN:TVA:METADATA:CS:CONTENTCS:2019:3")

    def test_has_scheme(self):
        """The scheme of a term is recognised even when the term is not."""
        cs = ClassificationScheme()
        cs.load_text(GENRE_CS)
        assert cs.has_scheme("urn:tva:metadata:cs:ContentCS:2019:9.9")
        assert not cs.has_scheme("urn:example:cs:9.9")

    def test_malformed_document(self):
        """A malformed scheme adds nothing."""
        cs = ClassificationScheme()
        assert cs.load_text("<ClassificationScheme") == 0
        assert cs.is_empty()

    def test_load_files_and_extra_values(self, tmp_path):
        """Terms are loaded from files, missing files are skipped."""
        path = tmp_path / "ContentCS.xml"
        path.write_text(GENRE_CS, encoding="utf-8")
        cs = ClassificationScheme()
        count = cs.load(files=[path, tmp_path / "missing.xml"], extra_values=["urn:example:cs:1"])
        assert count == 4
        assert len(cs) == 4

    def test_purge_reload_is_idempotent(self, tmp_path):
        """Loading the same scheme twice with purge gives the same terms."""
        path = tmp_path / "ContentCS.xml"
        path.write_text(GENRE_CS, encoding="utf-8")
        cs = ClassificationScheme()
        assert cs.load(files=[path], purge=True) == 3
        assert cs.load(files=[path], purge=True) == 3
        assert cs.schemes == ["urn:tva:metadata:cs:ContentCS:2019"]

    def test_failed_purge_keeps_terms(self, tmp_path):
        """A purge whose sources cannot be read leaves the loaded terms in place."""
        path = tmp_path / "ContentCS.xml"
        path.write_text(GENRE_CS, encoding="utf-8")
        (tmp_path / "broken.xml").write_text("<ClassificationScheme", encoding="utf-8")
        cs = ClassificationScheme()
        cs.load(files=[path])
        assert cs.load(files=[tmp_path / "missing.xml"], purge=True) == 3
        assert cs.load(files=[tmp_path / "broken.xml"], purge=True) == 3
        assert cs.is_in("urn:tva:metadata:cs:ContentCS:2019:3.1.1")

    def test_purge_replaces_terms(self, tmp_path):
        """A purge that reads a scheme drops the terms of the previous one."""
        path = tmp_path / "ContentCS.xml"
        path.write_text(GENRE_CS, encoding="utf-8")
        other = tmp_path / "OtherCS.xml"
        other.write_text('<ClassificationScheme uri="urn:example:cs"><Term termID="1"/></ClassificationScheme>',
                         encoding="utf-8")
        cs = ClassificationScheme()
        cs.load(files=[path])
        assert cs.load(files=[other], purge=True) == 1
        assert not cs.has_scheme("urn:tva:metadata:cs:ContentCS:2019:3")


class TestLanguages:
    """Tests for the IANA language store."""

    @pytest.fixture
    def languages(self):
        """Load a small language registry."""
        langs = IANALanguages()
        langs.load_text(LANGUAGE_REGISTRY)
        return langs

    def test_known_and_unknown(self, languages):
        """Registered subtags are known."""
        assert languages.is_known("en").state == LanguageState.KNOWN
        assert languages.is_known("xx").state == LanguageState.UNKNOWN

    def test_compound_tag(self, languages):
        """A compound tag is known when every subtag is."""
        assert languages.is_known("en-GB").is_known
        assert not languages.is_known("en-ZZ").is_known

    def test_private_use_range(self, languages):
        """Subtag ranges cover every value between their ends."""
        assert languages.is_known("qab").is_known

    def test_deprecated_has_preferred_value(self, languages):
        """Deprecated subtags report their replacement."""
        lookup = languages.is_known("iw")
        assert lookup.state == LanguageState.DEPRECATED
        assert lookup.preferred == "he"

    def test_not_specified(self, languages):
        """An empty value is not specified."""
        assert languages.is_known("").state == LanguageState.NOT_SPECIFIED

    def test_sign_languages(self, languages):
        """Sign language extlangs and redundant tags are recognised."""
        assert languages.is_known_sign_language("bfi")
        assert languages.is_known_sign_language("sgn-GB")
        assert not languages.is_known_sign_language("en")

    def test_stats(self, languages):
        """File date and set sizes are reported."""
        stats = languages.stats()
        assert stats["languageFileDate"] == "2024-06-14"
        assert stats["numLanguageRanges"] == 1


class TestCountries:
    """Tests for ISO 3166 country lookups."""

    def test_three_letter_codes(self):
        """Three letter mode ignores two letter codes."""
        countries = ISOCountries(use2=False, use3=True)
        assert countries.load_text(json.dumps(COUNTRIES)) == 2
        assert countries.is_iso3166_code("DEU")
        assert not countries.is_iso3166_code("DE")
        assert not countries.is_iso3166_code("deu")
        assert countries.is_iso3166_code("deu", case_sensitive=False)

    def test_malformed_list(self):
        """Text that is not a JSON array adds nothing."""
        countries = ISOCountries()
        assert countries.load_text('{"alpha2": "GB"}') == 0
        assert countries.is_empty()

    def test_two_letter_codes(self):
        """Two letter mode ignores three letter codes."""
        countries = ISOCountries(use2=True, use3=False)
        countries.load_text(json.dumps(COUNTRIES))
        assert countries.is_iso3166_code("GB")
        assert not countries.is_iso3166_code("GBR")

    def test_malformed_file_keeps_codes(self, tmp_path):
        """A country file that does not parse leaves the loaded codes in place."""
        good = tmp_path / "countries.json"
        good.write_text(json.dumps(COUNTRIES), encoding="utf-8")
        bad = tmp_path / "broken.json"
        bad.write_text('[{"alpha2": "GB"', encoding="utf-8")
        countries = ISOCountries(use2=False, use3=True)
        assert countries.load(file=good)
        assert not countries.load(file=bad, purge=True)
        assert countries.count() == 2
        assert countries.is_iso3166_code("GBR")

    def test_purge_reload_is_idempotent(self, tmp_path):
        """Loading the same list twice with purge does not duplicate entries."""
        path = tmp_path / "countries.json"
        path.write_text(json.dumps(COUNTRIES), encoding="utf-8")
        countries = ISOCountries(use2=False, use3=True)
        countries.load(file=path, purge=True)
        countries.load(file=path, purge=True)
        assert countries.count() == 2


class TestLanguageLoading:
    """Tests for reloading the language registry."""

    def test_purge_reload_is_idempotent(self, tmp_path):
        """Loading the same registry twice with purge gives the same sets."""
        path = tmp_path / "languages.txt"
        path.write_text(LANGUAGE_REGISTRY, encoding="utf-8")
        languages = IANALanguages()
        languages.load(file=path)
        first = languages.stats()
        languages.load(file=path, purge=True)
        assert languages.stats() == first

    def test_registry_without_subtags_keeps_languages(self, tmp_path):
        """A purge with text that holds no subtags leaves the loaded languages in place."""
        good = tmp_path / "languages.txt"
        good.write_text(LANGUAGE_REGISTRY, encoding="utf-8")
        empty = tmp_path / "empty.txt"
        empty.write_text("File-Date: 2024-06-14\n", encoding="utf-8")
        languages = IANALanguages()
        languages.load(file=good)
        assert not languages.load(file=empty, purge=True)
        assert languages.is_known("de").is_known


class TestRolesAndContentProtection:
    """Tests for credit roles and CA/DRM identifiers."""

    def test_roles(self):
        """Roles are read one per line."""
        roles = RoleList()
        assert roles.load_lines("urn:tva:metadata:cs:TVARoleCS:2011:AV_ACTOR\n\nurn:mpeg:role:host\n") == 2
        assert roles.is_in("urn:mpeg:role:host")

    def test_failed_role_purge_keeps_roles(self, tmp_path):
        """A purge whose role file is missing leaves the loaded roles in place."""
        path = tmp_path / "roles.txt"
        path.write_text("urn:mpeg:role:host\n", encoding="utf-8")
        roles = RoleList()
        assert roles.load(files=[path]) == 1
        assert roles.load(files=[tmp_path / "missing.txt"], purge=True) == 1

    def test_malformed_registry_keeps_ca_systems(self, tmp_path):
        """A CA registry that does not parse leaves the loaded ranges in place."""
        good = tmp_path / "ca.json"
        good.write_text('[{"id_from": "0x0100", "id_to": "0x01FF"}]', encoding="utf-8")
        bad = tmp_path / "broken.json"
        bad.write_text("[{", encoding="utf-8")
        registry = ContentProtectionRegistry()
        assert registry.load_ca_systems(file=good)
        assert not registry.load_ca_systems(file=bad)
        assert registry.is_known_ca_system("0x0150")

    def test_ca_system_ids(self):
        """CA system ranges accept decimal and hexadecimal identifiers."""
        registry = ContentProtectionRegistry()
        registry.load_ca_text('[{"id_from": "0x0100", "id_to": "0x01FF", "name": "Seca"}]')
        assert registry.is_known_ca_system("0x0150")
        assert registry.is_known_ca_system("300")
        assert not registry.is_known_ca_system("0x0200")
        assert parse_ca_system_id("zz") is None

    def test_drm_system_ids(self):
        """DRM systems match by URN or by UUID."""
        registry = ContentProtectionRegistry()
        registry.load_drm_text('[{"id": "urn:uuid:EDEF8BA9-79D6-4ACE-A3C8-27DCD51D21ED"}]')
        assert registry.is_known_drm_system("edef8ba9-79d6-4ace-a3c8-27dcd51d21ed")
        assert not registry.is_known_drm_system("urn:uuid:0000")


class TestSources:
    """Tests for file and URL retrieval."""

    def test_missing_file(self, tmp_path):
        """A missing file gives None."""
        assert sources.read_file(tmp_path / "absent.txt") is None

    def test_non_http_url_refused(self, monkeypatch):
        """Only http and https URLs are fetched."""
        def fail(*args, **kwargs):
            raise AssertionError("requests.get should not be called")
        monkeypatch.setattr(sources.requests, "get", fail)
        assert sources.fetch_url("file:///etc/passwd") is None

    def test_request_failure(self, monkeypatch):
        """A failed request gives None."""
        def timeout(*args, **kwargs):
            raise requests.exceptions.Timeout("too slow")
        monkeypatch.setattr(sources.requests, "get", timeout)
        assert sources.fetch_url("https://example.com/cs.xml") is None


class TestLoaders:
    """Tests for loading every store from configuration."""

    @pytest.fixture
    def config(self, tmp_path):
        """A configuration with local genre, language and country files."""
        (tmp_path / "genres.xml").write_text(GENRE_CS, encoding="utf-8")
        (tmp_path / "languages.txt").write_text(LANGUAGE_REGISTRY, encoding="utf-8")
        (tmp_path / "countries.json").write_text(json.dumps(COUNTRIES), encoding="utf-8")
        config = ReferenceDataConfig(data_dir=str(tmp_path))
        config.vocabularies = {
            cfg.GENRES: VocabularySource(files=[str(tmp_path / "genres.xml")]),
            cfg.LANGUAGES: VocabularySource(files=[str(tmp_path / "languages.txt")]),
            cfg.COUNTRIES: VocabularySource(files=[str(tmp_path / "countries.json")]),
        }
        return config

    def test_load_reference_stores(self, config):
        """Configured stores are loaded, unconfigured ones stay empty."""
        stores = load_reference_stores(config)
        assert stores.genres.count() == 3
        assert stores.countries.is_iso3166_code("GBR")
        assert stores.languages.is_known("de").is_known
        assert stores.video_codecs.is_empty()
        assert stores.stats()["numKnownCountries"] == 2

    def test_load_reference_stores_async(self, config):
        """The asynchronous loader gives the same result."""
        stores = asyncio.run(load_reference_stores_async(config))
        assert stores.genres.count() == 3

    def test_every_language_file_loaded(self, config, tmp_path):
        """Each configured file of a single-source store is read, not only the first."""
        extra = tmp_path / "more-languages.txt"
        extra.write_text("%%\nType: language\nSubtag: fr\nDescription: French\n", encoding="utf-8")
        config.vocabularies[cfg.LANGUAGES] = VocabularySource(files=[str(tmp_path / "languages.txt"), str(extra)])
        stores = load_reference_stores(config)
        assert stores.languages.is_known("de").is_known
        assert stores.languages.is_known("fr").is_known

    def test_replace_keeps_original(self, config):
        """replace builds a new bundle."""
        stores = load_reference_stores(config)
        swapped = stores.replace(genres=ClassificationScheme())
        assert swapped.genres.is_empty()
        assert stores.genres.count() == 3
