"""
Schema Version Tests

Run with: pytest tests/test_versions.py -v
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core import definitions as dvbi
from dvbi_core.config.settings import SchemaConfig
from dvbi_core.versions import (
    ANY_VERSION,
    CG_SCHEMA_VERSIONS,
    SCHEMA_R0,
    SCHEMA_R2,
    SCHEMA_R3,
    SCHEMA_R6,
    SCHEMA_R7,
    SCHEMA_UNKNOWN,
    SchemaRegistry,
    SchemaStatus,
    get_descriptor,
    is_a177_specification_urn,
    schema_version,
    spec_version,
    valid_service_control_application,
    valid_service_logo,
)


class TestSchemaVersion:
    """Tests for namespace to version resolution."""

    def test_service_list_namespaces(self):
        """Each service list namespace maps to its revision."""
        assert schema_version(dvbi.A177_NAMESPACE) == SCHEMA_R0
        assert schema_version(dvbi.A177R6_NAMESPACE) == SCHEMA_R6
        assert schema_version(dvbi.A177R7_NAMESPACE) == SCHEMA_R7

    def test_unknown_namespace(self):
        """Unknown or missing namespaces are SCHEMA_UNKNOWN."""
        assert schema_version("urn:example:unknown") == SCHEMA_UNKNOWN
        assert schema_version(None) == SCHEMA_UNKNOWN

    def test_content_guide_table(self):
        """Content guide namespaces use their own table."""
        assert schema_version(dvbi.TVA_2024_NAMESPACE, CG_SCHEMA_VERSIONS) == SCHEMA_R2
        assert schema_version(dvbi.TVA_2024_NAMESPACE) == SCHEMA_UNKNOWN

    def test_descriptor_status(self):
        """Descriptors carry the publication status."""
        assert get_descriptor(dvbi.A177R6_NAMESPACE).status == SchemaStatus.CURRENT
        assert get_descriptor(dvbi.A177R7_NAMESPACE).status == SchemaStatus.DRAFT
        assert SchemaStatus.OLD.label == "Out of date"

    def test_spec_version(self):
        """Spec names resolve from a namespace or an ordinal."""
        assert spec_version(dvbi.A177R5_NAMESPACE) == "A177r5"
        assert spec_version(SCHEMA_R3) == "A177r3"
        assert spec_version(42) == "r?"

    def test_specification_urn(self):
        """Only published standard version URNs are recognised."""
        assert is_a177_specification_urn(f"{dvbi.STANDARD_VERSION_PREFIX}:6")
        assert not is_a177_specification_urn(f"{dvbi.STANDARD_VERSION_PREFIX}:99")
        assert not is_a177_specification_urn(None)


class TestVersionGating:
    """Tests for version-gated vocabulary tables."""

    def test_logo_matches_its_own_version(self):
        """A logo term is only valid for the revisions that define it."""
        assert valid_service_logo(dvbi.LOGO_SERVICE_V3, SCHEMA_R6)
        assert not valid_service_logo(dvbi.LOGO_SERVICE_V1, SCHEMA_R6)
        assert valid_service_logo(dvbi.LOGO_SERVICE_V1, SCHEMA_R0)

    def test_any_version(self):
        """ANY_VERSION accepts a term from any revision."""
        assert valid_service_logo(dvbi.LOGO_SERVICE_V1, ANY_VERSION)
        assert not valid_service_logo("urn:example:logo", ANY_VERSION)

    def test_application_minimum_version(self):
        """Applications are permitted from their first revision onward."""
        assert valid_service_control_application(dvbi.APP_IN_PARALLEL, SCHEMA_R0)
        assert not valid_service_control_application(dvbi.APP_IN_SERIES, SCHEMA_R6)
        assert valid_service_control_application(dvbi.APP_IN_SERIES, SCHEMA_R7)


class TestSchemaRegistry:
    """Tests for compiled schema loading."""

    def test_no_directory_disables_validation(self):
        """Without a schema directory no schemas are loaded."""
        registry = SchemaRegistry.load(SchemaConfig())
        assert len(registry) == 0
        assert registry.schema_for(dvbi.A177R6_NAMESPACE) is None

    def test_missing_file_strict(self, tmp_path):
        """A missing XSD raises in strict mode."""
        with pytest.raises(FileNotFoundError):
            SchemaRegistry.load(SchemaConfig(directory=str(tmp_path), strict=True))

    def test_missing_file_lenient(self, tmp_path):
        """A missing XSD is skipped otherwise."""
        registry = SchemaRegistry.load(SchemaConfig(directory=str(tmp_path)))
        assert len(registry) == 0

    def test_add_schema(self, tmp_path):
        """A configured XSD is compiled and registered."""
        xsd = tmp_path / "mini.xsd"
        xsd.write_text(
            '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" '
            'targetNamespace="urn:example:mini" elementFormDefault="qualified">'
            '<xs:element name="Root" type="xs:string"/></xs:schema>'
        )
        registry = SchemaRegistry()
        assert registry.add("urn:example:mini", xsd)
        assert registry.schema_for("urn:example:mini") is not None
        assert registry.filename_for("urn:example:mini") == str(xsd)

    def test_add_broken_schema(self, tmp_path):
        """An XSD that does not parse is rejected."""
        xsd = tmp_path / "broken.xsd"
        xsd.write_text("<xs:schema")
        assert not SchemaRegistry().add("urn:example:broken", xsd)
