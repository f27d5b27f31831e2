"""
Finding Collector Tests

Run with: pytest tests/test_errors.py -v
"""

import pytest
from lxml import etree

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core.validation.base import (
    APPLICATION_ERROR_KEY,
    INVALID_CALL_KEY,
    ErrorList,
    Severity,
)


DOCUMENT = """<ServiceList>
  <Name>One</Name>
  <Name>Two</Name>
</ServiceList>"""


@pytest.fixture
def errs():
    """Create an empty collector."""
    return ErrorList()


@pytest.fixture
def names():
    """Parse a small document and return its Name elements."""
    root = etree.fromstring(DOCUMENT)
    return list(root)


class TestAddError:
    """Tests for ErrorList.add_error."""

    def test_error_is_counted_by_key(self, errs):
        """Errors are counted under their key."""
        errs.add_error(code="SL110", message="bad id", key="invalid tag")
        errs.add_error(code="SL111", message="bad id", key="invalid tag")
        assert errs.num_errors() == 2
        assert errs.counts[Severity.ERROR]["invalid tag"] == 2

    def test_code_used_when_no_key(self, errs):
        """The code is the counting key when no key is given."""
        errs.add_error(code="SL110", message="bad id")
        assert errs.counts[Severity.ERROR]["SL110"] == 1

    def test_severities_are_separated(self, errs):
        """Each severity has its own list."""
        errs.add_error(code="A", message="a", type=Severity.WARNING)
        errs.add_error(code="B", message="b", type="information")
        errs.add_error(code="C", message="c", type=Severity.FATAL)
        assert errs.num_warnings() == 1
        assert errs.num_informationals() == 1
        assert errs.num_fatals() == 1
        assert errs.num_errors() == 0
        assert not errs.is_valid

    def test_application_errors_use_fixed_key(self, errs):
        """Application findings are counted as errors under one key."""
        errs.add_error(code="SL999", message="boom", type=Severity.APPLICATION)
        assert errs.num_errors() == 1
        assert errs.counts[Severity.ERROR][APPLICATION_ERROR_KEY] == 1

    def test_debug_is_not_reported(self, errs):
        """Debug findings are kept out of the report."""
        errs.add_error(code="D1", message="trace", type=Severity.DEBUG)
        assert errs.findings() == []
        assert len(errs.debugs) == 1

    def test_missing_code_is_a_meta_error(self, errs):
        """A call without a code records ERR000."""
        errs.add_error(message="no code")
        assert errs.has_code("ERR000")
        assert errs.counts[Severity.ERROR][INVALID_CALL_KEY] == 1

    def test_invalid_type_is_a_meta_error(self, errs):
        """An unknown severity records ERR002."""
        errs.add_error(code="X1", message="x", type="catastrophic")
        assert errs.has_code("ERR002")
        assert not errs.has_code("X1")

    def test_conflicting_shapes_rejected(self, errs, names):
        """fragment and fragments cannot be combined."""
        errs.add_error(code="X1", message="x", fragment=names[0], fragments=names)
        assert errs.codes() == ["ERR002"]


class TestElementFindings:
    """Tests for findings attached to elements."""

    def test_fragment_takes_element_line(self, errs, names):
        """A single element finding carries its source line."""
        errs.add_error(code="SL001", message="bad name", fragment=names[1])
        finding = errs.errors[0]
        assert finding.line == 3
        assert "<Name>Two</Name>" in finding.fragment

    def test_fragments_report_each_element(self, errs, names):
        """Each element in fragments gets its own finding."""
        errs.add_error(code="SL002", message="dup", fragments=names)
        assert errs.num_errors() == 2
        assert [f.line for f in errs.errors] == [2, 3]

    def test_multi_element_error_is_one_finding(self, errs, names):
        """multi_element_error reports once and marks every line."""
        errs.load_document(DOCUMENT)
        errs.add_error(code="SL003", message="clash", multi_element_error=names)
        assert errs.num_errors() == 1
        assert errs.errors[0].lines == (2, 3)
        marked = [line["ix"] for line in errs.annotated_lines()]
        assert marked == [2, 3]

    def test_markup_only(self, errs, names):
        """report_in_table=False only annotates the document."""
        errs.load_document(DOCUMENT)
        errs.add_error(code="SL004", message="note", fragment=names[0], report_in_table=False)
        assert errs.num_errors() == 0
        assert errs.annotated_lines()[0]["validation_errors"] == ["(E) SL004: note"]


class TestReporting:
    """Tests for summaries and JSON output."""

    def test_summary_passed(self, errs):
        """No findings gives a pass."""
        assert errs.summary() == "Validation PASSED - No errors found"

    def test_summary_failed_lists_keys(self, errs):
        """Failures are listed by key."""
        errs.add_error(code="SL110", message="bad", key="invalid tag")
        summary = errs.summary()
        assert summary.startswith("Validation FAILED - 1 error(s)")
        assert "invalid tag: 1" in summary

    def test_descriptions_merge(self, errs):
        """Repeated descriptions for a code are merged once."""
        errs.error_description("SL110", description="first", clause="5.2")
        errs.error_description("SL110", description="second")
        errs.error_description("SL110", description="first")
        assert errs.error_descriptions["SL110"]["description"] == "first\nsecond"

    def test_to_dict(self, errs):
        """The JSON report carries counts and findings."""
        errs.add_error(code="SL110", message="bad", key="invalid tag", line=4)
        errs.add_error(code="SL200", message="hmm", type=Severity.WARNING)
        report = errs.to_dict()
        assert report["valid"] is False
        assert report["num_errors"] == 1
        assert report["counts"]["error"] == {"invalid tag": 1}
        assert report["errors"][0] == {
            "severity": "error", "code": "SL110", "message": "bad", "key": "invalid tag", "line": 4,
        }
