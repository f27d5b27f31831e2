"""
CMCD Reporting Tests

Run with: pytest tests/test_cmcd.py -v
"""

import pytest
from lxml import etree

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core.definitions import CMCD_MODE_REQUEST
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.cmcd import check_cmcd_keys, reporting_mode_name, validate_cmcd_in_dash


EVENT_MODE = "urn:dvb:metadata:cmcd:delivery:event"
QUERY_ARGUMENTS = "urn:dvb:metadata:cmcd:delivery:queryArguments"


def report(mode=CMCD_MODE_REQUEST, keys="br bl", extra=""):
    """A <Report> with the required Request Mode attributes."""
    keys_attribute = f' enabledKeys="{keys}"' if keys is not None else ""
    return (f'<Report reportingMode="{mode}" transmissionMode="{QUERY_ARGUMENTS}" '
            f'reportingMethod="{QUERY_ARGUMENTS}"{keys_attribute}{extra}/>')


def dash(*cmcds):
    """A <DASHDeliveryParameters> holding the given <CMCD> contents."""
    return etree.fromstring(
        "<DASHDeliveryParameters>"
        + "".join(f'<CMCD CMCDversion="{version}">{reports}</CMCD>' for version, reports in cmcds)
        + "</DASHDeliveryParameters>"
    )


@pytest.fixture
def errs():
    """An empty finding collector."""
    return ErrorList()


class TestCMCD:
    """Tests for <CMCD> elements in DASH delivery."""

    def test_valid_request_report(self, errs):
        """A Request Mode report of reserved keys is accepted."""
        validate_cmcd_in_dash(dash(("1", report())), errs, "SI175")
        assert errs.codes() == []

    def test_unsupported_version(self, errs):
        """Only CMCDv1 is understood, and its reports are not checked further."""
        validate_cmcd_in_dash(dash(("2", report(keys="zz"))), errs, "SI175")
        assert errs.codes() == ["SI175"]

    def test_missing_required_attribute(self, errs):
        """Request Mode reports need @transmissionMode."""
        element = f'<Report reportingMode="{CMCD_MODE_REQUEST}" reportingMethod="{QUERY_ARGUMENTS}"/>'
        validate_cmcd_in_dash(dash(("1", element)), errs, "SI175")
        assert errs.codes() == ["SI175-1-1"]

    def test_content_id_key_needs_attribute(self, errs):
        """Reporting 'cid' needs @contentId."""
        validate_cmcd_in_dash(dash(("1", report(keys="br cid"))), errs, "SI175")
        assert errs.codes() == ["SI175-11"]

    def test_content_id_not_reported(self, errs):
        """A @contentId without the 'cid' key is a warning."""
        validate_cmcd_in_dash(dash(("1", report(extra=' contentId="programme-1"'))), errs, "SI175")
        assert [f.code for f in errs.warnings] == ["SI175-12"]
        assert errs.num_errors() == 0

    def test_single_request_report(self, errs):
        """Only one Request Mode report is allowed across the <CMCD> elements."""
        validate_cmcd_in_dash(dash(("1", report()), ("1", report())), errs, "SI175")
        assert errs.codes() == ["SI175-20"]

    def test_cmcd_key_format(self, errs):
        """Custom keys are warnings and other unknown keys are errors."""
        validate_cmcd_in_dash(dash(("1", report(keys="br com.example-rate zz"))), errs, "SI175")
        assert [f.code for f in errs.warnings] == ["SI175-13b"]
        assert [f.code for f in errs.errors] == ["SI175-13c"]


class TestCMCDKeys:
    """Tests for the reserved CMCDv1 keys."""

    def test_key_not_allowed_for_mode(self, errs):
        """Request-only keys are reported for any other reporting mode."""
        element = etree.fromstring(report(mode=EVENT_MODE, keys="d"))
        check_cmcd_keys(element, errs, "SI175-13")
        assert errs.codes() == ["SI175-13a"]
        assert "(event)" in errs.errors[0].message

    def test_no_report(self, errs):
        """A missing report is an application error."""
        check_cmcd_keys(None, errs, "SI175-13")
        assert errs.codes() == ["SI175-13-00"]
        assert errs.counts[Severity.ERROR]

    def test_reporting_mode_name(self):
        """The mode name is the last segment of its URN."""
        assert reporting_mode_name(CMCD_MODE_REQUEST) == "request"
        assert reporting_mode_name(None) == "***"
