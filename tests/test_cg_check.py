"""
Content Guide Validation Tests

Run with: pytest tests/test_cg_check.py -v
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core import definitions as dvbi
from dvbi_core.reference.languages import IANALanguages
from dvbi_core.reference.loaders import ReferenceStores
from dvbi_core.validation.base import Severity
from dvbi_core.validation.cg_check import CGRequestType, ContentGuideCheck, SUPPORTED_REQUESTS


PROGRAM = """
      <ProgramInformation programId="{crid}">
        <BasicDescription>
          <Title type="main">Programme</Title>
          <Synopsis length="medium">A programme.</Synopsis>
        </BasicDescription>
      </ProgramInformation>"""

SCHEDULE = """
      <Schedule serviceIDRef="{service}" start="2024-01-01T10:00:00Z" end="2024-01-01T12:00:00Z">{events}
      </Schedule>"""

EVENT = """
        <ScheduleEvent>
          <Program crid="{crid}"/>
          <PublishedStartTime>{start}</PublishedStartTime>
          <PublishedDuration>PT30M</PublishedDuration>
        </ScheduleEvent>"""


def tva(program_description="", namespace=dvbi.TVA_2024_NAMESPACE, lang=' xml:lang="en"'):
    """A TVAMain response around the given ProgramDescription content."""
    body = f"\n  <ProgramDescription>{program_description}\n  </ProgramDescription>" \
        if program_description is not None else ""
    return f'<TVAMain xmlns="{namespace}"{lang}>{body}\n</TVAMain>'


def tables(programs="", locations=""):
    return (f"\n    <ProgramInformationTable>{programs}\n    </ProgramInformationTable>"
            f"\n    <ProgramLocationTable>{locations}\n    </ProgramLocationTable>")


def program(crid="crid://example.com/p1"):
    return PROGRAM.format(crid=crid)


def schedule(events="", service="tag:example.com,2024:svc1"):
    return SCHEDULE.format(service=service, events=events)


def event(crid="crid://example.com/p1", start="2024-01-01T10:30:00Z"):
    return EVENT.format(crid=crid, start=start)


@pytest.fixture
def checker():
    """Create a content guide checker that knows only the English language."""
    languages = IANALanguages()
    languages.load_text("%%\nType: language\nSubtag: en\nDescription: English\n")
    return ContentGuideCheck(ReferenceStores(languages=languages))


class TestRequestTypes:
    """Tests for request type handling."""

    def test_unknown_request_type(self, checker):
        """An unsupported request type is reported before parsing."""
        errs = checker.validate_content_guide("<not xml", "Yesterday")
        assert errs.codes() == ["CG008"]
        assert errs.errors[0].severity == Severity.APPLICATION

    def test_string_and_enum_accepted(self, checker):
        """Query values and enum members select the same checks."""
        text = tva(None)
        assert checker.validate_content_guide(text, "ProgInfo").codes() == \
            checker.validate_content_guide(text, CGRequestType.PROGRAM_INFO).codes()

    def test_from_value(self):
        """Query values map to request types."""
        assert CGRequestType.from_value("bsContents") == CGRequestType.BOX_SET_CONTENTS
        assert CGRequestType.from_value("nownext") is None

    def test_supported_requests(self):
        """Every request type is listed with its label."""
        assert {"value": "NowNext", "label": "Schedule Info (now/next)"} in SUPPORTED_REQUESTS
        assert len(SUPPORTED_REQUESTS) == 8


class TestDocumentLevel:
    """Tests for findings that stop the validation pass."""

    def test_no_text(self, checker):
        """A missing document is an application error."""
        errs = checker.validate_content_guide(None, "Time")
        assert errs.codes() == ["CG000"]

    def test_malformed(self, checker):
        """Unparseable XML is fatal."""
        errs = checker.validate_content_guide("<TVAMain><ProgramDescription>", "Time")
        assert errs.codes() == ["CG001-1"]
        assert errs.num_fatals() == 1

    def test_wrong_root(self, checker):
        """The root element must be <TVAMain>."""
        errs = checker.validate_content_guide(f'<ServiceList xmlns="{dvbi.TVA_2024_NAMESPACE}"/>', "Time")
        assert errs.codes() == ["CG002"]

    @pytest.mark.parametrize("root", [
        '<TVAMain xml:lang="en"/>',
        '<TVAMain xmlns="urn:example:tva" xml:lang="en"/>',
    ])
    def test_namespace(self, checker, root):
        """A missing or unsupported namespace stops the pass."""
        errs = checker.validate_content_guide(root, "Time")
        assert errs.codes() == ["CG004"]

    def test_no_program_description(self, checker):
        """<ProgramDescription> is required."""
        errs = checker.validate_content_guide(tva(None), "Time")
        assert errs.codes() == ["CG006"]

    def test_language_required(self, checker):
        """TVAMain must declare its language."""
        errs = checker.validate_content_guide(tva(None, lang=""), "Time")
        assert errs.has_code("CG005-1")

    def test_old_schema(self, checker):
        """An out of date namespace is reported."""
        errs = checker.validate_content_guide(tva(None, namespace=dvbi.TVA_2023_NAMESPACE), "Time")
        assert errs.has_code("CG003a")

    def test_stats_count_requests(self, checker):
        """Each call is counted."""
        checker.validate_content_guide(None, "Time")
        checker.validate_content_guide(tva(None), "Time")
        assert checker.stats()["numRequests"] == 2


class TestProgramInformation:
    """Tests for the <ProgramInformationTable>."""

    def test_invalid_program_id(self, checker):
        """ProgramInformation@programId must be a CRID."""
        errs = checker.validate_content_guide(tva(tables(program("p1"))), "Time")
        assert errs.has_code("PI011")

    def test_duplicate_program_id(self, checker):
        """Each programme is described once."""
        errs = checker.validate_content_guide(tva(tables(program() + program())), "Time")
        assert errs.has_code("PI012")

    def test_missing_table(self, checker):
        """The ProgramInformationTable is required."""
        text = tva("\n    <ProgramLocationTable/>")
        errs = checker.validate_content_guide(text, "Time")
        assert errs.has_code("PI101")


class TestSchedules:
    """Tests for <Schedule> and <ScheduleEvent> in the ProgramLocationTable."""

    def test_program_not_located(self, checker):
        """Every described programme must be scheduled."""
        errs = checker.validate_content_guide(tva(tables(program(), schedule())), "Time")
        assert errs.has_code("PL022")

    def test_program_located(self, checker):
        """A scheduled programme is not reported."""
        errs = checker.validate_content_guide(tva(tables(program(), schedule(event()))), "Time")
        assert not errs.has_code("PL022")
        assert not errs.has_code("SE012")

    def test_event_for_unknown_program(self, checker):
        """A ScheduleEvent must refer to a described programme."""
        errs = checker.validate_content_guide(
            tva(tables(program(), schedule(event() + event(crid="crid://example.com/p2", start="2024-01-01T11:00:00Z")))),
            "Time",
        )
        assert errs.has_code("SE012")

    def test_start_time_not_utc(self, checker):
        """PublishedStartTime must be a UTC date and time."""
        errs = checker.validate_content_guide(
            tva(tables(program(), schedule(event(start="2024-01-01 10:30:00")))), "Time",
        )
        assert errs.has_code("SE049")

    def test_event_before_schedule(self, checker):
        """An event cannot start before its schedule."""
        errs = checker.validate_content_guide(
            tva(tables(program(), schedule(event(start="2024-01-01T09:00:00Z")))), "Time",
        )
        assert errs.has_code("SE041")

    def test_event_ends_after_schedule(self, checker):
        """An event must end within its schedule."""
        errs = checker.validate_content_guide(
            tva(tables(program(), schedule(event(start="2024-01-01T11:45:00Z")))), "Time",
        )
        assert errs.has_code("SE043")
        assert not errs.has_code("SE042")

    def test_duplicate_schedule(self, checker):
        """One schedule per service."""
        errs = checker.validate_content_guide(
            tva(tables(program(), schedule(event()) + schedule())), "Time",
        )
        assert errs.codes().count("PL020") == 1

    def test_schedule_timing(self, checker):
        """Schedule@start must be before Schedule@end."""
        reversed_schedule = schedule(event()).replace('end="2024-01-01T12:00:00Z"', 'end="2024-01-01T09:00:00Z"')
        errs = checker.validate_content_guide(tva(tables(program(), reversed_schedule)), "Time")
        assert errs.has_code("VS012")


class TestNowNext:
    """Tests for now/next structural groups."""

    def test_earlier_not_permitted(self, checker):
        """There is no 'earlier' group in a now/next response."""
        groups = (f'\n    <GroupInformationTable>'
                  f'<GroupInformation groupId="{dvbi.CRID_EARLIER}" numOfItems="1"/>'
                  f'</GroupInformationTable>')
        errs = checker.validate_content_guide(tva(groups + tables(program(), schedule(event()))), "NowNext")
        assert errs.has_code("VNN002")

    def test_earlier_permitted_in_window(self, checker):
        """A window response can carry earlier programmes."""
        groups = (f'\n    <GroupInformationTable>'
                  f'<GroupInformation groupId="{dvbi.CRID_EARLIER}" numOfItems="1"/>'
                  f'</GroupInformationTable>')
        errs = checker.validate_content_guide(tva(groups + tables(program(), schedule(event()))), "Window")
        assert not errs.has_code("VNN002")


class TestOnDemand:
    """Tests for <OnDemandProgram>."""

    @staticmethod
    def on_demand(crid="crid://example.com/p1", start="2024-01-01T00:00:00Z", end="2024-02-01T00:00:00Z"):
        return (f'\n      <OnDemandProgram serviceIDRef="tag:example.com,2024:svc1">'
                f'<Program crid="{crid}"/>'
                f"<StartOfAvailability>{start}</StartOfAvailability>"
                f"<EndOfAvailability>{end}</EndOfAvailability>"
                f"</OnDemandProgram>")

    def test_availability_window(self, checker):
        """Availability must end after it starts."""
        location = self.on_demand(start="2024-02-01T00:00:00Z", end="2024-01-01T00:00:00Z")
        errs = checker.validate_content_guide(tva(tables(program(), location)), "ProgInfo")
        assert errs.codes().count("OD062") == 1

    def test_unknown_program(self, checker):
        """The on demand Program must be described."""
        location = self.on_demand(crid="crid://example.com/p9")
        errs = checker.validate_content_guide(tva(tables(program(), location)), "ProgInfo")
        assert errs.has_code("OD011")
        assert errs.has_code("PL022")

    def test_program_info_without_location(self, checker):
        """A programme info response need not carry an on demand location."""
        errs = checker.validate_content_guide(tva(tables(program())), "ProgInfo")
        assert not errs.has_code("PL022")
