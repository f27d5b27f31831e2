"""
Finding Collection
==================

Typed findings and the ErrorList that accumulates them during one
validation pass.

A finding is data, never an exception: checks report problems with
``ErrorList.add_error`` and carry on. Each finding records its source line
when it is created, from the lxml element it is reported against, and the
ErrorList keeps per-severity category counters plus a line-annotated copy
of the original document for display.
"""

from collections import Counter
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

from lxml import etree

logger = logging.getLogger(__name__)

# the maximum number of lines of an element shown alongside a finding
MAX_FRAGMENT_LINES = 6

APPLICATION_ERROR_KEY = "application process error"
INVALID_CALL_KEY = "invalid add_error call"


class Severity(str, Enum):
    """Finding severities."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    APPLICATION = "application"
    FATAL = "fatal"
    DEBUG = "debug"

    @property
    def label(self) -> str:
        """Short marker used in the annotated document, e.g. '(E)'."""
        markers = {
            Severity.ERROR: "(E)",
            Severity.WARNING: "(W)",
            Severity.INFORMATION: "(I)",
            Severity.APPLICATION: "(A)",
            Severity.FATAL: "(F)",
            Severity.DEBUG: "(D)",
        }
        return markers[self]


@dataclass(frozen=True)
class Finding:
    """
    A single validation finding.

    Attributes:
        severity: Severity of the finding
        code: Rule code, e.g. 'SL110'
        message: Human-readable description
        key: Category used for aggregate counting
        line: Source line of the element reported against
        fragment: Pretty-printed excerpt of that element
        lines: Source lines of every element of a multi-element finding
        clause: Specification clause the rule comes from
        description: Long-form explanation of the rule
    """
    severity: Severity
    code: str
    message: str
    key: Optional[str] = None
    line: Optional[int] = None
    fragment: Optional[str] = None
    lines: Tuple[int, ...] = field(default_factory=tuple)
    clause: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["severity"] = self.severity.value
        result["lines"] = list(self.lines)
        return {k: v for k, v in result.items() if v not in (None, [])}


@dataclass
class MarkupLine:
    """One line of the original document and the findings reported on it."""
    ix: int
    value: str
    validation_errors: List[str] = field(default_factory=list)


@dataclass
class ValidationContext:
    """
    Per-document state threaded through the checks.

    Attributes:
        namespace: Namespace URI of the document root
        prefix: Namespace prefix used on the root, if any
        version: Schema version ordinal
        descriptor: The matching SchemaVersionDescriptor
    """
    namespace: str
    prefix: Optional[str] = None
    version: int = -1
    descriptor: Any = None


Fragment = Union[str, Any]


class ErrorList:
    """
    Accumulates findings for one validation pass.

    Example:
        >>> errs = ErrorList()
        >>> errs.add_error(code="SL110", message="not a valid service identifier",
        ...                key="invalid tag", line=12)
        >>> errs.num_errors()
        1
        >>> errs.counts[Severity.ERROR]["invalid tag"]
        1
    """

    def __init__(self):
        self.fatals: List[Finding] = []
        self.errors: List[Finding] = []
        self.warnings: List[Finding] = []
        self.informationals: List[Finding] = []
        self.debugs: List[Finding] = []
        self.counts: Dict[Severity, Counter] = {
            Severity.FATAL: Counter(),
            Severity.ERROR: Counter(),
            Severity.WARNING: Counter(),
            Severity.INFORMATION: Counter(),
        }
        self.markup_xml: List[MarkupLine] = []
        self.error_descriptions: Dict[str, Dict[str, Optional[str]]] = {}
        self.metadata: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Document markup
    # ------------------------------------------------------------------

    def load_document(self, text: Union[str, bytes]) -> None:
        """Load the text that findings are overlaid on, one entry per line."""
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        self.markup_xml = [
            MarkupLine(ix=index + 1, value=value) for index, value in enumerate(text.split("\n"))
        ]

    def _set_error(self, severity: Severity, code: str, message: str, line: Optional[int]) -> None:
        if not line or line < 1 or line > len(self.markup_xml):
            return
        entry = self.markup_xml[line - 1]
        entry.validation_errors.append(f"{severity.label} {code}: {message}")

    def annotated_lines(self) -> List[Dict[str, Any]]:
        """Lines of the loaded document that carry at least one finding."""
        return [asdict(line) for line in self.markup_xml if line.validation_errors]

    # ------------------------------------------------------------------
    # Adding findings
    # ------------------------------------------------------------------

    @staticmethod
    def _pretty_print(fragment: Fragment) -> str:
        if isinstance(fragment, str):
            return fragment
        text = etree.tostring(fragment, pretty_print=True, encoding="unicode", with_tail=False)
        lines = text.split("\n")
        if len(lines) > MAX_FRAGMENT_LINES:
            return "\n".join(lines[:MAX_FRAGMENT_LINES]) + "\n....\n"
        return text

    @staticmethod
    def _line_of(fragment: Fragment, line: Optional[int]) -> Optional[int]:
        if fragment is None or isinstance(fragment, str):
            return line
        return fragment.sourceline

    def _meta_error(self, code: str, message: str) -> None:
        logger.debug(f"{code}: {message}")
        self.errors.append(Finding(Severity.APPLICATION, code, message, key=INVALID_CALL_KEY))
        self.counts[Severity.ERROR][INVALID_CALL_KEY] += 1

    def _insert(self, finding: Finding) -> None:
        severity = finding.severity
        if severity == Severity.DEBUG:
            self.debugs.append(finding)
            return
        if severity == Severity.APPLICATION:
            self.errors.append(finding)
            self.counts[Severity.ERROR][APPLICATION_ERROR_KEY] += 1
            return

        target = {
            Severity.FATAL: self.fatals,
            Severity.ERROR: self.errors,
            Severity.WARNING: self.warnings,
            Severity.INFORMATION: self.informationals,
        }[severity]
        target.append(finding)
        self.counts[severity][finding.key or finding.code] += 1

    def add_error(self,
                  code: Optional[str] = None,
                  message: Optional[str] = None,
                  type: Union[Severity, str] = Severity.ERROR,
                  key: Optional[str] = None,
                  line: Optional[int] = None,
                  fragment: Optional[Fragment] = None,
                  fragments: Optional[Sequence[Fragment]] = None,
                  multi_element_error: Optional[Sequence[Fragment]] = None,
                  report_in_table: bool = True,
                  clause: Optional[str] = None,
                  description: Optional[str] = None) -> None:
        """
        Record a finding.

        Exactly one of the element shapes may be given: ``fragment`` for a
        single element, ``fragments`` for one finding per element, or
        ``multi_element_error`` for one finding marked on every element.
        With none, the finding is document level and ``line`` is used.

        Args:
            code: Rule code
            message: Human-readable description
            type: Severity of the finding
            key: Category for aggregate counting
            line: Source line when no element is given
            fragment: Element (or preformatted text) the finding refers to
            fragments: Elements that each get their own finding
            multi_element_error: Elements sharing one finding
            report_in_table: False to only mark up the document
            clause: Specification clause of the rule
            description: Long-form rule description
        """
        if not code:
            self._meta_error("ERR000", "add_error() called without code")
            return
        if not message:
            self._meta_error("ERR001", f"add_error() called without message for {code}")
            return
        try:
            severity = Severity(type)
        except ValueError:
            self._meta_error("ERR002", f"add_error() called with invalid type ({type}) for {code}")
            return
        shapes = [s for s in (fragment, fragments, multi_element_error) if s is not None]
        if len(shapes) > 1:
            self._meta_error("ERR002", f"add_error() called with conflicting element arguments for {code}")
            return

        if severity == Severity.DEBUG:
            self._insert(Finding(severity, code, message, key=key, line=line))
        elif multi_element_error is not None:
            lines = []
            for element in multi_element_error:
                element_line = self._line_of(element, None)
                if element_line:
                    lines.append(element_line)
                    self._set_error(severity, code, message, element_line)
            finding = Finding(severity, code, message, key=key, lines=tuple(lines), clause=clause)
            if report_in_table:
                self._insert(finding)
        elif fragments is not None:
            for element in fragments:
                if element is None:
                    continue
                element_line = self._line_of(element, line)
                self._set_error(severity, code, message, element_line)
                if report_in_table:
                    self._insert(Finding(
                        severity, code, message, key=key, line=element_line,
                        fragment=self._pretty_print(element), clause=clause,
                    ))
        elif fragment is not None:
            element_line = self._line_of(fragment, line)
            self._set_error(severity, code, message, element_line)
            if report_in_table:
                self._insert(Finding(
                    severity, code, message, key=key, line=element_line,
                    fragment=self._pretty_print(fragment), clause=clause,
                ))
        else:
            self._set_error(severity, code, message, line)
            if report_in_table:
                self._insert(Finding(severity, code, message, key=key, line=line, clause=clause))

        if description:
            self.error_description(code, description=description, clause=clause)

    def add_finding(self, finding: Finding) -> None:
        """Record a prebuilt Finding with the same accounting as add_error."""
        self._set_error(finding.severity, finding.code, finding.message, finding.line)
        for line in finding.lines:
            self._set_error(finding.severity, finding.code, finding.message, line)
        self._insert(finding)
        if finding.description:
            self.error_description(finding.code, description=finding.description, clause=finding.clause)

    def error_description(self, code: str, description: Optional[str] = None,
                          clause: Optional[str] = None) -> None:
        """Attach a long-form description to a code, merging repeated descriptions."""
        if not code or not description:
            return
        existing = self.error_descriptions.get(code)
        if existing is None:
            self.error_descriptions[code] = {"description": description, "clause": clause}
        elif description not in existing["description"]:
            existing["description"] = f"{existing['description']}\n{description}"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def num_fatals(self) -> int:
        return len(self.fatals)

    def num_errors(self) -> int:
        return len(self.errors)

    def num_warnings(self) -> int:
        return len(self.warnings)

    def num_informationals(self) -> int:
        return len(self.informationals)

    def findings(self) -> List[Finding]:
        """All reported findings, most severe first."""
        return self.fatals + self.errors + self.warnings + self.informationals

    def codes(self) -> List[str]:
        return [f.code for f in self.findings()]

    def has_code(self, code: str) -> bool:
        return any(f.code == code for f in self.findings())

    @property
    def is_valid(self) -> bool:
        return not self.fatals and not self.errors

    def summary(self) -> str:
        """Generate a text summary of validation results."""
        if self.is_valid:
            if self.warnings:
                return f"Validation PASSED - {self.num_warnings()} warning(s)"
            return "Validation PASSED - No errors found"

        lines = [
            f"Validation FAILED - {self.num_fatals() + self.num_errors()} error(s), "
            f"{self.num_warnings()} warning(s)",
            "",
            "Errors by type:",
        ]
        combined = self.counts[Severity.FATAL] + self.counts[Severity.ERROR]
        for key, count in sorted(combined.items(), key=lambda x: -x[1]):
            lines.append(f"  {key}: {count}")

        if self.warnings:
            lines.extend(["", "Warnings by type:"])
            for key, count in sorted(self.counts[Severity.WARNING].items(), key=lambda x: -x[1]):
                lines.append(f"  {key}: {count}")

        return "\n".join(lines)

    def to_dict(self, include_markup: bool = False) -> Dict[str, Any]:
        """JSON-serializable report."""
        result = {
            "valid": self.is_valid,
            "num_fatals": self.num_fatals(),
            "num_errors": self.num_errors(),
            "num_warnings": self.num_warnings(),
            "num_informationals": self.num_informationals(),
            "counts": {sev.value: dict(counter) for sev, counter in self.counts.items() if counter},
            "fatals": [f.to_dict() for f in self.fatals],
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "informationals": [f.to_dict() for f in self.informationals],
            "descriptions": dict(self.error_descriptions),
            "metadata": dict(self.metadata),
        }
        if include_markup:
            result["markup"] = self.annotated_lines()
        return result
