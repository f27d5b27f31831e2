"""
CMCD Reporting
==============

Checks for the ``<CMCD>`` elements of ``<DASHDeliveryParameters>``, which
ask the player to report Common Media Client Data (CTA-5004).

Only CMCD version 1 is understood. Each ``<Report>`` names a reporting mode
and the keys to report; a key must be reserved by CMCDv1 for that mode, or
be a custom key (containing '-').
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from dvbi_core.definitions import CMCD_MODE_REQUEST, CMCD_SUPPORTED_VERSION
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.schema_checks import check_attributes
from dvbi_core.xml.utils import attr, attribute, children, quote

K_CMCD = "CMCD"

CONTENT_ID_KEY = "cid"

REPORT_ATTRIBUTES = ["reportingMode", "transmissionMode", "reportingMethod", "contentId", "enabledKeys",
                     "probability"]
REQUEST_REQUIRED_ATTRIBUTES = ["reportingMode", "transmissionMode", "reportingMethod"]
REQUEST_OPTIONAL_ATTRIBUTES = ["contentId", "enabledKeys", "probability"]


@dataclass(frozen=True)
class ReservedKey:
    """A CMCDv1 key and the reporting modes it may be used in."""
    key: str
    modes: Tuple[str, ...]


ALL_REPORTING_MODES = (CMCD_MODE_REQUEST,)

CMCD_V1_KEYS: Dict[str, ReservedKey] = {
    entry.key: entry for entry in (
        ReservedKey("br", ALL_REPORTING_MODES),
        ReservedKey("bl", ALL_REPORTING_MODES),
        ReservedKey("bs", ALL_REPORTING_MODES),
        ReservedKey("cid", ALL_REPORTING_MODES),
        ReservedKey("d", (CMCD_MODE_REQUEST,)),
        ReservedKey("dl", (CMCD_MODE_REQUEST,)),
        ReservedKey("mtp", ALL_REPORTING_MODES),
        ReservedKey("nor", (CMCD_MODE_REQUEST,)),
        ReservedKey("nrr", (CMCD_MODE_REQUEST,)),
        ReservedKey("ot", (CMCD_MODE_REQUEST,)),
        ReservedKey("pr", ALL_REPORTING_MODES),
        ReservedKey("rtp", (CMCD_MODE_REQUEST,)),
        ReservedKey("sf", ALL_REPORTING_MODES),
        ReservedKey("sid", ALL_REPORTING_MODES),
        ReservedKey("st", ALL_REPORTING_MODES),
        ReservedKey("su", (CMCD_MODE_REQUEST,)),
        ReservedKey("tb", ALL_REPORTING_MODES),
        ReservedKey("v", ALL_REPORTING_MODES),
    )
}


def is_custom_key(key: str) -> bool:
    return "-" in key


def reporting_mode_name(mode: Any) -> str:
    """The last segment of a reporting mode URN, '***' when there is none."""
    if not isinstance(mode, str) or ":" not in mode:
        return "***"
    return mode[mode.rfind(":") + 1:]


def check_cmcd_keys(report: Any, errs: ErrorList, code: str) -> None:
    """Check each of a Report's @enabledKeys against the reserved CMCDv1 keys."""
    if report is None:
        errs.add_error(type=Severity.APPLICATION, code=f"{code}-00",
                       message="check_cmcd_keys() called with report==None")
        return

    mode = attr(report, "reportingMode")
    for key in attr(report, "enabledKeys", "").split():
        reserved = CMCD_V1_KEYS.get(key)
        if reserved is not None:
            if mode not in reserved.modes:
                errs.add_error(
                    code=f"{code}a",
                    message=f"{quote(key)} is not allowed for the specified reporting mode "
                            f"({reporting_mode_name(mode)})",
                    fragment=report,
                    key=K_CMCD,
                )
        elif is_custom_key(key):
            errs.add_error(
                type=Severity.WARNING,
                code=f"{code}b",
                message=f"custom CMCD key {quote(key)} in use",
                fragment=report,
                key=K_CMCD,
            )
        else:
            errs.add_error(
                code=f"{code}c",
                message=f"{quote(key)} is not a reserved CMCDv1 key or the correct format for a custom key",
                fragment=report,
                key=K_CMCD,
            )


def _check_cmcd(cmcd: Any, mode_counts: Dict[str, int], errs: ErrorList, code: str) -> None:
    version = attr(cmcd, "CMCDversion", str(CMCD_SUPPORTED_VERSION))
    if version != str(CMCD_SUPPORTED_VERSION):
        errs.add_error(
            code=code,
            message=f"CMCDv{version} is not supported",
            fragment=cmcd,
            key=K_CMCD,
        )
        return

    for report in children(cmcd, "Report"):
        mode = attr(report, "reportingMode")
        if mode == CMCD_MODE_REQUEST:
            check_attributes(report, REQUEST_REQUIRED_ATTRIBUTES, REQUEST_OPTIONAL_ATTRIBUTES, REPORT_ATTRIBUTES,
                             errs, f"{code}-1")

        enabled_keys = attr(report, "enabledKeys")
        if enabled_keys is not None:
            keys: List[str] = enabled_keys.split()
            content_id = attr(report, "contentId")
            if content_id is None and CONTENT_ID_KEY in keys:
                errs.add_error(
                    code=f"{code}-11",
                    message=f"{attribute('contentId')} must be specified when {attribute('enabledKeys')} "
                            f"contains {quote(CONTENT_ID_KEY)}",
                    fragment=report,
                    key=K_CMCD,
                )
            elif content_id is not None and CONTENT_ID_KEY not in keys:
                errs.add_error(
                    type=Severity.WARNING,
                    code=f"{code}-12",
                    message=f"{attribute('contentId')} is specified but key {quote(CONTENT_ID_KEY)} "
                            "not requested for reporting",
                    fragment=report,
                    key=K_CMCD,
                )
            check_cmcd_keys(report, errs, f"{code}-13")

        name = reporting_mode_name(mode)
        if name in mode_counts:
            mode_counts[name] += 1
            if mode_counts[reporting_mode_name(CMCD_MODE_REQUEST)] > 1:
                errs.add_error(
                    code=f"{code}-20",
                    message="only a single reporting configuration for Request Mode can be specified",
                    fragment=cmcd,
                    key=K_CMCD,
                )


def validate_cmcd_in_dash(dash_delivery_parameters: Any, errs: ErrorList, code: str) -> None:
    """
    Check every <CMCD> of a DASHDeliveryParameters.

    Request Mode reports are counted across all of the <CMCD> elements, and
    only one may be given.

    Args:
        dash_delivery_parameters: The <DASHDeliveryParameters> element
        errs: Finding collector
        code: Code prefix for findings
    """
    mode_counts = {reporting_mode_name(CMCD_MODE_REQUEST): 0}
    for cmcd in children(dash_delivery_parameters, "CMCD"):
        _check_cmcd(cmcd, mode_counts, errs, code)
