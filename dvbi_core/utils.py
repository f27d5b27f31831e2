"""
General Helpers
===============

Small value helpers shared by the rule checks.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Set

_ENTITY_REGEX = re.compile(r"&[^;\s]+;")
_DURATION_REGEX = re.compile(
    r"^(-)?P(?:(?:(\d+)Y)?(?:(\d+)M)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?|(\d+)W)$"
)


def un_entity(text: Optional[str]) -> str:
    """Replace each XML entity reference with a single placeholder character."""
    if not text:
        return ""
    return _ENTITY_REGEX.sub("*", text)


def is_in(values: Iterable[str], value: Optional[str], case_sensitive: bool = True) -> bool:
    """Membership test with an optional case-insensitive comparison."""
    if values is None or not isinstance(value, str):
        return False
    if case_sensitive:
        return value in values
    lowered = value.lower()
    return any(isinstance(v, str) and v.lower() == lowered for v in values)


def duplicated_value(found: Set[str], value: str) -> bool:
    """
    Record a value and report whether it had been seen before.

    Args:
        found: Values seen so far, updated in place
        value: Value to record

    Returns:
        True if the value was already present
    """
    if value in found:
        return True
    found.add(value)
    return False


@dataclass
class ISODuration:
    """Components of a parsed ISO 8601 duration."""

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: float = 0.0

    def add_to(self, start: datetime) -> datetime:
        """Add this duration to a datetime, treating a month as its calendar length."""
        month_index = start.month - 1 + self.months
        year = start.year + self.years + month_index // 12
        month = month_index % 12 + 1
        day = min(start.day, _days_in_month(year, month))
        shifted = start.replace(year=year, month=month, day=day)
        return shifted + timedelta(
            weeks=self.weeks, days=self.days, hours=self.hours,
            minutes=self.minutes, seconds=self.seconds,
        )


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (datetime(year, month + 1, 1) - datetime(year, month, 1)).days


def parse_iso_duration(duration: Optional[str]) -> ISODuration:
    """
    Parse an ISO 8601 duration such as 'PT1H30M' or 'P2W'.

    Raises:
        ValueError: The value is not a supported duration
    """
    match = _DURATION_REGEX.match(duration.strip()) if isinstance(duration, str) else None
    if not match:
        raise ValueError(f'Invalid duration "{duration}"')
    sign = -1 if match.group(1) else 1

    def part(index: int) -> int:
        return sign * int(match.group(index)) if match.group(index) else 0

    seconds = sign * float(match.group(7)) if match.group(7) else 0.0
    return ISODuration(
        years=part(2), months=part(3), days=part(4), hours=part(5), minutes=part(6),
        seconds=seconds, weeks=part(8),
    )


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an xs:dateTime value, treating a missing zone as UTC. None if unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
