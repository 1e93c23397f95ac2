import re
from datetime import date
from typing import Any, AbstractSet, Optional

ISO_DATE_REGEX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)
WEEKDAY_LABELS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string. Anything else, including impossible dates, is None."""
    if value is None:
        return None
    match = ISO_DATE_REGEX.match(str(value).strip())
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def weekday_name(value: date) -> str:
    # date.weekday() is Monday=0; the label table starts on Sunday
    return WEEKDAY_LABELS[(value.weekday() + 1) % 7]


def is_admissible_date(iso: Any, allowed_months: AbstractSet[int], allowed_weekdays: AbstractSet[str]) -> bool:
    """
    True when ``iso`` is a remedial session date: its month is one of the
    remedial-quarter months and its weekday is on the subject's weekly
    schedule. An empty weekday set admits nothing.
    """
    parsed = parse_iso_date(iso)
    if parsed is None:
        return False
    if parsed.month not in allowed_months:
        return False
    if not allowed_weekdays:
        return False
    return weekday_name(parsed) in allowed_weekdays


def format_absence_date(value: date) -> str:
    """Monday, 09-08-2025"""
    return f"{weekday_name(value)}, {value.month:02d}-{value.day:02d}-{value.year}"
