"""
Capture timestamp formatting.

CDX timestamps are 14-digit strings (YYYYMMDDhhmmss), sometimes truncated.
The two response formats historically read the date out of them at different
offsets, so the offsets are described by a layout value instead of being
hard-coded.
"""

from datetime import date
from enum import Enum
from typing import Tuple

DATE_UNKNOWN = "date unknown"


class TimestampLayout(Enum):
    """Substring offsets (start, length) for year, month and day."""

    # Structured (JSON) responses: YYYYMMDD...
    CAPTURE = ((0, 4), (4, 2), (6, 2))
    # Delimited (CSV) fallback responses
    LEGACY_FALLBACK = ((0, 4), (6, 2), (8, 2))


def _slice(timestamp: str, span: Tuple[int, int]) -> str:
    start, length = span
    return timestamp[start:start + length]


def format_timestamp(timestamp: str, layout: TimestampLayout = TimestampLayout.CAPTURE) -> str:
    """
    Convert a raw capture timestamp to a YYYY-MM-DD string.

    Args:
        timestamp: Raw CDX timestamp (0-14 digits, possibly empty)
        layout: Which offset convention to read year/month/day with

    Returns:
        The formatted date, or DATE_UNKNOWN if the pieces don't form a real
        calendar date
    """
    if not timestamp:
        return DATE_UNKNOWN

    year_span, month_span, day_span = layout.value
    year = _slice(timestamp, year_span)
    month = _slice(timestamp, month_span)
    day = _slice(timestamp, day_span)

    if len(year) != 4 or not (year.isdigit() and month.isdigit() and day.isdigit()):
        return DATE_UNKNOWN

    try:
        parsed = date(int(year), int(month), int(day))
    except ValueError:
        return DATE_UNKNOWN

    return parsed.isoformat()
