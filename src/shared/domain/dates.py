"""Calendar-date parsing shared by order dates and blackout ranges.

Dates travel as ``YYYY-MM-DD`` strings and are compared as calendar dates,
never as timestamps, so no timezone can shift a day across a boundary.
"""

from __future__ import annotations

import re
from datetime import date, datetime

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: object) -> date:
    """Return ``value`` as a ``date``; raise ``ValueError`` when malformed."""
    if isinstance(value, datetime):
        raise ValueError("Expected a calendar date without a time component.")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value.strip()):
        raise ValueError("Expected a date in YYYY-MM-DD format.")
    # fromisoformat rejects impossible days such as 2025-02-30
    return date.fromisoformat(value.strip())
