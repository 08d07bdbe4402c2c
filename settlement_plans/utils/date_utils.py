"""Date parsing utilities"""

from datetime import date, datetime
from typing import Any


def parse_date(value: Any) -> date | None:
    """Parse a date, datetime or ISO string (YYYY-MM-DD with optional time part)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def sort_key(value: date | None) -> date:
    """Missing dates sort first"""
    return value if value is not None else date.min
