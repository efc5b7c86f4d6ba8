"""
Date Validation Utilities

Provides helper functions for VRR date validation:
- Strict ISO literal shape check (YYYY-MM-DD only)
- Calendar validation (month 13, day 32, Feb 29 in non-leap years)
- Future date check against the current day
"""

import re
from datetime import datetime, date
from typing import Optional, Callable
from ..config.constants import REGEX_PATTERNS


def is_iso_date_literal(date_str: str) -> bool:
    """
    Check a string has the exact YYYY-MM-DD shape.

    Shape only; "2024-13-45" passes here and fails calendar parsing.

    Args:
        date_str: Candidate date string

    Returns:
        True if shape matches, False otherwise
    """
    return bool(re.fullmatch(REGEX_PATTERNS["iso_date"], date_str))


def parse_iso_date(date_str: str) -> Optional[date]:
    """
    Parse a YYYY-MM-DD literal into a calendar date.

    Args:
        date_str: String already known to have the ISO shape

    Returns:
        date object if the date exists on the calendar, None otherwise
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        return None


def is_future_date(date_value: date, today: Optional[Callable[[], date]] = None) -> bool:
    """
    Check if a date is strictly after the current day.

    Args:
        date_value: Date to check
        today: Clock override returning the current date (tests)

    Returns:
        True if date_value > today
    """
    current = today() if today else date.today()
    return date_value > current
