"""
Utility functions for date handling, age calculation and formatting.
"""

import re
from datetime import date, datetime
from typing import Any, Optional


TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date value into a ``date``.

    Args:
        value: Date string (ISO or YYYY-MM-DD), date or datetime

    Returns:
        Parsed date, or None if the value cannot be interpreted
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str) or not value.strip():
        return None

    str_value = value.strip()

    # Try ISO format (date pickers send full timestamps)
    try:
        return datetime.fromisoformat(str_value.replace('Z', '+00:00')).date()
    except ValueError:
        pass

    # Try YYYY-MM-DD format
    try:
        return datetime.strptime(str_value, '%Y-%m-%d').date()
    except ValueError:
        return None


def calculate_age(dob: Any, reference_date: date) -> Optional[int]:
    """
    Calculate age in whole years at a reference date.

    The birthday must have occurred in the reference year for it to count,
    so DOB 2007-12-31 is 17 on 2025-06-01.

    Args:
        dob: Date of birth (string, date or datetime)
        reference_date: Date to measure age at

    Returns:
        Age in years, or None if the DOB cannot be parsed
    """
    birth_date = parse_date(dob)
    if birth_date is None:
        return None

    age = reference_date.year - birth_date.year
    if (reference_date.month, reference_date.day) < (birth_date.month, birth_date.day):
        age -= 1

    return age


def is_under_age(dob: Any, threshold: int, reference_date: date) -> bool:
    """
    Determine if a person with the given DOB is younger than ``threshold``.

    Unknown or unparseable DOBs are not considered under age.
    """
    age = calculate_age(dob, reference_date)
    if age is None:
        return False
    return age < threshold


def get_local_today(timezone_name: str = 'UTC') -> date:
    """
    Get today's date in the given timezone.

    Args:
        timezone_name: IANA timezone name

    Returns:
        Current local date
    """
    from zoneinfo import ZoneInfo
    return datetime.now(ZoneInfo(timezone_name)).date()


def format_date(date_value: Any) -> str:
    """
    Format a date value into a display string.

    Args:
        date_value: Date string, date or datetime

    Returns:
        Formatted date string (DD Month YYYY)
    """
    parsed = parse_date(date_value)
    if parsed is None:
        return '' if date_value is None else str(date_value)
    return parsed.strftime('%d %B %Y')


def format_currency(amount: Any, currency: str = '$') -> str:
    """
    Format a numeric amount as currency.

    Args:
        amount: Numeric amount
        currency: Currency symbol

    Returns:
        Formatted currency string
    """
    if amount is None:
        return ''

    try:
        num = float(amount)
        if num == int(num):
            return f'{currency}{int(num):,}'
        return f'{currency}{num:,.2f}'
    except (ValueError, TypeError, OverflowError):
        return str(amount)


def format_percentage(value: Any) -> str:
    """
    Format a numeric value as percentage.

    Args:
        value: Numeric percentage (e.g., 50 for 50%)

    Returns:
        Formatted percentage string
    """
    if value is None:
        return ''

    try:
        num = float(value)
        if num == int(num):
            return f'{int(num)}%'
        return f'{num:.2f}%'
    except (ValueError, TypeError, OverflowError):
        return str(value)


def format_file_size(size: Any) -> str:
    """Format a byte count as KB/MB for display."""
    try:
        num = int(size)
    except (ValueError, TypeError, OverflowError):
        return ''
    if num >= 1024 * 1024:
        return f'{num / (1024 * 1024):.1f} MB'
    return f'{num / 1024:.1f} KB'
