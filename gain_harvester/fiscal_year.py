"""
Fiscal year attribution.

Maps transaction dates onto Indian financial years (April to March).
"""

from datetime import date, datetime
from typing import Optional

from .models import FiscalYear, DateLike


# Date encodings seen in broker exports
DATE_FORMATS = (
    "%Y-%m-%d",     # 2024-05-17
    "%d-%m-%Y",     # 17-05-2024
    "%d %b %Y",     # 17 May 2024
    "%d-%b-%Y",     # 17-May-2024
    "%d/%m/%Y",     # 17/05/2024
)


def parse_date(value: DateLike) -> Optional[date]:
    """
    Parse a transaction date in any of the supported encodings.

    Args:
        value: date/datetime, or a string like '2024-05-17', '17-05-2024'
               or '17 May 2024'

    Returns:
        date object, or None if the value is not a recognisable date

    Examples:
        >>> parse_date('17 May 2024')
        datetime.date(2024, 5, 17)
        >>> parse_date('not a date') is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    # openpyxl/str(datetime) style, e.g. '2024-05-17 00:00:00'
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def fiscal_year_of(day: date) -> FiscalYear:
    """Get the fiscal year containing a calendar date."""
    if day.month <= 3:
        return FiscalYear(day.year - 1)
    return FiscalYear(day.year)


def classify(value: DateLike) -> Optional[FiscalYear]:
    """
    Classify a transaction date into its fiscal year.

    January to March belong to the fiscal year that started in the
    previous calendar year.

    Args:
        value: Transaction date in any supported encoding

    Returns:
        FiscalYear, or None if the date cannot be parsed

    Examples:
        >>> str(classify('2025-03-31'))
        'FY 2024-25'
        >>> str(classify('01 Apr 2025'))
        'FY 2025-26'
    """
    day = parse_date(value)
    if day is None:
        return None
    return fiscal_year_of(day)


def current_fiscal_year(now: datetime) -> FiscalYear:
    """
    Get the fiscal year for the given wall-clock time.

    Args:
        now: Current timestamp, supplied by the caller
    """
    return fiscal_year_of(now.date() if isinstance(now, datetime) else now)
