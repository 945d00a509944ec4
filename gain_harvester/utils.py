"""
Utility functions for the Tax Gain Harvester.

This module contains helpers for reading spreadsheet cells, detecting
broker export files, and formatting amounts.
"""

import glob
import os
import re
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional


# Groww export filenames
FILE_PATTERNS = {
    'mf-holdings': re.compile(r'^Mutual_Funds_\d+_[\d-]+_[\d-]+\.xlsx$', re.IGNORECASE),
    'mf-capital-gains': re.compile(r'^Mutual_Funds_Capital_Gains_Report_[\d-]+_[\d-]+\.xlsx$', re.IGNORECASE),
    'mf-order-history': re.compile(r'^Mutual_Funds_Order_History_[\d-]+_[\d-]+\.xlsx$', re.IGNORECASE),
    'stock-holdings': re.compile(r'^Stocks_Holdings_Statement_\d+_[\d-]+\.xlsx$', re.IGNORECASE),
    'stock-capital-gains': re.compile(r'^Stocks_Capital_Gains_Report_\d+_[\d-]+_[\d-]+\.xlsx$', re.IGNORECASE),
}

FILE_TYPE_LABELS = {
    'mf-holdings': 'MF Holdings',
    'mf-capital-gains': 'MF Capital Gains',
    'mf-order-history': 'MF Order History',
    'stock-holdings': 'Stock Holdings',
    'stock-capital-gains': 'Stock Capital Gains',
}

# Excel serial day 0 (with the 1900 leap-year bug folded in)
EXCEL_EPOCH = datetime(1899, 12, 30)


def parse_number(value: Any) -> float:
    """
    Parse a spreadsheet cell to float.

    Args:
        value: Cell value (number, '1,23,456.78', '₹500', None, '')

    Returns:
        Float value, 0.0 for empty or unparsable cells

    Examples:
        >>> parse_number('1,23,456.78')
        123456.78
        >>> parse_number('-2,500')
        -2500.0
        >>> parse_number(None)
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(',', '').replace('₹', '').replace('Rs.', '')
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def excel_serial_to_date(serial: float) -> datetime:
    """
    Convert an Excel serial day number to datetime.

    Examples:
        >>> excel_serial_to_date(45397)
        datetime.datetime(2024, 4, 15, 0, 0)
    """
    return EXCEL_EPOCH + timedelta(days=float(serial))


def cell_to_date(value: Any) -> Optional[Any]:
    """
    Normalize a date cell for the engine.

    Strings and datetimes are passed through (the fiscal-year classifier
    parses them). Excel serial numbers are converted. Empty cells give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return excel_serial_to_date(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


def detect_file_type(filename: str) -> Optional[str]:
    """
    Detect the Groww export type from its filename.

    Args:
        filename: File name or path

    Returns:
        One of the FILE_PATTERNS keys, or None if unrecognised

    Examples:
        >>> detect_file_type('Stocks_Holdings_Statement_1234_2025-01-15.xlsx')
        'stock-holdings'
    """
    name = os.path.basename(filename or '')
    for file_type, pattern in FILE_PATTERNS.items():
        if pattern.match(name):
            return file_type
    return None


def find_statements_by_type(statements_dir: str) -> dict:
    """
    Detect every Groww export in a directory.

    Returns:
        Dictionary of file type -> newest matching path
    """
    found = {}
    if not os.path.isdir(statements_dir):
        return found
    for path in sorted(glob.glob(os.path.join(statements_dir, '*.xlsx')), key=os.path.getmtime):
        file_type = detect_file_type(path)
        if file_type:
            found[file_type] = path
    return found


def is_lock_in_scheme(name: str, sub_category: str, keywords: Iterable[str]) -> bool:
    """
    Check whether a fund is under a statutory lock-in (ELSS / tax saver).

    Examples:
        >>> is_lock_in_scheme('Axis Tax Saver Fund', 'Equity', ('elss', 'tax saver'))
        True
    """
    haystacks = [(name or '').lower(), (sub_category or '').lower()]
    return any(k in text for k in keywords for text in haystacks)


def group_indian(number: int) -> str:
    """Group digits the Indian way: 12345678 -> '1,23,45,678'."""
    digits = str(abs(number))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        parts = []
        while len(head) > 2:
            parts.insert(0, head[-2:])
            head = head[:-2]
        if head:
            parts.insert(0, head)
        digits = ",".join(parts) + "," + tail
    return digits


def format_currency_inr(amount: Optional[float], decimals: int = 0, include_symbol: bool = True) -> str:
    """
    Format amount as Indian Rupees with lakh/crore separators.

    Args:
        amount: Amount to format (None formats as zero)
        decimals: Digits after the decimal point
        include_symbol: Whether to include ₹ symbol

    Returns:
        Formatted string

    Examples:
        >>> format_currency_inr(123456.78)
        '₹1,23,457'
        >>> format_currency_inr(-1500.5, decimals=2)
        '-₹1,500.50'
    """
    if amount is None or amount != amount:
        amount = 0.0
    rounded = round(abs(amount), decimals)
    whole = int(rounded)
    text = group_indian(whole)
    if decimals > 0:
        fraction = f"{rounded - whole:.{decimals}f}"[1:]
        text += fraction
    sign = "-" if amount < 0 and rounded != 0 else ""
    symbol = "₹" if include_symbol else ""
    return f"{sign}{symbol}{text}"
