"""
Numeric Parsing and Rate Normalization

Raw values reach the engine as floats, Decimals, currency strings ("$1,250.00"),
percent strings ("6.5%") or nothing at all. Every value is funnelled through
these helpers once, at the fact-gathering boundary, so the calculators only ever
see plain floats with rates in decimal form.
"""

import math
import re
from decimal import Decimal
from typing import Any

_FORMATTING = re.compile(r"[\s$,%]")

TRUTHY_STRINGS = {"true", "t", "yes", "y", "1", "active"}


def parse_number(value: Any) -> float:
    """
    Parse a number from any raw value.

    Strings are read as plain numbers first (so "1.5e3" is 1500); failing
    that, currency symbols, thousands separators and percent signs are
    stripped and a parenthesized amount is negative. Anything that cannot be
    read as a finite number resolves to 0.0; this function never raises.

    Args:
        value: Raw value (number, Decimal, string or None)

    Returns:
        Parsed float, or 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        result = float(value)
    elif isinstance(value, str):
        result = _parse_string(value)
    else:
        return 0.0

    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def _parse_string(value: str) -> float:
    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    # Accounting notation: (1,200.00) is -1200
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    cleaned = _FORMATTING.sub("", text)
    try:
        result = float(cleaned)
    except ValueError:
        return 0.0
    return -result if negative else result


def normalize_rate(value: Any) -> float:
    """
    Normalize a rate to decimal form.

    Any value strictly greater than 1 is read as a percentage and divided by
    100, so 5 and 0.05 both mean 5%. A value of exactly 1.0 is kept as 100%.

    Args:
        value: Raw rate (number or string)

    Returns:
        Rate as decimal
    """
    rate = parse_number(value)
    if rate > 1:
        return rate / 100
    return rate


def first_present(*values: Any) -> Any:
    """
    Return the first value that is actually populated.

    Mirrors the "stored value, else fallback, else default" chains used when
    reading assumptions. None and blank strings count as missing; an explicit
    zero is kept. Returns None when nothing qualifies.
    """
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def parse_flag(value: Any) -> bool:
    """Read a boolean flag stored as bool, number or string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return parse_number(value) != 0
