"""Tolerant numeric parsing for exported report values.

Exports format their numbers for people, not programs: ``"$1,234.50"``,
``"30%"``, ``" 2 500 "``. Everything here turns such values into plain
finite floats. A value that cannot be parsed becomes ``0.0``; nothing here
raises.
"""

import math
import re


# Currency symbols, percent signs, thousands separators and any whitespace
# (including the non-breaking spaces some spreadsheet exports emit).
_STRIP_PATTERN = re.compile(r"[$€£¥₹%,\s]")


def coerce_number(value) -> float:
    """Parse a value that may be a number or a formatted numeric string.

    Examples:
        "$1,234.50" -> 1234.5
        "12%"       -> 12.0   (sign stripped, not divided)
        42          -> 42.0
        "abc"       -> 0.0
        None / NaN  -> 0.0
    """
    if value is None:
        return 0.0
    if not isinstance(value, str):
        # ints, floats, numpy scalars, Decimal; pd.NA and friends raise
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0
        return number if math.isfinite(number) else 0.0

    s = _STRIP_PATTERN.sub("", value)
    if not s:
        return 0.0
    try:
        number = float(s)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def has_percent_marker(value) -> bool:
    """True when the raw value is text carrying a ``%`` sign."""
    return isinstance(value, str) and "%" in value


def resolve_rate(raw, fallback: float) -> float:
    """Resolve a commission rate to a fraction.

    "25%" -> 0.25 (marked, divided by 100)
    0.4   -> 0.4  (unmarked, used as-is)
    None  -> fallback (also for blank strings)
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return coerce_number(fallback)
    if has_percent_marker(raw):
        return coerce_number(raw) / 100
    return coerce_number(raw)
