"""Design system utilities: value formatting functions.

Formatting rules for the summary output:
- Counts: integers as-is (1234), fractional counts unchanged (12.5)
- Currency: fixed 2 decimals (1234.50)
- Rates: fraction rendered as a percentage, 2 decimals by default (20.00%)
"""

import math

from .models import FormatType


def _missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_count(value: float | int | None) -> str:
    """Format a count. Whole numbers lose their trailing ``.0``."""
    if _missing(value):
        return "N/A"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_currency(value: float | int | None) -> str:
    """Format a dollar amount with exactly two decimals, no symbol."""
    if _missing(value):
        return "N/A"
    return f"{value:.2f}"


def format_percentage(value: float | int | None, decimals: int = 2) -> str:
    """Format a fraction as a percentage: 0.2 -> 20.00%."""
    if _missing(value):
        return "N/A"
    return f"{value * 100:.{decimals}f}%"


def format_value(value: float | int | str | None, format_type: FormatType,
                 decimals: int = 2) -> str:
    """Format a value according to its FormatType."""
    if isinstance(value, str):
        return value
    if format_type is FormatType.PERCENTAGE:
        return format_percentage(value, decimals)
    formatters = {
        FormatType.COUNT: format_count,
        FormatType.CURRENCY: format_currency,
        FormatType.TEXT: lambda v: str(v) if v is not None else "N/A",
    }
    formatter = formatters.get(format_type, str)
    return formatter(value)
