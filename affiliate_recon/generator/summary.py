"""Headline summary and user table builders.

Flattens a :class:`Reconciliation` into ordered ``(label, value)`` pairs
ready for a two-column export, and the user index into table rows. Sections
only appear when their source data exists:

- Campaign: needs the campaign export
- Ledger: needs the ledger export
- KPIs: needs both
"""

from affiliate_recon.schema.design_system import format_value
from affiliate_recon.schema.models import FormatType, Reconciliation, UserIndex


# (label, attribute, format, decimals)
CAMPAIGN_FIELDS = [
    ("Campaign", "campaign_name", FormatType.TEXT, 0),
    ("Offer Code", "offer_code", FormatType.TEXT, 0),
    ("Created At", "created_at", FormatType.TEXT, 0),
    ("Campaign Hits", "campaign_hits", FormatType.COUNT, 0),
    ("Referred Users", "referred_users", FormatType.COUNT, 0),
    ("First Time Depositors", "first_time_depositors", FormatType.COUNT, 0),
    ("Total Deposits", "total_deposits", FormatType.COUNT, 0),
    ("Commission Rate", "commission_rate", FormatType.PERCENTAGE, 2),
    ("Overall Commission (USD)", "overall_commission_usd", FormatType.CURRENCY, 0),
    ("Available Commission (USD)", "overall_available_commission_usd", FormatType.CURRENCY, 0),
]

LEDGER_FIELDS = [
    ("Total Users", "total_users", FormatType.COUNT, 0),
    ("Users With Value", "users_with_value", FormatType.COUNT, 0),
    ("Rows With Value", "rows_with_value", FormatType.COUNT, 0),
    ("Total Value (USD)", "total_value", FormatType.CURRENCY, 0),
]

KPI_FIELDS = [
    ("Conversion", "conversion", FormatType.PERCENTAGE, 2),
    ("Value Per User (USD)", "value_per_user", FormatType.CURRENCY, 0),
    ("Value Per Depositor (USD)", "value_per_depositor", FormatType.CURRENCY, 0),
    ("Commission Per User (USD)", "commission_per_user", FormatType.CURRENCY, 0),
    ("Commission Per Depositor (USD)", "commission_per_depositor", FormatType.CURRENCY, 0),
    ("Effective Commission Rate", "effective_commission_rate", FormatType.PERCENTAGE, 3),
]

USER_TABLE_COLUMNS = ["Username", "Entries", "Total Value (USD)", "Estimated Commission (USD)"]


def _rows(source, fields) -> list[tuple[str, str]]:
    rows = []
    for label, attr, format_type, decimals in fields:
        value = getattr(source, attr)
        if format_type is FormatType.TEXT and value is None:
            continue
        rows.append((label, format_value(value, format_type, decimals)))
    return rows


def build_summary_rows(result: Reconciliation) -> list[tuple[str, str]]:
    """Return every headline metric as an ordered list of (label, value)."""
    rows: list[tuple[str, str]] = []
    if result.campaign is not None:
        rows.extend(_rows(result.campaign, CAMPAIGN_FIELDS))
    if result.users is not None:
        rows.extend(_rows(result.users, LEDGER_FIELDS))
    if result.kpis is not None:
        rows.extend(_rows(result.kpis, KPI_FIELDS))
    return rows


def build_user_rows(users: UserIndex | None, commission_rate: float,
                    limit: int | None = None) -> list[dict]:
    """Per-user table rows, highest total value first.

    Equal totals keep ledger order. ``limit=None`` returns every user.
    """
    if users is None:
        return []
    ranked = sorted(users.users.values(), key=lambda agg: agg.total_value, reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [
        {
            "Username": agg.username,
            "Entries": agg.entries,
            "Total Value (USD)": format_value(agg.total_value, FormatType.CURRENCY),
            "Estimated Commission (USD)": format_value(
                agg.total_value * commission_rate, FormatType.CURRENCY),
        }
        for agg in ranked
    ]
