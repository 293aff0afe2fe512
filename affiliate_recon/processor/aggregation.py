"""Aggregation of the normalized campaign row and ledger rows.

Two independent folds:

- :func:`aggregate_campaign` turns the single campaign summary row into
  :class:`CampaignMetrics`, resolving the commission rate.
- :func:`aggregate_ledger` folds the ledger into a :class:`UserIndex` keyed
  by the exact trimmed username, with ledger-wide totals.

Neither raises on malformed data. Bad numbers are zero, and missing input
yields None (campaign) or an empty index (ledger).
"""

from types import MappingProxyType
from typing import Iterable

from affiliate_recon.schema.models import (
    CampaignMetrics,
    CampaignRecord,
    UserAggregate,
    UserIndex,
    UserLedgerRow,
)

from .coercion import coerce_number, resolve_rate


TOP_USERS_LIMIT = 10


# ---------------------------------------------------------------------------
# Campaign summary
# ---------------------------------------------------------------------------

def _clean_text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def aggregate_campaign(record: CampaignRecord | None,
                       manual_rate: float = 0.0) -> CampaignMetrics | None:
    """Derive :class:`CampaignMetrics` from a normalized campaign row.

    Args:
        record: Output of ``normalize_campaign``, or None when no campaign
            export was loaded.
        manual_rate: Commission rate (fraction) used when the export has no
            commission rate column.

    Returns:
        CampaignMetrics, or None without a record.
    """
    if record is None:
        return None
    return CampaignMetrics(
        campaign_name=_clean_text(record.campaign_name),
        offer_code=_clean_text(record.offer_code),
        created_at=_clean_text(record.created_at),
        campaign_hits=coerce_number(record.campaign_hits),
        referred_users=coerce_number(record.referred_users),
        first_time_depositors=coerce_number(record.first_time_depositors),
        total_deposits=coerce_number(record.total_deposits),
        commission_rate=resolve_rate(record.commission_rate, manual_rate),
        overall_commission_usd=coerce_number(record.overall_commission),
        overall_available_commission_usd=coerce_number(record.available_commission),
    )


# ---------------------------------------------------------------------------
# User ledger
# ---------------------------------------------------------------------------

def aggregate_ledger(rows: Iterable[UserLedgerRow],
                     top_n: int = TOP_USERS_LIMIT) -> UserIndex:
    """Fold ledger rows into a :class:`UserIndex` in a single pass.

    Every row counts, including rows with an empty username (grouped under
    ``""``) and rows whose value is zero. ``top_users`` is ordered by total
    value descending; equal totals keep first-seen order.
    """
    # username -> [entries, total]; dict order is first-seen order
    running: dict[str, list] = {}
    total_value = 0.0
    rows_with_value = 0

    for row in rows:
        slot = running.get(row.username)
        if slot is None:
            slot = running[row.username] = [0, 0.0]
        slot[0] += 1
        slot[1] += row.value_usd
        total_value += row.value_usd
        if row.value_usd != 0:
            rows_with_value += 1

    users = {
        name: UserAggregate(username=name, entries=entries, total_value=total)
        for name, (entries, total) in running.items()
    }
    ranked = sorted(users.values(), key=lambda agg: agg.total_value, reverse=True)

    return UserIndex(
        users=MappingProxyType(users),
        total_users=len(users),
        total_value=total_value,
        users_with_value=sum(1 for agg in users.values() if agg.total_value > 0),
        rows_with_value=rows_with_value,
        top_users=tuple(ranked[:top_n]),
    )
