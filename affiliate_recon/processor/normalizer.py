"""Record normalization for campaign and ledger exports.

The affiliate dashboard has shipped several export formats over time, each
with its own header spellings (``referred_users``, ``Referred Users``,
``referrals`` ...). Every canonical field therefore has an ordered tuple of
accepted headers; the first one present in a record wins.

Normalization is a pure mapping. It never coerces campaign values, so the
commission rate keeps its ``%`` marker for the aggregator to interpret.
"""

from typing import Any, Iterable, Mapping

from affiliate_recon.schema.models import CampaignRecord, UserLedgerRow

from .coercion import coerce_number


# ---------------------------------------------------------------------------
# Alias tables
# ---------------------------------------------------------------------------

CAMPAIGN_ALIASES: dict[str, tuple[str, ...]] = {
    "campaign_name": ("campaign_name", "Campaign Name", "campaign", "Campaign", "name", "Name"),
    "offer_code": ("offer_code", "Offer Code", "code", "Code", "promo_code", "Promo Code"),
    "created_at": ("created_at", "Created At", "createdAt", "created", "date", "Date"),
    "campaign_hits": ("campaign_hits", "Campaign Hits", "hits", "Hits", "clicks", "Clicks"),
    "referred_users": ("referred_users", "Referred Users", "referrals", "Referrals", "referred"),
    "first_time_depositors": (
        "first_time_depositors", "First Time Depositors", "ftd", "FTD", "ftds", "FTDs",
    ),
    "total_deposits": ("total_deposits", "Total Deposits", "deposits", "Deposits", "deposit_count"),
    "commission_rate": (
        "commission_rate", "Commission Rate", "commission_rate (%)", "Commission Rate (%)",
        "rate", "Rate",
    ),
    "overall_commission": (
        "overall_commission (USD)", "overall_commission", "Overall Commission (USD)",
        "Overall Commission", "commission (USD)", "commission_usd",
    ),
    "available_commission": (
        "overall_available_commission (USD)", "overall_available_commission",
        "Overall Available Commission (USD)", "available_commission (USD)",
        "available_commission", "Available Commission",
    ),
}

LEDGER_ALIASES: dict[str, tuple[str, ...]] = {
    "campaign": ("campaign", "Campaign", "campaign_name", "Campaign Name"),
    "username": ("username", "Username", "user_name", "User Name", "user", "User"),
    "created_at": ("created_at", "Created At", "createdAt", "date", "Date"),
    "value": (
        "value", "Value", "value (USD)", "Value (USD)", "value_usd",
        "amount", "Amount", "amount (USD)",
    ),
}


def merge_aliases(base: Mapping[str, tuple[str, ...]],
                  extra: Mapping[str, Iterable[str]] | None) -> dict[str, tuple[str, ...]]:
    """Return a copy of *base* with *extra* headers tried first.

    Raises:
        ValueError: If *extra* names a field *base* does not know.
    """
    merged = dict(base)
    if not extra:
        return merged
    unknown = sorted(set(extra) - set(base))
    if unknown:
        raise ValueError(
            f"Unknown field(s) in alias table: {', '.join(unknown)}. "
            f"Valid fields: {', '.join(base)}"
        )
    for name, headers in extra.items():
        custom = tuple(h for h in headers if h not in base[name])
        merged[name] = custom + base[name]
    return merged


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def first_present(record: Mapping[str, Any], aliases: Iterable[str]):
    """Return the value of the first alias present in *record*, else None.

    A header that exists but holds None counts as absent.
    """
    for alias in aliases:
        value = record.get(alias)
        if value is not None:
            return value
    return None


def _text(value) -> str | None:
    if value is None:
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------

def normalize_campaign(record: Mapping[str, Any] | None,
                       aliases: Mapping[str, tuple[str, ...]] = CAMPAIGN_ALIASES) -> CampaignRecord | None:
    """Map a raw campaign summary row onto :class:`CampaignRecord`."""
    if record is None:
        return None
    return CampaignRecord(**{
        name: first_present(record, headers) for name, headers in aliases.items()
    })


def normalize_ledger_row(record: Mapping[str, Any],
                         aliases: Mapping[str, tuple[str, ...]] = LEDGER_ALIASES) -> UserLedgerRow:
    """Map a raw ledger row onto :class:`UserLedgerRow`.

    Rows without a username are kept under the empty-string key.
    """
    username = first_present(record, aliases["username"])
    return UserLedgerRow(
        username=str(username).strip() if username is not None else "",
        value_usd=coerce_number(first_present(record, aliases["value"])),
        created_at=_text(first_present(record, aliases["created_at"])),
        campaign=_text(first_present(record, aliases["campaign"])),
    )


def normalize_ledger(records: Iterable[Mapping[str, Any]],
                     aliases: Mapping[str, tuple[str, ...]] = LEDGER_ALIASES) -> list[UserLedgerRow]:
    """Normalize every ledger row, preserving order."""
    return [normalize_ledger_row(r, aliases) for r in records]
