"""Single-user inspection against the estimated commission."""

from affiliate_recon.schema.models import (
    CampaignMetrics,
    UserAggregate,
    UserIndex,
    UserInspectionResult,
)

from .coercion import coerce_number


def inspect_user(query: str | None,
                 users: UserIndex | None,
                 campaign: CampaignMetrics | None,
                 manual_rate: float = 0.0,
                 observed_override=None) -> UserInspectionResult | None:
    """Look up one username and compare its estimated commission.

    Args:
        query: Username to look up. Trimmed, then matched exactly (case
            sensitive).
        users: The folded ledger. Without it there is nothing to inspect.
        campaign: Campaign metrics supplying the commission rate. When None,
            *manual_rate* is used instead.
        manual_rate: Fallback commission rate as a fraction.
        observed_override: Commission actually paid, as reported elsewhere.
            Formatted strings are accepted. A value that coerces to 0 is
            treated as not supplied, so a genuine zero cannot be expressed.

    Returns:
        UserInspectionResult, or None when *users* is missing or the query is
        blank. An unknown username yields a zero result with ``found=False``.
    """
    username = str(query or "").strip()
    if users is None or not username:
        return None

    aggregate = users.get(username)
    found = aggregate is not None
    if aggregate is None:
        aggregate = UserAggregate(username=username)

    rate = campaign.commission_rate if campaign is not None else coerce_number(manual_rate)
    estimated = aggregate.total_value * rate

    observed = coerce_number(observed_override)
    if observed == 0:
        observed = None
    variance = observed - estimated if observed is not None else None

    return UserInspectionResult(
        username=aggregate.username,
        entries=aggregate.entries,
        total_value=aggregate.total_value,
        found=found,
        commission_rate=rate,
        estimated_commission=estimated,
        observed_commission=observed,
        variance=variance,
    )
