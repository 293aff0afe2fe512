"""Cross-file KPI derivation.

KPIs only make sense once both exports are reconciled, so
:func:`derive_kpis` returns None unless campaign metrics and a user index
are both available. Every ratio treats a zero denominator as a 0 result.
"""

import math

from affiliate_recon.schema.models import CampaignMetrics, KpiSet, UserIndex


def safe_divide(numerator, denominator, default=0.0):
    """Divide *numerator* by *denominator*, returning *default* on failure."""
    try:
        if denominator is None:
            return default
        denom = float(denominator)
        if denom == 0 or not math.isfinite(denom):
            return default
        result = float(numerator) / denom
        if not math.isfinite(result):
            return default
        return result
    except (TypeError, ValueError, ZeroDivisionError, OverflowError):
        return default


def derive_kpis(campaign: CampaignMetrics | None,
                users: UserIndex | None) -> KpiSet | None:
    """Combine campaign metrics and ledger totals into a :class:`KpiSet`."""
    if campaign is None or users is None:
        return None

    depositors = campaign.first_time_depositors
    commission = campaign.overall_commission_usd

    return KpiSet(
        conversion=safe_divide(depositors, campaign.referred_users),
        value_per_user=safe_divide(users.total_value, users.total_users),
        value_per_depositor=safe_divide(users.total_value, depositors),
        commission_per_user=safe_divide(commission, users.total_users),
        commission_per_depositor=safe_divide(commission, depositors),
        effective_commission_rate=safe_divide(commission, users.total_value),
    )
