"""Reconciliation pipeline.

Wires the pure steps together for one pair of exports::

    raw records -> normalize -> {aggregate_campaign, aggregate_ledger}
                -> derive_kpis

Usage::

    from affiliate_recon.processor.reconcile import Reconciler

    reconciler = Reconciler(load_config("recon.yaml"))
    result = reconciler.reconcile(
        ingest_campaign("campaign.csv"),
        ingest_ledger("ledger.csv"),
    )
    print(result.kpis.conversion)
    detail = reconciler.inspect(result, "alice", observed_override="150")

Each call recomputes everything from its inputs; nothing is cached.
"""

from typing import Any, Iterable, Mapping

from affiliate_recon.schema.config import ReconConfig
from affiliate_recon.schema.models import Reconciliation, UserInspectionResult

from .aggregation import aggregate_campaign, aggregate_ledger
from .coercion import resolve_rate
from .inspector import inspect_user
from .kpi import derive_kpis
from .normalizer import (
    CAMPAIGN_ALIASES,
    LEDGER_ALIASES,
    merge_aliases,
    normalize_campaign,
    normalize_ledger,
)


class Reconciler:
    """Reconcile a campaign summary export with a user ledger export.

    Args:
        config: Settings (manual rate, top-N, extra header aliases).
            Defaults to ``ReconConfig()``.

    Raises:
        ValueError: If the config's alias tables name unknown fields.
    """

    def __init__(self, config: ReconConfig | None = None):
        self.config = config or ReconConfig()
        self.manual_rate = resolve_rate(self.config.manual_commission_rate, 0.0)
        self.campaign_aliases = merge_aliases(CAMPAIGN_ALIASES, self.config.campaign_aliases)
        self.ledger_aliases = merge_aliases(LEDGER_ALIASES, self.config.ledger_aliases)

    def reconcile(self,
                  campaign_record: Mapping[str, Any] | None,
                  ledger_records: Iterable[Mapping[str, Any]] | None) -> Reconciliation:
        """Derive campaign metrics, the user index and KPIs.

        Args:
            campaign_record: The single campaign summary row, or None.
            ledger_records: Ledger rows, or None when no ledger was loaded.
                An empty sequence is a loaded (empty) ledger.
        """
        campaign = aggregate_campaign(
            normalize_campaign(campaign_record, self.campaign_aliases),
            self.manual_rate,
        )
        users = None
        if ledger_records is not None:
            users = aggregate_ledger(
                normalize_ledger(ledger_records, self.ledger_aliases),
                top_n=self.config.top_n,
            )
        return Reconciliation(
            campaign=campaign,
            users=users,
            kpis=derive_kpis(campaign, users),
            manual_rate=self.manual_rate,
        )

    def inspect(self, result: Reconciliation, query: str | None,
                observed_override=None) -> UserInspectionResult | None:
        """Inspect one username within a previous :meth:`reconcile` result."""
        return inspect_user(
            query,
            result.users,
            result.campaign,
            manual_rate=result.manual_rate,
            observed_override=observed_override,
        )
