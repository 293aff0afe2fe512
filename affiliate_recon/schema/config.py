"""Reconciliation settings.

``ReconConfig`` carries what an analyst may want to pin per affiliate
program: the commission rate to assume when the campaign export has none,
how many top users to rank, and extra header spellings for exports the
built-in alias tables do not know yet.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from .models import CampaignRecord


# Canonical field names an alias table may extend
CAMPAIGN_ALIAS_FIELDS = tuple(f.name for f in fields(CampaignRecord))
LEDGER_ALIAS_FIELDS = ("campaign", "username", "created_at", "value")


@dataclass
class ReconConfig:
    """User-editable reconciliation settings (see ``loader.py`` for YAML I/O)."""
    # Fraction (0.3) or percent text ("30%"); resolved by the Reconciler
    manual_commission_rate: float | str = 0.0
    top_n: int = 10
    # canonical field -> extra headers, tried before the built-in ones
    campaign_aliases: dict[str, list[str]] = field(default_factory=dict)
    ledger_aliases: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "manual_commission_rate": self.manual_commission_rate,
            "top_n": self.top_n,
        }
        if self.campaign_aliases:
            d["campaign_aliases"] = {k: list(v) for k, v in self.campaign_aliases.items()}
        if self.ledger_aliases:
            d["ledger_aliases"] = {k: list(v) for k, v in self.ledger_aliases.items()}
        return d

    @classmethod
    def from_dict(cls, d: dict | None) -> "ReconConfig":
        if d is None:
            return cls()
        if not isinstance(d, dict):
            raise ValueError(f"Config must be a mapping, got {type(d).__name__}")

        top_n = d.get("top_n", 10)
        if not isinstance(top_n, int) or isinstance(top_n, bool) or top_n < 1:
            raise ValueError(f"top_n must be a positive integer, got {top_n!r}")

        return cls(
            manual_commission_rate=d.get("manual_commission_rate", 0.0),
            top_n=top_n,
            campaign_aliases=_alias_table(d.get("campaign_aliases"), "campaign_aliases",
                                          CAMPAIGN_ALIAS_FIELDS),
            ledger_aliases=_alias_table(d.get("ledger_aliases"), "ledger_aliases",
                                        LEDGER_ALIAS_FIELDS),
        )


def _alias_table(raw, key: str, valid: tuple[str, ...]) -> dict[str, list[str]]:
    """Validate an alias table: known field -> list of header strings."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{key} must be a mapping of field name to header list")
    unknown = sorted(str(name) for name in raw if name not in valid)
    if unknown:
        raise ValueError(
            f"Unknown field(s) in {key}: {', '.join(unknown)}. "
            f"Valid fields: {', '.join(valid)}"
        )
    table = {}
    for name, headers in raw.items():
        if isinstance(headers, str):
            headers = [headers]
        if not isinstance(headers, list) or not all(isinstance(h, str) for h in headers):
            raise ValueError(f"{key}.{name} must be a list of header names")
        table[str(name)] = list(headers)
    return table
