"""Reconciliation models - the contract between normalizer, aggregators, and output.

Defines the typed structure of everything the reconciliation core produces:
the normalized campaign and ledger records, the campaign metrics, the
per-user index, the derived KPI set and the single-user inspection result.
Derived snapshots are frozen; they are recomputed in full, never patched.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FormatType(Enum):
    """How to format a value for the summary output."""
    COUNT = "count"              # Integers as-is, fractional counts untouched
    CURRENCY = "currency"        # Fixed 2 decimals
    PERCENTAGE = "percentage"    # Fraction rendered as XX.XX%
    TEXT = "text"                # Plain text, no formatting


# ---------------------------------------------------------------------------
# Normalized input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CampaignRecord:
    """The campaign summary row mapped onto canonical field names.

    Values are kept exactly as found in the export. The commission rate in
    particular may still carry its ``%`` marker.
    """
    campaign_name: Any = None
    offer_code: Any = None
    created_at: Any = None
    campaign_hits: Any = None
    referred_users: Any = None
    first_time_depositors: Any = None
    total_deposits: Any = None
    commission_rate: Any = None
    overall_commission: Any = None
    available_commission: Any = None

    def to_dict(self) -> dict:
        return {
            "campaign_name": self.campaign_name,
            "offer_code": self.offer_code,
            "created_at": self.created_at,
            "campaign_hits": self.campaign_hits,
            "referred_users": self.referred_users,
            "first_time_depositors": self.first_time_depositors,
            "total_deposits": self.total_deposits,
            "commission_rate": self.commission_rate,
            "overall_commission": self.overall_commission,
            "available_commission": self.available_commission,
        }


@dataclass(frozen=True)
class UserLedgerRow:
    """One value event attributed to a user."""
    username: str                # Trimmed; "" when the export had none
    value_usd: float
    created_at: str | None = None
    campaign: str | None = None

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "value_usd": self.value_usd,
            "created_at": self.created_at,
            "campaign": self.campaign,
        }


# ---------------------------------------------------------------------------
# Campaign metrics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CampaignMetrics:
    """Canonical numbers derived from the campaign summary row."""
    campaign_name: str | None
    offer_code: str | None
    created_at: str | None
    campaign_hits: float
    referred_users: float
    first_time_depositors: float
    total_deposits: float
    commission_rate: float                    # Fraction, 0.3 == 30%
    overall_commission_usd: float
    overall_available_commission_usd: float

    def to_dict(self) -> dict:
        return {
            "campaign_name": self.campaign_name,
            "offer_code": self.offer_code,
            "created_at": self.created_at,
            "campaign_hits": self.campaign_hits,
            "referred_users": self.referred_users,
            "first_time_depositors": self.first_time_depositors,
            "total_deposits": self.total_deposits,
            "commission_rate": self.commission_rate,
            "overall_commission_usd": self.overall_commission_usd,
            "overall_available_commission_usd": self.overall_available_commission_usd,
        }


# ---------------------------------------------------------------------------
# User ledger index
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserAggregate:
    """All ledger rows of one username folded together."""
    username: str
    entries: int = 0
    total_value: float = 0.0

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "entries": self.entries,
            "total_value": self.total_value,
        }


@dataclass(frozen=True)
class UserIndex:
    """Snapshot of the folded ledger: one aggregate per username plus totals."""
    users: Mapping[str, UserAggregate] = field(
        default_factory=lambda: MappingProxyType({}))
    total_users: int = 0
    total_value: float = 0.0
    users_with_value: int = 0
    rows_with_value: int = 0
    top_users: tuple[UserAggregate, ...] = ()

    def get(self, username: str) -> UserAggregate | None:
        """Exact-match lookup; no trimming or case folding."""
        return self.users.get(username)

    def __contains__(self, username) -> bool:
        return username in self.users

    def __len__(self) -> int:
        return len(self.users)

    def to_dict(self) -> dict:
        return {
            "total_users": self.total_users,
            "total_value": self.total_value,
            "users_with_value": self.users_with_value,
            "rows_with_value": self.rows_with_value,
            "top_users": [u.to_dict() for u in self.top_users],
            "users": {name: agg.to_dict() for name, agg in self.users.items()},
        }


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KpiSet:
    """Cross-file ratios. A zero denominator always yields 0.0."""
    conversion: float = 0.0                   # FTDs / referred users
    value_per_user: float = 0.0
    value_per_depositor: float = 0.0
    commission_per_user: float = 0.0
    commission_per_depositor: float = 0.0
    effective_commission_rate: float = 0.0    # Realized commission / ledger value

    def to_dict(self) -> dict:
        return {
            "conversion": self.conversion,
            "value_per_user": self.value_per_user,
            "value_per_depositor": self.value_per_depositor,
            "commission_per_user": self.commission_per_user,
            "commission_per_depositor": self.commission_per_depositor,
            "effective_commission_rate": self.effective_commission_rate,
        }


# ---------------------------------------------------------------------------
# Single-user inspection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserInspectionResult:
    """One user's ledger contribution against the estimated commission."""
    username: str
    entries: int
    total_value: float
    found: bool
    commission_rate: float
    estimated_commission: float
    observed_commission: float | None = None
    variance: float | None = None             # observed - estimated

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "entries": self.entries,
            "total_value": self.total_value,
            "found": self.found,
            "commission_rate": self.commission_rate,
            "estimated_commission": self.estimated_commission,
            "observed_commission": self.observed_commission,
            "variance": self.variance,
        }


# ---------------------------------------------------------------------------
# Reconciliation - top-level container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Reconciliation:
    """Everything derived from one campaign export and one ledger export.

    Either side may be missing. KPIs exist only when both are present.
    """
    campaign: CampaignMetrics | None = None
    users: UserIndex | None = None
    kpis: KpiSet | None = None
    manual_rate: float = 0.0

    @property
    def commission_rate(self) -> float:
        """The campaign's resolved rate, or the manual rate without a campaign."""
        if self.campaign is not None:
            return self.campaign.commission_rate
        return self.manual_rate

    def to_dict(self) -> dict:
        return {
            "campaign": self.campaign.to_dict() if self.campaign is not None else None,
            "users": self.users.to_dict() if self.users is not None else None,
            "kpis": self.kpis.to_dict() if self.kpis is not None else None,
            "commission_rate": self.commission_rate,
        }
