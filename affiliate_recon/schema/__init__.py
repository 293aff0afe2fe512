"""Schema package: typed models, formatting and configuration.

Provides the contract between the reconciliation core and its callers:

- models.py: Frozen dataclasses (CampaignMetrics, UserIndex, KpiSet, etc.)
- design_system.py: Value formatting functions (count, currency, percentage)
- config.py: ReconConfig settings dataclass
- loader.py: YAML serialization/deserialization of ReconConfig
"""

from .config import ReconConfig
from .design_system import (
    format_count,
    format_currency,
    format_percentage,
    format_value,
)
from .loader import load_config, save_config
from .models import (
    CampaignMetrics,
    CampaignRecord,
    FormatType,
    KpiSet,
    Reconciliation,
    UserAggregate,
    UserIndex,
    UserInspectionResult,
    UserLedgerRow,
)

__all__ = [
    # Models
    "CampaignMetrics",
    "CampaignRecord",
    "FormatType",
    "KpiSet",
    "Reconciliation",
    "UserAggregate",
    "UserIndex",
    "UserInspectionResult",
    "UserLedgerRow",
    # Config
    "ReconConfig",
    "load_config",
    "save_config",
    # Formatting
    "format_count",
    "format_currency",
    "format_percentage",
    "format_value",
]
