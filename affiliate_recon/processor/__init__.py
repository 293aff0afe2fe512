"""Data processor module for Affiliate Recon."""

from .aggregation import aggregate_campaign, aggregate_ledger
from .coercion import coerce_number, has_percent_marker, resolve_rate
from .ingestion import (
    ingest,
    ingest_campaign,
    ingest_ledger,
    read_records,
    read_table,
    frame_to_records,
    clean_columns,
    read_csv_auto,
    detect_encoding,
    READ_ERRORS,
    SOURCE_TYPES,
)
from .inspector import inspect_user
from .kpi import derive_kpis, safe_divide
from .normalizer import (
    CAMPAIGN_ALIASES,
    LEDGER_ALIASES,
    first_present,
    merge_aliases,
    normalize_campaign,
    normalize_ledger,
    normalize_ledger_row,
)
from .reconcile import Reconciler
