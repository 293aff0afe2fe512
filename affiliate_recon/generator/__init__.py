"""Output generator package: summary rows and CSV export.

Consumes a Reconciliation and produces what the CLI prints and exports.

Modules:
    summary: (label, value) headline rows and per-user table rows
    csv_export: Two-column summary CSV and user table CSV writers
"""

from .csv_export import write_summary_csv, write_user_csv
from .summary import build_summary_rows, build_user_rows

__all__ = [
    "build_summary_rows",
    "build_user_rows",
    "write_summary_csv",
    "write_user_csv",
]
