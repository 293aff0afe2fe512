"""CSV writers for the summary and the user table."""

from pathlib import Path

import pandas as pd

from .summary import USER_TABLE_COLUMNS


def write_summary_csv(path, rows) -> Path:
    """Write (label, value) pairs as a two-column ``Metric,Value`` CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(rows), columns=["Metric", "Value"])
    df.to_csv(path, index=False)
    return path


def write_user_csv(path, rows) -> Path:
    """Write user table rows (from ``build_user_rows``) to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(rows), columns=USER_TABLE_COLUMNS)
    df.to_csv(path, index=False)
    return path
