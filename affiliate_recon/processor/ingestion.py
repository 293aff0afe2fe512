"""Data ingestion module for Affiliate Recon.

Reads the two affiliate dashboard exports into plain record dicts:
- Campaign summary (CSV or Excel, exactly one data row expected)
- User value ledger (CSV or Excel, one row per value event)

Cells are read as text so formatted values (``"$1,234.50"``, ``"30%"``) and
usernames such as ``"007"`` reach the normalizer untouched. Numeric
interpretation happens later, in the coercion module.
"""

import zipfile
from pathlib import Path

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException


EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv", ".txt"}

# Errors raised for an unreadable, corrupt or unsupported export
READ_ERRORS = (ValueError, OSError, zipfile.BadZipFile, InvalidFileException)


# ---------------------------------------------------------------------------
# Column cleaning
# ---------------------------------------------------------------------------

def clean_columns(df):
    """Strip whitespace and stray byte-order marks from column names."""
    df.columns = [c.replace("\ufeff", "").strip() if isinstance(c, str) else c
                  for c in df.columns]
    return df


# ---------------------------------------------------------------------------
# Encoding detection and file reading
# ---------------------------------------------------------------------------

def detect_encoding(path):
    """Detect whether a file is UTF-16 LE, UTF-8 with BOM, or plain UTF-8.

    Returns (encoding, delimiter) tuple.
    """
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] == b"\xff\xfe":
        return "utf-16-le", "\t"
    if raw[:3] == b"\xef\xbb\xbf":
        return "utf-8-sig", ","
    return "utf-8", ","


def read_csv_auto(path):
    """Read a CSV file with automatic encoding and delimiter detection.

    Every cell is kept as text; empty cells stay empty strings.
    """
    encoding, sep = detect_encoding(path)
    df = pd.read_csv(path, encoding=encoding, sep=sep, dtype=str,
                     keep_default_na=False)
    return clean_columns(df)


def read_table(path):
    """Read a CSV or Excel export into a DataFrame, chosen by file suffix.

    Raises:
        ValueError: If the suffix is neither CSV-like nor Excel.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, engine="openpyxl", dtype=object)
        return clean_columns(df)
    if suffix in CSV_SUFFIXES:
        return read_csv_auto(path)
    raise ValueError(
        f"Unsupported file type '{path.suffix}' for {path.name}. "
        f"Expected one of: {', '.join(sorted(CSV_SUFFIXES | EXCEL_SUFFIXES))}"
    )


def _clean(val):
    """Convert NaN / numpy scalars to clean Python values."""
    if val is None:
        return None
    if hasattr(val, "item") and not isinstance(val, str):  # numpy scalar
        val = val.item()
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    return val


def frame_to_records(df):
    """Turn a DataFrame into a list of plain ``{header: value}`` dicts."""
    return [
        {key: _clean(value) for key, value in row.items()}
        for row in df.to_dict(orient="records")
    ]


# ---------------------------------------------------------------------------
# Source-specific ingestors
# ---------------------------------------------------------------------------

def ingest_campaign(path, on_extra_rows=None):
    """Ingest the campaign summary export.

    Returns the first data row as a dict, or None for a header-only file.
    Extra rows are ignored. When there are any, *on_extra_rows* (if given)
    is called with the total number of data rows.
    """
    records = read_records(path)
    if len(records) > 1 and on_extra_rows is not None:
        on_extra_rows(len(records))
    return records[0] if records else None


def ingest_ledger(path):
    """Ingest the user value ledger export as a list of row dicts."""
    return read_records(path)


def read_records(path):
    """Read any supported export into a list of row dicts."""
    return frame_to_records(read_table(path))


# ---------------------------------------------------------------------------
# Source type registry
# ---------------------------------------------------------------------------

SOURCE_TYPES = {
    "campaign": ingest_campaign,
    "ledger": ingest_ledger,
}


def ingest(path, source_type, **options):
    """Ingest a data file by source type.

    Args:
        path: Path to the data file.
        source_type: One of 'campaign', 'ledger'.
        **options: Passed through to the source-specific ingestor.

    Returns:
        A single record dict (or None) for 'campaign', a list of record
        dicts for 'ledger'.

    Raises:
        ValueError: If source_type is not recognized.
    """
    if source_type not in SOURCE_TYPES:
        raise ValueError(
            f"Unknown source type '{source_type}'. "
            f"Valid types: {', '.join(sorted(SOURCE_TYPES))}"
        )
    return SOURCE_TYPES[source_type](path, **options)
