"""Tests for value formatting, summary rows and CSV export."""

import pandas as pd
import pytest

from affiliate_recon.generator.csv_export import write_summary_csv, write_user_csv
from affiliate_recon.generator.summary import (
    USER_TABLE_COLUMNS,
    build_summary_rows,
    build_user_rows,
)
from affiliate_recon.processor.reconcile import Reconciler
from affiliate_recon.schema.design_system import (
    format_count,
    format_currency,
    format_percentage,
    format_value,
)
from affiliate_recon.schema.models import FormatType


@pytest.fixture
def result():
    return Reconciler().reconcile(
        {
            "campaign_name": "Spring",
            "referred_users": 100,
            "first_time_depositors": 20,
            "overall_commission (USD)": 500,
            "commission_rate": "30%",
        },
        [
            {"username": "a", "value": 100},
            {"username": "b", "value": 50},
            {"username": "a", "value": 25},
        ],
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_count_whole(self):
        assert format_count(100.0) == "100"
        assert format_count(7) == "7"

    def test_count_fractional(self):
        assert format_count(12.5) == "12.5"

    def test_currency(self):
        assert format_currency(1234.5) == "1234.50"
        assert format_currency(0) == "0.00"
        assert format_currency(-3.456) == "-3.46"

    def test_percentage(self):
        assert format_percentage(0.2) == "20.00%"
        assert format_percentage(500 / 175, decimals=3) == "285.714%"

    def test_missing(self):
        assert format_count(None) == "N/A"
        assert format_currency(float("nan")) == "N/A"
        assert format_percentage(None) == "N/A"

    def test_format_value_dispatch(self):
        assert format_value(0.25, FormatType.PERCENTAGE) == "25.00%"
        assert format_value(0.25, FormatType.PERCENTAGE, 3) == "25.000%"
        assert format_value(3.0, FormatType.COUNT) == "3"
        assert format_value(3.0, FormatType.CURRENCY) == "3.00"
        assert format_value(None, FormatType.TEXT) == "N/A"

    def test_strings_pass_through(self):
        assert format_value("Spring", FormatType.CURRENCY) == "Spring"


# ---------------------------------------------------------------------------
# build_summary_rows
# ---------------------------------------------------------------------------

class TestBuildSummaryRows:
    def test_full_summary(self, result):
        rows = dict(build_summary_rows(result))
        assert rows["Campaign"] == "Spring"
        assert rows["Referred Users"] == "100"
        assert rows["Commission Rate"] == "30.00%"
        assert rows["Overall Commission (USD)"] == "500.00"
        assert rows["Total Users"] == "2"
        assert rows["Total Value (USD)"] == "175.00"
        assert rows["Conversion"] == "20.00%"
        assert rows["Value Per Depositor (USD)"] == "8.75"
        assert rows["Effective Commission Rate"] == "285.714%"

    def test_order_is_campaign_ledger_kpis(self, result):
        labels = [label for label, _ in build_summary_rows(result)]
        assert labels.index("Referred Users") < labels.index("Total Users")
        assert labels.index("Total Users") < labels.index("Conversion")
        assert labels[-1] == "Effective Commission Rate"

    def test_missing_text_fields_skipped(self, result):
        labels = [label for label, _ in build_summary_rows(result)]
        assert "Offer Code" not in labels
        assert "Created At" not in labels

    def test_ledger_only(self):
        result = Reconciler().reconcile(None, [{"username": "a", "value": 1}])
        labels = [label for label, _ in build_summary_rows(result)]
        assert labels == ["Total Users", "Users With Value", "Rows With Value", "Total Value (USD)"]

    def test_nothing_loaded(self):
        assert build_summary_rows(Reconciler().reconcile(None, None)) == []

    def test_all_values_are_strings(self, result):
        for label, value in build_summary_rows(result):
            assert isinstance(label, str)
            assert isinstance(value, str)


# ---------------------------------------------------------------------------
# build_user_rows
# ---------------------------------------------------------------------------

class TestBuildUserRows:
    def test_rows(self, result):
        rows = build_user_rows(result.users, result.commission_rate)
        assert rows == [
            {"Username": "a", "Entries": 2, "Total Value (USD)": "125.00",
             "Estimated Commission (USD)": "37.50"},
            {"Username": "b", "Entries": 1, "Total Value (USD)": "50.00",
             "Estimated Commission (USD)": "15.00"},
        ]

    def test_limit(self, result):
        assert len(build_user_rows(result.users, 0.3, limit=1)) == 1

    def test_no_ledger(self):
        assert build_user_rows(None, 0.3) == []

    def test_includes_users_beyond_top_ten(self):
        ledger = [{"username": f"u{i}", "value": i} for i in range(15)]
        result = Reconciler().reconcile(None, ledger)
        assert len(build_user_rows(result.users, 0.1)) == 15


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

class TestCsvExport:
    def test_summary_csv(self, tmp_path, result):
        rows = build_summary_rows(result)
        path = write_summary_csv(tmp_path / "out" / "summary.csv", rows)
        df = pd.read_csv(path, dtype=str)
        assert list(df.columns) == ["Metric", "Value"]
        assert len(df) == len(rows)
        assert df.set_index("Metric").loc["Conversion", "Value"] == "20.00%"

    def test_user_csv(self, tmp_path, result):
        rows = build_user_rows(result.users, result.commission_rate)
        path = write_user_csv(tmp_path / "users.csv", rows)
        df = pd.read_csv(path, dtype=str)
        assert list(df.columns) == USER_TABLE_COLUMNS
        assert df["Username"].tolist() == ["a", "b"]

    def test_empty_user_csv_has_header(self, tmp_path):
        path = write_user_csv(tmp_path / "users.csv", [])
        assert path.read_text().strip() == ",".join(USER_TABLE_COLUMNS)
