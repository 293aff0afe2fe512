"""Tests for campaign summary and user ledger aggregation."""

import math
from types import MappingProxyType

import pytest

from affiliate_recon.processor.aggregation import (
    TOP_USERS_LIMIT,
    aggregate_campaign,
    aggregate_ledger,
)
from affiliate_recon.schema.models import CampaignRecord, UserLedgerRow


def _rows(*pairs):
    """Build ledger rows from (username, value) pairs."""
    return [UserLedgerRow(username=u, value_usd=float(v)) for u, v in pairs]


# ---------------------------------------------------------------------------
# aggregate_campaign
# ---------------------------------------------------------------------------

class TestAggregateCampaign:
    def test_none_record(self):
        assert aggregate_campaign(None, 0.3) is None

    def test_numeric_fields_coerced(self):
        rec = CampaignRecord(
            campaign_name=" Spring ",
            campaign_hits="1,200",
            referred_users="100",
            first_time_depositors=20,
            total_deposits="35",
            overall_commission="$500.00",
            available_commission="$120.50",
        )
        m = aggregate_campaign(rec, 0.0)
        assert m.campaign_name == "Spring"
        assert m.campaign_hits == 1200.0
        assert m.referred_users == 100.0
        assert m.first_time_depositors == 20.0
        assert m.total_deposits == 35.0
        assert m.overall_commission_usd == 500.0
        assert m.overall_available_commission_usd == 120.5

    def test_rate_with_percent_marker(self):
        m = aggregate_campaign(CampaignRecord(commission_rate="25%"), 0.1)
        assert m.commission_rate == pytest.approx(0.25)

    def test_rate_unmarked_used_as_is(self):
        m = aggregate_campaign(CampaignRecord(commission_rate=0.4), 0.1)
        assert m.commission_rate == 0.4

    def test_rate_absent_uses_manual(self):
        m = aggregate_campaign(CampaignRecord(), 0.15)
        assert m.commission_rate == 0.15

    def test_malformed_record_zeroed(self):
        rec = CampaignRecord(
            campaign_hits="lots",
            referred_users=float("nan"),
            first_time_depositors=None,
            overall_commission="N/A",
        )
        m = aggregate_campaign(rec, 0.0)
        assert m.campaign_hits == 0.0
        assert m.referred_users == 0.0
        assert m.first_time_depositors == 0.0
        assert m.overall_commission_usd == 0.0
        for value in m.to_dict().values():
            if isinstance(value, float):
                assert math.isfinite(value)

    def test_blank_text_fields_become_none(self):
        m = aggregate_campaign(CampaignRecord(offer_code="  ", created_at=None), 0.0)
        assert m.offer_code is None
        assert m.created_at is None


# ---------------------------------------------------------------------------
# aggregate_ledger
# ---------------------------------------------------------------------------

class TestAggregateLedger:
    def test_groups_by_username(self):
        index = aggregate_ledger(_rows(("a", 100), ("b", 50), ("a", 25)))
        assert index.get("a").entries == 2
        assert index.get("a").total_value == 125.0
        assert index.get("b").entries == 1
        assert index.get("b").total_value == 50.0
        assert index.total_value == 175.0
        assert index.total_users == 2

    def test_empty_ledger(self):
        index = aggregate_ledger([])
        assert index.total_users == 0
        assert index.total_value == 0.0
        assert index.users_with_value == 0
        assert index.rows_with_value == 0
        assert index.top_users == ()
        assert len(index) == 0

    def test_empty_username_kept(self):
        index = aggregate_ledger(_rows(("", 10), ("a", 5), ("", 3)))
        assert "" in index
        assert index.get("").entries == 2
        assert index.get("").total_value == 13.0
        assert index.total_users == 2

    def test_exact_key_matching(self):
        index = aggregate_ledger(_rows(("Alice", 1), ("alice", 2)))
        assert index.total_users == 2

    def test_rows_with_value_counts_nonzero_rows(self):
        index = aggregate_ledger(_rows(("a", 0), ("a", 5), ("b", -3), ("c", 0)))
        assert index.rows_with_value == 2

    def test_users_with_value_counts_positive_totals(self):
        index = aggregate_ledger(_rows(("a", 10), ("b", -5), ("c", 0), ("d", 5), ("d", -5)))
        assert index.users_with_value == 1

    def test_totals_reconcile(self):
        rows = _rows(("a", 1.25), ("b", 2.5), ("", 3), ("a", 4), ("c", -1), ("b", 0))
        index = aggregate_ledger(rows)
        assert sum(u.total_value for u in index.users.values()) == pytest.approx(index.total_value)
        assert index.total_value == pytest.approx(sum(r.value_usd for r in rows))

    def test_total_users_is_distinct_count(self):
        rows = _rows(("a", 1), ("b", 1), ("a", 1), ("", 1), ("c", 0), ("", 2))
        index = aggregate_ledger(rows)
        assert index.total_users == len({r.username for r in rows}) == 4

    def test_top_users_sorted_descending(self):
        index = aggregate_ledger(_rows(("a", 5), ("b", 20), ("c", 10)))
        assert [u.username for u in index.top_users] == ["b", "c", "a"]

    def test_top_users_stable_ties(self):
        index = aggregate_ledger(_rows(("x", 5), ("y", 9), ("z", 5), ("w", 5)))
        assert [u.username for u in index.top_users] == ["y", "x", "z", "w"]

    def test_top_users_truncated(self):
        rows = _rows(*[(f"user{i}", i) for i in range(25)])
        index = aggregate_ledger(rows)
        assert len(index.top_users) == TOP_USERS_LIMIT == 10
        assert index.top_users[0].username == "user24"
        assert index.top_users[-1].username == "user15"

    def test_top_users_length_small_ledger(self):
        index = aggregate_ledger(_rows(("a", 1), ("b", 2)))
        assert len(index.top_users) == min(10, index.total_users)

    def test_custom_top_n(self):
        index = aggregate_ledger(_rows(("a", 1), ("b", 2), ("c", 3)), top_n=2)
        assert [u.username for u in index.top_users] == ["c", "b"]

    def test_accepts_generator(self):
        index = aggregate_ledger(r for r in _rows(("a", 1), ("a", 2)))
        assert index.get("a").entries == 2

    def test_snapshot_is_read_only(self):
        index = aggregate_ledger(_rows(("a", 1)))
        assert isinstance(index.users, MappingProxyType)
        with pytest.raises(TypeError):
            index.users["b"] = None
        with pytest.raises(AttributeError):
            index.get("a").total_value = 99
