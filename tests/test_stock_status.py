"""
Tests for the stock classifier.

Validates:
- Low stock threshold boundaries and out-of-scope rows
- Overstock threshold with its defaults
- Designated-risk vendor detection
- Priority and urgency banding
"""

import math

import pandas as pd

from replenishment_engine.stock_status import (
    classify_stock,
    determine_priority,
    determine_urgency,
    low_stock_mask,
    overstock_mask,
    risk_vendor_mask,
)


def _frame(**columns):
    return pd.DataFrame({name: [value] for name, value in columns.items()})


class TestLowStock:
    """(WH + FBA) < PASD x (Lead Time + Transit)."""

    def test_at_threshold_is_not_low(self):
        df = _frame(wh=40.0, fba=0.0, pasd=2.0, lead_time=20.0, transit=0.0)
        assert not low_stock_mask(df).iloc[0]

    def test_below_threshold_is_low(self):
        df = _frame(wh=39.0, fba=0.0, pasd=2.0, lead_time=20.0, transit=0.0)
        assert low_stock_mask(df).iloc[0]

    def test_fba_and_transit_count(self):
        df = _frame(wh=30.0, fba=10.0, pasd=2.0, lead_time=15.0, transit=5.0)
        assert not low_stock_mask(df).iloc[0]

    def test_absent_pasd_never_flagged(self):
        df = _frame(wh=0.0, pasd=math.nan, lead_time=10.0)
        assert not low_stock_mask(df).iloc[0]

    def test_absent_lead_time_never_flagged(self):
        df = _frame(wh=0.0, pasd=5.0, lead_time=math.nan)
        assert not low_stock_mask(df).iloc[0]

    def test_zero_wh_with_demand_is_flagged(self):
        df = _frame(wh=0.0, pasd=1.0, lead_time=1.0)
        assert low_stock_mask(df).iloc[0]

    def test_zero_threshold_never_flagged(self):
        df = _frame(wh=0.0, fba=0.0, pasd=0.0, lead_time=10.0)
        assert not low_stock_mask(df).iloc[0]


class TestOverstock:
    """WH > PASD x Order Frequency x 1.5."""

    def test_above_threshold(self):
        df = _frame(wh=100.0, pasd=2.0, order_freq=20.0)
        assert overstock_mask(df).iloc[0]

    def test_at_threshold_is_not_overstock(self):
        df = _frame(wh=60.0, pasd=2.0, order_freq=20.0)
        assert not overstock_mask(df).iloc[0]

    def test_missing_order_freq_defaults_to_one(self):
        df = _frame(wh=4.0, pasd=2.0, order_freq=math.nan)
        assert overstock_mask(df).iloc[0]

    def test_any_stock_without_pasd_is_overstock(self):
        df = _frame(wh=1.0, pasd=math.nan, order_freq=10.0)
        assert overstock_mask(df).iloc[0]


class TestRiskVendor:
    """Marker detection across both vendor columns."""

    def test_case_insensitive_either_column(self):
        df = pd.DataFrame({
            "vendor2": ["CHINA Metal Works", None, "Acme"],
            "vendor_amz": [None, "Shenzhen china", None],
        })
        assert risk_vendor_mask(df).tolist() == [True, True, False]

    def test_missing_vendor_columns(self):
        df = _frame(wh=1.0)
        assert not risk_vendor_mask(df).iloc[0]


class TestPriorityAndUrgency:
    """Banding on days of inventory in hand."""

    def test_twenty_days(self):
        assert determine_priority(20, is_risk_vendor=True) == "P1"
        assert determine_priority(20, is_risk_vendor=False) == "P2"

    def test_default_bands(self):
        assert determine_priority(14.9, False) == "P1"
        assert determine_priority(15, False) == "P2"
        assert determine_priority(30, False) == "P3"

    def test_risk_vendor_bands(self):
        assert determine_priority(29, True) == "P1"
        assert determine_priority(44, True) == "P2"
        assert determine_priority(45, True) == "P3"

    def test_absent_days_counts_as_zero(self):
        assert determine_priority(math.nan, False) == "P1"
        assert determine_urgency(None) == "high"

    def test_urgency(self):
        assert determine_urgency(6) == "high"
        assert determine_urgency(7) == "medium"
        assert determine_urgency(13.5) == "medium"
        assert determine_urgency(14) == "low"


class TestClassifyStock:
    """Flags attached to a full product frame."""

    def test_adds_all_flags(self):
        df = pd.DataFrame({
            "wh": [0.0, 500.0],
            "fba": [0.0, 0.0],
            "pasd": [2.0, 1.0],
            "lead_time": [10.0, 10.0],
            "order_freq": [30.0, 30.0],
            "days_inv_in_hand": [0.0, 500.0],
            "vendor2": ["Acme", "China Supply"],
        })
        result = classify_stock(df)
        assert result["is_low_stock"].tolist() == [True, False]
        assert result["is_overstock"].tolist() == [False, True]
        assert result["is_risk_vendor"].tolist() == [False, True]
        assert result["priority"].tolist() == ["P1", "P3"]
        assert result["urgency"].tolist() == ["high", "low"]
        assert "is_low_stock" not in df.columns

    def test_configured_cutoffs(self):
        df = _frame(wh=1.0, days_inv_in_hand=20.0)
        result = classify_stock(df, {"priority_cutoffs": {"default": [25, 40]}})
        assert result.loc[0, "priority"] == "P1"

    def test_empty_frame(self):
        assert classify_stock(pd.DataFrame()).empty


class TestReferenceCases:
    """Worked examples from the planning team's sheet rules."""

    def test_low_stock_boundary_with_transit(self):
        df = pd.DataFrame({
            "wh": [40.0, 39.0],
            "fba": [0.0, 0.0],
            "pasd": [10.0, 10.0],
            "lead_time": [3.0, 3.0],
            "transit": [1.0, 1.0],
        })
        assert low_stock_mask(df).tolist() == [False, True]

    def test_overstock_boundary(self):
        df = pd.DataFrame({"wh": [100.0, 60.0], "pasd": [20.0, 20.0], "order_freq": [2.0, 2.0]})
        assert overstock_mask(df).tolist() == [True, False]
