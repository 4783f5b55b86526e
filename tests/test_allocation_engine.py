"""
tests/test_allocation_engine.py
-------------------------------
Unit tests for AllocationEngine.

Test coverage:
    Empty / single-asset / zero-value edge cases
    Allocation and aggregate correctness (reference portfolio)
    Validation of malformed snapshots, including value overflow
    Headline risk score
    snapshots_from_balances() joining
    to_frame() tabular view
"""

import math
import unittest

import pandas as pd

from portfolio_analytics.allocation_engine import AllocationEngine
from portfolio_analytics.config import ALLOCATION_TOLERANCE, EngineConfig
from portfolio_analytics.constants import PORTFOLIO_FRAME_COLUMNS
from portfolio_analytics.models import AssetSnapshot, Portfolio, SnapshotValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _snap(symbol, balance, price, change=0.0):
    return AssetSnapshot(symbol, balance, price, change)


_REFERENCE = [
    _snap("ETH",  8.5,  1800.0,  2.3),
    _snap("BTC",  0.18, 40000.0, -1.2),
    _snap("STT",  1500, 1.0,     0.0),
    _snap("USDC", 1000, 1.0,     0.0),
]


def _alloc(portfolio: Portfolio) -> dict:
    """Return {symbol: allocation_pct} for easy assertion."""
    return {a.symbol: a.allocation_pct for a in portfolio.assets}


# ===========================================================================
# 1. Edge Cases
# ===========================================================================

class TestEdgeCases(unittest.TestCase):

    def test_empty_input_returns_zero_portfolio(self):
        p = AllocationEngine.build_portfolio([])
        self.assertEqual(p.assets, ())
        self.assertEqual(p.total_value_usd, 0.0)
        self.assertEqual(p.total_change_24h_pct, 0.0)
        self.assertEqual(p.diversification_score, 0.0)
        self.assertEqual(p.risk_score, 0.0)

    def test_single_asset_gets_full_allocation(self):
        p = AllocationEngine.build_portfolio([_snap("ETH", 2, 1500, 3.0)])
        self.assertAlmostEqual(p.assets[0].allocation_pct, 100.0)
        self.assertAlmostEqual(p.total_change_24h_pct, 3.0)
        self.assertEqual(p.diversification_score, 0.0)

    def test_all_zero_prices_collapse_to_zero(self):
        snaps = [_snap("ETH", 5, 0.0, 4.0), _snap("BTC", 1, 0.0, -2.0)]
        p = AllocationEngine.build_portfolio(snaps)
        self.assertEqual(p.total_value_usd, 0.0)
        for a in p.assets:
            self.assertEqual(a.allocation_pct, 0.0)
            self.assertFalse(math.isnan(a.allocation_pct))
        self.assertEqual(p.total_change_24h_pct, 0.0)
        self.assertEqual(p.diversification_score, 0.0)
        self.assertFalse(math.isnan(p.risk_score))

    def test_zero_balances_collapse_to_zero(self):
        p = AllocationEngine.build_portfolio([_snap("ETH", 0, 1800), _snap("BTC", 0, 40000)])
        self.assertEqual(sum(_alloc(p).values()), 0.0)

    def test_unpriced_asset_does_not_crash(self):
        p = AllocationEngine.build_portfolio([_snap("ETH", 1, 100), _snap("NEW", 500, 0.0)])
        self.assertAlmostEqual(_alloc(p)["ETH"], 100.0)
        self.assertEqual(_alloc(p)["NEW"], 0.0)

    def test_does_not_mutate_input(self):
        snaps = list(_REFERENCE)
        AllocationEngine.build_portfolio(snaps)
        self.assertEqual(snaps, _REFERENCE)


# ===========================================================================
# 2. Allocation Correctness
# ===========================================================================

class TestAllocation(unittest.TestCase):

    def setUp(self):
        self.p = AllocationEngine.build_portfolio(_REFERENCE)

    def test_total_value(self):
        self.assertAlmostEqual(self.p.total_value_usd, 25000.0, places=6)

    def test_reference_allocations(self):
        alloc = _alloc(self.p)
        self.assertAlmostEqual(alloc["ETH"], 61.2, places=6)
        self.assertAlmostEqual(alloc["BTC"], 28.8, places=6)
        self.assertAlmostEqual(alloc["STT"], 6.0, places=6)
        self.assertAlmostEqual(alloc["USDC"], 4.0, places=6)

    def test_allocations_sum_to_hundred(self):
        self.assertLess(abs(sum(_alloc(self.p).values()) - 100.0), ALLOCATION_TOLERANCE)

    def test_allocations_sum_to_hundred_uneven(self):
        snaps = [_snap("A", 1 / 3, 7.1), _snap("B", 2.9, 0.013), _snap("C", 11, 3.3333)]
        p = AllocationEngine.build_portfolio(snaps)
        self.assertLess(abs(sum(_alloc(p).values()) - 100.0), ALLOCATION_TOLERANCE)

    def test_value_usd(self):
        eth = self.p.get("ETH")
        self.assertAlmostEqual(eth.value_usd, 15300.0)

    def test_total_change_is_allocation_weighted(self):
        expected = 2.3 * 0.612 + (-1.2) * 0.288
        self.assertAlmostEqual(self.p.total_change_24h_pct, expected, places=9)

    def test_order_preserved(self):
        self.assertEqual(self.p.symbols, ["ETH", "BTC", "STT", "USDC"])

    def test_display_names(self):
        self.assertEqual(self.p.get("ETH").name, "Ethereum")
        self.assertEqual(self.p.get("STT").name, "Somnia Token")

    def test_unknown_symbol_name_falls_back_to_symbol(self):
        p = AllocationEngine.build_portfolio([_snap("XYZ", 1, 1)])
        self.assertEqual(p.assets[0].name, "XYZ")

    def test_get_missing_symbol_returns_none(self):
        self.assertIsNone(self.p.get("DOGE"))

    def test_rebuilding_is_idempotent(self):
        self.assertEqual(AllocationEngine.build_portfolio(_REFERENCE), self.p)


# ===========================================================================
# 3. Validation
# ===========================================================================

class TestValidation(unittest.TestCase):

    def test_negative_balance_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio([_snap("ETH", 1, 10), _snap("BTC", -1, 10)])
        self.assertEqual(ctx.exception.index, 1)
        self.assertEqual(ctx.exception.symbol, "BTC")
        self.assertEqual(ctx.exception.field, "balance")

    def test_negative_price_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio([_snap("ETH", 1, -5)])
        self.assertEqual(ctx.exception.field, "unit_price_usd")

    def test_duplicate_symbol_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio([_snap("ETH", 1, 10), _snap("ETH", 2, 10)])
        self.assertEqual(ctx.exception.index, 1)
        self.assertIn("ETH", str(ctx.exception))

    def test_nan_price_raises(self):
        with self.assertRaises(SnapshotValidationError):
            AllocationEngine.build_portfolio([_snap("ETH", 1, float("nan"))])

    def test_infinite_change_raises(self):
        with self.assertRaises(SnapshotValidationError):
            AllocationEngine.build_portfolio([_snap("ETH", 1, 10, float("inf"))])

    def test_non_numeric_balance_raises(self):
        with self.assertRaises(SnapshotValidationError):
            AllocationEngine.build_portfolio([_snap("ETH", "1", 10)])

    def test_empty_symbol_raises(self):
        with self.assertRaises(SnapshotValidationError):
            AllocationEngine.build_portfolio([_snap("  ", 1, 10)])

    def test_is_a_value_error(self):
        with self.assertRaises(ValueError):
            AllocationEngine.build_portfolio([_snap("ETH", -1, 10)])

    def test_negative_change_is_valid(self):
        p = AllocationEngine.build_portfolio([_snap("ETH", 1, 10, -40.0)])
        self.assertAlmostEqual(p.total_change_24h_pct, -40.0)

    def test_overflowing_asset_value_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio(
                [_snap("ETH", 1e200, 1e200, 1.0), _snap("BTC", 1, 1, 1.0)]
            )
        self.assertEqual(ctx.exception.index, 0)
        self.assertEqual(ctx.exception.field, "value_usd")

    def test_overflowing_portfolio_total_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio([_snap("A", 1e308, 1.0), _snap("B", 1e308, 1.0)])
        self.assertEqual(ctx.exception.index, 1)
        self.assertEqual(ctx.exception.field, "value_usd")

    def test_integer_beyond_float_range_raises(self):
        with self.assertRaises(SnapshotValidationError) as ctx:
            AllocationEngine.build_portfolio([_snap("ETH", 10 ** 400, 1)])
        self.assertEqual(ctx.exception.field, "balance")

    def test_large_finite_values_stay_finite(self):
        p = AllocationEngine.build_portfolio(
            [_snap("ETH", 1e150, 1e150, 1.0), _snap("BTC", 1e150, 1e150, 1.0)]
        )
        for a in p.assets:
            self.assertFalse(math.isnan(a.allocation_pct))
            self.assertAlmostEqual(a.allocation_pct, 50.0)
        self.assertAlmostEqual(p.diversification_score, 100.0)
        self.assertFalse(math.isnan(p.risk_score))


# ===========================================================================
# 4. Headline Risk Score
# ===========================================================================

class TestRiskScore(unittest.TestCase):

    def test_reference_score(self):
        p = AllocationEngine.build_portfolio(_REFERENCE)
        # 0.612·0.6 + min(0.875/20, 1)·0.4 = 0.3672 + 0.0175
        self.assertAlmostEqual(p.risk_score, 38.47, places=6)

    def test_volatility_component_capped(self):
        p = AllocationEngine.build_portfolio([_snap("A", 1, 1, 90.0), _snap("B", 1, 1, -90.0)])
        # concentration 50 → 30, volatility capped at 1 → 40
        self.assertAlmostEqual(p.risk_score, 70.0, places=6)

    def test_score_never_exceeds_hundred(self):
        p = AllocationEngine.build_portfolio([_snap("A", 1, 1, 500.0)])
        self.assertLessEqual(p.risk_score, 100.0)

    def test_weights_are_configurable(self):
        cfg = EngineConfig(headline_concentration_weight=1.0, headline_volatility_weight=0.0)
        p = AllocationEngine.build_portfolio(_REFERENCE, cfg)
        self.assertAlmostEqual(p.risk_score, 61.2, places=6)


# ===========================================================================
# 5. snapshots_from_balances()
# ===========================================================================

class TestSnapshotsFromBalances(unittest.TestCase):

    def test_tuple_quotes(self):
        snaps = AllocationEngine.snapshots_from_balances(
            {"ETH": 2.0, "BTC": 0.5},
            {"ETH": (2000.0, 1.5), "BTC": (60000.0, -0.5)},
        )
        self.assertEqual(snaps[0], AssetSnapshot("ETH", 2.0, 2000.0, 1.5))
        self.assertEqual(snaps[1], AssetSnapshot("BTC", 0.5, 60000.0, -0.5))

    def test_mapping_quotes(self):
        snaps = AllocationEngine.snapshots_from_balances(
            {"ETH": 1.0}, {"ETH": {"price": 2400.0, "change_24h": 5.2}}
        )
        self.assertEqual(snaps[0].unit_price_usd, 2400.0)
        self.assertEqual(snaps[0].change_24h_pct, 5.2)

    def test_missing_quote_is_unpriced(self):
        snaps = AllocationEngine.snapshots_from_balances({"STT": 100.0}, {})
        self.assertEqual(snaps[0].unit_price_usd, 0.0)
        self.assertEqual(snaps[0].change_24h_pct, 0.0)

    def test_quotes_for_unheld_symbols_ignored(self):
        snaps = AllocationEngine.snapshots_from_balances(
            {"ETH": 1.0}, {"ETH": (1.0, 0.0), "SOL": (150.0, 2.0)}
        )
        self.assertEqual([s.symbol for s in snaps], ["ETH"])

    def test_balance_order_preserved(self):
        snaps = AllocationEngine.snapshots_from_balances(
            {"USDC": 1.0, "ETH": 1.0, "BTC": 1.0}, {}
        )
        self.assertEqual([s.symbol for s in snaps], ["USDC", "ETH", "BTC"])


# ===========================================================================
# 6. to_frame()
# ===========================================================================

class TestToFrame(unittest.TestCase):

    def test_columns_and_rows(self):
        df = AllocationEngine.to_frame(AllocationEngine.build_portfolio(_REFERENCE))
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(list(df.columns), PORTFOLIO_FRAME_COLUMNS)
        self.assertEqual(len(df), 4)
        self.assertAlmostEqual(df["allocation_pct"].sum(), 100.0, places=6)
        self.assertEqual(df.iloc[0]["symbol"], "ETH")

    def test_empty_portfolio_frame(self):
        df = AllocationEngine.to_frame(Portfolio())
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), PORTFOLIO_FRAME_COLUMNS)


if __name__ == "__main__":
    unittest.main()
