"""
portfolio_analytics/allocation_engine.py
----------------------------------------
Pure transformation engine: asset snapshots → Portfolio.

Design contract:
  - No risk scoring beyond the headline ``risk_score``
  - No rebalancing logic
  - No price lookups; prices arrive already resolved
  - Fully deterministic and stateless (all methods are @staticmethod)
"""

from __future__ import annotations

import math
import numbers
from typing import List, Dict, Mapping, Optional, Sequence, Union, Tuple

import numpy as np
import pandas as pd

from portfolio_analytics.config import EngineConfig, DEFAULT_CONFIG
from portfolio_analytics.constants import PORTFOLIO_FRAME_COLUMNS, display_name
from portfolio_analytics.diversification import DiversificationIndex
from portfolio_analytics.logger import setup_logger
from portfolio_analytics.models import (
    AssetSnapshot,
    AssetView,
    Portfolio,
    SnapshotValidationError,
)

logger = setup_logger(__name__)

Quote = Union[Tuple[float, float], Mapping[str, float]]


class AllocationEngine:
    """
    Turn raw (symbol, balance, price, 24h change) tuples into a Portfolio.

    Per asset::

        value_usd      = balance × unit_price_usd
        allocation_pct = value_usd / total_value_usd × 100   (0 if total is 0)

    Portfolio level::

        total_value_usd      = Σ value_usd
        total_change_24h_pct = Σ change_24h_pct × allocation_pct / 100

    When the portfolio is worth nothing (every price 0, say) all
    allocations collapse to 0 instead of dividing by zero.
    """

    # ------------------------------------------------------------------ #
    #  Public entry point
    # ------------------------------------------------------------------ #

    @staticmethod
    def build_portfolio(
        snapshots: Sequence[AssetSnapshot],
        config: Optional[EngineConfig] = None,
    ) -> Portfolio:
        """
        Build a Portfolio from *snapshots*.

        Parameters
        ----------
        snapshots:
            One AssetSnapshot per symbol.  An empty sequence yields an
            empty, zero-valued Portfolio.
        config:
            Policy overrides; only the headline risk-score weights are read.

        Raises
        ------
        SnapshotValidationError
            If any record is malformed (see :meth:`validate_snapshots`).
        """
        AllocationEngine.validate_snapshots(snapshots)
        cfg = config or DEFAULT_CONFIG

        if not snapshots:
            return Portfolio()

        values = np.array(
            [s.balance * s.unit_price_usd for s in snapshots], dtype=float
        )
        total_value = float(values.sum())

        if total_value > 0.0:
            allocations = values / total_value * 100.0
        else:
            logger.warning(
                "Portfolio of %d asset(s) has zero total value; "
                "all allocations set to 0", len(snapshots)
            )
            allocations = np.zeros_like(values)

        changes = np.array([s.change_24h_pct for s in snapshots], dtype=float)
        total_change = float((changes * allocations / 100.0).sum())

        assets = tuple(
            AssetView(
                symbol=s.symbol,
                name=display_name(s.symbol),
                balance=float(s.balance),
                unit_price_usd=float(s.unit_price_usd),
                change_24h_pct=float(s.change_24h_pct),
                value_usd=float(value),
                allocation_pct=float(alloc),
            )
            for s, value, alloc in zip(snapshots, values, allocations)
        )

        portfolio = Portfolio(
            assets=assets,
            total_value_usd=total_value,
            total_change_24h_pct=total_change,
            diversification_score=DiversificationIndex.compute(assets),
            risk_score=AllocationEngine.compute_risk_score(assets, cfg),
        )
        logger.debug(
            "Built portfolio: %d assets, total=%.2f USD, change=%.4f%%",
            len(assets), total_value, total_change,
        )
        return portfolio

    # ------------------------------------------------------------------ #
    #  Validation
    # ------------------------------------------------------------------ #

    @staticmethod
    def validate_snapshots(snapshots: Sequence[AssetSnapshot]) -> None:
        """
        Fail fast on the first malformed record.

        Rejected:
          * empty / non-string symbol
          * duplicate symbol within the set
          * NaN or infinite balance, price or 24h change
          * negative balance or price
          * balance × price, or the running portfolio total, overflowing
            to infinity
        """
        seen: Dict[str, int] = {}
        running_total = 0.0
        for i, snap in enumerate(snapshots):
            symbol = snap.symbol
            if not isinstance(symbol, str) or not symbol.strip():
                raise SnapshotValidationError(
                    "symbol must be a non-empty string", i, symbol, "symbol"
                )
            if symbol in seen:
                raise SnapshotValidationError(
                    f"duplicate symbol (first seen at #{seen[symbol]})",
                    i, symbol, "symbol",
                )
            seen[symbol] = i

            for field_name in ("balance", "unit_price_usd", "change_24h_pct"):
                value = getattr(snap, field_name)
                if isinstance(value, bool) or not isinstance(value, numbers.Real):
                    raise SnapshotValidationError(
                        f"{field_name} must be a number (got {value!r})",
                        i, symbol, field_name,
                    )
                try:
                    as_float = float(value)
                except OverflowError:
                    raise SnapshotValidationError(
                        f"{field_name} is out of float range", i, symbol, field_name,
                    ) from None
                if not math.isfinite(as_float):
                    raise SnapshotValidationError(
                        f"{field_name} must be finite (got {value!r})",
                        i, symbol, field_name,
                    )

            if snap.balance < 0:
                raise SnapshotValidationError(
                    f"balance must be >= 0 (got {snap.balance})", i, symbol, "balance"
                )
            if snap.unit_price_usd < 0:
                raise SnapshotValidationError(
                    f"unit_price_usd must be >= 0 (got {snap.unit_price_usd})",
                    i, symbol, "unit_price_usd",
                )

            value_usd = float(snap.balance) * float(snap.unit_price_usd)
            running_total += value_usd
            if not math.isfinite(value_usd):
                raise SnapshotValidationError(
                    f"balance × unit_price_usd overflows (got {value_usd!r})",
                    i, symbol, "value_usd",
                )
            if not math.isfinite(running_total):
                raise SnapshotValidationError(
                    "portfolio total value overflows", i, symbol, "value_usd"
                )

    # ------------------------------------------------------------------ #
    #  Headline risk score
    # ------------------------------------------------------------------ #

    @staticmethod
    def compute_risk_score(
        assets: Sequence[AssetView],
        config: Optional[EngineConfig] = None,
    ) -> float:
        """
        Quick 0-100 risk indicator shown next to the portfolio total.

        Formula::

            concentration_risk = max(allocation_pct) / 100
            volatility_risk    = min(mean(|change_24h_pct|) / cap, 1)
            score = min((0.6 · concentration_risk + 0.4 · volatility_risk) · 100, 100)

        The mean here is unweighted, unlike ``RiskMetrics.volatility``.
        Returns ``0.0`` for an empty asset list.
        """
        if not assets:
            return 0.0
        cfg = config or DEFAULT_CONFIG

        concentration_risk = max(a.allocation_pct for a in assets) / 100.0
        mean_abs_change = sum(abs(a.change_24h_pct) for a in assets) / len(assets)
        volatility_risk = min(mean_abs_change / cfg.headline_volatility_cap_pct, 1.0)

        score = (
            concentration_risk * cfg.headline_concentration_weight
            + volatility_risk * cfg.headline_volatility_weight
        ) * 100.0
        return min(score, 100.0)

    # ------------------------------------------------------------------ #
    #  Input assembly
    # ------------------------------------------------------------------ #

    @staticmethod
    def snapshots_from_balances(
        balances: Mapping[str, float],
        quotes: Mapping[str, Quote],
    ) -> List[AssetSnapshot]:
        """
        Join wallet balances with already-resolved price quotes.

        Parameters
        ----------
        balances:
            ``{symbol: balance}`` in the order snapshots should appear.
        quotes:
            ``{symbol: (price, change_24h_pct)}`` or
            ``{symbol: {"price": float, "change_24h": float}}``.

        A symbol without a quote is treated as unpriced: price 0, change 0.
        Quotes for symbols not held are ignored.
        """
        snapshots = []
        for symbol, balance in balances.items():
            price, change = AllocationEngine._unpack_quote(quotes.get(symbol))
            snapshots.append(AssetSnapshot(
                symbol=symbol,
                balance=balance,
                unit_price_usd=price,
                change_24h_pct=change,
            ))
        return snapshots

    # ------------------------------------------------------------------ #
    #  Tabular view
    # ------------------------------------------------------------------ #

    @staticmethod
    def to_frame(portfolio: Portfolio) -> pd.DataFrame:
        """
        One row per asset, columns as in ``PORTFOLIO_FRAME_COLUMNS``.

        An empty portfolio yields an empty frame with the same columns.
        """
        rows = [
            {col: getattr(asset, col) for col in PORTFOLIO_FRAME_COLUMNS}
            for asset in portfolio.assets
        ]
        return pd.DataFrame(rows, columns=PORTFOLIO_FRAME_COLUMNS)

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _unpack_quote(quote: Optional[Quote]) -> Tuple[float, float]:
        """Normalise a quote into ``(price, change_24h_pct)``."""
        if quote is None:
            return 0.0, 0.0
        if isinstance(quote, Mapping):
            return quote.get("price") or 0.0, quote.get("change_24h") or 0.0
        price, change = quote
        return price or 0.0, change or 0.0
