"""
portfolio_analytics/risk_engine.py
----------------------------------
Portfolio → RiskMetrics.

Four allocation-weighted sub-scores on a 0-100 scale, combined into a
composite and bucketed into a qualitative band.  Lookup tables and
thresholds come from :class:`EngineConfig`; nothing here is hard-coded
policy.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from portfolio_analytics.config import EngineConfig, DEFAULT_CONFIG
from portfolio_analytics.constants import RISK_METRIC_REGISTRY
from portfolio_analytics.enums import RiskBand
from portfolio_analytics.logger import setup_logger
from portfolio_analytics.models import Portfolio, RiskMetrics

logger = setup_logger(__name__)


class RiskEngine:
    """
    Computes the risk profile of a Portfolio.

    Only static methods are exposed; no shared state.

    Sub-scores
    ----------
    * ``volatility``       : Σ |Δ24h| · w            (weighted mean absolute move)
    * ``concentration``    : max allocation_pct      (largest single holding)
    * ``correlation_risk`` : Σ allocation_pct over non-stable symbols
    * ``liquidity_risk``   : Σ penalty(symbol) · w

    where ``w = allocation_pct / 100``.
    """

    # ------------------------------------------------------------------
    # Metric calculators
    # ------------------------------------------------------------------

    @staticmethod
    def compute_volatility(portfolio: Portfolio) -> float:
        """Allocation-weighted mean absolute 24h price change, in percent."""
        return sum(
            abs(a.change_24h_pct) * a.allocation_pct / 100.0
            for a in portfolio.assets
        )

    @staticmethod
    def compute_concentration(portfolio: Portfolio) -> float:
        """Share of the single largest holding (0 for an empty portfolio)."""
        return max((a.allocation_pct for a in portfolio.assets), default=0.0)

    @staticmethod
    def compute_correlation_risk(
        portfolio: Portfolio,
        config: Optional[EngineConfig] = None,
    ) -> float:
        """
        Correlation proxy: every non-stable asset is assumed to move with
        every other, so their combined share is the exposure.
        """
        cfg = config or DEFAULT_CONFIG
        return sum(
            a.allocation_pct for a in portfolio.assets
            if not cfg.is_stable(a.symbol)
        )

    @staticmethod
    def compute_liquidity_risk(
        portfolio: Portfolio,
        config: Optional[EngineConfig] = None,
    ) -> float:
        """
        Allocation-weighted liquidity penalty.

        Symbols absent from the penalty table take the default tier.
        """
        cfg = config or DEFAULT_CONFIG
        return sum(
            cfg.liquidity_penalty(a.symbol) * a.allocation_pct / 100.0
            for a in portfolio.assets
        )

    # ------------------------------------------------------------------
    # Composite + band
    # ------------------------------------------------------------------

    @staticmethod
    def composite_score(
        volatility: float,
        concentration: float,
        correlation_risk: float,
        liquidity_risk: float,
        config: Optional[EngineConfig] = None,
    ) -> float:
        """
        Weighted sum of the four sub-scores.

        Formula (default weights)::

            0.3·volatility + 0.3·concentration + 0.2·correlation + 0.2·liquidity
        """
        w = (config or DEFAULT_CONFIG).risk_weights
        return (
            w["volatility"] * volatility
            + w["concentration"] * concentration
            + w["correlation"] * correlation_risk
            + w["liquidity"] * liquidity_risk
        )

    @staticmethod
    def classify(
        score: float,
        concentration: float = 0.0,
        config: Optional[EngineConfig] = None,
    ) -> RiskBand:
        """
        Map a composite score to a band.

        ``score < 30 → Low``, ``30 ≤ score < 60 → Medium``, else ``High``.
        A holding above ``concentration_high_risk_pct`` forces ``High``.
        """
        cfg = config or DEFAULT_CONFIG

        override = cfg.concentration_high_risk_pct
        if override is not None and concentration > override:
            return RiskBand.HIGH

        if score < cfg.risk_band_medium:
            return RiskBand.LOW
        if score < cfg.risk_band_high:
            return RiskBand.MEDIUM
        return RiskBand.HIGH

    # ------------------------------------------------------------------
    # Convenience: compute all metrics at once
    # ------------------------------------------------------------------

    @staticmethod
    def compute_all(
        portfolio: Portfolio,
        config: Optional[EngineConfig] = None,
    ) -> RiskMetrics:
        """
        Compute every sub-score, the composite and the band.

        An empty or zero-valued portfolio scores 0 everywhere and lands in
        the ``Low`` band.
        """
        cfg = config or DEFAULT_CONFIG

        volatility    = RiskEngine.compute_volatility(portfolio)
        concentration = RiskEngine.compute_concentration(portfolio)
        correlation   = RiskEngine.compute_correlation_risk(portfolio, cfg)
        liquidity     = RiskEngine.compute_liquidity_risk(portfolio, cfg)

        score = RiskEngine.composite_score(
            volatility, concentration, correlation, liquidity, cfg
        )
        band = RiskEngine.classify(score, concentration, cfg)

        logger.debug(
            "Risk: vol=%.3f conc=%.3f corr=%.3f liq=%.3f → %.3f (%s)",
            volatility, concentration, correlation, liquidity, score, band.value,
        )
        return RiskMetrics(
            volatility=volatility,
            concentration=concentration,
            correlation_risk=correlation,
            liquidity_risk=liquidity,
            composite_score=score,
            overall_risk=band,
        )

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    @staticmethod
    def to_frame(metrics: RiskMetrics) -> pd.DataFrame:
        """
        One labelled row per registered metric, in registry order.

        Columns: ``metric``, ``display``, ``value``, ``unit``,
        ``higher_is_better``.  The band is not a number and is left out;
        read it from ``metrics.overall_risk``.
        """
        rows = [
            {
                "metric":           key,
                "display":          meta["display"],
                "value":            float(getattr(metrics, key)),
                "unit":             meta["unit"],
                "higher_is_better": meta["higher_is_better"],
            }
            for key, meta in RISK_METRIC_REGISTRY.items()
        ]
        return pd.DataFrame(
            rows, columns=["metric", "display", "value", "unit", "higher_is_better"]
        )
