"""
portfolio_analytics/analytics_engine.py
---------------------------------------
Thin façade over the individual engines for callers that want a single
object bound to one policy configuration.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence, Union

import pandas as pd

from portfolio_analytics.allocation_engine import AllocationEngine, Quote
from portfolio_analytics.config import EngineConfig, DEFAULT_CONFIG
from portfolio_analytics.diversification import DiversificationIndex
from portfolio_analytics.enums import MarketSentiment, RiskTolerance
from portfolio_analytics.models import (
    AssetSnapshot,
    Portfolio,
    PortfolioAnalysis,
    RebalanceRecommendation,
    RiskMetrics,
)
from portfolio_analytics.rebalance_engine import RebalanceEngine
from portfolio_analytics.risk_engine import RiskEngine


class PortfolioAnalyticsEngine:
    """
    Value-type entry point.

    Holds nothing but an immutable :class:`EngineConfig`, so any number of
    instances built from equal configs behave identically and one
    instance can be shared across threads without locking.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> EngineConfig:
        return self._config

    def with_overrides(self, **changes) -> "PortfolioAnalyticsEngine":
        """Return a new engine whose config has *changes* applied."""
        return PortfolioAnalyticsEngine(self._config.with_overrides(**changes))

    # ------------------------------------------------------------------ #
    #  Single steps
    # ------------------------------------------------------------------ #

    def build_portfolio(self, snapshots: Sequence[AssetSnapshot]) -> Portfolio:
        return AllocationEngine.build_portfolio(snapshots, self._config)

    def risk_metrics(self, portfolio: Portfolio) -> RiskMetrics:
        return RiskEngine.compute_all(portfolio, self._config)

    def diversification(self, portfolio: Portfolio) -> float:
        return DiversificationIndex.compute(portfolio)

    def target_recommendations(
        self,
        portfolio: Portfolio,
        targets: Optional[Mapping[str, float]] = None,
    ) -> List[RebalanceRecommendation]:
        return RebalanceEngine.target_recommendations(portfolio, targets, self._config)

    def sentiment_recommendations(
        self,
        portfolio: Portfolio,
        sentiment: Union[MarketSentiment, str],
        risk_tolerance: Union[RiskTolerance, str],
    ) -> List[RebalanceRecommendation]:
        return RebalanceEngine.sentiment_recommendations(
            portfolio, sentiment, risk_tolerance, self._config
        )

    def to_frame(self, portfolio: Portfolio) -> pd.DataFrame:
        return AllocationEngine.to_frame(portfolio)

    def risk_frame(self, metrics: RiskMetrics) -> pd.DataFrame:
        return RiskEngine.to_frame(metrics)

    # ------------------------------------------------------------------ #
    #  Full evaluation
    # ------------------------------------------------------------------ #

    def analyze(
        self,
        snapshots: Sequence[AssetSnapshot],
        targets: Optional[Mapping[str, float]] = None,
    ) -> PortfolioAnalysis:
        """
        Portfolio, risk profile and target-driven recommendations in one
        call.  Validation happens before anything is computed, so a
        malformed snapshot set produces no partial result.
        """
        portfolio = self.build_portfolio(snapshots)
        return PortfolioAnalysis(
            portfolio=portfolio,
            risk_metrics=self.risk_metrics(portfolio),
            recommendations=tuple(self.target_recommendations(portfolio, targets)),
        )

    def analyze_balances(
        self,
        balances: Mapping[str, float],
        quotes: Mapping[str, Quote],
        targets: Optional[Mapping[str, float]] = None,
    ) -> PortfolioAnalysis:
        """:meth:`analyze` on snapshots joined from balances and quotes."""
        snapshots = AllocationEngine.snapshots_from_balances(balances, quotes)
        return self.analyze(snapshots, targets)
