"""
portfolio_analytics/models.py
-----------------------------
Value types flowing through the engine.

All dataclasses are frozen: a Portfolio is rebuilt from scratch on every
evaluation and never mutated in place.  ``to_dict()`` renders each model
as plain JSON-compatible data for the presentation layer and any
downstream collaborator (summariser, ledger).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple

from portfolio_analytics.enums import RiskBand, TradeDirection


class SnapshotValidationError(ValueError):
    """
    Raised when an input snapshot set is malformed.

    Carries the position and symbol of the offending record and the field
    that failed, so callers can point the user at the exact row.
    """

    def __init__(self, message: str, index: int, symbol: str, field_name: str):
        super().__init__(f"Snapshot #{index} ({symbol!r}): {message}")
        self.index = index
        self.symbol = symbol
        self.field = field_name


@dataclass(frozen=True)
class AssetSnapshot:
    """One holding as reported by the balance source and price feed."""
    symbol: str
    balance: float
    unit_price_usd: float
    change_24h_pct: float = 0.0


@dataclass(frozen=True)
class AssetView:
    """
    An AssetSnapshot enriched with its value and portfolio share.

    ``allocation_pct`` is on a 0-100 scale and is 0 for every asset when
    the portfolio is worth nothing.
    """
    symbol: str
    name: str
    balance: float
    unit_price_usd: float
    change_24h_pct: float
    value_usd: float
    allocation_pct: float

    def to_dict(self) -> Dict:
        return {
            "symbol":         self.symbol,
            "name":           self.name,
            "balance":        self.balance,
            "unit_price_usd": self.unit_price_usd,
            "change_24h_pct": self.change_24h_pct,
            "value_usd":      self.value_usd,
            "allocation_pct": self.allocation_pct,
        }


@dataclass(frozen=True)
class Portfolio:
    assets: Tuple[AssetView, ...] = ()
    total_value_usd: float = 0.0
    total_change_24h_pct: float = 0.0
    diversification_score: float = 0.0
    risk_score: float = 0.0

    @property
    def symbols(self) -> List[str]:
        return [a.symbol for a in self.assets]

    def get(self, symbol: str) -> Optional[AssetView]:
        """Return the AssetView for *symbol*, or ``None`` if not held."""
        return next((a for a in self.assets if a.symbol == symbol), None)

    def to_dict(self) -> Dict:
        return {
            "assets":                [a.to_dict() for a in self.assets],
            "total_value_usd":       self.total_value_usd,
            "total_change_24h_pct":  self.total_change_24h_pct,
            "diversification_score": self.diversification_score,
            "risk_score":            self.risk_score,
        }


@dataclass(frozen=True)
class RiskMetrics:
    """
    Aggregate risk profile of a Portfolio.

    The four sub-scores sit on a 0-100 scale but are not clipped:
    ``volatility`` in particular exceeds 100 when daily moves do.
    """
    volatility: float
    concentration: float
    correlation_risk: float
    liquidity_risk: float
    composite_score: float
    overall_risk: RiskBand

    def to_dict(self) -> Dict:
        return {
            "volatility":       self.volatility,
            "concentration":    self.concentration,
            "correlation_risk": self.correlation_risk,
            "liquidity_risk":   self.liquidity_risk,
            "composite_score":  self.composite_score,
            "overall_risk":     self.overall_risk.value,
        }


@dataclass(frozen=True)
class RebalanceRecommendation:
    from_asset: str
    to_asset: str
    amount_usd: float
    reason: str
    expected_impact: str
    direction: TradeDirection
    drift_pct: Optional[float] = None   # target − current; None for sentiment moves

    def to_dict(self) -> Dict:
        return {
            "from_asset":      self.from_asset,
            "to_asset":        self.to_asset,
            "amount_usd":      self.amount_usd,
            "reason":          self.reason,
            "expected_impact": self.expected_impact,
            "direction":       self.direction.value,
            "drift_pct":       self.drift_pct,
        }


@dataclass(frozen=True)
class PortfolioAnalysis:
    """Everything one evaluation produces, bundled for hand-off."""
    portfolio: Portfolio
    risk_metrics: RiskMetrics
    recommendations: Tuple[RebalanceRecommendation, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            "portfolio":       self.portfolio.to_dict(),
            "risk_metrics":    self.risk_metrics.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }
