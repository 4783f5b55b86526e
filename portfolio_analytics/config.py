"""
portfolio_analytics/config.py
-----------------------------
Tunable policy parameters for the analytics engine.

Every lookup table and threshold the engines consult lives here, not in
the scoring code.  The module-level constants are the defaults; callers
that need different policy build an :class:`EngineConfig` with overrides
and pass it into the engines.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional


# ---------------------------------------------------------------------------
# Asset classification
# ---------------------------------------------------------------------------
# Stable-value symbols are excluded from the correlation proxy: every other
# holding is assumed to move with the broader crypto market.

STABLE_SYMBOLS: FrozenSet[str] = frozenset({"USDC", "USDT", "DAI"})

# Rebalancing medium.  BUY moves are funded from it, SELL moves land in it.
RESERVE_SYMBOL: str = "USDC"

# Destinations used by the sentiment-driven strategy.
GROWTH_SYMBOL: str = "ETH"
SPECULATIVE_SYMBOL: str = "STT"

# ---------------------------------------------------------------------------
# Liquidity penalties
# ---------------------------------------------------------------------------
# Per-symbol penalty on a 0-100 scale, weighted by allocation.
#
#   30  newly listed / native-chain tokens (thin order books)
#    5  large-cap majors
#    1  stable-value assets
#   15  anything not listed (DEFAULT_LIQUIDITY_PENALTY)

LIQUIDITY_PENALTIES: Dict[str, float] = {
    "STT":  30.0,
    "ETH":   5.0,
    "BTC":   5.0,
    "USDC":  1.0,
    "USDT":  1.0,
    "DAI":   1.0,
}

DEFAULT_LIQUIDITY_PENALTY: float = 15.0

# ---------------------------------------------------------------------------
# Overall risk band
# ---------------------------------------------------------------------------
# composite = Σ weight_k · metric_k ; the weights are policy, not derived.

RISK_WEIGHTS: Dict[str, float] = {
    "volatility":    0.3,
    "concentration": 0.3,
    "correlation":   0.2,
    "liquidity":     0.2,
}

# composite < RISK_BAND_MEDIUM            → Low
# RISK_BAND_MEDIUM ≤ composite < HIGH     → Medium
# composite ≥ RISK_BAND_HIGH              → High
RISK_BAND_MEDIUM: float = 30.0
RISK_BAND_HIGH:   float = 60.0

# A single holding above this share forces the High band on its own,
# whatever the composite says.  None disables the override.
CONCENTRATION_HIGH_RISK_PCT: Optional[float] = 60.0

# ---------------------------------------------------------------------------
# Headline risk score (Portfolio.risk_score)
# ---------------------------------------------------------------------------
# score = (concentration/100 · 0.6 + min(mean|Δ24h| / cap, 1) · 0.4) · 100

HEADLINE_CONCENTRATION_WEIGHT: float = 0.6
HEADLINE_VOLATILITY_WEIGHT:    float = 0.4
HEADLINE_VOLATILITY_CAP_PCT:   float = 20.0   # daily move treated as "max"

# ---------------------------------------------------------------------------
# Target-driven rebalancing
# ---------------------------------------------------------------------------

DEFAULT_TARGET_ALLOCATIONS: Dict[str, float] = {
    "ETH":  40.0,
    "STT":  30.0,
    "USDC": 20.0,
    "BTC":  10.0,
}

# Target for any held symbol missing from the target map.
DEFAULT_TARGET_PCT: float = 0.0

# Drift of at most this many percentage points produces no action.
REBALANCE_DEAD_ZONE_PCT: float = 5.0

MAX_RECOMMENDATIONS: int = 3

# "portfolio" keeps holdings order; "drift" ranks by |delta| descending.
RANK_BY_OPTIONS = ("portfolio", "drift")
DEFAULT_RANK_BY: str = "portfolio"

# ---------------------------------------------------------------------------
# Sentiment-driven rebalancing (fractions of total portfolio value)
# ---------------------------------------------------------------------------

BULLISH_GROWTH_FRACTION:      float = 0.10
BULLISH_SPECULATIVE_FRACTION: float = 0.05
DEFENSIVE_FRACTION:           float = 0.15

# ---------------------------------------------------------------------------
# Numerical tolerance
# ---------------------------------------------------------------------------
# Slack allowed when a set of percentages is checked against 100.

ALLOCATION_TOLERANCE: float = 1e-6


def check_target_map(
    targets: Mapping[str, float],
    tolerance: float = ALLOCATION_TOLERANCE,
) -> None:
    """
    Reject a target allocation map that cannot be met.

    Each target must be a finite percentage in ``[0, 100]`` and the
    targets together may not exceed 100 by more than *tolerance*.  A map
    summing to less than 100 is allowed; the remainder stays unallocated.

    Raises
    ------
    ValueError
    """
    for symbol, pct in targets.items():
        if not 0.0 <= float(pct) <= 100.0:
            raise ValueError(f"Target for {symbol!r} must be within [0, 100] (got {pct}).")
    total = sum(float(pct) for pct in targets.values())
    if total > 100.0 + tolerance:
        raise ValueError(f"Target allocations sum to {total:g}%, above 100%.")


def _freeze(mapping: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType({str(k): float(v) for k, v in mapping.items()})


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable bundle of every policy knob the engines read.

    Mapping fields are copied into read-only proxies on construction, so
    one instance can be shared freely between threads and callers.

    Raises
    ------
    ValueError
        On inconsistent settings (negative dead zone, band thresholds out
        of order, unknown ``rank_by`` ...).
    """

    stable_symbols: FrozenSet[str] = STABLE_SYMBOLS
    reserve_symbol: str = RESERVE_SYMBOL
    growth_symbol: str = GROWTH_SYMBOL
    speculative_symbol: str = SPECULATIVE_SYMBOL

    liquidity_penalties: Mapping[str, float] = field(
        default_factory=lambda: dict(LIQUIDITY_PENALTIES)
    )
    default_liquidity_penalty: float = DEFAULT_LIQUIDITY_PENALTY

    risk_weights: Mapping[str, float] = field(
        default_factory=lambda: dict(RISK_WEIGHTS)
    )
    risk_band_medium: float = RISK_BAND_MEDIUM
    risk_band_high: float = RISK_BAND_HIGH
    concentration_high_risk_pct: Optional[float] = CONCENTRATION_HIGH_RISK_PCT

    headline_concentration_weight: float = HEADLINE_CONCENTRATION_WEIGHT
    headline_volatility_weight: float = HEADLINE_VOLATILITY_WEIGHT
    headline_volatility_cap_pct: float = HEADLINE_VOLATILITY_CAP_PCT

    default_targets: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TARGET_ALLOCATIONS)
    )
    default_target_pct: float = DEFAULT_TARGET_PCT
    dead_zone_pct: float = REBALANCE_DEAD_ZONE_PCT
    max_recommendations: int = MAX_RECOMMENDATIONS
    rank_by: str = DEFAULT_RANK_BY

    bullish_growth_fraction: float = BULLISH_GROWTH_FRACTION
    bullish_speculative_fraction: float = BULLISH_SPECULATIVE_FRACTION
    defensive_fraction: float = DEFENSIVE_FRACTION
    allocation_tolerance: float = ALLOCATION_TOLERANCE

    def __post_init__(self):
        object.__setattr__(self, "stable_symbols", frozenset(self.stable_symbols))
        object.__setattr__(self, "liquidity_penalties", _freeze(self.liquidity_penalties))
        object.__setattr__(self, "default_targets", _freeze(self.default_targets))
        check_target_map(self.default_targets, self.allocation_tolerance)

        missing = set(RISK_WEIGHTS) - set(self.risk_weights)
        if missing:
            raise ValueError(
                f"risk_weights is missing keys {sorted(missing)}. "
                f"Required: {sorted(RISK_WEIGHTS)}."
            )
        object.__setattr__(self, "risk_weights", _freeze(self.risk_weights))

        if self.dead_zone_pct < 0:
            raise ValueError(f"dead_zone_pct must be >= 0 (got {self.dead_zone_pct}).")
        if self.max_recommendations < 1:
            raise ValueError(
                f"max_recommendations must be >= 1 (got {self.max_recommendations})."
            )
        if self.risk_band_medium > self.risk_band_high:
            raise ValueError(
                f"risk_band_medium ({self.risk_band_medium}) must not exceed "
                f"risk_band_high ({self.risk_band_high})."
            )
        if self.rank_by not in RANK_BY_OPTIONS:
            raise ValueError(
                f"Unknown rank_by: {self.rank_by!r}. Choose from {RANK_BY_OPTIONS}."
            )
        if self.headline_volatility_cap_pct <= 0:
            raise ValueError("headline_volatility_cap_pct must be positive.")
        for name in ("bullish_growth_fraction", "bullish_speculative_fraction",
                     "defensive_fraction"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1] (got {value}).")

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a new, re-validated config with *changes* applied."""
        return replace(self, **changes)

    def liquidity_penalty(self, symbol: str) -> float:
        """Penalty for *symbol*; unknown symbols fall back to the default tier."""
        return self.liquidity_penalties.get(symbol, self.default_liquidity_penalty)

    def is_stable(self, symbol: str) -> bool:
        return symbol in self.stable_symbols


DEFAULT_CONFIG = EngineConfig()
