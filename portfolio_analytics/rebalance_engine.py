"""
portfolio_analytics/rebalance_engine.py
---------------------------------------
Two independent rebalancing strategies over the same Portfolio.

Design contract:
  - ``target_recommendations``    : drift from a target allocation map
  - ``sentiment_recommendations`` : fixed moves keyed on market mood and
                                    risk tolerance
  - The caller picks a strategy; the two are never merged here
  - Fully deterministic and stateless (all methods are @staticmethod)
  - Output length never exceeds ``EngineConfig.max_recommendations``
"""

from __future__ import annotations

from typing import List, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

from portfolio_analytics.config import EngineConfig, DEFAULT_CONFIG, check_target_map
from portfolio_analytics.enums import MarketSentiment, RiskTolerance, TradeDirection
from portfolio_analytics.logger import setup_logger
from portfolio_analytics.models import Portfolio, RebalanceRecommendation

logger = setup_logger(__name__)

E = TypeVar("E", MarketSentiment, RiskTolerance)


class RebalanceEngine:
    """
    Emit bounded, ordered lists of :class:`RebalanceRecommendation`.

    Every move routes through the reserve symbol: BUY moves are funded
    from it, SELL moves are parked in it.
    """

    # ------------------------------------------------------------------ #
    #  Strategy 1: target allocation drift
    # ------------------------------------------------------------------ #

    @staticmethod
    def target_recommendations(
        portfolio: Portfolio,
        targets: Optional[Mapping[str, float]] = None,
        config: Optional[EngineConfig] = None,
    ) -> List[RebalanceRecommendation]:
        """
        Recommend trades that pull each holding back towards its target.

        Parameters
        ----------
        portfolio:
            Output of ``AllocationEngine.build_portfolio``.
        targets:
            ``{symbol: target_pct}`` on a 0-100 scale.  ``None`` selects
            the configured default map; an explicit empty dict means every
            holding targets ``default_target_pct``.
        config:
            Policy overrides (dead zone, cap, ordering, reserve symbol).

        Rules
        -----
        For each held asset other than the reserve, which only funds BUYs
        and receives SELLs and so never gets a move of its own::

            delta = target_pct − allocation_pct
            |delta| ≤ dead_zone  → nothing
            delta  >  dead_zone  → BUY  reserve → asset, delta/100 · total
            delta  < −dead_zone  → SELL asset → reserve, |delta|/100 · total

        Ordering follows ``config.rank_by``: ``"portfolio"`` keeps holding
        order, ``"drift"`` sorts by ``|delta|`` descending (ties keep
        holding order).  The list is then cut to ``max_recommendations``.

        A zero-valued portfolio yields no recommendations.

        Raises
        ------
        ValueError
            If an explicit *targets* map has a share outside ``[0, 100]``
            or sums past 100 (beyond ``allocation_tolerance``).
        """
        cfg = config or DEFAULT_CONFIG
        if targets is None:
            target_map = cfg.default_targets
        else:
            check_target_map(targets, cfg.allocation_tolerance)
            target_map = targets

        if portfolio.total_value_usd <= 0.0:
            return []

        candidates: List[Tuple[float, RebalanceRecommendation]] = []
        for asset in portfolio.assets:
            if asset.symbol == cfg.reserve_symbol:
                continue

            target = float(target_map.get(asset.symbol, cfg.default_target_pct))
            delta = target - asset.allocation_pct
            if abs(delta) <= cfg.dead_zone_pct:
                continue

            amount = abs(delta) / 100.0 * portfolio.total_value_usd
            if delta > 0:
                rec = RebalanceRecommendation(
                    from_asset=cfg.reserve_symbol,
                    to_asset=asset.symbol,
                    amount_usd=amount,
                    reason=f"Increase {asset.symbol} allocation to {target:g}%",
                    expected_impact="Better diversification, target allocation achieved",
                    direction=TradeDirection.BUY,
                    drift_pct=delta,
                )
            else:
                rec = RebalanceRecommendation(
                    from_asset=asset.symbol,
                    to_asset=cfg.reserve_symbol,
                    amount_usd=amount,
                    reason=f"Reduce {asset.symbol} allocation to {target:g}%",
                    expected_impact="Reduce concentration risk, take profits",
                    direction=TradeDirection.SELL,
                    drift_pct=delta,
                )
            candidates.append((abs(delta), rec))

        if cfg.rank_by == "drift":
            # sorted() is stable, so equal drifts keep holding order
            candidates = sorted(candidates, key=lambda c: c[0], reverse=True)

        recommendations = [rec for _, rec in candidates[:cfg.max_recommendations]]
        logger.debug(
            "Target rebalance: %d candidate(s), %d returned",
            len(candidates), len(recommendations),
        )
        return recommendations

    # ------------------------------------------------------------------ #
    #  Strategy 2: sentiment heuristic
    # ------------------------------------------------------------------ #

    @staticmethod
    def sentiment_recommendations(
        portfolio: Portfolio,
        sentiment: Union[MarketSentiment, str],
        risk_tolerance: Union[RiskTolerance, str],
        config: Optional[EngineConfig] = None,
    ) -> List[RebalanceRecommendation]:
        """
        Fixed-fraction moves driven by an external sentiment signal.

        * Bullish and not Conservative → reserve → growth (10% of total)
          and reserve → speculative (5% of total)
        * Bearish, or Conservative     → growth → reserve (15% of total)
        * Otherwise                    → no moves

        *sentiment* and *risk_tolerance* accept enum members or their
        string values (case-insensitive).

        Raises
        ------
        ValueError
            If either signal is not a recognised value.
        """
        cfg = config or DEFAULT_CONFIG
        mood = RebalanceEngine._coerce(MarketSentiment, sentiment)
        tolerance = RebalanceEngine._coerce(RiskTolerance, risk_tolerance)

        total = portfolio.total_value_usd
        if total <= 0.0:
            return []

        recommendations: List[RebalanceRecommendation] = []

        if mood is MarketSentiment.BULLISH and tolerance is not RiskTolerance.CONSERVATIVE:
            recommendations.append(RebalanceRecommendation(
                from_asset=cfg.reserve_symbol,
                to_asset=cfg.growth_symbol,
                amount_usd=total * cfg.bullish_growth_fraction,
                reason=f"Bullish sentiment: Increase {cfg.growth_symbol} exposure",
                expected_impact="Higher potential returns in rising market",
                direction=TradeDirection.BUY,
            ))
            recommendations.append(RebalanceRecommendation(
                from_asset=cfg.reserve_symbol,
                to_asset=cfg.speculative_symbol,
                amount_usd=total * cfg.bullish_speculative_fraction,
                reason=f"Bullish sentiment: Add {cfg.speculative_symbol} for ecosystem growth",
                expected_impact="Early exposure to a growing ecosystem",
                direction=TradeDirection.BUY,
            ))

        if mood is MarketSentiment.BEARISH or tolerance is RiskTolerance.CONSERVATIVE:
            recommendations.append(RebalanceRecommendation(
                from_asset=cfg.growth_symbol,
                to_asset=cfg.reserve_symbol,
                amount_usd=total * cfg.defensive_fraction,
                reason=(
                    "Bearish sentiment: Preserve capital"
                    if mood is MarketSentiment.BEARISH
                    else "Conservative tolerance: Preserve capital"
                ),
                expected_impact="Reduce downside risk, maintain liquidity",
                direction=TradeDirection.SELL,
            ))

        logger.debug(
            "Sentiment rebalance (%s, %s): %d move(s)",
            mood.value, tolerance.value, len(recommendations),
        )
        return recommendations[:cfg.max_recommendations]

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coerce(enum_cls: Type[E], value: Union[E, str]) -> E:
        """Accept an enum member or a case-insensitive name/value string."""
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            lookup: Dict[str, E] = {}
            for member in enum_cls:
                lookup[member.name.lower()] = member
                lookup[member.value.lower()] = member
            member = lookup.get(value.strip().lower())
            if member is not None:
                return member
        raise ValueError(
            f"Unknown {enum_cls.__name__}: {value!r}. "
            f"Choose from {[m.value for m in enum_cls]}."
        )
