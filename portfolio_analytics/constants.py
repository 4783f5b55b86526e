"""
portfolio_analytics/constants.py
--------------------------------
Display-side constants shared across modules.

Nothing here affects a computed number; these tables only label results
for the presentation layer.  Tunable financial policy lives in
``portfolio_analytics/config.py``.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Symbol → human-readable asset name
# ---------------------------------------------------------------------------
# Unknown symbols are displayed as the symbol itself.

ASSET_DISPLAY_NAMES: dict[str, str] = {
    "ETH":  "Ethereum",
    "BTC":  "Bitcoin",
    "USDC": "USD Coin",
    "STT":  "Somnia Token",
    "USDT": "Tether",
    "DAI":  "Dai",
    "SOL":  "Solana",
}


def display_name(symbol: str) -> str:
    return ASSET_DISPLAY_NAMES.get(symbol, symbol)


# ---------------------------------------------------------------------------
# Risk metric registry
# ---------------------------------------------------------------------------
# Drives RiskEngine.to_frame labelling.  Keys must match the
# attribute names on RiskMetrics.
# ---------------------------------------------------------------------------

RISK_METRIC_REGISTRY: dict[str, dict] = {
    "volatility": {
        "display":          "Volatility",
        "unit":             "%",
        "higher_is_better": False,
    },
    "concentration": {
        "display":          "Concentration",
        "unit":             "%",
        "higher_is_better": False,
    },
    "correlation_risk": {
        "display":          "Correlation Risk",
        "unit":             "%",
        "higher_is_better": False,
    },
    "liquidity_risk": {
        "display":          "Liquidity Risk",
        "unit":             "",
        "higher_is_better": False,
    },
    "composite_score": {
        "display":          "Composite Risk",
        "unit":             "",
        "higher_is_better": False,
    },
}


# ---------------------------------------------------------------------------
# Columns of the tabular portfolio view (AllocationEngine.to_frame)
# ---------------------------------------------------------------------------

PORTFOLIO_FRAME_COLUMNS: list[str] = [
    "symbol",
    "name",
    "balance",
    "unit_price_usd",
    "value_usd",
    "allocation_pct",
    "change_24h_pct",
]
