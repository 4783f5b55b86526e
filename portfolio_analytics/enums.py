from enum import Enum


class RiskBand(Enum):
    """Qualitative portfolio risk level."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class MarketSentiment(Enum):
    """Externally supplied market-mood signal (consumed, never computed here)."""
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class RiskTolerance(Enum):
    """Investor risk tolerance tier."""
    CONSERVATIVE = "Conservative"
    MODERATE = "Moderate"
    AGGRESSIVE = "Aggressive"


class TradeDirection(Enum):
    """Side of a rebalancing move relative to the non-reserve asset."""
    BUY = "buy"     # reserve → asset
    SELL = "sell"   # asset → reserve
