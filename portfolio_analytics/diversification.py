"""
portfolio_analytics/diversification.py
--------------------------------------
Entropy-based diversification index.

Design contract:
  - Pure function of asset values; no config, no state
  - Defined (never raising) for empty, single-asset and zero-value input
  - Non-finite values are rejected rather than scored as NaN
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

import numpy as np

from portfolio_analytics.models import AssetView, Portfolio


class DiversificationIndex:
    """
    Normalised Shannon entropy of how portfolio value is spread.

    Formula::

        p_i   = value_i / Σ value          (assets with value 0 skipped)
        H     = -Σ p_i · log2(p_i)
        score = H / log2(N) · 100           N = number of assets held

    A perfectly even split across N assets scores 100; a portfolio whose
    value sits almost entirely in one asset scores close to 0.  Zero-value
    assets still count towards N, so holding dust lowers the score.
    """

    MAX_SCORE: float = 100.0

    @staticmethod
    def compute(source: Union[Portfolio, Sequence[AssetView]]) -> float:
        """
        Score *source* (a Portfolio or its asset list) on ``[0, 100]``.

        Returns ``0.0`` for 0 or 1 assets and when total value is zero.
        """
        assets = source.assets if isinstance(source, Portfolio) else source
        return DiversificationIndex.from_values(a.value_usd for a in assets)

    @staticmethod
    def from_values(values: Iterable[float]) -> float:
        """
        Same score computed directly from raw non-negative values.

        Raises
        ------
        ValueError
            If any value, or their sum, is not finite.
        """
        arr = np.asarray(list(values), dtype=float)
        if not np.isfinite(arr).all():
            raise ValueError("values must be finite")
        n = arr.size
        if n <= 1:
            return 0.0

        with np.errstate(over="ignore"):
            total = arr.sum()
        if not np.isfinite(total):
            raise ValueError("sum of values overflows")
        if total <= 0.0:
            return 0.0

        proportions = arr[arr > 0.0] / total
        entropy = float(-(proportions * np.log2(proportions)).sum())
        score = entropy / np.log2(n) * DiversificationIndex.MAX_SCORE

        # Rounding can push an even split a hair past the bound
        return float(min(max(score, 0.0), DiversificationIndex.MAX_SCORE))
