"""Trend detection — single-bar moving-average crossover.

Only a crossover between the previous bar and the latest bar counts; a
crossing that happened earlier does not re-trigger on later bars.
"""

from trendforge.errors import InsufficientHistory
from trendforge.strategy.models import TrendDirection
from trendforge.strategy.series import IndicatorSnapshot


def identify_trend_direction(
    snapshot: IndicatorSnapshot,
    short_name: str = "short_ma",
    long_name: str = "long_ma",
) -> TrendDirection:
    """Classify trend direction from the long/short moving-average pair.

    Rules:
        - **Up**: ``long.prior(1) <= short.prior(1)`` and ``long.last > short.last``.
        - **Down**: ``long.prior(1) >= short.prior(1)`` and ``long.last < short.last``.
        - **Undefined**: anything else, including fewer than two values or
          ``nan`` warm-up values.
    """
    short_ma = snapshot[short_name]
    long_ma = snapshot[long_name]
    try:
        long_now, long_prev = long_ma.last, long_ma.prior(1)
        short_now, short_prev = short_ma.last, short_ma.prior(1)
    except InsufficientHistory:
        return TrendDirection.UNDEFINED

    if long_prev <= short_prev and long_now > short_now:
        return TrendDirection.UP
    if long_prev >= short_prev and long_now < short_now:
        return TrendDirection.DOWN
    return TrendDirection.UNDEFINED
