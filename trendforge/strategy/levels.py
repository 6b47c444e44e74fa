"""Support/Resistance levels from pivot points and Fibonacci retracements — pure functions."""

from trendforge.strategy.models import LevelSet
from trendforge.strategy.series import BarSeries


FIB_RATIOS: tuple[float, float, float, float] = (0.236, 0.382, 0.500, 0.618)


def pivot_levels(high: float, low: float, close: float) -> dict[str, float]:
    """Classic floor-trader pivot and its first two support/resistance tiers."""
    pivot = (high + low + close) / 3
    bar_range = high - low
    return {
        "pivot": pivot,
        "s1": 2 * pivot - high,
        "s2": pivot - bar_range,
        "r1": 2 * pivot - low,
        "r2": pivot + bar_range,
    }


def fibonacci_levels(close: float, price_range: float) -> dict[float, float]:
    """Retracements of *price_range* subtracted from *close*, keyed by ratio."""
    return {ratio: close - ratio * price_range for ratio in FIB_RATIOS}


def calculate_levels(bars: BarSeries, window: int = 14) -> LevelSet:
    """Derive the current support and resistance levels.

    Pivot tiers use the latest bar only; Fibonacci retracements use the
    high/low range of the last *window* bars.

        support    = min(S1, S2, fib 23.6%, fib 38.2%)
        resistance = max(R1, R2, fib 50%,   fib 61.8%)

    Raises ``InsufficientHistory`` if fewer than *window* bars exist.
    """
    price_range = bars.highest_high(window) - bars.lowest_low(window)
    latest = bars.last()

    pivots = pivot_levels(latest.high, latest.low, latest.close)
    fibs = fibonacci_levels(latest.close, price_range)

    support = min(pivots["s1"], pivots["s2"], fibs[0.236], fibs[0.382])
    resistance = max(pivots["r1"], pivots["r2"], fibs[0.500], fibs[0.618])
    return LevelSet(
        support_level=support,
        resistance_level=resistance,
        pivot=pivots["pivot"],
    )
