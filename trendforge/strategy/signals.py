"""Confirmation signals — momentum crossover and cloud trend. Pure functions, no I/O.

Both signals are strict multi-condition filters: every sub-condition is
required, and any missing history or ``nan`` input yields ``False``.
"""

from trendforge.errors import InsufficientHistory
from trendforge.strategy.series import BarSeries, IndicatorSnapshot


def is_bullish_momentum_crossover(snapshot: IndicatorSnapshot) -> bool:
    """Histogram flips positive while crossing above its signal line.

    All seven conditions are required:
        1. histogram was below zero on the previous bar
        2. histogram is above zero on the latest bar
        3. signal line was above the histogram on the previous bar
        4. signal line is below the histogram on the latest bar
        5. signal line was already above zero on the previous bar
        6. smoothed signal was above zero on the previous bar
        7. smoothed signal is above zero on the latest bar

    Conditions 3 and 4 make the histogram cross up through the signal line.
    The opposite crossing would need the signal line below a negative
    histogram on the previous bar, which contradicts condition 5, so the
    filter could never fire.
    """
    hist = snapshot["macd_histogram"]
    signal = snapshot["macd_signal"]
    smoothed = snapshot["macd_signal_smoothed"]
    try:
        return (
            hist.prior(1) < 0
            and hist.last > 0
            and signal.prior(1) > hist.prior(1)
            and signal.last < hist.last
            and signal.prior(1) > 0
            and smoothed.prior(1) > 0
            and smoothed.last > 0
        )
    except InsufficientHistory:
        return False


def is_bearish_momentum_crossover(snapshot: IndicatorSnapshot) -> bool:
    """Mirror of :func:`is_bullish_momentum_crossover`.

    The histogram crosses down through the signal line as it turns negative.
    """
    hist = snapshot["macd_histogram"]
    signal = snapshot["macd_signal"]
    smoothed = snapshot["macd_signal_smoothed"]
    try:
        return (
            hist.prior(1) > 0
            and hist.last < 0
            and signal.prior(1) < hist.prior(1)
            and signal.last > hist.last
            and signal.prior(1) < 0
            and smoothed.prior(1) < 0
            and smoothed.last < 0
        )
    except InsufficientHistory:
        return False


def is_bullish_cloud_signal(bars: BarSeries, snapshot: IndicatorSnapshot) -> bool:
    """Conversion line crosses above the base line with price above the cloud.

    The close must be above both cloud lines on the previous bar and on the
    latest bar.
    """
    conversion = snapshot["conversion_line"]
    base = snapshot["base_line"]
    cloud_a = snapshot["cloud_a"]
    cloud_b = snapshot["cloud_b"]
    try:
        crossed = conversion.prior(1) < base.prior(1) and conversion.last > base.last
        if not crossed:
            return False
        prev_close = bars.last(1).close
        close = bars.last(0).close
        return (
            prev_close > cloud_a.prior(1)
            and prev_close > cloud_b.prior(1)
            and close > cloud_a.last
            and close > cloud_b.last
        )
    except InsufficientHistory:
        return False


def is_bearish_cloud_signal(bars: BarSeries, snapshot: IndicatorSnapshot) -> bool:
    """Conversion line crosses below the base line with price below the cloud."""
    conversion = snapshot["conversion_line"]
    base = snapshot["base_line"]
    cloud_a = snapshot["cloud_a"]
    cloud_b = snapshot["cloud_b"]
    try:
        crossed = conversion.prior(1) > base.prior(1) and conversion.last < base.last
        if not crossed:
            return False
        prev_close = bars.last(1).close
        close = bars.last(0).close
        return (
            prev_close < cloud_a.prior(1)
            and prev_close < cloud_b.prior(1)
            and close < cloud_a.last
            and close < cloud_b.last
        )
    except InsufficientHistory:
        return False
