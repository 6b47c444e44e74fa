"""Multi-bar chart pattern recognition — pure functions over a ``BarSeries``.

Scanners slide a small window back through a fixed lookback and report the
first match; they answer "does the pattern exist", not "where is the best
one".  A series shorter than the lookback never matches.
"""

from trendforge.errors import InsufficientHistory
from trendforge.strategy.series import BarSeries


DOUBLE_PATTERN_LOOKBACK = 20
HEAD_AND_SHOULDERS_LOOKBACK = 30


def is_double_top(bars: BarSeries, lookback: int = DOUBLE_PATTERN_LOOKBACK) -> bool:
    """Bar at offset *i* has a higher high and a lower low than both neighbours.

    Checks ``high[i+1] < high[i] > high[i-1]`` and
    ``low[i+1] > low[i] < low[i-1]`` for ``i`` in ``[2, lookback)``.
    """
    if len(bars) < lookback:
        return False
    try:
        for i in range(2, lookback):
            older, middle, newer = bars.last(i + 1), bars.last(i), bars.last(i - 1)
            if (
                older.high < middle.high > newer.high
                and older.low > middle.low < newer.low
            ):
                return True
    except InsufficientHistory:
        # scan ran off the start of history before finding a match
        return False
    return False


def is_double_bottom(bars: BarSeries, lookback: int = DOUBLE_PATTERN_LOOKBACK) -> bool:
    """Mirror of :func:`is_double_top`: the middle bar sits inside both neighbours."""
    if len(bars) < lookback:
        return False
    try:
        for i in range(2, lookback):
            older, middle, newer = bars.last(i + 1), bars.last(i), bars.last(i - 1)
            if (
                older.high > middle.high < newer.high
                and older.low < middle.low > newer.low
            ):
                return True
    except InsufficientHistory:
        # scan ran off the start of history before finding a match
        return False
    return False


def is_head_and_shoulders_top(
    bars: BarSeries, lookback: int = HEAD_AND_SHOULDERS_LOOKBACK
) -> bool:
    """Four-bar head-and-shoulders top.

    For offsets ``i+2`` (left shoulder), ``i+1`` (head), ``i`` (right
    shoulder) and ``i-1`` (reference bar):

    - the head's high is above both shoulders' highs and its low below
      both shoulders' lows;
    - the reference bar's high is below both shoulders' highs and its low
      is below the head's low.
    """
    if len(bars) < lookback:
        return False
    try:
        for i in range(3, lookback):
            left, head = bars.last(i + 2), bars.last(i + 1)
            right, ref = bars.last(i), bars.last(i - 1)
            if (
                head.high > left.high and head.high > right.high
                and head.low < left.low and head.low < right.low
                and ref.high < left.high and ref.high < right.high
                and ref.low < head.low
            ):
                return True
    except InsufficientHistory:
        # scan ran off the start of history before finding a match
        return False
    return False


def is_head_and_shoulders_bottom(
    bars: BarSeries, lookback: int = HEAD_AND_SHOULDERS_LOOKBACK
) -> bool:
    """Mirror of :func:`is_head_and_shoulders_top`."""
    if len(bars) < lookback:
        return False
    try:
        for i in range(3, lookback):
            left, head = bars.last(i + 2), bars.last(i + 1)
            right, ref = bars.last(i), bars.last(i - 1)
            if (
                head.high < left.high and head.high < right.high
                and head.low > left.low and head.low > right.low
                and ref.high > left.high and ref.high > right.high
                and ref.low > head.low
            ):
                return True
    except InsufficientHistory:
        # scan ran off the start of history before finding a match
        return False
    return False


def is_bullish_engulfing(bars: BarSeries) -> bool:
    """Bullish latest bar opening below the previous close and closing above the previous open."""
    try:
        current, previous = bars.last(0), bars.last(1)
    except InsufficientHistory:
        return False
    if not current.is_bullish:
        return False
    return current.open < previous.close and current.close > previous.open


def is_bearish_engulfing(bars: BarSeries) -> bool:
    """Bearish latest bar opening above the previous close and closing below the previous open."""
    try:
        current, previous = bars.last(0), bars.last(1)
    except InsufficientHistory:
        return False
    if not current.is_bearish:
        return False
    return current.open > previous.close and current.close < previous.open


# ── Composite ────────────────────────────────────────────────────────────


def is_bullish_pattern(bars: BarSeries) -> bool:
    """Any bullish pattern, evaluated only when the latest bar closed up."""
    if not len(bars) or not bars.last().is_bullish:
        return False
    return (
        is_bullish_engulfing(bars)
        or is_double_bottom(bars)
        or is_head_and_shoulders_bottom(bars)
    )


def is_bearish_pattern(bars: BarSeries) -> bool:
    """Any bearish pattern, evaluated only when the latest bar closed down."""
    if not len(bars) or not bars.last().is_bearish:
        return False
    return (
        is_bearish_engulfing(bars)
        or is_double_top(bars)
        or is_head_and_shoulders_top(bars)
    )
