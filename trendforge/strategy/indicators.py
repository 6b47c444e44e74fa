"""Technical indicators — EMA, SMA, ATR, RSI, Bollinger Bands, MACD, Ichimoku cloud.

Pure functions, no I/O.  Every function returns a list the same length as
its input; entries before the indicator is ready are ``float('nan')``.
"""

import math
from collections.abc import Sequence

from trendforge.errors import InsufficientHistory
from trendforge.strategy.models import Bar


_NAN = float("nan")


def _first_valid(values: Sequence[float]) -> int:
    for i, v in enumerate(values):
        if not math.isnan(v):
            return i
    return len(values)


def calculate_sma(values: Sequence[float], period: int) -> list[float]:
    """Simple Moving Average over *period* values.

    A window that contains ``nan`` produces ``nan``.

    Raises ``InsufficientHistory`` if fewer than *period* values are provided.
    """
    if len(values) < period:
        raise InsufficientHistory(
            f"Need at least {period} values for SMA({period}), got {len(values)}"
        )
    sma: list[float] = [_NAN] * len(values)
    for i in range(period - 1, len(values)):
        window = values[i - period + 1 : i + 1]
        sma[i] = sum(window) / period
    return sma


def calculate_ema(values: Sequence[float], period: int) -> list[float]:
    """Calculate an Exponential Moving Average series.

    Uses the standard EMA formula:
        ``EMA_today = value × k + EMA_yesterday × (1 - k)``
    where ``k = 2 / (period + 1)``.

    The first EMA value is seeded with the SMA of the first *period* valid
    values.  Leading ``nan`` entries (e.g. an input that is itself an
    indicator still warming up) are skipped before seeding.

    Raises ``InsufficientHistory`` if fewer than *period* valid values exist.
    """
    start = _first_valid(values)
    if len(values) - start < period:
        raise InsufficientHistory(
            f"Need at least {period} values for EMA({period}), "
            f"got {len(values) - start}"
        )

    k = 2.0 / (period + 1)
    ema: list[float] = [_NAN] * len(values)

    seed_index = start + period - 1
    ema[seed_index] = sum(values[start : seed_index + 1]) / period

    for i in range(seed_index + 1, len(values)):
        ema[i] = values[i] * k + ema[i - 1] * (1 - k)

    return ema


# ── ATR ──────────────────────────────────────────────────────────────────


def true_ranges(bars: Sequence[Bar]) -> list[float]:
    """True Range per bar.

        TR = max(high - low, |high - prev_close|, |low - prev_close|)

    The first bar has no previous close, so its TR is ``high - low``.
    """
    ranges: list[float] = []
    for i, bar in enumerate(bars):
        if i == 0:
            ranges.append(bar.high - bar.low)
            continue
        prev_close = bars[i - 1].close
        ranges.append(
            max(
                bar.high - bar.low,
                abs(bar.high - prev_close),
                abs(bar.low - prev_close),
            )
        )
    return ranges


def calculate_atr(
    bars: Sequence[Bar],
    period: int = 14,
    smoothing: str = "exponential",
) -> list[float]:
    """Average True Range series.

    *smoothing* is ``"exponential"`` (EMA of true ranges) or ``"simple"``
    (SMA of true ranges).

    Raises ``InsufficientHistory`` if fewer than *period* bars are provided,
    ``ValueError`` for an unknown smoothing.
    """
    if smoothing == "exponential":
        return calculate_ema(true_ranges(bars), period)
    if smoothing == "simple":
        return calculate_sma(true_ranges(bars), period)
    raise ValueError(f"smoothing must be 'exponential' or 'simple', got '{smoothing}'")


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(closes: Sequence[float], period: int = 14) -> list[float]:
    """Calculate Wilder's Relative Strength Index.

    Algorithm (Wilder-smoothed):
        1. delta = close[i] - close[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = SMA of first *period* deltas.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RS = avg_gain / avg_loss
        6. RSI = 100 - 100 / (1 + RS)

    Requires at least ``period + 1`` closes.
    """
    if len(closes) < period + 1:
        raise InsufficientHistory(
            f"Need at least {period + 1} values for RSI({period}), "
            f"got {len(closes)}"
        )

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    gains = [max(d, 0.0) for d in deltas]
    losses = [abs(min(d, 0.0)) for d in deltas]

    rsi: list[float] = [_NAN] * len(closes)

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    def _rsi_from_avgs(ag: float, al: float) -> float:
        if al == 0:
            return 100.0
        rs = ag / al
        return 100.0 - 100.0 / (1.0 + rs)

    rsi[period] = _rsi_from_avgs(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        # deltas are offset by one against closes
        rsi[i + 1] = _rsi_from_avgs(avg_gain, avg_loss)

    return rsi


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    closes: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> tuple[list[float], list[float], list[float]]:
    """Calculate Bollinger Bands.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    Returns ``(upper, middle, lower)``.
    """
    if len(closes) < period:
        raise InsufficientHistory(
            f"Need at least {period} values for Bollinger({period}), "
            f"got {len(closes)}"
        )

    n = len(closes)
    upper: list[float] = [_NAN] * n
    middle: list[float] = [_NAN] * n
    lower: list[float] = [_NAN] * n

    for i in range(period - 1, n):
        window = closes[i - period + 1 : i + 1]
        sma = sum(window) / period
        variance = sum((x - sma) ** 2 for x in window) / period
        sigma = math.sqrt(variance)

        middle[i] = sma
        upper[i] = sma + std_dev * sigma
        lower[i] = sma - std_dev * sigma

    return upper, middle, lower


# ── MACD ─────────────────────────────────────────────────────────────────


def calculate_macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[list[float], list[float], list[float]]:
    """MACD histogram, its signal line, and the signal line's own SMA.

        histogram         = EMA(close, fast) − EMA(close, slow)
        signal            = SMA(histogram, signal)
        signal_smoothed   = SMA(signal, signal)

    Returns ``(histogram, signal, signal_smoothed)``.
    """
    fast_ema = calculate_ema(closes, fast)
    slow_ema = calculate_ema(closes, slow)
    histogram = [f - s for f, s in zip(fast_ema, slow_ema)]
    signal_line = calculate_sma(histogram, signal)
    smoothed = calculate_sma(signal_line, signal)
    return histogram, signal_line, smoothed


# ── Ichimoku cloud ───────────────────────────────────────────────────────


def _midpoints(bars: Sequence[Bar], period: int) -> list[float]:
    mids: list[float] = [_NAN] * len(bars)
    for i in range(period - 1, len(bars)):
        window = bars[i - period + 1 : i + 1]
        mids[i] = (max(b.high for b in window) + min(b.low for b in window)) / 2
    return mids


def calculate_ichimoku_cloud(
    bars: Sequence[Bar],
    tenkan: int = 9,
    kijun: int = 26,
    senkou_b: int = 52,
) -> tuple[list[float], list[float]]:
    """Ichimoku cloud boundaries as plotted at each bar.

        span_a = (tenkan midpoint + kijun midpoint) / 2, shifted *kijun* bars forward
        span_b = *senkou_b* midpoint, shifted *kijun* bars forward

    Returns ``(span_a, span_b)``.
    """
    if len(bars) < senkou_b:
        raise InsufficientHistory(
            f"Need at least {senkou_b} bars for Ichimoku({tenkan}, {kijun}, {senkou_b}), "
            f"got {len(bars)}"
        )

    tenkan_mid = _midpoints(bars, tenkan)
    kijun_mid = _midpoints(bars, kijun)
    b_mid = _midpoints(bars, senkou_b)

    n = len(bars)
    span_a: list[float] = [_NAN] * n
    span_b: list[float] = [_NAN] * n
    for i in range(kijun, n):
        span_a[i] = (tenkan_mid[i - kijun] + kijun_mid[i - kijun]) / 2
        span_b[i] = b_mid[i - kijun]
    return span_a, span_b
