"""Builds the ``IndicatorSnapshot`` the entry rules consume from a bar series.

Only the feeds the two strategy variants read are produced.  A feed that
cannot be computed yet (not enough bars) is filled with ``nan``, which every
detector reads as "signal absent".
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from trendforge.errors import InsufficientHistory
from trendforge.strategy.indicators import (
    calculate_atr,
    calculate_bollinger,
    calculate_ema,
    calculate_ichimoku_cloud,
    calculate_macd,
    calculate_rsi,
)
from trendforge.strategy.series import BarSeries, IndicatorSnapshot

logger = logging.getLogger("trendforge")


@dataclass(frozen=True)
class IndicatorSettings:
    """Indicator periods, fixed at engine construction."""

    short_ma_periods: int = 20
    long_ma_periods: int = 50
    macd_fast_periods: int = 12
    macd_slow_periods: int = 26
    macd_signal_periods: int = 9
    conversion_periods: int = 9
    base_periods: int = 26
    cloud_span_b_periods: int = 52
    atr_periods: int = 14
    atr_smoothing: str = "exponential"
    rsi_periods: int = 14
    bollinger_periods: int = 20
    bollinger_std_dev: float = 2.0

    @classmethod
    def from_config(cls, config) -> "IndicatorSettings":
        return cls(
            short_ma_periods=config.short_ma_periods,
            long_ma_periods=config.long_ma_periods,
            macd_fast_periods=config.macd_fast_periods,
            macd_slow_periods=config.macd_slow_periods,
            macd_signal_periods=config.macd_signal_periods,
            atr_periods=config.atr_periods,
            atr_smoothing=config.atr_smoothing,
            rsi_periods=config.rsi_periods,
        )


def _or_nan(name: str, length: int, width: int, compute: Callable[[], object]):
    """Run *compute*; on insufficient history return *width* nan-filled series."""
    try:
        return compute()
    except InsufficientHistory as exc:
        logger.debug("Indicator '%s' not ready: %s", name, exc)
        blank = [float("nan")] * length
        if width == 1:
            return blank
        return tuple(list(blank) for _ in range(width))


def build_snapshot(
    bars: BarSeries,
    settings: IndicatorSettings = IndicatorSettings(),
) -> IndicatorSnapshot:
    """Compute every standard feed for *bars*.

    Returns an ``IndicatorSnapshot`` whose series all have ``len(bars)``
    entries.
    """
    n = len(bars)
    candles = list(bars)
    closes = bars.values("close")

    short_ma = _or_nan(
        "short_ma", n, 1, lambda: calculate_ema(closes, settings.short_ma_periods)
    )
    long_ma = _or_nan(
        "long_ma", n, 1, lambda: calculate_ema(closes, settings.long_ma_periods)
    )
    histogram, signal, signal_smoothed = _or_nan(
        "macd", n, 3,
        lambda: calculate_macd(
            closes,
            settings.macd_fast_periods,
            settings.macd_slow_periods,
            settings.macd_signal_periods,
        ),
    )
    conversion = _or_nan(
        "conversion_line", n, 1,
        lambda: calculate_ema(closes, settings.conversion_periods),
    )
    base = _or_nan(
        "base_line", n, 1, lambda: calculate_ema(closes, settings.base_periods)
    )
    cloud_a, cloud_b = _or_nan(
        "cloud", n, 2,
        lambda: calculate_ichimoku_cloud(
            candles,
            settings.conversion_periods,
            settings.base_periods,
            settings.cloud_span_b_periods,
        ),
    )
    atr = _or_nan(
        "atr", n, 1,
        lambda: calculate_atr(candles, settings.atr_periods, settings.atr_smoothing),
    )
    rsi = _or_nan("rsi", n, 1, lambda: calculate_rsi(closes, settings.rsi_periods))
    bb_upper, _bb_mid, bb_lower = _or_nan(
        "bollinger", n, 3,
        lambda: calculate_bollinger(
            closes, settings.bollinger_periods, settings.bollinger_std_dev
        ),
    )

    return IndicatorSnapshot({
        "short_ma": short_ma,
        "long_ma": long_ma,
        "macd_histogram": histogram,
        "macd_signal": signal,
        "macd_signal_smoothed": signal_smoothed,
        "conversion_line": conversion,
        "base_line": base,
        "cloud_a": cloud_a,
        "cloud_b": cloud_b,
        "atr": atr,
        "rsi": rsi,
        "bb_upper": bb_upper,
        "bb_lower": bb_lower,
    })
