"""Trend-confirmation entry rule.

Implements ``EntryRule``.  The single-bar moving-average crossover is the
mandatory gate; momentum, cloud and chart-pattern signals form an OR group
that must confirm it.
"""

from trendforge.strategy.base import RuleOutcome
from trendforge.strategy.models import Side, TrendDirection
from trendforge.strategy.patterns import is_bearish_pattern, is_bullish_pattern
from trendforge.strategy.series import BarSeries, IndicatorSnapshot
from trendforge.strategy.signals import (
    is_bearish_cloud_signal,
    is_bearish_momentum_crossover,
    is_bullish_cloud_signal,
    is_bullish_momentum_crossover,
)
from trendforge.strategy.trend import identify_trend_direction


class TrendConfirmationRule:
    """Buy on an up-crossover, sell on a down-crossover, once confirmed.

    Flow:
        1. Identify trend direction from the MA pair.
        2. Evaluate all bullish and bearish confirmations.
        3. Up + any bullish confirmation → buy.
           Down + any bearish confirmation → sell.
           Undefined → no trade, whatever the confirmations say.
    """

    name = "trend_following"

    def evaluate(self, bars: BarSeries, snapshot: IndicatorSnapshot) -> RuleOutcome:
        trend = identify_trend_direction(snapshot)

        bullish = {
            "momentum": is_bullish_momentum_crossover(snapshot),
            "cloud": is_bullish_cloud_signal(bars, snapshot),
            "pattern": is_bullish_pattern(bars),
        }
        bearish = {
            "momentum": is_bearish_momentum_crossover(snapshot),
            "cloud": is_bearish_cloud_signal(bars, snapshot),
            "pattern": is_bearish_pattern(bars),
        }

        checks: dict[str, object] = {"trend": trend.value}
        checks.update({f"bullish_{k}": v for k, v in bullish.items()})
        checks.update({f"bearish_{k}": v for k, v in bearish.items()})

        if trend is TrendDirection.UP and any(bullish.values()):
            confirmed = ", ".join(k for k, v in bullish.items() if v)
            return RuleOutcome(
                side=Side.BUY,
                reason=f"Trend Following Order: up-crossover confirmed by {confirmed}",
                checks=checks,
            )
        if trend is TrendDirection.DOWN and any(bearish.values()):
            confirmed = ", ".join(k for k, v in bearish.items() if v)
            return RuleOutcome(
                side=Side.SELL,
                reason=f"Trend Following Order: down-crossover confirmed by {confirmed}",
                checks=checks,
            )

        if trend is TrendDirection.UNDEFINED:
            reason = "no_trend"
        else:
            reason = "no_confirmation"
        return RuleOutcome(side=None, reason=reason, checks=checks)
