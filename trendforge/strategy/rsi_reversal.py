"""Price-action RSI entry rule.

Implements ``EntryRule``.  Buys an oversold RSI in a rising MA structure
while price holds above the lower Bollinger band; sells the mirror case.
"""

from trendforge.errors import ConfigurationError, InsufficientHistory
from trendforge.strategy.base import RuleOutcome
from trendforge.strategy.models import Side
from trendforge.strategy.series import BarSeries, IndicatorSnapshot


class PriceActionRSIRule:
    """RSI extreme + MA alignment + Bollinger position + live volume.

    Buy conditions (ALL required):
        1. RSI < *oversold*
        2. short MA > long MA
        3. close > lower Bollinger band
        4. volume > 0

    Sell conditions (ALL required):
        1. RSI > *overbought*
        2. short MA < long MA
        3. close < upper Bollinger band
        4. volume > 0
    """

    name = "price_action_rsi"

    def __init__(self, overbought: float = 70.0, oversold: float = 30.0) -> None:
        if not 0 <= oversold < overbought <= 100:
            raise ConfigurationError(
                f"RSI thresholds must satisfy 0 <= oversold < overbought <= 100, "
                f"got oversold={oversold}, overbought={overbought}"
            )
        self.overbought = overbought
        self.oversold = oversold

    def evaluate(self, bars: BarSeries, snapshot: IndicatorSnapshot) -> RuleOutcome:
        try:
            bar = bars.last()
            rsi = snapshot["rsi"].last
            short_ma = snapshot["short_ma"].last
            long_ma = snapshot["long_ma"].last
            upper = snapshot["bb_upper"].last
            lower = snapshot["bb_lower"].last
        except InsufficientHistory:
            return RuleOutcome(side=None, reason="no_data")

        bullish = (
            rsi < self.oversold
            and short_ma > long_ma
            and bar.close > lower
            and bar.volume > 0
        )
        bearish = (
            rsi > self.overbought
            and short_ma < long_ma
            and bar.close < upper
            and bar.volume > 0
        )
        checks: dict[str, object] = {
            "rsi": rsi,
            "bullish": bullish,
            "bearish": bearish,
        }

        if bullish:
            return RuleOutcome(
                side=Side.BUY,
                reason=f"Entry reason: RSI {rsi:.1f} oversold",
                checks=checks,
            )
        if bearish:
            return RuleOutcome(
                side=Side.SELL,
                reason=f"Entry reason: RSI {rsi:.1f} overbought",
                checks=checks,
            )
        return RuleOutcome(side=None, reason="no_signal", checks=checks)
