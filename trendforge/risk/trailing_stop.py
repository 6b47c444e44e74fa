"""Trailing stop — entry-anchored SL maintenance for open positions.

Rules:
  - Buy:  target SL = entry + trailing_pips × pip_size
  - Sell: target SL = entry − trailing_pips × pip_size
  - Request a modification whenever the position's SL differs from target.

The target is recomputed from the entry price every cycle rather than
ratcheted from the current stop.
"""

from trendforge.broker.models import OpenPosition, StopLossModification
from trendforge.strategy.models import Instrument, Side


class TrailingStopGuard:
    """Computes stop-loss modifications for one instrument's open positions.

    Args:
        trailing_stop_pips: Distance from entry in pips.
        instrument: The traded instrument (pip size, price digits).
    """

    def __init__(self, trailing_stop_pips: float, instrument: Instrument) -> None:
        self.trailing_stop_pips = trailing_stop_pips
        self.instrument = instrument

    def target_stop(self, position: OpenPosition) -> float:
        offset = self.instrument.to_price(self.trailing_stop_pips)
        if position.side is Side.BUY:
            target = position.entry_price + offset
        else:
            target = position.entry_price - offset
        return round(target, self.instrument.digits)

    def review(self, positions: list[OpenPosition]) -> list[StopLossModification]:
        """Return a modification for every position whose SL is off target.

        Positions on other symbols are ignored.
        """
        modifications: list[StopLossModification] = []
        for position in positions:
            if position.symbol != self.instrument.symbol:
                continue
            target = self.target_stop(position)
            current = position.stop_loss
            if current is not None and round(current, self.instrument.digits) == target:
                continue
            modifications.append(
                StopLossModification(
                    position_id=position.position_id,
                    stop_loss=target,
                    take_profit=position.take_profit,
                )
            )
        return modifications
