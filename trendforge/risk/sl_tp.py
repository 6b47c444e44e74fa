"""Stop-loss and take-profit calculation — pure math, no I/O.

Two pluggable policies share one interface (``RiskPolicy``):

ATR with pip floor (trend following):
    SL/TP distances are ATR multiples converted to pips, never closer than
    a minimum pip distance.  Position size is risk over the SL price distance.

Flat ATR multiplier (price-action RSI):
    SL/TP distances are plain ATR multiples.  Position size is risk over a
    fixed stop-loss pip parameter.

Both place levels from the bid for buys and from the ask for sells.
``clamp_stop_loss`` then widens any stop closer than 1.5 × ATR to entry.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from trendforge.strategy.models import Instrument, Quote, RiskParameters, Side


@dataclass(frozen=True)
class RiskLevels:
    """Computed stop-loss and take-profit for a trade."""

    sl: float
    tp: float
    sl_pips: float
    tp_pips: float


@runtime_checkable
class RiskPolicy(Protocol):
    """Stop/target placement and sizing distance for one strategy variant."""

    def levels(
        self, side: Side, quote: Quote, atr: float, instrument: Instrument
    ) -> RiskLevels:
        ...

    def sizing_distance(
        self, entry_price: float, stop_loss: float, instrument: Instrument
    ) -> float:
        ...


def _place(side: Side, price: float, sl_distance: float, tp_distance: float) -> tuple[float, float]:
    if side is Side.BUY:
        return price - sl_distance, price + tp_distance
    return price + sl_distance, price - tp_distance


class AtrPipFloorPolicy:
    """ATR-scaled distances with minimum pip floors.

    Formula::

        atr_pips = atr / pip_size
        sl_pips  = max(atr_pips × stop_loss_atr_multiplier,   min_stop_loss_pips)
        tp_pips  = max(atr_pips × take_profit_atr_multiplier, min_take_profit_pips)
    """

    def __init__(self, params: RiskParameters) -> None:
        self._params = params

    def levels(
        self, side: Side, quote: Quote, atr: float, instrument: Instrument
    ) -> RiskLevels:
        p = self._params
        atr_pips = instrument.to_pips(atr)
        sl_pips = max(atr_pips * p.stop_loss_atr_multiplier, p.min_stop_loss_pips)
        tp_pips = max(atr_pips * p.take_profit_atr_multiplier, p.min_take_profit_pips)
        sl, tp = _place(
            side,
            quote.reference_price(side),
            instrument.to_price(sl_pips),
            instrument.to_price(tp_pips),
        )
        return RiskLevels(sl=sl, tp=tp, sl_pips=sl_pips, tp_pips=tp_pips)

    def sizing_distance(
        self, entry_price: float, stop_loss: float, instrument: Instrument
    ) -> float:
        """Absolute price distance between entry and stop."""
        return abs(entry_price - stop_loss)


class AtrMultiplierPolicy:
    """Plain ATR multiples, sized against the fixed ``stop_loss_pips`` parameter."""

    def __init__(self, params: RiskParameters) -> None:
        self._params = params

    def levels(
        self, side: Side, quote: Quote, atr: float, instrument: Instrument
    ) -> RiskLevels:
        p = self._params
        sl_distance = atr * p.stop_loss_atr_multiplier
        tp_distance = atr * p.take_profit_atr_multiplier
        sl, tp = _place(side, quote.reference_price(side), sl_distance, tp_distance)
        return RiskLevels(
            sl=sl,
            tp=tp,
            sl_pips=instrument.to_pips(sl_distance),
            tp_pips=instrument.to_pips(tp_distance),
        )

    def sizing_distance(
        self, entry_price: float, stop_loss: float, instrument: Instrument
    ) -> float:
        """The configured stop-loss distance in pips, independent of the placed stop."""
        return self._params.stop_loss_pips


def clamp_stop_loss(
    entry_price: float,
    stop_loss: float,
    atr: float,
    side: Side,
    multiplier: float = 1.5,
) -> float:
    """Widen *stop_loss* so it sits at least ``multiplier × atr`` from entry.

    - **Buy**:  if ``entry - stop < min_distance`` → ``stop = entry - min_distance``
    - **Sell**: if ``stop - entry < min_distance`` → ``stop = entry + min_distance``

    A stop already far enough away is returned unchanged; the clamp never
    moves a stop closer to entry.
    """
    min_distance = atr * multiplier
    if side is Side.BUY and entry_price - stop_loss < min_distance:
        return entry_price - min_distance
    if side is Side.SELL and stop_loss - entry_price < min_distance:
        return entry_price + min_distance
    return stop_loss
