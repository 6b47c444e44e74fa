"""Execution-boundary models — what the core reads from and hands to the broker side.

The core speaks ``Side``; the broker speaks signed units.  The adapters at
the bottom of this module are the only place the two meet.
"""

from dataclasses import dataclass, field
from typing import Optional

from trendforge.strategy.models import Instrument, Side, TradeIntent


@dataclass(frozen=True)
class OpenPosition:
    """An open position owned by the execution collaborator."""

    position_id: str
    symbol: str
    side: Side
    entry_price: float
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None


@dataclass(frozen=True)
class AccountState:
    """Balance and open positions, as reported for the current cycle."""

    balance: float
    open_positions: tuple[OpenPosition, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StopLossModification:
    """Request to move the stop-loss of an existing position."""

    position_id: str
    stop_loss: float
    take_profit: Optional[float] = None


@dataclass(frozen=True)
class OrderRequest:
    """A market order request payload."""

    instrument: str
    units: float  # positive=buy, negative=sell
    stop_loss_price: float
    take_profit_price: float
    comment: str = ""


@dataclass(frozen=True)
class TradeModifyRequest:
    """A stop-loss/take-profit amendment payload for one open trade."""

    trade_id: str
    stop_loss_price: float
    take_profit_price: Optional[float] = None


# ── Adapters ─────────────────────────────────────────────────────────────


def to_order_request(intent: TradeIntent, instrument: Instrument) -> OrderRequest:
    """Map a ``TradeIntent`` onto a signed-units market order.

    Prices are rounded to the instrument's quoted digits.
    """
    units = intent.volume if intent.side is Side.BUY else -intent.volume
    return OrderRequest(
        instrument=instrument.symbol,
        units=units,
        stop_loss_price=round(intent.stop_loss, instrument.digits),
        take_profit_price=round(intent.take_profit, instrument.digits),
        comment=intent.reason,
    )


def to_modify_request(modification: StopLossModification) -> TradeModifyRequest:
    return TradeModifyRequest(
        trade_id=modification.position_id,
        stop_loss_price=modification.stop_loss,
        take_profit_price=modification.take_profit,
    )


def side_from_units(units: float) -> Side:
    """Broker positions report direction as the sign of their units."""
    if units == 0:
        raise ValueError("units must be non-zero to infer a side")
    return Side.BUY if units > 0 else Side.SELL


def to_open_position(
    trade_id: str,
    instrument: str,
    units: float,
    price: float,
    stop_loss_price: Optional[float] = None,
    take_profit_price: Optional[float] = None,
) -> OpenPosition:
    """Build an ``OpenPosition`` from a broker trade record."""
    return OpenPosition(
        position_id=trade_id,
        symbol=instrument,
        side=side_from_units(units),
        entry_price=price,
        stop_loss=stop_loss_price,
        take_profit=take_profit_price,
    )
