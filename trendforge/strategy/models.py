"""Strategy data models — typed representations shared by detectors, risk and engine."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from trendforge.errors import ConfigurationError


@dataclass(frozen=True)
class Bar:
    """A single closed price bar."""

    time: str
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


class Side(str, Enum):
    """Trade side, shared by every component of the engine."""

    BUY = "buy"
    SELL = "sell"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class LevelSet:
    """Support and resistance levels for the current bar."""

    support_level: float
    resistance_level: float
    pivot: float


@dataclass(frozen=True)
class Quote:
    """Live bid/ask pair for the traded instrument."""

    bid: float
    ask: float

    def entry_price(self, side: Side) -> float:
        """Buys fill at the ask, sells at the bid."""
        return self.ask if side is Side.BUY else self.bid

    def reference_price(self, side: Side) -> float:
        """Price that stop and target distances are measured from.

        Buys are protected below the bid, sells above the ask.
        """
        return self.bid if side is Side.BUY else self.ask


@dataclass(frozen=True)
class RiskParameters:
    """Risk configuration, immutable for the whole run.

    Raises ``ConfigurationError`` on construction if any value would make
    sizing meaningless.
    """

    risk_percentage: float = 1.0
    stop_loss_atr_multiplier: float = 2.0
    take_profit_atr_multiplier: float = 10.0
    min_stop_loss_pips: float = 15.0
    min_take_profit_pips: float = 45.0
    trailing_stop_pips: Optional[float] = None
    stop_loss_pips: float = 30.0
    take_profit_pips: float = 50.0
    min_stop_atr_multiplier: float = 1.5

    def __post_init__(self) -> None:
        if not self.risk_percentage > 0:
            raise ConfigurationError(
                f"risk_percentage must be positive, got {self.risk_percentage}"
            )
        if not self.stop_loss_pips > 0:
            raise ConfigurationError(
                f"stop_loss_pips must be positive, got {self.stop_loss_pips}"
            )
        for name in ("stop_loss_atr_multiplier", "take_profit_atr_multiplier"):
            if not getattr(self, name) > 0:
                raise ConfigurationError(
                    f"{name} must be positive, got {getattr(self, name)}"
                )
        if self.trailing_stop_pips is not None and self.trailing_stop_pips < 0:
            raise ConfigurationError(
                f"trailing_stop_pips must not be negative, got {self.trailing_stop_pips}"
            )


@dataclass(frozen=True)
class Instrument:
    """Pip and volume constants for a traded symbol."""

    symbol: str
    pip_size: float
    volume_step: float = 1000.0
    volume_min: float = 1000.0
    volume_max: Optional[float] = None
    digits: int = 5

    def __post_init__(self) -> None:
        if not (math.isfinite(self.pip_size) and self.pip_size > 0):
            raise ConfigurationError(
                f"pip_size must be positive for {self.symbol}, got {self.pip_size}"
            )
        if not self.volume_step > 0:
            raise ConfigurationError(
                f"volume_step must be positive for {self.symbol}, got {self.volume_step}"
            )
        if self.volume_min < 0:
            raise ConfigurationError(
                f"volume_min must not be negative for {self.symbol}, got {self.volume_min}"
            )
        if self.volume_max is not None and self.volume_max < self.volume_min:
            raise ConfigurationError(
                f"volume_max ({self.volume_max}) is below volume_min ({self.volume_min})"
            )

    def to_pips(self, price_distance: float) -> float:
        return price_distance / self.pip_size

    def to_price(self, pips: float) -> float:
        return pips * self.pip_size


@dataclass(frozen=True)
class TradeIntent:
    """An accepted entry decision, handed to the execution collaborator."""

    side: Side
    entry_price: float
    stop_loss: float
    take_profit: float
    volume: float
    reason: str


# ── Instrument metadata ──────────────────────────────────────────────────

INSTRUMENT_PIP_SIZES: dict[str, float] = {
    "EUR_USD": 0.0001,
    "GBP_USD": 0.0001,
    "USD_JPY": 0.01,
    "USD_CHF": 0.0001,
    "AUD_USD": 0.0001,
    "NZD_USD": 0.0001,
    "USD_CAD": 0.0001,
    "XAU_USD": 0.01,
    "XAG_USD": 0.001,
}

INSTRUMENT_DIGITS: dict[str, int] = {
    "USD_JPY": 3,
    "XAU_USD": 2,
    "XAG_USD": 3,
}
