"""Position sizing — pure math, no I/O.

Converts the account risk budget and a stop distance into a volume, then
normalizes it to the instrument's tradeable increments.
"""

import math

from trendforge.errors import InvalidSizing
from trendforge.strategy.models import Instrument


def calculate_volume(
    balance: float,
    risk_percentage: float,
    stop_distance: float,
) -> float:
    """Calculate the raw (un-normalized) position size.

    Formula::

        risk_amount = balance × (risk_percentage / 100)
        volume      = risk_amount / stop_distance

    Args:
        balance: Current account balance (e.g. 10_000.0).
        risk_percentage: Percentage of balance to risk (e.g. 1.0 for 1 %).
        stop_distance: Distance the risk is spread over, in the units the
            active risk policy sizes against.

    Raises:
        InvalidSizing: If the stop distance or the resulting size is not
            strictly positive.
    """
    if not (math.isfinite(stop_distance) and stop_distance > 0):
        raise InvalidSizing(f"stop_distance must be positive, got {stop_distance}")

    risk_amount = balance * (risk_percentage / 100.0)
    volume = risk_amount / stop_distance
    if not (math.isfinite(volume) and volume > 0):
        raise InvalidSizing(
            f"position size must be positive, got {volume} "
            f"(balance={balance}, risk_percentage={risk_percentage})"
        )
    return volume


def normalize_volume(raw_volume: float, instrument: Instrument) -> float:
    """Round *raw_volume* to the nearest ``volume_step``.

    Halves round away from zero.  The result is capped at ``volume_max``
    when the instrument defines one.

    Raises:
        InvalidSizing: If the rounded volume is zero or below ``volume_min``.
    """
    step = instrument.volume_step
    steps = math.floor(raw_volume / step + 0.5)
    volume = steps * step
    # strip float noise from step multiplication (e.g. 3 * 0.1)
    volume = round(volume, 10)

    if instrument.volume_max is not None and volume > instrument.volume_max:
        volume = instrument.volume_max

    if volume <= 0 or volume < instrument.volume_min:
        raise InvalidSizing(
            f"volume {raw_volume:.4f} normalizes to {volume}, "
            f"below minimum {instrument.volume_min} for {instrument.symbol}"
        )
    return volume
