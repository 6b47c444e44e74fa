"""Strategy registry — maps strategy names to their entry rule and risk policy.

Used by ``build_engine`` to wire a ``DecisionEngine`` from a ``Config``.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from trendforge.config import Config
from trendforge.engine import DecisionEngine
from trendforge.errors import ConfigurationError
from trendforge.risk.sl_tp import AtrMultiplierPolicy, AtrPipFloorPolicy, RiskPolicy
from trendforge.strategy.base import EntryRule
from trendforge.strategy.models import (
    INSTRUMENT_DIGITS,
    INSTRUMENT_PIP_SIZES,
    Instrument,
    RiskParameters,
)
from trendforge.strategy.rsi_reversal import PriceActionRSIRule
from trendforge.strategy.trend_following import TrendConfirmationRule


@dataclass(frozen=True)
class StrategyVariant:
    """Entry rule, risk policy and risk defaults for one strategy."""

    rule_factory: Callable[[Config], EntryRule]
    policy_factory: Callable[[RiskParameters], RiskPolicy]
    stop_loss_atr_multiplier: float
    take_profit_atr_multiplier: float
    trailing_stop_pips: Optional[float]
    volume_step: float
    volume_min: float


STRATEGY_REGISTRY: dict[str, StrategyVariant] = {
    "trend_following": StrategyVariant(
        rule_factory=lambda config: TrendConfirmationRule(),
        policy_factory=AtrPipFloorPolicy,
        stop_loss_atr_multiplier=2.0,
        take_profit_atr_multiplier=10.0,
        trailing_stop_pips=None,
        volume_step=1000.0,
        volume_min=1000.0,
    ),
    "price_action_rsi": StrategyVariant(
        rule_factory=lambda config: PriceActionRSIRule(
            overbought=config.rsi_overbought,
            oversold=config.rsi_oversold,
        ),
        policy_factory=AtrMultiplierPolicy,
        stop_loss_atr_multiplier=2.0,
        take_profit_atr_multiplier=3.0,
        trailing_stop_pips=20.0,
        # sized as risk / stop_loss_pips, so volume is in units of one
        volume_step=1.0,
        volume_min=1.0,
    ),
}


def _pick(value, default):
    return default if value is None else value


def get_variant(name: str) -> StrategyVariant:
    """Look up a strategy variant by registry key.

    Raises ``ConfigurationError`` if the strategy name is not registered.
    """
    if name not in STRATEGY_REGISTRY:
        raise ConfigurationError(
            f"Unknown strategy '{name}'. "
            f"Available: {', '.join(STRATEGY_REGISTRY.keys())}"
        )
    return STRATEGY_REGISTRY[name]


def instrument_from_config(
    config: Config, variant: Optional[StrategyVariant] = None
) -> Instrument:
    """Resolve pip size and volume increments for the configured symbol.

    Volume settings left unset fall back to the strategy variant's defaults.
    """
    if variant is None:
        variant = get_variant(config.strategy)
    pip_size = config.pip_size
    if pip_size is None:
        pip_size = INSTRUMENT_PIP_SIZES.get(config.trade_symbol)
    if pip_size is None:
        raise ConfigurationError(
            f"No pip size known for '{config.trade_symbol}'; set PIP_SIZE"
        )
    return Instrument(
        symbol=config.trade_symbol,
        pip_size=pip_size,
        volume_step=_pick(config.volume_step, variant.volume_step),
        volume_min=_pick(config.volume_min, variant.volume_min),
        digits=INSTRUMENT_DIGITS.get(config.trade_symbol, 5),
    )


def risk_parameters_from_config(config: Config, variant: StrategyVariant) -> RiskParameters:
    """Merge configured overrides onto the variant's risk defaults."""
    return RiskParameters(
        risk_percentage=config.risk_percentage,
        stop_loss_atr_multiplier=_pick(
            config.stop_loss_atr_multiplier, variant.stop_loss_atr_multiplier
        ),
        take_profit_atr_multiplier=_pick(
            config.take_profit_atr_multiplier, variant.take_profit_atr_multiplier
        ),
        trailing_stop_pips=_pick(config.trailing_stop_pips, variant.trailing_stop_pips),
        stop_loss_pips=config.stop_loss_pips,
        take_profit_pips=config.take_profit_pips,
    )


def build_engine(config: Config) -> DecisionEngine:
    """Wire a ``DecisionEngine`` for ``config.trade_symbol``.

    Raises ``ConfigurationError`` for an unknown strategy or invalid settings.
    """
    variant = get_variant(config.strategy)
    params = risk_parameters_from_config(config, variant)
    return DecisionEngine(
        instrument=instrument_from_config(config, variant),
        rule=variant.rule_factory(config),
        risk_policy=variant.policy_factory(params),
        risk_params=params,
        fill_timeout_cycles=config.fill_timeout_cycles,
    )
