"""Tests for the strategy registry and engine wiring."""

import pytest

from trendforge.broker.models import AccountState
from trendforge.config import Config
from trendforge.engine import DecisionEngine
from trendforge.errors import ConfigurationError
from trendforge.risk.sl_tp import AtrMultiplierPolicy, AtrPipFloorPolicy
from trendforge.strategy.models import Bar, Quote, Side
from trendforge.strategy.registry import (
    STRATEGY_REGISTRY,
    build_engine,
    get_variant,
    instrument_from_config,
    risk_parameters_from_config,
)
from trendforge.strategy.rsi_reversal import PriceActionRSIRule
from trendforge.strategy.series import BarSeries, IndicatorSnapshot
from trendforge.strategy.trend_following import TrendConfirmationRule


def _make_config(**overrides) -> Config:
    """Build a Config with sensible test defaults."""
    defaults = dict(
        trade_symbol="EUR_USD",
        strategy="trend_following",
        short_ma_periods=20,
        long_ma_periods=50,
        macd_fast_periods=12,
        macd_slow_periods=26,
        macd_signal_periods=9,
        rsi_periods=14,
        rsi_overbought=70.0,
        rsi_oversold=30.0,
        atr_periods=14,
        atr_smoothing="exponential",
        risk_percentage=1.0,
        stop_loss_pips=30.0,
        take_profit_pips=50.0,
        trailing_stop_pips=None,
        stop_loss_atr_multiplier=None,
        take_profit_atr_multiplier=None,
        pip_size=None,
        volume_step=None,
        volume_min=None,
        fill_timeout_cycles=3,
        log_level="WARNING",
    )
    defaults.update(overrides)
    return Config(**defaults)


class TestRegistry:

    def test_both_variants_registered(self):
        assert set(STRATEGY_REGISTRY) == {"trend_following", "price_action_rsi"}

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError, match="Unknown strategy 'scalper'"):
            get_variant("scalper")

    def test_trend_following_wiring(self):
        engine = build_engine(_make_config())
        assert isinstance(engine, DecisionEngine)
        assert isinstance(engine._rule, TrendConfirmationRule)
        assert isinstance(engine._policy, AtrPipFloorPolicy)
        assert engine._params.take_profit_atr_multiplier == 10.0
        assert engine._guard is None

    def test_price_action_rsi_wiring(self):
        engine = build_engine(
            _make_config(strategy="price_action_rsi", rsi_overbought=80.0)
        )
        assert isinstance(engine._rule, PriceActionRSIRule)
        assert engine._rule.overbought == 80.0
        assert isinstance(engine._policy, AtrMultiplierPolicy)
        assert engine._params.take_profit_atr_multiplier == 3.0
        assert engine._guard is not None
        assert engine._guard.trailing_stop_pips == 20.0

    def test_configured_overrides_win(self):
        variant = get_variant("price_action_rsi")
        params = risk_parameters_from_config(
            _make_config(take_profit_atr_multiplier=4.0, trailing_stop_pips=0.0),
            variant,
        )
        assert params.take_profit_atr_multiplier == 4.0
        assert params.stop_loss_atr_multiplier == 2.0
        # zero disables trailing
        assert params.trailing_stop_pips == 0.0

    def test_trailing_disabled_by_zero(self):
        engine = build_engine(
            _make_config(strategy="price_action_rsi", trailing_stop_pips=0.0)
        )
        assert engine._guard is None


class TestInstrumentFromConfig:

    def test_known_symbol(self):
        instrument = instrument_from_config(_make_config(trade_symbol="USD_JPY"))
        assert instrument.pip_size == 0.01
        assert instrument.digits == 3
        assert instrument.volume_step == 1000.0

    def test_explicit_pip_size(self):
        instrument = instrument_from_config(
            _make_config(trade_symbol="BTC_USD", pip_size=1.0)
        )
        assert instrument.pip_size == 1.0
        assert instrument.digits == 5

    def test_unknown_pip_size(self):
        with pytest.raises(ConfigurationError, match="PIP_SIZE"):
            build_engine(_make_config(trade_symbol="BTC_USD"))

    def test_volume_defaults_follow_strategy(self):
        trend = instrument_from_config(_make_config())
        rsi = instrument_from_config(_make_config(strategy="price_action_rsi"))
        assert (trend.volume_step, trend.volume_min) == (1000.0, 1000.0)
        assert (rsi.volume_step, rsi.volume_min) == (1.0, 1.0)

    def test_configured_volume_wins(self):
        instrument = instrument_from_config(
            _make_config(strategy="price_action_rsi", volume_step=1000.0, volume_min=1000.0)
        )
        assert instrument.volume_step == 1000.0


class TestDefaultConfigTrades:
    """Each registered strategy can emit an order under its default settings."""

    @staticmethod
    def _bars(count: int = 20) -> BarSeries:
        return BarSeries(
            Bar(
                time=f"2025-01-01T00:{i:02d}:00Z",
                open=1.2000, high=1.2050, low=1.1950, close=1.2000, volume=1000,
            )
            for i in range(count)
        )

    @staticmethod
    def _series(last: float, count: int = 20) -> list[float]:
        return [float("nan")] * (count - 1) + [last]

    def test_price_action_rsi_sells_with_default_volume(self):
        engine = build_engine(_make_config(strategy="price_action_rsi"))
        snapshot = IndicatorSnapshot({
            "rsi": self._series(75.0),
            "short_ma": self._series(1.19),
            "long_ma": self._series(1.20),
            "bb_upper": self._series(1.21),
            "bb_lower": self._series(1.19),
            "atr": self._series(0.0020),
        })
        result = engine.evaluate(
            self._bars(), snapshot, Quote(bid=1.1998, ask=1.2000),
            AccountState(balance=10_000.0),
        )

        assert result.action == "order_intent"
        assert result.intent.side is Side.SELL
        # 100 / 30 pips = 3.33 → nearest unit
        assert result.intent.volume == 3.0

    def test_fill_timeout_passed_to_engine(self):
        engine = build_engine(_make_config(fill_timeout_cycles=5))
        assert engine._fill_timeout == 5
