"""Tests for trendforge.broker.models — mapping between core decisions and broker payloads."""

import pytest

from trendforge.broker.models import (
    AccountState,
    OpenPosition,
    StopLossModification,
    side_from_units,
    to_modify_request,
    to_open_position,
    to_order_request,
)
from trendforge.strategy.models import Instrument, Side, TradeIntent


EUR_USD = Instrument(symbol="EUR_USD", pip_size=0.0001)


def _intent(side: Side = Side.BUY, volume: float = 24_000.0) -> TradeIntent:
    return TradeIntent(
        side=side,
        entry_price=1.2000,
        stop_loss=1.195800000001,
        take_profit=1.219799999999,
        volume=volume,
        reason="Trend Following Order: up-crossover confirmed by momentum",
    )


class TestOrderRequest:

    def test_buy_intent_maps_to_positive_units(self):
        req = to_order_request(_intent(), EUR_USD)
        assert req.instrument == "EUR_USD"
        assert req.units == 24_000.0
        assert req.stop_loss_price == 1.1958
        assert req.take_profit_price == 1.2198
        assert req.comment.startswith("Trend Following Order")

    def test_sell_intent_maps_to_negative_units(self):
        req = to_order_request(_intent(Side.SELL, 5_000.0), EUR_USD)
        assert req.units == -5_000.0

    def test_prices_rounded_to_instrument_digits(self):
        xau = Instrument("XAU_USD", 0.01, digits=2)
        intent = TradeIntent(Side.BUY, 2400.0, 2390.004, 2430.996, 1.0, "r")
        req = to_order_request(intent, xau)
        assert req.stop_loss_price == 2390.0
        assert req.take_profit_price == 2431.0


class TestModifyRequest:

    def test_modification_maps_to_trade_modify(self):
        req = to_modify_request(StopLossModification("42", 1.2020, take_profit=1.2100))
        assert req.trade_id == "42"
        assert req.stop_loss_price == 1.2020
        assert req.take_profit_price == 1.2100

    def test_take_profit_optional(self):
        assert to_modify_request(StopLossModification("42", 1.2020)).take_profit_price is None


class TestOpenPosition:

    def test_side_from_units(self):
        assert side_from_units(1000) is Side.BUY
        assert side_from_units(-1000) is Side.SELL

    def test_zero_units_rejected(self):
        with pytest.raises(ValueError, match="non-zero"):
            side_from_units(0)

    def test_trade_record_to_position(self):
        pos = to_open_position("17", "EUR_USD", -3000, 1.2000, stop_loss_price=1.2040)
        assert pos == OpenPosition(
            position_id="17",
            symbol="EUR_USD",
            side=Side.SELL,
            entry_price=1.2000,
            stop_loss=1.2040,
            take_profit=None,
        )

    def test_account_state_defaults_to_no_positions(self):
        account = AccountState(balance=10_000.0)
        assert account.open_positions == ()
