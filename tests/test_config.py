"""Tests for trendforge.config — environment variable loading and validation."""

import logging

import pytest

from trendforge.config import configure_logging, load_config
from trendforge.errors import ConfigurationError


_ENV_VARS = [
    "TRADE_SYMBOL",
    "STRATEGY",
    "SHORT_MA_PERIODS",
    "LONG_MA_PERIODS",
    "MACD_FAST_PERIODS",
    "MACD_SLOW_PERIODS",
    "MACD_SIGNAL_PERIODS",
    "RSI_PERIODS",
    "RSI_OVERBOUGHT",
    "RSI_OVERSOLD",
    "ATR_PERIODS",
    "ATR_SMOOTHING",
    "RISK_PERCENTAGE",
    "STOP_LOSS_PIPS",
    "TAKE_PROFIT_PIPS",
    "TRAILING_STOP_PIPS",
    "STOP_LOSS_ATR_MULTIPLIER",
    "TAKE_PROFIT_ATR_MULTIPLIER",
    "PIP_SIZE",
    "VOLUME_STEP",
    "VOLUME_MIN",
    "FILL_TIMEOUT_CYCLES",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure config env vars are cleared between tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def no_env_file(tmp_path):
    # non-existent path so load_dotenv doesn't pick up a real .env file
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:
    def test_loads_required_vars(self, monkeypatch, no_env_file):
        monkeypatch.setenv("TRADE_SYMBOL", "GBP_USD")
        cfg = load_config(env_path=no_env_file)
        assert cfg.trade_symbol == "GBP_USD"

    def test_defaults(self, monkeypatch, no_env_file):
        monkeypatch.setenv("TRADE_SYMBOL", "EUR_USD")
        cfg = load_config(env_path=no_env_file)
        assert cfg.strategy == "trend_following"
        assert cfg.short_ma_periods == 20
        assert cfg.long_ma_periods == 50
        assert (cfg.macd_fast_periods, cfg.macd_slow_periods, cfg.macd_signal_periods) == (12, 26, 9)
        assert cfg.rsi_periods == 14
        assert cfg.rsi_overbought == 70.0
        assert cfg.rsi_oversold == 30.0
        assert cfg.atr_periods == 14
        assert cfg.atr_smoothing == "exponential"
        assert cfg.risk_percentage == 1.0
        assert cfg.stop_loss_pips == 30.0
        assert cfg.take_profit_pips == 50.0
        assert cfg.trailing_stop_pips is None
        assert cfg.stop_loss_atr_multiplier is None
        assert cfg.take_profit_atr_multiplier is None
        assert cfg.pip_size is None
        assert cfg.volume_step is None
        assert cfg.volume_min is None
        assert cfg.fill_timeout_cycles == 3
        assert cfg.log_level == "INFO"

    def test_overrides(self, monkeypatch, no_env_file):
        monkeypatch.setenv("TRADE_SYMBOL", "EUR_USD")
        monkeypatch.setenv("STRATEGY", "price_action_rsi")
        monkeypatch.setenv("RSI_OVERBOUGHT", "80")
        monkeypatch.setenv("TRAILING_STOP_PIPS", "25")
        monkeypatch.setenv("PIP_SIZE", "0.0001")
        monkeypatch.setenv("ATR_SMOOTHING", "simple")
        monkeypatch.setenv("VOLUME_STEP", "1")
        cfg = load_config(env_path=no_env_file)
        assert cfg.strategy == "price_action_rsi"
        assert cfg.rsi_overbought == 80.0
        assert cfg.trailing_stop_pips == 25.0
        assert cfg.pip_size == 0.0001
        assert cfg.atr_smoothing == "simple"
        assert cfg.volume_step == 1.0

    def test_config_missing_var(self, no_env_file):
        with pytest.raises(ConfigurationError, match="TRADE_SYMBOL"):
            load_config(env_path=no_env_file)

    def test_loads_from_env_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TRADE_SYMBOL=USD_JPY\nRISK_PERCENTAGE=0.5\n")
        # register the vars so monkeypatch removes what load_dotenv sets
        for var in ("TRADE_SYMBOL", "RISK_PERCENTAGE"):
            monkeypatch.setenv(var, "")
            monkeypatch.delenv(var)
        cfg = load_config(env_path=str(env_file))
        assert cfg.trade_symbol == "USD_JPY"
        assert cfg.risk_percentage == 0.5

    def test_non_numeric_value_names_variable(self, monkeypatch, no_env_file):
        monkeypatch.setenv("TRADE_SYMBOL", "EUR_USD")
        monkeypatch.setenv("LONG_MA_PERIODS", "fifty")
        with pytest.raises(ConfigurationError, match="LONG_MA_PERIODS"):
            load_config(env_path=no_env_file)

    @pytest.mark.parametrize(
        "var, value, match",
        [
            ("RISK_PERCENTAGE", "0", "risk_percentage"),
            ("RISK_PERCENTAGE", "-1", "risk_percentage"),
            ("SHORT_MA_PERIODS", "0", "short_ma_periods"),
            ("PIP_SIZE", "-0.0001", "pip_size"),
            ("RSI_OVERSOLD", "75", "RSI thresholds"),
            ("ATR_SMOOTHING", "wilder", "atr_smoothing"),
            ("VOLUME_STEP", "0", "volume_step"),
            ("VOLUME_MIN", "-1", "volume_min"),
            ("FILL_TIMEOUT_CYCLES", "0", "fill_timeout_cycles"),
        ],
    )
    def test_invalid_values_rejected(self, monkeypatch, no_env_file, var, value, match):
        monkeypatch.setenv("TRADE_SYMBOL", "EUR_USD")
        monkeypatch.setenv(var, value)
        with pytest.raises(ConfigurationError, match=match):
            load_config(env_path=no_env_file)

    def test_frozen(self, monkeypatch, no_env_file):
        monkeypatch.setenv("TRADE_SYMBOL", "EUR_USD")
        cfg = load_config(env_path=no_env_file)
        with pytest.raises(AttributeError):
            cfg.risk_percentage = 5.0


class TestConfigureLogging:
    def test_applies_level_and_format(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        configure_logging("debug")
        assert calls["level"] == logging.DEBUG
        assert "%(name)s" in calls["format"]

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        configure_logging("chatty")
        assert calls["level"] == logging.INFO
