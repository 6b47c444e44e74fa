"""TrendForge — application configuration.

Loads .env variables into a typed config object.
Validates required variables and value ranges on startup.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from trendforge.errors import ConfigurationError


_REQUIRED_VARS = [
    "TRADE_SYMBOL",
]

_ATR_SMOOTHINGS = ("exponential", "simple")


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    trade_symbol: str
    strategy: str  # strategy registry key, e.g. "trend_following"
    short_ma_periods: int
    long_ma_periods: int
    macd_fast_periods: int
    macd_slow_periods: int
    macd_signal_periods: int
    rsi_periods: int
    rsi_overbought: float
    rsi_oversold: float
    atr_periods: int
    atr_smoothing: str  # "exponential" or "simple"
    risk_percentage: float
    stop_loss_pips: float
    take_profit_pips: float
    trailing_stop_pips: Optional[float]  # None = strategy default
    stop_loss_atr_multiplier: Optional[float]  # None = strategy default
    take_profit_atr_multiplier: Optional[float]  # None = strategy default
    pip_size: Optional[float]  # None = look up from trade_symbol
    volume_step: Optional[float]  # None = strategy default
    volume_min: Optional[float]  # None = strategy default
    fill_timeout_cycles: int
    log_level: str


def _read(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"Environment variable {name}={raw!r} is not a valid {cast.__name__}"
        ) from exc


def _read_optional(name: str) -> Optional[float]:
    if not os.environ.get(name):
        return None
    return _read(name, "", float)


def _validate(config: Config) -> None:
    positive_ints = (
        "short_ma_periods", "long_ma_periods", "macd_fast_periods",
        "macd_slow_periods", "macd_signal_periods", "rsi_periods", "atr_periods",
        "fill_timeout_cycles",
    )
    for name in positive_ints:
        if getattr(config, name) <= 0:
            raise ConfigurationError(f"{name} must be positive, got {getattr(config, name)}")
    if config.risk_percentage <= 0:
        raise ConfigurationError(
            f"risk_percentage must be positive, got {config.risk_percentage}"
        )
    if config.pip_size is not None and config.pip_size <= 0:
        raise ConfigurationError(f"pip_size must be positive, got {config.pip_size}")
    if config.volume_step is not None and config.volume_step <= 0:
        raise ConfigurationError(f"volume_step must be positive, got {config.volume_step}")
    if config.volume_min is not None and config.volume_min < 0:
        raise ConfigurationError(f"volume_min must not be negative, got {config.volume_min}")
    if not 0 <= config.rsi_oversold < config.rsi_overbought <= 100:
        raise ConfigurationError(
            f"RSI thresholds must satisfy 0 <= oversold < overbought <= 100, "
            f"got oversold={config.rsi_oversold}, overbought={config.rsi_overbought}"
        )
    if config.atr_smoothing not in _ATR_SMOOTHINGS:
        raise ConfigurationError(
            f"atr_smoothing must be one of {', '.join(_ATR_SMOOTHINGS)}, "
            f"got '{config.atr_smoothing}'"
        )


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ConfigurationError`` naming the offending variable when a
    required variable is absent or a value is unusable.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [v for v in _REQUIRED_VARS if not os.environ.get(v)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    config = Config(
        trade_symbol=os.environ["TRADE_SYMBOL"],
        strategy=os.environ.get("STRATEGY", "trend_following"),
        short_ma_periods=_read("SHORT_MA_PERIODS", "20", int),
        long_ma_periods=_read("LONG_MA_PERIODS", "50", int),
        macd_fast_periods=_read("MACD_FAST_PERIODS", "12", int),
        macd_slow_periods=_read("MACD_SLOW_PERIODS", "26", int),
        macd_signal_periods=_read("MACD_SIGNAL_PERIODS", "9", int),
        rsi_periods=_read("RSI_PERIODS", "14", int),
        rsi_overbought=_read("RSI_OVERBOUGHT", "70", float),
        rsi_oversold=_read("RSI_OVERSOLD", "30", float),
        atr_periods=_read("ATR_PERIODS", "14", int),
        atr_smoothing=os.environ.get("ATR_SMOOTHING", "exponential"),
        risk_percentage=_read("RISK_PERCENTAGE", "1.0", float),
        stop_loss_pips=_read("STOP_LOSS_PIPS", "30", float),
        take_profit_pips=_read("TAKE_PROFIT_PIPS", "50", float),
        trailing_stop_pips=_read_optional("TRAILING_STOP_PIPS"),
        stop_loss_atr_multiplier=_read_optional("STOP_LOSS_ATR_MULTIPLIER"),
        take_profit_atr_multiplier=_read_optional("TAKE_PROFIT_ATR_MULTIPLIER"),
        pip_size=_read_optional("PIP_SIZE"),
        volume_step=_read_optional("VOLUME_STEP"),
        volume_min=_read_optional("VOLUME_MIN"),
        fill_timeout_cycles=_read("FILL_TIMEOUT_CYCLES", "3", int),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
    _validate(config)
    return config


def configure_logging(level: str = "INFO") -> None:
    """Apply the standard log format to the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
