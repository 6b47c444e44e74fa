"""TrendForge — command-line entry point.

Loads configuration, evaluates the latest closed bar of a JSON bar file and
prints the engine's decision.  Order placement stays with the caller.

Usage::

    python -m trendforge.main --bars bars.json --bid 1.0998 --ask 1.1000 --balance 10000
"""

import argparse
import json
import logging

from trendforge.broker.models import AccountState
from trendforge.config import Config, configure_logging, load_config
from trendforge.engine import CycleResult
from trendforge.strategy.models import Bar, Quote
from trendforge.strategy.registry import build_engine
from trendforge.strategy.series import BarSeries
from trendforge.strategy.snapshot import IndicatorSettings, build_snapshot

logger = logging.getLogger("trendforge")


def load_bars(path: str) -> BarSeries:
    """Read closed bars from a JSON list of ``{time, open, high, low, close, volume}``."""
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    return BarSeries(
        Bar(
            time=r["time"],
            open=float(r["open"]),
            high=float(r["high"]),
            low=float(r["low"]),
            close=float(r["close"]),
            volume=int(r.get("volume", 0)),
        )
        for r in records
    )


def run_once(config: Config, bars: BarSeries, quote: Quote, balance: float) -> CycleResult:
    """Build the configured engine and evaluate one cycle with no open positions."""
    engine = build_engine(config)
    snapshot = build_snapshot(bars, IndicatorSettings.from_config(config))
    return engine.evaluate(bars, snapshot, quote, AccountState(balance=balance))


def print_result(symbol: str, result: CycleResult) -> str:
    """Format and print one cycle result.

    Returns:
        The formatted string (also printed to stdout).
    """
    lines = [
        f"──────────────── TrendForge {symbol} ────────────────",
        f"  Action:      {result.action}",
        f"  Reason:      {result.reason}",
    ]
    if result.levels is not None:
        lines.append(
            f"  Levels:      S {result.levels.support_level:.5f}"
            f" / P {result.levels.pivot:.5f}"
            f" / R {result.levels.resistance_level:.5f}"
        )
    intent = result.intent
    if intent is not None:
        lines += [
            f"  Side:        {intent.side.value}",
            f"  Entry:       {intent.entry_price:.5f}",
            f"  Stop loss:   {intent.stop_loss:.5f}",
            f"  Take profit: {intent.take_profit:.5f}",
            f"  Volume:      {intent.volume:g}",
            f"  Note:        {intent.reason}",
        ]
    output = "\n".join(lines)
    print(output)
    return output


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, evaluate once and print the decision."""
    parser = argparse.ArgumentParser(description="TrendForge trade decision engine")
    parser.add_argument("--bars", required=True, help="JSON file of closed bars, oldest first")
    parser.add_argument("--bid", type=float, required=True, help="Current bid price")
    parser.add_argument("--ask", type=float, required=True, help="Current ask price")
    parser.add_argument("--balance", type=float, required=True, help="Account balance")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    args = parser.parse_args(argv)

    config = load_config(args.env_file)
    configure_logging(config.log_level)

    bars = load_bars(args.bars)
    logger.info(
        "Evaluating %s (%s) over %d bar(s)",
        config.trade_symbol, config.strategy, len(bars),
    )
    result = run_once(config, bars, Quote(bid=args.bid, ask=args.ask), args.balance)
    print_result(config.trade_symbol, result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
