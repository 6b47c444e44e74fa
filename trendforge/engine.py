"""TrendForge — decision engine (one instance per traded symbol).

Connects entry rule, risk policy and trailing-stop guard into one synchronous
evaluation per closed bar.  The engine emits decisions only; placing and
amending orders is left to the caller.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from trendforge.broker.models import AccountState, StopLossModification
from trendforge.errors import ConfigurationError, InsufficientHistory, InvalidSizing
from trendforge.risk.position_sizer import calculate_volume, normalize_volume
from trendforge.risk.sl_tp import RiskPolicy, clamp_stop_loss
from trendforge.risk.trailing_stop import TrailingStopGuard
from trendforge.strategy.base import EntryRule
from trendforge.strategy.levels import calculate_levels
from trendforge.strategy.models import (
    Instrument,
    LevelSet,
    Quote,
    RiskParameters,
    TradeIntent,
)
from trendforge.strategy.series import BarSeries, IndicatorSnapshot

logger = logging.getLogger("trendforge")


class EngineState(str, Enum):
    FLAT = "flat"
    IN_POSITION = "in_position"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one evaluation cycle.

    ``action`` is one of ``"order_intent"``, ``"in_position"`` or
    ``"skipped"``; ``reason`` names why.
    """

    action: str
    reason: str
    intent: Optional[TradeIntent] = None
    modifications: list[StopLossModification] = field(default_factory=list)
    levels: Optional[LevelSet] = None


class DecisionEngine:
    """Evaluates one symbol, one bar at a time.

    Args:
        instrument: Pip/volume constants for the traded symbol.
        rule: Entry rule deciding trade/no-trade and side.
        risk_policy: Stop/target placement and sizing distance.
        risk_params: Risk percentage, clamp multiplier and trailing distance.
        level_window: Bars used for the Fibonacci range of the level set.
        fill_timeout_cycles: Cycles to wait for an emitted intent to show up
            as an open position before assuming it was filled and closed
            in between and returning to flat.
    """

    def __init__(
        self,
        instrument: Instrument,
        rule: EntryRule,
        risk_policy: RiskPolicy,
        risk_params: RiskParameters,
        level_window: int = 14,
        fill_timeout_cycles: int = 3,
    ) -> None:
        if fill_timeout_cycles < 1:
            raise ConfigurationError(
                f"fill_timeout_cycles must be at least 1, got {fill_timeout_cycles}"
            )
        self._instrument = instrument
        self._rule = rule
        self._policy = risk_policy
        self._params = risk_params
        self._level_window = level_window
        self._fill_timeout = fill_timeout_cycles
        self._pending_cycles = 0
        self._guard: Optional[TrailingStopGuard] = None
        if risk_params.trailing_stop_pips:
            self._guard = TrailingStopGuard(risk_params.trailing_stop_pips, instrument)

        self._state = EngineState.FLAT
        # True between emitting an intent and first seeing the filled position
        self._awaiting_fill = False
        self.levels: Optional[LevelSet] = None
        self.last_insight: dict = {}

    @property
    def symbol(self) -> str:
        return self._instrument.symbol

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_position_open(self) -> bool:
        return self._state is EngineState.IN_POSITION

    # ── State transitions ────────────────────────────────────────────────

    def order_resolved(self) -> None:
        """Return to flat once the emitted order is finished with.

        Call when the execution side reports the order rejected, or filled
        and already closed before any cycle saw the position.  Has no effect
        once the position has been observed; its disappearance from the
        account is what flattens the engine then.
        """
        if self._awaiting_fill:
            logger.info("%s — pending order resolved, engine flat", self.symbol)
            self._clear_pending()
            self._state = EngineState.FLAT

    def _clear_pending(self) -> None:
        self._awaiting_fill = False
        self._pending_cycles = 0

    def _sync_position_state(self, has_position: bool) -> None:
        if has_position:
            if self._state is EngineState.FLAT:
                logger.debug("%s — open position observed, engine in position", self.symbol)
            self._state = EngineState.IN_POSITION
            self._clear_pending()
        elif self._awaiting_fill:
            self._pending_cycles += 1
            if self._pending_cycles >= self._fill_timeout:
                logger.warning(
                    "%s — no position seen %d cycle(s) after the order intent; "
                    "assuming it closed, engine flat",
                    self.symbol, self._pending_cycles,
                )
                self._clear_pending()
                self._state = EngineState.FLAT
        elif self._state is EngineState.IN_POSITION:
            logger.debug("%s — position closed, engine flat", self.symbol)
            self._state = EngineState.FLAT

    # ── Single cycle ─────────────────────────────────────────────────────

    def evaluate(
        self,
        bars: BarSeries,
        snapshot: IndicatorSnapshot,
        quote: Quote,
        account: AccountState,
    ) -> CycleResult:
        """Run one evaluation cycle.

        Returns a ``CycleResult``:

        - ``action="in_position"`` while a position (or an unfilled intent)
          exists for the symbol; only trailing-stop modifications are produced.
        - ``action="skipped"`` when no signal is found or sizing fails.
        - ``action="order_intent"`` with the ``TradeIntent`` to submit.

        Raises ``ValueError`` if *snapshot* is not aligned with *bars*.
        """
        if snapshot.length != len(bars):
            raise ValueError(
                f"snapshot covers {snapshot.length} bars, bar series has {len(bars)}"
            )

        positions = [p for p in account.open_positions if p.symbol == self.symbol]
        modifications = self._guard.review(positions) if self._guard else []
        for mod in modifications:
            logger.info(
                "%s — trailing stop for position %s → %.5f",
                self.symbol, mod.position_id, mod.stop_loss,
            )

        try:
            self.levels = calculate_levels(bars, self._level_window)
        except InsufficientHistory as exc:
            logger.debug("%s — levels unavailable: %s", self.symbol, exc)
            self.levels = None

        self._sync_position_state(bool(positions))

        insight: dict = {
            "strategy": self._rule.name,
            "symbol": self.symbol,
            "state": self._state.value,
            "levels": (
                {
                    "support": self.levels.support_level,
                    "resistance": self.levels.resistance_level,
                    "pivot": self.levels.pivot,
                }
                if self.levels else None
            ),
            "checks": {},
        }

        if self._state is EngineState.IN_POSITION:
            insight["result"] = "in_position"
            self.last_insight = insight
            return CycleResult(
                action="in_position",
                reason="position_open",
                modifications=modifications,
                levels=self.levels,
            )

        # 1 ── Entry rule
        outcome = self._rule.evaluate(bars, snapshot)
        insight["checks"] = dict(outcome.checks)
        if outcome.side is None:
            insight["result"] = outcome.reason
            self.last_insight = insight
            return CycleResult(
                action="skipped",
                reason=outcome.reason,
                modifications=modifications,
                levels=self.levels,
            )

        side = outcome.side
        entry_price = quote.entry_price(side)

        # 2 ── Stops, clamp and sizing
        try:
            atr = snapshot["atr"].last
            if not (math.isfinite(atr) and atr > 0):
                raise InvalidSizing(f"ATR must be positive, got {atr}")
            risk_levels = self._policy.levels(side, quote, atr, self._instrument)
            stop_loss = clamp_stop_loss(
                entry_price,
                risk_levels.sl,
                atr,
                side,
                self._params.min_stop_atr_multiplier,
            )
            distance = self._policy.sizing_distance(
                entry_price, stop_loss, self._instrument
            )
            raw_volume = calculate_volume(
                account.balance, self._params.risk_percentage, distance
            )
            volume = normalize_volume(raw_volume, self._instrument)
        except (InvalidSizing, InsufficientHistory) as exc:
            logger.warning(
                "%s — %s signal dropped, sizing failed: %s",
                self.symbol, side.value, exc,
            )
            insight["result"] = "invalid_sizing"
            insight["sizing_error"] = str(exc)
            self.last_insight = insight
            return CycleResult(
                action="skipped",
                reason="invalid_sizing",
                modifications=modifications,
                levels=self.levels,
            )

        digits = self._instrument.digits
        intent = TradeIntent(
            side=side,
            entry_price=entry_price,
            stop_loss=round(stop_loss, digits),
            take_profit=round(risk_levels.tp, digits),
            volume=volume,
            reason=outcome.reason,
        )

        self._state = EngineState.IN_POSITION
        self._awaiting_fill = True

        logger.info(
            "%s — %s %.2f @ %.5f (SL %.5f, TP %.5f): %s",
            self.symbol, side.value, volume, entry_price,
            intent.stop_loss, intent.take_profit, intent.reason,
        )
        insight["result"] = "signal_found"
        insight["signal"] = {
            "side": side.value,
            "entry": entry_price,
            "sl": intent.stop_loss,
            "tp": intent.take_profit,
            "sl_pips": round(risk_levels.sl_pips, 1),
            "tp_pips": round(risk_levels.tp_pips, 1),
            "volume": volume,
            "reason": intent.reason,
        }
        self.last_insight = insight

        return CycleResult(
            action="order_intent",
            reason="signal_found",
            intent=intent,
            modifications=modifications,
            levels=self.levels,
        )
