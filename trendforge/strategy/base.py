"""Entry-rule protocol and shared outcome type.

Defines the interface that both strategy variants implement, so the engine
doesn't need to know which signals produced a decision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from trendforge.strategy.models import Side
from trendforge.strategy.series import BarSeries, IndicatorSnapshot


@dataclass(frozen=True)
class RuleOutcome:
    """Verdict of one entry-rule evaluation.

    ``side`` is ``None`` when no trade is warranted.  ``checks`` records
    every sub-signal so the engine can expose why a decision was made.
    """

    side: Optional[Side]
    reason: str
    checks: dict[str, object] = field(default_factory=dict)


@runtime_checkable
class EntryRule(Protocol):
    """Interface that all entry rules must satisfy."""

    name: str

    def evaluate(self, bars: BarSeries, snapshot: IndicatorSnapshot) -> RuleOutcome:
        """Evaluate the latest bar and return a trade side or none."""
        ...
