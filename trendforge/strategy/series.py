"""Bar history and indicator feeds, queryable by offset from the latest bar.

Every series is stored oldest-first.  Offsets count backwards: ``last(0)`` /
``.last`` is the most recent value, ``prior(k)`` is *k* bars back.  Reaching
past the start of history raises ``InsufficientHistory``.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence

from trendforge.errors import InsufficientHistory
from trendforge.strategy.models import Bar


def _index_for(offset: int, length: int, what: str) -> int:
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    if offset >= length:
        raise InsufficientHistory(
            f"{what}: offset {offset} requested, only {length} value(s) available"
        )
    return length - 1 - offset


class BarSeries:
    """Ordered, appendable sequence of closed bars (newest last)."""

    def __init__(self, bars: Iterable[Bar] = ()) -> None:
        self._bars: list[Bar] = []
        for bar in bars:
            self.append(bar)

    def append(self, bar: Bar) -> None:
        """Add a newly closed bar.

        Raises ``ValueError`` if *bar* is not strictly newer than the latest.
        """
        if self._bars and bar.time <= self._bars[-1].time:
            raise ValueError(
                f"bar at {bar.time} is not after latest bar {self._bars[-1].time}"
            )
        self._bars.append(bar)

    def last(self, offset: int = 0) -> Bar:
        return self._bars[_index_for(offset, len(self._bars), "bars")]

    def window(self, count: int) -> list[Bar]:
        """Return the most recent *count* bars, oldest-first."""
        if count > len(self._bars):
            raise InsufficientHistory(
                f"bars: window of {count} requested, only {len(self._bars)} available"
            )
        return self._bars[len(self._bars) - count:]

    def highest_high(self, count: int) -> float:
        return max(b.high for b in self.window(count))

    def lowest_low(self, count: int) -> float:
        return min(b.low for b in self.window(count))

    def values(self, field: str) -> list[float]:
        """Oldest-first list of one OHLCV field, e.g. ``values("close")``."""
        return [getattr(b, field) for b in self._bars]

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(self._bars)


class Series:
    """A single named indicator feed aligned with the bar axis."""

    def __init__(self, name: str, values: Sequence[float]) -> None:
        self.name = name
        self._values = [float(v) for v in values]

    @property
    def last(self) -> float:
        return self.prior(0)

    def prior(self, offset: int) -> float:
        return self._values[_index_for(offset, len(self._values), self.name)]

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Series({self.name!r}, len={len(self._values)})"


class IndicatorSnapshot(Mapping):
    """Read-only mapping of indicator name → ``Series`` on one time axis.

    Raises ``ValueError`` if the supplied series differ in length, since
    ``prior(k)`` must mean the same bar for every indicator.
    """

    def __init__(self, series: Mapping[str, Sequence[float]]) -> None:
        lengths = {name: len(values) for name, values in series.items()}
        if len(set(lengths.values())) > 1:
            raise ValueError(f"indicator series are not aligned: {lengths}")
        self._series = {name: Series(name, values) for name, values in series.items()}
        self._length = next(iter(lengths.values()), 0)

    @property
    def length(self) -> int:
        """Number of bars each series covers."""
        return self._length

    def __getitem__(self, name: str) -> Series:
        return self._series[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._series)

    def __len__(self) -> int:
        return len(self._series)
