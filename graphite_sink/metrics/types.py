"""
Metric variant contracts and immutable snapshots.

The exporter only knows these abstract types. Any object subclassing one of
them (directly or via ``register``) is exportable; everything else is
reported as an unknown metric and skipped.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple


def sample_percentiles(values: Sequence[float], fractions: Sequence[float]) -> List[float]:
    """
    Compute percentiles over a list of sample values.

    Uses the (n + 1) rank method with linear interpolation between the
    neighbouring values. An empty sample yields 0.0 for every fraction.

    Args:
        values: Sample values (any order)
        fractions: Percentile fractions in [0, 1]

    Returns:
        One value per fraction, in the same order
    """
    if not values:
        return [0.0 for _ in fractions]

    ordered = sorted(values)
    size = len(ordered)
    result = []
    for p in fractions:
        pos = p * (size + 1)
        if pos < 1.0:
            result.append(float(ordered[0]))
        elif pos >= size:
            result.append(float(ordered[-1]))
        else:
            lower = ordered[int(pos) - 1]
            upper = ordered[int(pos)]
            result.append(lower + (pos - math.floor(pos)) * (upper - lower))
    return result


@dataclass(frozen=True)
class HistogramSnapshot:
    """Read-only view of a histogram taken at one instant."""
    count: int = 0
    min: int = 0
    max: int = 0
    mean: float = 0.0
    stddev: float = 0.0
    values: Tuple[int, ...] = field(default_factory=tuple, repr=False)

    def percentiles(self, fractions: Sequence[float]) -> List[float]:
        return sample_percentiles(self.values, fractions)

    def percentile(self, fraction: float) -> float:
        return self.percentiles([fraction])[0]


@dataclass(frozen=True)
class MeterSnapshot:
    """Read-only view of a meter; rates are events per second."""
    count: int = 0
    rate1: float = 0.0
    rate5: float = 0.0
    rate15: float = 0.0
    rate_mean: float = 0.0


@dataclass(frozen=True)
class TimerSnapshot(HistogramSnapshot):
    """Histogram of durations (nanoseconds) plus the rate of updates."""
    rate1: float = 0.0
    rate5: float = 0.0
    rate15: float = 0.0
    rate_mean: float = 0.0


class Counter(ABC):
    """Monotonic-ish integer count that can be incremented and decremented."""

    @property
    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def inc(self, n: int = 1) -> None:
        ...

    @abstractmethod
    def dec(self, n: int = 1) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class Gauge(ABC):
    """Instantaneous integer value."""

    @property
    @abstractmethod
    def value(self) -> int:
        ...

    @abstractmethod
    def update(self, value: int) -> None:
        ...


class GaugeFloat64(ABC):
    """Instantaneous floating point value."""

    @property
    @abstractmethod
    def value(self) -> float:
        ...

    @abstractmethod
    def update(self, value: float) -> None:
        ...


class Histogram(ABC):
    """Statistical distribution of integer values."""

    @abstractmethod
    def update(self, value: int) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> HistogramSnapshot:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class Meter(ABC):
    """Rate of events over moving 1, 5 and 15 minute windows."""

    @abstractmethod
    def mark(self, n: int = 1) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> MeterSnapshot:
        ...


class Timer(ABC):
    """Histogram of durations combined with a meter of their rate."""

    @abstractmethod
    def update(self, duration_ns: int) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> TimerSnapshot:
        ...
