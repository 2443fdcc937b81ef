"""
Thread-safe standard implementations of the metric variants.

Host code mutates these from any thread while the exporter snapshots them
from its own thread; every read and write goes through a lock.
"""
import math
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from graphite_sink.metrics.ewma import EWMA, TICK_INTERVAL_SECONDS
from graphite_sink.metrics.sample import UniformSample
from graphite_sink.metrics.types import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    HistogramSnapshot,
    Meter,
    MeterSnapshot,
    Timer,
    TimerSnapshot,
)


class StandardCounter(Counter):
    """Integer counter guarded by a lock."""

    def __init__(self, initial: int = 0) -> None:
        self._count = initial
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def clear(self) -> None:
        with self._lock:
            self._count = 0


class StandardGauge(Gauge):
    def __init__(self, initial: int = 0) -> None:
        self._value = int(initial)
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def update(self, value: int) -> None:
        with self._lock:
            self._value = int(value)


class StandardGaugeFloat64(GaugeFloat64):
    def __init__(self, initial: float = 0.0) -> None:
        self._value = float(initial)
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def update(self, value: float) -> None:
        with self._lock:
            self._value = float(value)


class FunctionalGauge(Gauge):
    """Integer gauge whose value is read from a callable at export time."""

    def __init__(self, func: Callable[[], int]) -> None:
        self._func = func

    @property
    def value(self) -> int:
        return int(self._func())

    def update(self, value: int) -> None:
        raise TypeError("FunctionalGauge is read-only")


class FunctionalGaugeFloat64(GaugeFloat64):
    """Float gauge whose value is read from a callable at export time."""

    def __init__(self, func: Callable[[], float]) -> None:
        self._func = func

    @property
    def value(self) -> float:
        return float(self._func())

    def update(self, value: float) -> None:
        raise TypeError("FunctionalGaugeFloat64 is read-only")


def _histogram_stats(count: int, values) -> HistogramSnapshot:
    if not values:
        return HistogramSnapshot(count=count)
    mean = math.fsum(values) / len(values)
    variance = math.fsum((v - mean) ** 2 for v in values) / len(values)
    return HistogramSnapshot(
        count=count,
        min=min(values),
        max=max(values),
        mean=mean,
        stddev=math.sqrt(variance),
        values=tuple(values),
    )


class StandardHistogram(Histogram):
    """
    Histogram backed by a uniform reservoir sample.

    ``count`` in the snapshot is the total number of updates; the other
    statistics are computed over the retained sample.
    """

    def __init__(self, sample: Optional[UniformSample] = None) -> None:
        self.sample = sample or UniformSample()

    def update(self, value: int) -> None:
        self.sample.update(value)

    def clear(self) -> None:
        self.sample.clear()

    def snapshot(self) -> HistogramSnapshot:
        count, values = self.sample.state()
        return _histogram_stats(count, values)


class StandardMeter(Meter):
    """
    Meter with 1, 5 and 15 minute EWMA rates.

    Rates decay on 5 second ticks, applied lazily on ``mark`` and
    ``snapshot`` for every tick boundary crossed since the last call.

    Args:
        clock: monotonic time source in seconds (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA.one_minute()
        self._m5 = EWMA.five_minute()
        self._m15 = EWMA.fifteen_minute()

    def _tick_if_necessary(self, now: float) -> None:
        elapsed = now - self._last_tick
        if elapsed < TICK_INTERVAL_SECONDS:
            return
        ticks = int(elapsed // TICK_INTERVAL_SECONDS)
        self._last_tick += ticks * TICK_INTERVAL_SECONDS
        self._m1.tick_many(ticks)
        self._m5.tick_many(ticks)
        self._m15.tick_many(ticks)

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary(self._clock())
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            now = self._clock()
            self._tick_if_necessary(now)
            elapsed = now - self._start
            rate_mean = self._count / elapsed if elapsed > 0 else 0.0
            return MeterSnapshot(
                count=self._count,
                rate1=self._m1.rate,
                rate5=self._m5.rate,
                rate15=self._m15.rate,
                rate_mean=rate_mean,
            )


class StandardTimer(Timer):
    """
    Timer recording durations in nanoseconds.

    Usage:
        timer = StandardTimer()
        with timer.time():
            handle_request()
    """

    def __init__(
        self,
        histogram: Optional[StandardHistogram] = None,
        meter: Optional[StandardMeter] = None
    ) -> None:
        self.histogram = histogram or StandardHistogram()
        self.meter = meter or StandardMeter()

    def update(self, duration_ns: int) -> None:
        self.histogram.update(int(duration_ns))
        self.meter.mark(1)

    def update_since(self, start_ns: int) -> None:
        """Record the time elapsed since ``start_ns`` (from ``time.perf_counter_ns()``)."""
        self.update(time.perf_counter_ns() - start_ns)

    @contextmanager
    def time(self) -> Iterator[None]:
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update_since(start)

    def snapshot(self) -> TimerSnapshot:
        h = self.histogram.snapshot()
        m = self.meter.snapshot()
        return TimerSnapshot(
            count=h.count,
            min=h.min,
            max=h.max,
            mean=h.mean,
            stddev=h.stddev,
            values=h.values,
            rate1=m.rate1,
            rate5=m.rate5,
            rate15=m.rate15,
            rate_mean=m.rate_mean,
        )
