"""
Unit tests for graphite_sink/metrics (registry, samples, standard metrics).
"""
import math
import random
import threading
from unittest import mock

import pytest

from graphite_sink.common.exceptions import DuplicateMetricError
from graphite_sink.metrics import (
    FunctionalGaugeFloat64,
    MetricsRegistry,
    StandardCounter,
    StandardGauge,
    StandardGaugeFloat64,
    StandardHistogram,
    StandardMeter,
    StandardTimer,
    UniformSample,
    sample_percentiles,
)
from graphite_sink.metrics.ewma import EWMA


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# -----------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------

class TestMetricsRegistry:

    def test_register_and_get(self):
        registry = MetricsRegistry()
        counter = StandardCounter()
        registry.register("requests", counter)
        assert registry.get("requests") is counter
        assert "requests" in registry
        assert len(registry) == 1

    def test_duplicate_raises(self):
        registry = MetricsRegistry()
        registry.register("requests", StandardCounter())
        with pytest.raises(DuplicateMetricError) as exc_info:
            registry.register("requests", StandardCounter())
        assert exc_info.value.name == "requests"

    def test_get_or_register_reuses_existing(self):
        registry = MetricsRegistry()
        first = registry.get_or_register("requests", StandardCounter)
        second = registry.get_or_register("requests", StandardCounter)
        assert first is second
        assert isinstance(first, StandardCounter)

    def test_unregister(self):
        registry = MetricsRegistry()
        registry.register("requests", StandardCounter())
        assert registry.unregister("requests") is True
        assert registry.unregister("requests") is False
        assert registry.get("requests") is None

    def test_unregister_all(self):
        registry = MetricsRegistry()
        registry.register("a", StandardCounter())
        registry.register("b", StandardGauge())
        registry.unregister_all()
        assert len(registry) == 0

    def test_each_visits_all(self):
        registry = MetricsRegistry()
        registry.register("a", StandardCounter())
        registry.register("b", StandardGauge())
        seen = []
        registry.each(lambda name, metric: seen.append(name))
        assert sorted(seen) == ["a", "b"]

    def test_visitor_may_mutate_registry(self):
        registry = MetricsRegistry()
        registry.register("a", StandardCounter())
        registry.each(lambda name, metric: registry.unregister(name))
        assert len(registry) == 0


# -----------------------------------------------------------------------
# Counters and gauges
# -----------------------------------------------------------------------

class TestCounter:

    def test_inc_dec_clear(self):
        c = StandardCounter()
        c.inc()
        c.inc(5)
        c.dec(2)
        assert c.count == 4
        c.clear()
        assert c.count == 0

    def test_concurrent_increments(self):
        c = StandardCounter()

        def work():
            for _ in range(1000):
                c.inc()

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert c.count == 4000


class TestGauges:

    def test_int_gauge_coerces(self):
        g = StandardGauge()
        g.update(7.9)
        assert g.value == 7

    def test_float_gauge(self):
        g = StandardGaugeFloat64()
        g.update(1.5)
        assert g.value == 1.5

    def test_functional_gauge_reads_callable(self):
        state = {"v": 1.0}
        g = FunctionalGaugeFloat64(lambda: state["v"])
        state["v"] = 3.5
        assert g.value == 3.5

    def test_functional_gauge_is_read_only(self):
        with pytest.raises(TypeError):
            FunctionalGaugeFloat64(lambda: 1.0).update(2.0)


# -----------------------------------------------------------------------
# Samples and histograms
# -----------------------------------------------------------------------

class TestSamplePercentiles:

    def test_interpolates(self):
        values = list(range(1, 11))
        assert sample_percentiles(values, [0.5]) == [5.5]

    def test_clamps_to_bounds(self):
        values = list(range(1, 11))
        assert sample_percentiles(values, [0.05, 0.99]) == [1.0, 10.0]

    def test_unsorted_input(self):
        assert sample_percentiles([9, 1, 5], [0.5]) == [5.0]

    def test_empty(self):
        assert sample_percentiles([], [0.5, 0.99]) == [0.0, 0.0]


class TestUniformSample:

    def test_reservoir_capped(self):
        sample = UniformSample(reservoir_size=10, rng=random.Random(1))
        for v in range(100):
            sample.update(v)
        assert len(sample) == 10
        assert sample.count() == 100
        assert all(0 <= v < 100 for v in sample.values())

    def test_clear(self):
        sample = UniformSample(reservoir_size=10)
        sample.update(1)
        sample.clear()
        assert sample.count() == 0
        assert sample.values() == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            UniformSample(reservoir_size=0)


class TestHistogram:

    def test_snapshot_statistics(self):
        h = StandardHistogram()
        for v in (2, 4, 4, 4, 5, 5, 7, 9):
            h.update(v)
        snap = h.snapshot()
        assert snap.count == 8
        assert snap.min == 2
        assert snap.max == 9
        assert snap.mean == 5.0
        assert snap.stddev == 2.0

    def test_empty_snapshot(self):
        snap = StandardHistogram().snapshot()
        assert snap.count == 0
        assert snap.min == 0
        assert snap.max == 0
        assert snap.mean == 0.0
        assert snap.percentiles([0.5]) == [0.0]

    def test_snapshot_is_immutable_view(self):
        h = StandardHistogram()
        h.update(1)
        snap = h.snapshot()
        h.update(100)
        assert snap.max == 1
        assert snap.count == 1


# -----------------------------------------------------------------------
# Meters and timers
# -----------------------------------------------------------------------

class TestEWMA:

    def test_first_tick_sets_instant_rate(self):
        ewma = EWMA.one_minute()
        ewma.update(10)
        ewma.tick()
        assert ewma.rate == 2.0

    def test_decays_without_events(self):
        ewma = EWMA.one_minute()
        ewma.update(10)
        ewma.tick()
        ewma.tick()
        assert ewma.rate == pytest.approx(2.0 * math.exp(-5.0 / 60.0))

    def test_tick_many_matches_repeated_ticks(self):
        stepped = EWMA.five_minute()
        batched = EWMA.five_minute()
        for ewma in (stepped, batched):
            ewma.update(7)
            ewma.tick()
            ewma.update(3)
        for _ in range(12):
            stepped.tick()
        batched.tick_many(12)
        assert batched.rate == pytest.approx(stepped.rate)

    def test_tick_many_zero_is_noop(self):
        ewma = EWMA.one_minute()
        ewma.update(10)
        ewma.tick_many(0)
        assert ewma.rate == 0.0


class TestMeter:

    def test_rates_after_one_tick(self):
        clock = FakeClock()
        meter = StandardMeter(clock=clock)
        meter.mark(10)
        clock.now = 5.0
        snap = meter.snapshot()
        assert snap.count == 10
        assert snap.rate1 == 2.0
        assert snap.rate5 == 2.0
        assert snap.rate15 == 2.0
        assert snap.rate_mean == 2.0

    def test_no_tick_before_interval(self):
        clock = FakeClock()
        meter = StandardMeter(clock=clock)
        meter.mark(10)
        clock.now = 4.0
        snap = meter.snapshot()
        assert snap.rate1 == 0.0
        assert snap.rate_mean == 2.5

    def test_catches_up_on_missed_ticks(self):
        clock = FakeClock()
        meter = StandardMeter(clock=clock)
        meter.mark(10)
        clock.now = 10.0
        snap = meter.snapshot()
        assert snap.rate1 == pytest.approx(2.0 * math.exp(-5.0 / 60.0))
        assert snap.rate15 > snap.rate5 > snap.rate1

    def test_many_missed_ticks_decay_in_closed_form(self):
        clock = FakeClock()
        meter = StandardMeter(clock=clock)
        meter.mark(10)
        clock.now = 50.0
        snap = meter.snapshot()
        assert snap.rate1 == pytest.approx(2.0 * math.exp(-5.0 / 60.0) ** 9)
        assert snap.rate5 == pytest.approx(2.0 * math.exp(-5.0 / 300.0) ** 9)

    def test_year_long_idle_gap_is_cheap(self):
        clock = FakeClock()
        meter = StandardMeter(clock=clock)
        meter.mark(10)
        clock.now = 365 * 24 * 3600.0
        real_tick = EWMA.tick
        with mock.patch.object(EWMA, "tick", autospec=True, side_effect=real_tick) as tick:
            snap = meter.snapshot()
        # One real tick per average, the remaining ~6.3M ticks are pure decay
        assert tick.call_count == 3
        assert snap.count == 10
        assert snap.rate1 == pytest.approx(0.0)
        assert snap.rate15 == pytest.approx(0.0)

    def test_zero_elapsed_mean_rate(self):
        meter = StandardMeter(clock=FakeClock())
        assert meter.snapshot().rate_mean == 0.0


class TestTimer:

    def test_update_records_histogram_and_rate(self):
        clock = FakeClock()
        timer = StandardTimer(meter=StandardMeter(clock=clock))
        timer.update(2_000_000)
        timer.update(3_000_000)
        clock.now = 5.0
        snap = timer.snapshot()
        assert snap.count == 2
        assert snap.min == 2_000_000
        assert snap.max == 3_000_000
        assert snap.mean == 2_500_000.0
        assert snap.rate1 == pytest.approx(0.4)
        assert snap.percentile(0.5) == 2_500_000.0

    def test_time_context_manager(self):
        timer = StandardTimer()
        with timer.time():
            pass
        snap = timer.snapshot()
        assert snap.count == 1
        assert snap.min >= 0

    def test_time_records_on_exception(self):
        timer = StandardTimer()
        with pytest.raises(ValueError):
            with timer.time():
                raise ValueError("boom")
        assert timer.snapshot().count == 1
