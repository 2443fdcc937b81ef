"""
Metric primitives - registry, variant contracts and standard implementations.
"""
from graphite_sink.metrics.registry import MetricsRegistry
from graphite_sink.metrics.sample import UniformSample
from graphite_sink.metrics.standard import (
    FunctionalGauge,
    FunctionalGaugeFloat64,
    StandardCounter,
    StandardGauge,
    StandardGaugeFloat64,
    StandardHistogram,
    StandardMeter,
    StandardTimer,
)
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
    sample_percentiles,
)

__all__ = [
    "MetricsRegistry",
    "UniformSample",
    "Counter",
    "Gauge",
    "GaugeFloat64",
    "Histogram",
    "Meter",
    "Timer",
    "HistogramSnapshot",
    "MeterSnapshot",
    "TimerSnapshot",
    "StandardCounter",
    "StandardGauge",
    "StandardGaugeFloat64",
    "FunctionalGauge",
    "FunctionalGaugeFloat64",
    "StandardHistogram",
    "StandardMeter",
    "StandardTimer",
    "sample_percentiles",
]
