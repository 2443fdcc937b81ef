"""
Extraction of exportable fields from each metric variant.

``metric_fields`` dispatches on the metric's type over the closed set of
variants in ``graphite_sink.metrics.types``. Anything else yields ``None``
so the caller can skip it and report it.
"""
from functools import singledispatch
from typing import Any, List, Optional, Tuple

from graphite_sink.exporter.config import ExportConfig
from graphite_sink.exporter.formatter import Number, percentile_key
from graphite_sink.metrics.types import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    Meter,
    Timer,
)

Fields = List[Tuple[str, Number]]


def _truncating_div(value: int, unit: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(int(value)) // unit
    return quotient if value >= 0 else -quotient


@singledispatch
def metric_fields(metric: Any, config: ExportConfig) -> Optional[Fields]:
    """
    Return the ``(field suffix, value)`` pairs to export for ``metric``.

    Returns:
        List of pairs, or None if the metric type is not exportable
    """
    return None


@metric_fields.register(Counter)
def _counter_fields(metric: Counter, config: ExportConfig) -> Fields:
    return [(config.field_names["count"], int(metric.count))]


@metric_fields.register(Gauge)
def _gauge_fields(metric: Gauge, config: ExportConfig) -> Fields:
    return [(config.field_names["value"], int(metric.value))]


@metric_fields.register(GaugeFloat64)
def _gauge_float_fields(metric: GaugeFloat64, config: ExportConfig) -> Fields:
    return [(config.field_names["value"], float(metric.value))]


@metric_fields.register(Histogram)
def _histogram_fields(metric: Histogram, config: ExportConfig) -> Fields:
    names = config.field_names
    h = metric.snapshot()
    fields: Fields = [
        (names["count"], h.count),
        (names["min"], h.min),
        (names["max"], h.max),
        (names["mean"], h.mean),
        (names["stddev"], h.stddev),
    ]
    ps = h.percentiles(config.percentiles)
    for fraction, value in zip(config.percentiles, ps):
        fields.append((percentile_key(fraction), value))
    return fields


def _rate_fields(snapshot, config: ExportConfig) -> Fields:
    names = config.field_names
    return [
        (names["rate1"], snapshot.rate1),
        (names["rate5"], snapshot.rate5),
        (names["rate15"], snapshot.rate15),
        (names["rate_mean"], snapshot.rate_mean),
    ]


@metric_fields.register(Meter)
def _meter_fields(metric: Meter, config: ExportConfig) -> Fields:
    m = metric.snapshot()
    return [(config.field_names["count"], m.count)] + _rate_fields(m, config)


@metric_fields.register(Timer)
def _timer_fields(metric: Timer, config: ExportConfig) -> Fields:
    # Durations are recorded in nanoseconds; scale to the configured unit.
    # min/max stay integral, everything else is float division. Rates are
    # events per second and are not scaled.
    names = config.field_names
    du = config.duration_unit
    t = metric.snapshot()
    fields: Fields = [
        (names["count"], t.count),
        (names["min"], _truncating_div(t.min, du)),
        (names["max"], _truncating_div(t.max, du)),
        (names["mean"], t.mean / du),
        (names["stddev"], t.stddev / du),
    ]
    ps = t.percentiles(config.percentiles)
    for fraction, value in zip(config.percentiles, ps):
        fields.append((percentile_key(fraction), value / du))
    return fields + _rate_fields(t, config)
