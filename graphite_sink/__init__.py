"""
graphite-sink - push in-process metrics to Graphite over TCP.

Usage:
    from graphite_sink import (
        ExportConfig, GraphiteReporter, MetricsRegistry, StandardCounter, MILLISECOND,
    )

    registry = MetricsRegistry()
    registry.get_or_register("requests", StandardCounter).inc()

    reporter = GraphiteReporter(ExportConfig(
        address=("graphite.local", 2003),
        registry=registry,
        flush_interval=10,
        duration_unit=MILLISECOND,
        prefix="app",
    ))
    reporter.start()
"""
from graphite_sink.common.exceptions import (
    ConfigurationError,
    DuplicateMetricError,
    GraphiteConnectionError,
    GraphiteExportError,
    GraphiteSinkError,
    GraphiteWriteError,
)
from graphite_sink.exporter import (
    MICROSECOND,
    MILLISECOND,
    NANOSECOND,
    SECOND,
    ExportConfig,
    GraphiteReporter,
    create_export_config_from_settings,
    graphite,
    graphite_with_config,
    run_forever,
    run_once,
    run_once_with_retry,
)
from graphite_sink.metrics import (
    FunctionalGauge,
    FunctionalGaugeFloat64,
    MetricsRegistry,
    StandardCounter,
    StandardGauge,
    StandardGaugeFloat64,
    StandardHistogram,
    StandardMeter,
    StandardTimer,
)

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "DuplicateMetricError",
    "GraphiteConnectionError",
    "GraphiteExportError",
    "GraphiteSinkError",
    "GraphiteWriteError",
    "NANOSECOND",
    "MICROSECOND",
    "MILLISECOND",
    "SECOND",
    "ExportConfig",
    "GraphiteReporter",
    "create_export_config_from_settings",
    "graphite",
    "graphite_with_config",
    "run_forever",
    "run_once",
    "run_once_with_retry",
    "MetricsRegistry",
    "StandardCounter",
    "StandardGauge",
    "StandardGaugeFloat64",
    "FunctionalGauge",
    "FunctionalGaugeFloat64",
    "StandardHistogram",
    "StandardMeter",
    "StandardTimer",
]
