"""
Monitoring module - Prometheus self-metrics for the exporter.
"""
from graphite_sink.monitoring.metrics import (
    ExporterMetricsCollector,
    get_metrics_collector,
    reset_metrics,
    start_metrics_server,
)

__all__ = [
    "ExporterMetricsCollector",
    "get_metrics_collector",
    "reset_metrics",
    "start_metrics_server",
]
