"""
Prometheus self-metrics for the Graphite exporter.

Describes the exporter's own behaviour (cycles, failures, lines sent) so a
host process that already exposes Prometheus metrics can alert on a stalled
or failing Graphite push.

Usage:
    from graphite_sink.monitoring.metrics import get_metrics_collector, start_metrics_server

    start_metrics_server(port=9090)
    metrics = get_metrics_collector()
    metrics.inc_cycle("success")
"""
import threading
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    start_http_server,
)

from graphite_sink.common.logging_config import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Prometheus metric definitions (module-level singletons)
# ---------------------------------------------------------------------------

CYCLE_OUTCOMES = ("success", "connection_error", "write_error")

# -- Counters --
EXPORT_CYCLES_TOTAL = Counter(
    "graphite_sink_export_cycles_total",
    "Total number of Graphite export cycles by outcome",
    ["outcome"],
)

LINES_SENT_TOTAL = Counter(
    "graphite_sink_lines_sent_total",
    "Total number of plaintext lines flushed to Graphite",
)

UNKNOWN_METRICS_TOTAL = Counter(
    "graphite_sink_unknown_metrics_total",
    "Total number of registry entries skipped because their type is not exportable",
)

METRIC_READ_ERRORS_TOTAL = Counter(
    "graphite_sink_metric_read_errors_total",
    "Total number of registry entries skipped because reading them raised",
)

# -- Histograms --
CYCLE_DURATION = Histogram(
    "graphite_sink_cycle_duration_seconds",
    "Wall-clock duration of one export cycle in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# -- Gauges --
LAST_SUCCESS_TIMESTAMP = Gauge(
    "graphite_sink_last_success_timestamp_seconds",
    "Unix timestamp carried by the last successful export cycle",
)


class ExporterMetricsCollector:
    """
    Convenience wrapper around the exporter's Prometheus metrics.
    All methods are thread-safe (Prometheus client handles it).
    """

    # -- Counters -----------------------------------------------------------

    def inc_cycle(self, outcome: str) -> None:
        """
        Count one finished export cycle.

        Args:
            outcome: one of "success", "connection_error", "write_error"
        """
        if outcome not in CYCLE_OUTCOMES:
            raise ValueError(f"Unknown cycle outcome: {outcome}")
        EXPORT_CYCLES_TOTAL.labels(outcome=outcome).inc()

    def inc_lines_sent(self, count: int = 1) -> None:
        if count:
            LINES_SENT_TOTAL.inc(count)

    def inc_unknown_metric(self, count: int = 1) -> None:
        UNKNOWN_METRICS_TOTAL.inc(count)

    def inc_metric_read_error(self, count: int = 1) -> None:
        METRIC_READ_ERRORS_TOTAL.inc(count)

    # -- Histograms ---------------------------------------------------------

    def observe_cycle_duration(self, seconds: float) -> None:
        CYCLE_DURATION.observe(seconds)

    # -- Gauges -------------------------------------------------------------

    def set_last_success(self, timestamp: float) -> None:
        LAST_SUCCESS_TIMESTAMP.set(timestamp)

    # -- Accessors for testing ----------------------------------------------

    @staticmethod
    def get_cycles_total(outcome: str) -> float:
        return EXPORT_CYCLES_TOTAL.labels(outcome=outcome)._value.get()

    @staticmethod
    def get_lines_sent_total() -> float:
        return LINES_SENT_TOTAL._value.get()

    @staticmethod
    def get_unknown_metrics_total() -> float:
        return UNKNOWN_METRICS_TOTAL._value.get()

    @staticmethod
    def get_metric_read_errors_total() -> float:
        return METRIC_READ_ERRORS_TOTAL._value.get()

    @staticmethod
    def get_last_success() -> float:
        return LAST_SUCCESS_TIMESTAMP._value.get()


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

_metrics_collector: Optional[ExporterMetricsCollector] = None
_metrics_lock = threading.Lock()


def get_metrics_collector() -> ExporterMetricsCollector:
    """
    Return the singleton ``ExporterMetricsCollector`` instance.
    Creates one on first call (thread-safe).
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = ExporterMetricsCollector()
    return _metrics_collector


def start_metrics_server(port: int = 9090) -> bool:
    """
    Start the Prometheus metrics HTTP server on *port*.

    Thin wrapper around ``prometheus_client.start_http_server`` that logs
    instead of raising when the port is already in use.

    Returns:
        True if the server started
    """
    try:
        start_http_server(port)
        logger.info(
            f"Prometheus metrics server started on port {port}  "
            f"→  http://localhost:{port}/metrics"
        )
        return True
    except OSError as exc:
        logger.error(f"Failed to start metrics server on port {port}: {exc}")
        return False


def reset_metrics() -> None:
    """
    Reset all counters / gauges to zero.
    Useful in test suites to get deterministic values.
    """
    global _metrics_collector
    for c in (LINES_SENT_TOTAL, UNKNOWN_METRICS_TOTAL, METRIC_READ_ERRORS_TOTAL):
        c._value.set(0)

    LAST_SUCCESS_TIMESTAMP._value.set(0)

    # Reset per-label counters
    EXPORT_CYCLES_TOTAL._metrics.clear()

    _metrics_collector = None
