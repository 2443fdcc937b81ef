"""
Graphite exporter - line formatting, metric snapshots, export cycle and
scheduling.
"""
from graphite_sink.exporter.config import (
    MICROSECOND,
    MILLISECOND,
    NANOSECOND,
    SECOND,
    ExportConfig,
    create_export_config_from_settings,
    parse_address,
)
from graphite_sink.exporter.cycle import ExportCycle, run_once, run_once_with_retry
from graphite_sink.exporter.formatter import (
    DEFAULT_FIELD_NAMES,
    format_line,
    format_number,
    percentile_key,
)
from graphite_sink.exporter.scheduler import (
    GraphiteReporter,
    graphite,
    graphite_with_config,
    run_forever,
)
from graphite_sink.exporter.snapshotter import metric_fields

__all__ = [
    "NANOSECOND",
    "MICROSECOND",
    "MILLISECOND",
    "SECOND",
    "DEFAULT_FIELD_NAMES",
    "ExportConfig",
    "ExportCycle",
    "GraphiteReporter",
    "create_export_config_from_settings",
    "format_line",
    "format_number",
    "graphite",
    "graphite_with_config",
    "metric_fields",
    "parse_address",
    "percentile_key",
    "run_forever",
    "run_once",
    "run_once_with_retry",
]
