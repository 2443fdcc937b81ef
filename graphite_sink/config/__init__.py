"""Environment-driven settings."""
from graphite_sink.config.settings import (
    DEFAULT_PERCENTILES,
    DURATION_UNITS,
    GraphiteSettings,
    LoggingSettings,
    MonitoringSettings,
    Settings,
    load_env_file,
    load_settings,
)

__all__ = [
    "DEFAULT_PERCENTILES",
    "DURATION_UNITS",
    "GraphiteSettings",
    "LoggingSettings",
    "MonitoringSettings",
    "Settings",
    "load_env_file",
    "load_settings",
]
