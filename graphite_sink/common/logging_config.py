"""
Structured logging configuration using JSON format.
Provides consistent logging across the exporter with cycle ID support.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Optional

from graphite_sink.common.correlation import CycleFilter


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging with cycle tracking"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with cycle and component fields"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Injected by CycleFilter
        cycle_id = getattr(record, 'cycle_id', None)
        if cycle_id:
            log_data['cycle_id'] = cycle_id

        component = getattr(record, 'component', None)
        if component:
            log_data['component'] = component

        # Name of the metric being exported, when a caller passes it via extra=
        if hasattr(record, 'metric_name'):
            log_data['metric_name'] = record.metric_name

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(name: str, level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """
    Configure structured logging for a component.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: "json" for structured output, "text" for plain lines

    Returns:
        Configured logger instance with cycle filter
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(cycle_id)s] %(message)s"
        ))
    # Records propagated from child loggers skip the logger-level filter
    handler.addFilter(CycleFilter())

    logger.addHandler(handler)

    if not any(isinstance(f, CycleFilter) for f in logger.filters):
        logger.addFilter(CycleFilter())

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the cycle filter attached.

    No handler is added: records propagate to whatever the host process
    configured, or to the handler installed by ``setup_logging``.

    Args:
        name: Logger name
        level: Optional log level; when given, the logger is configured
            with its own handler via ``setup_logging``

    Returns:
        Logger instance with cycle filter
    """
    if level:
        return setup_logging(name, level)

    logger = logging.getLogger(name)
    if not any(isinstance(f, CycleFilter) for f in logger.filters):
        logger.addFilter(CycleFilter())

    return logger
