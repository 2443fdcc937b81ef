"""
A single Graphite export cycle.

One cycle = connect, write every registry entry, close. Nothing is retried
or buffered across cycles:

- a failed connection raises ``GraphiteConnectionError`` and sends nothing;
- unknown metric types are skipped with a warning;
- a metric whose read raises is logged with its traceback and skipped;
- the first write or flush error aborts the cycle with ``GraphiteWriteError``
  (fail-fast). Lines flushed before the error have already left the process.

The connection is closed on every exit path.
"""
import logging
import socket
import time
from typing import Any, Callable, Optional

from graphite_sink.common.correlation import CycleContext
from graphite_sink.common.exceptions import (
    GraphiteConnectionError,
    GraphiteWriteError,
)
from graphite_sink.common.logging_config import get_logger
from graphite_sink.common.retry import retry_on_connection_error
from graphite_sink.exporter.config import ExportConfig
from graphite_sink.exporter.formatter import format_line
from graphite_sink.exporter.snapshotter import metric_fields
from graphite_sink.monitoring.metrics import (
    ExporterMetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)


class ExportCycle:
    """
    Runs export cycles for one ``ExportConfig``.

    Args:
        config: Export configuration (referenced, not copied)
        diagnostics: Logger receiving per-metric diagnostics; defaults to this
            module's logger
        collector: Self-metrics collector; defaults to the process singleton
        clock: Wall-clock source for the line timestamps
    """

    def __init__(
        self,
        config: ExportConfig,
        diagnostics: Optional[logging.Logger] = None,
        collector: Optional[ExporterMetricsCollector] = None,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.config = config
        self.diagnostics = diagnostics or logger
        self.collector = collector or get_metrics_collector()
        self.clock = clock

    def run(self) -> int:
        """
        Perform one export cycle.

        Returns:
            Number of lines written

        Raises:
            GraphiteConnectionError: the server could not be reached
            GraphiteWriteError: writing or flushing failed mid-cycle
        """
        with CycleContext():
            started = time.monotonic()
            try:
                return self._run()
            finally:
                self.collector.observe_cycle_duration(time.monotonic() - started)

    def _run(self) -> int:
        # Single timestamp shared by every line of this cycle
        now = int(self.clock())
        host, port = self.config.address

        try:
            sock = socket.create_connection(
                (host, port), timeout=self.config.connect_timeout
            )
        except OSError as exc:
            self.collector.inc_cycle("connection_error")
            self.diagnostics.debug(f"Connection to Graphite at {host}:{port} failed: {exc}")
            raise GraphiteConnectionError(
                f"Cannot connect to Graphite at {host}:{port}: {exc}"
            ) from exc

        written = 0

        def visit(name: str, metric: Any) -> None:
            nonlocal written
            try:
                fields = metric_fields(metric, self.config)
                if fields is None:
                    self.diagnostics.warning(
                        f"Cannot export unknown metric type {type(metric).__name__} for '{name}'",
                        extra={"metric_name": name},
                    )
                    self.collector.inc_unknown_metric()
                    return
                lines = [
                    format_line(self.config.prefix, name, field, value, now).encode("utf-8")
                    for field, value in fields
                ]
            except Exception:
                # A broken metric loses its own lines only
                self.diagnostics.exception(
                    f"Failed to read metric '{name}', skipping it",
                    extra={"metric_name": name},
                )
                self.collector.inc_metric_read_error()
                return
            for line in lines:
                writer.write(line)
            writer.flush()
            written += len(lines)

        try:
            with sock.makefile("wb") as writer:
                self.config.registry.each(visit)
        except OSError as exc:
            self.collector.inc_cycle("write_error")
            self.collector.inc_lines_sent(written)
            raise GraphiteWriteError(
                f"Write to Graphite at {host}:{port} failed after {written} lines: {exc}",
                lines_written=written,
            ) from exc
        finally:
            sock.close()

        self.collector.inc_cycle("success")
        self.collector.inc_lines_sent(written)
        self.collector.set_last_success(now)
        self.diagnostics.debug(f"Exported {written} lines to Graphite at {host}:{port}")
        return written


def run_once(
    config: ExportConfig,
    *,
    diagnostics: Optional[logging.Logger] = None,
    collector: Optional[ExporterMetricsCollector] = None,
    clock: Callable[[], float] = time.time
) -> int:
    """
    Perform a single export to Graphite.

    For callers that want their own scheduling or error policy instead of
    ``GraphiteReporter``.

    Returns:
        Number of lines written

    Raises:
        GraphiteConnectionError: the server could not be reached
        GraphiteWriteError: writing or flushing failed mid-cycle
    """
    return ExportCycle(config, diagnostics=diagnostics, collector=collector, clock=clock).run()


def run_once_with_retry(
    config: ExportConfig,
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    **kwargs
) -> int:
    """
    ``run_once`` retried with exponential backoff on connection failures.

    Each attempt is a complete cycle with its own timestamp. Write errors
    are not retried.

    Args:
        config: Export configuration
        max_attempts: Maximum number of attempts
        min_wait: Minimum wait between attempts in seconds
        max_wait: Maximum wait between attempts in seconds
        **kwargs: Passed through to ``run_once``
    """
    cycle = ExportCycle(config, **kwargs)

    @retry_on_connection_error(
        max_attempts=max_attempts, min_wait=min_wait, max_wait=max_wait
    )
    def _attempt() -> int:
        return cycle.run()

    return _attempt()
