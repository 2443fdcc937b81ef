"""
Periodic Graphite export.

``GraphiteReporter`` runs export cycles on a fixed interval in a daemon
thread and can be stopped. Cycles never overlap: if one overruns the
interval, the ticks it missed are dropped and the next cycle starts at the
next interval boundary. Export errors are logged and the loop keeps going.

Usage:
    reporter = GraphiteReporter(config)  # or GraphiteReporter.from_settings(registry)
    reporter.start()
    ...
    reporter.stop()
"""
import logging
import threading
import time
from typing import Any, Callable, Optional

from graphite_sink.common.correlation import set_component
from graphite_sink.common.exceptions import ConfigurationError, GraphiteExportError
from graphite_sink.common.logging_config import get_logger, setup_logging
from graphite_sink.config.settings import DEFAULT_PERCENTILES, Settings, load_settings
from graphite_sink.exporter.config import (
    NANOSECOND,
    Address,
    ExportConfig,
    create_export_config_from_settings,
)
from graphite_sink.exporter.cycle import ExportCycle
from graphite_sink.monitoring.metrics import ExporterMetricsCollector, start_metrics_server

logger = get_logger(__name__)


class GraphiteReporter:
    """
    Fixed-interval export loop with an explicit stop signal.

    Args:
        config: Export configuration; ``config.flush_interval`` sets the period
        diagnostics: Logger for cycle diagnostics and export errors
        collector: Self-metrics collector passed to each cycle
        clock: Wall-clock source for line timestamps
        stop_event: Event that stops the loop when set; a private one is
            created if None
    """

    def __init__(
        self,
        config: ExportConfig,
        diagnostics: Optional[logging.Logger] = None,
        collector: Optional[ExporterMetricsCollector] = None,
        clock: Callable[[], float] = time.time,
        stop_event: Optional[threading.Event] = None
    ) -> None:
        self.config = config
        self.interval = config.flush_interval
        self.diagnostics = diagnostics or logger
        self._cycle = ExportCycle(
            config, diagnostics=self.diagnostics, collector=collector, clock=clock
        )
        self._stop_event = stop_event or threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self.cycles_succeeded = 0
        self.cycles_failed = 0
        self.ticks_skipped = 0
        self.last_error: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        registry: Any,
        settings: Optional[Settings] = None,
        **kwargs
    ) -> "GraphiteReporter":
        """
        Build a reporter from environment settings.

        Applies every settings section: ``logging`` configures the
        ``graphite_sink`` logger, ``monitoring`` starts the Prometheus
        endpoint when enabled, and ``graphite`` becomes the export config.
        The reporter is returned unstarted.

        Args:
            registry: Metric registry to export
            settings: Explicit settings; loaded from the environment (and the
                nearest .env file) if None
            **kwargs: Passed through to ``GraphiteReporter``

        Raises:
            ConfigurationError: the environment holds invalid settings
        """
        if settings is None:
            try:
                settings = load_settings()
            except ValueError as exc:
                raise ConfigurationError(f"Invalid settings: {exc}") from exc

        setup_logging("graphite_sink", settings.logging.level, settings.logging.format)
        if settings.monitoring.enabled:
            start_metrics_server(settings.monitoring.metrics_port)

        config = create_export_config_from_settings(registry, settings.graphite)
        return cls(config, **kwargs)

    def start(self) -> None:
        """Start the reporter daemon thread."""
        if self.is_running:
            self.diagnostics.warning("GraphiteReporter already running, ignoring start()")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="graphite-reporter", daemon=True
        )
        self._thread.start()
        host, port = self.config.address
        self.diagnostics.info(
            f"GraphiteReporter started (target={host}:{port}, interval={self.interval}s)"
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """
        Signal the loop to stop and wait for the thread to exit.

        A cycle already in progress runs to completion first.
        """
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                self.diagnostics.warning(
                    f"GraphiteReporter thread still busy after {timeout}s"
                )
        self.diagnostics.info("GraphiteReporter stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_forever(self) -> None:
        """
        Block the calling thread, exporting every ``interval`` seconds until
        the stop event is set. The first cycle runs one interval after the
        call.
        """
        set_component("graphite-reporter")
        next_tick = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self.run_cycle()

            now = time.monotonic()
            next_tick += self.interval
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
                self.ticks_skipped += missed
                self.diagnostics.warning(
                    f"Export cycle overran flush interval ({self.interval}s), "
                    f"skipping {missed} tick(s)"
                )

    def run_cycle(self) -> bool:
        """
        Run one export cycle, logging instead of raising on failure.

        Returns:
            True if the cycle completed
        """
        try:
            self._cycle.run()
        except GraphiteExportError as exc:
            self.cycles_failed += 1
            self.last_error = str(exc)
            self.diagnostics.error(f"Graphite export failed: {exc}")
            return False
        except Exception as exc:
            self.cycles_failed += 1
            self.last_error = str(exc)
            self.diagnostics.exception(f"Unexpected error during Graphite export: {exc}")
            return False
        self.cycles_succeeded += 1
        return True

    def get_status(self) -> dict:
        """
        Get reporter status.

        Returns:
            Status dictionary
        """
        host, port = self.config.address
        return {
            "running": self.is_running,
            "target": f"{host}:{port}",
            "interval_seconds": self.interval,
            "cycles_succeeded": self.cycles_succeeded,
            "cycles_failed": self.cycles_failed,
            "ticks_skipped": self.ticks_skipped,
            "last_error": self.last_error,
        }


def run_forever(
    config: ExportConfig,
    stop_event: Optional[threading.Event] = None,
    diagnostics: Optional[logging.Logger] = None
) -> None:
    """
    Blocking exporter: run export cycles every ``config.flush_interval``
    seconds in the calling thread until ``stop_event`` is set (forever if
    None).
    """
    GraphiteReporter(config, diagnostics=diagnostics, stop_event=stop_event).run_forever()


def graphite_with_config(config: ExportConfig) -> None:
    """Blocking exporter driven entirely by ``config``; never returns."""
    run_forever(config)


def graphite(
    registry: Any,
    flush_interval: float,
    prefix: str,
    address: Address
) -> None:
    """
    Blocking exporter which reports the metrics in ``registry`` to the
    Graphite server at ``address`` every ``flush_interval`` seconds,
    prepending ``prefix`` to metric names. Timer durations are exported in
    nanoseconds with the default percentiles.
    """
    graphite_with_config(ExportConfig(
        address=address,
        registry=registry,
        flush_interval=flush_interval,
        duration_unit=NANOSECOND,
        prefix=prefix,
        percentiles=tuple(DEFAULT_PERCENTILES),
    ))
