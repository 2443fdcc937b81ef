"""
Unit tests for graphite_sink/monitoring/metrics.py
"""
import pytest
from unittest.mock import patch

from graphite_sink.monitoring.metrics import (
    ExporterMetricsCollector,
    get_metrics_collector,
    reset_metrics,
    start_metrics_server,
    CYCLE_DURATION,
)


@pytest.fixture(autouse=True)
def _reset():
    """Reset all metrics before each test for isolation."""
    reset_metrics()
    yield
    reset_metrics()


class TestExporterMetricsCollector:

    def test_inc_cycle_by_outcome(self):
        mc = ExporterMetricsCollector()
        mc.inc_cycle("success")
        mc.inc_cycle("success")
        mc.inc_cycle("connection_error")
        assert mc.get_cycles_total("success") == 2.0
        assert mc.get_cycles_total("connection_error") == 1.0
        assert mc.get_cycles_total("write_error") == 0.0

    def test_inc_cycle_rejects_unknown_outcome(self):
        with pytest.raises(ValueError):
            ExporterMetricsCollector().inc_cycle("partial")

    def test_lines_sent_accumulate(self):
        mc = ExporterMetricsCollector()
        mc.inc_lines_sent(10)
        mc.inc_lines_sent(5)
        mc.inc_lines_sent(0)
        assert mc.get_lines_sent_total() == 15.0

    def test_unknown_metrics(self):
        mc = ExporterMetricsCollector()
        mc.inc_unknown_metric()
        assert mc.get_unknown_metrics_total() == 1.0

    def test_metric_read_errors(self):
        mc = ExporterMetricsCollector()
        mc.inc_metric_read_error()
        mc.inc_metric_read_error(2)
        assert mc.get_metric_read_errors_total() == 3.0

    def test_observe_cycle_duration(self):
        before = CYCLE_DURATION._sum.get()
        ExporterMetricsCollector().observe_cycle_duration(0.25)
        assert CYCLE_DURATION._sum.get() - before == pytest.approx(0.25)

    def test_last_success(self):
        mc = ExporterMetricsCollector()
        mc.set_last_success(1700000000)
        assert mc.get_last_success() == 1700000000


class TestModuleHelpers:

    def test_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_reset_replaces_singleton(self):
        first = get_metrics_collector()
        reset_metrics()
        assert get_metrics_collector() is not first

    def test_reset_zeroes_counters(self):
        mc = get_metrics_collector()
        mc.inc_lines_sent(3)
        mc.inc_cycle("success")
        reset_metrics()
        assert mc.get_lines_sent_total() == 0.0
        assert mc.get_cycles_total("success") == 0.0

    @patch("graphite_sink.monitoring.metrics.start_http_server")
    def test_start_metrics_server(self, mock_start):
        assert start_metrics_server(port=9999) is True
        mock_start.assert_called_once_with(9999)

    @patch("graphite_sink.monitoring.metrics.start_http_server", side_effect=OSError("in use"))
    def test_start_metrics_server_port_in_use(self, mock_start):
        assert start_metrics_server(port=9999) is False
