"""
Shared fixtures: a local TCP server standing in for Graphite.
"""
import socket
import socketserver
import threading

import pytest


class _SinkHandler(socketserver.StreamRequestHandler):
    """Reads one connection until EOF and records the payload."""

    def handle(self):
        data = self.rfile.read()
        self.server.record(data.decode("utf-8"))


class GraphiteSink(socketserver.ThreadingTCPServer):
    """Captures everything written to it, one payload per connection."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self):
        super().__init__(("127.0.0.1", 0), _SinkHandler)
        self.payloads = []
        self._cond = threading.Condition()

    @property
    def address(self):
        host, port = self.server_address[:2]
        return host, port

    def record(self, payload: str) -> None:
        with self._cond:
            self.payloads.append(payload)
            self._cond.notify_all()

    def wait_for_payloads(self, count: int, timeout: float = 5.0) -> list:
        with self._cond:
            self._cond.wait_for(lambda: len(self.payloads) >= count, timeout)
            return list(self.payloads)


@pytest.fixture
def graphite_sink():
    sink = GraphiteSink()
    thread = threading.Thread(
        target=sink.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True
    )
    thread.start()
    yield sink
    sink.shutdown()
    sink.server_close()
    thread.join(timeout=2)


@pytest.fixture
def closed_address():
    """An address on localhost that refuses connections."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    address = s.getsockname()[:2]
    s.close()
    return address
