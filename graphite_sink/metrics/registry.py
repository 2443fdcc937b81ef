"""
In-process metric registry.

Usage:
    from graphite_sink.metrics import MetricsRegistry, StandardCounter

    registry = MetricsRegistry()
    requests = registry.get_or_register("requests", StandardCounter)
    requests.inc()
"""
import threading
from typing import Any, Callable, Dict, Optional

from graphite_sink.common.exceptions import DuplicateMetricError


class MetricsRegistry:
    """
    Thread-safe mapping of metric name to metric instance.

    ``each`` iterates over a copy taken under the lock, so visitors may
    register or unregister metrics without deadlocking.
    """

    def __init__(self) -> None:
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: Any) -> None:
        """
        Register a metric under ``name``.

        Raises:
            DuplicateMetricError: if ``name`` is already registered
        """
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name)
            self._metrics[name] = metric

    def get(self, name: str) -> Optional[Any]:
        with self._lock:
            return self._metrics.get(name)

    def get_or_register(self, name: str, factory: Callable[[], Any]) -> Any:
        """
        Return the metric registered under ``name``, creating it with
        ``factory()`` if absent. ``factory`` may also be a metric instance.
        """
        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                return existing
            metric = factory() if callable(factory) else factory
            self._metrics[name] = metric
            return metric

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def unregister_all(self) -> None:
        with self._lock:
            self._metrics.clear()

    def each(self, visitor: Callable[[str, Any], None]) -> None:
        """Call ``visitor(name, metric)`` for every registered metric."""
        with self._lock:
            items = list(self._metrics.items())
        for name, metric in items:
            visitor(name, metric)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
