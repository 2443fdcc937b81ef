"""
Reservoir sampling for histograms and timers.
"""
import random
import threading
from typing import List, Optional

DEFAULT_RESERVOIR_SIZE = 1028


class UniformSample:
    """
    Uniform random sample of a stream of values (Vitter's algorithm R).

    Keeps at most ``reservoir_size`` values; once full, each new value
    replaces a random slot with probability size / count.
    """

    def __init__(
        self,
        reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
        rng: Optional[random.Random] = None
    ) -> None:
        if reservoir_size <= 0:
            raise ValueError("reservoir_size must be positive")
        self.reservoir_size = reservoir_size
        self._rng = rng or random.Random()
        self._values: List[int] = []
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: int) -> None:
        with self._lock:
            self._count += 1
            if len(self._values) < self.reservoir_size:
                self._values.append(value)
            else:
                slot = self._rng.randrange(self._count)
                if slot < self.reservoir_size:
                    self._values[slot] = value

    def clear(self) -> None:
        with self._lock:
            self._values = []
            self._count = 0

    def count(self) -> int:
        """Total number of values ever recorded (not just the retained ones)."""
        with self._lock:
            return self._count

    def values(self) -> List[int]:
        """Copy of the retained values."""
        with self._lock:
            return list(self._values)

    def state(self):
        """Return ``(count, values)`` read under a single lock acquisition."""
        with self._lock:
            return self._count, list(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
