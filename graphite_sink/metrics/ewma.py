"""
Exponentially-weighted moving averages used by meters.
"""
import math

TICK_INTERVAL_SECONDS = 5.0


def _alpha(minutes: float) -> float:
    return 1.0 - math.exp(-TICK_INTERVAL_SECONDS / 60.0 / minutes)


class EWMA:
    """
    Moving average of a per-second rate, decayed on every 5 second tick.

    Not thread-safe on its own; ``StandardMeter`` serializes access.
    """

    def __init__(self, alpha: float) -> None:
        self.alpha = alpha
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def one_minute(cls) -> "EWMA":
        return cls(_alpha(1))

    @classmethod
    def five_minute(cls) -> "EWMA":
        return cls(_alpha(5))

    @classmethod
    def fifteen_minute(cls) -> "EWMA":
        return cls(_alpha(15))

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        instant_rate = self._uncounted / TICK_INTERVAL_SECONDS
        self._uncounted = 0
        if self._initialized:
            self._rate += self.alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    def tick_many(self, ticks: int) -> None:
        """
        Apply ``ticks`` consecutive ticks. Only the first one sees the
        uncounted events; the rest decay the rate by ``(1 - alpha)`` each.
        """
        if ticks <= 0:
            return
        self.tick()
        if ticks > 1:
            self._rate *= (1.0 - self.alpha) ** (ticks - 1)

    @property
    def rate(self) -> float:
        """Events per second."""
        return self._rate
