"""Request spacing for remote data services."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class RateLimiter:
    """
    Enforce a minimum interval between consecutive calls to :meth:`wait`.

    The clock and sleep functions are injectable so tests can run without
    real delays.

    Args:
        min_interval_s: Minimum seconds between two requests. 0 disables throttling.
        clock: Monotonic time source in seconds.
        sleep: Function used to block for a number of seconds.
    """

    def __init__(
        self,
        min_interval_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval_s < 0:
            raise ValueError(f"min_interval_s must be >= 0, got {min_interval_s}")
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """
        Block until the next request may be sent, then mark it as sent.

        Returns:
            Seconds slept (0.0 when no wait was needed).
        """
        with self._lock:
            slept = 0.0
            if self._last is not None:
                remaining = self.min_interval_s - (self._clock() - self._last)
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
            self._last = self._clock()
            return slept
