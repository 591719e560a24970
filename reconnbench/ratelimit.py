"""
Fixed-interval rate limiter used between successful operations.
"""

from __future__ import annotations

import threading
import time
from typing import Optional


class RateLimiter:
    """
    Pauses for 1/rate seconds after each successful operation.

    A rate of zero or below means unbounded (no pause). The pause waits on a
    cancellation Event, so setting the event interrupts it. Pausing never
    holds a tracker lock.
    """

    def __init__(self, max_operations_per_second: float = 0.0) -> None:
        self._rate = max_operations_per_second
        self._paused = 0.0
        self._lock = threading.Lock()

    @property
    def is_bounded(self) -> bool:
        return self._rate > 0

    @property
    def interval_seconds(self) -> float:
        return 1.0 / self._rate if self._rate > 0 else 0.0

    @property
    def total_paused_seconds(self) -> float:
        with self._lock:
            return self._paused

    def pause(self, cancel: Optional[threading.Event] = None) -> bool:
        """
        Wait one rate interval.

        Args:
            cancel: Event that interrupts the wait when set.

        Returns:
            True if the wait was interrupted by cancel.
        """
        if not self.is_bounded:
            return False

        started = time.monotonic()
        if cancel is None:
            time.sleep(self.interval_seconds)
            interrupted = False
        else:
            interrupted = cancel.wait(self.interval_seconds)
        with self._lock:
            self._paused += time.monotonic() - started
        return interrupted
