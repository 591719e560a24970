"""
IntervalCollection: thread-safe, append-only store of closed outages.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from reconnbench.models import Interval


class IntervalCollection:
    """
    Append-only multiset of closed Intervals shared by all drivers.

    Only the tracker appends. Readers take a snapshot copy; order is
    insertion order but carries no meaning for statistics.
    """

    def __init__(self) -> None:
        self._intervals: List[Interval] = []
        self._cond = threading.Condition(threading.Lock())

    def append(self, interval: Interval) -> None:
        with self._cond:
            self._intervals.append(interval)
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._intervals)

    def snapshot(self) -> List[Interval]:
        """Copy of the intervals closed so far."""
        with self._cond:
            return list(self._intervals)

    def wait_for(self, count: int, timeout: Optional[float] = None) -> bool:
        """
        Block until at least count intervals exist.

        Returns:
            True if the count was reached, False on timeout.
        """
        with self._cond:
            return self._cond.wait_for(
                lambda: len(self._intervals) >= count, timeout=timeout
            )
