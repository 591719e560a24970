"""
ConnectionStateTracker: turns per-operation outcomes into outage intervals.

State machine:
    CONNECTED --report_failure()--> DISCONNECTED   (opens an interval)
    DISCONNECTED --report_success()--> CONNECTED   (closes and records it)

Repeated identical signals are no-ops, so an outage is one continuous span
from the first failure to the first recovery. Both transitions run under a
single lock; multiple drivers may report concurrently.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from reconnbench.collection import IntervalCollection
from reconnbench.models import ConnectionState, Interval, utc_now

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[ConnectionState, Optional[Interval]], None]


class ConnectionStateTracker:
    """
    Thread-safe Connected/Disconnected tracker.

    Invariant: an open interval start exists iff state is DISCONNECTED.
    A run starts CONNECTED, so a failing first operation opens an interval
    with no preceding connected period.

    Example:
        collection = IntervalCollection()
        tracker = ConnectionStateTracker(collection)
        tracker.report_failure()
        interval = tracker.report_success()
    """

    def __init__(
        self,
        collection: IntervalCollection,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_transition: Optional[TransitionCallback] = None,
    ) -> None:
        self._collection = collection
        self._clock = clock
        self._on_transition = on_transition
        self._lock = threading.Lock()
        self._state = ConnectionState.CONNECTED
        self._open_start: Optional[float] = None
        self._open_started_at = None
        self._transitions = 0

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def transitions(self) -> int:
        """Number of state changes so far."""
        with self._lock:
            return self._transitions

    @property
    def collection(self) -> IntervalCollection:
        return self._collection

    def report_success(self) -> Optional[Interval]:
        """
        Record a successful operation.

        Returns:
            The interval closed by this call, or None if already connected.
        """
        with self._lock:
            if self._state == ConnectionState.CONNECTED:
                return None
            interval = Interval(
                start=self._open_start,
                end=max(self._clock(), self._open_start),
                started_at=self._open_started_at,
                ended_at=utc_now(),
            )
            self._collection.append(interval)
            self._open_start = None
            self._open_started_at = None
            self._state = ConnectionState.CONNECTED
            self._transitions += 1

        logger.debug("Connected (outage lasted %.3fs)", interval.duration)
        self._notify(ConnectionState.CONNECTED, interval)
        return interval

    def report_failure(self) -> bool:
        """
        Record a connectivity failure.

        Returns:
            True if this call opened a new interval.
        """
        with self._lock:
            if self._state == ConnectionState.DISCONNECTED:
                return False
            self._open_start = self._clock()
            self._open_started_at = utc_now()
            self._state = ConnectionState.DISCONNECTED
            self._transitions += 1

        logger.debug("Disconnected.")
        self._notify(ConnectionState.DISCONNECTED, None)
        return True

    def _notify(self, state: ConnectionState, interval: Optional[Interval]) -> None:
        if self._on_transition is not None:
            self._on_transition(state, interval)
