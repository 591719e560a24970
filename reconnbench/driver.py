"""
WorkloadDriver: issues one read or write per step and feeds the tracker.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Optional

from reconnbench.exceptions import StoreOperationError
from reconnbench.models import OperationResult, Outcome
from reconnbench.payload import PayloadGenerator
from reconnbench.ratelimit import RateLimiter
from reconnbench.store.base import StoreClient
from reconnbench.tracker import ConnectionStateTracker

logger = logging.getLogger(__name__)


class WorkloadDriver:
    """
    Generates a mixed read/write workload against one store.

    Per step:
    - success: tracker.report_success(), then the rate-limit pause
    - connectivity failure: tracker.report_failure(), retry at once
    - any other failure: StoreOperationError (ends the run)

    Several drivers may share one tracker; each keeps its own RNG,
    payload generator and counters.
    """

    def __init__(
        self,
        store: StoreClient,
        tracker: ConnectionStateTracker,
        *,
        payload: Optional[PayloadGenerator] = None,
        rate_limiter: Optional[RateLimiter] = None,
        rng: Optional[random.Random] = None,
        write_ratio: float = 0.3,
        slow_operation_seconds: float = 1.0,
        cancel: Optional[threading.Event] = None,
        verbose: bool = False,
        name: str = "driver-0",
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._payload = payload or PayloadGenerator()
        self._rate_limiter = rate_limiter or RateLimiter()
        self._rng = rng or random.Random()
        self._write_ratio = write_ratio
        self._slow_seconds = slow_operation_seconds
        self._cancel = cancel
        self._verbose = verbose
        self.name = name

        self.operations = 0
        self.successes = 0
        self.failures = 0

    def step(self) -> OperationResult:
        """
        Run one operation and report its outcome.

        Raises:
            StoreOperationError: The store failed for a non-connectivity reason.
        """
        result = self._perform()
        self.operations += 1

        if result.outcome == Outcome.SUCCESS:
            self.successes += 1
            self._tracker.report_success()
            if self._rate_limiter.pause(self._cancel):
                logger.warning("%s: rate-limit pause interrupted", self.name)
            return result

        if result.outcome == Outcome.CONNECTIVITY_FAILURE:
            self.failures += 1
            if result.elapsed_seconds > self._slow_seconds:
                logger.info(
                    "%s: %s spent %.3fs before failing",
                    self.name,
                    result.kind.value.upper(),
                    result.elapsed_seconds,
                )
            self._tracker.report_failure()
            logger.log(
                logging.INFO if self._verbose else logging.DEBUG,
                "%s: %s",
                self.name,
                self._store.usage(),
            )
            return result

        error = result.error
        raise StoreOperationError(
            f"{result.kind.value} failed: {error}",
            operation=result.kind.value,
            error_type=type(error).__name__ if error is not None else None,
        ) from error

    def _perform(self) -> OperationResult:
        if self._rng.random() < self._write_ratio:
            return self._store.write(self._payload.next(), self._payload.next())
        return self._store.read(self._payload.next())
