"""
Benchmark harness: drive the workload until enough outages have closed.

Integrates WorkloadDriver, ConnectionStateTracker and the stats reducer.
All drivers are stopped and joined before the interval collection is read,
so the final snapshot has no concurrent writers.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from reconnbench.collection import IntervalCollection
from reconnbench.driver import WorkloadDriver
from reconnbench.faults.scenario import Scenario
from reconnbench.models import BenchmarkConfig, ConnectionState, Interval, StoreConfig
from reconnbench.payload import PayloadGenerator
from reconnbench.ratelimit import RateLimiter
from reconnbench.stats import OutageStats, format_report, reduce_intervals
from reconnbench.store import build_store
from reconnbench.store.base import StoreClient
from reconnbench.tracker import ConnectionStateTracker

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """
    Results from one harness run.

    Attributes:
        stats: Reduced outage statistics.
        operations: Store calls issued by all drivers.
        successes: Calls that succeeded.
        failures: Calls that failed with a connectivity error.
        elapsed_seconds: Wall-clock duration of the drive loop.
        cancelled: Stopped by the cancellation event before reaching the target.
        timed_out: Stopped by max_duration_seconds before reaching the target.
    """

    stats: OutageStats
    operations: int
    successes: int
    failures: int
    elapsed_seconds: float
    cancelled: bool = False
    timed_out: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operations": self.operations,
            "successes": self.successes,
            "failures": self.failures,
            "elapsed_seconds": self.elapsed_seconds,
            "cancelled": self.cancelled,
            "timed_out": self.timed_out,
            "stats": self.stats.to_dict(),
        }


class Harness:
    """
    Runs config.drivers workload drivers against one tracker.

    The stop event doubles as the cancellation token: setting it from
    outside (e.g. a SIGINT handler) ends the run at the next iteration
    boundary or interrupts a rate-limit pause. The harness sets it itself
    once the target is reached.

    Example:
        harness = Harness(config, MemoryStore(scenario=scenario))
        result = harness.run()
        print(format_report(result.stats))
    """

    def __init__(
        self,
        config: BenchmarkConfig,
        store: StoreClient,
        *,
        cancel: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._store = store
        self._stop = cancel or threading.Event()
        self._collection = IntervalCollection()
        self._tracker = ConnectionStateTracker(
            self._collection,
            clock=clock,
            on_transition=self._on_transition if config.verbose else None,
        )
        self._rate_limiter = RateLimiter(config.max_operations_per_second)
        self._timed_out = False
        self._drivers: List[WorkloadDriver] = []

    @property
    def tracker(self) -> ConnectionStateTracker:
        return self._tracker

    @property
    def collection(self) -> IntervalCollection:
        return self._collection

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def cancel(self) -> None:
        self._stop.set()

    def run(self) -> BenchmarkResult:
        """
        Drive until the target interval count, cancellation, or deadline.

        Raises:
            StoreOperationError: A driver hit a non-connectivity failure.
        """
        config = self._config
        logger.info("Start to test...")
        logger.info(self._store.describe())

        self._drivers = [self._make_driver(i) for i in range(config.drivers)]
        started = time.monotonic()
        deadline = (
            started + config.max_duration_seconds
            if config.max_duration_seconds is not None
            else None
        )

        if len(self._drivers) == 1:
            self._drive(self._drivers[0], deadline)
        else:
            self._drive_concurrently(deadline)

        elapsed = time.monotonic() - started
        reached = len(self._collection) >= config.target_interval_count
        stats = reduce_intervals(self._collection.snapshot())
        result = BenchmarkResult(
            stats=stats,
            operations=sum(d.operations for d in self._drivers),
            successes=sum(d.successes for d in self._drivers),
            failures=sum(d.failures for d in self._drivers),
            elapsed_seconds=elapsed,
            cancelled=not reached and not self._timed_out,
            timed_out=not reached and self._timed_out,
        )
        if result.cancelled:
            logger.warning(
                "Run cancelled after %d of %d intervals",
                stats.count,
                config.target_interval_count,
            )
        elif result.timed_out:
            logger.warning(
                "Run hit max duration after %d of %d intervals",
                stats.count,
                config.target_interval_count,
            )
        return result

    def _make_driver(self, index: int) -> WorkloadDriver:
        config = self._config
        seed = config.seed
        if seed is not None:
            rng = random.Random(seed + index * 10000)
            payload_rng = random.Random(seed + index * 10000 + 1)
        else:
            rng = random.Random()
            payload_rng = random.Random()
        return WorkloadDriver(
            self._store,
            self._tracker,
            payload=PayloadGenerator(
                random_payload=config.random_payload,
                size_bytes=config.payload_size_bytes,
                rng=payload_rng,
            ),
            rate_limiter=self._rate_limiter,
            rng=rng,
            write_ratio=config.write_ratio,
            slow_operation_seconds=config.slow_operation_seconds,
            cancel=self._stop,
            verbose=config.verbose,
            name=f"driver-{index}",
        )

    def _drive(self, driver: WorkloadDriver, deadline: Optional[float]) -> None:
        target = self._config.target_interval_count
        try:
            while not self._stop.is_set():
                if len(self._collection) >= target:
                    self._stop.set()
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    self._timed_out = True
                    self._stop.set()
                    break
                driver.step()
        except Exception:
            self._stop.set()
            raise

    def _drive_concurrently(self, deadline: Optional[float]) -> None:
        with ThreadPoolExecutor(
            max_workers=len(self._drivers), thread_name_prefix="reconnbench-driver"
        ) as pool:
            futures = [pool.submit(self._drive, d, deadline) for d in self._drivers]
            try:
                for future in as_completed(futures):
                    future.result()
            finally:
                self._stop.set()

    def _on_transition(
        self, state: ConnectionState, interval: Optional[Interval]
    ) -> None:
        if state == ConnectionState.DISCONNECTED:
            logger.info("Disconnected.")
            return
        logger.info("Connected")
        logger.info(
            "Incremental report:\n%s",
            format_report(reduce_intervals(self._collection.snapshot())),
        )


def run_benchmark(
    config: BenchmarkConfig,
    store_config: Optional[StoreConfig] = None,
    *,
    scenario: Optional[Scenario] = None,
    cancel: Optional[threading.Event] = None,
) -> BenchmarkResult:
    """
    Build the store for config, run the harness, and close the store.

    Args:
        config: Benchmark options.
        store_config: Connection settings (redis backends only).
        scenario: Fault scenario (memory backend only).
        cancel: Event that stops the run when set.

    Returns:
        BenchmarkResult for the run.
    """
    store = build_store(config, store_config, scenario=scenario)
    try:
        return Harness(config, store, cancel=cancel).run()
    finally:
        store.close()
