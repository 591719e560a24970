"""
In-process store for dry runs and tests.

Behaves like a redis client from the engine's point of view: faults decided
by a Scenario raise real redis exceptions, which are classified the same way.
"""

from __future__ import annotations

import random
import threading
import time
from typing import Callable, Dict, Optional

from reconnbench.faults import errors
from reconnbench.faults.scenario import CallContext, Scenario
from reconnbench.models import OperationKind, OperationResult
from reconnbench.store.base import execute


class MemoryStore:
    """
    Dict-backed store with fault injection.

    Outages come from the scenario rules or from set_reachable(False),
    which fails every call until reachability is restored.
    """

    def __init__(
        self,
        *,
        scenario: Optional[Scenario] = None,
        seed: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scenario = scenario or Scenario("baseline", [])
        self._rng = random.Random(seed)
        self._clock = clock
        self._created = clock()
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._call_index = 0
        self._reachable = True

    @property
    def call_count(self) -> int:
        with self._lock:
            return self._call_index

    def set_reachable(self, reachable: bool) -> None:
        with self._lock:
            self._reachable = reachable

    def read(self, key: str) -> OperationResult:
        return execute(OperationKind.READ, lambda: self._get(key))

    def write(self, key: str, value: str) -> OperationResult:
        return execute(OperationKind.WRITE, lambda: self._set(key, value))

    def _get(self, key: str) -> Optional[str]:
        self._inject()
        with self._lock:
            return self._data.get(key)

    def _set(self, key: str, value: str) -> None:
        self._inject()
        with self._lock:
            self._data[key] = value

    def _inject(self) -> None:
        with self._lock:
            self._call_index += 1
            reachable = self._reachable
            ctx = CallContext(
                call_index=self._call_index,
                elapsed_seconds=self._clock() - self._created,
                rng=self._rng,
            )
            fault = self._scenario.decide(ctx)

        if not reachable:
            raise errors.connection_error("Store marked unreachable")
        if fault is None:
            return
        if fault.delay_seconds > 0:
            time.sleep(fault.delay_seconds)
        if fault.exception is not None:
            raise fault.exception

    def describe(self) -> str:
        return f"Memory mode: {self._scenario.describe()}"

    def usage(self) -> str:
        with self._lock:
            return f"Memory usage: keys={len(self._data)} calls={self._call_index}"

    def close(self) -> None:
        with self._lock:
            self._data.clear()
