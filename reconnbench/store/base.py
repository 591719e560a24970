"""
Store capability interface and outcome classification.

The engine only needs read/write plus two diagnostic strings; each topology
implements StoreClient once and the rest of the code stays topology-agnostic.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, runtime_checkable

from reconnbench.exceptions import STORE_EXCEPTIONS, is_connectivity_error
from reconnbench.models import OperationKind, OperationResult, Outcome


@runtime_checkable
class StoreClient(Protocol):
    """What the workload driver needs from a key-value store."""

    def read(self, key: str) -> OperationResult:
        ...

    def write(self, key: str, value: str) -> OperationResult:
        ...

    def describe(self) -> str:
        """Configuration summary, logged once at startup."""
        ...

    def usage(self) -> str:
        """Pool or cluster usage, logged after a connectivity failure."""
        ...

    def close(self) -> None:
        ...


def execute(kind: OperationKind, operation: Callable[[], object]) -> OperationResult:
    """
    Run one store call and classify how it ended.

    Redis errors become result values: connectivity errors as
    CONNECTIVITY_FAILURE, the rest as OTHER_FAILURE. Anything that is not a
    store exception is a bug and propagates.
    """
    started = time.monotonic()
    try:
        operation()
    except STORE_EXCEPTIONS as exc:
        outcome = (
            Outcome.CONNECTIVITY_FAILURE
            if is_connectivity_error(exc)
            else Outcome.OTHER_FAILURE
        )
        return OperationResult(
            kind=kind,
            outcome=outcome,
            elapsed_seconds=time.monotonic() - started,
            error=exc,
        )
    return OperationResult(
        kind=kind,
        outcome=Outcome.SUCCESS,
        elapsed_seconds=time.monotonic() - started,
    )
