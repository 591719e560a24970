"""
Outage shapes for MemoryStore scenarios.

Each shape decides from the call index or the store's elapsed time whether
the store is down; while down, every call raises a fresh exception from
exc_factory (a connection error unless told otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional

from reconnbench.faults import errors
from reconnbench.faults.scenario import CallContext, Fault

ExceptionFactory = Callable[[], Exception]


class _Downtime:
    """Shared fault_for(): fail the call while is_down(ctx) holds."""

    exc_factory: ExceptionFactory

    def is_down(self, ctx: CallContext) -> bool:
        raise NotImplementedError

    def fault_for(self, ctx: CallContext) -> Optional[Fault]:
        if self.is_down(ctx):
            return Fault(exception=self.exc_factory())
        return None


@dataclass(frozen=True)
class CallRangeOutage(_Downtime):
    """Calls first_call .. first_call + calls - 1 fail."""

    first_call: int
    calls: int
    exc_factory: ExceptionFactory = errors.connection_error

    def is_down(self, ctx: CallContext) -> bool:
        return self.first_call <= ctx.call_index < self.first_call + self.calls


@dataclass(frozen=True)
class TimedOutage(_Downtime):
    """The store is down from start_seconds for duration_seconds (a failover)."""

    start_seconds: float
    duration_seconds: float
    exc_factory: ExceptionFactory = errors.connection_error

    def is_down(self, ctx: CallContext) -> bool:
        return (
            self.start_seconds
            <= ctx.elapsed_seconds
            < self.start_seconds + self.duration_seconds
        )


@dataclass(frozen=True)
class PeriodicOutage(_Downtime):
    """The last `length` calls of every `period` calls fail."""

    period: int
    length: int
    exc_factory: ExceptionFactory = errors.connection_error

    def __post_init__(self) -> None:
        if not 0 < self.length < self.period:
            raise ValueError("length must be between 1 and period - 1")

    def is_down(self, ctx: CallContext) -> bool:
        return (ctx.call_index - 1) % self.period >= self.period - self.length


@dataclass(frozen=True)
class FailedCalls(_Downtime):
    """Exactly the listed call indices fail."""

    calls: FrozenSet[int]
    exc_factory: ExceptionFactory = errors.connection_error

    def is_down(self, ctx: CallContext) -> bool:
        return ctx.call_index in self.calls


@dataclass(frozen=True)
class RandomDrops(_Downtime):
    """Each call fails independently with probability p."""

    p: float
    exc_factory: ExceptionFactory = errors.connection_error

    def __post_init__(self) -> None:
        if not 0.0 <= self.p <= 1.0:
            raise ValueError("p must be within [0, 1]")

    def is_down(self, ctx: CallContext) -> bool:
        return ctx.rng.random() < self.p


@dataclass(frozen=True)
class SlowCalls:
    """Delays a share p of calls without failing them."""

    p: float
    delay_seconds: float

    def fault_for(self, ctx: CallContext) -> Optional[Fault]:
        if ctx.rng.random() < self.p:
            return Fault(delay_seconds=self.delay_seconds)
        return None


def outage(
    start: int, length: int, exc_factory: ExceptionFactory = errors.connection_error
) -> CallRangeOutage:
    return CallRangeOutage(first_call=start, calls=length, exc_factory=exc_factory)


def outage_window(
    start_seconds: float,
    duration_seconds: float,
    exc_factory: ExceptionFactory = errors.connection_error,
) -> TimedOutage:
    return TimedOutage(
        start_seconds=start_seconds,
        duration_seconds=duration_seconds,
        exc_factory=exc_factory,
    )


def periodic_outage(
    period: int, length: int, exc_factory: ExceptionFactory = errors.connection_error
) -> PeriodicOutage:
    return PeriodicOutage(period=period, length=length, exc_factory=exc_factory)


def failed_calls(
    calls: Iterable[int], exc_factory: ExceptionFactory = errors.connection_error
) -> FailedCalls:
    return FailedCalls(calls=frozenset(calls), exc_factory=exc_factory)


def random_drops(
    p: float, exc_factory: ExceptionFactory = errors.connection_error
) -> RandomDrops:
    return RandomDrops(p=p, exc_factory=exc_factory)


def slow_calls(p: float, delay_seconds: float) -> SlowCalls:
    return SlowCalls(p=p, delay_seconds=delay_seconds)
