"""
Outage scenarios: which store calls fail, and how.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True)
class CallContext:
    """
    What a rule can see about the call being made.

    Attributes:
        call_index: 1-based count of calls made against the store.
        elapsed_seconds: Time since the store was created.
        rng: Seeded random number generator shared by the store's rules.
    """

    call_index: int
    elapsed_seconds: float
    rng: random.Random


@dataclass(frozen=True)
class Fault:
    """Delay to add before a call, and the exception it ends with (if any)."""

    delay_seconds: float = 0.0
    exception: Optional[Exception] = None


class FaultRule(Protocol):
    def fault_for(self, ctx: CallContext) -> Optional[Fault]:
        ...


@dataclass(frozen=True)
class Scenario:
    """
    A named outage pattern. The first rule that returns a fault decides the call;
    a scenario with no rules never fails.
    """

    name: str
    rules: Sequence[FaultRule] = ()

    def decide(self, ctx: CallContext) -> Optional[Fault]:
        for rule in self.rules:
            fault = rule.fault_for(ctx)
            if fault is not None:
                return fault
        return None

    def describe(self) -> str:
        shapes = ", ".join(type(rule).__name__ for rule in self.rules) or "none"
        return f"scenario={self.name} rules=[{shapes}]"
