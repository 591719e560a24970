"""
Fault injection for dry runs: provoke outages without touching a server.

Scenarios feed MemoryStore, which raises the chosen redis exceptions so the
engine sees exactly what a real client would raise.

Usage:
    from reconnbench.faults import Scenario, rules, errors
    from reconnbench.store import MemoryStore

    scenario = Scenario("flapping", [
        rules.outage(start=10, length=5),
        rules.random_drops(0.05, errors.timeout),
    ])
    store = MemoryStore(scenario=scenario)
"""

from reconnbench.faults.scenario import CallContext, Fault, FaultRule, Scenario
from reconnbench.faults import errors
from reconnbench.faults import rules

__all__ = [
    "CallContext",
    "Fault",
    "FaultRule",
    "Scenario",
    "errors",
    "rules",
]
