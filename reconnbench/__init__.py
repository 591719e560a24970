"""
reconnbench - measure key-value store availability across connection failures.

Drives a read/write workload against a store, brackets every outage from
the first failed operation to the first success after it, and reports
outage duration statistics.

Usage:
    from reconnbench import BenchmarkConfig, run_benchmark, format_report

    config = BenchmarkConfig(target_interval_count=20, max_operations_per_second=100)
    result = run_benchmark(config, load_store_config("redis.json"))
    print(format_report(result.stats))

Dry run without a server:
    from reconnbench.faults import Scenario, rules

    config = BenchmarkConfig(store_backend="memory", target_interval_count=5)
    result = run_benchmark(config, scenario=Scenario("flap", [rules.periodic_outage(100, 10)]))
"""

from reconnbench.collection import IntervalCollection  # noqa: F401
from reconnbench.driver import WorkloadDriver  # noqa: F401
from reconnbench.exceptions import (  # noqa: F401
    BenchmarkConfigError,
    ReconnBenchError,
    StoreOperationError,
)
from reconnbench.harness import BenchmarkResult, Harness, run_benchmark  # noqa: F401
from reconnbench.models import (  # noqa: F401
    BenchmarkConfig,
    ConnectionState,
    Interval,
    OperationKind,
    OperationResult,
    Outcome,
    StoreConfig,
)
from reconnbench.stats import OutageStats, format_report, reduce_intervals  # noqa: F401
from reconnbench.store import build_store, load_store_config  # noqa: F401
from reconnbench.tracker import ConnectionStateTracker  # noqa: F401

__all__ = [
    "BenchmarkConfig",
    "BenchmarkConfigError",
    "BenchmarkResult",
    "ConnectionState",
    "ConnectionStateTracker",
    "Harness",
    "Interval",
    "IntervalCollection",
    "OperationKind",
    "OperationResult",
    "OutageStats",
    "Outcome",
    "ReconnBenchError",
    "StoreConfig",
    "StoreOperationError",
    "WorkloadDriver",
    "build_store",
    "format_report",
    "load_store_config",
    "reduce_intervals",
    "run_benchmark",
]
