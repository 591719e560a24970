"""
Outage Demo: measure outage durations without a live server.

This example shows how to:
1. Describe an outage pattern with fault rules (failover windows, flapping)
2. Run several workload drivers against one tracker
3. Read the nearest-rank percentiles from the result

Run:
    python examples/outage_demo.py

Point it at a real server instead by dropping the scenario and passing a
store config:
    RECONNBENCH_REDIS_HOST=localhost python examples/outage_demo.py --redis
"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")

from reconnbench import BenchmarkConfig, format_report, load_store_config, run_benchmark  # noqa: E402
from reconnbench.faults import Scenario, errors, rules  # noqa: E402


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if "--redis" in sys.argv:
        config = BenchmarkConfig(target_interval_count=5, max_operations_per_second=200)
        result = run_benchmark(config, load_store_config())
        print(format_report(result.stats))
        return

    scenarios = [
        Scenario("failover", [rules.outage_window(0.2, 0.3), rules.outage_window(0.8, 0.1)]),
        Scenario("flapping", [rules.periodic_outage(40, 8, errors.timeout)]),
        Scenario(
            "cluster_down_slow",
            [rules.periodic_outage(100, 30, errors.cluster_down), rules.slow_calls(0.01, 0.05)],
        ),
    ]

    for scenario in scenarios:
        config = BenchmarkConfig(
            store_backend="memory",
            target_interval_count=2 if scenario.name == "failover" else 10,
            max_operations_per_second=500,
            drivers=2,
            seed=42,
        )
        result = run_benchmark(config, scenario=scenario)
        print("=" * 60)
        print(f"SCENARIO: {scenario.name}")
        print("=" * 60)
        print(f"Operations: {result.operations} (failed {result.failures})")
        print(format_report(result.stats, include_intervals=False))
        print()


if __name__ == "__main__":
    main()
