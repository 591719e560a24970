from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from reconnbench.exceptions import BenchmarkConfigError, StoreOperationError
from reconnbench.faults import Scenario, rules
from reconnbench.harness import run_benchmark
from reconnbench.models import BenchmarkConfig
from reconnbench.stats import format_report
from reconnbench.store import load_store_config

logger = logging.getLogger("reconnbench")

EXIT_OK = 0
EXIT_STORE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reconnbench",
        description=(
            "Measure how long a key-value store client stays unavailable "
            "across connection failures."
        ),
    )
    parser.add_argument(
        "--cluster", action="store_true", help="Use the cluster topology."
    )
    parser.add_argument(
        "-n",
        "--tests",
        type=int,
        default=10,
        help="Number of outage intervals to collect before stopping.",
    )
    parser.add_argument(
        "--max-ops-per-second",
        type=float,
        default=0.0,
        help="Rate bound after successful operations (0 = unbounded).",
    )
    parser.add_argument(
        "--random", action="store_true", help="Use random keys and values."
    )
    parser.add_argument(
        "--data-size",
        type=int,
        default=16,
        help="Size of random keys/values in bytes.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Report every outage."
    )
    parser.add_argument("--config", help="Store config JSON file.")
    parser.add_argument(
        "--store",
        choices=["redis", "memory"],
        default="redis",
        help="Store backend (memory injects synthetic outages).",
    )
    parser.add_argument(
        "--drivers", type=int, default=1, help="Concurrent workload drivers."
    )
    parser.add_argument(
        "--write-ratio", type=float, default=0.3, help="Share of writes."
    )
    parser.add_argument(
        "--max-duration", type=float, help="Stop after this many seconds."
    )
    parser.add_argument("--seed", type=int, help="Seed for workload selection.")
    parser.add_argument(
        "--fault-period",
        type=int,
        default=200,
        help="Memory backend: calls per simulated outage cycle.",
    )
    parser.add_argument(
        "--fault-length",
        type=int,
        default=20,
        help="Memory backend: failing calls per cycle.",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the result as JSON."
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    return parser


def _config_from_args(args: argparse.Namespace) -> BenchmarkConfig:
    try:
        return BenchmarkConfig(
            cluster_mode=args.cluster,
            target_interval_count=args.tests,
            max_operations_per_second=args.max_ops_per_second,
            random_payload=args.random,
            payload_size_bytes=args.data_size,
            verbose=args.verbose,
            store_config_path=args.config,
            store_backend=args.store,
            drivers=args.drivers,
            write_ratio=args.write_ratio,
            max_duration_seconds=args.max_duration,
            seed=args.seed,
        )
    except ValidationError as exc:
        raise BenchmarkConfigError(
            f"Invalid benchmark options: {exc.error_count()} error(s)",
            code="invalid_options",
            details={
                "errors": [
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in exc.errors()
                ]
            },
        ) from exc


def _scenario_from_args(args: argparse.Namespace) -> Scenario:
    try:
        rule = rules.periodic_outage(args.fault_period, args.fault_length)
    except ValueError as exc:
        raise BenchmarkConfigError(str(exc), code="invalid_options") from exc
    return Scenario("periodic", [rule])


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    load_dotenv()

    cancel = threading.Event()
    try:
        config = _config_from_args(args)
        store_config = None
        scenario = None
        if config.store_backend == "memory":
            scenario = _scenario_from_args(args)
        else:
            store_config = load_store_config(config.store_config_path)

        previous = _install_sigint(cancel)
        try:
            result = run_benchmark(
                config, store_config, scenario=scenario, cancel=cancel
            )
        finally:
            _restore_sigint(previous)
    except BenchmarkConfigError as exc:
        logger.error("Configuration error: %s", exc.message)
        for detail in exc.details.get("errors", []):
            logger.error("  %s", detail)
        return EXIT_CONFIG_ERROR
    except StoreOperationError as exc:
        logger.error("Fatal store error: %s", exc.message)
        if args.json:
            print(json.dumps(exc.to_dict(), ensure_ascii=True))
        return EXIT_STORE_ERROR

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=True))
    else:
        print(format_report(result.stats))
    return EXIT_OK


def _install_sigint(cancel: threading.Event):
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handler(signum, frame) -> None:
        logger.warning("Interrupted, stopping drivers...")
        cancel.set()

    return signal.signal(signal.SIGINT, _handler)


def _restore_sigint(previous) -> None:
    if previous is not None:
        signal.signal(signal.SIGINT, previous)


if __name__ == "__main__":
    sys.exit(main())
