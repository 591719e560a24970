from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConnectionState(str, Enum):
    """Connection state as seen by the tracker."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Outcome(str, Enum):
    """
    Classification of a single store operation.

    Connectivity failures are expected and drive the state machine.
    Other failures are fatal for the run.
    """

    SUCCESS = "success"
    CONNECTIVITY_FAILURE = "connectivity_failure"
    OTHER_FAILURE = "other_failure"


class OperationKind(str, Enum):
    READ = "read"
    WRITE = "write"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Interval:
    """
    One closed outage, from first failure to first subsequent success.

    Attributes:
        start: Monotonic clock reading at the first failure (seconds).
        end: Monotonic clock reading at the recovering success (seconds).
        started_at: Wall-clock time of the first failure, for display.
        ended_at: Wall-clock time of the recovery, for display.
    """

    start: float
    end: float
    started_at: datetime
    ended_at: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("interval end must not precede its start")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def __str__(self) -> str:
        return (
            f"[{self.started_at.isoformat()} -> {self.ended_at.isoformat()}] "
            f"({self.duration:.3f}s)"
        )


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one read or write against the store."""

    kind: OperationKind
    outcome: Outcome
    elapsed_seconds: float = 0.0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


class StoreConfig(BaseModel):
    """
    Connection settings for the key-value store.

    Loaded from a JSON file (see reconnbench.store.load_store_config) or
    from RECONNBENCH_REDIS_* environment variables.

    Attributes:
        host: Single-node host (pool mode).
        port: Single-node port (pool mode).
        startup_nodes: "host:port" seeds for cluster mode.
        socket_timeout: Per-command timeout in seconds.
        socket_connect_timeout: Connect timeout in seconds.
        max_connections: Pool size bound.
        pool_timeout: Seconds to wait for a free pooled connection (None = wait
            until one is returned).
        key_prefix: Prepended to every generated key.
    """

    model_config = ConfigDict(extra="forbid")

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    username: Optional[str] = None
    password: Optional[str] = None
    socket_timeout: Optional[float] = Field(default=2.0, gt=0)
    socket_connect_timeout: Optional[float] = Field(default=2.0, gt=0)
    max_connections: int = Field(default=8, ge=1)
    pool_timeout: Optional[float] = Field(default=None, gt=0)
    startup_nodes: List[str] = Field(default_factory=list)
    key_prefix: str = ""

    @field_validator("startup_nodes")
    @classmethod
    def check_nodes(cls, nodes: List[str]) -> List[str]:
        for node in nodes:
            host, sep, port = node.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise ValueError(f"startup node must be host:port, got {node!r}")
        return nodes


class BenchmarkConfig(BaseModel):
    """
    Options for one benchmark run. Immutable once built.

    Attributes:
        cluster_mode: Use the clustered topology instead of a single-node pool.
        target_interval_count: Stop once this many outages have closed.
        max_operations_per_second: Rate bound; zero or negative is unbounded.
        random_payload: Random keys/values instead of a fixed string.
        payload_size_bytes: Length of random keys/values.
        verbose: Log every transition and an incremental report per outage.
        store_config_path: JSON file with StoreConfig fields.
        store_backend: "redis" for a real server, "memory" for a dry run.
        drivers: Number of concurrent workload drivers.
        write_ratio: Share of operations that are writes.
        slow_operation_seconds: Failed calls slower than this are logged.
        max_duration_seconds: Optional wall-clock cap for the run.
        seed: Seed for operation and payload selection.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    cluster_mode: bool = False
    target_interval_count: int = Field(default=10, ge=1)
    max_operations_per_second: float = 0.0
    random_payload: bool = False
    payload_size_bytes: int = Field(default=16, ge=1)
    verbose: bool = False
    store_config_path: Optional[str] = None
    store_backend: Literal["redis", "memory"] = "redis"
    drivers: int = Field(default=1, ge=1)
    write_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    slow_operation_seconds: float = Field(default=1.0, gt=0)
    max_duration_seconds: Optional[float] = Field(default=None, gt=0)
    seed: Optional[int] = None

    @property
    def is_rate_limited(self) -> bool:
        return self.max_operations_per_second > 0
