"""
Redis-backed stores: single-node connection pool and cluster.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List

import redis
from redis.cluster import ClusterNode, RedisCluster
from redis.exceptions import MaxConnectionsError

from reconnbench.exceptions import STORE_EXCEPTIONS, StoreOperationError
from reconnbench.models import OperationKind, OperationResult, StoreConfig
from reconnbench.store.base import execute

logger = logging.getLogger(__name__)


class RedisPoolStore:
    """
    Single-node store behind a bounded redis.ConnectionPool.

    Every operation checks a connection out of the pool for its own use and
    returns it when the block exits, whether the command succeeded or not.
    When all max_connections are checked out, callers wait for one to come
    back (up to pool_timeout); a full pool is reported as an OTHER_FAILURE,
    never as an outage.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._pool = redis.ConnectionPool(
            host=config.host,
            port=config.port,
            db=config.db,
            username=config.username,
            password=config.password,
            socket_timeout=config.socket_timeout,
            socket_connect_timeout=config.socket_connect_timeout,
            max_connections=config.max_connections,
        )
        # redis.ConnectionPool fails fast when full; this makes callers wait.
        self._slots = threading.BoundedSemaphore(config.max_connections)

    @property
    def pool(self) -> redis.ConnectionPool:
        return self._pool

    def read(self, key: str) -> OperationResult:
        def _get() -> None:
            with self._slot(), self._client() as client:
                client.get(self._config.key_prefix + key)

        return execute(OperationKind.READ, _get)

    def write(self, key: str, value: str) -> OperationResult:
        def _set() -> None:
            with self._slot(), self._client() as client:
                client.set(self._config.key_prefix + key, value)

        return execute(OperationKind.WRITE, _set)

    @contextmanager
    def _slot(self) -> Iterator[None]:
        timeout = self._config.pool_timeout
        if not self._slots.acquire(timeout=timeout if timeout is not None else -1):
            raise MaxConnectionsError(
                f"Connection pool exhausted: no connection free after {timeout}s "
                f"(max_connections={self._config.max_connections})"
            )
        try:
            yield
        finally:
            self._slots.release()

    def _client(self) -> redis.Redis:
        # Holds one pooled connection until close(), which releases it.
        return redis.Redis(connection_pool=self._pool, single_connection_client=True)

    def describe(self) -> str:
        cfg = self._config
        return (
            f"Pool mode: host={cfg.host} port={cfg.port} db={cfg.db} "
            f"max_connections={cfg.max_connections} "
            f"pool_timeout={cfg.pool_timeout} "
            f"socket_timeout={cfg.socket_timeout} "
            f"socket_connect_timeout={cfg.socket_connect_timeout}"
        )

    def usage(self) -> str:
        in_use = len(getattr(self._pool, "_in_use_connections", ()))
        idle = len(getattr(self._pool, "_available_connections", ()))
        created = getattr(self._pool, "_created_connections", in_use + idle)
        return (
            f"Pool usage: active={in_use} idle={idle} created={created} "
            f"max={self._config.max_connections}"
        )

    def close(self) -> None:
        self._pool.disconnect()


def _parse_nodes(nodes: List[str]) -> List[ClusterNode]:
    parsed = []
    for node in nodes:
        host, _, port = node.rpartition(":")
        parsed.append(ClusterNode(host, int(port)))
    return parsed


class RedisClusterStore:
    """
    Clustered store. Slot routing and per-node pools belong to RedisCluster;
    it acquires and releases node connections around each command itself.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        nodes = config.startup_nodes or [f"{config.host}:{config.port}"]
        try:
            self._cluster = RedisCluster(
                startup_nodes=_parse_nodes(nodes),
                username=config.username,
                password=config.password,
                socket_timeout=config.socket_timeout,
                socket_connect_timeout=config.socket_connect_timeout,
                max_connections=config.max_connections,
            )
        except STORE_EXCEPTIONS as exc:
            raise StoreOperationError(
                f"Could not initialize cluster client: {exc}",
                code="cluster_unavailable",
                error_type=type(exc).__name__,
                details={"startup_nodes": nodes},
            ) from exc
        self._nodes = nodes

    def read(self, key: str) -> OperationResult:
        return execute(
            OperationKind.READ,
            lambda: self._cluster.get(self._config.key_prefix + key),
        )

    def write(self, key: str, value: str) -> OperationResult:
        return execute(
            OperationKind.WRITE,
            lambda: self._cluster.set(self._config.key_prefix + key, value),
        )

    def describe(self) -> str:
        cfg = self._config
        return (
            f"Cluster mode: startup_nodes={','.join(self._nodes)} "
            f"max_connections_per_node={cfg.max_connections} "
            f"socket_timeout={cfg.socket_timeout}"
        )

    def usage(self) -> str:
        parts = []
        for node in self._cluster.get_nodes():
            client = node.redis_connection
            if client is None:
                parts.append(f"{node.name}(no connection)")
                continue
            pool = client.connection_pool
            in_use = len(getattr(pool, "_in_use_connections", ()))
            idle = len(getattr(pool, "_available_connections", ()))
            parts.append(f"{node.name}(active={in_use} idle={idle})")
        return "Cluster usage: " + ", ".join(parts)

    def close(self) -> None:
        self._cluster.close()
