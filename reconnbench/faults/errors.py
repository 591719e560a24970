"""
Factory functions for the store exceptions a real redis client raises.

Connectivity-class factories produce exceptions the engine absorbs as
outages; response_error() produces a fatal, non-connectivity failure.
"""

from __future__ import annotations

from redis.exceptions import (
    ClusterDownError,
    ConnectionError as RedisConnectionError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)


def connection_error(message: str = "Connection refused (injected)") -> RedisConnectionError:
    return RedisConnectionError(message)


def timeout(message: str = "Timeout reading from socket (injected)") -> RedisTimeoutError:
    return RedisTimeoutError(message)


def cluster_down(message: str = "CLUSTERDOWN The cluster is down (injected)") -> ClusterDownError:
    return ClusterDownError(message)


def response_error(message: str = "ERR unknown command (injected)") -> ResponseError:
    """Not connectivity related: ends the run."""
    return ResponseError(message)
