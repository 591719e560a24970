"""
Typed exceptions for reconnbench.

Provides structured error handling with:
- ReconnBenchError: Base exception for all reconnbench errors
- BenchmarkConfigError: Configuration and validation errors (fatal at startup)
- StoreOperationError: Non-connectivity failures surfaced by the store (fatal)

Connectivity failures are not exceptions at the engine level. The store
adapters turn them into Outcome.CONNECTIVITY_FAILURE results; see
is_connectivity_error() for the classification.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Type

from redis.exceptions import (
    ClusterDownError,
    MaxConnectionsError,
    RedisClusterException,
    RedisError,
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
    TryAgainError,
)

CONNECTIVITY_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    RedisConnectionError,
    RedisTimeoutError,
    ClusterDownError,
    TryAgainError,
)

# Exceptions the store client can raise. RedisClusterException is not a
# RedisError subclass.
STORE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (RedisError, RedisClusterException)


class ReconnBenchError(Exception):
    """Base exception for all reconnbench errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging or JSON output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class BenchmarkConfigError(ReconnBenchError):
    """Configuration or validation error.

    Raised when:
    - The store config file is missing or unreadable
    - The store config is not valid JSON or fails validation
    - Benchmark options are out of range (e.g. non-positive interval count)

    Examples:
        BenchmarkConfigError("Store config not found", details={"path": "redis.json"})
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
        self.path = path
        super().__init__(message, code=code, details=details)


class StoreOperationError(ReconnBenchError):
    """A store failure that is not connectivity related.

    The engine has no policy for these, so they end the run.

    Attributes:
        operation: Which operation failed ("read" or "write")
        error_type: Class name of the underlying store exception
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        if error_type:
            details["error_type"] = error_type

        self.operation = operation
        self.error_type = error_type

        super().__init__(message, code=code, details=details)


def is_connectivity_error(exc: BaseException) -> bool:
    """
    True if exc means the store could not be reached.

    A full client-side pool is not an outage: the server may be healthy.
    RedisCluster reports losing every node as a bare RedisClusterException.
    """
    if isinstance(exc, MaxConnectionsError):
        return False
    if isinstance(exc, RedisClusterException):
        return "cannot be connected" in str(exc)
    return isinstance(exc, CONNECTIVITY_EXCEPTIONS)


__all__ = [
    "CONNECTIVITY_EXCEPTIONS",
    "STORE_EXCEPTIONS",
    "ReconnBenchError",
    "BenchmarkConfigError",
    "StoreOperationError",
    "is_connectivity_error",
]
