"""
Store configuration loading: JSON file or RECONNBENCH_REDIS_* environment.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from reconnbench.exceptions import BenchmarkConfigError
from reconnbench.models import StoreConfig

ENV_PREFIX = "RECONNBENCH_REDIS_"
ENV_FIELDS = (
    "host",
    "port",
    "db",
    "username",
    "password",
    "socket_timeout",
    "socket_connect_timeout",
    "max_connections",
    "pool_timeout",
    "key_prefix",
)


def load_store_config(path: Optional[str] = None) -> StoreConfig:
    """
    Load StoreConfig from a JSON file, or from the environment when path is None.

    Raises:
        BenchmarkConfigError: File missing/unreadable, bad JSON, or invalid fields.
    """
    if path is None:
        return store_config_from_env()

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise BenchmarkConfigError(
            f"Cannot read store config: {exc}", path=path, code="unreadable_config"
        ) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BenchmarkConfigError(
            f"Store config is not valid JSON: {exc}", path=path, code="invalid_json"
        ) from exc
    if not isinstance(data, dict):
        raise BenchmarkConfigError(
            "Store config must be a JSON object.", path=path, code="invalid_json"
        )

    return _validate(data, path=path)


def store_config_from_env(environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """
    Build StoreConfig from RECONNBENCH_REDIS_<FIELD> for each of ENV_FIELDS,
    plus RECONNBENCH_REDIS_STARTUP_NODES (comma separated).
    Unset or empty variables keep their defaults.
    """
    env = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    for field in ENV_FIELDS:
        value = env.get(ENV_PREFIX + field.upper())
        if value:
            data[field] = value
    nodes = env.get(ENV_PREFIX + "STARTUP_NODES")
    if nodes:
        data["startup_nodes"] = [n.strip() for n in nodes.split(",") if n.strip()]
    return _validate(data, path=None)


def _validate(data: Dict[str, Any], *, path: Optional[str]) -> StoreConfig:
    try:
        return StoreConfig.model_validate(data)
    except ValidationError as exc:
        raise BenchmarkConfigError(
            f"Invalid store config: {exc.error_count()} error(s)",
            path=path,
            code="invalid_config",
            details={
                "errors": [
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in exc.errors()
                ]
            },
        ) from exc
