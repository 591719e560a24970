"""
Store adapters: the read/write capability the engine measures.

Usage:
    from reconnbench.store import build_store, load_store_config

    store = build_store(config, load_store_config("redis.json"))
    result = store.read("foo")
"""

from __future__ import annotations

import logging
from typing import Optional

from reconnbench.faults.scenario import Scenario
from reconnbench.models import BenchmarkConfig, StoreConfig
from reconnbench.store.base import StoreClient, execute
from reconnbench.store.config import load_store_config, store_config_from_env
from reconnbench.store.memory import MemoryStore
from reconnbench.store.redis_store import RedisClusterStore, RedisPoolStore

logger = logging.getLogger(__name__)


def build_store(
    config: BenchmarkConfig,
    store_config: Optional[StoreConfig] = None,
    *,
    scenario: Optional[Scenario] = None,
) -> StoreClient:
    """
    Pick the store implementation for the configured backend and topology.

    Redis pools get at least one connection per driver, so a full pool never
    stands in for an outage.
    """
    if config.store_backend == "memory":
        return MemoryStore(scenario=scenario, seed=config.seed or 0)
    store_config = store_config or StoreConfig()
    if store_config.max_connections < config.drivers:
        logger.warning(
            "max_connections=%d is below drivers=%d; raising it to %d",
            store_config.max_connections,
            config.drivers,
            config.drivers,
        )
        store_config = store_config.model_copy(
            update={"max_connections": config.drivers}
        )
    if config.cluster_mode:
        return RedisClusterStore(store_config)
    return RedisPoolStore(store_config)


__all__ = [
    "StoreClient",
    "MemoryStore",
    "RedisPoolStore",
    "RedisClusterStore",
    "build_store",
    "execute",
    "load_store_config",
    "store_config_from_env",
]
