"""KeyValueStore factory for creating backend instances.

The Redis URL is read from the REDIS_URL environment variable when set,
falling back to storage.redis_url from configuration.
"""

import os

import redis.asyncio as redis

from statebot.config.models.storage import StorageConfig
from statebot.observability.logging import get_logger
from statebot.storage.inmemory import InMemoryKeyValueStore
from statebot.storage.redis import RedisKeyValueStore
from statebot.storage.retry import RetryingKeyValueStore
from statebot.storage.store import KeyValueStore

logger = get_logger(__name__)


def create_key_value_store(
    config: StorageConfig,
    client: redis.Redis | None = None,
) -> KeyValueStore:
    """Create a KeyValueStore instance based on configuration.

    Args:
        config: Storage configuration from settings
        client: Shared Redis client; one is created from the URL if omitted

    Returns:
        Configured KeyValueStore, wrapped for retries when enabled

    Raises:
        ValueError: If backend type is not supported
    """
    store: KeyValueStore
    if config.backend == "inmemory":
        logger.info("creating_state_store", backend="inmemory")
        store = InMemoryKeyValueStore()

    elif config.backend == "redis":
        url = os.environ.get("REDIS_URL", config.redis_url)
        logger.info(
            "creating_state_store",
            backend="redis",
            url=url.split("@")[-1],  # Log without credentials
            prefix=config.key_prefix,
            ttl_seconds=config.ttl_seconds,
        )
        if client is None:
            client = redis.from_url(url, decode_responses=True)
        store = RedisKeyValueStore(
            client,
            key_prefix=config.key_prefix,
            ttl_seconds=config.ttl_seconds,
        )

    else:
        raise ValueError(f"Unsupported storage backend: {config.backend}")

    if config.retry.enabled and config.retry.max_attempts > 1:
        store = RetryingKeyValueStore(
            store,
            max_attempts=config.retry.max_attempts,
            backoff_seconds=config.retry.backoff_seconds,
        )

    return store
