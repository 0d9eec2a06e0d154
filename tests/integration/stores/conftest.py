"""Pytest fixtures for store integration tests.

Tests run against the Redis server at TEST_REDIS_URL and skip gracefully
when it is unreachable.
"""

import os
import uuid
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
import redis.asyncio as redis


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Get Redis URL for integration tests."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest_asyncio.fixture(scope="function")
async def redis_client(redis_url: str) -> AsyncIterator[redis.Redis]:
    """Create a Redis client, skipping the test if Redis is unavailable."""
    client = redis.from_url(redis_url, decode_responses=True)
    try:
        await client.ping()
    except (redis.ConnectionError, OSError):
        await client.aclose()
        pytest.skip("Redis not available (set TEST_REDIS_URL)")

    yield client

    await client.aclose()


@pytest.fixture
def key_prefix() -> str:
    """Unique key prefix so parallel runs never collide."""
    return f"statebot-test-{uuid.uuid4().hex[:8]}"


@pytest_asyncio.fixture
async def clean_redis(redis_client: redis.Redis, key_prefix: str) -> AsyncIterator[None]:
    """Remove every key written under the test prefix."""
    yield
    async for key in redis_client.scan_iter(match=f"{key_prefix}:*"):
        await redis_client.delete(key)
    async for key in redis_client.scan_iter(match=f"turnlock:{key_prefix}/*"):
        await redis_client.delete(key)
