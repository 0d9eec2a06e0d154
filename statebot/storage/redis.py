"""Redis implementation of KeyValueStore.

Each key holds a JSON envelope {"value": ..., "etag": ...}. Conditional
writes, single or batched, run inside one WATCH/MULTI transaction so a
concurrent writer between the etag check and the write aborts it.
"""

import json
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from redis.asyncio.client import Pipeline
from redis.exceptions import WatchError

from statebot.errors import StaleStateError, StoreUnavailableError
from statebot.observability.logging import get_logger
from statebot.storage.store import ANY_ETAG, KeyValueStore, StoreItem, StoreWrite

logger = get_logger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """Redis implementation of KeyValueStore.

    Key structure:
    - {prefix}:state:{key} - JSON envelope with value and etag

    When ttl_seconds is set, every write refreshes the expiry, so idle
    conversations and users are evicted by Redis.
    """

    backend_name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "statebot",
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize Redis store.

        Args:
            client: Redis client instance
            key_prefix: Prefix for all keys written by this store
            ttl_seconds: Optional expiry applied on every write
        """
        self._client = client
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, key: str) -> str:
        """Get Redis key for a state key."""
        return f"{self._prefix}:state:{key}"

    @staticmethod
    def _decode(key: str, data: str | bytes) -> StoreItem:
        try:
            envelope = json.loads(data)
            return StoreItem(value=envelope["value"], etag=envelope["etag"])
        except (ValueError, KeyError, TypeError) as e:
            raise StoreUnavailableError(f"Unreadable state for key '{key}'", cause=e) from e

    @staticmethod
    def _encode(value: dict[str, Any], etag: str) -> str:
        return json.dumps({"value": value, "etag": etag})

    async def get(self, key: str) -> StoreItem | None:
        """Get the item stored under key."""
        try:
            data = await self._client.get(self._key(key))
        except redis.RedisError as e:
            logger.error("redis_get_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to get state: {e}", cause=e) from e

        if data is None:
            return None
        return self._decode(key, data)

    async def _check_watched(self, pipe: Pipeline, key: str, etag: str | None) -> None:
        """Compare a watched key's stored etag with the expected one."""
        current = await pipe.get(self._key(key))
        current_etag = self._decode(key, current).etag if current is not None else None
        if current_etag != etag:
            await pipe.unwatch()
            raise StaleStateError(key, etag)

    async def set(
        self,
        key: str,
        value: dict[str, Any],
        etag: str | None = ANY_ETAG,
    ) -> str:
        """Store value under key, checking etag inside a transaction."""
        if etag != ANY_ETAG:
            (new_etag,) = await self.set_many([StoreWrite(key=key, value=value, etag=etag)])
            return new_etag

        new_etag = uuid4().hex
        try:
            await self._client.set(self._key(key), self._encode(value, new_etag), ex=self._ttl)
        except redis.RedisError as e:
            logger.error("redis_set_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to save state: {e}", cause=e) from e
        return new_etag

    async def set_many(self, writes: list[StoreWrite]) -> list[str]:
        """Write several keys in one MULTI/EXEC.

        Conditional keys are WATCHed and checked first, so a concurrent
        writer to any of them aborts the whole transaction.
        """
        new_etags = [uuid4().hex for _ in writes]
        conditional = [w for w in writes if w.etag != ANY_ETAG]
        keys = [w.key for w in writes]

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                if conditional:
                    await pipe.watch(*(self._key(w.key) for w in conditional))
                    for write in conditional:
                        await self._check_watched(pipe, write.key, write.etag)

                pipe.multi()
                for write, new_etag in zip(writes, new_etags, strict=True):
                    pipe.set(
                        self._key(write.key),
                        self._encode(write.value, new_etag),
                        ex=self._ttl,
                    )
                await pipe.execute()

        except WatchError as e:
            logger.warning("redis_write_conflict", keys=keys)
            first = conditional[0]
            raise StaleStateError(first.key, first.etag) from e
        except redis.RedisError as e:
            logger.error("redis_set_error", keys=keys, error=str(e))
            raise StoreUnavailableError(f"Failed to save state: {e}", cause=e) from e

        return new_etags

    async def delete(self, key: str) -> bool:
        """Delete key."""
        try:
            return await self._client.delete(self._key(key)) > 0
        except redis.RedisError as e:
            logger.error("redis_delete_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to delete state: {e}", cause=e) from e

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            return bool(await self._client.ping())
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Redis ping failed: {e}", cause=e) from e

    async def close(self) -> None:
        """Close the Redis client."""
        await self._client.aclose()
