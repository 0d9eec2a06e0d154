"""Bounded retry wrapper for KeyValueStore."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from statebot.errors import StoreUnavailableError
from statebot.observability.logging import get_logger
from statebot.observability.metrics import STORE_RETRIES
from statebot.storage.store import ANY_ETAG, KeyValueStore, StoreItem, StoreWrite

logger = get_logger(__name__)

T = TypeVar("T")


class RetryingKeyValueStore(KeyValueStore):
    """Retries StoreUnavailableError with exponential backoff.

    Only transient backend failures are retried. StaleStateError means
    another writer won and is raised immediately.
    """

    def __init__(
        self,
        inner: KeyValueStore,
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ) -> None:
        self._inner = inner
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self.backend_name = inner.backend_name

    async def _call(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        delay = self._backoff_seconds
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await fn()
            except StoreUnavailableError as e:
                if attempt == self._max_attempts:
                    logger.error(
                        "store_retries_exhausted",
                        operation=operation,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise
                STORE_RETRIES.labels(operation=operation).inc()
                logger.warning(
                    "store_operation_retry",
                    operation=operation,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)
                delay *= 2
        raise AssertionError("unreachable")

    async def get(self, key: str) -> StoreItem | None:
        return await self._call("get", lambda: self._inner.get(key))

    async def set(
        self,
        key: str,
        value: dict[str, Any],
        etag: str | None = ANY_ETAG,
    ) -> str:
        return await self._call("set", lambda: self._inner.set(key, value, etag))

    async def set_many(self, writes: list[StoreWrite]) -> list[str]:
        return await self._call("set_many", lambda: self._inner.set_many(writes))

    async def delete(self, key: str) -> bool:
        return await self._call("delete", lambda: self._inner.delete(key))

    async def ping(self) -> bool:
        return await self._inner.ping()

    async def close(self) -> None:
        await self._inner.close()
