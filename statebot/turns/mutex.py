"""Per-key turn serialization.

Two turns touching the same conversation or user key must not
interleave, or the prompt sequence would be read and written out of
order. The dispatcher holds the locks for every key a turn touches from
state load until state save.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from contextlib import AbstractAsyncContextManager, AsyncExitStack, asynccontextmanager

import redis.asyncio as redis
from redis.exceptions import LockError

from statebot.errors import StoreUnavailableError, TurnLockTimeoutError
from statebot.observability.logging import get_logger

logger = get_logger(__name__)


class TurnMutex(ABC):
    """Mutual exclusion keyed by state scope key."""

    def __init__(self, blocking_timeout: float = 5.0) -> None:
        self._blocking_timeout = blocking_timeout

    @abstractmethod
    def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AbstractAsyncContextManager[None]:
        """Hold the lock for key for the duration of the context.

        Raises:
            TurnLockTimeoutError: If the lock is not acquired in time
        """
        pass

    @asynccontextmanager
    async def acquire_all(self, keys: Iterable[str]) -> AsyncIterator[None]:
        """Hold locks for several keys.

        Keys are deduplicated and taken in sorted order so two turns that
        share keys can never deadlock.
        """
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self.acquire(key))
            yield


class InMemoryTurnMutex(TurnMutex):
    """Process-local locks, one asyncio.Lock per active key.

    asyncio.Lock wakes waiters in FIFO order, so turns on the same key run
    in arrival order. Lock entries are dropped once nobody holds or waits
    on them.
    """

    def __init__(self, blocking_timeout: float = 5.0) -> None:
        super().__init__(blocking_timeout)
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AsyncIterator[None]:
        timeout = self._blocking_timeout if blocking_timeout is None else blocking_timeout
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout)
            except TimeoutError:
                logger.warning("turn_lock_timeout", key=key, timeout=timeout)
                raise TurnLockTimeoutError(key, timeout) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    async def is_locked(self, key: str) -> bool:
        """Check if a key is currently held."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


class RedisTurnMutex(TurnMutex):
    """Redis-backed distributed lock for multi-process deployments.

    Lock key format: turnlock:{scope_key}
    """

    def __init__(
        self,
        client: redis.Redis,
        lock_timeout: int = 30,
        blocking_timeout: float = 5.0,
    ) -> None:
        """Initialize Redis turn mutex.

        Args:
            client: Redis client instance
            lock_timeout: How long lock is held before auto-release (seconds)
            blocking_timeout: How long to wait when trying to acquire (seconds)
        """
        super().__init__(blocking_timeout)
        self._client = client
        self._lock_timeout = lock_timeout

    def _key(self, key: str) -> str:
        """Build Redis lock key."""
        return f"turnlock:{key}"

    @asynccontextmanager
    async def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AsyncIterator[None]:
        timeout = self._blocking_timeout if blocking_timeout is None else blocking_timeout
        lock = self._client.lock(
            self._key(key),
            timeout=self._lock_timeout,
            blocking_timeout=timeout,
        )

        try:
            acquired = await lock.acquire()
        except redis.RedisError as e:
            raise StoreUnavailableError(f"Failed to acquire turn lock: {e}", cause=e) from e

        if not acquired:
            logger.warning("turn_lock_timeout", key=key, timeout=timeout)
            raise TurnLockTimeoutError(key, timeout)

        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Lock expired before release; the turn ran past lock_timeout
                logger.warning("turn_lock_expired", key=key, lock_timeout=self._lock_timeout)

    async def is_locked(self, key: str) -> bool:
        """Check if a key is currently held."""
        return await self._client.exists(self._key(key)) > 0
