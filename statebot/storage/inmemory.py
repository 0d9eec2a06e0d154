"""In-memory implementation of KeyValueStore."""

import json
from typing import Any
from uuid import uuid4

from statebot.errors import StaleStateError
from statebot.storage.store import ANY_ETAG, KeyValueStore, StoreItem, StoreWrite


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory implementation of KeyValueStore for testing and development.

    Values are round-tripped through JSON on every read and write, so
    callers never share mutable objects with the store and non-serializable
    state fails here exactly as it would against a real backend.
    State lives for the process lifetime. Not suitable for production use.
    """

    backend_name = "inmemory"

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._items: dict[str, tuple[str, str]] = {}

    async def get(self, key: str) -> StoreItem | None:
        """Get the item stored under key."""
        entry = self._items.get(key)
        if entry is None:
            return None
        payload, etag = entry
        return StoreItem(value=json.loads(payload), etag=etag)

    def _check_etag(self, key: str, etag: str | None) -> None:
        if etag == ANY_ETAG:
            return
        current = self._items.get(key)
        current_etag = current[1] if current else None
        if current_etag != etag:
            raise StaleStateError(key, etag)

    async def set(
        self,
        key: str,
        value: dict[str, Any],
        etag: str | None = ANY_ETAG,
    ) -> str:
        """Store value under key."""
        self._check_etag(key, etag)
        new_etag = uuid4().hex
        self._items[key] = (json.dumps(value), new_etag)
        return new_etag

    async def set_many(self, writes: list[StoreWrite]) -> list[str]:
        """Check every etag, then write every key."""
        for write in writes:
            self._check_etag(write.key, write.etag)
        payloads = [json.dumps(write.value) for write in writes]

        etags = []
        for write, payload in zip(writes, payloads, strict=True):
            new_etag = uuid4().hex
            self._items[write.key] = (payload, new_etag)
            etags.append(new_etag)
        return etags

    async def delete(self, key: str) -> bool:
        """Delete key."""
        return self._items.pop(key, None) is not None

    async def ping(self) -> bool:
        """Always reachable."""
        return True

    def __len__(self) -> int:
        return len(self._items)

    def keys(self) -> list[str]:
        """List stored keys."""
        return list(self._items)
