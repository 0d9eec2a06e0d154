"""KeyValueStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

ANY_ETAG = "*"
"""Write unconditionally, whatever version is stored."""


class StoreItem(BaseModel):
    """A stored value together with its version marker."""

    value: dict[str, Any] = Field(default_factory=dict, description="JSON-compatible state")
    etag: str = Field(..., description="Opaque version, regenerated on every write")


class StoreWrite(BaseModel):
    """One conditional write in a batch passed to `KeyValueStore.set_many`."""

    key: str
    value: dict[str, Any] = Field(default_factory=dict)
    etag: str | None = Field(default=ANY_ETAG, description="Same semantics as for set")


class KeyValueStore(ABC):
    """Abstract interface for state storage.

    Maps string keys to JSON-compatible dictionaries. Every write returns
    a fresh etag; callers pass the etag they loaded back into `set` to
    have stale writes rejected.

    Etag semantics for `set`:
    - ANY_ETAG: unconditional write (last writer wins)
    - None: create only; fails if the key already exists
    - any other value: must equal the stored etag
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> StoreItem | None:
        """Get the item stored under key, or None if absent.

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: dict[str, Any],
        etag: str | None = ANY_ETAG,
    ) -> str:
        """Store value under key, returning the new etag.

        Raises:
            StaleStateError: If etag does not match the stored version
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def set_many(self, writes: list[StoreWrite]) -> list[str]:
        """Store several values atomically, returning their new etags in order.

        Every etag is checked before anything is written. If one check
        fails, no key is changed.

        Raises:
            StaleStateError: If any etag does not match its stored version
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key, returning whether it existed."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        pass

    async def close(self) -> None:  # noqa: B027
        """Release backend resources. No-op by default."""
