"""State containers binding a scope to a KeyValueStore.

A container computes its scope key from the inbound activity, loads the
value once per turn (cached on the TurnContext) and writes it back only
when the turn changed it.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from statebot.errors import MalformedActivityError, StatebotError, StoreUnavailableError
from statebot.observability.logging import get_logger
from statebot.observability.metrics import STORE_OPERATIONS
from statebot.state.models import ConversationData, UserData
from statebot.storage.store import ANY_ETAG, KeyValueStore, StoreWrite
from statebot.turns.context import TurnContext
from statebot.turns.models import Activity

logger = get_logger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)


@dataclass
class CachedState(Generic[StateT]):
    """A container's value for the current turn."""

    key: str
    state: StateT
    etag: str | None
    fingerprint: str


@dataclass
class PendingWrite:
    """A changed value waiting to be written at the end of a turn."""

    cached: CachedState[Any]
    write: StoreWrite
    fingerprint: str


def _fingerprint(data: dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True)


class StateContainer(ABC, Generic[StateT]):
    """Loads and saves one scope of state for a turn.

    With optimistic concurrency on, writes carry the etag seen at load
    time and a concurrent change raises StaleStateError. With it off,
    the last writer wins.
    """

    state_name: str = "state"

    def __init__(
        self,
        store: KeyValueStore,
        model: type[StateT],
        *,
        optimistic_concurrency: bool = True,
    ) -> None:
        self._store = store
        self._model = model
        self._optimistic = optimistic_concurrency
        self._cache_key = f"state:{self.state_name}"

    @property
    def store(self) -> KeyValueStore:
        """The store this container reads and writes."""
        return self._store

    @abstractmethod
    def get_storage_key(self, activity: Activity) -> str:
        """Compute the scope key for an activity.

        Raises:
            MalformedActivityError: If the activity lacks the needed ids
        """
        pass

    def _dump(self, state: StateT) -> dict[str, Any]:
        return state.model_dump(mode="json", by_alias=True)

    def _record(self, operation: str, outcome: str) -> None:
        STORE_OPERATIONS.labels(
            backend=self._store.backend_name,
            operation=operation,
            outcome=outcome,
        ).inc()

    def get(self, context: TurnContext) -> StateT | None:
        """Get the value loaded this turn, or None if not loaded yet."""
        cached: CachedState[StateT] | None = context.turn_state.get(self._cache_key)
        return cached.state if cached else None

    async def load(self, context: TurnContext, force: bool = False) -> StateT:
        """Load state for the turn, creating an empty value if absent.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        cached: CachedState[StateT] | None = context.turn_state.get(self._cache_key)
        if cached is not None and not force:
            return cached.state

        key = self.get_storage_key(context.activity)
        try:
            item = await self._store.get(key)
        except StatebotError:
            self._record("get", "error")
            raise
        self._record("get", "ok")

        if item is None:
            state = self._model()
            etag = None
        else:
            try:
                state = self._model.model_validate(item.value)
            except ValidationError as e:
                raise StoreUnavailableError(
                    f"Stored {self.state_name} state for '{key}' is invalid", cause=e
                ) from e
            etag = item.etag

        context.turn_state[self._cache_key] = CachedState(
            key=key,
            state=state,
            etag=etag,
            fingerprint=_fingerprint(self._dump(state)),
        )
        logger.debug("state_loaded", scope=self.state_name, key=key, found=item is not None)
        return state

    def pending_write(self, context: TurnContext, force: bool = False) -> PendingWrite | None:
        """Build the write this turn needs, or None if state is unchanged."""
        cached: CachedState[StateT] | None = context.turn_state.get(self._cache_key)
        if cached is None:
            return None

        data = self._dump(cached.state)
        fingerprint = _fingerprint(data)
        if not force and fingerprint == cached.fingerprint:
            return None

        etag = cached.etag if self._optimistic else ANY_ETAG
        return PendingWrite(
            cached=cached,
            write=StoreWrite(key=cached.key, value=data, etag=etag),
            fingerprint=fingerprint,
        )

    def commit(self, pending: PendingWrite, etag: str) -> None:
        """Record a successful write so later saves in the turn compare against it."""
        pending.cached.etag = etag
        pending.cached.fingerprint = pending.fingerprint
        logger.debug("state_saved", scope=self.state_name, key=pending.write.key)

    async def save_changes(self, context: TurnContext, force: bool = False) -> bool:
        """Write state back if the turn changed it.

        Returns:
            True if a write happened

        Raises:
            StaleStateError: If another writer changed the key since load
            StoreUnavailableError: If the store cannot be reached
        """
        pending = self.pending_write(context, force)
        if pending is None:
            return False

        write = pending.write
        try:
            etag = await self._store.set(write.key, write.value, write.etag)
        except StatebotError:
            self._record("set", "error")
            raise
        self._record("set", "ok")

        self.commit(pending, etag)
        return True

    async def clear(self, context: TurnContext) -> None:
        """Reset the turn's value to empty; persisted by the next save."""
        await self.load(context)
        cached: CachedState[StateT] = context.turn_state[self._cache_key]
        cached.state = self._model()

    async def delete(self, context: TurnContext) -> bool:
        """Remove the scope's record from the store and drop the cached value."""
        key = self.get_storage_key(context.activity)
        context.turn_state.pop(self._cache_key, None)
        try:
            deleted = await self._store.delete(key)
        except StatebotError:
            self._record("delete", "error")
            raise
        self._record("delete", "ok")
        return deleted


class ConversationStateContainer(StateContainer[ConversationData]):
    """State scoped to a conversation: {channelId}/conversations/{conversationId}."""

    state_name = "conversation"

    def __init__(self, store: KeyValueStore, *, optimistic_concurrency: bool = True) -> None:
        super().__init__(store, ConversationData, optimistic_concurrency=optimistic_concurrency)

    def get_storage_key(self, activity: Activity) -> str:
        if not activity.channel_id:
            raise MalformedActivityError("Activity is missing channelId")
        if activity.conversation is None:
            raise MalformedActivityError("Activity is missing conversation.id")
        return f"{activity.channel_id}/conversations/{activity.conversation.id}"


class UserStateContainer(StateContainer[UserData]):
    """State scoped to a user: {channelId}/users/{fromId}."""

    state_name = "user"

    def __init__(self, store: KeyValueStore, *, optimistic_concurrency: bool = True) -> None:
        super().__init__(store, UserData, optimistic_concurrency=optimistic_concurrency)

    def get_storage_key(self, activity: Activity) -> str:
        if not activity.channel_id:
            raise MalformedActivityError("Activity is missing channelId")
        if activity.from_ is None:
            raise MalformedActivityError("Activity is missing from.id")
        return f"{activity.channel_id}/users/{activity.from_.id}"


class StateSet:
    """Loads and saves a group of containers together.

    All containers must share one store. `save_all` writes every changed
    scope in a single atomic `set_many`, so a failed save leaves every
    scope as it was before the turn.
    """

    def __init__(self, *containers: StateContainer[Any]) -> None:
        if len({id(c.store) for c in containers}) > 1:
            raise ValueError("All containers in a StateSet must share one store")
        self.containers = list(containers)

    def storage_keys(self, activity: Activity) -> list[str]:
        """Scope keys an activity touches, one per container."""
        return [c.get_storage_key(activity) for c in self.containers]

    async def load_all(self, context: TurnContext, force: bool = False) -> None:
        for container in self.containers:
            await container.load(context, force)

    async def save_all(self, context: TurnContext, force: bool = False) -> bool:
        """Write every changed scope atomically.

        Returns:
            True if anything was written

        Raises:
            StaleStateError: If any scope changed since load; nothing is written
            StoreUnavailableError: If the store cannot be reached
        """
        pending: list[tuple[StateContainer[Any], PendingWrite]] = []
        for container in self.containers:
            write = container.pending_write(context, force)
            if write is not None:
                pending.append((container, write))
        if not pending:
            return False

        store = self.containers[0].store
        try:
            etags = await store.set_many([p.write for _, p in pending])
        except StatebotError:
            STORE_OPERATIONS.labels(
                backend=store.backend_name, operation="set_many", outcome="error"
            ).inc()
            raise
        STORE_OPERATIONS.labels(
            backend=store.backend_name, operation="set_many", outcome="ok"
        ).inc()

        for (container, write), etag in zip(pending, etags, strict=True):
            container.commit(write, etag)
        return True
