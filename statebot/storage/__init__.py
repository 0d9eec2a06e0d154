"""Key-value stores backing conversation and user state."""

from statebot.storage.factory import create_key_value_store
from statebot.storage.inmemory import InMemoryKeyValueStore
from statebot.storage.redis import RedisKeyValueStore
from statebot.storage.retry import RetryingKeyValueStore
from statebot.storage.store import ANY_ETAG, KeyValueStore, StoreItem, StoreWrite

__all__ = [
    "ANY_ETAG",
    "KeyValueStore",
    "StoreItem",
    "StoreWrite",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "RetryingKeyValueStore",
    "create_key_value_store",
]
