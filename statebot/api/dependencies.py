"""Dependency injection for API routes.

Provides FastAPI dependencies for the state store, turn mutex, state
containers, engine and dispatcher. Instances are created once from
settings and reused; tests override them via app.dependency_overrides
or reset them with reset_dependencies().
"""

import os
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from statebot.config import get_settings as _load_settings
from statebot.config.settings import Settings
from statebot.engine.engine import ProfilePromptEngine
from statebot.observability.logging import get_logger
from statebot.state.container import (
    ConversationStateContainer,
    StateSet,
    UserStateContainer,
)
from statebot.storage.factory import create_key_value_store
from statebot.storage.store import KeyValueStore
from statebot.turns.dispatcher import TurnDispatcher
from statebot.turns.mutex import InMemoryTurnMutex, RedisTurnMutex, TurnMutex

logger = get_logger(__name__)

# Shared Redis client, created only when a Redis backend is configured
_redis_client: redis.Redis | None = None

# Instances - created once and reused
_state_store: KeyValueStore | None = None
_turn_mutex: TurnMutex | None = None
_conversation_state: ConversationStateContainer | None = None
_user_state: UserStateContainer | None = None
_engine: ProfilePromptEngine | None = None
_dispatcher: TurnDispatcher | None = None


def get_settings() -> Settings:
    """Get application settings (cached by statebot.config)."""
    return _load_settings()


def get_redis_client(settings: Settings) -> redis.Redis:
    """Get the shared Redis client.

    Uses REDIS_URL from environment, falling back to storage.redis_url.
    """
    global _redis_client
    if _redis_client is None:
        url = os.environ.get("REDIS_URL", settings.storage.redis_url)
        _redis_client = redis.from_url(url, decode_responses=True)
        logger.info("redis_client_created", url=url.split("@")[-1])  # Log without credentials
    return _redis_client


def get_state_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> KeyValueStore:
    """Get the KeyValueStore backing conversation and user state."""
    global _state_store
    if _state_store is None:
        client = get_redis_client(settings) if settings.storage.backend == "redis" else None
        _state_store = create_key_value_store(settings.storage, client=client)
        logger.info("state_store_initialized", backend=settings.storage.backend)
    return _state_store


def get_turn_mutex(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TurnMutex:
    """Get the mutex serializing turns per state key."""
    global _turn_mutex
    if _turn_mutex is None:
        config = settings.turns
        if config.mutex == "redis":
            _turn_mutex = RedisTurnMutex(
                get_redis_client(settings),
                lock_timeout=config.lock_timeout_seconds,
                blocking_timeout=config.blocking_timeout_seconds,
            )
        else:
            _turn_mutex = InMemoryTurnMutex(blocking_timeout=config.blocking_timeout_seconds)
        logger.info("turn_mutex_initialized", backend=config.mutex)
    return _turn_mutex


def get_conversation_state(
    store: Annotated[KeyValueStore, Depends(get_state_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConversationStateContainer:
    """Get the conversation-scoped state container."""
    global _conversation_state
    if _conversation_state is None:
        _conversation_state = ConversationStateContainer(
            store,
            optimistic_concurrency=settings.storage.optimistic_concurrency,
        )
    return _conversation_state


def get_user_state(
    store: Annotated[KeyValueStore, Depends(get_state_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserStateContainer:
    """Get the user-scoped state container."""
    global _user_state
    if _user_state is None:
        _user_state = UserStateContainer(
            store,
            optimistic_concurrency=settings.storage.optimistic_concurrency,
        )
    return _user_state


def get_engine(
    conversation_state: Annotated[ConversationStateContainer, Depends(get_conversation_state)],
    user_state: Annotated[UserStateContainer, Depends(get_user_state)],
) -> ProfilePromptEngine:
    """Get the conversation engine."""
    global _engine
    if _engine is None:
        _engine = ProfilePromptEngine(conversation_state, user_state)
        logger.info("engine_initialized")
    return _engine


def get_dispatcher(
    conversation_state: Annotated[ConversationStateContainer, Depends(get_conversation_state)],
    user_state: Annotated[UserStateContainer, Depends(get_user_state)],
    mutex: Annotated[TurnMutex, Depends(get_turn_mutex)],
) -> TurnDispatcher:
    """Get the turn dispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = TurnDispatcher(StateSet(conversation_state, user_state), mutex)
        logger.info("dispatcher_initialized")
    return _dispatcher


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
StateStoreDep = Annotated[KeyValueStore, Depends(get_state_store)]
EngineDep = Annotated[ProfilePromptEngine, Depends(get_engine)]
DispatcherDep = Annotated[TurnDispatcher, Depends(get_dispatcher)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used at shutdown and in tests. Closes connections before resetting.
    """
    global _redis_client, _state_store, _turn_mutex
    global _conversation_state, _user_state, _engine, _dispatcher

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    elif _state_store is not None:
        await _state_store.close()

    _state_store = None
    _turn_mutex = None
    _conversation_state = None
    _user_state = None
    _engine = None
    _dispatcher = None
