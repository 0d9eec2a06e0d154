"""Integration tests for Redis-backed state and turn locking."""

import asyncio

import pytest
import redis.asyncio as redis

from statebot.engine import ProfilePromptEngine
from statebot.errors import StaleStateError, TurnLockTimeoutError
from statebot.state.container import ConversationStateContainer, StateSet, UserStateContainer
from statebot.storage import RedisKeyValueStore, StoreWrite
from statebot.turns import RedisTurnMutex, TurnContext
from statebot.turns.dispatcher import TurnDispatcher
from tests.factories import ActivityFactory

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("clean_redis")]


@pytest.fixture
def store(redis_client: redis.Redis, key_prefix: str) -> RedisKeyValueStore:
    return RedisKeyValueStore(redis_client, key_prefix=key_prefix, ttl_seconds=60)


class TestRedisKeyValueStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, store: RedisKeyValueStore) -> None:
        etag = await store.set("emulator/users/u1", {"userProfile": {"userName": "Alice"}})

        item = await store.get("emulator/users/u1")

        assert item is not None
        assert item.etag == etag
        assert item.value == {"userProfile": {"userName": "Alice"}}

    @pytest.mark.asyncio
    async def test_ttl_applied(
        self, store: RedisKeyValueStore, redis_client: redis.Redis, key_prefix: str
    ) -> None:
        await store.set("k", {})
        ttl = await redis_client.ttl(f"{key_prefix}:state:k")
        assert 0 < ttl <= 60

    @pytest.mark.asyncio
    async def test_conditional_writes(self, store: RedisKeyValueStore) -> None:
        first = await store.set("k", {"n": 1}, None)
        second = await store.set("k", {"n": 2}, first)

        with pytest.raises(StaleStateError):
            await store.set("k", {"n": 3}, first)
        with pytest.raises(StaleStateError):
            await store.set("k", {"n": 3}, None)

        item = await store.get("k")
        assert item is not None
        assert item.etag == second
        assert item.value == {"n": 2}

    @pytest.mark.asyncio
    async def test_delete(self, store: RedisKeyValueStore) -> None:
        await store.set("k", {})
        assert await store.delete("k") is True
        assert await store.get("k") is None
        assert await store.delete("k") is False


    @pytest.mark.asyncio
    async def test_batch_with_stale_key_writes_nothing(self, store: RedisKeyValueStore) -> None:
        conversation = await store.set("conv", {"n": 1})
        await store.set("user", {"n": 1})

        with pytest.raises(StaleStateError):
            await store.set_many(
                [
                    StoreWrite(key="conv", value={"n": 2}, etag=conversation),
                    StoreWrite(key="user", value={"n": 2}, etag="stale"),
                ]
            )

        item = await store.get("conv")
        assert item is not None
        assert item.etag == conversation
        assert item.value == {"n": 1}

class TestRedisTurns:
    @pytest.mark.asyncio
    async def test_profile_sequence(
        self, store: RedisKeyValueStore, redis_client: redis.Redis, key_prefix: str
    ) -> None:
        conversation_state = ConversationStateContainer(store)
        user_state = UserStateContainer(store)
        engine = ProfilePromptEngine(conversation_state, user_state)
        dispatcher = TurnDispatcher(
            StateSet(conversation_state, user_state),
            RedisTurnMutex(redis_client, lock_timeout=5, blocking_timeout=2.0),
        )

        replies = []
        for text in ("hi", "Alice", "555-1234"):
            activity = ActivityFactory.message(text, channel_id=key_prefix)
            replies += [r.text for r in await dispatcher.process_activity(activity, engine.on_turn)]

        assert replies == [
            "What is your name?",
            "Hello, Alice. What's your telephone number?",
            "Got it. I'll call you later.",
        ]
        item = await store.get(f"{key_prefix}/users/user-1")
        assert item is not None
        assert item.value["userProfile"] == {"userName": "Alice", "telephoneNumber": "555-1234"}

    @pytest.mark.asyncio
    async def test_rejected_user_write_keeps_conversation(
        self, store: RedisKeyValueStore, redis_client: redis.Redis, key_prefix: str
    ) -> None:
        conversation_state = ConversationStateContainer(store)
        user_state = UserStateContainer(store)
        engine = ProfilePromptEngine(conversation_state, user_state)
        dispatcher = TurnDispatcher(
            StateSet(conversation_state, user_state),
            RedisTurnMutex(redis_client, lock_timeout=5, blocking_timeout=2.0),
        )
        conversation_key = f"{key_prefix}/conversations/conv-1"
        user_key = f"{key_prefix}/users/user-1"

        await dispatcher.process_activity(
            ActivityFactory.message("hi", channel_id=key_prefix), engine.on_turn
        )
        before = await store.get(conversation_key)

        async def interfering_turn(context: TurnContext) -> None:
            await engine.on_turn(context)
            await store.set(user_key, {"userProfile": None})

        with pytest.raises(StaleStateError):
            await dispatcher.process_activity(
                ActivityFactory.message("Alice", channel_id=key_prefix), interfering_turn
            )

        assert await store.get(conversation_key) == before
        assert before.value == {"topicState": {"prompt": "askNumber"}}

    @pytest.mark.asyncio
    async def test_lock_contention_times_out(
        self, redis_client: redis.Redis, key_prefix: str
    ) -> None:
        mutex = RedisTurnMutex(redis_client, lock_timeout=5, blocking_timeout=0.2)
        key = f"{key_prefix}/users/u1"

        async with mutex.acquire(key):
            assert await mutex.is_locked(key)
            with pytest.raises(TurnLockTimeoutError):
                async with mutex.acquire(key):
                    pass

        assert not await mutex.is_locked(key)

    @pytest.mark.asyncio
    async def test_same_key_turns_serialized(
        self, redis_client: redis.Redis, key_prefix: str
    ) -> None:
        mutex = RedisTurnMutex(redis_client, lock_timeout=5, blocking_timeout=2.0)
        key = f"{key_prefix}/users/u1"
        active = 0
        peak = 0

        async def turn() -> None:
            nonlocal active, peak
            async with mutex.acquire(key):
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.02)
                active -= 1

        await asyncio.gather(*(turn() for _ in range(3)))

        assert peak == 1
