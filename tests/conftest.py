"""Shared test fixtures for the statebot test suite."""

from collections.abc import Generator
from pathlib import Path

import pytest

from statebot.state.container import (
    ConversationStateContainer,
    StateSet,
    UserStateContainer,
)
from statebot.storage.inmemory import InMemoryKeyValueStore


@pytest.fixture
def test_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary config directory and point STATEBOT_CONFIG_DIR at it."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("STATEBOT_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("STATEBOT_ENV", "test")
    return config_dir


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache and TOML source before and after each test.

    This ensures test isolation for configuration tests.
    """
    from statebot.config import get_settings
    from statebot.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Fresh in-memory store for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def conversation_state(store: InMemoryKeyValueStore) -> ConversationStateContainer:
    return ConversationStateContainer(store)


@pytest.fixture
def user_state(store: InMemoryKeyValueStore) -> UserStateContainer:
    return UserStateContainer(store)


@pytest.fixture
def state_set(
    conversation_state: ConversationStateContainer,
    user_state: UserStateContainer,
) -> StateSet:
    return StateSet(conversation_state, user_state)
