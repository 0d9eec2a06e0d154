"""Fixtures for API tests: a fresh app wired to an in-memory store."""

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statebot.api.app import create_app
from statebot.api.dependencies import get_state_store, reset_dependencies
from statebot.storage import InMemoryKeyValueStore


@pytest.fixture
async def app(store: InMemoryKeyValueStore) -> AsyncIterator[FastAPI]:
    """Create test FastAPI app backed by the shared in-memory store."""
    await reset_dependencies()

    app = create_app()
    app.dependency_overrides[get_state_store] = lambda: store

    yield app

    app.dependency_overrides.clear()
    await reset_dependencies()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that turns unhandled errors into 500 responses."""
    return TestClient(app, raise_server_exceptions=False)
