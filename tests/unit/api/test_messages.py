"""Unit tests for POST /api/messages."""

from fastapi.testclient import TestClient

from statebot.storage import InMemoryKeyValueStore
from tests.factories import ActivityFactory


def _post(client: TestClient, text: str | None, **kwargs) -> list[dict]:
    response = client.post("/api/messages", json=ActivityFactory.payload(text, **kwargs))
    assert response.status_code == 200, response.text
    return response.json()["activities"]


class TestPostMessage:
    def test_profile_conversation(self, client: TestClient) -> None:
        texts = [
            [a["text"] for a in _post(client, text)]
            for text in ("hi", "Alice", "555-1234", "anything else?")
        ]

        assert texts == [
            ["What is your name?"],
            ["Hello, Alice. What's your telephone number?"],
            ["Got it. I'll call you later."],
            [],
        ]

    def test_reply_addressed_to_sender(self, client: TestClient) -> None:
        (reply,) = _post(client, "hi")

        assert reply["type"] == "message"
        assert reply["from"] == {"id": "bot", "name": "Bot"}
        assert reply["recipient"] == {"id": "user-1", "name": "User"}
        assert reply["conversation"] == {"id": "conv-1"}
        assert reply["channelId"] == "emulator"
        assert reply["replyToId"] == "act-1"
        assert "locale" not in reply

    def test_state_persisted(self, client: TestClient, store: InMemoryKeyValueStore) -> None:
        _post(client, "hi")
        _post(client, "Alice")

        assert sorted(store.keys()) == [
            "emulator/conversations/conv-1",
            "emulator/users/user-1",
        ]

    def test_non_message_activity(
        self, client: TestClient, store: InMemoryKeyValueStore
    ) -> None:
        assert _post(client, None, activity_type="conversationUpdate") == []
        assert len(store) == 0

    def test_users_progress_independently(self, client: TestClient) -> None:
        _post(client, "hi", user_id="alice", conversation_id="c-alice")
        _post(client, "hi", user_id="bob", conversation_id="c-bob")

        alice = _post(client, "Alice", user_id="alice", conversation_id="c-alice")
        bob = _post(client, "Bob", user_id="bob", conversation_id="c-bob")

        assert alice[0]["text"] == "Hello, Alice. What's your telephone number?"
        assert bob[0]["text"] == "Hello, Bob. What's your telephone number?"


class TestInvalidActivities:
    def test_missing_type(self, client: TestClient) -> None:
        payload = ActivityFactory.payload("hi")
        del payload["type"]

        response = client.post("/api/messages", json=payload)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert any(d["field"] == "body.type" for d in error["details"])

    def test_not_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/messages",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_missing_conversation(
        self, client: TestClient, store: InMemoryKeyValueStore
    ) -> None:
        payload = ActivityFactory.payload("hi")
        del payload["conversation"]

        response = client.post("/api/messages", json=payload)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ACTIVITY"
        assert len(store) == 0

    def test_missing_channel(self, client: TestClient) -> None:
        payload = ActivityFactory.payload("hi")
        del payload["channelId"]

        response = client.post("/api/messages", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "INVALID_ACTIVITY",
            "message": "Activity is missing channelId",
            "details": None,
        }
