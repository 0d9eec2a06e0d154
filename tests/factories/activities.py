"""Test factories for inbound activities."""

from statebot.turns.models import Activity, ChannelAccount, ConversationAccount


class ActivityFactory:
    """Factory for creating Activity instances for testing."""

    @staticmethod
    def message(
        text: str | None = "hi",
        *,
        conversation_id: str = "conv-1",
        user_id: str = "user-1",
        channel_id: str = "emulator",
        activity_id: str | None = None,
    ) -> Activity:
        """Create a message activity from a user to the bot."""
        return ActivityFactory.create(
            "message",
            text=text,
            conversation_id=conversation_id,
            user_id=user_id,
            channel_id=channel_id,
            activity_id=activity_id,
        )

    @staticmethod
    def create(
        activity_type: str,
        *,
        text: str | None = None,
        conversation_id: str = "conv-1",
        user_id: str = "user-1",
        channel_id: str = "emulator",
        activity_id: str | None = None,
    ) -> Activity:
        """Create an activity of any type."""
        return Activity(
            type=activity_type,
            id=activity_id,
            channel_id=channel_id,
            conversation=ConversationAccount(id=conversation_id),
            from_=ChannelAccount(id=user_id, name="User"),
            recipient=ChannelAccount(id="bot", name="Bot"),
            text=text,
            service_url="http://localhost:3978",
        )

    @staticmethod
    def payload(
        text: str | None = "hi",
        *,
        activity_type: str = "message",
        conversation_id: str = "conv-1",
        user_id: str = "user-1",
        channel_id: str = "emulator",
    ) -> dict:
        """Create a wire-format (camelCase) activity payload."""
        payload: dict = {
            "type": activity_type,
            "id": "act-1",
            "channelId": channel_id,
            "conversation": {"id": conversation_id},
            "from": {"id": user_id, "name": "User"},
            "recipient": {"id": "bot", "name": "Bot"},
            "serviceUrl": "http://localhost:3978",
        }
        if text is not None:
            payload["text"] = text
        return payload
