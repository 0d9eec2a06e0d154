"""Activity models exchanged with the channel.

Field names follow the channel's camelCase JSON; Python code uses
snake_case attributes. `from` is a keyword, so the sender lives in
`from_` with alias "from".
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ActivityTypes(str, Enum):
    """Activity types the dispatcher knows about.

    Unknown types are still accepted; the engine only reacts to MESSAGE.
    """

    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"
    TYPING = "typing"
    END_OF_CONVERSATION = "endOfConversation"
    EVENT = "event"
    INVOKE = "invoke"


class _ChannelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ChannelAccount(_ChannelModel):
    """A user or bot on a channel."""

    id: str = Field(..., min_length=1, description="Channel-specific account id")
    name: str | None = Field(default=None, description="Display name")


class ConversationAccount(_ChannelModel):
    """A conversation on a channel."""

    id: str = Field(..., min_length=1, description="Channel-specific conversation id")
    name: str | None = Field(default=None, description="Conversation name")


class Activity(_ChannelModel):
    """An inbound or outbound activity."""

    type: str = Field(..., min_length=1, description="Activity type")
    id: str | None = Field(default=None, description="Activity id")
    timestamp: datetime | None = Field(default=None, description="Send time")
    channel_id: str | None = Field(default=None, description="Channel identifier")
    conversation: ConversationAccount | None = Field(default=None)
    from_: ChannelAccount | None = Field(default=None, alias="from")
    recipient: ChannelAccount | None = Field(default=None)
    text: str | None = Field(default=None, description="Message text")
    service_url: str | None = Field(default=None, description="Channel callback URL")
    reply_to_id: str | None = Field(default=None, description="Activity this replies to")
    locale: str | None = Field(default=None)

    @property
    def is_message(self) -> bool:
        """Whether this is a message activity."""
        return self.type == ActivityTypes.MESSAGE.value

    def create_reply(self, text: str) -> "Activity":
        """Build a message addressed back to the sender of this activity."""
        return Activity(
            type=ActivityTypes.MESSAGE.value,
            timestamp=utc_now(),
            channel_id=self.channel_id,
            conversation=self.conversation,
            from_=self.recipient,
            recipient=self.from_,
            text=text,
            service_url=self.service_url,
            reply_to_id=self.id,
            locale=self.locale,
        )
