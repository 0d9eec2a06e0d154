"""Conversation and user state models.

Persisted with camelCase keys:
- conversation: {"topicState": {"prompt": "askName" | ... | null}}
- user: {"userProfile": {"userName": str | null, "telephoneNumber": str | null}}

Absent values are explicit None, never missing keys.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PromptStage(str, Enum):
    """Which profile question is pending in a conversation."""

    ASK_NAME = "askName"
    ASK_NUMBER = "askNumber"
    CONFIRMATION = "confirmation"


class _StateModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )


class TopicState(_StateModel):
    """Progress of the multi-turn topic in a conversation."""

    prompt: PromptStage | None = Field(default=None, description="Pending question")


class ConversationData(_StateModel):
    """Conversation-scoped state."""

    topic_state: TopicState | None = Field(default=None, description="Active topic")

    @property
    def prompt(self) -> PromptStage | None:
        """Pending prompt stage, or None when no topic is in progress."""
        return self.topic_state.prompt if self.topic_state else None


class UserProfile(_StateModel):
    """Profile details collected from the user."""

    user_name: str | None = Field(default=None, description="Name given by the user")
    telephone_number: str | None = Field(default=None, description="Telephone number")

    @property
    def is_complete(self) -> bool:
        return self.user_name is not None and self.telephone_number is not None


class UserData(_StateModel):
    """User-scoped state."""

    user_profile: UserProfile | None = Field(default=None, description="Collected profile")
