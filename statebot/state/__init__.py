"""Conversation and user state: models and store-backed containers."""

from statebot.state.container import (
    ConversationStateContainer,
    StateContainer,
    StateSet,
    UserStateContainer,
)
from statebot.state.models import (
    ConversationData,
    PromptStage,
    TopicState,
    UserData,
    UserProfile,
)

__all__ = [
    "ConversationData",
    "ConversationStateContainer",
    "PromptStage",
    "StateContainer",
    "StateSet",
    "TopicState",
    "UserData",
    "UserProfile",
    "UserStateContainer",
]
