"""Turn logic: the profile collection state machine."""

from statebot.engine.engine import (
    CONFIRMATION,
    NAME_QUESTION,
    NUMBER_QUESTION,
    ConversationEngine,
    ProfilePromptEngine,
)

__all__ = [
    "CONFIRMATION",
    "NAME_QUESTION",
    "NUMBER_QUESTION",
    "ConversationEngine",
    "ProfilePromptEngine",
]
