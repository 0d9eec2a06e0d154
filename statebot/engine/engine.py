"""Profile collection state machine.

Idle -> AskName -> AskNumber -> Confirmation -> Idle

The first message from a user with no profile creates the profile and
runs the AskName step in the same turn, so that message is answered with
the name question and its own text is not captured. Once the profile is
complete and no prompt is pending, further messages get no reply and
change nothing.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from statebot.observability.logging import get_logger
from statebot.observability.metrics import PROMPT_TRANSITIONS
from statebot.state.container import ConversationStateContainer, UserStateContainer
from statebot.state.models import PromptStage, TopicState, UserProfile
from statebot.turns.context import TurnContext

logger = get_logger(__name__)

NAME_QUESTION = "What is your name?"
NUMBER_QUESTION = "Hello, {user_name}. What's your telephone number?"
CONFIRMATION = "Got it. I'll call you later."

StageHandler = Callable[[TurnContext, UserProfile], Awaitable[PromptStage | None]]


class ConversationEngine(ABC):
    """Turn logic invoked once per inbound activity."""

    @abstractmethod
    async def on_turn(self, context: TurnContext) -> None:
        """Handle one turn, reading and mutating loaded state."""
        pass


class ProfilePromptEngine(ConversationEngine):
    """Asks for the user's name and telephone number, one question per turn.

    Only message activities advance the topic. Every stage has exactly one
    handler; a handler sends its reply and returns the next stage (None
    ends the topic).
    """

    def __init__(
        self,
        conversation_state: ConversationStateContainer,
        user_state: UserStateContainer,
    ) -> None:
        self._conversation_state = conversation_state
        self._user_state = user_state
        self._handlers: dict[PromptStage, StageHandler] = {
            PromptStage.ASK_NAME: self._ask_name,
            PromptStage.ASK_NUMBER: self._capture_name,
            PromptStage.CONFIRMATION: self._capture_number,
        }
        missing = frozenset(PromptStage) - self.handled_stages
        if missing:
            raise ValueError(f"No handler for prompt stages: {sorted(s.value for s in missing)}")

    @property
    def handled_stages(self) -> frozenset[PromptStage]:
        return frozenset(self._handlers)

    async def on_turn(self, context: TurnContext) -> None:
        if not context.activity.is_message:
            logger.debug("activity_ignored", activity_type=context.activity.type)
            return

        conversation = await self._conversation_state.load(context)
        user = await self._user_state.load(context)

        if conversation.topic_state is None:
            conversation.topic_state = TopicState()
        topic = conversation.topic_state

        if user.user_profile is None:
            user.user_profile = UserProfile()
            topic.prompt = PromptStage.ASK_NAME
            logger.info("profile_topic_started")

        stage = conversation.prompt
        if stage is None:
            logger.debug("no_pending_prompt")
            return

        profile = user.user_profile
        next_stage = await self._handlers[stage](context, profile)
        topic.prompt = next_stage

        PROMPT_TRANSITIONS.labels(
            from_stage=stage.value,
            to_stage=next_stage.value if next_stage else "idle",
        ).inc()
        logger.info(
            "prompt_advanced",
            from_stage=stage.value,
            to_stage=next_stage.value if next_stage else None,
        )
        if next_stage is None and profile.is_complete:
            logger.info("profile_completed")

    async def _ask_name(self, context: TurnContext, profile: UserProfile) -> PromptStage:
        await context.send_activity(NAME_QUESTION)
        return PromptStage.ASK_NUMBER

    async def _capture_name(self, context: TurnContext, profile: UserProfile) -> PromptStage:
        profile.user_name = _message_text(context)
        await context.send_activity(NUMBER_QUESTION.format(user_name=profile.user_name or ""))
        return PromptStage.CONFIRMATION

    async def _capture_number(self, context: TurnContext, profile: UserProfile) -> None:
        profile.telephone_number = _message_text(context)
        await context.send_activity(CONFIRMATION)
        return None


def _message_text(context: TurnContext) -> str | None:
    """Answer text with surrounding whitespace removed; None when the message has no text."""
    text = context.activity.text
    return text.strip() if text is not None else None
