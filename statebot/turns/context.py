"""Per-turn context."""

from typing import Any

from statebot.errors import DeliveryFailedError
from statebot.observability.logging import get_logger
from statebot.observability.metrics import DELIVERY_FAILURES
from statebot.turns.models import Activity
from statebot.turns.outbound import OutboundChannel

logger = get_logger(__name__)


class TurnContext:
    """Everything known about a single turn.

    Holds the inbound activity, a scratch dictionary that lives for the
    turn (state containers cache their loaded values there), and the
    outbound channel used to send replies.
    """

    def __init__(self, activity: Activity, outbound: OutboundChannel) -> None:
        self.activity = activity
        self.turn_state: dict[str, Any] = {}
        self.responses: list[Activity] = []
        self._outbound = outbound

    async def send_activity(self, activity_or_text: Activity | str) -> Activity:
        """Send a reply.

        Text is wrapped in a message addressed back to the sender.

        Raises:
            DeliveryFailedError: If the outbound channel fails
        """
        if isinstance(activity_or_text, str):
            reply = self.activity.create_reply(activity_or_text)
        else:
            reply = activity_or_text

        try:
            await self._outbound.send([reply])
        except Exception as e:
            DELIVERY_FAILURES.inc()
            logger.error(
                "reply_delivery_failed",
                conversation_id=self.activity.conversation.id if self.activity.conversation else None,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DeliveryFailedError(f"Failed to deliver reply: {e}", cause=e) from e

        self.responses.append(reply)
        return reply
