"""Turn dispatcher: runs one turn per inbound activity.

For each activity the dispatcher:
1. builds a TurnContext around an outbound channel
2. locks every state key the turn touches
3. loads all state containers
4. runs the turn logic
5. saves changed state
6. releases the locks and returns the replies

Any failure aborts the turn before step 5, so the store keeps the state
it had before the turn.
"""

import time
from collections.abc import Awaitable, Callable

import structlog

from statebot.errors import StatebotError
from statebot.observability.logging import get_logger
from statebot.observability.metrics import TURN_COUNT, TURN_LATENCY
from statebot.state.container import StateSet
from statebot.turns.context import TurnContext
from statebot.turns.models import Activity, ActivityTypes
from statebot.turns.mutex import TurnMutex
from statebot.turns.outbound import BufferedOutbound, OutboundChannel

logger = get_logger(__name__)

TurnLogic = Callable[[TurnContext], Awaitable[None]]

_KNOWN_TYPES = frozenset(t.value for t in ActivityTypes)


def _type_label(activity: Activity) -> str:
    return activity.type if activity.type in _KNOWN_TYPES else "other"


class TurnDispatcher:
    """Serializes turns per scope key and persists state around them."""

    def __init__(self, state_set: StateSet, mutex: TurnMutex) -> None:
        self._state_set = state_set
        self._mutex = mutex

    async def process_activity(
        self,
        activity: Activity,
        logic: TurnLogic,
        outbound: OutboundChannel | None = None,
    ) -> list[Activity]:
        """Process one inbound activity.

        Args:
            activity: Parsed inbound activity
            logic: Turn logic, usually ConversationEngine.on_turn
            outbound: Reply destination; replies are buffered if omitted

        Returns:
            Replies sent during the turn

        Raises:
            MalformedActivityError: If the activity lacks scope ids
            TurnLockTimeoutError: If another turn holds a key too long
            StoreUnavailableError: If state cannot be loaded or saved
            StaleStateError: If state changed underneath the turn
            DeliveryFailedError: If a reply cannot be sent
        """
        context = TurnContext(activity, outbound or BufferedOutbound())
        type_label = _type_label(activity)
        start = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            activity_type=activity.type,
            activity_id=activity.id,
            channel_id=activity.channel_id,
        ):
            try:
                keys = self._state_set.storage_keys(activity)
                logger.debug("turn_started", keys=keys)
                async with self._mutex.acquire_all(keys):
                    await self._state_set.load_all(context)
                    await logic(context)
                    await self._state_set.save_all(context)
            except StatebotError as e:
                TURN_COUNT.labels(activity_type=type_label, outcome="failed").inc()
                logger.warning(
                    "turn_failed",
                    error_type=type(e).__name__,
                    error=e.message,
                )
                raise
            except Exception:
                TURN_COUNT.labels(activity_type=type_label, outcome="failed").inc()
                logger.exception("turn_crashed")
                raise

            elapsed = time.perf_counter() - start
            TURN_COUNT.labels(activity_type=type_label, outcome="ok").inc()
            TURN_LATENCY.labels(activity_type=type_label).observe(elapsed)
            logger.info(
                "turn_completed",
                replies=len(context.responses),
                duration_ms=round(elapsed * 1000, 2),
            )

        return context.responses
