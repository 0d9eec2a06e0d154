"""Message endpoint: one turn per POST."""

from fastapi import APIRouter

from statebot.api.dependencies import DispatcherDep, EngineDep
from statebot.api.models.messages import TurnResponse
from statebot.observability.logging import get_logger
from statebot.turns.models import Activity

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/api/messages",
    response_model=TurnResponse,
    response_model_exclude_none=True,
)
async def post_message(
    activity: Activity,
    dispatcher: DispatcherDep,
    engine: EngineDep,
) -> TurnResponse:
    """Run one turn for an inbound activity and return its replies.

    Errors raised by the turn propagate to the global exception handlers,
    which map them to an ErrorResponse with the matching status code.
    """
    replies = await dispatcher.process_activity(activity, engine.on_turn)
    return TurnResponse(activities=replies)
