"""Message endpoint response model."""

from pydantic import BaseModel, Field

from statebot.turns.models import Activity


class TurnResponse(BaseModel):
    """Replies produced by one turn, in send order."""

    activities: list[Activity] = Field(default_factory=list)
