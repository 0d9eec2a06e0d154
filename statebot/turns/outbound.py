"""Outbound reply channels.

The turn core hands replies to an OutboundChannel and treats any failure
as DeliveryFailedError. The default BufferedOutbound collects replies so
the HTTP layer can return them in the response body.
"""

from abc import ABC, abstractmethod

from statebot.turns.models import Activity


class OutboundChannel(ABC):
    """Destination for replies produced during a turn."""

    @abstractmethod
    async def send(self, activities: list[Activity]) -> None:
        """Deliver activities.

        Raises:
            Exception: Any delivery failure; the turn context wraps it
        """
        pass


class BufferedOutbound(OutboundChannel):
    """Collects replies in memory for return in the HTTP response."""

    def __init__(self) -> None:
        self.activities: list[Activity] = []

    async def send(self, activities: list[Activity]) -> None:
        self.activities.extend(activities)
