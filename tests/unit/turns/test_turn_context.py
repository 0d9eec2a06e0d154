"""Unit tests for TurnContext."""

from unittest.mock import AsyncMock

import pytest
from prometheus_client import REGISTRY

from statebot.errors import DeliveryFailedError
from statebot.turns import BufferedOutbound, OutboundChannel, TurnContext
from tests.factories import ActivityFactory


class FailingOutbound(OutboundChannel):
    async def send(self, activities):
        raise ConnectionError("connector unreachable")


def _delivery_failures() -> float:
    return REGISTRY.get_sample_value("statebot_delivery_failures_total") or 0.0


class TestSendActivity:
    @pytest.mark.asyncio
    async def test_text_becomes_reply(self) -> None:
        outbound = BufferedOutbound()
        context = TurnContext(ActivityFactory.message(activity_id="in-1"), outbound)

        reply = await context.send_activity("What is your name?")

        assert outbound.activities == [reply]
        assert context.responses == [reply]
        assert len(context.responses) == 1
        assert reply.reply_to_id == "in-1"

    @pytest.mark.asyncio
    async def test_activity_sent_as_is(self) -> None:
        outbound = AsyncMock(spec=OutboundChannel)
        context = TurnContext(ActivityFactory.message(), outbound)
        activity = ActivityFactory.create("typing")

        await context.send_activity(activity)

        outbound.send.assert_awaited_once_with([activity])

    @pytest.mark.asyncio
    async def test_failure_raises_delivery_failed(self) -> None:
        context = TurnContext(ActivityFactory.message(), FailingOutbound())
        before = _delivery_failures()

        with pytest.raises(DeliveryFailedError) as exc_info:
            await context.send_activity("hello")

        assert isinstance(exc_info.value.cause, ConnectionError)
        assert context.responses == []
        assert _delivery_failures() - before == 1

    def test_fresh_context(self) -> None:
        context = TurnContext(ActivityFactory.message(), BufferedOutbound())
        assert context.turn_state == {}
        assert context.responses == []
