"""Turn processing: activities, turn context, per-key locking.

The dispatcher lives in statebot.turns.dispatcher; it depends on the
state containers, which in turn depend on the turn context here.
"""

from statebot.turns.context import TurnContext
from statebot.turns.models import Activity, ActivityTypes, ChannelAccount, ConversationAccount
from statebot.turns.mutex import InMemoryTurnMutex, RedisTurnMutex, TurnMutex
from statebot.turns.outbound import BufferedOutbound, OutboundChannel

__all__ = [
    "Activity",
    "ActivityTypes",
    "BufferedOutbound",
    "ChannelAccount",
    "ConversationAccount",
    "InMemoryTurnMutex",
    "OutboundChannel",
    "RedisTurnMutex",
    "TurnContext",
    "TurnMutex",
]
