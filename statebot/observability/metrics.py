"""Prometheus metrics for statebot.

Provides counters and histograms for turn processing, state storage
and prompt progression.
"""

from prometheus_client import Counter, Histogram

# Turn metrics
TURN_COUNT = Counter(
    "statebot_turns_total",
    "Total number of turns processed",
    labelnames=["activity_type", "outcome"],
)

TURN_LATENCY = Histogram(
    "statebot_turn_latency_seconds",
    "Turn processing latency in seconds",
    labelnames=["activity_type"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Storage metrics
STORE_OPERATIONS = Counter(
    "statebot_store_operations_total",
    "Key-value store operations",
    labelnames=["backend", "operation", "outcome"],
)

STORE_RETRIES = Counter(
    "statebot_store_retries_total",
    "Store operations retried after a transient failure",
    labelnames=["operation"],
)

# Conversation metrics
PROMPT_TRANSITIONS = Counter(
    "statebot_prompt_transitions_total",
    "Prompt stage transitions",
    labelnames=["from_stage", "to_stage"],
)

DELIVERY_FAILURES = Counter(
    "statebot_delivery_failures_total",
    "Outbound replies that could not be delivered",
)
