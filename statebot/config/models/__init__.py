"""Configuration model exports.

    from statebot.config.models import APIConfig, StorageConfig
"""

from statebot.config.models.api import APIConfig
from statebot.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from statebot.config.models.storage import RetryConfig, StorageConfig
from statebot.config.models.turns import TurnsConfig

__all__ = [
    "APIConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "RetryConfig",
    "StorageConfig",
    "TracingConfig",
    "TurnsConfig",
]
