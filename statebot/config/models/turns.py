"""Turn processing configuration model."""

from typing import Literal

from pydantic import BaseModel, Field

MutexBackendType = Literal["inmemory", "redis"]


class TurnsConfig(BaseModel):
    """Per-key turn serialization settings."""

    mutex: MutexBackendType = Field(
        default="inmemory",
        description="Lock backend used to serialize turns on the same key",
    )
    lock_timeout_seconds: int = Field(
        default=30,
        gt=0,
        description="How long a Redis lock is held before auto-release",
    )
    blocking_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long a turn waits to acquire its locks",
    )
