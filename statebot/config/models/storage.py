"""State storage configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StoreBackendType = Literal["inmemory", "redis"]


class RetryConfig(BaseModel):
    """Bounded retry for transient store failures."""

    enabled: bool = Field(default=True, description="Retry StoreUnavailable errors")
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts per operation, including the first",
    )
    backoff_seconds: float = Field(
        default=0.05,
        ge=0.0,
        description="Initial backoff; doubles after each failed attempt",
    )


class StorageConfig(BaseModel):
    """Key-value store backing conversation and user state.

    Note: the Redis URL can be set with REDIS_URL; credentials should not
    be committed to config files.
    """

    backend: StoreBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    key_prefix: str = Field(
        default="statebot",
        description="Prefix prepended to every state key in Redis",
    )
    ttl_seconds: int | None = Field(
        default=None,
        gt=0,
        description="Evict state after this many seconds without a write",
    )
    optimistic_concurrency: bool = Field(
        default=True,
        description="Reject writes whose etag no longer matches (else last writer wins)",
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Retry policy for transient failures",
    )
