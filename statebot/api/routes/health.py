"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from statebot import __version__
from statebot.api.dependencies import StateStoreDep
from statebot.api.models.health import ComponentHealth, HealthResponse
from statebot.errors import StatebotError
from statebot.observability.logging import get_logger
from statebot.storage.store import KeyValueStore

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()


async def _check_store_health(store: KeyValueStore, name: str) -> ComponentHealth:
    """Ping a store and report its status."""
    start = time.perf_counter()
    try:
        reachable = await store.ping()
    except StatebotError as e:
        return ComponentHealth(
            name=name,
            status="unhealthy",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=e.message,
        )

    latency_ms = (time.perf_counter() - start) * 1000
    if reachable:
        return ComponentHealth(name=name, status="healthy", latency_ms=latency_ms)
    return ComponentHealth(
        name=name,
        status="unhealthy",
        latency_ms=latency_ms,
        message="Store did not respond to ping",
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StateStoreDep) -> HealthResponse:
    """Check service health status.

    Returns the overall status along with the status of the state store.
    """
    components = [await _check_store_health(store, f"state_store:{store.backend_name}")]

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
