"""API request and response models."""

from statebot.api.models.context import RequestContext
from statebot.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from statebot.api.models.health import ComponentHealth, HealthResponse
from statebot.api.models.messages import TurnResponse

__all__ = [
    "ComponentHealth",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "RequestContext",
    "TurnResponse",
]
