"""Request context model."""

from pydantic import BaseModel


class RequestContext(BaseModel):
    """Request context for observability and logging.

    Bound at the start of each request and used to correlate logs
    and traces across the request lifecycle.
    """

    trace_id: str
    """OpenTelemetry trace ID, or the request ID when tracing is off."""

    span_id: str
    """OpenTelemetry span ID."""

    request_id: str
    """Unique identifier for this request."""
