"""Mapping from core errors to HTTP responses.

The global exception handler looks up the raised StatebotError subclass
here (walking the MRO, so subclasses inherit their parent's mapping).
"""

from statebot.api.models.errors import ErrorCode
from statebot.errors import (
    DeliveryFailedError,
    MalformedActivityError,
    StaleStateError,
    StatebotError,
    StoreUnavailableError,
    TurnLockTimeoutError,
)

ERROR_STATUS: dict[type[StatebotError], tuple[int, ErrorCode]] = {
    MalformedActivityError: (400, ErrorCode.INVALID_ACTIVITY),
    StaleStateError: (409, ErrorCode.STATE_CONFLICT),
    TurnLockTimeoutError: (409, ErrorCode.TURN_IN_PROGRESS),
    DeliveryFailedError: (502, ErrorCode.DELIVERY_FAILED),
    StoreUnavailableError: (503, ErrorCode.STORE_UNAVAILABLE),
}


def resolve_error(exc: StatebotError) -> tuple[int, ErrorCode]:
    """Get the HTTP status and error code for a core error."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500, ErrorCode.INTERNAL_ERROR
