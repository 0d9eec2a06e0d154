"""Error hierarchy for turn processing.

Every failure the core can surface derives from StatebotError. The HTTP
layer maps each subclass to a status code and error code; nothing in the
core swallows these.
"""


class StatebotError(Exception):
    """Base exception for all statebot errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class StoreUnavailableError(StatebotError):
    """Raised when the backing key-value store cannot be reached.

    Examples:
        - Redis server unavailable
        - Connection timeout
        - Backend returned a protocol error
    """


class StaleStateError(StatebotError):
    """Raised when a write carries an etag that no longer matches the store."""

    def __init__(self, key: str, expected_etag: str | None) -> None:
        super().__init__(f"Stale write rejected for key '{key}'")
        self.key = key
        self.expected_etag = expected_etag


class DeliveryFailedError(StatebotError):
    """Raised when an outbound reply cannot be delivered."""


class MalformedActivityError(StatebotError):
    """Raised when an inbound activity lacks data needed to process the turn."""


class TurnLockTimeoutError(StatebotError):
    """Raised when the per-key turn lock is not acquired in time."""

    def __init__(self, key: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout}s waiting for turn lock on '{key}'")
        self.key = key
        self.timeout = timeout
