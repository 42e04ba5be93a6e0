"""Store error hierarchy for remote store backends.

All remote store implementations raise these errors so the entity and audit
layers can handle backend failures uniformly. The message always carries the
backend's own error text.
"""


class StoreError(Exception):
    """Base exception for all remote store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the remote store cannot be reached.

    Examples:
        - Connection refused or timed out
        - DNS failure
        - Pool exhausted
    """

    pass


class NotFoundError(StoreError):
    """Raised when a table or record addressed by the request does not exist."""

    pass


class ConflictError(StoreError):
    """Raised on unique or foreign key constraint violation."""

    pass


class ValidationError(StoreError):
    """Raised when the store rejects the payload.

    Examples:
        - Unknown column
        - Data type mismatch
        - NOT NULL violation
    """

    pass
