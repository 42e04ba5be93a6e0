"""Exception hierarchy for the data-access and audit layers.

Business-path failures surface as BackendError and always reach the caller.
AuditWriteError and ActorResolutionError belong to the audit side channel:
they are raised internally and absorbed before reaching any caller.
"""

from typing import Any


class PoolAdminError(Exception):
    """Base exception for all pooladmin errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BackendError(PoolAdminError):
    """Raised when an operation against the remote store fails.

    The message is the remote store's error message, unchanged, so that
    callers and audit entries see exactly what the backend reported.
    """

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        operation: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.operation = operation
        self.cause = cause


class UnknownEntityError(BackendError):
    """Raised when an entity name is not one of the known collections."""

    def __init__(self, entity: str, known: tuple[str, ...]) -> None:
        super().__init__(
            f"Unknown entity: {entity}. Valid entities: {', '.join(known)}",
            entity=entity,
        )
        self.known = known


class RecordNotFoundError(BackendError):
    """Raised when an update or delete addresses a record that does not exist."""

    def __init__(self, entity: str, record_id: Any, operation: str) -> None:
        super().__init__(
            f"{entity} with id {record_id} not found",
            entity=entity,
            operation=operation,
        )
        self.record_id = record_id


class AuditWriteError(PoolAdminError):
    """Raised when an audit entry could not be persisted."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ActorResolutionError(PoolAdminError):
    """Raised when the current actor cannot be resolved."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
