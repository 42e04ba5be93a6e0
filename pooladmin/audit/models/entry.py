"""AuditEntry model for the audit domain."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pooladmin.identity.models import ANONYMOUS_NAME, Actor


class AuditAction(str, Enum):
    """Kinds of change recorded in the audit trail."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditEntry(BaseModel):
    """Immutable record of one attempted mutation.

    ``id`` and ``created_at`` are assigned by the store; they are None on an
    entry that was assembled but never confirmed as written.
    """

    model_config = ConfigDict(frozen=True)

    id: Any = Field(default=None, description="Store-assigned identifier")
    table_name: str = Field(..., description="Entity collection")
    record_id: str | None = Field(default=None, description="Affected record")
    action: AuditAction = Field(..., description="Kind of change")
    actor: Actor = Field(..., description="Who made the change")
    old_values: dict[str, Any] | None = Field(
        default=None, description="Snapshot before the change"
    )
    new_values: dict[str, Any] | None = Field(
        default=None, description="Snapshot after the change"
    )
    changed_fields: list[str] = Field(
        default_factory=list, description="Fields that differ between snapshots"
    )
    module: str | None = Field(default=None, description="Logical grouping label")
    description: str = Field(..., description="Human-readable summary")
    session_id: str = Field(..., description="Client session that made the change")
    user_agent: str | None = Field(default=None, description="Client identification")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Operation outcome and client context"
    )
    created_at: datetime | None = Field(
        default=None, description="Server-assigned timestamp"
    )

    @field_validator("record_id", mode="before")
    @classmethod
    def stringify_record_id(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def succeeded(self) -> bool:
        """Outcome reported by the facade; entries without one count as success."""
        return bool(self.metadata.get("success", True))

    def to_row(self) -> dict[str, Any]:
        """Flatten into the audit collection's column layout.

        ``id`` and ``created_at`` are left for the store to assign.
        """
        data = self.model_dump(mode="json", exclude={"id", "created_at", "actor"})
        data["user_id"] = self.actor.id
        data["user_email"] = self.actor.email
        data["user_name"] = self.actor.display_name
        return data

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "AuditEntry":
        """Build an entry from a stored audit row."""
        return cls(
            id=row.get("id"),
            table_name=row["table_name"],
            record_id=row.get("record_id"),
            action=row["action"],
            actor=Actor(
                id=row.get("user_id"),
                email=row.get("user_email"),
                display_name=row.get("user_name") or row.get("user_email") or ANONYMOUS_NAME,
            ),
            old_values=row.get("old_values"),
            new_values=row.get("new_values"),
            changed_fields=row.get("changed_fields") or [],
            module=row.get("module"),
            description=row.get("description") or "",
            session_id=row.get("session_id") or "",
            user_agent=row.get("user_agent"),
            metadata=row.get("metadata") or {},
            created_at=row.get("created_at"),
        )


class AuditWriteStatus(str, Enum):
    """Whether the store confirmed an audit write."""

    COMMITTED = "committed"
    UNCONFIRMED = "unconfirmed"


class AuditWriteResult(BaseModel):
    """Outcome of AuditRecorder.log.

    An unconfirmed result carries the locally assembled entry (None if the
    entry could not even be assembled) and the error that was swallowed, so
    gaps in the trail can be observed.
    """

    model_config = ConfigDict(frozen=True)

    status: AuditWriteStatus
    entry: AuditEntry | None = None
    error: str | None = None

    @property
    def committed(self) -> bool:
        return self.status == AuditWriteStatus.COMMITTED
