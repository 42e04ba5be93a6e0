"""Filters for audit log queries."""

from datetime import datetime

from pydantic import BaseModel, Field

from pooladmin.audit.models.entry import AuditAction
from pooladmin.remote.models import Condition


class AuditLogFilters(BaseModel):
    """Criteria for AuditLogStore.get_audit_logs. Unset fields do not filter."""

    table_name: str | None = None
    action: AuditAction | None = None
    user_id: str | None = None
    module: str | None = None
    record_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    limit: int | None = Field(default=None, gt=0)
    offset: int = Field(default=0, ge=0)

    def conditions(self) -> list[Condition]:
        conditions = []
        for field in ("table_name", "user_id", "module", "record_id"):
            value = getattr(self, field)
            if value is not None:
                conditions.append(Condition.eq(field, value))
        if self.action is not None:
            conditions.append(Condition.eq("action", self.action.value))
        if self.date_from is not None:
            conditions.append(Condition.gte("created_at", self.date_from))
        if self.date_to is not None:
            conditions.append(Condition.lte("created_at", self.date_to))
        return conditions
