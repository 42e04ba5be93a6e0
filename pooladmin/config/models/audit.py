"""Audit trail configuration."""

from pydantic import BaseModel, Field


class AuditConfig(BaseModel):
    """Audit recorder and audit query configuration."""

    table_name: str = Field(
        default="audit_logs",
        description="Append-only audit collection",
    )
    user_agent: str = Field(
        default="pooladmin",
        description="Client identification recorded on every entry",
    )
    recent_activity_days: int = Field(
        default=7,
        gt=0,
        description="Window for recent activity queries",
    )
    default_limit: int = Field(
        default=50,
        gt=0,
        description="Default page size for audit log queries",
    )
    record_history_limit: int = Field(
        default=100,
        gt=0,
        description="Maximum entries returned for a single record's history",
    )
