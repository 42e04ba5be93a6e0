"""Audit domain models."""

from pooladmin.audit.models.entry import (
    AuditAction,
    AuditEntry,
    AuditWriteResult,
    AuditWriteStatus,
)
from pooladmin.audit.models.filters import AuditLogFilters

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AuditLogFilters",
    "AuditWriteResult",
    "AuditWriteStatus",
]
