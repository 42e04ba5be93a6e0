"""Audit trail: immutable, attributable, diffed records of every mutation."""

from pooladmin.audit.diff import changed_fields, values_equal
from pooladmin.audit.models import (
    AuditAction,
    AuditEntry,
    AuditLogFilters,
    AuditWriteResult,
    AuditWriteStatus,
)
from pooladmin.audit.recorder import AuditRecorder
from pooladmin.audit.store import AuditLogStore

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AuditLogFilters",
    "AuditLogStore",
    "AuditRecorder",
    "AuditWriteResult",
    "AuditWriteStatus",
    "changed_fields",
    "values_equal",
]
