"""Append-only audit collection and its read queries."""

from datetime import UTC, datetime, timedelta

from pooladmin.audit.models import AuditEntry, AuditLogFilters
from pooladmin.db.errors import StoreError
from pooladmin.exceptions import AuditWriteError, BackendError
from pooladmin.observability.logging import get_logger
from pooladmin.remote.models import Ordering
from pooladmin.remote.store import RemoteStore

logger = get_logger(__name__)

_NEWEST_FIRST = (
    Ordering(field="created_at", descending=True),
    Ordering(field="id", descending=True),
)


class AuditLogStore:
    """Audit entries kept in a table of the remote store.

    Entries are only ever inserted; nothing here updates or deletes them.
    Queries return newest entries first.

    Args:
        remote: Remote store collaborator
        table_name: Audit collection name
        default_limit: Page size when a query sets no limit
        record_history_limit: Cap for get_record_audit_logs
        recent_activity_days: Window for get_recent_activity
    """

    def __init__(
        self,
        remote: RemoteStore,
        table_name: str = "audit_logs",
        *,
        default_limit: int = 50,
        record_history_limit: int = 100,
        recent_activity_days: int = 7,
    ) -> None:
        self._remote = remote
        self._table = table_name
        self._default_limit = default_limit
        self._record_history_limit = record_history_limit
        self._recent_activity_days = recent_activity_days

    @property
    def table_name(self) -> str:
        return self._table

    async def append(self, entry: AuditEntry) -> AuditEntry:
        """Insert an entry, returning it as stored.

        Falls back to the entry as sent when the store echoes back no row or
        one that cannot be read.

        Raises:
            AuditWriteError: On any failure to persist the entry
        """
        try:
            rows = await self._remote.insert(self._table, [entry.to_row()])
        except Exception as e:
            raise AuditWriteError(str(e), cause=e) from e
        if not rows:
            return entry
        try:
            return AuditEntry.from_row(rows[0])
        except (KeyError, TypeError, ValueError) as e:
            # The insert went through; only the echoed row is unusable
            logger.warning("audit_row_unreadable", table=self._table, error=str(e))
            return entry

    async def get_audit_logs(self, filters: AuditLogFilters | None = None) -> list[AuditEntry]:
        """Entries matching filters, newest first."""
        filters = filters or AuditLogFilters()
        try:
            rows = await self._remote.select(
                self._table,
                filters.conditions(),
                order_by=_NEWEST_FIRST,
                limit=filters.limit or self._default_limit,
                offset=filters.offset,
            )
        except StoreError as e:
            logger.error("audit_logs_query_failed", error=e.message)
            raise BackendError(e.message, entity=self._table, operation="list", cause=e) from e
        return [AuditEntry.from_row(row) for row in rows]

    async def get_record_audit_logs(self, table_name: str, record_id: object) -> list[AuditEntry]:
        """History of a single record."""
        return await self.get_audit_logs(
            AuditLogFilters(
                table_name=table_name,
                record_id=str(record_id),
                limit=self._record_history_limit,
            )
        )

    async def get_recent_activity(self, limit: int = 20) -> list[AuditEntry]:
        """Entries from the configured recent-activity window."""
        since = datetime.now(UTC) - timedelta(days=self._recent_activity_days)
        return await self.get_audit_logs(AuditLogFilters(date_from=since, limit=limit))

    async def get_user_activity(self, user_id: object, limit: int = 50) -> list[AuditEntry]:
        """Entries attributed to one actor."""
        return await self.get_audit_logs(AuditLogFilters(user_id=str(user_id), limit=limit))
