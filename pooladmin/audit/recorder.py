"""Fail-soft audit recorder.

AuditRecorder turns a settled mutation into an AuditEntry: it attaches the
resolved actor and the session id, diffs the snapshots, writes a description
when none is given, and appends the entry. The write is a best-effort side
channel. ``log()`` never raises; a failed write is logged, counted and
reported back as an unconfirmed AuditWriteResult. Failed writes are not
retried.
"""

from datetime import UTC, datetime
from typing import Any

from pooladmin.audit.descriptions import generate_description
from pooladmin.audit.diff import changed_fields
from pooladmin.audit.models import (
    AuditAction,
    AuditEntry,
    AuditWriteResult,
    AuditWriteStatus,
)
from pooladmin.audit.store import AuditLogStore
from pooladmin.identity.actor import ActorResolver
from pooladmin.identity.session import SessionContext
from pooladmin.observability.logging import get_logger
from pooladmin.observability.metrics import AUDIT_WRITES

logger = get_logger(__name__)

AUTH_TABLE = "auth"
AUTH_MODULE = "authentication"


def _coerce_action(action: AuditAction | str) -> AuditAction:
    if isinstance(action, AuditAction):
        return action
    return AuditAction(action.upper())


class AuditRecorder:
    """Records audit entries for one client session.

    Args:
        store: Audit collection to append to
        actors: Resolver for the acting user
        session: Session whose id is stamped on every entry
        user_agent: Client identification stored with each entry
    """

    def __init__(
        self,
        store: AuditLogStore,
        actors: ActorResolver,
        session: SessionContext,
        *,
        user_agent: str | None = None,
    ) -> None:
        self._store = store
        self._actors = actors
        self._session = session
        self._user_agent = user_agent

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def store(self) -> AuditLogStore:
        return self._store

    async def log(
        self,
        table_name: str,
        *,
        action: AuditAction | str,
        record_id: Any = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        module: str | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditWriteResult:
        """Record one attempted mutation. Never raises."""
        try:
            entry = await self._build_entry(
                table_name,
                action=_coerce_action(action),
                record_id=record_id,
                old_values=old_values,
                new_values=new_values,
                module=module,
                description=description,
                metadata=metadata,
            )
        except Exception as e:
            logger.error("audit_entry_invalid", table_name=table_name, error=str(e))
            AUDIT_WRITES.labels(
                table_name=table_name, action=str(action), outcome="unconfirmed"
            ).inc()
            return AuditWriteResult(status=AuditWriteStatus.UNCONFIRMED, error=str(e))

        try:
            stored = await self._store.append(entry)
        except Exception as e:
            logger.error(
                "audit_write_failed",
                table_name=table_name,
                record_id=entry.record_id,
                action=entry.action.value,
                error=str(e),
            )
            AUDIT_WRITES.labels(
                table_name=table_name, action=entry.action.value, outcome="unconfirmed"
            ).inc()
            return AuditWriteResult(
                status=AuditWriteStatus.UNCONFIRMED, entry=entry, error=str(e)
            )

        AUDIT_WRITES.labels(
            table_name=table_name, action=entry.action.value, outcome="committed"
        ).inc()
        logger.debug(
            "audit_entry_committed",
            table_name=table_name,
            record_id=entry.record_id,
            action=entry.action.value,
        )
        return AuditWriteResult(status=AuditWriteStatus.COMMITTED, entry=stored)

    async def log_create(
        self,
        table_name: str,
        record_id: Any,
        new_values: dict[str, Any] | None,
        module: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditWriteResult:
        return await self.log(
            table_name,
            action=AuditAction.CREATE,
            record_id=record_id,
            new_values=new_values,
            module=module,
            metadata=metadata,
        )

    async def log_update(
        self,
        table_name: str,
        record_id: Any,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        module: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditWriteResult:
        return await self.log(
            table_name,
            action=AuditAction.UPDATE,
            record_id=record_id,
            old_values=old_values,
            new_values=new_values,
            module=module,
            metadata=metadata,
        )

    async def log_delete(
        self,
        table_name: str,
        record_id: Any,
        old_values: dict[str, Any] | None,
        module: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditWriteResult:
        return await self.log(
            table_name,
            action=AuditAction.DELETE,
            record_id=record_id,
            old_values=old_values,
            module=module,
            metadata=metadata,
        )

    async def log_login(
        self, user_id: Any, metadata: dict[str, Any] | None = None
    ) -> AuditWriteResult:
        return await self.log(
            AUTH_TABLE,
            action=AuditAction.LOGIN,
            record_id=user_id,
            module=AUTH_MODULE,
            description="Usuario inició sesión",
            metadata=metadata,
        )

    async def log_logout(
        self, user_id: Any, metadata: dict[str, Any] | None = None
    ) -> AuditWriteResult:
        return await self.log(
            AUTH_TABLE,
            action=AuditAction.LOGOUT,
            record_id=user_id,
            module=AUTH_MODULE,
            description="Usuario cerró sesión",
            metadata=metadata,
        )

    async def _build_entry(
        self,
        table_name: str,
        *,
        action: AuditAction,
        record_id: Any,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        module: str | None,
        description: str | None,
        metadata: dict[str, Any] | None,
    ) -> AuditEntry:
        actor = await self._actors.ensure_resolved()
        fields = changed_fields(old_values, new_values)
        return AuditEntry(
            table_name=table_name,
            record_id=record_id,
            action=action,
            actor=actor,
            old_values=old_values,
            new_values=new_values,
            changed_fields=fields,
            module=module or table_name,
            description=description or generate_description(action, table_name, fields),
            session_id=self._session.session_id,
            user_agent=self._user_agent,
            metadata={
                **(metadata or {}),
                "client_timestamp": datetime.now(UTC).isoformat(),
            },
        )
