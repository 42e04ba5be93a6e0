"""Per-entity access facade with mandatory audit.

EntityAccessFacade is what screens use for one entity. Every mutating call
runs the store operation and then, whether it succeeded or failed, awaits
exactly one audit write per affected record. The caller only ever sees the
store's outcome: the result on success, the original BackendError on
failure. The audit outcome is never surfaced.

Per call: Idle -> Pending -> Success -> audit -> Idle
                         \\-> Failure -> failure audit -> re-raise
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from typing import Any

from pooladmin.audit.descriptions import failed_attempt_description
from pooladmin.audit.models import AuditAction
from pooladmin.audit.recorder import AuditRecorder
from pooladmin.entities.models import EntityStats, QueryOptions, Relation
from pooladmin.entities.store import EntityStore
from pooladmin.exceptions import BackendError
from pooladmin.observability.logging import get_logger
from pooladmin.remote.models import Record

logger = get_logger(__name__)


class EntityAccessFacade:
    """Audited CRUD for a single entity collection.

    ``data``, ``loading`` and ``error`` describe the read path only: they are
    set by list() and refresh(), never by mutations.

    Args:
        entity: Entity collection name
        store: Entity store
        recorder: Audit recorder
        module: Grouping label for audit entries; defaults to the entity name
        filters: Filters applied by refresh()
        options: Sorting and pagination applied by refresh()
        relations: Related rows attached to every listed record, by key
    """

    def __init__(
        self,
        entity: str,
        store: EntityStore,
        recorder: AuditRecorder,
        *,
        module: str | None = None,
        filters: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
        relations: dict[str, Relation] | None = None,
    ) -> None:
        store.validate_entity(entity)
        self.entity = entity
        self.module = module or entity
        self._store = store
        self._recorder = recorder
        self._filters = dict(filters or {})
        self._options = options
        self._relations = dict(relations or {})
        self.data: list[Record] = []
        self.loading = False
        self.error: str | None = None

    @classmethod
    def for_entity(
        cls,
        entity: str,
        store: EntityStore,
        recorder: AuditRecorder,
        **kwargs: Any,
    ) -> EntityAccessFacade:
        return cls(entity, store, recorder, **kwargs)

    # Read path

    async def list(
        self,
        filters: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
    ) -> list[Record]:
        """Load records into ``data`` and return them."""
        self.loading = True
        self.error = None
        try:
            if self._relations:
                self.data = await self._store.get_with_relations(
                    self.entity, self._relations, filters, options
                )
            else:
                self.data = await self._store.list(self.entity, filters, options)
            return self.data
        except BackendError as e:
            self.error = e.message
            logger.warning("entity_list_failed", entity=self.entity, error=e.message)
            raise
        finally:
            self.loading = False

    async def refresh(self) -> list[Record]:
        """Reload ``data`` with the facade's own filters and options."""
        return await self.list(self._filters, self._options)

    async def get_by_id(self, record_id: Any) -> Record | None:
        return await self._store.get_by_id(self.entity, record_id)

    async def stats(self, recent_days: int = 30) -> EntityStats:
        return await self._store.get_stats(self.entity, recent_days)

    # Write path

    async def create(self, data: Record) -> Record:
        """Create a record and audit the attempt."""
        try:
            created = await self._store.create(self.entity, data)
        except BackendError as e:
            await self._log_failure(AuditAction.CREATE, None, e, attempted_data=data)
            raise

        await self._recorder.log_create(
            self.entity,
            created.get("id"),
            created,
            module=self.module,
            metadata=_success("create"),
        )
        return created

    async def update(self, record_id: Any, patch: Record) -> Record:
        """Update a record and audit the change against its prior snapshot."""
        old_values = await self._snapshot(record_id)
        try:
            updated = await self._store.update(self.entity, record_id, patch)
        except BackendError as e:
            await self._log_failure(AuditAction.UPDATE, record_id, e, attempted_data=patch)
            raise

        applied = {k: v for k, v in patch.items() if k != "id"}
        new_values = {**old_values, **applied} if old_values is not None else applied
        await self._recorder.log_update(
            self.entity,
            record_id,
            old_values,
            new_values,
            module=self.module,
            metadata=_success("update"),
        )
        return updated

    async def delete(self, record_id: Any) -> bool:
        """Delete a record and audit it with its pre-delete snapshot."""
        old_values = await self._snapshot(record_id)
        try:
            result = await self._store.delete(self.entity, record_id)
        except BackendError as e:
            await self._log_failure(AuditAction.DELETE, record_id, e)
            raise

        await self._recorder.log_delete(
            self.entity,
            record_id,
            old_values,
            module=self.module,
            metadata=_success("delete"),
        )
        return result

    async def bulk_create(self, items: Sequence[Record]) -> list[Record]:
        """Create several records in one round-trip; one audit entry per record."""
        try:
            created = await self._store.bulk_create(self.entity, items)
        except BackendError as e:
            await self._log_failure(
                AuditAction.CREATE, None, e, attempted_data=[dict(i) for i in items]
            )
            raise

        for record in created:
            await self._recorder.log_create(
                self.entity,
                record.get("id"),
                record,
                module=self.module,
                metadata=_success("bulk_create"),
            )
        return created

    async def bulk_delete(self, record_ids: Sequence[Any]) -> int:
        """Delete several records in one round-trip; one audit entry per deleted row.

        The rows the store reports as removed are the pre-delete snapshots, so
        ids that were already gone produce no entry.
        """
        try:
            deleted = await self._store.bulk_delete_records(self.entity, record_ids)
        except BackendError as e:
            await self._log_failure(
                AuditAction.DELETE, None, e, attempted_data={"ids": list(record_ids)}
            )
            raise

        for row in deleted:
            await self._recorder.log_delete(
                self.entity,
                row.get("id"),
                row,
                module=self.module,
                metadata=_success("bulk_delete"),
            )
        return len(deleted)

    async def _snapshot(self, record_id: Any) -> Record | None:
        """Best-effort pre-mutation read; None when it fails."""
        try:
            return await self._store.get_by_id(self.entity, record_id)
        except BackendError as e:
            logger.warning(
                "audit_snapshot_failed",
                entity=self.entity,
                record_id=record_id,
                error=e.message,
            )
            return None

    async def _log_failure(
        self,
        action: AuditAction,
        record_id: Any,
        error: BackendError,
        *,
        attempted_data: Any = None,
    ) -> None:
        operation = action.value.lower()
        metadata: dict[str, Any] = {
            "operation": operation,
            "success": False,
            "error": error.message,
        }
        if attempted_data is not None:
            metadata["attempted_data"] = attempted_data
        await self._recorder.log(
            self.entity,
            action=action,
            record_id=record_id,
            module=self.module,
            description=failed_attempt_description(action, self.entity),
            metadata=metadata,
        )


def _success(operation: str) -> dict[str, Any]:
    return {"operation": operation, "success": True}


clients = partial(EntityAccessFacade.for_entity, "clients")
products = partial(EntityAccessFacade.for_entity, "products")
orders = partial(EntityAccessFacade.for_entity, "orders")
quotes = partial(EntityAccessFacade.for_entity, "quotes")
inventory = partial(EntityAccessFacade.for_entity, "inventory")
employees = partial(EntityAccessFacade.for_entity, "employees")
suppliers = partial(EntityAccessFacade.for_entity, "suppliers")
maintenances = partial(EntityAccessFacade.for_entity, "maintenances")
invoices = partial(EntityAccessFacade.for_entity, "invoices")
