"""Generic CRUD facade over the remote store.

EntityStore addresses any known entity collection by name. It keeps no
cache: every call is one round-trip (bulk_update and get_with_relations
excepted) and returns the record as the store reports it after the
operation. The only exception it raises is BackendError, carrying the
remote message unchanged.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, timedelta
from typing import Any

from pooladmin.db.errors import StoreError
from pooladmin.entities.models import (
    EntityStats,
    QueryOptions,
    Relation,
    filters_to_conditions,
)
from pooladmin.exceptions import BackendError, RecordNotFoundError, UnknownEntityError
from pooladmin.observability.logging import get_logger
from pooladmin.observability.metrics import STORE_LATENCY, STORE_OPERATIONS
from pooladmin.remote.models import Condition, Record
from pooladmin.remote.store import RemoteStore

logger = get_logger(__name__)


class EntityStore:
    """CRUD operations for named entity collections.

    Args:
        remote: Remote store collaborator
        known_entities: Collection names this store may address
    """

    def __init__(self, remote: RemoteStore, known_entities: Iterable[str]) -> None:
        self._remote = remote
        self._known = tuple(known_entities)

    @property
    def known_entities(self) -> tuple[str, ...]:
        return self._known

    def validate_entity(self, entity: str) -> None:
        """Raise UnknownEntityError unless entity is a known collection."""
        if entity not in self._known:
            raise UnknownEntityError(entity, self._known)

    async def list(
        self,
        entity: str,
        filters: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
    ) -> list[Record]:
        """List records matching every filter."""
        options = options or QueryOptions()
        async with self._operation(entity, "list"):
            return await self._remote.select(
                entity,
                filters_to_conditions(filters),
                order_by=options.ordering(),
                limit=options.limit,
                offset=options.offset,
            )

    async def get_by_id(self, entity: str, record_id: Any) -> Record | None:
        """Get a record by id, or None when it does not exist."""
        async with self._operation(entity, "get"):
            return await self._remote.get(entity, record_id)

    async def create(self, entity: str, data: Record) -> Record:
        """Create a record, returning it with its assigned id."""
        async with self._operation(entity, "create"):
            rows = await self._remote.insert(entity, [data])
        if not rows:
            raise BackendError(
                f"Insert into {entity} returned no record",
                entity=entity,
                operation="create",
            )
        logger.info("entity_created", entity=entity, record_id=rows[0].get("id"))
        return rows[0]

    async def update(self, entity: str, record_id: Any, patch: Record) -> Record:
        """Apply a partial update; the record id itself never changes."""
        patch = {k: v for k, v in patch.items() if k != "id"}
        async with self._operation(entity, "update"):
            updated = await self._remote.update(entity, record_id, patch)
        if updated is None:
            raise RecordNotFoundError(entity, record_id, "update")
        logger.info("entity_updated", entity=entity, record_id=record_id, fields=sorted(patch))
        return updated

    async def delete(self, entity: str, record_id: Any) -> bool:
        """Delete a record, acknowledging with True."""
        async with self._operation(entity, "delete"):
            deleted = await self._remote.delete(entity, [record_id])
        if not deleted:
            raise RecordNotFoundError(entity, record_id, "delete")
        logger.info("entity_deleted", entity=entity, record_id=record_id)
        return True

    async def bulk_create(self, entity: str, items: Sequence[Record]) -> list[Record]:
        """Create several records in a single round-trip."""
        if not items:
            self.validate_entity(entity)
            return []
        async with self._operation(entity, "bulk_create"):
            rows = await self._remote.insert(entity, list(items))
        logger.info("entity_bulk_created", entity=entity, count=len(rows))
        return rows

    async def bulk_update(
        self, entity: str, updates: Sequence[tuple[Any, Record]]
    ) -> list[Record]:
        """Apply ``(id, patch)`` updates one after another.

        Stops at the first failure; earlier updates stay applied.
        """
        return [await self.update(entity, record_id, patch) for record_id, patch in updates]

    async def bulk_delete(self, entity: str, record_ids: Sequence[Any]) -> int:
        """Delete several records in a single round-trip, returning the count."""
        return len(await self.bulk_delete_records(entity, record_ids))

    async def bulk_delete_records(
        self, entity: str, record_ids: Sequence[Any]
    ) -> list[Record]:
        """Delete several records in a single round-trip.

        Returns the rows the store actually removed, as they were before the
        delete. Ids that no longer exist are simply absent.
        """
        if not record_ids:
            self.validate_entity(entity)
            return []
        async with self._operation(entity, "bulk_delete"):
            deleted = await self._remote.delete(entity, list(record_ids))
        logger.info("entity_bulk_deleted", entity=entity, count=len(deleted))
        return deleted

    async def get_related(
        self,
        entity: str,
        record_id: Any,
        related_entity: str,
        foreign_key: str,
    ) -> list[Record]:
        """List records of related_entity whose foreign_key points at record_id."""
        self.validate_entity(entity)
        async with self._operation(related_entity, "list"):
            return await self._remote.select(
                related_entity, [Condition.eq(foreign_key, record_id)]
            )

    async def get_with_relations(
        self,
        entity: str,
        relations: Mapping[str, Relation],
        filters: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
    ) -> list[Record]:
        """List records with related rows attached under each relation's key.

        Each relation costs one extra round-trip, whatever the number of
        listed records.
        """
        for relation in relations.values():
            self.validate_entity(relation.entity)
        records = await self.list(entity, filters, options)

        for key, relation in relations.items():
            if relation.kind == "many":
                own, theirs = relation.local_key, relation.foreign_key
            else:
                own, theirs = relation.foreign_key, relation.local_key

            values: list[Any] = []
            for record in records:
                value = record.get(own)
                if value is not None and value not in values:
                    values.append(value)

            related: list[Record] = []
            if values:
                async with self._operation(relation.entity, "list"):
                    related = await self._remote.select(
                        relation.entity, [Condition.one_of(theirs, values)]
                    )

            for record in records:
                value = record.get(own)
                matches = [
                    row for row in related
                    if value is not None and row.get(theirs) == value
                ]
                if relation.kind == "many":
                    record[key] = matches
                else:
                    record[key] = matches[0] if matches else None
        return records

    async def get_stats(self, entity: str, recent_days: int = 30) -> EntityStats:
        """Count records, those created in the last recent_days, and the latest change."""
        async with self._operation(entity, "stats"):
            rows = await self._remote.select(entity)

        since = datetime.now(UTC) - timedelta(days=recent_days)
        recent = 0
        last_updated: datetime | None = None
        for row in rows:
            created = _as_datetime(row.get("created_at") or row.get("date"))
            if created is not None and created >= since:
                recent += 1
            changed = _as_datetime(row.get("updated_at") or row.get("created_at"))
            if changed is not None and (last_updated is None or changed > last_updated):
                last_updated = changed
        return EntityStats(total=len(rows), recent=recent, last_updated=last_updated)

    @asynccontextmanager
    async def _operation(self, entity: str, operation: str) -> AsyncIterator[None]:
        """Validate the entity, time the round-trip and wrap store failures."""
        self.validate_entity(entity)
        start = time.perf_counter()
        try:
            yield
        except StoreError as e:
            STORE_OPERATIONS.labels(entity=entity, operation=operation, status="error").inc()
            logger.warning(
                "entity_operation_failed",
                entity=entity,
                operation=operation,
                error=e.message,
            )
            raise BackendError(e.message, entity=entity, operation=operation, cause=e) from e
        except BackendError:
            raise
        except Exception as e:
            STORE_OPERATIONS.labels(entity=entity, operation=operation, status="error").inc()
            logger.error(
                "entity_operation_error",
                entity=entity,
                operation=operation,
                error=str(e),
            )
            raise BackendError(str(e), entity=entity, operation=operation, cause=e) from e
        else:
            STORE_OPERATIONS.labels(entity=entity, operation=operation, status="ok").inc()
        finally:
            STORE_LATENCY.labels(entity=entity, operation=operation).observe(
                time.perf_counter() - start
            )


def _as_datetime(value: Any) -> datetime | None:
    """Read a timestamp column as an aware datetime; None when unreadable."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
