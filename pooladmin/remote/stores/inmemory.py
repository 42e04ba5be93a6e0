"""In-memory implementation of RemoteStore."""

import copy
from collections.abc import Sequence
from typing import Any

from pooladmin.remote.models import Condition, Ordering, Record, utc_now_iso
from pooladmin.remote.store import RemoteStore


def _same_id(left: Any, right: Any) -> bool:
    return left == right or str(left) == str(right)


class InMemoryRemoteStore(RemoteStore):
    """In-memory implementation of RemoteStore for testing and development.

    Uses per-table lists with linear scan for queries. Ids are sequential
    integers per table; created_at and updated_at are ISO-8601 strings.
    Not suitable for production use.
    """

    def __init__(self, seed: dict[str, list[Record]] | None = None) -> None:
        """Initialize storage, optionally pre-populated with rows."""
        self._tables: dict[str, list[Record]] = {}
        self._sequences: dict[str, int] = {}
        for table, rows in (seed or {}).items():
            self._insert_rows(table, rows)

    async def select(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        *,
        order_by: Sequence[Ordering] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        rows = [
            row for row in self._tables.get(table, [])
            if all(condition.matches(row) for condition in conditions)
        ]
        # Stable sorts applied from the least to the most significant key
        for ordering in reversed(order_by):
            rows.sort(
                key=lambda row, f=ordering.field: (row.get(f) is None, row.get(f)),
                reverse=ordering.descending,
            )
        end = offset + limit if limit is not None else None
        return copy.deepcopy(rows[offset:end])

    async def get(self, table: str, record_id: Any) -> Record | None:
        row = self._find(table, record_id)
        return copy.deepcopy(row) if row is not None else None

    async def insert(self, table: str, rows: Sequence[Record]) -> list[Record]:
        return copy.deepcopy(self._insert_rows(table, rows))

    async def update(self, table: str, record_id: Any, patch: Record) -> Record | None:
        row = self._find(table, record_id)
        if row is None:
            return None
        row.update(copy.deepcopy({k: v for k, v in patch.items() if k != "id"}))
        row["updated_at"] = utc_now_iso()
        return copy.deepcopy(row)

    async def delete(self, table: str, record_ids: Sequence[Any]) -> list[Record]:
        rows = self._tables.get(table, [])
        deleted = [r for r in rows if any(_same_id(r.get("id"), i) for i in record_ids)]
        deleted_ids = {id(r) for r in deleted}
        self._tables[table] = [r for r in rows if id(r) not in deleted_ids]
        return copy.deepcopy(deleted)

    def _find(self, table: str, record_id: Any) -> Record | None:
        for row in self._tables.get(table, []):
            if _same_id(row.get("id"), record_id):
                return row
        return None

    def _insert_rows(self, table: str, rows: Sequence[Record]) -> list[Record]:
        stored = []
        for row in rows:
            now = utc_now_iso()
            new_row = copy.deepcopy(dict(row))
            if new_row.get("id") is None:
                new_row["id"] = self._next_id(table)
            elif isinstance(new_row["id"], int):
                self._sequences[table] = max(self._sequences.get(table, 0), new_row["id"])
            new_row.setdefault("created_at", now)
            new_row.setdefault("updated_at", now)
            self._tables.setdefault(table, []).append(new_row)
            stored.append(new_row)
        return stored

    def _next_id(self, table: str) -> int:
        self._sequences[table] = self._sequences.get(table, 0) + 1
        return self._sequences[table]
