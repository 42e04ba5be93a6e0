"""PostgreSQL implementation of RemoteStore.

Uses asyncpg for async database access. Table and column names come from
callers, so every identifier is validated and quoted before it reaches SQL;
values are always passed as bind parameters.
"""

import json
import re
from collections.abc import Sequence
from typing import Any

import asyncpg

from pooladmin.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from pooladmin.db.pool import PostgresPool
from pooladmin.observability.logging import get_logger
from pooladmin.remote.models import Condition, FilterOp, Ordering, Record
from pooladmin.remote.store import RemoteStore

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_ident(name: str) -> str:
    """Validate and double-quote a SQL identifier."""
    if not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlBuilder:
    """Builds parameterized statements for one schema."""

    def __init__(self, schema_name: str = "public") -> None:
        self._schema = quote_ident(schema_name)

    def table(self, name: str) -> str:
        return f"{self._schema}.{quote_ident(name)}"

    def where(self, conditions: Sequence[Condition], params: list[Any]) -> str:
        clauses = []
        for condition in conditions:
            column = quote_ident(condition.field)
            if condition.op == FilterOp.EQ and condition.value is None:
                clauses.append(f"{column} IS NULL")
                continue
            if condition.op == FilterOp.IN:
                params.append(list(condition.value))
                clauses.append(f"{column} = ANY(${len(params)})")
                continue
            if condition.op == FilterOp.ILIKE:
                params.append(f"%{escape_like(str(condition.value))}%")
                clauses.append(f"{column}::text ILIKE ${len(params)}")
                continue
            operator = {FilterOp.EQ: "=", FilterOp.GTE: ">=", FilterOp.LTE: "<="}[condition.op]
            params.append(condition.value)
            clauses.append(f"{column} {operator} ${len(params)}")
        return f" WHERE {' AND '.join(clauses)}" if clauses else ""

    def select(
        self,
        table: str,
        conditions: Sequence[Condition],
        order_by: Sequence[Ordering],
        limit: int | None,
        offset: int,
    ) -> tuple[str, list[Any]]:
        params: list[Any] = []
        query = f"SELECT * FROM {self.table(table)}" + self.where(conditions, params)
        if order_by:
            keys = ", ".join(
                f"{quote_ident(o.field)} {'DESC' if o.descending else 'ASC'}" for o in order_by
            )
            query += f" ORDER BY {keys}"
        if limit is not None:
            params.append(limit)
            query += f" LIMIT ${len(params)}"
        if offset:
            params.append(offset)
            query += f" OFFSET ${len(params)}"
        return query, params

    def insert(self, table: str, rows: Sequence[Record]) -> tuple[str, list[Any]]:
        columns: list[str] = []
        for row in rows:
            columns.extend(c for c in row if c not in columns)
        if not columns:
            return f"INSERT INTO {self.table(table)} DEFAULT VALUES RETURNING *", []

        params: list[Any] = []
        tuples = []
        for row in rows:
            values = []
            for column in columns:
                if column in row:
                    params.append(row[column])
                    values.append(f"${len(params)}")
                else:
                    values.append("DEFAULT")
            tuples.append(f"({', '.join(values)})")
        column_list = ", ".join(quote_ident(c) for c in columns)
        query = (
            f"INSERT INTO {self.table(table)} ({column_list}) "
            f"VALUES {', '.join(tuples)} RETURNING *"
        )
        return query, params

    def update(self, table: str, record_id: Any, patch: Record) -> tuple[str, list[Any]]:
        params: list[Any] = []
        assignments = []
        for column, value in patch.items():
            params.append(value)
            assignments.append(f"{quote_ident(column)} = ${len(params)}")
        params.append(record_id)
        query = (
            f"UPDATE {self.table(table)} SET {', '.join(assignments)} "
            f"WHERE \"id\" = ${len(params)} RETURNING *"
        )
        return query, params

    def delete(self, table: str, record_ids: Sequence[Any]) -> tuple[str, list[Any]]:
        return (
            f"DELETE FROM {self.table(table)} WHERE \"id\" = ANY($1) RETURNING *",
            [list(record_ids)],
        )


async def init_connection(conn: asyncpg.Connection) -> None:
    """Exchange json/jsonb columns as Python objects."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=lambda value: json.dumps(value, default=str),
            decoder=json.loads,
            schema="pg_catalog",
        )


def _map_error(e: Exception) -> StoreError:
    message = str(e)
    if isinstance(e, StoreError):
        return e
    if isinstance(e, asyncpg.IntegrityConstraintViolationError):
        if isinstance(e, asyncpg.NotNullViolationError):
            return ValidationError(message, cause=e)
        return ConflictError(message, cause=e)
    if isinstance(e, asyncpg.UndefinedTableError):
        return NotFoundError(message, cause=e)
    if isinstance(e, (asyncpg.DataError, asyncpg.UndefinedColumnError)):
        return ValidationError(message, cause=e)
    if isinstance(e, asyncpg.PostgresError):
        return StoreError(message, cause=e)
    return ConnectionError(message, cause=e)


class PostgresRemoteStore(RemoteStore):
    """PostgreSQL implementation of RemoteStore.

    Expects every table to have an ``id`` primary key with a server default,
    and ``created_at``/``updated_at`` columns maintained by the database.
    """

    def __init__(self, pool: PostgresPool, schema_name: str = "public") -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool created with init_connection
            schema_name: Schema holding the entity tables
        """
        self._pool = pool
        self._sql = SqlBuilder(schema_name)

    async def close(self) -> None:
        await self._pool.close()

    async def select(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        *,
        order_by: Sequence[Ordering] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        query, params = self._sql.select(table, conditions, order_by, limit, offset)
        return await self._fetch(table, "select", query, params)

    async def get(self, table: str, record_id: Any) -> Record | None:
        query, params = self._sql.select(table, [Condition.eq("id", record_id)], (), 1, 0)
        rows = await self._fetch(table, "get", query, params)
        return rows[0] if rows else None

    async def insert(self, table: str, rows: Sequence[Record]) -> list[Record]:
        if not rows:
            return []
        query, params = self._sql.insert(table, rows)
        return await self._fetch(table, "insert", query, params)

    async def update(self, table: str, record_id: Any, patch: Record) -> Record | None:
        patch = {k: v for k, v in patch.items() if k != "id"}
        if not patch:
            return await self.get(table, record_id)
        query, params = self._sql.update(table, record_id, patch)
        rows = await self._fetch(table, "update", query, params)
        return rows[0] if rows else None

    async def delete(self, table: str, record_ids: Sequence[Any]) -> list[Record]:
        if not record_ids:
            return []
        query, params = self._sql.delete(table, record_ids)
        return await self._fetch(table, "delete", query, params)

    async def _fetch(
        self, table: str, operation: str, query: str, params: list[Any]
    ) -> list[Record]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
                return [dict(row) for row in rows]
        except Exception as e:
            logger.error(
                "postgres_query_error", table=table, operation=operation, error=str(e)
            )
            raise _map_error(e) from e
