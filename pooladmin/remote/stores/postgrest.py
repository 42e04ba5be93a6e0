"""PostgREST implementation of RemoteStore.

Talks to the hosted store's REST API (``/rest/v1/<table>``) over httpx.

Usage:
    async with PostgRESTRemoteStore(url="https://xyz.example.co", api_key="...") as store:
        rows = await store.select("clients", [Condition.eq("city", "Monterrey")])
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx

from pooladmin.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from pooladmin.observability.logging import get_logger
from pooladmin.remote.models import Condition, FilterOp, Ordering, Record
from pooladmin.remote.store import RemoteStore

logger = get_logger(__name__)

_RESERVED_CHARS = set(',.:()"\\ ')


def format_value(value: Any) -> str:
    """Render a scalar as a PostgREST filter operand."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _format_list_item(value: Any) -> str:
    text = format_value(value)
    if any(ch in _RESERVED_CHARS for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def condition_param(condition: Condition) -> tuple[str, str]:
    """Translate a Condition into a (column, "op.value") query parameter."""
    if condition.op == FilterOp.EQ and condition.value is None:
        return condition.field, "is.null"
    if condition.op == FilterOp.IN:
        items = ",".join(_format_list_item(v) for v in condition.value)
        return condition.field, f"in.({items})"
    if condition.op == FilterOp.ILIKE:
        return condition.field, f"ilike.*{format_value(condition.value)}*"
    return condition.field, f"{condition.op.value}.{format_value(condition.value)}"


def order_param(order_by: Sequence[Ordering]) -> str:
    return ",".join(
        f"{o.field}.{'desc' if o.descending else 'asc'}" for o in order_by
    )


class PostgRESTRemoteStore(RemoteStore):
    """RemoteStore backed by a PostgREST endpoint.

    Attributes:
        base_url: Project URL; requests go to ``{base_url}/rest/v1``
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        schema_name: str = "public",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            url: Project URL of the hosted store
            api_key: Project API key
            access_token: Signed-in user's JWT; the API key is used when absent
            schema_name: Schema exposed through the REST API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=timeout,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Accept-Profile": schema_name,
                "Content-Profile": schema_name,
            },
        )

    async def __aenter__(self) -> "PostgRESTRemoteStore":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def select(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        *,
        order_by: Sequence[Ordering] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        params: list[tuple[str, str]] = [("select", "*")]
        params.extend(condition_param(c) for c in conditions)
        if order_by:
            params.append(("order", order_param(order_by)))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset:
            params.append(("offset", str(offset)))
        return await self._request("GET", table, params=params)

    async def get(self, table: str, record_id: Any) -> Record | None:
        rows = await self._request(
            "GET",
            table,
            params=[("select", "*"), condition_param(Condition.eq("id", record_id)), ("limit", "1")],
        )
        return rows[0] if rows else None

    async def insert(self, table: str, rows: Sequence[Record]) -> list[Record]:
        return await self._request("POST", table, json=list(rows), returning=True)

    async def update(self, table: str, record_id: Any, patch: Record) -> Record | None:
        rows = await self._request(
            "PATCH",
            table,
            params=[condition_param(Condition.eq("id", record_id))],
            json={k: v for k, v in patch.items() if k != "id"},
            returning=True,
        )
        return rows[0] if rows else None

    async def delete(self, table: str, record_ids: Sequence[Any]) -> list[Record]:
        return await self._request(
            "DELETE",
            table,
            params=[condition_param(Condition.one_of("id", record_ids))],
            returning=True,
        )

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        returning: bool = False,
    ) -> list[Record]:
        """Make a REST request and map failures onto StoreError."""
        headers = {"Prefer": "return=representation"} if returning else None
        try:
            response = await self._client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.error("postgrest_transport_error", table=table, method=method, error=str(e))
            raise ConnectionError(str(e) or type(e).__name__, cause=e) from e

        if response.status_code >= 400:
            raise self._error_from_response(response)

        if response.status_code == 204 or not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _error_from_response(response: httpx.Response) -> StoreError:
        try:
            data = response.json()
        except ValueError:
            data = None
        message = (data.get("message") if isinstance(data, dict) else None) or response.text
        logger.warning(
            "postgrest_request_failed",
            status_code=response.status_code,
            error=message,
        )
        if response.status_code == 404:
            return NotFoundError(message)
        if response.status_code == 409:
            return ConflictError(message)
        if response.status_code in (400, 422):
            return ValidationError(message)
        return StoreError(message)
