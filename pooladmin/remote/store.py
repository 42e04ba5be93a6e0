"""RemoteStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pooladmin.remote.models import Condition, Ordering, Record


class RemoteStore(ABC):
    """Abstract interface for the hosted relational store.

    Tables are addressed by name and rows are plain field maps. The store
    assigns identifiers and timestamps. Implementations raise
    pooladmin.db.errors.StoreError subclasses carrying the backend message.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        *,
        order_by: Sequence[Ordering] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        """Return rows matching all conditions."""
        pass

    @abstractmethod
    async def get(self, table: str, record_id: Any) -> Record | None:
        """Get a row by id."""
        pass

    @abstractmethod
    async def insert(self, table: str, rows: Sequence[Record]) -> list[Record]:
        """Insert rows, returning them as stored."""
        pass

    @abstractmethod
    async def update(self, table: str, record_id: Any, patch: Record) -> Record | None:
        """Apply a partial update, returning the updated row or None if absent."""
        pass

    @abstractmethod
    async def delete(self, table: str, record_ids: Sequence[Any]) -> list[Record]:
        """Delete rows by id, returning the rows that were deleted."""
        pass

    async def close(self) -> None:
        """Release network resources held by the store."""
        return None
