"""Query primitives shared by all remote store backends."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Record = dict[str, Any]


class FilterOp(str, Enum):
    """Comparison operators supported by every backend."""

    EQ = "eq"
    IN = "in"
    GTE = "gte"
    LTE = "lte"
    ILIKE = "ilike"


class Condition(BaseModel):
    """A single field predicate. Conditions in a query are AND-ed."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Column name")
    op: FilterOp = Field(default=FilterOp.EQ, description="Comparison operator")
    value: Any = Field(default=None, description="Operand; a list for IN")

    @classmethod
    def eq(cls, field: str, value: Any) -> "Condition":
        return cls(field=field, op=FilterOp.EQ, value=value)

    @classmethod
    def one_of(cls, field: str, values: Any) -> "Condition":
        return cls(field=field, op=FilterOp.IN, value=list(values))

    @classmethod
    def gte(cls, field: str, value: Any) -> "Condition":
        return cls(field=field, op=FilterOp.GTE, value=value)

    @classmethod
    def lte(cls, field: str, value: Any) -> "Condition":
        return cls(field=field, op=FilterOp.LTE, value=value)

    @classmethod
    def contains(cls, field: str, text: str) -> "Condition":
        """Case-insensitive substring match."""
        return cls(field=field, op=FilterOp.ILIKE, value=text)

    def matches(self, record: Record) -> bool:
        """Evaluate the predicate against a plain record."""
        actual = record.get(self.field)
        if self.op == FilterOp.EQ:
            return _comparable(actual) == _comparable(self.value)
        if self.op == FilterOp.IN:
            return _comparable(actual) in [_comparable(v) for v in self.value]
        if actual is None or self.value is None:
            return False
        if self.op == FilterOp.ILIKE:
            return str(self.value).lower() in str(actual).lower()
        if self.op == FilterOp.GTE:
            return _comparable(actual) >= _comparable(self.value)
        return _comparable(actual) <= _comparable(self.value)


class Ordering(BaseModel):
    """Sort key for select queries."""

    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = False


def _comparable(value: Any) -> Any:
    # Timestamps are stored as ISO strings by the in-memory backend.
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.isoformat()
    return value


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()
