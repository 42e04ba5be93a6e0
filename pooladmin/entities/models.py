"""Query options and read shapes for entity reads."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pooladmin.remote.models import Condition, Ordering

SortOrder = Literal["asc", "desc"]


class QueryOptions(BaseModel):
    """Sorting and pagination for EntityStore.list."""

    sort_by: str | None = Field(default=None, description="Field to sort on")
    sort_order: SortOrder = Field(default="asc", description="Sort direction")
    limit: int | None = Field(default=None, gt=0, description="Maximum rows")
    offset: int = Field(default=0, ge=0, description="Rows to skip")

    def ordering(self) -> list[Ordering]:
        if self.sort_by is None:
            return []
        return [Ordering(field=self.sort_by, descending=self.sort_order == "desc")]


class Relation(BaseModel):
    """How rows of another entity attach to each listed record.

    With ``kind="many"`` the attached value is the list of related rows whose
    ``foreign_key`` equals the record's ``local_key``. With ``kind="one"`` it
    is the single related row whose ``local_key`` equals the record's
    ``foreign_key``, or None.
    """

    model_config = ConfigDict(frozen=True)

    entity: str = Field(..., description="Related entity collection")
    foreign_key: str = Field(..., description="Column holding the reference")
    local_key: str = Field(default="id", description="Referenced column")
    kind: Literal["one", "many"] = Field(default="many", description="Cardinality")


class EntityStats(BaseModel):
    """Summary counts for one entity collection."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(..., ge=0, description="Number of records")
    recent: int = Field(..., ge=0, description="Records created inside the window")
    last_updated: datetime | None = Field(
        default=None, description="Latest updated_at (or created_at) seen"
    )


def filters_to_conditions(filters: dict[str, Any] | None) -> list[Condition]:
    """Turn a ``{field: value}`` map into store conditions.

    None and empty-string values are skipped. A string value matches
    case-insensitively anywhere in the field; a list, tuple or set value
    matches any of its members; anything else is an exact match.
    """
    conditions = []
    for field, value in (filters or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, str):
            conditions.append(Condition.contains(field, value))
        elif isinstance(value, (list, tuple, set, frozenset)):
            conditions.append(Condition.one_of(field, value))
        else:
            conditions.append(Condition.eq(field, value))
    return conditions
