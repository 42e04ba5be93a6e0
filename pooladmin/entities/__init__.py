"""Generic entity CRUD over the remote store."""

from pooladmin.entities.models import (
    EntityStats,
    QueryOptions,
    Relation,
    filters_to_conditions,
)
from pooladmin.entities.store import EntityStore

__all__ = ["EntityStats", "EntityStore", "QueryOptions", "Relation", "filters_to_conditions"]
