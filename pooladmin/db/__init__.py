"""Database connectivity shared by the PostgreSQL-backed stores."""

from pooladmin.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from pooladmin.db.pool import PostgresPool

__all__ = [
    "StoreError",
    "ConnectionError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "PostgresPool",
]
