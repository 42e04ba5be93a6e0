"""Remote store backends."""

from pooladmin.remote.stores.inmemory import InMemoryRemoteStore
from pooladmin.remote.stores.postgres import PostgresRemoteStore
from pooladmin.remote.stores.postgrest import PostgRESTRemoteStore

__all__ = [
    "InMemoryRemoteStore",
    "PostgresRemoteStore",
    "PostgRESTRemoteStore",
]
