"""Remote store configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgrest", "postgres"]


class StorageConfig(BaseModel):
    """Configuration for the remote relational store.

    The postgrest backend talks to the hosted store's REST API; the
    postgres backend connects directly with asyncpg.
    """

    backend: BackendType = Field(
        default="inmemory",
        description="Remote store backend",
    )
    url: str | None = Field(
        default=None,
        description="REST base URL (postgrest) or DSN (postgres)",
    )
    api_key: str | None = Field(
        default=None,
        description="Project API key sent as the apikey header (postgrest)",
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token of the signed-in user (postgrest)",
    )
    schema_name: str = Field(
        default="public",
        description="Database schema holding the entity tables",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds (postgrest)",
    )
    min_pool_size: int = Field(
        default=1,
        gt=0,
        description="Minimum connections to keep open (postgres)",
    )
    max_pool_size: int = Field(
        default=10,
        gt=0,
        description="Maximum connections in pool (postgres)",
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Default timeout for queries in seconds (postgres)",
    )
