"""Actor identity configuration."""

from typing import Literal

from pydantic import BaseModel, Field

AuthBackend = Literal["static", "gotrue"]


class IdentityConfig(BaseModel):
    """Where the current principal comes from and how it maps to an actor."""

    auth_backend: AuthBackend = Field(
        default="static",
        description="Source of the authenticated principal",
    )
    principal_id: str | None = Field(
        default=None,
        description="Principal id for the static auth backend",
    )
    principal_email: str | None = Field(
        default=None,
        description="Principal email for the static auth backend",
    )
    principal_name: str | None = Field(
        default=None,
        description="Principal display name for the static auth backend",
    )
    directory_table: str = Field(
        default="employees",
        description="Employee directory used to map emails to actors",
    )
    directory_email_field: str = Field(
        default="email",
        description="Email column in the directory table",
    )
    directory_name_field: str = Field(
        default="name",
        description="Display name column in the directory table",
    )
