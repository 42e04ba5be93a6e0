"""Identity models: authenticated principals and the actors they map to."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ANONYMOUS_NAME = "anonymous"


def _stringify(value: Any) -> str | None:
    return None if value is None else str(value)


class Principal(BaseModel):
    """The signed-in user as reported by the auth provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Auth provider user id")
    email: str | None = Field(default=None, description="Login email")
    display_name: str | None = Field(default=None, description="Name from the auth profile")


class DirectoryEntry(BaseModel):
    """A match in the employee directory."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Internal actor id")
    email: str | None = None
    display_name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str | None:
        return _stringify(value)


class Actor(BaseModel):
    """Identity attributed to an audit entry.

    ``id`` is None when the principal has no resolvable domain identity,
    including the fully anonymous case.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, description="Internal actor id")
    email: str | None = Field(default=None, description="Actor email")
    display_name: str = Field(default=ANONYMOUS_NAME, description="Name shown in reports")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str | None:
        return _stringify(value)

    @classmethod
    def anonymous(cls, principal: Principal | None = None) -> "Actor":
        """Fallback actor for a principal with no directory match."""
        if principal is None:
            return cls()
        return cls(
            id=None,
            email=principal.email,
            display_name=principal.email or principal.id,
        )

    @property
    def is_anonymous(self) -> bool:
        return self.id is None
