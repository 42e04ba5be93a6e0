"""Entity collection configuration."""

from pydantic import BaseModel, Field

DEFAULT_ENTITIES: tuple[str, ...] = (
    "clients",
    "products",
    "suppliers",
    "employees",
    "orders",
    "quotes",
    "invoices",
    "inventory",
    "maintenances",
)


class EntitiesConfig(BaseModel):
    """Collections the entity store is allowed to address."""

    known: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENTITIES),
        min_length=1,
        description="Known entity collection names",
    )
