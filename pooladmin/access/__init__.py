"""Audited per-entity access for screens."""

from pooladmin.access.facade import (
    EntityAccessFacade,
    clients,
    employees,
    inventory,
    invoices,
    maintenances,
    orders,
    products,
    quotes,
    suppliers,
)

__all__ = [
    "EntityAccessFacade",
    "clients",
    "employees",
    "inventory",
    "invoices",
    "maintenances",
    "orders",
    "products",
    "quotes",
    "suppliers",
]
