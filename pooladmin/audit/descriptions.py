"""Localized (Spanish) audit descriptions."""

from collections.abc import Sequence

from pooladmin.audit.models import AuditAction

ACTION_VERBS: dict[AuditAction, str] = {
    AuditAction.CREATE: "creó",
    AuditAction.UPDATE: "actualizó",
    AuditAction.DELETE: "eliminó",
    AuditAction.LOGIN: "inició sesión",
    AuditAction.LOGOUT: "cerró sesión",
}

# Infinitives used for failed attempts ("Intento fallido de crear cliente")
ACTION_INFINITIVES: dict[AuditAction, str] = {
    AuditAction.CREATE: "crear",
    AuditAction.UPDATE: "actualizar",
    AuditAction.DELETE: "eliminar",
    AuditAction.LOGIN: "iniciar sesión",
    AuditAction.LOGOUT: "cerrar sesión",
}

TABLE_NOUNS: dict[str, str] = {
    "clients": "cliente",
    "products": "producto",
    "orders": "pedido",
    "quotes": "cotización",
    "inventory": "inventario",
    "employees": "empleado",
    "suppliers": "proveedor",
    "maintenances": "mantenimiento",
    "invoices": "factura",
}


def table_noun(table_name: str) -> str:
    return TABLE_NOUNS.get(table_name, table_name)


def generate_description(
    action: AuditAction,
    table_name: str,
    changed_fields: Sequence[str] = (),
) -> str:
    """Summarize an action, e.g. ``actualizó pedido (campos: status)``."""
    text = f"{ACTION_VERBS[action]} {table_noun(table_name)}"
    if action == AuditAction.UPDATE and changed_fields:
        return f"{text} (campos: {', '.join(changed_fields)})"
    return text


def failed_attempt_description(action: AuditAction, table_name: str) -> str:
    return f"Intento fallido de {ACTION_INFINITIVES[action]} {table_noun(table_name)}"
