"""Configuration model exports.

    from pooladmin.config.models import AuditConfig, StorageConfig
"""

from pooladmin.config.models.audit import AuditConfig
from pooladmin.config.models.entities import DEFAULT_ENTITIES, EntitiesConfig
from pooladmin.config.models.identity import IdentityConfig
from pooladmin.config.models.observability import ObservabilityConfig
from pooladmin.config.models.storage import StorageConfig

__all__ = [
    "AuditConfig",
    "DEFAULT_ENTITIES",
    "EntitiesConfig",
    "IdentityConfig",
    "ObservabilityConfig",
    "StorageConfig",
]
