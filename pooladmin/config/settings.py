"""Root settings model for pooladmin configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from pooladmin.config.models.audit import AuditConfig
from pooladmin.config.models.entities import EntitiesConfig
from pooladmin.config.models.identity import IdentityConfig
from pooladmin.config.models.observability import ObservabilityConfig
from pooladmin.config.models.storage import StorageConfig

# Module-level variable to store TOML config for settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object containing all nested configuration sections.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{POOLADMIN_ENV}.toml (environment overrides)
    4. POOLADMIN_* environment variables (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="POOLADMIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="pooladmin", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Remote store configuration",
    )
    entities: EntitiesConfig = Field(
        default_factory=EntitiesConfig,
        description="Known entity collections",
    )
    audit: AuditConfig = Field(
        default_factory=AuditConfig,
        description="Audit trail configuration",
    )
    identity: IdentityConfig = Field(
        default_factory=IdentityConfig,
        description="Actor identity configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include TOML config.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (POOLADMIN_* environment variables)
        3. toml_settings (config/*.toml files)
        4. (defaults from model)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
