"""Shared test fixtures for the pooladmin test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from pooladmin.access.facade import EntityAccessFacade
from pooladmin.audit.recorder import AuditRecorder
from pooladmin.audit.store import AuditLogStore
from pooladmin.config.models.entities import DEFAULT_ENTITIES
from pooladmin.entities.store import EntityStore
from pooladmin.identity.actor import ActorResolver
from pooladmin.identity.models import DirectoryEntry, Principal
from pooladmin.identity.providers import StaticAuthProvider
from pooladmin.identity.session import SessionContext
from pooladmin.remote.stores.inmemory import InMemoryRemoteStore


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            toml_file = test_config_dir / filename
            toml_file.write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"POOLADMIN_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test.

    This ensures test isolation for configuration tests.
    """
    from pooladmin.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeDirectory:
    """Employee directory backed by a dict keyed by email."""

    def __init__(self, entries: dict[str, DirectoryEntry] | None = None) -> None:
        self.entries = entries or {}
        self.lookups: list[str] = []

    async def find_by_email(self, email: str) -> DirectoryEntry | None:
        self.lookups.append(email)
        return self.entries.get(email)


@pytest.fixture
def principal() -> Principal:
    return Principal(id="auth-7", email="ana@example.com", display_name="Ana")


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        {"ana@example.com": DirectoryEntry(id=7, email="ana@example.com", display_name="Ana Pérez")}
    )


@pytest.fixture
def remote() -> InMemoryRemoteStore:
    """Fresh in-memory remote store."""
    return InMemoryRemoteStore()


@pytest.fixture
def entity_store(remote: InMemoryRemoteStore) -> EntityStore:
    return EntityStore(remote, DEFAULT_ENTITIES)


@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest.fixture
def actors(principal: Principal, directory: FakeDirectory) -> ActorResolver:
    return ActorResolver(StaticAuthProvider(principal), directory)


@pytest.fixture
def audit_store(remote: InMemoryRemoteStore) -> AuditLogStore:
    return AuditLogStore(remote)


@pytest.fixture
def recorder(
    audit_store: AuditLogStore, actors: ActorResolver, session: SessionContext
) -> AuditRecorder:
    return AuditRecorder(audit_store, actors, session, user_agent="pytest")


@pytest.fixture
def make_facade(
    entity_store: EntityStore, recorder: AuditRecorder
) -> Callable[..., EntityAccessFacade]:
    """Factory for facades sharing the fixture store and recorder."""

    def _make(entity: str, **kwargs: Any) -> EntityAccessFacade:
        return EntityAccessFacade(entity, entity_store, recorder, **kwargs)

    return _make
