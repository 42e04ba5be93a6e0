"""Tests for bootstrap wiring."""

import pytest

from pooladmin.audit.models import AuditAction
from pooladmin.bootstrap import bootstrap, create_auth_provider, create_remote_store
from pooladmin.config.settings import Settings, set_toml_config
from pooladmin.exceptions import PoolAdminError
from pooladmin.identity.providers import GoTrueAuthProvider, StaticAuthProvider
from pooladmin.remote.stores.inmemory import InMemoryRemoteStore
from pooladmin.remote.stores.postgres import PostgresRemoteStore
from pooladmin.remote.stores.postgrest import PostgRESTRemoteStore


@pytest.fixture(autouse=True)
def no_toml() -> None:
    set_toml_config({})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        identity={
            "principal_id": "auth-1",
            "principal_email": "ana@example.com",
            "principal_name": "Ana",
        },
        observability={"log_level": "WARNING"},
    )


class TestCreateRemoteStore:
    def test_inmemory(self) -> None:
        assert isinstance(create_remote_store(Settings()), InMemoryRemoteStore)

    @pytest.mark.asyncio
    async def test_postgrest(self) -> None:
        settings = Settings(
            storage={"backend": "postgrest", "url": "https://x.example.co", "api_key": "k"}
        )
        store = create_remote_store(settings)
        assert isinstance(store, PostgRESTRemoteStore)
        await store.close()

    def test_postgrest_requires_url(self) -> None:
        with pytest.raises(PoolAdminError):
            create_remote_store(Settings(storage={"backend": "postgrest"}))

    def test_postgres(self) -> None:
        settings = Settings(
            storage={"backend": "postgres", "url": "postgresql://u:p@localhost/pool"}
        )
        assert isinstance(create_remote_store(settings), PostgresRemoteStore)


class TestCreateAuthProvider:
    @pytest.mark.asyncio
    async def test_static_principal(self, settings) -> None:
        provider = create_auth_provider(settings)

        principal = await provider.current_principal()

        assert isinstance(provider, StaticAuthProvider)
        assert principal.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_static_signed_out(self) -> None:
        assert await create_auth_provider(Settings()).current_principal() is None

    @pytest.mark.asyncio
    async def test_gotrue(self) -> None:
        settings = Settings(
            storage={"url": "https://x.example.co", "api_key": "k"},
            identity={"auth_backend": "gotrue"},
        )
        provider = create_auth_provider(settings)
        assert isinstance(provider, GoTrueAuthProvider)
        await provider.close()


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_facade_round_trip(self, settings) -> None:
        ctx = bootstrap(settings)
        await ctx.remote.insert(
            "employees", [{"email": "ana@example.com", "name": "Ana Pérez"}]
        )

        created = await ctx.facade("clients").create({"name": "Acme"})
        [entry] = await ctx.audit_logs.get_record_audit_logs("clients", created["id"])

        assert entry.action == AuditAction.CREATE
        assert entry.actor.id == "1"
        assert entry.actor.display_name == "Ana Pérez"
        assert entry.session_id == ctx.session_id
        assert entry.user_agent == "pooladmin"
        await ctx.aclose()

    def test_facades_cached_per_entity(self, settings) -> None:
        ctx = bootstrap(settings)
        assert ctx.facade("orders") is ctx.facade("orders")
        assert ctx.facade("orders", module="ventas") is not ctx.facade("orders")

    def test_sessions_differ_between_contexts(self, settings) -> None:
        assert bootstrap(settings).session_id != bootstrap(settings).session_id
