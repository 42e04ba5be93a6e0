"""Tests for auth providers and the remote actor directory."""

import httpx
import pytest

from pooladmin.identity.models import Principal
from pooladmin.identity.providers import (
    GoTrueAuthProvider,
    RemoteActorDirectory,
    StaticAuthProvider,
)
from pooladmin.remote.stores.inmemory import InMemoryRemoteStore


def gotrue(handler, access_token: str | None = "user-jwt") -> GoTrueAuthProvider:
    return GoTrueAuthProvider(
        "https://project.example.co/",
        "anon-key",
        access_token,
        transport=httpx.MockTransport(handler),
    )


class TestStaticAuthProvider:
    @pytest.mark.asyncio
    async def test_returns_principal(self) -> None:
        principal = Principal(id="1", email="a@example.com")
        assert await StaticAuthProvider(principal).current_principal() == principal

    @pytest.mark.asyncio
    async def test_signed_out(self) -> None:
        assert await StaticAuthProvider().current_principal() is None


class TestGoTrueAuthProvider:
    """Tests for GoTrueAuthProvider."""

    @pytest.mark.asyncio
    async def test_reads_user(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "id": "auth-7",
                    "email": "ana@example.com",
                    "user_metadata": {"name": "Ana"},
                },
            )

        provider = gotrue(handler)
        principal = await provider.current_principal()
        await provider.close()

        assert principal == Principal(id="auth-7", email="ana@example.com", display_name="Ana")
        assert seen[0].url.path == "/auth/v1/user"
        assert seen[0].headers["apikey"] == "anon-key"
        assert seen[0].headers["authorization"] == "Bearer user-jwt"

    @pytest.mark.asyncio
    async def test_unauthorized_is_signed_out(self) -> None:
        provider = gotrue(lambda request: httpx.Response(401, json={"msg": "expired"}))
        assert await provider.current_principal() is None
        await provider.close()

    @pytest.mark.asyncio
    async def test_without_token_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        provider = gotrue(handler, access_token=None)
        assert await provider.current_principal() is None
        await provider.close()

    @pytest.mark.asyncio
    async def test_server_error_raises(self) -> None:
        provider = gotrue(lambda request: httpx.Response(500))
        with pytest.raises(httpx.HTTPStatusError):
            await provider.current_principal()
        await provider.close()


class TestRemoteActorDirectory:
    """Tests for RemoteActorDirectory."""

    @pytest.fixture
    def remote(self) -> InMemoryRemoteStore:
        return InMemoryRemoteStore(
            {
                "employees": [
                    {"id": 3, "email": "ana@example.com", "name": "Ana Pérez"},
                    {"id": 4, "email": "luis@example.com", "name": "Luis"},
                ]
            }
        )

    @pytest.mark.asyncio
    async def test_finds_by_email(self, remote) -> None:
        entry = await RemoteActorDirectory(remote).find_by_email("ana@example.com")

        assert entry.id == "3"
        assert entry.display_name == "Ana Pérez"

    @pytest.mark.asyncio
    async def test_no_match(self, remote) -> None:
        assert await RemoteActorDirectory(remote).find_by_email("x@example.com") is None

    @pytest.mark.asyncio
    async def test_custom_fields(self) -> None:
        remote = InMemoryRemoteStore(
            {"staff": [{"id": 1, "correo": "ana@example.com", "nombre": "Ana"}]}
        )
        directory = RemoteActorDirectory(
            remote, "staff", email_field="correo", name_field="nombre"
        )

        entry = await directory.find_by_email("ana@example.com")

        assert entry.display_name == "Ana"
        assert entry.email == "ana@example.com"
