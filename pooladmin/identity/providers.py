"""AuthProvider and ActorDirectory implementations."""

from typing import Any

import httpx

from pooladmin.identity.actor import ActorDirectory, AuthProvider
from pooladmin.identity.models import DirectoryEntry, Principal
from pooladmin.remote.models import Condition
from pooladmin.remote.store import RemoteStore


class StaticAuthProvider(AuthProvider):
    """Returns a fixed principal; None models a signed-out client."""

    def __init__(self, principal: Principal | None = None) -> None:
        self._principal = principal

    async def current_principal(self) -> Principal | None:
        return self._principal


class GoTrueAuthProvider(AuthProvider):
    """Reads the signed-in user from the hosted store's auth endpoint.

    Calls ``GET {url}/auth/v1/user`` with the user's access token. A 401
    means nobody is signed in; other failures raise.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: str | None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/auth/v1",
            timeout=timeout,
            transport=transport,
            headers={"apikey": api_key},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def current_principal(self) -> Principal | None:
        if not self._access_token:
            return None

        response = await self._client.get(
            "/user",
            headers={"Authorization": f"Bearer {self._access_token}"},
        )
        if response.status_code == 401:
            return None
        response.raise_for_status()

        user: dict[str, Any] = response.json()
        metadata = user.get("user_metadata") or {}
        return Principal(
            id=str(user["id"]),
            email=user.get("email"),
            display_name=metadata.get("name"),
        )


class RemoteActorDirectory(ActorDirectory):
    """Employee directory kept as a table in the remote store."""

    def __init__(
        self,
        remote: RemoteStore,
        table: str = "employees",
        *,
        email_field: str = "email",
        name_field: str = "name",
    ) -> None:
        self._remote = remote
        self._table = table
        self._email_field = email_field
        self._name_field = name_field

    async def find_by_email(self, email: str) -> DirectoryEntry | None:
        rows = await self._remote.select(
            self._table, [Condition.eq(self._email_field, email)], limit=1
        )
        if not rows:
            return None
        row = rows[0]
        return DirectoryEntry(
            id=row["id"],
            email=row.get(self._email_field),
            display_name=row.get(self._name_field),
        )
