"""Actor resolution.

Maps the authenticated principal to the domain actor recorded on audit
entries. Resolution is attempted once per resolver and memoized; failures
degrade to an anonymous actor and are never raised to callers.
"""

import asyncio
from abc import ABC, abstractmethod

from pooladmin.exceptions import ActorResolutionError
from pooladmin.identity.models import Actor, DirectoryEntry, Principal
from pooladmin.observability.logging import get_logger
from pooladmin.observability.metrics import ACTOR_RESOLUTIONS

logger = get_logger(__name__)


class AuthProvider(ABC):
    """Source of the currently authenticated principal."""

    @abstractmethod
    async def current_principal(self) -> Principal | None:
        """Return the signed-in principal, or None when nobody is signed in."""
        pass


class ActorDirectory(ABC):
    """Lookup of internal actors by email."""

    @abstractmethod
    async def find_by_email(self, email: str) -> DirectoryEntry | None:
        """Return the directory entry for email, or None when there is no match."""
        pass


class ActorResolver:
    """Resolves and caches the actor for the lifetime of the resolver.

    Args:
        auth: Auth provider; None means every caller is anonymous
        directory: Employee directory; None means no principal has a domain id
    """

    def __init__(
        self,
        auth: AuthProvider | None,
        directory: ActorDirectory | None = None,
    ) -> None:
        self._auth = auth
        self._directory = directory
        self._actor: Actor | None = None
        self._lock = asyncio.Lock()

    @property
    def actor(self) -> Actor | None:
        """The resolved actor, or None before resolution has run."""
        return self._actor

    @property
    def is_resolved(self) -> bool:
        return self._actor is not None

    async def ensure_resolved(self) -> Actor:
        """Resolve the actor once and return the cached result afterwards.

        Concurrent callers wait for the same single attempt.
        """
        if self._actor is not None:
            return self._actor
        async with self._lock:
            if self._actor is None:
                self._actor = await self._resolve_safely()
        return self._actor

    async def resolve(self) -> Actor:
        """Alias of ensure_resolved."""
        return await self.ensure_resolved()

    async def _resolve_safely(self) -> Actor:
        principal: Principal | None = None
        try:
            principal = await self._current_principal()
            if principal is None:
                ACTOR_RESOLUTIONS.labels(outcome="anonymous").inc()
                logger.info("actor_resolved_anonymous")
                return Actor.anonymous()

            entry = await self._lookup(principal)
            if entry is None:
                ACTOR_RESOLUTIONS.labels(outcome="unmatched").inc()
                logger.info("actor_directory_no_match", principal_id=principal.id)
                return Actor.anonymous(principal)

            ACTOR_RESOLUTIONS.labels(outcome="resolved").inc()
            logger.info("actor_resolved", actor_id=entry.id)
            return Actor(
                id=entry.id,
                email=entry.email or principal.email,
                display_name=(
                    entry.display_name
                    or principal.display_name
                    or principal.email
                    or principal.id
                ),
            )
        except ActorResolutionError as e:
            ACTOR_RESOLUTIONS.labels(outcome="failed").inc()
            logger.warning("actor_resolution_failed", error=e.message)
            return Actor.anonymous(principal)

    async def _current_principal(self) -> Principal | None:
        if self._auth is None:
            return None
        try:
            return await self._auth.current_principal()
        except Exception as e:
            raise ActorResolutionError(f"Auth provider unavailable: {e}", cause=e) from e

    async def _lookup(self, principal: Principal) -> DirectoryEntry | None:
        if self._directory is None or not principal.email:
            return None
        try:
            return await self._directory.find_by_email(principal.email)
        except Exception as e:
            raise ActorResolutionError(f"Directory lookup failed: {e}", cause=e) from e
