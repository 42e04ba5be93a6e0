"""Bootstrap module for wiring pooladmin from configuration.

Builds the remote store for the configured backend and everything layered
on top of it: the entity store, the session, the actor resolver, the audit
collection and the recorder. Also configures logging.

Example usage:

    from pooladmin.bootstrap import bootstrap

    ctx = bootstrap()
    orders = ctx.facade("orders")

    await orders.update(42, {"status": "shipped"})
    await ctx.aclose()
"""

from dataclasses import dataclass, field
from typing import Any

from pooladmin.access.facade import EntityAccessFacade
from pooladmin.audit.recorder import AuditRecorder
from pooladmin.audit.store import AuditLogStore
from pooladmin.config import get_settings
from pooladmin.config.settings import Settings
from pooladmin.db.pool import PostgresPool
from pooladmin.entities.store import EntityStore
from pooladmin.exceptions import PoolAdminError
from pooladmin.identity.actor import ActorResolver, AuthProvider
from pooladmin.identity.models import Principal
from pooladmin.identity.providers import (
    GoTrueAuthProvider,
    RemoteActorDirectory,
    StaticAuthProvider,
)
from pooladmin.identity.session import SessionContext
from pooladmin.observability.logging import bind_session, get_logger, setup_logging
from pooladmin.remote.store import RemoteStore
from pooladmin.remote.stores.inmemory import InMemoryRemoteStore
from pooladmin.remote.stores.postgres import PostgresRemoteStore, init_connection
from pooladmin.remote.stores.postgrest import PostgRESTRemoteStore

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Everything a client session needs, built from one Settings."""

    settings: Settings
    remote: RemoteStore
    entities: EntityStore
    session: SessionContext
    actors: ActorResolver
    audit_logs: AuditLogStore
    recorder: AuditRecorder
    auth: AuthProvider | None = None
    _facades: dict[str, EntityAccessFacade] = field(default_factory=dict, repr=False)

    @property
    def session_id(self) -> str:
        return self.session.session_id

    def facade(self, entity: str, **kwargs: Any) -> EntityAccessFacade:
        """Audited access to one entity collection.

        Facades built without extra arguments are cached per entity.
        """
        if kwargs:
            return EntityAccessFacade(entity, self.entities, self.recorder, **kwargs)
        if entity not in self._facades:
            self._facades[entity] = EntityAccessFacade(
                entity, self.entities, self.recorder
            )
        return self._facades[entity]

    async def aclose(self) -> None:
        """Release HTTP clients and connection pools."""
        if isinstance(self.auth, GoTrueAuthProvider):
            await self.auth.close()
        await self.remote.close()
        logger.info("pooladmin_closed", session_id=self.session_id)


def create_remote_store(settings: Settings) -> RemoteStore:
    """Build the remote store for the configured backend."""
    storage = settings.storage

    if storage.backend == "inmemory":
        return InMemoryRemoteStore()

    if storage.backend == "postgrest":
        if not storage.url or not storage.api_key:
            raise PoolAdminError("storage.url and storage.api_key are required for postgrest")
        return PostgRESTRemoteStore(
            storage.url,
            storage.api_key,
            access_token=storage.access_token,
            schema_name=storage.schema_name,
            timeout=storage.timeout,
        )

    pool = PostgresPool(
        dsn=storage.url,
        min_size=storage.min_pool_size,
        max_size=storage.max_pool_size,
        command_timeout=storage.command_timeout,
        init=init_connection,
    )
    return PostgresRemoteStore(pool, schema_name=storage.schema_name)


def create_auth_provider(settings: Settings) -> AuthProvider:
    """Build the auth provider for the configured backend."""
    identity = settings.identity

    if identity.auth_backend == "gotrue":
        storage = settings.storage
        if not storage.url or not storage.api_key:
            raise PoolAdminError("storage.url and storage.api_key are required for gotrue")
        return GoTrueAuthProvider(
            storage.url,
            storage.api_key,
            storage.access_token,
            timeout=storage.timeout,
        )

    principal = None
    if identity.principal_id is not None:
        principal = Principal(
            id=identity.principal_id,
            email=identity.principal_email,
            display_name=identity.principal_name,
        )
    return StaticAuthProvider(principal)


def bootstrap(settings: Settings | None = None) -> AppContext:
    """Build a fully wired AppContext.

    Args:
        settings: Configuration to use (default: get_settings())

    Returns:
        AppContext for a new client session
    """
    settings = settings or get_settings()
    obs = settings.observability
    setup_logging(level=obs.log_level, format=obs.log_format, redact_pii=obs.redact_pii)

    remote = create_remote_store(settings)
    session = SessionContext()
    bind_session(session.session_id)

    auth = create_auth_provider(settings)
    directory = RemoteActorDirectory(
        remote,
        settings.identity.directory_table,
        email_field=settings.identity.directory_email_field,
        name_field=settings.identity.directory_name_field,
    )
    actors = ActorResolver(auth, directory)

    audit = settings.audit
    audit_logs = AuditLogStore(
        remote,
        audit.table_name,
        default_limit=audit.default_limit,
        record_history_limit=audit.record_history_limit,
        recent_activity_days=audit.recent_activity_days,
    )
    recorder = AuditRecorder(audit_logs, actors, session, user_agent=audit.user_agent)

    logger.info(
        "pooladmin_bootstrapped",
        backend=settings.storage.backend,
        auth_backend=settings.identity.auth_backend,
        entities=len(settings.entities.known),
    )

    return AppContext(
        settings=settings,
        remote=remote,
        entities=EntityStore(remote, settings.entities.known),
        session=session,
        actors=actors,
        audit_logs=audit_logs,
        recorder=recorder,
        auth=auth,
    )
