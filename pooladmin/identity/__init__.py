"""Actor and session identity for audit attribution."""

from pooladmin.identity.actor import ActorDirectory, ActorResolver, AuthProvider
from pooladmin.identity.models import Actor, DirectoryEntry, Principal
from pooladmin.identity.providers import (
    GoTrueAuthProvider,
    RemoteActorDirectory,
    StaticAuthProvider,
)
from pooladmin.identity.session import SessionContext, generate_session_id

__all__ = [
    "Actor",
    "ActorDirectory",
    "ActorResolver",
    "AuthProvider",
    "DirectoryEntry",
    "GoTrueAuthProvider",
    "Principal",
    "RemoteActorDirectory",
    "SessionContext",
    "StaticAuthProvider",
    "generate_session_id",
]
