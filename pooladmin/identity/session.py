"""Client session identity."""

import secrets
import string
from datetime import UTC, datetime

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_session_id(now: datetime | None = None) -> str:
    """Return ``session_<epoch ms>_<9 random base36 chars>``."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"session_{int(now.timestamp() * 1000)}_{suffix}"


class SessionContext:
    """Holds the one session id of a running client instance.

    The id is generated at construction and never changes; build a new
    SessionContext to start a new session.
    """

    def __init__(self) -> None:
        self._started_at = datetime.now(UTC)
        self._session_id = generate_session_id(self._started_at)

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def started_at(self) -> datetime:
        return self._started_at

    def __repr__(self) -> str:
        return f"SessionContext(session_id={self._session_id!r})"
