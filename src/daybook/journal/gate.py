"""SessionGate — every data operation passes through here first."""

from __future__ import annotations

from loguru import logger

from daybook.core.exceptions import RemoteError, Unauthenticated

from .models import Identity
from .ports import SessionProvider


class SessionGate:
    """Resolves the current identity from a :class:`SessionProvider`.

    ``require()`` is the guard: it returns an identity or raises
    :class:`Unauthenticated`, and the caller must not touch the backend or
    the mirror in the latter case.
    """

    def __init__(self, sessions: SessionProvider):
        self._sessions = sessions

    async def resolve(self) -> Identity | None:
        """Return the current identity, or None. Provider failures raise RemoteError."""
        try:
            return await self._sessions.current_identity()
        except RemoteError:
            raise
        except Exception as e:
            raise RemoteError(f"Session lookup failed: {e}") from e

    async def require(self) -> Identity:
        identity = await self.resolve()
        if identity is None:
            logger.debug("No active session; refusing operation")
            raise Unauthenticated("No active session")
        return identity
