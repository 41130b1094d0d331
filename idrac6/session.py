"""Lock-guarded owner of the current controller session.

The store is the only place session tokens are written. Reads and writes are
serialized with one `asyncio.Lock` per client so a request never observes a
half-replaced session; the handshake that produces a new session runs under the
same lock.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from .models import Session

SessionFactory = Callable[[], Awaitable[Session]]


class SessionStore:
    """Holds at most one `Session` for a client."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._session: Session | None = None

    async def current(self) -> Session | None:
        """Return the current session, or `None` when unauthenticated."""
        async with self._lock:
            return self._session

    async def ensure(
        self, establish: SessionFactory, *, stale: Session | None = None
    ) -> Session:
        """Return a usable session, establishing one when needed.

        Args:
            establish: Coroutine factory that performs a handshake.
            stale: Session the caller saw rejected. When the stored session is
                still this one (or absent) a new handshake runs; when another
                caller already replaced it, the replacement is returned.

        Returns:
            The stored session.

        Raises:
            Exception: Whatever `establish` raises. The store is left cleared.
        """
        async with self._lock:
            if self._session is not None and (
                stale is None or self._session is not stale
            ):
                return self._session

            self._session = None
            session = await establish()
            self._session = session
            return session

    async def replace(self, establish: SessionFactory) -> Session:
        """Unconditionally run `establish` and store its session."""
        async with self._lock:
            self._session = None
            session = await establish()
            self._session = session
            return session

    async def invalidate(self, stale: Session) -> None:
        """Clear the store if it still holds `stale`."""
        async with self._lock:
            if self._session is stale:
                self._session = None

    async def clear(self) -> None:
        async with self._lock:
            self._session = None

    async def drain(self, finish: Callable[[Session], Awaitable[None]]) -> None:
        """Run `finish` with the stored session (if any) and clear the store.

        The session is cleared even when `finish` raises.
        """
        async with self._lock:
            session, self._session = self._session, None
            if session is not None:
                await finish(session)
