"""Request execution with session attachment and one-shot reauthentication.

Queries are `GET /data?get=<k1,k2,...>`; commands are `GET /data?set=<param>`
with the whole parameter percent-encoded as one unit. Every request carries the
session cookie, plus the `ST2` header when the session uses secondary auth.

A 401 triggers exactly one handshake and one replay of the original request.
A second 401, or a failed handshake, is terminal.
"""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import quote_plus

import aiohttp

from .auth import AuthHandshake
from .const import (
    DATA_PATH,
    LOGGER_NAME,
    LOGOUT_PATH,
    SECONDARY_TOKEN_HEADER,
    SESSION_COOKIE,
)
from .exceptions import (
    AuthenticationExpired,
    IdracError,
    IdracTimeoutError,
    IdracTransportError,
    UnexpectedStatus,
)
from .models import Session
from .session import SessionStore
from .transport import RawResponse, fetch

_LOGGER = logging.getLogger(LOGGER_NAME)

_UNAUTHORIZED = 401


def session_headers(session: Session) -> dict[str, str]:
    """Build the credential headers for a request."""
    headers = {"Accept": "*/*", "Cookie": f"{SESSION_COOKIE}={session.session_token}"}
    if session.uses_secondary_auth and session.secondary_token2:
        headers[SECONDARY_TOKEN_HEADER] = session.secondary_token2
    return headers


class RequestExecutor:
    """Executes protocol operations against one controller."""

    def __init__(
        self,
        *,
        http: Callable[[], aiohttp.ClientSession],
        base_url: str,
        host: str,
        store: SessionStore,
        handshake: AuthHandshake,
        timeout_seconds: float,
    ) -> None:
        self._http = http
        self._base_url = base_url
        self._host = host
        self._store = store
        self._handshake = handshake
        self._timeout_seconds = timeout_seconds

    def query_url(self, *keys: str) -> str:
        return f"{self._base_url}{DATA_PATH}?get={','.join(keys)}"

    def command_url(self, param: str) -> str:
        return f"{self._base_url}{DATA_PATH}?set={quote_plus(param)}"

    async def query(self, *keys: str, operation: str | None = None) -> bytes:
        """Fetch one or more data keys.

        Args:
            *keys: Data key names such as `pwState` or `temperatures`.
            operation: Operation name for error context.

        Returns:
            Raw response body.
        """
        if not keys:
            raise ValueError("At least one data key is required")
        return await self._execute(self.query_url(*keys), operation or "query")

    async def command(self, param: str, *, operation: str | None = None) -> bytes:
        """Send a `key:value` set command.

        Returns:
            Raw response body.
        """
        return await self._execute(self.command_url(param), operation or "command")

    async def _send(self, url: str, session: Session, operation: str) -> RawResponse:
        return await fetch(
            self._http(),
            "GET",
            url,
            timeout_seconds=self._timeout_seconds,
            host=self._host,
            operation=operation,
            headers=session_headers(session),
        )

    async def _execute(self, url: str, operation: str) -> bytes:
        session = await self._store.ensure(self._handshake.authenticate)
        resp = await self._send(url, session, operation)

        if resp.status == _UNAUTHORIZED:
            _LOGGER.debug(
                "Session rejected by %s during %s; reauthenticating",
                self._host,
                operation,
            )
            try:
                session = await self._store.ensure(
                    self._handshake.authenticate, stale=session
                )
            except (IdracTimeoutError, IdracTransportError):
                raise
            except IdracError as err:
                raise AuthenticationExpired(
                    f"Reauthentication failed: {err}",
                    host=self._host,
                    operation=operation,
                ) from err

            resp = await self._send(url, session, operation)
            if resp.status == _UNAUTHORIZED:
                await self._store.invalidate(session)
                raise AuthenticationExpired(
                    "Session rejected again after reauthentication",
                    host=self._host,
                    operation=operation,
                )

        if not resp.ok:
            raise UnexpectedStatus(resp.status, host=self._host, operation=operation)
        return resp.body

    async def logout(self) -> None:
        """End the controller session and clear local credentials."""

        async def _finish(session: Session) -> None:
            resp = await fetch(
                self._http(),
                "GET",
                f"{self._base_url}{LOGOUT_PATH}",
                timeout_seconds=self._timeout_seconds,
                host=self._host,
                operation="logout",
                headers=session_headers(session),
            )
            if not resp.ok:
                _LOGGER.debug("Logout from %s returned HTTP %s", self._host, resp.status)

        await self._store.drain(_finish)
