"""Single HTTP exchange on top of an `aiohttp.ClientSession`.

The helpers here bound every request with a timeout, read the whole body, and
translate `aiohttp`/timeout failures into client exceptions. Status handling is
left to callers.
"""

from __future__ import annotations

import asyncio
import ssl
from dataclasses import dataclass, field
from typing import Any, Mapping

import aiohttp
import async_timeout
from yarl import URL

from .exceptions import IdracTimeoutError, IdracTransportError

# iDRAC6 ships self-signed certificates and only speaks old cipher suites.
_LEGACY_CIPHERS = "DEFAULT:@SECLEVEL=0"


@dataclass(frozen=True)
class RawResponse:
    """Status, body and cookie material of one response."""

    status: int
    body: bytes = b""
    cookies: dict[str, str] = field(default_factory=dict)
    set_cookie_headers: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def build_base_url(host: str) -> str:
    """Build the base URL for the controller.

    Args:
        host: Hostname, IP address or URL.

    Returns:
        Base URL without trailing slash; `https://` is assumed when no scheme
        is given.
    """
    host = (host or "").strip()
    if host.startswith("http://") or host.startswith("https://"):
        return host.rstrip("/")
    return f"https://{host}".rstrip("/")


def build_ssl_context() -> ssl.SSLContext:
    """SSL context tolerating self-signed certificates and legacy TLS."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    try:
        ctx.minimum_version = ssl.TLSVersion.TLSv1
        ctx.set_ciphers(_LEGACY_CIPHERS)
    except (ValueError, ssl.SSLError):
        # Some OpenSSL builds refuse to lower the floor; keep their defaults.
        pass
    return ctx


def create_session() -> aiohttp.ClientSession:
    """Create a client session suited to legacy controllers.

    Cookies are attached explicitly per request, so the session uses a dummy
    jar.
    """
    connector = aiohttp.TCPConnector(ssl=build_ssl_context())
    return aiohttp.ClientSession(
        connector=connector, cookie_jar=aiohttp.DummyCookieJar()
    )


def _set_cookie_values(headers: Any) -> tuple[str, ...]:
    if headers is None:
        return ()
    getall = getattr(headers, "getall", None)
    if callable(getall):
        return tuple(str(v) for v in getall("Set-Cookie", ()))
    value = headers.get("Set-Cookie") if isinstance(headers, Mapping) else None
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


def _cookie_values(cookies: Any) -> dict[str, str]:
    out: dict[str, str] = {}
    if not cookies:
        return out
    for name, morsel in cookies.items():
        value = getattr(morsel, "value", morsel)
        if isinstance(value, str):
            out[str(name)] = value
    return out


async def fetch(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    timeout_seconds: float,
    host: str | None = None,
    operation: str | None = None,
    headers: dict[str, str] | None = None,
    data: bytes | None = None,
) -> RawResponse:
    """Perform one request and read the full response.

    Args:
        session: Client session to use.
        method: HTTP method (`GET` or `POST`).
        url: Already percent-encoded URL.
        timeout_seconds: Bound for the whole exchange.
        host: Controller host for error context.
        operation: Operation name for error context.
        headers: Request headers.
        data: Pre-encoded request body.

    Returns:
        The response status, body and cookies.

    Raises:
        IdracTimeoutError: When the timeout elapses.
        IdracTransportError: On connection/protocol errors.
    """
    try:
        async with async_timeout.timeout(timeout_seconds):
            async with session.request(
                method,
                URL(url, encoded=True),
                headers=headers or {},
                data=data,
            ) as resp:
                body = await resp.read()
                return RawResponse(
                    status=resp.status,
                    body=body or b"",
                    cookies=_cookie_values(resp.cookies),
                    set_cookie_headers=_set_cookie_values(resp.headers),
                )
    except asyncio.TimeoutError as err:
        raise IdracTimeoutError(
            f"Request timed out after {timeout_seconds}s",
            host=host,
            operation=operation,
        ) from err
    except aiohttp.ClientError as err:
        raise IdracTransportError(
            f"Request failed: {err}", host=host, operation=operation
        ) from err
