"""Login handshake against the controller.

The handshake turns credentials into a `Session`:

1. (two-step firmware) `GET /start.html` to obtain a session cookie.
2. `POST /data/login` with `user` and `password` form fields, in that order,
   carrying the cookie from step 1.

The login result is XML: `authResult` 0 means success, anything else is a
rejection optionally explained by `errorMsg`. Newer firmware also returns a
`forwardUrl` whose query string carries the `ST1`/`ST2` secondary tokens.

No retry happens here; the request executor owns the retry policy.
"""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urlencode

import aiohttp

from .config import HandshakeMode
from .const import (
    BOOTSTRAP_PATH,
    FORM_CONTENT_TYPE,
    LOGGER_NAME,
    LOGIN_PATH,
    SESSION_COOKIE,
)
from .exceptions import (
    AuthenticationFailed,
    IdracParseError,
    SessionBootstrapError,
    UnexpectedStatus,
)
from .models import Session
from .payloads import field_text, parse_root
from .transport import RawResponse, fetch
from .util import to_int

_LOGGER = logging.getLogger(LOGGER_NAME)

_OPERATION = "login"

# -----------------------------------------------------------------------------
# Response helpers
# -----------------------------------------------------------------------------


def session_id_from_response(resp: RawResponse) -> str | None:
    """Extract the session identifier from a response.

    Parsed cookies are checked first. Controllers sometimes emit `Set-Cookie`
    values that cookie parsers drop, so the raw headers are scanned as well.

    Args:
        resp: Response to inspect.

    Returns:
        Session identifier, or `None` when the response carries none.
    """
    value = (resp.cookies.get(SESSION_COOKIE) or "").strip()
    if value:
        return value

    marker = f"{SESSION_COOKIE}="
    for header in resp.set_cookie_headers:
        idx = header.find(marker)
        if idx < 0:
            continue
        raw = header[idx + len(marker) :].split(";", 1)[0].strip().strip('"')
        if raw:
            return raw
    return None


def secondary_tokens(forward_url: str) -> tuple[str | None, str | None]:
    """Parse `ST1`/`ST2` from a forward URL.

    Firmware formats the query as `index.html?ST1=abc,ST2=def`; `&` separators
    are accepted as well.

    Args:
        forward_url: Value of the login response `forwardUrl` field.

    Returns:
        `(st1, st2)`, either of which may be `None`.
    """
    _, sep, query = (forward_url or "").partition("?")
    if not sep:
        return None, None

    st1: str | None = None
    st2: str | None = None
    for param in query.replace("&", ",").split(","):
        key, eq, value = param.partition("=")
        if not eq:
            continue
        key = key.strip()
        value = value.strip()
        if key == "ST1" and value:
            st1 = value
        elif key == "ST2" and value:
            st2 = value
    return st1, st2


def login_form(username: str, password: str) -> bytes:
    """Encode login fields with `user` strictly before `password`."""
    return urlencode([("user", username), ("password", password)]).encode()


# -----------------------------------------------------------------------------
# Handshake
# -----------------------------------------------------------------------------


class AuthHandshake:
    """Performs the login sequence for one controller."""

    def __init__(
        self,
        *,
        http: Callable[[], aiohttp.ClientSession],
        base_url: str,
        host: str,
        username: str,
        password: str,
        timeout_seconds: float,
        mode: HandshakeMode = HandshakeMode.AUTO,
    ) -> None:
        self._http = http
        self._base_url = base_url
        self._host = host
        self._username = username
        self._password = password
        self._timeout_seconds = timeout_seconds
        self.mode = mode
        self._detected_mode: HandshakeMode | None = None

    @property
    def effective_mode(self) -> HandshakeMode:
        """Variant that will be used for the next handshake."""
        if self.mode is HandshakeMode.AUTO and self._detected_mode is not None:
            return self._detected_mode
        return self.mode

    async def __call__(self) -> Session:
        return await self.authenticate()

    async def authenticate(self) -> Session:
        """Run the handshake and return a populated session.

        Raises:
            SessionBootstrapError: No session identifier was obtained.
            AuthenticationFailed: The controller rejected the credentials.
            UnexpectedStatus: The controller answered with an unexpected status.
            IdracTimeoutError: A step exceeded the timeout.
            IdracTransportError: A step failed at the network level.
        """
        mode = self.effective_mode

        if mode is HandshakeMode.SINGLE_STEP:
            return await self._login(bootstrap_sid=None)

        if mode is HandshakeMode.TWO_STEP:
            sid = await self._bootstrap()
            return await self._login(bootstrap_sid=sid)

        try:
            sid = await self._bootstrap()
        except (SessionBootstrapError, UnexpectedStatus) as err:
            _LOGGER.debug(
                "Session bootstrap unavailable on %s (%s); using single-step login",
                self._host,
                err,
            )
            session = await self._login(bootstrap_sid=None)
            self._detected_mode = HandshakeMode.SINGLE_STEP
            return session

        session = await self._login(bootstrap_sid=sid)
        self._detected_mode = HandshakeMode.TWO_STEP
        return session

    async def _bootstrap(self) -> str:
        resp = await fetch(
            self._http(),
            "GET",
            f"{self._base_url}{BOOTSTRAP_PATH}",
            timeout_seconds=self._timeout_seconds,
            host=self._host,
            operation=_OPERATION,
        )
        if not resp.ok:
            raise UnexpectedStatus(resp.status, host=self._host, operation=_OPERATION)

        sid = session_id_from_response(resp)
        if not sid:
            raise SessionBootstrapError(
                "No session cookie in bootstrap response",
                host=self._host,
                operation=_OPERATION,
            )
        return sid

    async def _login(self, *, bootstrap_sid: str | None) -> Session:
        headers = {"Content-Type": FORM_CONTENT_TYPE, "Accept": "*/*"}
        if bootstrap_sid:
            headers["Cookie"] = f"{SESSION_COOKIE}={bootstrap_sid}"

        resp = await fetch(
            self._http(),
            "POST",
            f"{self._base_url}{LOGIN_PATH}",
            timeout_seconds=self._timeout_seconds,
            host=self._host,
            operation=_OPERATION,
            headers=headers,
            data=login_form(self._username, self._password),
        )
        if resp.status in (401, 403):
            raise AuthenticationFailed(
                f"Login rejected (HTTP {resp.status})",
                host=self._host,
                operation=_OPERATION,
            )
        if not resp.ok:
            raise UnexpectedStatus(resp.status, host=self._host, operation=_OPERATION)

        try:
            root = parse_root(resp.body)
        except IdracParseError as err:
            raise IdracParseError(
                "Login response was not XML", host=self._host, operation=_OPERATION
            ) from err

        auth_result = field_text(root, "authResult")
        if to_int(auth_result) != 0:
            raise AuthenticationFailed(
                f"Login failed (authResult={auth_result or 'missing'})",
                auth_result=auth_result or None,
                error_message=field_text(root, "errorMsg") or None,
                host=self._host,
                operation=_OPERATION,
            )

        sid = session_id_from_response(resp) or bootstrap_sid
        if not sid:
            raise SessionBootstrapError(
                "No session cookie in login response",
                host=self._host,
                operation=_OPERATION,
            )

        st1, st2 = secondary_tokens(field_text(root, "forwardUrl"))
        session = Session(session_token=sid, secondary_token1=st1, secondary_token2=st2)
        _LOGGER.debug(
            "Authenticated to %s (secondary auth: %s)",
            self._host,
            session.uses_secondary_auth,
        )
        return session
