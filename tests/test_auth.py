"""Tests for the login handshake."""

from __future__ import annotations

from typing import Any, cast
from urllib.parse import parse_qsl

import pytest

from idrac6.auth import (
    AuthHandshake,
    login_form,
    secondary_tokens,
    session_id_from_response,
)
from idrac6.config import HandshakeMode
from idrac6.const import SESSION_COOKIE
from idrac6.exceptions import (
    AuthenticationFailed,
    IdracParseError,
    SessionBootstrapError,
    UnexpectedStatus,
)
from idrac6.transport import RawResponse


def _handshake(http, mode: HandshakeMode = HandshakeMode.AUTO) -> AuthHandshake:
    return AuthHandshake(
        http=lambda: cast(Any, http),
        base_url="https://idrac.local",
        host="idrac.local",
        username="root",
        password="calvin",
        timeout_seconds=5,
        mode=mode,
    )


def test_login_form_keeps_user_before_password() -> None:
    body = login_form("root", "p&ss word")
    assert body.startswith(b"user=root&password=")
    assert parse_qsl(body.decode()) == [("user", "root"), ("password", "p&ss word")]


def test_session_id_prefers_parsed_cookie() -> None:
    resp = RawResponse(
        status=200,
        cookies={SESSION_COOKIE: "parsed"},
        set_cookie_headers=(f"{SESSION_COOKIE}=raw; path=/",),
    )
    assert session_id_from_response(resp) == "parsed"


def test_session_id_falls_back_to_raw_set_cookie_header() -> None:
    resp = RawResponse(
        status=200,
        set_cookie_headers=(
            "other=1; path=/",
            f"{SESSION_COOKIE}=abc123; path=/; secure; HttpOnly; bogus=",
        ),
    )
    assert session_id_from_response(resp) == "abc123"


def test_session_id_missing() -> None:
    assert session_id_from_response(RawResponse(status=200)) is None


@pytest.mark.parametrize(
    ("forward_url", "expected"),
    [
        ("index.html?ST1=abc,ST2=def", ("abc", "def")),
        ("index.html?ST1=abc&ST2=def", ("abc", "def")),
        ("index.html?ST2=only", (None, "only")),
        ("index.html", (None, None)),
        ("", (None, None)),
    ],
)
def test_secondary_tokens(forward_url: str, expected) -> None:
    assert secondary_tokens(forward_url) == expected


async def test_two_step_handshake_uses_bootstrap_cookie(http) -> None:
    http.queue_login(sid="boot-sid")
    session = await _handshake(http, HandshakeMode.TWO_STEP).authenticate()

    assert session.session_token == "boot-sid"
    assert session.uses_secondary_auth is False

    bootstrap, login = http.calls
    assert (bootstrap.method, bootstrap.path) == ("GET", "/start.html")
    assert (login.method, login.path) == ("POST", "/data/login")
    assert login.headers["Cookie"] == f"{SESSION_COOKIE}=boot-sid"
    assert login.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert login.data == b"user=root&password=calvin"


async def test_login_response_cookie_replaces_bootstrap_cookie(http) -> None:
    http.queue_login(sid="boot-sid", login_sid="login-sid")
    session = await _handshake(http).authenticate()
    assert session.session_token == "login-sid"


async def test_secondary_tokens_enable_secondary_auth(http) -> None:
    http.queue_login(forward_url="index.html?ST1=token1abc,ST2=token2def")
    session = await _handshake(http).authenticate()

    assert session.uses_secondary_auth is True
    assert session.secondary_token1 == "token1abc"
    assert session.secondary_token2 == "token2def"


async def test_two_step_without_bootstrap_cookie_raises(http) -> None:
    http.queue_get(200, "<html/>")
    with pytest.raises(SessionBootstrapError):
        await _handshake(http, HandshakeMode.TWO_STEP).authenticate()
    # Login is never attempted.
    assert http.calls_to("/data/login") == []


async def test_bootstrap_cookie_read_from_raw_header(http) -> None:
    http.queue_get(
        200, "<html/>", headers={"Set-Cookie": f"{SESSION_COOKIE}=raw-sid; path=/"}
    )
    http.queue_post(200, http.login_xml(0))
    session = await _handshake(http, HandshakeMode.TWO_STEP).authenticate()
    assert session.session_token == "raw-sid"


async def test_rejected_credentials_carry_error_message(http) -> None:
    http.queue_get(200, cookies={SESSION_COOKIE: "s"})
    http.queue_post(200, http.login_xml(1, error="Invalid username or password"))

    with pytest.raises(AuthenticationFailed) as exc_info:
        await _handshake(http).authenticate()

    assert exc_info.value.auth_result == "1"
    assert exc_info.value.error_message == "Invalid username or password"
    assert "Invalid username or password" in str(exc_info.value)
    assert "host=idrac.local" in str(exc_info.value)


async def test_missing_auth_result_is_a_failure(http) -> None:
    http.queue_get(200, cookies={SESSION_COOKIE: "s"})
    http.queue_post(200, "<root><forwardUrl>index.html</forwardUrl></root>")

    with pytest.raises(AuthenticationFailed) as exc_info:
        await _handshake(http).authenticate()
    assert exc_info.value.auth_result is None


async def test_login_http_401_is_authentication_failure(http) -> None:
    http.queue_get(200, cookies={SESSION_COOKIE: "s"})
    http.queue_post(401, "")
    with pytest.raises(AuthenticationFailed):
        await _handshake(http).authenticate()


async def test_login_server_error_is_unexpected_status(http) -> None:
    http.queue_get(200, cookies={SESSION_COOKIE: "s"})
    http.queue_post(500, "")
    with pytest.raises(UnexpectedStatus) as exc_info:
        await _handshake(http).authenticate()
    assert exc_info.value.status == 500


async def test_login_response_not_xml(http) -> None:
    http.queue_get(200, cookies={SESSION_COOKIE: "s"})
    http.queue_post(200, "<html><body>oops")
    with pytest.raises(IdracParseError):
        await _handshake(http).authenticate()


async def test_single_step_takes_cookie_from_login_response(http) -> None:
    http.queue_post(200, http.login_xml(0), cookies={SESSION_COOKIE: "direct"})
    session = await _handshake(http, HandshakeMode.SINGLE_STEP).authenticate()

    assert session.session_token == "direct"
    assert [c.path for c in http.calls] == ["/data/login"]
    assert "Cookie" not in http.calls[0].headers


async def test_single_step_without_cookie_raises(http) -> None:
    http.queue_post(200, http.login_xml(0))
    with pytest.raises(SessionBootstrapError):
        await _handshake(http, HandshakeMode.SINGLE_STEP).authenticate()


async def test_auto_falls_back_to_single_step_and_remembers(http) -> None:
    handshake = _handshake(http)

    http.queue_get(404, "")
    http.queue_post(200, http.login_xml(0), cookies={SESSION_COOKIE: "direct"})
    session = await handshake.authenticate()

    assert session.session_token == "direct"
    assert handshake.effective_mode is HandshakeMode.SINGLE_STEP

    http.queue_post(200, http.login_xml(0), cookies={SESSION_COOKIE: "again"})
    session = await handshake.authenticate()

    assert session.session_token == "again"
    assert [c.path for c in http.calls] == [
        "/start.html",
        "/data/login",
        "/data/login",
    ]


async def test_auto_remembers_two_step(http) -> None:
    handshake = _handshake(http)
    http.queue_login()
    await handshake.authenticate()
    assert handshake.effective_mode is HandshakeMode.TWO_STEP
