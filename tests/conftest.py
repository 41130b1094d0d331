"""Shared fakes for the HTTP layer.

`FakeHttp` stands in for `aiohttp.ClientSession`: responses are queued per
method and every request is recorded for assertions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, cast

import pytest
from yarl import URL

from idrac6 import IdracClient
from idrac6.const import SESSION_COOKIE


class _CookieMorsel:
    def __init__(self, value: str):
        self.value = value


@dataclass
class _Resp:
    status: int
    body: str = ""
    cookies: dict[str, str] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)

    async def read(self) -> bytes:
        return self.body.encode()

    async def __aenter__(self):
        # Simulate aiohttp response cookies mapping.
        self.cookies = {k: _CookieMorsel(v) for k, v in self.cookies.items()}
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@dataclass
class Call:
    method: str
    url: str
    headers: dict[str, str]
    data: bytes | None

    @property
    def path(self) -> str:
        return URL(self.url, encoded=True).path

    @property
    def raw_query(self) -> str:
        return URL(self.url, encoded=True).raw_query_string


def login_xml(auth_result: int | str, *, forward_url: str = "", error: str = "") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<root>"
        f"<authResult>{auth_result}</authResult>"
        f"<forwardUrl>{forward_url}</forwardUrl>"
        f"<errorMsg>{error}</errorMsg>"
        "</root>"
    )


class FakeHttp:
    login_xml = staticmethod(login_xml)

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._queues: dict[str, list[_Resp | BaseException]] = {"GET": [], "POST": []}

    def queue(
        self,
        method: str,
        status: int = 200,
        body: str = "",
        *,
        cookies: dict[str, str] | None = None,
        headers: dict[str, Any] | None = None,
    ) -> None:
        self._queues[method].append(
            _Resp(status, body, cookies=dict(cookies or {}), headers=dict(headers or {}))
        )

    def queue_get(self, status: int = 200, body: str = "", **kwargs: Any) -> None:
        self.queue("GET", status, body, **kwargs)

    def queue_post(self, status: int = 200, body: str = "", **kwargs: Any) -> None:
        self.queue("POST", status, body, **kwargs)

    def queue_error(self, method: str, err: BaseException) -> None:
        self._queues[method].append(err)

    def queue_login(
        self,
        *,
        sid: str = "sess-1",
        forward_url: str = "index.html",
        login_sid: str | None = None,
    ) -> None:
        """Queue a successful two-step handshake."""
        self.queue_get(200, "<html>start</html>", cookies={SESSION_COOKIE: sid})
        self.queue_post(
            200,
            login_xml(0, forward_url=forward_url),
            cookies={SESSION_COOKIE: login_sid} if login_sid else None,
        )

    def request(self, method: str, url: Any, *, headers=None, data=None):
        self.calls.append(Call(method, str(url), dict(headers or {}), data))
        queue = self._queues[method]
        if not queue:
            raise AssertionError(f"Unexpected {method} {url}")
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def pending(self) -> int:
        return sum(len(q) for q in self._queues.values())

    def calls_to(self, path: str) -> list[Call]:
        return [c for c in self.calls if c.path == path]


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def client(http: FakeHttp) -> IdracClient:
    return IdracClient(
        host="idrac.local",
        username="root",
        password="calvin",
        session=cast(Any, http),
    )
