"""Registry of live clients, one per managed host.

The application layer owns a `ClientRegistry` and asks it for the client of a
host id. Clients are created on first use and live until they are removed or
the registry is closed; nothing is evicted implicitly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable

from .client import IdracClient
from .config import HostConfig
from .const import LOGGER_NAME

_LOGGER = logging.getLogger(LOGGER_NAME)

ClientFactory = Callable[[HostConfig], IdracClient]


class ClientRegistry:
    """Create-on-first-use cache of `IdracClient` instances keyed by host id."""

    def __init__(
        self,
        configs: Iterable[HostConfig] = (),
        *,
        client_factory: ClientFactory = IdracClient.from_config,
    ) -> None:
        self._configs: dict[str, HostConfig] = {c.id: c for c in configs}
        self._clients: dict[str, IdracClient] = {}
        self._factory = client_factory
        self._lock = asyncio.Lock()

    def __contains__(self, host_id: object) -> bool:
        return host_id in self._configs

    def add(self, config: HostConfig) -> None:
        """Register (or re-register) a host.

        A live client for the same id keeps its old settings until it is
        removed with `async_remove`.
        """
        self._configs[config.id] = config

    def config(self, host_id: str) -> HostConfig:
        """Return the config of a host.

        Raises:
            KeyError: When the host is not registered.
        """
        try:
            return self._configs[host_id]
        except KeyError:
            raise KeyError(f"Unknown host: {host_id}") from None

    def hosts(self) -> list[dict[str, Any]]:
        """List registered hosts without credentials."""
        return [c.public_dict() for c in self._configs.values()]

    async def async_get(self, host_id: str) -> IdracClient:
        """Return the client for `host_id`, creating it on first use.

        Raises:
            KeyError: When the host is not registered.
        """
        async with self._lock:
            client = self._clients.get(host_id)
            if client is None:
                client = self._factory(self.config(host_id))
                self._clients[host_id] = client
                _LOGGER.debug("Created client for host %s", host_id)
            return client

    async def async_remove(self, host_id: str) -> None:
        """Drop a host's live client (if any) and close it.

        The host config stays registered; the next `async_get` builds a new
        client from it.
        """
        async with self._lock:
            client = self._clients.pop(host_id, None)
        if client is not None:
            await client.async_close()

    async def async_close(self) -> None:
        """Close every live client."""
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            await client.async_close()
