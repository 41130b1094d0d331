"""Standalone async API client.

This client owns connection details and the session lifecycle, and exposes the
controller's typed operations: power state and control, sensor telemetry,
system identity, and the System Event Log.

Expired sessions are recovered transparently by the request executor; callers
only ever see a typed result or a single terminal error.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import aiohttp

from .auth import AuthHandshake
from .config import HandshakeMode, HostConfig
from .const import (
    DEFAULT_TIMEOUT_SECONDS,
    KEY_CLEAR_EVENT_LOG,
    KEY_EVENT_LOG,
    KEY_FANS,
    KEY_POWER_STATE,
    KEY_TEMPERATURES,
    KEY_VOLTAGES,
    LOGGER_NAME,
    SYSTEM_IDENTITY_KEYS,
)
from .events import decode_event_log
from .exceptions import IdracError, IdracParseError
from .executor import RequestExecutor
from .models import (
    EventLog,
    PowerAction,
    PowerState,
    SensorGroups,
    SensorReading,
    SystemIdentity,
)
from .payloads import decode_power_state, decode_system_identity
from .sensors import decode_sensor_group
from .session import SessionStore
from .transport import build_base_url, create_session

_LOGGER = logging.getLogger(LOGGER_NAME)

_T = TypeVar("_T")


class IdracClient:
    """Async client for the controller's XML data endpoints."""

    def __init__(
        self,
        *,
        host: str,
        username: str,
        password: str,
        timeout_seconds: int | None = None,
        handshake_mode: HandshakeMode | str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.host = str(host or "")
        self.username = str(username or "")
        self.timeout_seconds = int(timeout_seconds or DEFAULT_TIMEOUT_SECONDS)
        self.base_url = build_base_url(self.host)

        self._session = session
        self._owns_session = session is None

        self._store = SessionStore()
        self._handshake = AuthHandshake(
            http=lambda: self.session,
            base_url=self.base_url,
            host=self.host,
            username=self.username,
            password=str(password or ""),
            timeout_seconds=self.timeout_seconds,
            mode=HandshakeMode.parse(handshake_mode),
        )
        self._executor = RequestExecutor(
            http=lambda: self.session,
            base_url=self.base_url,
            host=self.host,
            store=self._store,
            handshake=self._handshake,
            timeout_seconds=self.timeout_seconds,
        )

    @classmethod
    def from_config(
        cls, config: HostConfig, *, session: aiohttp.ClientSession | None = None
    ) -> IdracClient:
        """Build a client from a `HostConfig`."""
        return cls(
            host=config.host,
            username=config.username,
            password=config.password,
            timeout_seconds=config.timeout_seconds,
            handshake_mode=config.handshake_mode,
            session=session,
        )

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = create_session()
        return self._session

    async def async_close(self) -> None:
        """Drop the local session and close any internally-owned aiohttp session."""
        await self._store.clear()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _decode(self, operation: str, decode: Callable[..., _T], *args: Any) -> _T:
        """Run a decoder, adding host and operation context to parse errors."""
        try:
            return decode(*args)
        except IdracParseError as err:
            if err.host is not None:
                raise
            raise IdracParseError(
                str(err), host=self.host, operation=operation
            ) from err

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def async_login(self) -> None:
        """Run a fresh handshake and store the resulting session.

        Raises:
            SessionBootstrapError: No session identifier could be obtained.
            AuthenticationFailed: Credentials were rejected.
        """
        await self._store.replace(self._handshake.authenticate)

    async def async_logout(self) -> None:
        """End the controller session. Local credentials are always cleared."""
        await self._executor.logout()

    async def async_is_authenticated(self) -> bool:
        return await self._store.current() is not None

    # -------------------------------------------------------------------------
    # Power
    # -------------------------------------------------------------------------

    async def async_get_power_state(self) -> PowerState:
        body = await self._executor.query(
            KEY_POWER_STATE, operation="get_power_state"
        )
        return self._decode("get_power_state", decode_power_state, body)

    async def async_set_power(self, action: str) -> None:
        """Execute a power action by name.

        Args:
            action: One of `on`, `off`, `restart`, `reset`, `nmi`, `shutdown`.

        Raises:
            UnknownAction: If `action` is not supported. No request is sent.
        """
        power_action = PowerAction.from_name(action)
        await self._executor.command(
            f"{KEY_POWER_STATE}:{power_action.value}", operation="set_power"
        )

    # -------------------------------------------------------------------------
    # Sensors
    # -------------------------------------------------------------------------

    async def _async_sensor_group(self, field: str) -> list[SensorReading]:
        operation = f"get_{field}"
        body = await self._executor.query(field, operation=operation)
        return self._decode(operation, decode_sensor_group, body, field)

    async def async_get_temperatures(self) -> list[SensorReading]:
        return await self._async_sensor_group(KEY_TEMPERATURES)

    async def async_get_sensors(self) -> SensorGroups:
        """Fetch temperature, fan and voltage readings.

        Each group is its own query; a group that fails to load is returned
        empty instead of failing the whole call.
        """
        groups: dict[str, tuple[SensorReading, ...]] = {}
        for field in (KEY_TEMPERATURES, KEY_FANS, KEY_VOLTAGES):
            try:
                groups[field] = tuple(await self._async_sensor_group(field))
            except IdracError as err:
                _LOGGER.warning(
                    "Could not read %s sensors from %s: %s", field, self.host, err
                )
                groups[field] = ()
        return SensorGroups(
            temperatures=groups[KEY_TEMPERATURES],
            fans=groups[KEY_FANS],
            voltages=groups[KEY_VOLTAGES],
        )

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    async def async_get_system_identity(self) -> SystemIdentity:
        body = await self._executor.query(
            *SYSTEM_IDENTITY_KEYS, operation="get_system_identity"
        )
        return self._decode("get_system_identity", decode_system_identity, body)

    # -------------------------------------------------------------------------
    # Event log
    # -------------------------------------------------------------------------

    async def async_get_event_log(self) -> EventLog:
        body = await self._executor.query(KEY_EVENT_LOG, operation="get_event_log")
        return self._decode("get_event_log", decode_event_log, body)

    async def async_clear_event_log(self) -> None:
        await self._executor.command(
            f"{KEY_CLEAR_EVENT_LOG}:1", operation="clear_event_log"
        )
