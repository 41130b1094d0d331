"""Typed records produced by the client.

All records are immutable and expose `as_dict()` so an HTTP front-end can
serialize them without knowing their internals.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .exceptions import UnknownAction

# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    """Authenticated session state for one controller.

    Attributes:
        session_token: Value of the session cookie.
        secondary_token1: `ST1` token issued by newer firmware, if any.
        secondary_token2: `ST2` token issued by newer firmware, if any.
    """

    session_token: str
    secondary_token1: str | None = None
    secondary_token2: str | None = None

    def __post_init__(self) -> None:
        if not (self.session_token or "").strip():
            raise ValueError("Session token must not be empty")

    @property
    def uses_secondary_auth(self) -> bool:
        return bool(self.secondary_token1 or self.secondary_token2)

    def __repr__(self) -> str:
        return f"Session(uses_secondary_auth={self.uses_secondary_auth})"


# -----------------------------------------------------------------------------
# Power
# -----------------------------------------------------------------------------


class PowerState(Enum):
    """Server power state as reported by `pwState`."""

    OFF = "off"
    ON = "on"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, raw: str | None) -> PowerState:
        t = (raw or "").strip()
        if t == "0":
            return cls.OFF
        if t == "1":
            return cls.ON
        return cls.UNKNOWN


class PowerAction(Enum):
    """Power control actions and their controller codes."""

    OFF = 0
    ON = 1
    RESTART = 2
    RESET = 3
    NMI = 4
    SHUTDOWN = 5

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(member.name.lower() for member in cls)

    @classmethod
    def from_name(cls, name: str) -> PowerAction:
        """Resolve an action by its lowercase name.

        Args:
            name: One of `on`, `off`, `restart`, `reset`, `nmi`, `shutdown`.

        Returns:
            The matching action.

        Raises:
            UnknownAction: If the name is not in the supported set.
        """
        key = name if isinstance(name, str) else ""
        for member in cls:
            if member.name.lower() == key:
                return member
        raise UnknownAction(str(name), valid=cls.names())


# -----------------------------------------------------------------------------
# Telemetry
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SensorReading:
    """One sensor value with optional thresholds."""

    name: str
    value: float = 0.0
    unit: str = ""
    status: str = "ok"
    warning_threshold: float | None = None
    critical_threshold: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SensorGroups:
    """Sensor readings grouped by type."""

    temperatures: tuple[SensorReading, ...] = ()
    fans: tuple[SensorReading, ...] = ()
    voltages: tuple[SensorReading, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "temperatures": [r.as_dict() for r in self.temperatures],
            "fans": [r.as_dict() for r in self.fans],
            "voltages": [r.as_dict() for r in self.voltages],
        }


# -----------------------------------------------------------------------------
# Identity
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SystemIdentity:
    """System identification and firmware versions."""

    hostname: str = ""
    model: str = ""
    service_tag: str = ""
    bios_version: str = ""
    firmware_version: str = ""
    management_firmware_version: str = ""
    os_name: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# -----------------------------------------------------------------------------
# Event log
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class EventLogEntry:
    """One System Event Log entry."""

    id: str
    timestamp: str = ""
    severity: str = ""
    description: str = ""
    entity: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EventLog:
    """Event log entries in controller order."""

    entries: tuple[EventLogEntry, ...] = field(default_factory=tuple)

    @property
    def total_count(self) -> int:
        return len(self.entries)

    def as_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.as_dict() for e in self.entries],
            "total_count": self.total_count,
        }


# -----------------------------------------------------------------------------
# Virtual media
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class VirtualMediaStatus:
    """Remote image connection state."""

    connected: bool = False
    url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
