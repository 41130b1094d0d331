"""Async client for the iDRAC6 XML-over-HTTPS management protocol.

The package provides:
    - `IdracClient`, the typed facade (power, sensors, identity, event log)
    - The login handshake and session store beneath it
    - Format-tolerant decoders for the controller's XML payloads
    - `ClientRegistry` for applications managing several hosts
    - `VirtualMedia` on top of a pluggable RACADM command runner
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------
from .auth import AuthHandshake
from .client import IdracClient
from .config import HandshakeMode, HostConfig
from .events import decode_event_log
from .exceptions import (
    AuthenticationExpired,
    AuthenticationFailed,
    IdracError,
    IdracParseError,
    IdracTimeoutError,
    IdracTransportError,
    SessionBootstrapError,
    UnexpectedStatus,
    UnknownAction,
)
from .models import (
    EventLog,
    EventLogEntry,
    PowerAction,
    PowerState,
    SensorGroups,
    SensorReading,
    Session,
    SystemIdentity,
    VirtualMediaStatus,
)
from .payloads import decode_power_state, decode_system_identity
from .registry import ClientRegistry
from .sensors import decode_sensor_group, decode_sensors
from .virtualmedia import CommandRunner, VirtualMedia

__all__ = [
    "AuthHandshake",
    "AuthenticationExpired",
    "AuthenticationFailed",
    "ClientRegistry",
    "CommandRunner",
    "EventLog",
    "EventLogEntry",
    "HandshakeMode",
    "HostConfig",
    "IdracClient",
    "IdracError",
    "IdracParseError",
    "IdracTimeoutError",
    "IdracTransportError",
    "PowerAction",
    "PowerState",
    "SensorGroups",
    "SensorReading",
    "Session",
    "SessionBootstrapError",
    "SystemIdentity",
    "UnexpectedStatus",
    "UnknownAction",
    "VirtualMedia",
    "VirtualMediaStatus",
    "decode_event_log",
    "decode_power_state",
    "decode_sensor_group",
    "decode_sensors",
    "decode_system_identity",
]
