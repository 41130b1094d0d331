"""Constants for the iDRAC6 legacy XML client.

This module centralizes protocol paths, data keys, configuration keys and
defaults.
"""

from __future__ import annotations

from typing import Final

# Use a stable logger name so applications can configure the whole package via
# `logging.getLogger("idrac6")`.
LOGGER_NAME: Final = "idrac6"

CONF_ID: Final = "id"
CONF_NAME: Final = "name"
CONF_HOST: Final = "host"
CONF_USERNAME: Final = "username"
CONF_PASSWORD: Final = "password"
CONF_SSH_PORT: Final = "ssh_port"
CONF_TIMEOUT: Final = "timeout"
CONF_HANDSHAKE_MODE: Final = "handshake_mode"

DEFAULT_TIMEOUT_SECONDS: Final[int] = 10
DEFAULT_SSH_PORT: Final[int] = 22

# -----------------------------------------------------------------------------
# Wire protocol
# -----------------------------------------------------------------------------

SESSION_COOKIE: Final = "_appwebSessionId_"
SECONDARY_TOKEN_HEADER: Final = "ST2"

BOOTSTRAP_PATH: Final = "/start.html"
LOGIN_PATH: Final = "/data/login"
LOGOUT_PATH: Final = "/data/logout"
DATA_PATH: Final = "/data"

FORM_CONTENT_TYPE: Final = "application/x-www-form-urlencoded"

KEY_POWER_STATE: Final = "pwState"
KEY_TEMPERATURES: Final = "temperatures"
KEY_FANS: Final = "fans"
KEY_VOLTAGES: Final = "voltages"
KEY_EVENT_LOG: Final = "sel"
KEY_CLEAR_EVENT_LOG: Final = "selClr"

SYSTEM_IDENTITY_KEYS: Final[tuple[str, ...]] = (
    "hostName",
    "sysDesc",
    "sysRev",
    "biosVer",
    "fwVersion",
    "LCCfwVersion",
    "osName",
    "svcTag",
)

# Default units per sensor group when the payload does not carry its own.
SENSOR_GROUP_UNITS: Final[dict[str, str]] = {
    KEY_TEMPERATURES: "C",
    KEY_FANS: "RPM",
    KEY_VOLTAGES: "V",
}

DEFAULT_SENSOR_STATUS: Final = "ok"
UNKNOWN_SEVERITY: Final = "Unknown"
SYNTHETIC_EVENT_ID: Final = "0"

# Markers firmware uses in place of a number.
NOT_APPLICABLE_MARKERS: Final[frozenset[str]] = frozenset(
    {"n/a", "na", "not applicable", "none", "-"}
)
