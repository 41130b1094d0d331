"""Host configuration for managed controllers.

A `HostConfig` describes one controller: where it lives, which credentials to
use and which login variant to speak. Applications usually build these from a
settings file or request body through `HostConfig.from_mapping`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

import voluptuous as vol

from .const import (
    CONF_HANDSHAKE_MODE,
    CONF_HOST,
    CONF_ID,
    CONF_NAME,
    CONF_PASSWORD,
    CONF_SSH_PORT,
    CONF_TIMEOUT,
    CONF_USERNAME,
    DEFAULT_SSH_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)


class HandshakeMode(Enum):
    """Login handshake variant.

    Firmware revisions disagree on whether a session bootstrap page must be
    fetched before the login POST. `AUTO` tries the two-step form first and
    falls back to the single-step form.
    """

    AUTO = "auto"
    TWO_STEP = "two_step"
    SINGLE_STEP = "single_step"

    @classmethod
    def parse(cls, value: Any) -> HandshakeMode:
        if isinstance(value, cls):
            return value
        t = str(value or "").strip().lower().replace("-", "_")
        if not t:
            return cls.AUTO
        for member in cls:
            if member.value == t:
                return member
        raise ValueError(f"Unknown handshake mode: {value!r}")


_NON_BLANK = vol.All(vol.Coerce(str), vol.Strip, vol.Length(min=1))
_NON_EMPTY = vol.All(vol.Coerce(str), vol.Length(min=1))

HOST_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ID): _NON_BLANK,
        vol.Required(CONF_HOST): _NON_BLANK,
        vol.Required(CONF_USERNAME): _NON_EMPTY,
        vol.Required(CONF_PASSWORD): _NON_EMPTY,
        vol.Optional(CONF_NAME, default=""): vol.All(vol.Coerce(str), vol.Strip),
        vol.Optional(CONF_SSH_PORT, default=DEFAULT_SSH_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT_SECONDS): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(CONF_HANDSHAKE_MODE, default=HandshakeMode.AUTO): vol.Coerce(
            HandshakeMode.parse
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class HostConfig:
    """Connection settings for one managed controller.

    Attributes:
        id: Stable identifier used by the application (URL segment, key).
        host: Hostname, IP address or base URL of the controller.
        username: Login user.
        password: Login password.
        name: Display name; defaults to the id.
        ssh_port: Port used by the command-execution collaborator.
        timeout_seconds: Per-request timeout.
        handshake_mode: Login variant.
    """

    id: str
    host: str
    username: str
    password: str
    name: str = ""
    ssh_port: int = DEFAULT_SSH_PORT
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    handshake_mode: HandshakeMode = HandshakeMode.AUTO

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HostConfig:
        """Build a validated config from a plain mapping.

        Args:
            data: Mapping keyed by the `CONF_*` constants.

        Returns:
            A `HostConfig`.

        Raises:
            ValueError: When a required field is missing or a value is invalid.
        """
        # Blank form fields count as not provided.
        provided = {k: v for k, v in data.items() if v is not None and v != ""}
        try:
            valid = HOST_CONFIG_SCHEMA(provided)
        except vol.Invalid as err:
            raise ValueError(f"Invalid host config: {err}") from err

        return cls(
            id=valid[CONF_ID],
            host=valid[CONF_HOST],
            username=valid[CONF_USERNAME],
            password=valid[CONF_PASSWORD],
            name=valid[CONF_NAME] or valid[CONF_ID],
            ssh_port=valid[CONF_SSH_PORT],
            timeout_seconds=valid[CONF_TIMEOUT],
            handshake_mode=valid[CONF_HANDSHAKE_MODE],
        )

    def public_dict(self) -> dict[str, Any]:
        """Return the config without credentials."""
        return {"id": self.id, "name": self.name or self.id, "host": self.host}

    def __repr__(self) -> str:
        return f"HostConfig(id={self.id!r}, host={self.host!r})"
