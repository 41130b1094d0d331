"""Virtual media management through the RACADM command collaborator.

Mounting remote images is not part of the XML protocol; it goes through
`racadm remoteimage` executed by a separate command transport (SSH in
practice). This module only builds the commands and interprets their output;
connecting and running them is the `CommandRunner`'s job.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .const import LOGGER_NAME
from .exceptions import IdracError, IdracTransportError
from .models import VirtualMediaStatus

_LOGGER = logging.getLogger(LOGGER_NAME)

_URL_PREFIXES = ("Image Location", "Share Name")


class CommandRunner(Protocol):
    """Runs one RACADM command on a host and returns its standard output."""

    async def run(self, *args: str) -> str:
        ...


def parse_remoteimage_status(output: str) -> VirtualMediaStatus:
    """Parse `racadm remoteimage -s` output.

    Args:
        output: Captured standard output.

    Returns:
        Connection state and image URL when reported.
    """
    connected = False
    url: str | None = None
    for line in (output or "").splitlines():
        line = line.strip()
        if line.startswith("Image is"):
            status = line[len("Image is") :].strip().lower()
            connected = status.startswith("connected")
        elif line.startswith(_URL_PREFIXES):
            _, eq, value = line.partition("=")
            if eq and value.strip():
                url = value.strip()
    return VirtualMediaStatus(connected=connected, url=url)


class VirtualMedia:
    """Remote image mount/unmount for one host."""

    def __init__(self, runner: CommandRunner, *, host: str | None = None) -> None:
        self._runner = runner
        self._host = host

    async def _run(self, operation: str, *args: str) -> str:
        try:
            return await self._runner.run(*args)
        except IdracError:
            raise
        except Exception as err:
            raise IdracTransportError(
                f"RACADM {' '.join(args)} failed: {err}",
                host=self._host,
                operation=operation,
            ) from err

    async def async_get_status(self) -> VirtualMediaStatus:
        output = await self._run("virtual_media_status", "remoteimage", "-s")
        return parse_remoteimage_status(output)

    async def async_mount(self, image_url: str) -> None:
        """Connect a remote image (NFS, CIFS or HTTP URL).

        Any image already attached is disconnected first.
        """
        image_url = (image_url or "").strip()
        if not image_url:
            raise ValueError("Image URL is required")
        try:
            await self.async_unmount()
        except IdracError as err:
            _LOGGER.debug("Ignoring unmount failure before mount: %s", err)
        await self._run("virtual_media_mount", "remoteimage", "-c", "-l", image_url)

    async def async_unmount(self) -> None:
        await self._run("virtual_media_unmount", "remoteimage", "-d")
