"""Response parsing and normalization.

Controller responses are small XML documents rooted at `<root>`. Firmware
revisions disagree about which elements are present, so accessors here never
fail on a missing element: they return an empty string instead. Only a body
that is not XML at all is an error.

Sensor and event-log decoding live in `sensors` and `events`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from .const import KEY_POWER_STATE
from .exceptions import IdracParseError
from .models import PowerState, SystemIdentity

_UTF8_BOM = b"\xef\xbb\xbf"

# -----------------------------------------------------------------------------
# XML access
# -----------------------------------------------------------------------------


def parse_root(body: bytes | str | None) -> ET.Element:
    """Parse a response body into its root element.

    Args:
        body: Raw response body.

    Returns:
        Root element. An empty body yields an empty `<root/>`.

    Raises:
        IdracParseError: If the body is not well-formed XML.
    """
    data = body.encode() if isinstance(body, str) else (body or b"")
    data = data.strip()
    if data.startswith(_UTF8_BOM):
        data = data[len(_UTF8_BOM) :].strip()
    if not data:
        return ET.Element("root")
    try:
        return ET.fromstring(data)
    except ET.ParseError as err:
        raise IdracParseError(f"Response is not XML: {err}") from err


def field_element(root: ET.Element, tag: str) -> ET.Element | None:
    """Find a field element by tag, preferring direct children of the root."""
    if root.tag == tag:
        return root
    found = root.find(f"./{tag}")
    if found is None:
        found = root.find(f".//{tag}")
    return found


def field_text(root: ET.Element, tag: str) -> str:
    """Return the stripped text of a field, or `""` when it is missing."""
    element = field_element(root, tag)
    if element is None:
        return ""
    return (element.text or "").strip()


def child_text(element: ET.Element, *tags: str) -> str | None:
    """Return the text of the first present child among `tags`.

    Args:
        element: Parent element.
        *tags: Candidate child tags, in preference order. Matching is
            case-insensitive.

    Returns:
        Stripped text of the first matching child, or `None` when none of the
        tags is present.
    """
    wanted = [t.lower() for t in tags]
    by_tag: dict[str, ET.Element] = {}
    for child in element:
        if isinstance(child.tag, str):
            by_tag.setdefault(child.tag.lower(), child)
    for tag in wanted:
        child = by_tag.get(tag)
        if child is not None:
            return (child.text or "").strip()
    for tag in wanted:
        value = element.attrib.get(tag)
        if value is not None:
            return value.strip()
    return None


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


def decode_power_state(body: bytes | str | None) -> PowerState:
    """Decode a `pwState` response.

    Args:
        body: Raw response body.

    Returns:
        `PowerState.OFF` for `0`, `PowerState.ON` for `1`, otherwise
        `PowerState.UNKNOWN`.
    """
    return PowerState.from_raw(field_text(parse_root(body), KEY_POWER_STATE))


def decode_system_identity(body: bytes | str | None) -> SystemIdentity:
    """Decode the system identity fields.

    Missing fields decode to empty strings; `os_name` is `None` when absent.
    """
    root = parse_root(body)
    return SystemIdentity(
        hostname=field_text(root, "hostName"),
        model=field_text(root, "sysDesc"),
        service_tag=field_text(root, "svcTag"),
        bios_version=field_text(root, "biosVer"),
        firmware_version=field_text(root, "fwVersion"),
        management_firmware_version=field_text(root, "LCCfwVersion"),
        os_name=field_text(root, "osName") or None,
    )
