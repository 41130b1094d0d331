"""Sensor decoding.

The same logical sensor list reaches us in one of two shapes:

- Structured elements, one child element per sensor with named sub-fields:

      <temperatures>
        <sensor><name>Inlet Temp</name><reading>23</reading>...</sensor>
      </temperatures>

- Flat text, the whole list packed into the field's text:

      <temperatures>Inlet Temp=23;ok;42;47|Exhaust Temp=35;ok;70;75</temperatures>

There is no way to know up front which shape a controller returns, so each
field is run through an ordered list of strategies and the first non-empty
result wins.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Callable, Sequence

from .const import (
    DEFAULT_SENSOR_STATUS,
    KEY_FANS,
    KEY_TEMPERATURES,
    KEY_VOLTAGES,
    LOGGER_NAME,
    SENSOR_GROUP_UNITS,
)
from .models import SensorGroups, SensorReading
from .payloads import child_text, field_element, parse_root
from .util import optional_number, parse_number

_LOGGER = logging.getLogger(LOGGER_NAME)

# A strategy returns the readings it recognized, or an empty list for no match.
SensorStrategy = Callable[[ET.Element, str], list[SensorReading]]

_NAME_TAGS = ("name", "sensorName", "label")
_VALUE_TAGS = ("reading", "value", "currentReading")
_STATUS_TAGS = ("status", "sensorStatus", "health")
_UNIT_TAGS = ("units", "unit")
_WARNING_TAGS = ("warningThreshold", "warning", "upperWarning", "upperNonCritical")
_CRITICAL_TAGS = ("criticalThreshold", "critical", "upperCritical")

# -----------------------------------------------------------------------------
# Flat-text form
# -----------------------------------------------------------------------------


def split_entries(raw: str) -> list[str]:
    """Split a flat sensor string into entries.

    Pipe is tried first, then newline; otherwise the whole string is a single
    entry.
    """
    raw = (raw or "").strip()
    if not raw:
        return []
    if "|" in raw:
        return raw.split("|")
    if "\n" in raw:
        return raw.split("\n")
    return [raw]


def parse_entry(entry: str, unit: str) -> SensorReading | None:
    """Parse one `name=value;status;warning;critical` entry.

    Trailing fields are optional. An entry without `=` is taken as a bare
    sensor name.

    Args:
        entry: Raw entry text.
        unit: Unit to assign to the reading.

    Returns:
        The reading, or `None` when the entry has no name.
    """
    entry = (entry or "").strip()
    if not entry:
        return None

    name, eq, rest = entry.partition("=")
    name = name.strip()
    if not name:
        return None
    if not eq:
        return SensorReading(name=name, unit=unit, status=DEFAULT_SENSOR_STATUS)

    fields = rest.split(";")
    status = fields[1].strip() if len(fields) >= 2 else ""
    return SensorReading(
        name=name,
        value=parse_number(fields[0]),
        unit=unit,
        status=status or DEFAULT_SENSOR_STATUS,
        warning_threshold=optional_number(fields[2]) if len(fields) >= 3 else None,
        critical_threshold=optional_number(fields[3]) if len(fields) >= 4 else None,
    )


def flat_text_readings(element: ET.Element, unit: str) -> list[SensorReading]:
    """Decode the flat-text form of a sensor field."""
    readings: list[SensorReading] = []
    for entry in split_entries(element.text or ""):
        reading = parse_entry(entry, unit)
        if reading is not None:
            readings.append(reading)
    return readings


# -----------------------------------------------------------------------------
# Structured-element form
# -----------------------------------------------------------------------------


def structured_readings(element: ET.Element, unit: str) -> list[SensorReading]:
    """Decode the structured-element form of a sensor field."""
    readings: list[SensorReading] = []
    for child in element:
        if len(child) == 0 and not child.attrib:
            continue
        name = child_text(child, *_NAME_TAGS)
        if not name:
            continue
        readings.append(
            SensorReading(
                name=name,
                value=parse_number(child_text(child, *_VALUE_TAGS)),
                unit=child_text(child, *_UNIT_TAGS) or unit,
                status=child_text(child, *_STATUS_TAGS) or DEFAULT_SENSOR_STATUS,
                warning_threshold=optional_number(child_text(child, *_WARNING_TAGS)),
                critical_threshold=optional_number(child_text(child, *_CRITICAL_TAGS)),
            )
        )
    return readings


SENSOR_STRATEGIES: tuple[SensorStrategy, ...] = (
    structured_readings,
    flat_text_readings,
)

# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def readings_from_root(
    root: ET.Element,
    field: str,
    *,
    unit: str | None = None,
    strategies: Sequence[SensorStrategy] = SENSOR_STRATEGIES,
) -> list[SensorReading]:
    """Decode one sensor field from a parsed response.

    Args:
        root: Parsed response root.
        field: Field tag (`temperatures`, `fans`, `voltages`).
        unit: Default unit; derived from the field when omitted.
        strategies: Decoding strategies in preference order.

    Returns:
        Readings from the first strategy that recognized any; an empty list
        when the field is absent or no strategy matched.
    """
    element = field_element(root, field)
    if element is None:
        _LOGGER.debug("Sensor field %s absent from response", field)
        return []

    default_unit = unit if unit is not None else SENSOR_GROUP_UNITS.get(field, "")
    for strategy in strategies:
        readings = strategy(element, default_unit)
        if readings:
            return readings
    return []


def decode_sensor_group(
    body: bytes | str | None, field: str, *, unit: str | None = None
) -> list[SensorReading]:
    """Decode one sensor field from a raw response body."""
    return readings_from_root(parse_root(body), field, unit=unit)


def decode_sensors(body: bytes | str | None) -> SensorGroups:
    """Decode all three sensor groups from a single response body."""
    root = parse_root(body)
    return SensorGroups(
        temperatures=tuple(readings_from_root(root, KEY_TEMPERATURES)),
        fans=tuple(readings_from_root(root, KEY_FANS)),
        voltages=tuple(readings_from_root(root, KEY_VOLTAGES)),
    )
