"""System Event Log decoding.

Firmware returns the log either as `<record>`/`<entry>` child elements or as
one text blob with one entry per line. Lines are matched against a pipe- and
then a semicolon-delimited layout of `id|timestamp|severity|description`;
anything else becomes a description-only entry with a synthetic id.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Callable, Sequence

from .const import KEY_EVENT_LOG, SYNTHETIC_EVENT_ID, UNKNOWN_SEVERITY
from .models import EventLog, EventLogEntry
from .payloads import child_text, field_element, parse_root

EventStrategy = Callable[[ET.Element], list[EventLogEntry]]

_LINE_DELIMITERS: tuple[str, ...] = ("|", ";")
_ENTRY_TAGS = frozenset({"record", "entry", "event"})


def parse_line(line: str) -> EventLogEntry:
    """Parse a single event-log line.

    Args:
        line: One line of the flat-text log.

    Returns:
        The parsed entry. Lines matching neither delimited layout yield an
        entry whose description is the whole line, with a synthetic id and
        `Unknown` severity.
    """
    line = line.strip()
    for delimiter in _LINE_DELIMITERS:
        parts = line.split(delimiter, 3)
        if len(parts) >= 4:
            return EventLogEntry(
                id=parts[0].strip(),
                timestamp=parts[1].strip(),
                severity=parts[2].strip(),
                description=parts[3].strip(),
            )

    return EventLogEntry(
        id=SYNTHETIC_EVENT_ID,
        severity=UNKNOWN_SEVERITY,
        description=line,
    )


def flat_text_entries(element: ET.Element) -> list[EventLogEntry]:
    """Decode the newline-separated text form."""
    entries: list[EventLogEntry] = []
    for line in (element.text or "").splitlines():
        if not line.strip():
            continue
        entry = parse_line(line)
        if entry.id:
            entries.append(entry)
    return entries


def structured_entries(element: ET.Element) -> list[EventLogEntry]:
    """Decode `<record>`-style child elements."""
    entries: list[EventLogEntry] = []
    for child in element:
        if not isinstance(child.tag, str) or child.tag.lower() not in _ENTRY_TAGS:
            continue
        entry_id = child_text(child, "id", "recordId", "recordID")
        if not entry_id:
            continue
        entries.append(
            EventLogEntry(
                id=entry_id,
                timestamp=child_text(child, "timestamp", "dateTime", "date") or "",
                severity=child_text(child, "severity", "status") or UNKNOWN_SEVERITY,
                description=child_text(child, "description", "message", "desc")
                or "",
                entity=child_text(child, "entity", "sensor") or None,
            )
        )
    return entries


EVENT_STRATEGIES: tuple[EventStrategy, ...] = (
    structured_entries,
    flat_text_entries,
)


def entries_from_root(
    root: ET.Element,
    *,
    field: str = KEY_EVENT_LOG,
    strategies: Sequence[EventStrategy] = EVENT_STRATEGIES,
) -> list[EventLogEntry]:
    element = field_element(root, field)
    if element is None:
        return []
    for strategy in strategies:
        entries = strategy(element)
        if entries:
            return entries
    return []


def decode_event_log(body: bytes | str | None) -> EventLog:
    """Decode the `sel` field of a response into an `EventLog`.

    Entries keep controller order; nothing is sorted or de-duplicated.
    """
    return EventLog(entries=tuple(entries_from_root(parse_root(body))))
