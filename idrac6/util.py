"""Small conversion helpers shared by the decoders."""

from __future__ import annotations

import logging
from typing import Any

from .const import LOGGER_NAME, NOT_APPLICABLE_MARKERS

_LOGGER = logging.getLogger(LOGGER_NAME)

# -----------------------------------------------------------------------------
# Conversions
# -----------------------------------------------------------------------------


def to_int(value: Any) -> int | None:
    """Best-effort conversion to int.

    Args:
        value: Value to convert.

    Returns:
        An int when the input is a real int, an integer-valued float, or an
        optionally signed digit-only string; otherwise `None`.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        t = value.strip()
        digits = t[1:] if t[:1] in {"-", "+"} else t
        if digits.isdigit():
            return int(t)
    return None


def parse_number(value: Any) -> float:
    """Permissive float conversion for controller numeric fields.

    Firmware treats every numeric field as optional, so blank strings and
    not-applicable markers decode to `0.0` instead of failing.

    Args:
        value: Raw field value.

    Returns:
        Parsed float, or `0.0` when the value is blank or not numeric.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    t = str(value or "").strip()
    if not t or t.lower() in NOT_APPLICABLE_MARKERS:
        return 0.0
    try:
        return float(t)
    except ValueError:
        _LOGGER.debug("Non-numeric field value %r decoded as 0", t)
        return 0.0


def optional_number(value: Any) -> float | None:
    """Like `parse_number`, but `None` when the field is absent."""
    if value is None:
        return None
    return parse_number(value)
