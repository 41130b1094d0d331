"""Tests for records and enums."""

from __future__ import annotations

import pytest

from idrac6.exceptions import IdracError, UnknownAction
from idrac6.models import PowerAction, SensorReading


def test_power_action_codes() -> None:
    assert [a.value for a in PowerAction] == [0, 1, 2, 3, 4, 5]
    assert PowerAction.names() == ("off", "on", "restart", "reset", "nmi", "shutdown")
    assert PowerAction.from_name("nmi") is PowerAction.NMI


def test_unknown_action_lists_valid_names() -> None:
    with pytest.raises(UnknownAction) as exc_info:
        PowerAction.from_name("reboot")

    err = exc_info.value
    assert isinstance(err, IdracError)
    assert err.operation == "set_power"
    assert "shutdown" in err.valid


def test_sensor_reading_defaults() -> None:
    assert SensorReading("Fan1").as_dict() == {
        "name": "Fan1",
        "value": 0.0,
        "unit": "",
        "status": "ok",
        "warning_threshold": None,
        "critical_threshold": None,
    }
