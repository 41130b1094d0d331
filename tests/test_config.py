"""Tests for host configuration."""

from __future__ import annotations

import pytest

from idrac6.config import HOST_CONFIG_SCHEMA, HandshakeMode, HostConfig
from idrac6.const import DEFAULT_SSH_PORT, DEFAULT_TIMEOUT_SECONDS


def _data(**overrides):
    data = {
        "id": "r710",
        "host": "192.168.1.172",
        "username": "root",
        "password": "calvin",
    }
    data.update(overrides)
    return data


def test_from_mapping_defaults() -> None:
    config = HostConfig.from_mapping(_data())

    assert config.id == "r710"
    assert config.name == "r710"
    assert config.ssh_port == DEFAULT_SSH_PORT
    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert config.handshake_mode is HandshakeMode.AUTO


def test_from_mapping_explicit_values() -> None:
    config = HostConfig.from_mapping(
        _data(name="Rack 2", ssh_port="2222", timeout=5, handshake_mode="single-step")
    )

    assert config.name == "Rack 2"
    assert config.ssh_port == 2222
    assert config.timeout_seconds == 5
    assert config.handshake_mode is HandshakeMode.SINGLE_STEP


@pytest.mark.parametrize("missing", ["id", "host", "username", "password"])
def test_from_mapping_requires_fields(missing: str) -> None:
    with pytest.raises(ValueError, match=missing):
        HostConfig.from_mapping(_data(**{missing: ""}))


@pytest.mark.parametrize(
    "overrides",
    [
        {"ssh_port": "ssh"},
        {"ssh_port": 0},
        {"ssh_port": 70000},
        {"id": "   "},
        {"host": None},
        {"timeout": "soon"},
        {"timeout": 0},
        {"handshake_mode": "three_step"},
    ],
)
def test_from_mapping_rejects_invalid_values(overrides) -> None:
    with pytest.raises(ValueError):
        HostConfig.from_mapping(_data(**overrides))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, HandshakeMode.AUTO),
        ("", HandshakeMode.AUTO),
        ("TWO_STEP", HandshakeMode.TWO_STEP),
        ("two-step", HandshakeMode.TWO_STEP),
        (HandshakeMode.SINGLE_STEP, HandshakeMode.SINGLE_STEP),
    ],
)
def test_handshake_mode_parse(raw, expected: HandshakeMode) -> None:
    assert HandshakeMode.parse(raw) is expected


def test_public_dict_and_repr_hide_credentials() -> None:
    config = HostConfig.from_mapping(_data())

    assert config.public_dict() == {
        "id": "r710",
        "name": "r710",
        "host": "192.168.1.172",
    }
    assert "calvin" not in repr(config)


def test_schema_applies_defaults_and_drops_unknown_keys() -> None:
    valid = HOST_CONFIG_SCHEMA(_data(color="blue", ssh_port="2200"))

    assert "color" not in valid
    assert valid["ssh_port"] == 2200
    assert valid["timeout"] == DEFAULT_TIMEOUT_SECONDS
    assert valid["handshake_mode"] is HandshakeMode.AUTO


def test_invalid_value_error_names_the_field() -> None:
    with pytest.raises(ValueError, match="ssh_port"):
        HostConfig.from_mapping(_data(ssh_port=-1))
