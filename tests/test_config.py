#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for SquareRPC configuration.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import pytest

from squarerpc.core import config as config_module
from squarerpc.core.config import (
    DEFAULT_PORT,
    SquareRpcConfig,
    create_config,
    get_config,
    reset_config,
)
from squarerpc.core.utils.exceptions import ConfigurationError


def test_defaults_target_localhost_plaintext_port():
    config = SquareRpcConfig()

    assert config.address == f"localhost:{DEFAULT_PORT}"
    assert config.timeout_seconds is None


def test_from_env_reads_prefixed_variables():
    config = SquareRpcConfig.from_env(
        {
            "SQUARERPC_HOST": "0.0.0.0",
            "SQUARERPC_PORT": "6000",
            "SQUARERPC_TIMEOUT": "2.5",
            "SQUARERPC_MAX_WORKERS": "4",
            "SQUARERPC_LOG_LEVEL": "DEBUG",
            "UNRELATED": "ignored",
        }
    )

    assert config.address == "0.0.0.0:6000"
    assert config.timeout_seconds == 2.5
    assert config.max_workers == 4
    assert config.log_level == "DEBUG"


def test_from_env_ignores_blank_values_and_applies_overrides():
    config = SquareRpcConfig.from_env({"SQUARERPC_PORT": " ", "SQUARERPC_HOST": "a"}, host="b")

    assert config.port == DEFAULT_PORT
    assert config.host == "b"


def test_from_env_rejects_unparseable_values():
    with pytest.raises(ConfigurationError, match="SQUARERPC_PORT"):
        SquareRpcConfig.from_env({"SQUARERPC_PORT": "fifty"})


@pytest.mark.parametrize("port", [-1, 65536, 90052])
def test_ports_outside_tcp_range_are_rejected(port):
    with pytest.raises(ConfigurationError, match="port"):
        SquareRpcConfig(port=port)


@pytest.mark.parametrize(
    "overrides",
    [
        {"host": ""},
        {"timeout_seconds": 0},
        {"max_workers": 0},
        {"grace_period_seconds": -1},
        {"log_level": "verbose"},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ConfigurationError):
        SquareRpcConfig(**overrides)


def test_with_overrides_returns_validated_copy():
    base = SquareRpcConfig()
    updated = base.with_overrides(port=0)

    assert updated.port == 0
    assert base.port == DEFAULT_PORT
    with pytest.raises(ConfigurationError):
        base.with_overrides(port=70000)


def test_grpc_options_carry_message_limits():
    config = SquareRpcConfig(max_message_length=1024)

    assert ("grpc.max_receive_message_length", 1024) in config.grpc_server_options()
    assert ("grpc.max_send_message_length", 1024) in config.grpc_channel_options()


def test_get_config_reads_environment_once(monkeypatch):
    reset_config()
    monkeypatch.setenv("SQUARERPC_PORT", "6100")
    try:
        first = get_config()
        monkeypatch.setenv("SQUARERPC_PORT", "6200")

        assert first.port == 6100
        assert get_config() is first
    finally:
        reset_config()

    assert config_module._config is None


def test_create_config_merges_environment_and_overrides(monkeypatch):
    monkeypatch.setenv("SQUARERPC_HOST", "example.internal")

    config = create_config(port=7000)

    assert config.address == "example.internal:7000"


@pytest.mark.parametrize(
    "overrides",
    [
        {"timeout_seconds": float("nan")},
        {"timeout_seconds": float("inf")},
        {"grace_period_seconds": float("nan")},
        {"grace_period_seconds": float("inf")},
        {"startup_timeout_seconds": float("nan")},
    ],
)
def test_non_finite_durations_are_rejected(overrides):
    with pytest.raises(ConfigurationError):
        SquareRpcConfig(**overrides)


def test_from_env_rejects_nan_timeout():
    with pytest.raises(ConfigurationError, match="timeout_seconds"):
        SquareRpcConfig.from_env({"SQUARERPC_TIMEOUT": "nan"})
