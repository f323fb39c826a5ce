#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration for SquareRPC servers and clients.

Values come from keyword arguments or ``SQUARERPC_*`` environment
variables:

    SQUARERPC_HOST          bind / target host (default: localhost)
    SQUARERPC_PORT          bind / target port (default: 50052)
    SQUARERPC_TIMEOUT       client deadline in seconds (default: none)
    SQUARERPC_MAX_WORKERS   server executor threads (default: 10)
    SQUARERPC_GRACE_PERIOD  seconds in-flight calls get on stop (default: 5)
    SQUARERPC_LOG_LEVEL     debug, info, warning, error, critical

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import dataclasses
import math
import os
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .utils.exceptions import ConfigurationError
from .utils.logger import resolve_level

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 50052
ENV_PREFIX = "SQUARERPC_"


def _positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0


@dataclass(frozen=True)
class SquareRpcConfig:
    """
    Deployment parameters shared by ``SquareServer`` and ``SquareClient``.

    Port 0 asks the server for an ephemeral port.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout_seconds: Optional[float] = None
    max_workers: int = 10
    grace_period_seconds: float = 5.0
    startup_timeout_seconds: float = 10.0
    max_message_length: int = 4 * 1024 * 1024
    log_level: str = "info"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not self.host or not str(self.host).strip():
            raise ConfigurationError("host must be a non-empty string")
        if not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigurationError(f"port must be in range 0-65535, got {self.port!r}")
        if self.timeout_seconds is not None and not _positive_finite(self.timeout_seconds):
            raise ConfigurationError("timeout_seconds must be positive and finite when set")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if not (math.isfinite(self.grace_period_seconds) and self.grace_period_seconds >= 0):
            raise ConfigurationError("grace_period_seconds must be finite and not negative")
        if not _positive_finite(self.startup_timeout_seconds):
            raise ConfigurationError("startup_timeout_seconds must be positive and finite")
        if self.max_message_length < 1:
            raise ConfigurationError("max_message_length must be positive")
        try:
            resolve_level(self.log_level)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def with_overrides(self, **overrides: Any) -> "SquareRpcConfig":
        return dataclasses.replace(self, **overrides)

    def grpc_server_options(self) -> List[Tuple[str, Any]]:
        return [
            ("grpc.max_send_message_length", self.max_message_length),
            ("grpc.max_receive_message_length", self.max_message_length),
            ("grpc.keepalive_time_ms", 30000),
            ("grpc.keepalive_timeout_ms", 5000),
            ("grpc.keepalive_permit_without_calls", True),
            ("grpc.http2.max_pings_without_data", 2),
            ("grpc.http2.min_ping_interval_without_data_ms", 30000),
        ]

    def grpc_channel_options(self) -> List[Tuple[str, Any]]:
        return [
            ("grpc.max_send_message_length", self.max_message_length),
            ("grpc.max_receive_message_length", self.max_message_length),
        ]

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "SquareRpcConfig":
        """
        Build a config from ``SQUARERPC_*`` variables; keyword overrides win.
        """
        env = os.environ if environ is None else environ
        values = {}

        for field_name, env_name, parser in _ENV_FIELDS:
            raw = env.get(ENV_PREFIX + env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = parser(raw.strip())
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{env_name}: {raw!r}"
                ) from e

        values.update(overrides)
        return cls(**values)


_ENV_FIELDS: List[Tuple[str, str, Callable[[str], Any]]] = [
    ("host", "HOST", str),
    ("port", "PORT", int),
    ("timeout_seconds", "TIMEOUT", float),
    ("max_workers", "MAX_WORKERS", int),
    ("grace_period_seconds", "GRACE_PERIOD", float),
    ("log_level", "LOG_LEVEL", str),
]

_config_lock = threading.Lock()
_config: Optional[SquareRpcConfig] = None


def get_config() -> SquareRpcConfig:
    """
    Return the process configuration, reading the environment on first use.
    """
    global _config
    with _config_lock:
        if _config is None:
            _config = SquareRpcConfig.from_env()
        return _config


def create_config(**overrides: Any) -> SquareRpcConfig:
    """
    Build a validated config from the environment plus ``overrides``.
    """
    return SquareRpcConfig.from_env(**overrides)


def reset_config() -> None:
    global _config
    with _config_lock:
        _config = None
