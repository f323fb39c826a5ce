#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utility exports for SquareRPC core.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from .logger import (
    ModernLogger,
    configure_logging,
    install_grpc_shutdown_noise_filter,
)
from .exceptions import (
    CallCancelledError,
    CallTimeoutError,
    ConfigurationError,
    ConnectionFailedError,
    ExceptionTranslator,
    RemoteCallError,
    SerializationError,
    SquareRpcError,
)
from .concurrency import OnceCallback, create_loop_future, resolve_threadsafe

__all__ = [
    "ModernLogger",
    "configure_logging",
    "install_grpc_shutdown_noise_filter",
    "SquareRpcError",
    "ConnectionFailedError",
    "CallTimeoutError",
    "SerializationError",
    "CallCancelledError",
    "RemoteCallError",
    "ConfigurationError",
    "ExceptionTranslator",
    "OnceCallback",
    "create_loop_future",
    "resolve_threadsafe",
]
