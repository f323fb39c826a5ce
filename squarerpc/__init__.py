#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SquareRPC public API with lazy imports.

This avoids importing gRPC/protobuf modules unless the corresponding API
objects are actually requested.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from importlib import import_module
from typing import Any, Dict, Tuple

from ._version import __version__

__author__ = "Silan Hu"
__email__ = "silan.hu@u.nus.edu"

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "SquareServer": ("squarerpc.core", "SquareServer"),
    "SquareClient": ("squarerpc.core", "SquareClient"),
    "AsyncSquareClient": ("squarerpc.core", "AsyncSquareClient"),
    "CallOutcome": ("squarerpc.core", "CallOutcome"),
    "SquareCall": ("squarerpc.core", "SquareCall"),
    "ServiceDescription": ("squarerpc.core", "ServiceDescription"),
    "SQUARE_SERVICE": ("squarerpc.core", "SQUARE_SERVICE"),
    "SquareRpcConfig": ("squarerpc.core", "SquareRpcConfig"),
    "get_config": ("squarerpc.core", "get_config"),
    "SquareRpcError": ("squarerpc.core.utils.exceptions", "SquareRpcError"),
    "ConnectionFailedError": ("squarerpc.core.utils.exceptions", "ConnectionFailedError"),
    "CallTimeoutError": ("squarerpc.core.utils.exceptions", "CallTimeoutError"),
    "SerializationError": ("squarerpc.core.utils.exceptions", "SerializationError"),
    "CallCancelledError": ("squarerpc.core.utils.exceptions", "CallCancelledError"),
    "RemoteCallError": ("squarerpc.core.utils.exceptions", "RemoteCallError"),
}

__all__ = ["__version__", *sorted(_EXPORT_MAP.keys())]


def __getattr__(name: str) -> Any:
    """
    Resolve public API symbols lazily.
    """
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'squarerpc' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
