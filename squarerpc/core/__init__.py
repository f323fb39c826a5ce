#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SquareRPC core module exports (lazy-loaded).

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from importlib import import_module
from typing import Any, Dict, Tuple

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "SquareServer": ("squarerpc.core.nodes", "SquareServer"),
    "SquareServicer": ("squarerpc.core.nodes", "SquareServicer"),
    "ServerState": ("squarerpc.core.nodes", "ServerState"),
    "compute_square": ("squarerpc.core.nodes", "compute_square"),
    "SquareClient": ("squarerpc.core.nodes", "SquareClient"),
    "AsyncSquareClient": ("squarerpc.core.nodes", "AsyncSquareClient"),
    "SquareCall": ("squarerpc.core.nodes", "SquareCall"),
    "CallOutcome": ("squarerpc.core.nodes", "CallOutcome"),
    "ServiceDescription": ("squarerpc.core.service", "ServiceDescription"),
    "SQUARE_SERVICE": ("squarerpc.core.service", "SQUARE_SERVICE"),
    "SquareRpcConfig": ("squarerpc.core.config", "SquareRpcConfig"),
    "get_config": ("squarerpc.core.config", "get_config"),
    "create_config": ("squarerpc.core.config", "create_config"),
}

__all__ = sorted(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'squarerpc.core' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
