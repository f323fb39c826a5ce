#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Server and client endpoints of the square.v1 service.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from .server import ServerState, SquareServer, SquareServicer, compute_square
from .client import AsyncSquareClient, CallOutcome, SquareCall, SquareClient

__all__ = [
    "ServerState",
    "SquareServer",
    "SquareServicer",
    "compute_square",
    "SquareClient",
    "AsyncSquareClient",
    "SquareCall",
    "CallOutcome",
]
