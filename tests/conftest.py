#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pytest bootstrap for local package imports and shared server fixtures.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import socket
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from squarerpc.core.config import SquareRpcConfig  # noqa: E402
from squarerpc.core.nodes.server import SquareServer  # noqa: E402

TEST_CONFIG = SquareRpcConfig(host="127.0.0.1", port=0, grace_period_seconds=0.0)


@pytest.fixture
def test_config() -> SquareRpcConfig:
    return TEST_CONFIG


@pytest.fixture
def square_server():
    server = SquareServer(config=TEST_CONFIG)
    server.start_background()
    try:
        yield server
    finally:
        server.stop(grace=0)


@pytest.fixture
def unreachable_address() -> str:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"
