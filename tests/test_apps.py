#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the server and client process entry points.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from squarerpc.apps import SquareClientApplication
from squarerpc.core.config import SquareRpcConfig


def test_client_application_prints_example_result(square_server, capsys):
    config = SquareRpcConfig(host="127.0.0.1", port=square_server.bound_port, timeout_seconds=5.0)

    exit_code = SquareClientApplication(config).run()

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "square(10.2) -> 104.03999999999999"


def test_client_application_reports_transport_failure(unreachable_address):
    host, port = unreachable_address.rsplit(":", 1)
    config = SquareRpcConfig(host=host, port=int(port), timeout_seconds=5.0)

    exit_code = SquareClientApplication(config, number=3.0).run()

    assert exit_code == 1
