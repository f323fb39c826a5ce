#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
End-to-end tests: real SquareServer on an ephemeral port, real clients.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from squarerpc.core.nodes.client import AsyncSquareClient, CallOutcome, SquareClient
from squarerpc.core.nodes.server import ServerState, SquareServer


def test_square_round_trip_returns_float64_product(square_server):
    with SquareClient(square_server.address, timeout=5.0) as client:
        assert client.square(10.2) == 104.03999999999999


def test_square_boundaries_over_the_wire(square_server):
    with SquareClient(square_server.address, timeout=5.0) as client:
        assert client.square(0) == 0.0
        assert client.square(-10.2) == pytest.approx(104.04)
        assert math.isinf(client.square(1e200))
        assert math.isnan(client.square(float("nan")))


def test_repeated_calls_return_identical_results(square_server):
    with SquareClient(square_server.address, timeout=5.0) as client:
        assert client.square(7.25) == client.square(7.25) == 52.5625


def test_client_connects_lazily_and_closes(square_server):
    client = SquareClient(square_server.address, timeout=5.0)
    assert client.is_connected is False

    assert client.square(2.0) == 4.0
    assert client.is_connected is True

    client.close()
    assert client.is_connected is False


def test_square_future_resolves_to_result(square_server):
    with SquareClient(square_server.address, timeout=5.0) as client:
        call = client.square_future(1.5)

        assert call.result(timeout=5.0) == 2.25
        assert call.done() is True
        outcome = call.outcome()
        assert outcome.ok is True
        assert outcome.error is None


def test_square_with_callback_delivers_exactly_one_outcome(square_server):
    outcomes = []
    completed = threading.Event()

    def on_complete(outcome: CallOutcome) -> None:
        outcomes.append(outcome)
        completed.set()

    with SquareClient(square_server.address, timeout=5.0) as client:
        call = client.square_with_callback(10.2, on_complete)
        assert completed.wait(timeout=5.0)
        call.result(timeout=5.0)

    assert len(outcomes) == 1
    assert outcomes[0].error is None
    assert outcomes[0].number == 104.03999999999999


def test_concurrent_futures_each_receive_their_own_result(square_server):
    inputs = [i * 0.5 for i in range(-40, 41)]

    with SquareClient(square_server.address, timeout=5.0) as client:
        calls = [(value, client.square_future(value)) for value in inputs]
        results = {value: call.result(timeout=5.0) for value, call in calls}

    assert results == {value: value * value for value in inputs}


def test_concurrent_blocking_calls_from_threads_are_independent(square_server):
    inputs = list(range(64))

    with SquareClient(square_server.address, timeout=5.0) as client:
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(client.square, inputs))

    assert results == [float(value * value) for value in inputs]


def test_square_call_is_awaitable(square_server):
    async def run_case():
        with SquareClient(square_server.address, timeout=5.0) as client:
            first, second = await asyncio.gather(
                client.square_future(3.0),
                client.square_future(-4.0),
            )
        assert (first, second) == (9.0, 16.0)

    asyncio.run(run_case())


def test_async_client_squares_concurrently(square_server):
    inputs = [0.0, 1.5, -2.5, 10.2]

    async def run_case():
        async with AsyncSquareClient(square_server.address, timeout=5.0) as client:
            return await asyncio.gather(*(client.square(value) for value in inputs))

    results = asyncio.run(run_case())

    assert results == [value * value for value in inputs]


def test_server_lifecycle_reports_state_and_bound_port(test_config):
    server = SquareServer(config=test_config)
    assert server.state == ServerState.INITIALIZING

    server.start_background()
    try:
        assert server.is_running is True
        assert server.bound_port and server.bound_port > 0
        assert server.address == f"127.0.0.1:{server.bound_port}"

        with pytest.raises(RuntimeError):
            server.start_background()
    finally:
        server.stop(grace=0)

    assert server.state == ServerState.STOPPED
    server.stop(grace=0)
    assert server.state == ServerState.STOPPED


def test_clean_start_stop_cycles_log_no_warnings(test_config, caplog):
    with caplog.at_level(logging.WARNING):
        for _ in range(5):
            server = SquareServer(config=test_config)
            server.start_background()
            server.stop(grace=0)
            assert server.state == ServerState.STOPPED

    problems = [
        (record.name, record.getMessage())
        for record in caplog.records
        if record.levelno >= logging.WARNING and record.name.startswith("squarerpc")
    ]
    assert problems == []
