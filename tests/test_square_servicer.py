#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the square business logic, without a network.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import math

import pytest

from squarerpc.core.nodes.server import SquareServicer, compute_square
from squarerpc.protos import square_pb2


def _call(servicer: SquareServicer, number: float) -> square_pb2.SquareResponse:
    request = square_pb2.SquareRequest(number=number)
    return asyncio.run(servicer.square(request, context=None))


def test_square_of_example_value_matches_float64_product():
    response = _call(SquareServicer(), 10.2)

    assert isinstance(response, square_pb2.SquareResponse)
    assert response.number == 104.03999999999999


def test_square_of_zero_is_zero():
    assert _call(SquareServicer(), 0.0).number == 0.0


def test_square_eliminates_sign():
    assert _call(SquareServicer(), -10.2).number == pytest.approx(104.04)


def test_square_overflow_returns_infinity():
    result = _call(SquareServicer(), 1e200).number

    assert math.isinf(result)
    assert result > 0


def test_square_passes_nan_through():
    assert math.isnan(_call(SquareServicer(), float("nan")).number)


def test_square_of_negative_infinity_is_positive_infinity():
    assert _call(SquareServicer(), float("-inf")).number == float("inf")


def test_square_is_idempotent():
    servicer = SquareServicer()

    first = _call(servicer, 3.75).number
    second = _call(servicer, 3.75).number

    assert first == second == 14.0625


@pytest.mark.parametrize("value", [1.5, -2.0, 1e-160, 123456.789, 2.0 ** 511])
def test_compute_square_equals_multiplication(value):
    assert compute_square(value) == value * value
