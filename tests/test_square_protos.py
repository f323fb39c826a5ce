#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the square.v1 schema modules.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import struct
from pathlib import Path

from google.protobuf.descriptor import FieldDescriptor

from squarerpc.protos import square_pb2, square_pb2_grpc

PROTO_PATH = Path(square_pb2.__file__).with_name("square.proto")


def test_schema_uses_square_v1_package():
    assert square_pb2.DESCRIPTOR.package == "square.v1"
    assert square_pb2.SquareRequest.DESCRIPTOR.full_name == "square.v1.SquareRequest"
    assert square_pb2.SquareResponse.DESCRIPTOR.full_name == "square.v1.SquareResponse"


def test_messages_carry_single_double_field_with_tag_one():
    for message_cls in (square_pb2.SquareRequest, square_pb2.SquareResponse):
        fields = message_cls.DESCRIPTOR.fields
        assert [f.name for f in fields] == ["number"]
        assert fields[0].number == 1
        assert fields[0].type == FieldDescriptor.TYPE_DOUBLE


def test_service_declares_one_unary_square_method():
    service = square_pb2.DESCRIPTOR.services_by_name["SquareService"]
    assert service.full_name == "square.v1.SquareService"
    assert [m.name for m in service.methods] == ["square"]

    method = service.methods_by_name["square"]
    assert method.input_type.full_name == "square.v1.SquareRequest"
    assert method.output_type.full_name == "square.v1.SquareResponse"


def test_request_wire_format_is_fixed64_field_one():
    encoded = square_pb2.SquareRequest(number=10.2).SerializeToString()
    assert encoded == b"\x09" + struct.pack("<d", 10.2)


def test_zero_is_encoded_as_empty_message_and_decodes_to_zero():
    encoded = square_pb2.SquareResponse(number=0.0).SerializeToString()
    assert encoded == b""
    assert square_pb2.SquareResponse.FromString(encoded).number == 0.0


def test_generated_stub_targets_square_method_path():
    calls = []

    class RecordingChannel:
        def unary_unary(self, method, request_serializer=None, response_deserializer=None, **kwargs):
            calls.append((method, request_serializer, response_deserializer))
            return object()

    square_pb2_grpc.SquareServiceStub(RecordingChannel())

    assert calls == [
        (
            "/square.v1.SquareService/square",
            square_pb2.SquareRequest.SerializeToString,
            square_pb2.SquareResponse.FromString,
        )
    ]


def test_proto_source_declares_matching_contract():
    content = PROTO_PATH.read_text(encoding="utf-8")

    assert "package square.v1;" in content
    assert "double number = 1;" in content
    assert "rpc square(SquareRequest) returns (SquareResponse);" in content
