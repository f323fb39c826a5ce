# -*- coding: utf-8 -*-
# Protocol buffer definitions for squarerpc/protos/square.proto.
#
# The file descriptor is assembled with descriptor_pb2 instead of being
# embedded as a serialized blob; `make protos` replaces this module with the
# protoc output, which exposes the same names.
"""Protocol buffer messages for the square.v1 package."""
from google.protobuf import descriptor_pb2 as _descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
from google.protobuf.internal import builder as _builder

_sym_db = _symbol_database.Default()

_FieldProto = _descriptor_pb2.FieldDescriptorProto


def _build_file_proto():
    file_proto = _descriptor_pb2.FileDescriptorProto(
        name="squarerpc/protos/square.proto",
        package="square.v1",
        syntax="proto3",
    )

    for message_name in ("SquareRequest", "SquareResponse"):
        message = file_proto.message_type.add(name=message_name)
        message.field.add(
            name="number",
            number=1,
            label=_FieldProto.LABEL_OPTIONAL,
            type=_FieldProto.TYPE_DOUBLE,
            json_name="number",
        )

    service = file_proto.service.add(name="SquareService")
    service.method.add(
        name="square",
        input_type=".square.v1.SquareRequest",
        output_type=".square.v1.SquareResponse",
    )
    return file_proto


DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(
    _build_file_proto().SerializeToString()
)

_globals = globals()
_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, _globals)
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, "squarerpc.protos.square_pb2", _globals)
