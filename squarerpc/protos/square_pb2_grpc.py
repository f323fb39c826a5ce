# gRPC client and server classes for squarerpc/protos/square.proto.
"""Client and server classes corresponding to protobuf-defined services."""
import grpc

from squarerpc.protos import square_pb2 as squarerpc_dot_protos_dot_square__pb2


class SquareServiceStub(object):
    """Missing associated documentation comment in .proto file."""

    def __init__(self, channel):
        """Constructor.

        Args:
            channel: A grpc.Channel.
        """
        self.square = channel.unary_unary(
                '/square.v1.SquareService/square',
                request_serializer=squarerpc_dot_protos_dot_square__pb2.SquareRequest.SerializeToString,
                response_deserializer=squarerpc_dot_protos_dot_square__pb2.SquareResponse.FromString,
                )


class SquareServiceServicer(object):
    """Missing associated documentation comment in .proto file."""

    def square(self, request, context):
        """Unary: one request, one response.
        """
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details('Method not implemented!')
        raise NotImplementedError('Method not implemented!')


def add_SquareServiceServicer_to_server(servicer, server):
    rpc_method_handlers = {
            'square': grpc.unary_unary_rpc_method_handler(
                    servicer.square,
                    request_deserializer=squarerpc_dot_protos_dot_square__pb2.SquareRequest.FromString,
                    response_serializer=squarerpc_dot_protos_dot_square__pb2.SquareResponse.SerializeToString,
            ),
    }
    generic_handler = grpc.method_handlers_generic_handler(
            'square.v1.SquareService', rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))
