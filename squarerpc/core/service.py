#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Explicit description of the square.v1 service.

A ``ServiceDescription`` is built once from the protobuf descriptors and
handed to both ``SquareServer`` and ``SquareClient``; neither side looks the
service up from a global registry.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from dataclasses import dataclass
from typing import Any, Callable, Type

from google.protobuf import descriptor as _descriptor
from google.protobuf.message import Message

from ..protos import square_pb2, square_pb2_grpc
from .utils.exceptions import ExceptionTranslator


@dataclass(frozen=True)
class ServiceDescription:
    """
    Everything needed to serve or call one unary method.
    """

    full_name: str
    method_name: str
    request_type: Type[Message]
    response_type: Type[Message]
    stub_factory: Callable[[Any], Any]
    registrar: Callable[[Any, Any], None]

    @property
    def method_path(self) -> str:
        return f"/{self.full_name}/{self.method_name}"

    def create_stub(self, channel: Any) -> Any:
        return self.stub_factory(channel)

    def bind_method(self, stub: Any) -> Callable[..., Any]:
        """Return the multi-callable for the described method on ``stub``."""
        return getattr(stub, self.method_name)

    def register(self, servicer: Any, server: Any) -> None:
        self.registrar(servicer, server)

    def build_request(self, number: Any) -> Message:
        """
        Build a request message carrying ``number``.

        Raises:
            SerializationError: If ``number`` cannot be stored in the field
        """
        try:
            return self.request_type(number=number)
        except (TypeError, ValueError, OverflowError) as e:
            raise ExceptionTranslator.as_serialization_error(
                e, message=f"Cannot build {self.request_type.__name__} from {number!r}"
            ) from e

    @classmethod
    def from_descriptor(
        cls,
        service_descriptor: _descriptor.ServiceDescriptor,
        method_name: str,
        request_type: Type[Message],
        response_type: Type[Message],
        stub_factory: Callable[[Any], Any],
        registrar: Callable[[Any, Any], None],
    ) -> "ServiceDescription":
        """
        Build a description after checking it matches the schema.

        Raises:
            ValueError: If the method is missing, streaming, or its message
                types differ from ``request_type`` / ``response_type``
        """
        method = service_descriptor.methods_by_name.get(method_name)
        if method is None:
            raise ValueError(
                f"Service '{service_descriptor.full_name}' has no method '{method_name}'"
            )

        if getattr(method, "client_streaming", False) or getattr(
            method, "server_streaming", False
        ):
            raise ValueError(f"Method '{method_name}' must be unary")

        if method.input_type.full_name != request_type.DESCRIPTOR.full_name:
            raise ValueError(
                f"Request type mismatch: schema expects {method.input_type.full_name}, "
                f"got {request_type.DESCRIPTOR.full_name}"
            )
        if method.output_type.full_name != response_type.DESCRIPTOR.full_name:
            raise ValueError(
                f"Response type mismatch: schema expects {method.output_type.full_name}, "
                f"got {response_type.DESCRIPTOR.full_name}"
            )

        return cls(
            full_name=service_descriptor.full_name,
            method_name=method_name,
            request_type=request_type,
            response_type=response_type,
            stub_factory=stub_factory,
            registrar=registrar,
        )


SQUARE_SERVICE = ServiceDescription.from_descriptor(
    square_pb2.DESCRIPTOR.services_by_name["SquareService"],
    method_name="square",
    request_type=square_pb2.SquareRequest,
    response_type=square_pb2.SquareResponse,
    stub_factory=square_pb2_grpc.SquareServiceStub,
    registrar=square_pb2_grpc.add_SquareServiceServicer_to_server,
)
