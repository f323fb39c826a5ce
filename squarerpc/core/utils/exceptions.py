#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception hierarchy for SquareRPC.

The squaring itself never fails, so every error here originates in the
transport: an unreachable server, a deadline, a message that could not be
(de)serialized, or a cancelled call. ``ExceptionTranslator`` converts
``grpc.RpcError`` instances (sync and ``grpc.aio``) into this hierarchy so
callers only need to catch ``SquareRpcError``.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from typing import Any, Dict, Optional, Type

import grpc


class SquareRpcError(Exception):
    """
    Base class for all SquareRPC errors.

    Attributes:
        message: Human readable summary
        status_code: gRPC status of the failed call, if any
        details: Status details reported by the transport
        address: Target or bind address involved
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[grpc.StatusCode] = None,
        details: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.address = address

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code.name if self.status_code else None,
            "details": self.details,
            "address": self.address,
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code.name}")
        if self.address:
            parts.append(f"address={self.address}")
        if self.details and self.details != self.message:
            parts.append(f"details={self.details}")
        return " | ".join(parts)


class ConnectionFailedError(SquareRpcError):
    """Server unreachable, or the server could not bind its address."""


class CallTimeoutError(SquareRpcError):
    """A deadline elapsed before the call (or server startup) completed."""


class SerializationError(SquareRpcError):
    """A request or response could not be encoded or decoded."""


class CallCancelledError(SquareRpcError):
    """The call was cancelled before completion."""


class RemoteCallError(SquareRpcError):
    """Any other non-OK status reported by the transport."""


class ConfigurationError(SquareRpcError):
    """Invalid configuration value."""


class ExceptionTranslator:
    """
    Map transport exceptions onto the SquareRPC hierarchy.
    """

    _STATUS_MAP: Dict[grpc.StatusCode, Type[SquareRpcError]] = {
        grpc.StatusCode.UNAVAILABLE: ConnectionFailedError,
        grpc.StatusCode.DEADLINE_EXCEEDED: CallTimeoutError,
        grpc.StatusCode.CANCELLED: CallCancelledError,
    }

    _SERIALIZATION_MARKERS = ("serializ", "deserializ", "parse", "decode")

    @classmethod
    def classify(
        cls,
        status_code: Optional[grpc.StatusCode],
        details: Optional[str],
    ) -> Type[SquareRpcError]:
        if status_code in cls._STATUS_MAP:
            return cls._STATUS_MAP[status_code]

        lowered = (details or "").lower()
        if status_code in (grpc.StatusCode.INTERNAL, grpc.StatusCode.UNKNOWN) and any(
            marker in lowered for marker in cls._SERIALIZATION_MARKERS
        ):
            return SerializationError

        return RemoteCallError

    @classmethod
    def from_rpc_error(
        cls,
        exc: BaseException,
        address: Optional[str] = None,
        method: Optional[str] = None,
    ) -> SquareRpcError:
        """
        Translate a ``grpc.RpcError`` (or an already translated error).
        """
        if isinstance(exc, SquareRpcError):
            return exc

        code_fn = getattr(exc, "code", None)
        details_fn = getattr(exc, "details", None)
        status_code = code_fn() if callable(code_fn) else None
        details = details_fn() if callable(details_fn) else str(exc)

        error_cls = cls.classify(status_code, details)
        target = f" '{method}'" if method else ""
        status_name = status_code.name if status_code is not None else "UNKNOWN"
        message = f"Call{target} failed with {status_name}"

        return error_cls(
            message=message,
            status_code=status_code,
            details=details,
            address=address,
        )

    @staticmethod
    def as_connection_error(
        exc: BaseException,
        address: Optional[str] = None,
        message: str = "Connection failed",
    ) -> ConnectionFailedError:
        if isinstance(exc, ConnectionFailedError):
            return exc
        return ConnectionFailedError(
            message=message,
            details=f"{type(exc).__name__}: {exc}",
            address=address,
        )

    @staticmethod
    def as_serialization_error(
        exc: BaseException,
        message: str = "Invalid message",
    ) -> SerializationError:
        if isinstance(exc, SerializationError):
            return exc
        return SerializationError(
            message=message,
            details=f"{type(exc).__name__}: {exc}",
        )
