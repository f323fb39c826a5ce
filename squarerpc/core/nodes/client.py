#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SquareRPC Client Module

Callers of ``square.v1.SquareService``. Every call completes exactly once,
with either a response or a ``SquareRpcError``, never both:

* ``SquareClient.square`` blocks and returns the squared number or raises.
* ``SquareClient.square_future`` returns a ``SquareCall`` right away; it can
  be waited on, awaited from asyncio, cancelled, or given done-callbacks.
* ``SquareClient.square_with_callback`` delivers a ``CallOutcome`` to a
  callback, the shape of the classic ``callback(error, response)`` API.
* ``AsyncSquareClient`` uses a ``grpc.aio`` channel for coroutine callers.

Usage Example:
    >>> with SquareClient("localhost:50052") as client:
    ...     client.square(10.2)
    104.03999999999999

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import grpc
from grpc import aio as grpc_aio
from google.protobuf.message import Message

from ..config import SquareRpcConfig, get_config
from ..service import SQUARE_SERVICE, ServiceDescription
from ..utils.concurrency import OnceCallback, create_loop_future, resolve_threadsafe
from ..utils.exceptions import (
    CallCancelledError,
    CallTimeoutError,
    ExceptionTranslator,
    SquareRpcError,
)
from ..utils.logger import ModernLogger


@dataclass(frozen=True)
class CallOutcome:
    """
    Completion of one call: exactly one of ``error`` and ``response`` is set.
    """

    error: Optional[SquareRpcError] = None
    response: Optional[Message] = None

    def __post_init__(self) -> None:
        if (self.error is None) == (self.response is None):
            raise ValueError("CallOutcome needs exactly one of error or response")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def number(self) -> Optional[float]:
        """The squared number, or None if the call failed."""
        return self.response.number if self.response is not None else None

    def unwrap(self) -> float:
        """Return the squared number or raise the call's error."""
        if self.error is not None:
            raise self.error
        return self.response.number


class SquareCall:
    """
    Handle for one in-flight ``square`` call made through a sync channel.
    """

    def __init__(self, rpc_future: grpc.Future, address: str, method: str) -> None:
        self._future = rpc_future
        self._address = address
        self._method = method
        self._outcome: Optional[CallOutcome] = None
        self._outcome_lock = threading.Lock()

    def _resolve_outcome(self) -> CallOutcome:
        with self._outcome_lock:
            if self._outcome is None:
                self._outcome = self._build_outcome()
            return self._outcome

    def _build_outcome(self) -> CallOutcome:
        if self._future.cancelled():
            return CallOutcome(
                error=CallCancelledError(
                    message=f"Call '{self._method}' was cancelled",
                    status_code=grpc.StatusCode.CANCELLED,
                    address=self._address,
                )
            )

        exception = self._future.exception()
        if exception is not None:
            return CallOutcome(
                error=ExceptionTranslator.from_rpc_error(
                    exception, address=self._address, method=self._method
                )
            )

        return CallOutcome(response=self._future.result())

    def done(self) -> bool:
        return self._future.done()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def cancel(self) -> bool:
        return self._future.cancel()

    def add_done_callback(self, callback: Callable[[CallOutcome], Any]) -> None:
        """
        Call ``callback(outcome)`` once the call completes.

        If the call already completed the callback runs immediately in the
        calling thread; otherwise it runs on a gRPC thread.
        """
        deliver = OnceCallback(callback)
        self._future.add_done_callback(lambda _: deliver(self._resolve_outcome()))

    def outcome(self, timeout: Optional[float] = None) -> CallOutcome:
        """
        Wait for completion and return the outcome.

        Raises:
            CallTimeoutError: If the call is still running after ``timeout``
                seconds (the call itself keeps running)
        """
        try:
            self._future.result(timeout=timeout)
        except grpc.FutureTimeoutError as e:
            raise CallTimeoutError(
                message=f"Call '{self._method}' still pending after {timeout} seconds",
                address=self._address,
            ) from e
        except (grpc.RpcError, grpc.FutureCancelledError):
            pass
        return self._resolve_outcome()

    def result(self, timeout: Optional[float] = None) -> float:
        """Wait for completion and return the squared number, or raise its error."""
        return self.outcome(timeout=timeout).unwrap()

    def as_asyncio_future(self) -> "asyncio.Future[float]":
        """
        Bridge the call into the running asyncio loop.
        """
        loop_future = create_loop_future()

        def _deliver(outcome: CallOutcome) -> None:
            if outcome.error is not None:
                resolve_threadsafe(loop_future, exception=outcome.error)
            else:
                resolve_threadsafe(loop_future, result=outcome.response.number)

        self.add_done_callback(_deliver)
        return loop_future

    def __await__(self):
        return self.as_asyncio_future().__await__()


class _ClientBase(ModernLogger):
    """
    Address, service and deadline handling shared by both clients.
    """

    def __init__(
        self,
        logger_name: str,
        address: Optional[str],
        service: ServiceDescription,
        timeout: Optional[float],
        config: Optional[SquareRpcConfig],
        log_level: Optional[str],
    ) -> None:
        self.config = config if config is not None else get_config()
        ModernLogger.__init__(
            self, name=logger_name, level=log_level or self.config.log_level
        )
        self.address = address or self.config.address
        self.service = service
        self.timeout = timeout if timeout is not None else self.config.timeout_seconds

    def _effective_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return timeout if timeout is not None else self.timeout


class SquareClient(_ClientBase):
    """
    Synchronous-channel client for ``square.v1.SquareService``.

    The channel is opened lazily on the first call, or explicitly with
    ``connect()``, and released with ``close()`` or by leaving a ``with``
    block.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        *,
        service: ServiceDescription = SQUARE_SERVICE,
        timeout: Optional[float] = None,
        config: Optional[SquareRpcConfig] = None,
        log_level: Optional[str] = None,
    ) -> None:
        """
        Args:
            address: ``host:port`` of the server; defaults to ``config.address``
            service: Description of the service to call
            timeout: Default per-call deadline in seconds, None for no deadline
            config: Base configuration; defaults to ``get_config()``
            log_level: Overrides ``config.log_level``
        """
        super().__init__("SquareClient", address, service, timeout, config, log_level)
        self._channel: Optional[grpc.Channel] = None
        self._method: Optional[Callable[..., Any]] = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._channel is not None

    def connect(self) -> "SquareClient":
        with self._lock:
            if self._channel is None:
                self._channel = grpc.insecure_channel(
                    self.address, options=self.config.grpc_channel_options()
                )
                self._method = self.service.bind_method(
                    self.service.create_stub(self._channel)
                )
                self.debug(f"Opened channel to {self.address}")
        return self

    def close(self) -> None:
        with self._lock:
            channel, self._channel, self._method = self._channel, None, None
        if channel is not None:
            channel.close()
            self.debug(f"Closed channel to {self.address}")

    def __enter__(self) -> "SquareClient":
        return self.connect()

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _bound_method(self) -> Callable[..., Any]:
        self.connect()
        method = self._method
        if method is None:
            raise RuntimeError("SquareClient was closed while a call was being issued")
        return method

    def square(self, number: float, timeout: Optional[float] = None) -> float:
        """
        Square ``number`` remotely, blocking until the response arrives.

        Raises:
            SerializationError: If ``number`` is not a valid float64 value
            SquareRpcError: On any transport failure (see the subclasses)
        """
        request = self.service.build_request(number)
        try:
            response = self._bound_method()(
                request, timeout=self._effective_timeout(timeout)
            )
        except grpc.RpcError as e:
            error = ExceptionTranslator.from_rpc_error(
                e, address=self.address, method=self.service.method_path
            )
            self.warning(f"square({number!r}) failed: {error}")
            raise error from e
        return response.number

    def square_future(self, number: float, timeout: Optional[float] = None) -> SquareCall:
        """
        Start a ``square`` call and return its handle without blocking.

        Raises:
            SerializationError: If ``number`` is not a valid float64 value
        """
        request = self.service.build_request(number)
        rpc_future = self._bound_method().future(
            request, timeout=self._effective_timeout(timeout)
        )
        return SquareCall(rpc_future, address=self.address, method=self.service.method_path)

    def square_with_callback(
        self,
        number: float,
        callback: Callable[[CallOutcome], Any],
        timeout: Optional[float] = None,
    ) -> SquareCall:
        """
        Start a ``square`` call and deliver its ``CallOutcome`` to ``callback`` once.

        Raises:
            SerializationError: If ``number`` is not a valid float64 value; no
                call is issued and ``callback`` is never invoked
        """
        call = self.square_future(number, timeout=timeout)
        call.add_done_callback(callback)
        return call


class AsyncSquareClient(_ClientBase):
    """
    ``grpc.aio`` client for ``square.v1.SquareService``.

    Create and use it inside the event loop that will await its calls.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        *,
        service: ServiceDescription = SQUARE_SERVICE,
        timeout: Optional[float] = None,
        config: Optional[SquareRpcConfig] = None,
        log_level: Optional[str] = None,
    ) -> None:
        super().__init__("AsyncSquareClient", address, service, timeout, config, log_level)
        self._channel: Optional[grpc_aio.Channel] = None
        self._method: Optional[Callable[..., Any]] = None

    @property
    def is_connected(self) -> bool:
        return self._channel is not None

    def connect(self) -> "AsyncSquareClient":
        if self._channel is None:
            self._channel = grpc_aio.insecure_channel(
                self.address, options=self.config.grpc_channel_options()
            )
            self._method = self.service.bind_method(
                self.service.create_stub(self._channel)
            )
            self.debug(f"Opened aio channel to {self.address}")
        return self

    async def close(self) -> None:
        channel, self._channel, self._method = self._channel, None, None
        if channel is not None:
            await channel.close()
            self.debug(f"Closed aio channel to {self.address}")

    async def __aenter__(self) -> "AsyncSquareClient":
        return self.connect()

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def square(self, number: float, timeout: Optional[float] = None) -> float:
        """
        Square ``number`` remotely.

        Raises:
            SerializationError: If ``number`` is not a valid float64 value
            SquareRpcError: On any transport failure (see the subclasses)
        """
        request = self.service.build_request(number)
        self.connect()
        try:
            response = await self._method(
                request, timeout=self._effective_timeout(timeout)
            )
        except grpc.RpcError as e:
            error = ExceptionTranslator.from_rpc_error(
                e, address=self.address, method=self.service.method_path
            )
            self.warning(f"square({number!r}) failed: {error}")
            raise error from e
        return response.number
