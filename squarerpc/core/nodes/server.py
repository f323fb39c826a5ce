#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
SquareRPC Server Module

This module implements the server side of the square.v1 contract: a
``SquareServicer`` holding the business logic and a ``SquareServer`` that
owns the ``grpc.aio`` server, its event loop and its lifecycle.

The servicer is pure and stateless. ``square`` multiplies the request number
by itself and returns the IEEE-754 result as is: values whose square exceeds
the float64 range come back as ``inf``, and NaN comes back as NaN.

Usage Example:
    >>> # Blocking server (serves until the process is terminated)
    >>> SquareServer(host="localhost", port=50052).start()
    >>>
    >>> # Background server, e.g. in tests
    >>> server = SquareServer(host="127.0.0.1", port=0)
    >>> server.start_background()
    >>> server.address
    '127.0.0.1:41873'
    >>> server.stop()

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import threading
from concurrent import futures
from enum import Enum
from typing import Any, Dict, Optional

from grpc import aio as grpc_aio

from ...protos import square_pb2_grpc
from ..config import SquareRpcConfig, get_config
from ..service import SQUARE_SERVICE, ServiceDescription
from ..utils.exceptions import (
    CallTimeoutError,
    ConnectionFailedError,
    ExceptionTranslator,
    SquareRpcError,
)
from ..utils.logger import (
    ModernLogger,
    install_grpc_shutdown_noise_filter,
    is_grpc_poller_noise,
)


def compute_square(x: float) -> float:
    """
    Return ``x * x``.

    Multiplication is used rather than ``x ** 2``: for floats the latter
    raises ``OverflowError`` where IEEE-754 multiplication yields ``inf``.
    """
    return x * x


class SquareServicer(square_pb2_grpc.SquareServiceServicer, ModernLogger):
    """
    Business logic for ``square.v1.SquareService``.
    """

    def __init__(
        self,
        service: ServiceDescription = SQUARE_SERVICE,
        log_level: str = "info",
    ) -> None:
        square_pb2_grpc.SquareServiceServicer.__init__(self)
        ModernLogger.__init__(self, name="SquareServicer", level=log_level)
        self._service = service

    async def square(self, request, context):
        result = compute_square(request.number)
        self.debug("square(%r) -> %r", request.number, result)
        return self._service.response_type(number=result)


class ServerState(Enum):
    """
    Lifecycle states of a ``SquareServer``.
    """
    INITIALIZING = "initializing"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


class SquareServer(ModernLogger):
    """
    Hosts a ``SquareServicer`` on a plaintext ``grpc.aio`` server.

    The server can run blocking in the calling thread (``start``) or on its
    own event loop in a daemon thread (``start_background``). Either way it
    serves until ``stop`` is called or the process ends.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        *,
        service: ServiceDescription = SQUARE_SERVICE,
        servicer: Optional[Any] = None,
        config: Optional[SquareRpcConfig] = None,
        log_level: Optional[str] = None,
    ) -> None:
        """
        Args:
            host: Bind host; overrides ``config.host``
            port: Bind port, 0 for an ephemeral port; overrides ``config.port``
            service: Description of the service to expose
            servicer: Implementation to register; defaults to ``SquareServicer``
            config: Base configuration; defaults to ``get_config()``
            log_level: Overrides ``config.log_level``

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        overrides: Dict[str, Any] = {}
        if host is not None:
            overrides["host"] = host
        if port is not None:
            overrides["port"] = port
        if log_level is not None:
            overrides["log_level"] = log_level

        base_config = config if config is not None else get_config()
        self.config = base_config.with_overrides(**overrides) if overrides else base_config

        ModernLogger.__init__(self, name="SquareServer", level=self.config.log_level)
        install_grpc_shutdown_noise_filter()

        self.service = service
        self.servicer = servicer or SquareServicer(service, log_level=self.config.log_level)

        self._state = ServerState.INITIALIZING
        self._state_changed = threading.Condition()
        self._startup_error: Optional[SquareRpcError] = None
        self._shutdown_requested = threading.Event()

        self._grpc_server: Optional[grpc_aio.Server] = None
        self._executor: Optional[futures.ThreadPoolExecutor] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None
        self._server_thread: Optional[threading.Thread] = None
        self._grpc_aio_initialized = False
        self._bound_port: Optional[int] = None

        self.info(
            f"Initialized SquareServer for {self.service.full_name} "
            f"on {self.config.address} (max_workers={self.config.max_workers})"
        )

    def _set_state(self, new_state: ServerState) -> None:
        with self._state_changed:
            old_state = self._state
            self._state = new_state
            self._state_changed.notify_all()
        if old_state != new_state:
            self.debug(f"Server state changed: {old_state.value} -> {new_state.value}")

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == ServerState.RUNNING

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, known once the server is running."""
        return self._bound_port

    @property
    def address(self) -> str:
        port = self._bound_port if self._bound_port is not None else self.config.port
        return f"{self.config.host}:{port}"

    def start(self) -> "SquareServer":
        """
        Start the server and block until it terminates.

        If called from inside a running event loop the server is started in
        background mode instead.

        Raises:
            RuntimeError: If the server was already started
            ConnectionFailedError: If the address cannot be bound
        """
        if self._state != ServerState.INITIALIZING:
            raise RuntimeError(f"Server cannot start from state: {self._state}")

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self.warning("Detected running event loop, switching to background mode")
            self.start_background()
            return self

        try:
            self._open_event_loop().run_until_complete(self._async_serve())
            return self
        finally:
            if self._event_loop and not self._event_loop.is_closed():
                self._finalize_event_loop(self._event_loop)
            self._event_loop = None

    def start_background(self) -> threading.Thread:
        """
        Start the server on a daemon thread and wait until it is serving.

        Returns:
            The thread running the server's event loop

        Raises:
            RuntimeError: If the server was already started
            ConnectionFailedError: If the address cannot be bound
            CallTimeoutError: If the server is not running within
                ``config.startup_timeout_seconds``
        """
        if self._state != ServerState.INITIALIZING:
            raise RuntimeError(f"Server cannot start from state: {self._state}")

        def _background_server_runner():
            try:
                self._open_event_loop().run_until_complete(self._async_serve())
            except SquareRpcError as e:
                self.debug(f"Background server exited with error: {e}")
            except Exception as e:
                self.error(f"Unexpected error in background server: {e}", exc_info=True)
            finally:
                if self._event_loop and not self._event_loop.is_closed():
                    self._finalize_event_loop(self._event_loop)
                self._event_loop = None

        self._server_thread = threading.Thread(
            target=_background_server_runner,
            name=f"SquareServer-{self.config.port}",
            daemon=True,
        )
        self._server_thread.start()

        self._wait_for_server_ready(timeout=self.config.startup_timeout_seconds)

        self.info(f"Server started in background on {self.address}")
        return self._server_thread

    def stop(self, grace: Optional[float] = None, timeout: float = 10.0) -> None:
        """
        Stop the server gracefully. Safe to call from any thread, and more than once.

        Args:
            grace: Seconds in-flight calls may take to finish; defaults to
                ``config.grace_period_seconds``
            timeout: Maximum wait for the shutdown to complete
        """
        if self._state == ServerState.STOPPED:
            return
        if self._event_loop is None and self._server_thread is None:
            return

        if grace is None:
            grace = self.config.grace_period_seconds

        self._shutdown_requested.set()
        loop = self._event_loop
        if loop is not None and not loop.is_closed() and loop.is_running():
            try:
                future = asyncio.run_coroutine_threadsafe(
                    self._request_shutdown(grace=grace),
                    loop,
                )
                future.result(timeout=timeout)
            except futures.CancelledError:
                # The serve loop finished first and drained the shutdown task.
                pass
            except Exception as e:
                self.warning(f"Error while stopping server: {e!r}")

        if self._server_thread and self._server_thread.is_alive():
            self._server_thread.join(timeout=timeout)

    async def _request_shutdown(self, grace: float) -> None:
        if self._state in {ServerState.STARTING, ServerState.RUNNING}:
            self._set_state(ServerState.STOPPING)

        self._shutdown_requested.set()

        server, self._grpc_server = self._grpc_server, None
        if server is not None:
            await server.stop(grace=grace)

    def _wait_for_server_ready(self, timeout: float) -> None:
        settled = {ServerState.RUNNING, ServerState.ERROR, ServerState.STOPPED}
        with self._state_changed:
            reached = self._state_changed.wait_for(
                lambda: self._state in settled,
                timeout=timeout,
            )

        if not reached:
            self.stop(grace=0)
            raise CallTimeoutError(
                message=f"Server did not start within {timeout} seconds",
                address=self.config.address,
            )

        if self._state != ServerState.RUNNING:
            raise self._startup_error or ConnectionFailedError(
                message="Square server failed to start",
                address=self.config.address,
            )

    def _open_event_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.set_exception_handler(self._on_loop_exception)
        try:
            grpc_aio.init_grpc_aio()
            self._grpc_aio_initialized = True
        except Exception as e:
            self.warning(f"grpc.aio runtime not initialized: {e}")
        self._event_loop = loop
        return loop

    def _on_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: Dict[str, Any],
    ) -> None:
        if self._shutdown_requested.is_set() and is_grpc_poller_noise(
            context.get("exception"), repr(context.get("handle"))
        ):
            return
        loop.default_exception_handler(context)

    def _finalize_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Cancel leftovers, shut the grpc.aio runtime down and close ``loop``.
        """
        if loop.is_running():
            return

        try:
            pending_tasks = [task for task in asyncio.all_tasks(loop) if not task.done()]
            for task in pending_tasks:
                task.cancel()
            if pending_tasks:
                loop.run_until_complete(
                    asyncio.gather(*pending_tasks, return_exceptions=True)
                )
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.run_until_complete(loop.shutdown_default_executor())
        except Exception as e:
            self.warning(f"Error while draining server event loop: {e}")

        if self._grpc_aio_initialized:
            try:
                grpc_aio.shutdown_grpc_aio()
            except Exception as e:
                self.warning(f"Error while shutting down grpc.aio runtime: {e}")
            finally:
                self._grpc_aio_initialized = False

        loop.close()

    async def _async_serve(self) -> None:
        """
        Create, bind and run the gRPC server until termination.
        """
        listen_address = self.config.address
        try:
            self._set_state(ServerState.STARTING)

            self._executor = futures.ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix="SquareServerWorker",
            )
            self._grpc_server = grpc_aio.server(
                self._executor,
                options=self.config.grpc_server_options(),
            )
            self.service.register(self.servicer, self._grpc_server)

            bound_port = self._grpc_server.add_insecure_port(listen_address)
            if not bound_port:
                raise RuntimeError(f"Failed to bind to address {listen_address}")
            self._bound_port = bound_port

            await self._grpc_server.start()
            self.info(f"gRPC server listening on {self.address} serving {self.service.method_path}")

            if self._shutdown_requested.is_set():
                return
            self._set_state(ServerState.RUNNING)

            server = self._grpc_server
            await server.wait_for_termination()

        except Exception as e:
            was_running = self._state in {ServerState.RUNNING, ServerState.STOPPING}
            message = (
                "Square server terminated unexpectedly"
                if was_running
                else "Square server startup failed"
            )
            self._startup_error = ExceptionTranslator.as_connection_error(
                e, address=listen_address, message=message
            )
            self._set_state(ServerState.ERROR)
            self.error(f"{message}: {e}", exc_info=True)
            raise self._startup_error from e
        finally:
            await self._async_cleanup()

    async def _async_cleanup(self) -> None:
        server, self._grpc_server = self._grpc_server, None
        if server is not None:
            self.debug("Stopping gRPC server")
            await server.stop(grace=self.config.grace_period_seconds)

        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)

        if self._state != ServerState.ERROR:
            self._set_state(ServerState.STOPPED)
        self.info(f"Server on {self.address} stopped")
