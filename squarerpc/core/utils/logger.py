#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging helpers for SquareRPC.

``ModernLogger`` is a small mixin that gives servers and clients
``self.info(...)``-style methods bound to a named logger under the
``squarerpc`` namespace. ``configure_logging`` is called by the process
entry points; library code never installs handlers on its own.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import errno
import logging
import sys
import threading
from typing import IO, Optional, Union

LOGGER_NAMESPACE = "squarerpc"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_HANDLER_LOCK = threading.Lock()
_NOISE_FILTER_LOCK = threading.Lock()
_NOISE_FILTER_INSTALLED = False


def resolve_level(level: Union[str, int]) -> int:
    """
    Convert a level name (``"info"``) or number into a logging level.

    Raises:
        ValueError: If the name is not a known level
    """
    if isinstance(level, int):
        return level

    try:
        return _LEVELS[str(level).strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{level}'. Expected one of: {', '.join(_LEVELS)}"
        ) from None


class ModernLogger:
    """
    Mixin providing leveled logging methods on the owning object.
    """

    def __init__(self, name: str, level: Union[str, int] = "info") -> None:
        self._logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
        self._logger.setLevel(resolve_level(level))

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str, *args, **kwargs) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self._logger.error(message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs) -> None:
        self._logger.critical(message, *args, **kwargs)


def configure_logging(
    level: Union[str, int] = "info",
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach a single stream handler to the ``squarerpc`` logger.

    Calling this more than once only updates the level.
    """
    root = logging.getLogger(LOGGER_NAMESPACE)
    root.setLevel(resolve_level(level))

    with _HANDLER_LOCK:
        if not any(getattr(h, "_squarerpc_handler", False) for h in root.handlers):
            handler = logging.StreamHandler(stream or sys.stderr)
            handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
            handler._squarerpc_handler = True  # type: ignore[attr-defined]
            root.addHandler(handler)

    return root


_POLLER_ERRNOS = frozenset({errno.EAGAIN, errno.EWOULDBLOCK, 11, 35})
_POLLER_MARKER = "PollerCompletionQueue._handle_events"


def is_grpc_poller_noise(exception: Optional[BaseException], text: str) -> bool:
    """
    True for the ``BlockingIOError`` grpc.aio's poller raises while torn down.
    """
    return (
        isinstance(exception, BlockingIOError)
        and exception.errno in _POLLER_ERRNOS
        and _POLLER_MARKER in text
    )


class GrpcAioShutdownNoiseFilter(logging.Filter):
    """
    Drop the asyncio error grpc.aio emits when its poller is torn down.

    During interpreter or loop shutdown asyncio may log
    "Exception in callback PollerCompletionQueue._handle_events(...)" with a
    ``BlockingIOError`` (EAGAIN/EWOULDBLOCK). Everything else passes.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        exception = record.exc_info[1] if record.exc_info else None
        return not is_grpc_poller_noise(exception, record.getMessage())


def install_grpc_shutdown_noise_filter() -> None:
    """
    Install the grpc.aio shutdown filter on the ``asyncio`` logger once per process.
    """
    global _NOISE_FILTER_INSTALLED

    with _NOISE_FILTER_LOCK:
        if _NOISE_FILTER_INSTALLED:
            return
        logging.getLogger("asyncio").addFilter(GrpcAioShutdownNoiseFilter())
        _NOISE_FILTER_INSTALLED = True
