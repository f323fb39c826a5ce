#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Concurrency primitives for SquareRPC.

gRPC completes sync-channel futures on its own threads; these helpers hand
those completions to callbacks and asyncio loops exactly once.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import threading
from typing import Any, Callable, Optional


class OnceCallback:
    """
    Wrap a callable so that only the first invocation runs it.
    """

    def __init__(self, callback: Callable[..., Any]) -> None:
        self._callback = callback
        self._fired = False
        self._guard = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        with self._guard:
            if self._fired:
                return False
            self._fired = True
        self._callback(*args, **kwargs)
        return True


def create_loop_future() -> "asyncio.Future[Any]":
    """
    Create a future bound to the currently running event loop.
    """
    return asyncio.get_running_loop().create_future()


def resolve_threadsafe(
    future: "asyncio.Future[Any]",
    result: Any = None,
    exception: Optional[BaseException] = None,
) -> None:
    """
    Resolve ``future`` from any thread via its owning loop.

    Futures that are already done (e.g. cancelled by the awaiting side)
    are left untouched.
    """

    def _resolve() -> None:
        if future.done():
            return
        if exception is not None:
            future.set_exception(exception)
        else:
            future.set_result(result)

    loop = future.get_loop()
    if loop.is_closed():
        return
    loop.call_soon_threadsafe(_resolve)
