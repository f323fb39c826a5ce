#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Square client caller: blocking, callback and asyncio styles.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import asyncio
import threading

from squarerpc import AsyncSquareClient, SquareClient, SquareRpcError, get_config

SERVER_ADDRESS = get_config().address


class SquareClientDemo:
    """
    Squares a few numbers against a running server.
    """

    def run(self) -> None:
        with SquareClient(SERVER_ADDRESS, timeout=5.0) as client:
            print(f"square(10.2) => {client.square(10.2)!r}")

            done = threading.Event()

            def on_complete(outcome):
                if outcome.ok:
                    print(f"square(-10.2) via callback => {outcome.number!r}")
                else:
                    print(f"square(-10.2) via callback failed: {outcome.error}")
                done.set()

            client.square_with_callback(-10.2, on_complete)
            done.wait()

        asyncio.run(self._run_async())

    async def _run_async(self) -> None:
        async with AsyncSquareClient(SERVER_ADDRESS, timeout=5.0) as client:
            results = await asyncio.gather(*(client.square(n) for n in (0, 1.5, 1e200)))
            print(f"square(0, 1.5, 1e200) via grpc.aio => {results!r}")


if __name__ == "__main__":
    try:
        SquareClientDemo().run()
    except SquareRpcError as e:
        print(f"call failed: {e}")
