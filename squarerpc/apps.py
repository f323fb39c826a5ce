#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Process entry points for the ``square-server`` and ``square-client`` scripts.

Neither program takes flags; both read ``SQUARERPC_*`` environment
variables (see ``squarerpc.core.config``).

Author: Silan Hu (silan.hu@u.nus.edu)
"""

import threading
from typing import Optional

from .core.config import SquareRpcConfig, get_config
from .core.nodes import CallOutcome, SquareClient, SquareServer
from .core.service import SQUARE_SERVICE
from .core.utils.logger import ModernLogger, configure_logging

DEMO_NUMBER = 10.2


class SquareServerApplication:
    """
    Serve ``square.v1.SquareService`` until the process is terminated.
    """

    def __init__(self, config: SquareRpcConfig) -> None:
        self._server = SquareServer(config=config, service=SQUARE_SERVICE)

    def run(self) -> None:
        self._server.start()


class SquareClientApplication(ModernLogger):
    """
    Issue one ``square`` call and report its outcome through a callback.
    """

    def __init__(self, config: SquareRpcConfig, number: float = DEMO_NUMBER) -> None:
        ModernLogger.__init__(self, name="SquareClientApplication", level=config.log_level)
        self._config = config
        self._number = number
        self._completed = threading.Event()
        self._outcome: Optional[CallOutcome] = None

    def _on_complete(self, outcome: CallOutcome) -> None:
        self._outcome = outcome
        self._completed.set()

    def run(self) -> int:
        with SquareClient(config=self._config, service=SQUARE_SERVICE) as client:
            client.square_with_callback(self._number, self._on_complete)
            self._completed.wait()

        if not self._outcome.ok:
            self.error(f"square({self._number}) failed: {self._outcome.error}")
            return 1

        print(f"square({self._number}) -> {self._outcome.number!r}")
        return 0


def run_server() -> None:
    config = get_config()
    configure_logging(config.log_level)
    try:
        SquareServerApplication(config).run()
    except KeyboardInterrupt:
        pass


def run_client() -> int:
    config = get_config()
    configure_logging(config.log_level)
    return SquareClientApplication(config).run()
