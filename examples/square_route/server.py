#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Square server entrypoint. Reads ``SQUARERPC_*`` settings via ``get_config``.

Author: Silan Hu (silan.hu@u.nus.edu)
"""

from squarerpc import SquareRpcConfig, SquareServer, get_config
from squarerpc.core.utils.logger import configure_logging


class SquareServerDemo:
    """
    Minimal server process wrapper.
    """

    def __init__(self, config: SquareRpcConfig) -> None:
        self._server = SquareServer(config=config)

    def run(self) -> None:
        self._server.start()


if __name__ == "__main__":
    config = get_config()
    configure_logging(config.log_level)
    SquareServerDemo(config).run()
