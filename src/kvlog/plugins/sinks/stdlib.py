from __future__ import annotations

import logging


class StdlibWriter:
    """Byte sink that forwards each written line to the standard library logger.

    Meant for processes where everything must end up in ``logging`` handlers.
    If you control the setup, prefer the opposite direction: route ``logging``
    into kvlog with `kvlog.core.stdlib_bridge.enable_stdlib_bridge`.
    """

    name = "stdlib"

    def __init__(
        self,
        logger_name: str = "kvlog.stdlib",
        level: int = logging.INFO,
    ) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def write(self, data: bytes) -> int:
        text = bytes(data).decode("utf-8", errors="replace")
        for line in text.splitlines():
            line = line.strip()
            if line:
                self._logger.log(self._level, line)
        return len(data)
