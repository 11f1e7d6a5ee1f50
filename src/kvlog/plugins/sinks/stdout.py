from __future__ import annotations

import sys
import threading
from typing import IO, Any, Callable


class _StreamSink:
    _lock: threading.Lock

    def __init__(self, stream_getter: Callable[[], IO[Any]]) -> None:
        # Resolve the stream per write so redirection (and pytest capture) works
        self._stream_getter = stream_getter
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        stream = self._stream_getter()
        with self._lock:
            buf = getattr(stream, "buffer", None)
            if buf is not None:
                buf.write(data)
            else:
                stream.write(bytes(data).decode("utf-8", errors="replace"))
            stream.flush()
        return len(data)


class StdoutSink(_StreamSink):
    """Byte sink that writes to standard output and flushes after each write."""

    name = "stdout"

    def __init__(self) -> None:
        super().__init__(lambda: sys.stdout)


class StderrSink(_StreamSink):
    """Byte sink that writes to standard error and flushes after each write."""

    name = "stderr"

    def __init__(self) -> None:
        super().__init__(lambda: sys.stderr)
