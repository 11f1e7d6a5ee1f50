from __future__ import annotations

from typing import Any

from ...core.serialization import encode_logfmt
from ...core.writer import Sink


class LogfmtLogger:
    """Logger that writes one logfmt line per record to a byte sink.

    - Keys are written in the order presented
    - Each record is a single ``sink.write`` call ending in a newline
    - Encoding and sink errors propagate to the caller
    """

    name = "logfmt"

    def __init__(self, sink: Sink) -> None:
        self._sink = sink

    def log(self, *keyvals: Any) -> None:
        self._sink.write(encode_logfmt(keyvals) + b"\n")
