from __future__ import annotations

from typing import Any

from ...core.serialization import encode_json
from ...core.writer import Sink


class JSONLogger:
    """Logger that writes one JSON object per line to a byte sink.

    - Object keys follow the order presented
    - Each record is a single ``sink.write`` call ending in a newline
    - Encoding and sink errors propagate to the caller
    """

    name = "json"

    def __init__(self, sink: Sink) -> None:
        self._sink = sink

    def log(self, *keyvals: Any) -> None:
        self._sink.write(encode_json(keyvals) + b"\n")
