from __future__ import annotations

from .stdlib import StdlibWriter
from .stdout import StderrSink, StdoutSink

__all__ = [
    "StderrSink",
    "StdlibWriter",
    "StdoutSink",
]
