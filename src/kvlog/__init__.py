"""
Public entrypoints for kvlog.

Provides zero-config `get_logger()` and `runtime()`.

Loggers follow one small contract, ``log(*keyvals)``, and are composed by
wrapping: bind context with `with_`, attach levels with `kvlog.core.levels`,
and filter with `kvlog.plugins.filters.LevelFilter`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ._version import __version__
from .builder import BuiltLogger, LoggerBuilder, build_logger
from .context import (
    DEFAULT_CALLER,
    DEFAULT_TIMESTAMP,
    DEFAULT_TIMESTAMP_UTC,
    Valuer,
    caller,
    context_var,
    timestamp,
    timestamp_format,
    with_,
    with_context,
    with_prefix,
    with_suffix,
)
from .core import levels
from .core.errors import (
    ConfigurationError,
    EncodingError,
    InvalidLevelError,
    KvlogError,
    SinkWriteError,
    WriterClosedError,
)
from .core.logger import MISSING_VALUE, Logger, LoggerFunc, NopLogger, SyncLogger
from .core.settings import Settings
from .core.writer import LineBufferConfig, LineBufferedWriter, Sink
from .plugins.encoders import JSONLogger, LogfmtLogger

__all__ = [
    "get_logger",
    "runtime",
    "build_logger",
    "BuiltLogger",
    "LoggerBuilder",
    "Settings",
    "Logger",
    "LoggerFunc",
    "NopLogger",
    "SyncLogger",
    "MISSING_VALUE",
    "LogfmtLogger",
    "JSONLogger",
    "LineBufferedWriter",
    "LineBufferConfig",
    "Sink",
    "Valuer",
    "with_",
    "with_prefix",
    "with_suffix",
    "with_context",
    "timestamp",
    "timestamp_format",
    "caller",
    "context_var",
    "DEFAULT_TIMESTAMP",
    "DEFAULT_TIMESTAMP_UTC",
    "DEFAULT_CALLER",
    "levels",
    "KvlogError",
    "ConfigurationError",
    "SinkWriteError",
    "WriterClosedError",
    "EncodingError",
    "InvalidLevelError",
    "__version__",
    "VERSION",
]


def get_logger(
    name: str | None = None,
    *,
    settings: Settings | None = None,
) -> Logger:
    """Return a ready-to-use logger writing to standard output.

    The pipeline is configured from ``KVLOG_*`` environment variables or the
    given settings. Its line buffer is registered for draining at interpreter
    exit; use `runtime()` or `build_logger()` to control the lifetime
    explicitly.

    Example:
        >>> from kvlog import get_logger, levels
        >>> logger = get_logger("billing")
        >>> levels.info(logger).log("msg", "invoice sent", "id", 42)  # doctest: +SKIP
    """
    return build_logger(settings, name=name).logger


@contextmanager
def runtime(
    name: str | None = None,
    *,
    settings: Settings | None = None,
) -> Iterator[Logger]:
    """Context manager yielding a logger and draining its buffer on exit."""
    built = build_logger(settings, name=name)
    try:
        yield built.logger
    finally:
        built.close()


VERSION = __version__
