"""
The Logger capability and the basic loggers every decorator builds on.

A logger is any object with ``log(*keyvals)``. ``keyvals`` alternates keys and
values; failures are raised. Decorators (context binding, level filtering,
encoders, adapters) wrap another logger and delegate to it explicitly.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Protocol, runtime_checkable


class _MissingValue:
    """Sentinel appended when a key has no value."""

    _instance: _MissingValue | None = None

    def __new__(cls) -> _MissingValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __str__(self) -> str:
        return "(MISSING)"

    def __repr__(self) -> str:
        return "MISSING_VALUE"

    def __reduce__(self) -> str:
        return "MISSING_VALUE"


MISSING_VALUE = _MissingValue()


def pad_keyvals(keyvals: tuple[Any, ...] | list[Any]) -> list[Any]:
    """Return keyvals as a list, appending MISSING_VALUE when odd-length."""
    kvs = list(keyvals)
    if len(kvs) % 2:
        kvs.append(MISSING_VALUE)
    return kvs


@runtime_checkable
class Logger(Protocol):
    """Structured logger contract."""

    def log(self, *keyvals: Any) -> None:  # pragma: no cover - protocol
        ...


class LoggerFunc:
    """Adapt a plain callable into a Logger."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        self._fn = fn

    def log(self, *keyvals: Any) -> None:
        self._fn(*keyvals)


class NopLogger:
    """Logger that discards everything."""

    def log(self, *keyvals: Any) -> None:
        return None


class SyncLogger:
    """Serialize ``log`` calls to a logger that is not safe for concurrent use."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger
        self._lock = threading.Lock()

    def log(self, *keyvals: Any) -> None:
        with self._lock:
            self._logger.log(*keyvals)


__all__ = [
    "MISSING_VALUE",
    "pad_keyvals",
    "Logger",
    "LoggerFunc",
    "NopLogger",
    "SyncLogger",
]
