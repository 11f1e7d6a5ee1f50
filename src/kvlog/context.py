"""Context binding for structured loggers.

`with_`, `with_prefix` and `with_suffix` return a `ContextLogger` that adds
bound key-values to every record. Nested binding merges into a single
`ContextLogger`, so a record always passes through exactly one context hop no
matter how many times the logger was extended.

Bound values may be `Valuer` instances, which are evaluated on every ``log``
call. That makes per-record data such as timestamps, the call site, or the
current value of a ``contextvars.ContextVar`` cheap to attach:

Example:
    >>> import contextvars
    >>> from kvlog.context import DEFAULT_CALLER, context_var, with_
    >>> request_id = contextvars.ContextVar("request_id", default=None)
    >>> logger = with_(base, "caller", DEFAULT_CALLER, "request_id", context_var(request_id))
    >>> logger.log("msg", "handled")  # doctest: +SKIP
"""

from __future__ import annotations

import contextvars
import os
import sys
from datetime import datetime, timezone
from typing import Any, Callable

from .core.logger import MISSING_VALUE, Logger

__all__ = [
    "Valuer",
    "ContextLogger",
    "with_",
    "with_prefix",
    "with_suffix",
    "with_context",
    "bind_values",
    "contains_valuer",
    "timestamp",
    "timestamp_format",
    "caller",
    "context_var",
    "DEFAULT_TIMESTAMP",
    "DEFAULT_TIMESTAMP_UTC",
    "DEFAULT_CALLER",
]


class Valuer:
    """A bound value computed at log time as ``fn(ctx)``.

    ``ctx`` is whatever object was attached with `with_context` (None by
    default). Valuers are only evaluated in bound context, never when passed
    directly to ``log``.
    """

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self.fn = fn

    def __call__(self, ctx: Any = None) -> Any:
        return self.fn(ctx)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", type(self.fn).__name__)
        return f"Valuer({name})"


def contains_valuer(keyvals: tuple[Any, ...] | list[Any]) -> bool:
    return any(isinstance(v, Valuer) for v in keyvals[1::2])


def bind_values(ctx: Any, keyvals: list[Any], start: int = 0, stop: int | None = None) -> None:
    """Replace every Valuer in ``keyvals[start:stop]`` value slots with its result.

    Called directly from `ContextLogger.log`; `caller` depths rely on this
    frame layout.
    """
    end = len(keyvals) if stop is None else stop
    for i in range(start + 1, end, 2):
        v = keyvals[i]
        if isinstance(v, Valuer):
            keyvals[i] = v.fn(ctx)


class ContextLogger:
    """Logger that adds bound prefix and suffix key-values to every record."""

    __slots__ = (
        "_logger",
        "_keyvals",
        "_suffix",
        "_has_valuer",
        "_suffix_has_valuer",
        "_ctx",
    )

    def __init__(
        self,
        logger: Logger,
        keyvals: tuple[Any, ...] = (),
        suffix: tuple[Any, ...] = (),
        *,
        ctx: Any = None,
    ) -> None:
        self._logger = logger
        self._keyvals = keyvals
        self._suffix = suffix
        self._has_valuer = contains_valuer(keyvals)
        self._suffix_has_valuer = contains_valuer(suffix)
        self._ctx = ctx

    @property
    def keyvals(self) -> tuple[Any, ...]:
        return self._keyvals

    @property
    def suffix(self) -> tuple[Any, ...]:
        return self._suffix

    @property
    def ctx(self) -> Any:
        return self._ctx

    def log(self, *keyvals: Any) -> None:
        kvs = [*self._keyvals, *keyvals]
        if len(kvs) % 2:
            kvs.append(MISSING_VALUE)
        if self._has_valuer:
            bind_values(self._ctx, kvs, 0, len(self._keyvals))
        if self._suffix:
            start = len(kvs)
            kvs.extend(self._suffix)
            if self._suffix_has_valuer:
                bind_values(self._ctx, kvs, start)
        self._logger.log(*kvs)

    def __repr__(self) -> str:
        return f"ContextLogger(logger={self._logger!r}, keyvals={len(self._keyvals) // 2})"


def _padded(keyvals: tuple[Any, ...]) -> tuple[Any, ...]:
    if len(keyvals) % 2:
        return (*keyvals, MISSING_VALUE)
    return keyvals


def _as_context(logger: Logger) -> ContextLogger:
    if isinstance(logger, ContextLogger):
        return logger
    return ContextLogger(logger)


def with_(logger: Logger, *keyvals: Any) -> Logger:
    """Return a logger that appends ``keyvals`` after the existing bound context."""
    if not keyvals:
        return logger
    c = _as_context(logger)
    return ContextLogger(
        c._logger,
        (*c._keyvals, *_padded(keyvals)),
        c._suffix,
        ctx=c._ctx,
    )


def with_prefix(logger: Logger, *keyvals: Any) -> Logger:
    """Return a logger that places ``keyvals`` before the existing bound context."""
    if not keyvals:
        return logger
    c = _as_context(logger)
    return ContextLogger(
        c._logger,
        (*_padded(keyvals), *c._keyvals),
        c._suffix,
        ctx=c._ctx,
    )


def with_suffix(logger: Logger, *keyvals: Any) -> Logger:
    """Return a logger that appends ``keyvals`` after the per-call key-values."""
    if not keyvals:
        return logger
    c = _as_context(logger)
    return ContextLogger(
        c._logger,
        c._keyvals,
        (*c._suffix, *_padded(keyvals)),
        ctx=c._ctx,
    )


def with_context(ctx: Any, logger: Logger) -> Logger:
    """Return a shallow copy of ``logger`` whose valuers receive ``ctx``."""
    c = _as_context(logger)
    return ContextLogger(c._logger, c._keyvals, c._suffix, ctx=ctx)


# ----------------------------------------------------------------- valuers


def timestamp(clock: Callable[[], datetime]) -> Valuer:
    """Valuer returning ``clock()``; encoders render datetimes as RFC 3339."""
    return Valuer(lambda _ctx: clock())


def timestamp_format(clock: Callable[[], datetime], fmt: str) -> Valuer:
    """Valuer returning ``clock()`` rendered with ``strftime(fmt)``."""
    return Valuer(lambda _ctx: clock().strftime(fmt))


def caller(depth: int) -> Valuer:
    """Valuer returning ``file.py:line`` of the frame ``depth`` levels up.

    Depth 0 is the valuer itself, 1 is `bind_values`, 2 is
    `ContextLogger.log` and 3 is the code that called ``log``.
    """

    def _caller(_ctx: Any) -> str:
        try:
            frame = sys._getframe(depth)
        except ValueError:
            return "unknown"
        return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"

    return Valuer(_caller)


def context_var(var: contextvars.ContextVar[Any], default: Any = None) -> Valuer:
    """Valuer reading ``var`` in the context of the ``log`` call."""
    return Valuer(lambda _ctx: var.get(default))


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


DEFAULT_TIMESTAMP = timestamp(_now_local)
DEFAULT_TIMESTAMP_UTC = timestamp(_now_utc)
# Correct when the ContextLogger holding it is the outermost wrapper
DEFAULT_CALLER = caller(3)
