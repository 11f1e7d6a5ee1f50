"""
Internal diagnostics for non-fatal errors inside kvlog.

kvlog must not log its own failures through the pipeline that produced them,
so diagnostics bypass it entirely: one JSON line is written straight to
stderr, and only when ``core.internal_logging_enabled`` is set. The setting is
read once and cached; tests reset ``_internal_logging_enabled`` to ``None``.
"""

from __future__ import annotations

import sys
import threading
import time
from datetime import datetime, timezone
from typing import Any

import orjson

_internal_logging_enabled: bool | None = None
_RATE_LIMIT_SECONDS = 5.0
_last_emitted: dict[str, float] = {}
_rate_lock = threading.Lock()


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _allowed(key: str | None) -> bool:
    if key is None:
        return True
    now = time.monotonic()
    with _rate_lock:
        last = _last_emitted.get(key)
        if last is not None and now - last < _RATE_LIMIT_SECONDS:
            return False
        _last_emitted[key] = now
    return True


def warn(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    """Emit a structured warning about an internal fault. Never raises."""
    try:
        if not _is_enabled() or not _allowed(_rate_limit_key):
            return
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": "warn",
            "logger": "kvlog.diagnostics",
            "component": component,
            "message": message,
            **fields,
        }
        line = orjson.dumps(payload, default=str)
        stream = getattr(sys.stderr, "buffer", None)
        if stream is not None:
            stream.write(line + b"\n")
        else:
            sys.stderr.write(line.decode("utf-8") + "\n")
        sys.stderr.flush()
    except Exception:
        # Diagnostics must never affect the caller
        return


def report_error(exc: BaseException) -> None:
    """Default error hook for failures without a synchronous caller."""
    details: dict[str, Any] = {}
    to_dict = getattr(exc, "to_dict", None)
    if callable(to_dict):
        try:
            details = dict(to_dict())
        except Exception:
            details = {}
    warn(
        "writer",
        "background flush failed",
        error_type=type(exc).__name__,
        error=str(exc),
        _rate_limit_key=f"writer:{type(exc).__name__}",
        **{k: v for k, v in details.items() if k not in ("error_type", "message")},
    )
