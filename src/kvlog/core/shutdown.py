"""Exit-time draining of line-buffered writers.

Writers built by `kvlog.builder` are registered here so the lines still in
their buffers reach the sink when the interpreter exits normally. A WeakSet
keeps registration from extending writer lifetimes.

The handler is best-effort: a writer whose final flush fails is reported to
diagnostics and the remaining writers are still closed.
"""

from __future__ import annotations

import atexit
import weakref
from typing import TYPE_CHECKING, Any

from . import diagnostics

if TYPE_CHECKING:
    from .writer import LineBufferedWriter


_shutdown_in_progress: bool = False
_registered_writers: weakref.WeakSet[Any] = weakref.WeakSet()


def _atexit_drain_enabled() -> bool:
    try:
        from .settings import Settings

        return bool(Settings().core.atexit_drain_enabled)
    except Exception:
        return True


def register_writer(writer: LineBufferedWriter) -> None:
    """Register a writer to be closed at interpreter exit."""
    _registered_writers.add(writer)


def unregister_writer(writer: LineBufferedWriter) -> None:
    """Unregister a writer, typically after an explicit close()."""
    _registered_writers.discard(writer)


def registered_writers() -> list[LineBufferedWriter]:
    return list(_registered_writers)


def drain_all() -> int:
    """Close every registered writer; returns the number closed cleanly."""
    closed = 0
    for writer in list(_registered_writers):
        try:
            writer.close()
            closed += 1
        except Exception as exc:
            diagnostics.warn(
                "shutdown",
                "final flush failed at exit",
                error=str(exc),
                error_type=type(exc).__name__,
            )
        finally:
            _registered_writers.discard(writer)
    return closed


def _atexit_handler() -> None:
    """Best-effort drain of all writers on normal exit. Never raises."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    if not _atexit_drain_enabled():
        return
    _shutdown_in_progress = True
    try:
        drain_all()
    except Exception:
        return


atexit.register(_atexit_handler)
