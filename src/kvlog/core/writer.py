"""
Line-buffered writer that coalesces log lines into batched sink writes.

`LineBufferedWriter` accepts whole log lines, keeps them in a reusable byte
buffer and emits the buffer to the underlying sink as a single write when
either of these happens first:

- the number of buffered lines reaches ``capacity`` (flushed synchronously,
  before the triggering ``write`` returns)
- ``flush_period_seconds`` elapses since the last flush (background thread)

Concurrency model:
- One ``threading.Lock`` covers appending to the buffer and flushing it, so
  flushes are strictly serialized and never interleave with appends.
- At most one background thread drives timer flushes; ``close()`` signals it,
  joins it and then performs the final flush.

Delivery is at-most-once: when the sink rejects a flush the lines in that
flush are dropped and the error is raised to the caller that triggered it.
Timer flushes have no caller, so their failures go to the ``on_error`` hook.

Example:
    >>> import sys
    >>> writer = LineBufferedWriter(sys.stdout.buffer, 128, flush_period_seconds=0.5)
    >>> writer.write(b"level=info msg=started")
    22
    >>> writer.close()
"""

from __future__ import annotations

import threading
import time
import types
from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from ..metrics.metrics import MetricsCollector
from ..plugins.utils import parse_plugin_config
from . import diagnostics
from .errors import ConfigurationError, SinkWriteError, WriterClosedError

_COMPONENT = "line-buffered-writer"


@runtime_checkable
class Sink(Protocol):
    """Byte destination consumed by the writer.

    ``write`` receives one ``bytes`` payload per flush. Returning an int smaller
    than the payload length is treated as a failed (short) write; returning
    None is treated as a complete write.
    """

    def write(self, data: bytes) -> int | None:  # pragma: no cover - protocol
        ...


class LineBufferConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    capacity: int = Field(ge=1, description="Buffered lines that trigger a flush")
    flush_period_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Timer flush period; 0 disables timer flushing",
    )
    preallocated_bytes: int = Field(
        default=0,
        ge=0,
        description="Initial size of the reusable byte buffer",
    )


class WriterState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"  # flush in progress
    CLOSED = "closed"


class FlushTrigger(str, Enum):
    CAPACITY = "capacity"
    MANUAL = "manual"
    TIMER = "timer"
    CLOSE = "close"


class LineBufferedWriter:
    """Thread-safe line buffer in front of a byte sink.

    Each ``write`` call is one entry. An entry that does not already end with a
    newline gets exactly one appended, so N accepted single-line writes
    followed by a flush always produce N newline-terminated lines, in
    acceptance order. Embedded newlines are passed through untouched and
    are not counted as extra entries.

    ``on_flush(count)`` runs on the flushing thread while the writer lock is
    held; it must be fast and must not call back into this writer. Exceptions
    raised by ``on_flush`` are routed to ``on_error``.

    The sink is never closed by the writer.
    """

    def __init__(
        self,
        sink: Sink,
        capacity: int | None = None,
        *,
        flush_period_seconds: float | None = None,
        preallocated_bytes: int | None = None,
        config: LineBufferConfig | dict | None = None,
        on_flush: Callable[[int], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        overrides: dict[str, Any] = {
            key: value
            for key, value in (
                ("capacity", capacity),
                ("flush_period_seconds", flush_period_seconds),
                ("preallocated_bytes", preallocated_bytes),
            )
            if value is not None
        }
        cfg = parse_plugin_config(LineBufferConfig, config, **overrides)
        if not callable(getattr(sink, "write", None)):
            raise ConfigurationError(
                f"sink must provide a callable write(), got {type(sink).__name__}",
                component_name=_COMPONENT,
            )

        self._sink = sink
        self._config = cfg
        self._capacity = cfg.capacity
        self._period = cfg.flush_period_seconds
        self._on_flush = on_flush
        self._on_error = on_error or diagnostics.report_error
        self._metrics = metrics

        self._lock = threading.Lock()
        self._buf = bytearray(cfg.preallocated_bytes)
        self._used = 0
        self._entries = 0
        self._state = WriterState.RUNNING
        self._closed = False
        self._last_flush = time.monotonic()

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if self._period > 0:
            self._thread = threading.Thread(
                target=self._run_timer,
                name="kvlog-line-buffer-flush",
                daemon=True,
            )
            self._thread.start()

    # ------------------------------------------------------------------ props

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def flush_period_seconds(self) -> float:
        return self._period

    @property
    def config(self) -> LineBufferConfig:
        return self._config

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def buffered(self) -> int:
        """Number of entries currently waiting for a flush."""
        with self._lock:
            return self._entries

    def writable(self) -> bool:
        return True

    # ------------------------------------------------------------- operations

    def write(self, line: bytes | bytearray | memoryview | str) -> int:
        """Buffer one entry, flushing synchronously when capacity is reached.

        Returns the number of characters for ``str`` input and the number of
        bytes otherwise. The content is not parsed: an entry with embedded
        newlines is still one entry, and reaches the sink as several physical
        lines. Raises ``SinkWriteError`` when a capacity flush triggered by
        this call fails, and ``WriterClosedError`` after ``close()``.
        """
        if isinstance(line, str):
            data: bytes | bytearray = line.encode("utf-8")
        elif isinstance(line, (bytes, bytearray)):
            data = line
        else:
            data = memoryview(line).tobytes()
        with self._lock:
            if self._closed:
                if self._metrics is not None:
                    self._metrics.record_write_rejected()
                raise WriterClosedError(
                    "write to closed LineBufferedWriter",
                    component_name=_COMPONENT,
                )
            self._append_locked(data)
            if self._entries >= self._capacity:
                self._flush_locked(FlushTrigger.CAPACITY)
        if isinstance(line, str):
            return len(line)
        return len(data)

    def flush(self) -> None:
        """Write everything buffered to the sink now; no-op when empty."""
        with self._lock:
            if self._closed:
                raise WriterClosedError(
                    "flush of closed LineBufferedWriter",
                    component_name=_COMPONENT,
                )
            self._flush_locked(FlushTrigger.MANUAL)

    def close(self) -> None:
        """Stop the timer, flush what is left and reject further writes.

        Idempotent. A failure of the final flush is raised after the writer
        has been marked closed.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        with self._lock:
            try:
                self._flush_locked(FlushTrigger.CLOSE)
            finally:
                self._state = WriterState.CLOSED

    def __enter__(self) -> LineBufferedWriter:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self._capacity}, "
            f"flush_period_seconds={self._period}, state={self._state.value})"
        )

    # --------------------------------------------------------------- internal

    def _append_locked(self, data: bytes | bytearray) -> None:
        end = self._used + len(data)
        # Slice assignment overwrites the reused region and grows the buffer
        # only when the new entry does not fit.
        self._buf[self._used : end] = data
        self._used = end
        if not data or data[-1:] != b"\n":
            self._buf[end : end + 1] = b"\n"
            self._used += 1
        self._entries += 1

    def _flush_locked(self, trigger: FlushTrigger) -> int:
        self._last_flush = time.monotonic()
        if self._entries == 0:
            return 0
        entries = self._entries
        size = self._used
        payload = bytes(memoryview(self._buf)[:size])
        # At-most-once: the buffer is released whatever the sink does
        self._used = 0
        self._entries = 0
        self._state = WriterState.DRAINING
        start = time.perf_counter()
        try:
            written = self._sink.write(payload)
        except Exception as exc:
            self._record_sink_error()
            raise SinkWriteError(
                f"sink write failed; dropped {entries} buffered lines",
                entries=entries,
                cause=exc,
                component_name=_COMPONENT,
            ) from exc
        finally:
            self._state = WriterState.RUNNING
        if isinstance(written, int) and not isinstance(written, bool):
            if written < size:
                self._record_sink_error()
                raise SinkWriteError(
                    f"short write: sink accepted {written} of {size} bytes; "
                    f"dropped {entries} buffered lines",
                    entries=entries,
                    component_name=_COMPONENT,
                )
        if self._metrics is not None:
            self._metrics.record_flush(
                entries=entries,
                size_bytes=size,
                latency_seconds=time.perf_counter() - start,
                trigger=trigger.value,
            )
        if self._on_flush is not None:
            try:
                self._on_flush(entries)
            except Exception as exc:
                self._report(exc)
        return entries

    def _record_sink_error(self) -> None:
        if self._metrics is not None:
            self._metrics.record_sink_error()

    def _report(self, exc: BaseException) -> None:
        try:
            self._on_error(exc)
        except Exception:
            # The error hook is the last stop; nothing left to report to
            return

    def _run_timer(self) -> None:
        period = self._period
        while True:
            with self._lock:
                remaining = self._last_flush + period - time.monotonic()
            if remaining > 0:
                if self._stop.wait(remaining):
                    return
                continue
            if self._stop.is_set():
                return
            try:
                with self._lock:
                    if self._closed:
                        return
                    self._flush_locked(FlushTrigger.TIMER)
            except Exception as exc:
                # Keep the loop alive; the next period retries with new lines
                self._report(exc)


__all__ = [
    "Sink",
    "LineBufferConfig",
    "WriterState",
    "FlushTrigger",
    "LineBufferedWriter",
]
