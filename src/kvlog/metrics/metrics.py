"""
Writer metrics collection for kvlog.

Implements minimal Prometheus-compatible counters and histograms for the
line-buffered writer.

Design goals:
- Zero global state; each collector owns an isolated registry
- Safe no-op exporters when metrics are disabled by settings
- Callable from any thread (flushes happen on writer and timer threads)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class WriterMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    flushes: int = 0
    entries_flushed: int = 0
    bytes_flushed: int = 0
    sink_errors: int = 0
    writes_rejected: int = 0


class MetricsCollector:
    """Container-scoped metrics collector.

    When disabled, all exporter calls are no-ops while basic in-memory counters
    are still tracked for tests.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = WriterMetrics()

        self._c_flushes: Any | None = None
        self._c_entries: Any | None = None
        self._c_sink_errors: Any | None = None
        self._c_rejected: Any | None = None
        self._h_batch_size: Any | None = None
        self._h_flush_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_flushes = Counter(
                "kvlog_flushes_total",
                "Total number of buffer flushes written to the sink",
                ["trigger"],
                registry=self._registry,
            )
            self._c_entries = Counter(
                "kvlog_entries_flushed_total",
                "Total number of log lines written to the sink",
                registry=self._registry,
            )
            self._c_sink_errors = Counter(
                "kvlog_sink_errors_total",
                "Total number of failed sink writes",
                registry=self._registry,
            )
            self._c_rejected = Counter(
                "kvlog_writes_rejected_total",
                "Total number of writes rejected after close",
                registry=self._registry,
            )
            self._h_batch_size = Histogram(
                "kvlog_flush_batch_size",
                "Number of lines written per flush",
                buckets=(1, 2, 4, 8, 16, 32, 64, 128, 256, 512, 1024, 2048),
                registry=self._registry,
            )
            self._h_flush_latency = Histogram(
                "kvlog_flush_seconds",
                "Latency of a single sink write",
                buckets=(
                    0.0001,
                    0.0005,
                    0.001,
                    0.0025,
                    0.005,
                    0.01,
                    0.025,
                    0.05,
                    0.1,
                    0.25,
                    1.0,
                ),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_flush(
        self,
        *,
        entries: int,
        size_bytes: int,
        latency_seconds: float,
        trigger: str = "manual",
    ) -> None:
        with self._lock:
            self._state.flushes += 1
            self._state.entries_flushed += entries
            self._state.bytes_flushed += size_bytes
        if not self._enabled:
            return
        if self._c_flushes is not None:
            self._c_flushes.labels(trigger=trigger).inc()
        if self._c_entries is not None:
            self._c_entries.inc(entries)
        if self._h_batch_size is not None:
            self._h_batch_size.observe(entries)
        if self._h_flush_latency is not None:
            self._h_flush_latency.observe(latency_seconds)

    def record_sink_error(self, count: int = 1) -> None:
        with self._lock:
            self._state.sink_errors += count
        if self._enabled and self._c_sink_errors is not None:
            self._c_sink_errors.inc(count)

    def record_write_rejected(self, count: int = 1) -> None:
        with self._lock:
            self._state.writes_rejected += count
        if self._enabled and self._c_rejected is not None:
            self._c_rejected.inc(count)

    def snapshot(self) -> WriterMetrics:
        # Lightweight copy without exposing internals
        with self._lock:
            return WriterMetrics(
                flushes=self._state.flushes,
                entries_flushed=self._state.entries_flushed,
                bytes_flushed=self._state.bytes_flushed,
                sink_errors=self._state.sink_errors,
                writes_rejected=self._state.writes_rejected,
            )
